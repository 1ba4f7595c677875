from file_storage import config
from file_storage.app.exceptions import ValidationError


def get_extension(filename: str) -> str:
    """Lowercased extension of the last path segment, including the dot ("" if none)."""
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    dot = base.rfind(".")
    if dot < 0:
        return ""
    return base[dot:].lower()


def validate_file(filename: str, size: int):
    """Validate the declared size and the extension of an uploaded file."""
    if size > config.MAX_UPLOAD_SIZE:
        raise ValidationError("file too large (max 10MB)")

    if get_extension(filename) not in config.ALLOWED_EXTENSIONS:
        raise ValidationError("file type not allowed")


def generate_safe_filename(original_name: str) -> str:
    """Replace path separators so the name stays a single segment."""
    # Same name means same file: a later upload overwrites the earlier one
    return original_name.replace("/", "_").replace("\\", "_")


def content_type_for(filename: str) -> str:
    return config.CONTENT_TYPES.get(get_extension(filename), config.DEFAULT_CONTENT_TYPE)
