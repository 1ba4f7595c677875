import os
import uuid
from pathlib import Path
from typing import Protocol

import aiofiles
import aiofiles.os

from file_storage import config
from file_storage.app.exceptions import FileMissingError, InvalidFilenameError, StorageWriteError
from file_storage.logger_config import setup_logger

logger = setup_logger()

TEMP_DIR_NAME = ".tmp"


class ByteReader(Protocol):
    """Anything save() can copy from: an upload part, an open aiofiles handle, ..."""

    async def read(self, size: int = -1) -> bytes:
        ...


class LocalStorage:
    """Flat single-directory storage for uploaded files.

    Files are written to a staging directory inside the root first and then
    renamed into place, so a reader sees either the previous file or the
    complete new one.
    """

    def __init__(self, root_dir: Path, chunk_size: int = config.CHUNK_SIZE):
        self.root_dir = Path(root_dir)
        self.temp_dir = self.root_dir / TEMP_DIR_NAME
        self.chunk_size = chunk_size

    async def initialize(self):
        """Create the storage root and clear staging files left by a previous run."""
        logger.info("Initializing storage...")

        self.root_dir.mkdir(exist_ok=True, parents=True)
        self.temp_dir.mkdir(exist_ok=True)
        logger.debug(f"Storage directories created/verified: {self.root_dir}, {self.temp_dir}")

        files_removed = 0
        for file in self.temp_dir.glob("*"):
            if file.is_file():
                await aiofiles.os.unlink(file)
                files_removed += 1
        logger.info(f"Cleaned staging directory, removed {files_removed} files")

    def resolve(self, name: str) -> Path:
        """Map a stored name to its path, rejecting anything that is not one plain segment."""
        if not name or name in (".", "..") or "\x00" in name or "/" in name or "\\" in name:
            raise InvalidFilenameError("Invalid filename")

        path = self.root_dir / name
        root = os.path.realpath(self.root_dir)
        if os.path.commonpath([root, os.path.realpath(path)]) != root:
            raise InvalidFilenameError("Invalid filename")
        return path

    async def save(self, name: str, reader: ByteReader) -> int:
        """Copy everything from reader into the file stored under name.

        Returns:
            int: number of bytes written
        """
        path = self.resolve(name)
        temp_path = self.temp_dir / f"{uuid.uuid4().hex}.part"

        written = 0
        try:
            async with aiofiles.open(temp_path, 'wb') as f:
                while chunk := await reader.read(self.chunk_size):
                    written += len(chunk)
                    await f.write(chunk)
            await aiofiles.os.replace(temp_path, path)
        except OSError as e:
            logger.error(f"Error saving file {name}: {str(e)}", exc_info=True)
            raise StorageWriteError(f"Failed to save file {name}") from e
        finally:
            # Already renamed away on success; removed here on errors and cancellation.
            # Synchronous so a cancelled task cannot be interrupted mid-cleanup.
            temp_path.unlink(missing_ok=True)

        logger.debug(f"Stored {name} ({written} bytes) at {path}")
        return written

    async def load(self, name: str) -> Path:
        """Return the path of a stored file without opening it."""
        path = self.resolve(name)
        if not await aiofiles.os.path.isfile(path):
            raise FileMissingError("File not found")
        return path
