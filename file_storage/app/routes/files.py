from email.utils import parsedate

import aiofiles.os
from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel
from starlette.datastructures import FormData, Headers, UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.staticfiles import NotModifiedResponse

from file_storage import config
from file_storage.app.exceptions import ClientError, FileServerError, ServerError, StorageWriteError
from file_storage.app.models.results import ErrorResult, UploadResult
from file_storage.app.services.storage import LocalStorage
from file_storage.app.services.validation import content_type_for, generate_safe_filename, validate_file
from file_storage.logger_config import setup_logger

logger = setup_logger()

# Fields are read from the parsed form by hand, so describe the body for the docs
UPLOAD_REQUEST_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {
                        "file": {"type": "string", "format": "binary"},
                        "image": {"type": "string", "format": "binary", "description": "Legacy field name"},
                    },
                }
            }
        },
    }
}


def json_response(status_code: int, body: BaseModel) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=config.CORS_HEADERS)


def find_upload(form: FormData) -> UploadFile:
    """Return the uploaded file part, preferring `file` over the legacy `image` field."""
    for field in ("file", "image"):
        upload = form.get(field)
        if isinstance(upload, UploadFile):
            return upload
    raise ClientError("No file provided")


def declared_size(upload: UploadFile) -> int:
    if upload.size is not None:
        return upload.size
    upload.file.seek(0, 2)  # Seek to end
    size = upload.file.tell()
    upload.file.seek(0)
    return size


def is_not_modified(response_headers: Headers, request_headers: Headers) -> bool:
    """Conditional GET check, same rules as Starlette's StaticFiles."""
    if_none_match = request_headers.get("if-none-match")
    if if_none_match is not None:
        etag = response_headers.get("etag")
        return etag in [tag.strip(" W/") for tag in if_none_match.split(",")]

    if_modified_since = parsedate(request_headers.get("if-modified-since", ""))
    last_modified = parsedate(response_headers.get("last-modified", ""))
    return bool(if_modified_since and last_modified and if_modified_since >= last_modified)


async def receive_upload(storage: LocalStorage, request: Request) -> UploadResult:
    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith("multipart/form-data"):
        raise ClientError("Failed to parse form")

    try:
        form = await request.form(max_part_size=config.MAX_FORM_MEMORY)
    except (MultiPartException, HTTPException) as e:
        logger.debug(f"Multipart parsing failed: {str(e)}")
        raise ClientError("Failed to parse form") from e

    try:
        upload = find_upload(form)
        original_name = upload.filename or ""
        size = declared_size(upload)
        logger.debug(f"Upload part: {original_name!r}, {size} bytes")

        validate_file(original_name, size)
        filename = generate_safe_filename(original_name)

        try:
            await storage.save(filename, upload)
        except StorageWriteError as e:
            raise ServerError("Failed to save file") from e
    finally:
        await form.close()

    logger.info(f"Stored upload {filename} ({size} bytes)")
    return UploadResult(
        filename=filename,
        # Not percent-encoded: names holding '#', '?' or '%' need quoting by the client
        url=f"/files/{filename}",
        size=size,
        message="File uploaded successfully",
    )


def create_files_router(storage: LocalStorage) -> APIRouter:
    """Build the upload and download routes around one storage instance."""
    router = APIRouter(tags=["files"])

    @router.options("/upload", include_in_schema=False)
    async def upload_preflight():
        return Response(status_code=200, headers=config.CORS_HEADERS)

    @router.post(
        "/upload",
        status_code=201,
        response_model=UploadResult,
        responses={400: {"model": ErrorResult}, 500: {"model": ErrorResult}},
        openapi_extra=UPLOAD_REQUEST_BODY,
    )
    async def upload_file(request: Request):
        """Upload a file to the storage server."""
        logger.info("Receiving upload request")
        try:
            result = await receive_upload(storage, request)
        except FileServerError as e:
            logger.warning(f"Upload rejected ({e.status_code}): {e.message}")
            return json_response(e.status_code, ErrorResult(message=e.message))
        return json_response(201, result)

    @router.get(
        "/files/{filename}",
        response_class=FileResponse,
        responses={400: {"description": "Filename required"}, 404: {"description": "File not found"}},
    )
    async def serve_file(filename: str, request: Request):
        """Download a file from the storage server."""
        logger.info(f"Receiving download request for {filename}")
        if not filename:
            return PlainTextResponse("Filename required", status_code=400)

        try:
            path = await storage.load(filename)
        except FileServerError as e:
            logger.info(f"Download of {filename!r} failed: {e.message}")
            return PlainTextResponse(e.message, status_code=e.status_code)

        content_type = content_type_for(filename)
        stat_result = await aiofiles.os.stat(path)
        response = FileResponse(
            path,
            media_type=content_type,
            headers={"content-type": content_type},
            stat_result=stat_result,
        )
        if is_not_modified(response.headers, request.headers):
            return NotModifiedResponse(response.headers)
        return response

    return router
