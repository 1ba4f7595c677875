"""Configuration settings for the File Storage Server."""
import os

# Directory paths
STORAGE_DIR = os.getenv('FILE_STORAGE_DIR', './uploads')
LOG_DIR = os.getenv('FILE_STORAGE_LOG_DIR', 'logs')

# Server
HOST = os.getenv('FILE_STORAGE_HOST', '0.0.0.0')
PORT = int(os.getenv('FILE_STORAGE_PORT', '8080'))
LOG_LEVEL = os.getenv('FILE_STORAGE_LOG_LEVEL', 'INFO')

# Upload limits
MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10MB
MAX_FORM_MEMORY = 32 * 1024 * 1024  # 32MB, non-file form fields only
CHUNK_SIZE = 8192

ALLOWED_EXTENSIONS = (
    ".jpg", ".jpeg", ".png", ".gif", ".pdf",
    ".txt", ".doc", ".docx", ".xls", ".xlsx",
)

# Served content types, keyed by lowercase extension
CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}
