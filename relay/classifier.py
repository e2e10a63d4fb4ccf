"""Maps file extensions to MIME types and blob-backend upload methods."""

from common.constants import DEFAULT_MIME_TYPE
from relay.types import Classification


CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "icon": "image/x-icon",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "pdf": "application/pdf",
    "txt": "text/plain",
    "md": "text/markdown",
    "zip": "application/zip",
    "rar": "application/x-rar-compressed",
    "json": "application/json",
    "xml": "application/xml",
    "ini": "text/plain",
    "js": "application/javascript",
    "yml": "application/yaml",
    "yaml": "application/yaml",
    "py": "text/x-python",
    "sh": "application/x-sh",
}

UPLOAD_METHODS = {
    "image": ("sendPhoto", "photo"),
    "video": ("sendVideo", "video"),
    "audio": ("sendAudio", "audio"),
}

DOCUMENT_METHOD = ("sendDocument", "document")


def content_type_for(extension: str) -> str:
    """
    Resolve the MIME type for a file extension.

    Args:
        extension: Extension without the leading dot, any case

    Returns:
        MIME type, application/octet-stream when unknown
    """
    return CONTENT_TYPES.get((extension or "").lower(), DEFAULT_MIME_TYPE)


def classify(extension: str) -> Classification:
    """
    Classify an extension into MIME type and upload method/field.

    Image, video and audio families get their specialised upload method;
    every other family is sent as a generic document.

    Args:
        extension: Extension without the leading dot, any case

    Returns:
        Classification for the extension
    """
    mime_type = content_type_for(extension)
    family = mime_type.split("/", 1)[0]
    method, field = UPLOAD_METHODS.get(family, DOCUMENT_METHOD)
    return Classification(mime_type=mime_type, upload_method=method, field_name=field)
