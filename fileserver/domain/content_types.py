"""File name to MIME type lookup."""

import mimetypes

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def content_type_for(file_name: str) -> str:
    """Return the MIME type for ``file_name``, falling back to octet-stream."""
    try:
        mime_type, _ = mimetypes.guess_type(file_name, strict=False)
    except (TypeError, ValueError):
        return DEFAULT_CONTENT_TYPE
    return mime_type or DEFAULT_CONTENT_TYPE
