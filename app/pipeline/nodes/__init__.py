from . import (
    generate_preview,
    parse_feedback,
    request_feedback,
    save_feedback,
    save_pending_record,
    upload_preview,
    upload_resume,
)

__all__ = [
    "generate_preview",
    "parse_feedback",
    "request_feedback",
    "save_feedback",
    "save_pending_record",
    "upload_preview",
    "upload_resume",
]
