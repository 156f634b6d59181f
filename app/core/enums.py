from enum import Enum


class SubmissionErrorKind(str, Enum):
    UPLOAD_FAILED = "upload_failed"
    CONVERSION_FAILED = "conversion_failed"
    INFERENCE_FAILED = "inference_failed"
    FEEDBACK_PARSE_FAILED = "feedback_parse_failed"
    UNKNOWN_ERROR = "unknown_error"
    INVALID_INPUT = "invalid_input"


class AnalysisStatus(str, Enum):
    PENDING = "pending"
    COMPLETE = "complete"


class RecordStoreBackend(str, Enum):
    MEMORY = "memory"
    REDIS = "redis"
    SQL = "sql"
