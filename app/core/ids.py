import uuid


def new_submission_id() -> str:
    return str(uuid.uuid4())


def record_key(prefix: str, submission_id: str) -> str:
    return f"{prefix}:{submission_id}"
