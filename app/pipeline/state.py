from dataclasses import dataclass
from typing import Any, TypedDict

from app.core.errors import SubmissionError
from app.services.inference import InferenceResponse
from app.services.records import SubmissionRecord
from app.services.storage import FileBlob, UploadResult


@dataclass(frozen=True)
class SubmissionContext:
    company_name: str
    job_title: str
    job_description: str
    file: FileBlob


class SubmissionState(TypedDict, total=False):
    context: SubmissionContext
    step: str

    resume_upload: UploadResult
    preview: FileBlob
    preview_upload: UploadResult

    submission_id: str
    record_key: str
    record: SubmissionRecord

    response: InferenceResponse
    feedback: Any

    failure: SubmissionError
