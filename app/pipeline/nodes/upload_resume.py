from typing import Awaitable, Callable

from app.core.errors import UploadFailed
from app.pipeline.services import PipelineServices
from app.pipeline.state import SubmissionState
from app.pipeline.status import UPLOADING_RESUME, Processing, StatusSink


def make_node(
    services: PipelineServices, report: StatusSink
) -> Callable[[SubmissionState], Awaitable[SubmissionState]]:
    async def upload_resume_node(state: SubmissionState) -> SubmissionState:
        report(Processing(UPLOADING_RESUME))
        uploaded = await services.storage.upload([state["context"].file])
        if not uploaded:
            raise UploadFailed("Failed to upload PDF file. The server returned an empty response.")
        state["resume_upload"] = uploaded
        return state

    return upload_resume_node
