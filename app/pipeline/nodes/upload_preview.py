from typing import Awaitable, Callable

from app.core.errors import UploadFailed
from app.pipeline.services import PipelineServices
from app.pipeline.state import SubmissionState
from app.pipeline.status import UPLOADING_PREVIEW, Processing, StatusSink


def make_node(
    services: PipelineServices, report: StatusSink
) -> Callable[[SubmissionState], Awaitable[SubmissionState]]:
    async def upload_preview_node(state: SubmissionState) -> SubmissionState:
        report(Processing(UPLOADING_PREVIEW))
        uploaded = await services.storage.upload([state["preview"]])
        if not uploaded:
            raise UploadFailed("Failed to upload the generated preview image.")
        state["preview_upload"] = uploaded
        return state

    return upload_preview_node
