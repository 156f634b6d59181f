from typing import Awaitable, Callable

from app.core.errors import ConversionFailed
from app.pipeline.services import PipelineServices
from app.pipeline.state import SubmissionState
from app.pipeline.status import GENERATING_PREVIEW, Processing, StatusSink


def make_node(
    services: PipelineServices, report: StatusSink
) -> Callable[[SubmissionState], Awaitable[SubmissionState]]:
    async def generate_preview_node(state: SubmissionState) -> SubmissionState:
        report(Processing(GENERATING_PREVIEW))
        # Convert the caller's original file, not the uploaded copy.
        result = await services.converter.convert(state["context"].file)
        if result.error or not result.file:
            raise ConversionFailed(result.error or None)
        state["preview"] = result.file
        return state

    return generate_preview_node
