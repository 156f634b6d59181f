from typing import Awaitable, Callable

from app.core.errors import InferenceFailed
from app.pipeline.services import PipelineServices
from app.pipeline.state import SubmissionState
from app.pipeline.status import ANALYZING, Processing, StatusSink


def make_node(
    services: PipelineServices, report: StatusSink
) -> Callable[[SubmissionState], Awaitable[SubmissionState]]:
    async def request_feedback_node(state: SubmissionState) -> SubmissionState:
        report(Processing(ANALYZING))
        context = state["context"]
        instructions = services.instructions(context.job_title, context.job_description)
        response = await services.inference.feedback(state["resume_upload"].path, instructions)
        if not response:
            raise InferenceFailed("The AI analysis returned an empty response.")
        state["response"] = response
        return state

    return request_feedback_node
