from typing import Awaitable, Callable

from app.pipeline.services import PipelineServices
from app.pipeline.state import SubmissionState
from app.pipeline.status import StatusSink
from app.services.inference import parse_feedback, response_text


def make_node(
    services: PipelineServices, report: StatusSink
) -> Callable[[SubmissionState], Awaitable[SubmissionState]]:
    async def parse_feedback_node(state: SubmissionState) -> SubmissionState:
        state["feedback"] = parse_feedback(response_text(state["response"]))
        return state

    return parse_feedback_node
