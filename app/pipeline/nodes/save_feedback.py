from typing import Awaitable, Callable

from app.pipeline.services import PipelineServices
from app.pipeline.state import SubmissionState
from app.pipeline.status import StatusSink


def make_node(
    services: PipelineServices, report: StatusSink
) -> Callable[[SubmissionState], Awaitable[SubmissionState]]:
    async def save_feedback_node(state: SubmissionState) -> SubmissionState:
        record = state["record"].with_feedback(state["feedback"])
        state["record"] = record
        # Checkpoint 2: full overwrite under the checkpoint-1 key.
        await services.record_store.set(state["record_key"], record.to_json())
        return state

    return save_feedback_node
