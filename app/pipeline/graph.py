from typing import Awaitable, Callable

from langgraph.graph import END, StateGraph

from app.core.errors import SubmissionError, UnknownSubmissionError
from app.core.logging import get_logger, log_fields
from app.pipeline.nodes import (
    generate_preview,
    parse_feedback,
    request_feedback,
    save_feedback,
    save_pending_record,
    upload_preview,
    upload_resume,
)
from app.pipeline.services import PipelineServices
from app.pipeline.state import SubmissionState
from app.pipeline.status import StatusSink

logger = get_logger(__name__)

Node = Callable[[SubmissionState], Awaitable[SubmissionState]]

# Run strictly in this order. A failed step ends the run; earlier side effects
# (uploads, the checkpoint-1 record) are left in place.
SUBMISSION_STEPS: tuple[tuple[str, Callable[[PipelineServices, StatusSink], Node]], ...] = (
    ("upload_resume", upload_resume.make_node),
    ("generate_preview", generate_preview.make_node),
    ("upload_preview", upload_preview.make_node),
    ("save_pending_record", save_pending_record.make_node),
    ("request_feedback", request_feedback.make_node),
    ("parse_feedback", parse_feedback.make_node),
    ("save_feedback", save_feedback.make_node),
)


def as_submission_error(exc: Exception) -> SubmissionError:
    if isinstance(exc, SubmissionError):
        return exc
    failure = UnknownSubmissionError(str(exc) or None)
    failure.__cause__ = exc
    return failure


def _guard(step_name: str, node: Node) -> Node:
    async def guarded_node(state: SubmissionState) -> SubmissionState:
        state["step"] = step_name
        try:
            return await node(state)
        except Exception as exc:
            failure = as_submission_error(exc)
            state["failure"] = failure
            logger.warning(
                "Submission step failed",
                exc_info=not isinstance(exc, SubmissionError),
                extra=log_fields(
                    step=step_name,
                    submission_id=state.get("submission_id"),
                    error_kind=failure.kind.value,
                    error=failure.message,
                ),
            )
            return state

    return guarded_node


def _route_after_step(state: SubmissionState) -> str:
    if state.get("failure") is not None:
        return "stop"
    return "continue"


def build_submission_graph(services: PipelineServices, report: StatusSink):
    graph = StateGraph(SubmissionState)
    step_names = [name for name, _ in SUBMISSION_STEPS]

    for name, make_node in SUBMISSION_STEPS:
        graph.add_node(name, _guard(name, make_node(services, report)))

    graph.set_entry_point(step_names[0])
    for current, following in zip(step_names, step_names[1:]):
        graph.add_conditional_edges(
            current,
            _route_after_step,
            {
                "continue": following,
                "stop": END,
            },
        )
    graph.add_edge(step_names[-1], END)

    return graph.compile()
