import inspect
from dataclasses import dataclass
from typing import Any, Callable

from app.core.errors import SubmissionError
from app.core.logging import get_logger, log_fields
from app.pipeline.graph import as_submission_error, build_submission_graph
from app.pipeline.services import PipelineServices
from app.pipeline.state import SubmissionContext, SubmissionState
from app.pipeline.status import ANALYSIS_COMPLETE, Error, Processing, StatusSink
from app.services.records import SubmissionRecord

logger = get_logger(__name__)

SuccessHandler = Callable[[str], Any]


@dataclass(frozen=True)
class SubmissionOutcome:
    submission_id: str | None = None
    record: SubmissionRecord | None = None
    failure: SubmissionError | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class SubmissionPipeline:
    """Runs one submission through the step graph and reports status transitions.

    The pipeline does no input validation and holds no lock: callers must
    validate the form and keep a second run from starting while one is active.
    On success the last status stays ``Processing("Analysis Complete!")`` and
    ``on_success`` is called once with the new submission id; on failure the
    status becomes ``Error`` and ``on_success`` is never called.
    """

    def __init__(self, services: PipelineServices) -> None:
        self.services = services

    async def run(
        self,
        context: SubmissionContext,
        *,
        on_status: StatusSink,
        on_success: SuccessHandler,
    ) -> SubmissionOutcome:
        state: SubmissionState = {"context": context}
        try:
            graph = build_submission_graph(self.services, on_status)
            state = await graph.ainvoke(state)
            failure = state.get("failure")
            if failure is None:
                submission_id = state["submission_id"]
                on_status(Processing(ANALYSIS_COMPLETE))
                logger.info("Submission analysed", extra=log_fields(submission_id=submission_id))
                handoff = on_success(submission_id)
                if inspect.isawaitable(handoff):
                    await handoff
                return SubmissionOutcome(submission_id=submission_id, record=state.get("record"))
        except Exception as exc:
            failure = as_submission_error(exc)
            logger.exception("Submission run aborted", extra=log_fields(submission_id=state.get("submission_id")))

        on_status(Error(failure.message, failure.kind))
        return SubmissionOutcome(
            submission_id=state.get("submission_id"),
            record=state.get("record"),
            failure=failure,
        )
