from typing import Awaitable, Callable

from app.pipeline.services import PipelineServices
from app.pipeline.state import SubmissionState
from app.pipeline.status import PREPARING_ANALYSIS, Processing, StatusSink
from app.services.records import EMPTY_FEEDBACK, SubmissionRecord, save_record


def make_node(
    services: PipelineServices, report: StatusSink
) -> Callable[[SubmissionState], Awaitable[SubmissionState]]:
    async def save_pending_record_node(state: SubmissionState) -> SubmissionState:
        report(Processing(PREPARING_ANALYSIS))
        context = state["context"]
        submission_id = services.id_factory()
        record = SubmissionRecord(
            id=submission_id,
            resume_path=state["resume_upload"].path,
            image_path=state["preview_upload"].path,
            company_name=context.company_name,
            job_title=context.job_title,
            job_description=context.job_description,
            feedback=EMPTY_FEEDBACK,
        )
        state["submission_id"] = submission_id
        state["record"] = record
        # Checkpoint 1: the submission is registered, analysis pending.
        state["record_key"] = await save_record(services.record_store, services.record_prefix, record)
        return state

    return save_pending_record_node
