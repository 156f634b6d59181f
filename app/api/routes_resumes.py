from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_pipeline_services
from app.api.schemas import SubmissionRecordListResponse, SubmissionRecordResponse
from app.pipeline.services import PipelineServices
from app.services.records import SubmissionRecord, load_record

router = APIRouter(prefix="/resumes", tags=["resumes"])


def _to_response(record: SubmissionRecord) -> SubmissionRecordResponse:
    return SubmissionRecordResponse.model_validate(record.model_dump(mode="json", by_alias=True))


@router.get("", response_model=SubmissionRecordListResponse)
async def list_resumes(
    limit: int = 100,
    services: PipelineServices = Depends(get_pipeline_services),
):
    prefix = services.record_prefix
    keys = await services.record_store.keys(prefix, limit=limit)
    records = []
    for key in keys:
        record = await load_record(services.record_store, prefix, key.split(":", 1)[1])
        if record:
            records.append(_to_response(record))
    return SubmissionRecordListResponse(count=len(records), records=records)


@router.get("/{submission_id}", response_model=SubmissionRecordResponse)
async def get_resume(
    submission_id: str,
    services: PipelineServices = Depends(get_pipeline_services),
):
    record = await load_record(services.record_store, services.record_prefix, submission_id)
    if not record:
        raise HTTPException(status_code=404, detail="Resume not found")
    return _to_response(record)
