from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from app.api.deps import get_app_settings, get_pipeline, get_session_registry
from app.api.schemas import SubmissionStatusResponse
from app.core.config import Settings
from app.core.errors import SessionStateError
from app.pipeline.submission import SubmissionPipeline
from app.services.sessions import SessionRegistry, SubmissionSession
from app.services.storage import FileBlob

router = APIRouter(prefix="/submissions", tags=["submissions"])


def _get_session_or_404(registry: SessionRegistry, session_id: str) -> SubmissionSession:
    session = registry.get(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Submission session not found")
    return session


@router.post("", status_code=202, response_model=SubmissionStatusResponse)
async def create_submission(
    background_tasks: BackgroundTasks,
    company_name: str = Form(""),
    job_title: str = Form(""),
    job_description: str = Form(""),
    file: UploadFile | None = File(None),
    pipeline: SubmissionPipeline = Depends(get_pipeline),
    registry: SessionRegistry = Depends(get_session_registry),
    settings: Settings = Depends(get_app_settings),
):
    session = registry.create(pipeline, max_upload_bytes=settings.max_upload_bytes)

    blob = None
    if file is not None:
        blob = FileBlob(
            filename=file.filename or "resume.pdf",
            content=await file.read(),
            content_type=file.content_type or "application/octet-stream",
        )
    session.fill(company_name=company_name, job_title=job_title, job_description=job_description, file=blob)

    context = session.validate()
    if context is None:
        return JSONResponse(
            status_code=422,
            content=SubmissionStatusResponse.from_session(session).model_dump(mode="json"),
        )

    background_tasks.add_task(session.run, context)
    return SubmissionStatusResponse.from_session(session)


@router.get("/{session_id}", response_model=SubmissionStatusResponse)
def get_submission_status(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    return SubmissionStatusResponse.from_session(_get_session_or_404(registry, session_id))


@router.post("/{session_id}/reset", response_model=SubmissionStatusResponse)
def reset_submission(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    session = _get_session_or_404(registry, session_id)
    try:
        session.reset()
    except SessionStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return SubmissionStatusResponse.from_session(session)
