from functools import lru_cache

from fastapi import Depends

from app.core.config import Settings, get_settings
from app.pipeline.services import PipelineServices, build_pipeline_services
from app.pipeline.submission import SubmissionPipeline
from app.services.sessions import SessionRegistry


@lru_cache(maxsize=1)
def _default_services() -> PipelineServices:
    return build_pipeline_services(get_settings())


@lru_cache(maxsize=1)
def _default_registry() -> SessionRegistry:
    settings = get_settings()
    return SessionRegistry(ttl_seconds=settings.session_ttl_seconds, max_sessions=settings.max_sessions)


def get_pipeline_services() -> PipelineServices:
    return _default_services()


def get_pipeline(services: PipelineServices = Depends(get_pipeline_services)) -> SubmissionPipeline:
    return SubmissionPipeline(services)


def get_session_registry() -> SessionRegistry:
    return _default_registry()


def get_app_settings() -> Settings:
    return get_settings()
