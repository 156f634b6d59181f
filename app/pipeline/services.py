from dataclasses import dataclass
from typing import Callable

from app.core.config import Settings
from app.core.ids import new_submission_id
from app.services.inference import InferenceProvider, build_inference_provider
from app.services.instructions import prepare_instructions
from app.services.preview import PreviewConverter, build_preview_converter
from app.services.records import RecordStore, build_record_store
from app.services.storage import FileStorage, build_file_storage


@dataclass
class PipelineServices:
    storage: FileStorage
    converter: PreviewConverter
    record_store: RecordStore
    inference: InferenceProvider
    instructions: Callable[[str, str], str] = prepare_instructions
    id_factory: Callable[[], str] = new_submission_id
    record_prefix: str = "resume"


def build_pipeline_services(settings: Settings) -> PipelineServices:
    return PipelineServices(
        storage=build_file_storage(settings),
        converter=build_preview_converter(settings),
        record_store=build_record_store(settings),
        inference=build_inference_provider(settings),
        record_prefix=settings.record_prefix,
    )
