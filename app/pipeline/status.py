from dataclasses import dataclass
from typing import Callable, Union

from app.core.enums import SubmissionErrorKind

UPLOADING_RESUME = "Uploading resume"
GENERATING_PREVIEW = "Generating resume preview"
UPLOADING_PREVIEW = "Uploading preview image"
PREPARING_ANALYSIS = "Preparing analysis"
ANALYZING = "Analyzing your resume with AI"
ANALYSIS_COMPLETE = "Analysis Complete!"


@dataclass(frozen=True)
class Idle:
    @property
    def text(self) -> str:
        return ""


@dataclass(frozen=True)
class Processing:
    label: str

    @property
    def text(self) -> str:
        return self.label


@dataclass(frozen=True)
class Error:
    message: str
    kind: SubmissionErrorKind = SubmissionErrorKind.UNKNOWN_ERROR

    @property
    def text(self) -> str:
        return ""


PipelineStatus = Union[Idle, Processing, Error]
StatusSink = Callable[[PipelineStatus], None]

IDLE = Idle()
