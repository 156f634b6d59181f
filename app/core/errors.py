from app.core.enums import SubmissionErrorKind


class SubmissionError(Exception):
    """Failure of one submission step, surfaced to the caller as an Error status."""

    kind: SubmissionErrorKind = SubmissionErrorKind.UNKNOWN_ERROR
    default_message = "An unknown error occurred."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UploadFailed(SubmissionError):
    kind = SubmissionErrorKind.UPLOAD_FAILED
    default_message = "Failed to upload file."


class ConversionFailed(SubmissionError):
    kind = SubmissionErrorKind.CONVERSION_FAILED
    default_message = "Failed to convert PDF to an image."


class InferenceFailed(SubmissionError):
    kind = SubmissionErrorKind.INFERENCE_FAILED
    default_message = "The AI analysis returned an empty response."


class FeedbackParseFailed(SubmissionError):
    kind = SubmissionErrorKind.FEEDBACK_PARSE_FAILED
    default_message = "The AI analysis could not be read as structured feedback."


class UnknownSubmissionError(SubmissionError):
    kind = SubmissionErrorKind.UNKNOWN_ERROR


class InvalidSubmission(SubmissionError):
    kind = SubmissionErrorKind.INVALID_INPUT
    default_message = "Please fill out all fields."


class SessionStateError(RuntimeError):
    """The session cannot perform an operation from its current status."""


class SubmissionInProgress(SessionStateError):
    """Raised when a session is asked to submit, edit or reset while a run is active."""
