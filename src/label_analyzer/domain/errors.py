"""Errors raised while analyzing a food label.

Every error is terminal for the request that raised it. Each one carries a
stable ``code`` for API clients, the HTTP status the API answers with, and a
message the user can act on.
"""

from enum import StrEnum


class LabelAnalysisError(Exception):
    """Base class for user-facing analysis failures."""

    code = "ANALYSIS_ERROR"
    status_code = 500
    default_message = "Something went wrong while analyzing the label."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingInput(LabelAnalysisError):
    """No ingredient text or label photo was supplied."""

    code = "MISSING_INPUT"
    status_code = 400
    default_message = "Please provide ingredient text to analyze."


class InvalidRequest(LabelAnalysisError):
    """The request body is not valid JSON or has fields of the wrong type."""

    code = "INVALID_REQUEST"
    status_code = 400
    default_message = "The request could not be read. Please try again."


class InvalidImage(LabelAnalysisError):
    """The uploaded payload is not a decodable image."""

    code = "INVALID_IMAGE"
    status_code = 400
    default_message = "Please select a valid image file."


class InsufficientText(LabelAnalysisError):
    """Normalized OCR text is too short to analyze."""

    code = "INSUFFICIENT_TEXT"
    status_code = 422
    default_message = (
        "Not enough text found in image. Please ensure the label is clearly "
        "visible or use Text Mode."
    )


class NoTextRecognized(LabelAnalysisError):
    """The OCR client failed or returned no text."""

    code = "NO_TEXT_RECOGNIZED"
    status_code = 422
    default_message = (
        "Could not extract text from image. Please ensure the image is clear "
        "and try again, or use Text Mode."
    )


class FailureReason(StrEnum):
    """Why a request to the analysis service failed."""

    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"
    SERVER_ERROR = "server_error"


class AnalysisRequestFailed(LabelAnalysisError):
    """The analysis service could not be reached or answered with an error."""

    code = "ANALYSIS_REQUEST_FAILED"
    status_code = 502

    def __init__(self, reason: FailureReason, message: str | None = None) -> None:
        self.reason = reason
        if reason is FailureReason.TIMEOUT:
            self.status_code = 504
        super().__init__(message or _REQUEST_FAILURE_MESSAGES[reason])


_REQUEST_FAILURE_MESSAGES = {
    FailureReason.TIMEOUT: (
        "Request timed out. Please check the analysis service connection "
        "and try again."
    ),
    FailureReason.UNREACHABLE: (
        "Could not connect to the analysis service. Please ensure it is running."
    ),
    FailureReason.SERVER_ERROR: (
        "Analysis failed: the analysis service returned an error."
    ),
}


class NoAnalysisData(LabelAnalysisError):
    """The analysis service answered without any usable analysis text."""

    code = "NO_ANALYSIS_DATA"
    status_code = 502
    default_message = "No analysis data received from server."


class NoIngredientsParsed(LabelAnalysisError):
    """Analysis text was received but no ingredient could be parsed from it."""

    code = "NO_INGREDIENTS_PARSED"
    status_code = 422
    default_message = (
        "Could not parse ingredient analysis. Please check the response format."
    )


class AnalysisInProgress(LabelAnalysisError):
    """Another analysis is already running for the same session."""

    code = "ANALYSIS_IN_PROGRESS"
    status_code = 409
    default_message = (
        "An analysis is already running for this session. Please wait for it "
        "to finish."
    )
