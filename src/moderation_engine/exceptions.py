"""Custom exception hierarchy for the moderation engine."""


class ModerationEngineError(Exception):
    """Base exception for all moderation engine errors."""


class ExtractionError(ModerationEngineError):
    """Error turning a submitted payload into text."""


class UnsupportedFormat(ExtractionError):
    """No extractor is registered for the payload's content type."""


class UnsupportedEncoding(ExtractionError):
    """Plain-text payload is not valid UTF-8."""


class ExtractionFailed(ExtractionError):
    """The PDF parser or OCR recognizer failed or produced nothing."""


class BlobNotFound(ModerationEngineError):
    """A blob reference does not resolve to stored bytes."""


class ToxicityScoringError(ModerationEngineError):
    """Hard failure of the toxicity scorer (not a degradable service error)."""


class HarassmentUnavailable(ModerationEngineError):
    """A harassment strategy cannot run with the inputs it was given."""


class GenerationError(ModerationEngineError):
    """Error during text generation."""


class SubmissionNotFound(ModerationEngineError):
    """No submission exists with the requested id."""


class InvalidTransition(ModerationEngineError):
    """A status change that the submission state machine does not allow."""


class ConfigurationError(ModerationEngineError):
    """Error in system configuration."""
