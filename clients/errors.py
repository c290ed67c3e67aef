"""Errors shared by the external service clients."""


class CredentialsError(ValueError):
    """Raised when a service key is missing or rejected."""
    pass


class CommentaryGenerationError(Exception):
    """Raised when Gemini produced no usable commentary."""
    pass


class SpeechSynthesisError(Exception):
    """Raised when a single text-to-speech request fails."""
    pass


class VideoProcessingError(Exception):
    """Raised when Gemini cannot accept or finish processing a video."""
    pass
