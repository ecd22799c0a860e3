"""Exceptions raised by the Audio2Face pipeline and service layer."""


class Audio2FaceError(Exception):
    """Base class for Audio2Face errors."""


class ModelNotLoadedError(Audio2FaceError):
    """Raised when a pipeline call is made before a model is attached."""

    def __init__(self, message: str = "Model not loaded. Call attach() first."):
        super().__init__(message)


class AudioDecodeError(Audio2FaceError):
    """Raised when uploaded audio cannot be decoded to PCM samples."""
