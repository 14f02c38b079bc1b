"""
Error taxonomy for the compression pipeline.

Every error carries the HTTP status it maps to and a message that is safe
to show to a client. The exception's own text (``str(exc)``) may hold
internal detail and only goes to the logs.
"""
from typing import Optional


class CompressionError(Exception):
    """Base class for all compression request failures."""

    status_code = 500
    public_message = "Failed to process image"

    def __init__(self, detail: Optional[str] = None, public_message: Optional[str] = None):
        super().__init__(detail or public_message or self.public_message)
        if public_message is not None:
            self.public_message = public_message

    @property
    def code(self) -> str:
        return type(self).__name__

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500


class MissingInput(CompressionError):
    """No file payload was provided."""

    status_code = 400
    public_message = "No image file provided"


class InvalidImageFormat(CompressionError):
    """The bytes are not decodable as any known image format."""

    status_code = 400
    public_message = "Invalid image format"


class UploadTooLarge(CompressionError):
    status_code = 413
    public_message = "Image file is too large"


class UnsupportedMediaType(CompressionError):
    status_code = 415
    public_message = "Uploaded file is not an image"


class EncodingFailed(CompressionError):
    """The input passed detection but the codec could not re-encode it."""

    status_code = 500


class UnexpectedFailure(CompressionError):
    status_code = 500


class InvalidRequest(CompressionError):
    """A form field other than the image could not be parsed."""

    status_code = 400
    public_message = "Invalid request"
