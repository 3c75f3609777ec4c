"""Exceptions raised by the upload pipeline.

Every exception carries the HTTP status the API answers with. Upstream
failures all map to 500; their detail is logged, not returned to clients.
"""


class SizyxError(Exception):
    """Base exception for the upload gateway."""

    status_code = 500
    public_message = "Internal server error"


class ValidationError(SizyxError):
    """Exception raised when the request is missing required input."""

    status_code = 400

    @property
    def public_message(self) -> str:
        return str(self)


class AccountNotFoundError(SizyxError):
    """Exception raised when lookup-only mode finds no customer."""

    status_code = 404
    public_message = "Customer not found"


class UpstreamLookupError(SizyxError):
    """Exception raised when the customer lookup call fails."""

    public_message = "Failed to look up customer"


class UpstreamCreateError(SizyxError):
    """Exception raised when customer creation fails."""

    public_message = "Failed to create customer"


class StagingRequestFailed(SizyxError):
    """Exception raised when no staged upload target could be obtained."""

    public_message = "Upload failed"


class BinaryUploadFailed(SizyxError):
    """Exception raised when the file bytes could not be written."""

    public_message = "Upload failed"


class FileRegistrationFailed(SizyxError):
    """Exception raised when the uploaded object could not be registered."""

    public_message = "Upload failed"


class MetadataWriteError(SizyxError):
    """Exception raised when image URLs could not be attached to the customer."""

    public_message = "Failed to save images to customer"


class GalleryFetchError(SizyxError):
    """Exception raised when stored images could not be enumerated."""

    public_message = "Failed to load gallery"
