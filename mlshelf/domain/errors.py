# mlshelf/domain/errors.py


class ModelValidationError(ValueError):
    """Input rejected locally; nothing was sent to the backend."""


class UploadError(RuntimeError):
    """The backend refused or failed part of an upload."""


class RegistryError(RuntimeError):
    """A query against the models table failed."""
