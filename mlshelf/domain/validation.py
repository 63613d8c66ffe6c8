# mlshelf/domain/validation.py
import re
from typing import List, Optional

from .errors import ModelValidationError
from .models import ModelFile, ModelMetadata

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB
MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MIN_PASSWORD_LENGTH = 6

FRAMEWORKS = [
    "TensorFlow",
    "PyTorch",
    "ONNX",
    "TensorFlow Lite",
    "Core ML",
    "Other",
]

# Offered as a hint to the file picker only; any extension is accepted.
ACCEPTED_EXTENSIONS = [
    ".h5",
    ".pb",
    ".pth",
    ".onnx",
    ".tflite",
    ".mlmodel",
    ".pkl",
    ".bin",
    ".safetensors",
]


def _megabytes(size: int) -> str:
    return f"{size / (1024 * 1024):.1f}"


def validate_file(file: Optional[ModelFile], max_size: int = MAX_FILE_SIZE) -> ModelFile:
    if file is None or not file.filename:
        raise ModelValidationError("Please select a file to upload")
    if file.size > max_size:
        raise ModelValidationError(
            f"File too large. Maximum size is {max_size // (1024 * 1024)} MB. "
            f"Your file is {_megabytes(file.size)} MB"
        )
    return file


def validate_metadata(metadata: ModelMetadata) -> ModelMetadata:
    name = (metadata.name or "").strip()
    if not name:
        raise ModelValidationError("Model name is required")
    if len(name) > MAX_NAME_LENGTH:
        raise ModelValidationError(
            f"Model name must be {MAX_NAME_LENGTH} characters or less"
        )
    if len(metadata.description or "") > MAX_DESCRIPTION_LENGTH:
        raise ModelValidationError(
            f"Description must be {MAX_DESCRIPTION_LENGTH} characters or less"
        )
    return metadata


def parse_tags(raw: str | None) -> List[str]:
    """Split a comma-separated tag string, trimming and dropping empty entries."""
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def default_model_name(filename: str) -> str:
    """File name without its last extension, used to pre-fill an empty name."""
    return re.sub(r"\.[^/.]+$", "", filename)


def validate_credentials(email: str | None, password: str | None) -> Optional[str]:
    """Return the message to show for unusable credentials, or None."""
    if not email or not password:
        return "Please fill in all fields"
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return None
