# mlshelf/domain/models.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    # PostgREST returns ISO-8601 with a trailing Z on some deployments
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass
class ModelRecord:
    id: str
    user_id: str
    name: str
    file_path: str
    size_bytes: int
    description: str | None = None
    framework: str | None = None
    format: str | None = None
    tags: List[str] | None = None
    downloads: int = 0
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ModelRecord":
        return cls(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            name=row["name"],
            file_path=row["file_path"],
            size_bytes=int(row["size_bytes"]),
            description=row.get("description"),
            framework=row.get("framework"),
            format=row.get("format"),
            tags=row.get("tags"),
            downloads=int(row.get("downloads") or 0),
            created_at=_parse_timestamp(row.get("created_at")),
        )


@dataclass
class ModelFile:
    """A file handed to the upload sequence."""

    filename: str
    content: bytes
    content_type: str | None = None
    # Size announced by the transport when `content` was read only up to the limit.
    reported_size: int | None = None

    @property
    def size(self) -> int:
        if self.reported_size is None:
            return len(self.content)
        return max(self.reported_size, len(self.content))


@dataclass
class ModelMetadata:
    """User-supplied metadata exactly as entered; see `to_row` for normalisation."""

    name: str
    description: str | None = None
    framework: str | None = None
    format: str | None = None
    tags: List[str] = field(default_factory=list)

    def to_row(self, user_id: str, file_path: str, size_bytes: int) -> Dict[str, Any]:
        tags = [t.strip() for t in self.tags if t and t.strip()]
        return {
            "user_id": user_id,
            "name": self.name.strip(),
            "description": (self.description or "").strip() or None,
            "file_path": file_path,
            "size_bytes": size_bytes,
            "framework": self.framework or None,
            "format": (self.format or "").strip() or None,
            "tags": tags or None,
        }


@dataclass
class DownloadLink:
    url: str
    filename: str
    expires_in: int
