# mlshelf/domain/repos.py
from typing import Any, Dict, List, Optional

from .errors import RegistryError
from .models import ModelRecord


class ModelRepo:
    """Queries against the models table.

    Every backend failure is re-raised as RegistryError with the original
    exception chained.
    """

    def __init__(self, client: Any, table: str = "models"):
        self.client = client
        self.table = table

    def _query(self):
        return self.client.table(self.table)

    def list_all(self) -> List[ModelRecord]:
        try:
            response = self._query().select("*").order("created_at", desc=True).execute()
        except Exception as exc:
            raise RegistryError(f"Failed to fetch models: {exc}") from exc
        return [ModelRecord.from_row(row) for row in response.data or []]

    def list_by_owner(self, user_id: str) -> List[ModelRecord]:
        try:
            response = (
                self._query()
                .select("*")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as exc:
            raise RegistryError(f"Failed to fetch user models: {exc}") from exc
        return [ModelRecord.from_row(row) for row in response.data or []]

    def get(self, record_id: str) -> Optional[ModelRecord]:
        try:
            response = self._query().select("*").eq("id", record_id).limit(1).execute()
        except Exception as exc:
            raise RegistryError(f"Failed to fetch model {record_id}: {exc}") from exc
        rows = response.data or []
        return ModelRecord.from_row(rows[0]) if rows else None

    def insert(self, row: Dict[str, Any]) -> ModelRecord:
        try:
            response = self._query().insert(row).execute()
        except Exception as exc:
            raise RegistryError(str(exc)) from exc
        rows = response.data or []
        if not rows:
            raise RegistryError("Insert returned no row")
        return ModelRecord.from_row(rows[0])

    def increment_downloads(self, record: ModelRecord) -> int:
        # Read-modify-write without a version check; concurrent downloads can under-count.
        downloads = record.downloads + 1
        try:
            self._query().update({"downloads": downloads}).eq("id", record.id).execute()
        except Exception as exc:
            raise RegistryError(f"Failed to update download count: {exc}") from exc
        return downloads
