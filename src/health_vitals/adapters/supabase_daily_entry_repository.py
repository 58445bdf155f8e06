"""Supabase repository for daily entries."""

from dataclasses import dataclass
from datetime import date

from supabase import Client

from health_vitals.domain.entries import DailyEntry, Recommendation, entry_id
from health_vitals.services.entries import DailyEntryRepository

_TABLE = "daily_entries"


@dataclass
class SupabaseDailyEntryRepository(DailyEntryRepository):
    """Stores each entry as a JSON document keyed by ``{user_id}_{date}``."""

    client: Client

    def get_entry(self, user_id: str, day: date) -> DailyEntry | None:
        """Return the entry for a user's day."""
        document = self._get_document(entry_id(user_id, day))
        if document is None:
            return None
        return DailyEntry.model_validate(document)

    def save_entry(self, entry: DailyEntry) -> None:
        """Merge the entry into its stored document and upsert the row."""
        incoming = entry.model_dump(mode="json", exclude_none=True)
        stored = self._get_document(entry.id) or {}
        document = _merge_documents(stored, incoming)
        self.client.table(_TABLE).upsert(
            {
                "id": entry.id,
                "user_id": entry.user_id,
                "date": entry.date.isoformat(),
                "document": document,
                "updated_at": document.get("updated_at"),
            }
        ).execute()

    def replace_recommendations(
        self, user_id: str, day: date, recommendations: list[Recommendation] | None
    ) -> None:
        """Overwrite or remove the recommendations in a stored document."""
        key = entry_id(user_id, day)
        document = self._get_document(key)
        if document is None:
            return
        if recommendations is None:
            document.pop("recommendations", None)
        else:
            document["recommendations"] = [
                item.model_dump(mode="json") for item in recommendations
            ]
        self.client.table(_TABLE).update({"document": document}).eq(
            "id", key
        ).execute()

    def list_entries(self, user_id: str) -> list[DailyEntry]:
        """Return every entry for a user; callers filter and sort."""
        response = (
            self.client.table(_TABLE)
            .select("document")
            .eq("user_id", user_id)
            .execute()
        )
        return [
            DailyEntry.model_validate(row["document"])
            for row in response.data or []
            if row.get("document")
        ]

    def _get_document(self, key: str) -> dict[str, object] | None:
        response = (
            self.client.table(_TABLE)
            .select("document")
            .eq("id", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        document = response.data[0].get("document")
        return dict(document) if isinstance(document, dict) else None


def _merge_documents(
    stored: dict[str, object], incoming: dict[str, object]
) -> dict[str, object]:
    """Merge nested objects key by key; lists and scalars are replaced."""
    merged = dict(stored)
    for key, value in incoming.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _merge_documents(current, value)
        else:
            merged[key] = value
    return merged
