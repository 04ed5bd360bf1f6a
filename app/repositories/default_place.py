from datetime import datetime, timezone

from database.connection import get_db, with_retry


class DefaultPlaceRepository:
    """Default meeting place per calendar date (the ``default_places`` table)."""

    @staticmethod
    @with_retry()
    def get_by_date(event_date: str) -> dict | None:
        """Get the row for an exact ``YYYY-MM-DD`` date."""
        db = get_db()
        result = db.table("default_places").select("*").eq(
            "event_date", event_date
        ).limit(1).execute()
        return result.data[0] if result and result.data else None

    @staticmethod
    def upsert(event_date: str, place: str) -> dict | None:
        """Insert the place for a date, or overwrite it if the date exists.

        Single conditional write keyed on the unique event_date column;
        created_at is left to the column default so it survives overwrites.
        """
        db = get_db()
        result = db.table("default_places").upsert(
            {
                "event_date": event_date,
                "place": place,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            },
            on_conflict="event_date",
        ).execute()
        return result.data[0] if result and result.data else None
