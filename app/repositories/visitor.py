from database.connection import get_db


class VisitorRepository:
    """Append-only store of pass submissions (the ``visitors`` table)."""

    @staticmethod
    def create(
        name: str,
        phone: str,
        meeting_place: str,
        meeting_date: str,
        serial_number: str,
    ) -> dict | None:
        """Insert one visitor row and return it as stored.

        Not retried: a second attempt could issue two records for one pass.
        A duplicate serial_number raises the storage engine's unique
        violation (postgrest APIError, code 23505).
        """
        db = get_db()
        result = db.table("visitors").insert({
            "name": name,
            "phone": phone,
            "meeting_place": meeting_place,
            "meeting_date": meeting_date,
            "serial_number": serial_number,
        }).execute()
        return result.data[0] if result and result.data else None
