import csv
import io
from typing import Iterable

EXPORT_COLUMNS = [
    "UserID",
    "FirstName",
    "LastName",
    "Username",
    "Blocked",
    "JoinedDate",
    "LastActive",
    "Interactions",
]


def users_to_csv(users: Iterable[dict]) -> str:
    """Render user documents as CSV with a fixed column order."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for user in users:
        writer.writerow([
            user.get("user_id"),
            user.get("first_name") or "",
            user.get("last_name") or "",
            user.get("username") or "",
            "true" if user.get("is_blocked") else "false",
            _iso(user.get("created_at")),
            _iso(user.get("last_active")),
            user.get("total_interactions", 0),
        ])
    return buffer.getvalue()


def _iso(value) -> str:
    if value is None:
        return ""
    return value.isoformat() if hasattr(value, "isoformat") else str(value)
