from collections.abc import Iterable
from typing import Any

from dms_api.core.errors import invalid_argument

AUDIT_CREATE_FIELDS = ("created_at", "created_by")


def reject_supplied_id(value: str | None, field: str) -> None:
    if value is not None:
        raise invalid_argument(f"{field} must not be supplied on create; identity is server-assigned", {field: value})


def require_id(value: str | None, field: str) -> str:
    if value is None:
        raise invalid_argument(f"{field} is required for update", {field: None})
    return value


def apply_fields(row: Any, values: dict[str, Any], exclude: Iterable[str] = ()) -> None:
    """Copy ``values`` onto ``row``; creation audit fields are never overwritten."""
    skipped = set(exclude) | set(AUDIT_CREATE_FIELDS)
    for key, value in values.items():
        if key in skipped:
            continue
        setattr(row, key, value)
