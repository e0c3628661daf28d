from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Literal, Optional

from .request_id import get_request_id

AuditAction = Literal[
    "reservation.created",
    "reservation.updated",
    "reservation.deleted",
    "selection.confirmed",
]

_audit_logger = logging.getLogger("audit")
_audit_logger.setLevel(logging.INFO)
if not _audit_logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    _audit_logger.addHandler(handler)
_audit_logger.propagate = False


def _seats_to_str(seats: Optional[Iterable[Any]]) -> Optional[str]:
    if seats is None:
        return None
    label = getattr(seats, "label", None)
    if isinstance(label, str):
        return label
    return ", ".join(str(s) for s in seats)


def emit_audit_log(
    *,
    action: AuditAction,
    reservation_id: Optional[str],
    number_of_guests: Optional[int] = None,
    seats: Optional[Iterable[Any]] = None,
    version: Optional[int] = None,
    changed_fields: Optional[list[str]] = None,
    message: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> None:
    """Emit one structured JSON audit line. Raises RuntimeError if logging fails."""
    payload: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": "info",
        "action": action,
        "request_id": get_request_id(),
        "reservation_id": reservation_id,
        "number_of_guests": number_of_guests,
        "seats": _seats_to_str(seats),
        "version": version,
        "changed_fields": changed_fields or None,
    }
    if message is not None:
        payload["message"] = message
    if extra:
        payload.update(extra)

    compact_payload = {k: v for k, v in payload.items() if v is not None}
    try:
        _audit_logger.info(json.dumps(compact_payload, ensure_ascii=False))
    except Exception as exc:  # pragma: no cover - logger failure surfaced to caller
        raise RuntimeError("failed to emit audit log") from exc
