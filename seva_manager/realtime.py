"""
Row-level change notifications over Socket.IO.

Clients join one room per subscription: ``changes:<table>`` for every change on
a table, or ``changes:<table>:<column>=<value>`` for changes to rows matching an
equality filter. Payloads only tell the client *what* changed; clients re-fetch
the data they render.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder

from seva_manager.models.enums import ChangeEvent
from seva_manager.socket_instance import sio

logger = logging.getLogger(__name__)

CHANGE_EVENT_NAME = "db_change"

# table -> columns a subscriber may filter on
SUBSCRIBABLE_FILTERS = {
    "sevas": ("id",),
    "donors": ("seva_id", "added_by"),
    "payment_history": ("donor_id",),
    "profiles": ("referred_by",),
}


def table_room(table: str) -> str:
    return f"changes:{table}"


def filter_room(table: str, column: str, value: Any) -> str:
    return f"changes:{table}:{column}={value}"


def subscription_room(table: str, filter_: Optional[Dict[str, Any]] = None) -> str:
    """
    Resolves a subscription request to its room name.
    Raises ValueError for unknown tables, unsupported columns or multi-column filters.
    """
    if table not in SUBSCRIBABLE_FILTERS:
        raise ValueError(f"Unknown table '{table}'")
    if not filter_:
        return table_room(table)
    if len(filter_) != 1:
        raise ValueError("Only a single equality filter is supported")
    column, value = next(iter(filter_.items()))
    if column not in SUBSCRIBABLE_FILTERS[table]:
        raise ValueError(f"Table '{table}' cannot be filtered by '{column}'")
    return filter_room(table, column, str(value))


def rooms_for_change(table: str, record: Dict[str, Any]) -> List[str]:
    rooms = [table_room(table)]
    for column in SUBSCRIBABLE_FILTERS.get(table, ()):
        value = record.get(column)
        if value is not None:
            rooms.append(filter_room(table, column, value))
    return rooms


async def broadcast_change(table: str, event: ChangeEvent, record: Dict[str, Any]) -> None:
    """Notifies subscribers of a committed change. Delivery failures are logged, never raised."""
    payload = {"table": table, "event": event.value, "record": jsonable_encoder(record)}
    rooms = rooms_for_change(table, payload["record"])
    try:
        await sio.emit(CHANGE_EVENT_NAME, payload, room=rooms)
        logger.debug(f"Emitted {event.value} on '{table}' to rooms {rooms}")
    except Exception as e:
        logger.error(f"Failed to emit Socket.IO change event for '{table}': {e}", exc_info=True)


def seva_record(seva) -> Dict[str, Any]:
    return {
        "id": seva.id,
        "name": seva.name,
        "total_slots": seva.total_slots,
        "booked_slots": seva.booked_slots,
        "is_active": seva.is_active,
    }


def donor_record(donor) -> Dict[str, Any]:
    return {
        "id": donor.id,
        "seva_id": donor.seva_id,
        "added_by": donor.added_by,
        "payment_status": donor.payment_status,
        "paid_amount": donor.paid_amount,
        "total_amount": donor.total_amount,
    }
