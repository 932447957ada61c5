"""In-process change-event channel for ledger, log and warehouse mutations.

Mutating services publish after their database commit; subscribers (the live
dashboard, the logging sink) are called synchronously in subscription order.
"""

from __future__ import annotations

from collections import deque
from datetime import datetime
from typing import Any, Callable, Deque

from loguru import logger


ITEM_CREATED = "item.created"
ITEM_UPDATED = "item.updated"
ITEM_DELETED = "item.deleted"
STOCK_RECEIVED = "stock.received"
STOCK_DISPATCHED = "stock.dispatched"
STOCK_DAMAGED = "stock.damaged"
WAREHOUSE_CREATED = "warehouse.created"
WAREHOUSE_DELETED = "warehouse.deleted"

Subscriber = Callable[[dict[str, Any]], None]

_SUBSCRIBERS: list[Subscriber] = []
_EVENTS: Deque[dict[str, Any]] = deque(maxlen=200)


def subscribe(callback: Subscriber) -> Subscriber:
    if callback not in _SUBSCRIBERS:
        _SUBSCRIBERS.append(callback)
    return callback


def unsubscribe(callback: Subscriber) -> None:
    if callback in _SUBSCRIBERS:
        _SUBSCRIBERS.remove(callback)


def publish(kind: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
    event = {
        "kind": kind,
        "payload": payload or {},
        "timestamp": datetime.utcnow(),
    }
    _EVENTS.append(event)

    for callback in list(_SUBSCRIBERS):
        try:
            callback(event)
        except Exception:
            # one broken subscriber must not starve the others
            logger.exception(f"Event subscriber failed for '{kind}'")

    return event


def get_recent_events(limit: int = 200) -> list[dict[str, Any]]:
    if limit <= 0:
        return []
    return list(_EVENTS)[-limit:]


def reset() -> None:
    _SUBSCRIBERS.clear()
    _EVENTS.clear()


def log_event(event: dict[str, Any]) -> None:
    logger.debug(f"[event] {event['kind']}: {event['payload']}")
