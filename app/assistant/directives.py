"""Inventory context for the chat assistant and its "add item" directive.

The assistant replies in free text and, when asked to add stock, appends a
JSON block between ``||JSON||`` and ``||END||``::

    ||JSON||
    {"action": "add", "item": {"name": "Mouse", "quantity": 50, "price": 100}}
    ||END||
"""

from __future__ import annotations

import json
import re
from typing import Iterable, Optional

from loguru import logger


DIRECTIVE_PATTERN = re.compile(r"\|\|JSON\|\|(.*?)\|\|END\|\|", re.DOTALL)

GLOBAL_VIEW = "Global Overview"


def build_inventory_context(
    items: Iterable,
    warehouses: Iterable,
    current_warehouse_id: Optional[str] = None,
    limit: int = 50,
    currency: str = "",
) -> str:
    warehouses = list(warehouses)
    names = {w.id: w.name for w in warehouses}

    if current_warehouse_id:
        relevant = [i for i in items if i.warehouse_id == current_warehouse_id]
    else:
        relevant = list(items)

    lines = []
    for item in relevant[:limit]:
        suffix = ""
        if not current_warehouse_id:
            suffix = f" ({names.get(item.warehouse_id, 'Unknown')})"
        lines.append(f"- {item.name}{suffix}: {item.quantity} units @ {currency}{item.price}")

    location = names.get(current_warehouse_id, GLOBAL_VIEW) if current_warehouse_id else GLOBAL_VIEW
    return "\n".join([
        f"Location: {location}",
        f"Warehouses: {', '.join(w.name for w in warehouses)}",
        f"Current Warehouse ID: {current_warehouse_id or 'NONE'}",
        "Stock Sample:",
        *lines,
    ])


def parse_add_directive(reply: str) -> tuple[str, Optional[dict]]:
    """Returns the reply without the block, and the item payload if any."""
    match = DIRECTIVE_PATTERN.search(reply or "")
    if not match:
        return (reply or "").strip(), None

    text = (reply[:match.start()] + reply[match.end():]).strip()
    try:
        command = json.loads(match.group(1))
    except json.JSONDecodeError:
        logger.warning("Assistant directive is not valid JSON, ignoring it")
        return text, None

    if not isinstance(command, dict) or command.get("action") != "add":
        return text, None

    item = command.get("item")
    if not isinstance(item, dict):
        return text, None
    return text, item
