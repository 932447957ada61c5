from sqlalchemy.orm import Session
from fastapi import HTTPException
from pydantic import ValidationError
from typing import Optional
from loguru import logger

from app.assistant.directives import build_inventory_context, parse_add_directive
from app.config import settings
from app.stock.inventory import schemas as inventory_schemas
from app.stock.inventory import service as inventory_service
from app.stock.inventory.models import StockItem
from app.warehouses.models import Warehouse


def get_context(db: Session, warehouse_id: Optional[str] = None):
    items = db.query(StockItem).order_by(StockItem.name.asc()).all()
    warehouses = db.query(Warehouse).order_by(Warehouse.name.asc()).all()

    return {
        "context": build_inventory_context(
            items,
            warehouses,
            current_warehouse_id=warehouse_id,
            limit=settings.AI_CONTEXT_LIMIT,
            currency=settings.CURRENCY_SYMBOL,
        )
    }


def apply_reply(
    db: Session,
    reply: str,
    warehouse_id: Optional[str] = None,
    user_email: Optional[str] = None,
):
    """
    Applies an "add item" directive embedded in an assistant reply.
    The reply text is always returned, with the directive block removed.
    """
    text, payload = parse_add_directive(reply)
    if payload is None:
        return {"message": text, "applied": False}

    if not warehouse_id:
        return {"message": text, "applied": False, "reason": "Please select a warehouse first."}

    try:
        data = inventory_schemas.StockItemCreate(
            warehouse_id=warehouse_id,
            name=payload.get("name") or "",
            category=payload.get("category") or "General",
            quantity=payload.get("quantity") or 0,
            price=payload.get("price") or 0,
            min_threshold=payload.get("minThreshold") or settings.DEFAULT_MIN_THRESHOLD,
            description=payload.get("description") or "Added by AI",
            source="AI Assistant",
        )
        item = inventory_service.create_item(db, data, user_email=user_email)
    except ValidationError as e:
        logger.warning(f"Assistant directive rejected: {e}")
        return {"message": text, "applied": False, "reason": "Directive has invalid item fields"}
    except HTTPException as e:
        if e.status_code >= 500:
            raise
        logger.warning(f"Assistant directive rejected: {e.detail}")
        return {"message": text, "applied": False, "reason": str(e.detail)}

    return {"message": text, "applied": True, "item": item}
