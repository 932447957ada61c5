from sqlalchemy import func
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from loguru import logger

from app.events import bus
from app.stock.inventory.models import StockItem
from . import models, schemas


# ================= CREATE =================
def create_warehouse(db: Session, warehouse: schemas.WarehouseCreate):
    name = (warehouse.name or "").strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Warehouse name is required"
        )

    db_warehouse = models.Warehouse(
        name=name,
        location=(warehouse.location or "").strip() or None,
        type=(warehouse.type or "General").strip() or "General",
    )

    db.add(db_warehouse)
    db.commit()
    db.refresh(db_warehouse)

    logger.info(f"Warehouse created: {db_warehouse.name}")
    bus.publish(bus.WAREHOUSE_CREATED, {"warehouse_id": db_warehouse.id})
    return db_warehouse


# ================= LIST =================
def list_warehouses(db: Session):
    item_counts = (
        db.query(StockItem.warehouse_id, func.count(StockItem.id).label("item_count"))
        .group_by(StockItem.warehouse_id)
        .subquery()
    )

    rows = (
        db.query(models.Warehouse, item_counts.c.item_count)
        .outerjoin(item_counts, item_counts.c.warehouse_id == models.Warehouse.id)
        .order_by(models.Warehouse.name)
        .all()
    )

    return [
        schemas.WarehouseListOut(
            id=warehouse.id,
            name=warehouse.name,
            location=warehouse.location,
            type=warehouse.type,
            created_at=warehouse.created_at,
            item_count=item_count or 0,
        )
        for warehouse, item_count in rows
    ]


def get_warehouse(db: Session, warehouse_id: str):
    db_warehouse = (
        db.query(models.Warehouse)
        .filter(models.Warehouse.id == warehouse_id)
        .first()
    )

    if not db_warehouse:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Warehouse not found"
        )
    return db_warehouse


# ================= DELETE =================
def delete_warehouse(db: Session, warehouse_id: str):
    db_warehouse = get_warehouse(db, warehouse_id)

    # items are left in place; they stay reachable by id
    db.delete(db_warehouse)
    db.commit()

    logger.info(f"Warehouse deleted: {warehouse_id}")
    bus.publish(bus.WAREHOUSE_DELETED, {"warehouse_id": warehouse_id})
    return {"message": "Warehouse deleted successfully"}
