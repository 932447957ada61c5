from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from fastapi import HTTPException, UploadFile, status
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
from loguru import logger
import re

import pandas as pd

from app.config import settings
from app.events import bus
from app.stock.inventory.models import StockItem
from app.stock.inventory import schemas
from app.stock.transactions.models import StockTransaction
from app.warehouses.models import Warehouse


HUNDRED = Decimal("100")


# --------------------------
# Lookups
# --------------------------
def get_item(db: Session, item_id: str) -> Optional[StockItem]:
    return db.query(StockItem).filter(StockItem.id == item_id).first()


def get_item_or_404(db: Session, item_id: str) -> StockItem:
    item = get_item(db, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")
    return item


def list_items(
    db: Session,
    warehouse_id: str | None = None,
    category: str | None = None,
    name: str | None = None,
    low_stock_only: bool = False,
):
    query = db.query(StockItem)

    if warehouse_id:
        query = query.filter(StockItem.warehouse_id == warehouse_id)

    if category:
        query = query.filter(StockItem.category == category.strip())

    if name:
        query = query.filter(StockItem.name.ilike(f"%{name.strip()}%"))

    if low_stock_only:
        query = query.filter(StockItem.quantity < StockItem.min_threshold)

    return query.order_by(StockItem.name.asc()).all()


# --------------------------
# Validation (before any write)
# --------------------------
def _require_positive(quantity: int):
    if quantity is None or quantity <= 0:
        raise HTTPException(status_code=400, detail="Quantity must be greater than zero")


def _require_available(item: StockItem, quantity: int):
    _require_positive(quantity)
    if quantity > item.quantity:
        raise HTTPException(
            status_code=400,
            detail=f"Insufficient stock for {item.name}. Available: {item.quantity}, Requested: {quantity}",
        )


def _require_text(value: str | None, field: str) -> str:
    if value is None or not str(value).strip():
        raise HTTPException(status_code=400, detail=f"{field} is required")
    return str(value).strip()


# --------------------------
# Internal: ledger change + log append in one commit
# --------------------------
def _apply_delta(db: Session, item_id: str, delta: int) -> bool:
    stmt = (
        update(StockItem)
        .where(StockItem.id == item_id)
        .values(quantity=StockItem.quantity + delta, last_updated=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    if delta < 0:
        # conditional decrement: never below zero, even against another session
        stmt = stmt.where(StockItem.quantity >= -delta)
    return db.execute(stmt).rowcount == 1


def _commit_movements(db: Session, movements: list[tuple[StockItem, int, StockTransaction]]):
    try:
        for item, delta, transaction in movements:
            if not _apply_delta(db, item.id, delta):
                db.rollback()
                logger.warning(f"Stock for {item.name} changed concurrently, movement rejected")
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"Stock for {item.name} changed while saving. Please retry.",
                )
            db.add(transaction)
        db.commit()
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to record stock movement: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to record stock movement: {str(e)}")

    for item, _, transaction in movements:
        db.refresh(item)
        db.refresh(transaction)


def _movement_payload(item: StockItem, transaction: StockTransaction) -> dict:
    return {
        "item_id": item.id,
        "warehouse_id": item.warehouse_id,
        "transaction_id": transaction.id,
        "type": transaction.type,
        "quantity": transaction.quantity,
    }


# --------------------------
# Create item (opening stock recorded as IN)
# --------------------------
def create_item(db: Session, data: schemas.StockItemCreate, user_email: str | None = None) -> StockItem:
    warehouse = db.query(Warehouse).filter(Warehouse.id == data.warehouse_id).first()
    if not warehouse:
        raise HTTPException(status_code=400, detail="Please select a warehouse first.")

    name = _require_text(data.name, "Item name")
    if data.quantity is None or data.quantity < 0:
        raise HTTPException(status_code=400, detail="Quantity cannot be negative")
    if data.price is None or data.price < 0:
        raise HTTPException(status_code=400, detail="Price cannot be negative")

    now = datetime.utcnow()
    item = StockItem(
        warehouse_id=warehouse.id,
        name=name,
        category=(data.category or "General").strip() or "General",
        quantity=data.quantity,
        price=data.price,
        min_threshold=data.min_threshold or settings.DEFAULT_MIN_THRESHOLD,
        description=data.description,
        source=data.source,
        last_updated=now,
    )

    try:
        db.add(item)
        db.flush()  # get item id without committing yet

        if data.quantity > 0:
            db.add(
                StockTransaction(
                    item_id=item.id,
                    type="IN",
                    quantity=data.quantity,
                    price=data.price,
                    cost_price=data.price,
                    date=now,
                    party_name=data.source or "Unknown",
                    user_email=user_email,
                )
            )

        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create item {name}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to create item: {str(e)}")

    db.refresh(item)
    logger.info(f"Item created: {item.name} ({item.quantity} units) in warehouse {item.warehouse_id}")
    bus.publish(bus.ITEM_CREATED, {"item_id": item.id, "warehouse_id": item.warehouse_id})
    return item


def update_item(db: Session, item_id: str, data: schemas.StockItemUpdate) -> StockItem:
    item = get_item_or_404(db, item_id)

    update_data = data.model_dump(exclude_unset=True)
    if "name" in update_data:
        update_data["name"] = _require_text(update_data["name"], "Item name")
    if "category" in update_data:
        update_data["category"] = _require_text(update_data["category"], "Category")
    for field, label in (("price", "Price"), ("min_threshold", "Minimum threshold")):
        if field in update_data and update_data[field] is None:
            raise HTTPException(status_code=400, detail=f"{label} is required")

    for field, value in update_data.items():
        setattr(item, field, value)
    item.last_updated = datetime.utcnow()

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update item {item_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to update item: {str(e)}")

    db.refresh(item)

    bus.publish(bus.ITEM_UPDATED, {"item_id": item.id, "warehouse_id": item.warehouse_id})
    return item


# --------------------------
# IN: receive stock
# --------------------------
def receive(
    db: Session,
    item_id: str,
    quantity: int,
    cost: Decimal | None = None,
    source: str | None = None,
    user_email: str | None = None,
):
    item = get_item_or_404(db, item_id)
    _require_positive(quantity)

    # ledger price stays as is; the record carries what this batch cost
    unit_cost = item.price if cost is None else cost
    transaction = StockTransaction(
        item_id=item.id,
        type="IN",
        quantity=quantity,
        price=unit_cost,
        cost_price=unit_cost,
        date=datetime.utcnow(),
        party_name=(source or "").strip() or "Stock Update",
        user_email=user_email,
    )

    _commit_movements(db, [(item, quantity, transaction)])

    logger.info(f"Received {quantity} x {item.name}, now {item.quantity}")
    bus.publish(bus.STOCK_RECEIVED, _movement_payload(item, transaction))
    return item, transaction


# --------------------------
# OUT: dispatch (sale)
# --------------------------
def dispatch(
    db: Session,
    item_id: str,
    quantity: int,
    price: Decimal,
    customer: str,
    tax_percent: Decimal | None = None,
    user_email: str | None = None,
):
    item = get_item_or_404(db, item_id)
    try:
        _require_available(item, quantity)
        customer = _require_text(customer, "Customer name")
    except HTTPException as e:
        logger.warning(f"Dispatch rejected for {item.name}: {e.detail}")
        raise

    transaction = StockTransaction(
        item_id=item.id,
        type="OUT",
        quantity=quantity,
        price=price,
        cost_price=item.price,  # historical cost frozen at sale time
        tax_percent=tax_percent,
        date=datetime.utcnow(),
        party_name=customer,
        user_email=user_email,
    )

    _commit_movements(db, [(item, -quantity, transaction)])

    logger.info(f"Dispatched {quantity} x {item.name} to {customer}, now {item.quantity}")
    bus.publish(bus.STOCK_DISPATCHED, _movement_payload(item, transaction))
    return item, transaction


# --------------------------
# DAMAGE: write-off at cost
# --------------------------
def report_damage(
    db: Session,
    item_id: str,
    quantity: int,
    reason: str,
    user_email: str | None = None,
):
    item = get_item_or_404(db, item_id)
    try:
        _require_available(item, quantity)
        reason = _require_text(reason, "Reason")
    except HTTPException as e:
        logger.warning(f"Damage report rejected for {item.name}: {e.detail}")
        raise

    transaction = StockTransaction(
        item_id=item.id,
        type="DAMAGE",
        quantity=quantity,
        price=item.price,
        cost_price=item.price,
        date=datetime.utcnow(),
        party_name=reason,
        user_email=user_email,
    )

    _commit_movements(db, [(item, -quantity, transaction)])

    logger.info(f"Damage recorded: {quantity} x {item.name} ({reason}), now {item.quantity}")
    bus.publish(bus.STOCK_DAMAGED, _movement_payload(item, transaction))
    return item, transaction


# --------------------------
# Delete item (history stays, orphaned)
# --------------------------
def delete_item(db: Session, item_id: str):
    item = get_item_or_404(db, item_id)
    warehouse_id = item.warehouse_id

    db.delete(item)
    db.commit()

    logger.info(f"Item deleted: {item_id}")
    bus.publish(bus.ITEM_DELETED, {"item_id": item_id, "warehouse_id": warehouse_id})
    return {"message": "Item deleted successfully"}


# --------------------------
# Bulk dispatch: all lines or none
# --------------------------
def dispatch_bulk(db: Session, request: schemas.BulkDispatchRequest, user_email: str | None = None):
    customer = _require_text(request.customer, "Customer name")
    if not request.lines:
        raise HTTPException(status_code=400, detail="Please add at least one item")

    # 1. Validate every line against what is available in total
    items: dict[str, StockItem] = {}
    requested: dict[str, int] = {}
    for line in request.lines:
        item = items.get(line.item_id) or get_item_or_404(db, line.item_id)
        items[item.id] = item
        _require_positive(line.quantity)
        requested[item.id] = requested.get(item.id, 0) + line.quantity

    for item_id, quantity in requested.items():
        try:
            _require_available(items[item_id], quantity)
        except HTTPException as e:
            logger.warning(f"Bulk dispatch rejected: {e.detail}")
            raise

    # 2. Apply all lines in one commit
    now = datetime.utcnow()
    movements = []
    subtotal = Decimal("0")
    total_tax = Decimal("0")
    for line in request.lines:
        item = items[line.item_id]
        line_total = Decimal(line.quantity) * line.price
        subtotal += line_total
        total_tax += line_total * (line.tax_percent or Decimal("0")) / HUNDRED

        transaction = StockTransaction(
            item_id=item.id,
            type="OUT",
            quantity=line.quantity,
            price=line.price,
            cost_price=item.price,
            tax_percent=line.tax_percent,
            date=now,
            party_name=customer,
            user_email=user_email,
        )
        movements.append((item, -line.quantity, transaction))

    _commit_movements(db, movements)

    logger.info(f"Bulk dispatch to {customer}: {len(movements)} lines, subtotal {subtotal}")
    for item, _, transaction in movements:
        bus.publish(bus.STOCK_DISPATCHED, _movement_payload(item, transaction))

    return {
        "customer": customer,
        "transactions": [transaction for _, _, transaction in movements],
        "subtotal": subtotal,
        "total_tax": total_tax,
        "grand_total": subtotal + total_tax,
    }


# --------------------------------------------------
# Helper: Clean price values from Excel
# --------------------------------------------------
def clean_price(value) -> Decimal | None:
    """
    Accepts: int, float, str (₹1,200.50), or NaN
    Returns: Decimal, or None when nothing numeric is left
    """
    if value is None or pd.isna(value):
        return None

    if isinstance(value, (int, float)):
        return Decimal(str(value))

    value = re.sub(r"[^\d.]", "", str(value))
    try:
        return Decimal(value)
    except InvalidOperation:
        return None


def clean_quantity(value) -> int | None:
    if value is None or pd.isna(value):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def _optional_text(row, column: str) -> str | None:
    if column not in row or pd.isna(row[column]):
        return None
    text = str(row[column]).strip()
    return text or None


# --------------------------------------------------
# Bulk add from Excel
# --------------------------------------------------
def import_items_from_excel(
    db: Session,
    warehouse_id: str,
    file: UploadFile,
    user_email: str | None = None,
):
    warehouse = db.query(Warehouse).filter(Warehouse.id == warehouse_id).first()
    if not warehouse:
        raise HTTPException(status_code=400, detail="Please select a warehouse first.")

    if not file.filename.lower().endswith(".xlsx"):
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Upload an .xlsx workbook"
        )

    try:
        df = pd.read_excel(file.file)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Could not read Excel file: {str(e)}")

    required_columns = {"name", "category", "quantity", "price"}

    # Normalize column names: "Min Threshold" -> "min_threshold"
    df.columns = [str(c).strip().lower().replace(" ", "_") for c in df.columns]
    df = df.rename(columns={"minthreshold": "min_threshold"})

    if not required_columns.issubset(df.columns):
        raise HTTPException(
            status_code=400,
            detail=f"Excel must contain columns: {sorted(required_columns)}"
        )

    now = datetime.utcnow()
    imported = 0
    skipped = 0

    try:
        for _, row in df.iterrows():
            name = _optional_text(row, "name")
            category = _optional_text(row, "category")
            quantity = clean_quantity(row["quantity"])
            price = clean_price(row["price"])

            if not name or not category or not quantity or quantity <= 0 or not price or price <= 0:
                skipped += 1
                continue

            min_threshold = clean_quantity(row["min_threshold"]) if "min_threshold" in row else None
            source = _optional_text(row, "source")

            item = StockItem(
                warehouse_id=warehouse.id,
                name=name,
                category=category,
                quantity=quantity,
                price=price,
                min_threshold=min_threshold or settings.DEFAULT_MIN_THRESHOLD,
                description=_optional_text(row, "description"),
                source=source,
                last_updated=now,
            )
            db.add(item)
            db.flush()

            db.add(
                StockTransaction(
                    item_id=item.id,
                    type="IN",
                    quantity=quantity,
                    price=price,
                    cost_price=price,
                    date=now,
                    party_name=source or "Bulk Purchase",
                    user_email=user_email,
                )
            )
            imported += 1

        if not imported:
            raise HTTPException(
                status_code=409,
                detail={
                    "message": "Import unsuccessful",
                    "imported": 0,
                    "skipped": skipped,
                    "reason": "All rows were invalid"
                }
            )

        db.commit()

    except HTTPException:
        db.rollback()
        raise

    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Excel import failed: {e}")
        raise HTTPException(
            status_code=500,
            detail=f"Import failed: {str(e)}"
        )

    logger.info(f"Imported {imported} items into warehouse {warehouse.id}, skipped {skipped}")
    bus.publish(bus.ITEM_CREATED, {"warehouse_id": warehouse.id, "imported": imported})

    return {
        "message": "Import completed successfully",
        "imported": imported,
        "skipped": skipped
    }
