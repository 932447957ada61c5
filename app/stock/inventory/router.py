from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.stock.inventory import schemas, service
from app.users.identity import get_actor_email

router = APIRouter()


@router.post(
    "/",
    response_model=schemas.StockItemOut,
    status_code=status.HTTP_201_CREATED
)
def create_item(
    item: schemas.StockItemCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor_email),
):
    return service.create_item(db, item, user_email=actor)


@router.get("/", response_model=List[schemas.StockItemOut])
def list_items(
    warehouse_id: Optional[str] = None,
    category: Optional[str] = None,
    name: Optional[str] = None,
    low_stock_only: bool = False,
    db: Session = Depends(get_db),
):
    return service.list_items(
        db,
        warehouse_id=warehouse_id,
        category=category,
        name=name,
        low_stock_only=low_stock_only,
    )


@router.post("/import-excel", response_model=schemas.ImportResult)
def import_items_from_excel(
    warehouse_id: str = Form(...),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor_email),
):
    return service.import_items_from_excel(db, warehouse_id, file, user_email=actor)


@router.post("/dispatch-bulk", response_model=schemas.BulkDispatchOut)
def dispatch_bulk(
    request: schemas.BulkDispatchRequest,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor_email),
):
    """
    Sell several items on one invoice.
    Either every line is recorded or none is.
    """
    return service.dispatch_bulk(db, request, user_email=actor)


@router.get("/{item_id}", response_model=schemas.StockItemOut)
def get_item(item_id: str, db: Session = Depends(get_db)):
    return service.get_item_or_404(db, item_id)


@router.put("/{item_id}", response_model=schemas.StockItemOut)
def update_item(
    item_id: str,
    item: schemas.StockItemUpdate,
    db: Session = Depends(get_db),
):
    return service.update_item(db, item_id, item)


@router.delete("/{item_id}")
def delete_item(item_id: str, db: Session = Depends(get_db)):
    return service.delete_item(db, item_id)


@router.post("/{item_id}/receive", response_model=schemas.MovementOut)
def receive_stock(
    item_id: str,
    request: schemas.ReceiveRequest,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor_email),
):
    item, transaction = service.receive(
        db,
        item_id,
        request.quantity,
        cost=request.cost,
        source=request.source,
        user_email=actor,
    )
    return {"item": item, "transaction": transaction}


@router.post("/{item_id}/dispatch", response_model=schemas.MovementOut)
def dispatch_stock(
    item_id: str,
    request: schemas.DispatchRequest,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor_email),
):
    item, transaction = service.dispatch(
        db,
        item_id,
        request.quantity,
        price=request.price,
        customer=request.customer,
        tax_percent=request.tax_percent,
        user_email=actor,
    )
    return {"item": item, "transaction": transaction}


@router.post("/{item_id}/damage", response_model=schemas.MovementOut)
def report_damage(
    item_id: str,
    request: schemas.DamageRequest,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor_email),
):
    item, transaction = service.report_damage(
        db,
        item_id,
        request.quantity,
        reason=request.reason,
        user_email=actor,
    )
    return {"item": item, "transaction": transaction}
