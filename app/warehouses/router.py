from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from . import schemas, service

router = APIRouter()


# ================= CREATE =================
@router.post(
    "/",
    response_model=schemas.WarehouseOut,
    status_code=status.HTTP_201_CREATED
)
def create_warehouse(
    warehouse: schemas.WarehouseCreate,
    db: Session = Depends(get_db)
):
    return service.create_warehouse(db, warehouse)


# ================= LIST =================
@router.get(
    "/",
    response_model=List[schemas.WarehouseListOut]
)
def list_warehouses(db: Session = Depends(get_db)):
    return service.list_warehouses(db)


@router.get("/{warehouse_id}", response_model=schemas.WarehouseOut)
def get_warehouse(warehouse_id: str, db: Session = Depends(get_db)):
    return service.get_warehouse(db, warehouse_id)


# ================= DELETE =================
@router.delete("/{warehouse_id}")
def delete_warehouse(warehouse_id: str, db: Session = Depends(get_db)):
    return service.delete_warehouse(db, warehouse_id)
