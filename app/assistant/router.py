from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.assistant import schemas, service
from app.users.identity import get_actor_email

router = APIRouter()


@router.get("/context", response_model=schemas.InventoryContextOut)
def get_context(warehouse_id: Optional[str] = None, db: Session = Depends(get_db)):
    """Inventory summary to send along with the conversation."""
    return service.get_context(db, warehouse_id)


@router.post("/apply", response_model=schemas.AppliedReplyOut)
def apply_reply(
    payload: schemas.AssistantReply,
    db: Session = Depends(get_db),
    actor: str = Depends(get_actor_email),
):
    return service.apply_reply(db, payload.reply, payload.warehouse_id, user_email=actor)
