from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from ..db import get_db
from ..errors import NotFound
from ..models import ServiceRequest
from ..schemas import RequestOut, RequestStatusIn, MessageOut
from ..security import require_admin
from ..services import notifications

router = APIRouter(prefix="/api/admin/requests", tags=["admin-requests"], dependencies=[Depends(require_admin)])


def _get_request(db: Session, request_id: int) -> ServiceRequest:
    req = db.get(ServiceRequest, request_id)
    if not req:
        raise NotFound("Request not found")
    return req


@router.get("", response_model=List[RequestOut])
def requests_index(db: Session = Depends(get_db)):
    return (
        db.query(ServiceRequest)
        .options(joinedload(ServiceRequest.user), joinedload(ServiceRequest.menu_item))
        .order_by(ServiceRequest.created_at.desc())
        .all()
    )


@router.put("/{request_id}", response_model=RequestOut)
def requests_update_status(request_id: int, payload: RequestStatusIn, db: Session = Depends(get_db)):
    req = _get_request(db, request_id)
    req.status = payload.status
    db.commit()
    db.refresh(req)
    if req.menu_item is not None:
        notifications.notify_request_status_change(db, req.user_id, req.id, req.status, req.menu_item.name)
    return req


@router.delete("/{request_id}", response_model=MessageOut)
def requests_delete(request_id: int, db: Session = Depends(get_db)):
    req = _get_request(db, request_id)
    db.delete(req)
    db.commit()
    return {"message": "Request deleted successfully"}
