from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session, joinedload

from ..db import get_db
from ..errors import NotFound, ValidationFailed
from ..models import Invoice, User
from ..schemas import InvoiceIn, InvoiceUpdateIn, InvoiceOut
from ..security import require_admin
from ..services import notifications

router = APIRouter(prefix="/api/admin/invoices", tags=["admin-billing"], dependencies=[Depends(require_admin)])


def _get_invoice(db: Session, invoice_id: int) -> Invoice:
    invoice = db.get(Invoice, invoice_id)
    if not invoice:
        raise NotFound("Invoice not found")
    return invoice


def _ensure_user(db: Session, user_id: int):
    if not db.get(User, user_id):
        raise ValidationFailed({"userId": f"User with ID {user_id} not found"})


@router.get("", response_model=List[InvoiceOut])
def invoices_index(db: Session = Depends(get_db)):
    return db.query(Invoice).options(joinedload(Invoice.user)).order_by(Invoice.created_at.desc()).all()


@router.post("", response_model=InvoiceOut, status_code=201)
def invoices_create(payload: InvoiceIn, db: Session = Depends(get_db)):
    _ensure_user(db, payload.user_id)
    invoice = Invoice(user_id=payload.user_id, amount=payload.amount, status=payload.status)
    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    return invoice


@router.put("/{invoice_id}", response_model=InvoiceOut)
def invoices_update(invoice_id: int, payload: InvoiceUpdateIn, db: Session = Depends(get_db)):
    invoice = _get_invoice(db, invoice_id)
    previous_status = invoice.status
    if payload.user_id is not None:
        _ensure_user(db, payload.user_id)
        invoice.user_id = payload.user_id
    if payload.amount is not None:
        invoice.amount = payload.amount
    if payload.status is not None:
        invoice.status = payload.status
    db.commit()
    db.refresh(invoice)
    if invoice.status != previous_status:
        notifications.notify_payment_update(db, invoice.user_id, invoice.id, invoice.amount, invoice.status)
    return invoice


@router.delete("/{invoice_id}", status_code=204)
def invoices_delete(invoice_id: int, db: Session = Depends(get_db)):
    invoice = _get_invoice(db, invoice_id)
    db.delete(invoice)
    db.commit()
    return Response(status_code=204)
