from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import NotFound
from ..models import MenuItem
from ..schemas import MenuItemIn, MenuItemUpdateIn, MenuItemOut
from ..security import require_admin
from ..services import notifications

router = APIRouter(prefix="/api/admin/menu", tags=["admin-menu"], dependencies=[Depends(require_admin)])


def _get_item(db: Session, item_id: int) -> MenuItem:
    item = db.get(MenuItem, item_id)
    if not item:
        raise NotFound("Menu item not found")
    return item


@router.get("", response_model=List[MenuItemOut])
def menu_index(db: Session = Depends(get_db)):
    return db.query(MenuItem).order_by(MenuItem.category.asc(), MenuItem.name.asc()).all()


@router.post("", response_model=MenuItemOut, status_code=201)
def menu_create(payload: MenuItemIn, db: Session = Depends(get_db)):
    item = MenuItem(**payload.model_dump())
    db.add(item)
    db.commit()
    db.refresh(item)
    notifications.notify_menu_update(db, item.name, is_new_item=True)
    return item


@router.put("/{item_id}", response_model=MenuItemOut)
def menu_update(item_id: int, payload: MenuItemUpdateIn, db: Session = Depends(get_db)):
    item = _get_item(db, item_id)
    changes = payload.model_dump(exclude_none=True)
    for field, value in changes.items():
        setattr(item, field, value)
    db.commit()
    db.refresh(item)
    # Guests only hear about changes they can see on the menu
    if {"name", "price", "available"} & changes.keys():
        notifications.notify_menu_update(db, item.name, is_new_item=False)
    return item


@router.delete("/{item_id}", status_code=204)
def menu_delete(item_id: int, db: Session = Depends(get_db)):
    item = _get_item(db, item_id)
    db.delete(item)
    db.commit()
    return Response(status_code=204)
