from sqlalchemy import Integer, String, Numeric, Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base

class MenuItem(Base):
    __tablename__ = "menu_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    price: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    requests: Mapped[list["ServiceRequest"]] = relationship(back_populates="menu_item")
