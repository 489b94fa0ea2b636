from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import Integer, String, Numeric, Boolean, Text, DateTime, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base

class RoomStatus(str, PyEnum):
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    MAINTENANCE = "MAINTENANCE"
    CLEANING = "CLEANING"

# Rooms in these states cannot take new reservations
UNBOOKABLE_STATUSES = (RoomStatus.MAINTENANCE, RoomStatus.CLEANING)

class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="SINGLE")
    price: Mapped[float] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    floor: Mapped[str | None] = mapped_column(String(20), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    amenities_csv: Mapped[str] = mapped_column("amenities", Text, nullable=False, default="")
    status: Mapped[RoomStatus] = mapped_column(Enum(RoomStatus), default=RoomStatus.AVAILABLE, nullable=False)
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    reservations: Mapped[list["Reservation"]] = relationship(back_populates="room", cascade="all, delete-orphan")

    @property
    def amenities(self) -> list[str]:
        if not self.amenities_csv:
            return []
        return [tag.strip() for tag in self.amenities_csv.split(",") if tag.strip()]

    @amenities.setter
    def amenities(self, tags: list[str]) -> None:
        self.amenities_csv = ",".join(tag.strip() for tag in tags if tag and tag.strip())

    def mark_occupied(self) -> None:
        if self.status in UNBOOKABLE_STATUSES:
            return
        self.status = RoomStatus.OCCUPIED
        self.available = False

    def mark_available(self) -> None:
        self.status = RoomStatus.AVAILABLE
        self.available = True
