from datetime import date, datetime
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import ReservationStatus, RoomStatus, InvoiceStatus, RequestStatus, UserRole, NotificationType


def _loose_enum(enum_cls: type[Enum], value):
    """Match enum members case-insensitively by value or name ('Checked-in' -> CHECKED_IN)."""
    if value is None or isinstance(value, enum_cls):
        return value
    key = str(value).strip().lower().replace("-", "_").replace(" ", "_")
    for member in enum_cls:
        if member.value.lower() == key or member.name.lower() == key:
            return member
    raise ValueError(f"must be one of: {', '.join(m.value for m in enum_cls)}")


def _date_only(value):
    # Browsers send full ISO timestamps for date pickers; keep the calendar date
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    return value


def _split_amenities(value):
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(",") if tag.strip()]
    return value


def _stringify(value):
    return str(value) if value is not None else value


def _parse_role(value):
    return _loose_enum(UserRole, value)


def _parse_room_status(value):
    return _loose_enum(RoomStatus, value)


def _parse_reservation_status(value):
    return _loose_enum(ReservationStatus, value)


def _parse_invoice_status(value):
    return _loose_enum(InvoiceStatus, value)


def _parse_request_status(value):
    return _loose_enum(RequestStatus, value)


class APIModel(BaseModel):
    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


# ==== Users & auth ====

class UserBrief(APIModel):
    id: int
    name: str
    email: str

class UserOut(APIModel):
    id: int
    name: str
    email: str
    role: UserRole
    staff_role: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

class UserCreateIn(APIModel):
    name: str = Field(min_length=2)
    email: str
    password: Optional[str] = None
    role: UserRole = UserRole.GUEST
    staff_role: Optional[str] = None
    is_active: bool = True

    normalize_role = field_validator("role", mode="before")(_parse_role)

class UserUpdateIn(APIModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[UserRole] = None
    staff_role: Optional[str] = None
    is_active: Optional[bool] = None

    normalize_role = field_validator("role", mode="before")(_parse_role)

class SignupIn(APIModel):
    name: str = Field(min_length=2)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=6)

class SigninIn(APIModel):
    email: str
    password: str = Field(min_length=6)

class TokenOut(APIModel):
    token: str
    user: UserOut


# ==== Rooms ====

class RoomBrief(APIModel):
    id: int
    number: str
    type: str
    price: float
    status: RoomStatus
    capacity: Optional[int] = None

class RoomOut(APIModel):
    id: int
    number: str
    type: str
    price: float
    capacity: int
    floor: Optional[str] = None
    description: Optional[str] = None
    amenities: List[str] = []
    status: RoomStatus
    available: bool

class RoomIn(APIModel):
    number: str = Field(min_length=1)
    type: str = "SINGLE"
    price: float = Field(ge=0)
    capacity: int = Field(default=2, ge=1)
    floor: Optional[str] = None
    description: Optional[str] = None
    amenities: List[str] = []
    status: RoomStatus = RoomStatus.AVAILABLE
    available: bool = True

    normalize_status = field_validator("status", mode="before")(_parse_room_status)
    split_amenities = field_validator("amenities", mode="before")(_split_amenities)
    stringify = field_validator("number", "floor", mode="before")(_stringify)

class RoomUpdateIn(APIModel):
    number: Optional[str] = None
    type: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    capacity: Optional[int] = Field(default=None, ge=1)
    floor: Optional[str] = None
    description: Optional[str] = None
    amenities: Optional[List[str]] = None
    status: Optional[RoomStatus] = None
    available: Optional[bool] = None

    normalize_status = field_validator("status", mode="before")(_parse_room_status)
    split_amenities = field_validator("amenities", mode="before")(_split_amenities)
    stringify = field_validator("number", "floor", mode="before")(_stringify)


# ==== Reservations ====

class ConflictOut(APIModel):
    id: int
    user_id: int
    room_id: int
    check_in: date
    check_out: date
    status: ReservationStatus

class ReservationOut(APIModel):
    id: int
    user_id: int
    room_id: int
    check_in: date
    check_out: date
    status: ReservationStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserBrief] = None
    room: Optional[RoomBrief] = None

class RoomDetailOut(RoomOut):
    next_reservation: Optional[ConflictOut] = None

class ReservationCreateIn(APIModel):
    user_id: int
    room_id: int
    check_in: date
    check_out: date
    status: ReservationStatus = ReservationStatus.PENDING

    normalize_dates = field_validator("check_in", "check_out", mode="before")(_date_only)
    normalize_status = field_validator("status", mode="before")(_parse_reservation_status)

class ReservationUpdateIn(APIModel):
    user_id: Optional[int] = None
    room_id: Optional[int] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    status: Optional[ReservationStatus] = None

    normalize_dates = field_validator("check_in", "check_out", mode="before")(_date_only)
    normalize_status = field_validator("status", mode="before")(_parse_reservation_status)

class ReservationOptionsOut(APIModel):
    users: List[UserBrief]
    rooms: List[RoomBrief]
    check_in: date
    check_out: date


# ==== Menu, invoices, requests ====

class MenuItemOut(APIModel):
    id: int
    name: str
    category: str
    price: float
    available: bool
    description: Optional[str] = None

class MenuItemIn(APIModel):
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    price: float = Field(ge=0)
    available: bool = True
    description: Optional[str] = None

class MenuItemUpdateIn(APIModel):
    name: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    available: Optional[bool] = None
    description: Optional[str] = None

class InvoiceOut(APIModel):
    id: int
    user_id: int
    amount: float
    status: InvoiceStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserBrief] = None

class InvoiceIn(APIModel):
    user_id: int
    amount: float = Field(ge=0)
    status: InvoiceStatus = InvoiceStatus.UNPAID

    normalize_status = field_validator("status", mode="before")(_parse_invoice_status)

class InvoiceUpdateIn(APIModel):
    user_id: Optional[int] = None
    amount: Optional[float] = Field(default=None, ge=0)
    status: Optional[InvoiceStatus] = None

    normalize_status = field_validator("status", mode="before")(_parse_invoice_status)

class RequestOut(APIModel):
    id: int
    user_id: int
    menu_item_id: Optional[int] = None
    menu_item: Optional[MenuItemOut] = None
    quantity: int
    special_instructions: str = ""
    status: RequestStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserBrief] = None

class RequestCreateIn(APIModel):
    menu_item_id: int
    quantity: int = Field(default=1, ge=1)
    special_instructions: str = ""

class RequestStatusIn(APIModel):
    status: RequestStatus

    normalize_status = field_validator("status", mode="before")(_parse_request_status)


# ==== Notifications & guest views ====

class NotificationOut(APIModel):
    id: int
    user_id: int
    title: str
    message: str
    type: NotificationType
    related_id: Optional[int] = None
    is_read: bool
    created_at: Optional[datetime] = None

class GuestBookingOut(APIModel):
    id: int
    room: str
    check_in: date
    check_out: date
    status: ReservationStatus

class UpcomingStayOut(APIModel):
    room: RoomOut
    check_in_date: date
    check_out_date: date
    nights: int

class GuestDashboardOut(APIModel):
    upcoming_stay: Optional[UpcomingStayOut] = None
    meal_requests: int
    total_spent: float

class MessageOut(APIModel):
    message: str
