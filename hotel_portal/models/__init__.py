from .user import User, UserRole
from .room import Room, RoomStatus
from .reservation import Reservation, ReservationStatus
from .invoice import Invoice, InvoiceStatus
from .menu_item import MenuItem
from .service_request import ServiceRequest, RequestStatus
from .notification import Notification, NotificationType
