from .auth import User, ROLE_USER, ROLE_ADMIN, ROLES
from .events import Event
from .tickets import Ticket, AttendanceLog, TICKET_STATUS_VALID, TICKET_STATUS_USED

__all__ = [
    'User', 'ROLE_USER', 'ROLE_ADMIN', 'ROLES',
    'Event',
    'Ticket', 'AttendanceLog', 'TICKET_STATUS_VALID', 'TICKET_STATUS_USED',
]
