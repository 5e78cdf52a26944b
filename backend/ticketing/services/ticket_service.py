# Overview: Ticket read paths: ownership-scoped lookups, attendee listing and CSV export.

from __future__ import annotations

import csv
import io

from sqlalchemy.orm import joinedload, selectinload

from ..errors import NotFound
from ..extensions import db
from ..models import Event, Ticket, User
from ..time_utils import format_csv_timestamp


ATTENDEE_CSV_HEADER = ["Ticket ID", "User Name", "User Email", "Status", "Checked In At", "Purchase Date"]


def _ticket_query():
    return db.session.query(Ticket).options(
        joinedload(Ticket.event),
        joinedload(Ticket.user),
        selectinload(Ticket.attendance_logs),
    )


def list_tickets(viewer: User) -> list[Ticket]:
    """Admins see every ticket; everyone else sees their own."""
    query = _ticket_query()
    if not viewer.is_admin:
        query = query.filter(Ticket.user_id == viewer.id)
    return query.order_by(Ticket.id.asc()).all()


def get_ticket(ticket_id: int, viewer: User) -> Ticket:
    """
    Tickets owned by someone else are reported as missing to non-admins,
    so ticket ids cannot be enumerated.
    """
    query = _ticket_query().filter(Ticket.id == ticket_id)
    if not viewer.is_admin:
        query = query.filter(Ticket.user_id == viewer.id)
    ticket = query.first()
    if not ticket:
        raise NotFound("Ticket not found")
    return ticket


def list_attendees(event_id: int) -> tuple[Event, list[Ticket]]:
    event = db.session.get(Event, event_id)
    if not event:
        raise NotFound("Event not found")
    tickets = (
        _ticket_query()
        .filter(Ticket.event_id == event_id)
        .order_by(Ticket.id.asc())
        .all()
    )
    return event, tickets


def export_attendees_csv(event_id: int) -> str:
    _, tickets = list_attendees(event_id)

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(ATTENDEE_CSV_HEADER)
    for ticket in tickets:
        checked_in_at = ticket.attendance_logs[0].checked_in_at if ticket.attendance_logs else None
        writer.writerow([
            ticket.id,
            ticket.user.name if ticket.user else "",
            ticket.user.email if ticket.user else "",
            ticket.status,
            format_csv_timestamp(checked_in_at),
            format_csv_timestamp(ticket.created_at),
        ])
    return buffer.getvalue()
