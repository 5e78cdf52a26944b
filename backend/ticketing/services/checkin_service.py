# Overview: Service-layer operations for ticket validation (check-in at the door).

"""
Check-in is single use. The valid -> used transition is a guarded write
(UPDATE ... WHERE status = 'valid'), so of any number of concurrent attempts
exactly one changes a row. The attendance log is written in the same
transaction, and attendance_logs.ticket_id is unique.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..errors import InternalError, InvalidRequest, NotFound
from ..extensions import db
from ..models import AttendanceLog, Ticket, TICKET_STATUS_USED, TICKET_STATUS_VALID
from ..time_utils import utcnow
from .concurrency import serialize_on


def validate_ticket(ticket_id: int) -> Ticket:
    """
    Mark a ticket used and record one attendance log.

    Raises:
        NotFound: no such ticket
        InvalidRequest: ticket already used
    """
    try:
        with serialize_on(f"ticket:{ticket_id}", timeout=current_app.config["DB_POOL_TIMEOUT"]):
            return _validate_locked(ticket_id)
    except TimeoutError as exc:
        raise InternalError("Timed out waiting for ticket lock") from exc


def _validate_locked(ticket_id: int) -> Ticket:
    now = utcnow()
    result = db.session.execute(
        update(Ticket)
        .where(Ticket.id == ticket_id, Ticket.status == TICKET_STATUS_VALID)
        .values(status=TICKET_STATUS_USED, updated_at=now)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount != 1:
        db.session.rollback()
        exists = db.session.query(Ticket.id).filter_by(id=ticket_id).first() is not None
        if not exists:
            raise NotFound("Ticket not found")
        current_app.logger.warning("Rejected second check-in for ticket id=%s", ticket_id)
        raise InvalidRequest("Ticket has already been used")

    db.session.add(AttendanceLog(ticket_id=ticket_id, checked_in_at=now))
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise InvalidRequest("Ticket has already been used")

    ticket = db.session.get(Ticket, ticket_id)
    db.session.refresh(ticket)
    current_app.logger.info("Checked in ticket id=%s for event id=%s", ticket.id, ticket.event_id)
    return ticket
