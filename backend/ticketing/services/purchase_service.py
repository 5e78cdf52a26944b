# Overview: Service-layer operations for ticket purchase; capacity-checked batch issuance.

"""
Purchase workflow

1. quantity must be 1..MAX_TICKETS_PER_PURCHASE
2. event must exist and be in the future
3. quantity must fit in capacity - tickets already issued
4. one ticket per unit, each with a fresh code, committed as one batch

Steps 2-4 run while holding the per-event lock and a row lock on the event,
so concurrent purchases cannot jointly oversell. The batch is all-or-nothing:
if any insert fails, none of the tickets are kept.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import InternalError, InvalidRequest, NotFound
from ..extensions import db
from ..models import Event, Ticket, TICKET_STATUS_VALID
from ..time_utils import utcnow
from ..validation import MAX_TICKETS_PER_PURCHASE, parse_quantity
from .concurrency import lock_for_update, serialize_on
from .event_service import count_tickets
from .ticket_code_service import generate_ticket_code


@dataclass
class PurchaseResult:
    tickets: list[Ticket]

    @property
    def total(self) -> int:
        return len(self.tickets)


def purchase_tickets(event_id: int, user_id: int, quantity) -> PurchaseResult:
    """
    Issue `quantity` tickets for event_id to user_id.

    Raises:
        InvalidRequest: bad quantity, past event, or insufficient capacity
        NotFound: event does not exist
        InternalError: tickets could not be persisted (nothing is kept)
    """
    quantity = parse_quantity(quantity, maximum=MAX_TICKETS_PER_PURCHASE)

    try:
        with serialize_on(f"event:{event_id}", timeout=current_app.config["DB_POOL_TIMEOUT"]):
            return _purchase_locked(event_id, user_id, quantity)
    except TimeoutError as exc:
        raise InternalError("Timed out waiting for event lock") from exc


def _purchase_locked(event_id: int, user_id: int, quantity: int) -> PurchaseResult:
    event = lock_for_update(db.session.query(Event).filter_by(id=event_id)).first()
    if not event:
        db.session.rollback()
        raise NotFound("Event not found")

    if event.date <= utcnow():
        db.session.rollback()
        raise InvalidRequest("Cannot purchase tickets for past events")

    available = event.capacity - count_tickets(event_id)
    if quantity > available:
        db.session.rollback()
        raise InvalidRequest(
            f"Not enough tickets available (insufficient capacity: {max(available, 0)} left)"
        )

    tickets = []
    for sequence in range(1, quantity + 1):
        ticket = Ticket(
            event_id=event_id,
            user_id=user_id,
            code=generate_ticket_code(event_id, user_id, sequence),
            status=TICKET_STATUS_VALID,
        )
        db.session.add(ticket)
        tickets.append(ticket)

    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception(
            "Ticket batch failed for event id=%s user id=%s", event_id, user_id
        )
        raise InternalError("Failed to create tickets") from exc

    current_app.logger.info(
        "Issued %s ticket(s) for event id=%s to user id=%s (%s left)",
        quantity, event_id, user_id, available - quantity,
    )
    return PurchaseResult(tickets=tickets)
