# Overview: Service-layer operations for events; encapsulates business logic and database work.

from __future__ import annotations

from flask import current_app
from sqlalchemy import func

from ..errors import InternalError, InvalidRequest, NotFound
from ..extensions import db
from ..models import Event, Ticket
from ..validation import ModelValidationPolicy, validate_payload, enforce_rules_event
from .concurrency import lock_for_update, serialize_on


EVENT_POLICY = ModelValidationPolicy(
    writable_fields={"title", "description", "date", "location", "capacity", "price"},
    required_on_create={"title", "description", "date", "location", "capacity", "price"},
)


def count_tickets(event_id: int) -> int:
    return db.session.query(func.count(Ticket.id)).filter(Ticket.event_id == event_id).scalar() or 0


def tickets_sold_by_event(event_ids: list[int] | None = None) -> dict[int, int]:
    query = db.session.query(Ticket.event_id, func.count(Ticket.id)).group_by(Ticket.event_id)
    if event_ids is not None:
        query = query.filter(Ticket.event_id.in_(event_ids))
    return {event_id: count for event_id, count in query.all()}


def list_events() -> list[Event]:
    return db.session.query(Event).order_by(Event.date.asc(), Event.id.asc()).all()


def get_event(event_id: int) -> Event:
    event = db.session.get(Event, event_id)
    if not event:
        raise NotFound("Event not found")
    return event


def create_event(payload: dict) -> Event:
    patch = validate_payload(model=Event, payload=payload, policy=EVENT_POLICY, partial=False)
    enforce_rules_event(patch)

    event = Event(**patch)
    db.session.add(event)
    db.session.commit()

    current_app.logger.info("Created event id=%s capacity=%s", event.id, event.capacity)
    return event


def update_event(event_id: int, payload: dict) -> Event:
    """
    Partial update. Capacity may not drop below tickets already issued;
    runs under the same per-event lock as purchases so the check holds.
    """
    patch = validate_payload(model=Event, payload=payload, policy=EVENT_POLICY, partial=True)
    enforce_rules_event(patch)

    try:
        with serialize_on(f"event:{event_id}", timeout=current_app.config["DB_POOL_TIMEOUT"]):
            event = _update_locked(event_id, patch)
    except TimeoutError as exc:
        raise InternalError("Timed out waiting for event lock") from exc

    current_app.logger.info("Updated event id=%s fields=%s", event_id, sorted(patch))
    return event


def _update_locked(event_id: int, patch: dict) -> Event:
    event = lock_for_update(db.session.query(Event).filter_by(id=event_id)).first()
    if not event:
        db.session.rollback()
        raise NotFound("Event not found")

    if "capacity" in patch:
        sold = count_tickets(event_id)
        if patch["capacity"] < sold:
            db.session.rollback()
            raise InvalidRequest(
                f"capacity cannot be lower than tickets already sold ({sold})"
            )

    for key, value in patch.items():
        setattr(event, key, value)

    db.session.commit()
    return event


def delete_event(event_id: int) -> None:
    """Delete an event that has no tickets; referential integrity is checked here."""
    try:
        with serialize_on(f"event:{event_id}", timeout=current_app.config["DB_POOL_TIMEOUT"]):
            _delete_locked(event_id)
    except TimeoutError as exc:
        raise InternalError("Timed out waiting for event lock") from exc

    current_app.logger.info("Deleted event id=%s", event_id)


def _delete_locked(event_id: int) -> None:
    event = lock_for_update(db.session.query(Event).filter_by(id=event_id)).first()
    if not event:
        db.session.rollback()
        raise NotFound("Event not found")

    if count_tickets(event_id) > 0:
        db.session.rollback()
        raise InvalidRequest("Cannot delete event with existing tickets")

    db.session.delete(event)
    db.session.commit()
