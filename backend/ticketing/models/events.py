from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Event(db.Model):
    """
    A sellable event.

    capacity bounds the number of tickets that may ever exist for the event.
    Tickets reference events without cascade; deletion is guarded in
    event_service instead.
    """
    __tablename__ = "events"
    __table_args__ = (
        db.CheckConstraint("capacity >= 1", name="ck_events_capacity_positive"),
        db.CheckConstraint("price >= 0", name="ck_events_price_non_negative"),
        db.Index("ix_events_date", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    date = db.Column(db.DateTime, nullable=False)
    location = db.Column(db.String(255), nullable=False)
    capacity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self, tickets_sold: int | None = None) -> dict:
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "date": to_utc_z(self.date),
            "location": self.location,
            "capacity": self.capacity,
            "price": float(self.price) if self.price is not None else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if tickets_sold is not None:
            data["tickets_sold"] = tickets_sold
            data["available_capacity"] = max(self.capacity - tickets_sold, 0)
        return data
