from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


TICKET_STATUS_VALID = "valid"
TICKET_STATUS_USED = "used"


class Ticket(db.Model):
    """
    One admission to one event, owned by the purchasing user.

    Created only by purchase_service. status moves valid -> used exactly once,
    through checkin_service.
    """
    __tablename__ = "tickets"
    __table_args__ = (
        db.UniqueConstraint("code", name="uq_tickets_code"),
        db.CheckConstraint("status IN ('valid', 'used')", name="ck_tickets_status"),
        db.Index("ix_tickets_event_id", "event_id"),
        db.Index("ix_tickets_user_id", "user_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    code = db.Column(db.String(64), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=TICKET_STATUS_VALID)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    event = db.relationship("Event", backref=db.backref("tickets", lazy=True))
    user = db.relationship("User", backref=db.backref("tickets", lazy=True))
    attendance_logs = db.relationship(
        "AttendanceLog",
        backref=db.backref("ticket", lazy=True),
        lazy=True,
        order_by="AttendanceLog.checked_in_at",
    )

    def to_dict(self, *, include_event: bool = False, include_user: bool = False, include_logs: bool = False) -> dict:
        data = {
            "id": self.id,
            "event_id": self.event_id,
            "user_id": self.user_id,
            "code": self.code,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_event and self.event is not None:
            data["event"] = self.event.to_dict()
        if include_user and self.user is not None:
            data["user"] = self.user.to_dict()
        if include_logs:
            data["attendance_logs"] = [log.to_dict() for log in self.attendance_logs]
        return data


class AttendanceLog(db.Model):
    """
    Append-only check-in record.

    ticket_id is unique: a ticket can be checked in once, so it has at most
    one log row. Rows are never updated or deleted.
    """
    __tablename__ = "attendance_logs"
    __table_args__ = (
        db.UniqueConstraint("ticket_id", name="uq_attendance_logs_ticket_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    ticket_id = db.Column(db.Integer, db.ForeignKey("tickets.id"), nullable=False)
    checked_in_at = db.Column(db.DateTime(timezone=True), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ticket_id": self.ticket_id,
            "checked_in_at": to_utc_z(self.checked_in_at),
            "created_at": to_utc_z(self.created_at),
        }
