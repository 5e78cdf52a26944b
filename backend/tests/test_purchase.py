"""
Ticket purchase tests.

Verifies:
- Quantity bounds (1..10, integers only)
- Past and missing events are refused
- Capacity is never exceeded and failed purchases issue nothing
- Each issued ticket has its own unique code
"""

import pytest

from ticketing.errors import InvalidRequest, NotFound
from ticketing.models import Ticket
from ticketing.services import purchase_service
from ticketing.services.ticket_code_service import looks_like_ticket_code


class TestPurchaseService:

    def test_issues_requested_tickets(self, user, event, db_session):
        result = purchase_service.purchase_tickets(event.id, user.id, 3)

        assert result.total == 3
        assert all(t.status == "valid" for t in result.tickets)
        assert all(t.user_id == user.id and t.event_id == event.id for t in result.tickets)
        assert len({t.code for t in result.tickets}) == 3
        assert all(looks_like_ticket_code(t.code) for t in result.tickets)
        assert db_session.query(Ticket).count() == 3

    def test_exact_remaining_capacity(self, user, other_user, event, db_session):
        purchase_service.purchase_tickets(event.id, user.id, 3)
        result = purchase_service.purchase_tickets(event.id, other_user.id, 2)
        assert result.total == 2
        assert db_session.query(Ticket).filter_by(event_id=event.id).count() == 5

    def test_insufficient_capacity_issues_nothing(self, user, event, db_session):
        purchase_service.purchase_tickets(event.id, user.id, 4)

        with pytest.raises(InvalidRequest) as exc:
            purchase_service.purchase_tickets(event.id, user.id, 2)
        assert "Not enough tickets available" in exc.value.message
        assert db_session.query(Ticket).count() == 4

    def test_sold_out(self, user, make_event):
        event = make_event(capacity=1)
        purchase_service.purchase_tickets(event.id, user.id, 1)
        with pytest.raises(InvalidRequest):
            purchase_service.purchase_tickets(event.id, user.id, 1)

    def test_past_event_refused(self, user, make_event, db_session):
        past = make_event(days_ahead=-1)
        with pytest.raises(InvalidRequest) as exc:
            purchase_service.purchase_tickets(past.id, user.id, 1)
        assert exc.value.message == "Cannot purchase tickets for past events"
        assert db_session.query(Ticket).count() == 0

    def test_missing_event(self, user):
        with pytest.raises(NotFound):
            purchase_service.purchase_tickets(999, user.id, 1)

    @pytest.mark.parametrize("quantity", [0, -1, 11, 2.5, "3", None, True])
    def test_quantity_bounds(self, user, event, quantity, db_session):
        with pytest.raises(InvalidRequest):
            purchase_service.purchase_tickets(event.id, user.id, quantity)
        assert db_session.query(Ticket).count() == 0

    def test_quantity_cap_ignores_app_config(self, app, monkeypatch, user, make_event, db_session):
        monkeypatch.setitem(app.config, "MAX_TICKETS_PER_PURCHASE", 50)
        event = make_event(capacity=50)
        with pytest.raises(InvalidRequest) as exc:
            purchase_service.purchase_tickets(event.id, user.id, 11)
        assert exc.value.message == "quantity must be between 1 and 10"
        assert db_session.query(Ticket).count() == 0

    def test_max_quantity_accepted(self, user, make_event):
        event = make_event(capacity=20)
        assert purchase_service.purchase_tickets(event.id, user.id, 10).total == 10


class TestPurchaseRoute:

    def test_purchase(self, client, user_headers, event):
        resp = client.post(
            f"/api/events/{event.id}/purchase", json={"quantity": 2}, headers=user_headers
        )
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["message"] == "Tickets purchased successfully"
        assert body["total"] == 2
        assert len(body["tickets"]) == 2
        assert body["tickets"][0]["status"] == "valid"

    def test_over_capacity(self, client, user_headers, event):
        resp = client.post(
            f"/api/events/{event.id}/purchase", json={"quantity": 6}, headers=user_headers
        )
        assert resp.status_code == 400
        assert "Not enough tickets available" in resp.get_json()["error"]

    def test_missing_quantity(self, client, user_headers, event):
        resp = client.post(f"/api/events/{event.id}/purchase", json={}, headers=user_headers)
        assert resp.status_code == 400

    def test_missing_event(self, client, user_headers):
        resp = client.post("/api/events/999/purchase", json={"quantity": 1}, headers=user_headers)
        assert resp.status_code == 404

    def test_admins_may_buy(self, client, admin_headers, event):
        resp = client.post(
            f"/api/events/{event.id}/purchase", json={"quantity": 1}, headers=admin_headers
        )
        assert resp.status_code == 201
