# Overview: Flask API routes for events, ticket purchase and attendee reporting.

from flask import Blueprint, jsonify, g, Response

from ..decorators import require_auth, require_admin
from ..services import event_service, purchase_service, ticket_service
from . import json_body


events_bp = Blueprint("events", __name__, url_prefix="/api/events")


@events_bp.get("")
@require_auth
def list_events_route():
    events = event_service.list_events()
    sold = event_service.tickets_sold_by_event([event.id for event in events])
    return jsonify([event.to_dict(tickets_sold=sold.get(event.id, 0)) for event in events]), 200


@events_bp.get("/<id:event_id>")
@require_auth
def get_event_route(event_id: int):
    event = event_service.get_event(event_id)
    return jsonify(event.to_dict(tickets_sold=event_service.count_tickets(event_id))), 200


@events_bp.post("")
@require_auth
@require_admin
def create_event_route():
    event = event_service.create_event(json_body())
    return jsonify(event.to_dict(tickets_sold=0)), 201


@events_bp.put("/<id:event_id>")
@require_auth
@require_admin
def update_event_route(event_id: int):
    event = event_service.update_event(event_id, json_body())
    return jsonify(event.to_dict(tickets_sold=event_service.count_tickets(event_id))), 200


@events_bp.delete("/<id:event_id>")
@require_auth
@require_admin
def delete_event_route(event_id: int):
    event_service.delete_event(event_id)
    return jsonify({"message": "Event deleted successfully"}), 200


@events_bp.post("/<id:event_id>/purchase")
@require_auth
def purchase_route(event_id: int):
    """
    Buy tickets for an event.

    Request body: quantity (1-10)
    Returns 201 with the issued tickets; 400 for bad quantity, past event
    or insufficient capacity; 404 if the event does not exist.
    """
    data = json_body()
    result = purchase_service.purchase_tickets(event_id, g.user_id, data.get("quantity"))
    return jsonify({
        "message": "Tickets purchased successfully",
        "tickets": [ticket.to_dict() for ticket in result.tickets],
        "total": result.total,
    }), 201


@events_bp.get("/<id:event_id>/attendees")
@require_auth
@require_admin
def attendees_route(event_id: int):
    event, tickets = ticket_service.list_attendees(event_id)
    return jsonify({
        "event": event.to_dict(tickets_sold=len(tickets)),
        "attendees": [
            ticket.to_dict(include_user=True, include_logs=True) for ticket in tickets
        ],
        "total": len(tickets),
    }), 200


@events_bp.get("/<id:event_id>/attendees/export")
@require_auth
@require_admin
def export_attendees_route(event_id: int):
    body = ticket_service.export_attendees_csv(event_id)
    return Response(
        body,
        status=200,
        mimetype="text/csv",
        headers={
            "Content-Disposition": f"attachment;filename=attendees_event_{event_id}.csv",
        },
    )
