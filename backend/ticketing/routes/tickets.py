# Overview: Flask API routes for tickets: listing, lookup, QR image and check-in.

from flask import Blueprint, jsonify, g, Response

from ..decorators import require_auth, require_admin
from ..services import checkin_service, ticket_service
from ..services.ticket_code_service import render_qr_png


tickets_bp = Blueprint("tickets", __name__, url_prefix="/api/tickets")


@tickets_bp.get("")
@require_auth
def list_tickets_route():
    """Own tickets, or every ticket for admins."""
    tickets = ticket_service.list_tickets(g.current_user)
    include_user = g.current_user.is_admin
    return jsonify([
        ticket.to_dict(include_event=True, include_user=include_user, include_logs=True)
        for ticket in tickets
    ]), 200


@tickets_bp.get("/<id:ticket_id>")
@require_auth
def get_ticket_route(ticket_id: int):
    ticket = ticket_service.get_ticket(ticket_id, g.current_user)
    return jsonify(ticket.to_dict(include_event=True, include_user=True, include_logs=True)), 200


@tickets_bp.get("/<id:ticket_id>/qr")
@require_auth
def ticket_qr_route(ticket_id: int):
    ticket = ticket_service.get_ticket(ticket_id, g.current_user)
    return Response(render_qr_png(ticket.code), status=200, mimetype="image/png")


@tickets_bp.post("/<id:ticket_id>/validate")
@require_auth
@require_admin
def validate_ticket_route(ticket_id: int):
    """
    Check a ticket in at the door.

    Returns 200 with the used ticket; 400 if it was already used; 404 if
    it does not exist.
    """
    ticket = checkin_service.validate_ticket(ticket_id)
    return jsonify({
        "message": "Ticket validated successfully",
        "ticket": ticket.to_dict(include_logs=True),
    }), 200
