# donor_app/routes/event.py
"""
Event management routes
"""

from flask import jsonify, request
from flask_login import current_user, login_required

from donor_app.forms import CreateEventForm
from donor_app.services import event_service
from donor_app.utils.query_params import page_payload, parse_id, parse_pagination

from .helpers import json_body


def _event_page(query):
    page, limit = parse_pagination(request.args, default_limit=20)
    pagination = query.paginate(page=page, per_page=limit, error_out=False)
    return page_payload(pagination, "events", [event.to_dict() for event in pagination.items])


def register_event_routes(app):
    """Register event management routes"""

    @app.route("/api/events", methods=["GET"])
    @login_required
    def events_list():
        """List active events with filters, search and sorting"""
        return jsonify(_event_page(event_service.filter_events(request.args)))

    @app.route("/api/events", methods=["POST"])
    @login_required
    def events_create():
        """Create an event together with its donor list"""
        data = json_body()
        CreateEventForm().validate_or_raise()
        event = event_service.create_event(data, current_user)
        return jsonify({"message": "Event created successfully", "event": event.to_dict(include_list=True)}), 201

    @app.route("/api/events/status/<status>", methods=["GET"])
    @login_required
    def events_by_status(status):
        return jsonify(_event_page(event_service.filter_events(request.args, status=status)))

    @app.route("/api/events/<event_id>", methods=["GET"])
    @login_required
    def events_view(event_id):
        event = event_service.get_event_or_404(parse_id(event_id, "event ID"))
        return jsonify(event.to_dict(include_list=True))

    @app.route("/api/events/<event_id>", methods=["PUT"])
    @login_required
    def events_update(event_id):
        event = event_service.get_event_or_404(parse_id(event_id, "event ID"))
        event = event_service.update_event(event, json_body())
        return jsonify({"message": "Event updated successfully", "event": event.to_dict(include_list=True)})

    @app.route("/api/events/<event_id>", methods=["DELETE"])
    @login_required
    def events_delete(event_id):
        event = event_service.get_event_or_404(parse_id(event_id, "event ID"))
        event_service.soft_delete_event(event)
        return jsonify({"message": "Event deleted successfully"})

    @app.route("/api/events/<event_id>/status", methods=["PUT"])
    @login_required
    def events_set_status(event_id):
        event = event_service.get_event_or_404(parse_id(event_id, "event ID"))
        event = event_service.set_event_status(event, json_body().get("status"))
        return jsonify({"message": "Event status updated successfully", "event": event.to_dict()})
