# donor_app/routes/donor_list.py
"""
Event donor-list routes: membership, review decisions and counter maintenance
"""

from flask import jsonify, request
from flask_login import current_user, login_required

from donor_app.services import donor_list_service
from donor_app.utils.query_params import page_payload, parse_id, parse_pagination

from .helpers import json_body


def _load_list(list_id):
    return donor_list_service.get_list_or_404(parse_id(list_id, "list ID"))


def register_donor_list_routes(app):
    """Register donor list routes"""

    @app.route("/api/lists", methods=["GET"])
    @login_required
    def lists_index():
        page, limit = parse_pagination(request.args, default_limit=10)
        pagination = donor_list_service.filter_lists(request.args).paginate(
            page=page, per_page=limit, error_out=False
        )
        return jsonify(page_payload(pagination, "lists", [donor_list.to_summary() for donor_list in pagination.items]))

    @app.route("/api/lists/<list_id>", methods=["GET"])
    @login_required
    def lists_view(list_id):
        return jsonify(_load_list(list_id).to_dict())

    @app.route("/api/lists/<list_id>", methods=["DELETE"])
    @login_required
    def lists_delete(list_id):
        donor_list_service.delete_list(_load_list(list_id))
        return jsonify({"message": "Donor list deleted successfully."})

    @app.route("/api/lists/<list_id>/donors", methods=["POST"])
    @login_required
    def lists_add_donors(list_id):
        donor_list = _load_list(list_id)
        entries = donor_list_service.add_donors(donor_list, json_body().get("donors"), current_user)
        return (
            jsonify(
                {
                    "message": "Donors added successfully.",
                    "added_donors": [entry.to_dict() for entry in entries],
                    "list": donor_list.to_summary(),
                }
            ),
            201,
        )

    @app.route("/api/lists/<list_id>/donors/<donor_id>", methods=["DELETE"])
    @login_required
    def lists_remove_donor(list_id, donor_id):
        donor_list = _load_list(list_id)
        donor_list_service.remove_donor(donor_list, parse_id(donor_id, "donor ID"))
        return jsonify({"message": "Donor removed from list successfully.", "list": donor_list.to_summary()})

    @app.route("/api/lists/<list_id>/donors/<donor_id>", methods=["PUT"])
    @login_required
    def lists_review_donor(list_id, donor_id):
        donor_list = _load_list(list_id)
        entry = donor_list_service.review_donor(
            donor_list, parse_id(donor_id, "donor ID"), json_body(), current_user
        )
        return jsonify(
            {
                "message": "Donor status updated successfully.",
                "donor": entry.to_dict(),
                "list": donor_list.to_summary(),
            }
        )

    @app.route("/api/lists/<list_id>/status", methods=["PUT"])
    @login_required
    def lists_set_status(list_id):
        donor_list = _load_list(list_id)
        donor_list_service.override_review_status(donor_list, json_body().get("review_status"))
        return jsonify(
            {
                "message": "List status updated successfully.",
                "list": {
                    "id": donor_list.id,
                    "review_status": donor_list.review_status.value,
                    "updated_at": donor_list.updated_at.isoformat() if donor_list.updated_at else None,
                },
            }
        )

    @app.route("/api/lists/<list_id>/recompute", methods=["POST"])
    @login_required
    def lists_recompute(list_id):
        donor_list = _load_list(list_id)
        changed = donor_list_service.recompute(donor_list)
        return jsonify({"changed": changed, "list": donor_list.to_summary()})
