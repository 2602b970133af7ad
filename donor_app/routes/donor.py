# donor_app/routes/donor.py
"""
Donor routes: listing, CRUD, cascading deletes and file import
"""

from flask import current_app, jsonify, request
from flask_login import current_user, login_required

from donor_app.importer import DONOR_IMPORT_OPERATION, dispatch_donor_import, get_importer_allowed_extensions
from donor_app.importer.utils import allowed_file, file_extension, persist_upload
from donor_app.models import EventDonor
from donor_app.services import donor_service
from donor_app.services.progress_tracker import STATUS_ERROR, get_progress_tracker
from donor_app.utils.errors import APIError, ValidationError
from donor_app.utils.query_params import page_payload, parse_id, parse_pagination

from .helpers import json_body


def register_donor_routes(app):
    """Register donor routes"""

    @app.route("/api/donors", methods=["GET"])
    @login_required
    def donors_list():
        """Paginated donor list with filters and sorting"""
        page, limit = parse_pagination(request.args, default_limit=20)
        pagination = donor_service.filter_donors(request.args).paginate(page=page, per_page=limit, error_out=False)
        return jsonify(page_payload(pagination, "donors", [donor.to_dict() for donor in pagination.items]))

    @app.route("/api/donors", methods=["POST"])
    @login_required
    def donors_create():
        donor = donor_service.create_donor(json_body())
        return jsonify({"message": "Donor created successfully", "donor": donor.to_dict()}), 201

    @app.route("/api/donors/<donor_id>", methods=["GET"])
    @login_required
    def donors_view(donor_id):
        donor = donor_service.get_donor_or_404(parse_id(donor_id, "donor ID"))
        return jsonify(donor.to_dict())

    @app.route("/api/donors/<donor_id>", methods=["PUT"])
    @login_required
    def donors_update(donor_id):
        donor = donor_service.get_donor_or_404(parse_id(donor_id, "donor ID"))
        donor = donor_service.update_donor(donor, json_body())
        return jsonify(donor.to_dict())

    @app.route("/api/donors/<donor_id>", methods=["DELETE"])
    @login_required
    def donors_delete(donor_id):
        donor = donor_service.get_donor_or_404(parse_id(donor_id, "donor ID"))
        donor_service.delete_donors([donor.id])
        return jsonify({"success": True, "message": "Donor deleted successfully"})

    @app.route("/api/donors/batch", methods=["DELETE"])
    @login_required
    def donors_batch_delete():
        ids = json_body().get("ids")
        if not isinstance(ids, list) or not ids:
            raise ValidationError("Invalid donor IDs provided")
        try:
            donor_ids = [parse_id(value, "donor ID") for value in ids]
        except ValidationError:
            raise ValidationError("Some donor IDs are invalid")
        deleted = donor_service.delete_donors(donor_ids)
        return jsonify(
            {
                "success": True,
                "message": f"Successfully deleted {len(deleted)} donor(s)",
                "deleted_ids": deleted,
            }
        )

    @app.route("/api/donors/<donor_id>/events", methods=["GET"])
    @login_required
    def donors_events(donor_id):
        donor = donor_service.get_donor_or_404(parse_id(donor_id, "donor ID"))
        entries = EventDonor.query.filter_by(donor_id=donor.id).order_by(EventDonor.id).all()
        payload = []
        for entry in entries:
            item = entry.to_dict()
            event = entry.donor_list.event if entry.donor_list is not None else None
            item["event"] = event.to_dict() if event is not None and not event.is_deleted else None
            payload.append(item)
        return jsonify({"donor_id": donor.id, "events": payload})

    @app.route("/api/donors/import", methods=["POST"])
    @login_required
    def donors_import():
        """Accept an upload, answer 202 with the operation id, then reconcile its rows"""
        tracker = get_progress_tracker()
        _, operation_id = tracker.create_operation(DONOR_IMPORT_OPERATION, current_user.id)

        upload = request.files.get("file")
        if upload is None or not upload.filename:
            tracker.update_progress(operation_id, 0, "No file uploaded", STATUS_ERROR)
            raise ValidationError("No file uploaded", details={"operationId": operation_id})

        allowed = get_importer_allowed_extensions(current_app)
        if not allowed_file(upload.filename, allowed):
            extension = file_extension(upload.filename)
            message = f"Unsupported file format: .{extension}" if extension else "Unsupported file format"
            tracker.update_progress(operation_id, 0, message, STATUS_ERROR)
            raise ValidationError(
                f"{message}. Allowed: {', '.join(allowed)}",
                details={"operationId": operation_id},
            )

        try:
            stored_path = persist_upload(upload, current_app)
        except OSError as e:
            current_app.logger.error(f"Donor import {operation_id} could not store upload: {str(e)}")
            tracker.update_progress(operation_id, 0, "Failed to store uploaded file", STATUS_ERROR)
            raise APIError("Failed to store uploaded file", details={"operationId": operation_id})
        current_app.logger.info(
            f"Donor import {operation_id} accepted from user {current_user.id}: {upload.filename}"
        )
        dispatch_donor_import(current_app._get_current_object(), operation_id, stored_path)
        return (
            jsonify(
                {
                    "success": True,
                    "operationId": operation_id,
                    "message": "Import started. Use the operation ID to check progress.",
                }
            ),
            202,
        )
