# donor_app/services/event_service.py
"""
Event Service - event lifecycle and the donor list created alongside each event
"""

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from donor_app.importer.parsing import normalize_text, parse_date
from donor_app.models import Event, EventDonorList, EventStatus, ListReviewStatus, db
from donor_app.utils.errors import NotFoundError, ValidationError
from donor_app.utils.query_params import camel_to_snake, resolve_sort

EVENT_REQUIRED_FIELDS = ("name", "type", "date", "location")
EVENT_TEXT_FIELDS = ("name", "type", "location", "focus")
EVENT_DATE_FIELDS = (
    "date",
    "timeline_list_generation_date",
    "timeline_review_deadline",
    "timeline_invitation_date",
)
EVENT_SORT_FIELDS = ("date", "name", "type", "location", "status", "capacity", "created_at")


def parse_event_status(value):
    token = str(value or "").strip().lower()
    for status in EventStatus:
        if status.value.lower() == token or status.name.lower() == token:
            return status
    choices = ", ".join(s.value for s in EventStatus)
    raise ValidationError(f"Invalid status. Must be one of: {choices}")


def coerce_event_fields(data):
    """Normalize snake_case or camelCase event payload keys and coerce dates and numbers"""
    values = {}
    for raw_key, value in (data or {}).items():
        key = camel_to_snake(raw_key)
        if key in EVENT_TEXT_FIELDS:
            values[key] = normalize_text(value)
        elif key in EVENT_DATE_FIELDS:
            if value in (None, ""):
                values[key] = None
                continue
            parsed = parse_date(value)
            if parsed is None:
                raise ValidationError(f"{key} is not a valid date")
            values[key] = parsed
        elif key == "capacity":
            if value in (None, ""):
                values[key] = None
                continue
            try:
                capacity = int(value)
            except (TypeError, ValueError):
                raise ValidationError("Capacity must be a positive integer")
            if capacity < 1:
                raise ValidationError("Capacity must be a positive integer")
            values[key] = capacity
        elif key == "criteria_min_giving_level":
            try:
                level = float(value or 0)
            except (TypeError, ValueError):
                raise ValidationError("criteria_min_giving_level must be a number")
            if level < 0:
                raise ValidationError("criteria_min_giving_level cannot be negative")
            values[key] = level
        elif key == "status":
            values[key] = parse_event_status(value)
    return values


def filter_events(args, status=None):
    query = Event.query.filter(Event.is_deleted.is_(False))

    for field in ("type", "location"):
        value = args.get(field)
        if value:
            query = query.filter(getattr(Event, field) == value)

    status_value = status or args.get("status")
    if status_value:
        query = query.filter(Event.status == parse_event_status(status_value))

    for arg, op in (("dateFrom", "ge"), ("dateTo", "le")):
        raw = args.get(arg)
        if not raw:
            continue
        bound = parse_date(raw)
        if bound is None:
            raise ValidationError(f"{arg} is not a valid date")
        query = query.filter(Event.date >= bound if op == "ge" else Event.date <= bound)

    search = (args.get("search") or "").strip()
    if search:
        query = query.filter(Event.name.ilike(f"%{search}%"))

    order_by = resolve_sort(Event, args.get("sort"), args.get("order"), EVENT_SORT_FIELDS, "date")
    return query.order_by(order_by, Event.id.asc())


def create_event(data, creator):
    """
    Create an event and its (empty) donor list in one transaction.

    Raises:
        ValidationError: a required field is missing or a value is malformed
    """
    values = coerce_event_fields(data)
    missing = [field for field in EVENT_REQUIRED_FIELDS if not values.get(field)]
    if missing:
        raise ValidationError("Name, type, date, and location are required fields", details={"missing": missing})

    try:
        event = Event(created_by_user_id=creator.id if creator is not None else None, **values)
        event.donor_list = EventDonorList(
            name=event.name,
            generated_by=creator.id if creator is not None else None,
            review_status=ListReviewStatus.COMPLETED,
        )
        db.session.add(event)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error creating event: {str(e)}")
        raise
    current_app.logger.info(f"Created event {event.id} with donor list {event.donor_list.id}")
    return event


def get_event_or_404(event_id):
    event = Event.find_active(event_id)
    if event is None:
        raise NotFoundError("Event not found")
    return event


def update_event(event, data):
    values = coerce_event_fields(data)
    for field in EVENT_REQUIRED_FIELDS:
        if field in values and not values[field]:
            raise ValidationError(f"{field} cannot be empty")
    for key, value in values.items():
        setattr(event, key, value)
    db.session.commit()
    return event


def set_event_status(event, status):
    if not status:
        raise ValidationError("Status is required")
    event.status = parse_event_status(status)
    db.session.commit()
    current_app.logger.info(f"Event {event.id} status set to {event.status.value}")
    return event


def soft_delete_event(event):
    event.is_deleted = True
    db.session.commit()
    current_app.logger.info(f"Soft-deleted event {event.id}")
    return event
