# donor_app/utils/query_params.py
"""Helpers for list-endpoint query strings: pagination, sorting, id parsing"""

import re

from donor_app.utils.errors import ValidationError

MAX_PAGE_SIZE = 200

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def camel_to_snake(name):
    return _CAMEL_BOUNDARY.sub("_", str(name or "")).lower()


def parse_pagination(args, default_limit=20):
    """Return ``(page, limit)`` from ``page`` and ``limit`` args (bad values fall back to defaults)"""
    page = args.get("page", 1, type=int) or 1
    limit = args.get("limit", default_limit, type=int) or default_limit
    return max(page, 1), min(max(limit, 1), MAX_PAGE_SIZE)


def resolve_sort(model, sort, order, allowed, default):
    """Map a snake_case or camelCase sort name to an ORDER BY clause; unknown names use ``default``"""
    field = camel_to_snake(sort) if sort else default
    if field not in allowed:
        field = default
    column = getattr(model, field)
    return column.desc() if str(order or "asc").lower() == "desc" else column.asc()


def parse_bool_arg(value):
    """'true' / 'false' strings to bool; anything else is None (filter not applied)"""
    if value is None:
        return None
    token = str(value).strip().lower()
    if token == "true":
        return True
    if token == "false":
        return False
    return None


def parse_id(value, label="ID"):
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label} format")
    if isinstance(value, bool) or parsed < 1:
        raise ValidationError(f"Invalid {label} format")
    return parsed


def page_payload(pagination, key, items):
    return {
        key: items,
        "total": pagination.total,
        "page": pagination.page,
        "limit": pagination.per_page,
        "pages": pagination.pages,
    }
