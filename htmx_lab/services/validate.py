from __future__ import annotations
from typing import Any, Dict, Tuple
from jsonschema import Draft7Validator, FormatChecker

from htmx_lab.services.categories import get_subcategories

EXISTING_EMAIL = "firstname.lastname@example.com"

TASK_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["title"],
    "properties": {
        "title": {"type": "string", "minLength": 3, "maxLength": 60},
        "tags": {"type": "array", "items": {"type": "string"}},
        "category": {"type": ["string", "null"]},
        "subcategory": {"type": ["string", "null"]},
    },
}

ARTIST_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["name"],
    "properties": {"name": {"type": "string", "minLength": 1, "maxLength": 120}},
}

ALBUM_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["title", "artist_id"],
    "properties": {
        "title": {"type": "string", "minLength": 3, "maxLength": 160},
        "artist_id": {"type": "integer", "minimum": 1},
    },
}

CONTACT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "email"],
    "properties": {
        "name": {"type": "string", "minLength": 1, "maxLength": 120},
        "email": {"type": "string", "format": "email"},
    },
}

# Messages keyed by (field, failing keyword); "*" matches any field.
FRIENDLY = {
    ("title", "required"): "Title is required.",
    ("title", "minLength"): "Title must be at least {minLength} characters.",
    ("title", "maxLength"): "Title must be {maxLength} characters or fewer.",
    ("name", "required"): "Name is required.",
    ("name", "minLength"): "Name is required.",
    ("artist_id", "required"): "Artist is required.",
    ("artist_id", "minimum"): "Artist is required.",
    ("email", "format"): "Please enter a valid email address",
    ("*", "maxLength"): "Must be {maxLength} characters or fewer.",
}


def _field_of(err) -> str:
    if err.validator == "required":
        # "'title' is a required property"
        return err.message.split("'")[1]
    return ".".join(map(str, err.path)) or "$"


def _friendly(field: str, err) -> str:
    tpl = FRIENDLY.get((field, err.validator)) or FRIENDLY.get(("*", err.validator))
    if tpl is None:
        return err.message
    return tpl.format(**(err.schema if isinstance(err.schema, dict) else {}))


def validate_against_schema(instance: Dict[str, Any], schema: Dict[str, Any]) -> Tuple[bool, Dict[str, str]]:
    """Validate a form payload against a JSON Schema.

    Returns (is_valid, {field: message}); only the first error per field is kept.
    """
    v = Draft7Validator(schema, format_checker=FormatChecker())
    errors: Dict[str, str] = {}
    for e in sorted(v.iter_errors(instance), key=lambda e: list(e.path)):
        field = _field_of(e)
        errors.setdefault(field, _friendly(field, e))
    return (len(errors) == 0, errors)


def validate_task(title: str | None, tags=None, category: str | None = None, subcategory: str | None = None) -> Tuple[bool, Dict[str, str]]:
    title = (title or "").strip()
    ok, errors = validate_against_schema(
        {"title": title, "tags": list(tags or []), "category": category, "subcategory": subcategory},
        TASK_SCHEMA,
    )
    if not title:
        errors["title"] = FRIENDLY[("title", "required")]
    if subcategory and subcategory not in get_subcategories(category):
        errors["subcategory"] = f"'{subcategory}' is not a subcategory of {category or 'the selected category'}."
    return (len(errors) == 0, errors)


def validate_title(title: str | None) -> str | None:
    """Return the first problem with a task title, or None."""
    return validate_task(title)[1].get("title")


def validate_email(email: str | None) -> str | None:
    if not email or "@" not in email:
        return "Please enter a valid email address"
    if email == EXISTING_EMAIL:
        return "That email is already taken. Please enter another email."
    return None
