"""
Field rules shared by the request models, and the messages reported when a
request breaks them.

Rules are declared on the pydantic request models (see the route modules);
FastAPI rejects a request that breaks one before the handler runs. The
rejected request is answered with one human-readable message per failure,
looked up here by field name.
"""

import re
from datetime import date
from typing import Annotated, Any, Iterable

from pydantic import BeforeValidator, EmailStr, StringConstraints
from pydantic_core import PydanticCustomError

from dating_api.models.enums import Gender, Role


def _clean_email(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def _iso_date_only(value: Any) -> Any:
    # Lax date parsing would read a number (or digit string) as a Unix timestamp
    if isinstance(value, date):
        return value
    if isinstance(value, str) and _ISO_DATE_RE.match(value):
        return value
    raise PydanticCustomError("date_type", "Input should be an ISO 8601 date string")


# Trimmed strings; "Text" must not be empty once trimmed
Text = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
OptionalText = Annotated[str, StringConstraints(strip_whitespace=True)]
Email = Annotated[EmailStr, BeforeValidator(_clean_email)]
# Passwords are never trimmed
Password = Annotated[str, StringConstraints(min_length=6)]
LoginPassword = Annotated[str, StringConstraints(min_length=1)]
GenderList = list[Gender]
RoleList = list[Role]
IsoDate = Annotated[date, BeforeValidator(_iso_date_only)]

# Message for a field whose value breaks its rule
FIELD_MESSAGES = {
    "email": "Please enter a valid email",
    "password": "Password must be at least 6 characters long",
    "role": "Invalid role",
    "gender": "Invalid gender",
    "birthday": "Invalid birthday format",
    "interested_in_genders": "Interested in genders must be an array",
    "interested_in_roles": "Interested in roles must be an array",
}

# Message for a bad element inside a list field
ITEM_MESSAGES = {
    "interested_in_genders": "Invalid gender",
    "interested_in_roles": "Invalid role",
}


def _label(field: str) -> str:
    return field.replace("_", " ").capitalize()


def describe_error(error: dict[str, Any]) -> str:
    """Turn one pydantic error into the message reported to the client."""
    if error.get("type") == "json_invalid":
        return "Request body is not valid JSON"

    loc = [part for part in error.get("loc", ()) if part != "body"]
    if not loc:
        return f"Request body is invalid: {error.get('msg', '')}".strip()

    field = str(loc[0])
    label = _label(field)
    error_type = error.get("type", "")

    # An explicit null counts as leaving the field out
    if error_type == "missing" or (len(loc) == 1 and "input" in error and error["input"] is None):
        return f"{label} is required"
    if error_type == "string_too_short" and error.get("ctx", {}).get("min_length") == 1:
        return f"{label} cannot be empty"
    if len(loc) > 1 and field in ITEM_MESSAGES:
        return ITEM_MESSAGES[field]
    return FIELD_MESSAGES.get(field, f"{label}: {error.get('msg', 'invalid value')}")


def describe_errors(errors: Iterable[dict[str, Any]]) -> list[str]:
    messages = []
    for error in errors:
        message = describe_error(error)
        # Union types can report the same field more than once
        if message not in messages:
            messages.append(message)
    return messages
