"""
Directory Property Decoder

Converts the type-tagged property values of a directory record into native Python values.

Every supported discriminator has exactly one decoder in ``PROPERTY_DECODERS``. Anything the
table does not know about decodes to ``None`` so that new property kinds added on the
directory side never break a sync.
"""

from datetime import datetime
from datetime import timezone
from enum import Enum
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional

from pydantic import BaseModel


class PropertyType(str, Enum):
    """Property type discriminators understood by the decoder."""

    TITLE = "title"
    RICH_TEXT = "rich_text"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    PEOPLE = "people"
    DATE = "date"
    CHECKBOX = "checkbox"
    URL = "url"
    EMAIL = "email"
    PHONE_NUMBER = "phone_number"
    NUMBER = "number"
    STATUS = "status"
    RELATION = "relation"


class PersonReference(BaseModel):
    """A person referenced from a ``people`` property."""

    id: str
    name: Optional[str] = None
    email: Optional[str] = None


def _first_plain_text(runs: Optional[List[Dict[str, Any]]]) -> Optional[str]:
    if not runs:
        return None
    return runs[0].get("plain_text")


def _option_name(option: Optional[Dict[str, Any]]) -> Optional[str]:
    if not option:
        return None
    return option.get("name")


def _decode_title(prop: Dict[str, Any]) -> Optional[str]:
    return _first_plain_text(prop.get("title"))


def _decode_rich_text(prop: Dict[str, Any]) -> Optional[str]:
    return _first_plain_text(prop.get("rich_text"))


def _decode_select(prop: Dict[str, Any]) -> Optional[str]:
    return _option_name(prop.get("select"))


def _decode_status(prop: Dict[str, Any]) -> Optional[str]:
    return _option_name(prop.get("status"))


def _decode_multi_select(prop: Dict[str, Any]) -> List[str]:
    return [option["name"] for option in prop.get("multi_select") or [] if option.get("name")]


def _decode_people(prop: Dict[str, Any]) -> List[PersonReference]:
    people = []
    for person in prop.get("people") or []:
        person_details = person.get("person") or {}
        people.append(
            PersonReference(
                id=person["id"],
                name=person.get("name"),
                email=person_details.get("email"),
            )
        )
    return people


def parse_directory_datetime(value: str) -> datetime:
    """
    Parse an ISO-8601 date or datetime string from the directory.

    Naive values are interpreted as UTC.

    Raises:
        ValueError: If the value is not a valid ISO-8601 date/datetime
    """
    if not isinstance(value, str):
        raise ValueError(f"Invalid date value: {value!r}")
    # fromisoformat() does not accept a trailing "Z" on every supported interpreter
    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError as e:
        raise ValueError(f"Invalid date value: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _decode_date(prop: Dict[str, Any]) -> Optional[datetime]:
    date_value = prop.get("date")
    if not date_value or not date_value.get("start"):
        return None
    return parse_directory_datetime(date_value["start"])


def _decode_checkbox(prop: Dict[str, Any]) -> bool:
    return bool(prop.get("checkbox"))


def _decode_url(prop: Dict[str, Any]) -> Optional[str]:
    return prop.get("url")


def _decode_email(prop: Dict[str, Any]) -> Optional[str]:
    return prop.get("email")


def _decode_phone_number(prop: Dict[str, Any]) -> Optional[str]:
    return prop.get("phone_number")


def _decode_number(prop: Dict[str, Any]) -> Optional[float]:
    return prop.get("number")


def _decode_relation(prop: Dict[str, Any]) -> List[str]:
    return [ref["id"] for ref in prop.get("relation") or [] if ref.get("id")]


PROPERTY_DECODERS: Dict[PropertyType, Callable[[Dict[str, Any]], Any]] = {
    PropertyType.TITLE: _decode_title,
    PropertyType.RICH_TEXT: _decode_rich_text,
    PropertyType.SELECT: _decode_select,
    PropertyType.MULTI_SELECT: _decode_multi_select,
    PropertyType.PEOPLE: _decode_people,
    PropertyType.DATE: _decode_date,
    PropertyType.CHECKBOX: _decode_checkbox,
    PropertyType.URL: _decode_url,
    PropertyType.EMAIL: _decode_email,
    PropertyType.PHONE_NUMBER: _decode_phone_number,
    PropertyType.NUMBER: _decode_number,
    PropertyType.STATUS: _decode_status,
    PropertyType.RELATION: _decode_relation,
}


def property_type_of(prop: Optional[Dict[str, Any]]) -> Optional[PropertyType]:
    """Return the recognized discriminator of a property, or None when absent/unknown."""
    if not prop:
        return None
    try:
        return PropertyType(prop.get("type"))
    except ValueError:
        return None


def decode_property(prop: Optional[Dict[str, Any]]) -> Any:
    """
    Decode one type-tagged property value.

    Args:
        prop: Raw property object, e.g. ``{"type": "select", "select": {"name": "P1"}}``

    Returns:
        The native value for the property. Absent properties and unknown discriminators
        decode to None.

    Raises:
        ValueError: For a ``date`` property whose start value is malformed
    """
    property_type = property_type_of(prop)
    if property_type is None:
        return None
    return PROPERTY_DECODERS[property_type](prop)


def get_value(properties: Dict[str, Any], name: str) -> Any:
    """Decode the property called ``name``; None when the record has no such property."""
    return decode_property(properties.get(name))


def get_text(properties: Dict[str, Any], name: str) -> Optional[str]:
    """Plain text of a title, rich_text, url, email or phone_number property."""
    prop = properties.get(name)
    if property_type_of(prop) in (
        PropertyType.TITLE,
        PropertyType.RICH_TEXT,
        PropertyType.URL,
        PropertyType.EMAIL,
        PropertyType.PHONE_NUMBER,
    ):
        return decode_property(prop) or None
    return None


def get_title(properties: Dict[str, Any]) -> Optional[str]:
    """Text of the first non-empty title-typed property, whatever its name."""
    for prop in properties.values():
        if property_type_of(prop) == PropertyType.TITLE:
            title = decode_property(prop)
            if title:
                return title
    return None
