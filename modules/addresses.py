"""
Delivery address form handling.

Validation and sanitizing for the address form shown on the delivery and
profile pages, plus the state/city lists the form offers.
"""

import re
from typing import Any, Dict, List, Tuple

from modules.uploads import sanitize_text


INDIAN_STATES = [
    "Andhra Pradesh",
    "Arunachal Pradesh",
    "Assam",
    "Bihar",
    "Chhattisgarh",
    "Goa",
    "Gujarat",
    "Haryana",
    "Himachal Pradesh",
    "Jharkhand",
    "Karnataka",
    "Kerala",
    "Madhya Pradesh",
    "Maharashtra",
    "Manipur",
    "Meghalaya",
    "Mizoram",
    "Nagaland",
    "Odisha",
    "Punjab",
    "Rajasthan",
    "Sikkim",
    "Tamil Nadu",
    "Telangana",
    "Tripura",
    "Uttar Pradesh",
    "Uttarakhand",
    "West Bengal",
]

# Suggested cities; other states accept free text
CITIES_BY_STATE = {
    "Maharashtra": ["Mumbai", "Pune", "Nagpur", "Thane", "Nashik"],
    "Karnataka": ["Bangalore", "Mysore", "Hubli", "Mangalore", "Belgaum"],
    "Tamil Nadu": ["Chennai", "Coimbatore", "Madurai", "Salem", "Tiruchirapalli"],
}

ZIP_CODE_PATTERN = re.compile(r"^\d{6}$")

MAX_NAME_LENGTH = 100
MAX_LINE_LENGTH = 200
MAX_CITY_LENGTH = 100


def cities_for(state: str) -> List[str]:
    return CITIES_BY_STATE.get(state, [])


def validate_address_form(form: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """
    Sanitize and validate an address form.

    Form keys: name, line1, line2, state, city, zip_code.

    Returns:
        (fields, errors): sanitized values keyed like Address attributes, and
        field -> message for every problem found (empty when valid)
    """
    fields = {
        "name": sanitize_text(form.get("name"), MAX_NAME_LENGTH),
        "line1": sanitize_text(form.get("line1"), MAX_LINE_LENGTH),
        "line2": sanitize_text(form.get("line2"), MAX_LINE_LENGTH) or None,
        "state": sanitize_text(form.get("state"), MAX_CITY_LENGTH),
        "city": sanitize_text(form.get("city"), MAX_CITY_LENGTH),
        "zip_code": sanitize_text(form.get("zip_code"), 12),
    }

    errors: Dict[str, str] = {}
    if not fields["name"]:
        errors["name"] = "Name is required"
    if not fields["line1"]:
        errors["line1"] = "Address is required"
    if not fields["state"]:
        errors["state"] = "State is required"
    elif fields["state"] not in INDIAN_STATES:
        errors["state"] = "Please select a valid state"
    if not fields["city"]:
        errors["city"] = "City is required"
    if not fields["zip_code"]:
        errors["zip_code"] = "ZIP code is required"
    elif not ZIP_CODE_PATTERN.match(fields["zip_code"]):
        errors["zip_code"] = "ZIP code must be 6 digits"

    return fields, errors
