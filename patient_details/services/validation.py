"""Field-presence checks for patient documents."""

from typing import Any

import jsonschema

from patient_details.schemas.record import PATIENT_DISPLAY_SCHEMA


def validate_against_schema(data: dict[str, Any], schema: dict[str, Any]) -> list[str]:
    """
    Validate a dict against a JSON schema.
    Returns a list of error messages (empty list = valid).
    """
    validator = jsonschema.Draft7Validator(schema)
    return [error.message for error in validator.iter_errors(data)]


def missing_display_fields(fields: dict[str, Any]) -> list[str]:
    """Names of required display fields absent from a patient document."""
    validator = jsonschema.Draft7Validator(PATIENT_DISPLAY_SCHEMA)
    missing = [
        name
        for error in validator.iter_errors(fields)
        if error.validator == "required"
        for name in error.validator_value
        if name not in error.instance
    ]
    return list(dict.fromkeys(missing))
