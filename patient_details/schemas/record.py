"""
JSON schema for the patient fields shown on the detail screen.

Records are opaque to the store; this schema is used only to report which
display fields are absent. There are no type or format constraints.
"""

DISPLAY_FIELDS: list[str] = [
    "patientID",
    "firstname",
    "lastname",
    "timestamp",
    "sex",
    "blood_pressure",
    "cholesterol_level",
    "history_of_stroke",
    "history_of_diabetes",
    "smoker",
]

OPTIONAL_DISPLAY_FIELDS: list[str] = ["risk_result"]

PATIENT_DISPLAY_SCHEMA: dict = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Patient detail display fields",
    "type": "object",
    "required": DISPLAY_FIELDS,
}
