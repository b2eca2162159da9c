from bson.objectid import ObjectId
from datetime import datetime

MEMBERS = "members"

# Order matters: the page and the terminal script render fields in this order.
MEMBER_FIELDS = (
    "name",
    "phoneNumber",
    "email",
    "regNo",
    "gender",
    "birthdate",
    "quirkyDetail",
)

FIELD_LABELS = {
    "name": "Name",
    "phoneNumber": "Phone Number",
    "email": "Email",
    "regNo": "Registration Number",
    "gender": "Gender",
    "birthdate": "Birthdate",
    "quirkyDetail": "Quirky Detail",
}

GENDERS = ("Male", "Female", "Other")

# Toast texts and timing shared by the page script and the form controller.
TOAST_DURATION = 5.0
SUCCESS_MESSAGE = "Member details saved successfully!"
REQUEST_ERROR = "Something went wrong"
GENERIC_ERROR = "An unexpected error occurred"


def empty_member():
    """Return a fresh form mapping with every member field blank."""
    return {field: "" for field in MEMBER_FIELDS}


def missing_fields(payload):
    """Return the member fields that are absent or blank in `payload`."""
    missing = []
    for field in MEMBER_FIELDS:
        value = payload.get(field)
        if not isinstance(value, str) or not value.strip():
            missing.append(field)
    return missing


def to_json(doc):
    """Recursively convert a MongoDB document (or value) into JSON-serializable types.

    - ObjectId -> str
    - datetime -> ISO 8601 string
    Works for nested dicts and lists.
    """
    if doc is None:
        return None

    def convert(obj):
        if isinstance(obj, dict):
            return {k: convert(v) for k, v in obj.items()}
        if isinstance(obj, (list, tuple)):
            return [convert(v) for v in obj]
        if isinstance(obj, ObjectId):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return obj

    return convert(doc)
