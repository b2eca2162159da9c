from flask import Blueprint, render_template

from core_registration.models.models import (
    MEMBER_FIELDS, FIELD_LABELS, GENDERS, TOAST_DURATION, SUCCESS_MESSAGE, GENERIC_ERROR, REQUEST_ERROR,
)

pages_bp = Blueprint("pages", __name__, template_folder="../templates")

# HTML input type per field; anything not listed is a plain text input.
INPUT_TYPES = {
    "phoneNumber": "tel",
    "email": "email",
    "birthdate": "date",
}


@pages_bp.route("/")
def register():
    fields = [
        {"name": f, "label": FIELD_LABELS[f], "type": INPUT_TYPES.get(f, "text")}
        for f in MEMBER_FIELDS
    ]
    return render_template(
        "register.html",
        fields=fields,
        genders=GENDERS,
        toast_ms=int(TOAST_DURATION * 1000),
        messages={"success": SUCCESS_MESSAGE, "request": REQUEST_ERROR, "generic": GENERIC_ERROR},
    )
