import logging
from datetime import datetime, timezone

from flask import Blueprint, request, jsonify
from pymongo.errors import PyMongoError

from core_registration.extensions.db import get_db
from core_registration.models.models import MEMBERS, GENDERS, missing_fields, to_json, MEMBER_FIELDS

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__)


@api.route("/health", methods=["GET"])
def health_check():
    """Lightweight health endpoint — does not touch the database.

    Use this to verify the serverless function is running even when the DB
    is unreachable.
    """
    return jsonify({"status": "ok"}), 200


async def get_collection(name):
    db = await get_db()
    return db.get_collection(name)


@api.route("/members", methods=["POST"])
async def create_member():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "Invalid payload"}), 400

    missing = missing_fields(payload)
    if missing:
        verb = "is" if len(missing) == 1 else "are"
        return jsonify({"error": f"{', '.join(missing)} {verb} required"}), 400

    if payload["gender"] not in GENDERS:
        return jsonify({"error": f"gender must be one of {', '.join(GENDERS)}"}), 400

    member = {field: payload[field].strip() for field in MEMBER_FIELDS}
    member["created_at"] = datetime.now(timezone.utc)

    try:
        coll = await get_collection(MEMBERS)
        # regNo is meant to be unique; there is no index enforcing it.
        if coll.find_one({"regNo": member["regNo"]}) is not None:
            return jsonify({"error": "Duplicate registration number"}), 409
        # insert_one adds _id to the document it is given
        result = coll.insert_one(dict(member))
    except (ConnectionError, PyMongoError):
        logger.exception("Failed to save member %s", member["regNo"])
        return jsonify({"error": "Failed to save member details"}), 500

    logger.info("Registered member %s (%s)", member["regNo"], result.inserted_id)
    return jsonify({"id": str(result.inserted_id), "member": to_json(member)}), 201
