"""Notes and whiteboard routes, one record of each per owner."""

import logging

from flask import Blueprint, jsonify, request

from stressy.client.routes.config import current_owner, get_config, unauthorized
from stressy.errors import StorageError

logger = logging.getLogger(__name__)

materials_bp = Blueprint("materials", __name__)


def _read_content():
    data = request.get_json(silent=True)
    if not data or not isinstance(data.get("content"), str):
        return None
    return data["content"]


def _record_response(record):
    if record is None:
        return jsonify({"content": None, "updated_at": None})
    return jsonify({"content": record.content, "updated_at": record.updated_at})


@materials_bp.route("/api/notes", methods=["GET"])
def get_notes():
    owner_id = current_owner()
    if owner_id is None:
        return unauthorized()
    try:
        return _record_response(get_config().services.store.get_note(owner_id))
    except StorageError as e:
        logger.error(f"❌ {e}", exc_info=True)
        return jsonify({"error": "Could not load notes"}), 500


@materials_bp.route("/api/notes", methods=["PUT"])
def save_notes():
    """Replace the caller's notes with {"content": "..."}."""
    owner_id = current_owner()
    if owner_id is None:
        return unauthorized()

    content = _read_content()
    if content is None:
        return jsonify({"error": "Missing 'content' field in request"}), 400

    try:
        record = get_config().services.store.save_note(owner_id, content)
    except StorageError as e:
        logger.error(f"❌ {e}", exc_info=True)
        return jsonify({"error": "Could not save notes"}), 500

    logger.info(f"📝 Saved notes for owner {owner_id}")
    return _record_response(record)


@materials_bp.route("/api/whiteboard", methods=["GET"])
def get_whiteboard():
    owner_id = current_owner()
    if owner_id is None:
        return unauthorized()
    try:
        return _record_response(get_config().services.store.get_whiteboard(owner_id))
    except StorageError as e:
        logger.error(f"❌ {e}", exc_info=True)
        return jsonify({"error": "Could not load whiteboard"}), 500


@materials_bp.route("/api/whiteboard", methods=["PUT"])
def save_whiteboard():
    """Replace the caller's whiteboard with {"content": "<serialized drawing>"}."""
    owner_id = current_owner()
    if owner_id is None:
        return unauthorized()

    content = _read_content()
    if content is None:
        return jsonify({"error": "Missing 'content' field in request"}), 400

    try:
        record = get_config().services.store.save_whiteboard(owner_id, content)
    except StorageError as e:
        logger.error(f"❌ {e}", exc_info=True)
        return jsonify({"error": "Could not save whiteboard"}), 500

    logger.info(f"🎨 Saved whiteboard for owner {owner_id}")
    return _record_response(record)
