"""Paper upload and management routes."""

import logging

from flask import Blueprint, jsonify, request
from werkzeug.utils import secure_filename

from stressy.client.routes.config import current_owner, get_config, unauthorized
from stressy.errors import DimensionMismatch, EmptyDocument, PaperExists, StorageError
from stressy.service.async_helpers import run_async

logger = logging.getLogger(__name__)

papers_bp = Blueprint("papers", __name__)


def allowed_file(filename: str, allowed_extensions: set[str]) -> bool:
    """Check if the file extension is allowed.

    Args:
        filename: The filename to check
        allowed_extensions: Lower-case extensions without the dot

    Returns:
        True if extension is allowed, False otherwise
    """
    return "." in filename and filename.rsplit(".", 1)[1].lower() in allowed_extensions


@papers_bp.route("/api/papers", methods=["POST"])
def upload_paper():
    """Upload and ingest one paper.

    Expects multipart form data with:
        - file: The paper (PDF or plain text)
        - id: Optional identifier to store it under
        - name: Optional display name (default: the filename)

    Returns:
        201 with {"success": true, "paper": {id, name, size_bytes, chunk_count}};
        409 if the id is already taken
    """
    owner_id = current_owner()
    if owner_id is None:
        return unauthorized()

    config = get_config()
    logger.info("📤 Received paper upload request")

    file = request.files.get("file")
    if file is None or not file.filename:
        logger.warning("❌ No file in request")
        return jsonify({"success": False, "error": "No file provided"}), 400

    if not allowed_file(file.filename, config.allowed_extensions):
        allowed = ", ".join(sorted(config.allowed_extensions))
        return jsonify(
            {"success": False, "error": f"File type not allowed. Accepted: {allowed}"}
        ), 400

    name = request.form.get("name") or secure_filename(file.filename)
    paper_id = request.form.get("id") or None
    data = file.read()

    try:
        result = run_async(
            config.services.ingestion.ingest(owner_id, name, data, document_id=paper_id)
        )
    except EmptyDocument as e:
        logger.warning(f"❌ {e}")
        return jsonify({"success": False, "error": str(e)}), 422
    except PaperExists as e:
        return jsonify({"success": False, "error": str(e)}), 409
    except DimensionMismatch as e:
        logger.error(f"❌ Inconsistent embeddings for {name}: {e}")
        return jsonify({"success": False, "error": "Could not embed document consistently"}), 500
    except StorageError as e:
        logger.error(f"❌ {e}", exc_info=True)
        return jsonify({"success": False, "error": "Could not store paper"}), 500
    except Exception as e:
        logger.error(f"❌ Error processing {name}: {e}", exc_info=True)
        return jsonify({"success": False, "error": f"Internal server error: {str(e)}"}), 500

    logger.info(f"✅ Stored paper {result.id} ({result.chunk_count} chunks)")
    return jsonify({"success": True, "paper": result.to_dict()}), 201


@papers_bp.route("/api/papers", methods=["GET"])
def list_papers():
    """List the caller's papers, newest first."""
    owner_id = current_owner()
    if owner_id is None:
        return unauthorized()

    try:
        papers = get_config().services.store.list_papers(owner_id)
    except StorageError as e:
        logger.error(f"❌ {e}", exc_info=True)
        return jsonify({"error": "Could not list papers"}), 500

    return jsonify({"papers": [paper.summary() for paper in papers]})


@papers_bp.route("/api/papers/<paper_id>", methods=["GET"])
def get_paper(paper_id: str):
    """Get one paper's summary and content preview."""
    owner_id = current_owner()
    if owner_id is None:
        return unauthorized()

    try:
        paper = get_config().services.store.get_paper(owner_id, paper_id)
    except StorageError as e:
        logger.error(f"❌ {e}", exc_info=True)
        return jsonify({"error": "Could not load paper"}), 500

    if paper is None:
        return jsonify({"error": f"Paper '{paper_id}' not found"}), 404
    return jsonify({**paper.summary(), "content": paper.content})


@papers_bp.route("/api/papers/<paper_id>", methods=["DELETE"])
def delete_paper(paper_id: str):
    """Delete one of the caller's papers."""
    owner_id = current_owner()
    if owner_id is None:
        return unauthorized()

    try:
        deleted = get_config().services.store.delete_paper(owner_id, paper_id)
    except StorageError as e:
        logger.error(f"❌ {e}", exc_info=True)
        return jsonify({"success": False, "error": "Could not delete paper"}), 500

    if not deleted:
        return jsonify({"success": False, "error": f"Paper '{paper_id}' not found"}), 404
    return jsonify({"success": True})
