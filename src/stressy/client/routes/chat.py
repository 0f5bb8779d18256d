"""Stressy Bot query route."""

import logging

from flask import Blueprint, jsonify, request

from stressy.client.routes.config import current_owner, get_config, unauthorized
from stressy.errors import EmptySelection, GenerationFailed, SourceNotFound, StorageError
from stressy.models import QuerySelection
from stressy.service.async_helpers import run_async

logger = logging.getLogger(__name__)

chat_bp = Blueprint("chat", __name__)


@chat_bp.route("/api/stressy", methods=["POST"])
def ask_stressy():
    """Answer a research question from the caller's selected materials.

    Request:
        {
            "query": "What research gaps do these papers leave open?",
            "context": {
                "papers": ["paper-id-1", "paper-id-2"],
                "notes": true,
                "whiteboard": false
            }
        }

    Response:
        {
            "answer": "## Gap\\n...",
            "sources": [{"title": "paper.pdf", "content": "...", "type": "document"}],
            "insights": [{"title": "Gap", "content": "..."}]
        }

    Returns:
        JSON response with answer, sources and insights
    """
    owner_id = current_owner()
    if owner_id is None:
        return unauthorized()

    config = get_config()
    logger.info("📨 Received Stressy request")

    data = request.get_json(silent=True)
    query = data.get("query") if isinstance(data, dict) else None
    if not isinstance(query, str) or not query.strip():
        logger.warning("❌ Missing or invalid 'query' field in request")
        return jsonify({"error": "Missing or invalid 'query' field in request"}), 400

    selection = QuerySelection.from_request(data.get("context"))
    logger.info(f"🔍 Query: '{query[:100]}...'")

    try:
        result = run_async(config.services.query.answer(query, selection, owner_id))
    except EmptySelection as e:
        return jsonify({"error": str(e)}), 400
    except SourceNotFound as e:
        return jsonify({"error": str(e), "source": e.identifier}), 404
    except GenerationFailed as e:
        logger.error(f"❌ Generation failed: {e.reason}")
        return jsonify({"error": e.user_message}), 502
    except StorageError as e:
        logger.error(f"❌ {e}", exc_info=True)
        return jsonify({"error": "Could not load your research materials"}), 500
    except Exception as e:
        logger.error(f"❌ Error processing Stressy request: {e}", exc_info=True)
        return jsonify({"error": f"Internal server error: {str(e)}"}), 500

    logger.info(f"✅ Answered with {len(result.sources)} source(s)")
    return jsonify(result.to_dict())
