import logging

from flask import Blueprint, current_app, jsonify, request

from deployer.errors import GenerationError

logger = logging.getLogger(__name__)

bot_bp = Blueprint("bot", __name__)


@bot_bp.route("/api/bot-ai", methods=["POST"])
def bot_ai():
    data = request.get_json(silent=True)
    prompt = data.get("prompt") if isinstance(data, dict) else None

    if not prompt:
        return jsonify({"error": "Prompt must not be empty."}), 400

    try:
        text = current_app.extensions["bot"].ask(prompt)
    except Exception as e:
        logger.exception(f"Bot error: {e}")
        raise GenerationError() from e

    return jsonify({"response": text})
