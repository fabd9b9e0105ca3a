from flask import Blueprint, current_app, jsonify, request

from deployer import __version__
from deployer.analytics.supabaseStore import client_ip

analytics_bp = Blueprint("analytics", __name__)


@analytics_bp.route("/", methods=["GET"])
def index():
    tracker = current_app.extensions["tracker"]
    ip_address = client_ip(request)
    user_agent = request.headers.get("User-Agent")

    response = jsonify({
        "service": "deployer",
        "version": __version__,
        "endpoints": ["/api/deploy", "/api/bot-ai", "/api/projects"],
    })
    # runs once the response has been sent, outside the request context
    response.call_on_close(lambda: tracker.record_visit(ip_address, user_agent))
    return response


@analytics_bp.route("/api/projects", methods=["GET"])
def projects():
    return jsonify(current_app.extensions["tracker"].store.list_projects())
