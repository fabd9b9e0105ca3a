"""
Deployer error types and Flask error handlers.

Every failure the pipeline can report is a DeployError subclass carrying the
HTTP status it maps to. Handlers registered by setup_error_handlers turn them
into plain-text responses for the deploy endpoint and JSON for the API ones.

Usage:
    from deployer.errors import setup_error_handlers, ValidationError

    setup_error_handlers(app)

    if not username:
        raise ValidationError()
"""

import logging

from flask import Response, jsonify, request

logger = logging.getLogger(__name__)


# =============================================================================
# Custom Exceptions
# =============================================================================

class DeployError(Exception):
    """Base exception for deployer errors."""

    status_code = 500
    error_type = "internal_error"
    message = "An unexpected error occurred"
    label = None

    def __init__(self, message=None, **kwargs):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = kwargs

    def to_text(self):
        if self.label:
            return f"{self.label}: {self.message}"
        return self.message

    def to_dict(self):
        return {"error": self.message}


class ValidationError(DeployError):
    """Owner, repository or archive missing from the upload, or a name that is not a single path segment."""
    status_code = 400
    error_type = "validation_error"
    message = "Incomplete data."


class ArchiveFormatError(DeployError):
    """Uploaded blob is not a readable zip archive.

    Reported as 400; every other deployment failure is a 500.
    """
    status_code = 400
    error_type = "archive_format_error"
    message = "Uploaded file is not a valid zip archive"
    label = "Deployment error"


class PublishError(DeployError):
    """A remote write failed; earlier writes stay in place."""
    status_code = 500
    error_type = "publish_error"
    message = "Publishing to the repository failed"
    label = "Deployment error"

    def __init__(self, message=None, results=None, **kwargs):
        super().__init__(message, **kwargs)
        self.results = list(results or [])

    @property
    def published(self):
        return [r.path for r in self.results if r.ok]


class GenerationError(DeployError):
    """The language model call failed."""
    status_code = 500
    error_type = "generation_error"
    message = "An error occurred while contacting the bot."


class StorageError(DeployError):
    """Reading from the hosted database failed."""
    status_code = 502
    error_type = "storage_error"
    message = "Could not read from the database"


# =============================================================================
# Error Handlers
# =============================================================================

def _wants_json():
    return request.path.startswith("/api/") and request.path != "/api/deploy"


def setup_error_handlers(app):
    """Register error handlers with Flask app."""

    @app.errorhandler(DeployError)
    def handle_deploy_error(error):
        log = logger.error if error.status_code >= 500 else logger.warning
        log(
            f"{error.error_type}: {error.message}",
            extra={"error_type": error.error_type, "path": request.path},
        )
        if _wants_json():
            response = jsonify(error.to_dict())
            response.status_code = error.status_code
            return response
        return Response(error.to_text(), status=error.status_code, mimetype="text/plain")

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({"error": f"Resource not found: {request.path}"}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return Response("Method not allowed", status=405, mimetype="text/plain")

    @app.errorhandler(413)
    def handle_request_too_large(error):
        limit_mb = app.config["MAX_CONTENT_LENGTH"] // (1024 * 1024)
        return Response(
            f"Upload exceeds the {limit_mb} MB limit", status=413, mimetype="text/plain"
        )
