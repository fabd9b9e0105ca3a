import logging

from flask import Blueprint, Response, current_app, request

from deployer.errors import DeployError, PublishError
from deployer.repoDeployment.deployPipeline import build_upload_request, deploy_archive

logger = logging.getLogger(__name__)

deploy_bp = Blueprint("deploy", __name__)

SUCCESS_MESSAGE = "Project deployed successfully!"


@deploy_bp.route("/api/deploy", methods=["POST"])
def deploy():
    upload_file = request.files.get("file")
    blob = upload_file.read() if upload_file else b""

    upload = build_upload_request(request.form.to_dict(), blob)
    publisher = current_app.extensions["publisher"]

    try:
        deploy_archive(upload, publisher, current_app.config["MAX_EXTRACTED_BYTES"])
    except PublishError as e:
        logger.error(
            f"Deployment to {upload.owner_name}/{upload.repository_name} partially applied",
            extra={"published": e.published},
        )
        raise
    except DeployError:
        raise
    except Exception as e:
        logger.exception(f"Deployment error: {e}")
        return Response(f"Deployment error: {e}", status=500, mimetype="text/plain")

    return Response(SUCCESS_MESSAGE, status=200, mimetype="text/plain")
