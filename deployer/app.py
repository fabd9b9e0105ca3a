import os

from flask import Flask
from flask_cors import CORS

from deployer.agent.botController import bot_bp
from deployer.agent.geminiBot import GeminiBot
from deployer.analytics.analyticsController import analytics_bp
from deployer.analytics.supabaseStore import SupabaseStore, VisitorTracker
from deployer.config import Config, bot_identity
from deployer.errors import setup_error_handlers
from deployer.logging_config import setup_logging, setup_request_logging
from deployer.repoDeployment.deployController import deploy_bp
from deployer.repoDeployment.repoPublisher import GitHubPublisher


def create_app(config_overrides=None, publisher=None, bot=None, tracker=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)
    CORS(app)

    setup_logging(app, level=app.config["LOG_LEVEL"], json_format=app.config["JSON_LOGS"])
    setup_request_logging(app)
    setup_error_handlers(app)

    app.extensions["publisher"] = publisher or GitHubPublisher(
        token=app.config["GITHUB_TOKEN"],
        identity=bot_identity(app.config),
        api_url=app.config["GITHUB_API_URL"],
        timeout=app.config["GITHUB_TIMEOUT"],
    )
    app.extensions["bot"] = bot or GeminiBot(
        api_key=app.config["GEMINI_API_KEY"], model_name=app.config["GEMINI_MODEL"]
    )
    app.extensions["tracker"] = tracker or VisitorTracker(
        SupabaseStore(
            app.config["SUPABASE_URL"],
            app.config["SUPABASE_ANON_KEY"],
            timeout=app.config["SUPABASE_TIMEOUT"],
        )
    )

    app.register_blueprint(deploy_bp)
    app.register_blueprint(bot_bp)
    app.register_blueprint(analytics_bp)
    return app


def main():
    app = create_app()
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", 8000)))


if __name__ == "__main__":
    main()
