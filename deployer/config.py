import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class BotIdentity:
    """Committer and author attached to every commit the deployer makes."""

    name: str
    email: str

    def as_dict(self):
        return {"name": self.name, "email": self.email}


def _optional_float(name):
    value = os.getenv(name)
    return float(value) if value else None


class Config:
    GITHUB_TOKEN = os.getenv("GITHUB_TOKEN")
    GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com")
    GITHUB_TIMEOUT = _optional_float("GITHUB_TIMEOUT")

    BOT_NAME = os.getenv("BOT_NAME", "PaongDev")
    BOT_EMAIL = os.getenv("BOT_EMAIL", "paongdev@example.com")

    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")

    SUPABASE_URL = os.getenv("SUPABASE_URL")
    SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")
    SUPABASE_TIMEOUT = float(os.getenv("SUPABASE_TIMEOUT", "3"))

    MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_MB", "50")) * 1024 * 1024
    MAX_EXTRACTED_BYTES = int(os.getenv("MAX_EXTRACTED_MB", "50")) * 1024 * 1024

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    JSON_LOGS = os.getenv("FLASK_ENV", "production") == "production"


def bot_identity(config):
    return BotIdentity(name=config["BOT_NAME"], email=config["BOT_EMAIL"])
