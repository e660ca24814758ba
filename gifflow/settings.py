import os
from dataclasses import dataclass
from typing import Optional

import yaml
from dotenv import load_dotenv

from gifflow.logger import get_logger

load_dotenv()

logger = get_logger("gifflow.settings")

# === Raw environment values ===

GITHUB_WEBHOOK_SECRET = os.getenv("GITHUB_WEBHOOK_SECRET")

# GitHub App authentication
GITHUB_APP_ID = os.getenv("GITHUB_APP_ID")
GITHUB_PRIVATE_KEY_PATH = os.getenv("GITHUB_PRIVATE_KEY_PATH")
GITHUB_PRIVATE_KEY = os.getenv("GITHUB_PRIVATE_KEY")
GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com")

# App assertion (JWT) lifecycle
JWT_TTL_SECONDS = int(os.getenv("JWT_TTL_SECONDS", "600"))
JWT_RENEW_MARGIN_SECONDS = int(os.getenv("JWT_RENEW_MARGIN_SECONDS", "30"))
JWT_CHECK_INTERVAL_SECONDS = float(os.getenv("JWT_CHECK_INTERVAL_SECONDS", "60"))
JWT_BACKDATE_SECONDS = int(os.getenv("JWT_BACKDATE_SECONDS", "60"))
# Signed exp sits this far inside the window; must stay below the renew margin
JWT_EXP_SKEW_SECONDS = int(os.getenv("JWT_EXP_SKEW_SECONDS", "10"))

# Tenor media search
TENOR_API_KEY = os.getenv("TENOR_API_KEY")
TENOR_CLIENT_KEY = os.getenv("TENOR_CLIENT_KEY")
TENOR_API_URL = os.getenv("TENOR_API_URL", "https://tenor.googleapis.com/v2/search")

HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

BOT_CONFIG_PATH = os.getenv("BOT_CONFIG_PATH", "app.yml")


@dataclass(frozen=True)
class GifSettings:
    limit: int = 1
    randomised: bool = False
    width: int = 200
    height: int = 200


def load_gif_settings(path: str = BOT_CONFIG_PATH) -> GifSettings:
    """
    Read bot.gif_settings from the YAML bot config.

    Missing or unreadable config falls back to defaults.
    """
    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        logger.warning("Bot config not loaded from %s, using gif defaults", path)
        return GifSettings()

    raw = (config.get("bot") or {}).get("gif_settings") or {}
    defaults = GifSettings()

    return GifSettings(
        limit=int(raw.get("gif_limit", defaults.limit)),
        randomised=bool(raw.get("gif_randomised", defaults.randomised)),
        width=int(raw.get("gif_width", defaults.width)),
        height=int(raw.get("gif_height", defaults.height)),
    )


GIF_SETTINGS = load_gif_settings()


def read_private_key() -> Optional[str]:
    """
    Return the GitHub App signing key.

    GITHUB_PRIVATE_KEY (inline, with literal \\n sequences) wins over
    GITHUB_PRIVATE_KEY_PATH.
    """
    if GITHUB_PRIVATE_KEY:
        return GITHUB_PRIVATE_KEY.replace("\\n", "\n")

    if not GITHUB_PRIVATE_KEY_PATH:
        return None

    try:
        with open(GITHUB_PRIVATE_KEY_PATH, "r") as f:
            return f.read()
    except OSError as exc:
        raise RuntimeError(
            f"Failed to read GitHub private key at {GITHUB_PRIVATE_KEY_PATH}"
        ) from exc


def validate_github_settings() -> None:
    """
    Validate required GitHub App configuration.

    Raises RuntimeError if required values are missing or invalid.
    """
    if not GITHUB_APP_ID:
        raise RuntimeError("GITHUB_APP_ID is not set")

    if not GITHUB_PRIVATE_KEY and not GITHUB_PRIVATE_KEY_PATH:
        raise RuntimeError("GITHUB_PRIVATE_KEY or GITHUB_PRIVATE_KEY_PATH must be set")

    if not GITHUB_PRIVATE_KEY and not os.path.exists(GITHUB_PRIVATE_KEY_PATH):
        raise RuntimeError(
            f"GITHUB_PRIVATE_KEY_PATH does not exist: {GITHUB_PRIVATE_KEY_PATH}"
        )


def validate_media_settings() -> None:
    """
    Tenor keys are optional: without them comments are posted without media.
    """
    if not TENOR_API_KEY:
        logger.warning("TENOR_API_KEY is not set; comments will carry no media")
