import os
import logging
from dotenv import load_dotenv, dotenv_values

from src import constants

# Load environment variables from the .env file in the project root
# This line looks for the .env file in the parent directory of src/
dotenv_path = os.path.join(os.path.dirname(__file__), '..', '.env')
load_dotenv(dotenv_path=dotenv_path)


MASKED = "***masked***"

# --- API Keys ---
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
GOOGLE_CSE_ID = os.getenv("GOOGLE_CSE_ID")

# --- Models / Frontend ---
GEMINI_MODEL = os.getenv("GEMINI_MODEL", constants.DEFAULT_GEMINI_MODEL)
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")


def mask_key(key_value: str | None) -> str:
    """Mask API key for display, showing only first 4 and last 4 characters."""
    if not key_value:
        return "NOT SET"
    if len(key_value) <= 8:
        return "SET (short)"
    return f"SET ({key_value[:4]}...{key_value[-4:]})"


def log_env_status():
    """Startup banner with every secret masked."""
    logging.info("Search Aggregator - Environment Status")
    logging.info(f"GEMINI_API_KEY:  {mask_key(GEMINI_API_KEY)}")
    logging.info(f"GOOGLE_API_KEY:  {mask_key(GOOGLE_API_KEY)}")
    logging.info(f"GOOGLE_CSE_ID:   {mask_key(GOOGLE_CSE_ID)}")
    logging.info(f"GEMINI_MODEL:    {GEMINI_MODEL}")


def _is_secret(key: str) -> bool:
    return "API_KEY" in key or "SECRET" in key


def load_settings(env_path: str = dotenv_path) -> dict[str, str]:
    """
    Reads the .env file and returns its settings with secrets masked.
    A missing file yields an empty dict.
    """
    if not os.path.exists(env_path):
        return {}

    settings = {}
    for key, value in dotenv_values(env_path).items():
        value = (value or "").strip()
        if _is_secret(key):
            settings[key] = MASKED if value else ""
        else:
            settings[key] = value
    return settings


def save_settings(settings: dict[str, str], env_path: str = dotenv_path) -> dict[str, str]:
    """
    Writes the given settings to the .env file and reloads it into the process
    environment. A still-masked secret keeps the value already on disk. An empty
    value clears the key from both the file and the process environment.

    Returns:
        The settings whose values changed in this call; a cleared key maps to "".
    """
    existing = dotenv_values(env_path) if os.path.exists(env_path) else {}

    merged = {}
    written = {}
    for key, value in settings.items():
        if value == MASKED:
            if existing.get(key):
                merged[key] = existing[key]
            continue
        if value:
            merged[key] = str(value)
            if existing.get(key) != str(value):
                written[key] = str(value)
        elif existing.get(key) or os.environ.get(key):
            written[key] = ""

    with open(env_path, "w", encoding="utf-8") as f:
        for key, value in merged.items():
            f.write(f"{key}={value}\n")

    for key, value in written.items():
        if not value:
            os.environ.pop(key, None)

    load_dotenv(dotenv_path=env_path, override=True)
    _refresh_from_env()
    logging.info(f"Settings saved to .env file ({len(merged)} keys, {len(written)} changed)")
    return written


def _refresh_from_env():
    global GEMINI_API_KEY, GOOGLE_API_KEY, GOOGLE_CSE_ID, GEMINI_MODEL
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
    GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
    GOOGLE_CSE_ID = os.getenv("GOOGLE_CSE_ID")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", constants.DEFAULT_GEMINI_MODEL)
