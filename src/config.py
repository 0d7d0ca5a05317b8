# config.py

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# === Core Bot Configuration ===


# --- Environment ---
def get_env_int(key: str, default: int | None = None) -> int | None:
    """Safely loads an integer from environment variables."""
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        print(f"⚠️ Warning: Environment variable '{key}' is not a valid integer.")
        return default


environment = os.getenv("ENVIRONMENT", "prod").lower()  # default to prod if unset

if environment == "dev":
    TOKEN = os.getenv("TEST_TOKEN")
    GUILD_ID = get_env_int("TEST_GUILD_ID")
else:
    TOKEN = os.getenv("TOKEN")
    GUILD_ID = get_env_int("GUILD_ID")

HERE = Path(__file__).parent
ROOT_DIR = HERE.parent

# === Logging ===
DEFAULT_FMT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"
LOG_FILE = os.getenv("LOG_FILE", "logs/bot.log")
HTTP_LOG_FILE = os.getenv("HTTP_LOG_FILE", "logs/http.log")

# === Rendering ===
RESOURCES_DIR = HERE / "rankcard" / "resources"
CARD_TEMPLATE_NAME = "card.svg.j2"
FONTS_DIR = RESOURCES_DIR / "fonts"
TOYS_DIR = RESOURCES_DIR / "toys"
# handed to fontconfig so cairo resolves font-family names to the card fonts
FONTCONFIG_FILE = RESOURCES_DIR / "fonts.conf"

# worker threads for card rendering, fixed for the life of the renderer
RENDER_WORKERS = get_env_int("RENDER_WORKERS", os.cpu_count() or 1)
MAX_PIXELS = 16_000_000  # 4k x 4k
PNG_COMPRESS_LEVEL = 1  # fastest; cards are throwaway attachments

# --- Progress bar geometry (matches card.svg.j2) ---
PROGRESS_BAR_ORIGIN = 40
PROGRESS_BAR_WIDTH = 700

# === Avatars ===
AVATAR_SIZE = 128
AVATAR_CACHE_TTL = 300.0  # seconds
AVATAR_MIME = "image/png"

# === Presentation ===
THEME_COLOR = 0x33BBFF
CARD_FILENAME = "card.png"
RENDER_FAILED_MESSAGE = "Could not generate rank card. Please try again later."
