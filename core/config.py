import os
import logging

from dotenv import load_dotenv

# Path: project_root/.env
BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.path.join(BASE_DIR, "data")

load_dotenv(os.path.join(BASE_DIR, ".env"))

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite:///{os.path.join(DATA_DIR, 'body_point_tracker.db')}",
)

# Client-local settings document (group names, acupoint names)
SETTINGS_PATH = os.getenv("SETTINGS_PATH", os.path.join(DATA_DIR, "local_settings.json"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None):
    """Configure root logging once for the Streamlit process."""
    level_name = (level or LOG_LEVEL or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
