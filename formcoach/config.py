from __future__ import annotations
import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

ASSISTANT_MODEL = os.getenv("ASSISTANT_MODEL", "gpt-4o-mini")

# Form accuracy (%) reported when a session ends without any counted rep
EMPTY_FORM_ACCURACY = float(os.getenv("FORMCOACH_EMPTY_ACCURACY", "100"))
COUNTDOWN_S = int(os.getenv("FORMCOACH_COUNTDOWN_S", "3"))
TICK_S = float(os.getenv("FORMCOACH_TICK_S", "1.0"))
CAMERA_INDEX = int(os.getenv("FORMCOACH_CAMERA_INDEX", "0"))
LOG_LEVEL = os.getenv("FORMCOACH_LOG_LEVEL", "INFO")


def setup_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
