"""
Configuration - environment-driven settings.

Values come from the process environment, with a local .env file loaded first.

    REDIS_HOST / REDIS_PORT / REDIS_PASSWORD  -> learner store
    SKILL_DATA_DIR                            -> skill catalog JSON files
    QUESTION_BANK_PATH                        -> question bank JSON file
    LOG_LEVEL                                 -> loguru level
    API_HOST / API_PORT                       -> uvicorn bind address
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

# Load environment variables from .env
load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parent

REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", 6379))
REDIS_PASSWORD = os.getenv("REDIS_PASSWORD", None)

SKILL_DATA_DIR = os.getenv("SKILL_DATA_DIR", str(PROJECT_ROOT / "data" / "skills"))
QUESTION_BANK_PATH = os.getenv("QUESTION_BANK_PATH", str(PROJECT_ROOT / "data" / "questions.json"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", 8000))


def setup_logging(level: str = None):
    """Replace loguru's default handler with a single stderr sink."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level or LOG_LEVEL,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {name} | {message}",
    )
