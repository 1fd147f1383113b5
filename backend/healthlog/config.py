import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.environ.get("HEALTHLOG_DATA_DIR", str(BASE_DIR / "data")))
STORAGE_PATH = Path(os.environ.get("HEALTHLOG_STORAGE_PATH", str(DATA_DIR / "storage.json")))

LOG_LEVEL = os.environ.get("HEALTHLOG_LOG_LEVEL", "INFO")
LOG_FILE = os.environ.get("HEALTHLOG_LOG_FILE") or None

HOST = os.environ.get("HEALTHLOG_HOST", "0.0.0.0")
PORT = int(os.environ.get("HEALTHLOG_PORT", "8080"))

TOKEN_LENGTH = 32
TOKEN_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"

# Number of trailing water records averaged for the weekly summary.
WEEKLY_WINDOW = 7

CATEGORY_ITEM_PREFIX = "item-"

CORS_ALLOW_ORIGINS = ["*"]
CORS_ALLOW_METHODS = ["GET", "POST", "PATCH", "DELETE", "OPTIONS"]
CORS_ALLOW_HEADERS = ["Content-Type", "Authorization"]
CORS_MAX_AGE = 3600
