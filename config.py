"""
Load environment variables from .env file.
"""
import os
from dotenv import load_dotenv

load_dotenv()

DATA_DIR = os.environ.get("DATA_DIR", "data")
PORT = int(os.environ.get("PORT", 3001))

DEFAULT_ISSUE_NUMBER = int(os.environ.get("DEFAULT_ISSUE_NUMBER", 10))
RECENT_LIMIT         = int(os.environ.get("RECENT_LIMIT", 20))
DEFAULT_IMAGE_WIDTH  = int(os.environ.get("DEFAULT_IMAGE_WIDTH", 500))
MAX_IMAGE_WIDTH      = int(os.environ.get("MAX_IMAGE_WIDTH", 4000))

CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL    = os.environ.get("LOG_LEVEL", "INFO").upper()
