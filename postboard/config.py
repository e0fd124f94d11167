"""Centralized configuration for the scheduling dashboard backend."""

import os
from pathlib import Path

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# =============================================================================
# Database
# =============================================================================

# SQLite file for local development; point at PostgreSQL in production
DATABASE_URL = os.environ.get(
    "DATABASE_URL",
    f"sqlite:///{PROJECT_ROOT / 'postboard.db'}",
)

# =============================================================================
# Media uploads
# =============================================================================

# Directory where uploaded media files are written
UPLOAD_DIR = Path(os.environ.get("UPLOAD_DIR", str(PROJECT_ROOT / "uploads")))

# Base URL used to build retrievable links for uploaded files
PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "http://localhost:5000").rstrip("/")

# Per-file size ceiling (100 MiB)
MAX_UPLOAD_BYTES = int(os.environ.get("MAX_UPLOAD_BYTES", str(100 * 1024 * 1024)))

# =============================================================================
# HTTP
# =============================================================================

# Comma-separated list of browser origins allowed to call the API
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
    ).split(",")
    if origin.strip()
]

# Shared secret echoed back during platform webhook subscription
WEBHOOK_VERIFY_TOKEN = os.environ.get("WEBHOOK_VERIFY_TOKEN", "")

# Meta app secret; when set, POST deliveries must carry a matching X-Hub-Signature-256
WEBHOOK_APP_SECRET = os.environ.get("WEBHOOK_APP_SECRET", "")

# =============================================================================
# Auto-reply (optional text-completion collaborator)
# =============================================================================

# Leave unset to disable completions; the fallback acknowledgement is used instead
OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")
AUTO_REPLY_MODEL = os.environ.get("AUTO_REPLY_MODEL", "gpt-4o-mini")
AUTO_REPLY_TIMEOUT_SECONDS = float(os.environ.get("AUTO_REPLY_TIMEOUT_SECONDS", "10"))

# Number of prior messages included in the completion prompt
AUTO_REPLY_HISTORY = int(os.environ.get("AUTO_REPLY_HISTORY", "5"))

# =============================================================================
# Logging
# =============================================================================

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_JSON = os.environ.get("LOG_JSON", "false").lower() == "true"
