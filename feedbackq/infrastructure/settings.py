"""
Application-wide settings and environment configuration
"""

from __future__ import annotations

import os
from pathlib import Path

from feedbackq.infrastructure.env import ensure_env_loaded

ensure_env_loaded()

# Project paths
DATA_DIR = Path(os.getenv("FEEDBACKQ_DATA_DIR", "data"))

# Gemini backend
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
GEMINI_BASE_URL = os.getenv("FEEDBACKQ_GEMINI_BASE_URL", "https://generativelanguage.googleapis.com")
GEMINI_API_VERSION = os.getenv("FEEDBACKQ_GEMINI_API_VERSION", "v1")

# Used when model discovery fails; order is the attempt order
FALLBACK_MODELS = os.getenv(
    "FEEDBACKQ_FALLBACK_MODELS",
    "gemini-pro,gemini-1.5-pro,gemini-1.5-flash,gemini-1.0-pro",
)

# Storage
TREND_STORE_PATH = Path(os.getenv("FEEDBACKQ_TREND_STORE_PATH", str(DATA_DIR / "analyses.json")))
FEEDBACK_LOG_PATH = Path(
    os.getenv("FEEDBACKQ_FEEDBACK_LOG_PATH", str(DATA_DIR / "feedback.jsonl"))
)
