"""
Centralized .env loader for feedbackq.

Side Effects:
    - Loads .env file from the project root (or current directory) once

Usage:
    from feedbackq.infrastructure.env import ensure_env_loaded

    ensure_env_loaded()
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv

_ENV_LOADED = False


def ensure_env_loaded(env_path: Path | None = None) -> None:
    """
    Ensure .env file is loaded exactly once.

    Args:
        env_path: Optional path to .env file. If None, walks up from this
            package looking for one, then falls back to the working directory.

    Side Effects:
        - Loads environment variables from .env file (existing vars win)
        - Sets module-level flag to prevent double-loading
    """
    global _ENV_LOADED
    if _ENV_LOADED:
        return

    if env_path is None:
        current = Path(__file__).parent
        while current != current.parent:
            env_candidate = current / ".env"
            if env_candidate.exists():
                env_path = env_candidate
                break
            current = current.parent

    if env_path and env_path.exists():
        load_dotenv(env_path)
    else:
        load_dotenv()
    _ENV_LOADED = True
