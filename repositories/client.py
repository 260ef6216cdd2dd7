"""
Supabase client initialization.

This module contains *only* the database connection setup. Repository modules
call `get_supabase()` to obtain the shared client; it is created on first use
so that importing the application does not require credentials.

Environment variables required:
- SUPABASE_URL: Your Supabase project URL
- SUPABASE_KEY: Your Supabase API key (use a server-side key only on the backend)
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from supabase import Client, create_client  # type: ignore[import-not-found]

# Load environment variables from the .env file at the project root.
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

_client: Optional[Client] = None
_client_lock = threading.Lock()


def _require_env(name: str, hint: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing environment variable: {name}. {hint}")
    return value


def get_supabase() -> Client:
    """Return the process-wide Supabase client, creating it on first use."""

    global _client

    if _client is None:
        with _client_lock:
            if _client is None:
                url = _require_env("SUPABASE_URL", "Set SUPABASE_URL to your Supabase project URL.")
                key = _require_env("SUPABASE_KEY", "Set SUPABASE_KEY to your Supabase API key.")
                _client = create_client(url, key)
    return _client


__all__ = ["get_supabase"]
