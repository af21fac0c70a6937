from __future__ import annotations

import os
from typing import Optional, Tuple

from dotenv import load_dotenv

from .models import Credentials

BASE_URL_ENV = "WATERWHEEL_BASE_URL"
USER_ENV = "WATERWHEEL_USER"
PASS_ENV = "WATERWHEEL_PASS"


def load_env_config(*, use_dotenv: bool = True) -> Tuple[str, str, str]:
    """Load base URL, user and password from environment (optional .env)."""
    if use_dotenv:
        load_dotenv()
    base_url = os.getenv(BASE_URL_ENV, "").strip()
    user = os.getenv(USER_ENV, "").strip()
    password = os.getenv(PASS_ENV, "").strip()
    return base_url, user, password


def credentials_from_env(*, use_dotenv: bool = True) -> Optional[Credentials]:
    _, user, password = load_env_config(use_dotenv=use_dotenv)
    if not user:
        return None
    return Credentials(user=user, password=password)


__all__ = [
    "BASE_URL_ENV",
    "USER_ENV",
    "PASS_ENV",
    "load_env_config",
    "credentials_from_env",
]
