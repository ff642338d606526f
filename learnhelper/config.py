"""
Runtime settings.

Values come from the environment (a local .env file is loaded first, without
overriding variables that are already set). Only the portal hosts, the user
agent and the reply-deletion timeout are configurable; credentials are read
by the CLI only.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_LEARN_HOST = "https://learn.tsinghua.edu.cn"
DEFAULT_ID_HOST = "https://id.tsinghua.edu.cn"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
# The portal drops the connection instead of answering a reply deletion.
DEFAULT_DELETE_TIMEOUT = 5.0


@dataclass(frozen=True)
class Settings:
    learn_host: str = DEFAULT_LEARN_HOST
    id_host: str = DEFAULT_ID_HOST
    user_agent: str = DEFAULT_USER_AGENT
    delete_timeout: float = DEFAULT_DELETE_TIMEOUT
    username: Optional[str] = None
    password: Optional[str] = None


def _env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


def load_settings(env_file: str | Path | None = None) -> Settings:
    """
    Build Settings from LEARNHELPER_* environment variables.

    A malformed LEARNHELPER_DELETE_TIMEOUT raises ValueError.
    """
    load_dotenv(env_file, override=False)

    return Settings(
        learn_host=_env("LEARNHELPER_LEARN_HOST", DEFAULT_LEARN_HOST).rstrip("/"),
        id_host=_env("LEARNHELPER_ID_HOST", DEFAULT_ID_HOST).rstrip("/"),
        user_agent=_env("LEARNHELPER_USER_AGENT", DEFAULT_USER_AGENT),
        delete_timeout=float(_env("LEARNHELPER_DELETE_TIMEOUT", str(DEFAULT_DELETE_TIMEOUT))),
        username=os.getenv("LEARNHELPER_USERNAME") or None,
        password=os.getenv("LEARNHELPER_PASSWORD") or None,
    )
