"""Project configuration loaded from pyproject.toml."""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Environment variable holding the Discord bot token; never read from pyproject
DISCORD_TOKEN_ENV = "DISCORD_BOT_TOKEN"


class FormableWikiConfig(BaseModel):
    """Configuration for formable-wiki."""

    # External collaborators
    discord_api_base: str = "https://discord.com/api/v10"
    thumbnail_api_url: str = "https://thumbnails.roblox.com/v1/assets"
    continent_api_url: str = "https://restcountries.com/v3.1/name"
    remote_continent_lookup: bool = True

    # Network resilience: total attempts, base backoff in seconds
    request_timeout: float = Field(default=5.0, gt=0)
    max_attempts: int = Field(default=2, ge=1)
    retry_delay: float = Field(default=0.5, ge=0)

    log_dir: str = "logs"


@lru_cache(maxsize=1)
def load_config() -> FormableWikiConfig:
    """Load configuration from pyproject.toml.

    Returns:
        FormableWikiConfig with settings from the [tool.formable-wiki]
        section, falling back to defaults if not found.
    """
    pyproject_path = _find_pyproject()
    if pyproject_path is None:
        return FormableWikiConfig()

    with pyproject_path.open("rb") as f:
        data = tomllib.load(f)

    tool_config: dict[str, Any] = data.get("tool", {}).get("formable-wiki", {})
    return FormableWikiConfig(**tool_config)


def _find_pyproject() -> Path | None:
    """Find pyproject.toml by walking up from current file."""
    current = Path(__file__).resolve().parent
    for _ in range(10):  # Max 10 levels up
        candidate = current / "pyproject.toml"
        if candidate.exists():
            return candidate
        if current.parent == current:
            break
        current = current.parent
    return None


def discord_bot_token() -> str | None:
    """Read the Discord bot token from the environment or a .env file."""
    load_dotenv()
    return os.getenv(DISCORD_TOKEN_ENV) or None
