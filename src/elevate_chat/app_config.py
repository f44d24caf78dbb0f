from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from elevate_chat.provider import DEFAULT_MODELS

_API_KEY_ENV_VARS = {
    "gemini": "GOOGLE_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}


@dataclass
class RuntimeEnv:
    provider_api_key: str
    provider_env_var: str


@dataclass
class AppConfig:
    provider_name: str
    model: str
    db_path: str
    user_id: str | None
    user_name: str
    user_email: str
    profile_image_url: str
    log_level: str
    log_consumers: list | None


def load_json_config(config_path: Path | None = None) -> dict:
    path = config_path or Path.cwd() / "config.json"
    if path.exists():
        with open(path) as f:
            return json.load(f)
    return {}


def parse_app_config(config: dict) -> AppConfig:
    provider_name = str(config.get("Provider", "gemini")).strip().lower()
    if provider_name not in DEFAULT_MODELS:
        raise ValueError(f"Unknown provider: {provider_name!r}")
    return AppConfig(
        provider_name=provider_name,
        model=str(config.get("Model") or DEFAULT_MODELS[provider_name]),
        db_path=str(config.get("DbPath", ".elevate/chat.db")),
        user_id=str(config.get("UserId", "")).strip() or None,
        user_name=str(config.get("UserName", "")).strip(),
        user_email=str(config.get("UserEmail", "")).strip(),
        profile_image_url=str(config.get("ProfileImageUrl", "")).strip(),
        log_level=config.get("LogLevel", "INFO"),
        log_consumers=config.get("LogConsumers"),
    )


def resolve_runtime_env(provider_name: str) -> RuntimeEnv:
    env_var = _API_KEY_ENV_VARS.get(provider_name, "GOOGLE_API_KEY")
    return RuntimeEnv(
        provider_api_key=os.environ.get(env_var, ""),
        provider_env_var=env_var,
    )
