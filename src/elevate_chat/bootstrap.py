from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from elevate_chat.app_config import AppConfig, RuntimeEnv
from elevate_chat.controller import ChatSessionController
from elevate_chat.identity import StaticIdentityProvider
from elevate_chat.logging_config import setup_logging
from elevate_chat.models import UserProfile
from elevate_chat.provider import ResponseProvider, create_provider
from elevate_chat.store import ChatStore, MessageStore, ProfileStore, SessionIndex


@dataclass
class AppRuntime:
    controller: ChatSessionController
    identity: StaticIdentityProvider
    store: ChatStore
    log_descriptions: list[str]

    def close(self) -> None:
        self.controller.close()
        self.store.close()


def bootstrap_runtime(
    app: AppConfig,
    env: RuntimeEnv,
    *,
    provider: ResponseProvider | None = None,
) -> AppRuntime:
    log_descriptions = setup_logging(level=app.log_level, consumers=app.log_consumers)

    db_path = app.db_path
    if db_path != ":memory:" and not Path(db_path).is_absolute():
        db_path = str(Path.cwd() / db_path)
    store = ChatStore(db_path)
    profiles = ProfileStore(store)

    identity = StaticIdentityProvider(app.user_id)
    if app.user_id is not None:
        profiles.save_profile(
            UserProfile(
                uid=app.user_id,
                name=app.user_name,
                email=app.user_email,
                profile_image_url=app.profile_image_url,
            )
        )

    if provider is None:
        provider = create_provider(app.provider_name, env.provider_api_key, app.model)
    logger.info(f"Provider: {app.provider_name} ({app.model}), store: {db_path}")

    controller = ChatSessionController(
        identity=identity,
        session_index=SessionIndex(store),
        message_store=MessageStore(store),
        provider=provider,
        profiles=profiles,
    )
    controller.start()

    return AppRuntime(
        controller=controller,
        identity=identity,
        store=store,
        log_descriptions=log_descriptions,
    )
