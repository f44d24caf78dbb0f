from __future__ import annotations

from loguru import logger


class StaticIdentityProvider:
    """Identity provider for a single locally signed-in user."""

    def __init__(self, uid: str | None = None):
        self._uid = uid.strip() if uid and uid.strip() else None

    def current_identity(self) -> str | None:
        return self._uid

    def sign_in(self, uid: str) -> None:
        if not uid.strip():
            raise ValueError("uid must not be blank")
        self._uid = uid.strip()
        logger.info(f"Signed in as {self._uid}")

    def sign_out(self) -> None:
        if self._uid is not None:
            logger.info(f"Signed out {self._uid}")
        self._uid = None
