from __future__ import annotations

from elevate_chat.models import UserProfile
from elevate_chat.store.store import ChatStore


class ProfileStore:
    def __init__(self, store: ChatStore):
        self._store = store

    def save_profile(self, profile: UserProfile) -> None:
        with self._store.transaction():
            self._store.execute(
                """
                INSERT INTO users (uid, name, email, profile_image_url)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(uid) DO UPDATE SET
                    name = excluded.name,
                    email = excluded.email,
                    profile_image_url = excluded.profile_image_url
                """,
                (profile.uid, profile.name, profile.email, profile.profile_image_url),
            )

    def get_profile(self, uid: str) -> UserProfile | None:
        row = self._store.fetch_one(
            "SELECT uid, name, email, profile_image_url FROM users WHERE uid = ? LIMIT 1",
            (uid,),
        )
        if row is None:
            return None
        return UserProfile(
            uid=row["uid"],
            name=row["name"],
            email=row["email"],
            profile_image_url=row["profile_image_url"],
        )
