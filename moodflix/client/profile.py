"""
Local profile: display name, bio, accent colour and taste preferences.

Stored under moodflix_profile for guests and moodflix_profile_<user_id>
once signed in.
"""
from typing import Dict, Optional
import logging
import re

from moodflix.client.errors import MoodFlixError
from moodflix.client.optimistic import attempt
from moodflix.client.records import now_iso
from moodflix.client.state import AppState

logger = logging.getLogger(__name__)

DEFAULT_ACCENT_COLOR = "#8B5CF6"
EDITABLE_FIELDS = (
    "display_name",
    "bio",
    "avatar_url",
    "accent_color",
    "favorite_genres",
    "preferred_languages",
    "is_public",
)
HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


class ProfileStore:
    def __init__(self, state: AppState):
        self.state = state
        self.profile: Optional[Dict] = None

    @property
    def notifier(self):
        return self.state.notifier

    @property
    def storage_key(self) -> str:
        if self.state.user:
            return f"moodflix_profile_{self.state.user.id}"
        return "moodflix_profile"

    def _default(self) -> Dict:
        user = self.state.user
        return {
            "display_name": user.display_name if user else "Guest",
            "bio": None,
            "avatar_url": None,
            "accent_color": DEFAULT_ACCENT_COLOR,
            "favorite_genres": [],
            "preferred_languages": [],
            "is_public": False,
            "created_at": now_iso(),
            "updated_at": now_iso(),
        }

    def load(self) -> Dict:
        stored = self.state.storage.get_json(self.storage_key)
        if isinstance(stored, dict):
            self.profile = stored
            return self.profile

        self.profile = self._default()
        try:
            self.state.storage.set_json(self.storage_key, self.profile)
        except MoodFlixError as e:
            logger.error(f"Could not store default profile: {str(e)}")
        return self.profile

    def update(self, **updates) -> bool:
        if self.profile is None:
            self.load()

        unknown = set(updates) - set(EDITABLE_FIELDS)
        if unknown:
            self.notifier.error("Error updating profile", f"Unknown fields: {', '.join(sorted(unknown))}")
            return False
        color = updates.get("accent_color")
        if color is not None and not HEX_COLOR.match(color):
            self.notifier.error("Error updating profile", "Accent color must look like #RRGGBB")
            return False

        updated = {**self.profile, **updates, "updated_at": now_iso()}

        def apply():
            previous = self.profile
            self.profile = updated
            return previous

        def rollback(previous):
            self.profile = previous

        try:
            attempt(apply, lambda: self.state.storage.set_json(self.storage_key, updated), rollback)
        except MoodFlixError as e:
            logger.error(f"Error updating profile: {str(e)}")
            self.notifier.error("Error updating profile", str(e))
            return False

        self.notifier.success("Profile updated successfully")
        return True

    def set_accent_color(self, color: str) -> bool:
        return self.update(accent_color=color)
