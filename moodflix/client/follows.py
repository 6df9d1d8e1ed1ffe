from typing import Optional
import logging

from moodflix.client.errors import AuthRequiredError, MoodFlixError
from moodflix.client.optimistic import BusyFlag, attempt
from moodflix.client.state import AppState

logger = logging.getLogger(__name__)


class FollowStore:
    """Follow state between the signed-in user and one other user"""

    def __init__(self, state: AppState, target_user_id: int):
        self.state = state
        self.target_user_id = target_user_id
        self.is_following = False
        self.followers_count = 0
        self.following_count = 0
        self._busy = BusyFlag()

    @property
    def notifier(self):
        return self.state.notifier

    @property
    def is_loading(self) -> bool:
        return self._busy.busy

    def load(self):
        try:
            data = self.state.api.user_data("get_follow_status", self.state.token, {"user_id": self.target_user_id})
        except MoodFlixError as e:
            logger.error(f"Error fetching follow status for {self.target_user_id}: {str(e)}")
            self.notifier.error("Couldn't load follow status", str(e))
            return
        self.is_following = bool(data.get("is_following"))
        self.followers_count = int(data.get("followers_count") or 0)
        self.following_count = int(data.get("following_count") or 0)

    def _change(self, follow: bool) -> bool:
        try:
            user = self.state.require_user("Please sign in to follow users")
        except AuthRequiredError as e:
            self.notifier.error(str(e))
            return False
        if user.id == self.target_user_id:
            self.notifier.error("You cannot follow yourself")
            return False

        with self._busy.claim() as acquired:
            if not acquired:
                logger.debug("Follow update already in flight")
                return False

            def apply():
                previous = (self.is_following, self.followers_count)
                self.is_following = follow
                self.followers_count = self.followers_count + 1 if follow else max(0, self.followers_count - 1)
                return previous

            def rollback(previous):
                self.is_following, self.followers_count = previous

            action = "follow_user" if follow else "unfollow_user"
            try:
                attempt(
                    apply,
                    lambda: self.state.api.user_data(action, self.state.token, {"user_id": self.target_user_id}),
                    rollback,
                )
            except MoodFlixError as e:
                logger.error(f"Error on {action} {self.target_user_id}: {str(e)}")
                self.notifier.error("Failed to update follow", str(e))
                return False

        self.notifier.success("Following!" if follow else "Unfollowed")
        return True

    def follow(self) -> bool:
        if self.is_following:
            self.notifier.info("You're already following this user")
            return False
        return self._change(True)

    def unfollow(self) -> bool:
        if not self.is_following:
            return False
        return self._change(False)

    def toggle(self) -> bool:
        return self._change(not self.is_following)
