"""
Client application state: the signed-in user and the shared services every
store needs (API client, local storage, notifier).
"""
from typing import Optional
import logging

from pydantic import BaseModel

from moodflix.client.api import MoodFlixAPI
from moodflix.client.errors import AuthRequiredError, FunctionError
from moodflix.client.notices import Notifier
from moodflix.client.storage import LocalStorage

logger = logging.getLogger(__name__)


class SignedInUser(BaseModel):
    id: int
    username: str
    display_name: str
    is_admin: bool = False


class AppState:
    SESSION_TOKEN_KEY = "moodflix_session_token"
    SESSION_USER_KEY = "moodflix_session_user"

    def __init__(
        self,
        api: Optional[MoodFlixAPI] = None,
        storage: Optional[LocalStorage] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.api = api or MoodFlixAPI()
        self.storage = storage if storage is not None else LocalStorage.from_env()
        self.notifier = notifier or Notifier()
        self.token: Optional[str] = None
        self.user: Optional[SignedInUser] = None

    @property
    def is_signed_in(self) -> bool:
        return self.token is not None and self.user is not None

    def _remember(self, token: str, user: SignedInUser):
        self.token = token
        self.user = user
        self.storage.set_item(self.SESSION_TOKEN_KEY, token)
        self.storage.set_json(self.SESSION_USER_KEY, user.model_dump())

    def _forget(self):
        self.token = None
        self.user = None
        self.storage.remove_item(self.SESSION_TOKEN_KEY)
        self.storage.remove_item(self.SESSION_USER_KEY)

    def sign_up(self, username: str, password: str, display_name: Optional[str] = None) -> SignedInUser:
        self.api.register(username, password, display_name)
        return self.sign_in(username, password)

    def sign_in(self, username: str, password: str, remember_me: bool = False) -> SignedInUser:
        result = self.api.login(username, password, remember_me)
        user = SignedInUser.model_validate(result["user"])
        self._remember(result["access_token"], user)
        logger.info(f"Signed in as {user.username}")
        return user

    def sign_out(self):
        if self.token:
            try:
                self.api.logout(self.token)
            except FunctionError as e:
                logger.warning(f"Server sign-out failed, clearing local session anyway: {e.message}")
        self._forget()

    def restore_session(self) -> Optional[SignedInUser]:
        """
        Reload a stored session. An expired token (401) clears it; any other
        failure keeps the stored user so the app still works offline.
        """
        token = self.storage.get_item(self.SESSION_TOKEN_KEY)
        if not token:
            return None

        stored = self.storage.get_json(self.SESSION_USER_KEY)
        try:
            user = SignedInUser.model_validate(self.api.me(token))
        except FunctionError as e:
            if e.status_code == 401:
                logger.info("Stored session expired")
                self._forget()
                return None
            if not stored:
                return None
            logger.warning(f"Could not verify stored session: {e.message}")
            user = SignedInUser.model_validate(stored)

        self._remember(token, user)
        return user

    def require_user(self, message: str = "Please sign in to continue") -> SignedInUser:
        if not self.is_signed_in:
            raise AuthRequiredError(message)
        return self.user
