"""
Fakes shared by the client store tests.
"""
import threading

from moodflix.client import AppState, LocalStorage, Notifier
from moodflix.client.errors import FunctionError
from moodflix.client.state import SignedInUser


class FakeAPI:
    """
    Records every call. Responses come from .responses keyed by function or
    user-data action name: a dict, a callable(body) -> dict, or an exception.
    """

    def __init__(self):
        self.responses = {}
        self.calls = []
        self.tokens = []

    def _answer(self, key, body):
        self.calls.append((key, body))
        response = self.responses.get(key, {"success": True})
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(body)
        return response

    def invoke(self, name, body=None, token=None):
        self.tokens.append(token)
        return self._answer(name, body or {})

    def user_data(self, action, token=None, data=None):
        return self._answer(action, data or {})

    def admin(self, path, token):
        return self._answer(path, {})

    def calls_to(self, key):
        return [body for name, body in self.calls if name == key]


class GatedAnswer:
    """Blocks the calling thread until release() so tests can observe in-flight state."""

    def __init__(self, response):
        self.response = response
        self.entered = threading.Event()
        self._gate = threading.Event()

    def __call__(self, body):
        self.entered.set()
        self._gate.wait(timeout=5)
        return self.response

    def release(self):
        self._gate.set()


def failure(message="Internal server error", status_code=500):
    return FunctionError(message, status_code)


def make_state(signed_in=True, storage=None, user_id=7):
    state = AppState(api=FakeAPI(), storage=storage or LocalStorage(), notifier=Notifier())
    if signed_in:
        state.token = "token-123"
        state.user = SignedInUser(id=user_id, username="alice", display_name="Alice")
    return state
