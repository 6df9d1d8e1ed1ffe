"""
HTTP client for the MoodFlix API.

Functions are invoked by name (POST /functions/<name>), the same way the
web client calls its edge functions; account calls go to /api/auth.
"""
from typing import Any, Dict, Optional
import logging
import os

import requests
from dotenv import load_dotenv

from moodflix.client.errors import FunctionError

load_dotenv()
logger = logging.getLogger(__name__)


def _error_message(payload: Any, response) -> str:
    if isinstance(payload, dict):
        detail = payload.get("detail", payload.get("error"))
        if isinstance(detail, str):
            return detail
        if isinstance(detail, list) and detail:
            # FastAPI request validation errors
            return "; ".join(str(item.get("msg", item)) if isinstance(item, dict) else str(item) for item in detail)
    return f"Request failed with status {response.status_code}"


class MoodFlixAPI:
    DEFAULT_URL = "http://localhost:8000"

    def __init__(self, base_url: Optional[str] = None, timeout: float = 60, session: Optional[requests.Session] = None):
        self.base_url = (base_url or os.getenv("MOODFLIX_API_URL", self.DEFAULT_URL)).rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def _request(self, method: str, path: str, body: Optional[Dict] = None, token: Optional[str] = None) -> Dict:
        """
        Send one request and return the decoded JSON object.

        Raises:
            FunctionError: transport failure, non-2xx status, or a body carrying "error"
        """
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        url = f"{self.base_url}{path}"

        try:
            response = self.http.request(method, url, json=body, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {path} failed: {str(e)}")
            raise FunctionError(f"Network error: {str(e)}")

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.ok:
            message = _error_message(payload, response)
            logger.error(f"{method} {path} -> {response.status_code}: {message}")
            raise FunctionError(message, response.status_code)
        if isinstance(payload, dict) and payload.get("error"):
            raise FunctionError(str(payload["error"]), response.status_code)
        if not isinstance(payload, dict):
            raise FunctionError(f"Unexpected response from {path}", response.status_code)
        return payload

    # ---- functions ----------------------------------------------------------

    def invoke(self, name: str, body: Optional[Dict] = None, token: Optional[str] = None) -> Dict:
        return self._request("POST", f"/functions/{name}", body or {}, token)

    def user_data(self, action: str, token: Optional[str] = None, data: Optional[Dict] = None) -> Dict:
        return self.invoke("user-data", {"action": action, "token": token, "data": data or {}})

    # ---- accounts -----------------------------------------------------------

    def register(self, username: str, password: str, display_name: Optional[str] = None) -> Dict:
        body = {"username": username, "password": password}
        if display_name:
            body["display_name"] = display_name
        return self._request("POST", "/api/auth/register", body)

    def login(self, username: str, password: str, remember_me: bool = False) -> Dict:
        return self._request("POST", "/api/auth/login", {
            "username": username,
            "password": password,
            "remember_me": remember_me,
        })

    def logout(self, token: str) -> Dict:
        return self._request("POST", "/api/auth/logout", token=token)

    def me(self, token: str) -> Dict:
        return self._request("GET", "/api/auth/me", token=token)

    # ---- admin --------------------------------------------------------------

    def admin(self, path: str, token: str) -> Dict:
        return self._request("GET", f"/api/admin/{path.lstrip('/')}", token=token)
