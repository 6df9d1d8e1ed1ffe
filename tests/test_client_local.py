"""
Local storage backed stores, the similar-movies pager, admin analytics,
the HTTP client and session handling.
"""
import json
import threading

import pytest
import requests

from moodflix.client import (
    AdminAnalytics,
    AppState,
    CollectionStore,
    LocalStorage,
    MoodFlixAPI,
    Notifier,
    ProfileStore,
    SimilarMoviesPager,
    WatchHistoryStore,
)
from moodflix.client.errors import FunctionError, StorageError

from client_fakes import FakeAPI, GatedAnswer, failure, make_state


# ============================================
# LocalStorage
# ============================================

def test_storage_persists_across_instances(tmp_path):
    path = tmp_path / "state.json"
    storage = LocalStorage(str(path))
    storage.set_json("moodflix_watch_history", [{"movie_id": 1}])
    storage.set_item("moodflix_session_token", "abc")

    reloaded = LocalStorage(str(path))

    assert reloaded.get_json("moodflix_watch_history") == [{"movie_id": 1}]
    assert reloaded.get_item("moodflix_session_token") == "abc"
    assert list(tmp_path.iterdir()) == [path]


def test_storage_remove_and_clear(tmp_path):
    storage = LocalStorage(str(tmp_path / "state.json"))
    storage.set_item("a", "1")
    storage.set_item("b", "2")

    storage.remove_item("a")
    assert storage.get_item("a") is None

    storage.clear()
    assert LocalStorage(str(tmp_path / "state.json")).get_item("b") is None


def test_corrupt_value_reads_as_default():
    storage = LocalStorage()
    storage.set_item("moodflix_profile", "{not json")
    assert storage.get_json("moodflix_profile", {"fallback": True}) == {"fallback": True}


def test_unreadable_storage_file_raises(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("[1, 2]")
    with pytest.raises(StorageError):
        LocalStorage(str(path))


def test_storage_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("MOODFLIX_STORAGE_PATH", str(tmp_path / "env.json"))
    LocalStorage.from_env().set_item("k", "v")
    assert json.loads((tmp_path / "env.json").read_text()) == {"k": "v"}


# ============================================
# Round trips through a fresh load
# ============================================

def test_collections_survive_reload(tmp_path):
    path = str(tmp_path / "state.json")
    state = make_state(signed_in=False, storage=LocalStorage(path))
    store = CollectionStore(state)
    first = store.create("First")
    second = store.create("Second", description="Late night")
    store.add_movie(first["id"], {"id": 1, "title": "Heat"})
    store.add_movie(first["id"], {"id": 2, "title": "Ronin"})

    reloaded = CollectionStore(make_state(signed_in=False, storage=LocalStorage(path)))

    assert reloaded.load() == store.collections
    assert [c["id"] for c in reloaded.collections] == [second["id"], first["id"]]


def test_watch_history_survives_reload_newest_first(tmp_path):
    path = str(tmp_path / "state.json")
    store = WatchHistoryStore(make_state(signed_in=False, storage=LocalStorage(path)))
    store.mark_as_watched({"id": 1, "title": "Heat"})
    store.mark_as_watched({"id": 2, "title": "Ronin"}, rating=8)
    store.mark_as_watched({"id": 1, "title": "Heat"})

    reloaded = WatchHistoryStore(make_state(signed_in=False, storage=LocalStorage(path)))

    assert reloaded.load() == store.items
    assert [i["movie_id"] for i in reloaded.items] == [1, 2]
    assert reloaded.is_watched(2)


def test_profile_survives_reload(tmp_path):
    path = str(tmp_path / "state.json")
    store = ProfileStore(make_state(storage=LocalStorage(path)))
    store.load()
    store.update(bio="Night owl", favorite_genres=["Crime", "Thriller"])

    reloaded = ProfileStore(make_state(storage=LocalStorage(path)))

    assert reloaded.load() == store.profile


# ============================================
# Watch history
# ============================================

def test_watch_history_notices_and_remove():
    state = make_state(signed_in=False)
    store = WatchHistoryStore(state)
    store.mark_as_watched({"id": 1, "title": "Heat"})
    assert state.notifier.last.title == "Marked as watched"

    assert store.remove(1) is True
    assert store.items == []
    assert state.notifier.last.title == "Removed from watch history"
    assert store.remove(1) is False


def test_watch_history_write_failure_rolls_back():
    class BrokenStorage(LocalStorage):
        def set_item(self, key, value):
            raise StorageError("disk full")

    state = make_state(signed_in=False, storage=BrokenStorage())
    store = WatchHistoryStore(state)

    assert store.mark_as_watched({"id": 1, "title": "Heat"}) is False

    assert store.items == []
    assert state.notifier.last.variant == "error"


# ============================================
# Profile
# ============================================

def test_profile_defaults_and_per_user_key():
    state = make_state(user_id=7)
    store = ProfileStore(state)

    profile = store.load()

    assert store.storage_key == "moodflix_profile_7"
    assert profile["display_name"] == "Alice"
    assert profile["accent_color"] == "#8B5CF6"
    assert state.storage.get_json("moodflix_profile_7") == profile


def test_guest_profile_key():
    store = ProfileStore(make_state(signed_in=False))
    assert store.storage_key == "moodflix_profile"
    assert store.load()["display_name"] == "Guest"


def test_profile_update_validates_accent_color():
    state = make_state()
    store = ProfileStore(state)
    store.load()

    assert store.set_accent_color("purple") is False
    assert store.profile["accent_color"] == "#8B5CF6"

    assert store.set_accent_color("#10B981") is True
    assert state.notifier.last.title == "Profile updated successfully"


def test_profile_rejects_unknown_fields():
    store = ProfileStore(make_state())
    store.load()
    assert store.update(is_admin=True) is False
    assert "is_admin" not in store.profile


# ============================================
# Similar movies pager
# ============================================

def test_pager_walks_pages_until_the_end():
    api = FakeAPI()
    api.responses["similar-movies"] = lambda body: {
        "movies": [{"id": body["page"] * 10}],
        "page": body["page"],
        "totalPages": 2,
        "hasMore": body["page"] < 2,
    }
    pager = SimilarMoviesPager(api, 550)

    pager.reset()
    pager.load_more()

    assert [m["id"] for m in pager.movies] == [10, 20]
    assert pager.has_more is False
    assert pager.load_more() is None
    assert [b["page"] for b in api.calls_to("similar-movies")] == [1, 2]


def test_pager_reset_switches_movie():
    api = FakeAPI()
    api.responses["similar-movies"] = {"movies": [{"id": 1}], "page": 1, "totalPages": 5, "hasMore": True}
    pager = SimilarMoviesPager(api, 550)
    pager.reset()
    pager.load_more()

    pager.reset(27205)

    assert pager.movie_id == 27205
    assert api.calls_to("similar-movies")[-1] == {"movieId": 27205, "page": 1}
    assert len(pager.movies) == 1


def test_pager_error_stops_paging():
    api = FakeAPI()
    api.responses["similar-movies"] = failure("TMDB API error: timeout", 502)
    notifier = Notifier()
    pager = SimilarMoviesPager(api, 550, notifier)

    assert pager.reset() is None

    assert pager.has_more is False
    assert notifier.last.variant == "error"


def test_pager_ignores_load_more_while_loading():
    api = FakeAPI()
    gate = GatedAnswer({"movies": [], "page": 1, "totalPages": 3, "hasMore": True})
    api.responses["similar-movies"] = gate
    pager = SimilarMoviesPager(api, 550)
    worker = threading.Thread(target=pager.reset)
    worker.start()
    assert gate.entered.wait(timeout=5)

    assert pager.load_more() is None

    gate.release()
    worker.join(timeout=5)
    assert len(api.calls_to("similar-movies")) == 1


# ============================================
# Admin analytics
# ============================================

def _analytics_responses(api):
    api.responses.update({
        "analytics/overview": {"total_users": 3},
        "analytics/moods": {"moods": [{"mood": "happy", "count": 2}]},
        "analytics/top-movies": {"movies": [{"movie_id": 550, "title": "Fight Club", "count": 2}]},
        "analytics/reviews": {"total_reviews": 1, "average_rating": 9.0, "distribution": {}},
    })


def test_analytics_fan_out():
    state = make_state()
    _analytics_responses(state.api)
    analytics = AdminAnalytics(state)

    assert analytics.refetch() is True

    assert analytics.overview == {"total_users": 3}
    assert analytics.moods[0]["mood"] == "happy"
    assert analytics.top_movies[0]["movie_id"] == 550
    assert analytics.review_stats["average_rating"] == 9.0
    assert analytics.error is None
    assert len(state.api.calls) == 4


def test_analytics_is_all_or_nothing():
    state = make_state()
    _analytics_responses(state.api)
    analytics = AdminAnalytics(state)
    analytics.refetch()

    _analytics_responses(state.api)
    state.api.responses["analytics/overview"] = {"total_users": 99}
    state.api.responses["analytics/reviews"] = failure("Admin access required", 403)

    assert analytics.refetch() is False

    assert analytics.overview == {"total_users": 3}
    assert analytics.error == "Admin access required"
    assert state.notifier.last.title == "Failed to load analytics"


def test_analytics_requires_sign_in():
    state = make_state(signed_in=False)
    analytics = AdminAnalytics(state)

    assert analytics.refetch() is False
    assert state.api.calls == []


# ============================================
# HTTP client
# ============================================

class FakeHTTPResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no body")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.requests.append({"method": method, "url": url, "json": json, "headers": headers})
        if self.error:
            raise self.error
        return self.response


def test_invoke_posts_to_function_route():
    http = FakeSession(FakeHTTPResponse(200, {"movies": []}))
    api = MoodFlixAPI("http://api.test/", session=http)

    assert api.invoke("recommend-movies", {"mood": "happy"}) == {"movies": []}

    sent = http.requests[0]
    assert sent["method"] == "POST"
    assert sent["url"] == "http://api.test/functions/recommend-movies"
    assert "Authorization" not in sent["headers"]


def test_user_data_wraps_envelope_and_token():
    http = FakeSession(FakeHTTPResponse(200, {"success": True}))
    api = MoodFlixAPI("http://api.test", session=http)

    api.user_data("get_watchlist", "tok", {"x": 1})

    assert http.requests[0]["json"] == {"action": "get_watchlist", "token": "tok", "data": {"x": 1}}


def test_error_status_raises_with_detail():
    http = FakeSession(FakeHTTPResponse(429, {"detail": "Rate limit exceeded. Please try again later."}))
    api = MoodFlixAPI("http://api.test", session=http)

    with pytest.raises(FunctionError) as exc:
        api.invoke("recommend-movies", {"mood": "happy"})

    assert exc.value.status_code == 429
    assert "Rate limit" in str(exc.value)


def test_validation_errors_are_joined():
    detail = [{"loc": ["body", "mood"], "msg": "Field required"}]
    api = MoodFlixAPI("http://api.test", session=FakeSession(FakeHTTPResponse(422, {"detail": detail})))

    with pytest.raises(FunctionError, match="Field required"):
        api.invoke("recommend-movies", {})


def test_error_key_in_successful_body_raises():
    api = MoodFlixAPI("http://api.test", session=FakeSession(FakeHTTPResponse(200, {"error": "boom"})))
    with pytest.raises(FunctionError, match="boom"):
        api.invoke("similar-movies", {"movieId": 1})


def test_transport_errors_become_network_errors():
    api = MoodFlixAPI("http://api.test", session=FakeSession(error=requests.exceptions.ConnectionError("refused")))
    with pytest.raises(FunctionError, match="^Network error: refused"):
        api.invoke("similar-movies", {"movieId": 1})


def test_base_url_from_environment(monkeypatch):
    monkeypatch.setenv("MOODFLIX_API_URL", "https://moodflix.example/")
    assert MoodFlixAPI(session=FakeSession()).base_url == "https://moodflix.example"


# ============================================
# Session state
# ============================================

class AccountAPI(FakeAPI):
    def __init__(self, me_error=None):
        super().__init__()
        self.me_error = me_error
        self.logged_out = []

    def register(self, username, password, display_name=None):
        return {"id": 7, "username": username, "display_name": display_name or username}

    def login(self, username, password, remember_me=False):
        return {"access_token": "tok", "user": {"id": 7, "username": username, "display_name": "Alice", "is_admin": False}}

    def logout(self, token):
        self.logged_out.append(token)
        return {"message": "Signed out"}

    def me(self, token):
        if self.me_error:
            raise self.me_error
        return {"id": 7, "username": "alice", "display_name": "Alice (fresh)"}


def test_sign_in_persists_session(tmp_path):
    path = str(tmp_path / "state.json")
    state = AppState(api=AccountAPI(), storage=LocalStorage(path))

    user = state.sign_up("alice", "Password123")

    assert user.id == 7
    assert state.is_signed_in
    assert state.require_user() == user
    assert LocalStorage(path).get_item(AppState.SESSION_TOKEN_KEY) == "tok"


def test_restore_session_refreshes_user(tmp_path):
    path = str(tmp_path / "state.json")
    AppState(api=AccountAPI(), storage=LocalStorage(path)).sign_in("alice", "Password123")

    state = AppState(api=AccountAPI(), storage=LocalStorage(path))
    user = state.restore_session()

    assert user.display_name == "Alice (fresh)"
    assert state.token == "tok"


def test_restore_session_drops_expired_token(tmp_path):
    path = str(tmp_path / "state.json")
    AppState(api=AccountAPI(), storage=LocalStorage(path)).sign_in("alice", "Password123")

    state = AppState(api=AccountAPI(me_error=FunctionError("Session expired", 401)), storage=LocalStorage(path))

    assert state.restore_session() is None
    assert not state.is_signed_in
    assert LocalStorage(path).get_item(AppState.SESSION_TOKEN_KEY) is None


def test_restore_session_offline_keeps_stored_user(tmp_path):
    path = str(tmp_path / "state.json")
    AppState(api=AccountAPI(), storage=LocalStorage(path)).sign_in("alice", "Password123")

    state = AppState(api=AccountAPI(me_error=FunctionError("Network error: offline")), storage=LocalStorage(path))

    assert state.restore_session().display_name == "Alice"
    assert state.is_signed_in


def test_sign_out_clears_session_even_if_server_fails():
    class OfflineLogout(AccountAPI):
        def logout(self, token):
            raise FunctionError("Network error: offline")

    api = OfflineLogout()
    state = AppState(api=api, storage=LocalStorage())
    state.sign_in("alice", "Password123")

    state.sign_out()

    assert not state.is_signed_in
    assert state.storage.get_item(AppState.SESSION_TOKEN_KEY) is None
