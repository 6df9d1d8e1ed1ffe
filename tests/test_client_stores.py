"""
Optimistic client stores: duplicate short-circuits, exact rollback on
failure, one notice per operation.
"""
import copy

import pytest

from moodflix.client import (
    CollectionStore,
    FollowStore,
    ReviewStore,
    WatchlistStore,
    attempt,
)
from moodflix.client.errors import StorageError
from moodflix.client.state import SignedInUser

from client_fakes import failure, make_state

FIGHT_CLUB = {"id": 550, "title": "Fight Club", "posterUrl": "https://image.tmdb.org/t/p/w500/a.jpg", "year": 1999, "rating": 8.4}


# ============================================
# attempt
# ============================================

def test_attempt_returns_commit_result():
    log = []
    result = attempt(lambda: log.append("apply") or "snapshot", lambda: "done", lambda s: log.append(s))
    assert result == "done"
    assert log == ["apply"]


def test_attempt_rolls_back_and_reraises():
    state = {"items": [1]}

    def apply():
        previous = list(state["items"])
        state["items"].append(2)
        return previous

    def commit():
        raise StorageError("disk full")

    def rollback(previous):
        state["items"] = previous

    with pytest.raises(StorageError):
        attempt(apply, commit, rollback)
    assert state["items"] == [1]


# ============================================
# Watchlist
# ============================================

def test_watchlist_requires_sign_in():
    state = make_state(signed_in=False)
    store = WatchlistStore(state)

    assert store.add(FIGHT_CLUB) is False

    assert state.api.calls == []
    assert store.items == []
    assert state.notifier.last.title == "Please sign in to add movies to your watchlist"


def test_watchlist_add_refetches_from_server():
    state = make_state()
    stored = {"id": 1, "movie_id": 550, "title": "Fight Club"}
    state.api.responses["get_watchlist"] = {"success": True, "watchlist": [stored]}
    store = WatchlistStore(state)

    assert store.add(FIGHT_CLUB) is True

    payload = state.api.calls_to("add_to_watchlist")[0]
    assert payload["movie_id"] == 550
    assert payload["release_year"] == 1999
    assert payload["poster_path"] == FIGHT_CLUB["posterUrl"]
    assert store.items == [stored]
    assert state.notifier.last.title == 'Added "Fight Club" to watchlist'


def test_watchlist_second_add_is_a_duplicate():
    state = make_state()
    state.api.responses["get_watchlist"] = {"success": True, "watchlist": [{"id": 1, "movie_id": 550, "title": "Fight Club"}]}
    store = WatchlistStore(state)
    store.add(FIGHT_CLUB)
    calls = len(state.api.calls)
    notices = len(state.notifier.notices)

    assert store.add(FIGHT_CLUB) is False

    assert len(state.api.calls) == calls
    assert len(store.items) == 1
    assert len(state.notifier.notices) == notices + 1
    assert state.notifier.last.title == "This movie is already in your watchlist"
    assert state.notifier.last.variant == "info"


def test_watchlist_add_already_on_server_is_reported_as_duplicate():
    state = make_state()
    stored = {"id": 1, "movie_id": 550, "title": "Fight Club"}
    state.api.responses["add_to_watchlist"] = {"success": True, "alreadyExists": True}
    state.api.responses["get_watchlist"] = {"success": True, "watchlist": [stored]}
    store = WatchlistStore(state)

    assert store.add(FIGHT_CLUB) is False

    assert store.items == [stored]
    assert [n.variant for n in state.notifier.notices] == ["info"]
    assert state.notifier.last.title == "This movie is already in your watchlist"


def test_watchlist_failed_add_rolls_back():
    state = make_state()
    store = WatchlistStore(state)
    store.items = [{"id": 1, "movie_id": 13, "title": "Forrest Gump"}]
    before = copy.deepcopy(store.items)
    state.api.responses["add_to_watchlist"] = failure()

    assert store.add(FIGHT_CLUB) is False

    assert store.items == before
    assert [n.variant for n in state.notifier.notices] == ["error"]
    assert state.notifier.last.title == "Failed to add movie to watchlist"


def test_watchlist_failed_remove_restores_position():
    state = make_state()
    store = WatchlistStore(state)
    store.items = [{"id": i, "movie_id": i, "title": f"M{i}"} for i in (1, 2, 3)]
    before = copy.deepcopy(store.items)
    state.api.responses["remove_from_watchlist"] = failure()

    assert store.remove(2) is False

    assert store.items == before
    assert state.notifier.last.title == "Failed to remove movie"


def test_watchlist_remove():
    state = make_state()
    store = WatchlistStore(state)
    store.items = [{"id": 1, "movie_id": 550, "title": "Fight Club"}]

    assert store.remove(550) is True

    assert store.items == []
    assert state.api.calls_to("remove_from_watchlist") == [{"movie_id": 550}]
    assert state.notifier.last.title == "Removed from watchlist"


# ============================================
# Reviews
# ============================================

def test_review_submit_requires_sign_in():
    state = make_state(signed_in=False)
    store = ReviewStore(state, 550)

    assert store.submit(8, "Great", "Fight Club") is False
    assert state.notifier.last.title == "Please sign in to write a review"


def test_review_submit_replaces_own_review_then_refetches():
    state = make_state()
    server_review = {"id": 10, "user_id": 7, "rating": 9, "review_text": "Even better"}
    state.api.responses["get_movie_reviews"] = {"reviews": [server_review], "userReview": server_review}
    store = ReviewStore(state, 550)

    assert store.submit(9, "Even better", "Fight Club") is True

    assert store.user_review == server_review
    assert store.average_rating == 9.0
    assert state.notifier.last.title == "Review submitted successfully"


def test_review_failed_submit_rolls_back():
    state = make_state()
    store = ReviewStore(state, 550)
    own = {"id": 10, "user_id": 7, "rating": 4}
    store.reviews = [{"id": 11, "user_id": 8, "rating": 8}, own]
    store.user_review = own
    before = copy.deepcopy((store.reviews, store.user_review))
    state.api.responses["add_review"] = failure("Review text too long", 422)

    assert store.submit(9, "x", "Fight Club") is False

    assert (store.reviews, store.user_review) == before
    assert state.notifier.last.title == "Error submitting review"
    assert state.notifier.last.description == "Review text too long"


def test_review_delete():
    state = make_state()
    store = ReviewStore(state, 550)
    own = {"id": 10, "user_id": 7, "rating": 4}
    store.reviews = [own]
    store.user_review = own

    assert store.delete() is True

    assert store.reviews == []
    assert store.user_review is None
    assert state.api.calls_to("delete_review") == [{"review_id": 10}]
    assert state.notifier.last.title == "Review deleted"


# ============================================
# Collections
# ============================================

def test_guest_collections_stay_local():
    state = make_state(signed_in=False)
    store = CollectionStore(state)

    created = store.create("Rainy days")
    assert store.add_movie(created["id"], FIGHT_CLUB) is True

    assert created["id"].startswith("local_")
    assert state.api.calls == []
    assert state.storage.get_json("moodflix_collections")[0]["movies"][0]["movie_id"] == 550
    assert state.notifier.last.title == "Added to collection"


def test_signed_in_collection_keeps_temp_record_and_remembers_server_id():
    state = make_state()
    state.api.responses["create_collection"] = {"success": True, "collection": {"id": 42, "name": "Rainy days"}}
    store = CollectionStore(state)

    created = store.create("Rainy days", is_public=True)
    store.add_movie(created["id"], FIGHT_CLUB)

    assert created["id"].startswith("temp_")
    assert created["remote_id"] == 42
    assert state.api.calls_to("add_to_collection")[0]["collection_id"] == 42
    assert state.storage.get_json("moodflix_collections_7")[0]["remote_id"] == 42


def test_collection_duplicate_movie_is_short_circuited():
    state = make_state(signed_in=False)
    store = CollectionStore(state)
    created = store.create("Favourites")
    store.add_movie(created["id"], FIGHT_CLUB)

    assert store.add_movie(created["id"], FIGHT_CLUB) is False

    assert len(store.get(created["id"])["movies"]) == 1
    assert state.notifier.last.title == "Movie already in collection"


def test_failed_add_to_collection_rolls_back_memory_and_storage():
    state = make_state()
    state.api.responses["create_collection"] = {"success": True, "collection": {"id": 42}}
    store = CollectionStore(state)
    created = store.create("Rainy days")
    before = copy.deepcopy(store.collections)
    stored_before = state.storage.get_json("moodflix_collections_7")
    state.api.responses["add_to_collection"] = failure("Network error: timeout")

    assert store.add_movie(created["id"], FIGHT_CLUB) is False

    assert store.collections == before
    assert state.storage.get_json("moodflix_collections_7") == stored_before
    assert state.notifier.last.title == "Error adding to collection"
    assert state.notifier.last.variant == "error"


def test_failed_create_leaves_no_collection():
    state = make_state()
    state.api.responses["create_collection"] = failure()
    store = CollectionStore(state)

    assert store.create("Doomed") is None

    assert store.collections == []
    assert state.storage.get_json("moodflix_collections_7") == []


def test_collection_visibility_and_delete():
    state = make_state(signed_in=False)
    store = CollectionStore(state)
    created = store.create("Favourites")

    store.toggle_visibility(created["id"])
    assert store.get(created["id"])["is_public"] is True
    assert state.notifier.last.title == "Collection is now public"

    store.toggle_visibility(created["id"])
    assert state.notifier.last.title == "Collection is now private"

    assert store.delete(created["id"]) is True
    assert store.collections == []
    assert state.notifier.last.title == "Collection deleted"


def test_collection_name_is_required():
    state = make_state(signed_in=False)
    store = CollectionStore(state)

    assert store.create("   ") is None
    assert store.collections == []


def test_signed_in_load_stores_server_collections_under_user_key():
    state = make_state()
    state.api.responses["get_collections"] = {"collections": [
        {"id": 5, "name": "Noir", "is_public": False, "movies": [{"id": 9, "movie_id": 550, "title": "Fight Club"}]},
    ]}
    store = CollectionStore(state)

    collections = store.load()

    assert collections[0]["remote_id"] == 5
    assert collections[0]["movies"][0]["movie_id"] == 550
    assert state.storage.get_json("moodflix_collections_7") == collections
    assert state.storage.get_json("moodflix_collections") is None


def sign_in_as(state, user_id, username):
    state.token = f"token-{user_id}"
    state.user = SignedInUser(id=user_id, username=username, display_name=username.title())


def sign_out(state):
    state.token = None
    state.user = None


def test_guest_collections_survive_a_sign_in_and_out():
    state = make_state(signed_in=False)
    state.api.responses["get_collections"] = {"collections": []}
    store = CollectionStore(state)
    store.create("My guest list")

    sign_in_as(state, 7, "alice")
    assert store.load() == []
    sign_out(state)

    assert [c["name"] for c in store.load()] == ["My guest list"]


def test_guest_never_sees_an_accounts_collections():
    state = make_state()
    state.api.responses["get_collections"] = {"collections": [{"id": 5, "name": "Alice private", "movies": []}]}
    store = CollectionStore(state)
    store.load()

    sign_out(state)

    assert store.load() == []


def test_failed_sync_falls_back_to_the_same_accounts_copy():
    state = make_state()
    state.api.responses["get_collections"] = {"collections": [{"id": 5, "name": "Alice private", "movies": []}]}
    store = CollectionStore(state)
    store.load()

    sign_in_as(state, 8, "bob")
    state.api.responses["get_collections"] = failure("Network error: timeout")

    assert store.load() == []
    assert state.notifier.last.title == "Couldn't sync collections"


def test_collection_add_already_on_server_is_reported_as_duplicate():
    state = make_state()
    state.api.responses["create_collection"] = {"success": True, "collection": {"id": 42}}
    state.api.responses["add_to_collection"] = {"success": True, "alreadyExists": True}
    store = CollectionStore(state)
    created = store.create("Rainy days")

    assert store.add_movie(created["id"], FIGHT_CLUB) is False

    assert [m["movie_id"] for m in store.get(created["id"])["movies"]] == [550]
    assert state.notifier.last.title == "Movie already in collection"
    assert state.notifier.last.variant == "info"


# ============================================
# Follows
# ============================================

def test_follow_flips_optimistically():
    state = make_state()
    store = FollowStore(state, 9)
    store.followers_count = 3

    assert store.toggle() is True

    assert store.is_following is True
    assert store.followers_count == 4
    assert state.api.calls_to("follow_user") == [{"user_id": 9}]
    assert state.notifier.last.title == "Following!"


def test_failed_unfollow_rolls_back():
    state = make_state()
    store = FollowStore(state, 9)
    store.is_following = True
    store.followers_count = 1
    state.api.responses["unfollow_user"] = failure()

    assert store.toggle() is False

    assert store.is_following is True
    assert store.followers_count == 1
    assert state.notifier.last.title == "Failed to update follow"


def test_unfollow_never_drops_below_zero():
    state = make_state()
    store = FollowStore(state, 9)
    store.is_following = True

    assert store.unfollow() is True

    assert store.followers_count == 0
    assert state.notifier.last.title == "Unfollowed"


def test_follow_when_already_following_is_a_duplicate():
    state = make_state()
    store = FollowStore(state, 9)
    store.is_following = True

    assert store.follow() is False

    assert state.api.calls == []
    assert state.notifier.last.variant == "info"


def test_cannot_follow_yourself():
    state = make_state(user_id=9)
    store = FollowStore(state, 9)

    assert store.toggle() is False
    assert state.api.calls == []


def test_follow_status_load():
    state = make_state(signed_in=False)
    state.api.responses["get_follow_status"] = {"is_following": False, "followers_count": 12, "following_count": 3}
    store = FollowStore(state, 9)

    store.load()

    assert (store.followers_count, store.following_count) == (12, 3)
