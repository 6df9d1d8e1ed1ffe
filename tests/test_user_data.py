"""
User-data function: watchlist, collections, reviews and follows behind one
action-dispatched endpoint.
"""
from moodflix.models.user import User

from conftest import user_data


# ============================================
# Dispatch & authorization
# ============================================

def test_unknown_action_is_rejected_before_auth(client):
    response = user_data(client, "drop_tables")
    assert response.status_code == 400
    assert response.json()["detail"] == "Unknown action"


def test_private_action_requires_token(client):
    response = user_data(client, "get_watchlist")
    assert response.status_code == 401


def test_invalid_token_is_rejected(client):
    response = user_data(client, "get_watchlist", "not-a-token")
    assert response.status_code == 401


def test_invalid_payload_reports_field(client, user_token):
    response = user_data(client, "add_to_watchlist", user_token, title="No id")
    assert response.status_code == 422
    assert "movie_id" in response.json()["detail"]


# ============================================
# Watchlist
# ============================================

def test_watchlist_add_list_remove(client, user_token):
    added = user_data(client, "add_to_watchlist", user_token, movie_id=550, title="Fight Club", release_year=1999, rating=8.4)
    assert added.status_code == 200
    assert added.json()["item"]["movie_id"] == 550

    listing = user_data(client, "get_watchlist", user_token).json()
    assert [i["title"] for i in listing["watchlist"]] == ["Fight Club"]

    removed = user_data(client, "remove_from_watchlist", user_token, movie_id=550).json()
    assert removed["removed"] is True
    assert user_data(client, "get_watchlist", user_token).json()["watchlist"] == []


def test_watchlist_duplicate_reports_already_exists(client, user_token):
    user_data(client, "add_to_watchlist", user_token, movie_id=550, title="Fight Club")
    again = user_data(client, "add_to_watchlist", user_token, movie_id=550, title="Fight Club").json()

    assert again == {"success": True, "alreadyExists": True}
    assert len(user_data(client, "get_watchlist", user_token).json()["watchlist"]) == 1


def test_watchlist_titles_are_stripped_of_html(client, user_token):
    item = user_data(client, "add_to_watchlist", user_token, movie_id=1, title="<b>Heat</b>").json()["item"]
    assert item["title"] == "Heat"


def test_watchlists_are_private_per_user(client, user_token, other_token):
    user_data(client, "add_to_watchlist", user_token, movie_id=550, title="Fight Club")
    assert user_data(client, "get_watchlist", other_token).json()["watchlist"] == []


# ============================================
# Collections
# ============================================

def test_collection_lifecycle(client, user_token):
    created = user_data(client, "create_collection", user_token, name="Rainy days", description="Slow films").json()
    collection_id = created["collection"]["id"]
    assert created["collection"]["movies"] == []

    added = user_data(client, "add_to_collection", user_token, collection_id=collection_id, movie_id=12, title="Finding Nemo")
    assert added.json()["movie"]["movie_id"] == 12

    duplicate = user_data(client, "add_to_collection", user_token, collection_id=collection_id, movie_id=12, title="Finding Nemo")
    assert duplicate.json()["alreadyExists"] is True

    movies = user_data(client, "get_collection_movies", user_token, collection_id=collection_id).json()["movies"]
    assert [m["title"] for m in movies] == ["Finding Nemo"]

    updated = user_data(client, "update_collection", user_token, collection_id=collection_id, is_public=True).json()
    assert updated["collection"]["is_public"] is True
    assert updated["collection"]["name"] == "Rainy days"

    removed = user_data(client, "remove_from_collection", user_token, collection_id=collection_id, movie_id=12).json()
    assert removed["removed"] is True

    assert user_data(client, "delete_collection", user_token, collection_id=collection_id).json()["success"] is True
    assert user_data(client, "get_collections", user_token).json()["collections"] == []


def test_foreign_collection_is_not_found(client, user_token, other_token):
    collection_id = user_data(client, "create_collection", user_token, name="Mine").json()["collection"]["id"]

    response = user_data(client, "add_to_collection", other_token, collection_id=collection_id, movie_id=1, title="Heat")
    assert response.status_code == 404
    assert response.json()["detail"] == "Collection not found"


def test_collection_name_is_required(client, user_token):
    assert user_data(client, "create_collection", user_token, name="").status_code == 422


# ============================================
# Reviews
# ============================================

def test_reviews_are_public_and_upserted(client, user_token, other_token):
    first = user_data(client, "add_review", user_token, movie_id=27205, movie_title="Inception", rating=8, review_text="Great").json()
    assert first["created"] is True

    second = user_data(client, "add_review", user_token, movie_id=27205, movie_title="Inception", rating=10).json()
    assert second["created"] is False
    assert second["review"]["id"] == first["review"]["id"]
    assert second["review"]["rating"] == 10

    user_data(client, "add_review", other_token, movie_id=27205, movie_title="Inception", rating=6)

    anonymous = user_data(client, "get_movie_reviews", movie_id=27205).json()
    assert len(anonymous["reviews"]) == 2
    assert anonymous["userReview"] is None
    assert anonymous["averageRating"] == 8.0

    mine = user_data(client, "get_movie_reviews", user_token, movie_id=27205).json()
    assert mine["userReview"]["rating"] == 10
    assert mine["userReview"]["display_name"] == "alice"


def test_review_rating_bounds(client, user_token):
    response = user_data(client, "add_review", user_token, movie_id=1, movie_title="Heat", rating=11)
    assert response.status_code == 422


def test_review_text_scripts_are_rejected(client, user_token):
    response = user_data(client, "add_review", user_token, movie_id=1, movie_title="Heat", rating=7,
                         review_text="<script>alert(1)</script>")
    assert response.status_code == 422


def test_only_author_can_delete_review(client, user_token, other_token):
    review_id = user_data(client, "add_review", user_token, movie_id=1, movie_title="Heat", rating=7).json()["review"]["id"]

    assert user_data(client, "delete_review", other_token, review_id=review_id).status_code == 404
    assert user_data(client, "delete_review", user_token, review_id=review_id).json()["success"] is True
    assert user_data(client, "get_movie_reviews", movie_id=1).json()["reviews"] == []


# ============================================
# Follows
# ============================================

def _user_id(db_session, username):
    return db_session.query(User).filter(User.username == username).one().id


def test_follow_and_unfollow(client, db_session, user_token, other_token):
    bob_id = _user_id(db_session, "bob")

    assert user_data(client, "follow_user", user_token, user_id=bob_id).json() == {"success": True}
    again = user_data(client, "follow_user", user_token, user_id=bob_id).json()
    assert again["alreadyExists"] is True

    status = user_data(client, "get_follow_status", user_token, user_id=bob_id).json()
    assert status["is_following"] is True
    assert status["followers_count"] == 1
    assert status["following_count"] == 0

    anonymous = user_data(client, "get_follow_status", user_id=bob_id).json()
    assert anonymous["is_following"] is False
    assert anonymous["followers_count"] == 1

    assert user_data(client, "unfollow_user", user_token, user_id=bob_id).json()["removed"] is True
    assert user_data(client, "get_follow_status", user_token, user_id=bob_id).json()["followers_count"] == 0


def test_cannot_follow_self_or_missing_user(client, db_session, user_token):
    alice_id = _user_id(db_session, "alice")

    assert user_data(client, "follow_user", user_token, user_id=alice_id).status_code == 400
    assert user_data(client, "follow_user", user_token, user_id=9999).status_code == 404
