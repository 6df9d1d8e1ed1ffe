from moodflix.services.background_jobs import BackgroundJobService
from moodflix.services.tmdb_service import TMDBService
from moodflix.models.social import MoodSearch

from conftest import user_data


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def test_analytics_requires_admin(client, user_token):
    assert client.get("/api/admin/analytics/overview").status_code == 401
    assert client.get("/api/admin/analytics/overview", headers=auth(user_token)).status_code == 403


def test_analytics_panels(client, db_session, user_token, other_token, admin_token):
    user_data(client, "add_to_watchlist", user_token, movie_id=550, title="Fight Club")
    user_data(client, "add_to_watchlist", other_token, movie_id=550, title="Fight Club")
    user_data(client, "add_to_watchlist", other_token, movie_id=13, title="Forrest Gump")
    user_data(client, "add_review", user_token, movie_id=550, movie_title="Fight Club", rating=9)
    user_data(client, "add_review", other_token, movie_id=550, movie_title="Fight Club", rating=6)
    user_data(client, "create_collection", user_token, name="Favourites")
    db_session.add_all([MoodSearch(mood="happy", result_count=12) for _ in range(3)] + [MoodSearch(mood="sad", result_count=8)])
    db_session.commit()

    overview = client.get("/api/admin/analytics/overview", headers=auth(admin_token)).json()
    assert overview == {
        "total_users": 3,
        "total_reviews": 2,
        "total_watchlist_items": 3,
        "total_collections": 1,
        "total_follows": 0,
        "total_mood_searches": 4,
    }

    moods = client.get("/api/admin/analytics/moods", headers=auth(admin_token)).json()["moods"]
    assert moods == [{"mood": "happy", "count": 3}, {"mood": "sad", "count": 1}]

    movies = client.get("/api/admin/analytics/top-movies", headers=auth(admin_token)).json()["movies"]
    assert movies[0] == {"movie_id": 550, "title": "Fight Club", "count": 2}

    reviews = client.get("/api/admin/analytics/reviews", headers=auth(admin_token)).json()
    assert reviews["total_reviews"] == 2
    assert reviews["average_rating"] == 7.5
    assert reviews["distribution"]["9"] == 1
    assert reviews["distribution"]["1"] == 0


def test_job_status_lists_jobs_and_cache(client, admin_token):
    body = client.get("/api/admin/jobs/status", headers=auth(admin_token)).json()

    assert {job["id"] for job in body["jobs"]} == {"warm_trending", "purge_sessions"}
    assert "hit_rate" in body["cache"]


def test_warm_trending_cache_records_success(monkeypatch):
    fetched = []

    def fake_request(cls, endpoint, params=None):
        fetched.append(endpoint)
        return {"results": []}

    monkeypatch.setattr(TMDBService, "_make_request", classmethod(fake_request))
    jobs = BackgroundJobService()

    jobs.warm_trending_cache()

    assert jobs.job_stats["warm_trending"]["status"] == "success"
    assert sorted(fetched) == ["/movie/top_rated", "/movie/upcoming", "/trending/movie/day", "/trending/movie/week"]


def test_warm_trending_cache_survives_tmdb_outage(monkeypatch):
    def fake_request(cls, endpoint, params=None):
        raise RuntimeError("tmdb down")

    monkeypatch.setattr(TMDBService, "_make_request", classmethod(fake_request))
    jobs = BackgroundJobService()

    jobs.warm_trending_cache()

    stats = jobs.job_stats["warm_trending"]
    assert stats["status"] == "success"
    assert stats["result"] == "warmed 0 lists"
    assert stats["last_run"] is not None
