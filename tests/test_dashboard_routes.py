"""HTTP surface: /api/dashboard and the table endpoints."""

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from app.analyzer.normalizer import description_fingerprint
from app.analyzer.pipeline import build_dashboard
from app.main import app
from app.models.dashboard_models import DashboardQuery
from app.store.factory import get_store

from conftest import FakeStore, make_post

TODAY = date.today()


def _day(offset: int) -> str:
    return (TODAY - timedelta(days=offset)).isoformat()


RECORDS = [
    make_post(id=1, brand="Acme", username="alice", plays=100, likes=10,
              description="Summer Sale", date_posted=_day(1), followers=50),
    make_post(id=2, brand="Acme", username="bob", plays=0,
              description="summer  sale", date_posted=_day(1)),
    make_post(id=3, brand="Globex", username="carol", plays=600, comments=6,
              description="Winter drop", date_posted=_day(3)),
    make_post(id=4, brand="", username="dave", plays=40, shares=4,
              description="", date_posted=_day(20)),
    make_post(id=5, brand="0", username="erin", plays=9,
              description="old news", date_posted=_day(200)),
]


@pytest.fixture
def store():
    return FakeStore(RECORDS)


@pytest.fixture
def client(store):
    async def override():
        yield store

    app.dependency_overrides[get_store] = override
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_dashboard_default_window(client, store):
    resp = client.get("/api/dashboard")
    assert resp.status_code == 200
    body = resp.json()

    assert set(body) == {
        "kpis",
        "dailyMetrics",
        "dedupedData",
        "totalDaysAvailable",
        "brands",
        "descriptionOptions",
    }
    kpis = body["kpis"]
    assert kpis["publishedVideos"] == 4
    assert kpis["totalViews"] == 740
    assert kpis["videosWithZeroViews"] == 1
    assert kpis["activeAccounts"] == 4
    assert body["totalDaysAvailable"] == 3
    assert [d["date"] for d in body["dailyMetrics"]] == [_day(20), _day(3), _day(1)]
    assert body["brands"] == ["Acme", "Globex"]

    options = body["descriptionOptions"]
    assert options[0]["normalizedText"] == "summer sale"
    assert options[0]["count"] == 2

    start, brands = store.calls[0]
    assert start == TODAY - timedelta(days=30)
    assert brands == []


def test_dashboard_alltime_and_brand_filter(client, store):
    resp = client.get("/api/dashboard", params={"timeWindow": "alltime", "brands": "Acme,Globex"})
    body = resp.json()
    assert store.calls[0] == (None, ["Acme", "Globex"])
    assert {r["brand"] for r in body["dedupedData"]} == {"Acme", "Globex"}
    assert body["kpis"]["publishedVideos"] == 3


def test_dashboard_custom_window_bounds_both_ends(client):
    params = {"timeWindow": "custom", "startDate": _day(5), "endDate": _day(2)}
    body = client.get("/api/dashboard", params=params).json()
    assert [r["id"] for r in body["dedupedData"]] == [3]


def test_dashboard_hide_unknown(client):
    body = client.get("/api/dashboard", params={"hideUnknown": "true"}).json()
    assert all(r["brand"] for r in body["dedupedData"])


def test_dashboard_description_filter(client):
    option_id = description_fingerprint("summer sale")
    body = client.get("/api/dashboard", params={"descriptions": option_id}).json()
    assert sorted(r["id"] for r in body["dedupedData"]) == [1, 2]
    assert body["kpis"]["totalViews"] == 100
    # options still list every description in scope
    assert len(body["descriptionOptions"]) == 2


def test_dashboard_store_failure_returns_error_body(client, store):
    store.error = "permission denied for view"
    resp = client.get("/api/dashboard")
    assert resp.status_code == 500
    assert resp.json() == {"error": "permission denied for view"}


def test_top_videos(client):
    resp = client.get("/api/dashboard/top-videos", params={"limit": 2, "timeWindow": "alltime"})
    assert resp.status_code == 200
    rows = resp.json()
    assert [r["plays"] for r in rows] == [600, 100]
    assert rows[1]["engagement_rate"] == pytest.approx(0.1)


def test_top_videos_unknown_sort_is_400(client):
    resp = client.get("/api/dashboard/top-videos", params={"sortBy": "bogus"})
    assert resp.status_code == 400
    assert "bogus" in resp.json()["error"]


def test_top_accounts(client):
    rows = client.get(
        "/api/dashboard/top-accounts", params={"sortBy": "total_views", "limit": 10}
    ).json()
    assert [r["username"] for r in rows] == ["carol", "alice", "dave", "bob"]
    assert rows[1]["followers"] == 50


def test_brand_overview_includes_unknown_bucket(client):
    rows = client.get("/api/dashboard/brands").json()
    assert [r["brand"] for r in rows] == ["Globex", "Acme", "Unknown"]
    acme = rows[1]
    assert acme["active_accounts"] == 2
    assert acme["avg_views"] == pytest.approx(50)


def test_best_accounts(client):
    rows = client.get("/api/dashboard/best-accounts").json()
    assert [r["username"] for r in rows] == ["carol"]


def test_search_videos_and_accounts(client):
    body = client.get("/api/dashboard/search", params={"q": "SALE"}).json()
    assert body["totalResults"] == 2
    assert [v["id"] for v in body["videos"]] == [1, 2]

    body = client.get(
        "/api/dashboard/search", params={"q": "a", "mode": "accounts", "perPage": 2}
    ).json()
    assert body["totalResults"] == 3
    assert body["totalPages"] == 2
    assert [a["username"] for a in body["accounts"]] == ["carol", "alice"]


def test_brand_dashboard_by_slug(client):
    body = client.get("/api/dashboard/brand/globex").json()
    assert body["kpis"]["publishedVideos"] == 1
    assert client.get("/api/dashboard/brand/nobody").status_code == 404


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_build_dashboard_is_pure():
    records = list(RECORDS)
    snapshot = [r.model_dump() for r in records]
    response = build_dashboard(records, DashboardQuery())
    assert [r.model_dump() for r in records] == snapshot
    assert sum(d.plays for d in response.daily_metrics) == sum(r.plays for r in records)


def test_metric_registry(client):
    body = client.get("/api/dashboard/metrics").json()
    names = {m["name"] for m in body["metrics"]}
    assert {"plays", "saves", "engagement_rate"} <= names
    assert "avg_engagement_rate" in body["sort_fields"]
    assert "total_views" not in body["table_sort_fields"]["top-videos"]


def test_build_dashboard_applies_hide_unknown():
    response = build_dashboard(RECORDS, DashboardQuery(hide_unknown=True))
    assert all(r.brand for r in response.deduped_data)
    assert 4 not in [r.id for r in response.deduped_data]
    assert response.kpis.published_videos == 4


@pytest.mark.parametrize(
    "path, sort_by",
    [
        ("/api/dashboard/top-videos", "total_views"),
        ("/api/dashboard/top-accounts", "plays"),
        ("/api/dashboard/brands", "engagement_rate"),
    ],
)
def test_sort_field_must_exist_on_table_rows(client, store, path, sort_by):
    resp = client.get(path, params={"sortBy": sort_by})
    assert resp.status_code == 400
    assert sort_by in resp.json()["error"]
    assert store.calls == []


def test_unexpected_failure_returns_error_body():
    class BrokenStore(FakeStore):
        async def fetch_posts(self, start_date=None, brands=None):
            raise RuntimeError("view definition changed")

    async def override():
        yield BrokenStore()

    app.dependency_overrides[get_store] = override
    try:
        resp = TestClient(app).get("/api/dashboard/top-accounts")
    finally:
        app.dependency_overrides.clear()
    assert resp.status_code == 500
    assert resp.json() == {"error": "view definition changed"}


def test_run_serves_app_with_uvicorn(monkeypatch):
    import uvicorn

    from app.config import settings
    from app.main import run

    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda target, **kw: calls.append((target, kw)))
    run()
    assert calls[0][0] == "app.main:app"
    assert calls[0][1]["port"] == settings.port
