import pytest

from statline import create_app


def _drain(app):
    app.extensions["statline"].commands.process_pending()


def test_health_endpoint(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "healthy", "service": "statline"}


def test_security_headers_present(client):
    resp = client.get("/health")
    assert resp.headers.get("X-Content-Type-Options") == "nosniff"
    assert resp.headers.get("X-Frame-Options") == "DENY"
    assert "Content-Security-Policy" in resp.headers
    assert resp.headers.get("Referrer-Policy") == "no-referrer"


def test_posted_snapshot_reaches_charts(app, client):
    snapshot = {
        "cpu": {"usage": 33.0},
        "net": [{"interface": "eth0", "downSpeed": 10, "upSpeed": 2}],
        "lastUpdate": {"cpu": 1, "net": 1},
    }
    resp = client.post("/api/stats", json=snapshot)
    assert resp.status_code == 202
    _drain(app)

    cpu = client.get("/api/charts/cpu").get_json()
    assert cpu["series"][0]["data"][0][1] == 33.0
    assert cpu["xAxis"]["periodStart"] is not None

    charts = client.get("/api/charts").get_json()
    assert set(charts) == {"battery", "cpu", "io", "memory", "eth0"}

    stats = client.get("/api/stats").get_json()
    assert stats["netTotal"] == {"downSpeed": 10, "upSpeed": 2}
    assert stats["battery"] is None
    assert len(stats["time"]) == 5


def test_post_rejects_non_object(client):
    resp = client.post("/api/stats", data="nope", content_type="text/plain")
    assert resp.status_code == 400
    resp = client.post("/api/stats", json=[1, 2])
    assert resp.status_code == 400


def test_unknown_chart_is_404(client):
    assert client.get("/api/charts/wlan9").status_code == 404


def test_api_key_guards_snapshot_push():
    app = create_app({"TESTING": True, "API_KEY": "secret"})
    client = app.test_client()
    assert client.post("/api/stats", json={}).status_code == 401
    resp = client.post("/api/stats", json={}, headers={"X-API-KEY": "secret"})
    assert resp.status_code == 202


def test_widget_geometry_from_startup_request(client):
    data = client.get("/api/widget").get_json()
    assert data == {"left": -10, "top": 40, "width": 240, "height": 1000}


def test_metrics_endpoint(app, client):
    client.post("/api/stats", json={"cpu": {"usage": 1}, "lastUpdate": {"cpu": 1}})
    _drain(app)
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert b"statline_chart_samples" in resp.data
    assert b'chart="cpu"' in resp.data
    assert b"statline_memory_rss_bytes" in resp.data


def test_invalid_retention_fails_startup():
    with pytest.raises(ValueError):
        create_app({"TESTING": True, "WINDOW_LENGTH": 60, "CLEANUP_INTERVAL": 60})


def test_workers_not_started_when_testing(app):
    runtime = app.extensions["statline"]
    assert runtime.commands._thread is None
    assert runtime.janitor._thread is None
