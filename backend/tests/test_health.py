def test_health_endpoints(client):
    live = client.get("/api/health/live")
    assert live.status_code == 200
    payload = live.json()
    assert payload["status"] == "ok"
    assert payload["service"] == "Horario Validation API"

    basic = client.get("/api/health")
    assert basic.status_code == 200
    assert basic.json() == {"status": "ok"}
    assert basic.headers["X-Process-Time"].endswith("ms")
