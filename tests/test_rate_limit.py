"""Rate limit: /coupons/apply allows 5/minute in tests, then 429."""
from fastapi.testclient import TestClient

BODY = {
    "code": "welcome10",
    "cart": {"selected_package_ids": ["pkg-lunch"], "duration_days": 30, "per_day_total": 100},
    "coupons": [{"code": "WELCOME10", "discount_type": "percentage", "discount_value": 10}],
}


def test_coupon_apply_200_then_429(client: TestClient):
    for i in range(5):
        r = client.post("/coupons/apply", json=BODY)
        assert r.status_code == 200, f"Request {i+1} should be 200"
        assert r.json()["valid"] is True
    r = client.post("/coupons/apply", json=BODY)
    assert r.status_code == 429
    j = r.json()
    assert j.get("error") == "Too many requests"
    assert "detail" in j


def test_limit_is_per_client_ip(client: TestClient):
    for _ in range(5):
        client.post("/coupons/apply", json=BODY, headers={"X-Forwarded-For": "10.0.0.1"})
    r = client.post("/coupons/apply", json=BODY, headers={"X-Forwarded-For": "10.0.0.2"})
    assert r.status_code == 200


def test_health_is_exempt(client: TestClient):
    for _ in range(70):
        assert client.get("/health").status_code == 200
