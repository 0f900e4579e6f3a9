import pytest

from .conftest import auth_header

BOOKING = {
    "message": "Please wish my brother a happy birthday",
    "request_type": "birthday",
    "deadline": "2026-12-01T12:00:00Z",
    "recipient": "Avi",
}


@pytest.fixture(autouse=True)
def video_ad(supabase):
    supabase.tables["video_ads"] = [{
        "id": "ad-1",
        "price": 120,
        "duration": 60,
        "creator": {"id": "creator-1", "name": "Noa"},
    }]
    supabase.rpc_results["process_request_payment"] = {"success": True}


def test_read_video_ad(client):
    response = client.get("/video-ads/ad-1")

    assert response.status_code == 200
    assert response.json()["creator"]["name"] == "Noa"


def test_unknown_video_ad(client):
    response = client.get("/video-ads/ad-404")

    assert response.status_code == 404
    assert response.json()["error"] == "Video ad not found"


def test_booking_pays_and_notifies(client, supabase, mailer):
    response = client.post("/video-ads/ad-1/book", json=BOOKING, headers=auth_header())

    assert response.status_code == 200
    request_row = supabase.rows("requests")[0]
    assert response.json() == {"success": True, "request_id": request_row["id"]}
    assert request_row["fan_id"] == "fan-1"
    assert request_row["creator_id"] == "creator-1"
    assert request_row["status"] == "pending"
    assert request_row["price"] == 120
    assert request_row["recipient"] == "Avi"

    assert supabase.rpc_calls == [("process_request_payment", {
        "p_request_id": request_row["id"],
        "p_fan_id": "fan-1",
        "p_creator_id": "creator-1",
        "p_amount": 120,
    })]

    fan_email, creator_email = mailer.sent
    assert fan_email["to"] == "dana@example.com"
    assert "יום הולדת" in fan_email["html"]
    assert "Dana" in fan_email["html"]
    assert creator_email["to"] == "noa@example.com"
    assert "Please wish my brother" in creator_email["html"]


def test_rejected_payment(client, supabase, mailer):
    supabase.rpc_results["process_request_payment"] = {"success": False, "error": "Insufficient balance"}

    response = client.post("/video-ads/ad-1/book", json=BOOKING, headers=auth_header())

    assert response.status_code == 402
    assert response.json() == {
        "success": False,
        "error": "Failed to process payment",
        "details": "Insufficient balance",
    }
    assert mailer.sent == []


def test_payment_rpc_error(client, supabase):
    supabase.rpc_errors["process_request_payment"] = "insufficient funds"

    response = client.post("/video-ads/ad-1/book", json=BOOKING, headers=auth_header())

    assert response.status_code == 402
    assert response.json()["details"] == "insufficient funds"


def test_email_failure_does_not_fail_booking(client, supabase, mailer):
    mailer.error = "Resend unavailable"

    response = client.post("/video-ads/ad-1/book", json=BOOKING, headers=auth_header())

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert len(supabase.rows("requests")) == 1


def test_booking_unknown_ad(client, supabase):
    response = client.post("/video-ads/ad-404/book", json=BOOKING, headers=auth_header())

    assert response.status_code == 404
    assert supabase.rows("requests") == []


def test_booking_requires_auth(client):
    response = client.post("/video-ads/ad-1/book", json=BOOKING)

    assert response.status_code == 401


def test_booking_rejects_unknown_request_type(client):
    response = client.post("/video-ads/ad-1/book", json={**BOOKING, "request_type": "wedding"}, headers=auth_header())

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request body"


def test_payment_rpc_returning_rows(client, supabase):
    supabase.rpc_results["process_request_payment"] = [{"success": True}]

    response = client.post("/video-ads/ad-1/book", json=BOOKING, headers=auth_header())

    assert response.status_code == 200


@pytest.mark.parametrize("result", [[], None, "ok", [{"success": False, "error": "Insufficient balance"}]])
def test_unexpected_payment_result(client, supabase, result):
    supabase.rpc_results["process_request_payment"] = result

    response = client.post("/video-ads/ad-1/book", json=BOOKING, headers=auth_header())

    assert response.status_code == 402
