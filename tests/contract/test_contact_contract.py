"""Contract tests for POST /contact."""

from starlette.status import HTTP_200_OK, HTTP_500_INTERNAL_SERVER_ERROR

REQUEST = {
    "name": "Ann Buyer",
    "email": "ann@example.com",
    "vin": "1HGCM82633A004352",
    "message": "I did not receive my report.",
}


def test_relays_to_support(client, resend_stub):
    response = client.post("/contact", json=REQUEST)

    assert response.status_code == HTTP_200_OK
    assert response.json() == {"success": True}
    assert len(resend_stub.sent) == 1
    assert resend_stub.sent[0]["to"] == ["support@example.com"]
    assert resend_stub.sent[0]["reply_to"] == "ann@example.com"


def test_missing_message_is_rejected(client, resend_stub):
    response = client.post("/contact", json={k: v for k, v in REQUEST.items() if k != "message"})

    assert response.status_code == 422
    assert resend_stub.sent == []


def test_delivery_failure_is_500(client, resend_stub):
    resend_stub.status = 503

    response = client.post("/contact", json=REQUEST)

    assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json()["success"] is False
