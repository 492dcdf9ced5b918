"""
Tests for split bill endpoints.
"""
from decimal import Decimal

from splitbill.core.errors import StorageError
from conftest import ALICE, BOB, CAROL, PAYER


def create_bill(client, body):
    response = client.post("/api/split/create", json=body)
    assert response.status_code == 200, response.json()
    return response.json()["data"]


def test_create_split_bill(client):
    """Test creating a bill with explicit shares."""
    response = client.post(
        "/api/split/create",
        json={
            "payer": "0xA",
            "total": 100,
            "participants": [
                {"addr": "0xB", "amount": 50},
                {"addr": "0xC", "amount": 50},
            ],
        }
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Split bill created successfully"

    bill = body["data"]
    assert bill["id"].startswith("bill_")
    assert bill["payer_address"] == "0xa"
    assert bill["chain_id"] == 84532
    assert len(bill["participants"]) == 2
    assert sum(Decimal(p["amount"]) for p in bill["participants"]) == Decimal("100")


def test_create_with_empty_participants(client):
    """Test that an empty participants list is rejected."""
    response = client.post(
        "/api/split/create",
        json={"payer": "0xA", "total": 100, "participants": []}
    )
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "participants" in body["error"].lower()
    assert body["violations"][0]["code"] == "empty_participants"


def test_create_reports_all_violations(client):
    """Test that every violation is reported at once."""
    response = client.post("/api/split/create", json={"total": -1})
    assert response.status_code == 400
    body = response.json()
    assert [v["code"] for v in body["violations"]] == [
        "missing_field", "negative_amount", "missing_field"
    ]
    assert body["error"] == ", ".join(v["message"] for v in body["violations"])


def test_create_with_invalid_json(client):
    response = client.post(
        "/api/split/create",
        content="{not json",
        headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_create_storage_failure(client, bill_body, monkeypatch):
    """Test that storage failures return a 500 envelope."""
    def failing_save(db, bill):
        raise StorageError("Failed to save split bill")

    monkeypatch.setattr("splitbill.api.routes.split.save_split_bill", failing_save)
    response = client.post("/api/split/create", json=bill_body)
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to save split bill"}


def test_create_options(client):
    response = client.options("/api/split/create")
    assert response.status_code == 200
    assert response.json() == {}


def test_user_bills_round_trip(client, bill_body):
    """Test that a created bill is listed for its payer."""
    bill = create_bill(client, bill_body)

    response = client.get(f"/api/bills/user/{PAYER.upper().replace('0X', '0x')}")
    assert response.status_code == 200
    assert [b["id"] for b in response.json()] == [bill["id"]]

    response = client.get(f"/api/bills/user/{CAROL}")
    assert response.status_code == 200
    assert response.json() == []


def test_user_bills_blank_address(client):
    response = client.get("/api/bills/user/%20")
    assert response.status_code == 400
    assert response.json()["error"] == "Address is required"


def test_participant_bills(client, bill_body):
    bill = create_bill(client, bill_body)

    response = client.get(f"/api/bills/participant/{ALICE}")
    assert response.status_code == 200
    assert [b["id"] for b in response.json()] == [bill["id"]]
    assert client.get(f"/api/bills/participant/{PAYER}").json() == []


def test_get_split_bill(client, bill_body):
    bill = create_bill(client, bill_body)

    response = client.get(f"/api/split/{bill['id']}")
    assert response.status_code == 200
    assert response.json()["data"]["id"] == bill["id"]

    response = client.get("/api/split/bill_missing")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Split bill not found"}


def test_join_and_pay(client, bill_body):
    """Test joining a bill and paying every share until it completes."""
    bill = create_bill(client, bill_body)

    response = client.patch(
        f"/api/split/{bill['id']}",
        json={"action": "join", "participantAddress": CAROL, "displayName": "Carol"}
    )
    assert response.status_code == 200
    joined = response.json()["data"]
    assert joined["participant_count"] == 3
    assert sum(Decimal(p["amount"]) for p in joined["participants"]) == Decimal("100")

    for index, participant in enumerate(joined["participants"]):
        response = client.patch(
            f"/api/split/{bill['id']}",
            json={
                "action": "payment",
                "participantId": participant["id"],
                "transactionHash": f"0xhash{index}",
            }
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Payment status updated successfully"

    assert response.json()["data"]["status"] == "completed"

    stats = client.get(f"/api/split/{bill['id']}/stats").json()["data"]
    assert stats["completion_rate"] == 100
    assert stats["pending_participants"] == 0

    transactions = client.get(f"/api/split/{bill['id']}/transactions").json()["data"]
    assert len(transactions) == 3


def test_join_twice_is_rejected(client, bill_body):
    bill = create_bill(client, bill_body)
    response = client.patch(
        f"/api/split/{bill['id']}",
        json={"action": "join", "participantAddress": BOB}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "You have already joined this split"


def test_update_invalid_requests(client, bill_body):
    bill = create_bill(client, bill_body)

    response = client.patch(f"/api/split/{bill['id']}", json={"action": "refund"})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid action type"

    response = client.patch(
        f"/api/split/{bill['id']}",
        json={"action": "payment", "participantId": bill["participants"][0]["id"]}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Transaction hash is required"

    response = client.patch(
        f"/api/split/{bill['id']}",
        json={"action": "payment", "participantId": "participant_missing", "transactionHash": "0x1"}
    )
    assert response.status_code == 404

    response = client.patch("/api/split/bill_missing", json={"action": "join", "participantAddress": CAROL})
    assert response.status_code == 404


def test_delete_split_bill(client, bill_body):
    bill = create_bill(client, bill_body)

    response = client.delete(f"/api/split/{bill['id']}")
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Split bill deleted successfully"}

    assert client.get(f"/api/split/{bill['id']}").status_code == 404
    assert client.delete(f"/api/split/{bill['id']}").status_code == 404


def test_bill_stats(client, bill_body):
    create_bill(client, bill_body)
    response = client.get("/api/bills/stats")
    assert response.status_code == 200
    assert response.json()["data"]["total_bills"] == 1


def test_unknown_route_uses_envelope(client):
    response = client.get("/api/unknown")
    assert response.status_code == 404
    assert response.json()["success"] is False


def pay(client, bill_id, participant_id, tx_hash, status="paid"):
    return client.patch(
        f"/api/split/{bill_id}",
        json={
            "action": "payment",
            "participantId": participant_id,
            "transactionHash": tx_hash,
            "status": status,
        }
    )


def test_repeated_payment_is_rejected(client, bill_body):
    """Test that each share is recorded once and completed bills stay closed."""
    bill = create_bill(client, bill_body)
    first, second = bill["participants"]

    assert pay(client, bill["id"], first["id"], "0xhash0").json()["data"]["status"] == "active"

    response = pay(client, bill["id"], first["id"], "0xhash0")
    assert response.status_code == 400
    assert response.json()["error"] == "Payment has already been recorded for this participant"

    assert pay(client, bill["id"], second["id"], "0xhash1").json()["data"]["status"] == "completed"

    response = pay(client, bill["id"], first["id"], "0xhash0", status="confirmed")
    assert response.status_code == 400
    assert response.json()["error"] == "Split is closed"

    transactions = client.get(f"/api/split/{bill['id']}/transactions").json()["data"]
    assert len(transactions) == 2


def test_payment_can_be_confirmed(client, bill_body):
    bill = create_bill(client, bill_body)
    participant = bill["participants"][0]

    pay(client, bill["id"], participant["id"], "0xhash0")
    response = pay(client, bill["id"], participant["id"], "0xhash0", status="confirmed")
    assert response.status_code == 200
    assert response.json()["data"]["participants"][0]["status"] == "confirmed"
