"""
Tests for POST /batch.

Structured operations go through the strict validator: one bad operation
rejects the whole request and nothing is written.
"""

from app.models.activity_log import ActivityLogEntry
from app.models.bin import Bin


def post_batch(client, headers, location_id, operations):
    return client.post(
        "/batch",
        json={"locationId": location_id, "operations": operations},
        headers=headers,
    )


class TestBatchEndpoint:
    """Tests for the batch endpoint."""

    def test_results_in_order(self, client, db, location, auth_headers, tools_bin, garage_bin):
        response = post_batch(client, auth_headers, location.id, [
            {"type": "remove_items", "bin_id": "T1", "bin_name": "Tools", "items": ["Hammer"]},
            {"type": "add_items", "bin_id": "G1", "bin_name": "Garage Shelf", "items": ["Hammer"]},
            {"type": "set_color", "bin_id": "G1", "color": "blue"},
        ])

        assert response.status_code == 200
        body = response.json()
        assert body["errors"] == []
        assert [r["type"] for r in body["results"]] == ["remove_items", "add_items", "set_color"]
        assert all(r["success"] for r in body["results"])

        db.expire_all()
        assert db.get(Bin, "T1").item_names == []
        assert db.get(Bin, "G1").item_names == ["Tape", "Rope", "Hammer"]
        assert db.get(Bin, "G1").color == "blue"

    def test_restore_from_trash(self, client, db, location, auth_headers, trashed_bin):
        response = post_batch(client, auth_headers, location.id, [
            {"type": "restore_bin", "bin_id": "X1"},
        ])

        assert response.status_code == 200
        db.expire_all()
        assert db.get(Bin, "X1").deleted_at is None

    def test_invalid_operation_rejects_everything(self, client, db, location, auth_headers, tools_bin):
        response = post_batch(client, auth_headers, location.id, [
            {"type": "add_items", "bin_id": "T1", "items": ["Saw"]},
            {"type": "add_items", "bin_id": "T1", "items": []},
        ])

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["error"] == "VALIDATION_ERROR"
        assert detail["message"].startswith("operations[1]")

        db.expire_all()
        assert db.get(Bin, "T1").item_names == ["Hammer"]
        assert db.query(ActivityLogEntry).count() == 0

    def test_unknown_bin_rejected(self, client, location, auth_headers, tools_bin):
        response = post_batch(client, auth_headers, location.id, [
            {"type": "delete_bin", "bin_id": "NOPE99"},
        ])

        assert response.status_code == 422
        assert "NOPE99" in response.json()["detail"]["message"]

    def test_empty_operations(self, client, location, auth_headers):
        response = post_batch(client, auth_headers, location.id, [])

        assert response.status_code == 422
        assert response.json()["detail"]["message"] == "operations must be a non-empty array"

    def test_missing_operations(self, client, location, auth_headers):
        response = client.post("/batch", json={"locationId": location.id}, headers=auth_headers)
        assert response.status_code == 422

    def test_too_many_operations(self, client, location, auth_headers):
        ops = [{"type": "create_bin", "name": f"Bin {i}"} for i in range(51)]

        response = post_batch(client, auth_headers, location.id, ops)

        assert response.status_code == 422
        assert "50" in response.json()["detail"]["message"]

    def test_runtime_failure_reported_per_operation(self, client, location, auth_headers, tools_bin):
        response = post_batch(client, auth_headers, location.id, [
            {"type": "restore_bin", "bin_id": "T1"},
            {"type": "add_tags", "bin_id": "T1", "tags": ["metal"]},
        ])

        assert response.status_code == 200
        body = response.json()
        assert [r["success"] for r in body["results"]] == [False, True]
        assert body["errors"] == ["restore_bin: Bin not found in trash: T1"]

    def test_non_member_forbidden(self, client, location, other_auth_headers, tools_bin):
        response = post_batch(client, other_auth_headers, location.id, [
            {"type": "delete_bin", "bin_id": "T1"},
        ])
        assert response.status_code == 403

    def test_unknown_location(self, client, auth_headers):
        response = post_batch(client, auth_headers, "no-such-location", [
            {"type": "create_bin", "name": "X"},
        ])
        assert response.status_code == 404

    def test_requires_auth(self, client, location):
        response = client.post("/batch", json={"locationId": location.id, "operations": []})
        assert response.status_code in (401, 403)
