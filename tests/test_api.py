"""HTTP tests for the ledger routers, backed by a temporary SQLite database."""

import uuid


def _create_work(client, title="Night Train", stock=10, **extra):
    response = client.post("/works/", json={"title": title, "initial_stock": stock, **extra})
    assert response.status_code == 201, response.text
    return response.json()


def _register(client, work_id, quantity, **extra):
    return client.post(f"/works/{work_id}/distributions", json={"quantity": quantity, **extra})


class TestWorksEndpoints:
    def test_create_and_list(self, client):
        work = _create_work(client, title="  Zine  ", stock=3.7, price=-10, memo="  ")
        assert work["title"] == "Zine"
        assert work["initial_stock"] == work["current_stock"] == 3
        assert work["price"] is None
        assert work["memo"] is None
        assert work["sold"] == 0

        listed = client.get("/works/").json()
        assert [w["id"] for w in listed] == [work["id"]]

    def test_blank_title_is_rejected_on_create_and_update(self, client):
        response = client.post("/works/", json={"title": "   ", "initial_stock": 1})
        assert response.status_code == 400
        assert response.json()["detail"] == "Title is required"
        assert client.get("/works/").json() == []

        work = _create_work(client)
        response = client.patch(f"/works/{work['id']}", json={"title": " "})
        assert response.status_code == 400
        assert response.json()["detail"] == "Title is required"
        assert client.get(f"/works/{work['id']}").json()["title"] == "Night Train"

    def test_missing_title_is_a_schema_error(self, client):
        assert client.post("/works/", json={"initial_stock": 1}).status_code == 422

    def test_update_work(self, client):
        work = _create_work(client, price=500)
        response = client.patch(f"/works/{work['id']}", json={"title": "Renamed", "price": None})
        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Renamed"
        assert body["price"] is None
        assert body["updated_at"] >= work["updated_at"]

    def test_unknown_work_is_404(self, client):
        missing = uuid.uuid4()
        assert client.get(f"/works/{missing}").status_code == 404
        assert client.patch(f"/works/{missing}", json={"title": "X"}).status_code == 404
        assert client.delete(f"/works/{missing}").status_code == 404
        assert _register(client, missing, 1).status_code == 404

    def test_restock(self, client):
        work = _create_work(client, stock=2)
        response = client.post(f"/works/{work['id']}/restock", json={"quantity": 5})
        assert response.status_code == 200
        assert response.json()["registered_quantity"] == 5

        updated = client.get(f"/works/{work['id']}").json()
        assert updated["current_stock"] == 7
        assert updated["initial_stock"] == 7

        assert client.post(f"/works/{work['id']}/restock", json={"quantity": 0}).status_code == 400

    def test_delete_work_cascades_records(self, client):
        work = _create_work(client)
        _register(client, work["id"], 1)
        _register(client, work["id"], 2)
        other = _create_work(client, title="Other")
        _register(client, other["id"], 1)

        assert client.delete(f"/works/{work['id']}").status_code == 204

        history = client.get("/distributions/").json()
        assert [r["work_id"] for r in history] == [other["id"]]


class TestDistributionEndpoints:
    def test_round_trip(self, client):
        work = _create_work(client, stock=10)
        response = _register(client, work["id"], 3)
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] is None
        assert body["registered_quantity"] == 3
        assert body["record"]["work_title"] == "Night Train"
        assert client.get(f"/works/{work['id']}").json()["current_stock"] == 7

        assert client.delete(f"/distributions/{body['record_id']}").status_code == 204
        assert client.get(f"/works/{work['id']}").json()["current_stock"] == 10
        assert client.get("/distributions/").json() == []

    def test_partial_fulfillment(self, client):
        work = _create_work(client, stock=5)
        response = _register(client, work["id"], 8)
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["registered_quantity"] == 5
        assert body["message"]
        assert body["record"]["quantity"] == 5
        assert client.get(f"/works/{work['id']}").json()["current_stock"] == 0

    def test_no_stock_is_conflict(self, client):
        work = _create_work(client, stock=0)
        response = _register(client, work["id"], 1)
        assert response.status_code == 409
        assert client.get("/distributions/").json() == []

    def test_quantity_below_one_is_bad_request(self, client):
        work = _create_work(client, stock=5)
        assert _register(client, work["id"], 0).status_code == 400
        assert client.get(f"/works/{work['id']}").json()["current_stock"] == 5

    def test_event_name_snapshot(self, client):
        work = _create_work(client)
        event = client.post("/events/", json={"name": "Spring Fair", "date": "2025-04-20"}).json()
        record = _register(client, work["id"], 1, event_id=event["id"]).json()["record"]
        assert record["event_name"] == "Spring Fair"

        client.delete(f"/events/{event['id']}")
        history = client.get(f"/works/{work['id']}/distributions").json()
        assert history[0]["event_name"] == "Spring Fair"

    def test_update_quantity_resettles_stock(self, client):
        work = _create_work(client, stock=10)
        record_id = _register(client, work["id"], 3).json()["record_id"]

        response = client.patch(f"/distributions/{record_id}", json={"quantity": 12, "memo": "recount"})
        assert response.status_code == 200
        assert response.json()["quantity"] == 10
        assert response.json()["memo"] == "recount"
        assert client.get(f"/works/{work['id']}").json()["current_stock"] == 0

        assert client.patch(f"/distributions/{record_id}", json={"quantity": 0}).status_code == 400
        assert client.patch(f"/distributions/{uuid.uuid4()}", json={"memo": "x"}).status_code == 404

    def test_history_is_newest_first(self, client):
        work = _create_work(client)
        _register(client, work["id"], 1, distributed_at="2025-01-01T10:00:00Z")
        _register(client, work["id"], 1, distributed_at="2025-03-01T10:00:00Z")
        _register(client, work["id"], 1, distributed_at="2025-02-01T10:00:00Z")

        dates = [r["distributed_at"][:10] for r in client.get("/distributions/").json()]
        assert dates == ["2025-03-01", "2025-02-01", "2025-01-01"]

    def test_out_of_range_distribution_date_falls_back_to_now(self, client):
        work = _create_work(client)
        response = _register(client, work["id"], 1, distributed_at="0001-01-01T00:00:00+05:00")
        assert response.status_code == 201
        assert not response.json()["record"]["distributed_at"].startswith("0001")


class TestEventEndpoints:
    def test_crud(self, client):
        response = client.post("/events/", json={"name": " Summer Market ", "date": "not a date", "location": "East"})
        assert response.status_code == 201
        event = response.json()
        assert event["name"] == "Summer Market"
        assert event["date"]

        updated = client.patch(f"/events/{event['id']}", json={"memo": "Table E-12"}).json()
        assert updated["memo"] == "Table E-12"
        assert client.get(f"/events/{event['id']}").json()["location"] == "East"

        assert client.delete(f"/events/{event['id']}").status_code == 204
        assert client.get("/events/").json() == []

    def test_blank_name_is_rejected(self, client):
        response = client.post("/events/", json={"name": "  "})
        assert response.status_code == 400
        assert response.json()["detail"] == "Event name is required"
        event = client.post("/events/", json={"name": "Fair"}).json()
        assert client.patch(f"/events/{event['id']}", json={"name": " "}).status_code == 400


class TestDashboard:
    def test_aggregates(self, client):
        a = _create_work(client, title="A", stock=10, price=500)
        _create_work(client, title="B", stock=10)
        _register(client, a["id"], 3)

        stats = client.get("/dashboard/").json()
        assert stats["total_works"] == 2
        assert stats["total_current_stock"] == 17
        assert stats["total_sold"] == 3
        assert stats["sold_ratio"] == 15
        assert stats["estimated_revenue"] == 1500
        assert stats["unpriced_works"] == 1
        assert stats["last_distribution"]["work_title"] == "A"

    def test_empty(self, client):
        stats = client.get("/dashboard/").json()
        assert stats["sold_ratio"] == 0
        assert stats["last_distribution"] is None


class TestTenantIsolation:
    def test_users_cannot_see_or_touch_each_others_ledger(self, client, login_as):
        work = _create_work(client, title="Alice's zine")

        login_as("bob")
        assert client.get("/works/").json() == []
        assert client.get(f"/works/{work['id']}").status_code == 404
        assert _register(client, work["id"], 1).status_code == 404
        assert client.delete(f"/works/{work['id']}").status_code == 404
        _create_work(client, title="Bob's zine")

        login_as("alice")
        titles = [w["title"] for w in client.get("/works/").json()]
        assert titles == ["Alice's zine"]
        assert client.get(f"/works/{work['id']}").json()["current_stock"] == 10


class TestSnapshotEndpoints:
    def test_import_legacy_export_and_export_back(self, client):
        legacy = {
            "state": {
                "works": [
                    {"id": "w-1", "title": "Old zine", "initialStock": 20, "currentStock": 15,
                     "createdAt": "2024-11-01T03:00:00.000Z", "updatedAt": "2024-11-02T03:00:00.000Z"},
                ],
                "distributionRecords": [
                    {"id": "r-1", "workId": "w-1", "quantity": 5, "distributedAt": "garbage"},
                ],
                "events": [],
            },
            "version": 0,
        }
        response = client.put("/ledger/snapshot", json=legacy)
        assert response.status_code == 200
        assert response.json() == {"ok": True, "works": 1, "distribution_records": 1, "events": 0}

        works = client.get("/works/").json()
        assert works[0]["title"] == "Old zine"
        assert works[0]["sold"] == 5

        exported = client.get("/ledger/snapshot").json()
        assert len(exported["works"]) == 1
        assert exported["distribution_records"][0]["work_id"] == works[0]["id"]

    def test_import_replaces_existing_ledger(self, client):
        _create_work(client, title="Before")
        client.put("/ledger/snapshot", json={"works": [{"id": "x", "title": "After", "initial_stock": 1}]})
        assert [w["title"] for w in client.get("/works/").json()] == ["After"]
