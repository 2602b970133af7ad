EVENT = {
    "name": "Autumn Reception",
    "type": "Reception",
    "date": "2026-09-15",
    "location": "Crown Center",
    "capacity": 80,
}


class TestEventRoutes:
    def test_create_event_returns_list_summary(self, client, auth_headers, test_user):
        response = client.post("/api/events", json=EVENT, headers=auth_headers)

        assert response.status_code == 201
        data = response.get_json()
        assert data["message"] == "Event created successfully"
        assert data["event"]["status"] == "Planning"
        assert data["event"]["created_by"] == test_user.id
        assert data["event"]["donor_list"]["total_donors"] == 0
        assert data["event"]["donor_list"]["review_status"] == "completed"

    def test_create_event_missing_fields(self, client, auth_headers):
        response = client.post("/api/events", json={"name": "Gala"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.get_json()["message"] == "Name, type, date, and location are required fields"

    def test_create_event_rejects_bad_capacity(self, client, auth_headers):
        response = client.post("/api/events", json={**EVENT, "capacity": 0}, headers=auth_headers)
        assert response.status_code == 400
        assert response.get_json()["message"] == "Capacity must be a positive integer"

    def test_list_and_filter_events(self, client, auth_headers, test_event):
        client.post("/api/events", json=EVENT, headers=auth_headers)

        data = client.get("/api/events", headers=auth_headers).get_json()
        assert data["total"] == 2
        assert [e["name"] for e in data["events"]] == ["Spring Gala", "Autumn Reception"]

        by_type = client.get("/api/events?type=Gala", headers=auth_headers).get_json()
        assert [e["id"] for e in by_type["events"]] == [test_event.id]

        by_status = client.get("/api/events/status/planning", headers=auth_headers).get_json()
        assert by_status["total"] == 2

    def test_unknown_status_filter(self, client, auth_headers):
        response = client.get("/api/events/status/archived", headers=auth_headers)
        assert response.status_code == 400

    def test_view_update_and_status(self, client, auth_headers, test_event):
        view = client.get(f"/api/events/{test_event.id}", headers=auth_headers).get_json()
        assert view["donor_list"]["id"] == test_event.donor_list.id

        updated = client.put(f"/api/events/{test_event.id}", json={"capacity": 200}, headers=auth_headers)
        assert updated.get_json()["event"]["capacity"] == 200

        status = client.put(f"/api/events/{test_event.id}/status", json={"status": "Review"}, headers=auth_headers)
        assert status.get_json()["message"] == "Event status updated successfully"
        assert status.get_json()["event"]["status"] == "Review"

    def test_soft_delete(self, client, auth_headers, test_event):
        response = client.delete(f"/api/events/{test_event.id}", headers=auth_headers)
        assert response.get_json()["message"] == "Event deleted successfully"

        assert client.get(f"/api/events/{test_event.id}", headers=auth_headers).status_code == 404
        assert client.get("/api/events", headers=auth_headers).get_json()["total"] == 0
