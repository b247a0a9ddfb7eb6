"""
HTTP tests for /api/events: end-to-end scenarios through FastAPI.
"""

from tests.conftest import post_event, signup


class TestCreate:
    def test_create_sets_caller_as_creator(self, client):
        headers = signup(client, "alice")
        me = client.get("/api/users/me", headers=headers).json()

        event = post_event(client, headers, capacity=3)

        assert event["creator"] == me["id"]
        assert event["attendees"] == []
        assert event["rating"] == 0

    def test_zero_capacity_rejected(self, client):
        headers = signup(client, "alice")
        response = client.post(
            "/api/events/create",
            json={"name": "x", "description": "y", "date": "2030-01-01T10:00:00Z", "capacity": 0, "price": 1},
            headers=headers,
        )
        assert response.status_code == 422

    def test_blank_name_rejected(self, client):
        headers = signup(client, "alice")
        response = client.post(
            "/api/events/create",
            json={"name": "   ", "description": "y", "date": "2030-01-01T10:00:00Z", "capacity": 2, "price": 1},
            headers=headers,
        )
        assert response.status_code == 422

    def test_requires_token(self, client):
        response = client.post("/api/events/create", json={})
        assert response.status_code == 401
        assert response.json()["detail"] == "Token header not found"


class TestRegisterScenario:
    def test_capacity_one(self, client):
        creator = signup(client, "alice")
        user_a = signup(client, "anna")
        user_b = signup(client, "boris")
        anna_id = client.get("/api/users/me", headers=user_a).json()["id"]
        event = post_event(client, creator, capacity=1)

        first = client.post(f"/api/events/register/{event['id']}", headers=user_a)
        assert first.status_code == 200
        assert first.json()["attendees"] == [anna_id]

        second = client.post(f"/api/events/register/{event['id']}", headers=user_b)
        assert second.status_code == 400
        assert second.json()["detail"] == "Event is sold out"

    def test_duplicate_registration(self, client):
        creator = signup(client, "alice")
        bob = signup(client, "bob")
        event = post_event(client, creator, capacity=5)

        client.post(f"/api/events/register/{event['id']}", headers=bob)
        again = client.post(f"/api/events/register/{event['id']}", headers=bob)

        assert again.status_code == 400
        assert again.json()["detail"] == "You have already registered for this event"
        capacity = client.get(f"/api/events/capacity/{event['id']}", headers=bob).json()
        assert capacity == {"percentageFilled": 20.0}

    def test_registration_appears_in_profile_and_listing(self, client):
        creator = signup(client, "alice")
        bob = signup(client, "bob")
        soon = post_event(client, creator, days_ahead=9, name="soon")
        later = post_event(client, creator, days_ahead=40, name="later")
        client.post(f"/api/events/register/{later['id']}", headers=bob)
        client.post(f"/api/events/register/{soon['id']}", headers=bob)

        profile = client.get("/api/users/me", headers=bob).json()
        registered = client.get("/api/events/registered", headers=bob).json()

        assert profile["registeredEvents"] == [soon["id"], later["id"]]
        assert [e["id"] for e in registered] == [soon["id"], later["id"]]

    def test_unknown_event(self, client):
        bob = signup(client, "bob")
        response = client.post("/api/events/register/12345", headers=bob)
        assert response.status_code == 404
        assert response.json()["detail"] == "Event not found"


class TestCancelScenario:
    def test_cancel_hides_event_everywhere(self, client):
        creator = signup(client, "alice")
        event = post_event(client, creator, days_ahead=10)

        response = client.delete(f"/api/events/cancel/{event['id']}", headers=creator)
        assert response.status_code == 200
        assert response.json() == {"message": "Event cancelled successfully"}

        listed = client.get("/api/events/", headers=creator).json()
        assert event["id"] not in [e["id"] for e in listed]
        assert client.delete(f"/api/events/cancel/{event['id']}", headers=creator).status_code == 404
        assert client.post(f"/api/events/register/{event['id']}", headers=creator).status_code == 404
        assert client.get(f"/api/events/capacity/{event['id']}", headers=creator).status_code == 404
        assert client.get("/api/events/created", headers=creator).json() == []

    def test_cancel_with_attendees(self, client):
        creator = signup(client, "alice")
        bob = signup(client, "bob")
        event = post_event(client, creator, days_ahead=30)
        client.post(f"/api/events/register/{event['id']}", headers=bob)

        response = client.delete(f"/api/events/cancel/{event['id']}", headers=creator)

        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot cancel event with registered users"

    def test_cancel_too_close(self, client):
        creator = signup(client, "alice")
        event = post_event(client, creator, days_ahead=3)
        response = client.delete(f"/api/events/cancel/{event['id']}", headers=creator)
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot cancel event within 7 days"

    def test_cancel_by_other_user_forbidden(self, client):
        creator = signup(client, "alice")
        other = signup(client, "mallory")
        event = post_event(client, creator, days_ahead=30)
        response = client.delete(f"/api/events/cancel/{event['id']}", headers=other)
        assert response.status_code == 403


class TestViews:
    def test_listing_resolves_attendees(self, client):
        creator = signup(client, "alice")
        bob = signup(client, "bob")
        event = post_event(client, creator)
        client.post(f"/api/events/register/{event['id']}", headers=bob)

        listed = client.get("/api/events/", headers=creator).json()

        attendee = listed[0]["attendees"][0]
        assert attendee["username"] == "bob"
        assert attendee["email"] == "bob@example.com"

    def test_created_lists_only_own_events(self, client):
        alice = signup(client, "alice")
        bob = signup(client, "bob")
        mine = post_event(client, alice)
        post_event(client, bob)
        created = client.get("/api/events/created", headers=alice).json()
        assert [e["id"] for e in created] == [mine["id"]]

    def test_top5(self, client):
        creator = signup(client, "alice")
        fans = [signup(client, f"fan{i}") for i in range(3)]
        events = [post_event(client, creator, name=f"event{i}", capacity=5) for i in range(7)]
        for index, fan in enumerate(fans):
            for event in events[: index + 1]:
                client.post(f"/api/events/register/{event['id']}", headers=fan)

        top = client.get("/api/events/top5", headers=creator).json()

        assert len(top) == 5
        assert [row["attendeesCount"] for row in top] == [3, 2, 1, 0, 0]
        assert top[0]["id"] == events[0]["id"]
        assert set(top[0]) == {"id", "name", "attendeesCount", "averageRating"}


HUGE_ID = 99999999999999999999


class TestOutOfRangeInput:
    def test_huge_event_id_is_not_found(self, client):
        headers = signup(client, "alice")
        assert client.get(f"/api/events/capacity/{HUGE_ID}", headers=headers).status_code == 404
        assert client.post(f"/api/events/register/{HUGE_ID}", headers=headers).status_code == 404
        assert client.delete(f"/api/events/cancel/{HUGE_ID}", headers=headers).status_code == 404

    def test_huge_capacity_rejected(self, client):
        headers = signup(client, "alice")
        response = client.post(
            "/api/events/create",
            json={"name": "x", "description": "y", "date": "2030-01-01T10:00:00Z", "capacity": 10**20, "price": 1},
            headers=headers,
        )
        assert response.status_code == 422

    def test_date_past_year_9999_in_utc_rejected(self, client):
        headers = signup(client, "alice")
        response = client.post(
            "/api/events/create",
            json={"name": "x", "description": "y", "date": "9999-12-31T23:00:00-05:00", "capacity": 2, "price": 1},
            headers=headers,
        )
        assert response.status_code == 422

    def test_three_digit_year_rejected(self, client):
        headers = signup(client, "alice")
        response = client.post(
            "/api/events/create",
            json={"name": "x", "description": "y", "date": "0999-06-01T10:00:00Z", "capacity": 2, "price": 1},
            headers=headers,
        )
        assert response.status_code == 422
