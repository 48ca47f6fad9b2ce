"""
tests/integration/test_events_api.py — Integration tests for event, participant
and roster endpoints.

Endpoints covered:
  POST   /events                         → 201
  GET    /events                         → 200 (newest first)
  GET    /events/:id                     → 200 (with roster) / 404 EVENT_NOT_FOUND
  POST   /participants                   → 201 / 400 INVALID_PARTICIPANT_TYPE
  POST   /events/:id/participants        → 201 / 404 / 409 ALREADY_IN_EVENT
  GET    /events/:id/participants        → 200 (sorted by name)
  PATCH  /events/:id/status              → 200 / 400 INVALID_EVENT_STATUS / 404
  DELETE /events/:id/participants/:pid   → 200 / 404 PARTICIPANT_NOT_IN_EVENT /
                                           409 PARTICIPANT_HAS_RECORDS
"""

from __future__ import annotations

from backend.tests.integration.conftest import (
    add_to_event,
    make_event,
    make_expense,
    make_household,
    make_participant,
    make_payment,
)


# ═══════════════════════════════════════════════════════════════════════════
# Events
# ═══════════════════════════════════════════════════════════════════════════

class TestEvents:

    def test_create_event(self, client):
        resp = client.post("/api/v1/events", json={
            "name": "Carnival 2026",
            "year": 2026,
            "start_date": "2026-02-13",
            "end_date": "2026-02-17",
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["warnings"] == []
        assert body["data"]["name"] == "Carnival 2026"
        assert body["data"]["status"] == "planning"
        assert body["data"]["start_date"] == "2026-02-13"

    def test_create_event_missing_name(self, client):
        resp = client.post("/api/v1/events", json={})
        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "MISSING_FIELD"
        assert resp.get_json()["error"]["field"] == "name"

    def test_create_event_dates_out_of_order(self, client):
        resp = client.post("/api/v1/events", json={
            "name": "Backwards",
            "start_date": "2026-02-17",
            "end_date": "2026-02-13",
        })
        assert resp.status_code == 400
        assert resp.get_json()["error"]["field"] == "end_date"

    def test_list_events_newest_first(self, client):
        first = make_event(client, "Carnival 2025")
        second = make_event(client, "Carnival 2026")

        resp = client.get("/api/v1/events")
        assert resp.status_code == 200
        ids = [e["id"] for e in resp.get_json()["data"]]
        assert ids == [second["id"], first["id"]]

    def test_get_event_includes_roster(self, client):
        event = make_event(client)
        make_household(client, event["id"], "Alice")

        resp = client.get(f"/api/v1/events/{event['id']}")
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["id"] == event["id"]
        assert [p["name"] for p in data["participants"]] == ["Alice"]

    def test_get_unknown_event(self, client):
        resp = client.get("/api/v1/events/9999")
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "EVENT_NOT_FOUND"


# ═══════════════════════════════════════════════════════════════════════════
# Participants and roster
# ═══════════════════════════════════════════════════════════════════════════

class TestParticipants:

    def test_create_couple(self, client):
        data = make_participant(client, "Bob+Carol", type="couple", children=2)
        assert data["type"] == "couple"
        assert data["adult_units"] == 2
        assert data["children"] == 2

    def test_create_participant_bad_type(self, client):
        resp = client.post("/api/v1/participants", json={"name": "Crew", "type": "group"})
        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "INVALID_PARTICIPANT_TYPE"
        assert resp.get_json()["error"]["field"] == "type"

    def test_add_to_event(self, client):
        event = make_event(client)
        person = make_participant(client, "Alice")

        resp = add_to_event(client, event["id"], person["id"])
        assert resp.status_code == 201
        assert resp.get_json()["data"]["id"] == person["id"]

    def test_add_twice(self, client):
        event = make_event(client)
        person = make_household(client, event["id"], "Alice")

        resp = add_to_event(client, event["id"], person["id"])
        assert resp.status_code == 409
        assert resp.get_json()["error"]["code"] == "ALREADY_IN_EVENT"

    def test_add_unknown_participant(self, client):
        event = make_event(client)
        resp = add_to_event(client, event["id"], 9999)
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "PARTICIPANT_NOT_FOUND"

    def test_add_to_unknown_event(self, client):
        person = make_participant(client, "Alice")
        resp = add_to_event(client, 9999, person["id"])
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "EVENT_NOT_FOUND"

    def test_same_participant_in_two_events(self, client):
        person = make_participant(client, "Alice")
        for name in ("Carnival 2025", "Carnival 2026"):
            event = make_event(client, name)
            assert add_to_event(client, event["id"], person["id"]).status_code == 201

    def test_roster_sorted_by_name(self, client):
        event = make_event(client)
        for name in ("zoe", "Élodie", "Adam"):
            make_household(client, event["id"], name)

        resp = client.get(f"/api/v1/events/{event['id']}/participants")
        assert resp.status_code == 200
        assert [p["name"] for p in resp.get_json()["data"]] == ["Adam", "Élodie", "zoe"]


# ═══════════════════════════════════════════════════════════════════════════
# Status
# ═══════════════════════════════════════════════════════════════════════════

class TestEventStatus:

    def _set_status(self, client, event_id: int, status: str):
        return client.patch(f"/api/v1/events/{event_id}/status", json={"status": status})

    def test_activate(self, client):
        event = make_event(client)
        resp = self._set_status(client, event["id"], "active")
        assert resp.status_code == 200
        assert resp.get_json()["data"]["status"] == "active"

    def test_activating_completes_the_active_event(self, client):
        first = make_event(client, "Carnival 2025")
        second = make_event(client, "Carnival 2026")
        planned = make_event(client, "Carnival 2027")
        self._set_status(client, first["id"], "active")

        self._set_status(client, second["id"], "active")

        statuses = {
            e["id"]: e["status"] for e in client.get("/api/v1/events").get_json()["data"]
        }
        assert statuses == {
            first["id"]: "completed",
            second["id"]: "active",
            planned["id"]: "planning",
        }

    def test_complete(self, client):
        event = make_event(client, status="active")
        resp = self._set_status(client, event["id"], "completed")
        assert resp.get_json()["data"]["status"] == "completed"

    def test_unknown_status(self, client):
        event = make_event(client)
        resp = self._set_status(client, event["id"], "cancelled")
        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "INVALID_EVENT_STATUS"

    def test_missing_status(self, client):
        event = make_event(client)
        resp = client.patch(f"/api/v1/events/{event['id']}/status", json={})
        assert resp.status_code == 400
        assert resp.get_json()["error"]["code"] == "MISSING_FIELD"

    def test_unknown_event(self, client):
        resp = self._set_status(client, 9999, "active")
        assert resp.status_code == 404


# ═══════════════════════════════════════════════════════════════════════════
# Roster removal
# ═══════════════════════════════════════════════════════════════════════════

class TestRemoveFromRoster:

    def _remove(self, client, event_id: int, participant_id: int):
        return client.delete(f"/api/v1/events/{event_id}/participants/{participant_id}")

    def test_remove_without_records(self, client):
        event = make_event(client)
        alice = make_household(client, event["id"], "Alice")
        bob = make_household(client, event["id"], "Bob")

        resp = self._remove(client, event["id"], bob["id"])
        assert resp.status_code == 200
        assert resp.get_json()["data"] == {
            "deleted": True,
            "event_id": event["id"],
            "participant_id": bob["id"],
        }
        roster = client.get(f"/api/v1/events/{event['id']}/participants").get_json()["data"]
        assert [p["id"] for p in roster] == [alice["id"]]

    def test_removed_participant_can_rejoin(self, client):
        event = make_event(client)
        bob = make_household(client, event["id"], "Bob")
        self._remove(client, event["id"], bob["id"])
        assert add_to_event(client, event["id"], bob["id"]).status_code == 201

    def test_removal_leaves_other_events_alone(self, client):
        first = make_event(client, "Carnival 2025")
        second = make_event(client, "Carnival 2026")
        bob = make_household(client, first["id"], "Bob")
        add_to_event(client, second["id"], bob["id"])

        self._remove(client, first["id"], bob["id"])

        roster = client.get(f"/api/v1/events/{second['id']}/participants").get_json()["data"]
        assert [p["id"] for p in roster] == [bob["id"]]

    def test_participant_with_share_stays(self, client):
        event = make_event(client)
        alice = make_household(client, event["id"], "Alice")
        bob = make_household(client, event["id"], "Bob")
        assert make_expense(client, event["id"], alice["id"], "20.00").status_code == 201

        resp = self._remove(client, event["id"], bob["id"])
        assert resp.status_code == 409
        assert resp.get_json()["error"]["code"] == "PARTICIPANT_HAS_RECORDS"

    def test_payer_stays(self, client):
        event = make_event(client)
        alice = make_household(client, event["id"], "Alice")
        bob = make_household(client, event["id"], "Bob")
        make_expense(client, event["id"], alice["id"], "20.00", participant_ids=[bob["id"]])

        resp = self._remove(client, event["id"], alice["id"])
        assert resp.status_code == 409

    def test_participant_in_payment_stays(self, client):
        event = make_event(client)
        alice = make_household(client, event["id"], "Alice")
        bob = make_household(client, event["id"], "Bob")
        assert make_payment(client, event["id"], bob["id"], alice["id"], "5.00").status_code == 201

        resp = self._remove(client, event["id"], alice["id"])
        assert resp.status_code == 409

    def test_not_on_roster(self, client):
        event = make_event(client)
        outsider = make_participant(client, "Eve")

        resp = self._remove(client, event["id"], outsider["id"])
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "PARTICIPANT_NOT_IN_EVENT"

    def test_unknown_event(self, client):
        resp = self._remove(client, 9999, 1)
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "EVENT_NOT_FOUND"
