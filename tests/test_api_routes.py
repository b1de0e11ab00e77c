import pytest
from fastapi.testclient import TestClient

from main import app
from planhaus.rate_limit import RateLimitStore

OWNER = {"X-User-Id": "owner-1"}
STRANGER = {"X-User-Id": "stranger-1"}


class FakeGenerator:
    def __init__(self, answer="Start with the venue."):
        self.answer = answer

    async def generate(self, prompt):
        return self.answer


@pytest.fixture
def client(database):
    app.state.text_generator = FakeGenerator()
    app.state.rate_limit_store = RateLimitStore(max_requests=2, window_seconds=300)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def project_id(client):
    response = client.post("/projects", json={"name": "Our Wedding", "city": "Austin"}, headers=OWNER)
    assert response.status_code == 201
    return response.json()["project_id"]


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["checks"]["database"]["status"] == "ok"
    assert body["checks"]["ai"]["status"] == "ok"
    assert response.headers["X-Request-Id"]


class TestProjects:

    def test_requires_user_header(self, client):
        assert client.get("/projects").status_code == 401

    def test_create_list_and_get(self, client, project_id):
        projects = client.get("/projects", headers=OWNER).json()
        assert [(p["project_id"], p["role"]) for p in projects] == [(project_id, "owner")]

        project = client.get(f"/projects/{project_id}", headers=OWNER).json()
        assert project["name"] == "Our Wedding"
        assert project["city"] == "Austin"

    def test_non_members_are_refused(self, client, project_id):
        assert client.get(f"/projects/{project_id}", headers=STRANGER).status_code == 403
        assert client.get(f"/projects/{project_id}/tasks", headers=STRANGER).status_code == 403
        assert client.get("/projects/nope", headers=OWNER).status_code == 404

    def test_patch_and_members(self, client, project_id):
        response = client.patch(f"/projects/{project_id}", json={"guest_count": 80}, headers=OWNER)
        assert response.json()["guest_count"] == 80

        response = client.post(f"/projects/{project_id}/members",
                               json={"user_id": "stranger-1", "role": "view"}, headers=OWNER)
        assert response.status_code == 201
        assert client.get(f"/projects/{project_id}", headers=STRANGER).json()["role"] == "view"

        response = client.post(f"/projects/{project_id}/members",
                               json={"user_id": "someone"}, headers=STRANGER)
        assert response.status_code == 403

    def test_task_crud_and_activity_feed(self, client, project_id):
        base = f"/projects/{project_id}/tasks"
        task = client.post(base, json={"title": "Book venue", "due_date": "2025-01-10"}, headers=OWNER).json()
        assert task["status"] == "not_started"

        updated = client.patch(f"{base}/{task['task_id']}", json={"status": "completed"}, headers=OWNER).json()
        assert updated["status"] == "completed"
        assert updated["completed_at"]

        duplicate = client.post(base, json={"title": "Book venue"}, headers=OWNER)
        assert duplicate.status_code == 409

        bulk = client.post(f"{base}/bulk", json={"tasks": [{"title": "A"}, {"title": "B"}]}, headers=OWNER)
        assert len(bulk.json()) == 2
        assert len(client.get(base, headers=OWNER).json()) == 3

        assert client.delete(f"{base}/{task['task_id']}", headers=OWNER).status_code == 204
        assert client.delete(f"{base}/{task['task_id']}", headers=OWNER).status_code == 404

        actions = {a["action"] for a in client.get(f"/projects/{project_id}/activities", headers=OWNER).json()}
        assert {"created", "updated", "deleted"} <= actions

    def test_guest_validation(self, client, project_id):
        base = f"/projects/{project_id}/guests"
        assert client.post(base, json={"name": "Ada", "email": "nope"}, headers=OWNER).status_code == 422
        assert client.post(base, json={"name": "Ada", "phone": "123"}, headers=OWNER).status_code == 422
        response = client.post(base, json={"name": "Ada", "phone": "+1 415 555 0123"}, headers=OWNER)
        assert response.status_code == 201

    def test_preferences(self, client, project_id):
        url = f"/projects/{project_id}/preferences/site"
        assert client.get(url, headers=OWNER).json() == {"kind": "site", "data": None}
        client.put(url, json={"tone": "formal"}, headers=OWNER)
        assert client.get(url, headers=OWNER).json()["data"] == {"tone": "formal"}
        assert client.get(f"/projects/{project_id}/preferences/other", headers=OWNER).status_code == 404


class TestIntakeFlow:

    def test_save_submit_and_prefill(self, client, complete_intake):
        saved = client.post("/intake/save", json={"step": 1, "data": complete_intake["step1"]}, headers=OWNER)
        assert saved.status_code == 200
        assert saved.json()["status"] == "draft"
        assert saved.json()["completionPercentage"] == 14

        complete_intake["step7"]["consent"] = False
        rejected = client.post("/intake/submit", json={"data": complete_intake}, headers=OWNER)
        assert rejected.status_code == 422
        assert [e["code"] for e in rejected.json()["detail"]["errors"]] == ["consent_required"]

        complete_intake["step7"]["consent"] = True
        submitted = client.post("/intake/submit", json={"data": complete_intake}, headers=OWNER).json()
        assert submitted["status"] == "submitted"
        assert submitted["isComplete"] is True
        project_id = submitted["projectId"]

        project = client.get(f"/projects/{project_id}", headers=OWNER).json()
        assert project["name"] == "Alex & Sam's Wedding"

        fetched = client.get("/intake", params={"projectId": project_id}, headers=OWNER).json()
        assert fetched["data"]["step2"]["location"]["city"] == "Austin"

        bundle = client.get(f"/projects/{project_id}/prefill", headers=OWNER).json()
        assert len(bundle["timelineTasks"]) == 11

        for _ in range(2):
            summary = client.post(f"/projects/{project_id}/prefill", headers=OWNER).json()
            assert summary["tasks"] == 11
        assert len(client.get(f"/projects/{project_id}/tasks", headers=OWNER).json()) == 11

    def test_draft_constraints_are_reported(self, client):
        response = client.post("/intake/save",
                               json={"data": {"step2": {"guests": {"estimatedGuestCount": 0}}}}, headers=OWNER)
        assert response.status_code == 422
        assert response.json()["detail"]["errors"][0]["path"] == "step2.guests.estimatedGuestCount"

    def test_missing_intake(self, client, project_id):
        response = client.get("/intake", params={"projectId": project_id}, headers=OWNER)
        assert response.status_code == 404
        assert client.get("/intake/completion", headers=OWNER).json() == {"percentage": 0, "isComplete": False}

    def test_validate_step_endpoint(self, client, complete_intake):
        step3 = complete_intake["step3"]
        step3["categories"][0]["percent"] = 10
        result = client.post("/intake/validate/3", json=step3).json()
        assert result["success"] is False
        assert result["errors"][0]["path"] == "categories"
        assert client.post("/intake/validate/step7", json={"consent": True}).json()["success"] is True
        assert "classic" in client.get("/intake/presets").json()


class TestSeatingRoutes:

    def test_capacity_conflict(self, client, project_id):
        guests = [client.post(f"/projects/{project_id}/guests", json={"name": name}, headers=OWNER).json()
                  for name in ("Ada", "Bo")]
        base = f"/projects/{project_id}/seating"
        table = client.post(f"{base}/tables", json={"name": "Tiny", "max_seats": 1}, headers=OWNER).json()

        first = client.post(f"{base}/assignments",
                            json={"guest_id": guests[0]["guest_id"], "table_id": table["table_id"]}, headers=OWNER)
        assert first.status_code == 201
        second = client.post(f"{base}/assignments",
                             json={"guest_id": guests[1]["guest_id"], "table_id": table["table_id"]}, headers=OWNER)
        assert second.status_code == 409

        chart = client.get(base, headers=OWNER).json()
        assert chart["tables"][0]["seats_taken"] == 1
        assert [g["name"] for g in chart["unassigned_guests"]] == ["Bo"]

        assert client.delete(f"{base}/guests/{guests[0]['guest_id']}", headers=OWNER).status_code == 204
        assert client.delete(f"{base}/guests/{guests[0]['guest_id']}", headers=OWNER).status_code == 404


class TestAIRoutes:

    def test_chat_is_rate_limited(self, client):
        first = client.post("/ai/chat", json={"message": "Where do we start?"}, headers=OWNER)
        assert first.status_code == 200
        assert first.json()["response"] == "Start with the venue."
        assert first.headers["X-RateLimit-Remaining"] == "1"

        client.post("/ai/chat", json={"message": "Again"}, headers=OWNER)
        blocked = client.post("/ai/chat", json={"message": "Once more"}, headers=OWNER)
        assert blocked.status_code == 429
        assert blocked.json()["retryAfter"] > 0
        assert int(blocked.headers["Retry-After"]) == blocked.json()["retryAfter"]
        assert blocked.headers["X-RateLimit-Remaining"] == "0"

    def test_refused_project_chat_does_not_use_the_window(self, client, project_id):
        for _ in range(3):
            refused = client.post("/ai/chat", json={"message": "Hi", "projectId": project_id}, headers=STRANGER)
            assert refused.status_code == 403

        allowed = client.post("/ai/chat", json={"message": "Hi"}, headers=STRANGER)
        assert allowed.status_code == 200
        assert allowed.headers["X-RateLimit-Remaining"] == "1"

    def test_unconfigured_assistant(self, client):
        app.state.text_generator = None
        response = client.post("/ai/chat", json={"message": "Hello"})
        assert response.status_code == 503

    def test_timeline_parses_json(self, client, project_id):
        app.state.text_generator = FakeGenerator('[{"title": "Book venue"}]')
        response = client.post("/ai/timeline", json={"projectId": project_id}, headers=OWNER)
        assert response.json() == {"timeline": [{"title": "Book venue"}]}
        assert client.post("/ai/budget", json={"projectId": project_id}, headers=STRANGER).status_code == 403


class TestExportRoutes:

    def test_csv_and_stats(self, client, project_id):
        client.post(f"/projects/{project_id}/guests", json={"name": "Ada", "rsvp_status": "confirmed"}, headers=OWNER)

        stats = client.get(f"/projects/{project_id}/export/stats", headers=OWNER).json()
        assert (stats["total_guests"], stats["confirmed_guests"]) == (1, 1)

        response = client.get(f"/projects/{project_id}/export/guests.csv", headers=OWNER)
        assert response.headers["content-type"].startswith("text/csv")
        assert response.text.splitlines()[1].startswith("Ada,")

        assert client.get(f"/projects/{project_id}/export/photos.csv", headers=OWNER).status_code == 404
        summary = client.get(f"/projects/{project_id}/export/summary.txt", headers=OWNER)
        assert "Guests: 1/1 confirmed (100%)" in summary.text
