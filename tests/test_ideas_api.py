from __future__ import annotations

from fastapi.testclient import TestClient

from app.models.idea import IdeaStatus
from tests.conftest import IDEA_PAYLOAD, login, make_idea, make_user


def _submit(client: TestClient, headers: dict, **overrides) -> dict:
    r = client.post("/api/ideas", json={**IDEA_PAYLOAD, **overrides}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def _owner_id(client: TestClient, headers: dict) -> int:
    return client.get("/api/auth/profile", headers=headers).json()["id"]


def test_submit_requires_login(client: TestClient):
    r = client.post("/api/ideas", json=IDEA_PAYLOAD)
    assert r.status_code == 401


def test_submit_and_list(client: TestClient, user_headers):
    idea = _submit(client, user_headers)
    assert idea["status"] == "PENDING"
    assert idea["progress"] == 0
    assert idea["tech_stack"] == ["Python", "FastAPI"]
    assert idea["user"]["email"] == "owner@example.com"

    second = _submit(client, user_headers, title="Second")
    r = client.get("/api/ideas", headers=user_headers)
    assert r.status_code == 200
    assert [i["id"] for i in r.json()] == [second["id"], idea["id"]]


def test_submit_missing_fields(client: TestClient, user_headers):
    r = client.post("/api/ideas", json={"title": "Only a title"}, headers=user_headers)
    assert r.status_code == 400
    assert r.json()["detail"].startswith("Missing required fields")


def test_content_update_without_title_is_rejected(client: TestClient, user_headers):
    idea = _submit(client, user_headers)
    body = {**IDEA_PAYLOAD, "kind": "content"}
    body.pop("title")
    r = client.patch(f"/api/ideas/{idea['id']}", json=body, headers=user_headers)
    assert r.status_code == 400
    assert "title" in r.json()["detail"]


def test_content_update(client: TestClient, user_headers):
    idea = _submit(client, user_headers)
    body = {**IDEA_PAYLOAD, "kind": "content", "title": "Smarter Parking", "demo_url": "https://demo.example"}
    r = client.patch(f"/api/ideas/{idea['id']}", json=body, headers=user_headers)
    assert r.status_code == 200, r.text
    assert r.json()["title"] == "Smarter Parking"
    assert r.json()["demo_url"] == "https://demo.example"


def test_update_requires_kind(client: TestClient, user_headers):
    idea = _submit(client, user_headers)
    r = client.patch(f"/api/ideas/{idea['id']}", json={"progress": 10}, headers=user_headers)
    assert r.status_code == 422


def test_project_update_completes_with_two_links(client: TestClient, user_headers):
    owner_id = _owner_id(client, user_headers)
    idea_id = make_idea(owner_id, status=IdeaStatus.IN_PROGRESS)
    r = client.patch(
        f"/api/ideas/{idea_id}",
        json={
            "kind": "project",
            "demo_url": "https://x.com",
            "documentation_url": "",
            "video_url": "https://y.com",
            "status": "COMPLETED",
        },
        headers=user_headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "COMPLETED"


def test_project_update_with_only_github_is_rejected(client: TestClient, user_headers):
    owner_id = _owner_id(client, user_headers)
    idea_id = make_idea(owner_id, status=IdeaStatus.IN_PROGRESS)
    r = client.patch(
        f"/api/ideas/{idea_id}",
        json={"kind": "project", "github_url": "https://github.com/a/b", "status": "COMPLETED"},
        headers=user_headers,
    )
    assert r.status_code == 400
    assert "at least two" in r.json()["detail"]

    # nothing was written
    r = client.get(f"/api/ideas/{idea_id}", headers=user_headers)
    assert r.json()["github_url"] is None
    assert r.json()["status"] == "IN_PROGRESS"


def test_project_update_cannot_reopen_completed_idea(client: TestClient, user_headers):
    owner_id = _owner_id(client, user_headers)
    idea_id = make_idea(owner_id, status=IdeaStatus.COMPLETED)
    r = client.patch(
        f"/api/ideas/{idea_id}",
        json={"kind": "project", "status": "IN_PROGRESS"},
        headers=user_headers,
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Cannot change status of a completed idea"


def test_progress_endpoint(client: TestClient, user_headers):
    idea = _submit(client, user_headers)
    url = f"/api/ideas/{idea['id']}/progress"

    assert client.patch(url, json={"progress": 150}, headers=user_headers).status_code == 400
    assert client.patch(url, json={"progress": "abc"}, headers=user_headers).status_code == 400

    r = client.patch(url, json={"progress": 100}, headers=user_headers)
    assert r.status_code == 200
    assert r.json()["progress"] == 100
    assert r.json()["status"] == "PENDING"


def test_other_users_idea_is_hidden(client: TestClient, user_headers):
    idea = _submit(client, user_headers)
    make_user("intruder@example.com")
    other = login(client, "intruder@example.com")

    r = client.get(f"/api/ideas/{idea['id']}", headers=other)
    assert r.status_code == 404
    assert r.json()["detail"] == "Idea not found or access denied"
    assert client.delete(f"/api/ideas/{idea['id']}", headers=other).status_code == 404
    assert client.get("/api/ideas", headers=other).json() == []


def test_delete_idea(client: TestClient, user_headers):
    idea = _submit(client, user_headers)
    r = client.delete(f"/api/ideas/{idea['id']}", headers=user_headers)
    assert r.status_code == 200
    assert r.json()["message"] == "Idea deleted successfully"
    assert client.get(f"/api/ideas/{idea['id']}", headers=user_headers).status_code == 404


def test_huge_progress_is_a_validation_error(client: TestClient, user_headers):
    idea = _submit(client, user_headers)
    r = client.patch(
        f"/api/ideas/{idea['id']}",
        content='{"kind": "project", "progress": 1' + "1" * 400 + "}",
        headers={**user_headers, "Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "Progress must be between 0 and 100"


def test_camel_case_payloads_are_accepted(client: TestClient, user_headers):
    r = client.post(
        "/api/ideas",
        json={
            "title": "Smart Parking",
            "description": "Find a free spot faster.",
            "category": "Mobility",
            "problemStatement": "Drivers circle for minutes.",
            "solution": "Sensors and a live map.",
            "techStack": ["Go"],
        },
        headers=user_headers,
    )
    assert r.status_code == 201, r.text
    assert r.json()["problem_statement"] == "Drivers circle for minutes."
    assert r.json()["tech_stack"] == ["Go"]

    idea_id = make_idea(_owner_id(client, user_headers), status=IdeaStatus.IN_PROGRESS)
    r = client.patch(
        f"/api/ideas/{idea_id}",
        json={
            "kind": "project",
            "demoUrl": "https://x.com",
            "documentationUrl": "",
            "videoUrl": "https://y.com",
            "status": "COMPLETED",
        },
        headers=user_headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "COMPLETED"
    assert r.json()["video_url"] == "https://y.com"
