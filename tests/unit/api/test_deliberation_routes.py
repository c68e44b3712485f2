"""Unit tests for the deliberation API routes."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.bootstrap.deliberation import (
    reset_deliberation_dependencies,
    set_deliberation_config,
    set_time_authority,
)
from src.config.deliberation_config import DeliberationConfig
from src.domain.models.deliberation_item import DeliberationStatus
from tests.helpers.fake_time_authority import FakeTimeAuthority

BASE = "/v1/deliberations"
REQUESTER = {"X-Actor-Id": "user-requester", "X-Actor-Name": "Rita Requester"}


def member(n: int) -> dict[str, str]:
    return {"X-Actor-Id": f"member-{n}", "X-Actor-Name": f"Member {n}"}


def make_client(
    fake_time_authority: FakeTimeAuthority, config: DeliberationConfig
) -> Iterator[TestClient]:
    reset_deliberation_dependencies()
    set_deliberation_config(config)
    set_time_authority(fake_time_authority)
    yield TestClient(create_app())
    reset_deliberation_dependencies()


@pytest.fixture
def client(fake_time_authority: FakeTimeAuthority) -> Iterator[TestClient]:
    yield from make_client(fake_time_authority, DeliberationConfig())


@pytest.fixture
def strict_client(fake_time_authority: FakeTimeAuthority) -> Iterator[TestClient]:
    yield from make_client(fake_time_authority, DeliberationConfig(strict_transitions=True))


def submit(client: TestClient, **overrides) -> dict:
    body = {
        "title": "Hire a staff engineer",
        "description": "Open a senior platform position",
        "owner_committee_id": "hr",
    }
    body.update(overrides)
    response = client.post(BASE, json=body, headers=REQUESTER)
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client: TestClient) -> None:
        submit(client)

        body = client.get("/v1/ready").json()

        assert body == {"status": "ready", "strict_transitions": False, "stored_items": 1}

    def test_correlation_id_echoed(self, client: TestClient) -> None:
        response = client.get("/v1/health", headers={"X-Correlation-ID": "req-42"})

        assert response.headers["X-Correlation-ID"] == "req-42"


class TestSubmit:
    def test_created(self, client: TestClient) -> None:
        body = submit(client)

        assert body["deliberation_status"] == "submitted"
        assert body["created_by"] == "user-requester"
        assert body["current_stage_id"] == "stage-1-hr"
        assert body["quorum_required"] == 3
        assert body["created_at"].endswith("Z")
        assert [e["action"] for e in body["audit_trail"]] == [
            "stage_transitioned",
            "status_changed",
        ]

    def test_without_actor_header_uses_system(self, client: TestClient) -> None:
        response = client.post(BASE, json={"title": "x", "owner_committee_id": "hr"})

        assert response.json()["created_by"] == "system"

    def test_owner_or_template_required(self, client: TestClient) -> None:
        response = client.post(BASE, json={"title": "Orphan"})

        assert response.status_code == 422

    def test_unknown_committee(self, client: TestClient) -> None:
        response = client.post(BASE, json={"title": "x", "owner_committee_id": "marketing"})

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["title"] == "Validation Failed"
        assert detail["status"] == 422
        assert "marketing" in detail["detail"]

    def test_draft_then_submit(self, client: TestClient) -> None:
        draft = submit(client, submit=False)
        assert draft["deliberation_status"] == "draft"

        response = client.post(f"{BASE}/{draft['item_id']}/submit", headers=REQUESTER)

        assert response.json()["deliberation_status"] == "submitted"


class TestErrors:
    def test_unknown_item_is_404(self, client: TestClient) -> None:
        response = client.get(f"{BASE}/missing")

        assert response.status_code == 404
        detail = response.json()["detail"]
        assert detail["type"] == "urn:deliberation:error:not-found"
        assert detail["instance"].endswith(f"{BASE}/missing")

    def test_invalid_transition_lenient_returns_unchanged(self, client: TestClient) -> None:
        item = submit(client)

        response = client.post(f"{BASE}/{item['item_id']}/voting/close", headers=REQUESTER)

        assert response.status_code == 200
        assert response.json() == item

    def test_invalid_transition_strict_is_409(self, strict_client: TestClient) -> None:
        item = submit(strict_client)

        response = strict_client.post(f"{BASE}/{item['item_id']}/voting/close")

        assert response.status_code == 409
        assert response.json()["detail"]["title"] == "Invalid Transition"

    def test_task_update_outside_execution_is_noop(self, client: TestClient) -> None:
        item = submit(client)

        response = client.patch(
            f"{BASE}/{item['item_id']}/execution-tasks/nope", json={"status": "completed"}
        )

        assert response.status_code == 200

    def test_half_link_rejected(self, client: TestClient) -> None:
        item = submit(client)

        response = client.post(
            f"{BASE}/{item['item_id']}/execution-tasks",
            json={"title": "t", "owner_name": "o", "linked_entity_id": "PRJ-1"},
        )

        assert response.status_code == 422


class TestWorkflow:
    def test_full_lifecycle(self, client: TestClient) -> None:
        item_id = submit(client)["item_id"]
        url = f"{BASE}/{item_id}"

        assert client.post(f"{url}/review", headers=REQUESTER).json()[
            "deliberation_status"
        ] == "in_review"
        assert client.post(f"{url}/voting/start", headers=REQUESTER).json()[
            "deliberation_status"
        ] == "in_voting"
        for n, vote in enumerate(["yes", "yes", "yes", "no"], start=1):
            response = client.post(
                f"{url}/votes",
                json={"vote": vote, "justification": f"reason {n}"},
                headers=member(n),
            )
            assert response.status_code == 200
        assert len(response.json()["votes"]) == 4

        closed = client.post(f"{url}/voting/close", headers=REQUESTER).json()
        assert closed["deliberation_status"] == "awaiting_minutes"
        assert closed["vote_result"] == "approved"

        client.post(
            f"{url}/evidence",
            json={"name": "Budget sheet", "url": "https://files/budget.xlsx"},
            headers=REQUESTER,
        )
        minutes = client.post(f"{url}/minutes", headers=REQUESTER).json()
        assert minutes["minutes"]["status"] == "draft"
        assert minutes["minutes"]["evidence_list"] == ["Budget sheet"]

        published = client.post(f"{url}/minutes/publish", headers=REQUESTER).json()
        assert published["deliberation_status"] == "in_execution"
        assert published["minutes"]["published_at"] is not None

        with_task = client.post(
            f"{url}/execution-tasks",
            json={
                "title": "Open requisition",
                "owner_name": "Talent",
                "linked_entity_type": "project",
                "linked_entity_id": "PRJ-7",
            },
            headers=REQUESTER,
        ).json()
        task = with_task["execution_items"][0]
        assert task["status"] == "pending"
        assert task["linked_entity_type"] == "project"

        updated = client.patch(
            f"{url}/execution-tasks/{task['task_id']}",
            json={"status": "completed"},
            headers=REQUESTER,
        ).json()
        assert updated["execution_items"][0]["status"] == "completed"

        final = client.post(f"{url}/close", headers=REQUESTER).json()
        assert final["deliberation_status"] == "closed"

    def test_unknown_task_in_execution_is_404(self, client: TestClient) -> None:
        item_id = submit(client)["item_id"]
        url = f"{BASE}/{item_id}"
        client.post(f"{url}/voting/start")
        for n in range(1, 4):
            client.post(f"{url}/votes", json={"vote": "yes"}, headers=member(n))
        client.post(f"{url}/voting/close")
        client.post(f"{url}/minutes")
        client.post(f"{url}/minutes/publish")

        response = client.patch(f"{url}/execution-tasks/nope", json={"status": "completed"})

        assert response.status_code == 404

    def test_return_and_withdraw(self, client: TestClient) -> None:
        item_id = submit(client)["item_id"]

        returned = client.post(
            f"{BASE}/{item_id}/return", json={"reason": "Add budget"}, headers=REQUESTER
        ).json()
        withdrawn = client.post(f"{BASE}/{item_id}/withdraw", headers=REQUESTER).json()

        assert returned["deliberation_status"] == "returned_for_revision"
        assert returned["audit_trail"][0]["description"] == "Returned for revision: Add budget"
        assert withdrawn["deliberation_status"] == "withdrawn"


class TestQueries:
    def test_list_and_filters(self, client: TestClient) -> None:
        submit(client, title="Hiring plan")
        submit(client, title="CAPEX press", owner_committee_id="finance")

        everything = client.get(BASE).json()
        finance = client.get(BASE, params={"committee_id": "finance"}).json()
        searched = client.get(BASE, params={"search": "hiring"}).json()
        drafts = client.get(BASE, params={"status": "draft"}).json()

        assert everything["total"] == 2
        assert [i["title"] for i in finance["items"]] == ["CAPEX press"]
        assert [i["title"] for i in searched["items"]] == ["Hiring plan"]
        assert drafts == {"items": [], "total": 0}

    def test_kpi_filter(self, client: TestClient) -> None:
        submit(client)

        response = client.get(BASE, params={"kpi": "open"})

        assert response.json()["total"] == 1

    def test_queue_counts(self, client: TestClient) -> None:
        submit(client)

        counts = client.get(f"{BASE}/queue-counts").json()["counts"]

        assert set(counts) == {s.value for s in DeliberationStatus}
        assert counts["submitted"] == 1

    def test_kpis(self, client: TestClient) -> None:
        submit(client)

        kpis = client.get(f"{BASE}/kpis").json()

        assert kpis == {
            "open_count": 1,
            "in_voting_count": 0,
            "overdue_count": 0,
            "resolved_recently_count": 0,
            "average_resolution_days": None,
        }

    def test_next_session(self, client: TestClient) -> None:
        for n in range(4):
            submit(client, title=f"Item {n}")

        body = client.get(f"{BASE}/next-session").json()

        assert body["total"] == 3
