"""
Adversarial tests for information disclosure.

Verifies that an unauthenticated caller cannot harvest private data:
- Public views never carry the owner email, internal id or audit metadata
- A wrong email reveals nothing about the real one
- Server faults return an opaque request id instead of internal detail
"""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from src.api.main import app
from src.domain.exceptions import PersistenceFailure

pytestmark = pytest.mark.adversarial

OWNER_EMAIL = "secret.owner@example.com"


@pytest.fixture
def agent_id(client: TestClient) -> str:
    response = client.post(
        "/v1/register",
        json={"email": OWNER_EMAIL, "agent": {"name": "Bot", "owner": "Acme"}},
        headers={"user-agent": "private-agent/9.9"},
    )
    return response.json()["agentId"]


class TestPublicViews:
    """Public endpoints expose only the public projection."""

    @pytest.mark.parametrize("path", ["/v1/verify/{agent_id}", "/v1/agents/recent"])
    def test_no_private_fields(self, client: TestClient, agent_id: str, path: str) -> None:
        response = client.get(path.format(agent_id=agent_id))

        assert response.status_code == 200
        assert OWNER_EMAIL not in response.text
        assert "private-agent" not in response.text
        assert "internalId" not in response.text

    def test_registration_response_omits_internal_id(self, client: TestClient) -> None:
        response = client.post(
            "/v1/register",
            json={"email": OWNER_EMAIL, "agent": {"name": "Bot", "owner": "Acme"}},
        )

        assert "internalId" not in response.json()


class TestOwnerLookupGuessing:
    """Guessing emails against the owner lookup."""

    @pytest.mark.parametrize(
        "guess", ["attacker@example.com", "secret.owner@example.org", "secret.owner", " "]
    )
    def test_wrong_guess_reveals_nothing(
        self, client: TestClient, agent_id: str, guess: str
    ) -> None:
        response = client.get(f"/v1/agent/{agent_id}", params={"email": guess})

        assert response.status_code in (400, 403)
        assert OWNER_EMAIL not in response.text
        assert "Bot" not in response.text

    def test_sql_like_id_is_just_not_found(self, client: TestClient) -> None:
        response = client.get("/v1/verify/TEMP-1-AAAAAA' OR '1'='1")

        assert response.status_code == 404


class TestServerFaults:
    """Store failures do not leak internals."""

    def test_store_failure_returns_opaque_request_id(self) -> None:
        failing = Mock()
        failing.get_agent.side_effect = PersistenceFailure(
            "connection to server at 10.1.2.3 failed: password authentication failed"
        )
        app.state.repository = failing
        app.state.attempt_log = Mock()

        response = TestClient(app).get("/v1/verify/TEMP-1-AAAAAA")

        assert response.status_code == 500
        body = response.json()
        assert body["requestId"]
        assert "10.1.2.3" not in response.text
        assert "password" not in response.text
