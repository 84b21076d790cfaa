"""
Adversarial tests for concurrent registration.

Verifies that concurrent registrations cannot corrupt the registry:
- Every successful registration receives a distinct public id
- Every stored agent has exactly one notification job
- A write that loses a race never leaves a partial record

Rationale:
- Ids are derived from the clock plus a random suffix, so bursts within the
  same millisecond are the realistic collision case
- The record and its job are published as one unit, so a reader never sees
  one without the other
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

import pytest

from src.domain.exceptions import IdentifierConflict
from src.domain.models import AgentInput
from src.domain.registration import RegistrationService

# Apply adversarial marker to all tests in this module
pytestmark = pytest.mark.adversarial


class TestConcurrentRegistration:
    """Concurrent registration bursts against each storage backend."""

    def test_burst_yields_distinct_ids(self, backend: RegistrationService) -> None:
        """
        Many clients register at once.

        Expected: every call succeeds with its own id and its own job.
        """
        num_clients = 20

        def register(i: int) -> str:
            record = backend.register(
                f"client{i}@example.com", AgentInput(name=f"Bot {i}", owner="Acme")
            )
            return record.public_id

        with ThreadPoolExecutor(max_workers=num_clients) as executor:
            ids = list(executor.map(register, range(num_clients)))

        assert len(set(ids)) == num_clients
        repository = backend.repository
        assert repository.count_agents() == num_clients
        assert repository.count_notifications() == num_clients
        for public_id in ids:
            assert len(repository.list_notifications(public_id)) == 1

    def test_same_record_written_concurrently(self, backend: RegistrationService) -> None:
        """
        The same record is submitted by several writers at once.

        Expected: exactly one write wins, the others see IdentifierConflict,
        and only the winner's job exists.
        """
        record = backend.register("owner@example.com", AgentInput(name="Bot", owner="Acme"))
        repository = backend.repository
        job = repository.list_notifications(record.public_id)[0]
        contested = replace(record, public_id="TEMP-1-RACEAA")
        contested_job = replace(job, data={"agentId": "TEMP-1-RACEAA"})

        outcomes: list[str] = []
        outcomes_lock = threading.Lock()
        num_writers = 5

        def write() -> None:
            try:
                repository.create_agent(contested, contested_job)
                outcome = "created"
            except IdentifierConflict:
                outcome = "conflict"
            with outcomes_lock:
                outcomes.append(outcome)

        with ThreadPoolExecutor(max_workers=num_writers) as executor:
            futures = [executor.submit(write) for _ in range(num_writers)]
            for f in futures:
                f.result()

        assert outcomes.count("created") == 1, f"Race produced {outcomes}"
        assert outcomes.count("conflict") == num_writers - 1
        assert repository.count_agents() == 2
        assert len(repository.list_notifications("TEMP-1-RACEAA")) == 1
