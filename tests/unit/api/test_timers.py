"""Tests for the timer endpoints and their idempotent replay."""

from datetime import timedelta

import pytest

TOKEN_HEADER = {"X-Idempotency-Key": "retry-1"}


async def _running_since(api, clock, member: str, ago: timedelta):
    start = clock() - ago
    return await api.time_entries.create(member, start=start, entry_date=start.date().isoformat())


class TestStartTimer:
    """Tests for POST /v1/time-entries/start."""

    def test_start(self, api) -> None:
        response = api.client.post("/v1/time-entries/start", json={"member": "Ana", "description": "Standup"})

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["member"] == "Ana"
        assert data["current"]["description"] == "Standup"
        assert data["current"]["stop"] is None
        assert "cachedAt" in data

    def test_retry_with_token_replays_without_side_effect(self, api) -> None:
        """Two requests with one token start exactly one timer."""
        first = api.client.post("/v1/time-entries/start", json={"member": "Ana"}, headers=TOKEN_HEADER)
        second = api.client.post("/v1/time-entries/start", json={"member": "ana"}, headers=TOKEN_HEADER)

        assert second.status_code == first.status_code == 200
        assert second.json() == first.json()
        assert len(api.time_entries.all_entries()) == 1

    def test_alternate_header_name(self, api) -> None:
        headers = {"Idempotency-Key": "retry-2"}

        api.client.post("/v1/time-entries/start", json={"member": "Ana"}, headers=headers)
        api.client.post("/v1/time-entries/start", json={"member": "Ana"}, headers=headers)

        assert len(api.time_entries.all_entries()) == 1

    def test_without_token_every_request_runs(self, api) -> None:
        api.client.post("/v1/time-entries/start", json={"member": "Ana"})
        api.client.post("/v1/time-entries/start", json={"member": "Ana"})

        entries = api.time_entries.all_entries()
        assert len(entries) == 2
        assert entries[0].stop is not None
        assert entries[1].stop is None

    def test_unknown_member_is_not_replayed(self, api) -> None:
        response = api.client.post("/v1/time-entries/start", json={"member": "Zed"}, headers=TOKEN_HEADER)

        assert response.status_code == 404

    def test_unexpected_failure_is_replayed_not_reexecuted(self, api, clock, monkeypatch) -> None:
        """A failure after a partial write is stored so a retry does not write again."""

        async def start_then_fail(member: str, **kwargs):
            await api.time_entries.create(member, start=clock(), entry_date=clock().date().isoformat())
            raise RuntimeError("connection reset")

        monkeypatch.setattr(api.timers, "start", start_then_fail)

        first = api.client.post("/v1/time-entries/start", json={"member": "Ana"}, headers=TOKEN_HEADER)
        second = api.client.post("/v1/time-entries/start", json={"member": "Ana"}, headers=TOKEN_HEADER)

        assert first.status_code == second.status_code == 500
        assert second.json() == first.json()
        assert first.json()["error"]["code"] == "INTERNAL_ERROR"
        assert len(api.time_entries.all_entries()) == 1

    def test_unexpected_failure_expires_with_error_ttl(self, api, clock, monkeypatch) -> None:
        async def fail(member: str, **kwargs):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(api.timers, "start", fail)
        api.client.post("/v1/time-entries/start", json={"member": "Ana"}, headers=TOKEN_HEADER)
        monkeypatch.undo()

        clock.advance(seconds=60)
        response = api.client.post("/v1/time-entries/start", json={"member": "Ana"}, headers=TOKEN_HEADER)

        assert response.status_code == 200


class TestStopTimer:
    """Tests for POST /v1/time-entries/stop."""

    def test_stop_without_running_timer(self, api) -> None:
        response = api.client.post("/v1/time-entries/stop", json={"member": "Ana"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "TIMER_RULE_VIOLATION"
        assert error["message"] == "No running timer for Ana"

    def test_error_result_is_replayed_for_error_ttl(self, api, clock) -> None:
        api.client.post("/v1/time-entries/stop", json={"member": "Ana"}, headers=TOKEN_HEADER)
        api.client.post("/v1/time-entries/start", json={"member": "Ana"})

        replayed = api.client.post("/v1/time-entries/stop", json={"member": "Ana"}, headers=TOKEN_HEADER)
        assert replayed.status_code == 400
        assert api.time_entries.all_entries()[0].stop is None

        clock.advance(seconds=60)
        fresh = api.client.post("/v1/time-entries/stop", json={"member": "Ana"}, headers=TOKEN_HEADER)
        assert fresh.status_code == 200
        assert fresh.json()["entry"]["stop"] is not None
        assert fresh.json()["current"] is None

    def test_success_result_is_replayed(self, api, clock) -> None:
        api.client.post("/v1/time-entries/start", json={"member": "Ana"})
        first = api.client.post("/v1/time-entries/stop", json={"member": "Ana"}, headers=TOKEN_HEADER)

        clock.advance(seconds=179)
        second = api.client.post("/v1/time-entries/stop", json={"member": "Ana"}, headers=TOKEN_HEADER)

        assert second.status_code == 200
        assert second.json() == first.json()


class TestCurrentEntry:
    """Tests for GET and PATCH /v1/time-entries/current."""

    @pytest.mark.asyncio
    async def test_get_auto_stops_long_running_timer(self, api, clock) -> None:
        entry = await _running_since(api, clock, "Ana", timedelta(hours=2, minutes=1))

        data = api.client.get("/v1/time-entries/current", params={"member": "Ana"}).json()

        assert data["current"] is None
        assert data["warning"] == "1 running time entry was auto-stopped at 2 hours."
        stopped = await api.time_entries.get("ana", entry.id)
        assert stopped.auto_stopped is True

    def test_get_running(self, api) -> None:
        api.client.post("/v1/time-entries/start", json={"member": "Bo", "project": "Web"})

        data = api.client.get("/v1/time-entries/current", params={"member": "bo"}).json()

        assert data["member"] == "Bo"
        assert data["current"]["project"] == "Web"
        assert data["warning"] is None

    def test_patch_backdates(self, api, clock) -> None:
        api.client.post("/v1/time-entries/start", json={"member": "Ana"})

        response = api.client.patch(
            "/v1/time-entries/current",
            json={"member": "Ana", "elapsedSeconds": 1800, "description": "Review"},
        )

        assert response.status_code == 200
        assert api.time_entries.all_entries()[0].start == clock() - timedelta(minutes=30)

    def test_patch_rejects_over_maximum(self, api) -> None:
        api.client.post("/v1/time-entries/start", json={"member": "Ana"})

        response = api.client.patch("/v1/time-entries/current", json={"member": "Ana", "elapsedSeconds": 7201})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Time entries cannot exceed 2 hours"

    def test_patch_negative_elapsed_only_edits_metadata(self, api) -> None:
        api.client.post("/v1/time-entries/start", json={"member": "Ana", "description": "old"})

        data = api.client.patch(
            "/v1/time-entries/current",
            json={"member": "Ana", "elapsedSeconds": -1, "description": "new"},
        ).json()

        assert data["current"]["description"] == "new"

    @pytest.mark.parametrize("raw", ["1e400", "Infinity", "NaN"])
    def test_patch_rejects_non_finite_elapsed(self, api, raw: str) -> None:
        api.client.post("/v1/time-entries/start", json={"member": "Ana"})

        response = api.client.patch(
            "/v1/time-entries/current",
            content='{"member": "Ana", "elapsedSeconds": ' + raw + "}",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    @pytest.mark.asyncio
    async def test_mutation_reports_guard_warning(self, api, clock) -> None:
        await _running_since(api, clock, "Ana", timedelta(hours=3))

        data = api.client.post("/v1/time-entries/start", json={"member": "Ana"}).json()

        assert data["warning"] == "1 running time entry was auto-stopped at 2 hours."


class TestManualEntries:
    """Tests for POST /v1/time-entries/update and /delete."""

    def test_update_entry(self, api) -> None:
        entry_id = api.client.post("/v1/time-entries/start", json={"member": "Ana"}).json()["current"]["id"]

        response = api.client.post(
            "/v1/time-entries/update",
            json={
                "member": "Ana",
                "entryId": entry_id,
                "startAt": "2024-05-01T08:00:00Z",
                "stopAt": "2024-05-01T09:00:00Z",
            },
        )

        assert response.status_code == 200
        assert response.json()["entry"]["stop"].startswith("2024-05-01T09:00:00")

    def test_update_rejects_inverted_range(self, api) -> None:
        entry_id = api.client.post("/v1/time-entries/start", json={"member": "Ana"}).json()["current"]["id"]

        response = api.client.post(
            "/v1/time-entries/update",
            json={
                "member": "Ana",
                "entryId": entry_id,
                "startAt": "2024-05-01T09:00:00Z",
                "stopAt": "2024-05-01T08:00:00Z",
            },
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "TIMER_RULE_VIOLATION"

    def test_update_requires_times(self, api) -> None:
        response = api.client.post("/v1/time-entries/update", json={"member": "Ana", "entryId": 1})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_delete_unknown_entry(self, api) -> None:
        response = api.client.post("/v1/time-entries/delete", json={"member": "Ana", "entryId": 99})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "ENTRY_NOT_FOUND"

    def test_delete_replay_keeps_first_success(self, api) -> None:
        entry_id = api.client.post("/v1/time-entries/start", json={"member": "Ana"}).json()["current"]["id"]
        body = {"member": "Ana", "entryId": entry_id}

        first = api.client.post("/v1/time-entries/delete", json=body, headers=TOKEN_HEADER)
        second = api.client.post("/v1/time-entries/delete", json=body, headers=TOKEN_HEADER)

        assert first.status_code == second.status_code == 200
        assert second.json()["entryId"] == entry_id
        assert api.time_entries.all_entries() == []
