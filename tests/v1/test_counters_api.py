"""Tests for the admin counter endpoints."""

from fastapi.testclient import TestClient

from encore_counters.core.errors import StorageUnavailable
from encore_counters.services.counters import CounterService
from tests.conftest import FakeTime

BASE = "/api/v1/admin/counters"
CATEGORIES = {"confirmed", "manual", "completed", "cancelled", "incomplete"}


def test_get_counters_lists_every_category(client: TestClient) -> None:
    response = client.get(BASE)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert set(body["counters"]) == CATEGORIES
    confirmed = body["counters"]["confirmed"]
    assert confirmed["totalCount"] == 0
    assert confirmed["lastResetDayKey"] == "2026-10-19"
    assert confirmed["lastResetWeekKey"] == "2026-10-18"


def test_init_is_idempotent(client: TestClient, counter_service: CounterService) -> None:
    assert client.post(f"{BASE}/init").status_code == 200
    counter_service.increment("cancelled")
    response = client.post(f"{BASE}/init")
    assert response.json()["counters"]["cancelled"]["totalCount"] == 1


def test_get_single_category(client: TestClient, counter_service: CounterService) -> None:
    counter_service.increment("completed")
    response = client.get(f"{BASE}/completed")
    assert response.status_code == 200
    body = response.json()
    assert body["category"] == "completed"
    assert body["counter"]["dailyCount"] == 1


def test_unknown_category_returns_404(client: TestClient) -> None:
    response = client.get(f"{BASE}/refunded")
    assert response.status_code == 404
    assert response.json()["success"] is False
    assert "refunded" in response.json()["error"]


def test_counters_roll_over_when_read(
    client: TestClient, counter_service: CounterService, fake_time: FakeTime
) -> None:
    counter_service.increment("confirmed")
    fake_time.advance(days=1)
    counter = client.get(f"{BASE}/confirmed").json()["counter"]
    assert counter["dailyCount"] == 0
    assert counter["weeklyCount"] == 1
    assert counter["lastResetDayKey"] == "2026-10-20"


def test_time_based_reset_keeps_totals(client: TestClient, counter_service: CounterService) -> None:
    counter_service.increment("manual")
    response = client.post(f"{BASE}/reset-time-based", json={"resetAll": True})
    assert response.status_code == 200
    body = response.json()
    assert body["resetType"] == "time-based-only"
    assert body["counters"]["manual"]["dailyCount"] == 0
    assert body["counters"]["manual"]["totalCount"] == 1


def test_time_based_reset_without_body_defaults_to_all(client: TestClient) -> None:
    response = client.post(f"{BASE}/reset-time-based")
    assert response.status_code == 200


def test_time_based_reset_rejects_partial_request(client: TestClient) -> None:
    response = client.post(f"{BASE}/reset-time-based", json={"resetAll": False})
    assert response.status_code == 400


def test_full_reset_requires_confirmation(client: TestClient, counter_service: CounterService) -> None:
    counter_service.increment("confirmed")

    assert client.post(f"{BASE}/reset-all").status_code == 400
    response = client.post(f"{BASE}/reset-all", json={"confirmReset": False})
    assert response.status_code == 400
    assert "confirmReset" in response.json()["error"]
    assert counter_service.get("confirmed").total_count == 1


def test_confirmed_full_reset_zeroes_totals(client: TestClient, counter_service: CounterService) -> None:
    counter_service.increment("confirmed")
    response = client.post(f"{BASE}/reset-all", json={"confirmReset": True})
    assert response.status_code == 200
    body = response.json()
    assert body["resetType"] == "all-counters"
    assert body["counters"]["confirmed"]["totalCount"] == 0


def test_reset_to_zero(client: TestClient, counter_service: CounterService) -> None:
    counter_service.increment("incomplete")
    response = client.post(f"{BASE}/reset-to-zero")
    assert response.status_code == 200
    assert response.json()["resetType"] == "FULL_RESET"
    assert counter_service.get("incomplete").total_count == 0


def test_staff_counters(client: TestClient, counter_service: CounterService) -> None:
    counter_service.increment_staff("ops-1")
    counter_service.increment_staff("ops-1")

    listing = client.get(f"{BASE}/staff").json()
    assert listing["counters"]["ops-1"]["totalCount"] == 2

    single = client.get(f"{BASE}/staff/ops-1").json()
    assert single["staffId"] == "ops-1"
    assert single["counter"]["dailyCount"] == 2

    unseen = client.get(f"{BASE}/staff/ops-2").json()
    assert unseen["counter"]["totalCount"] == 0


def test_storage_outage_returns_503(client: TestClient, counter_service: CounterService, mocker) -> None:
    mocker.patch.object(
        counter_service.store,
        "load",
        side_effect=StorageUnavailable("connection refused"),
    )
    response = client.get(BASE)
    assert response.status_code == 503
    assert response.json() == {"success": False, "error": "connection refused"}


def test_partial_reset_failure_returns_500(
    client: TestClient, counter_service: CounterService, mocker
) -> None:
    real_save = counter_service.store.save

    def flaky_save(key, mutate):
        if key == "cancelled":
            raise StorageUnavailable("disk full")
        return real_save(key, mutate)

    mocker.patch.object(counter_service.store, "save", side_effect=flaky_save)
    response = client.post(f"{BASE}/reset-time-based", json={"resetAll": True})

    assert response.status_code == 500
    body = response.json()
    assert body["failed"] == {"cancelled": "disk full"}
    assert "confirmed" in body["reset"]


def test_staff_reset_for_one_member(client: TestClient, counter_service: CounterService) -> None:
    counter_service.increment_staff("ops-1")
    counter_service.increment_staff("ops-2")

    response = client.post(f"{BASE}/staff/reset", json={"staffId": "ops-1"})

    assert response.status_code == 200
    body = response.json()
    assert body["resetType"] == "staff"
    assert body["counters"]["ops-1"]["totalCount"] == 0
    assert counter_service.get_staff("ops-2").total_count == 1


def test_staff_reset_for_all_members(client: TestClient, counter_service: CounterService) -> None:
    counter_service.increment_staff("ops-1")
    counter_service.increment_staff("ops-2")
    counter_service.increment("manual")

    response = client.post(f"{BASE}/staff/reset", json={"resetType": "all_staff"})

    assert response.status_code == 200
    body = response.json()
    assert body["resetType"] == "all_staff"
    assert {name: c["totalCount"] for name, c in body["counters"].items()} == {"ops-1": 0, "ops-2": 0}
    assert counter_service.get("manual").total_count == 1


def test_staff_reset_needs_a_target(client: TestClient, counter_service: CounterService) -> None:
    counter_service.increment_staff("ops-1")

    assert client.post(f"{BASE}/staff/reset").status_code == 400
    response = client.post(f"{BASE}/staff/reset", json={})
    assert response.status_code == 400
    assert "all_staff" in response.json()["error"]
    assert counter_service.get_staff("ops-1").total_count == 1


def test_staff_reset_partial_failure_returns_500(
    client: TestClient, counter_service: CounterService, mocker
) -> None:
    counter_service.increment_staff("ops-1")
    counter_service.increment_staff("ops-2")
    real_save = counter_service.store.save

    def flaky_save(key, mutate):
        if key == "staff:ops-1":
            raise StorageUnavailable("disk full")
        return real_save(key, mutate)

    mocker.patch.object(counter_service.store, "save", side_effect=flaky_save)
    response = client.post(f"{BASE}/staff/reset", json={"resetType": "all_staff"})

    assert response.status_code == 500
    body = response.json()
    assert body["failed"] == {"staff:ops-1": "disk full"}
    assert body["reset"] == ["staff:ops-2"]
