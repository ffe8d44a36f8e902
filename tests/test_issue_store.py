# Standard library imports
import asyncio
import math
from uuid import uuid4

# Third-party imports
import pytest

# Local application imports
from tests.conftest import DELHI, FakeIssueSource, FakeWeatherClient, HangingPositionProvider, StaticPositionProvider, make_row
from waterwatch.services.geo import GeolocationFailure
from waterwatch.services.issues import IssueStore, StoreState
from waterwatch.services.service_enums import ServiceError
from waterwatch.services.weather.weather_client import WeatherData
from waterwatch.utils.geo.coordinates import Coordinate

ISSUE_A = "11111111-1111-1111-1111-111111111111"
ISSUE_B = "22222222-2222-2222-2222-222222222222"


def build_store(source: FakeIssueSource, user_id=None, is_admin=False, weather=None) -> IssueStore:
    return IssueStore(
        source,
        user_id=user_id,
        is_admin=is_admin,
        weather_client=weather or FakeWeatherClient(),
        default_center=DELHI,
        default_zoom=10,
        geolocation_timeout_ms=50,
    )


async def test_geolocation_timeout_keeps_default_center():
    source = FakeIssueSource([make_row(ISSUE_A)])
    store = build_store(source)

    await asyncio.wait_for(store.initialize(HangingPositionProvider()), timeout=2)

    snapshot = store.snapshot()
    assert snapshot.state == StoreState.READY
    assert snapshot.center == DELHI
    assert snapshot.geolocation_failure == GeolocationFailure.TIMEOUT
    assert [issue.id for issue in snapshot.issues] == [ISSUE_A]


async def test_position_fix_moves_center_before_first_fetch():
    weather = FakeWeatherClient()
    store = build_store(FakeIssueSource(), weather=weather)

    await store.initialize(StaticPositionProvider((19.076, 72.8777)))

    assert store.center == Coordinate(19.076, 72.8777)
    assert weather.calls == [(19.076, 72.8777)]
    assert store.geolocation_failure is None


async def test_background_position_refetches_once_resolved():
    source = FakeIssueSource()
    store = build_store(source)

    await store.initialize(StaticPositionProvider((10.0, 20.0)), wait_for_position=False)
    assert store.center == DELHI

    await asyncio.sleep(0.05)
    assert store.center == Coordinate(10.0, 20.0)
    assert source.list_calls == 2


@pytest.mark.parametrize("value", [25, -1, math.nan, math.inf, 10**400, None, "12", True])
def test_invalid_zoom_falls_back_to_default(value):
    store = build_store(FakeIssueSource())
    store.zoom = 5
    assert store.set_zoom(value) == 10
    assert store.zoom == 10


@pytest.mark.parametrize("value, expected", [(12.4, 12), (12.5, 13), (0, 0), (20, 20), (0.5, 1)])
def test_valid_zoom_rounds_half_up(value, expected):
    store = build_store(FakeIssueSource())
    assert store.set_zoom(value) == expected


def test_invalid_center_is_rejected_and_unchanged():
    store = build_store(FakeIssueSource())
    before = store.center

    assert store.set_center((999, 0)) is False
    assert store.center == before

    assert store.set_center((12.3456789, 45.6789012)) is True
    assert store.center == Coordinate(12.345679, 45.678901)


async def test_stale_fetch_result_is_discarded():
    source = FakeIssueSource([make_row(ISSUE_A)])
    store = build_store(source)
    first_gate, second_gate = asyncio.Event(), asyncio.Event()
    source.gates = [first_gate, second_gate]

    first = asyncio.create_task(store.fetch())
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    source.rows = [make_row(ISSUE_A), make_row(ISSUE_B)]
    second = asyncio.create_task(store.fetch())
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    second_gate.set()
    assert await second is True
    first_gate.set()
    assert await first is False

    assert {issue.id for issue in store.issues} == {ISSUE_A, ISSUE_B}
    assert store.is_loading is False


async def test_fetch_failure_sets_error_then_recovers():
    source = FakeIssueSource([make_row(ISSUE_A)])
    store = build_store(source)
    source.fail_with = "Failed to fetch issues"

    assert await store.fetch() is False
    assert store.state == StoreState.ERROR
    assert store.error == "Failed to fetch issues"

    source.fail_with = None
    assert await store.fetch() is True
    assert store.state == StoreState.READY
    assert store.error is None


async def test_results_after_close_are_discarded():
    source = FakeIssueSource([make_row(ISSUE_A)])
    store = build_store(source)
    gate = asyncio.Event()
    source.gates = [gate]

    pending = asyncio.create_task(store.fetch())
    await asyncio.sleep(0)
    await store.close()
    gate.set()

    assert await pending is False
    assert store.state == StoreState.CLOSED
    assert store.issues == []


async def test_change_event_triggers_refetch_and_close_unsubscribes():
    source = FakeIssueSource([make_row(ISSUE_A)])
    store = build_store(source)
    await store.initialize(None)
    calls = source.list_calls

    source.rows.append(make_row(ISSUE_B))
    await source.change_feed.publish("water_issues", "INSERT", ISSUE_B)
    assert source.list_calls == calls + 1
    assert len(store.issues) == 2

    await store.close()
    assert source.change_feed.subscribers == []


async def test_unauthenticated_upvote_writes_nothing():
    source = FakeIssueSource([make_row(ISSUE_A)])
    store = build_store(source)
    await store.fetch()

    result = await store.toggle_upvote(ISSUE_A)

    assert not result.ok
    assert result.error == ServiceError.Auth.SIGN_IN_REQUIRED
    assert source.toggle_calls == []


async def test_upvote_toggles_on_and_off():
    user_id = uuid4()
    source = FakeIssueSource([make_row(ISSUE_A)])
    store = build_store(source, user_id=user_id)
    await store.fetch()

    on = await store.toggle_upvote(ISSUE_A)
    assert on.ok and on.data.has_upvoted
    assert store.find_issue(ISSUE_A).has_upvoted is True
    assert store.find_issue(ISSUE_A).upvote_count == 1

    off = await store.toggle_upvote(ISSUE_A)
    assert off.ok and not off.data.has_upvoted
    assert store.find_issue(ISSUE_A).has_upvoted is False
    assert store.find_issue(ISSUE_A).upvote_count == 0
    assert [call[2] for call in source.toggle_calls] == [False, True]


async def test_upvote_on_unknown_issue():
    store = build_store(FakeIssueSource(), user_id=uuid4())
    await store.fetch()
    result = await store.toggle_upvote(ISSUE_A)
    assert result.error == ServiceError.Issues.ISSUE_NOT_FOUND


async def test_status_update_requires_admin():
    source = FakeIssueSource([make_row(ISSUE_A)])
    citizen_store = build_store(source, user_id=uuid4())
    await citizen_store.fetch()
    assert (await citizen_store.update_status(ISSUE_A, "urgent")).error == ServiceError.Auth.ADMIN_REQUIRED

    admin_store = build_store(source, user_id=uuid4(), is_admin=True)
    await admin_store.fetch()
    assert (await admin_store.update_status(ISSUE_A, "urgent")).ok
    assert admin_store.find_issue(ISSUE_A).status == "urgent"


async def test_weather_failure_is_reported_without_failing_the_fetch():
    store = build_store(FakeIssueSource([make_row(ISSUE_A)]), weather=FakeWeatherClient(error="no key"))
    assert await store.fetch() is True
    assert store.weather is None
    assert store.weather_error == "no key"


async def test_weather_and_landmarks_follow_the_center():
    weather = FakeWeatherClient(
        WeatherData(location=DELHI, temperature=31.0, condition="Clear", humidity=40.0, rainfall=0.0)
    )
    store = build_store(FakeIssueSource(), weather=weather)
    await store.fetch()

    assert store.weather.condition == "Clear"
    assert store.weather_error is None
    assert store.authorities[0].location == Coordinate(28.6159, 77.211)
    assert store.reservoirs[0].location == Coordinate(28.6169, 77.212)


async def test_bad_rows_are_isolated():
    rows = [make_row(ISSUE_A), make_row(ISSUE_B, location="not a point"), {"description": "no id"}]
    store = build_store(FakeIssueSource(rows))
    await store.fetch()

    assert [issue.id for issue in store.issues] == [ISSUE_A, ISSUE_B]
    degraded = store.find_issue(ISSUE_B)
    assert degraded.location_degraded is True
    assert degraded.location == DELHI
    assert store.snapshot().degraded_issue_ids == (ISSUE_B,)


async def test_layers_and_selection():
    source = FakeIssueSource([make_row(ISSUE_A)])
    store = build_store(source)
    await store.fetch()

    layers = store.toggle_layer("flood_zones", True)
    assert layers["flood_zones"] is True
    assert store.toggle_layer("weather", True)["weather"] is True

    assert store.select_issue("does-not-exist") is False
    assert store.select_issue(ISSUE_A) is True
    assert store.snapshot().selected_issue.id == ISSUE_A

    source.rows = []
    await store.fetch()
    assert store.selected_issue_id is None


async def test_oversized_location_numbers_degrade_one_row():
    rows = [make_row(ISSUE_A), make_row(ISSUE_B, location={"lat": 10**400, "lng": 0})]
    store = build_store(FakeIssueSource(rows))
    await store.fetch()

    assert store.state == StoreState.READY
    assert [issue.id for issue in store.issues] == [ISSUE_A, ISSUE_B]
    assert store.find_issue(ISSUE_B).location_degraded is True
