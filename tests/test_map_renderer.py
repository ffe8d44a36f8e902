# Local application imports
from tests.conftest import DELHI, FakeIssueSource, FakeWeatherClient, make_row
from waterwatch.services.issues import IssueStore
from waterwatch.services.issues.issue_views import WaterIssueView
from waterwatch.services.map.map_renderer import SIGN_IN_PROMPT, render
from waterwatch.services.weather.weather_client import WeatherData
from waterwatch.utils.geo.coordinates import Coordinate

ISSUE_A = "11111111-1111-1111-1111-111111111111"


async def _snapshot(rows, weather=None, layers=None):
    store = IssueStore(FakeIssueSource(rows), weather_client=weather or FakeWeatherClient(), default_center=DELHI)
    await store.fetch()
    for name, visible in (layers or {}).items():
        store.toggle_layer(name, visible)
    return store.snapshot()


async def test_default_layers_render_issue_and_landmark_markers():
    rendered = render(await _snapshot([make_row(ISSUE_A)]), DELHI, is_authenticated=True)

    assert rendered.error is None
    assert set(rendered.layers) == {"issues", "authorities", "reservoirs"}
    marker = rendered.layers["issues"][0]
    assert marker.position == Coordinate(28.61, 77.21)
    assert marker.popup["upvote_action"] == "toggle"
    assert marker.popup["sign_in_prompt"] is None
    assert rendered.marker_count == 3


async def test_anonymous_popup_prompts_sign_in():
    rendered = render(await _snapshot([make_row(ISSUE_A)]), DELHI, is_authenticated=False)
    popup = rendered.layers["issues"][0].popup
    assert popup["upvote_action"] == "sign_in"
    assert popup["sign_in_prompt"] == SIGN_IN_PROMPT


async def test_hidden_layers_render_nothing():
    snapshot = await _snapshot([make_row(ISSUE_A)], layers={"issues": False, "authorities": False})
    rendered = render(snapshot, DELHI, is_authenticated=True)
    assert set(rendered.layers) == {"reservoirs"}


async def test_weather_layer_when_visible():
    weather = FakeWeatherClient(
        WeatherData(location=DELHI, temperature=29.5, condition="Rain", humidity=88.0, rainfall=4.2, alerts=["Flood watch"])
    )
    rendered = render(await _snapshot([], weather=weather, layers={"weather": True}), DELHI, is_authenticated=True)
    marker = rendered.layers["weather"][0]
    assert marker.title == "Rain"
    assert marker.popup["alerts"] == ["Flood watch"]


async def test_degraded_location_is_pinned_at_fallback():
    rendered = render(await _snapshot([make_row(ISSUE_A, location="(500,500)")]), DELHI, is_authenticated=True)
    marker = rendered.layers["issues"][0]
    assert marker.degraded is True
    assert marker.position == DELHI


async def test_render_failure_is_reported_not_raised():
    snapshot = await _snapshot([])
    broken = WaterIssueView(
        id="x",
        location=DELHI,
        issue_type="leak",
        description="d",
        severity="high",
        status="pending",
        created_at=None,
        updated_at=None,
        user_id="",
        upvote_count=0,
    )
    # A view that cannot be iterated for markers
    object.__setattr__(snapshot, "issues", (broken, None))

    rendered = render(snapshot, DELHI, is_authenticated=True)
    assert rendered.error == "The map could not be displayed. Please refresh the page."
    assert rendered.layers == {}
