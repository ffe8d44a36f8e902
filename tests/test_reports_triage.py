# Standard library imports
from datetime import UTC, datetime, timedelta

# Third-party imports
import pytest

# Local application imports
from tests.conftest import DELHI, make_row
from waterwatch.db_selectors.issues import list_issues
from waterwatch.models.issues.water_issue import ANONYMOUS_USER_ID, IssueSeverity, IssueStatus, IssueType
from waterwatch.schemas.issues import IssueCreate
from waterwatch.services.issues.issue_views import issue_to_row, parse_issue_row
from waterwatch.services.issues.report_services import list_my_reports, submit_report
from waterwatch.services.issues.triage import (
    filter_by_status,
    issue_type_counts,
    resolution_rate,
    sort_for_triage,
    status_counts,
    update_status,
)
from waterwatch.services.service_enums import ServiceError


def _payload(description="pipe burst", location=(28.61, 77.21)) -> IssueCreate:
    return IssueCreate(issue_type=IssueType.LEAK, description=description, severity=IssueSeverity.HIGH, location=location)


async def test_anonymous_report_is_pending_and_owned_by_sentinel(db, backend):
    result = await submit_report(db, backend.change_feed, _payload())

    issue = result.unwrap()
    assert issue.status == IssueStatus.PENDING.value
    assert issue.user_id == ANONYMOUS_USER_ID
    assert issue.upvote_count == 0
    assert issue.location == "(77.21,28.61)"
    assert [(event.table, event.event_type) for event in backend.change_feed.events] == [("water_issues", "INSERT")]


async def test_signed_in_report_is_owned_by_user(db, backend, citizen):
    issue = (await submit_report(db, backend.change_feed, _payload(), user_id=citizen.id)).unwrap()
    assert issue.user_id == citizen.id
    assert [mine.id for mine in await list_my_reports(db, citizen.id)] == [issue.id]


async def test_report_rejects_blank_description_and_bad_location(db, backend):
    blank = await submit_report(db, backend.change_feed, _payload(description="   "))
    assert blank.error == ServiceError.Issues.EMPTY_DESCRIPTION

    far = await submit_report(db, backend.change_feed, _payload(location=(999.0, 0.0)))
    assert far.error == ServiceError.Issues.INVALID_LOCATION
    assert backend.change_feed.events == []


async def test_status_change_to_urgent_sorts_first(db, backend):
    older = (await submit_report(db, backend.change_feed, _payload("older leak"))).unwrap()
    await submit_report(db, backend.change_feed, _payload("newer leak"))

    result = await update_status(db, backend.change_feed, older.id, IssueStatus.URGENT.value)
    assert result.ok
    assert result.data.status == "urgent"

    views = [parse_issue_row(issue_to_row(issue), DELHI) for issue in await list_issues(db)]
    ordered = sort_for_triage(views)
    assert ordered[0].id == str(older.id)


async def test_status_change_rejects_unknown_status(db, backend):
    issue = (await submit_report(db, backend.change_feed, _payload())).unwrap()
    result = await update_status(db, backend.change_feed, issue.id, "closed")
    assert result.error == ServiceError.Issues.INVALID_STATUS


def _views():
    now = datetime(2024, 5, 1, tzinfo=UTC)
    rows = [
        make_row("a", status="pending", created_at=(now - timedelta(days=3)).isoformat()),
        make_row("b", status="urgent", created_at=(now - timedelta(days=2)).isoformat(), issue_type="flood"),
        make_row("c", status="resolved", created_at=(now - timedelta(days=1)).isoformat()),
        make_row("d", status="urgent", created_at=now.isoformat(), issue_type="flood"),
        make_row("e", status="inProgress", created_at=None),
    ]
    return [parse_issue_row(row, DELHI) for row in rows]


def test_triage_order_urgent_first_then_newest():
    assert [issue.id for issue in sort_for_triage(_views())] == ["d", "b", "c", "a", "e"]


@pytest.mark.parametrize("status, expected", [("all", 5), (None, 5), ("urgent", 2), ("inProgress", 1), ("closed", 0)])
def test_filter_by_status(status, expected):
    assert len(filter_by_status(_views(), status)) == expected


def test_dashboard_counts():
    views = _views()
    assert status_counts(views) == {"pending": 1, "inProgress": 1, "resolved": 1, "urgent": 2}
    assert issue_type_counts(views) == {"leak": 3, "flood": 2}


@pytest.mark.parametrize("resolved, total, expected", [(0, 0, 0), (1, 8, 13), (1, 3, 33), (2, 3, 67), (1, 2, 50)])
def test_resolution_rate_rounds_half_up(resolved, total, expected):
    views = [
        parse_issue_row(make_row(str(i), status="resolved" if i < resolved else "pending"), DELHI) for i in range(total)
    ]
    assert resolution_rate(views) == expected
