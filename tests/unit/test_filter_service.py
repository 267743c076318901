"""Unit tests for message filtering.

Covers date range, recipient and sender criteria, and the handling of
unparseable date parameters (ignored rather than rejected).
"""

from datetime import datetime, timedelta, timezone

import pytest

from mailsink.services.filter_service import (
    FilterCriteria,
    filter_all,
    matches,
    parse_query_date,
)
from tests.conftest import make_message


D1 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
D2 = datetime(2024, 3, 2, 9, 0, tzinfo=timezone.utc)
D3 = datetime(2024, 3, 3, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def dated_messages():
    """Newest first, as the store returns them."""
    return [
        make_message(subject="d3", date=D3),
        make_message(subject="d2", date=D2),
        make_message(subject="d1", date=D1),
    ]


class TestParseQueryDate:
    """Test lenient date parsing."""

    def test_iso_timestamp(self):
        assert parse_query_date("2024-03-02T09:00:00Z") == D2

    def test_naive_value_is_utc(self):
        assert parse_query_date("2024-03-02 09:00") == D2

    def test_offset_is_kept(self):
        parsed = parse_query_date("2024-03-02T10:00:00+01:00")
        assert parsed == D2

    def test_rfc2822_style(self):
        assert parse_query_date("Sat, 02 Mar 2024 09:00:00 +0000") == D2

    @pytest.mark.parametrize(
        "value", [None, "", "not a date", "2024-13-45", "2024-01-01T00:00:00+99:00"],
    )
    def test_unusable_values_are_absent(self, value):
        assert parse_query_date(value) is None


class TestDateCriteria:
    """Test since/until filtering."""

    def test_since_excludes_older_messages(self, dated_messages):
        criteria = FilterCriteria(since=D2)

        result = filter_all(dated_messages, criteria)

        assert [m.subject for m in result] == ["d3", "d2"]

    def test_until_excludes_newer_messages(self, dated_messages):
        criteria = FilterCriteria(until=D2)

        result = filter_all(dated_messages, criteria)

        assert [m.subject for m in result] == ["d2", "d1"]

    def test_since_and_until_are_inclusive(self, dated_messages):
        criteria = FilterCriteria(since=D2, until=D2)

        assert [m.subject for m in filter_all(dated_messages, criteria)] == ["d2"]

    def test_message_without_date_fails_date_criteria(self):
        undated = make_message(date=None)

        assert matches(undated, FilterCriteria(since=D1)) is False
        assert matches(undated, FilterCriteria(until=D3)) is False

    def test_message_without_date_passes_without_date_criteria(self):
        assert matches(make_message(date=None), FilterCriteria()) is True

    def test_naive_message_date_compares_as_utc(self):
        naive = make_message(date=D2.replace(tzinfo=None))

        assert matches(naive, FilterCriteria(since=D2 - timedelta(seconds=1))) is True
        assert matches(naive, FilterCriteria(until=D2 - timedelta(seconds=1))) is False

    def test_unparseable_since_is_ignored(self, dated_messages):
        criteria = FilterCriteria.from_query(since="yesterday-ish?")

        assert criteria.since is None
        assert len(filter_all(dated_messages, criteria)) == 3


class TestAddressCriteria:
    """Test recipient and sender filtering."""

    def test_to_matches_any_recipient(self):
        message = make_message(recipients=["a@x.com", "foo@bar.com"])

        assert matches(message, FilterCriteria(to="foo@bar.com")) is True

    def test_to_requires_exact_match(self):
        message = make_message(recipients=["Foo@bar.com"])

        assert matches(message, FilterCriteria(to="foo@bar.com")) is False

    def test_to_excludes_message_without_recipients(self):
        message = make_message(recipients=[])

        assert matches(message, FilterCriteria(to="foo@bar.com")) is False

    def test_from_matches_sender(self):
        message = make_message(sender="boss@corp.com")

        assert matches(message, FilterCriteria(from_="boss@corp.com")) is True
        assert matches(message, FilterCriteria(from_="intern@corp.com")) is False

    def test_criteria_are_combined(self):
        message = make_message(sender="a@x.com", recipients=["b@y.com"], date=D2)

        assert matches(message, FilterCriteria(to="b@y.com", from_="a@x.com", since=D1)) is True
        assert matches(message, FilterCriteria(to="b@y.com", from_="a@x.com", since=D3)) is False


class TestFilterAll:
    """Test whole-snapshot filtering."""

    def test_empty_criteria_returns_everything_in_order(self, dated_messages):
        assert filter_all(dated_messages, FilterCriteria()) == dated_messages

    def test_preserves_input_order(self):
        messages = [
            make_message(subject="3", recipients=["x@y.com"]),
            make_message(subject="2", recipients=["other@y.com"]),
            make_message(subject="1", recipients=["x@y.com"]),
        ]

        result = filter_all(messages, FilterCriteria(to="x@y.com"))

        assert [m.subject for m in result] == ["3", "1"]

    def test_empty_query_values_are_absent(self):
        criteria = FilterCriteria.from_query(since="", until="", to="", from_="")

        assert criteria.is_empty
