"""Tests for dashboard data layer: fetch wrapper and table helpers."""

from unittest.mock import patch

from liondine.errors import InvalidCategory, StructuringFailed, UpstreamFetchFailed
from liondine.pipeline import AcquireResult


class TestFetchMenu:
    """Test fetch_menu()."""

    @patch("liondine.dashboard.data.get_service")
    @patch("liondine.dashboard.data.st")
    def test_success_stored_in_session(self, mock_st, mock_get_service, lunch_record):
        result = AcquireResult(record=lunch_record, cache_hit=True)
        mock_get_service.return_value.acquire.return_value = result
        mock_st.session_state = {}

        from liondine.dashboard.data import fetch_menu, get_last_menu

        assert fetch_menu("lunch", refresh=True) is result
        assert mock_st.session_state["menu_lunch"] is result
        assert get_last_menu("lunch") is result
        assert get_last_menu("dinner") is None

        _, kwargs = mock_get_service.return_value.acquire.call_args
        assert kwargs["bypass_cache"] is True

    @patch("liondine.dashboard.data.get_service")
    @patch("liondine.dashboard.data.st")
    def test_caller_error(self, mock_st, mock_get_service):
        mock_get_service.return_value.acquire.side_effect = InvalidCategory("Invalid meal type 'brunch'")
        mock_st.session_state = {}

        from liondine.dashboard.data import fetch_menu

        assert fetch_menu("brunch") is None
        message = mock_st.error.call_args.args[0]
        assert message.startswith("invalid_category")
        assert "fix the request" in message
        assert mock_st.session_state == {}

    @patch("liondine.dashboard.data.get_service")
    @patch("liondine.dashboard.data.st")
    def test_retryable_error(self, mock_st, mock_get_service):
        mock_get_service.return_value.acquire.side_effect = UpstreamFetchFailed("site down")

        from liondine.dashboard.data import fetch_menu

        assert fetch_menu("dinner") is None
        assert "try again later" in mock_st.error.call_args.args[0]

    @patch("liondine.dashboard.data.get_service")
    @patch("liondine.dashboard.data.st")
    def test_missing_api_key(self, mock_st, mock_get_service):
        mock_get_service.return_value.acquire.side_effect = StructuringFailed(
            "openai API key not configured"
        )

        from liondine.dashboard.data import fetch_menu

        assert fetch_menu("lunch") is None
        message = mock_st.error.call_args.args[0]
        assert message.startswith("structuring_failed")
        assert "API key not configured" in message

    @patch("liondine.dashboard.data.get_service")
    @patch("liondine.dashboard.data.st")
    def test_timeout(self, mock_st, mock_get_service):
        mock_get_service.return_value.acquire.side_effect = TimeoutError()

        from liondine.dashboard.data import fetch_menu

        assert fetch_menu("lunch") is None
        assert "timed out" in mock_st.error.call_args.args[0]


class TestTables:
    """Test DataFrame helpers."""

    def test_stations_frame(self, lunch_record):
        from liondine.dashboard.data import stations_frame

        df = stations_frame(lunch_record)

        assert list(df.columns) == ["hall", "station", "item"]
        assert len(df) == 7
        assert set(df["hall"]) == {"John Jay", "JJ's"}
        assert df.iloc[0].to_dict() == {
            "hall": "John Jay",
            "station": "Main Line",
            "item": "Grilled Chicken",
        }

    def test_hall_summary(self, lunch_record):
        from liondine.dashboard.data import hall_summary

        df = hall_summary(lunch_record).set_index("hall")

        assert df.loc["John Jay", "stations"] == 2
        assert df.loc["John Jay", "items"] == 5
        assert df.loc["Ferris", "status"] == "closed"
        assert df.loc["Ferris", "items"] == 0

    def test_empty_record(self, lunch_record):
        from liondine.dashboard.data import hall_summary, stations_frame

        empty = lunch_record.model_copy(update={"dining_halls": []})

        assert stations_frame(empty).empty
        assert list(hall_summary(empty).columns) == ["hall", "status", "hours", "stations", "items"]

