"""
Error report queue handler tests.

Covers the stored record, the two log lines, failure swallowing, the
'raise' failure policy and concurrent invocations.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from exceptions import TimestampParseError
from infrastructure.record_repository import ErrorWarningRepository
from triggers.service_bus import handle_error_report
from tests.factories.report_factories import make_report_properties


FAILURE_PREFIX = "Exception in ProcessQueueMessage:"


def _error_records(caplog):
    return [r for r in caplog.records if r.levelno >= logging.ERROR]


def _failing_commit_repository():
    """Repository over a mocked session whose commit raises."""
    session_factory = MagicMock()
    session = session_factory.return_value
    session.commit.side_effect = SQLAlchemyError("connection lost during commit")
    return ErrorWarningRepository(session_factory=session_factory), session


class TestValidMessage:

    def test_scenario_a_stores_one_record(self, make_message, repository, caplog):
        caplog.set_level(logging.INFO)
        msg = make_message({
            "time": "2016-05-01T10:00:00Z",
            "ship": "Endeavour",
            "exceptionmessage": "Sensor timeout",
        })

        result = handle_error_report(msg, repository=repository)

        assert result["success"] is True
        records = repository.list_recent()
        assert len(records) == 1
        assert records[0].created_at.replace(tzinfo=None) == datetime(2016, 5, 1, 10, 0)
        assert records[0].ship_name == "Endeavour"
        assert records[0].message == "Sensor timeout"
        assert result["record_id"] == records[0].id

        messages = [r.getMessage() for r in caplog.records]
        assert "Processing message: Sensor timeout Ship: Endeavour" in messages
        assert _error_records(caplog) == []

    def test_one_add_and_one_commit(self, report_properties):
        session_factory = MagicMock()
        session = session_factory.return_value
        repository = ErrorWarningRepository(session_factory=session_factory)

        result = handle_error_report(report_properties, repository=repository)

        assert result["success"] is True
        assert session.add.call_count == 1
        assert session.commit.call_count == 1
        added = session.add.call_args.args[0]
        assert added.ship_name == report_properties["ship"]
        assert added.message == report_properties["exceptionmessage"]
        session.close.assert_called_once()

    def test_user_properties_fallback(self, repository, report_properties):
        msg = SimpleNamespace(user_properties=report_properties)
        assert handle_error_report(msg, repository=repository)["success"] is True
        assert repository.count() == 1

    def test_log_dimensions_carry_message_metadata(self, make_message, repository, caplog, report_properties):
        caplog.set_level(logging.INFO)
        handle_error_report(
            make_message(report_properties, message_id="abc-123", delivery_count=2),
            repository=repository,
            queue_name="errorsandwarnings",
        )
        record = next(r for r in caplog.records if r.getMessage().startswith("Processing message:"))
        dims = record.custom_dimensions
        assert dims["message_id"] == "abc-123"
        assert dims["delivery_count"] == 2
        assert dims["queue_name"] == "errorsandwarnings"
        assert dims["ship_name"] == report_properties["ship"]
        assert dims["component_type"] == "trigger"


class TestFailuresAreSwallowed:

    def test_scenario_b_unparseable_time(self, make_message, repository, caplog):
        msg = make_message({"time": "not-a-date", "ship": "Endeavour", "exceptionmessage": "x"})

        result = handle_error_report(msg, repository=repository)

        assert result["success"] is False
        assert result["error_type"] == "TimestampParseError"
        assert repository.count() == 0
        errors = _error_records(caplog)
        assert len(errors) == 1
        assert errors[0].getMessage().startswith(FAILURE_PREFIX)

    @pytest.mark.parametrize("time_value", [None, "", "31/31/2016"])
    def test_missing_or_bad_time_makes_no_commit(self, make_message, caplog, time_value):
        props = make_report_properties(time=time_value)
        repository = MagicMock(spec=ErrorWarningRepository)

        result = handle_error_report(make_message(props), repository=repository)

        assert result["success"] is False
        repository.add_record.assert_not_called()
        assert len(_error_records(caplog)) == 1

    def test_missing_time_key(self, make_message, repository, caplog):
        props = make_report_properties()
        del props["time"]

        result = handle_error_report(make_message(props), repository=repository)

        assert result["error_type"] == "MissingPropertyError"
        assert repository.count() == 0
        assert len(_error_records(caplog)) == 1

    def test_commit_fault_logged_once(self, report_properties, caplog):
        repository, session = _failing_commit_repository()

        result = handle_error_report(report_properties, repository=repository)

        assert result["success"] is False
        assert result["error_type"] == "DatabaseError"
        assert session.add.call_count == 1
        assert session.commit.call_count == 1
        session.rollback.assert_called_once()
        session.close.assert_called_once()
        errors = _error_records(caplog)
        assert len(errors) == 1
        assert errors[0].getMessage().startswith(FAILURE_PREFIX)
        assert "connection lost during commit" in errors[0].getMessage()

    def test_non_message_object(self, caplog):
        result = handle_error_report(object(), repository=MagicMock())
        assert result["error_type"] == "ContractViolationError"
        assert len(_error_records(caplog)) == 1


class TestRaisePolicy:

    def test_explicit_raise_policy_reraises_after_logging(self, make_message, repository, caplog):
        msg = make_message(make_report_properties(time="not-a-date"))

        with pytest.raises(TimestampParseError):
            handle_error_report(msg, repository=repository, failure_policy="raise")

        errors = _error_records(caplog)
        assert len(errors) == 1
        assert errors[0].getMessage().startswith(FAILURE_PREFIX)

    def test_policy_read_from_environment(self, monkeypatch, make_message, repository):
        monkeypatch.setenv("INGEST_FAILURE_POLICY", "raise")
        msg = make_message(make_report_properties(time="not-a-date"))

        with pytest.raises(TimestampParseError):
            handle_error_report(msg, repository=repository)

    @pytest.mark.parametrize("env", [
        {"INGEST_FAILURE_POLICY": "deadletter"},
        {"DB_PORT": "abc"},
    ])
    def test_unloadable_config_falls_back_to_log(self, monkeypatch, env, make_message, caplog):
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        repository, _ = _failing_commit_repository()

        result = handle_error_report(make_message(make_report_properties()), repository=repository)

        assert result["success"] is False
        assert result["error_type"] == "DatabaseError"
        errors = _error_records(caplog)
        assert len(errors) == 1
        assert errors[0].getMessage().startswith(FAILURE_PREFIX)

    def test_success_unaffected_by_raise_policy(self, make_message, repository, report_properties):
        result = handle_error_report(make_message(report_properties), repository=repository, failure_policy="raise")
        assert result["success"] is True


class TestConcurrentInvocations:

    def test_scenario_c_both_records_persisted(self, make_message, repository):
        payloads = [
            make_report_properties(ship="Endeavour", exceptionmessage="Sensor timeout"),
            make_report_properties(ship="Resolute", exceptionmessage="Pump pressure low"),
        ]

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(
                lambda props: handle_error_report(make_message(props), repository=repository),
                payloads
            ))

        assert all(r["success"] for r in results)
        stored = {r.ship_name: r.message for r in repository.list_recent()}
        assert stored == {
            "Endeavour": "Sensor timeout",
            "Resolute": "Pump pressure low",
        }
