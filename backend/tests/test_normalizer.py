"""
Scout Query Service — Response Normalizer Unit Tests
======================================================

What we test:
    ✅ Success results carry complete, consistent shape metadata
    ✅ Each failure category maps to its message format
    ✅ QueryResult rejects inconsistent envelopes
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from scout.exceptions import (
    LocalExecutionFailure,
    QueryTimeoutError,
    RemoteRejection,
    ScoutError,
    ValidationError,
)
from scout.schemas.query import QueryMetadata, QueryResult
from scout.services.backend_base import BackendOutcome
from scout.services.normalizer import failure_result, success_result


class TestSuccessResult:

    def test_metadata_populated(self):
        result = success_result(BackendOutcome(rows=[{"id": 1}], columns=["id"]), 3.6)
        assert result.succeeded is True
        assert result.rows == [{"id": 1}]
        assert result.failure_message is None
        assert result.metadata.row_count == 1
        assert result.metadata.execution_time_millis == 4
        assert result.metadata.columns == ["id"]

    def test_empty_outcome(self):
        result = success_result(BackendOutcome(), 0.2)
        assert result.rows == []
        assert result.metadata.row_count == 0
        assert result.metadata.execution_time_millis == 0

    def test_negative_elapsed_clamped(self):
        assert success_result(BackendOutcome(), -5).metadata.execution_time_millis == 0

    def test_wire_aliases(self):
        result = success_result(BackendOutcome(rows=[{"id": 1}], columns=["id"]), 2)
        assert result.model_dump(by_alias=True, exclude_none=True) == {
            "success": True,
            "data": [{"id": 1}],
            "metadata": {"rowCount": 1, "executionTime": 2, "columns": ["id"]},
        }


class TestFailureResult:

    def test_validation_failure(self):
        result = failure_result(ValidationError("Query validation failed: text: required"))
        assert result.succeeded is False
        assert result.failure_message == "Query validation failed: text: required"
        assert result.rows is None
        assert result.metadata is None

    def test_local_failure(self):
        result = failure_result(LocalExecutionFailure("OperationalError: no such table: x"))
        assert result.failure_message == "Local query failed: OperationalError: no such table: x"

    def test_remote_failure_carries_kind_and_attempts(self):
        result = failure_result(QueryTimeoutError("no response within 10000ms", attempts=3))
        assert result.failure_message == (
            "Remote query failed [timeout] after 3 attempts: no response within 10000ms"
        )

    def test_remote_rejection(self):
        result = failure_result(RemoteRejection("HTTP 403: forbidden", status_code=403))
        assert result.failure_message == (
            "Remote query failed [remote_rejected] after 1 attempt: HTTP 403: forbidden"
        )

    def test_other_app_error(self):
        result = failure_result(ScoutError("store lookup failed"))
        assert result.failure_message == "Query execution failed: store lookup failed"

    def test_unexpected_exception(self):
        result = failure_result(RuntimeError("boom"))
        assert result.failure_message == "Query execution failed: RuntimeError: boom"

    def test_exception_without_text(self):
        result = failure_result(KeyError())
        assert result.failure_message.startswith("Query execution failed: KeyError")


class TestEnvelopeInvariants:

    def test_failed_result_requires_message(self):
        with pytest.raises(PydanticValidationError):
            QueryResult(succeeded=False)

    def test_failed_result_rejects_rows(self):
        with pytest.raises(PydanticValidationError):
            QueryResult(succeeded=False, failure_message="x", rows=[])

    def test_success_rejects_message(self):
        with pytest.raises(PydanticValidationError):
            QueryResult(succeeded=True, rows=[], failure_message="x")

    def test_row_count_must_match(self):
        with pytest.raises(PydanticValidationError):
            QueryResult(
                succeeded=True,
                rows=[{"id": 1}],
                metadata=QueryMetadata(row_count=2, execution_time_millis=0, columns=["id"]),
            )

    def test_duplicate_columns_rejected(self):
        with pytest.raises(PydanticValidationError):
            QueryMetadata(row_count=0, execution_time_millis=0, columns=["a", "a"])
