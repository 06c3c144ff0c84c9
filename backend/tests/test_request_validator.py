"""
Scout Query Service — Request Validator Unit Tests
====================================================

What we test:
    ✅ Wire names (query/params/database) and field names both accepted
    ✅ Omitted / null target defaults to local
    ✅ Missing, empty, blank or non-string text is rejected
    ✅ Unknown targets and non-sequence parameters are rejected
    ✅ Failure message embeds the underlying cause
"""

import pytest

from scout.exceptions import ValidationError
from scout.schemas.query import QueryRequest, QueryTarget
from scout.services.validator import validate_request


class TestValidRequests:

    def test_wire_names(self):
        query = validate_request({"query": "SELECT ?", "params": [1], "database": "remote"})
        assert query.text == "SELECT ?"
        assert query.parameters == [1]
        assert query.target is QueryTarget.REMOTE

    def test_field_names(self):
        query = validate_request(QueryRequest(text="SELECT 1", target="local"))
        assert query.text == "SELECT 1"
        assert query.target is QueryTarget.LOCAL

    def test_omitted_target_defaults_to_local(self):
        assert validate_request({"query": "SELECT 1"}).target is QueryTarget.LOCAL

    def test_null_target_defaults_to_local(self):
        assert validate_request({"query": "SELECT 1", "database": None}).target is QueryTarget.LOCAL

    def test_omitted_parameters_become_empty_list(self):
        assert validate_request({"query": "SELECT 1"}).parameters == []

    def test_tuple_parameters_normalized_to_list(self):
        query = validate_request({"query": "SELECT ?, ?", "params": ("a", 2)})
        assert query.parameters == ["a", 2]

    def test_parameter_element_types_unrestricted(self):
        params = [None, 1.5, "x", True, {"nested": [1]}]
        assert validate_request({"query": "SELECT 1", "params": params}).parameters == params

    def test_validated_query_is_immutable(self):
        query = validate_request({"query": "SELECT 1"})
        with pytest.raises(Exception):
            query.text = "DROP TABLE stores"


class TestRejectedRequests:

    def test_missing_text(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_request({"database": "local"})
        assert exc_info.value.message.startswith("Query validation failed: ")
        assert exc_info.value.field == "text"

    def test_empty_text(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_request({"query": "", "database": "local"})
        assert "text" in exc_info.value.message

    def test_blank_text(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_request({"query": "   \n\t"})
        assert "must not be blank" in exc_info.value.message

    def test_non_string_text(self):
        with pytest.raises(ValidationError):
            validate_request({"query": 42})

    def test_unknown_target_is_not_corrected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_request({"query": "SELECT 1", "database": "bogus"})
        assert exc_info.value.field == "target"
        assert "target" in exc_info.value.message

    def test_parameters_must_be_sequence(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_request({"query": "SELECT ?", "params": "not-a-list"})
        assert exc_info.value.field == "parameters"

    def test_non_mapping_request(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_request("SELECT 1")
        assert "got str" in exc_info.value.message

    def test_structured_errors_kept_in_context(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_request({"query": "", "database": "bogus"})
        errors = exc_info.value.context["errors"]
        assert {tuple(e["loc"])[0] for e in errors} == {"text", "target"}
