"""
Unit Tests for Verifiers
========================

Tests for each verifier and for the query validator that combines them.
"""

import pytest

from nl_to_es.agents.query_builder import enforce_mandatory_filters
from nl_to_es.models import VerificationStatus
from nl_to_es.schema import PLACEHOLDER_SCHEMA
from nl_to_es.verifiers.base import INVALID_SCORE, VALID_SCORE, QueryValidator
from nl_to_es.verifiers.performance import PerformanceVerifier
from nl_to_es.verifiers.safety import SafetyVerifier
from nl_to_es.verifiers.schema import SchemaVerifier, known_fields, referenced_fields
from nl_to_es.verifiers.structure import StructureVerifier

from conftest import COUNT_QUERY, SF_QUERY


class TestStructureVerifier:
    """Tests for the StructureVerifier."""

    def test_valid_query(self, structure_verifier: StructureVerifier, jobs_schema: dict) -> None:
        result = structure_verifier.verify(SF_QUERY, jobs_schema)
        assert result.status == VerificationStatus.PASSED
        assert result.verifier_name == "StructureVerifier"

    @pytest.mark.parametrize(
        "query",
        [{}, {"query": {}}, {"query": "match everything"}, {"query": None}, {"size": 10}],
    )
    def test_malformed_root(
        self, structure_verifier: StructureVerifier, jobs_schema: dict, query: dict
    ) -> None:
        result = structure_verifier.verify(query, jobs_schema)
        assert result.status == VerificationStatus.FAILED
        assert "query object missing or malformed" in result.message


class TestSchemaVerifier:
    """Tests for the SchemaVerifier."""

    def test_known_fields_include_multi_fields(self, jobs_schema: dict) -> None:
        fields = known_fields(jobs_schema["mappings"]["properties"])
        assert "job_title" in fields
        assert "job_title.keyword" in fields
        assert "skills.name" in fields
        assert "skills.name.keyword" in fields

    def test_referenced_fields(self) -> None:
        fields = set(referenced_fields(COUNT_QUERY["aggs"]))
        assert fields == {"company_name.keyword"}

    def test_mapped_fields_pass(self, schema_verifier: SchemaVerifier, jobs_schema: dict) -> None:
        query = enforce_mandatory_filters(SF_QUERY)
        query["sort"] = [{"posted_date": "desc"}, "_score"]
        result = schema_verifier.verify(query, jobs_schema)
        assert result.status == VerificationStatus.PASSED

    def test_unknown_field_fails(self, schema_verifier: SchemaVerifier, jobs_schema: dict) -> None:
        query = {"query": {"bool": {"must": [{"match": {"job_titel": "dev"}}]}}}
        result = schema_verifier.verify(query, jobs_schema)
        assert result.status == VerificationStatus.FAILED
        assert result.details["errors"] == ["Unknown field: 'job_titel'"]

    def test_multi_match_fields(self, schema_verifier: SchemaVerifier, jobs_schema: dict) -> None:
        query = {
            "query": {
                "multi_match": {"query": "go", "fields": ["job_title^2", "job_summary"]}
            }
        }
        result = schema_verifier.verify(query, jobs_schema)
        assert result.details["errors"] == ["Unknown field: 'job_summary'"]

    def test_empty_schema_skipped(self, schema_verifier: SchemaVerifier) -> None:
        result = schema_verifier.verify(SF_QUERY, PLACEHOLDER_SCHEMA)
        assert result.status == VerificationStatus.SKIPPED


class TestSafetyVerifier:
    """Tests for the SafetyVerifier."""

    def test_plain_query_passes(self, safety_verifier: SafetyVerifier, jobs_schema: dict) -> None:
        result = safety_verifier.verify(SF_QUERY, jobs_schema)
        assert result.status == VerificationStatus.PASSED

    def test_script_query_flagged(self, safety_verifier: SafetyVerifier, jobs_schema: dict) -> None:
        query = {
            "query": {
                "bool": {"filter": [{"script": {"script": "doc['raw_salary'].value > 1"}}]}
            }
        }
        result = safety_verifier.verify(query, jobs_schema)
        assert result.status == VerificationStatus.FAILED
        assert "Script clause detected at 'query.bool.filter[0].script'" in result.details["errors"]

    def test_scripted_metric_flagged(
        self, safety_verifier: SafetyVerifier, jobs_schema: dict
    ) -> None:
        query = {"aggs": {"x": {"scripted_metric": {"map_script": "..."}}}}
        result = safety_verifier.verify(query, jobs_schema)
        assert result.status == VerificationStatus.FAILED


class TestPerformanceVerifier:
    """Tests for the PerformanceVerifier."""

    def test_plain_query_passes(
        self, performance_verifier: PerformanceVerifier, jobs_schema: dict
    ) -> None:
        result = performance_verifier.verify({**SF_QUERY, "size": 50}, jobs_schema)
        assert result.status == VerificationStatus.PASSED

    def test_leading_wildcard(
        self, performance_verifier: PerformanceVerifier, jobs_schema: dict
    ) -> None:
        query = {"query": {"wildcard": {"job_title.keyword": {"value": "*engineer"}}}}
        result = performance_verifier.verify(query, jobs_schema)
        assert result.status == VerificationStatus.FAILED
        assert "job_title.keyword" in result.message

    def test_large_window(
        self, performance_verifier: PerformanceVerifier, jobs_schema: dict
    ) -> None:
        result = performance_verifier.verify(
            {"query": {"match_all": {}}, "from": 9990, "size": 50}, jobs_schema
        )
        assert result.status == VerificationStatus.FAILED
        assert "10040" in result.message


class TestQueryValidator:
    """Tests for the combined validation result."""

    def test_default_chain_is_structural(self) -> None:
        validator = QueryValidator()
        assert [v.name for v in validator.verifiers] == ["StructureVerifier"]

    def test_valid_query(self, jobs_schema: dict) -> None:
        result = QueryValidator().validate(SF_QUERY, jobs_schema)
        assert result.is_valid is True
        assert result.score == VALID_SCORE
        assert result.syntax_errors == ()
        assert result.recommendations == ("Consider adding more specific filters.",)

    def test_invalid_query(self, jobs_schema: dict) -> None:
        result = QueryValidator().validate({"size": 10}, jobs_schema)
        assert result.is_valid is False
        assert result.score == INVALID_SCORE
        assert result.syntax_errors == (
            "Basic syntax error: query object missing or malformed.",
        )
        assert result.recommendations == ("Query is fundamentally flawed.",)

    def test_diagnostics_do_not_change_score(
        self, full_validator: QueryValidator, jobs_schema: dict
    ) -> None:
        query = {
            "query": {
                "bool": {
                    "must": [{"wildcard": {"job_titel": "*dev"}}],
                    "filter": [{"script": {"script": "true"}}],
                }
            }
        }
        result = full_validator.validate(query, jobs_schema)
        assert result.is_valid is True
        assert result.score == VALID_SCORE
        assert result.schema_errors == ("Unknown field: 'job_titel'",)
        assert len(result.performance_warnings) == 1
        assert len(result.security_issues) == 1

    def test_to_dict_uses_camel_case(self, jobs_schema: dict) -> None:
        data = QueryValidator().validate(SF_QUERY, jobs_schema).to_dict()
        assert data["isValid"] is True
        assert data["syntaxErrors"] == []
        assert data["score"] == VALID_SCORE
