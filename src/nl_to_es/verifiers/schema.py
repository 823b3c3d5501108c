"""
Schema Verifier
===============

Reports fields referenced by a query that the index schema does not map.
"""

from typing import Iterator

from nl_to_es.models import VerificationResult, VerificationStatus
from nl_to_es.verifiers.base import Verifier

# Leaf clauses whose keys are field names
FIELD_KEYED_CLAUSES = {
    "term",
    "terms",
    "match",
    "match_phrase",
    "match_phrase_prefix",
    "prefix",
    "wildcard",
    "regexp",
    "fuzzy",
    "range",
}

# Clauses that name their field in a "field" (or "fields") value
FIELD_VALUED_CLAUSES = {
    "exists",
    "multi_match",
    "date_histogram",
    "histogram",
    "avg",
    "sum",
    "min",
    "max",
    "cardinality",
    "value_count",
    "stats",
}


def known_fields(properties: dict, prefix: str = "") -> set[str]:
    """Flatten a mapping into dotted field paths, including multi-fields."""
    fields: set[str] = set()
    for name, mapping in properties.items():
        path = f"{prefix}{name}"
        fields.add(path)
        if not isinstance(mapping, dict):
            continue
        for sub in (mapping.get("fields") or {}):
            fields.add(f"{path}.{sub}")
        if isinstance(mapping.get("properties"), dict):
            fields |= known_fields(mapping["properties"], prefix=f"{path}.")
    return fields


def sort_fields(sort) -> Iterator[str]:
    """Yield field names used in a sort specification."""
    for item in sort if isinstance(sort, list) else [sort]:
        if isinstance(item, str) and item != "_score":
            yield item
        elif isinstance(item, dict):
            yield from (k for k in item if k != "_score")


def referenced_fields(node) -> Iterator[str]:
    """Yield field names referenced anywhere in a query or aggregation tree."""
    if isinstance(node, list):
        for item in node:
            yield from referenced_fields(item)
        return
    if not isinstance(node, dict):
        return

    for key, value in node.items():
        if key == "terms" and isinstance(value, dict) and isinstance(value.get("field"), str):
            yield value["field"]
        elif key in FIELD_KEYED_CLAUSES and isinstance(value, dict):
            yield from (k for k in value if k not in ("boost", "_name"))
        elif key in FIELD_VALUED_CLAUSES and isinstance(value, dict):
            if isinstance(value.get("field"), str):
                yield value["field"]
            for field in value.get("fields") or []:
                if isinstance(field, str):
                    yield field.split("^")[0]
        else:
            yield from referenced_fields(value)


class SchemaVerifier(Verifier):
    """Flags fields that are not present in the index mapping."""

    category = "schema"

    @property
    def name(self) -> str:
        return "SchemaVerifier"

    def verify(self, query: dict, schema: dict) -> VerificationResult:
        properties = (schema.get("mappings") or {}).get("properties") or {}
        if not properties:
            return VerificationResult(
                verifier_name=self.name,
                status=VerificationStatus.SKIPPED,
                message="Schema has no field mappings",
            )

        available = known_fields(properties)
        unknown = sorted(
            {
                field
                for field in (
                    *referenced_fields(query.get("query")),
                    *referenced_fields(query.get("aggs")),
                    *sort_fields(query.get("sort") or []),
                )
                if field not in available
            }
        )

        if unknown:
            errors = [f"Unknown field: '{field}'" for field in unknown]
            return VerificationResult(
                verifier_name=self.name,
                status=VerificationStatus.FAILED,
                message=f"Schema validation failed: {'; '.join(errors)}",
                details={"errors": errors},
            )

        return VerificationResult(
            verifier_name=self.name,
            status=VerificationStatus.PASSED,
            message="All referenced fields are mapped",
        )
