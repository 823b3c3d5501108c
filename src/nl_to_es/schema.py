"""
Index Schemas
=============

Default Elasticsearch mappings used when no schema has been configured.
"""

PLACEHOLDER_SCHEMA = {
    "mappings": {"properties": {}},
    "version": "1.0",
    "lastUpdated": None,
    "indexName": "default_index",
}

_TEXT_WITH_KEYWORD = {"type": "text", "fields": {"keyword": {"type": "keyword"}}}

JOBS_INDEX_SCHEMA = {
    "mappings": {
        "properties": {
            "job_title": _TEXT_WITH_KEYWORD,
            "company_name": _TEXT_WITH_KEYWORD,
            "location": _TEXT_WITH_KEYWORD,
            "standardized_geo_point": {"type": "geo_point"},
            "job_description": {"type": "text"},
            "skills": {
                "type": "nested",
                "properties": {"name": _TEXT_WITH_KEYWORD},
            },
            "raw_salary": {"type": "long"},
            "posted_date": {"type": "date"},
            "crawled_date": {"type": "date"},
            "url": {"type": "keyword"},
            "is_deleted": _TEXT_WITH_KEYWORD,
            "is_duplicate": {"type": "boolean"},
        }
    },
    "version": "7.x",
    "lastUpdated": "2024-01-01T00:00:00Z",
    "indexName": "jobs",
}
