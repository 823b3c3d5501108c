"""HTTP API for the NL-to-Elasticsearch query agent."""

__version__ = "0.1.0"
