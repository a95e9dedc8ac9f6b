"""SCHEMA2ERD - interactive entity-relationship diagrams from Rails schema files."""

__version__ = "1.0.0"
