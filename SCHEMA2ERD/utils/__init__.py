"""Shared utilities (logging, error handling)."""
