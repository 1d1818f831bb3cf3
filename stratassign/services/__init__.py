"""Validation, assignment and run orchestration services."""
