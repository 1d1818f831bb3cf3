"""Labeled stdout logging and the JSON Lines error log."""
