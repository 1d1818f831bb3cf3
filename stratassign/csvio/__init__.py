"""CSV input/output adapters (pandas based)."""
