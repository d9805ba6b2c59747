"""Output formatting for leakview."""
