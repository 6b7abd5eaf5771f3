"""Fun commands."""
