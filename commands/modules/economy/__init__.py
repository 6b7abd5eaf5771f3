"""Economy commands."""
