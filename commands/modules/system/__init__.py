"""System commands."""
