"""Command-line surface (examsim)."""
