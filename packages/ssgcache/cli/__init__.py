"""Command-line interface for ssg-cache."""
