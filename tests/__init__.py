"""Test suite for ssg-cache."""
