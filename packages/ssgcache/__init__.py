"""ssg-cache: build-time memoizing cache for static-site generation."""

__version__ = "0.1.0"
