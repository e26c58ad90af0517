"""Utility functions for filesystem operations.

Provides path component flattening.
"""

import re

_PATH_SEPARATORS = re.compile(r"[/\\]")


def flatten_path_component(component: str, separator: str = "-") -> str:
    """
    Flatten a string into a single filesystem path component.

    Replaces path separators with ``separator`` so the result never
    introduces a subdirectory.

    Args:
        component: String to flatten
        separator: Replacement for path separator characters

    Returns:
        Single-component filename string

    Example:
        >>> flatten_path_component("posts/2024/hello")
        'posts-2024-hello'
        >>> flatten_path_component("valid_name-123")
        'valid_name-123'
    """
    return _PATH_SEPARATORS.sub(separator, component)
