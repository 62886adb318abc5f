from __future__ import annotations

"""
Entry Filtering Engine.

Regex-based inclusion/exclusion logic applied by the filesystem sources
before entries reach the tree. Filtering happens at ingestion time; the
tree-state core never sees excluded entries.
"""

import re
from typing import List

# -----------------------------------------------------------------------------
# CONFIGURATION DEFAULTS
# -----------------------------------------------------------------------------

def default_include_patterns() -> List[str]:
    """
    Get the default inclusion regex list.

    Returns:
        List[str]: List of regex strings that match everything by default.
    """
    return [".*"]


def default_exclude_patterns() -> List[str]:
    """
    Get the system-level exclusion patterns.

    Identifies compiled artifacts and tool directories that clutter a
    browsable tree.

    Returns:
        List[str]: List of regex patterns for common exclusions.
    """
    return [
        r".*\.pyc$",
        r"^(__pycache__|\.git|\.idea|\.vscode|node_modules)$",
    ]

# -----------------------------------------------------------------------------
# PATTERN COMPILATION AND MATCHING
# -----------------------------------------------------------------------------

def compile_patterns(patterns: List[str]) -> List[re.Pattern]:
    """
    Transform raw regex strings into compiled Pattern objects.

    Malformed regex strings are discarded so a bad user pattern cannot
    break tree loading.

    Args:
        patterns: List of raw regex strings.

    Returns:
        List[re.Pattern]: Compiled regex objects.
    """
    compiled: List[re.Pattern] = []
    for p in patterns:
        try:
            compiled.append(re.compile(p))
        except re.error:
            continue
    return compiled


def matches_any(name: str, compiled_patterns: List[re.Pattern]) -> bool:
    """
    Verify if a string matches at least one compiled regex pattern.

    Args:
        name: Filename or directory name to evaluate.
        compiled_patterns: Pre-compiled regex objects.

    Returns:
        bool: True if any match is found, False otherwise.
    """
    return any(rx.search(name) for rx in compiled_patterns)


def matches_include(name: str, include_patterns: List[re.Pattern]) -> bool:
    """
    Verify if a string satisfies the inclusion whitelist.

    Args:
        name: Filename to evaluate.
        include_patterns: Compiled inclusion regex objects.

    Returns:
        bool: True if matched, False if the list is empty or no match occurs.
    """
    if not include_patterns:
        return False
    return any(rx.search(name) for rx in include_patterns)


def is_hidden(name: str) -> bool:
    """Dot-prefixed entries are hidden on POSIX systems."""
    return name.startswith(".")
