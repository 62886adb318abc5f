from __future__ import annotations

"""
Expansion State Store.

Owns the set of markers describing which folders are open. Eager trees start
fully expanded and record the collapsed paths; lazy trees start fully
collapsed and record the expanded node identities. Both polarities share one
marker set and expose the same predicates.
"""

import logging
from enum import Enum
from typing import FrozenSet, Hashable, Iterable, Set

from dirtreestate.core.paths import ancestor_paths
from dirtreestate.domain.errors import UnsupportedOperation

logger = logging.getLogger(__name__)


class ExpansionMode(str, Enum):
    """Polarity of the marker set."""
    COLLAPSED_SET = "collapsed_set"  # eager: markers are collapsed paths
    EXPANDED_SET = "expanded_set"    # lazy: markers are expanded node ids


class ExpansionStore:
    """
    Explicitly owned expansion state for one tree.

    Every operation is total over its domain: unknown markers are accepted
    and stale markers (paths or ids that no longer exist) are inert.
    """

    def __init__(self, mode: ExpansionMode = ExpansionMode.COLLAPSED_SET) -> None:
        self.mode = mode
        self._markers: Set[Hashable] = set()

    # -------------------------------------------------------------------------
    # Predicates
    # -------------------------------------------------------------------------
    def is_expanded(self, marker: Hashable) -> bool:
        if self.mode is ExpansionMode.COLLAPSED_SET:
            return marker not in self._markers
        return marker in self._markers

    def is_collapsed(self, marker: Hashable) -> bool:
        return not self.is_expanded(marker)

    def snapshot(self) -> FrozenSet[Hashable]:
        """Immutable copy of the raw marker set."""
        return frozenset(self._markers)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------
    def toggle(self, marker: Hashable) -> bool:
        """
        Flip a single marker. Descendants and ancestors are untouched.

        Returns:
            bool: The new expanded state of the marker.
        """
        if marker in self._markers:
            self._markers.discard(marker)
        else:
            self._markers.add(marker)
        expanded = self.is_expanded(marker)
        logger.debug(f"Toggled {marker!r}: expanded={expanded}")
        return expanded

    def expand(self, marker: Hashable) -> None:
        if self.mode is ExpansionMode.COLLAPSED_SET:
            self._markers.discard(marker)
        else:
            self._markers.add(marker)

    def collapse(self, marker: Hashable) -> None:
        if self.mode is ExpansionMode.COLLAPSED_SET:
            self._markers.add(marker)
        else:
            self._markers.discard(marker)

    def expand_many(self, markers: Iterable[Hashable]) -> None:
        """Expand every marker. Idempotent."""
        for marker in markers:
            self.expand(marker)

    def expand_ancestors_of(self, path: str) -> None:
        """
        Reveal `path` by expanding each of its proper-ancestor paths.

        Path markers only exist in eager mode. Lazy trees resolve the ancestor
        identities through the TreeIndex and call expand_many instead.
        """
        if self.mode is not ExpansionMode.COLLAPSED_SET:
            raise UnsupportedOperation("Lazy trees expand ancestors by node identity")
        self.expand_many(ancestor_paths(path))

    def expand_all(self) -> None:
        """
        Open every folder by clearing the collapsed set.

        Raises:
            UnsupportedOperation: In lazy mode, where the tree is unbounded.
        """
        if self.mode is not ExpansionMode.COLLAPSED_SET:
            raise UnsupportedOperation("expand_all is undefined for lazily fetched trees")
        self._markers.clear()

    def collapse_all(self, markers: Iterable[Hashable] = ()) -> None:
        """
        Close every folder.

        Eager mode records each given folder marker as collapsed; lazy mode
        simply forgets every expanded identity.
        """
        if self.mode is ExpansionMode.COLLAPSED_SET:
            self._markers.update(markers)
        else:
            self._markers.clear()

    def clear(self) -> None:
        """Return to the mode's default state."""
        self._markers.clear()
