"""Grid cache - Memoized grids keyed by analysis identity."""

import weakref
from typing import Dict, List, Optional

from ..core import AnalysisResult, GridMeasure
from .grid import GridBuilder, GridSettings


class GridCache:
    """Remember built grids per (analysis, settings).

    Entries are held in a ``WeakKeyDictionary`` so they disappear together
    with the analysis they were built from. Grids are rebuilt wholesale on a
    miss, never patched.
    """

    def __init__(self, builder: Optional[GridBuilder] = None):
        self.builder = builder or GridBuilder()
        self._entries: "weakref.WeakKeyDictionary[AnalysisResult, Dict[GridSettings, List[GridMeasure]]]" = (
            weakref.WeakKeyDictionary()
        )
        self.hits = 0
        self.misses = 0

    def get_grid(
        self,
        result: AnalysisResult,
        settings: Optional[GridSettings] = None,
    ) -> List[GridMeasure]:
        """Return the grid for ``result`` under ``settings``, building it once."""
        settings = settings or GridSettings()
        per_result = self._entries.setdefault(result, {})

        grid = per_result.get(settings)
        if grid is not None:
            self.hits += 1
            return grid

        self.misses += 1
        grid = self.builder.build(result, settings)
        per_result[settings] = grid
        return grid

    def invalidate(self, result: AnalysisResult) -> int:
        """Drop every grid built from ``result``.

        Returns:
            Number of entries removed
        """
        removed = self._entries.pop(result, {})
        return len(removed)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> Dict[str, int]:
        """Get cache statistics."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "entries": sum(len(v) for v in self._entries.values()),
        }
