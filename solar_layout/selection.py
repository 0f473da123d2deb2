"""
selection.py — Pick the best N candidates for a requested panel count.

Ranking is by yearly energy (highest first), ties broken by segment
index, then by generation order.  The ranking of a candidate tuple is
cached, so scrubbing the panel slider only slices a precomputed order.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Sequence

from solar_layout.panel_grid import PanelCandidate


@dataclass(frozen=True)
class Selection:
    requested_count: int
    chosen: tuple[PanelCandidate, ...]
    total_yearly_energy_kwh: float

    @property
    def count(self) -> int:
        return len(self.chosen)

    def per_segment(self) -> dict[int, int]:
        """Number of chosen panels on each segment index."""
        counts: dict[int, int] = {}
        for c in self.chosen:
            counts[c.segment_index] = counts.get(c.segment_index, 0) + 1
        return counts


@lru_cache(maxsize=32)
def _ranking(candidates: tuple[PanelCandidate, ...]) -> tuple[int, ...]:
    return tuple(sorted(
        range(len(candidates)),
        key=lambda i: (-candidates[i].yearly_energy_kwh, candidates[i].segment_index, i),
    ))


def rank_candidates(candidates: Sequence[PanelCandidate]) -> list[PanelCandidate]:
    """All candidates in selection order."""
    cands = tuple(candidates)
    return [cands[i] for i in _ranking(cands)]


def clamp_count(requested_count: int, max_panels: int, available: int) -> int:
    return max(0, min(int(requested_count), max_panels, available))


def select(
    candidates: Sequence[PanelCandidate],
    requested_count: int,
    max_panels: int,
) -> Selection:
    """
    Top candidates for *requested_count*, clamped to
    ``[0, min(max_panels, len(candidates))]``.

    Pure; the chosen set for a smaller count is always a prefix of the
    chosen set for a larger one.
    """
    cands = tuple(candidates)
    n = clamp_count(requested_count, max_panels, len(cands))
    order = _ranking(cands)[:n]
    chosen = tuple(cands[i] for i in order)
    return Selection(
        requested_count=requested_count,
        chosen=chosen,
        total_yearly_energy_kwh=sum(c.yearly_energy_kwh for c in chosen),
    )


def select_for_profile(profile, requested_count: int) -> Selection:
    """Shortcut for ``select(profile.candidates, n, profile.max_panels)``."""
    return select(profile.candidates, requested_count, profile.max_panels)
