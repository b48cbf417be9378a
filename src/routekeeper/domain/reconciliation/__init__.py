"""Association reconciliation: diff the catalog against existing associations.

Flow:
1) load an immutable snapshot of providers, models, associations and aliases
2) compute additions (template matches not yet associated) and removals
   (associations whose provider-side model left the catalog)
3) show the preview, then apply exactly that preview item by item
"""

from __future__ import annotations

from .apply import apply_preview
from .engine import AutoActionResult, AutoTrigger, ReconciliationEngine, ReconciliationPolicy
from .plan import (
    AdditionCandidate,
    ApplyResult,
    ItemFailure,
    ReconciliationPreview,
    RemovalCandidate,
    RemovalReason,
)
from .preview import compute_preview_additions, compute_preview_removals

__all__ = [
    "AdditionCandidate",
    "ApplyResult",
    "AutoActionResult",
    "AutoTrigger",
    "ItemFailure",
    "ReconciliationEngine",
    "ReconciliationPolicy",
    "ReconciliationPreview",
    "RemovalCandidate",
    "RemovalReason",
    "apply_preview",
    "compute_preview_additions",
    "compute_preview_removals",
]
