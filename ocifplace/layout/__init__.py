"""Force-directed canvas layout with arrow derivation and bounds fitting."""

from .force_directed import (
    ForceDirectedLayout,
    LayoutConfig,
    LayoutState,
    apply_auto_layout,
    attraction_contribution,
    build_adjacency,
    repulsion_contribution,
    seed_positions,
)
from .arrows import update_arrow_endpoints
from .normalization import (
    NormalizationResult,
    compute_bounding_box,
    compute_scale_factor,
    normalize_positions,
)
from .profiles import (
    LayoutConfigError,
    get_profile,
    list_profiles,
    load_layout_config,
)

__all__ = [
    "ForceDirectedLayout",
    "LayoutConfig",
    "LayoutState",
    "apply_auto_layout",
    "attraction_contribution",
    "build_adjacency",
    "repulsion_contribution",
    "seed_positions",
    "update_arrow_endpoints",
    "NormalizationResult",
    "compute_bounding_box",
    "compute_scale_factor",
    "normalize_positions",
    "LayoutConfigError",
    "get_profile",
    "list_profiles",
    "load_layout_config",
]
