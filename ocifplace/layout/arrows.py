"""
Arrow Endpoint Derivation

Arrow nodes are not simulated: they render a relation, so their position
and stored start/end coordinates follow the two nodes they connect. This
runs once after the simulation and again after normalization.
"""

import logging
from typing import Dict, Optional, Tuple

from ..document.abstraction import ARROW_NODE_TYPE, Graph, Node, Relation

logger = logging.getLogger(__name__)


def _resolve_arrow(relation: Relation, index: Dict[str, Node]
                   ) -> Optional[Tuple[Node, Node, Node]]:
    """Return (arrow, start, end) nodes, or None if the wiring is incomplete."""
    ref = relation.edge_reference()
    if ref is None or not ref.arrow_id:
        return None
    if not ref.start_id or not ref.end_id:
        logger.debug("Relation %s: arrow %s has no start/end", relation.id, ref.arrow_id)
        return None

    arrow = index.get(ref.arrow_id)
    start = index.get(ref.start_id)
    end = index.get(ref.end_id)
    if arrow is None or start is None or end is None:
        logger.debug("Relation %s: unknown node in arrow wiring", relation.id)
        return None
    if not start.has_position or not end.has_position:
        logger.debug("Relation %s: endpoint without position", relation.id)
        return None

    return arrow, start, end


def update_arrow_endpoints(graph: Graph) -> int:
    """
    Synchronize arrow nodes with the nodes they connect.

    For every ``@ocif/rel/edge`` relation the arrow node is moved to the
    midpoint of its start and end nodes, and the arrow's
    ``@ocif/node/arrow`` entry gets ``start``/``end`` set to their
    positions. Incomplete wiring skips that relation.

    Args:
        graph: Graph to update in place

    Returns:
        Number of arrows updated
    """
    index = graph.node_index()
    updated = 0

    for relation in graph.relations:
        resolved = _resolve_arrow(relation, index)
        if resolved is None:
            continue
        arrow, start, end = resolved

        sx, sy = start.position[0], start.position[1]
        ex, ey = end.position[0], end.position[1]

        arrow.position = [(sx + ex) / 2, (sy + ey) / 2]

        arrow_data = arrow.get_extension(ARROW_NODE_TYPE)
        if arrow_data is not None:
            arrow_data["start"] = [sx, sy]
            arrow_data["end"] = [ex, ey]

        updated += 1

    return updated
