"""
Force-Directed Canvas Layout

Uses a physics-based simulation to position canvas nodes by balancing
repulsion between every pair of nodes with spring attraction along
relations, plus a weak gravity toward the canvas center so disconnected
components do not drift apart.

The classic Fruchterman-Reingold force model is used:
- Repulsion  k^2 / d  between every node pair
- Attraction d^2 / k  along every relation, split between both endpoints
- k = sqrt(canvas area / node count), the ideal inter-node distance

The simulation always runs the configured number of iterations; there is
no convergence test.
"""

import logging
import math
import random
from dataclasses import asdict, dataclass, field
from typing import Callable, Dict, List, Optional, Set, Tuple

from ..document.abstraction import Graph, Node, as_vector
from .arrows import update_arrow_endpoints
from .normalization import normalize_positions

logger = logging.getLogger(__name__)


@dataclass
class LayoutConfig:
    """Configuration for force-directed layout."""
    # Canvas
    canvas_width: float = 1000.0
    canvas_height: float = 800.0
    padding: float = 50.0  # Minimum margin between node centers and canvas edge

    # Simulation
    iterations: int = 100
    gravity_strength: float = 0.1  # Pull toward center per unit of offset
    max_step_displacement: float = 50.0  # Per-axis clamp on movement per iteration

    # Sizing
    default_node_size: Tuple[float, float] = (100.0, 100.0)
    default_arrow_size: Tuple[float, float] = (0.0, 0.0)  # Arrows render as connectors

    @property
    def center(self) -> Tuple[float, float]:
        """Canvas center point."""
        return (self.canvas_width / 2, self.canvas_height / 2)

    def ideal_distance(self, node_count: int) -> float:
        """Ideal inter-node distance k for a graph of ``node_count`` nodes."""
        return math.sqrt((self.canvas_width * self.canvas_height) / max(node_count, 1))

    def validate(self):
        """Raise ValueError if the configuration cannot produce a layout."""
        if self.canvas_width <= 0 or self.canvas_height <= 0:
            raise ValueError(
                f"Canvas size must be positive, got "
                f"{self.canvas_width}x{self.canvas_height}"
            )
        if self.padding < 0:
            raise ValueError(f"Padding must be non-negative, got {self.padding}")
        if 2 * self.padding >= min(self.canvas_width, self.canvas_height):
            raise ValueError(
                f"Padding {self.padding} leaves no drawable area on a "
                f"{self.canvas_width}x{self.canvas_height} canvas"
            )
        if not isinstance(self.iterations, int) or self.iterations < 0:
            raise ValueError(f"Iterations must be a non-negative integer, got {self.iterations!r}")
        if self.gravity_strength < 0:
            raise ValueError(f"Gravity strength must be non-negative, got {self.gravity_strength}")
        if self.max_step_displacement <= 0:
            raise ValueError(
                f"Max step displacement must be positive, got {self.max_step_displacement}"
            )
        for name in ("default_node_size", "default_arrow_size"):
            size = getattr(self, name)
            if len(size) != 2 or any(s < 0 for s in size):
                raise ValueError(f"{name} must be two non-negative numbers, got {size!r}")

    def to_dict(self) -> Dict:
        """Export as a plain mapping (sizes as lists)."""
        d = asdict(self)
        d["default_node_size"] = list(self.default_node_size)
        d["default_arrow_size"] = list(self.default_arrow_size)
        return d


@dataclass
class LayoutState:
    """Current state of a layout run."""
    positions: Dict[str, Tuple[float, float]] = field(default_factory=dict)  # id -> (x, y)
    iteration: int = 0
    max_displacement: float = 0.0  # Largest per-node move in the last iteration
    ideal_distance: float = 0.0
    seeded: int = 0  # Nodes that received a random start position
    edge_count: int = 0
    scale: float = 1.0  # Normalization scale factor
    arrows_updated: int = 0
    completed: bool = False


def seed_positions(nodes: List[Node], config: LayoutConfig,
                   rng: random.Random) -> int:
    """
    Give every node a usable position and size.

    Nodes without a finite 2-D position get a uniform random one inside the
    padded canvas. Missing or malformed sizes fall back to the default node
    size, or the arrow size for arrow nodes.

    Returns:
        Number of nodes whose position was seeded
    """
    seeded = 0
    span_x = config.canvas_width - 2 * config.padding
    span_y = config.canvas_height - 2 * config.padding

    for node in nodes:
        position = as_vector(node.position)
        if position is None:
            position = [
                config.padding + rng.random() * span_x,
                config.padding + rng.random() * span_y,
            ]
            seeded += 1
        node.position = position

        size = as_vector(node.size)
        if size is None:
            default = config.default_arrow_size if node.is_arrow else config.default_node_size
            size = [float(default[0]), float(default[1])]
        node.size = size

    return seeded


def build_adjacency(graph: Graph) -> Dict[str, Set[str]]:
    """
    Build the undirected adjacency map used for attraction.

    Only relations whose ``source`` and ``target`` both name nodes in the
    graph count. Arrow wiring (``@ocif/rel/edge`` start/end) is not part of
    the physical adjacency.
    """
    known = {node.id for node in graph.nodes}
    adjacency: Dict[str, Set[str]] = {}

    for relation in graph.relations:
        if not relation.has_endpoints:
            continue
        source, target = relation.source_id, relation.target_id
        if source not in known or target not in known:
            logger.debug("Relation %s references unknown node, skipped", relation.id)
            continue
        if source == target:
            continue
        adjacency.setdefault(source, set()).add(target)
        adjacency.setdefault(target, set()).add(source)

    return adjacency


def repulsion_contribution(p1: Tuple[float, float], p2: Tuple[float, float],
                           k: float) -> Optional[Tuple[float, float]]:
    """
    Repulsive force on the node at ``p2`` away from ``p1``.

    The node at ``p1`` receives the opposite force. Coincident points give
    no contribution.
    """
    dx = p2[0] - p1[0]
    dy = p2[1] - p1[1]
    dist = math.sqrt(dx * dx + dy * dy)
    if dist == 0:
        return None
    force = k * k / dist
    return (dx / dist * force, dy / dist * force)


def attraction_contribution(p1: Tuple[float, float], p2: Tuple[float, float],
                            k: float) -> Optional[Tuple[float, float]]:
    """
    Full-strength spring force on the node at ``p1`` toward ``p2``.

    Coincident points give no contribution.
    """
    dx = p2[0] - p1[0]
    dy = p2[1] - p1[1]
    dist = math.sqrt(dx * dx + dy * dy)
    if dist == 0:
        return None
    force = dist * dist / k
    return (dx / dist * force, dy / dist * force)


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


class ForceDirectedLayout:
    """
    Lay out a canvas graph using a force-directed simulation.

    Forces applied each iteration:
    1. Repulsion - every node pair pushes apart
    2. Attraction - related nodes pull together
    3. Gravity - every node is pulled toward the canvas center

    The graph is mutated in place: node positions and sizes are filled in,
    and arrow nodes are re-derived from the nodes they connect.
    """

    def __init__(
        self,
        graph: Graph,
        config: Optional[LayoutConfig] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ):
        if graph is None:
            raise TypeError("ForceDirectedLayout requires a graph, got None")
        self.graph = graph
        self.config = config or LayoutConfig()
        self.config.validate()
        self.rng = rng if rng is not None else random.Random(seed)

        self.state = LayoutState()
        self._prepared = False
        self._k = 0.0
        self._edges: List[Tuple[int, int]] = []

    def prepare(self) -> LayoutState:
        """Seed positions and build the adjacency edge list.

        Safe to call more than once; only the first call has an effect.
        """
        if self._prepared:
            return self.state

        nodes = self.graph.nodes
        self.state.seeded = seed_positions(nodes, self.config, self.rng)

        adjacency = build_adjacency(self.graph)
        index_of: Dict[str, int] = {}
        for i, node in enumerate(nodes):
            index_of.setdefault(node.id, i)

        # Each undirected edge once, in a stable order
        self._edges = []
        for i, node in enumerate(nodes):
            if index_of[node.id] != i:
                continue
            for other in sorted(adjacency.get(node.id, ())):
                j = index_of[other]
                if j > i:
                    self._edges.append((i, j))

        self._k = self.config.ideal_distance(len(nodes))
        self.state.ideal_distance = self._k
        self.state.edge_count = len(self._edges)
        self._snapshot()
        self._prepared = True

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Force-directed layout start: nodes=%d edges=%d seeded=%d k=%.2f iterations=%d",
                len(nodes), len(self._edges), self.state.seeded, self._k,
                self.config.iterations,
            )
            logger.debug(
                "Layout config: canvas=%.0fx%.0f padding=%.1f gravity=%.3f max_step=%.1f",
                self.config.canvas_width, self.config.canvas_height,
                self.config.padding, self.config.gravity_strength,
                self.config.max_step_displacement,
            )

        return self.state

    def run(self, callback: Optional[Callable[[LayoutState], None]] = None
            ) -> LayoutState:
        """
        Run the full layout: simulate, derive arrows, fit to the canvas.

        Args:
            callback: Optional function called after each iteration with the
                current state

        Returns:
            Final LayoutState; the graph itself holds the resulting positions
        """
        self.prepare()

        log_every = 10
        for iteration in range(self.config.iterations):
            self.state.iteration = iteration
            self.step()

            if logger.isEnabledFor(logging.DEBUG) and iteration % log_every == 0:
                logger.debug(
                    "Iteration %d: max_displacement=%.3f",
                    iteration, self.state.max_displacement,
                )

            if callback:
                callback(self.state)

        self.state.arrows_updated = update_arrow_endpoints(self.graph)

        result = normalize_positions(self.graph, self.config)
        self.state.scale = result.scale
        if result.applied:
            self.state.arrows_updated = result.arrows_updated

        self._snapshot()
        self.state.completed = True

        logger.info(
            "Layout complete: nodes=%d edges=%d iterations=%d scale=%.3f arrows=%d",
            len(self.graph.nodes), len(self._edges), self.config.iterations,
            self.state.scale, self.state.arrows_updated,
        )
        return self.state

    def step(self) -> float:
        """Run one simulation iteration.

        Returns:
            Largest displacement of any node in this iteration
        """
        self.prepare()
        nodes = self.graph.nodes
        if not nodes:
            self.state.max_displacement = 0.0
            return 0.0

        forces = self._calculate_forces()
        max_movement = self._apply_forces(forces)

        self.state.max_displacement = max_movement
        self._snapshot()
        return max_movement

    def _calculate_forces(self) -> List[List[float]]:
        """Calculate the net force on every node, indexed like graph.nodes."""
        nodes = self.graph.nodes
        forces = [[0.0, 0.0] for _ in nodes]
        k = self._k

        # 1. Repulsion between every unordered pair
        count = len(nodes)
        for i in range(count):
            p1 = nodes[i].position
            for j in range(i + 1, count):
                f = repulsion_contribution(p1, nodes[j].position, k)
                if f is None:
                    continue
                forces[i][0] -= f[0]
                forces[i][1] -= f[1]
                forces[j][0] += f[0]
                forces[j][1] += f[1]

        # 2. Attraction along relations, half to each endpoint
        for i, j in self._edges:
            f = attraction_contribution(nodes[i].position, nodes[j].position, k)
            if f is None:
                continue
            forces[i][0] += f[0] * 0.5
            forces[i][1] += f[1] * 0.5
            forces[j][0] -= f[0] * 0.5
            forces[j][1] -= f[1] * 0.5

        # 3. Gravity toward the canvas center
        cx, cy = self.config.center
        gravity = self.config.gravity_strength
        for i, node in enumerate(nodes):
            forces[i][0] += (cx - node.position[0]) * gravity
            forces[i][1] += (cy - node.position[1]) * gravity

        return forces

    def _apply_forces(self, forces: List[List[float]]) -> float:
        """Move nodes by their clamped net force and keep them on the canvas."""
        config = self.config
        max_step = config.max_step_displacement
        min_x, max_x = config.padding, config.canvas_width - config.padding
        min_y, max_y = config.padding, config.canvas_height - config.padding
        max_movement = 0.0

        for node, (fx, fy) in zip(self.graph.nodes, forces):
            x, y = node.position[0], node.position[1]
            new_x = _clamp(x + _clamp(fx, -max_step, max_step), min_x, max_x)
            new_y = _clamp(y + _clamp(fy, -max_step, max_step), min_y, max_y)

            movement = math.sqrt((new_x - x) ** 2 + (new_y - y) ** 2)
            max_movement = max(max_movement, movement)

            node.position = [new_x, new_y]

        return max_movement

    def _snapshot(self):
        self.state.positions = {
            node.id: (node.position[0], node.position[1])
            for node in self.graph.nodes if node.has_position
        }


def apply_auto_layout(
    graph: Graph,
    config: Optional[LayoutConfig] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
) -> Graph:
    """
    Lay out ``graph`` in place and return it.

    Args:
        graph: Graph to position
        config: Layout configuration (defaults to a 1000x800 canvas)
        rng: Random generator used to seed missing positions
        seed: Seed for a fresh generator when ``rng`` is not given

    Returns:
        The same graph, with every node positioned inside the canvas
    """
    if graph is None:
        raise TypeError("apply_auto_layout requires a graph, got None")
    ForceDirectedLayout(graph, config, rng=rng, seed=seed).run()
    return graph
