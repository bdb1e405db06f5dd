# quadtree.py
"""
Spatial index used for neighbor queries.

The QuadTree is stored as an arena of nodes in flat NumPy arrays instead of
linked node objects: node i has bounds `bounds[i]`, depth `depths[i]` and
child node indices `children[i]` (-1 means "no child"). The arena is
cleared and reused on every rebuild, so a rebuild never reallocates once it
has grown to the population's working size.
"""
import logging
import numpy as np
from typing import List, Tuple
from constants import QUADTREE_CAPACITY, QUADTREE_MAX_DEPTH, COLLISION_MARGIN

# --- Data Contracts ---
#
# class QuadTree:
#   - build(self, positions, radii, width, height) -> None:
#     - Inputs:
#       - positions: (N, 2) float array of particle centers.
#       - radii: (N,) float array of particle radii.
#       - width, height: extent of the root node.
#     - Side Effects: Resets the arena and inserts every particle index.
#
#   - insert(self, index: int) -> None
#   - query(self, index: int) -> List[int]:
#     - Outputs: every particle index that may overlap particle `index`,
#       the particle itself included.
#
#   - candidates(self) -> Tuple[np.ndarray, np.ndarray]:
#     - Outputs: CSR layout (offsets of shape (N+1,), indices) of the
#       query results for every particle, ready for the force kernel.
#
#   - Invariants: a particle whose expanded bounding box straddles a
#     node's midline is stored at that node, never in a child.

NO_CHILD = -1


class QuadTree:
    """
    A region quadtree over the viewport, rebuilt from scratch every tick.
    """
    def __init__(self, capacity: int = QUADTREE_CAPACITY, max_depth: int = QUADTREE_MAX_DEPTH,
                 margin: float = COLLISION_MARGIN, initial_nodes: int = 64):
        self.capacity = capacity
        self.max_depth = max_depth
        # Bounding boxes are grown by half the collision margin on every
        # side, so two particles in disjoint quadrants are always further
        # apart than r1 + r2 + margin.
        self.pad = margin / 2
        self.bounds = np.zeros((initial_nodes, 4), dtype=np.float64)  # x, y, w, h
        self.children = np.full((initial_nodes, 4), NO_CHILD, dtype=np.int32)
        self.depths = np.zeros(initial_nodes, dtype=np.int32)
        self.items: List[List[int]] = [[] for _ in range(initial_nodes)]
        self.node_count = 0
        self._positions = np.zeros((0, 2), dtype=np.float64)
        self._radii = np.zeros(0, dtype=np.float64)

    def reset(self, x: float, y: float, width: float, height: float) -> None:
        """Clears the arena and creates a fresh root node covering the given region."""
        for i in range(self.node_count):
            self.items[i].clear()
        self.node_count = 0
        self._new_node(x, y, width, height, 0)

    def build(self, positions: np.ndarray, radii: np.ndarray, width: float, height: float) -> None:
        """Rebuilds the index over the given particle arrays."""
        self._positions = positions
        self._radii = radii
        self.reset(0.0, 0.0, width, height)
        for i in range(positions.shape[0]):
            self.insert(i)
        logging.debug(
            f"QuadTree rebuilt: {positions.shape[0]} particles in {self.node_count} nodes."
        )

    def insert(self, index: int) -> None:
        self._insert(0, index)

    def query(self, index: int) -> List[int]:
        result: List[int] = []
        self._retrieve(0, index, result)
        return result

    def candidates(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Runs `query` for every indexed particle and packs the results.

        Returns:
            Tuple[np.ndarray, np.ndarray]: `offsets` (int64, N+1) and
            `indices` (int64); the candidates of particle i are
            `indices[offsets[i]:offsets[i + 1]]`.
        """
        count = self._positions.shape[0]
        offsets = np.zeros(count + 1, dtype=np.int64)
        flat: List[int] = []
        for i in range(count):
            self._retrieve(0, i, flat)
            offsets[i + 1] = len(flat)
        return offsets, np.array(flat, dtype=np.int64)

    def leaf_bounds(self) -> np.ndarray:
        """Bounds (x, y, w, h) of every node without children, for debug overlays."""
        active = self.children[:self.node_count, 0] == NO_CHILD
        return self.bounds[:self.node_count][active]

    def _new_node(self, x: float, y: float, width: float, height: float, depth: int) -> int:
        if self.node_count == self.bounds.shape[0]:
            self._grow()
        node = self.node_count
        self.bounds[node] = (x, y, width, height)
        self.children[node] = NO_CHILD
        self.depths[node] = depth
        self.node_count += 1
        return node

    def _grow(self) -> None:
        size = self.bounds.shape[0]
        self.bounds = np.concatenate([self.bounds, np.zeros((size, 4), dtype=np.float64)])
        self.children = np.concatenate(
            [self.children, np.full((size, 4), NO_CHILD, dtype=np.int32)]
        )
        self.depths = np.concatenate([self.depths, np.zeros(size, dtype=np.int32)])
        self.items.extend([] for _ in range(size))
        logging.debug(f"QuadTree arena grown to {2 * size} nodes.")

    def _quadrant(self, node: int, index: int) -> int:
        """
        Returns the child slot that fully contains the particle's expanded
        bounding box, or -1 when the box straddles a midline.

        Slots: 0 top-right, 1 top-left, 2 bottom-left, 3 bottom-right.
        """
        x, y, w, h = self.bounds[node]
        mid_x = x + w / 2
        mid_y = y + h / 2
        px = self._positions[index, 0]
        py = self._positions[index, 1]
        r = self._radii[index] + self.pad

        top = py + r < mid_y
        bottom = py - r > mid_y
        left = px + r < mid_x
        right = px - r > mid_x
        if right:
            if top:
                return 0
            if bottom:
                return 3
        if left:
            if top:
                return 1
            if bottom:
                return 2
        return -1

    def _split(self, node: int) -> None:
        x, y, w, h = self.bounds[node]
        hw = w / 2
        hh = h / 2
        depth = int(self.depths[node]) + 1
        # Children may reallocate the arena, so write slots one at a time.
        self.children[node, 0] = self._new_node(x + hw, y, hw, hh, depth)
        self.children[node, 1] = self._new_node(x, y, hw, hh, depth)
        self.children[node, 2] = self._new_node(x, y + hh, hw, hh, depth)
        self.children[node, 3] = self._new_node(x + hw, y + hh, hw, hh, depth)

    def _insert(self, node: int, index: int) -> None:
        if self.children[node, 0] != NO_CHILD:
            slot = self._quadrant(node, index)
            if slot != -1:
                self._insert(int(self.children[node, slot]), index)
                return

        items = self.items[node]
        items.append(index)
        if (len(items) > self.capacity and self.depths[node] < self.max_depth
                and self.children[node, 0] == NO_CHILD):
            self._split(node)
            kept = []
            for item in items:
                slot = self._quadrant(node, item)
                if slot == -1:
                    kept.append(item)
                else:
                    self._insert(int(self.children[node, slot]), item)
            items[:] = kept

    def _retrieve(self, node: int, index: int, result: List[int]) -> None:
        if self.children[node, 0] != NO_CHILD:
            slot = self._quadrant(node, index)
            if slot != -1:
                self._retrieve(int(self.children[node, slot]), index, result)
            else:
                for child in self.children[node]:
                    self._retrieve(int(child), index, result)
        result.extend(self.items[node])
