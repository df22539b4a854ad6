from typing import Dict, List, Mapping, Optional

import numpy as np

from ..._errors import InvalidConfigurationError
from ._enums import CoordinateType, Direction, Position
from ._node import Node
from ._topology import (AXIS_POSITIONS,
                        check_dimensions,
                        neighbour_offsets,
                        offset_from_position,
                        position_from_offset,
                        )


def _dofs_of(dof_lookup, node):
    if node.ghost:
        return []
    dofs_by_node = getattr(dof_lookup, "dofs_by_node", dof_lookup)
    return dofs_by_node.get(node.global_id, [])


class IsoParametricNodeGraph:
    """
    Neighbourhood of a node in parametric space.

    Walks outward from ``node`` along every relative position (axis-aligned
    and, optionally, diagonal) up to ``depth`` steps. A walk stops at the
    first parametric coordinate missing from the index, so sequences are
    truncated at the mesh boundary instead of failing. Positions without any
    neighbour are left out.

    Parameters
    ----------
    node : Node
        Center node
    depth : int
        Maximum number of neighbours collected along each position
    parametric_index : dict
        Integer parametric tuple -> node. Pass ``mesh.parametric_index`` or a
        ghost layer's index to walk into ghost nodes
    nodes_per_direction : dict
        Direction -> node count of the mesh, fixes the dimensionality
    include_diagonals : bool, optional
        Also walk diagonal positions (default: True)
    custom_depth : dict, optional
        Position -> depth overriding ``depth`` for that position

    Attributes
    ----------
    graph : dict
        Position -> neighbour nodes ordered by increasing distance

    Methods
    -------
    node_graph(custom_depth=None)
        Graph with per-position depths
    dof_graph(dof_lookup, dof_type=None, constraint=None)
        Graph of the neighbours' degrees of freedom
    colinear_nodes(direction=None)
        Nodes on the parametric lines through the center
    colinear_dof_values(dof_lookup, dof_type, direction)
        Values of one DOF type along a parametric line

    Notes
    -----
    The graph holds references into mesh storage and owns nothing. 2D
    graphs have up to 8 positions, 3D graphs up to 26; diagonal positions
    are combined flags such as ``Position.TOP | Position.LEFT``.

    Examples
    --------
    >>> graph = IsoParametricNodeGraph(mesh.node(2, 2), 2, mesh.parametric_index, mesh.nodes_per_direction)
    >>> [n.parametric_key for n in graph.graph[Position.RIGHT]]
    [(3, 2), (4, 2)]
    """
    def __init__(self, node: Node, depth: int, parametric_index: Mapping[tuple, Node],
                 nodes_per_direction: Mapping[Direction, int], include_diagonals: bool = True,
                 custom_depth: Optional[Dict[Position, int]] = None):
        if depth < 0:
            raise InvalidConfigurationError(f"Graph depth must be non-negative, got {depth}.")
        self.node = node
        self.depth = depth
        self.dimensions = check_dimensions(len(nodes_per_direction))
        self.include_diagonals = include_diagonals
        self._parametric_index = parametric_index
        self._nodes_per_direction = dict(nodes_per_direction)
        self._center = node.parametric_key
        self.graph = self.node_graph(custom_depth)

    def _walk(self, offset, depth) -> List[Node]:
        neighbours = []
        for step in range(1, depth + 1):
            key = tuple(c + step * o for c, o in zip(self._center, offset))
            neighbour = self._parametric_index.get(key)
            if neighbour is None:
                break
            neighbours.append(neighbour)
        return neighbours

    def node_graph(self, custom_depth: Optional[Dict[Position, int]] = None) -> Dict[Position, List[Node]]:
        custom_depth = custom_depth or {}
        for position, depth in custom_depth.items():
            offset_from_position(position, self.dimensions)
            if depth < 0:
                raise InvalidConfigurationError(f"Depth of {position} must be non-negative, got {depth}.")

        graph = {}
        for offset in neighbour_offsets(self.dimensions, self.include_diagonals):
            position = position_from_offset(offset)
            neighbours = self._walk(offset, custom_depth.get(position, self.depth))
            if neighbours:
                graph[position] = neighbours
        return graph

    def dof_graph(self, dof_lookup, dof_type=None, constraint=None) -> Dict[Position, list]:
        """
        Replace every neighbour by its degrees of freedom.

        Parameters
        ----------
        dof_lookup : DOFAssignment or mapping
            Anything exposing ``dofs_by_node`` or a mapping global id -> DOFs
        dof_type : DOFType, optional
            Keep only DOFs of this type. The values of the graph then are flat
            lists with one DOF per neighbour instead of lists of lists
        constraint : ConstraintType, optional
            Keep only DOFs in this constraint state

        Notes
        -----
        Ghost neighbours carry no DOFs and are skipped.
        """
        graph = {}
        for position, neighbours in self.graph.items():
            selected = []
            for neighbour in neighbours:
                dofs = [dof for dof in _dofs_of(dof_lookup, neighbour)
                        if (dof_type is None or dof.dof_type == dof_type)
                        and (constraint is None or dof.constraint == constraint)]
                if dof_type is None:
                    if dofs:
                        selected.append(dofs)
                else:
                    selected.extend(dofs)
            graph[position] = selected
        return graph

    def colinear_positions(self) -> Dict[Direction, tuple]:
        """Direction -> (low, high) positions walked along that parametric line."""
        return {Direction(axis): pair for axis, pair in enumerate(AXIS_POSITIONS[self.dimensions])}

    def colinear_nodes(self, direction: Optional[Direction] = None):
        """
        Nodes sharing all parametric coordinates of the center but one.

        The center is included and the nodes are sorted by increasing
        parametric coordinate along ``direction``. Without a direction a
        mapping Direction -> nodes is returned for every axis.
        """
        if direction is None:
            return {d: self.colinear_nodes(d) for d in self.colinear_positions()}

        low, high = self.colinear_positions()[Direction(direction)]
        nodes = self.graph.get(low, []) + [self.node] + self.graph.get(high, [])
        axis = int(direction)
        return sorted(nodes, key=lambda n: n.parametric_key[axis])

    def colinear_coordinates(self, coordinate_type=CoordinateType.NATURAL) -> Dict[Direction, np.ndarray]:
        return {d: np.stack([n.position(coordinate_type) for n in nodes])
                for d, nodes in self.colinear_nodes().items()}

    def colinear_dofs(self, dof_lookup, dof_type, direction: Optional[Direction] = None):
        """
        DOF of type ``dof_type`` at every node of ``colinear_nodes(direction)``.

        The result is aligned with the colinear nodes: nodes without such a
        DOF (ghost nodes) give ``None``.
        """
        if direction is None:
            return {d: self.colinear_dofs(dof_lookup, dof_type, d) for d in self.colinear_positions()}
        return [next((dof for dof in _dofs_of(dof_lookup, node) if dof.dof_type == dof_type), None)
                for node in self.colinear_nodes(direction)]

    def colinear_dof_values(self, dof_lookup, dof_type, direction: Direction) -> np.ndarray:
        """Values of ``colinear_dofs``, NaN where a node has no DOF."""
        return np.array([np.nan if dof is None else dof.value
                         for dof in self.colinear_dofs(dof_lookup, dof_type, direction)], dtype=np.float64)
