import logging
from typing import Dict, List, Optional

import numpy as np
from scipy.spatial import KDTree

from ..._errors import InvalidConfigurationError, NotFoundError, OutOfRangeError
from ...core.CPU._geom import (boundary_mask,
                               covariant_base_vectors,
                               generate_parametric_grid,
                               template_coordinates,
                               )
from ...core.CPU._parallel import ParallelExecutor
from ..commons._enums import CoordinateType, Direction, Position
from ..commons._mesh import Mesh
from ..commons._node import Metrics, Node, NodeId
from ..commons._specs import MeshSpecs
from ..commons._topology import (NORMAL_DIRECTIONS,
                                 boundary_axis,
                                 boundary_positions,
                                 check_dimensions,
                                 directions,
                                 )
from ._ghost import GhostPseudoMesh

logger = logging.getLogger(__name__)


def _padded_shape(nodes_per_direction):
    shape = [1, 1, 1]
    shape[:len(nodes_per_direction)] = nodes_per_direction
    return tuple(shape)


def generate_structured_nodes(specs: MeshSpecs, executor: Optional[ParallelExecutor] = None) -> np.ndarray:
    """
    Build the dense node array of a structured mesh.

    Every node is positioned in the parametric, template and natural
    coordinate systems. Natural coordinates are ``specs.coordinate_map``
    applied to the template coordinates (identity when no map is given).

    Parameters
    ----------
    specs : MeshSpecs
        Geometric specification of the mesh
    executor : ParallelExecutor, optional
        Executor used for the node creation pass (default: a new MULTI_THREAD executor)

    Returns
    -------
    ndarray
        Object array of :class:`Node`, shape ``specs.nodes_per_direction``,
        indexed by parametric coordinates

    Examples
    --------
    >>> nodes = generate_structured_nodes(MeshSpecs((3, 4)))
    >>> nodes.shape
    (3, 4)
    """
    executor = executor or ParallelExecutor()
    dims = specs.dimensions
    n1, n2, n3 = _padded_shape(specs.nodes_per_direction)

    parametric = generate_parametric_grid(n1, n2, n3)
    steps, rotation, shear_one, shear_two = specs.affine_parameters()
    template = template_coordinates(parametric, steps, rotation, shear_one, shear_two, dims)[:, :dims]
    if specs.coordinate_map is None:
        natural = template.copy()
    else:
        natural = np.asarray(specs.coordinate_map(template), dtype=np.float64)
        if natural.shape != template.shape:
            raise InvalidConfigurationError(
                f"coordinate_map must return an array of shape {template.shape}, got {natural.shape}.")
    natural = natural.astype(specs.dtype)

    flat = np.empty(parametric.shape[0], dtype=object)

    def create_nodes(start, end):
        for n in range(start, end):
            flat[n] = Node({CoordinateType.PARAMETRIC: parametric[n, :dims],
                            CoordinateType.TEMPLATE: template[n],
                            CoordinateType.NATURAL: natural[n]})

    executor.run(flat.shape[0], create_nodes)
    return flat.reshape(specs.nodes_per_direction, order="F")


class StructuredMesh(Mesh):
    """
    Structured mesh of 1 to 3 parametric dimensions.

    Takes ownership of a dense node array and derives, once, its total node
    sequence, interior nodes, boundary faces and the parametric lookup index.
    Dimensionality only changes the index arity and the topology tables of
    :mod:`pySTRIDE.geom.commons._topology`; the algorithms are shared.

    Parameters
    ----------
    nodes : ndarray
        Object array of :class:`Node` with shape ``nodes_per_direction``.
        Natural coordinates must be set; parametric coordinates are filled in
        from the array position when missing.
    specs : MeshSpecs, optional
        Specification the nodes were generated from. Supplies the template map
        of ghost nodes (default: unit steps, no rotation, no shear)
    executor : ParallelExecutor, optional
        Executor for the bulk passes (default: a new MULTI_THREAD executor)

    Attributes
    ----------
    nodes_per_direction : dict
        Direction -> number of nodes along that axis
    total_nodes : list
        All nodes, ordered by global id (axis one varies fastest)
    internal_nodes : list
        Nodes strictly inside the domain, in total order
    boundary_nodes : dict
        Position -> nodes on that face, in total order. Edge and corner
        nodes are listed by every face they lie on
    owned_boundary_nodes : dict
        Position -> nodes owned by that face. Each boundary node is owned by
        the first face in canonical order it lies on
    parametric_index : dict
        Integer parametric tuple -> node

    Notes
    -----
    - Global ids follow total order: ``i + j * n1 + k * n1 * n2``
    - Boundary and internal ids are running counters over the boundary and
      interior nodes in total order
    - Metrics are computed on first access and never recomputed

    Examples
    --------
    >>> from pySTRIDE.CPU import StructuredMesh, MeshSpecs
    >>> mesh = StructuredMesh.from_specs(MeshSpecs((5, 5), template_steps=(0.25, 0.25)))
    >>> len(mesh.total_nodes), len(mesh.internal_nodes)
    (25, 9)
    >>> mesh.normal_unit_vector(Position.TOP, mesh.node(2, 4))
    array([0., 1.])
    """
    def __init__(self, nodes: np.ndarray, specs: Optional[MeshSpecs] = None,
                 executor: Optional[ParallelExecutor] = None):
        super().__init__()
        nodes = np.asarray(nodes, dtype=object)
        self._dimensions = check_dimensions(nodes.ndim)
        if any(n < 2 for n in nodes.shape):
            raise InvalidConfigurationError(f"Every axis needs at least 2 nodes, got {nodes.shape}.")

        self.specs = specs if specs is not None else MeshSpecs(nodes.shape)
        if self.specs.nodes_per_direction != nodes.shape:
            raise InvalidConfigurationError(
                f"Node array shape {nodes.shape} does not match specs {self.specs.nodes_per_direction}.")

        self.executor = executor or ParallelExecutor()
        self.nodes_per_direction: Dict[Direction, int] = {d: nodes.shape[d] for d in directions(self._dimensions)}
        self._nodes = nodes
        self._shape3 = _padded_shape(nodes.shape)
        self._metrics: Optional[List[Metrics]] = None
        self._tree = None
        self._ghost_meshes = {}
        self.is_initialized = False

        self._initialize()

    @classmethod
    def from_specs(cls, specs: MeshSpecs, executor: Optional[ParallelExecutor] = None):
        executor = executor or ParallelExecutor()
        return cls(generate_structured_nodes(specs, executor), specs=specs, executor=executor)

    def _initialize(self):
        logger.info("Initializing %dD structured mesh %s ...", self._dimensions, self._nodes.shape)
        flat = self._nodes.reshape(-1, order="F")
        missing = [n for n in range(flat.shape[0]) if flat[n] is None]
        if missing:
            raise NotFoundError(f"Node array has {len(missing)} empty slot(s), first at global id {missing[0]}.")
        unplaced = [n for n in range(flat.shape[0]) if CoordinateType.NATURAL not in flat[n].coordinates]
        if unplaced:
            raise NotFoundError(f"{len(unplaced)} node(s) have no NATURAL coordinates, first at global id {unplaced[0]}.")

        n1, n2, n3 = self._shape3
        on_boundary = boundary_mask(n1, n2, n3, self._dimensions)
        boundary_ids = np.cumsum(on_boundary) - 1
        internal_ids = np.cumsum(~on_boundary) - 1
        parametric = generate_parametric_grid(n1, n2, n3)[:, :self._dimensions]

        def number_nodes(start, end):
            for n in range(start, end):
                node = flat[n]
                if on_boundary[n]:
                    node.id = NodeId(n, boundary_id=int(boundary_ids[n]))
                else:
                    node.id = NodeId(n, internal_id=int(internal_ids[n]))
                if CoordinateType.PARAMETRIC not in node.coordinates:
                    node.set_position(parametric[n], CoordinateType.PARAMETRIC)

        self.executor.run(flat.shape[0], number_nodes)

        self._total_nodes = list(flat)
        self._internal_nodes = [flat[n] for n in np.flatnonzero(~on_boundary)]

        global_ids = np.arange(flat.shape[0]).reshape(self._nodes.shape, order="F")
        self._boundary_nodes = {}
        self._owned_boundary_nodes = {}
        self._boundary_owner = {}
        for position in boundary_positions(self._dimensions):
            axis, side = boundary_axis(position, self._dimensions)
            face = np.take(global_ids, side, axis=axis)
            face_ids = np.sort(face.reshape(-1))
            self._boundary_nodes[position] = [flat[g] for g in face_ids]
            owned = [g for g in face_ids if g not in self._boundary_owner]
            for g in owned:
                self._boundary_owner[g] = position
            self._owned_boundary_nodes[position] = [flat[g] for g in owned]

        self._parametric_index = {node.parametric_key: node for node in self._total_nodes}
        if len(self._parametric_index) != len(self._total_nodes):
            raise InvalidConfigurationError("Parametric coordinates of the nodes are not unique.")

        self.is_initialized = True
        logger.info("Mesh initialized: %d nodes, %d internal, %d boundary",
                    len(self._total_nodes), len(self._internal_nodes), len(self._boundary_owner))

    @property
    def dimensions(self):
        return self._dimensions

    @property
    def directions(self):
        return directions(self._dimensions)

    @property
    def positions(self):
        """Boundary positions valid for this mesh, in canonical order."""
        return boundary_positions(self._dimensions)

    @property
    def n_nodes(self):
        return len(self._total_nodes)

    @property
    def total_nodes(self):
        return self._total_nodes

    @property
    def internal_nodes(self):
        return self._internal_nodes

    @property
    def boundary_nodes(self):
        return self._boundary_nodes

    @property
    def owned_boundary_nodes(self):
        return self._owned_boundary_nodes

    @property
    def parametric_index(self):
        return self._parametric_index

    def boundary_position(self, node: Node) -> Position:
        """Face owning a boundary node."""
        try:
            return self._boundary_owner[node.global_id]
        except KeyError:
            raise NotFoundError(f"Node {node.global_id} is not a boundary node.") from None

    def node(self, *indices) -> Node:
        if not self.is_initialized:
            raise NotFoundError("Mesh is not initialized.")
        if len(indices) != self._dimensions:
            raise OutOfRangeError(f"A {self._dimensions}D mesh takes {self._dimensions} indices, got {len(indices)}.")
        for axis, index in enumerate(indices):
            if not 0 <= index < self._nodes.shape[axis]:
                raise OutOfRangeError(
                    f"Index {index} is outside [0, {self._nodes.shape[axis]}) along {Direction(axis).name}.")
        return self._nodes[tuple(indices)]

    def node_by_id(self, global_id: int) -> Node:
        if not 0 <= global_id < len(self._total_nodes):
            raise OutOfRangeError(f"Global id {global_id} is outside [0, {len(self._total_nodes)}).")
        return self._total_nodes[global_id]

    def node_at(self, parametric_coordinates) -> Node:
        key = tuple(int(round(c)) for c in parametric_coordinates)
        try:
            return self._parametric_index[key]
        except KeyError:
            raise NotFoundError(f"No node at parametric coordinates {key}.") from None

    def coordinates(self, coordinate_type=CoordinateType.NATURAL) -> np.ndarray:
        """Positions of all nodes in total order, shape (n_nodes, dim)."""
        return np.stack([node.position(coordinate_type) for node in self._total_nodes])

    def nearest_nodes(self, positions) -> List[Node]:
        """
        Nodes closest to the given physical positions.

        Parameters
        ----------
        positions : array-like
            Physical coordinates, shape (n_points, dim)
        """
        if self._tree is None:
            self._tree = KDTree(self.coordinates(CoordinateType.NATURAL))
        _, ids = self._tree.query(np.atleast_2d(np.asarray(positions, dtype=np.float64)))
        return [self._total_nodes[i] for i in np.atleast_1d(ids)]

    def compute_metrics(self) -> List[Metrics]:
        if self._metrics is not None:
            return self._metrics

        logger.info("Computing metrics ...")
        natural = np.zeros((self.n_nodes, 3), dtype=np.float64)
        natural[:, :self._dimensions] = self.coordinates(CoordinateType.NATURAL)
        n1, n2, n3 = self._shape3
        base = covariant_base_vectors(natural, n1, n2, n3, self._dimensions)

        metrics = [None] * self.n_nodes

        def build_metrics(start, end):
            for n in range(start, end):
                metrics[n] = Metrics(base[n])

        self.executor.run(self.n_nodes, build_metrics)
        self._metrics = metrics
        logger.info("Metrics computed!")
        return self._metrics

    def metrics(self, node: Node) -> Metrics:
        if node.ghost:
            raise NotFoundError("Ghost nodes carry no metrics.")
        return self.compute_metrics()[node.global_id]

    def normal_unit_vector(self, position: Position, node: Node) -> np.ndarray:
        """
        Outward unit normal of face ``position`` at ``node``.

        The normal is the normalized cross product of the covariant base
        vectors spanning the face, taken in the order of
        ``NORMAL_DIRECTIONS``. Returns a vector of the mesh dimensionality.
        """
        table = NORMAL_DIRECTIONS[self._dimensions]
        if position not in table:
            raise InvalidConfigurationError(f"{position} is not a boundary position of a {self._dimensions}D mesh.")
        direction_one, direction_two = table[position]
        metrics = self.metrics(node)
        normal = np.cross(metrics.base_vector(direction_one), metrics.base_vector(direction_two))
        return normal[:self._dimensions] / np.linalg.norm(normal)

    def ghost_mesh(self, depth: int) -> GhostPseudoMesh:
        """Ghost layer of ``depth`` nodes around the mesh. Built once per depth."""
        if depth < 0:
            raise InvalidConfigurationError(f"Ghost layer depth must be non-negative, got {depth}.")
        if depth not in self._ghost_meshes:
            self._ghost_meshes[depth] = GhostPseudoMesh(self, depth)
        return self._ghost_meshes[depth]
