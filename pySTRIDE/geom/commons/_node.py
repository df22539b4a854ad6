from typing import Dict, Optional

import numpy as np

from ..._errors import NotFoundError
from ._enums import CoordinateType, Direction


class NodeId:
    """
    Identity of a mesh node.

    Parameters
    ----------
    global_id : int
        Position of the node in the total (row-major, fastest axis first) node
        sequence of its mesh.
    boundary_id : int, optional
        Running index among boundary nodes. ``None`` if the node is interior.
    internal_id : int, optional
        Running index among interior nodes. ``None`` if the node is on a boundary.

    Notes
    -----
    ``None`` is the only absent value. Exactly one of ``boundary_id`` and
    ``internal_id`` is set on a node owned by an initialized mesh.
    """
    __slots__ = ("global_id", "boundary_id", "internal_id")

    def __init__(self, global_id: int, boundary_id: Optional[int] = None, internal_id: Optional[int] = None):
        self.global_id = global_id
        self.boundary_id = boundary_id
        self.internal_id = internal_id

    @property
    def is_boundary(self):
        return self.boundary_id is not None

    @property
    def is_internal(self):
        return self.internal_id is not None

    def __repr__(self):
        return f"NodeId(global_id={self.global_id}, boundary_id={self.boundary_id}, internal_id={self.internal_id})"


class Node:
    """
    Geometric entity of a structured mesh.

    A node is positioned in up to three coordinate systems (see
    :class:`CoordinateType`). Real nodes are owned by a
    :class:`StructuredMesh` which sets their :class:`NodeId`; ghost nodes are
    synthetic, have no id and are only positioned in the parametric and
    template systems.

    Parameters
    ----------
    coordinates : dict, optional
        Mapping ``CoordinateType -> array-like`` of initial positions.
    ghost : bool, optional
        True for nodes synthesized outside the real domain (default: False)

    Examples
    --------
    >>> node = Node({CoordinateType.PARAMETRIC: [1, 2], CoordinateType.NATURAL: [0.25, 0.5]})
    >>> node.parametric_key
    (1, 2)
    """
    __slots__ = ("id", "coordinates", "ghost")

    def __init__(self, coordinates: Optional[Dict[CoordinateType, np.ndarray]] = None, ghost: bool = False):
        self.id: Optional[NodeId] = None
        self.coordinates: Dict[CoordinateType, np.ndarray] = {}
        self.ghost = ghost
        if coordinates is not None:
            for coordinate_type, vector in coordinates.items():
                self.set_position(vector, coordinate_type)

    def set_position(self, vector, coordinate_type=CoordinateType.NATURAL):
        self.coordinates[coordinate_type] = np.asarray(vector, dtype=np.float64)

    def position(self, coordinate_type=CoordinateType.NATURAL):
        try:
            return self.coordinates[coordinate_type]
        except KeyError:
            raise NotFoundError(f"Node has no {coordinate_type.name} coordinates.") from None

    @property
    def parametric_key(self):
        """Integer tuple of the parametric coordinates, used as lookup key."""
        return tuple(int(round(c)) for c in self.position(CoordinateType.PARAMETRIC))

    @property
    def global_id(self):
        if self.id is None:
            raise NotFoundError("Node has no id. Ghost nodes and nodes outside a mesh are not numbered.")
        return self.id.global_id

    def __repr__(self):
        if self.ghost:
            return f"Node(ghost, parametric={self.parametric_key})"
        key = self.parametric_key if CoordinateType.PARAMETRIC in self.coordinates else None
        return f"Node({self.id!r}, parametric={key})"


class Metrics:
    """
    Differential metrics of the physical coordinates at a node.

    Parameters
    ----------
    covariant_base_vectors : ndarray
        Derivatives of the physical position with respect to each parametric
        coordinate, shape (dim, 3). Missing physical components are zero.

    Attributes
    ----------
    covariant_base_vectors : dict
        ``Direction -> ndarray(3)``, read-only
    covariant_tensor : ndarray
        Metric tensor g_ij = g_i . g_j, shape (dim, dim), read-only
    jacobian : float
        sqrt(det g_ij), the local volume (area, length) scale

    Notes
    -----
    Metrics are computed once, after the geometry is final. The arrays are
    flagged read-only so nothing downstream can alter them.
    """
    __slots__ = ("covariant_base_vectors", "covariant_tensor", "jacobian")

    def __init__(self, covariant_base_vectors: np.ndarray):
        base = np.array(covariant_base_vectors, dtype=np.float64)
        base.setflags(write=False)
        self.covariant_base_vectors = {Direction(axis): base[axis] for axis in range(base.shape[0])}
        tensor = base @ base.T
        tensor.setflags(write=False)
        self.covariant_tensor = tensor
        self.jacobian = float(np.sqrt(max(np.linalg.det(tensor), 0.0)))

    def base_vector(self, direction):
        """
        Covariant base vector along ``direction``. Directions beyond the mesh
        dimensionality return the unit out-of-space vector.
        """
        if direction in self.covariant_base_vectors:
            return self.covariant_base_vectors[direction]
        unit = np.zeros(3)
        unit[int(direction)] = 1.0
        return unit
