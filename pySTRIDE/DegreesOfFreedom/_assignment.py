import logging
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from .._errors import InvalidConfigurationError, NotFoundError
from ..BoundaryConditions._conditions import DomainBoundaryConditions
from ..core.CPU._parallel import ParallelExecutor
from ..geom.commons._enums import BoundaryConditionType, CoordinateType
from ..geom.commons._mesh import Mesh
from ..geom.commons._node import Node
from ._dof import ConstraintType, DegreeOfFreedom, Field

logger = logging.getLogger(__name__)

_KIND_PRIORITY = {BoundaryConditionType.DIRICHLET: 0, BoundaryConditionType.NEUMANN: 1}


def _boundary_plan(position, field, boundary_conditions):
    dirichlet = boundary_conditions.get(position, BoundaryConditionType.DIRICHLET)
    neumann = boundary_conditions.get(position, BoundaryConditionType.NEUMANN)
    if dirichlet and neumann:
        raise InvalidConfigurationError(f"{position} carries both Dirichlet and Neumann conditions.")
    if not dirichlet and not neumann:
        raise InvalidConfigurationError(f"{position} carries no boundary condition.")

    kind = BoundaryConditionType.DIRICHLET if dirichlet else BoundaryConditionType.NEUMANN
    instances = dirichlet or neumann
    k, m = len(field), len(instances)
    if k == 1 and m == 1:
        vector = False
    elif k > 1 and m > 1:
        vector = True
    else:
        raise InvalidConfigurationError(
            f"{position}: {k} DOF type(s) of field '{field.name}' cannot be matched with "
            f"{m} {kind.name} condition(s).")
    return kind, instances, vector


class DOFAssignment:
    """
    Degrees of freedom of one field over a structured mesh.

    Creates one DOF per (node, DOF type). Interior nodes get FREE DOFs.
    Boundary nodes are classified by the condition of the face they lie on:
    a Dirichlet face fixes the DOF to the condition evaluated at the node's
    physical position; a Neumann face leaves the DOF FREE and records the
    prescribed flux.

    Parameters
    ----------
    mesh : StructuredMesh
        Initialized mesh (not owned)
    field : Field
        DOF types created at every node
    boundary_conditions : DomainBoundaryConditions
        Provider queried by (position, kind). Every boundary position of the
        mesh needs exactly one kind of condition
    executor : ParallelExecutor, optional
        Executor for the bulk passes (default: the mesh's executor)

    Attributes
    ----------
    free : tuple
        FREE DOFs, ids ``0..n_free-1`` in order
    bounded : tuple
        FIXED (Dirichlet) DOFs, the prescribed value in ``dof.value``
    flux : tuple
        ``(dof, flux)`` pairs of the Neumann DOFs. Those DOFs are in ``free`` too
    total : tuple
        Every DOF, each unknown exactly once
    dofs_by_node : dict
        Global node id -> DOFs of that node in field order

    Notes
    -----
    - A face is matched with its conditions by cardinality: one DOF type and
      one condition use the scalar function; K > 1 DOF types with more than
      one condition use the vector function of the first condition, DOF type
      ``i`` taking component ``i``. Anything else raises
      InvalidConfigurationError
    - Edge and corner nodes lie on several faces. Dirichlet wins over
      Neumann, and among faces of the same kind the first in canonical
      order wins
    - All collections are ordered by (node global id, DOF type position in
      the field); this order defines the solver numbering
    - Nothing is published unless every face validated and evaluated

    Examples
    --------
    >>> bcs = DomainBoundaryConditions()
    >>> for p in mesh.positions:
    ...     bcs.add(p, BoundaryConditionType.DIRICHLET, BoundaryCondition(0.0))
    >>> assignment = DOFAssignment(mesh, Field.scalar("temperature", DOFType.TEMPERATURE), bcs)
    >>> assignment.n_free == len(mesh.internal_nodes)
    True
    """
    def __init__(self, mesh: Mesh, field: Field, boundary_conditions: DomainBoundaryConditions,
                 executor: Optional[ParallelExecutor] = None):
        self.mesh = mesh
        self.field = field
        self.boundary_conditions = boundary_conditions
        self.executor = executor or getattr(mesh, "executor", None) or ParallelExecutor()

        self.free: Tuple[DegreeOfFreedom, ...] = ()
        self.bounded: Tuple[DegreeOfFreedom, ...] = ()
        self.flux: Tuple[Tuple[DegreeOfFreedom, float], ...] = ()
        self.total: Tuple[DegreeOfFreedom, ...] = ()
        self.dofs_by_node: Dict[int, List[DegreeOfFreedom]] = {}

        self._assign()

    def _evaluate_face(self, position, instances, vector):
        nodes = self.mesh.boundary_nodes[position]
        k = len(self.field)

        def evaluate(start, end):
            values = []
            for node in nodes[start:end]:
                x = node.position(CoordinateType.NATURAL)
                if not vector:
                    values.append((node, (instances[0].scalar_value_at(x),)))
                    continue
                value = instances[0].vector_value_at(x)
                if value.shape[0] != k:
                    raise InvalidConfigurationError(
                        f"{position}: vector condition returned {value.shape[0]} component(s) "
                        f"for {k} DOF types.")
                values.append((node, tuple(float(v) for v in value)))
            return values

        return [item for block in self.executor.partial_reduce(len(nodes), evaluate) for item in block]

    def _assign(self):
        mesh, field = self.mesh, self.field
        logger.info("Assigning %s DOFs over %d nodes ...", [t.name for t in field], len(mesh.total_nodes))

        positions = list(mesh.positions)
        plans = [_boundary_plan(position, field, self.boundary_conditions) for position in positions]

        # (global id, type index) -> (priority, kind, node, value)
        candidates = {}
        for rank, (position, (kind, instances, vector)) in enumerate(zip(positions, plans)):
            priority = (_KIND_PRIORITY[kind], rank)
            shared = 0
            for node, values in self._evaluate_face(position, instances, vector):
                for t, value in enumerate(values):
                    key = (node.global_id, t)
                    if key in candidates:
                        shared += 1
                    if key not in candidates or priority < candidates[key][0]:
                        candidates[key] = (priority, kind, node, value)
            logger.debug("%s: %s over %d node(s), %d DOF(s) shared with earlier faces",
                         position, kind.name, len(mesh.boundary_nodes[position]), shared)

        boundary = []
        flux = []
        for (_, t), (_, kind, node, value) in candidates.items():
            if kind == BoundaryConditionType.DIRICHLET:
                boundary.append(DegreeOfFreedom(field.dof_types[t], node, ConstraintType.FIXED, value))
            else:
                dof = DegreeOfFreedom(field.dof_types[t], node)
                boundary.append(dof)
                flux.append((dof, value))

        internal_nodes = mesh.internal_nodes

        def create_internal(start, end):
            return [DegreeOfFreedom(dof_type, node) for node in internal_nodes[start:end] for dof_type in field]

        internal = [dof for block in self.executor.partial_reduce(len(internal_nodes), create_internal)
                    for dof in block]

        type_index = {dof_type: t for t, dof_type in enumerate(field)}

        def order(dof):
            return (dof.node_id, type_index[dof.dof_type])

        total = sorted(boundary + internal, key=order)
        if len(set(total)) != len(total):
            raise InvalidConfigurationError("DOF assignment produced duplicate unknowns.")

        free = [dof for dof in total if dof.is_free]
        for n, dof in enumerate(free):
            dof.id = n

        dofs_by_node = {}
        for dof in total:
            dofs_by_node.setdefault(dof.node_id, []).append(dof)

        self.total = tuple(total)
        self.free = tuple(free)
        self.bounded = tuple(dof for dof in total if not dof.is_free)
        self.flux = tuple(sorted(flux, key=lambda pair: order(pair[0])))
        self.dofs_by_node = dofs_by_node

        logger.info("DOFs assigned: %d total, %d free, %d bounded, %d flux",
                    len(self.total), len(self.free), len(self.bounded), len(self.flux))

    @property
    def n_free(self) -> int:
        return len(self.free)

    @property
    def n_dofs(self) -> int:
        return len(self.total)

    def dof(self, node: Union[Node, int], dof_type) -> DegreeOfFreedom:
        global_id = node.global_id if isinstance(node, Node) else node
        for dof in self.dofs_by_node.get(global_id, []):
            if dof.dof_type == dof_type:
                return dof
        raise NotFoundError(f"No {dof_type.name} DOF at node {global_id}.")

    def _layout(self, fill, dtype):
        return np.full(len(self.mesh.total_nodes) * len(self.field), fill, dtype=dtype)

    def _flat_index(self, dof):
        return dof.node_id * len(self.field) + self.field.index(dof.dof_type)

    @property
    def constraints(self) -> np.ndarray:
        """Boolean array over the ``node * K + type`` layout, True where the DOF is FIXED."""
        constraints = self._layout(False, bool)
        for dof in self.bounded:
            constraints[self._flat_index(dof)] = True
        return constraints

    @property
    def prescribed_values(self) -> np.ndarray:
        """Dirichlet values over the ``node * K + type`` layout, NaN elsewhere."""
        values = self._layout(np.nan, np.float64)
        for dof in self.bounded:
            values[self._flat_index(dof)] = dof.value
        return values

    @property
    def flux_values(self) -> np.ndarray:
        """Neumann fluxes over the ``node * K + type`` layout, NaN elsewhere."""
        values = self._layout(np.nan, np.float64)
        for dof, value in self.flux:
            values[self._flat_index(dof)] = value
        return values

    @property
    def free_ids(self) -> np.ndarray:
        """Solver index over the ``node * K + type`` layout, -1 on FIXED DOFs."""
        ids = self._layout(-1, np.int64)
        for dof in self.free:
            ids[self._flat_index(dof)] = dof.id
        return ids

    def __repr__(self):
        return (f"DOFAssignment(field={self.field.name!r}, total={len(self.total)}, free={len(self.free)}, "
                f"bounded={len(self.bounded)}, flux={len(self.flux)})")
