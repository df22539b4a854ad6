import math
from enum import Enum, auto
from typing import Optional, Sequence, Tuple

from .._errors import InvalidConfigurationError, NotFoundError
from ..geom.commons._node import Node


class DOFType(Enum):
    TEMPERATURE = auto()
    PRESSURE = auto()
    DISPLACEMENT_ONE = auto()
    DISPLACEMENT_TWO = auto()
    DISPLACEMENT_THREE = auto()
    VELOCITY_ONE = auto()
    VELOCITY_TWO = auto()
    VELOCITY_THREE = auto()
    ROTATION_ONE = auto()
    ROTATION_TWO = auto()
    ROTATION_THREE = auto()
    UNKNOWN_SCALAR = auto()


class ConstraintType(Enum):
    FREE = auto()
    FIXED = auto()


_VECTOR_TYPES = {
    "displacement": (DOFType.DISPLACEMENT_ONE, DOFType.DISPLACEMENT_TWO, DOFType.DISPLACEMENT_THREE),
    "velocity": (DOFType.VELOCITY_ONE, DOFType.VELOCITY_TWO, DOFType.VELOCITY_THREE),
    "rotation": (DOFType.ROTATION_ONE, DOFType.ROTATION_TWO, DOFType.ROTATION_THREE),
}


class Field:
    """
    Ordered list of DOF types describing one physical field.

    Parameters
    ----------
    name : str
        Name of the field
    dof_types : sequence of DOFType
        DOF types created at every node, in order. The order fixes the
        component index of vector-valued boundary conditions and the DOF
        layout of the assignment arrays.

    Examples
    --------
    >>> Field.scalar("temperature", DOFType.TEMPERATURE).dof_types
    (<DOFType.TEMPERATURE: 1>,)
    >>> len(Field.vector("displacement", 2))
    2
    """
    def __init__(self, name: str, dof_types: Sequence[DOFType]):
        dof_types = tuple(dof_types)
        if not dof_types:
            raise InvalidConfigurationError("A field needs at least one DOF type.")
        if len(set(dof_types)) != len(dof_types):
            raise InvalidConfigurationError(f"DOF types of field '{name}' must be unique, got {dof_types}.")
        self.name = name
        self.dof_types: Tuple[DOFType, ...] = dof_types

    @classmethod
    def scalar(cls, name: str, dof_type: DOFType = DOFType.UNKNOWN_SCALAR):
        return cls(name, (dof_type,))

    @classmethod
    def vector(cls, name: str, dimensions: int):
        if name not in _VECTOR_TYPES:
            raise InvalidConfigurationError(
                f"Unknown vector field '{name}', expected one of {sorted(_VECTOR_TYPES)}.")
        if not 1 <= dimensions <= 3:
            raise InvalidConfigurationError(f"Vector fields have 1 to 3 components, got {dimensions}.")
        return cls(name, _VECTOR_TYPES[name][:dimensions])

    def index(self, dof_type: DOFType) -> int:
        try:
            return self.dof_types.index(dof_type)
        except ValueError:
            raise NotFoundError(f"{dof_type} is not part of field '{self.name}'.") from None

    def __len__(self):
        return len(self.dof_types)

    def __iter__(self):
        return iter(self.dof_types)

    def __repr__(self):
        return f"Field({self.name!r}, {[t.name for t in self.dof_types]})"


class DegreeOfFreedom:
    """
    One scalar unknown of a field at one node.

    Parameters
    ----------
    dof_type : DOFType
        Physical meaning of the unknown
    parent_node : Node
        Node carrying the DOF (not owned)
    constraint : ConstraintType, optional
        FREE or FIXED (default: FREE)
    value : float, optional
        Prescribed value. Only FIXED DOFs may carry one (default: NaN)

    Attributes
    ----------
    id : int or None
        Dense zero-based solver index, set on FREE DOFs by
        :class:`DOFAssignment`. ``None`` otherwise.

    Notes
    -----
    Equality and hashing only look at ``(dof_type, parent_node global id)``,
    so two DOFs for the same unknown compare equal whatever their constraint
    state or value.
    """
    __slots__ = ("dof_type", "parent_node", "constraint", "value", "id")

    def __init__(self, dof_type: DOFType, parent_node: Node,
                 constraint: ConstraintType = ConstraintType.FREE, value: float = math.nan):
        if constraint == ConstraintType.FREE and not math.isnan(value):
            raise InvalidConfigurationError(
                f"A FREE {dof_type.name} DOF cannot carry a value, got {value}.")
        self.dof_type = dof_type
        self.parent_node = parent_node
        self.constraint = constraint
        self.value = float(value)
        self.id: Optional[int] = None

    @property
    def node_id(self) -> int:
        return self.parent_node.global_id

    @property
    def is_free(self):
        return self.constraint == ConstraintType.FREE

    def fix(self, value: float):
        """Prescribe ``value`` and turn the DOF into a FIXED one."""
        if math.isnan(value):
            raise InvalidConfigurationError("A FIXED DOF needs a concrete value, got NaN.")
        self.constraint = ConstraintType.FIXED
        self.value = float(value)
        self.id = None

    def _key(self):
        return (self.dof_type, self.node_id)

    def __eq__(self, other):
        if not isinstance(other, DegreeOfFreedom):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return (f"DegreeOfFreedom({self.dof_type.name}, node={self.node_id}, "
                f"{self.constraint.name}, value={self.value}, id={self.id})")
