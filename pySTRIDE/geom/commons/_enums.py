from enum import Enum, Flag, IntEnum, auto


class Direction(IntEnum):
    """Parametric axis of a structured mesh. The value is the axis index."""
    ONE = 0
    TWO = 1
    THREE = 2


class CoordinateType(Enum):
    """
    Coordinate systems a node can be positioned in.

    NATURAL
        Physical coordinates of the node.
    PARAMETRIC
        Logical (integer) grid indices of the node.
    TEMPLATE
        Reference coordinates: parametric indices scaled by the template
        steps, rotated and sheared.
    """
    NATURAL = auto()
    PARAMETRIC = auto()
    TEMPLATE = auto()


class Position(Flag):
    """
    Relative position with respect to a mesh or a node.

    Single members name the faces of the domain. Combined members
    (``Position.TOP | Position.LEFT``) name diagonal neighbours in a node
    graph and the edges/corners they point to.
    """
    LEFT = auto()
    RIGHT = auto()
    BOTTOM = auto()
    TOP = auto()
    BACK = auto()
    FRONT = auto()


class BoundaryConditionType(Enum):
    DIRICHLET = auto()
    NEUMANN = auto()


class ParallelizationMethod(Enum):
    SINGLE_THREAD = auto()
    MULTI_THREAD = auto()
