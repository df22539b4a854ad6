"""
Dimension tables of structured meshes.

Everything that differs between 1-D, 2-D and 3-D structured meshes lives here
as data: which positions bound the domain along which axis, their canonical
order, and the ordered pair of covariant base vectors whose cross product is
the outward normal of each face. Mesh and graph code stay dimension-generic
and only index these tables.
"""
import itertools

import numpy as np

from ..._errors import InvalidConfigurationError
from ._enums import Direction, Position

# axis -> (position at the low end, position at the high end)
AXIS_POSITIONS = {
    1: ((Position.LEFT, Position.RIGHT),),
    2: ((Position.LEFT, Position.RIGHT),
        (Position.BOTTOM, Position.TOP)),
    3: ((Position.LEFT, Position.RIGHT),
        (Position.BACK, Position.FRONT),
        (Position.BOTTOM, Position.TOP)),
}

# Missing axes of 1-D/2-D meshes are padded with unit out-of-space vectors,
# so the same cross product yields the in-plane outward normal.
NORMAL_DIRECTIONS = {
    1: {
        Position.LEFT: (Direction.THREE, Direction.TWO),
        Position.RIGHT: (Direction.TWO, Direction.THREE),
    },
    2: {
        Position.LEFT: (Direction.THREE, Direction.TWO),
        Position.RIGHT: (Direction.TWO, Direction.THREE),
        Position.BOTTOM: (Direction.ONE, Direction.THREE),
        Position.TOP: (Direction.THREE, Direction.ONE),
    },
    3: {
        Position.LEFT: (Direction.THREE, Direction.TWO),
        Position.RIGHT: (Direction.TWO, Direction.THREE),
        Position.BACK: (Direction.ONE, Direction.THREE),
        Position.FRONT: (Direction.THREE, Direction.ONE),
        Position.BOTTOM: (Direction.TWO, Direction.ONE),
        Position.TOP: (Direction.ONE, Direction.TWO),
    },
}


def check_dimensions(dimensions):
    if dimensions not in AXIS_POSITIONS:
        raise InvalidConfigurationError(f"Only 1D, 2D and 3D structured meshes are supported, got {dimensions}D.")
    return dimensions


def directions(dimensions):
    return tuple(Direction(axis) for axis in range(check_dimensions(dimensions)))


def boundary_positions(dimensions):
    """Boundary positions of a mesh in canonical order (axis by axis, low end first)."""
    return tuple(p for pair in AXIS_POSITIONS[check_dimensions(dimensions)] for p in pair)


def boundary_axis(position, dimensions):
    """
    Return ``(axis, side)`` of a face, ``side`` being 0 at the low end and -1
    at the high end of the axis.
    """
    for axis, pair in enumerate(AXIS_POSITIONS[check_dimensions(dimensions)]):
        if position in pair:
            return axis, (0 if position == pair[0] else -1)
    raise InvalidConfigurationError(f"{position} is not a boundary position of a {dimensions}D mesh.")


def position_from_offset(offset):
    """Map an offset in {-1, 0, 1}^dim to the (possibly combined) relative position."""
    dimensions = check_dimensions(len(offset))
    position = None
    for axis, step in enumerate(offset):
        if step == 0:
            continue
        member = AXIS_POSITIONS[dimensions][axis][0 if step < 0 else 1]
        position = member if position is None else position | member
    if position is None:
        raise InvalidConfigurationError("The zero offset has no relative position.")
    return position


def offset_from_position(position, dimensions):
    offset = [0] * check_dimensions(dimensions)
    matched = Position(0)
    for axis, (low, high) in enumerate(AXIS_POSITIONS[dimensions]):
        if low in position and high in position:
            raise InvalidConfigurationError(f"{position} points both ways along axis {axis}.")
        if low in position:
            offset[axis] = -1
            matched |= low
        elif high in position:
            offset[axis] = 1
            matched |= high
    if matched != position or matched == Position(0):
        raise InvalidConfigurationError(f"{position} is not a relative position of a {dimensions}D mesh.")
    return tuple(offset)


def neighbour_offsets(dimensions, include_diagonals=True):
    """All unit offsets around a node, axis-aligned ones first."""
    offsets = [o for o in itertools.product((-1, 0, 1), repeat=check_dimensions(dimensions)) if any(o)]
    if not include_diagonals:
        offsets = [o for o in offsets if np.count_nonzero(o) == 1]
    return sorted(offsets, key=lambda o: (np.count_nonzero(o), o))
