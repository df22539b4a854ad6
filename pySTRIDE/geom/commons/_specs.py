from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from ..._errors import InvalidConfigurationError
from ._topology import check_dimensions


@dataclass
class MeshSpecs:
    """
    Geometric specification of a structured mesh.

    Parameters
    ----------
    nodes_per_direction : tuple of int
        Number of nodes along each parametric axis, 1 to 3 entries, each >= 2
    template_steps : tuple of float, optional
        Spacing of the template grid along each axis (default: 1.0 everywhere)
    rotation_angle : float, optional
        Rotation of the template grid about axis three, in degrees (default: 0.0)
    shear_angle_one : float, optional
        Shear of axis one towards axis two, in degrees (default: 0.0)
    shear_angle_two : float, optional
        Shear of axis two towards axis one, in degrees (default: 0.0)
    coordinate_map : callable, optional
        Vectorized map from template coordinates (N, dim) to physical
        coordinates (N, dim). Identity when omitted.
    dtype : np.dtype, optional
        Floating point type of the generated coordinates (default: np.float64)

    Notes
    -----
    Template coordinates are obtained from parametric indices by scaling with
    ``template_steps``, then rotating, then shearing. Rotation and shear only
    act on the first two components; a 1D template is just scaled.

    Examples
    --------
    >>> specs = MeshSpecs((5, 5), template_steps=(0.25, 0.25))
    >>> specs.dimensions
    2
    """
    nodes_per_direction: Tuple[int, ...]
    template_steps: Optional[Tuple[float, ...]] = None
    rotation_angle: float = 0.0
    shear_angle_one: float = 0.0
    shear_angle_two: float = 0.0
    coordinate_map: Optional[Callable[[np.ndarray], np.ndarray]] = None
    dtype: type = np.float64

    def __post_init__(self):
        self.nodes_per_direction = tuple(int(n) for n in self.nodes_per_direction)
        check_dimensions(len(self.nodes_per_direction))
        if any(n < 2 for n in self.nodes_per_direction):
            raise InvalidConfigurationError(
                f"Every axis needs at least 2 nodes, got {self.nodes_per_direction}.")
        if self.template_steps is None:
            self.template_steps = (1.0,) * self.dimensions
        self.template_steps = tuple(float(s) for s in self.template_steps)
        if len(self.template_steps) != self.dimensions:
            raise InvalidConfigurationError("template_steps must have one entry per axis.")

    @property
    def dimensions(self):
        return len(self.nodes_per_direction)

    @property
    def n_nodes(self):
        return int(np.prod(self.nodes_per_direction))

    def affine_parameters(self):
        """Template step vector (3,) and the rotation/shear angles in radians."""
        steps = np.ones(3, dtype=np.float64)
        steps[:self.dimensions] = self.template_steps
        return (steps,
                np.deg2rad(self.rotation_angle),
                np.deg2rad(self.shear_angle_one),
                np.deg2rad(self.shear_angle_two))
