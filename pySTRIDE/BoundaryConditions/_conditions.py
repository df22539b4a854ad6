from collections import defaultdict
from typing import Callable, List, Optional, Union

import numpy as np

from .._errors import InvalidConfigurationError
from ..geom.commons._enums import BoundaryConditionType, Position

ScalarFunction = Union[float, Callable[[np.ndarray], float]]
VectorFunction = Union[np.ndarray, list, tuple, Callable[[np.ndarray], np.ndarray]]


class BoundaryCondition:
    """
    Prescribed quantity on a boundary, as a function of physical position.

    Parameters
    ----------
    scalar_function : callable or float, optional
        ``f(x) -> float``. A number is taken as a constant
    vector_function : callable or array-like, optional
        ``f(x) -> array``. An array-like is taken as a constant

    Examples
    --------
    >>> BoundaryCondition(lambda x: x[0] ** 2).scalar_value_at(np.array([2.0, 0.0]))
    4.0
    >>> BoundaryCondition(vector_function=[0.0, -1.0]).vector_value_at(np.zeros(2))
    array([ 0., -1.])
    """
    def __init__(self, scalar_function: Optional[ScalarFunction] = None,
                 vector_function: Optional[VectorFunction] = None):
        if scalar_function is None and vector_function is None:
            raise InvalidConfigurationError("A boundary condition needs a scalar or a vector function.")
        self.scalar_function = scalar_function
        self.vector_function = vector_function

    def scalar_value_at(self, x) -> float:
        if self.scalar_function is None:
            raise InvalidConfigurationError("Boundary condition has no scalar function.")
        if callable(self.scalar_function):
            return float(self.scalar_function(x))
        return float(self.scalar_function)

    def vector_value_at(self, x) -> np.ndarray:
        if self.vector_function is None:
            raise InvalidConfigurationError("Boundary condition has no vector function.")
        if callable(self.vector_function):
            value = self.vector_function(x)
        else:
            value = self.vector_function
        return np.atleast_1d(np.asarray(value, dtype=np.float64))


class DomainBoundaryConditions:
    """
    Boundary conditions of a domain keyed by face and kind.

    Examples
    --------
    >>> bcs = DomainBoundaryConditions()
    >>> bcs.add(Position.LEFT, BoundaryConditionType.DIRICHLET, BoundaryCondition(0.0))
    >>> bcs.add_vector(Position.TOP, BoundaryConditionType.NEUMANN, lambda x: [0.0, -1.0], 2)
    >>> len(bcs.get(Position.TOP, BoundaryConditionType.NEUMANN))
    2
    """
    def __init__(self):
        self._conditions = defaultdict(list)

    def add(self, position: Position, kind: BoundaryConditionType, condition: BoundaryCondition):
        self._conditions[(position, kind)].append(condition)

    def add_vector(self, position: Position, kind: BoundaryConditionType,
                   function: VectorFunction, n_components: int):
        """
        Register one instance per component of a vector quantity, all sharing
        ``function``. Component ``i`` drives the ``i``-th DOF type of a field.
        """
        if n_components < 1:
            raise InvalidConfigurationError(f"n_components must be at least 1, got {n_components}.")
        condition = BoundaryCondition(vector_function=function)
        for _ in range(n_components):
            self.add(position, kind, condition)

    def get(self, position: Position, kind: BoundaryConditionType) -> List[BoundaryCondition]:
        return list(self._conditions.get((position, kind), []))

    def positions(self):
        return sorted({position for position, _ in self._conditions}, key=lambda p: p.value)

    def __len__(self):
        return sum(len(v) for v in self._conditions.values())
