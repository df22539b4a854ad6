from ..DegreesOfFreedom._dof import ConstraintType, DegreeOfFreedom, DOFType, Field
from ..DegreesOfFreedom._assignment import DOFAssignment
from ..BoundaryConditions._conditions import BoundaryCondition, DomainBoundaryConditions
from ..geom.commons._enums import BoundaryConditionType

__all__ = [
    "ConstraintType",
    "DegreeOfFreedom",
    "DOFType",
    "Field",
    "DOFAssignment",
    "BoundaryCondition",
    "DomainBoundaryConditions",
    "BoundaryConditionType",
]
