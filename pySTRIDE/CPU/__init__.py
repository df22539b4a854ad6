"""CPU backend public API.

Importing from this module gives access to the CPU implementations of the
pySTRIDE components (structured meshes, node graphs, degrees of freedom and
the parallel executor). Typical usage:

>>> from pySTRIDE.CPU import StructuredMesh, MeshSpecs, DOFAssignment, Field
"""

from .Parallel import *
from .Mesh import *
from .DegreesOfFreedom import *
