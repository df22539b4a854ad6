"""pySTRIDE public package.

pySTRIDE (STRuctured Iso-parametric Discretization Engine) is the
preprocessing stage of a structured-mesh finite-element workflow: it builds
1D to 3D structured meshes, classifies their nodes, walks iso-parametric
neighbourhoods for stencil operations and derives the free, Dirichlet and
Neumann degrees of freedom a solver assembles.

Examples
--------
>>> from pySTRIDE.CPU import StructuredMesh, MeshSpecs, Field, DOFType
>>> mesh = StructuredMesh.from_specs(MeshSpecs((5, 5)))
>>> from pySTRIDE.visualizers._2d import plot_mesh_2D
"""
__version__ = "0.1.0"
