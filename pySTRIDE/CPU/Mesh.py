from ..geom.CPU._mesh import StructuredMesh, generate_structured_nodes
from ..geom.CPU._ghost import GhostPseudoMesh
from ..geom.commons._graph import IsoParametricNodeGraph
from ..geom.commons._specs import MeshSpecs
from ..geom.commons._node import Metrics, Node, NodeId
from ..geom.commons._enums import CoordinateType, Direction, Position

__all__ = [
    "StructuredMesh",
    "generate_structured_nodes",
    "GhostPseudoMesh",
    "IsoParametricNodeGraph",
    "MeshSpecs",
    "Metrics",
    "Node",
    "NodeId",
    "CoordinateType",
    "Direction",
    "Position",
]
