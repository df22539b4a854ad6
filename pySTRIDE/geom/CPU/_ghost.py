import logging

import numpy as np

from ...core.CPU._geom import generate_extended_grid, inside_grid_mask, template_coordinates
from ..commons._enums import CoordinateType
from ..commons._node import Node

logger = logging.getLogger(__name__)


class GhostPseudoMesh:
    """
    Layer of synthetic nodes surrounding a structured mesh.

    The logical index space of the mesh is extended by ``depth`` nodes below
    and above every axis. Each extended parametric coordinate without a real
    node gets a ghost node positioned in the parametric and template systems
    only (template map taken from the mesh specs). Ghost nodes have no id, no
    natural coordinates and no metrics, and are never inserted into the mesh.

    Parameters
    ----------
    mesh : StructuredMesh
        Real mesh the layer surrounds (not owned)
    depth : int
        Number of ghost nodes added at each end of every axis

    Attributes
    ----------
    ghost_nodes : list
        Ghost nodes in total order of the extended grid
    ghost_nodes_per_direction : dict
        Direction -> number of ghost nodes added at each end of that axis
    nodes_per_direction : dict
        Direction -> node count of the extended grid
    parametric_index : dict
        Integer parametric tuple -> node, over real and ghost nodes

    Examples
    --------
    >>> ghost = mesh.ghost_mesh(1)   # 5 x 5 mesh
    >>> len(ghost.ghost_nodes)
    24
    """
    def __init__(self, mesh, depth: int):
        self.mesh = mesh
        self.depth = depth
        dims = mesh.dimensions
        self.ghost_nodes_per_direction = {d: depth for d in mesh.directions}
        self.nodes_per_direction = {d: n + 2 * depth for d, n in mesh.nodes_per_direction.items()}

        n = [1, 1, 1]
        n[:dims] = [mesh.nodes_per_direction[d] for d in mesh.directions]
        grid = generate_extended_grid(n[0], n[1], n[2], depth, dims)
        outside = ~inside_grid_mask(grid, n[0], n[1], n[2])
        parametric = np.ascontiguousarray(grid[outside])

        steps, rotation, shear_one, shear_two = mesh.specs.affine_parameters()
        template = template_coordinates(parametric, steps, rotation, shear_one, shear_two, dims)

        self.ghost_nodes = [
            Node({CoordinateType.PARAMETRIC: parametric[i, :dims],
                  CoordinateType.TEMPLATE: template[i, :dims]}, ghost=True)
            for i in range(parametric.shape[0])
        ]

        self.parametric_index = dict(mesh.parametric_index)
        for node in self.ghost_nodes:
            self.parametric_index[node.parametric_key] = node

        logger.info("Ghost layer of depth %d: %d ghost nodes", depth, len(self.ghost_nodes))

    @property
    def dimensions(self):
        return self.mesh.dimensions

    def __len__(self):
        return len(self.ghost_nodes)
