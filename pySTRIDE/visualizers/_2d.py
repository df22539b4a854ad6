import matplotlib
import matplotlib.pyplot as plt
import numpy as np
from matplotlib import markers
from matplotlib.path import Path

from .._errors import InvalidConfigurationError
from ..geom.commons._enums import CoordinateType


def align_marker(marker, halign="center", valign="middle"):

    if isinstance(halign, (str)):
        halign = {
            "right": -1.0,
            "middle": 0.0,
            "center": 0.0,
            "left": 1.0,
        }[halign]

    if isinstance(valign, (str)):
        valign = {
            "top": -1.0,
            "middle": 0.0,
            "center": 0.0,
            "bottom": 1.0,
        }[valign]

    bm = markers.MarkerStyle(marker)

    m_arr = bm.get_path().transformed(bm.get_transform()).vertices

    m_arr[:, 0] += halign / 2
    m_arr[:, 1] += valign / 2

    return Path(m_arr, bm.get_path().codes)


def structured_quads(n1, n2):
    """Corner global ids of the cells of an ``n1 x n2`` structured grid, counter-clockwise."""
    i, j = np.meshgrid(np.arange(n1 - 1), np.arange(n2 - 1), indexing="ij")
    a = (i + j * n1).reshape(-1, order="F")
    return np.stack([a, a + 1, a + 1 + n1, a + n1], axis=1)


def plot_mesh_2D(
    mesh,
    ax=None,
    coordinate_type=CoordinateType.NATURAL,
    ghost_mesh=None,
    face_color="grey",
    edge_color="black",
    ghost_color="tomato",
    **kwargs
):

    if mesh.dimensions != 2:
        raise InvalidConfigurationError("This function only supports 2D meshes")

    if ax is None:
        ax = plt.gca()

    nodes = mesh.coordinates(coordinate_type)
    n1, n2 = (mesh.nodes_per_direction[d] for d in mesh.directions)
    verts = nodes[structured_quads(n1, n2)]

    ax.set_aspect("equal")
    pc = matplotlib.collections.PolyCollection(verts, color=edge_color, facecolor=face_color, **kwargs)
    ax.add_collection(pc)

    if ghost_mesh is not None and len(ghost_mesh) > 0:
        # ghost nodes have no natural coordinates
        ghost_type = CoordinateType.TEMPLATE if coordinate_type == CoordinateType.NATURAL else coordinate_type
        ghosts = np.stack([node.position(ghost_type) for node in ghost_mesh.ghost_nodes])
        ax.scatter(ghosts[:, 0], ghosts[:, 1], marker="x", s=20, color=ghost_color, alpha=0.7)

    ax.autoscale()
    ax.set_xlabel("X Axis")
    ax.set_ylabel("Y Axis")

    return ax


def plot_dofs_2D(
    assignment,
    ax=None,
    face_color="grey",
    edge_color="black",
    x_color="tomato",
    y_color="royalblue",
    f_color="#8e0000",
    **kwargs
):

    mesh = assignment.mesh
    ax = plot_mesh_2D(mesh, ax=ax, face_color=face_color, edge_color=edge_color, **kwargs)

    nodes = mesh.coordinates(CoordinateType.NATURAL)
    k = len(assignment.field)
    c = assignment.constraints.reshape(-1, k)
    f = np.nan_to_num(assignment.flux_values.reshape(-1, k), nan=0.0)

    x_bc = c[:, 0]
    ax.scatter(
        nodes[x_bc][:, 0],
        nodes[x_bc][:, 1],
        marker=align_marker(">", "right", "middle") if k > 1 else "o",
        s=500 if k > 1 else 80,
        color=x_color,
        alpha=0.7,
    )
    if k > 1:
        y_bc = c[:, 1]
        ax.scatter(
            nodes[y_bc][:, 0],
            nodes[y_bc][:, 1],
            marker=align_marker("^", "middle", "top"),
            s=500,
            color=y_color,
            alpha=0.7,
        )

    flux_nodes = (f != 0).sum(1) > 0
    if not flux_nodes.any():
        return ax

    if k > 1:
        ax.quiver(
            nodes[flux_nodes, 0],
            nodes[flux_nodes, 1],
            f[flux_nodes, 0] / np.abs(f).max(),
            f[flux_nodes, 1] / np.abs(f).max(),
            color=f_color,
            scale=15,
            width=0.005,
        )
    else:
        ax.scatter(
            nodes[flux_nodes, 0],
            nodes[flux_nodes, 1],
            marker="D",
            s=40,
            color=f_color,
            alpha=0.7,
        )

    return ax
