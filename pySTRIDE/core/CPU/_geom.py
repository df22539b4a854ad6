import numpy as np
from numba import njit, prange


@njit("i4[:, :](i4, i4, i4)", cache=True, parallel=True)
def generate_parametric_grid(n1, n2, n3):
    """
    Parametric coordinates of a structured grid in total order
    (global id = i + j * n1 + k * n1 * n2).
    """
    n_nodes = n1 * n2 * n3
    grid = np.zeros((n_nodes, 3), dtype=np.int32)

    for counter in prange(n_nodes):
        i = counter % n1                # i varies fastest
        j = (counter // n1) % n2
        k = counter // (n1 * n2)        # k varies slowest
        grid[counter, 0] = i
        grid[counter, 1] = j
        grid[counter, 2] = k

    return grid


@njit("i4[:, :](i4, i4, i4, i4, i4)", cache=True, parallel=True)
def generate_extended_grid(n1, n2, n3, depth, dims):
    """
    Parametric coordinates of a grid extended by ``depth`` layers below and
    above every active axis, in total order of the extended grid.
    """
    e1 = n1 + 2 * depth
    e2 = n2 + 2 * depth if dims > 1 else n2
    e3 = n3 + 2 * depth if dims > 2 else n3
    n_nodes = e1 * e2 * e3
    grid = np.zeros((n_nodes, 3), dtype=np.int32)

    for counter in prange(n_nodes):
        grid[counter, 0] = counter % e1 - depth
        grid[counter, 1] = (counter // e1) % e2 - (depth if dims > 1 else 0)
        grid[counter, 2] = counter // (e1 * e2) - (depth if dims > 2 else 0)

    return grid


@njit("b1[:](i4[:, :], i4, i4, i4)", cache=True, parallel=True)
def inside_grid_mask(grid, n1, n2, n3):
    mask = np.zeros(grid.shape[0], dtype=np.bool_)

    for counter in prange(grid.shape[0]):
        i = grid[counter, 0]
        j = grid[counter, 1]
        k = grid[counter, 2]
        mask[counter] = i >= 0 and i < n1 and j >= 0 and j < n2 and k >= 0 and k < n3

    return mask


@njit("b1[:](i4, i4, i4, i4)", cache=True, parallel=True)
def boundary_mask(n1, n2, n3, dims):
    """
    True for nodes lying on at least one face of the grid. Only the first
    ``dims`` axes are considered.
    """
    n_nodes = n1 * n2 * n3
    mask = np.zeros(n_nodes, dtype=np.bool_)

    for counter in prange(n_nodes):
        i = counter % n1
        j = (counter // n1) % n2
        k = counter // (n1 * n2)
        on_boundary = i == 0 or i == n1 - 1
        if dims > 1:
            on_boundary = on_boundary or j == 0 or j == n2 - 1
        if dims > 2:
            on_boundary = on_boundary or k == 0 or k == n3 - 1
        mask[counter] = on_boundary

    return mask


@njit(["f8[:, :](i4[:, :], f8[:], f8, f8, f8, i4)"], cache=True, parallel=True)
def template_coordinates(parametric, steps, rotation, shear_one, shear_two, dims):
    """
    Affine template map: scale by ``steps``, rotate about axis three, shear.

    Rotation and shear only mix the first two components and are skipped for
    1D grids. Angles are in radians.
    """
    out = np.zeros((parametric.shape[0], 3), dtype=np.float64)
    cos_r = np.cos(rotation)
    sin_r = np.sin(rotation)
    tan_one = np.tan(shear_one)
    tan_two = np.tan(shear_two)

    for n in prange(parametric.shape[0]):
        x = parametric[n, 0] * steps[0]
        y = parametric[n, 1] * steps[1]
        z = parametric[n, 2] * steps[2]
        if dims > 1:
            xr = cos_r * x - sin_r * y
            yr = sin_r * x + cos_r * y
            x = xr + tan_one * yr
            y = yr + tan_two * xr
        out[n, 0] = x
        out[n, 1] = y
        out[n, 2] = z

    return out


@njit("f8[:, :, :](f8[:, :], i4, i4, i4, i4)", cache=True, parallel=True)
def covariant_base_vectors(coordinates, n1, n2, n3, dims):
    """
    Finite difference derivatives of physical coordinates along each
    parametric axis.

    ``coordinates`` is given in total order with shape (n_nodes, 3). Central
    differences are used in the interior, one-sided differences on the faces.
    Returns an array of shape (n_nodes, dims, 3).
    """
    n_nodes = n1 * n2 * n3
    out = np.zeros((n_nodes, dims, 3), dtype=np.float64)
    for counter in prange(n_nodes):
        # prange yields an unsigned index, keep all offsets signed
        node = np.int64(counter)
        for axis in range(dims):
            if axis == 0:
                index = node % n1
                count = np.int64(n1)
                stride = np.int64(1)
            elif axis == 1:
                index = (node // n1) % n2
                count = np.int64(n2)
                stride = np.int64(n1)
            else:
                index = node // (n1 * n2)
                count = np.int64(n3)
                stride = np.int64(n1 * n2)
            lo = node - stride
            hi = node + stride
            scale = 0.5
            if index == 0:
                lo = node
                scale = 1.0
            elif index == count - 1:
                hi = node
                scale = 1.0
            for c in range(3):
                out[node, axis, c] = (coordinates[hi, c] - coordinates[lo, c]) * scale

    return out
