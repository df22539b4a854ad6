import numpy as np
import pytest

from pySTRIDE._errors import InvalidConfigurationError, NotFoundError, OutOfRangeError
from pySTRIDE.core.CPU._geom import covariant_base_vectors
from pySTRIDE.CPU import (CoordinateType,
                          Direction,
                          MeshSpecs,
                          Node,
                          ParallelExecutor,
                          Position,
                          StructuredMesh,
                          generate_structured_nodes,
                          )


@pytest.mark.parametrize("shape", [(4,), (5, 5), (4, 3, 3), (2, 2), (3, 4, 5)])
def test_partitions_are_consistent(shape):
    mesh = StructuredMesh.from_specs(MeshSpecs(shape), ParallelExecutor(max_workers=3))
    n_total = int(np.prod(shape))
    assert len(mesh.total_nodes) == n_total
    assert len(mesh.internal_nodes) == int(np.prod([n - 2 for n in shape]))

    boundary_ids = {n.global_id for nodes in mesh.boundary_nodes.values() for n in nodes}
    internal_ids = {n.global_id for n in mesh.internal_nodes}
    assert boundary_ids.isdisjoint(internal_ids)
    assert len(boundary_ids) + len(internal_ids) == n_total

    listed = sum(len(nodes) for nodes in mesh.boundary_nodes.values())
    double_counted = listed - len(boundary_ids)
    assert n_total == len(internal_ids) + listed - double_counted

    owned = [n.global_id for nodes in mesh.owned_boundary_nodes.values() for n in nodes]
    assert sorted(owned) == sorted(boundary_ids)


@pytest.mark.parametrize("shape", [(4,), (5, 5), (4, 3, 3)])
def test_exactly_one_partition_id_is_set(shape):
    mesh = StructuredMesh.from_specs(MeshSpecs(shape))
    for gid, node in enumerate(mesh.total_nodes):
        assert node.global_id == gid
        assert (node.id.boundary_id is None) != (node.id.internal_id is None)
    assert [n.id.internal_id for n in mesh.internal_nodes] == list(range(len(mesh.internal_nodes)))


def test_global_ids_follow_total_order(mesh_3d):
    n1, n2, _ = (mesh_3d.nodes_per_direction[d] for d in mesh_3d.directions)
    for i, j, k in [(0, 0, 0), (3, 0, 0), (1, 2, 0), (2, 1, 2)]:
        node = mesh_3d.node(i, j, k)
        assert node.global_id == i + j * n1 + k * n1 * n2
        assert node.parametric_key == (i, j, k)


def test_boundary_faces_of_square(mesh_2d):
    assert mesh_2d.positions == (Position.LEFT, Position.RIGHT, Position.BOTTOM, Position.TOP)
    for position in mesh_2d.positions:
        assert len(mesh_2d.boundary_nodes[position]) == 5
    assert [len(mesh_2d.owned_boundary_nodes[p]) for p in mesh_2d.positions] == [5, 5, 3, 3]
    assert [n.parametric_key for n in mesh_2d.boundary_nodes[Position.TOP]] == [(i, 4) for i in range(5)]
    assert mesh_2d.boundary_position(mesh_2d.node(0, 0)) == Position.LEFT
    assert mesh_2d.boundary_position(mesh_2d.node(2, 0)) == Position.BOTTOM
    with pytest.raises(NotFoundError):
        mesh_2d.boundary_position(mesh_2d.node(2, 2))


def test_coordinates(mesh_2d):
    np.testing.assert_allclose(mesh_2d.node(4, 2).position(), [1.0, 0.5])
    np.testing.assert_allclose(mesh_2d.node(4, 2).position(CoordinateType.TEMPLATE), [1.0, 0.5])
    coordinates = mesh_2d.coordinates()
    assert coordinates.shape == (25, 2)
    np.testing.assert_allclose(coordinates[7], [0.5, 0.25])


def test_lookup_errors(mesh_2d):
    with pytest.raises(OutOfRangeError):
        mesh_2d.node(5, 0)
    with pytest.raises(NotFoundError):
        mesh_2d.node(0, -1)
    with pytest.raises(OutOfRangeError):
        mesh_2d.node(1, 1, 1)
    with pytest.raises(OutOfRangeError):
        mesh_2d.node_by_id(25)
    with pytest.raises(NotFoundError):
        mesh_2d.node_at((7, 1))
    assert mesh_2d.node_at((3, 1)) is mesh_2d.node(3, 1)
    assert mesh_2d.node_by_id(8) is mesh_2d.node(3, 1)


def test_nearest_nodes(mesh_2d):
    nodes = mesh_2d.nearest_nodes([[0.26, 0.49], [0.99, 0.01]])
    assert [n.parametric_key for n in nodes] == [(1, 2), (4, 0)]


@pytest.mark.parametrize("position,expected", [
    (Position.LEFT, [-1.0, 0.0]),
    (Position.RIGHT, [1.0, 0.0]),
    (Position.BOTTOM, [0.0, -1.0]),
    (Position.TOP, [0.0, 1.0]),
])
def test_normals_2d_point_outward(mesh_2d, position, expected):
    node = mesh_2d.boundary_nodes[position][2]
    np.testing.assert_allclose(mesh_2d.normal_unit_vector(position, node), expected, atol=1e-12)


@pytest.mark.parametrize("position,expected", [
    (Position.LEFT, [-1.0, 0.0, 0.0]),
    (Position.RIGHT, [1.0, 0.0, 0.0]),
    (Position.BACK, [0.0, -1.0, 0.0]),
    (Position.FRONT, [0.0, 1.0, 0.0]),
    (Position.BOTTOM, [0.0, 0.0, -1.0]),
    (Position.TOP, [0.0, 0.0, 1.0]),
])
def test_normals_3d_point_outward(mesh_3d, position, expected):
    node = mesh_3d.boundary_nodes[position][0]
    np.testing.assert_allclose(mesh_3d.normal_unit_vector(position, node), expected, atol=1e-12)


def test_normals_1d(mesh_1d):
    np.testing.assert_allclose(mesh_1d.normal_unit_vector(Position.LEFT, mesh_1d.node(0)), [-1.0])
    np.testing.assert_allclose(mesh_1d.normal_unit_vector(Position.RIGHT, mesh_1d.node(3)), [1.0])


def test_normals_follow_rotation():
    mesh = StructuredMesh.from_specs(MeshSpecs((3, 3), rotation_angle=90.0))
    node = mesh.node(2, 1)
    np.testing.assert_allclose(node.position(), [-1.0, 2.0], atol=1e-12)
    np.testing.assert_allclose(mesh.normal_unit_vector(Position.RIGHT, node), [0.0, 1.0], atol=1e-12)


@pytest.mark.parametrize("position", [Position.FRONT, Position.BACK, Position.TOP | Position.LEFT])
def test_normal_for_invalid_position(mesh_2d, position):
    with pytest.raises(InvalidConfigurationError):
        mesh_2d.normal_unit_vector(position, mesh_2d.node(0, 0))


def test_metrics_are_cached(mesh_2d):
    metrics = mesh_2d.compute_metrics()
    assert mesh_2d.compute_metrics() is metrics
    assert len(metrics) == 25
    assert mesh_2d.metrics(mesh_2d.node(2, 2)).jacobian == pytest.approx(0.0625)


def test_coordinate_map():
    specs = MeshSpecs((5, 3), template_steps=(0.25, 0.5), coordinate_map=lambda x: 2.0 * x)
    mesh = StructuredMesh.from_specs(specs)
    np.testing.assert_allclose(mesh.node(4, 0).position(), [2.0, 0.0])
    np.testing.assert_allclose(mesh.node(4, 0).position(CoordinateType.TEMPLATE), [1.0, 0.0])
    assert mesh.metrics(mesh.node(1, 1)).jacobian == pytest.approx(0.5 * 1.0)


def test_coordinate_map_with_wrong_shape():
    specs = MeshSpecs((3, 3), coordinate_map=lambda x: x[:, :1])
    with pytest.raises(InvalidConfigurationError):
        generate_structured_nodes(specs)


@pytest.mark.parametrize("shape", [(1, 4), (4, 4, 4, 4), ()])
def test_invalid_specs(shape):
    with pytest.raises(InvalidConfigurationError):
        MeshSpecs(shape)


def test_empty_slot_is_reported():
    nodes = generate_structured_nodes(MeshSpecs((3, 3)))
    nodes[1, 1] = None
    with pytest.raises(NotFoundError):
        StructuredMesh(nodes)


def test_parametric_coordinates_are_filled_in():
    nodes = np.empty((3, 2), dtype=object)
    for i in range(3):
        for j in range(2):
            nodes[i, j] = Node({CoordinateType.NATURAL: [i * 0.5, j * 1.0]})
    mesh = StructuredMesh(nodes)
    assert mesh.node(2, 1).parametric_key == (2, 1)
    assert mesh.node_at((2, 1)).global_id == 5


def test_missing_natural_coordinates():
    nodes = np.empty((2, 2), dtype=object)
    for i in range(2):
        for j in range(2):
            nodes[i, j] = Node({CoordinateType.PARAMETRIC: [i, j]})
    with pytest.raises(NotFoundError):
        StructuredMesh(nodes)


def test_unplaced_node_leaves_input_untouched():
    nodes = generate_structured_nodes(MeshSpecs((3, 3)))
    del nodes[2, 2].coordinates[CoordinateType.NATURAL]
    del nodes[0, 0].coordinates[CoordinateType.PARAMETRIC]
    with pytest.raises(NotFoundError):
        StructuredMesh(nodes)
    assert all(node.id is None for node in nodes.reshape(-1))
    assert CoordinateType.PARAMETRIC not in nodes[0, 0].coordinates


def test_covariant_base_vectors_of_uniform_grid():
    n1, n2 = 3, 2
    i, j = np.meshgrid(np.arange(n1), np.arange(n2), indexing="ij")
    coordinates = np.zeros((n1 * n2, 3))
    coordinates[:, 0] = 0.5 * i.reshape(-1, order="F")
    coordinates[:, 1] = 2.0 * j.reshape(-1, order="F")
    base = covariant_base_vectors(coordinates, n1, n2, 1, 2)
    assert base.shape == (n1 * n2, 2, 3)
    np.testing.assert_allclose(base[:, 0], np.tile([0.5, 0.0, 0.0], (n1 * n2, 1)))
    np.testing.assert_allclose(base[:, 1], np.tile([0.0, 2.0, 0.0], (n1 * n2, 1)))


def test_metrics_3d(mesh_3d):
    metrics = mesh_3d.metrics(mesh_3d.node(1, 1, 1))
    np.testing.assert_allclose(metrics.covariant_base_vectors[Direction.THREE], [0.0, 0.0, 0.5])
    assert metrics.jacobian == pytest.approx(1.0 * 0.5 * 0.5)
