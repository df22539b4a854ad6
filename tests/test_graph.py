import numpy as np
import pytest

from pySTRIDE._errors import InvalidConfigurationError
from pySTRIDE.CPU import (BoundaryConditionType,
                          ConstraintType,
                          CoordinateType,
                          Direction,
                          DOFAssignment,
                          DOFType,
                          Field,
                          IsoParametricNodeGraph,
                          MeshSpecs,
                          Position,
                          StructuredMesh,
                          )

AXIS_POSITIONS_2D = (Position.LEFT, Position.RIGHT, Position.BOTTOM, Position.TOP)


def graph_at(mesh, indices, depth, **kwargs):
    return IsoParametricNodeGraph(mesh.node(*indices), depth, mesh.parametric_index,
                                  mesh.nodes_per_direction, **kwargs)


def keys(nodes):
    return [n.parametric_key for n in nodes]


def test_interior_node_depth_two(mesh_2d):
    graph = graph_at(mesh_2d, (2, 2), 2)
    for position in AXIS_POSITIONS_2D:
        assert len(graph.graph[position]) == 2
    assert len(graph.graph) == 8
    assert keys(graph.graph[Position.RIGHT]) == [(3, 2), (4, 2)]
    assert keys(graph.graph[Position.BOTTOM]) == [(2, 1), (2, 0)]
    assert keys(graph.graph[Position.TOP | Position.RIGHT]) == [(3, 3), (4, 4)]
    assert keys(graph.graph[Position.BOTTOM | Position.LEFT]) == [(1, 1), (0, 0)]


def test_walk_truncates_at_the_boundary(mesh_2d):
    graph = graph_at(mesh_2d, (1, 2), 2)
    assert keys(graph.graph[Position.LEFT]) == [(0, 2)]
    assert len(graph.graph[Position.RIGHT]) == 2
    assert keys(graph.graph[Position.TOP | Position.LEFT]) == [(0, 3)]


def test_corner_node_has_no_outward_positions(mesh_2d):
    graph = graph_at(mesh_2d, (0, 0), 3)
    assert set(graph.graph) == {Position.RIGHT, Position.TOP, Position.TOP | Position.RIGHT}
    assert len(graph.graph[Position.RIGHT]) == 3


def test_axis_aligned_only(mesh_2d):
    graph = graph_at(mesh_2d, (2, 2), 1, include_diagonals=False)
    assert set(graph.graph) == set(AXIS_POSITIONS_2D)


def test_custom_depth(mesh_2d):
    graph = graph_at(mesh_2d, (2, 2), 2, custom_depth={Position.RIGHT: 1, Position.TOP: 0})
    assert len(graph.graph[Position.RIGHT]) == 1
    assert len(graph.graph[Position.LEFT]) == 2
    assert Position.TOP not in graph.graph

    regraph = graph.node_graph({Position.LEFT: 1})
    assert len(regraph[Position.LEFT]) == 1
    assert len(regraph[Position.TOP]) == 2


@pytest.mark.parametrize("custom_depth", [{Position.FRONT: 1}, {Position.LEFT | Position.RIGHT: 1},
                                          {Position.LEFT: -1}])
def test_invalid_custom_depth(mesh_2d, custom_depth):
    with pytest.raises(InvalidConfigurationError):
        graph_at(mesh_2d, (2, 2), 1, custom_depth=custom_depth)


def test_negative_depth(mesh_2d):
    with pytest.raises(InvalidConfigurationError):
        graph_at(mesh_2d, (2, 2), -1)


def test_graph_dimensionality(mesh_1d):
    graph = graph_at(mesh_1d, (1,), 5)
    assert keys(graph.graph[Position.LEFT]) == [(0,)]
    assert keys(graph.graph[Position.RIGHT]) == [(2,), (3,)]

    mesh = StructuredMesh.from_specs(MeshSpecs((5, 5, 5)))
    graph = graph_at(mesh, (2, 2, 2), 1)
    assert len(graph.graph) == 26
    assert keys(graph.graph[Position.TOP | Position.FRONT | Position.LEFT]) == [(1, 3, 3)]


def test_colinear_nodes(mesh_2d):
    graph = graph_at(mesh_2d, (1, 2), 2)
    assert keys(graph.colinear_nodes(Direction.ONE)) == [(0, 2), (1, 2), (2, 2), (3, 2)]
    assert keys(graph.colinear_nodes(Direction.TWO)) == [(1, 0), (1, 1), (1, 2), (1, 3), (1, 4)]
    both = graph.colinear_nodes()
    assert set(both) == {Direction.ONE, Direction.TWO}
    assert graph.colinear_positions()[Direction.TWO] == (Position.BOTTOM, Position.TOP)


def test_colinear_coordinates(mesh_2d):
    graph = graph_at(mesh_2d, (2, 2), 1)
    coordinates = graph.colinear_coordinates()
    np.testing.assert_allclose(coordinates[Direction.ONE], [[0.25, 0.5], [0.5, 0.5], [0.75, 0.5]])
    parametric = graph.colinear_coordinates(CoordinateType.PARAMETRIC)
    np.testing.assert_allclose(parametric[Direction.TWO], [[2, 1], [2, 2], [2, 3]])


def test_graph_over_ghost_layer(mesh_2d):
    ghost = mesh_2d.ghost_mesh(2)
    graph = IsoParametricNodeGraph(mesh_2d.node(0, 2), 2, ghost.parametric_index, mesh_2d.nodes_per_direction)
    assert keys(graph.graph[Position.LEFT]) == [(-1, 2), (-2, 2)]
    assert all(n.ghost for n in graph.graph[Position.LEFT])
    assert len(graph.graph) == 8
    template = graph.colinear_coordinates(CoordinateType.TEMPLATE)[Direction.ONE]
    np.testing.assert_allclose(template[:, 0], [-0.5, -0.25, 0.0, 0.25, 0.5])


def test_dof_views(mesh_2d, scalar_conditions):
    conditions = scalar_conditions({
        Position.LEFT: (BoundaryConditionType.DIRICHLET, lambda x: x[1]),
        Position.RIGHT: (BoundaryConditionType.NEUMANN, 1.0),
        Position.BOTTOM: (BoundaryConditionType.DIRICHLET, lambda x: x[0]),
        Position.TOP: (BoundaryConditionType.NEUMANN, 0.0),
    })
    assignment = DOFAssignment(mesh_2d, Field.scalar("temperature", DOFType.TEMPERATURE), conditions)

    graph = graph_at(mesh_2d, (1, 1), 1)
    dofs = graph.dof_graph(assignment)
    assert len(dofs[Position.LEFT]) == 1
    assert dofs[Position.LEFT][0][0].dof_type == DOFType.TEMPERATURE

    fixed = graph.dof_graph(assignment, dof_type=DOFType.TEMPERATURE, constraint=ConstraintType.FIXED)
    assert [d.node_id for d in fixed[Position.LEFT]] == [mesh_2d.node(0, 1).global_id]
    assert fixed[Position.RIGHT] == []

    free = graph.dof_graph(assignment.dofs_by_node, constraint=ConstraintType.FREE)
    assert free[Position.LEFT] == []
    assert len(free[Position.RIGHT]) == 1

    bottom = graph_at(mesh_2d, (2, 0), 2)
    np.testing.assert_allclose(bottom.colinear_dof_values(assignment, DOFType.TEMPERATURE, Direction.ONE),
                               [0.0, 0.25, 0.5, 0.75, 1.0])
    assert len(bottom.colinear_dofs(assignment, DOFType.TEMPERATURE)[Direction.TWO]) == 3


def test_dof_views_skip_ghost_nodes(mesh_2d, dirichlet_everywhere):
    assignment = DOFAssignment(mesh_2d, Field.scalar("temperature", DOFType.TEMPERATURE),
                               dirichlet_everywhere(mesh_2d, 3.0))
    ghost = mesh_2d.ghost_mesh(1)
    graph = IsoParametricNodeGraph(mesh_2d.node(0, 2), 1, ghost.parametric_index, mesh_2d.nodes_per_direction)
    assert graph.dof_graph(assignment)[Position.LEFT] == []
    np.testing.assert_allclose(graph.colinear_dof_values(assignment, DOFType.TEMPERATURE, Direction.ONE),
                               [np.nan, 3.0, np.nan])


def test_colinear_dofs_stay_aligned_with_nodes(mesh_2d, dirichlet_everywhere):
    assignment = DOFAssignment(mesh_2d, Field.scalar("temperature", DOFType.TEMPERATURE),
                               dirichlet_everywhere(mesh_2d, 3.0))
    ghost = mesh_2d.ghost_mesh(1)
    graph = IsoParametricNodeGraph(mesh_2d.node(0, 2), 1, ghost.parametric_index, mesh_2d.nodes_per_direction)
    nodes = graph.colinear_nodes(Direction.ONE)
    dofs = graph.colinear_dofs(assignment, DOFType.TEMPERATURE, Direction.ONE)
    assert len(dofs) == len(nodes) == 3
    assert nodes[0].ghost and dofs[0] is None
    assert [dof.node_id for dof in dofs[1:]] == [n.global_id for n in nodes[1:]]
