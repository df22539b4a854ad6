"""Shared fixtures for the pySTRIDE test-suite."""

import pytest

from pySTRIDE.CPU import (BoundaryCondition,
                          BoundaryConditionType,
                          DomainBoundaryConditions,
                          MeshSpecs,
                          ParallelExecutor,
                          StructuredMesh,
                          )


@pytest.fixture
def executor():
    return ParallelExecutor(max_workers=4)


@pytest.fixture
def mesh_1d(executor):
    return StructuredMesh.from_specs(MeshSpecs((4,), template_steps=(0.5,)), executor)


@pytest.fixture
def mesh_2d(executor):
    """5 x 5 nodes on the unit square."""
    return StructuredMesh.from_specs(MeshSpecs((5, 5), template_steps=(0.25, 0.25)), executor)


@pytest.fixture
def mesh_3d(executor):
    return StructuredMesh.from_specs(MeshSpecs((4, 3, 3), template_steps=(1.0, 0.5, 0.5)), executor)


@pytest.fixture
def scalar_conditions():
    """Factory: one scalar condition per position, ``{position: (kind, function)}``."""
    def make(faces):
        bcs = DomainBoundaryConditions()
        for position, (kind, function) in faces.items():
            bcs.add(position, kind, BoundaryCondition(function))
        return bcs
    return make


@pytest.fixture
def dirichlet_everywhere(scalar_conditions):
    def make(mesh, function=0.0):
        return scalar_conditions({p: (BoundaryConditionType.DIRICHLET, function) for p in mesh.positions})
    return make
