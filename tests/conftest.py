"""
Shared test fixtures for polygon triangulation tests.
"""
import sys
from pathlib import Path

import numpy as np
import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mesh_io import write_obj
from optimal_triangulation import CostPlan, Objective
from optimal_triangulation.contracts import NO_SPLIT
from surface_mesh import SurfaceMesh


CUBE_POINTS = [
    (0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0),
    (0, 0, 1), (1, 0, 1), (1, 1, 1), (0, 1, 1),
]
# Outward-facing quads.
CUBE_QUADS = [
    [0, 3, 2, 1],
    [4, 5, 6, 7],
    [0, 1, 5, 4],
    [2, 3, 7, 6],
    [0, 4, 7, 3],
    [1, 2, 6, 5],
]


def regular_polygon_points(n: int, radius: float = 1.0, z: float = 0.0) -> np.ndarray:
    angles = 2.0 * np.pi * np.arange(n) / n
    return np.column_stack(
        [radius * np.cos(angles), radius * np.sin(angles), np.full(n, z)]
    )


def single_face_mesh(points) -> SurfaceMesh:
    return SurfaceMesh.from_polygons(points, [list(range(len(points)))])


def crossing_hexagon_plan() -> CostPlan:
    """Hexagon plan with triangles (0,1,5), (1,4,5), (1,2,4), (2,3,4).

    Once diagonal 0-3 exists, each of the plan's diagonals 1-5, 1-4 and 2-4
    joins vertices on opposite sides of it.
    """
    split = np.full((6, 6), NO_SPLIT, dtype=int)
    split[0, 5] = 1
    split[1, 5] = 4
    split[1, 4] = 2
    split[2, 4] = 3
    return CostPlan(objective=Objective.MIN_AREA, cost=np.zeros((6, 6)), split=split)


@pytest.fixture
def unit_square_mesh():
    """Planar unit square as a single quad face."""
    return single_face_mesh([(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)])


@pytest.fixture
def pentagon_mesh():
    """Regular pentagon with unit circumradius."""
    return single_face_mesh(regular_polygon_points(5))


@pytest.fixture
def cube_quad_mesh():
    """Closed unit cube made of six quads."""
    return SurfaceMesh.from_polygons(CUBE_POINTS, CUBE_QUADS)


@pytest.fixture
def bowtie_mesh():
    """Two quads touching only at vertex 0 (non-manifold vertex)."""
    points = [
        (0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0),
        (-1, 0, 0), (-1, -1, 0), (0, -1, 0),
    ]
    return SurfaceMesh.from_polygons(points, [[0, 1, 2, 3], [0, 4, 5, 6]])


@pytest.fixture
def cube_obj_file(tmp_path: Path) -> str:
    path = tmp_path / "cube_quads.obj"
    write_obj(SurfaceMesh.from_polygons(CUBE_POINTS, CUBE_QUADS), path)
    return str(path)
