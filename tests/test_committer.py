"""Tests for diagonal insertion on live topology."""
import logging

import numpy as np

from conftest import crossing_hexagon_plan, regular_polygon_points, single_face_mesh
from optimal_triangulation import (
    Objective,
    collect_boundary,
    commit_plan,
    insert_diagonal,
    plan_polygon,
)
from optimal_triangulation.contracts import NO_SPLIT, CostPlan


def _fan_plan(n: int) -> CostPlan:
    """Hand-built plan fanning every range from its start vertex."""
    split = np.full((n, n), NO_SPLIT, dtype=int)
    for i in range(n):
        for k in range(i + 2, n):
            split[i, k] = k - 1
    cost = np.zeros((n, n))
    return CostPlan(objective=Objective.MIN_AREA, cost=cost, split=split)


class TestInsertDiagonal:
    """Two-directional search for a shared face loop."""

    def test_existing_edge_is_success_without_insert(self, unit_square_mesh):
        boundary = collect_boundary(unit_square_mesh, 0)
        assert insert_diagonal(unit_square_mesh, boundary, 0, 1) is False
        assert unit_square_mesh.n_edges == 4

    def test_inserts_from_first_vertex(self, unit_square_mesh):
        boundary = collect_boundary(unit_square_mesh, 0)
        assert insert_diagonal(unit_square_mesh, boundary, 1, 3) is True
        assert unit_square_mesh.is_edge(1, 3)
        assert unit_square_mesh.n_faces == 2

    def test_second_walk_finds_split_face(self):
        mesh = single_face_mesh(regular_polygon_points(6))
        boundary = collect_boundary(mesh, 0)
        assert insert_diagonal(mesh, boundary, 0, 3) is True

        # The original half-edge into vertex 3 now bounds the loop 0-1-2-3,
        # which does not hold vertex 5; only the walk from 5 can succeed.
        loop_of_3 = mesh.face_vertices(mesh.face(boundary.halfedges[3]))
        assert sorted(loop_of_3) == [0, 1, 2, 3]

        assert insert_diagonal(mesh, boundary, 3, 5) is True
        assert mesh.is_edge(3, 5)
        assert sorted(mesh.valence(f) for f in mesh.faces()) == [3, 3, 4]

    def test_crossing_diagonal_is_logged_and_skipped(self, caplog):
        mesh = single_face_mesh(regular_polygon_points(6))
        boundary = collect_boundary(mesh, 0)
        insert_diagonal(mesh, boundary, 0, 3)
        edges_before = mesh.n_edges

        with caplog.at_level(logging.ERROR):
            assert insert_diagonal(mesh, boundary, 1, 4) is None

        assert mesh.n_edges == edges_before
        assert "no face loop joins" in caplog.text


class TestCommitPlan:
    """Stack-driven reconstruction of the split table."""

    def test_fan_plan_on_hexagon(self):
        mesh = single_face_mesh(regular_polygon_points(6))
        boundary = collect_boundary(mesh, 0)
        result = commit_plan(mesh, boundary, _fan_plan(6))

        assert sorted(tuple(sorted(e)) for e in result.inserted_edges) == [
            (0, 2), (0, 3), (0, 4),
        ]
        assert result.failed_diagonals == []
        assert mesh.n_faces == 4
        assert mesh.is_triangle_mesh()

    def test_planned_commit_matches_plan_triangles(self, pentagon_mesh):
        boundary = collect_boundary(pentagon_mesh, 0)
        plan = plan_polygon(pentagon_mesh, boundary, Objective.MIN_AREA)
        commit_plan(pentagon_mesh, boundary, plan)

        expected = {
            frozenset(boundary.vertices[x] for x in tri) for tri in plan.triangles()
        }
        produced = {frozenset(pentagon_mesh.face_vertices(f)) for f in pentagon_mesh.faces()}
        assert produced == expected

    def test_every_inserted_edge_is_new(self):
        mesh = single_face_mesh(regular_polygon_points(8))
        boundary = collect_boundary(mesh, 0)
        plan = plan_polygon(mesh, boundary, Objective.MAX_ANGLE)
        result = commit_plan(mesh, boundary, plan)

        assert len(result.inserted_edges) == 5
        assert len({frozenset(e) for e in result.inserted_edges}) == 5
        assert mesh.n_edges == 8 + 5

    def test_crossing_plan_records_failed_diagonals(self, caplog):
        mesh = single_face_mesh(regular_polygon_points(6))
        boundary = collect_boundary(mesh, 0)
        insert_diagonal(mesh, boundary, 0, 3)

        with caplog.at_level(logging.ERROR):
            result = commit_plan(mesh, boundary, crossing_hexagon_plan())

        assert result.inserted_edges == []
        assert result.failed_diagonals == [(1, 5), (1, 4), (2, 4)]
        assert caplog.text.count("diagonal skipped") == 3
        assert sorted(mesh.valence(f) for f in mesh.faces()) == [4, 4]
