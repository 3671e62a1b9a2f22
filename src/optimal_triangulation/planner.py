"""
Cost planner: optimal polygon triangulation by dynamic programming.

The boundary of a face is treated as the linear index sequence ``0..n-1``.
For every sub-range ``[i, k]`` the planner records the cheapest way to
triangulate it and the interior split ``m`` that closes it with triangle
``(i, m, k)``. Under MIN_AREA the table accumulates a sum of triangle
weights, under MAX_ANGLE it keeps the worst weight seen (min-max).
"""

from __future__ import annotations

import logging

import numpy as np

from surface_mesh import SurfaceMesh
from optimal_triangulation.contracts import (
    INVALID_WEIGHT,
    NO_SPLIT,
    CostPlan,
    Objective,
    ObjectiveError,
    PolygonBoundary,
)

logger = logging.getLogger(__name__)


def plan_polygon(
    mesh: SurfaceMesh,
    boundary: PolygonBoundary,
    objective: Objective,
) -> CostPlan:
    """Fill the cost and split tables for one face boundary.

    Candidates ``m`` are scanned in increasing order and only a strictly
    smaller cost replaces the incumbent, so ties go to the lowest split.

    Raises:
        ObjectiveError: objective is not a supported mode.
        ValueError: boundary has fewer than three vertices.
    """
    n = boundary.size
    if n < 3:
        raise ValueError(f"Polygon needs at least 3 vertices, got {n}")

    cost = np.full((n, n), np.inf, dtype=float)
    split = np.full((n, n), NO_SPLIT, dtype=int)
    for i in range(n - 1):
        cost[i, i + 1] = 0.0

    verts = boundary.vertices
    for span in range(2, n):
        for i in range(n - span):
            k = i + span
            best_cost = None
            best_m = NO_SPLIT
            for m in range(i + 1, k):
                w = triangle_weight(mesh, verts[i], verts[m], verts[k], objective)
                c = _combine(objective, float(cost[i, m]), w, float(cost[m, k]))
                if best_cost is None or c < best_cost:
                    best_cost = c
                    best_m = m
            cost[i, k] = best_cost
            split[i, k] = best_m

    plan = CostPlan(objective=objective, cost=cost, split=split)
    logger.debug(
        "Planned face %d (%d vertices, %s): root cost %.6g",
        boundary.face, n, objective.value, plan.root_cost,
    )
    return plan


def triangle_weight(
    mesh: SurfaceMesh,
    a: int,
    b: int,
    c: int,
    objective: Objective,
) -> float:
    """Weight of candidate triangle (a, b, c) under *objective*.

    A triangle whose three edges all exist somewhere in the mesh would
    duplicate an existing face and gets ``INVALID_WEIGHT``.
    """
    if mesh.is_edge(a, b) and mesh.is_edge(b, c) and mesh.is_edge(c, a):
        return INVALID_WEIGHT

    pa = mesh.point(a)
    pb = mesh.point(b)
    pc = mesh.point(c)

    if objective is Objective.MIN_AREA:
        # |cross|^2 is 4 * area^2 and orders triangles like area does.
        n = np.cross(pb - pa, pc - pa)
        return float(np.dot(n, n))

    if objective is Objective.MAX_ANGLE:
        cos_a = float(np.dot(_normalize(pb - pa), _normalize(pc - pa)))
        cos_b = float(np.dot(_normalize(pa - pb), _normalize(pc - pb)))
        cos_c = float(np.dot(_normalize(pa - pc), _normalize(pb - pc)))
        return max(cos_a, cos_b, cos_c)

    raise ObjectiveError(f"Unsupported objective: {objective!r}")


def _combine(objective: Objective, left: float, weight: float, right: float) -> float:
    if objective is Objective.MIN_AREA:
        return left + weight + right
    if objective is Objective.MAX_ANGLE:
        return max(left, weight, right)
    raise ObjectiveError(f"Unsupported objective: {objective!r}")


def _normalize(vec: np.ndarray) -> np.ndarray:
    norm = float(np.linalg.norm(vec))
    if norm < np.finfo(float).tiny:
        return vec
    return vec / norm
