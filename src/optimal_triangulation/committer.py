"""
Diagonal committer: turns a split table into edge insertions.

The plan is indexed by the original boundary order, but every insertion
splits a face, so the half-edge that bounded vertex ``p`` before planning
may now sit on a smaller loop than the one holding ``q``. Each insertion
therefore searches the live face loop from both ends.
"""

from __future__ import annotations

import logging
from typing import Optional

from surface_mesh import SurfaceMesh
from optimal_triangulation.contracts import CommitResult, CostPlan, PolygonBoundary

logger = logging.getLogger(__name__)


def commit_plan(
    mesh: SurfaceMesh,
    boundary: PolygonBoundary,
    plan: CostPlan,
) -> CommitResult:
    """Insert the diagonals chosen by *plan* into *mesh*."""
    result = CommitResult()
    todo = [(0, boundary.size - 1)]
    while todo:
        start, end = todo.pop()
        if end - start < 2:
            continue
        split = int(plan.split[start, end])

        for p, q in ((start, split), (split, end)):
            inserted = insert_diagonal(mesh, boundary, p, q)
            pair = (boundary.vertices[p], boundary.vertices[q])
            if inserted is None:
                result.failed_diagonals.append(pair)
            elif inserted:
                result.inserted_edges.append(pair)

        todo.append((start, split))
        todo.append((split, end))
    return result


def insert_diagonal(
    mesh: SurfaceMesh,
    boundary: PolygonBoundary,
    p: int,
    q: int,
) -> Optional[bool]:
    """Connect boundary indices *p* and *q* inside their current face.

    Returns:
        True if an edge was inserted, False if the vertices were already
        connected, None if no shared face loop could be found.
    """
    v_p = boundary.vertices[p]
    v_q = boundary.vertices[q]
    if mesh.is_edge(v_p, v_q):
        return False

    if _split_towards(mesh, boundary.halfedges[p], v_q) is not None:
        return True
    if _split_towards(mesh, boundary.halfedges[q], v_p) is not None:
        return True

    logger.error(
        "Face %d: no face loop joins vertices %d and %d; diagonal skipped",
        boundary.face, v_p, v_q,
    )
    return None


def _split_towards(mesh: SurfaceMesh, h0: int, target: int) -> Optional[int]:
    """Walk the loop of *h0* once; split it at the half-edge reaching *target*."""
    h = h0
    for _ in range(mesh.valence(mesh.face(h0))):
        h = mesh.next_halfedge(h)
        if mesh.to_vertex(h) == target:
            return mesh.insert_edge(h0, h)
    return None
