"""Per-face driver: collect boundary, plan, commit."""

from __future__ import annotations

import logging
from typing import Optional, Tuple, Union

import numpy as np
from shapely.geometry import LinearRing

from surface_mesh import SurfaceMesh
from optimal_triangulation.committer import commit_plan
from optimal_triangulation.contracts import (
    FaceResult,
    NonManifoldFaceError,
    Objective,
    PolygonBoundary,
    TriangulationConfig,
    TriangulationReport,
)
from optimal_triangulation.planner import plan_polygon

logger = logging.getLogger(__name__)


def triangulate_mesh(
    mesh: SurfaceMesh,
    objective: Optional[Union[Objective, str]] = None,
    config: Optional[TriangulationConfig] = None,
) -> TriangulationReport:
    """Triangulate every face currently in *mesh*.

    Faces created by the splits are not revisited; they are triangles.
    """
    if config is None:
        config = TriangulationConfig()
    active = Objective.parse(config.objective if objective is None else objective)

    report = TriangulationReport(objective=active)
    for f in list(mesh.faces()):
        report.faces.append(triangulate_face(mesh, f, active, config))

    logger.debug(
        "Triangulated %d/%d faces (%d skipped, %d partial), %d edges inserted",
        report.faces_triangulated, report.faces_processed,
        report.faces_skipped, report.faces_partial, report.edges_inserted,
    )
    return report


def triangulate_face(
    mesh: SurfaceMesh,
    face: int,
    objective: Optional[Union[Objective, str]] = None,
    config: Optional[TriangulationConfig] = None,
) -> FaceResult:
    """Optimally triangulate one face in place.

    Non-manifold boundaries, faces that are already triangles and (when
    enabled) self-intersecting faces are skipped without touching the mesh.
    """
    if config is None:
        config = TriangulationConfig()
    active = Objective.parse(config.objective if objective is None else objective)

    try:
        boundary = collect_boundary(mesh, face)
    except NonManifoldFaceError as exc:
        logger.warning("Skipping face: %s", exc)
        return FaceResult(
            face=face,
            status="skipped_non_manifold",
            size=mesh.valence(face),
            objective=active,
        )

    n = boundary.size
    if n < max(4, int(config.min_polygon_size)):
        logger.debug("Face %d has %d vertices, nothing to do", face, n)
        return FaceResult(face=face, status="skipped_small", size=n, objective=active)

    if config.skip_non_simple and not is_simple_polygon(mesh, boundary):
        logger.warning("Skipping face %d: boundary is self-intersecting", face)
        return FaceResult(
            face=face, status="skipped_non_simple", size=n, objective=active
        )

    plan = plan_polygon(mesh, boundary, active)
    committed = commit_plan(mesh, boundary, plan)

    return FaceResult(
        face=face,
        status="partial" if committed.failed_diagonals else "triangulated",
        size=n,
        objective=active,
        root_cost=plan.root_cost,
        inserted_edges=committed.inserted_edges,
        failed_diagonals=committed.failed_diagonals,
    )


def collect_boundary(mesh: SurfaceMesh, face: int) -> PolygonBoundary:
    """Snapshot the boundary half-edges and vertices of *face*.

    Raises:
        NonManifoldFaceError: a boundary vertex is non-manifold.
    """
    halfedges = []
    vertices = []
    for h in mesh.face_halfedges(face):
        v = mesh.to_vertex(h)
        if not mesh.is_manifold(v):
            raise NonManifoldFaceError(face, v)
        halfedges.append(h)
        vertices.append(v)
    return PolygonBoundary(
        face=face, halfedges=tuple(halfedges), vertices=tuple(vertices)
    )


def is_simple_polygon(mesh: SurfaceMesh, boundary: PolygonBoundary) -> bool:
    """Check the boundary for self-intersection on its best-fit plane."""
    points = mesh.points[list(boundary.vertices)]
    u, v, origin = _plane_frame(points)
    rel = points - origin
    coords = np.column_stack([rel @ u, rel @ v])
    return bool(LinearRing(coords).is_simple)


def _plane_frame(points: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """In-plane axes (u, v) and centroid of the least-squares plane."""
    centroid = np.mean(points, axis=0)
    _, _, vh = np.linalg.svd(points - centroid, full_matrices=False)
    return vh[0], vh[1], centroid
