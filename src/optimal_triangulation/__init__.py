"""Public API for optimal polygon triangulation of surface meshes."""

from optimal_triangulation.committer import commit_plan, insert_diagonal
from optimal_triangulation.contracts import (
    CostPlan,
    FaceResult,
    NonManifoldFaceError,
    Objective,
    ObjectiveError,
    PolygonBoundary,
    TriangulationConfig,
    TriangulationError,
    TriangulationReport,
)
from optimal_triangulation.pipeline import (
    collect_boundary,
    triangulate_face,
    triangulate_mesh,
)
from optimal_triangulation.planner import plan_polygon, triangle_weight

__all__ = [
    "CostPlan",
    "FaceResult",
    "NonManifoldFaceError",
    "Objective",
    "ObjectiveError",
    "PolygonBoundary",
    "TriangulationConfig",
    "TriangulationError",
    "TriangulationReport",
    "collect_boundary",
    "commit_plan",
    "insert_diagonal",
    "plan_polygon",
    "triangle_weight",
    "triangulate_face",
    "triangulate_mesh",
]
