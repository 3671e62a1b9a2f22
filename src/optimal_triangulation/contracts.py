"""Contracts for optimal polygon triangulation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

VertexPair = Tuple[int, int]

NO_SPLIT = -1
# Weight of a triangle whose three edges already exist in the mesh.
INVALID_WEIGHT = float(np.finfo(np.float64).max)


class TriangulationError(Exception):
    """Base exception for triangulation errors."""
    pass


class NonManifoldFaceError(TriangulationError):
    """A face boundary touches a non-manifold vertex."""

    def __init__(self, face: int, vertex: int):
        super().__init__(f"Face {face} has non-manifold boundary vertex {vertex}")
        self.face = face
        self.vertex = vertex


class ObjectiveError(TriangulationError, ValueError):
    """Objective selector outside the supported modes."""
    pass


class Objective(Enum):
    """Cost criterion driving the triangulation."""
    MIN_AREA = "min_area"      # minimise summed squared triangle area
    MAX_ANGLE = "max_angle"    # minimise the worst corner cosine

    @classmethod
    def parse(cls, value: Union["Objective", str]) -> "Objective":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ObjectiveError(f"Unknown triangulation objective: {value!r}") from None


@dataclass(frozen=True)
class TriangulationConfig:
    """Configuration for per-face optimal triangulation."""

    objective: Objective = Objective.MIN_AREA
    # Project each face onto its best-fit plane and skip self-intersecting ones.
    skip_non_simple: bool = False
    min_polygon_size: int = 4


@dataclass(frozen=True)
class PolygonBoundary:
    """Boundary snapshot of one face taken before any edge is inserted.

    ``vertices[i]`` is the target of ``halfedges[i]``. The snapshot is an
    index map only; live connectivity is always read from the mesh.
    """

    face: int
    halfedges: Tuple[int, ...]
    vertices: Tuple[int, ...]

    @property
    def size(self) -> int:
        return len(self.vertices)


@dataclass
class CostPlan:
    """Dynamic-programming tables for one polygon.

    ``cost[i, k]`` holds the optimal cost of triangulating the sub-polygon
    ``i..k`` and ``split[i, k]`` the interior index that achieves it.
    """

    objective: Objective
    cost: np.ndarray
    split: np.ndarray

    @property
    def size(self) -> int:
        return int(self.cost.shape[0])

    @property
    def root_cost(self) -> float:
        return float(self.cost[0, self.size - 1])

    def triangles(self) -> List[Tuple[int, int, int]]:
        """Chosen (i, m, k) index triples, in commit order."""
        out = []
        todo = [(0, self.size - 1)]
        while todo:
            start, end = todo.pop()
            if end - start < 2:
                continue
            m = int(self.split[start, end])
            out.append((start, m, end))
            todo.append((start, m))
            todo.append((m, end))
        return out


@dataclass
class CommitResult:
    """Edges inserted while committing one plan."""

    inserted_edges: List[VertexPair] = field(default_factory=list)
    failed_diagonals: List[VertexPair] = field(default_factory=list)


@dataclass
class FaceResult:
    """Outcome of triangulating a single face."""

    face: int
    status: str  # "triangulated" | "partial" | "skipped_small" | "skipped_non_manifold" | "skipped_non_simple"
    size: int
    objective: Objective
    root_cost: Optional[float] = None
    inserted_edges: List[VertexPair] = field(default_factory=list)
    failed_diagonals: List[VertexPair] = field(default_factory=list)

    @property
    def skipped(self) -> bool:
        return self.status.startswith("skipped")

    def to_dict(self) -> Dict[str, object]:
        return {
            "face": self.face,
            "status": self.status,
            "size": self.size,
            "root_cost": self.root_cost,
            "inserted_edges": [list(e) for e in self.inserted_edges],
            "failed_diagonals": [list(e) for e in self.failed_diagonals],
        }


@dataclass
class TriangulationReport:
    """Outcome of triangulating every face of a mesh."""

    objective: Objective
    faces: List[FaceResult] = field(default_factory=list)

    @property
    def faces_processed(self) -> int:
        return len(self.faces)

    @property
    def faces_triangulated(self) -> int:
        return sum(1 for r in self.faces if r.status == "triangulated")

    @property
    def faces_partial(self) -> int:
        return sum(1 for r in self.faces if r.status == "partial")

    @property
    def faces_skipped(self) -> int:
        return sum(1 for r in self.faces if r.skipped)

    @property
    def edges_inserted(self) -> int:
        return sum(len(r.inserted_edges) for r in self.faces)

    @property
    def status(self) -> str:
        return "partial" if self.faces_partial else "ok"

    def to_dict(self) -> Dict[str, object]:
        skipped: Dict[str, int] = {}
        for r in self.faces:
            if r.skipped:
                skipped[r.status] = skipped.get(r.status, 0) + 1
        return {
            "objective": self.objective.value,
            "status": self.status,
            "counts": {
                "faces_processed": self.faces_processed,
                "faces_triangulated": self.faces_triangulated,
                "faces_partial": self.faces_partial,
                "faces_skipped": self.faces_skipped,
                "edges_inserted": self.edges_inserted,
            },
            "skipped": skipped,
            "faces": [r.to_dict() for r in self.faces if not r.skipped],
        }
