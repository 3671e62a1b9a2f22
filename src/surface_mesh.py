"""
Half-edge surface mesh stored as flat arrays addressed by integer handles.

Vertices, half-edges and faces are plain ints. Half-edges come in pairs:
edge ``e`` owns half-edges ``2e`` and ``2e + 1``, so the opposite of ``h`` is
``h ^ 1``. Only face loops carry next/prev links; boundary half-edges have no
face and are never walked. Every vertex keeps its full list of outgoing
half-edges, so manifold and adjacency queries do not depend on fan order.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np


class TopologyError(Exception):
    """Requested mesh operation would break half-edge connectivity."""
    pass


class SurfaceMesh:
    """Polygon mesh with half-edge connectivity."""

    def __init__(self):
        self._points = np.zeros((0, 3), dtype=float)
        self._outgoing: List[List[int]] = []

        self._he_to: List[int] = []
        self._he_next: List[Optional[int]] = []
        self._he_prev: List[Optional[int]] = []
        self._he_face: List[Optional[int]] = []

        self._face_he: List[int] = []
        self._lookup: Dict[Tuple[int, int], int] = {}

    @classmethod
    def from_polygons(
        cls,
        points: Sequence[Sequence[float]],
        faces: Iterable[Sequence[int]],
    ) -> "SurfaceMesh":
        """Build a mesh from a point array and 0-based polygon index lists."""
        mesh = cls()
        mesh.add_vertices(points)
        for face in faces:
            mesh.add_face(face)
        return mesh

    # ─── Counts and iteration ─────────────────────────────────────────────

    @property
    def n_vertices(self) -> int:
        return len(self._outgoing)

    @property
    def n_halfedges(self) -> int:
        return len(self._he_to)

    @property
    def n_edges(self) -> int:
        return len(self._he_to) // 2

    @property
    def n_faces(self) -> int:
        return len(self._face_he)

    @property
    def points(self) -> np.ndarray:
        """(n, 3) vertex positions. Writes go straight into the mesh."""
        return self._points

    def vertices(self) -> range:
        return range(self.n_vertices)

    def faces(self) -> range:
        return range(self.n_faces)

    def edges(self) -> List[Tuple[int, int]]:
        """Every edge as a sorted vertex pair."""
        out = []
        for e in range(self.n_edges):
            a = self._he_to[2 * e + 1]
            b = self._he_to[2 * e]
            out.append((min(a, b), max(a, b)))
        return out

    # ─── Construction ─────────────────────────────────────────────────────

    def add_vertex(self, point: Sequence[float]) -> int:
        p = np.asarray(point, dtype=float).reshape(1, 3)
        self._points = np.vstack([self._points, p])
        self._outgoing.append([])
        return self.n_vertices - 1

    def add_vertices(self, points: Sequence[Sequence[float]]) -> range:
        pts = np.asarray(points, dtype=float).reshape(-1, 3)
        first = self.n_vertices
        self._points = np.vstack([self._points, pts])
        self._outgoing.extend([] for _ in range(len(pts)))
        return range(first, self.n_vertices)

    def add_face(self, vertices: Sequence[int]) -> int:
        """Add a polygon given its vertices in counter-clockwise order.

        The stored face half-edge points to ``vertices[0]``, so walking the
        face loop from it visits the vertices in the order given.

        Raises:
            TopologyError: fewer than three or repeated vertices, unknown
                vertex handles, or a directed edge already bound to a face.
        """
        verts = [int(v) for v in vertices]
        n = len(verts)
        if n < 3:
            raise TopologyError(f"Face needs at least 3 vertices, got {n}")
        if len(set(verts)) != n:
            raise TopologyError(f"Face has repeated vertices: {verts}")
        for v in verts:
            if v < 0 or v >= self.n_vertices:
                raise TopologyError(f"Unknown vertex {v}")

        for i in range(n):
            h = self._lookup.get((verts[i], verts[(i + 1) % n]))
            if h is not None and self._he_face[h] is not None:
                raise TopologyError(
                    f"Complex edge ({verts[i]}, {verts[(i + 1) % n]}) "
                    f"already bounds face {self._he_face[h]}"
                )

        loop = []
        for i in range(n):
            a, b = verts[i], verts[(i + 1) % n]
            h = self._lookup.get((a, b))
            if h is None:
                h = self._new_edge(a, b)
            loop.append(h)

        f = self.n_faces
        self._face_he.append(loop[-1])
        for i, h in enumerate(loop):
            self._he_face[h] = f
            self._link(h, loop[(i + 1) % n])
        return f

    # ─── Traversal ────────────────────────────────────────────────────────

    def halfedge(self, f: int) -> int:
        if not 0 <= f < len(self._face_he):
            raise IndexError(f"Face {f} out of range (mesh has {len(self._face_he)} faces)")
        return self._face_he[f]

    def next_halfedge(self, h: int) -> int:
        nxt = self._he_next[h]
        if nxt is None:
            raise TopologyError(f"Boundary half-edge {h} has no face loop")
        return nxt

    def prev_halfedge(self, h: int) -> int:
        prv = self._he_prev[h]
        if prv is None:
            raise TopologyError(f"Boundary half-edge {h} has no face loop")
        return prv

    def to_vertex(self, h: int) -> int:
        return self._he_to[h]

    def from_vertex(self, h: int) -> int:
        return self._he_to[h ^ 1]

    def opposite_halfedge(self, h: int) -> int:
        return h ^ 1

    def face(self, h: int) -> Optional[int]:
        return self._he_face[h]

    def face_halfedges(self, f: int) -> Iterator[int]:
        h0 = self.halfedge(f)
        h = h0
        while True:
            yield h
            h = self._he_next[h]
            if h == h0:
                break

    def face_vertices(self, f: int) -> List[int]:
        return [self._he_to[h] for h in self.face_halfedges(f)]

    def valence(self, f: int) -> int:
        return sum(1 for _ in self.face_halfedges(f))

    def face_vertex_lists(self) -> List[List[int]]:
        return [self.face_vertices(f) for f in self.faces()]

    def point(self, v: int) -> np.ndarray:
        return self._points[v]

    # ─── Queries ──────────────────────────────────────────────────────────

    def is_boundary(self, h: int) -> bool:
        return self._he_face[h] is None

    def is_manifold(self, v: int) -> bool:
        """A vertex is manifold when its fan has at most one gap."""
        gaps = sum(1 for h in self._outgoing[v] if self._he_face[h] is None)
        return gaps < 2

    def find_halfedge(self, a: int, b: int) -> Optional[int]:
        return self._lookup.get((a, b))

    def is_edge(self, a: int, b: int) -> bool:
        return (a, b) in self._lookup

    def is_interior_edge(self, a: int, b: int) -> bool:
        """True when edge (a, b) exists and has a face on both sides.

        Triangle weighting rejects a candidate only when all three of its edges
        exist; it does not apply this stricter interior-edge test.
        """
        h = self._lookup.get((a, b))
        if h is None:
            return False
        return not self.is_boundary(h) and not self.is_boundary(h ^ 1)

    def is_triangle_mesh(self) -> bool:
        return all(self.valence(f) == 3 for f in self.faces())

    # ─── Mutation ─────────────────────────────────────────────────────────

    def insert_edge(self, h0: int, h1: int) -> int:
        """Split the face of ``h0`` and ``h1`` with an edge between their targets.

        The existing face keeps ``h0``, the new edge and the loop from
        ``next(h1)`` back to ``h0``. A new face takes ``h1``, the opposite new
        half-edge and the loop from the old ``next(h0)`` up to ``h1``.

        Returns:
            The new half-edge pointing from ``to_vertex(h0)`` to
            ``to_vertex(h1)``.
        """
        f0 = self._he_face[h0]
        if f0 is None or f0 != self._he_face[h1]:
            raise TopologyError(
                f"Half-edges {h0} and {h1} do not bound the same face"
            )
        if h0 == h1:
            raise TopologyError("Cannot connect a half-edge to itself")

        v0 = self._he_to[h0]
        v1 = self._he_to[h1]
        if self.is_edge(v0, v1):
            raise TopologyError(f"Edge ({v0}, {v1}) already exists")

        h2 = self._he_next[h0]
        h3 = self._he_next[h1]
        h4 = self._new_edge(v0, v1)
        h5 = h4 ^ 1

        f1 = self.n_faces
        self._face_he.append(h1)
        self._face_he[f0] = h0

        self._link(h0, h4)
        self._link(h4, h3)
        self._he_face[h4] = f0

        self._link(h1, h5)
        self._link(h5, h2)
        h = h2
        while True:
            self._he_face[h] = f1
            h = self._he_next[h]
            if h == h2:
                break
        return h4

    def copy(self) -> "SurfaceMesh":
        out = SurfaceMesh()
        out._points = self._points.copy()
        out._outgoing = [list(hs) for hs in self._outgoing]
        out._he_to = list(self._he_to)
        out._he_next = list(self._he_next)
        out._he_prev = list(self._he_prev)
        out._he_face = list(self._he_face)
        out._face_he = list(self._face_he)
        out._lookup = dict(self._lookup)
        return out

    # ─── Internals ────────────────────────────────────────────────────────

    def _new_edge(self, a: int, b: int) -> int:
        h = len(self._he_to)
        self._he_to.extend([b, a])
        self._he_next.extend([None, None])
        self._he_prev.extend([None, None])
        self._he_face.extend([None, None])
        self._lookup[(a, b)] = h
        self._lookup[(b, a)] = h + 1
        self._outgoing[a].append(h)
        self._outgoing[b].append(h + 1)
        return h

    def _link(self, h: int, nxt: int) -> None:
        self._he_next[h] = nxt
        self._he_prev[nxt] = h
