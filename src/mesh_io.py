"""
Mesh loading and saving for polygon surface meshes.

OBJ files are parsed directly so that polygon faces survive loading (trimesh
triangulates them on import). Every other format goes through trimesh and
arrives as triangles.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

import numpy as np
import trimesh

from surface_mesh import SurfaceMesh, TopologyError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_mesh(path: PathLike) -> SurfaceMesh:
    """Load a surface mesh, keeping polygons for OBJ input."""
    mesh_path = Path(path)
    if not mesh_path.is_file():
        raise FileNotFoundError(f"Mesh file not found: {mesh_path}")
    if mesh_path.suffix.lower() == ".obj":
        return read_obj(mesh_path)

    loaded = trimesh.load(mesh_path, force="mesh")
    if isinstance(loaded, trimesh.Scene):
        meshes = [g for g in loaded.geometry.values() if isinstance(g, trimesh.Trimesh)]
        if not meshes:
            raise ValueError(f"Scene has no mesh geometry: {mesh_path}")
        loaded = trimesh.util.concatenate(meshes)
    if not isinstance(loaded, trimesh.Trimesh):
        raise ValueError(f"Unsupported mesh type from {mesh_path}")
    return from_trimesh(loaded)


def save_mesh(mesh: SurfaceMesh, path: PathLike) -> Path:
    """Write *mesh*; non-OBJ formats require a triangle mesh."""
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    if out_path.suffix.lower() == ".obj":
        write_obj(mesh, out_path)
    else:
        to_trimesh(mesh).export(out_path)
    return out_path


def read_obj(path: PathLike) -> SurfaceMesh:
    """Parse ``v`` and ``f`` records of a Wavefront OBJ file.

    Face tokens may carry ``/vt/vn`` suffixes and negative (relative)
    indices. Other records are ignored.
    """
    points: List[List[float]] = []
    faces: List[List[int]] = []
    with Path(path).open("r", encoding="utf-8") as handle:
        for lineno, line in enumerate(handle, start=1):
            parts = line.split()
            if not parts or parts[0].startswith("#"):
                continue
            if parts[0] == "v":
                if len(parts) < 4:
                    raise ValueError(f"{path}:{lineno}: vertex needs 3 coordinates")
                points.append([float(x) for x in parts[1:4]])
            elif parts[0] == "f":
                face = []
                for token in parts[1:]:
                    idx = int(token.split("/")[0])
                    if idx == 0:
                        raise ValueError(f"{path}:{lineno}: OBJ indices are 1-based")
                    face.append(idx - 1 if idx > 0 else len(points) + idx)
                faces.append(face)

    mesh = SurfaceMesh()
    mesh.add_vertices(points)
    for face in faces:
        try:
            mesh.add_face(face)
        except TopologyError as exc:
            raise ValueError(f"{path}: invalid face {face}: {exc}") from exc
    return mesh


def write_obj(mesh: SurfaceMesh, path: PathLike) -> None:
    lines = [f"# {mesh.n_vertices} vertices, {mesh.n_faces} faces"]
    for p in mesh.points:
        lines.append(f"v {p[0]:.9g} {p[1]:.9g} {p[2]:.9g}")
    for verts in mesh.face_vertex_lists():
        lines.append("f " + " ".join(str(v + 1) for v in verts))
    with Path(path).open("w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")


def from_trimesh(tm: trimesh.Trimesh) -> SurfaceMesh:
    """Convert a trimesh, dropping faces that would form complex edges."""
    mesh = SurfaceMesh()
    mesh.add_vertices(np.asarray(tm.vertices, dtype=float))

    dropped = 0
    for face in np.asarray(tm.faces, dtype=int):
        try:
            mesh.add_face(face)
        except TopologyError:
            dropped += 1
    if dropped:
        logger.warning("Dropped %d faces with inconsistent connectivity", dropped)
    return mesh


def to_trimesh(mesh: SurfaceMesh) -> trimesh.Trimesh:
    if not mesh.is_triangle_mesh():
        raise ValueError("Mesh has non-triangle faces; triangulate it first")
    faces = np.array(mesh.face_vertex_lists(), dtype=int).reshape(-1, 3)
    return trimesh.Trimesh(vertices=mesh.points.copy(), faces=faces, process=False)
