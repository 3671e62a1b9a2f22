"""Run folders for triangulation runs.

A run lives in ``<runs_root>/<timestamp>_<slug>/``::

    input/<mesh>              copy of the mesh that was triangulated
    artifacts/triangulated.*  the mesh after triangulation
    metrics.json              mesh counts before/after and the face report
    summary.md                short human-readable outcome
    manifest.json             config, status and artifact paths

``<runs_root>/latest`` points at the newest run.
"""

from __future__ import annotations

import json
import os
import re
import shutil
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from optimal_triangulation import TriangulationConfig, TriangulationReport
from surface_mesh import SurfaceMesh


@dataclass
class TriangulationRun:
    """Paths of one triangulation run folder."""

    run_id: str
    run_dir: Path

    @property
    def input_dir(self) -> Path:
        return self.run_dir / "input"

    @property
    def artifacts_dir(self) -> Path:
        return self.run_dir / "artifacts"

    @property
    def metrics_path(self) -> Path:
        return self.run_dir / "metrics.json"

    @property
    def summary_path(self) -> Path:
        return self.run_dir / "summary.md"

    @property
    def manifest_path(self) -> Path:
        return self.run_dir / "manifest.json"

    def mesh_artifact(self, fmt: str) -> Path:
        return self.artifacts_dir / f"triangulated.{fmt}"


def start_run(runs_root: str, name: str) -> TriangulationRun:
    slug = re.sub(r"[^a-z0-9]+", "-", name.strip().lower()).strip("-") or "triangulate"
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
    run = TriangulationRun(run_id=f"{stamp}_{slug}", run_dir=Path(runs_root) / f"{stamp}_{slug}")
    run.input_dir.mkdir(parents=True, exist_ok=True)
    run.artifacts_dir.mkdir(parents=True, exist_ok=True)
    return run


def stage_input(run: TriangulationRun, mesh_path: str) -> Path:
    """Copy the source mesh into the run so the run can be replayed."""
    src = Path(mesh_path)
    if not src.is_file():
        raise FileNotFoundError(f"Mesh file not found: {src}")
    dst = run.input_dir / src.name
    shutil.copy2(src, dst)
    return dst


def mesh_counts(mesh: SurfaceMesh) -> Dict[str, int]:
    return {
        "vertices": mesh.n_vertices,
        "edges": mesh.n_edges,
        "faces": mesh.n_faces,
        "polygon_faces": sum(1 for f in mesh.faces() if mesh.valence(f) > 3),
    }


def build_summary(run_id: str, elapsed_s: float, report: TriangulationReport) -> str:
    lines = [
        f"# Run {run_id}",
        "",
        f"- Status: **{report.status.upper()}**",
        f"- Objective: {report.objective.value}",
        f"- Duration: {elapsed_s:.2f}s",
        f"- Faces: {report.faces_triangulated}/{report.faces_processed} triangulated, "
        f"{report.faces_skipped} skipped, {report.faces_partial} partial",
        f"- Edges inserted: {report.edges_inserted}",
    ]
    partial = [r for r in report.faces if r.status == "partial"]
    if partial:
        lines += ["", "## Partially triangulated faces"]
        for r in partial:
            missing = ", ".join(f"{a}-{b}" for a, b in r.failed_diagonals)
            lines.append(f"- face {r.face}: missing diagonals {missing}")
    return "\n".join(lines) + "\n"


def finish_run(
    run: TriangulationRun,
    *,
    runs_root: str,
    name: str,
    input_mesh: Path,
    output_mesh: Path,
    report: TriangulationReport,
    config: TriangulationConfig,
    mesh_before: Dict[str, int],
    mesh_after: Dict[str, int],
    elapsed_s: float,
    faces: Optional[List[int]] = None,
) -> None:
    """Write metrics, summary and manifest, then repoint ``latest``."""
    _dump_json(
        run.metrics_path,
        {
            "run_id": run.run_id,
            "elapsed_s": round(elapsed_s, 3),
            "mesh_before": mesh_before,
            "mesh_after": mesh_after,
            "report": report.to_dict(),
        },
    )
    run.summary_path.write_text(
        build_summary(run.run_id, elapsed_s, report), encoding="utf-8"
    )
    _dump_json(
        run.manifest_path,
        {
            "run_id": run.run_id,
            "name": name,
            "created_utc": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "input_mesh": str(input_mesh),
            "status": report.status,
            "config": {
                "objective": config.objective.value,
                "skip_non_simple": config.skip_non_simple,
                "min_polygon_size": config.min_polygon_size,
                "faces": faces,
            },
            "artifacts": {
                "mesh": str(output_mesh),
                "metrics": str(run.metrics_path),
                "summary": str(run.summary_path),
            },
        },
    )
    _point_latest(Path(runs_root), run)


def _dump_json(path: Path, payload: Dict[str, object]) -> None:
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def _point_latest(runs_root: Path, run: TriangulationRun) -> None:
    latest = runs_root / "latest"
    if latest.is_symlink() or latest.is_file():
        latest.unlink()
    elif latest.is_dir():
        shutil.rmtree(latest)
    try:
        latest.symlink_to(os.path.relpath(run.run_dir, runs_root))
    except OSError:
        # No symlinks on this filesystem.
        latest.mkdir()
        (latest / "latest_run.txt").write_text(run.run_id, encoding="utf-8")
