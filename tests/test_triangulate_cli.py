from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

from mesh_io import read_obj

REPO_ROOT = Path(__file__).resolve().parent.parent
SCRIPT = REPO_ROOT / "scripts" / "triangulate_mesh.py"


def _run(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, str(SCRIPT), *args], capture_output=True, text=True
    )


def test_cli_triangulates_and_emits_artifacts(cube_obj_file: str, tmp_path: Path):
    proc = _run(
        "--mesh", cube_obj_file,
        "--name", "cube",
        "--runs-dir", str(tmp_path),
        "--objective", "max_angle",
    )
    assert proc.returncode == 0, proc.stderr
    assert "Run ID:" in proc.stdout

    run_dirs = [p for p in tmp_path.iterdir() if p.is_dir() and p.name != "latest"]
    assert len(run_dirs) == 1
    run_dir = run_dirs[0]

    assert (run_dir / "input" / "cube_quads.obj").exists()
    assert (run_dir / "summary.md").exists()
    mesh = read_obj(run_dir / "artifacts" / "triangulated.obj")
    assert mesh.n_faces == 12
    assert mesh.is_triangle_mesh()

    metrics = json.loads((run_dir / "metrics.json").read_text(encoding="utf-8"))
    assert metrics["report"]["objective"] == "max_angle"
    assert metrics["report"]["counts"]["faces_triangulated"] == 6
    assert metrics["report"]["counts"]["edges_inserted"] == 6
    assert metrics["mesh_after"]["faces"] == 12

    manifest = json.loads((run_dir / "manifest.json").read_text(encoding="utf-8"))
    assert manifest["status"] == "ok"
    assert (tmp_path / "latest").exists()


def test_cli_single_face_and_stl_fallback(cube_obj_file: str, tmp_path: Path):
    proc = _run(
        "--mesh", cube_obj_file,
        "--runs-dir", str(tmp_path),
        "--face", "0",
        "--face", "3",
        "--output-format", "stl",
    )
    assert proc.returncode == 0, proc.stderr

    run_dir = next(p for p in tmp_path.iterdir() if p.is_dir() and p.name != "latest")
    # Four quads remain, so the mesh cannot be written as STL.
    mesh = read_obj(run_dir / "artifacts" / "triangulated.obj")
    assert mesh.n_faces == 8


def test_cli_stl_output(cube_obj_file: str, tmp_path: Path):
    proc = _run(
        "--mesh", cube_obj_file,
        "--runs-dir", str(tmp_path),
        "--output-format", "stl",
    )
    assert proc.returncode == 0, proc.stderr
    run_dir = next(p for p in tmp_path.iterdir() if p.is_dir() and p.name != "latest")
    assert (run_dir / "artifacts" / "triangulated.stl").exists()


def test_cli_rejects_bad_face_index(cube_obj_file: str, tmp_path: Path):
    proc = _run("--mesh", cube_obj_file, "--runs-dir", str(tmp_path), "--face", "6")
    assert proc.returncode == 2
    assert "out of range" in proc.stderr


def test_cli_rejects_unknown_objective(cube_obj_file: str, tmp_path: Path):
    proc = _run(
        "--mesh", cube_obj_file, "--runs-dir", str(tmp_path), "--objective", "min_perimeter"
    )
    assert proc.returncode != 0
