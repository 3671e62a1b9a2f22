#!/usr/bin/env python3
"""Optimally triangulate the polygon faces of a mesh."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mesh_io import load_mesh, save_mesh
from optimal_triangulation import (
    Objective,
    TriangulationConfig,
    TriangulationReport,
    triangulate_face,
    triangulate_mesh,
)
from run_protocol import finish_run, mesh_counts, stage_input, start_run

logger = logging.getLogger("triangulate_mesh")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Split polygon faces into triangles with minimal cost"
    )
    parser.add_argument(
        "--mesh", required=True, help="Path to input mesh (.obj keeps polygons; .stl/.ply/.glb)"
    )
    parser.add_argument(
        "--objective",
        choices=[o.value for o in Objective],
        default=Objective.MIN_AREA.value,
        help="min_area: smallest summed squared area; max_angle: avoid slivers",
    )
    parser.add_argument("--name", default="triangulate", help="Run name")
    parser.add_argument("--runs-dir", default="runs", help="Runs output root")
    parser.add_argument(
        "--face",
        type=int,
        action="append",
        default=None,
        help="Face index to triangulate (repeatable, default: all faces)",
    )
    parser.add_argument(
        "--output-format",
        choices=["obj", "stl", "ply"],
        default="obj",
        help="Format of the triangulated mesh artifact",
    )
    parser.add_argument(
        "--skip-non-simple",
        action="store_true",
        help="Skip faces whose boundary self-intersects on its best-fit plane",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logs"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    started = time.perf_counter()
    mesh = load_mesh(args.mesh)
    if args.face:
        bad = [f for f in args.face if f < 0 or f >= mesh.n_faces]
        if bad:
            parser.error(f"face index out of range (mesh has {mesh.n_faces} faces): {bad}")

    run = start_run(args.runs_dir, args.name)
    staged_mesh = stage_input(run, args.mesh)
    before = mesh_counts(mesh)

    config = TriangulationConfig(
        objective=Objective.parse(args.objective),
        skip_non_simple=args.skip_non_simple,
    )
    if args.face:
        report = TriangulationReport(objective=config.objective)
        for f in args.face:
            report.faces.append(triangulate_face(mesh, f, config=config))
    else:
        report = triangulate_mesh(mesh, config=config)
    elapsed = time.perf_counter() - started
    logger.info(
        "%d faces triangulated, %d skipped, %d edges inserted",
        report.faces_triangulated, report.faces_skipped, report.edges_inserted,
    )

    output_format = args.output_format
    if output_format != "obj" and not mesh.is_triangle_mesh():
        logger.warning("Polygon faces remain; writing OBJ instead of %s", output_format)
        output_format = "obj"
    output_path = save_mesh(mesh, run.mesh_artifact(output_format))

    finish_run(
        run,
        runs_root=args.runs_dir,
        name=args.name,
        input_mesh=staged_mesh,
        output_mesh=output_path,
        report=report,
        config=config,
        mesh_before=before,
        mesh_after=mesh_counts(mesh),
        elapsed_s=elapsed,
        faces=args.face,
    )

    print(f"Run ID: {run.run_id}")
    print(f"Run dir: {run.run_dir}")
    print(f"Status: {report.status.upper()}")
    print(f"Faces triangulated: {report.faces_triangulated}")
    print(f"Faces skipped: {report.faces_skipped}")
    print(f"Edges inserted: {report.edges_inserted}")
    print(f"Mesh: {output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
