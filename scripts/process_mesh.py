#!/usr/bin/env python3
"""Clip, clean and refine a mesh file.

Reads an OBJ or PLY mesh, applies the requested stages in order (box clip,
non-manifold removal, refinement) and writes the result; the output format
follows the extension (.obj, .ply or .vtk).

Examples:
  python scripts/process_mesh.py in.obj out.obj --box 0 0 0 1 1 1
  python scripts/process_mesh.py in.ply out.ply --non-manifold --max-faces 20000
  python scripts/process_mesh.py in.obj out.ply --box -1 -1 -1 1 1 1 --plot clip.png
"""
from __future__ import annotations

import argparse
import json
import sys

from meshop import (PipelineConfig, run_pipeline, load_mesh, save_mesh, configure_logging,
                    MeshIOError)


def main(argv=None) -> int:
    p = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    p.add_argument('input', help='Input mesh (.obj or .ply)')
    p.add_argument('output', help='Output mesh (.obj, .ply or .vtk)')
    p.add_argument('--box', type=float, nargs=6, metavar=('XMIN', 'YMIN', 'ZMIN', 'XMAX', 'YMAX', 'ZMAX'),
                   help='Clip to this axis-aligned box')
    p.add_argument('--non-manifold', action='store_true', help='Remove faces on non-manifold edges')
    p.add_argument('--max-faces', type=int, default=None, help='Refine until the mesh has this many faces')
    p.add_argument('--plot', default=None, help='Write a PNG preview of the result')
    p.add_argument('--summary', action='store_true', help='Print per-stage summaries as JSON')
    p.add_argument('--log-level', default='INFO', help='Logging level (default: INFO)')
    args = p.parse_args(argv)

    configure_logging(args.log_level)
    cfg = PipelineConfig.from_options(box=args.box, non_manifold=args.non_manifold,
                                      max_faces=args.max_faces)
    try:
        mesh = load_mesh(args.input)
    except FileNotFoundError:
        print(f'[ERROR] input not found: {args.input}', file=sys.stderr)
        return 2
    except MeshIOError as e:
        print(f'[ERROR] {e}', file=sys.stderr)
        return 2

    history = []
    out = run_pipeline(mesh, cfg, history=history)

    try:
        save_mesh(out, args.output)
    except MeshIOError as e:
        print(f'[ERROR] {e}', file=sys.stderr)
        return 1

    if args.plot:
        from meshop import plot_mesh
        plot_mesh(out, args.plot, extents=cfg.clip.extents if cfg.clip else None)
    if args.summary:
        print(json.dumps(dict(history), indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())
