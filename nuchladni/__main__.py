from __future__ import annotations

import argparse
import logging
import sys

from .core.animation import Animator, FrameParams
from .core.deformer import BASE_RADIUS, PRESETS, ShapeDeformer
from .core.orbit import OrbitPath
from .core.renderer import NUM_POINTS_PHI, NUM_POINTS_THETA, Renderer
from .utils.image_ops import PilSurface

logger = logging.getLogger("nuchladni")


def _parse_amplitude(text: str) -> tuple[int, float]:
    try:
        idx, value = text.split("=", 1)
        return int(idx), float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected INDEX=VALUE, got {text!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nuchladni", description="Deformed sphere renderer")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    shape = argparse.ArgumentParser(add_help=False)
    shape.add_argument("--radius", type=float, default=BASE_RADIUS)
    shape.add_argument("--preset", choices=sorted(PRESETS))
    shape.add_argument("--amplitude", "-a", type=_parse_amplitude, action="append", default=[],
                       metavar="INDEX=VALUE")
    shape.add_argument("--width", type=int, default=800)
    shape.add_argument("--height", type=int, default=600)
    shape.add_argument("--theta", type=int, default=NUM_POINTS_THETA, help="points around the equator")
    shape.add_argument("--phi", type=int, default=NUM_POINTS_PHI, help="points pole to pole")
    shape.add_argument("--rot-x", type=float, default=0.0)
    shape.add_argument("--depth", type=float, default=0.0)
    shape.add_argument("--light", type=float, nargs=3, metavar=("X", "Y", "Z"))

    p_render = sub.add_parser("render", parents=[shape], help="render a single PNG frame")
    p_render.add_argument("output")
    p_render.add_argument("--cam-angle", type=float, default=0.0)

    p_gif = sub.add_parser("gif", parents=[shape], help="export an orbit animation as GIF")
    p_gif.add_argument("output")
    p_gif.add_argument("--frames", type=int, default=100)
    p_gif.add_argument("--fps", type=int, default=25)
    p_gif.add_argument("--orbit-speed", type=float, default=50.0, help="slider value, 50 = 20 s per orbit")
    p_gif.add_argument("--no-loop", action="store_true")

    p_serve = sub.add_parser("serve", help="run the web UI")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=5000)
    p_serve.add_argument("--no-browser", action="store_true")
    return parser


def _setup(args) -> Renderer:
    deformer = ShapeDeformer(args.radius)
    if args.preset:
        deformer.apply_preset(PRESETS[args.preset])
    for idx, value in args.amplitude:
        if not deformer.set_amplitude(idx, value):
            raise SystemExit(f"no mode at index {idx} (have {len(deformer)})")
    renderer = Renderer(PilSurface(args.width, args.height), deformer)
    if args.light:
        renderer.set_light_direction(*args.light)
    return renderer


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        from .web import serve
        serve(args.host, args.port, None if args.no_browser else 1.5)
        return 0

    renderer = _setup(args)
    if args.command == "render":
        tris = renderer.draw(args.rot_x, args.cam_angle, args.depth, args.theta, args.phi)
        renderer.surface.image.save(args.output)
        logger.info(f"Rendered {len(tris)} triangles to {args.output}")
        return 0

    orbit = OrbitPath()
    orbit.set_slider_speed(args.orbit_speed)
    params = FrameParams(args.rot_x, args.depth, args.theta, args.phi)
    animator = Animator(renderer, orbit, params)
    animator.export_gif(args.output, args.frames, args.fps, loop=not args.no_loop)
    return 0


if __name__ == "__main__":
    sys.exit(main())
