"""
Command-line interface for bezierfit.

Provides commands for fitting sample points and for splitting, merging,
projecting onto and converting curves given as SVG path data or JSON.
"""

import argparse
import sys

import numpy as np

from bezierfit.config import load_config, save_default_config
from bezierfit.errors import BezierError
from bezierfit.fitting.alternating import TUpdateMethod
from bezierfit.fitting.dispatch import FitMethod, fit_points
from bezierfit.fitting.t_heuristic import THeuristic
from bezierfit.io.formats import Format, export, load_points, parse
from bezierfit.io.svg_document import write_svg_document
from bezierfit.models import BezierCurve, Point
from bezierfit.tracer import configure_tracer, get_tracer


def _add_trace_arguments(parser):
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Trace fits and merges to stderr",
    )
    parser.add_argument(
        "--trace-level",
        default=None,
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Lowest trace level to print (default from config)",
    )
    parser.add_argument(
        "--trace-file",
        default=None,
        help="Also write trace lines to this file",
    )
    parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Follow each trace line with a JSON record",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="YAML file with fit, geometry and tracing settings",
    )


def _add_curve_arguments(parser):
    parser.add_argument(
        "--curve",
        required=True,
        help="Curve as SVG path data or a JSON point list",
    )
    parser.add_argument(
        "--input-format",
        default=None,
        choices=["svg", "json"],
        help="Input format (detected when omitted)",
    )
    parser.add_argument(
        "--format", "-f",
        default="svg",
        choices=["svg", "json"],
        help="Output format",
    )


def build_parser():
    parser = argparse.ArgumentParser(
        prog="bezierfit",
        description="bezierfit: Bezier curve geometry and cubic curve fitting",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Fit command
    fit_parser = subparsers.add_parser("fit", help="Fit one cubic Bezier to sample points")
    fit_parser.add_argument(
        "--points", "-p",
        required=True,
        help="Sample points file (JSON list or one 'x y' pair per line)",
    )
    fit_parser.add_argument(
        "--method",
        default=None,
        choices=[m.value for m in FitMethod],
        help="Fitting algorithm",
    )
    fit_parser.add_argument(
        "--heuristic",
        default=None,
        choices=[h.value for h in THeuristic],
        help="t estimation for the least squares method",
    )
    fit_parser.add_argument(
        "--t-update",
        default=None,
        choices=[u.value for u in TUpdateMethod],
        help="t update rule for the alternating method",
    )
    fit_parser.add_argument("--max-iterations", type=int, default=None)
    fit_parser.add_argument("--tolerance", type=float, default=None)
    fit_parser.add_argument("--seed", type=int, default=None, help="Random seed for weak_varpro")
    fit_parser.add_argument(
        "--format", "-f",
        default="svg",
        choices=["svg", "json"],
        help="Output format",
    )
    fit_parser.add_argument(
        "--svg-out",
        default=None,
        help="Also write an SVG document with the curve and samples",
    )
    _add_trace_arguments(fit_parser)

    # Split command
    split_parser = subparsers.add_parser("split", help="Split one segment of a curve")
    _add_curve_arguments(split_parser)
    split_parser.add_argument("--segment", type=int, default=0, help="Segment index")
    split_parser.add_argument("--t", type=float, required=True, help="Curve parameter")
    _add_trace_arguments(split_parser)

    # Merge command
    merge_parser = subparsers.add_parser("merge", help="Rejoin segments that were split")
    _add_curve_arguments(merge_parser)
    _add_trace_arguments(merge_parser)

    # Nearest command
    nearest_parser = subparsers.add_parser("nearest", help="Nearest point on a segment")
    _add_curve_arguments(nearest_parser)
    nearest_parser.add_argument("--segment", type=int, default=0, help="Segment index")
    nearest_parser.add_argument("--x", type=float, required=True)
    nearest_parser.add_argument("--y", type=float, required=True)
    _add_trace_arguments(nearest_parser)

    # Convert command
    convert_parser = subparsers.add_parser("convert", help="Re-export a curve in another format")
    convert_parser.add_argument("--curve", required=True, help="Curve as SVG path data or a JSON point list")
    convert_parser.add_argument(
        "--to",
        required=True,
        choices=["svg", "json"],
        help="Output format",
    )

    # Init config command
    init_parser = subparsers.add_parser("init-config", help="Write a YAML file holding every default setting")
    init_parser.add_argument(
        "--out", "-o",
        default="bezierfit_config.yaml",
        help="Where to write the YAML file",
    )

    return parser


def main(argv=None):
    """Run one bezierfit subcommand and return its exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "init-config":
        return handle_init_config(args)

    handlers = {
        "fit": handle_fit,
        "split": handle_split,
        "merge": handle_merge,
        "nearest": handle_nearest,
        "convert": handle_convert,
    }

    config = load_config(getattr(args, "config", None))
    tracing = config.tracing
    forced = getattr(args, "trace", False)
    configure_tracer(
        enabled=forced or tracing.enabled,
        level=(forced and args.trace_level) or tracing.level,
        file_path=(forced and args.trace_file) or tracing.file_path,
        json_output=bool(forced and args.trace_json) or tracing.json_output,
    )

    tracer = get_tracer()
    try:
        with tracer.span(f"cli_{args.command}", module="cli"):
            return handlers[args.command](args, config)
    except BezierError as e:
        tracer.event(f"{args.command} failed: {e}", level="ERROR")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        tracer.config.close()


def _parse_curve(args):
    input_format = Format.from_name(args.input_format) if getattr(args, "input_format", None) else None
    return parse(args.curve, input_format)


def _segment(curve, index):
    if not 0 <= index < len(curve.segments):
        raise BezierError(f"Segment index {index} out of range for {len(curve.segments)} segments")
    return curve.segments[index]


def handle_fit(args, config):
    """Handle the fit command."""
    fit_config = config.fit
    if args.method:
        fit_config.method = args.method
    if args.heuristic:
        fit_config.heuristic = args.heuristic
    if args.t_update:
        fit_config.t_update = args.t_update
    if args.max_iterations is not None:
        fit_config.max_iterations = args.max_iterations
    if args.tolerance is not None:
        fit_config.tolerance = args.tolerance
    if args.seed is not None:
        config.gradient.seed = args.seed

    samples = load_points(args.points)
    rng = np.random.default_rng(config.gradient.seed)
    segment = fit_points(samples, fit_config, config.gradient, rng)
    curve = BezierCurve.new([segment])

    print(export(curve, Format.from_name(args.format)))

    if args.svg_out:
        write_svg_document(args.svg_out, curve, samples)
    return 0


def handle_split(args, config):
    """Handle the split command."""
    curve = _parse_curve(args)
    _segment(curve, args.segment)
    print(export(curve.split_segment(args.segment, args.t), Format.from_name(args.format)))
    return 0


def handle_merge(args, config):
    """Handle the merge command."""
    curve = _parse_curve(args)
    merged = curve.merged(tolerance=config.geometry.merge_tolerance)
    print(export(merged, Format.from_name(args.format)))
    return 0


def handle_nearest(args, config):
    """Handle the nearest command."""
    curve = _parse_curve(args)
    segment = _segment(curve, args.segment)
    point, t = segment.nearest_point(
        Point(x=args.x, y=args.y),
        lut_size=config.geometry.nearest_lut_size,
        refine_tolerance=config.geometry.nearest_refine_tolerance,
    )
    distance = point.distance(Point(x=args.x, y=args.y))
    print(f"point={point} t={t:.6f} distance={distance:.6f}")
    return 0


def handle_convert(args, config):
    """Handle the convert command."""
    curve = parse(args.curve)
    print(export(curve, Format.from_name(args.to)))
    return 0


def handle_init_config(args):
    """Write the default settings so they can be edited."""
    save_default_config(args.out)
    print(f"Wrote default settings to {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
