"""
Command-line interface for headless lab sessions.

Usage:
    induction-lab --config examples/magnet_approach.yaml --out output/
    induction-lab --preset solenoid_ideal --excel --charts
"""

import argparse
import sys
from pathlib import Path

from .config import load_config
from .exceptions import EmptyExportError
from .exporters import export_results
from .presets import get_preset_config, list_presets
from .runner import run_session
from .state import LabMode
from .utils.logger import Logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Electromagnetic induction lab: record a session and export it"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--config", "-c",
        type=Path,
        help="Path to YAML configuration file"
    )
    source.add_argument(
        "--preset", "-p",
        type=str,
        help=f"Built-in preset ({', '.join(list_presets())})"
    )
    parser.add_argument(
        "--out", "-o",
        type=Path,
        default=None,
        help="Output directory (overrides config)"
    )
    parser.add_argument(
        "--name", "-n",
        type=str,
        default=None,
        help="Run name (overrides config)"
    )
    parser.add_argument(
        "--duration", "-d",
        type=float,
        default=None,
        help="Session duration in seconds (overrides config)"
    )
    parser.add_argument(
        "--excel",
        action="store_true",
        help="Also write an Excel workbook"
    )
    parser.add_argument(
        "--charts",
        action="store_true",
        help="Also write PNG time-series charts"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress output except errors"
    )
    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    Logger.initialize()

    # Load and validate config
    try:
        if args.preset:
            config = get_preset_config(args.preset)
        else:
            config = load_config(args.config)
    except FileNotFoundError:
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        sys.exit(1)
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.duration is not None:
        if args.duration <= 0:
            print("Error: --duration must be positive", file=sys.stderr)
            sys.exit(1)
        config.session.duration_s = args.duration

    out_dir = args.out or Path(config.output.out_dir)
    run_name = args.name or config.output.run_name
    formats = list(config.output.formats)
    for flag, fmt in ((args.excel, "excel"), (args.charts, "png")):
        if flag and fmt not in formats:
            formats.append(fmt)

    if not args.quiet:
        print("Running induction lab session...")
        print(f"  Mode: {config.mode}")
        print(f"  Duration: {config.session.duration_s:.2f} s at dt = {config.session.frame_dt_s:.5f} s")
        if config.lab_mode is LabMode.FARADAY:
            print(f"  Motion: {config.motion.mode}")

    result = run_session(config)

    try:
        paths = export_results(result, out_dir, run_name, formats)
    except EmptyExportError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not args.quiet:
        print()
        print("=" * 50)
        print("SESSION COMPLETE")
        print("=" * 50)
        print(f"  Measurements: {len(result.measurements)}")
        print(f"  Frames: {result.n_ticks} ({result.n_dropped} dropped)")
        if result.mode is LabMode.FARADAY:
            print(f"  Peak |Φ|: {result.peak_flux_Wb:.6e} Wb")
            print(f"  Peak |ε|: {result.peak_emf_V:.6e} V")
        else:
            print(f"  Peak |B|: {result.peak_field_T:.6e} T")
        print(f"  Peak |I|: {result.peak_current_A:.6e} A")
        print()
        print("Output files:")
        for fmt, path in paths.items():
            print(f"  {fmt}: {path}")

    sys.exit(0)


if __name__ == "__main__":
    main()
