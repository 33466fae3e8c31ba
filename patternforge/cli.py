"""Command-line interface for PatternForge.

This module provides CLI commands for generating patterns from YAML job
files, inspecting and validating pattern files, and listing available
components.

Example:
    $ patternforge generate jobs.yml --output patterns/
    $ patternforge inspect patterns/pat0001_loom-5-90_G4.pat
    $ patternforge validate jobs.yml
    $ patternforge list-components
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np
from tqdm import tqdm

from patternforge.arena.generations import list_generations
from patternforge.config.schema import PatternForgeConfig
from patternforge.errors import PatternForgeError
from patternforge.patterns.codec import decode_pattern
from patternforge.patterns.repository import PatternRepository
from patternforge.register_components import build_codec_registry, build_generator_registry
from patternforge.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def load_config_file(config_path: str) -> PatternForgeConfig:
    """Load and parse a YAML job file.

    Args:
        config_path: Path to YAML job file.

    Returns:
        Parsed configuration.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the YAML is malformed or has unknown keys.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    config = PatternForgeConfig.from_file(path)
    if not config.patterns:
        raise ValueError(f"No patterns defined in {config_path}")
    return config


def cmd_generate(args: argparse.Namespace) -> int:
    """Synthesize every pattern in a job file and write the ``.pat`` files.

    Args:
        args: Command-line arguments with config path and output options.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    try:
        config = load_config_file(args.config)
        if args.output:
            config.output.directory = args.output
        overwrite = args.overwrite or config.output.overwrite

        jobs = config.build_generators(build_generator_registry())
        geometry = config.arena.build_geometry()
        repository = PatternRepository(config.output.directory, codecs=build_codec_registry())
        logger.info(
            "Arena %s: %dx%d pixels", geometry.generation, geometry.rows, geometry.cols
        )

        written = []
        for job, generator in tqdm(jobs, desc="Generating", unit="pattern", disable=args.quiet):
            container = generator.generate(geometry)
            path = repository.save(
                container, job.name, pattern_id=job.pattern_id, overwrite=overwrite
            )
            written.append((path, container))

        for path, container in written:
            print(f"{path}  ({container.num_frames} frames, gs={container.gs_val})")
        print(f"✓ Wrote {len(written)} pattern(s) to {config.output.directory}")
        return 0

    except FileNotFoundError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    except FileExistsError as e:
        print(f"❌ {e} (use --overwrite to replace)", file=sys.stderr)
        return 1
    except (PatternForgeError, KeyError, ValueError) as e:
        print(f"❌ Error generating patterns: {e}", file=sys.stderr)
        return 1


def cmd_inspect(args: argparse.Namespace) -> int:
    """Print the header summary and per-frame statistics of a pattern file.

    Args:
        args: Command-line arguments with the pattern path.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    path = Path(args.pattern)
    try:
        container = decode_pattern(path.read_bytes(), build_codec_registry())
    except FileNotFoundError:
        print(f"❌ Pattern file not found: {path}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"❌ Cannot read {path}: {e}", file=sys.stderr)
        return 1
    except PatternForgeError as e:
        print(f"❌ Cannot decode {path}: {e}", file=sys.stderr)
        return 1

    summary = container.summary()
    print(f"Pattern: {path.name}")
    print("=" * 50)
    print(f"  Generation:   {summary['generation']}")
    print(f"  Header:       V{container.metadata.get('header_version', 1)}")
    print(f"  Bit depth:    gs_val={summary['gs_val']}")
    print(f"  Pixels:       {summary['rows']} x {summary['cols']}")
    print(f"  Panels:       {summary['panel_rows']} x {summary['panel_cols']}")
    print(f"  Frames:       {summary['num_frames']} ({summary['num_x']} x {summary['num_y']})")
    print(f"  Arena ID:     {summary['arena_id']}")
    if container.generation == "G6":
        print(f"  Observer ID:  {summary['observer_id']}")

    if args.frames:
        print("\nFrame  stretch  min  max   mean")
        for k in range(container.num_frames):
            frame = container.frames[:, :, k]
            print(
                f"{k:5d}  {int(container.stretch[k]):7d}  {int(frame.min()):3d}  "
                f"{int(frame.max()):3d}  {float(np.mean(frame)):5.2f}"
            )
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a job file without synthesizing anything.

    Args:
        args: Command-line arguments with config path.

    Returns:
        Exit code (0 for valid, 1 for invalid).
    """
    try:
        config = load_config_file(args.config)
        print(f"Validating {args.config}...")
        jobs = config.build_generators(build_generator_registry())
        geometry = config.arena.build_geometry()

        print("✓ Configuration is valid!")
        print(f"\n  Arena: {geometry.generation}, {geometry.rows} x {geometry.cols} pixels")
        for job, generator in jobs:
            print(f"  - {job.name}: {generator.stimulus_type}")
        return 0

    except FileNotFoundError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    except KeyError as e:
        print(f"❌ Unknown component: {e.args[0]}", file=sys.stderr)
        return 1
    except (PatternForgeError, ValueError) as e:
        print(f"❌ Error validating config: {e}", file=sys.stderr)
        return 1


def cmd_list_components(args: argparse.Namespace) -> int:
    """List registered stimulus types and pattern generations.

    Args:
        args: Command-line arguments (unused).

    Returns:
        Exit code (0 for success).
    """
    generators = build_generator_registry()
    codecs = build_codec_registry()

    print("Available PatternForge Components:")
    print("=" * 50)

    print("\nStimulus types:")
    for name in generators.list_registered():
        cls = generators.get_class(name)
        alias = "" if cls.stimulus_type == name else f" (alias of {cls.stimulus_type})"
        print(f"  - {name}{alias}")

    print("\nGenerations:")
    for name in list_generations():
        codec = codecs.create(name)
        print(f"  - {name} ({type(codec).__name__})")

    print("\n💡 Use 'patternforge generate --help' for usage examples")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog='patternforge',
        description='PatternForge: LED arena stimulus synthesis and .pat codecs'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    generate_parser = subparsers.add_parser(
        'generate',
        help='Generate .pat files from a YAML job file'
    )
    generate_parser.add_argument(
        'config',
        type=str,
        help='Path to YAML job file'
    )
    generate_parser.add_argument(
        '--output', '-o',
        type=str,
        default=None,
        help='Output directory (overrides output.directory)'
    )
    generate_parser.add_argument(
        '--overwrite',
        action='store_true',
        help='Replace existing patterns with the same ID'
    )
    generate_parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Hide the progress bar'
    )

    inspect_parser = subparsers.add_parser(
        'inspect',
        help='Show header and frame statistics of a .pat file'
    )
    inspect_parser.add_argument(
        'pattern',
        type=str,
        help='Path to .pat file'
    )
    inspect_parser.add_argument(
        '--frames',
        action='store_true',
        help='Print per-frame statistics'
    )

    validate_parser = subparsers.add_parser(
        'validate',
        help='Validate a YAML job file without generating'
    )
    validate_parser.add_argument(
        'config',
        type=str,
        help='Path to YAML job file'
    )

    subparsers.add_parser(
        'list-components',
        help='List available stimulus types and generations'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Argument list; defaults to ``sys.argv[1:]``.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(verbose=args.verbose)

    commands = {
        'generate': cmd_generate,
        'inspect': cmd_inspect,
        'validate': cmd_validate,
        'list-components': cmd_list_components,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
