#!/usr/bin/env python3
"""
OcifPlace CLI

Command-line interface for laying out OCIF canvas documents.

Usage:
    ocifplace layout <document.json> [options]
    ocifplace profiles
"""

import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from . import __version__


def _configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _resolve_config(args):
    """Build the layout config from --profile, --config and --iterations."""
    from .layout.profiles import get_profile, load_layout_config

    config = get_profile(args.profile or "default")
    if args.config:
        config = load_layout_config(args.config, base=config)
    if args.iterations is not None:
        config = replace(config, iterations=args.iterations)
        config.validate()
    return config


def cmd_layout(args):
    """Lay out a document and save it."""
    from .document.ocif_adapter import (
        OCIFDocumentError,
        load_ocif_document,
        save_ocif_document,
    )
    from .layout.force_directed import ForceDirectedLayout
    from .layout.profiles import LayoutConfigError

    try:
        config = _resolve_config(args)
        graph = load_ocif_document(args.document)
    except (LayoutConfigError, OCIFDocumentError, ValueError, OSError) as e:
        print(f"Error: {e}")
        return 1

    stats = graph.get_stats()
    print(f"Loaded document: {args.document}")
    print(f"  Nodes: {stats['node_count']} ({stats['arrow_count']} arrows)")
    print(f"  Relations: {stats['relation_count']}")
    print(f"  Canvas: {config.canvas_width:.0f}x{config.canvas_height:.0f} "
          f"(padding {config.padding:.0f})")

    layout = ForceDirectedLayout(graph, config, seed=args.seed)
    state = layout.run()

    print("\nLayout complete:")
    print(f"  Iterations: {config.iterations}")
    print(f"  Seeded positions: {state.seeded}")
    print(f"  Attraction edges: {state.edge_count}")
    print(f"  Scale factor: {state.scale:.3f}")
    print(f"  Arrows updated: {state.arrows_updated}")

    if args.dry_run:
        print("\nDry run - no changes saved")
        return 0

    output = args.output or args.document
    try:
        save_ocif_document(graph, output)
    except OCIFDocumentError as e:
        print(f"Error: {e}")
        return 1
    print(f"\nSaved: {output}")
    return 0


def cmd_profiles(args):
    """List available layout profiles."""
    from .layout.profiles import get_profile, list_profiles

    print("Available layout profiles:")
    for name in list_profiles():
        profile = get_profile(name)
        print(
            f"  {name:<10} {profile.canvas_width:.0f}x{profile.canvas_height:.0f} "
            f"padding={profile.padding:.0f} iterations={profile.iterations}"
        )
    return 0


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="ocifplace",
        description="OcifPlace - Force-directed layout for OCIF canvas documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ocifplace layout diagram.json                     # Lay out in place
  ocifplace layout diagram.json -o laid_out.json --seed 7
  ocifplace layout diagram.json --profile wide --config layout.yaml
  ocifplace profiles
        """,
    )

    parser.add_argument('--version', action='version', version=f'ocifplace {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Layout command
    layout_parser = subparsers.add_parser('layout', help='Compute node positions')
    layout_parser.add_argument('document', help='Path to OCIF JSON document')
    layout_parser.add_argument('-o', '--output', help='Output file path (default: overwrite input)')
    layout_parser.add_argument('--profile', help='Layout profile (default: default)')
    layout_parser.add_argument('--config', help='YAML file with layout settings')
    layout_parser.add_argument('--seed', type=int, help='Random seed for initial positions')
    layout_parser.add_argument('--iterations', type=int, help='Simulation iterations (default: 100)')
    layout_parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')
    layout_parser.add_argument('--dry-run', action='store_true', help="Don't save changes")

    # Profiles command
    subparsers.add_parser('profiles', help='List layout profiles')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    _configure_logging(getattr(args, 'verbose', False))

    commands = {
        'layout': cmd_layout,
        'profiles': cmd_profiles,
    }

    return commands[args.command](args)


if __name__ == '__main__':
    sys.exit(main())
