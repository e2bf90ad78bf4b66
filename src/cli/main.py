"""Trackline CLI entry points.
This module exposes commands for processing enrollment events, publishing
tracking requests, and validating mapping files.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from core.config import TracklineConfig
from core.errors import TracklineError
from mapping.catalog import MappingCatalog
from pipeline.tracking_sdk import TracklineClient
from store.record_payload import read_json_objects


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="trackline", description="Trackline enrollment CLI")
    parser.add_argument("--data-root", help="Override TRACKLINE_DATA_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_process_command(subparsers)
    _add_publish_command(subparsers)
    _add_validate_mapping_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Trackline CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        if args.command == "process":
            return _run_process_command(_build_client(args.data_root, args.mapping), args)
        if args.command == "publish":
            return _run_publish_command(_build_client(args.data_root, None), args)
        if args.command == "validate-mapping":
            return _run_validate_mapping_command(args)
    except TracklineError as error:
        print(f"error: {error}")
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(data_root: str | None, mapping_path: str | None) -> TracklineClient:
    """Build SDK client with optional data-root and mapping overrides.

    Args:
        data_root: Optional override path.
        mapping_path: Optional mapping YAML path.

    Returns:
        Configured SDK client.
    """
    config = TracklineConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    if mapping_path:
        config = replace(config, mapping_path=Path(mapping_path).expanduser().resolve())
    return TracklineClient(config)


def _run_process_command(client: TracklineClient, args: argparse.Namespace) -> int:
    """Handle process command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code, non-zero when the batch was aborted.
    """
    result = client.process_file(args.events)
    print(f"event_count={result.event_count}")
    print(f"records_built={result.records_built}")
    print(f"records_written={result.records_written}")
    print(f"write_skipped={str(result.write_skipped).lower()}")
    print(f"aborted={str(result.aborted).lower()}")
    for outcome in result.outcomes:
        if not outcome.succeeded:
            print(f"failed\t{outcome.enrollment_id}\t{outcome.error_message or '-'}")
    return 1 if result.aborted else 0


def _run_publish_command(client: TracklineClient, args: argparse.Namespace) -> int:
    """Handle publish command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code, non-zero when any enrollment failed to publish.
    """
    enrollments = read_json_objects(Path(args.enrollments).expanduser().resolve())
    outcomes = client.publish_enrollments(enrollments)
    for outcome in outcomes:
        status = "published" if outcome.succeeded else "failed"
        detail = outcome.event_id if outcome.succeeded else outcome.error_message
        print(f"{status}\t{outcome.enrollment_id or '-'}\t{detail or '-'}")
    return 0 if all(outcome.succeeded for outcome in outcomes) else 1


def _run_validate_mapping_command(args: argparse.Namespace) -> int:
    """Handle validate-mapping command.

    Args:
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    catalog = MappingCatalog.from_file(args.mapping_file)
    for entity_type in catalog.source_types():
        print(f"{entity_type}\t{len(catalog.rules_for(entity_type))}")
    return 0


def _add_process_command(subparsers: Any) -> None:
    """Register process subcommand."""
    parser = subparsers.add_parser("process", help="Build tracking records for an event batch")
    parser.add_argument("events", help="JSONL file with one enrollment event per line")
    parser.add_argument("--mapping", help="Mapping YAML, overrides TRACKLINE_MAPPING_FILE")


def _add_publish_command(subparsers: Any) -> None:
    """Register publish subcommand."""
    parser = subparsers.add_parser(
        "publish",
        help="Publish tracking requests for enrollment records to EventBridge",
    )
    parser.add_argument("enrollments", help="JSONL file of enrollment records")


def _add_validate_mapping_command(subparsers: Any) -> None:
    """Register validate-mapping subcommand."""
    parser = subparsers.add_parser("validate-mapping", help="Validate a mapping YAML file")
    parser.add_argument("mapping_file", help="Mapping YAML path")
