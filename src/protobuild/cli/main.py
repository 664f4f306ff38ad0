# Copyright 2026 Protobuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the protobuild command-line interface."""

import argparse
import logging
import sys
from pathlib import Path

from protobuild.engine.context import GenerationContext
from protobuild.engine.emit import render_package, serialize
from protobuild.engine.run import GenerationError, run
from protobuild.rulegen.render import SchemaRenderError, generate_rule
from protobuild.rulegen.schema import SchemaError
from protobuild.workspace.config import WORKSPACE_CONFIG_NAME, WorkspaceConfigError, find_workspace_config

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the protobuild CLI."""
    parser = argparse.ArgumentParser(
        prog="protobuild",
        description="protobuild: build-graph synthesis for protocol buffer sources",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # init subcommand
    init_parser = subparsers.add_parser(
        "init",
        help="Create a workspace configuration file",
        description=f"Write a default {WORKSPACE_CONFIG_NAME} into a directory.",
    )
    init_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Workspace root (default: current directory)",
    )

    # generate subcommand
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate proto rules for a source tree",
        description=(
            "Parse every .proto file under a workspace, group the files into compilation units, "
            "and print one rule per unit and plugin with resolved dependencies."
        ),
    )
    generate_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Workspace root (default: current directory)",
    )
    generate_parser.add_argument(
        "--format",
        choices=("starlark", "json"),
        default="starlark",
        help="Output format (default: starlark)",
    )
    generate_parser.add_argument(
        "--lenient",
        action="store_true",
        help="Skip unparseable .proto files instead of aborting",
    )

    # rulegen subcommand
    rulegen_parser = subparsers.add_parser(
        "rulegen",
        help="Render a rule definition from a rule schema",
        description="Render the rule implementation, a JSON snapshot, examples, and a test from a rule schema.",
    )
    rulegen_parser.add_argument("schema", help="Path to the YAML or JSON rule schema")
    rulegen_parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to write the artifacts to (default: the schema's directory)",
    )

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    _configure_logging(args.verbose)
    sys.exit(_dispatch(args))


# ################
# Implementation
# ################

_DEFAULT_WORKSPACE_CONFIG = (
    "# protobuild workspace configuration\n"
    "rule-kind: proto_library\n"
    "# default-plugins: [go, py]\n"
    "# external-imports:\n"
    '#   google/protobuf/timestamp.proto:\n'
    '#     "*": "@com_google_protobuf//:timestamp_proto"\n'
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if verbose:
        logging.getLogger("protobuild").setLevel(logging.DEBUG)


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "init":
        return _cmd_init(args)
    if args.command == "generate":
        return _cmd_generate(args)
    if args.command == "rulegen":
        return _cmd_rulegen(args)
    return 0


def _cmd_init(args: argparse.Namespace) -> int:
    """Handle the init subcommand."""
    directory = Path(args.directory).resolve()

    if not directory.is_dir():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return 1

    config_file = directory / WORKSPACE_CONFIG_NAME
    if config_file.exists():
        print(f"Error: workspace configuration already exists at '{config_file}'.", file=sys.stderr)
        return 1

    config_file.write_text(_DEFAULT_WORKSPACE_CONFIG, encoding="utf-8")
    print(f"Initialized protobuild workspace at '{config_file}'.")
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    """Handle the generate subcommand."""
    directory = Path(args.directory).resolve()

    if not directory.is_dir():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return 1

    try:
        workspace = find_workspace_config(directory)
        ctx = GenerationContext.from_workspace(workspace, lenient=args.lenient)
        result = run(directory, ctx)
    except (WorkspaceConfigError, GenerationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for diagnostic in result.diagnostics:
        print(f"Warning: {diagnostic.message}", file=sys.stderr)

    if args.format == "json":
        sys.stdout.write(serialize(result))
        return 0

    blocks = []
    for package in result.packages:
        text = render_package(package)
        if text:
            blocks.append(f"# {package.directory or '.'}\n{text}")
    sys.stdout.write("\n".join(blocks))
    return 0


def _cmd_rulegen(args: argparse.Namespace) -> int:
    """Handle the rulegen subcommand."""
    schema_path = Path(args.schema).resolve()
    out_dir = Path(args.output_dir).resolve() if args.output_dir else schema_path.parent

    try:
        written = generate_rule(schema_path, out_dir)
    except (SchemaError, SchemaRenderError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for path in written:
        print(f"Wrote {path}")
    return 0
