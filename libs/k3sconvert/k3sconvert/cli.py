"""
CLI for k3sconvert - Docker Compose to Kubernetes converter.

Commands:
    convert     Convert a compose file to Kubernetes manifests
    up          Submit generated Service and ReplicationController manifests
    ps          List the Services and ReplicationControllers of a project
    delete      Delete the Services or ReplicationControllers of a project
    scale       Scale the ReplicationControllers of a project
"""

import argparse
import logging
import sys
from typing import List, Optional

from .cluster import (
    delete_resources,
    list_resources,
    load_api,
    scale_replication_controllers,
    upload_manifests,
)
from .converter import convert_project
from .errors import K3sConvertError
from .parser import DEFAULT_COMPOSE_FILE, parse_compose_project
from .types import ConvertOptions, ResourceKind


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="k3sconvert",
        description="Convert Docker Compose to Kubernetes manifests",
    )
    parser.add_argument(
        "-f", "--file",
        default=DEFAULT_COMPOSE_FILE,
        help=f"Path to the compose file (default: {DEFAULT_COMPOSE_FILE})",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    # -f/--file after the sub-command; SUPPRESS keeps the global value otherwise
    file_parser = argparse.ArgumentParser(add_help=False)
    file_parser.add_argument(
        "-f", "--file",
        default=argparse.SUPPRESS,
        help="Path to the compose file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # convert command
    convert_parser = subparsers.add_parser(
        "convert",
        parents=[file_parser],
        help="Convert a compose file to Kubernetes manifests",
    )
    convert_parser.add_argument(
        "-o", "--out",
        help="Write all manifests to a single file",
    )
    convert_parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print manifests to stdout",
    )
    convert_parser.add_argument(
        "-y", "--yaml",
        action="store_true",
        help="Generate YAML instead of JSON",
    )
    convert_parser.add_argument(
        "-d", "--deployment",
        action="store_true",
        help="Generate a Deployment for each service",
    )
    convert_parser.add_argument(
        "--ds", "--daemonset",
        dest="daemonset",
        action="store_true",
        help="Generate a DaemonSet for each service",
    )
    convert_parser.add_argument(
        "--rs", "--replicaset",
        dest="replicaset",
        action="store_true",
        help="Generate a ReplicaSet for each service",
    )
    convert_parser.add_argument(
        "-c", "--chart",
        action="store_true",
        help="Generate a Helm chart (not supported, validated only)",
    )

    # up command
    up_parser = subparsers.add_parser(
        "up",
        parents=[file_parser],
        help="Submit generated Service and ReplicationController manifests",
    )
    up_parser.add_argument(
        "-C", "--directory",
        default=".",
        help="Directory holding the manifests (default: current directory)",
    )

    # ps command
    ps_parser = subparsers.add_parser(
        "ps",
        parents=[file_parser],
        help="List the Services and ReplicationControllers of a project",
    )
    ps_parser.add_argument(
        "--svc",
        action="store_true",
        help="Only list Services",
    )
    ps_parser.add_argument(
        "--rc",
        action="store_true",
        help="Only list ReplicationControllers",
    )

    # delete command
    delete_parser = subparsers.add_parser(
        "delete",
        parents=[file_parser],
        help="Delete the Services (or ReplicationControllers) of a project",
    )
    delete_parser.add_argument(
        "--rc",
        action="store_true",
        help="Delete ReplicationControllers instead of Services",
    )
    delete_parser.add_argument(
        "--name",
        help="Only delete objects of this service",
    )

    # scale command
    scale_parser = subparsers.add_parser(
        "scale",
        parents=[file_parser],
        help="Scale the ReplicationControllers of a project",
    )
    scale_parser.add_argument(
        "--scale",
        type=int,
        default=0,
        help="Number of replicas",
    )
    scale_parser.add_argument(
        "--rc",
        help="Only scale the ReplicationController of this service",
    )

    return parser


def cmd_convert(args: argparse.Namespace) -> int:
    """Handle convert command."""
    options = ConvertOptions.from_args(args)
    project = parse_compose_project(options.compose_file)
    emitted = convert_project(project, options)

    if args.verbose:
        print(
            f"Generated {len(emitted)} manifests for {len(project.services)} services",
            file=sys.stderr,
        )
    return 0


def cmd_up(args: argparse.Namespace) -> int:
    """Handle up command."""
    api = load_api()
    upload_manifests(api, args.directory)
    return 0


def cmd_ps(args: argparse.Namespace) -> int:
    """Handle ps command."""
    project = parse_compose_project(args.file)
    # Without a filter both tables are shown
    show_all = not args.svc and not args.rc
    list_resources(
        load_api(),
        project.service_names,
        services=args.svc or show_all,
        rcs=args.rc or show_all,
    )
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    """Handle delete command."""
    project = parse_compose_project(args.file)
    kind = ResourceKind.REPLICATION_CONTROLLER if args.rc else ResourceKind.SERVICE
    delete_resources(load_api(), project.service_names, kind=kind, only=args.name)
    return 0


def cmd_scale(args: argparse.Namespace) -> int:
    """Handle scale command."""
    project = parse_compose_project(args.file)
    scale_replication_controllers(
        load_api(), project.service_names, args.scale, only=args.rc
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "convert": cmd_convert,
        "up": cmd_up,
        "ps": cmd_ps,
        "delete": cmd_delete,
        "scale": cmd_scale,
    }

    handler = commands.get(args.command)
    if not handler:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except (K3sConvertError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
