"""Command-line interface for landingpage."""

import argparse
import asyncio
import json
import os
import sys

from .logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def _load_config_or_exit(explicit_path):
    from .config import find_config_path, load_config
    from .errors import ConfigError

    config_path = find_config_path(explicit_path)
    if config_path is None:
        print("No configuration file found. Use --config or set CONFIG_FILE.", file=sys.stderr)
        sys.exit(1)
    try:
        return load_config(config_path)
    except ConfigError as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        sys.exit(1)


def serve_command(args: argparse.Namespace) -> None:
    """Start the landing page server."""
    # Import heavy dependencies only when needed
    import uvicorn
    from .api import app, initialize_collector, mount_static_folder
    from .credentials import load_home_client
    from .errors import ClusterUnreachable

    setup_logging(args.verbose)
    config = _load_config_or_exit(args.config)

    try:
        home_client = load_home_client(args.kubeconfig, args.context)
    except ClusterUnreachable as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    initialize_collector(config, home_client)

    static_dir = os.getenv("STATIC_FOLDER")
    if static_dir:
        mount_static_folder(static_dir)

    logger.info("Starting landingpage server", host=args.host, port=args.port)
    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level="info" if not args.verbose else "debug",
    )


def scan_command(args: argparse.Namespace) -> None:
    """Build one snapshot and print it."""
    import yaml
    from .collector import build_snapshot
    from .credentials import load_home_client
    from .errors import LandingPageError

    setup_logging(args.verbose)
    config = _load_config_or_exit(args.config)

    async def run_scan():
        home_client = load_home_client(args.kubeconfig, args.context)
        try:
            return await build_snapshot(config, home_client)
        finally:
            home_client.close()

    try:
        snapshot = asyncio.run(run_scan())
    except LandingPageError as e:
        print(f"Scan failed: {e}", file=sys.stderr)
        sys.exit(1)

    data = [group.model_dump(mode="json") for group in snapshot]
    if args.output == "json":
        print(json.dumps(data, indent=2))
    elif args.output == "yaml":
        print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))
    else:
        if not snapshot:
            print("No groups configured.")
            return
        for group in snapshot:
            print(f"\n[{group.name}]")
            if not group.clusters:
                print("  (no clusters available)")
            for cluster in group.clusters:
                print(f"  {cluster.name}" + (f" - {cluster.description}" if cluster.description else ""))
                for route in cluster.routes:
                    print(f"    {route.name:<30} {route.url}")


def init_config_command(args: argparse.Namespace) -> None:
    """Generate a sample configuration file."""
    import yaml
    from pathlib import Path

    sample_config = {
        "global": {
            "onlyWithAnnotation": False,
            "refreshIntervalSeconds": 30,
        },
        "local": {
            "enabled": True,
            "description": "Cluster this landing page runs in",
        },
        "remote": {
            "production": [
                {
                    "name": "prod-eu",
                    "description": "Production EU",
                    "kubeconfigSecret": {"name": "prod-eu-kubeconfig", "namespace": "landingpage"},
                    "namespaces": ["web", "api"],
                },
            ],
        },
    }

    config_yaml = yaml.safe_dump(sample_config, default_flow_style=False, sort_keys=False)

    if args.output:
        output_path = Path(args.output)
        output_path.write_text(config_yaml)
        print(f"Sample configuration written to {output_path}")
    else:
        print("Sample configuration:\n")
        print(config_yaml)


def validate_config_command(args: argparse.Namespace) -> None:
    """Validate a configuration file."""
    from .config import load_config
    from .errors import ConfigError

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(1)

    print(f"✓ Configuration file {args.config} is valid")
    print("\nConfiguration summary:")
    print(f"  Refresh interval: {config.refresh_interval}s")
    print(f"  Only with annotation: {config.only_with_annotation}")
    print(f"  Local cluster: {'enabled' if config.local_enabled else 'disabled'}")
    for group_name, clusters in config.remote.items():
        print(f"  Group {group_name}:")
        for cluster in clusters:
            ref = cluster.credential_secret_ref
            print(f"    - {cluster.name} (secret {ref.namespace}/{ref.name})")


def version_command(args: argparse.Namespace) -> None:
    from . import __version__
    print(f"landingpage {__version__}")


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="landingpage: links to the ingresses of several Kubernetes clusters",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_cluster_arguments(subparser):
        subparser.add_argument("--config", "-c", help="Configuration file path (default: $CONFIG_FILE or config.yaml)")
        subparser.add_argument("--kubeconfig", help="Kubeconfig for the home cluster (default: in-cluster, then ~/.kube/config)")
        subparser.add_argument("--context", help="Kubeconfig context for the home cluster")

    serve_parser = subparsers.add_parser("serve", help="Start the landing page server")
    add_cluster_arguments(serve_parser)
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")
    serve_parser.set_defaults(func=serve_command)

    scan_parser = subparsers.add_parser("scan", help="Collect ingresses once and print them")
    add_cluster_arguments(scan_parser)
    scan_parser.add_argument(
        "--output", "-o",
        choices=["json", "yaml", "table"],
        default="table",
        help="Output format (default: table)",
    )
    scan_parser.set_defaults(func=scan_command)

    init_parser = subparsers.add_parser("init-config", help="Generate a sample configuration file")
    init_parser.add_argument("--output", "-o", help="Output file path (default: stdout)")
    init_parser.set_defaults(func=init_config_command)

    validate_parser = subparsers.add_parser("validate-config", help="Validate a configuration file")
    validate_parser.add_argument("--config", "-c", required=True, help="Configuration file path")
    validate_parser.set_defaults(func=validate_config_command)

    version_parser = subparsers.add_parser("version", help="Show version information")
    version_parser.set_defaults(func=version_command)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
