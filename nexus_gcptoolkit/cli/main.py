"""CLI entrypoint for nexus-gcptoolkit."""
import sys
import argparse
import getpass
import logging

import yaml

from nexus_gcptoolkit import __version__

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)


def _node_config(args):
    from nexus_gcptoolkit.secrets.domains.config_loader import load_node_config

    return load_node_config(args.config)


def _store(config):
    from nexus_gcptoolkit.secrets.domains.gcp_client import GCPSecretStore

    return GCPSecretStore(project_id=config.project_id)


def cmd_version(args):
    """Show version information."""
    print(f"nexus-gcptoolkit {__version__}")


def cmd_config_show(args):
    """Show the config file in use and the settings it resolves to."""
    from nexus_gcptoolkit.secrets.domains.config_loader import _get_config_path

    print(f"Config path: {_get_config_path(args.config)}")
    config = _node_config(args)
    print(f"Environment: {config.environment}")
    print(f"Hostname: {config.hostname}")
    print(f"Nexus URL: {config.url}")
    print(f"Repository: {config.repository}")
    print(f"Retries: {config.retries} (delay {config.retry_delay}s)")
    print(f"SSL verify: {config.ssl_verify}")
    print(f"Credential mode: {config.credential_mode.value}")


def cmd_check(args):
    """Check Nexus is reachable with the stored admin credentials."""
    from nexus_gcptoolkit.nexus.workflows.connection import nexus_available

    config = _node_config(args)
    if nexus_available(config, _store(config)):
        print(f"Success: connected to Nexus at {config.url}")
        sys.exit(0)

    print(f"Error: Could not connect to Nexus at {config.url}. Please ensure Nexus is running.", file=sys.stderr)
    sys.exit(1)


def cmd_check_credentials(args):
    """Check whether Nexus still accepts a username and password."""
    from nexus_gcptoolkit.nexus.workflows.connection import check_credentials_still_valid

    config = _node_config(args)
    password = getpass.getpass(f"Password for {args.username}: ")
    if check_credentials_still_valid(args.username, password, config):
        print(f"Credentials for '{args.username}' are valid")
        sys.exit(0)

    print(f"Credentials for '{args.username}' were rejected", file=sys.stderr)
    sys.exit(1)


def cmd_parse_identifier(args):
    """Print the safe-for-Nexus form of an identifier."""
    from nexus_gcptoolkit.nexus.workflows.connection import parse_identifier

    if not args.identifier.strip():
        print("Error: Identifier cannot be empty", file=sys.stderr)
        sys.exit(2)
    print(parse_identifier(args.identifier))


def cmd_repositories(args):
    """Print repository definitions for the node's environment as YAML."""
    from nexus_gcptoolkit.secrets.workflows import secret_operations

    getters = {
        "proxy": secret_operations.get_proxy_repositories,
        "hosted": secret_operations.get_hosted_repositories,
        "group": secret_operations.get_group_repositories,
    }
    config = _node_config(args)
    repositories = getters[args.kind](_store(config), config)
    print(yaml.safe_dump(repositories, default_flow_style=False, sort_keys=True), end="")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="nexus-gcptoolkit",
        description="Resolve Nexus secrets from GCP Secret Manager and check Nexus connectivity",
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (secret not found, Nexus unreachable, bad config, etc.)
  2 - Usage error (invalid arguments)

Environment variables:
  NEXUS_GCPTOOLKIT_CONFIG - Path to the config file
  GCP_PROJECT - GCP project ID (overrides config file)

Configuration:
  Default location: ~/.config/nexus-gcptoolkit/config.yml
  View current: Run 'nexus-gcptoolkit config show'
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", help="Path to config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("version", help="Show version information")

    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Inspect nexus-gcptoolkit configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")
    config_subparsers.add_parser("show", help="Show config path and resolved settings")

    subparsers.add_parser(
        "check",
        help="Check Nexus availability",
        description="""
Connect to Nexus with the admin credentials stored in GCP Secret Manager.

Retries nexus.cli.retries times, waiting nexus.cli.retry_delay seconds
between attempts, while Nexus is unreachable.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    check_credentials_parser = subparsers.add_parser(
        "check-credentials",
        help="Check a username and password against Nexus",
        description="Prompt for a password and check whether Nexus accepts it (single attempt)"
    )
    check_credentials_parser.add_argument("username", help="Nexus username")

    parse_identifier_parser = subparsers.add_parser(
        "parse-identifier",
        help="Convert a name into a Nexus identifier",
        description="Replace spaces with underscores and lowercase, e.g. 'Artifacts Repository' -> 'artifacts_repository'"
    )
    parse_identifier_parser.add_argument("identifier", help="Name to convert")

    repositories_parser = subparsers.add_parser(
        "repositories",
        help="Show repository definitions",
        description="Print the repository definitions resolved for the node's environment"
    )
    repositories_parser.add_argument("kind", choices=["proxy", "hosted", "group"], help="Repository kind")

    return parser, config_parser


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (secret not found, Nexus unreachable, bad config, etc.)
        2 - Usage errors (invalid arguments)
    """
    parser, config_parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    # If no command provided, show help and exit with usage error code
    if not args.command:
        parser.print_help()
        sys.exit(2)

    try:
        if args.command == "version":
            cmd_version(args)
        elif args.command == "config":
            if args.config_command == "show":
                cmd_config_show(args)
            else:
                config_parser.print_help()
                sys.exit(2)
        elif args.command == "check":
            cmd_check(args)
        elif args.command == "check-credentials":
            cmd_check_credentials(args)
        elif args.command == "parse-identifier":
            cmd_parse_identifier(args)
        elif args.command == "repositories":
            cmd_repositories(args)
        else:
            parser.print_help()
            sys.exit(2)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
