"""
MockVault CLI

Command-line interface for the MockVault mock server.

Commands:
    serve       - Start the mock HTTP server
    validate    - Validate a project definitions file

Examples:
    # Start mock server
    mockvault serve projects.yaml --port 8080

    # Keep at most 200 events per operation
    mockvault serve projects.yaml --max-events 200 --event-scope operation

    # Check a definitions file
    mockvault validate projects.yaml
"""

import argparse
import logging
import sys
from typing import List, Optional

import yaml

from .config import MockConfig
from .errors import InvalidConfiguration
from .project.loader import ProjectLoader
from .project.model import OperationStatus
from .project.service import ProjectService


def configure_logging(log_level: str):
    """Route MockVault loggers to stderr at the given level."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    )


def build_config(args) -> MockConfig:
    """
    Build the server config: YAML file first, then CLI overrides.

    Raises:
        InvalidConfiguration: If a resulting setting is invalid
    """
    data = MockConfig.from_yaml(args.config).to_dict() if args.config else {}

    overrides = {
        'host': args.host,
        'port': args.port,
        'max_event_count': args.max_events,
        'event_scope': args.event_scope,
        'log_level': args.log_level,
    }
    data.update({key: value for key, value in overrides.items() if value is not None})
    if args.no_admin:
        data['admin_enabled'] = False
    data['projects_file'] = args.projects_file
    return MockConfig.from_dict(data)


def cmd_serve(args):
    """
    Start mock HTTP server serving the project definitions.

    Args:
        args: Parsed command-line arguments
    """
    # Imported here so 'validate' works without the server stack loaded
    from .mock.server import MockServer

    print("MockVault Mock Server")

    try:
        config = build_config(args)
    except (InvalidConfiguration, FileNotFoundError, yaml.YAMLError) as e:
        print(f"Invalid configuration: {e}")
        sys.exit(1)

    configure_logging(config.log_level)

    try:
        server = MockServer(config=config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Failed to create mock server: {e}")
        sys.exit(1)

    try:
        server.start()
    except KeyboardInterrupt:
        print("\n\nMock server stopped")


def cmd_validate(args):
    """
    Load a definitions file and print operation status counts per project.

    Args:
        args: Parsed command-line arguments
    """
    print("MockVault Project Validation")
    print(f"   Project file: {args.projects_file}")

    try:
        projects = ProjectLoader(args.projects_file).load()
    except (FileNotFoundError, ValueError, KeyError, yaml.YAMLError) as e:
        print(f"Failed to load projects: {e}")
        sys.exit(1)

    errors = []
    names = set()
    for project in projects:
        if not project.name:
            errors.append(f"Project {project.id} has no name")
        elif project.name.lower() in names:
            errors.append(f"Duplicate project name {project.name}")
        names.add(project.name.lower())

        counts = ProjectService.operation_status_count(project.operations)
        summary = ', '.join(f"{status.value}: {count}" for status, count in counts.items() if count)
        print(f"\n   {project.name} ({project.protocol.value}) - {len(project.operations)} operations")
        if summary:
            print(f"      {summary}")

        for operation in project.operations:
            if operation.status == OperationStatus.FORWARDED and not operation.forwarded_endpoint:
                errors.append(f"Operation {operation.name or operation.id} is forwarded but has no forwarded_endpoint")
            if operation.status == OperationStatus.MOCKED and not any(r.enabled for r in operation.mock_responses):
                errors.append(f"Operation {operation.name or operation.id} is mocked but has no enabled mock response")

    print()
    if errors:
        for error in errors:
            print(f"   Error: {error}")
        sys.exit(1)
    print(f"   {len(projects)} projects OK")


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='mockvault',
        description="MockVault - Mock server for REST and SOAP projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start mock server
  %(prog)s serve projects.yaml --port 8080

  # Bound event history per operation
  %(prog)s serve projects.yaml --max-events 200 --event-scope operation

  # Validate project definitions
  %(prog)s validate projects.yaml
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # --- SERVE command ---
    serve_parser = subparsers.add_parser('serve', help='Start mock HTTP server')
    serve_parser.add_argument('projects_file', help='YAML or JSON project definitions file')
    serve_parser.add_argument('-c', '--config', help='YAML configuration file')
    serve_parser.add_argument('--host', help='Host to bind (default: 127.0.0.1)')
    serve_parser.add_argument('-p', '--port', type=int, help='Port to bind (default: 8080)')
    serve_parser.add_argument('--max-events', type=int, help='Maximum retained events per scope (default: 1000)')
    serve_parser.add_argument('--event-scope', choices=['global', 'operation'],
                              help='Apply the event bound globally or per operation (default: global)')
    serve_parser.add_argument('--no-admin', action='store_true', help='Disable admin API')
    serve_parser.add_argument('--log-level', choices=['debug', 'info', 'warning', 'error'],
                              help='Log level (default: info)')

    # --- VALIDATE command ---
    validate_parser = subparsers.add_parser('validate', help='Validate project definitions')
    validate_parser.add_argument('projects_file', help='YAML or JSON project definitions file')

    args = parser.parse_args(argv)

    if args.command == 'serve':
        cmd_serve(args)
    elif args.command == 'validate':
        cmd_validate(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == '__main__':
    main()
