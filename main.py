"""Command-line interface for the employee records service."""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from employee_api.config import Settings, load_settings
from employee_api.database import Database

logger = logging.getLogger("employees.main")

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default=None,
        help="Path to a YAML configuration file (default: EMPLOYEES_CONFIG or config/employees.yaml)",
    )

    parser = argparse.ArgumentParser(description="Employee records service utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve", config=None)

    subparsers.add_parser("init-db", parents=[common], help="Initialise the employee database")
    subparsers.add_parser("list", parents=[common], help="Print all stored employees")

    serve_parser = subparsers.add_parser(
        "serve", parents=[common], help="Start the HTTP employee service"
    )
    serve_parser.add_argument("--host", default=None, help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the HTTP API (default: 8080)",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "init-db", "list"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _initialise_database(settings: Settings) -> Database:
    database = Database(settings.database_path, busy_timeout=settings.busy_timeout)
    database.initialize()
    logger.info("Database initialised at %s", settings.database_path)
    return database


def _serve(*, database: Database, settings: Settings, host: str, port: int) -> None:
    from employee_api.api import create_app
    import uvicorn

    logger.info("Starting employee API on http://%s:%s", host, port)

    app = create_app(database=database, settings=settings)
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )


def _list_employees(database: Database) -> None:
    with database.transaction(read_only=True) as store:
        employees = store.find_all()

    if not employees:
        print("No employees are currently stored.")
        return

    print(f"{len(employees)} employee(s) found:")
    print(f"{'ID':>4}  {'Name':<28}  {'Email':<32}  {'Department':<16}  Position")
    print("-" * 100)
    for employee in employees:
        name = f"{employee.first_name} {employee.last_name}"
        print(
            f"{employee.id:>4}  {name:<28}  {employee.email:<32}  "
            f"{employee.department:<16}  {employee.position}"
        )


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    args = _parse_args(argv)
    config_path = Path(args.config).expanduser() if args.config else None
    try:
        settings = load_settings(config_path)
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc

    logging.basicConfig(level=settings.numeric_log_level, format=_LOG_FORMAT)

    database = _initialise_database(settings)

    if args.command == "serve":
        _serve(
            database=database,
            settings=settings,
            host=args.host or settings.host,
            port=args.port or settings.port,
        )
    elif args.command == "list":
        _list_employees(database)
    elif args.command == "init-db":
        print("Database initialisation complete.")


if __name__ == "__main__":
    main()
