import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from employee_api.database import Database  # noqa: E402
from employee_api.models import Employee  # noqa: E402
from main import _parse_args, main  # noqa: E402


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8080


def test_list_subcommand_accepts_config() -> None:
    args = _parse_args(["list", "--config", "employees.yaml"])
    assert args.command == "list"
    assert args.config == "employees.yaml"


def test_init_db_creates_database(tmp_path, monkeypatch, capsys) -> None:
    db_path = tmp_path / "cli.sqlite3"
    monkeypatch.setenv("EMPLOYEES_DB_PATH", str(db_path))

    main(["init-db", "--config", str(tmp_path / "missing.yaml")])

    assert db_path.exists()
    assert "Database initialisation complete." in capsys.readouterr().out


def test_list_prints_stored_employees(tmp_path, monkeypatch, capsys) -> None:
    db_path = tmp_path / "cli.sqlite3"
    database = Database(db_path)
    database.initialize()
    with database.transaction() as store:
        store.save(
            Employee(
                first_name="John",
                last_name="Doe",
                email="john.doe@example.com",
                department="Engineering",
                position="Software Engineer",
            )
        )
    monkeypatch.setenv("EMPLOYEES_DB_PATH", str(db_path))

    main(["list", "--config", str(tmp_path / "missing.yaml")])

    output = capsys.readouterr().out
    assert "1 employee(s) found:" in output
    assert "John Doe" in output
    assert "john.doe@example.com" in output
