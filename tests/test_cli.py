from flight_scheduler import db
from flight_scheduler.cli import main


def test_generates_into_database(tmp_path, capsys):
    path = tmp_path / "cli.db"
    code = main(["--days", "2", "--flights-per-day", "2", "--seed", "3", "--db-path", str(path)])
    assert code == 0
    assert db.count_scheduled_flights(path) == 4
    assert "generated=4" in capsys.readouterr().out


def test_base_date_option(tmp_path):
    path = tmp_path / "cli.db"
    main(["--days", "1", "--flights-per-day", "1", "--seed", "3", "--db-path", str(path), "--base-date", "2026-01-15"])
    rows = db.search_scheduled_flights(db_path=path)
    assert rows[0]["flight_date"] == "2026-01-15"


def test_zero_width_window(tmp_path, capsys):
    path = tmp_path / "cli.db"
    code = main(["--window-start", "08:00", "--window-end", "08:00", "--db-path", str(path)])
    assert code == 2
    assert "Configuration error" in capsys.readouterr().err
    assert not path.exists()
