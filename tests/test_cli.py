"""Tests for the command-line interface against a temporary SQLite file."""

import pytest

from shiftplan.cli import main


@pytest.fixture
def db_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    assert main(["--db", url, "init-db"]) == 0

    profiles = tmp_path / "profiles.csv"
    profiles.write_text("id,full_name,email,role\nadmin-1,Ana Admin,,admin\nu-1,Bogdan Pop,,member\n")
    templates = tmp_path / "templates.csv"
    templates.write_text("name,start_time,end_time\nDay,09:00,17:00\n")
    assert main(["--db", url, "import-csv", "--profiles", str(profiles), "--templates", str(templates)]) == 0
    return url


@pytest.mark.integration
def test_assign_and_show_week(db_url, capsys):
    assert main(["--db", db_url, "assign", "--as", "admin-1", "--user", "u-1", "--date", "2025-11-24", "--template", "1"]) == 0
    assert main(["--db", db_url, "week", "--week-id", "2025-W48"]) == 0

    out = capsys.readouterr().out
    assert "u-1 on 2025-11-24: 09:00-17:00" in out
    assert "Week 2025-W48" in out
    assert "Bogdan Pop" in out


@pytest.mark.integration
def test_member_cannot_assign(db_url, capsys):
    code = main(["--db", db_url, "assign", "--as", "u-1", "--user", "u-1", "--date", "2025-11-24", "--template", "1"])
    assert code == 1
    assert "Only admins can assign shifts" in capsys.readouterr().out


@pytest.mark.integration
def test_availability_command(db_url, capsys):
    assert main(["--db", db_url, "availability", "--user", "u-1", "--date", "2025-11-24"]) == 0
    assert "User has no scheduled shift for this date" in capsys.readouterr().out


@pytest.mark.integration
def test_export_command(db_url, tmp_path):
    main(["--db", db_url, "bulk-assign", "--as", "admin-1", "--users", "u-1", "--dates", "2025-11-24,2025-11-25", "--template", "1"])
    out = tmp_path / "a.csv"
    assert main(["--db", db_url, "export", "--week-id", "2025-W48", "--assignments", str(out)]) == 0
    assert len(out.read_text().strip().splitlines()) == 3


@pytest.mark.integration
def test_reimporting_profiles_reports_error(db_url, tmp_path, capsys):
    profiles = tmp_path / "again.csv"
    profiles.write_text("id,full_name\nu-1,Bogdan Pop\n")

    assert main(["--db", db_url, "import-csv", "--profiles", str(profiles)]) == 1
    assert "[ERROR] Could not import profiles" in capsys.readouterr().out
