"""Tests for CLI commands."""

from pathlib import Path

import yaml
from typer.testing import CliRunner

from cronograma.cli import app

runner = CliRunner()

EXAMPLES = Path(__file__).parent.parent / "examples"
SCHEDULE = str(EXAMPLES / "schedule.yaml")

CYCLE_YAML = """
tasks:
  a:
    name: A
    start: 2025-01-06T08:00:00
    end: 2025-01-06T17:00:00
  b:
    name: B
    start: 2025-01-07T08:00:00
    end: 2025-01-07T17:00:00
dependencies:
  - {origin: a, dependent: b}
  - {origin: b, dependent: a}
"""


class TestResolveCommand:
    """Test the resolve CLI command."""

    def test_resolve_example(self) -> None:
        result = runner.invoke(app, ["resolve", SCHEDULE])

        assert result.exit_code == 0
        assert "Status: resolved" in result.stdout
        assert "Tarea Planos unifilares ajustada por dependencia finish_to_start" in result.stdout
        assert "Tarea Memoria de cálculo ajustada por dependencia start_to_start" in result.stdout
        assert "Hito identificado: Revisión interna" in result.stdout
        assert "Hito identificado: Aprobación del cliente" in result.stdout
        assert "Fase Ingeniería: fin ajustado a 2025-01-10T14:00:00" in result.stdout

    def test_resolve_writes_output(self, tmp_path: Path) -> None:
        output_file = tmp_path / "corrected.yaml"

        result = runner.invoke(app, ["resolve", SCHEDULE, "-o", str(output_file)])

        assert result.exit_code == 0
        assert f"Corrected schedule written to {output_file}" in result.stdout
        data = yaml.safe_load(output_file.read_text(encoding="utf-8"))
        assert data["tasks"]["planos"]["start"] == "2025-01-07T17:00:00"
        assert data["tasks"]["aprobacion"]["start"] == "2025-01-10T14:00:00"
        assert data["tasks"]["aprobacion"]["milestone"] is True
        assert data["containers"]["fase-ing"]["end"] == "2025-01-10T14:00:00"

    def test_resolve_iteration_limit(self) -> None:
        """One sweep moves every task, so the fixpoint is never confirmed."""
        result = runner.invoke(app, ["resolve", SCHEDULE, "--max-iterations", "1"])

        assert result.exit_code == 0
        assert "Status: fixpoint_not_reached" in result.stdout
        assert "possible residual inconsistency" in result.output

    def test_resolve_reports_cycles(self, tmp_path: Path) -> None:
        snapshot_file = tmp_path / "cycle.yaml"
        snapshot_file.write_text(CYCLE_YAML, encoding="utf-8")

        result = runner.invoke(app, ["resolve", str(snapshot_file)])

        assert result.exit_code == 0
        assert "A -> B -> A" in result.output
        assert "Dependency ignored: cycle detected" in result.output

    def test_resolve_invalid_calendar(self, tmp_path: Path) -> None:
        snapshot_file = tmp_path / "bad_calendar.yaml"
        snapshot_file.write_text(
            "calendar:\n  working_days: []\n" + CYCLE_YAML, encoding="utf-8"
        )

        result = runner.invoke(app, ["resolve", str(snapshot_file)])

        assert result.exit_code == 1
        assert "Status: failed" in result.stdout
        assert "Error: Calendar has no working days" in result.output

    def test_resolve_nonexistent_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["resolve", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_resolve_verbose_logs_changes(self) -> None:
        result = runner.invoke(app, ["-v", "1", "resolve", SCHEDULE])

        assert result.exit_code == 0
        assert "Resolution finished: 4 correction(s)" in result.output


class TestCyclesCommand:
    """Test the cycles CLI command."""

    def test_no_cycles(self) -> None:
        result = runner.invoke(app, ["cycles", SCHEDULE])

        assert result.exit_code == 0
        assert "No dependency cycles found" in result.stdout

    def test_cycle_listed(self, tmp_path: Path) -> None:
        snapshot_file = tmp_path / "cycle.yaml"
        snapshot_file.write_text(CYCLE_YAML, encoding="utf-8")

        result = runner.invoke(app, ["cycles", str(snapshot_file)])

        assert result.exit_code == 0
        assert "Found 1 dependency cycle(s):" in result.stdout
        assert "  - A -> B -> A" in result.stdout


class TestCalendarCommand:
    """Test the calendar add CLI command."""

    def test_add_across_weekend(self) -> None:
        result = runner.invoke(app, ["calendar", "add", "2025-01-10T16:00", "120"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "2025-01-13T09:00:00"

    def test_add_negative_minutes(self) -> None:
        result = runner.invoke(app, ["calendar", "add", "--", "2025-01-07T09:00", "-120"])

        assert result.exit_code == 0
        assert result.stdout.strip() == "2025-01-06T16:00:00"

    def test_add_with_config(self, tmp_path: Path) -> None:
        """A config that makes Saturday a working day changes the result."""
        config_file = tmp_path / "cronograma_config.yaml"
        config_file.write_text(
            "calendar:\n  working_days: [monday, tuesday, wednesday, thursday, friday, saturday]\n",
            encoding="utf-8",
        )

        result = runner.invoke(
            app, ["-c", str(config_file), "calendar", "add", "2025-01-10T16:00", "120"]
        )

        assert result.exit_code == 0
        assert result.stdout.strip() == "2025-01-11T09:00:00"

    def test_add_invalid_datetime(self) -> None:
        result = runner.invoke(app, ["calendar", "add", "next friday", "60"])

        assert result.exit_code == 1
        assert "Invalid datetime" in result.output

    def test_missing_config_file(self, tmp_path: Path) -> None:
        result = runner.invoke(
            app,
            ["-c", str(tmp_path / "nope.yaml"), "calendar", "add", "2025-01-10T16:00", "60"],
        )

        assert result.exit_code == 1
        assert "Config file not found" in result.output
