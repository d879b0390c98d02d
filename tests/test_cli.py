"""
Tests for CLI commands.

Uses typer's CliRunner with a fake typst binary and mocked HTTP.
"""

from aioresponses import aioresponses
from typer.testing import CliRunner

from prequery.cli.main import app

runner = CliRunner()

URL = "https://x/a.png"


def write_jobs(project, jobs: str) -> None:
    (project / "typst.toml").write_text('[package]\nname = "demo"\n\n' + jobs)


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "prequery version" in result.output


class TestHelp:
    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "prequery" in result.output.lower()

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert result.exit_code == 0
        assert "run" in result.output

    def test_run_help(self):
        result = runner.invoke(app, ["run", "--help"])
        assert result.exit_code == 0

    def test_check_help(self):
        result = runner.invoke(app, ["check", "--help"])
        assert result.exit_code == 0


class TestRun:
    def test_downloads_then_skips(self, project, fake_typst):
        fake_typst.set_result([{"url": URL, "path": "assets/a.png"}])
        args = ["run", str(project / "main.typ"), "--typst", str(fake_typst.path)]

        with aioresponses() as m:
            m.get(URL, body=b"png")
            result = runner.invoke(app, args)
        assert result.exit_code == 0, result.output
        assert (project / "assets" / "a.png").read_bytes() == b"png"

        with aioresponses():
            result = runner.invoke(app, args)
        assert result.exit_code == 0, result.output

    def test_failed_job_exits_non_zero(self, project, fake_typst):
        fake_typst.set_result([{"url": URL, "path": "../outside.png"}])
        result = runner.invoke(app, ["run", str(project / "main.typ"), "--typst", str(fake_typst.path)])
        assert result.exit_code == 1
        assert "at least one job failed" in result.output

    def test_unknown_kind_runs_nothing(self, project, fake_typst):
        write_jobs(
            project,
            '[[tool.prequery.jobs]]\nname = "good"\nkind = "web-resource"\nquery = {}\n\n'
            '[[tool.prequery.jobs]]\nname = "broken"\nkind = "bogus"\nquery = {}\n',
        )
        result = runner.invoke(app, ["run", str(project / "main.typ"), "--typst", str(fake_typst.path)])
        assert result.exit_code == 1
        assert "bogus" in result.output
        # The valid job never queried the document
        assert not (fake_typst.directory / "argv.json").exists()

    def test_missing_manifest(self, tmp_path, fake_typst):
        (tmp_path / "main.typ").write_text("")
        result = runner.invoke(app, ["run", str(tmp_path / "main.typ"), "--typst", str(fake_typst.path)])
        assert result.exit_code == 1
        assert "typst.toml not found" in result.output

    def test_query_failure_exits_non_zero(self, project, fake_typst):
        fake_typst.set_exit_code(2)
        result = runner.invoke(app, ["run", str(project / "main.typ"), "--typst", str(fake_typst.path)])
        assert result.exit_code == 1

    def test_log_file(self, project, fake_typst, tmp_path):
        log_file = tmp_path / "logs" / "prequery.log"
        result = runner.invoke(
            app,
            ["run", str(project / "main.typ"), "--typst", str(fake_typst.path), "--log-file", str(log_file)],
        )
        assert result.exit_code == 0, result.output
        assert "[download] beginning job..." in log_file.read_text()


class TestCheck:
    def test_lists_jobs(self, project):
        result = runner.invoke(app, ["check", str(project / "main.typ")])
        assert result.exit_code == 0, result.output
        assert "download" in result.output
        assert "web-resource" in result.output
        assert "1 job(s) configured" in result.output

    def test_reports_configuration_errors(self, project):
        write_jobs(project, '[[tool.prequery.jobs]]\nname = "single"\nkind = "web-resource"\nquery = { one = true }\n')
        result = runner.invoke(app, ["check", str(project / "main.typ")])
        assert result.exit_code == 1
        assert "does not support --one" in result.output
