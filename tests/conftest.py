"""
Shared fixtures: a throwaway Typst project and a fake `typst` executable.
"""

import json
import stat
import sys
from pathlib import Path

import pytest

from prequery.core.context import RunContext

FAKE_TYPST = """#!{python}
import json
import pathlib
import sys

here = pathlib.Path(__file__).parent
(here / "argv.json").write_text(json.dumps(sys.argv[1:]))
sys.stderr.write("fake typst: querying\\n")
sys.stdout.write((here / "result.json").read_text())
sys.exit(int((here / "exit_code").read_text()))
"""


class FakeTypst:
    """A stand-in for the typst binary that prints a canned query result."""

    def __init__(self, directory: Path) -> None:
        directory.mkdir(parents=True, exist_ok=True)
        self.directory = directory
        self.path = directory / "typst"
        self.path.write_text(FAKE_TYPST.format(python=sys.executable))
        self.path.chmod(self.path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        self.set_result([])
        self.set_exit_code(0)

    def set_result(self, value) -> None:
        self.set_raw_output(json.dumps(value))

    def set_raw_output(self, text: str) -> None:
        (self.directory / "result.json").write_text(text)

    def set_exit_code(self, code: int) -> None:
        (self.directory / "exit_code").write_text(str(code))

    @property
    def argv(self) -> list[str]:
        return json.loads((self.directory / "argv.json").read_text())


@pytest.fixture
def fake_typst(tmp_path) -> FakeTypst:
    return FakeTypst(tmp_path / "bin")


@pytest.fixture
def project(tmp_path) -> Path:
    """Project root containing main.typ and a typst.toml with one web-resource job."""
    root = tmp_path / "project"
    root.mkdir()
    (root / "main.typ").write_text("#metadata((url: \"https://x/a.png\", path: \"assets/a.png\")) <web-resource>\n")
    (root / "typst.toml").write_text(
        '[package]\nname = "demo"\nversion = "0.1.0"\nentrypoint = "main.typ"\n\n'
        "[[tool.prequery.jobs]]\n"
        'name = "download"\n'
        'kind = "web-resource"\n'
        "query = {}\n"
    )
    return root


@pytest.fixture
def context(project, fake_typst) -> RunContext:
    return RunContext(input=project / "main.typ", typst=str(fake_typst.path))
