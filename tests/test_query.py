"""
Tests for query building and execution.
"""

import pytest

from prequery.config.types import FieldSetting, QueryConfig
from prequery.core.context import RunContext
from prequery.core.query import FALLBACK_INPUT, Query, QueryBuilder
from prequery.exceptions import (
    MissingFieldError,
    MissingOneError,
    MissingSelectorError,
    QueryDecodeError,
    QueryFailedError,
    QueryIOError,
)

FULL_DEFAULTS = QueryBuilder().with_default_selector("<default>").with_default_field("value").with_default_one(False)


class TestQueryBuilder:
    """Tests for merging user config over kind defaults."""

    def test_defaults_apply_when_unset(self):
        query = FULL_DEFAULTS.build(QueryConfig())
        assert query == Query(selector="<default>", field="value", one=False, inputs={})

    def test_user_values_win(self):
        config = QueryConfig(selector="<mine>", field=FieldSetting.named("other"), one=True)
        query = FULL_DEFAULTS.build(config)
        assert query.selector == "<mine>"
        assert query.field == "other"
        assert query.one is True

    def test_user_can_disable_field(self):
        query = FULL_DEFAULTS.build(QueryConfig(field=FieldSetting.disabled()))
        assert query.field is None

    def test_default_can_disable_field(self):
        builder = QueryBuilder().with_default_selector("<x>").with_default_field(None).with_default_one(False)
        assert builder.build(QueryConfig()).field is None

    def test_user_false_wins_over_default_true(self):
        builder = FULL_DEFAULTS.with_default_one(True)
        assert builder.build(QueryConfig(one=False)).one is False

    def test_inputs_copied(self):
        inputs = {"a": "1"}
        query = FULL_DEFAULTS.build(QueryConfig(inputs=inputs))
        assert query.inputs == inputs
        assert query.inputs is not inputs

    def test_missing_selector(self):
        builder = QueryBuilder().with_default_field("value").with_default_one(False)
        with pytest.raises(MissingSelectorError):
            builder.build(QueryConfig())

    def test_missing_field(self):
        builder = QueryBuilder().with_default_selector("<x>").with_default_one(False)
        with pytest.raises(MissingFieldError):
            builder.build(QueryConfig())

    def test_missing_one(self):
        builder = QueryBuilder().with_default_selector("<x>").with_default_field("value")
        with pytest.raises(MissingOneError):
            builder.build(QueryConfig())

    def test_user_config_fills_missing_defaults(self):
        config = QueryConfig(selector="<x>", field=FieldSetting.named("value"), one=False)
        assert QueryBuilder().build(config).selector == "<x>"

    def test_with_default_returns_new_builder(self):
        base = QueryBuilder()
        base.with_default_selector("<x>")
        assert base.selector is None

    def test_builder_shortcut(self):
        assert Query.builder() == QueryBuilder()


class TestCommand:
    """Tests for the `typst query` command line."""

    def test_minimal(self, tmp_path):
        context = RunContext(input=tmp_path / "main.typ")
        query = Query(selector="<x>", field=None, one=False)
        assert query.command(context) == [
            "typst",
            "query",
            "--input",
            "prequery-fallback=true",
            str(tmp_path / "main.typ"),
            "<x>",
        ]

    def test_full(self, tmp_path):
        context = RunContext(input=tmp_path / "main.typ", root=tmp_path, typst="/opt/typst")
        query = Query(selector="<x>", field="value", one=True, inputs={"a": "1", "b": "2"})
        assert query.command(context) == [
            "/opt/typst",
            "query",
            "--root",
            str(tmp_path),
            "--field",
            "value",
            "--one",
            "--input",
            "a=1",
            "--input",
            "b=2",
            "--input",
            "prequery-fallback=true",
            str(tmp_path / "main.typ"),
            "<x>",
        ]

    def test_no_root_without_explicit_root(self, tmp_path):
        context = RunContext(input=tmp_path / "main.typ")
        assert "--root" not in Query(selector="<x>", field=None, one=False).command(context)

    @pytest.mark.parametrize("value", ["true", "false"])
    def test_fallback_input_cannot_be_overridden(self, tmp_path, value):
        context = RunContext(input=tmp_path / "main.typ")
        query = Query(selector="<x>", field=None, one=False, inputs={FALLBACK_INPUT: value, "a": "1"})
        cmd = query.command(context)
        inputs = [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "--input"]
        assert inputs == ["a=1", "prequery-fallback=true"]


class TestExecute:
    """Tests for running the query against a fake typst binary."""

    @pytest.mark.asyncio
    async def test_returns_parsed_json(self, context, fake_typst):
        fake_typst.set_result([{"url": "https://x/a.png", "path": "assets/a.png"}])
        query = Query(selector="<web-resource>", field="value", one=False, inputs={"lang": "en"})
        result = await query.execute(context)
        assert result == [{"url": "https://x/a.png", "path": "assets/a.png"}]
        assert fake_typst.argv == query.command(context)[1:]

    @pytest.mark.asyncio
    async def test_decode_applied(self, context, fake_typst):
        fake_typst.set_result([1, 2, 3])
        query = Query(selector="<x>", field=None, one=False)
        assert await query.execute(context, decode=sum) == 6

    @pytest.mark.asyncio
    async def test_stderr_passes_through(self, context, fake_typst, capfd):
        fake_typst.set_result(["ok"])
        query = Query(selector="<x>", field=None, one=False)
        result = await query.execute(context)
        assert result == ["ok"]
        captured = capfd.readouterr()
        assert "fake typst: querying" in captured.err
        assert "fake typst" not in captured.out

    @pytest.mark.asyncio
    async def test_non_zero_exit(self, context, fake_typst):
        fake_typst.set_exit_code(1)
        query = Query(selector="<x>", field=None, one=False)
        with pytest.raises(QueryFailedError) as exc_info:
            await query.execute(context)
        assert exc_info.value.status == 1
        assert exc_info.value.command == query.command(context)

    @pytest.mark.asyncio
    async def test_invalid_json(self, context, fake_typst):
        fake_typst.set_raw_output("error: not json")
        query = Query(selector="<x>", field=None, one=False)
        with pytest.raises(QueryDecodeError):
            await query.execute(context)

    @pytest.mark.asyncio
    async def test_decode_failure(self, context, fake_typst):
        fake_typst.set_result({"not": "a list"})

        def decode(value):
            if not isinstance(value, list):
                raise TypeError("expected a list")
            return value

        query = Query(selector="<x>", field=None, one=False)
        with pytest.raises(QueryDecodeError, match="expected a list"):
            await query.execute(context, decode=decode)

    @pytest.mark.asyncio
    async def test_missing_binary(self, tmp_path):
        context = RunContext(input=tmp_path / "main.typ", typst=str(tmp_path / "no-such-typst"))
        query = Query(selector="<x>", field=None, one=False)
        with pytest.raises(QueryIOError):
            await query.execute(context)
