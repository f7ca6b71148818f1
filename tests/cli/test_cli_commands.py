"""Tests for docrun.cli — command smoke tests via CliRunner.

The code loader is patched to hand back a recording engine, and
``os._exit`` is replaced (``hard_exit`` fixture) so failing runs surface as
exit code 1 instead of killing the test process.
"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from conftest import RecordingEngine
from docrun.cli import app
from docrun.decoder import Atom
from docrun.errors import EngineError

runner = CliRunner()


@pytest.fixture
def engine(monkeypatch) -> RecordingEngine:
    engine = RecordingEngine()
    monkeypatch.setattr("docrun.engine.CodeLoader.load", lambda self, path: engine)
    return engine


def _error_records(output: str) -> list[dict]:
    records = []
    for line in output.splitlines():
        line = line.strip()
        if line.startswith("{"):
            record = json.loads(line)
            if record.get("log.level") == "error":
                records.append(record)
    return records


# ─── Accepted call shapes ───────────────────────────────────────────────


class TestSuccessfulRuns:
    """Accepted argument counts reach the engine and exit 0."""

    def test_single_file(self, engine, hard_exit):
        result = runner.invoke(app, ["file", '"a.src"'])
        assert result.exit_code == 0
        assert engine.calls == [("file/2", ("a.src", []))]
        assert hard_exit == []

    def test_single_file_with_options(self, engine, hard_exit):
        result = runner.invoke(app, ["file", '"a.src"', '[{dir, "out"}]'])
        assert result.exit_code == 0
        assert engine.calls == [("file/2", ("a.src", [(Atom("dir"), "out")]))]

    def test_application_with_dir_and_options(self, engine, hard_exit):
        result = runner.invoke(app, ["application", "myapp", '"."', '[{vsn, "1.0"}]'])
        assert result.exit_code == 0
        assert engine.calls == [
            ("application/3", (Atom("myapp"), ".", [(Atom("vsn"), "1.0")]))
        ]

    def test_packages(self, engine, hard_exit):
        result = runner.invoke(app, ["packages", "[mypkg, 'other.pkg']"])
        assert result.exit_code == 0
        assert engine.calls == [("packages/1", ([Atom("mypkg"), Atom("other.pkg")],))]

    def test_toc(self, engine, hard_exit):
        result = runner.invoke(app, ["toc", '"doc"', '["a", "b"]'])
        assert result.exit_code == 0
        assert engine.calls == [("toc/2", ("doc", ["a", "b"]))]

    def test_negative_number_token_is_not_an_option(self, engine, hard_exit):
        result = runner.invoke(app, ["application", "myapp", "-1"])
        assert result.exit_code == 0
        assert engine.calls == [("application/2", (Atom("myapp"), -1))]

    def test_engine_return_value_is_ignored(self, monkeypatch, hard_exit):
        engine = RecordingEngine(returns={"status": "error"})
        monkeypatch.setattr("docrun.engine.CodeLoader.load", lambda self, path: engine)
        result = runner.invoke(app, ["files", '["a.src"]'])
        assert result.exit_code == 0


class TestFailingRuns:
    """Every failure path exits 1 with one diagnostic."""

    def test_too_many_files(self, engine, hard_exit):
        result = runner.invoke(app, ["files", '"a.src"', '"b.src"', '"c.src"'])
        assert result.exit_code == 1
        assert hard_exit == [1]
        assert engine.calls == []
        assert "invalid_arguments" in result.output
        assert "docrun:files" in result.output

    def test_unparseable_token(self, engine, hard_exit):
        result = runner.invoke(app, ["file", "not valid erlang"])
        assert result.exit_code == 1
        assert engine.calls == []
        assert "bad_argument" in result.output
        assert "not valid erlang" in result.output

    def test_toc_needs_two_arguments(self, engine, hard_exit):
        result = runner.invoke(app, ["toc", '"."'])
        assert result.exit_code == 1
        assert engine.calls == []
        assert "docrun:toc" in result.output

    def test_no_tokens(self, engine, hard_exit):
        result = runner.invoke(app, ["application"])
        assert result.exit_code == 1
        assert engine.calls == []

    def test_engine_error_gives_exactly_one_diagnostic(self, monkeypatch, hard_exit):
        engine = RecordingEngine(fail_with=EngineError("cannot read a.src"))
        monkeypatch.setattr("docrun.engine.CodeLoader.load", lambda self, path: engine)
        result = runner.invoke(app, ["--json-logs", "file", '"a.src"'])
        assert result.exit_code == 1
        records = _error_records(result.output)
        assert len(records) == 1
        assert records[0]["event"] == "engine_terminated_abnormally"
        assert "cannot read a.src" in records[0]["error"]
        assert records[0]["entry_point"] == "docrun:file"

    def test_abnormal_signal(self, monkeypatch, hard_exit):
        engine = RecordingEngine(fail_with=KeyboardInterrupt())
        monkeypatch.setattr("docrun.engine.CodeLoader.load", lambda self, path: engine)
        result = runner.invoke(app, ["--json-logs", "file", '"a.src"'])
        assert result.exit_code == 1
        assert [r["event"] for r in _error_records(result.output)] == ["internal_error"]

    def test_no_engine_configured(self, hard_exit):
        result = runner.invoke(app, ["file", '"a.src"'])
        assert result.exit_code == 1
        assert "engine_unavailable" in result.output


# ─── Engine selection ────────────────────────────────────────────────────


class TestEngineOption:
    def test_engine_option_loads_module(self, hard_exit):
        import stub_engine

        stub_engine.CALLS.clear()
        result = runner.invoke(app, ["--engine", "stub_engine", "toc", '"doc"', '["a"]', "[]"])
        assert result.exit_code == 0
        assert stub_engine.CALLS == [("toc", ("doc", ["a"], []))]

    def test_engine_from_environment(self, monkeypatch, hard_exit):
        import stub_engine

        stub_engine.CALLS.clear()
        monkeypatch.setenv("DOCRUN_ENGINE", "stub_engine")
        result = runner.invoke(app, ["files", '["a.src"]'])
        assert result.exit_code == 0
        assert stub_engine.CALLS == [("files", (["a.src"],))]

    def test_unloadable_engine(self, hard_exit):
        result = runner.invoke(app, ["--engine", "no_such_engine_module", "file", '"a"'])
        assert result.exit_code == 1
        assert "engine_unavailable" in result.output


class TestConfigurationErrors:
    """Bad settings end the run with status 1 and a one-line message."""

    def test_unknown_log_level_option(self, engine, hard_exit):
        result = runner.invoke(app, ["--log-level", "bogus", "file", '"a"'])
        assert result.exit_code == 1
        assert engine.calls == []
        assert "Configuration Error" in result.output
        assert "bogus" in result.output
        assert not isinstance(result.exception, AttributeError)

    def test_unknown_log_level_from_environment(self, engine, monkeypatch, hard_exit):
        monkeypatch.setenv("DOCRUN_LOG_LEVEL", "loud")
        result = runner.invoke(app, ["file", '"a"'])
        assert result.exit_code == 1
        assert engine.calls == []
        assert "Configuration Error" in result.output

    def test_log_level_is_case_insensitive(self, engine, hard_exit):
        result = runner.invoke(app, ["--log-level", "debug", "file", '"a"'])
        assert result.exit_code == 0
        assert engine.calls == [("file/2", ("a", []))]


# ─── Informational commands ──────────────────────────────────────────────


class TestInfoCommands:
    def test_entrypoints_table(self):
        result = runner.invoke(app, ["entrypoints"])
        assert result.exit_code == 0
        for name in ("file", "files", "packages", "application", "toc"):
            assert name in result.output

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "docrun" in result.output
