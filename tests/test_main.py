"""Tests for the command-line entry points."""

import runpy

import imghost.main


class TestEntryPoints:
    def test_module_execution_calls_run(self, monkeypatch):
        calls = []
        monkeypatch.setattr(imghost.main, "run", lambda: calls.append("run"))

        runpy.run_module("imghost", run_name="__main__")

        assert calls == ["run"]

    def test_main_module_imports_without_starting_server(self, monkeypatch):
        calls = []
        monkeypatch.setattr(imghost.main, "run", lambda: calls.append("run"))

        runpy.run_module("imghost.__main__", run_name="imghost.__main__")

        assert calls == []
