"""Tests for the command line entry point and logging setup."""

import json
import logging
import sys
from logging import StreamHandler, getLogger

import pytest

from stackblame import _logging, cli
from stackblame.args_settings import Args, SettingsFile
from stackblame.messages import EMPTY_INPUT_MSG, NO_REPOSITORY_MSG


@pytest.fixture
def settings_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(
        SettingsFile, "SETTINGS_LOCATION_PATH", tmp_path / "stackblame-location.json"
    )
    monkeypatch.setattr(
        SettingsFile, "INITIAL_SETTINGS_PATH", tmp_path / "stackblame.json"
    )
    return tmp_path


@pytest.fixture
def root_handlers():
    """Restore the handlers of the root logger after the test."""
    root_logger = getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    root_logger.handlers = handlers
    root_logger.setLevel(level)


def run_main(monkeypatch, *argv: str) -> None:
    monkeypatch.setattr(sys, "argv", ["stackblame", *argv])
    cli.main()


class TestMain:
    """Test the settings commands of main()."""

    def test_save(self, settings_dir, monkeypatch, root_handlers, capsys):
        run_main(monkeypatch, "--save", "--revision", "main", "--no-full-path")

        data = json.loads((settings_dir / "stackblame.json").read_text("utf-8"))
        assert data["revision"] == "main"
        assert data["full_path"] is False
        assert "Settings saved to" in capsys.readouterr().out

    def test_save_as_requires_json(self, settings_dir, monkeypatch, root_handlers):
        run_main(monkeypatch, "--save-as", str(settings_dir / "settings.txt"))
        assert not (settings_dir / "settings.txt").exists()

    def test_save_as_then_load(self, settings_dir, monkeypatch, root_handlers):
        other = settings_dir / "other.json"
        run_main(monkeypatch, "--save-as", str(other), "--highlight-color", "red")
        run_main(monkeypatch, "--reset")
        assert SettingsFile.get_location() == settings_dir / "stackblame.json"

        run_main(monkeypatch, "--load", str(other))

        assert SettingsFile.get_location() == other
        settings, error = SettingsFile.load()
        assert error == ""
        assert settings.highlight_color == "red"

    def test_show(self, settings_dir, monkeypatch, root_handlers, capsys):
        run_main(monkeypatch, "--save", "--revision", "v1.2")
        run_main(monkeypatch, "--show")
        out = capsys.readouterr().out
        assert "Settings file location" in out
        assert "v1.2" in out


class TestRun:
    """Test the checks done before the UI starts."""

    def test_no_repository(self, monkeypatch, caplog):
        monkeypatch.setattr(cli, "get_git_toplevel", lambda: "")
        cli.run(Args(), "dump.txt", StreamHandler())
        assert NO_REPOSITORY_MSG in caplog.text

    def test_bad_template(self, tmp_path, caplog):
        cli.run(Args(repository=str(tmp_path), file_url="{url}"), "-", StreamHandler())
        assert "Unknown field {url}" in caplog.text

    def test_empty_input(self, tmp_path, caplog):
        dump_file = tmp_path / "dump.txt"
        dump_file.write_text("\n\n", encoding="utf-8")
        cli.run(Args(repository=str(tmp_path)), str(dump_file), StreamHandler())
        assert EMPTY_INPUT_MSG in caplog.text

    def test_missing_input(self, tmp_path, caplog):
        missing = tmp_path / "missing.txt"
        cli.run(Args(repository=str(tmp_path)), str(missing), StreamHandler())
        assert f"Cannot read {missing}" in caplog.text


class TestLogging:
    def test_verbosity_levels(self, root_handlers):
        for verbosity, level in [
            (0, logging.WARNING),
            (1, logging.INFO),
            (2, logging.DEBUG),
            (None, logging.WARNING),
        ]:
            _logging.set_logging_level_from_verbosity(verbosity)
            assert getLogger().level == level

    def test_unknown_verbosity(self, root_handlers):
        with pytest.raises(ValueError):
            _logging.set_logging_level_from_verbosity(3)

    def test_info_format_is_short(self):
        formatter = _logging.get_custom_cli_color_formatter()
        info = logging.LogRecord("x", logging.INFO, "", 1, "hello", None, None)
        error = logging.LogRecord("x", logging.ERROR, "", 1, "broken", None, None)
        assert "INFO" not in formatter.format(info)
        assert "hello" in formatter.format(info)
        assert "ERROR x" in formatter.format(error)

    def test_tui_handler(self, root_handlers):
        class FakeApp:
            def __init__(self) -> None:
                self.posted: list[str] = []

            def post_status(self, content: str) -> None:
                self.posted.append(content)

        app = FakeApp()
        getLogger().setLevel(logging.INFO)
        handler = _logging.add_tui_handler(app)  # type: ignore
        logger = getLogger("stackblame.test")
        logger.info("not shown")
        logger.warning("disk almost full")
        _logging.remove_handler(handler)
        logger.warning("after removal")

        assert app.posted == ["WARNING: disk almost full"]
