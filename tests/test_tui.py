"""Tests for the terminal UI, run headless."""

import asyncio
from datetime import datetime

import pytest
from conftest import make_commit

from stackblame import tui
from stackblame.args_settings import Args
from stackblame.dump import Dump
from stackblame.messages import MESSAGE_COPIED_MSG, NO_COMMIT_MSG, NO_FILE_MSG
from stackblame.stack_dump import DumpParseError, parse_and_bucketize
from stackblame.trace_format import Format, FrameKind
from stackblame.tui import StackBlameApp

COMMIT_ID = "a" * 40
FIRST_CALL = 4  # after two skipped lines, a separator and a header


@pytest.fixture
def dump(faulthandler_dump):
    parsed = parse_and_bucketize(faulthandler_dump)
    dump = Dump("HEAD", parsed.buckets, skipped=parsed.skipped)
    dump.commits.add(
        dump.source_key(parsed.buckets[0].stack.calls[0]),
        make_commit(COMMIT_ID, datetime(2020, 1, 2), message="Add crash"),
    )
    return dump


def run_app(app: StackBlameApp, keys: list[str]) -> None:
    async def run() -> None:
        async with app.run_test(size=(120, 30)) as pilot:
            await app.workers.wait_for_complete()
            await pilot.pause()
            for key in keys:
                await pilot.press(key)
            await pilot.pause()

    asyncio.run(run())


class TestStackBlameApp:
    """Test rendering and key handling of the UI."""

    def test_render_dump(self, dump):
        app = StackBlameApp(Format(Args()), lambda: dump, "blue")
        run_app(app, [])

        assert app.dump is dump
        assert app.trace[FIRST_CALL].kind == FrameKind.CALL
        assert app.viewport.current_item == FIRST_CALL
        assert app.viewport.selected().commit_id == COMMIT_ID
        assert app.viewport.height > 0

    def test_move_selection(self, dump):
        app = StackBlameApp(Format(Args()), lambda: dump, "blue")
        run_app(app, ["j", "down", "j", "k"])
        assert app.viewport.current_item == FIRST_CALL + 2

    def test_move_to_top(self, dump):
        app = StackBlameApp(Format(Args()), lambda: dump, "blue")
        run_app(app, ["k"] * 10)
        assert app.viewport.current_item == 0
        assert app.viewport.scroll == 0

    def test_copy_message(self, dump):
        app = StackBlameApp(Format(Args()), lambda: dump, "blue")
        run_app(app, ["m"])
        assert app.message_box.left_text() == MESSAGE_COPIED_MSG

    def test_copy_message_without_commit(self, dump):
        app = StackBlameApp(Format(Args()), lambda: dump, "blue")
        run_app(app, ["j", "m"])
        assert app.message_box.left_text() == NO_COMMIT_MSG

    def test_usage_shown(self, dump):
        app = StackBlameApp(Format(Args()), lambda: dump, "blue")
        run_app(app, [])
        assert "[q]uit" in app.message_box.right_text()

    def test_open_urls(self, dump, monkeypatch):
        opened: list[str] = []
        monkeypatch.setattr(tui, "open_url", opened.append)
        fmt = Format(
            Args(
                commit_url="https://git/commit/{commit_id}",
                file_url="https://git/blob/{head}{file}#L{line}",
            )
        )
        app = StackBlameApp(fmt, lambda: dump, "blue")
        run_app(app, ["c", "f", "b"])

        assert opened == [
            f"https://git/commit/{COMMIT_ID}",
            "https://git/blob/HEAD/srv/app/main.py#L30",
        ]

    def test_commit_url_needs_commit(self, dump, monkeypatch):
        opened: list[str] = []
        monkeypatch.setattr(tui, "open_url", opened.append)
        fmt = Format(Args(commit_url="https://git/commit/{commit_id}"))
        app = StackBlameApp(fmt, lambda: dump, "blue")
        run_app(app, ["j", "c"])

        assert opened == []
        assert app.message_box.left_text() == NO_COMMIT_MSG

    def test_file_url_needs_file(self, dump, monkeypatch):
        opened: list[str] = []
        monkeypatch.setattr(tui, "open_url", opened.append)
        fmt = Format(Args(file_url="https://git/blob/{file}"))
        app = StackBlameApp(fmt, lambda: dump, "blue")
        run_app(app, ["k", "f"])

        assert opened == []
        assert app.message_box.left_text() == NO_FILE_MSG

    def test_parse_error_exits(self):
        def load_dump() -> Dump:
            raise DumpParseError("No thread dump or traceback found in input")

        app = StackBlameApp(Format(Args()), load_dump, "blue")

        async def run() -> None:
            async with app.run_test():
                await app.workers.wait_for_complete()

        asyncio.run(run())
        assert app.return_code == 1

    def test_unexpected_error_exits(self):
        def load_dump() -> Dump:
            raise OSError(5, "Input/output error")

        app = StackBlameApp(Format(Args()), load_dump, "blue")

        async def run() -> None:
            async with app.run_test():
                await app.workers.wait_for_complete()

        asyncio.run(run())
        assert app.return_code == 1
        assert app.dump is None
