import threading
from logging import getLogger
from typing import Callable

from rich.text import Text
from textual import events, work
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Static

from stackblame.constants import LOADING_TEXT, STATUS_TICKS, TICK_INTERVAL, USAGE_TICKS
from stackblame.dump import Dump
from stackblame.keys import Keys
from stackblame.message_box import Message, MessageBox, Side
from stackblame.messages import (
    MESSAGE_COPIED_MSG,
    NO_COMMIT_MSG,
    NO_FILE_MSG,
    USAGE_MSG,
)
from stackblame.stack_dump import DumpParseError
from stackblame.trace_format import AnnotatedFrame, AnnotatedTrace, Format, FrameKind
from stackblame.utils import open_url
from stackblame.viewport import Viewport, VisibleRow

logger = getLogger(__name__)

keys = Keys()

# Rich styles per frame kind, the style of the selected line is added by the renderer.
PALETTE: dict[FrameKind, str] = {
    FrameKind.SKIPPED: "dim",
    FrameKind.SEPARATOR: "",
    FrameKind.HEADER: "magenta",
    FrameKind.CALL: "",
    FrameKind.ELIDED: "dim",
}
HEADER_FIRST_STYLE = "bold magenta"
UNRESOLVED_CALL_STYLE = "bright_black"


class StackBlameApp(App):
    CSS = """
    #main {
        height: 1fr;
    }
    #stacktrace {
        width: 3fr;
        height: 1fr;
        border: round $accent;
    }
    #side {
        width: 1fr;
    }
    #commit, #commits {
        height: 1fr;
        border: round $accent;
    }
    #messages {
        height: 1;
    }
    """

    def __init__(
        self,
        fmt: Format,
        load_dump: Callable[[], Dump],
        highlight_color: str,
    ) -> None:
        super().__init__()
        self.format = fmt
        self.load_dump = load_dump
        self.highlight_color = highlight_color

        self.dump: Dump | None = None
        self.trace: AnnotatedTrace = ()
        self.viewport: Viewport[AnnotatedFrame] = Viewport()

        self.message_box = MessageBox()
        self.status = Message("", STATUS_TICKS)
        self.usage = Message(USAGE_MSG, USAGE_TICKS)
        self.message_box.add_message(self.usage, Side.RIGHT)

    def compose(self) -> ComposeResult:
        with Horizontal(id="main"):
            yield Static(LOADING_TEXT, id="stacktrace")
            with Vertical(id="side"):
                yield Static("", id="commit")
                yield Static("", id="commits")
        yield Static("", id="messages")

    def on_mount(self) -> None:
        self.query_one("#stacktrace", Static).border_title = "Stacktrace"
        self.query_one("#commit", Static).border_title = "Commit"
        self.query_one("#commits", Static).border_title = "Commits"
        self.set_interval(TICK_INTERVAL, self.on_tick)
        self.call_after_refresh(self.update_height)
        self.refresh_messages()
        self.process_dump()

    def on_resize(self, event: events.Resize) -> None:
        self.call_after_refresh(self.update_height)

    # Parsing and blaming the dump blocks on git, so it runs in a thread while the UI
    # stays responsive.
    @work(thread=True, exclusive=True)
    def process_dump(self) -> None:
        try:
            dump = self.load_dump()
        except DumpParseError as e:
            self.call_from_thread(self.exit, None, 1, f"Failed to parse dump:\n{e}")
            return
        except Exception as e:
            self.call_from_thread(
                self.exit, None, 1, f"Failed to process dump:\n{type(e).__name__}: {e}"
            )
            return
        self.call_from_thread(self.render_dump, dump)

    def render_dump(self, dump: Dump) -> None:
        self.dump = dump
        self.trace = self.format.stacktrace(dump)
        self.viewport.set_items(self.trace)

        first = next(
            (i for i, frame in enumerate(self.trace) if frame.origin.fstr), 0
        )
        self.viewport.select(first)
        commits = self.query_one("#commits", Static)
        commits.update(Text("\n".join(self.format.commits(dump.commits))))
        self.update_commit()
        self.refresh_stacktrace()

    def update_height(self) -> None:
        stacktrace = self.query_one("#stacktrace", Static)
        self.viewport.set_height(stacktrace.content_size.height)
        self.refresh_stacktrace()
        self.refresh_messages()

    def on_tick(self) -> None:
        if self.message_box.tick():
            self.refresh_messages()

    def on_key(self, event: events.Key) -> None:
        match event.key:
            case keys.quit:
                self.exit()
            case keys.next | keys.next_alt:
                self.viewport.select_next()
                self.update_selection()
            case keys.previous | keys.previous_alt:
                self.viewport.select_previous()
                self.update_selection()
            case keys.message:
                self.copy_message()
            case keys.commit if self.format.commit_url:
                self.open_template_url(self.format.commit_url, require_commit=True)
            case keys.file if self.format.file_url:
                self.open_template_url(self.format.file_url, require_commit=False)
            case keys.blame if self.format.blame_url:
                self.open_template_url(self.format.blame_url, require_commit=False)
            case _:
                return
        event.stop()

    def update_selection(self) -> None:
        self.update_commit()
        self.refresh_stacktrace()

    def update_commit(self) -> None:
        frame = self.viewport.selected()
        commit = None
        if frame is not None and self.dump is not None:
            commit = self.dump.commits.lookup_by_id(frame.commit_id)
        text = self.format.commit(commit) if commit is not None else ""
        self.query_one("#commit", Static).update(Text(text))

    def copy_message(self) -> None:
        frame = self.viewport.selected()
        commit = None
        if frame is not None and self.dump is not None:
            commit = self.dump.commits.lookup_by_id(frame.commit_id)
        if commit is None or self.dump is None:
            self.show_status(NO_COMMIT_MSG)
            return
        try:
            message = self.format.message(self.dump, commit)
        except (KeyError, IndexError, ValueError, AttributeError) as e:
            self.show_status(f"Error: {e}")
            return
        self.copy_to_clipboard(message)
        self.show_status(MESSAGE_COPIED_MSG)

    def open_template_url(self, template: str, require_commit: bool) -> None:
        frame = self.viewport.selected()
        if frame is None or not frame.origin.fstr:
            self.show_status(NO_FILE_MSG)
            return
        if require_commit and not frame.commit_id:
            self.show_status(NO_COMMIT_MSG)
            return
        try:
            url = self.format.url(template, frame)
        except (KeyError, IndexError, ValueError, AttributeError) as e:
            self.show_status(f"Error: {e}")
            return
        open_url(url)

    def show_status(self, content: str) -> None:
        self.status.content = content
        self.message_box.add_message(self.status, Side.LEFT)
        self.refresh_messages()

    # Used by the logging handler, which may be called from any thread.
    def post_status(self, content: str) -> None:
        if not self.is_running:
            return
        if threading.current_thread() is threading.main_thread():
            self.show_status(content)
        else:
            self.call_from_thread(self.show_status, content)

    def refresh_messages(self) -> None:
        messages = self.query_one("#messages", Static)
        messages.update(Text(self.message_box.text(messages.size.width)))

    def refresh_stacktrace(self) -> None:
        if not self.trace:
            return
        stacktrace = self.query_one("#stacktrace", Static)
        width = stacktrace.content_size.width
        text = Text(no_wrap=True, overflow="ellipsis")
        for i, row in enumerate(self.viewport.visible):
            if i:
                text.append("\n")
            text.append(self.row_text(row, width))
        stacktrace.update(text)

    def row_text(self, row: VisibleRow[AnnotatedFrame], width: int) -> Text:
        frame = row.item
        style = PALETTE[frame.kind]
        if frame.kind == FrameKind.HEADER and frame.first:
            style = HEADER_FIRST_STYLE
        elif frame.kind == FrameKind.CALL and frame.commit_id is None:
            style = UNRESOLVED_CALL_STYLE
        if row.selected:
            selected_style = f"{style} on {self.highlight_color}".strip()
            return Text(frame.text.ljust(width), style=selected_style)
        return Text(frame.text, style=style)
