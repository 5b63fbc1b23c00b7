from dataclasses import dataclass
from enum import Enum
from string import Formatter
from typing import TypeAlias

from stackblame.args_settings import Args
from stackblame.commits import Commit, CommitStore
from stackblame.constants import (
    CALL_INDENT,
    DATE_FORMAT,
    DATE_TIME_FORMAT,
    ELIDED_LINE,
    SHORT_ID_LEN,
    UNKNOWN_DATE,
    UNKNOWN_ID,
)
from stackblame.dump import Dump
from stackblame.stack_dump import Bucket, Call
from stackblame.typedefs import CommitID, FileStr, Rev

URL_FIELDS = {"head", "file", "line", "commit_id"}
MESSAGE_FIELDS = {
    "author",
    "email",
    "commit_id",
    "summary",
    "message",
    "date",
    "revision",
    "stacktrace",
}

DEFAULT_MESSAGE = (
    "Hi {author},\n"
    "\n"
    'The stack trace below runs through code from your commit {commit_id} ("{summary}")'
    " of {date}.\n"
    "\n"
    "{stacktrace}\n"
)


class FrameKind(Enum):
    SKIPPED = "skipped"
    SEPARATOR = "separator"
    HEADER = "header"
    CALL = "call"
    ELIDED = "elided"


@dataclass(frozen=True)
class SourceOrigin:
    head: Rev = ""
    fstr: FileStr = ""
    line: int = 0


@dataclass(frozen=True)
class AnnotatedFrame:
    text: str
    kind: FrameKind
    origin: SourceOrigin = SourceOrigin()
    commit_id: CommitID | None = None
    # Only meaningful for HEADER frames: header of the bucket of the current thread.
    first: bool = False


AnnotatedTrace: TypeAlias = tuple[AnnotatedFrame, ...]


def check_template(name: str, template: str, allowed: set[str]) -> None:
    """Raise ValueError if the template uses a field outside of `allowed`."""
    try:
        parsed = list(Formatter().parse(template))
    except ValueError as e:
        raise ValueError(f"Invalid {name} template {template!r}: {e}") from e
    for _, field_name, _, _ in parsed:
        if field_name is None:
            continue
        base_name = field_name.split(".")[0].split("[")[0]
        if base_name not in allowed:
            raise ValueError(
                f"Unknown field {{{field_name}}} in {name} template {template!r}, "
                f"use one of: {', '.join(sorted(allowed))}"
            )


class Format:
    """
    Formatting of dumps and commits for display.

    Templates are checked once, when the Format is created, so that a bad template is
    reported at startup and not when the operator presses a key.
    """

    def __init__(self, args: Args) -> None:
        self.full_path: bool = args.full_path
        self.commit_url: str = args.commit_url
        self.file_url: str = args.file_url
        self.blame_url: str = args.blame_url
        self.message_template: str = args.custom_message or DEFAULT_MESSAGE

        check_template("commit URL", self.commit_url, URL_FIELDS)
        check_template("file URL", self.file_url, URL_FIELDS)
        check_template("blame URL", self.blame_url, URL_FIELDS)
        check_template("message", self.message_template, MESSAGE_FIELDS)

    def bucket_header(self, bucket: Bucket, multiple_buckets: bool) -> str:
        n = len(bucket.thread_ids)
        if bucket.traceback:
            state = "traceback"
        elif bucket.first and multiple_buckets:
            state = "current thread"
        else:
            state = "thread" if n == 1 else "threads"
        ids = ", ".join(tid for tid in bucket.thread_ids if tid)
        return f"{n}: {state}" + (f" {ids}" if ids else "")

    def source_str(self, call: Call) -> str:
        return call.full_source_line() if self.full_path else call.source_line()

    def call_line(self, call: Call, commit: Commit | None, src_len: int) -> str:
        commit_id = UNKNOWN_ID
        date = UNKNOWN_DATE
        if commit is not None:
            commit_id = commit.id[:SHORT_ID_LEN]
            date = commit.date.strftime(DATE_FORMAT)
        return (
            f"{CALL_INDENT}{{{date} @ {commit_id}}} "
            f"{self.source_str(call):<{src_len}}  {call.func}"
        )

    def stack_lines(
        self, dump: Dump, bucket: Bucket, src_len: int
    ) -> list[AnnotatedFrame]:
        frames: list[AnnotatedFrame] = []
        for call in bucket.stack.calls:
            commit = dump.commits.lookup(dump.source_key(call))
            frames.append(
                AnnotatedFrame(
                    self.call_line(call, commit, src_len),
                    FrameKind.CALL,
                    SourceOrigin(dump.revision, call.fstr, call.line),
                    commit.id if commit is not None else None,
                )
            )
        if bucket.stack.elided:
            frames.append(AnnotatedFrame(ELIDED_LINE, FrameKind.ELIDED))
        return frames

    def stacktrace(self, dump: Dump) -> AnnotatedTrace:
        """
        Join the buckets of the dump with its commits into one line per frame.

        Skipped text comes first, then per bucket an empty separator line, a header
        line and the call lines. Only call lines have an origin and possibly a commit.
        """
        frames: list[AnnotatedFrame] = []
        if dump.skipped:
            frames = [
                AnnotatedFrame(line, FrameKind.SKIPPED)
                for line in dump.skipped.split("\n")
            ]
        src_len = max(
            (
                len(self.source_str(call))
                for bucket in dump.buckets
                for call in bucket.stack.calls
            ),
            default=0,
        )
        multiple_buckets = len(dump.buckets) > 1
        for bucket in dump.buckets:
            if frames:
                frames.append(AnnotatedFrame("", FrameKind.SEPARATOR))
            frames.append(
                AnnotatedFrame(
                    self.bucket_header(bucket, multiple_buckets),
                    FrameKind.HEADER,
                    first=bucket.first and multiple_buckets,
                )
            )
            frames.extend(self.stack_lines(dump, bucket, src_len))
        return tuple(frames)

    def stacktrace_for_message(self, dump: Dump) -> str:
        lines: list[str] = [dump.skipped] if dump.skipped else []
        src_len = max(
            (
                len(call.full_source_line())
                for bucket in dump.buckets
                for call in bucket.stack.calls
            ),
            default=0,
        )
        for bucket in dump.buckets:
            lines.append(self.bucket_header(bucket, len(dump.buckets) > 1))
            for call in bucket.stack.calls:
                lines.append(
                    f"{CALL_INDENT}{call.full_source_line():<{src_len}}  {call.func}"
                )
            if bucket.stack.elided:
                lines.append(ELIDED_LINE)
            lines.append("")
        return "\n".join(lines).rstrip("\n")

    def commit(self, commit: Commit) -> str:
        return (
            f"{commit.id}\n"
            f"{commit.author} <{commit.email}>\n"
            f"{commit.date.strftime(DATE_TIME_FORMAT)}\n"
            "\n"
            f"{commit.full_message or commit.message}"
        )

    def commits(self, store: CommitStore) -> list[str]:
        return [f"[{c.date.strftime(DATE_TIME_FORMAT)}] {c.id}" for c in store]

    def message(self, dump: Dump, commit: Commit) -> str:
        return self.message_template.format(
            author=commit.author,
            email=commit.email,
            commit_id=commit.id,
            summary=commit.message,
            message=commit.full_message or commit.message,
            date=commit.date.strftime(DATE_FORMAT),
            revision=dump.revision,
            stacktrace=self.stacktrace_for_message(dump),
        )

    def url(self, template: str, frame: AnnotatedFrame) -> str:
        return template.format(
            head=frame.origin.head,
            file=frame.origin.fstr,
            line=frame.origin.line,
            commit_id=frame.commit_id or "",
        )
