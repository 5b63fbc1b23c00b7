"""
Parsing of Python thread dumps into buckets of identical call stacks.

Two input formats are recognized, also mixed in one dump:

- faulthandler dumps, as written by faulthandler.dump_traceback(all_threads=True),
  SIGABRT handlers, py-spy and friends. Each thread starts with a line like
  "Thread 0x00007f3a4d1fe700 (most recent call first):", the thread that wrote the
  dump with "Current thread 0x...". Frames are listed most recent call first, a
  line with "..." marks a truncated stack.
- tracebacks, starting with "Traceback (most recent call last):". Their frames are
  reversed to most recent call first.

Text before the first stack is kept as skipped text.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path

from stackblame.typedefs import FileStr, ThreadID

THREAD_HEADER_RE = re.compile(
    r"^(?P<state>Current thread|Thread) (?P<id>0x[0-9a-fA-F]+)\b.*"
    r"\(most recent call first\):\s*$"
)
STACK_HEADER_RE = re.compile(r"^Stack \(most recent call first\):\s*$")
TRACEBACK_HEADER_RE = re.compile(r"^Traceback \(most recent call last\):\s*$")
FRAME_RE = re.compile(
    r'^\s+File "(?P<fstr>[^"]+)", line (?P<line>\d+),? in (?P<func>\S.*?)\s*$'
)
ELIDED_MARKER = "..."


class DumpParseError(Exception):
    pass


@dataclass(frozen=True)
class Call:
    fstr: FileStr
    line: int
    func: str

    def source_line(self) -> str:
        return f"{Path(self.fstr).name}:{self.line}"

    def full_source_line(self) -> str:
        return f"{self.fstr}:{self.line}"


@dataclass
class Stack:
    calls: list[Call] = field(default_factory=list)
    elided: bool = False


@dataclass
class Bucket:
    stack: Stack
    thread_ids: list[ThreadID] = field(default_factory=list)
    # True if the bucket contains the thread that wrote the dump.
    first: bool = False
    traceback: bool = False


@dataclass
class ParsedDump:
    buckets: list[Bucket]
    skipped: str


@dataclass
class _ThreadStack:
    thread_id: ThreadID
    current: bool
    traceback: bool
    stack: Stack = field(default_factory=Stack)


def parse_and_bucketize(raw: bytes | str) -> ParsedDump:
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    threads, skipped = _parse_threads(text)
    if not threads:
        raise DumpParseError("No thread dump or traceback found in input")
    return ParsedDump(bucketize(threads), skipped)


def _parse_threads(text: str) -> tuple[list[_ThreadStack], str]:
    threads: list[_ThreadStack] = []
    skipped_lines: list[str] = []
    thread: _ThreadStack | None = None

    for line in text.splitlines():
        new_thread = _match_header(line)
        if new_thread is not None:
            thread = _close(thread, threads)
            thread = new_thread
            continue
        if thread is None:
            if not threads:
                skipped_lines.append(line)
            continue

        match = FRAME_RE.match(line)
        if match:
            thread.stack.calls.append(
                Call(match["fstr"], int(match["line"]), match["func"])
            )
        elif line.strip() == ELIDED_MARKER:
            thread.stack.elided = True
        elif thread.traceback and line.startswith((" ", "\t")):
            # Source code and caret lines of a traceback frame.
            continue
        else:
            thread = _close(thread, threads)

    _close(thread, threads)
    return threads, "\n".join(skipped_lines)


def _match_header(line: str) -> _ThreadStack | None:
    match = THREAD_HEADER_RE.match(line)
    if match:
        return _ThreadStack(match["id"], match["state"] == "Current thread", False)
    if STACK_HEADER_RE.match(line):
        return _ThreadStack("", True, False)
    if TRACEBACK_HEADER_RE.match(line):
        return _ThreadStack("", True, True)
    return None


def _close(thread: _ThreadStack | None, threads: list[_ThreadStack]) -> None:
    if thread is not None and thread.stack.calls:
        if thread.traceback:
            thread.stack.calls.reverse()
        threads.append(thread)
    return None


def bucketize(threads: list[_ThreadStack]) -> list[Bucket]:
    """
    Group threads with identical call stacks.

    The bucket with the current thread comes first, followed by the other buckets
    ordered by decreasing number of threads and then by order of appearance.
    """
    signature2bucket: dict[tuple[tuple[Call, ...], bool, bool], Bucket] = {}
    for thread in threads:
        signature = (tuple(thread.stack.calls), thread.stack.elided, thread.traceback)
        bucket = signature2bucket.get(signature)
        if bucket is None:
            bucket = Bucket(thread.stack, traceback=thread.traceback)
            signature2bucket[signature] = bucket
        bucket.thread_ids.append(thread.thread_id)
        bucket.first = bucket.first or thread.current
    return sorted(
        signature2bucket.values(), key=lambda b: (not b.first, -len(b.thread_ids))
    )
