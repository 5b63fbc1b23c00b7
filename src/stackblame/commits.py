from dataclasses import dataclass
from datetime import datetime
from typing import Iterator

from stackblame.typedefs import Author, CommitID, Email, FileStr, Rev


@dataclass(frozen=True)
class Commit:
    id: CommitID
    author: Author
    email: Email
    message: str  # summary line
    # Date when this commit was originally authored. It may differ from the commit
    # date, which is changed by rebases, amends, etc.
    date: datetime
    full_message: str | None = None


# Identifies one line of one file at one revision, as it occurs in a stack frame.
@dataclass(frozen=True)
class SourceLineKey:
    fstr: FileStr
    line: int
    revision: Rev

    def __str__(self) -> str:
        return f"{self.fstr}:{self.line}@{self.revision}"


class CommitStore:
    """
    All distinct commits found for a dump.

    Commits are kept in discovery order in self.all until sort_by_date() is called.
    Each commit ID occurs only once, no matter how many source lines resolve to it.
    Not thread-safe: callers must serialize calls to add().
    """

    def __init__(self) -> None:
        self.all: list[Commit] = []
        self.by_source: dict[SourceLineKey, Commit] = {}
        self.by_id: dict[CommitID, Commit] = {}

        self._sorted: bool = True

    def add(self, source: SourceLineKey, commit: Commit) -> None:
        found = self.by_id.get(commit.id)
        if found is None:
            self.all.append(commit)
            self.by_id[commit.id] = commit
            self._sorted = False
            found = commit
        self.by_source[source] = found

    def lookup(self, source: SourceLineKey) -> Commit | None:
        return self.by_source.get(source)

    def lookup_by_id(self, commit_id: CommitID | None) -> Commit | None:
        if not commit_id:
            return None
        return self.by_id.get(commit_id)

    # Most recent first. list.sort is stable, also with reverse=True, so commits with
    # equal dates keep their discovery order.
    def sort_by_date(self) -> None:
        if self._sorted:
            return
        self.all.sort(key=lambda c: c.date, reverse=True)
        self._sorted = True

    def __len__(self) -> int:
        return len(self.all)

    def __iter__(self) -> Iterator[Commit]:
        return iter(self.all)
