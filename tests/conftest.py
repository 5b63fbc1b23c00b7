"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime
from pathlib import Path

import pytest
from git import Actor
from git import Repo as GitRepo

from stackblame.args_settings import Args
from stackblame.commits import Commit

ALICE = Actor("Alice Example", "alice@example.com")
BOB = Actor("Bob Example", "bob@example.com")


def make_commit(
    commit_id: str = "a" * 40,
    date: datetime = datetime(2020, 1, 1, 12, 0, 0),
    author: str = "Alice Example",
    message: str = "Add feature",
) -> Commit:
    return Commit(
        commit_id,
        author,
        "alice@example.com",
        message,
        date,
        f"{message}\n\nLonger description.",
    )


@pytest.fixture
def args():
    """Default arguments for formatting."""
    return Args()


@pytest.fixture
def faulthandler_dump():
    """faulthandler output of three threads, two of them with the same stack."""
    return (
        "Fatal Python error: Aborted\n"
        "\n"
        "Thread 0x00007f0000000002 (most recent call first):\n"
        '  File "/srv/app/worker.py", line 12 in wait\n'
        '  File "/usr/lib/python3.12/threading.py", line 1010 in run\n'
        "\n"
        "Current thread 0x00007f0000000001 (most recent call first):\n"
        '  File "/srv/app/main.py", line 30 in crash\n'
        '  File "/srv/app/main.py", line 40 in <module>\n'
        "\n"
        "Thread 0x00007f0000000003 (most recent call first):\n"
        '  File "/srv/app/worker.py", line 12 in wait\n'
        '  File "/usr/lib/python3.12/threading.py", line 1010 in run\n'
    )


@pytest.fixture
def traceback_dump():
    return (
        "Traceback (most recent call last):\n"
        '  File "/srv/app/main.py", line 40, in <module>\n'
        "    main()\n"
        '  File "/srv/app/main.py", line 30, in main\n'
        "    crash()\n"
        "    ^^^^^^^\n"
        "ValueError: boom\n"
    )


@pytest.fixture
def git_repo(tmp_path: Path):
    """
    Repository with two commits:
    - 2020-01-01, Alice: main.py with three lines, empty.py
    - 2021-06-01, Bob: changes line 2 of main.py
    """
    repo_path = tmp_path / "repo"
    git_repo = GitRepo.init(repo_path)

    (repo_path / "main.py").write_text("a = 1\nb = 2\nc = 3\n", encoding="utf-8")
    (repo_path / "empty.py").write_text("", encoding="utf-8")
    git_repo.index.add(["main.py", "empty.py"])
    date_1 = "1577880000 +0000"  # 2020-01-01 12:00 UTC
    git_repo.index.commit(
        "Initial commit\n\nCreate main and empty modules.",
        author=ALICE,
        committer=ALICE,
        author_date=date_1,
        commit_date=date_1,
    )

    (repo_path / "main.py").write_text("a = 1\nb = 22\nc = 3\n", encoding="utf-8")
    git_repo.index.add(["main.py"])
    date_2 = "1622548800 +0000"  # 2021-06-01 12:00 UTC
    git_repo.index.commit(
        "Change b",
        author=BOB,
        committer=BOB,
        author_date=date_2,
        commit_date=date_2,
    )
    yield git_repo
    git_repo.close()
