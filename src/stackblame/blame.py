import os
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from logging import getLogger
from pathlib import Path
from typing import Callable, Iterable, TypeAlias

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError
from git import Repo as GitRepo

from stackblame.commits import Commit, CommitStore, SourceLineKey
from stackblame.constants import BLAME_CHUNK_SIZE, MAX_THREAD_WORKERS
from stackblame.typedefs import BlameStr, FileStr, Rev

logger = getLogger(__name__)

# Signature of the blame capability: returns None when no blame is available for an
# existing but empty file, raises BlameError for any other failure.
BlameFunc: TypeAlias = Callable[[FileStr, FileStr, int, Rev], Commit | None]


class BlameError(Exception):
    pass


def git_blame(
    repository: FileStr, fstr: FileStr, line: int, revision: Rev
) -> Commit | None:
    """
    Return the commit that last changed line `line` of file `fstr` at `revision`.

    Runs git blame -w --porcelain for the single line, followed by git show for the
    full commit message. A missing full message is not an error.
    """
    fstr = get_repo_relative_fstr(repository, fstr)
    try:
        # GitPython is not thread-safe, so each call uses its own GitRepo object.
        git_repo = GitRepo(repository)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise BlameError(f"Not a git repository: {repository}") from e
    try:
        try:
            blame_str: str = git_repo.git.blame(
                "-w", "--porcelain", f"-L{line},{line}", revision, "--", fstr
            )  # type: ignore
        except GitCommandError as e:
            # Depending on the git version, an empty file gives no output or an error
            # for the -L option.
            if is_empty_file(repository, fstr):
                return None
            raise BlameError(f"git blame failed for {fstr}:{line}: {e.stderr}") from e

        if not blame_str:
            if is_empty_file(repository, fstr):
                return None
            raise BlameError(f"Empty git blame output for {fstr}:{line}")

        commit = parse_blame_porcelain(blame_str.splitlines())
        try:
            full_message: str = git_repo.git.show(
                "-s", "--format=%B", commit.id
            )  # type: ignore
        except GitCommandError:
            return commit
        return Commit(
            commit.id,
            commit.author,
            commit.email,
            commit.message,
            commit.date,
            full_message.strip(),
        )
    finally:
        git_repo.close()


def parse_blame_porcelain(lines: list[BlameStr]) -> Commit:
    if not lines:
        raise BlameError("Expected git blame output of at least one line")
    hunk = lines[0].split()
    if len(hunk) != 4 or not re.match(r"^[a-f0-9]{40}$", hunk[0]):
        raise BlameError(f"Expected hunk header of 4 parts, got: {lines[0]!r}")
    commit_id = hunk[0]

    author = ""
    email = ""
    date: datetime | None = None
    summary = ""
    for line in lines[1:]:
        if line.startswith("\t"):
            break
        if line.startswith("author "):
            author = line[len("author ") :]
        elif line.startswith("author-mail "):
            email = line[len("author-mail ") :].strip("<>")
        elif line.startswith("author-time "):
            time_str = line[len("author-time ") :]
            try:
                date = datetime.fromtimestamp(int(time_str))
            except ValueError as e:
                raise BlameError(f"Failed to parse author-time {time_str!r}") from e
        elif line.startswith("summary "):
            summary = line[len("summary ") :]
    if date is None:
        raise BlameError(f"No author-time in git blame output for {commit_id}")
    return Commit(commit_id, author, email, summary, date)


def is_empty_file(repository: FileStr, fstr: FileStr) -> bool:
    path = Path(repository) / fstr
    try:
        return path.is_file() and os.stat(path).st_size == 0
    except OSError:
        # E.g. a file name that is too long for the file system.
        return False


def get_repo_relative_fstr(repository: FileStr, fstr: FileStr) -> FileStr:
    path = Path(fstr)
    if not path.is_absolute():
        return fstr
    for repo_path in (Path(repository), Path(repository).resolve()):
        if path.is_relative_to(repo_path):
            return path.relative_to(repo_path).as_posix()
    return fstr


def resolve_revision(repository: FileStr, revision: Rev) -> Rev:
    """
    Pin a revision spec to a commit SHA, so that all blames of one dump use the same
    revision. Falls back to the literal spec if it cannot be resolved.
    """
    try:
        git_repo = GitRepo(repository)
    except (InvalidGitRepositoryError, NoSuchPathError):
        logger.warning(f"Cannot open repository {repository}, using {revision}")
        return revision
    try:
        return git_repo.git.rev_parse(revision).strip()  # type: ignore
    except GitCommandError:
        logger.warning(f"Cannot resolve revision {revision}, using it unresolved")
        return revision
    finally:
        git_repo.close()


def get_git_toplevel(fstr: FileStr = ".") -> FileStr:
    # Empty string when fstr is not inside a git work tree.
    try:
        git_repo = GitRepo(fstr, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError):
        return ""
    try:
        return str(git_repo.working_tree_dir or "")
    finally:
        git_repo.close()


class BlameResolver:
    def __init__(
        self,
        repository: FileStr,
        blame_func: BlameFunc = git_blame,
        multithread: bool = True,
        max_workers: int = MAX_THREAD_WORKERS,
        chunk_size: int = BLAME_CHUNK_SIZE,
    ) -> None:
        self.repository = repository
        self.blame_func = blame_func
        self.multithread = multithread
        self.max_workers = max_workers
        self.chunk_size = chunk_size

    # Each distinct key is blamed once. The results of the blame threads are all added
    # to the store by the calling thread, so that the store is never mutated
    # concurrently. Keys whose blame fails are missing from the store.
    def resolve(self, keys: Iterable[SourceLineKey]) -> CommitStore:
        store = CommitStore()
        unique_keys: list[SourceLineKey] = list(dict.fromkeys(keys))
        i_max = len(unique_keys)
        logger.info(f"Blame: {i_max} source lines in {self.repository}")
        if not unique_keys:
            return store

        if self.multithread:
            with ThreadPoolExecutor(max_workers=self.max_workers) as thread_executor:
                for chunk_start in range(0, i_max, self.chunk_size):
                    chunk_end = min(chunk_start + self.chunk_size, i_max)
                    chunk_keys = unique_keys[chunk_start:chunk_end]
                    futures = [
                        thread_executor.submit(self._blame_key, key)
                        for key in chunk_keys
                    ]
                    for future in as_completed(futures):
                        key, commit = future.result()
                        if commit is not None:
                            store.add(key, commit)
        else:  # single thread
            for key in unique_keys:
                key, commit = self._blame_key(key)
                if commit is not None:
                    store.add(key, commit)

        store.sort_by_date()
        logger.info(f"Blame: {len(store)} commits for {len(store.by_source)} lines")
        return store

    def _blame_key(self, key: SourceLineKey) -> tuple[SourceLineKey, Commit | None]:
        try:
            commit = self.blame_func(self.repository, key.fstr, key.line, key.revision)
        except (BlameError, GitCommandError, OSError, ValueError) as e:
            logger.debug(f"No blame for {key}: {e}")
            return key, None
        return key, commit
