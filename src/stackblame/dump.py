from dataclasses import dataclass, field
from logging import getLogger

from stackblame.blame import BlameResolver, resolve_revision
from stackblame.commits import CommitStore, SourceLineKey
from stackblame.stack_dump import Bucket, Call, parse_and_bucketize
from stackblame.typedefs import FileStr, Rev

logger = getLogger(__name__)


@dataclass
class Dump:
    revision: Rev
    buckets: list[Bucket]
    commits: CommitStore = field(default_factory=CommitStore)
    skipped: str = ""

    def source_key(self, call: Call) -> SourceLineKey:
        return SourceLineKey(call.fstr, call.line, self.revision)

    def source_keys(self) -> list[SourceLineKey]:
        return [
            self.source_key(call)
            for bucket in self.buckets
            for call in bucket.stack.calls
        ]


class DumpReader:
    def __init__(self, repository: FileStr, revision: Rev, resolver: BlameResolver):
        self.repository = repository
        self.revision = revision
        self.resolver = resolver

    def read(self, raw: bytes | str) -> Dump:
        """
        Parse a dump and blame all its source lines.

        Raises DumpParseError when the input contains no stacks. Failing blames do not
        raise, their lines are absent from the commit store of the dump.
        """
        parsed = parse_and_bucketize(raw)
        logger.info(f"Dump: {len(parsed.buckets)} buckets")

        # Pin the revision once, so that all blames of the dump see the same tree.
        revision = resolve_revision(self.repository, self.revision)
        dump = Dump(revision, parsed.buckets, skipped=parsed.skipped)
        dump.commits = self.resolver.resolve(dump.source_keys())
        return dump
