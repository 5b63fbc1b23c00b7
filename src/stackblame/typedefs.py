from typing import TypeAlias

FileStr: TypeAlias = str
CommitID: TypeAlias = str  # long commit SHA, 40 chars
Rev: TypeAlias = str  # revision spec or resolved commit SHA

Author: TypeAlias = str
Email: TypeAlias = str

BlameStr: TypeAlias = str  # single line of git blame --porcelain output
ThreadID: TypeAlias = str  # e.g. 0x00007f3a4d1fe700
