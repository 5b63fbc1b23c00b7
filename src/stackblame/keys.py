from dataclasses import dataclass


# The field names of class KeysArgs are identical to those of class Args, but the values
# are all strings equal to the names.
@dataclass
class KeysArgs:
    repository: str = "repository"
    revision: str = "revision"
    commit_url: str = "commit_url"
    file_url: str = "file_url"
    blame_url: str = "blame_url"
    custom_message: str = "custom_message"
    full_path: str = "full_path"
    highlight_color: str = "highlight_color"
    multithread: str = "multithread"
    verbosity: str = "verbosity"


# Key bindings of the terminal UI
@dataclass
class Keys:
    quit: str = "q"
    next: str = "j"
    next_alt: str = "down"
    previous: str = "k"
    previous_alt: str = "up"
    message: str = "m"
    commit: str = "c"
    file: str = "f"
    blame: str = "b"
