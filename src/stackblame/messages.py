from stackblame.keys import Keys

keys = Keys()

USAGE_MSG = (
    f"[{keys.message}]essage | [{keys.file}]ile | [{keys.commit}]ommit | "
    f"[{keys.blame}]lame | {keys.next}/{keys.previous} scroll | [{keys.quit}]uit"
)

NO_COMMIT_MSG = "Error: no associated commit!"
NO_FILE_MSG = "Error: no associated file!"
MESSAGE_COPIED_MSG = "Message copied to clipboard!"

NO_REPOSITORY_MSG = (
    "Repository not provided and not in a Git repository. "
    "Use --repository PATH or run from inside a Git work tree."
)
EMPTY_INPUT_MSG = "No dump found on input, nothing to show."
