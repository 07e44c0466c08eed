"""Constants for gitprogress."""


# Per-repository override file, merged over the packaged defaults
REPO_CONFIG_NAME = ".gitprogress.toml"

# Event kinds
EVENT_START = "start"
EVENT_PROGRESS = "progress"
EVENT_END = "end"

# Outcome statuses
STATUS_SUCCESS = "success"
STATUS_REMOTE_ERROR = "remote_error"
STATUS_UNCLASSIFIED_ERROR = "unclassified_error"
STATUS_CANCELLED = "cancelled"

# Default push phase table: (title, weight)
DEFAULT_PUSH_PHASES = [
    ("Compressing objects", 0.2),
    ("Writing objects", 0.8),
]

# Environment forced on every git child process
GIT_BASE_ENV = {
    "GIT_TERMINAL_PROMPT": "0",
    "GIT_PAGER": "cat",
    "LC_ALL": "C",
}
