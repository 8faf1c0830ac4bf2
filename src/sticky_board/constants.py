"""File names, directory layout and defaults shared across the store."""

STORE_DIR_NAME = ".sticky"
STORE_ROOT_ENV_VAR = "STICKY_BOARD_ROOT"
SETTINGS_FILE = "sticky.yaml"

BOARDS_DIR = "boards"
REGISTRY_FILE = "boards.yaml"
BOARD_CONFIG_FILE = "config.yaml"
BOARD_DESCRIPTION_FILE = "board.md"
TASKS_DIR = "tasks"
ARCHIVE_DIR = "archive"
TASK_FILE_SUFFIX = ".md"

DEFAULT_BOARD_ID = "default"
DEFAULT_BOARD_NAME = "Default"
FALLBACK_BOARD_SLUG = "board"

TASK_ID_PREFIX = "T-"
TASK_ID_WIDTH = 6

DEFAULT_STATUS = "todo"
DEFAULT_PRIORITY = 2
MIN_PRIORITY = 1
MAX_PRIORITY = 3

CONFIG_VERSION = 1
DEFAULT_COLUMNS = (
    ("todo", "Todo"),
    ("doing", "Doing"),
    ("done", "Done"),
)

DONE_STATUSES = frozenset({"done", "archived"})

FRONTMATTER_DELIMITER = "---"
DATE_FORMAT = "%Y-%m-%d"
