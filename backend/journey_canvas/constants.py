DEFAULT_DATA_DIR = "/app/data"
DEFAULT_DB_NAME = "journey_canvas.db"
DEFAULT_DB_BACKEND = "sqlite"

DOCUMENT_VERSION = 1

# Autosave
AUTOSAVE_DELAY_SECONDS = 30.0

# Node box defaults (pixels)
DEFAULT_MIN_WIDTH = 200
DEFAULT_MAX_WIDTH = 800
DEFAULT_MIN_HEIGHT = 100
LINE_HEIGHT = 20
CHAR_WIDTH = 8
NODE_PADDING = 16
ICON_WIDTH = 28

# Suggestion layout
LAYOUT_ORIGIN_X = 50
LAYOUT_ORIGIN_Y = 50
LAYOUT_ZIGZAG_OFFSET = 80
LAYOUT_ROW_SPACING = 350
LAYOUT_ROW_GAP = 50

# Append-next-step layout
APPEND_START_X = 100
APPEND_START_Y = 100
APPEND_STEP_X = 250
