"""Central place for scalesmith default settings."""

# History / debounce
DEBOUNCE_MS: int = 200  # Quiet window that closes an edit burst
HISTORY_LIMIT: int = 25  # Max undo checkpoints kept in `past`

# Channel ranges (HSL)
MAX_HUE: float = 360.0
MAX_SATURATION: float = 100.0
MAX_LIGHTNESS: float = 100.0

# Color editing
APPEND_DARKEN_STEP: float = 10.0  # Lightness drop for a color appended at the end
EASING_DECIMALS: int = 1

# New palettes
DEFAULT_PALETTE_NAME: str = "Untitled"
DEFAULT_BACKGROUND_COLOR: str = "#ffffff"
COPY_SUFFIX: str = " (copy)"
NAMING_SCHEME_SUFFIX: str = " naming scheme"

# Navigation
ROUTE_PREFIX: str = ""

# Persistence
SNAPSHOT_FILENAME: str = "scalesmith_state.json"

# Lospec
LOSPEC_BASE_URL: str = "https://lospec.com/palette-list"
LOSPEC_TIMEOUT: float = 10.0
