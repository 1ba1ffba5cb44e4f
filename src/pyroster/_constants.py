"""Internal constants shared across the library."""

from __future__ import annotations

from datetime import timedelta

STORAGE_KEY = "batumi_casino_registry_v18"
THEME_KEY = "batumi_casino_theme"

DEFAULT_LOCATION_HINT = "Batumi, Georgia"
MAPS_SEARCH_URL = "https://www.google.com/maps/search/"

PLACEHOLDER_LOCATION = "Searching Market..."
SNAPSHOT_LOCATION = "Snapshot Location"

# Category and locality words carry no identity when matching names.
DEFAULT_STOP_WORDS: tuple[str, ...] = ("casino", "batumi")

HISTORY_LIMIT = 1000
RECORD_INTERVAL = timedelta(hours=6)
GEOLOCATION_TIMEOUT_S = 5.0
DAILY_REFRESH_HOUR = 9
SUBJECT_KEY = "international"

# Fragment keys for portable snapshot links; ``report`` is the legacy alias.
FRAGMENT_KEY = "rpt"
LEGACY_FRAGMENT_KEY = "report"

# ------------------------------------------------------------------
# Compiled-in roster  (display name, external place id)
# ------------------------------------------------------------------

DEFAULT_ROSTER: tuple[tuple[str, str], ...] = (
    ("Casino International", "ChIJuXW-p9-HZ0ARF0k28v9fE-g"),
    ("Casino Iveria Batumi", "ChIJ7wL_S9yHZ0ARmH1f_9fE-g"),
    ("Casino Peace", "ChIJQ67_S9yHZ0AR-H1f_9fE-g"),
    ("Princess Casino", "ChIJtX_S_9yHZ0ARiH1f_9fE-g"),
    ("Eclipse Casino", "ChIJu_S_S9yHZ0ARmX1f_9fE-g"),
    ("Casino Otium", "ChIJu-Otium-PlaceID"),
    ("Casino Soho", "ChIJTR0cAQCHZ0ARE7aWIZhZGuU"),
    ("Royal Casino", "ChIJRoyal-Casino-PlaceID"),
    ("Empire Casino", "ChIJEmpire-Casino-PlaceID"),
    ("Grand Bellagio", "ChIJCz76Zk-FZ0ARz1T95QGgJA8"),
    ("Billionaire Casino", "ChIJ8U3Z0teHZ0AR8_6pXn_pXnc"),
    ("Casino Colosseum", "ChIJYYGQeIuFZ0ARmkcRZU1VJOA"),
)

# Characters ``encodeURIComponent`` leaves untouched besides ASCII alphanumerics.
URI_COMPONENT_SAFE = "-_.!~*'()"
