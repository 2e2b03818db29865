"""
Domain constants - league limits, upload rules, rate limit policies.
Centralized here for easy modification.
"""

# === Fighter profile ===
MIN_FIGHTER_AGE = 16
MAX_FIGHTER_AGE = 50
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50
HANDLE_PATTERN = r"^[a-zA-Z0-9_]+$"

# === Fight records ===
MIN_ROUND = 1
MAX_ROUND = 15
KNOCKOUT_METHODS = ("KO", "TKO")

# === Tournaments / camps ===
MIN_TOURNAMENT_PARTICIPANTS = 4
MAX_TOURNAMENT_PARTICIPANTS = 64
MIN_CAMP_PARTICIPANTS = 2
MAX_CAMP_PARTICIPANTS = 50

# === Media uploads ===
MAX_UPLOAD_BYTES = 50 * 1024 * 1024  # 50MB
ALLOWED_MIME_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "video/mp4",
    "video/webm",
    "video/quicktime",
)

# === Fighter stats ===
# Compare-and-set rounds before a fight record leaves the counters stale
STATS_UPDATE_ATTEMPTS = 5

# === Rankings ===
RANKINGS_LIMIT = 50
RECENT_FORM_SIZE = 5
STREAK_LOOKBACK = 10
# (min_points, tier) - highest threshold first
TIER_THRESHOLDS = (
    (280, "Elite"),
    (140, "Contender"),
    (70, "Pro"),
    (30, "Semi-Pro"),
    (0, "Amateur"),
)

# === Rate Limiting: class -> (window seconds, max requests, fail closed) ===
RATE_LIMIT_POLICIES = {
    "api": (60, 100, False),
    "auth": (15 * 60, 5, True),
    "upload": (60, 5, True),
    "admin": (60, 50, True),
    "matchmaking": (60, 10, True),
    "tournament": (60, 3, True),
}
# Retry-After handed out when a fail-closed class cannot reach the counter store
RATE_LIMIT_OUTAGE_RETRY_SECONDS = 30

# === Admin listing ===
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Content cap for forwarded log messages
MAX_LOG_MESSAGE_LENGTH = 4000
