"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TOKEN_TTL_HOURS = 24
DEFAULT_HISTORY_LIMIT = 30
JWT_ALGORITHM = "HS256"

HOURS_UNDEFINED = "--:--"

ALLOWED_UPLOAD_EXTENSIONS = frozenset({"pdf", "doc", "docx", "txt", "jpg", "jpeg", "png", "gif"})
DEFAULT_MAX_UPLOAD_MB = 10
