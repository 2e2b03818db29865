"""
Feature Flags - Easy on/off toggle for features.
Change values here to enable/disable functionality.
"""

import os


class Features:
    """Feature toggles - set via env vars or defaults"""

    # === RATE LIMITING ===
    RATE_LIMITING_ENABLED: bool = os.getenv("RATE_LIMITING_ENABLED", "true").lower() == "true"

    # === AUDIT LOG ===
    # Forward non-security events to application_logs outside production too
    FORWARD_ALL_LOGS: bool = os.getenv("FORWARD_ALL_LOGS", "false").lower() == "true"

    # === HTTP ===
    SECURITY_HEADERS_ENABLED: bool = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"

    # === DEBUG ===
    DEBUG_MODE: bool = os.getenv("DEBUG", "false").lower() == "true"

    @classmethod
    def to_dict(cls) -> dict:
        """Get all features as dict (useful for logging)"""
        return {
            "rate_limiting_enabled": cls.RATE_LIMITING_ENABLED,
            "forward_all_logs": cls.FORWARD_ALL_LOGS,
            "security_headers_enabled": cls.SECURITY_HEADERS_ENABLED,
            "debug_mode": cls.DEBUG_MODE,
        }


# Shortcut
features = Features()
