"""Cart-wide constants and default configuration values.

Centralizes magic numbers so settings, stores and tests share them.
"""

# ============== TIME CONSTANTS (seconds) ==============
SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400

# Sliding cart expiry
CART_TTL_DEFAULT = SECONDS_PER_DAY  # 24 hours of inactivity

# Per-key mutation lock
CART_LOCK_TTL_DEFAULT = 5
CART_LOCK_WAIT_DEFAULT = 2.0
CART_LOCK_POLL_INTERVAL = 0.05

# ============== STORE KEYS ==============
CART_KEY_PREFIX = "cart"
CART_LOCK_PREFIX = "cart_lock"

# ============== MENU SERVICE ==============
MENU_LOOKUP_TIMEOUT_DEFAULT = 3.0
MENU_ITEM_ACTIVE_STATUS = "ACTIVE"

# Platform response envelope
RESPONSE_CODE_SUCCESS = 1000

# ============== VALIDATION ==============
MIN_QUANTITY = 1
