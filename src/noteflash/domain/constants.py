"""Centralized constants for the noteflash scheduler.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Quality ----------
MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3  # >= 3 is a successful recall

# ---------- Card defaults ----------
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
DEFAULT_DECK = "Default"
ALL_DECKS = "all"
CARD_ID_PREFIX = "card_"

# ---------- Strict SM-2 ----------
MINUTE = 1 / 1440  # one minute, in days
LEARNING_STEPS = (1 * MINUTE, 10 * MINUTE, 1.0)  # 1min, 10min, 1day
RELEARNING_STEPS = (10 * MINUTE, 1.0)  # 10min, 1day
GRADUATING_INTERVAL = 1.0
SECOND_INTERVAL = 6.0
LAPSE_EASE_PENALTY = 0.2

# ---------- Simple SM-2 ----------
SIMPLE_FAIL_EASE_PENALTY = 0.15
SIMPLE_EASY_EASE_BONUS = 0.15
SIMPLE_MAX_EASE_FACTOR = 3.0
SIMPLE_EASY_MULTIPLIER = 1.3
SIMPLE_FIRST_EASY_INTERVAL = 3.0

# ---------- Selection ----------
DEFAULT_NEW_CARDS_PER_DAY = 20
DEFAULT_RELATED_LIMIT = 5

# ---------- Session builder ----------
WARMUP_DUE = 2
WARMUP_NEW = 2
BLOCK_DUE = 4
BLOCK_NEW = 1
HARD_REINSERT_OFFSET = 1
NORMAL_REINSERT_BASE = 5
NORMAL_REINSERT_MAX = 8

# ---------- Stats ----------
MATURE_INTERVAL_DAYS = 21
FORECAST_DAYS = 7
