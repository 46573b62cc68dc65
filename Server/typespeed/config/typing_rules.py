"""
Typing Test Rules Module

Defines the constants that drive test validation and the adaptive
difficulty policy. Everything a product change would touch lives here.
"""

from typing import Final, Tuple

# Allowed values for the enumerated test fields
DIFFICULTY_LEVELS: Final[Tuple[str, ...]] = ('easy', 'medium', 'hard')
CHALLENGE_TYPES: Final[Tuple[str, ...]] = ('time', 'accuracy', 'combo')
CATEGORIES: Final[Tuple[str, ...]] = ('general', 'coding', 'quotes', 'random')

DEFAULT_DIFFICULTY: Final[str] = 'medium'
DEFAULT_CHALLENGE_TYPE: Final[str] = 'time'
DEFAULT_CATEGORY: Final[str] = 'general'

# Adaptive difficulty thresholds (average WPM, strict comparisons)
HARD_THRESHOLD_WPM: Final[float] = 60
EASY_THRESHOLD_WPM: Final[float] = 40

# Accuracy is a percentage
MIN_ACCURACY: Final[float] = 0
MAX_ACCURACY: Final[float] = 100

SECONDS_PER_MINUTE: Final[int] = 60
