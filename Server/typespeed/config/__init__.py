"""
Configuration Package

Contains all configuration-related files and settings.

This package separates two types of configuration:
- app_config.py: Flask application configuration (environment-based)
- typing_rules.py: Typing test rules and constants (business logic)
"""

from .app_config import Config, DevelopmentConfig, ProductionConfig, TestingConfig, config
from .typing_rules import (
    DIFFICULTY_LEVELS, CHALLENGE_TYPES, CATEGORIES,
    HARD_THRESHOLD_WPM, EASY_THRESHOLD_WPM
)

__all__ = [
    # App configuration
    'Config', 'DevelopmentConfig', 'ProductionConfig', 'TestingConfig', 'config',
    # Typing rules
    'DIFFICULTY_LEVELS', 'CHALLENGE_TYPES', 'CATEGORIES',
    'HARD_THRESHOLD_WPM', 'EASY_THRESHOLD_WPM'
]
