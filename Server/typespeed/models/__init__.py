"""
Data Models Package

Contains all data models and schemas used throughout the application.
"""

from .typing_test import TypingTestResult, ProgressSubmission
from .user import UserAccount, TypingStats, Leaderboards

__all__ = ['TypingTestResult', 'ProgressSubmission', 'UserAccount', 'TypingStats', 'Leaderboards']
