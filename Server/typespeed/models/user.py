"""
User Data Models

Contains the user account document and its embedded statistics.
"""

import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from bson.objectid import ObjectId

from ..config.typing_rules import DEFAULT_DIFFICULTY
from ..utils.helpers import to_json_value
from .typing_test import TypingTestResult


@dataclass
class TypingStats:
    """Running aggregates over a user's test history."""
    avg_wpm: float = 0.0
    accuracy: float = 0.0
    tests_completed: int = 0
    best_accuracy: float = 0.0
    best_speed: float = 0.0
    difficulty: str = DEFAULT_DIFFICULTY

    def to_document(self) -> Dict[str, Any]:
        return {
            'avgWpm': self.avg_wpm,
            'accuracy': self.accuracy,
            'testsCompleted': self.tests_completed,
            'bestAccuracy': self.best_accuracy,
            'bestSpeed': self.best_speed,
            'difficulty': self.difficulty,
        }

    @classmethod
    def from_document(cls, doc: Optional[Dict[str, Any]]) -> 'TypingStats':
        doc = doc or {}
        return cls(
            avg_wpm=doc.get('avgWpm', 0.0),
            accuracy=doc.get('accuracy', 0.0),
            tests_completed=doc.get('testsCompleted', 0),
            best_accuracy=doc.get('bestAccuracy', 0.0),
            best_speed=doc.get('bestSpeed', 0.0),
            difficulty=doc.get('difficulty') or DEFAULT_DIFFICULTY,
        )


@dataclass
class Leaderboards:
    """Leaderboard scores; regional mirrors global until regions exist."""
    global_score: float = 0.0
    regional_score: float = 0.0

    def to_document(self) -> Dict[str, Any]:
        return {'global': self.global_score, 'regional': self.regional_score}

    @classmethod
    def from_document(cls, doc: Optional[Dict[str, Any]]) -> 'Leaderboards':
        doc = doc or {}
        return cls(global_score=doc.get('global', 0.0), regional_score=doc.get('regional', 0.0))


# Fields never returned to clients
PRIVATE_FIELDS = ('password', 'resetPasswordToken', 'resetPasswordExpires')


@dataclass
class UserAccount:
    """User account data model, one document per registered person."""
    username: str
    email: str
    password: str
    first_name: str
    last_name: str
    id: Optional[ObjectId] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[int] = None
    email_verified: bool = False
    failed_login_attempts: int = 0
    lock_until: Optional[datetime.datetime] = None
    reset_password_token: Optional[str] = None
    reset_password_expires: Optional[datetime.datetime] = None
    progress: List[TypingTestResult] = field(default_factory=list)
    highest_wpm: float = 0
    total_tests: int = 0
    total_words_typed: int = 0
    total_time_spent: float = 0
    typing_stats: TypingStats = field(default_factory=TypingStats)
    leaderboards: Leaderboards = field(default_factory=Leaderboards)
    created_at: Optional[datetime.datetime] = None
    last_login: Optional[datetime.datetime] = None
    last_test: Optional[datetime.datetime] = None

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the MongoDB document layout (without _id)."""
        doc = {
            'username': self.username,
            'email': self.email,
            'password': self.password,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'age': self.age,
            'gender': self.gender,
            'country': self.country,
            'state': self.state,
            'pincode': self.pincode,
            'emailVerified': self.email_verified,
            'failedLoginAttempts': self.failed_login_attempts,
            'lockUntil': self.lock_until,
            'progress': [test.to_document() for test in self.progress],
            'highestWpm': self.highest_wpm,
            'totalTests': self.total_tests,
            'totalWordsTyped': self.total_words_typed,
            'totalTimeSpent': self.total_time_spent,
            'typingStats': self.typing_stats.to_document(),
            'leaderboards': self.leaderboards.to_document(),
            'createdAt': self.created_at,
            'lastLogin': self.last_login,
            'lastTest': self.last_test,
        }
        # A pending reset only exists while both fields are set
        if self.reset_password_token is not None:
            doc['resetPasswordToken'] = self.reset_password_token
            doc['resetPasswordExpires'] = self.reset_password_expires
        return doc

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> 'UserAccount':
        return cls(
            id=doc.get('_id'),
            username=doc['username'],
            email=doc['email'],
            password=doc.get('password', ''),
            first_name=doc.get('firstName', ''),
            last_name=doc.get('lastName', ''),
            age=doc.get('age'),
            gender=doc.get('gender'),
            country=doc.get('country'),
            state=doc.get('state'),
            pincode=doc.get('pincode'),
            email_verified=doc.get('emailVerified', False),
            failed_login_attempts=doc.get('failedLoginAttempts', 0),
            lock_until=doc.get('lockUntil'),
            reset_password_token=doc.get('resetPasswordToken'),
            reset_password_expires=doc.get('resetPasswordExpires'),
            progress=[TypingTestResult.from_document(test) for test in doc.get('progress') or []],
            highest_wpm=doc.get('highestWpm', 0),
            total_tests=doc.get('totalTests', 0),
            total_words_typed=doc.get('totalWordsTyped', 0),
            total_time_spent=doc.get('totalTimeSpent', 0),
            typing_stats=TypingStats.from_document(doc.get('typingStats')),
            leaderboards=Leaderboards.from_document(doc.get('leaderboards')),
            created_at=doc.get('createdAt'),
            last_login=doc.get('lastLogin'),
            last_test=doc.get('lastTest'),
        )

    def summary(self) -> Dict[str, Any]:
        """Short identity block returned by register/login."""
        return {
            'id': str(self.id) if self.id is not None else None,
            'username': self.username,
            'email': self.email,
            'firstName': self.first_name,
            'lastName': self.last_name,
        }

    def to_public_dict(self) -> Dict[str, Any]:
        """Full profile with history, safe for API responses."""
        doc = self.to_document()
        for name in PRIVATE_FIELDS:
            doc.pop(name, None)
        doc['id'] = str(self.id) if self.id is not None else None
        return to_json_value(doc)
