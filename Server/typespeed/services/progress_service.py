"""
Progress Service

Records typing tests and keeps the per-user aggregates current.

A submission flows through three steps that all work on the same in-memory
UserAccount:

1. record_test: derive timing metadata, append to history, bump rollups
2. aggregate_stats / adjust_difficulty: fold the sample into running means
3. project_leaderboards: copy the new average into the leaderboard scores

The result is committed with a single conditional update keyed on the
testsCompleted value the computation started from, so two concurrent
submissions for the same user can never overwrite each other.
"""

import logging
from typing import Any, Dict, List, Optional

from ..config.typing_rules import (
    EASY_THRESHOLD_WPM, HARD_THRESHOLD_WPM, SECONDS_PER_MINUTE
)
from ..errors import ConflictError, NotFoundError
from ..models.typing_test import ProgressSubmission, TypingTestResult
from ..models.user import TypingStats, UserAccount
from ..utils.activity_logger import activity_logger
from ..utils.helpers import parse_object_id, utcnow

logger = logging.getLogger(__name__)


def count_words(text: str) -> int:
    return len(text.split())


def compute_test_duration(word_count: int, wpm: float) -> float:
    """Seconds spent typing word_count words at wpm; zero when wpm is zero."""
    if wpm > 0:
        return (word_count / wpm) * SECONDS_PER_MINUTE
    return 0


def record_test(account: UserAccount, submission: ProgressSubmission, now) -> TypingTestResult:
    """
    Append a test to the account history and update the rollup counters.

    Args:
        account: Account to mutate
        submission: Validated submission
        now: Timestamp stored as the test date

    Returns:
        The new TypingTestResult
    """
    words = count_words(submission.text_used)
    duration = compute_test_duration(words, submission.wpm)

    result = TypingTestResult(
        wpm=submission.wpm,
        cpm=submission.cpm,
        accuracy=submission.accuracy,
        text_used=submission.text_used,
        difficulty=submission.difficulty,
        test_date=now,
        test_duration=duration,
        challenge_type=submission.challenge_type,
        category=submission.category,
        errors=list(submission.errors),
    )

    account.progress.append(result)
    account.total_tests += 1
    account.total_words_typed += words
    account.total_time_spent += duration
    if submission.wpm > account.highest_wpm:
        account.highest_wpm = submission.wpm
    account.last_test = now

    return result


def aggregate_stats(account: UserAccount, wpm: float, accuracy: float) -> TypingStats:
    """Fold one sample into the running averages without replaying history."""
    stats = account.typing_stats
    completed = stats.tests_completed
    total = completed + 1

    stats.avg_wpm = (stats.avg_wpm * completed + wpm) / total
    stats.accuracy = (stats.accuracy * completed + accuracy) / total
    stats.tests_completed = total

    if accuracy > stats.best_accuracy:
        stats.best_accuracy = accuracy
    # highestWpm is the source of truth for the best speed
    if wpm > account.highest_wpm:
        account.highest_wpm = wpm
    stats.best_speed = account.highest_wpm

    return stats


def adjust_difficulty(stats: TypingStats) -> str:
    """
    Move the suggested difficulty based on the average speed.

    There is no rule back to "medium": once a user crosses a threshold the
    tier only changes again when the opposite threshold is crossed.

    The comparison is against the user's stored tier, not the difficulty of
    the test just submitted.
    """
    if stats.avg_wpm > HARD_THRESHOLD_WPM and stats.difficulty != 'hard':
        stats.difficulty = 'hard'
    elif stats.avg_wpm < EASY_THRESHOLD_WPM and stats.difficulty != 'easy':
        stats.difficulty = 'easy'
    return stats.difficulty


def project_leaderboards(account: UserAccount) -> None:
    """Global score is the average WPM; regional is the same placeholder value."""
    score = account.typing_stats.avg_wpm
    account.leaderboards.global_score = score
    account.leaderboards.regional_score = score


def best_test(tests: List[TypingTestResult]) -> Optional[TypingTestResult]:
    """Highest-WPM test; the earliest one wins a tie."""
    best = None
    for test in tests:
        if best is None or test.wpm > best.wpm:
            best = test
    return best


class ProgressService:
    """
    Service for recording typing tests against user accounts.
    """

    def __init__(self, users_collection, max_retries: int = 5):
        """
        Initialize the progress service.

        Args:
            users_collection: MongoDB users collection
            max_retries: Attempts before a contended submission gives up
        """
        self.users_collection = users_collection
        self.max_retries = max_retries

    def _build_update(self, account: UserAccount, result: TypingTestResult,
                      words: int) -> Dict[str, Any]:
        return {
            '$push': {'progress': result.to_document()},
            '$inc': {
                'totalTests': 1,
                'totalWordsTyped': words,
                'totalTimeSpent': result.test_duration,
            },
            '$set': {
                'highestWpm': account.highest_wpm,
                'lastTest': account.last_test,
                'typingStats': account.typing_stats.to_document(),
                'leaderboards': account.leaderboards.to_document(),
            },
        }

    def add_progress(self, submission: ProgressSubmission) -> UserAccount:
        """
        Record a test result and update the user's statistics.

        Args:
            submission: Validated test submission

        Returns:
            The updated UserAccount

        Raises:
            NotFoundError: If the user does not exist
            ConflictError: If the write kept losing to concurrent submissions
        """
        user_oid = parse_object_id(submission.user_id)
        if user_oid is None:
            raise NotFoundError('User not found')

        for attempt in range(1, self.max_retries + 1):
            doc = self.users_collection.find_one({'_id': user_oid})
            if not doc:
                raise NotFoundError('User not found')

            account = UserAccount.from_document(doc)
            expected_completed = account.typing_stats.tests_completed
            previous_difficulty = account.typing_stats.difficulty

            result = record_test(account, submission, utcnow())
            aggregate_stats(account, result.wpm, result.accuracy)
            adjust_difficulty(account.typing_stats)
            project_leaderboards(account)

            update = self._build_update(account, result, count_words(submission.text_used))
            outcome = self.users_collection.update_one(
                {'_id': user_oid, 'typingStats.testsCompleted': expected_completed},
                update
            )

            if outcome.matched_count == 1:
                activity_logger.log_account_event(
                    str(user_oid), 'test_recorded',
                    wpm=result.wpm, accuracy=result.accuracy,
                    tests_completed=account.typing_stats.tests_completed,
                    avg_wpm=round(account.typing_stats.avg_wpm, 2)
                )
                if account.typing_stats.difficulty != previous_difficulty:
                    activity_logger.log_account_event(
                        str(user_oid), 'difficulty_changed',
                        old=previous_difficulty, new=account.typing_stats.difficulty
                    )
                return account

            logger.warning("Concurrent progress update for user %s (attempt %d/%d)",
                           user_oid, attempt, self.max_retries)

        raise ConflictError('Progress update conflicted with another submission, please retry')

    def _load_history(self, user_id: str) -> List[TypingTestResult]:
        user_oid = parse_object_id(user_id)
        doc = self.users_collection.find_one({'_id': user_oid}, {'progress': 1}) if user_oid else None
        tests = [TypingTestResult.from_document(test) for test in (doc or {}).get('progress') or []]
        if not tests:
            raise NotFoundError('No typing tests found for this user')
        return tests

    def get_best_test(self, user_id: str) -> TypingTestResult:
        """Return the highest-WPM test, or raise NotFoundError if there are none."""
        return best_test(self._load_history(user_id))

    def get_all_tests(self, user_id: str) -> List[TypingTestResult]:
        """Return the user's full history in chronological order."""
        return self._load_history(user_id)


# Global service instance
_progress_service = None


def get_progress_service() -> Optional[ProgressService]:
    """Get the global progress service instance."""
    return _progress_service


def initialize_progress_service(users_collection, max_retries: int = 5) -> ProgressService:
    """Initialize the global progress service instance."""
    global _progress_service
    _progress_service = ProgressService(users_collection, max_retries)
    return _progress_service
