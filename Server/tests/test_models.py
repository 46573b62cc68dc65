"""Tests for the account and submission models."""

import datetime

import pytest
from bson.objectid import ObjectId

from typespeed.errors import InvalidInputError
from typespeed.models import ProgressSubmission, TypingTestResult, UserAccount


class TestProgressSubmission:
    def test_defaults_for_optional_enums(self):
        sub = ProgressSubmission.from_payload({
            "userId": "abc", "wpm": 10, "cpm": 50, "accuracy": 88.5, "textUsed": "hello world",
        })
        assert sub.difficulty == "medium"
        assert sub.challenge_type == "time"
        assert sub.category == "general"
        assert sub.errors == []

    @pytest.mark.parametrize("payload", [
        {"wpm": 10, "cpm": 50, "accuracy": 90, "textUsed": "x"},
        {"userId": "a", "wpm": True, "cpm": 50, "accuracy": 90, "textUsed": "x"},
        {"userId": "a", "wpm": 10, "cpm": 50, "accuracy": -0.5, "textUsed": "x"},
        {"userId": "a", "wpm": 10, "cpm": 50, "accuracy": 90, "textUsed": ""},
        {"userId": "a", "wpm": 10, "cpm": 50, "accuracy": 90, "textUsed": "x", "challengeType": "sprint"},
        {"userId": "a", "wpm": 10, "cpm": 50, "accuracy": 90, "textUsed": "x", "errors": "typo"},
        {"userId": "a", "wpm": float("inf"), "cpm": 50, "accuracy": 90, "textUsed": "x"},
        {"userId": "a", "wpm": 10, "cpm": 50, "accuracy": float("nan"), "textUsed": "x"},
    ])
    def test_rejects_bad_payloads(self, payload):
        with pytest.raises(InvalidInputError):
            ProgressSubmission.from_payload(payload)


class TestUserAccount:
    def test_document_round_trip_keeps_history(self):
        test = TypingTestResult(
            wpm=70, cpm=350, accuracy=97, text_used="some text", difficulty="hard",
            test_date=datetime.datetime(2026, 3, 1), test_duration=1.7,
            challenge_type="combo", category="coding", errors=["teh"],
        )
        account = UserAccount(username="a", email="a@example.com", password="hash",
                              first_name="A", last_name="B", progress=[test], highest_wpm=70)
        doc = account.to_document()
        doc["_id"] = ObjectId()

        restored = UserAccount.from_document(doc)
        assert restored.progress == [test]
        assert restored.highest_wpm == 70
        assert restored.id == doc["_id"]

    def test_public_dict_hides_credentials(self):
        account = UserAccount(
            id=ObjectId(), username="a", email="a@example.com", password="hash",
            first_name="A", last_name="B", reset_password_token="f" * 40,
            reset_password_expires=datetime.datetime(2026, 3, 1, 10, 0),
            created_at=datetime.datetime(2026, 1, 1),
        )
        public = account.to_public_dict()

        assert "password" not in public
        assert "resetPasswordToken" not in public
        assert "resetPasswordExpires" not in public
        assert public["id"] == str(account.id)
        assert public["createdAt"] == "2026-01-01T00:00:00"
        assert public["leaderboards"] == {"global": 0.0, "regional": 0.0}
