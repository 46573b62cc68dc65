"""
Account Service

Handles user accounts: registration, login with lockout, JWT issuing,
profile updates and the password-reset flow, using MongoDB for storage.
"""

import datetime
import hmac
import logging
import secrets
from typing import Any, Dict, Optional

import bcrypt
import jwt
from flask import current_app, render_template
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from ..errors import (
    AccountLockedError, ConflictError, InvalidInputError, InvalidOrExpiredTokenError,
    NotFoundError, PasswordMismatchError, UnauthorizedError
)
from ..models.user import UserAccount
from ..utils.activity_logger import activity_logger
from ..utils.helpers import parse_object_id, utcnow

logger = logging.getLogger(__name__)

# Fields a profile update may touch
PROFILE_FIELDS = ('username', 'firstName', 'lastName', 'age', 'gender', 'country', 'state', 'pincode')
INTEGER_PROFILE_FIELDS = ('age', 'pincode')
REQUIRED_REGISTRATION_FIELDS = ('username', 'email', 'password', 'firstName', 'lastName')


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class AccountService:
    """
    Account service for registration, login, token management and password resets.
    """

    def __init__(self, users_collection, jwt_secret: str, mail_service):
        """
        Initialize the account service.

        Args:
            users_collection: MongoDB users collection
            jwt_secret: Secret key for JWT token generation
            mail_service: MailService used for password-reset emails
        """
        self.users_collection = users_collection
        self.jwt_secret = jwt_secret
        self.mail_service = mail_service

    def hash_password(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password as string
        """
        salt = bcrypt.gensalt(rounds=current_app.config.get('BCRYPT_ROUNDS', 12))
        hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
        return hashed.decode('utf-8')

    def verify_password(self, password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            password: Plain text password
            hashed_password: Stored hashed password

        Returns:
            True if password matches, False otherwise
        """
        try:
            return bcrypt.checkpw(password.encode('utf-8'), hashed_password.encode('utf-8'))
        except ValueError:
            # Stored value is not a bcrypt hash
            return False

    def _find_account(self, user_id: str) -> UserAccount:
        user_oid = parse_object_id(user_id)
        doc = self.users_collection.find_one({'_id': user_oid}) if user_oid else None
        if not doc:
            raise NotFoundError('User not found')
        return UserAccount.from_document(doc)

    def register_user(self, data: Dict[str, Any]) -> UserAccount:
        """
        Register a new user.

        Args:
            data: Request body with username, email, password, firstName, lastName

        Returns:
            The stored UserAccount

        Raises:
            InvalidInputError: If a required field is missing
            ConflictError: If the email or username is taken
        """
        missing = [name for name in REQUIRED_REGISTRATION_FIELDS if _is_blank(data.get(name))]
        if missing:
            raise InvalidInputError(f"Missing required fields: {', '.join(missing)}")

        email = str(data['email']).strip()
        username = str(data['username']).strip()

        if self.users_collection.find_one({'email': email}):
            raise ConflictError('Email already in use')
        if self.users_collection.find_one({'username': username}):
            raise ConflictError('Username already in use')

        account = UserAccount(
            username=username,
            email=email,
            password=self.hash_password(str(data['password'])),
            first_name=str(data['firstName']).strip(),
            last_name=str(data['lastName']).strip(),
            created_at=utcnow(),
        )

        try:
            result = self.users_collection.insert_one(account.to_document())
        except DuplicateKeyError:
            # Lost a race with a concurrent registration
            raise ConflictError('Email or username already in use')

        account.id = result.inserted_id
        activity_logger.log_account_event(str(account.id), 'user_registered', username=username)
        return account

    def _issue_token(self, account: UserAccount) -> str:
        payload = {
            'userId': str(account.id),
            'username': account.username,
            'exp': datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(
                seconds=current_app.config.get('JWT_EXPIRATION_SECONDS', 3600))
        }
        return jwt.encode(payload, self.jwt_secret, algorithm='HS256')

    def _record_failed_login(self, account: UserAccount) -> None:
        """Count a failed attempt and lock the account once the limit is hit."""
        doc = self.users_collection.find_one_and_update(
            {'_id': account.id},
            {'$inc': {'failedLoginAttempts': 1}},
            return_document=ReturnDocument.AFTER
        )
        attempts = (doc or {}).get('failedLoginAttempts', 0)
        max_attempts = current_app.config.get('MAX_FAILED_LOGINS', 5)

        if max_attempts and attempts >= max_attempts:
            lock_until = utcnow() + datetime.timedelta(
                seconds=current_app.config.get('LOCK_DURATION_SECONDS', 900))
            self.users_collection.update_one(
                {'_id': account.id},
                {'$set': {'lockUntil': lock_until, 'failedLoginAttempts': 0}}
            )
            activity_logger.log_account_event(str(account.id), 'account_locked',
                                              lock_until=lock_until.isoformat())

    def login_user(self, email: str, password: str) -> Dict[str, Any]:
        """
        Authenticate a user and generate a JWT token.

        Args:
            email: User's email
            password: User's password

        Returns:
            Dictionary with the token and the user summary

        Raises:
            NotFoundError: Unknown email
            AccountLockedError: Too many recent failed attempts
            UnauthorizedError: Wrong password
        """
        if _is_blank(email) or _is_blank(password):
            raise InvalidInputError('Email and password are required')

        doc = self.users_collection.find_one({'email': str(email).strip()})
        if not doc:
            raise NotFoundError('User not found')

        account = UserAccount.from_document(doc)
        now = utcnow()

        if account.lock_until and account.lock_until > now:
            raise AccountLockedError('Account is temporarily locked due to failed login attempts')

        if not self.verify_password(str(password), account.password):
            self._record_failed_login(account)
            raise UnauthorizedError('Invalid credentials')

        self.users_collection.update_one(
            {'_id': account.id},
            {'$set': {'lastLogin': now, 'failedLoginAttempts': 0, 'lockUntil': None}}
        )

        return {
            'token': self._issue_token(account),
            'user': {
                'id': str(account.id),
                'username': account.username,
                'email': account.email,
            }
        }

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode a JWT token.

        Returns:
            The decoded claims

        Raises:
            UnauthorizedError: If the token is missing, expired or invalid
        """
        if not token:
            raise UnauthorizedError('Token is required')
        try:
            return jwt.decode(token, self.jwt_secret, algorithms=['HS256'])
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError('Token has expired')
        except jwt.InvalidTokenError:
            raise UnauthorizedError('Invalid token')

    def get_user(self, user_id: str) -> UserAccount:
        """Get a user account by id, or raise NotFoundError."""
        return self._find_account(user_id)

    def _coerce_profile_value(self, name: str, value: Any) -> Any:
        if name in INTEGER_PROFILE_FIELDS:
            if isinstance(value, bool):
                raise InvalidInputError(f"'{name}' must be a whole number")
            try:
                number = int(value)
            except (TypeError, ValueError, OverflowError):
                raise InvalidInputError(f"'{name}' must be a whole number")
            if number < 0:
                raise InvalidInputError(f"'{name}' must not be negative")
            return number
        # Anything but a plain string would reach Mongo as a query operator or a nested value
        if not isinstance(value, str):
            raise InvalidInputError(f"'{name}' must be a string")
        return value.strip()

    def update_profile(self, user_id: str, data: Dict[str, Any]) -> UserAccount:
        """
        Apply a sparse profile update.

        Only fields that are present and non-empty overwrite stored values.

        Raises:
            NotFoundError: Unknown user
            ConflictError: Requested username belongs to another account
        """
        account = self._find_account(user_id)

        changes = {}
        for name in PROFILE_FIELDS:
            value = data.get(name)
            if _is_blank(value):
                continue
            changes[name] = self._coerce_profile_value(name, value)

        new_username = changes.get('username')
        if new_username is not None:
            if new_username == account.username:
                del changes['username']
            elif self.users_collection.find_one({'username': new_username, '_id': {'$ne': account.id}}):
                raise ConflictError('Username already in use')

        if not changes:
            return account

        try:
            doc = self.users_collection.find_one_and_update(
                {'_id': account.id},
                {'$set': changes},
                return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError:
            raise ConflictError('Username already in use')

        if not doc:
            raise NotFoundError('User not found')

        activity_logger.log_account_event(str(account.id), 'profile_updated', fields=sorted(changes))
        return UserAccount.from_document(doc)

    def request_password_reset(self, email: str) -> str:
        """
        Issue a reset token for the account with this email and mail the link.

        Returns:
            The generated token

        Raises:
            NotFoundError: If no account has this email
        """
        if _is_blank(email):
            raise InvalidInputError('Email is required')

        token = secrets.token_hex(current_app.config.get('RESET_TOKEN_BYTES', 20))
        expires = utcnow() + datetime.timedelta(
            seconds=current_app.config.get('RESET_TOKEN_TTL_SECONDS', 3600))

        doc = self.users_collection.find_one_and_update(
            {'email': str(email).strip()},
            {'$set': {'resetPasswordToken': token, 'resetPasswordExpires': expires}},
            return_document=ReturnDocument.AFTER
        )
        if not doc:
            raise NotFoundError('No user found with this email address')

        account = UserAccount.from_document(doc)
        reset_link = f"{current_app.config.get('FRONTEND_URL', '').rstrip('/')}/reset-password/{token}"
        html = render_template('password_reset.html', user=account, reset_link=reset_link)

        self.mail_service.send(account.email, 'Password Reset Request', html)
        activity_logger.log_account_event(str(account.id), 'reset_requested', expires=expires.isoformat())

        return token

    def reset_password(self, token: str, password: str, confirm_password: str) -> UserAccount:
        """
        Redeem a reset token and replace the password hash.

        Raises:
            InvalidOrExpiredTokenError: Unknown, already used or expired token
            PasswordMismatchError: password and confirm_password differ
        """
        if _is_blank(token):
            raise InvalidOrExpiredTokenError()

        now = utcnow()
        doc = self.users_collection.find_one({
            'resetPasswordToken': token,
            'resetPasswordExpires': {'$gt': now}
        })
        stored = (doc or {}).get('resetPasswordToken') or ''
        if not doc or not hmac.compare_digest(stored.encode('utf-8'), token.encode('utf-8')):
            raise InvalidOrExpiredTokenError()

        if password != confirm_password:
            raise PasswordMismatchError()
        if _is_blank(password):
            raise InvalidInputError('Password is required')

        # Conditional on token and expiry so a second or late redemption finds nothing
        result = self.users_collection.update_one(
            {'_id': doc['_id'], 'resetPasswordToken': token, 'resetPasswordExpires': {'$gt': utcnow()}},
            {
                '$set': {
                    'password': self.hash_password(str(password)),
                    'failedLoginAttempts': 0,
                    'lockUntil': None,
                },
                '$unset': {'resetPasswordToken': '', 'resetPasswordExpires': ''}
            }
        )
        if result.matched_count == 0:
            raise InvalidOrExpiredTokenError()

        activity_logger.log_account_event(str(doc['_id']), 'password_reset')
        return UserAccount.from_document(doc)


# Global service instance
_account_service = None


def get_account_service() -> Optional[AccountService]:
    """Get the global account service instance."""
    return _account_service


def initialize_account_service(users_collection, jwt_secret: str, mail_service) -> AccountService:
    """Initialize the global account service instance."""
    global _account_service
    _account_service = AccountService(users_collection, jwt_secret, mail_service)
    return _account_service
