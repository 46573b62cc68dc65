"""
Activity Logger Module for the Typing Test Server

This module provides structured logging for user actions, server responses,
and account events (test submissions, logins, password resets).
"""

import logging
import json
import os
from datetime import datetime
from typing import Dict, Any, Optional
from pathlib import Path

from .helpers import get_user_identity


# Keys whose values never reach the log files
SENSITIVE_KEYS = {'password', 'confirmPassword', 'token', 'resetPasswordToken', 'resetPasswordExpires'}


class ActivityLogger:
    """
    Centralized logging system for the typing test server.

    Features:
    - User action tracking with IP identification
    - Server response logging with sensitive fields masked
    - Account event logging (progress, login, password reset)
    - JSON structured logs for easy parsing
    """

    def __init__(self, log_dir: Optional[str] = None, level: str = 'INFO'):
        self.log_dir = Path(log_dir or os.getenv('LOG_DIR', 'logs'))
        self.level = level
        self._logger = None

    def configure(self, log_dir: str, level: str = 'INFO') -> None:
        """Point the logger at a new directory/level and rebuild its handlers."""
        self.log_dir = Path(log_dir)
        self.level = level
        self._logger = self._setup_logger()

    @property
    def logger(self) -> logging.Logger:
        if self._logger is None:
            self._logger = self._setup_logger()
        return self._logger

    @property
    def log_file(self) -> Path:
        return self.log_dir / f"activity_log_{datetime.now().strftime('%Y-%m-%d')}.log"

    def _setup_logger(self) -> logging.Logger:
        """Setup the activity logger with file and console handlers."""
        self.log_dir.mkdir(parents=True, exist_ok=True)

        logger = logging.getLogger('typespeed')
        logger.setLevel(getattr(logging, str(self.level).upper(), logging.INFO))

        # Prevent duplicate handlers
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
        file_handler.setLevel(logging.INFO)

        # Console only shows warnings and errors
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)

        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

        logger.addHandler(file_handler)
        logger.addHandler(console_handler)

        return logger

    def _create_log_entry(self,
                          event_type: str,
                          action: str,
                          user_info: Dict[str, str],
                          details: Dict[str, Any]) -> str:
        """Create a structured log entry."""
        log_entry = {
            'timestamp': datetime.now().isoformat(),
            'event_type': event_type,
            'action': action,
            'user': user_info,
            'details': details
        }
        return json.dumps(log_entry, ensure_ascii=False, default=str)

    def log_user_action(self,
                        request,
                        action: str,
                        user_id: Optional[str] = None,
                        **kwargs):
        """
        Log user actions with full context.

        Args:
            request: Flask request object
            action: Type of action (e.g., 'create_user', 'add_progress', 'login')
            user_id: Account identifier if known
            **kwargs: Additional details to log
        """
        details = {
            'user_id': user_id,
            'endpoint': request.endpoint,
            'method': request.method,
            'url': request.url,
            **self._sanitize(kwargs)
        }

        log_message = self._create_log_entry('USER_ACTION', action, get_user_identity(request), details)
        self.logger.info(log_message)

    def log_server_response(self,
                            request,
                            action: str,
                            success: bool,
                            response_data: Dict[str, Any],
                            user_id: Optional[str] = None,
                            **kwargs):
        """
        Log server responses with full context.

        Args:
            request: Flask request object
            action: Action that was performed
            success: Whether the action succeeded
            response_data: Data being returned to client
            user_id: Account identifier if known
            **kwargs: Additional details to log
        """
        details = {
            'user_id': user_id,
            'success': success,
            'response_size': len(str(response_data)),
            'response_data': self._sanitize(response_data),
            **kwargs
        }

        event_type = 'SERVER_RESPONSE_SUCCESS' if success else 'SERVER_RESPONSE_ERROR'
        log_message = self._create_log_entry(event_type, action, get_user_identity(request), details)

        if success:
            self.logger.info(log_message)
        else:
            self.logger.error(log_message)

    def log_account_event(self, user_id: Optional[str], event: str, **kwargs):
        """
        Log account events that are not tied to a request (or outlive it).

        Args:
            user_id: Account identifier
            event: Event name (e.g., 'test_recorded', 'difficulty_changed', 'reset_requested')
            **kwargs: Additional event details
        """
        details = {'user_id': user_id, **self._sanitize(kwargs)}
        log_message = self._create_log_entry('ACCOUNT_EVENT', event, {'user_ip': 'system'}, details)
        self.logger.info(log_message)

    def log_error(self,
                  request,
                  error: Exception,
                  action: str,
                  user_id: Optional[str] = None):
        """Log errors with full context."""
        details = {
            'user_id': user_id,
            'error_type': type(error).__name__,
            'error_message': str(error),
            'action': action
        }

        log_message = self._create_log_entry('ERROR', action, get_user_identity(request), details)
        self.logger.error(log_message)

    def _sanitize(self, data: Any) -> Any:
        """Mask sensitive fields and shrink test histories."""
        if not isinstance(data, dict):
            return {'data_type': type(data).__name__}

        sanitized = {}
        for key, value in data.items():
            if key in SENSITIVE_KEYS:
                sanitized[key] = '***'
            elif key in ('progress', 'tests') and isinstance(value, list):
                sanitized[f'{key}_count'] = len(value)
            elif isinstance(value, dict):
                sanitized[key] = self._sanitize(value)
            else:
                sanitized[key] = value
        return sanitized


# Global logger instance
activity_logger = ActivityLogger()
