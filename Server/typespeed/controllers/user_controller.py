"""
User Controller

Handles all user-related HTTP endpoints: accounts, typing progress and
password recovery. Service errors propagate to the application's error
handler, which logs them and turns them into JSON responses.
"""

from flask import Blueprint, request, jsonify
from ..models.typing_test import ProgressSubmission
from ..services.account_service import get_account_service
from ..services.progress_service import get_progress_service
from ..utils.activity_logger import activity_logger
from ..utils.helpers import to_json_value

users_bp = Blueprint('users', __name__)


def _service_unavailable(name):
    return jsonify({
        'success': False,
        'error': f'{name} service unavailable'
    }), 500


def _body_required():
    return jsonify({
        'success': False,
        'error': 'Request body is required'
    }), 400


@users_bp.route('/create', methods=['POST'])
def create_user():
    """Register a new user."""
    account_service = get_account_service()
    if not account_service:
        return _service_unavailable('Account')

    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return _body_required()

    activity_logger.log_user_action(request, 'create_user',
                                    username=data.get('username'), email=data.get('email'))

    account = account_service.register_user(data)

    response_data = {
        'success': True,
        'message': 'User created successfully',
        'user': account.summary()
    }
    activity_logger.log_server_response(request, 'create_user', True, response_data, str(account.id))
    return jsonify(response_data), 201


@users_bp.route('/login', methods=['POST'])
def login():
    """Login a user and return a JWT token."""
    account_service = get_account_service()
    if not account_service:
        return _service_unavailable('Account')

    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return _body_required()

    activity_logger.log_user_action(request, 'login', email=data.get('email'))

    result = account_service.login_user(data.get('email'), data.get('password'))

    response_data = {'success': True, **result}
    # Don't log the token
    activity_logger.log_server_response(request, 'login', True,
                                        {'success': True, 'user': result['user']},
                                        result['user']['id'])
    return jsonify(response_data)


@users_bp.route('/progress', methods=['POST'])
def add_progress():
    """Record a typing test result for a user."""
    progress_service = get_progress_service()
    if not progress_service:
        return _service_unavailable('Progress')

    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return _body_required()

    activity_logger.log_user_action(request, 'add_progress', data.get('userId'),
                                    wpm=data.get('wpm'), accuracy=data.get('accuracy'))

    submission = ProgressSubmission.from_payload(data)
    account = progress_service.add_progress(submission)

    response_data = {
        'success': True,
        'message': 'Typing test progress added successfully!',
        'user': account.to_public_dict()
    }
    activity_logger.log_server_response(
        request, 'add_progress', True, response_data, submission.user_id,
        tests_completed=account.typing_stats.tests_completed,
        difficulty=account.typing_stats.difficulty
    )
    return jsonify(response_data)


@users_bp.route('/<user_id>', methods=['GET'])
def get_user_data(user_id):
    """Get a user's profile and test history (password excluded)."""
    account_service = get_account_service()
    if not account_service:
        return _service_unavailable('Account')

    activity_logger.log_user_action(request, 'get_user_data', user_id)

    account = account_service.get_user(user_id)

    response_data = {
        'success': True,
        'user': account.to_public_dict()
    }
    activity_logger.log_server_response(request, 'get_user_data', True, response_data, user_id)
    return jsonify(response_data)


@users_bp.route('/<user_id>', methods=['PUT'])
def update_profile(user_id):
    """Apply a partial profile update."""
    account_service = get_account_service()
    if not account_service:
        return _service_unavailable('Account')

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _body_required()

    activity_logger.log_user_action(request, 'update_profile', user_id, fields=sorted(data))

    account = account_service.update_profile(user_id, data)

    response_data = {
        'success': True,
        'message': 'Profile updated successfully!',
        'user': account.to_public_dict()
    }
    activity_logger.log_server_response(request, 'update_profile', True, response_data, user_id)
    return jsonify(response_data)


@users_bp.route('/<user_id>/bestTest', methods=['GET'])
def get_best_test(user_id):
    """Get the user's highest-WPM test."""
    progress_service = get_progress_service()
    if not progress_service:
        return _service_unavailable('Progress')

    activity_logger.log_user_action(request, 'get_best_test', user_id)

    test = progress_service.get_best_test(user_id)

    response_data = {
        'success': True,
        'test': to_json_value(test.to_document())
    }
    activity_logger.log_server_response(request, 'get_best_test', True, response_data, user_id)
    return jsonify(response_data)


@users_bp.route('/<user_id>/allTests', methods=['GET'])
def get_all_tests(user_id):
    """Get every typing test taken by the user."""
    progress_service = get_progress_service()
    if not progress_service:
        return _service_unavailable('Progress')

    activity_logger.log_user_action(request, 'get_all_tests', user_id)

    tests = progress_service.get_all_tests(user_id)

    response_data = {
        'success': True,
        'tests': [to_json_value(test.to_document()) for test in tests]
    }
    activity_logger.log_server_response(request, 'get_all_tests', True, response_data, user_id)
    return jsonify(response_data)


@users_bp.route('/forgot-password', methods=['POST'])
def forgot_password():
    """Send a password reset link to the account's email."""
    account_service = get_account_service()
    if not account_service:
        return _service_unavailable('Account')

    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return _body_required()

    activity_logger.log_user_action(request, 'forgot_password', email=data.get('email'))

    account_service.request_password_reset(data.get('email'))

    response_data = {
        'success': True,
        'message': 'Password reset email sent successfully!'
    }
    activity_logger.log_server_response(request, 'forgot_password', True, response_data)
    return jsonify(response_data)


@users_bp.route('/reset-password/<token>', methods=['POST'])
def reset_password(token):
    """Redeem a reset token and set a new password."""
    account_service = get_account_service()
    if not account_service:
        return _service_unavailable('Account')

    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return _body_required()

    activity_logger.log_user_action(request, 'reset_password')

    account = account_service.reset_password(token, data.get('password'), data.get('confirmPassword'))

    response_data = {
        'success': True,
        'message': 'Password updated successfully!'
    }
    activity_logger.log_server_response(request, 'reset_password', True, response_data, str(account.id))
    return jsonify(response_data)
