"""
Typing Speed Test Server Application Package

REST backend for a typing-speed-test application: accounts, typing test
history, aggregate statistics and password recovery.
"""

from flask import Flask, jsonify, request
from flask_cors import CORS
from pymongo.errors import DuplicateKeyError, PyMongoError
from .config import Config
from .errors import ServiceError


def _action_name():
    endpoint = request.endpoint or 'unknown'
    return endpoint.rsplit('.', 1)[-1]


def register_error_handlers(app):
    """Translate service and store errors into JSON error responses."""
    from .utils.activity_logger import activity_logger

    @app.errorhandler(ServiceError)
    def handle_service_error(error):
        action = _action_name()
        error_response = {
            'success': False,
            'error': error.message
        }
        activity_logger.log_error(request, error, action)
        activity_logger.log_server_response(request, action, False, error_response,
                                            status_code=error.status_code)
        return jsonify(error_response), error.status_code

    @app.errorhandler(DuplicateKeyError)
    def handle_duplicate_key(error):
        action = _action_name()
        error_response = {
            'success': False,
            'error': 'Email or username already in use'
        }
        activity_logger.log_error(request, error, action)
        return jsonify(error_response), 400

    @app.errorhandler(PyMongoError)
    def handle_store_error(error):
        action = _action_name()
        activity_logger.log_error(request, error, action)
        return jsonify({
            'success': False,
            'error': 'Database error'
        }), 500

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({
            'success': False,
            'error': 'Not found'
        }), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify({
            'success': False,
            'error': 'Method not allowed'
        }), 405

    @app.errorhandler(500)
    def handle_internal_error(error):
        original = getattr(error, 'original_exception', None) or error
        activity_logger.log_error(request, original, _action_name())
        return jsonify({
            'success': False,
            'error': 'Something went wrong'
        }), 500


def create_app(config_class=Config, mongo_client=None):
    """
    Application factory pattern for creating Flask app instances.

    Args:
        config_class: Configuration class to use
        mongo_client: Optional MongoDB client to use instead of connecting to MONGO_URI

    Returns:
        Flask application instance with all services initialized
    """
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize logging and extensions
    from .utils.activity_logger import activity_logger
    activity_logger.configure(app.config['LOG_DIR'], app.config['LOG_LEVEL'])
    CORS(app)

    # Initialize services
    from .services import initialize_services
    initialize_services(app.config, mongo_client)

    # Register blueprints
    from .controllers.user_controller import users_bp
    app.register_blueprint(users_bp, url_prefix='/api/users')

    @app.route('/')
    def index():
        return 'Server is up and running!'

    register_error_handlers(app)

    return app
