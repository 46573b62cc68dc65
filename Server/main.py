"""
Typing Speed Test Server - Main Entry Point

This is the main entry point for the typing test server.
It checks the configuration, builds the Flask application and starts it.
"""

import os
from typespeed import create_app
from typespeed.config import config
from typespeed.utils.activity_logger import activity_logger


def main():
    """Main function to initialize services and start the server."""
    config_class = config[os.getenv('APP_ENV', 'default')]

    if not config_class.MONGO_URI or not config_class.JWT_SECRET:
        print("✗ MongoDB URI or JWT Secret not configured")
        raise SystemExit(1)

    try:
        print("Creating Flask application...")
        app = create_app(config_class)
        print("✓ Flask application and services initialized successfully")

        activity_logger.logger.info("Typing Test Server starting")

        print(f"\nStarting Typing Test Server on {config_class.HOST}:{config_class.PORT}")
        print(f"Debug mode: {config_class.DEBUG}")
        print(f"Email backend: {config_class.EMAIL_BACKEND}")
        print("=" * 50)

        app.run(host=config_class.HOST, port=config_class.PORT, debug=config_class.DEBUG)

    except KeyboardInterrupt:
        print("\nServer shutting down...")
        activity_logger.logger.info("Typing Test Server shutting down (KeyboardInterrupt)")
    except Exception as e:
        print(f"Error starting server: {e}")
        activity_logger.logger.error(f"Error starting server: {e}")
        raise


if __name__ == '__main__':
    main()
