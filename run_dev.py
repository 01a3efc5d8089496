#!/usr/bin/env python3
"""Development server runner for AffiFlow."""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent


def setup_environment():
    """Load .env and default the Flask development settings."""
    env_file = PROJECT_ROOT / '.env'
    if env_file.exists():
        load_dotenv(env_file)
        print(f"Loaded environment from {env_file}")
    else:
        print(f"No .env file found at {env_file}, using defaults")

    os.environ.setdefault('FLASK_APP', 'affiflow:create_app')
    os.environ.setdefault('FLASK_ENV', 'development')
    os.environ.setdefault('FLASK_DEBUG', '1')
    os.environ.setdefault('AUTO_CREATE_TABLES', '1')


def run_development_server():
    from affiflow import create_app

    app = create_app()

    print("\n" + "=" * 60)
    print("Starting AffiFlow development server")
    print("=" * 60)
    print(f"Database: {app.config['SQLALCHEMY_DATABASE_URI']}")
    print("\nAccess the application at http://localhost:5000")
    print("\nTo create a demo account, run in another terminal:")
    print("   flask user create --email demo@example.com --password Password123")
    print("   flask workspace create --owner demo@example.com --name 'Demo Store'")
    print("=" * 60)

    app.run(host='0.0.0.0', port=5000, debug=True, use_reloader=True)


def main():
    setup_environment()
    try:
        run_development_server()
    except KeyboardInterrupt:
        print("\nDevelopment server stopped")
        sys.exit(0)


if __name__ == "__main__":
    main()
