from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv
import os
import sys
from pathlib import Path

# Load environment variables BEFORE importing routes
backend_dir = Path(__file__).parent
env_path = backend_dir / '.env'
# Only load .env file if it exists (for local development)
if env_path.exists():
    load_dotenv(dotenv_path=env_path)
    print(f"Loaded environment from {env_path}")

# Also try to load from root directory if not found in backend
root_env_path = backend_dir.parent / '.env'
if root_env_path.exists():
    load_dotenv(dotenv_path=root_env_path)
    print(f"Loaded environment from {root_env_path}")

if not env_path.exists() and not root_env_path.exists():
    # In production, environment variables are set directly
    load_dotenv()

from api.routes import create_api, init_workbook_manager


def create_app(workbook_manager=None, cors_origins: str = None) -> Flask:
    """Build the Flask app; without a manager one is created from the environment."""
    app = Flask(__name__)

    # CORS configuration - require explicit origins (no wildcard default)
    if cors_origins is None:
        cors_origins = os.getenv('CORS_ORIGINS', '')
    if not cors_origins:
        # In development, allow localhost if CORS_ORIGINS not set
        if '--dev' in sys.argv or os.getenv('FLASK_ENV') == 'development':
            cors_origins = 'http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173'
            print("WARNING: Using default CORS origins for development. Set CORS_ORIGINS in production!")
        else:
            raise ValueError("CORS_ORIGINS environment variable must be set in production")

    CORS(app, origins=cors_origins.split(','))

    if workbook_manager is None:
        workbook_manager = init_workbook_manager()
    app.register_blueprint(create_api(workbook_manager), url_prefix='/api')

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return {
            'status': 'ok',
            'message': 'Backend is running',
            'workbookManager': workbook_manager is not None,
        }, 200

    @app.route('/', methods=['GET'])
    def root():
        """Root endpoint"""
        return {'status': 'ok', 'message': 'Classroom Workbook Admin API'}, 200

    return app


if __name__ == '__main__':
    app = create_app()
    port = int(os.getenv('PORT', 5000))
    debug = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'
    app.run(host='0.0.0.0', port=port, debug=debug)
