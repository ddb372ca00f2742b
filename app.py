from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from datetime import datetime

# Load environment variables
from dotenv import load_dotenv
load_dotenv()

from utils.security_utils import get_env_variable
from utils.security_middleware import SecurityMiddleware
from utils.db_utils import db_manager
from utils.logging_utils import app_logger, log_info, log_error

from blueprints.outline_api_routes import outline_api_bp

VERSION = '1.0.0'


def create_app(db_path=None, testing=False):
    """Build the outline service: ordered sequences per course, module and chapter."""
    app = Flask(__name__)
    CORS(app)  # Enable CORS for all routes

    app.config['SECRET_KEY'] = get_env_variable('SECRET_KEY', 'course-outline-secret-key')
    app.config['TESTING'] = testing

    SecurityMiddleware(app)

    if db_path:
        db_manager.configure(db_path)
    db_manager.initialize_database()

    app.register_blueprint(outline_api_bp)

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({
            'status': 'healthy',
            'timestamp': datetime.now().isoformat(),
            'version': VERSION
        })

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'error': e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        log_error(app_logger, "Unhandled error", error=str(e), error_type=type(e).__name__)
        return jsonify({'error': 'Internal server error'}), 500

    log_info(app_logger, "Outline service ready", db_path=db_manager.db_path)
    return app


if __name__ == '__main__':
    app = create_app()
    port = int(get_env_variable('PORT', '5000'))
    app.run(host='0.0.0.0', port=port, debug=get_env_variable('FLASK_ENV') == 'development')
