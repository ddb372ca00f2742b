from flask import request, jsonify
import os

from utils.logging_utils import security_logger, log_warning

SUSPICIOUS_AGENTS = ('sqlmap', 'nikto', 'nessus', 'burp')
SUSPICIOUS_PATTERNS = ('../', 'union select', 'drop table', '<script')


class SecurityMiddleware:
    def __init__(self, app=None):
        self.app = app
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Register the request hooks on the Flask app."""
        app.before_request(self.before_request)
        app.after_request(self.after_request)

        app.extensions['security_middleware'] = self

    def before_request(self):
        """Reject requests that look like scanner traffic."""
        if self.is_suspicious_request():
            log_warning(security_logger, "Blocked suspicious request",
                        path=request.path, remote_addr=request.remote_addr)
            return jsonify({'error': 'Forbidden'}), 403

    def after_request(self, response):
        """Process after each request."""
        return self.ensure_security_headers(response)

    def ensure_security_headers(self, response):
        """Ensure security headers are present in the response."""
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['X-Content-Type-Options'] = 'nosniff'

        # The service only answers JSON, nothing should load from it
        response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

        # Ordered sequences change with every reorder
        if request.path.startswith('/api/'):
            response.headers['Cache-Control'] = 'no-store'

        if not os.environ.get('FLASK_ENV') == 'development':
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response

    def is_suspicious_request(self):
        """Check if the current request looks suspicious."""
        user_agent = request.headers.get('User-Agent', '').lower()
        if any(agent in user_agent for agent in SUSPICIOUS_AGENTS):
            return True

        full_url = request.url.lower()
        return any(pattern in full_url for pattern in SUSPICIOUS_PATTERNS)
