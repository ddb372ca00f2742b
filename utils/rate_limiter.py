import time
from functools import wraps
from threading import Lock
from flask import request, jsonify
import hashlib

from utils.logging_utils import security_logger, log_warning


# Simple in-memory rate limiter (per process)
class RateLimiter:
    def __init__(self):
        self.requests = {}
        self.limits = {}
        self.lock = Lock()

    def set_limit(self, key, max_requests, window_seconds):
        """Set rate limit for a key."""
        self.limits[key] = {
            'max_requests': max_requests,
            'window_seconds': window_seconds
        }

    def is_allowed(self, client_key, limit_key):
        """Check if a request is allowed under the window of ``limit_key``."""
        limit = self.limits.get(limit_key)
        if limit is None:
            return True

        now = time.time()
        with self.lock:
            # Remove old requests outside the window
            recent = [
                req_time for req_time in self.requests.get(client_key, [])
                if now - req_time < limit['window_seconds']
            ]
            if len(recent) < limit['max_requests']:
                recent.append(now)
                self.requests[client_key] = recent
                return True
            self.requests[client_key] = recent
            return False

    def reset(self):
        """Forget every recorded request."""
        with self.lock:
            self.requests.clear()

    def get_client_key(self, request_obj):
        """Generate a key based on IP address and endpoint."""
        ip = request_obj.remote_addr or 'unknown'
        endpoint = request_obj.endpoint or 'unknown'
        return hashlib.md5(f"{ip}:{endpoint}".encode()).hexdigest()


# Global rate limiter instance
rate_limiter = RateLimiter()

# Default limits
rate_limiter.set_limit('reorder', 120, 60)  # drag-and-drop saves, debounced client side
rate_limiter.set_limit('api', 300, 60)


def rate_limit(limit_key='api'):
    """Decorator to apply rate limiting to a route."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            client_key = f"{rate_limiter.get_client_key(request)}:{limit_key}"
            if not rate_limiter.is_allowed(client_key, limit_key):
                log_warning(security_logger, "Rate limit exceeded", endpoint=request.endpoint, limit=limit_key)
                return jsonify({'error': 'Rate limit exceeded. Please try again later.'}), 429
            return f(*args, **kwargs)
        return decorated_function
    return decorator
