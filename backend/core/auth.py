import os
import sys
import time
from functools import wraps
from flask import request, jsonify
import jwt
from datetime import datetime, timedelta, timezone
from core.logger import logger

# JWT Configuration
# Require JWT_SECRET_KEY in production (like CORS_ORIGINS)
# Only allow random generation in development mode
_jwt_secret_env = os.getenv('JWT_SECRET_KEY')
if not _jwt_secret_env:
    is_dev = '--dev' in sys.argv or os.getenv('FLASK_ENV') == 'development'
    if is_dev:
        _jwt_secret_env = os.urandom(32).hex()
        logger.warning("JWT_SECRET_KEY not set. Using random key for development. Set JWT_SECRET_KEY in production!")
    else:
        raise ValueError("JWT_SECRET_KEY environment variable must be set in production")
JWT_SECRET_KEY = _jwt_secret_env
JWT_ALGORITHM = 'HS256'
JWT_EXPIRATION_HOURS = 24  # Token expires after 24 hours

# Rate limiting: track failed login attempts
login_attempts = {}  # {ip: {count: int, reset_time: float}}
MAX_LOGIN_ATTEMPTS = 5
LOGIN_WINDOW_SECONDS = 300  # 5 minutes

def get_admin_password():
    """Get admin password from environment variable"""
    return os.getenv('ADMIN_PASSWORD') or ''

def verify_password(password):
    """Verify if provided password matches admin password"""
    admin_password = get_admin_password()
    return bool(admin_password) and password == admin_password

def get_client_ip():
    """Get client IP address for rate limiting"""
    if request.headers.get('X-Forwarded-For'):
        return request.headers.get('X-Forwarded-For').split(',')[0].strip()
    return request.remote_addr or 'unknown'

def check_rate_limit():
    """Check if client has exceeded login attempt rate limit"""
    ip = get_client_ip()
    now = time.time()

    if ip not in login_attempts:
        login_attempts[ip] = {'count': 0, 'reset_time': now + LOGIN_WINDOW_SECONDS}
        return True

    attempt_data = login_attempts[ip]

    # Reset if window expired
    if now > attempt_data['reset_time']:
        attempt_data['count'] = 0
        attempt_data['reset_time'] = now + LOGIN_WINDOW_SECONDS
        return True

    return attempt_data['count'] < MAX_LOGIN_ATTEMPTS

def record_failed_login():
    """Record a failed login attempt"""
    ip = get_client_ip()
    now = time.time()

    if ip not in login_attempts:
        login_attempts[ip] = {'count': 0, 'reset_time': now + LOGIN_WINDOW_SECONDS}

    login_attempts[ip]['count'] += 1

def clear_login_attempts(ip):
    """Clear login attempts for an IP after successful login"""
    if ip in login_attempts:
        del login_attempts[ip]

def create_jwt_token():
    """Create a JWT token for authenticated admin"""
    now = datetime.now(timezone.utc)
    payload = {
        'user_id': 'admin',
        'role': 'admin',
        'iat': now,
        'exp': now + timedelta(hours=JWT_EXPIRATION_HOURS)
    }
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)

def verify_jwt_token(token):
    """Verify and decode a JWT token"""
    try:
        return jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None

def require_auth(f):
    """Decorator to require admin authentication using JWT"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get('Authorization')

        if not auth_header:
            return jsonify({'error': 'Authorization header required'}), 401

        # Expecting "Bearer <token>" format
        scheme, _, token = auth_header.partition(' ')
        if scheme != 'Bearer' or not token:
            return jsonify({'error': 'Invalid authorization format. Expected "Bearer <token>"'}), 401

        if not verify_jwt_token(token):
            return jsonify({'error': 'Invalid or expired token'}), 401

        return f(*args, **kwargs)

    return decorated_function
