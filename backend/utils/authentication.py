from datetime import datetime, timedelta
from functools import wraps

import jwt
from flask import current_app, g, jsonify, request

from config.logging import get_logger
from models.user import User

log = get_logger()

TOKEN_ALGORITHM = "HS256"
DEFAULT_TOKEN_LIFETIME = timedelta(hours=12)


def generate_access_token(user, expires_in=DEFAULT_TOKEN_LIFETIME):
    """Issue a signed access token for a user"""
    payload = {
        'user_id': user.user_id,
        'email': user.email,
        'exp': datetime.utcnow() + expires_in,
        'iat': datetime.utcnow()
    }
    return jwt.encode(payload, current_app.config['SECRET_KEY'], algorithm=TOKEN_ALGORITHM)


def _extract_token():
    # Authorization header, then cookie, then query string
    auth_header = request.headers.get('Authorization')
    if auth_header:
        parts = auth_header.split(' ')
        if len(parts) != 2 or parts[0].lower() != 'bearer':
            return None, 'Invalid token format'
        return parts[1], None

    token = request.cookies.get('access_token') or request.args.get('token')
    return token, None


def jwt_required(f):
    """Decorator to require valid JWT token for protected routes"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        # Skip JWT validation for CORS preflight requests
        if request.method == 'OPTIONS':
            return '', 200

        token, error = _extract_token()
        if error:
            return jsonify({'message': error}), 401
        if not token:
            return jsonify({'message': 'Token is missing'}), 401

        secret_key = current_app.config.get('SECRET_KEY')
        if not secret_key:
            log.error("SECRET_KEY is not configured")
            return jsonify({'message': 'Server configuration error'}), 500

        try:
            data = jwt.decode(token, secret_key, algorithms=[TOKEN_ALGORITHM])
        except jwt.ExpiredSignatureError:
            return jsonify({'message': 'Token has expired'}), 401
        except jwt.InvalidTokenError as e:
            log.warning(f"Invalid token: {str(e)}")
            return jsonify({'message': 'Invalid token'}), 401

        current_user = User.query.filter_by(
            user_id=data.get('user_id'),
            is_deleted=False,
            is_active=True
        ).first()

        if not current_user:
            log.warning(f"User not found or inactive for user_id: {data.get('user_id')}")
            return jsonify({'message': 'User not found or inactive'}), 401

        g.user = {
            'user_id': current_user.user_id,
            'email': current_user.email,
            'full_name': current_user.full_name,
            'role': current_user.role
        }

        return f(*args, **kwargs)

    return decorated_function
