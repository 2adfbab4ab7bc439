# middleware/security.py
"""
Security Middleware for Request Processing

Hooks registered by the app factory, in order:
    log_request      before_request  method, URL and remote address of every request
    authenticate     before_request  resolve the session user into g.is_authenticated
    security_headers after_request   fixed header set on every response

require_auth is the per-route gate for pages that need a logged-in user.
"""

import logging
from functools import wraps

from flask import current_app, flash, g, redirect, request, session, url_for

logger = logging.getLogger(__name__)

SESSION_USER_KEY = 'authenticated_user_id'
SESSION_REDIRECT_KEY = 'redirect_path_after_login'


def security_headers(response):
    """Add security headers to all responses"""
    for name, value in current_app.config['SECURITY_HEADERS'].items():
        response.headers[name] = value
    response.headers['Server'] = current_app.config['SERVER_HEADER']

    return response


def log_request():
    current_app.logger.info(
        f"received request ip={request.remote_addr} proto={request.environ.get('SERVER_PROTOCOL')} "
        f"method={request.method} uri={request.full_path.rstrip('?')}"
    )


def authenticate():
    """
    Check the user id held in the session against the user store

    A session can outlive its user (deleted account, restored database), so the
    id alone is not trusted.
    """
    g.is_authenticated = False
    user_id = session.get(SESSION_USER_KEY)
    if user_id is None:
        return

    if current_app.users.exists(user_id):
        g.is_authenticated = True
        g.user_id = user_id
    else:
        logger.info(f"Session references unknown user {user_id}")


def require_auth(f):
    """Decorator to require authentication"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not g.get('is_authenticated', False):
            if request.method == 'GET':
                session[SESSION_REDIRECT_KEY] = request.full_path.rstrip('?')
            flash('Please log in to access this page.')
            return redirect(url_for('auth.login'), code=303)

        response = current_app.make_response(f(*args, **kwargs))
        # pages that require authentication must not sit in shared caches
        response.headers['Cache-Control'] = 'no-store'
        return response
    return decorated_function
