"""
Flask extension instances, created here and initialized in the app factory.

Keeping them out of app.py lets blueprints and stores import them without
circular imports.
"""

from flask_bcrypt import Bcrypt
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_session import Session
from flask_sqlalchemy import SQLAlchemy
from flask_wtf.csrf import CSRFProtect

db = SQLAlchemy()

migrate = Migrate()

# bcrypt rounds come from BCRYPT_LOG_ROUNDS (12 in production)
bcrypt = Bcrypt()

# Validates the anti-forgery token on every POST/PUT/PATCH/DELETE
csrf = CSRFProtect()

# Server-side sessions; the backend is chosen by SESSION_TYPE
sess = Session()

limiter = Limiter(key_func=get_remote_address)
