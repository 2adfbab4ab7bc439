# app.py
"""
Flask application factory and command-line entry point for Snippetbox

create_app() wires configuration, logging, the database pool, server-side
sessions, CSRF protection, the page template cache and the stores onto one
Flask application object. Request processing runs, outermost first:

    error handlers (recovery)  ->  request logging  ->  session load/save
    ->  CSRF verification  ->  authentication  ->  route handler
    ->  security headers on the way out
"""

import argparse
import logging
import os
import sys
import time
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import click
import redis
from cachelib import SimpleCache
from flask import Flask, Response, jsonify, request
from flask_wtf.csrf import CSRFError
from sqlalchemy import event, text
from sqlalchemy.pool import QueuePool
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from snippetbox.config import CONFIGS, default_addr, normalize_dsn
from snippetbox.core.snippets import SnippetModel
from snippetbox.core.template_engine import init_template_engine
from snippetbox.core.users import UserModel
from snippetbox.extensions import bcrypt, csrf, db, limiter, migrate, sess
from snippetbox.middleware.security import authenticate, log_request, security_headers
from snippetbox.routes.account import account_bp
from snippetbox.routes.auth import auth_bp
from snippetbox.routes.main import main_bp
from snippetbox.routes.snippets import snippets_bp

DEMO_SNIPPETS = [
    ('An old silent pond',
     'An old silent pond...\nA frog jumps into the pond,\nsplash! Silence again.\n\n– Matsuo Bashō',
     365),
    ('Over the wintry forest',
     'Over the wintry\nforest, winds howl in rage\nwith no leaves to blow.\n\n– Natsume Soseki',
     365),
    ('First autumn morning',
     "First autumn morning\nthe mirror I stare into\nshows my father's face.\n\n– Murakami Kijo",
     7),
]


def setup_logging(app: Flask) -> None:
    """
    Send application logs to stdout

    app.logger is the 'snippetbox' logger, so module loggers
    (snippetbox.core.users, ...) share its handler.
    """
    app.logger.handlers.clear()

    formatter = logging.Formatter(
        fmt='%(asctime)s %(levelname)-8s %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    log_level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.setLevel(log_level)
    app.logger.addHandler(handler)
    app.logger.setLevel(log_level)

    if not app.debug:
        logging.getLogger('werkzeug').setLevel(logging.WARNING)


def configure_database(app: Flask) -> None:
    """
    Configure the SQLAlchemy engine

    Pool checkout, connection setup and every statement are bounded by
    DB_TIMEOUT seconds; a timeout surfaces as DataAccessError and a 500.
    """
    database_url = app.config['SQLALCHEMY_DATABASE_URI']
    timeout = app.config['DB_TIMEOUT']

    engine_options: Dict[str, Any] = {'pool_pre_ping': True}
    if not database_url.startswith('sqlite'):
        engine_options.update({
            'poolclass': QueuePool,
            'pool_size': app.config['DB_POOL_SIZE'],
            'max_overflow': app.config['DB_MAX_OVERFLOW'],
            'pool_timeout': timeout,
            'pool_recycle': 3600,
        })

    if database_url.startswith('postgresql'):
        engine_options['connect_args'] = {
            'connect_timeout': timeout,
            'options': f'-c statement_timeout={timeout * 1000}',
            'application_name': 'snippetbox',
        }

    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = engine_options
    db.init_app(app)
    migrate.init_app(app, db)

    threshold = app.config['SLOW_QUERY_THRESHOLD']

    with app.app_context():
        engine = db.engine

        @event.listens_for(engine, 'before_cursor_execute')
        def receive_before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            context._query_start_time = time.perf_counter()

        @event.listens_for(engine, 'after_cursor_execute')
        def receive_after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            total = time.perf_counter() - context._query_start_time
            if total > threshold:
                app.logger.warning(f"Slow query ({total:.2f}s): {statement[:100]}...")

    app.logger.info(f"Database configured: {database_url.split('@')[-1]}")


def configure_sessions(app: Flask) -> None:
    backend = app.config['SESSION_BACKEND']

    if backend == 'sqlalchemy':
        app.config['SESSION_TYPE'] = 'sqlalchemy'
        app.config['SESSION_SQLALCHEMY'] = db
    elif backend == 'redis':
        app.config['SESSION_TYPE'] = 'redis'
        app.config['SESSION_REDIS'] = redis.Redis.from_url(
            app.config['SESSION_REDIS_URL'],
            socket_connect_timeout=app.config['DB_TIMEOUT'],
            socket_timeout=app.config['DB_TIMEOUT'],
        )
    elif backend == 'cachelib':
        # process-local store, for tests and single-process development
        app.config['SESSION_TYPE'] = 'cachelib'
        app.config['SESSION_CACHELIB'] = SimpleCache()
    else:
        raise ValueError(f"Unknown session backend: {backend}")

    sess.init_app(app)
    app.logger.info(f"Sessions stored in {backend}")


def configure_security(app: Flask) -> None:
    bcrypt.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    if app.config.get('BEHIND_PROXY'):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)


def register_blueprints(app: Flask) -> None:
    app.register_blueprint(main_bp)
    app.register_blueprint(snippets_bp, url_prefix='/snippet')
    app.register_blueprint(auth_bp, url_prefix='/user')
    app.register_blueprint(account_bp, url_prefix='/account')


def configure_error_handlers(app: Flask) -> None:
    """
    Map failures to responses

    HTTP errors (404, 405, CSRF failures, rate limits) become plain status
    text. Any other exception is the recovery path: logged with its stack
    trace and answered with an opaque 500 that closes the connection.
    """
    @app.errorhandler(CSRFError)
    def csrf_error(error):
        app.logger.warning(f"CSRF check failed from {request.remote_addr}: {error.description}")
        return client_error(error)

    @app.errorhandler(HTTPException)
    def client_error(error):
        # routing redirects are HTTPExceptions too
        if error.code is None or error.code < 400:
            return error
        response = error.get_response()
        response.set_data(error.name)
        response.content_type = 'text/plain; charset=utf-8'
        return response

    @app.errorhandler(Exception)
    def server_error(error):
        app.logger.error(
            f"Unhandled exception: {error} method={request.method} uri={request.path}",
            exc_info=True,
        )
        body = traceback.format_exc() if app.debug else 'Internal Server Error'
        response = Response(body, status=500, mimetype='text/plain')
        response.headers['Connection'] = 'close'
        return response


def configure_health_checks(app: Flask) -> None:
    if not app.debug:
        return

    @app.route('/debug/vars')
    def debug_vars():
        """Diagnostics, only registered in debug mode"""
        return jsonify({
            'version': app.config.get('VERSION'),
            'uptime_seconds': (datetime.now(timezone.utc) - app.config['START_TIME']).total_seconds(),
            'database_pool': db.engine.pool.status(),
            'session_backend': app.config['SESSION_BACKEND'],
            'templates': app.template_cache.pages(),
        })


def configure_request_middleware(app: Flask) -> None:
    @app.before_request
    def before_request():
        if request.endpoint == 'static':
            return None
        return authenticate()

    @app.after_request
    def after_request(response):
        return security_headers(response)


def register_commands(app: Flask) -> None:
    @app.cli.command('seed-db')
    def seed_db():
        """Insert the demo snippets"""
        for title, content, days in DEMO_SNIPPETS:
            snippet_id = app.snippets.insert(title, content, days)
            click.echo(f"Inserted snippet {snippet_id}: {title}")


def create_app(config_name: Optional[str] = None,
               overrides: Optional[Dict[str, Any]] = None,
               snippets=None,
               users=None) -> Flask:
    """
    Flask application factory

    Args:
        config_name: 'development', 'testing' or 'production' (default from FLASK_ENV)
        overrides: config values that win over the profile and the environment
        snippets, users: replacement stores; the database-backed ones otherwise

    Returns:
        Configured Flask application instance
    """
    app = Flask('snippetbox')

    config_name = config_name or os.environ.get('FLASK_ENV', 'production')
    if config_name not in CONFIGS:
        raise ValueError(f"Unknown configuration: {config_name}")
    app.config.from_object(CONFIGS[config_name])
    if overrides:
        app.config.update(overrides)
    app.config['SQLALCHEMY_DATABASE_URI'] = normalize_dsn(app.config['SQLALCHEMY_DATABASE_URI'])
    app.config['START_TIME'] = datetime.now(timezone.utc)

    setup_logging(app)
    app.logger.info(f"Starting Snippetbox in {config_name} mode")

    # request logging sits outside session handling and CSRF checks
    app.before_request(log_request)

    configure_database(app)
    configure_sessions(app)
    configure_security(app)

    app.snippets = snippets if snippets is not None else SnippetModel()
    app.users = users if users is not None else UserModel()

    init_template_engine(app)
    register_blueprints(app)
    configure_error_handlers(app)
    configure_health_checks(app)
    configure_request_middleware(app)
    register_commands(app)

    # in production the schema comes from migrations
    if config_name == 'development':
        with app.app_context():
            db.create_all()
            app.logger.info("Database tables created (development mode)")

    return app


def split_addr(addr: str) -> Tuple[str, int]:
    """':4000' -> ('0.0.0.0', 4000), 'localhost:8080' -> ('localhost', 8080)"""
    host, sep, port = addr.rpartition(':')
    if not sep or not port.isdigit():
        raise ValueError(f"invalid listen address: {addr!r}")
    return host or '0.0.0.0', int(port)


def ping_database(app: Flask) -> None:
    with app.app_context():
        db.session.execute(text('SELECT 1'))
        db.session.remove()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog='snippetbox', description='Snippetbox web server')
    parser.add_argument('-addr', '--addr', default=default_addr(), help='HTTP network address')
    parser.add_argument('-dsn', '--dsn', default=None, help='database connection string')
    parser.add_argument('-debug', '--debug', action='store_true', help='enable debug mode')
    parser.add_argument('-tls', '--tls', action='store_true', help='serve HTTPS')
    parser.add_argument('-cert', '--cert', default='./tls/cert.pem', help='TLS certificate file')
    parser.add_argument('-key', '--key', default='./tls/key.pem', help='TLS private key file')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    overrides: Dict[str, Any] = {}
    if args.dsn:
        overrides['SQLALCHEMY_DATABASE_URI'] = args.dsn
    if args.debug:
        overrides['DEBUG'] = True
        overrides['LOG_LEVEL'] = 'DEBUG'
    if not args.tls:
        overrides['SESSION_COOKIE_SECURE'] = False

    try:
        host, port = split_addr(args.addr)
        app = create_app(overrides=overrides)
        ping_database(app)
    except Exception as e:
        print(f"snippetbox: startup failed: {e}", file=sys.stderr)
        return 1

    ssl_context = None
    if args.tls:
        for path in (args.cert, args.key):
            if not os.path.isfile(path):
                app.logger.error(f"TLS file not found: {path}")
                return 1
        ssl_context = (args.cert, args.key)

    app.logger.info(f"Starting server addr={args.addr} tls={args.tls}")
    try:
        app.run(host=host, port=port, ssl_context=ssl_context,
                threaded=True, use_reloader=False, use_debugger=False)
    except OSError as e:
        app.logger.error(f"Server error: {e}")
        return 1

    app.logger.info("Server stopped")
    return 0


if __name__ == '__main__':
    sys.exit(main())
