# wsgi.py
"""Production WSGI entry point, e.g. `gunicorn wsgi:application`"""

from snippetbox.app import create_app

application = create_app()
