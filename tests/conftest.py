"""
Shared pytest fixtures

Handler and middleware tests run against in-memory fakes of the two stores,
so they need no database. Store tests get a real schema in an in-memory
SQLite database through Flask-SQLAlchemy.
"""

import html
import re
from datetime import datetime, timedelta

import pytest

from snippetbox.app import create_app
from snippetbox.core.database_models import Snippet, User, utcnow
from snippetbox.core.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
)
from snippetbox.extensions import db
from snippetbox.middleware.security import SESSION_USER_KEY

CSRF_TOKEN_RX = re.compile(r"<input type='hidden' name='csrf_token' value='(.+?)'>")

MOCK_CREATED = datetime(2024, 3, 17, 10, 15)


class FakeSnippetModel:
    """In-memory snippet store seeded with one snippet (id 1)"""

    def __init__(self):
        self.snippets = {
            1: Snippet(
                id=1,
                title='An old silent pond',
                content='An old silent pond...',
                created=MOCK_CREATED,
                expires=utcnow() + timedelta(days=365),
            ),
        }

    def insert(self, title, content, expires_days):
        snippet_id = max(self.snippets) + 1
        now = utcnow()
        self.snippets[snippet_id] = Snippet(
            id=snippet_id,
            title=title,
            content=content,
            created=now,
            expires=now + timedelta(days=expires_days),
        )
        return snippet_id

    def get(self, snippet_id):
        snippet = self.snippets.get(snippet_id)
        if snippet is None or snippet.expires <= utcnow():
            raise NotFoundError('snippet')
        return snippet

    def latest(self):
        now = utcnow()
        live = [s for s in self.snippets.values() if s.expires > now]
        return sorted(live, key=lambda s: s.id, reverse=True)[:10]


class FakeUserModel:
    """
    In-memory user store

    User 1 is alice@mail.com / pa$$word; dupe@mail.com is already taken.
    """

    EMAIL = 'alice@mail.com'
    PASSWORD = 'pa$$word'

    def __init__(self):
        self.password = self.PASSWORD
        self.inserted = []

    def insert(self, name, email, password):
        if email == 'dupe@mail.com':
            raise DuplicateEmailError()
        self.inserted.append((name, email))

    def authenticate(self, email, password):
        if email == self.EMAIL and password == self.password:
            return 1
        raise InvalidCredentialsError()

    def exists(self, user_id):
        return user_id == 1

    def get(self, user_id):
        if user_id != 1:
            raise NotFoundError('user')
        return User(id=1, name='Alice', email=self.EMAIL, created=MOCK_CREATED)

    def password_update(self, user_id, current_password, new_password):
        if current_password != self.password:
            raise InvalidCredentialsError()
        self.password = new_password


def extract_csrf_token(body: str) -> str:
    match = CSRF_TOKEN_RX.search(body)
    assert match, 'no csrf token found in body'
    return html.unescape(match.group(1))


@pytest.fixture
def csrf_token_from():
    return extract_csrf_token


@pytest.fixture
def snippets():
    return FakeSnippetModel()


@pytest.fixture
def users():
    return FakeUserModel()


@pytest.fixture
def app(snippets, users):
    return create_app('testing', snippets=snippets, users=users)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(app):
    """Test client whose session belongs to user 1"""
    client = app.test_client()
    with client.session_transaction() as session:
        session[SESSION_USER_KEY] = 1
    return client


@pytest.fixture
def csrf_app(snippets, users):
    return create_app('testing', overrides={'WTF_CSRF_ENABLED': True},
                      snippets=snippets, users=users)


@pytest.fixture
def db_app():
    """Application backed by a fresh in-memory SQLite schema"""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
