from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text, UniqueConstraint

from snippetbox.extensions import db


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the TIMESTAMP columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Snippet(db.Model):
    __tablename__ = 'snippets'

    id = Column(Integer, primary_key=True)
    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    created = Column(DateTime, nullable=False, default=utcnow, index=True)
    expires = Column(DateTime, nullable=False)

    def __repr__(self):
        return f'<Snippet {self.id} {self.title!r}>'


class User(db.Model):
    __tablename__ = 'users'
    __table_args__ = (
        UniqueConstraint('email', name='users_uc_email'),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    hashed_password = Column(String(60), nullable=False)  # bcrypt output is always 60 chars
    created = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f'<User {self.id} {self.email}>'
