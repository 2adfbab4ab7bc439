# core/snippets.py
"""
Data access for the snippets table
"""

import logging
from datetime import timedelta
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from snippetbox.core.database_models import Snippet, utcnow
from snippetbox.core.exceptions import DataAccessError, NotFoundError
from snippetbox.extensions import db

logger = logging.getLogger(__name__)

LATEST_LIMIT = 10


class SnippetModel:
    """
    Snippet store backed by the application database

    Any object exposing insert/get/latest with the same semantics can stand in
    for this class (the handler tests use an in-memory fake).
    """

    @property
    def session(self):
        return db.session

    def insert(self, title: str, content: str, expires_days: int) -> int:
        """Insert a snippet that expires `expires_days` days from now and return its id"""
        now = utcnow()
        snippet = Snippet(
            title=title,
            content=content,
            created=now,
            expires=now + timedelta(days=expires_days),
        )
        try:
            self.session.add(snippet)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DataAccessError('inserting snippet', {'title': title}) from e

        logger.debug(f"Inserted snippet {snippet.id} expiring in {expires_days} days")
        return snippet.id

    def get(self, snippet_id: int) -> Snippet:
        """Return the unexpired snippet with this id or raise NotFoundError"""
        stmt = select(Snippet).where(
            Snippet.id == snippet_id,
            Snippet.expires > utcnow(),
        )
        try:
            snippet = self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DataAccessError('fetching snippet', {'id': snippet_id}) from e

        if snippet is None:
            raise NotFoundError('snippet', {'id': snippet_id})
        return snippet

    def latest(self) -> List[Snippet]:
        """Up to ten unexpired snippets, newest first"""
        stmt = (
            select(Snippet)
            .where(Snippet.expires > utcnow())
            .order_by(Snippet.id.desc())
            .limit(LATEST_LIMIT)
        )
        try:
            return list(self.session.execute(stmt).scalars())
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DataAccessError('listing latest snippets') from e
