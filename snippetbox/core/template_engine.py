# core/template_engine.py
"""
Page template cache for server-rendered responses

Every template under pages/ is compiled once when the application starts and
kept in memory, keyed by page name ("home.html", "view.html", ...). Handlers
render through the cache so no request parses templates from disk, and a
missing page is reported as an error instead of silently falling back to a
disk lookup.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import Flask, Response, g, render_template
from jinja2 import Environment, StrictUndefined, Template
from jinja2.exceptions import TemplateError

logger = logging.getLogger(__name__)

PAGES_PREFIX = 'pages/'


class TemplateCacheError(LookupError):
    """Requested page is not in the cache"""


def human_date(value: Optional[datetime]) -> str:
    """Format a timestamp as '02 Jan 2024 at 15:04' in UTC; empty for None"""
    if value is None:
        return ''
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime('%d %b %Y at %H:%M')


class TemplateCache:
    """
    In-memory mapping from page name to compiled template

    The cache is built from the application's Jinja environment so pages share
    its filters, globals (url_for, csrf_token) and context processors.
    """

    def __init__(self, env: Environment):
        self.env = env
        self._pages: Dict[str, Template] = {}

    def load(self) -> 'TemplateCache':
        start = time.perf_counter()
        names = self.env.list_templates(filter_func=lambda name: name.startswith(PAGES_PREFIX))
        for name in names:
            try:
                self._pages[name[len(PAGES_PREFIX):]] = self.env.get_template(name)
            except TemplateError:
                logger.error(f"Failed to compile template {name}")
                raise

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"Template cache loaded {len(self._pages)} pages in {elapsed_ms:.1f}ms")
        return self

    def __contains__(self, page: str) -> bool:
        return page in self._pages

    def pages(self):
        return sorted(self._pages)

    def get(self, page: str) -> Template:
        try:
            return self._pages[page]
        except KeyError:
            raise TemplateCacheError(f"the template {page} does not exist") from None

    def render(self, page: str, status: int = 200, **data: Any) -> Response:
        """
        Render a cached page into a response

        The body is rendered completely before the response is built, so a
        template failure turns into a 500 instead of a half-written page.
        """
        body = render_template(self.get(page), **data)
        return Response(body, status=status, mimetype='text/html')


def template_context() -> Dict[str, Any]:
    """Values every page can rely on"""
    return {
        'current_year': datetime.now(timezone.utc).year,
        'is_authenticated': g.get('is_authenticated', False),
    }


def init_template_engine(app: Flask) -> TemplateCache:
    # fail on undefined variables instead of rendering blanks
    app.jinja_env.undefined = StrictUndefined
    app.jinja_env.filters['human_date'] = human_date
    app.context_processor(template_context)

    cache = TemplateCache(app.jinja_env).load()
    app.template_cache = cache
    return cache
