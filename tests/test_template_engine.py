from datetime import datetime, timedelta, timezone

import pytest

from snippetbox.core.template_engine import TemplateCacheError, human_date


@pytest.mark.parametrize('value, expected', [
    (datetime(2024, 3, 17, 10, 15), '17 Mar 2024 at 10:15'),
    (None, ''),
    (datetime(2024, 3, 17, 10, 15, tzinfo=timezone(timedelta(hours=1))), '17 Mar 2024 at 09:15'),
])
def test_human_date(value, expected):
    assert human_date(value) == expected


def test_cache_holds_every_page(app):
    cache = app.template_cache

    assert cache.pages() == [
        'about.html',
        'account.html',
        'create.html',
        'home.html',
        'login.html',
        'password.html',
        'signup.html',
        'view.html',
    ]
    assert 'home.html' in cache
    assert 'base.html' not in cache


def test_missing_page(app):
    with pytest.raises(TemplateCacheError, match='the template missing.html does not exist'):
        app.template_cache.get('missing.html')


def test_render_sets_status(app):
    with app.test_request_context('/'):
        response = app.template_cache.render('about.html', status=422)

    assert response.status_code == 422
    assert response.mimetype == 'text/html'
    assert '<h2>About</h2>' in response.get_data(as_text=True)
