from snippetbox.middleware.security import SESSION_USER_KEY

EXPECTED_HEADERS = {
    'Content-Security-Policy': "default-src 'self'; style-src 'self' fonts.googleapis.com; font-src fonts.gstatic.com",
    'Referrer-Policy': 'origin-when-cross-origin',
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'deny',
    'X-XSS-Protection': '0',
    'Server': 'Snippetbox',
}


def assert_security_headers(response):
    for name, value in EXPECTED_HEADERS.items():
        assert response.headers.get(name) == value, name


def test_security_headers(client):
    response = client.get('/ping')

    assert response.status_code == 200
    assert response.get_data(as_text=True) == 'OK'
    assert_security_headers(response)


def test_security_headers_on_not_found(client):
    response = client.get('/no/such/page')

    assert response.status_code == 404
    assert_security_headers(response)


def test_recovery_returns_opaque_500(app):
    @app.route('/boom')
    def boom():
        raise RuntimeError('connection pool exhausted')

    response = app.test_client().get('/boom')

    assert response.status_code == 500
    assert response.get_data(as_text=True) == 'Internal Server Error'
    assert response.headers['Connection'] == 'close'
    assert_security_headers(response)


def test_protected_route_redirects_anonymous_user(client):
    response = client.get('/snippet/create')

    assert response.status_code == 303
    assert response.headers['Location'] == '/user/login'


def test_protected_route_disables_caching(auth_client):
    response = auth_client.get('/snippet/create')

    assert response.status_code == 200
    assert response.headers['Cache-Control'] == 'no-store'


def test_session_for_unknown_user_is_anonymous(app):
    client = app.test_client()
    with client.session_transaction() as session:
        session[SESSION_USER_KEY] = 99

    response = client.get('/snippet/create')

    assert response.status_code == 303


def test_navigation_reflects_authentication(client, auth_client):
    anonymous = client.get('/').get_data(as_text=True)
    assert 'Login' in anonymous
    assert 'Logout' not in anonymous

    authenticated = auth_client.get('/').get_data(as_text=True)
    assert 'Logout' in authenticated
    assert 'Create snippet' in authenticated


class TestCSRF:

    def test_post_without_token_is_rejected(self, csrf_app, users):
        response = csrf_app.test_client().post('/user/signup', data={
            'name': 'Bob',
            'email': 'bob@mail.com',
            'password': 'validPa$$word',
        })

        assert response.status_code == 400
        assert users.inserted == []

    def test_post_with_wrong_token_is_rejected(self, csrf_app):
        client = csrf_app.test_client()
        client.get('/user/login')

        response = client.post('/user/login', data={
            'csrf_token': 'not-the-token',
            'email': 'alice@mail.com',
            'password': 'pa$$word',
        })

        assert response.status_code == 400

    def test_post_with_token_from_form(self, csrf_app, users, csrf_token_from):
        client = csrf_app.test_client()
        page = client.get('/user/signup')
        token = csrf_token_from(page.get_data(as_text=True))

        response = client.post('/user/signup', data={
            'csrf_token': token,
            'name': 'Bob',
            'email': 'bob@mail.com',
            'password': 'validPa$$word',
        })

        assert response.status_code == 303
        assert users.inserted == [('Bob', 'bob@mail.com')]


class TestSessionRenewal:

    def login(self, client, csrf_token_from):
        token = csrf_token_from(client.get('/user/login').get_data(as_text=True))
        before = client.get_cookie('session').value

        response = client.post('/user/login', data={
            'csrf_token': token,
            'email': 'alice@mail.com',
            'password': 'pa$$word',
        })
        assert response.status_code == 303
        return before

    def test_login_renews_session_token(self, csrf_app, csrf_token_from):
        client = csrf_app.test_client()

        before = self.login(client, csrf_token_from)

        assert client.get_cookie('session').value != before

    def test_logout_renews_session_token(self, csrf_app, csrf_token_from):
        client = csrf_app.test_client()
        self.login(client, csrf_token_from)
        token = csrf_token_from(client.get('/').get_data(as_text=True))
        before = client.get_cookie('session').value

        response = client.post('/user/logout', data={'csrf_token': token})

        assert response.status_code == 303
        assert client.get_cookie('session').value != before
        assert client.get('/snippet/create').status_code == 303
