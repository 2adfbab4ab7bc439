from flask import Blueprint, current_app, flash, redirect, session, url_for

from snippetbox.core.exceptions import DuplicateEmailError, InvalidCredentialsError
from snippetbox.core.forms import UserLoginForm, UserSignupForm
from snippetbox.extensions import limiter
from snippetbox.middleware.security import SESSION_REDIRECT_KEY, SESSION_USER_KEY, require_auth

auth_bp = Blueprint('auth', __name__)


def renew_session_token():
    """Issue a new session id, keeping the data, whenever privileges change"""
    current_app.session_interface.regenerate(session)


@auth_bp.route('/signup', methods=['GET'])
def signup():
    return current_app.template_cache.render('signup.html', form=UserSignupForm())


@auth_bp.route('/signup', methods=['POST'])
def signup_post():
    form = UserSignupForm()
    if not form.validate():
        return current_app.template_cache.render('signup.html', status=422, form=form)

    try:
        current_app.users.insert(form.name.data, form.email.data, form.password.data)
    except DuplicateEmailError:
        form.add_error('Email address is already in use', field='email')
        return current_app.template_cache.render('signup.html', status=422, form=form)

    flash('Your signup was successful. Please log in.')
    return redirect(url_for('auth.login'), code=303)


@auth_bp.route('/login', methods=['GET'])
def login():
    return current_app.template_cache.render('login.html', form=UserLoginForm())


@auth_bp.route('/login', methods=['POST'])
@limiter.limit(lambda: current_app.config['LOGIN_RATE_LIMIT'])
def login_post():
    form = UserLoginForm()
    if not form.validate():
        return current_app.template_cache.render('login.html', status=422, form=form)

    try:
        user_id = current_app.users.authenticate(form.email.data, form.password.data)
    except InvalidCredentialsError:
        current_app.logger.info("Failed login attempt")
        form.add_error('Email or password is incorrect')
        return current_app.template_cache.render('login.html', status=422, form=form)

    renew_session_token()
    session[SESSION_USER_KEY] = user_id
    current_app.logger.info(f"User {user_id} logged in")

    redirect_path = session.pop(SESSION_REDIRECT_KEY, None)
    return redirect(redirect_path or url_for('snippets.create'), code=303)


@auth_bp.route('/logout', methods=['POST'])
@require_auth
def logout():
    renew_session_token()
    session.pop(SESSION_USER_KEY, None)

    flash("You've been logged out successfully!")
    return redirect(url_for('main.home'), code=303)
