from flask import Blueprint, current_app, flash, g, redirect, url_for

from snippetbox.core.exceptions import InvalidCredentialsError, NotFoundError
from snippetbox.core.forms import AccountPasswordUpdateForm
from snippetbox.middleware.security import require_auth

account_bp = Blueprint('account', __name__)


@account_bp.route('/view', methods=['GET'])
@require_auth
def view():
    try:
        user = current_app.users.get(g.user_id)
    except NotFoundError:
        return redirect(url_for('auth.login'), code=303)

    return current_app.template_cache.render('account.html', user=user)


@account_bp.route('/password/update', methods=['GET'])
@require_auth
def password_update():
    form = AccountPasswordUpdateForm()
    return current_app.template_cache.render('password.html', form=form)


@account_bp.route('/password/update', methods=['POST'])
@require_auth
def password_update_post():
    form = AccountPasswordUpdateForm()
    if not form.validate():
        return current_app.template_cache.render('password.html', status=422, form=form)

    try:
        current_app.users.password_update(
            g.user_id, form.current_password.data, form.new_password.data
        )
    except InvalidCredentialsError:
        form.add_error('Current password is incorrect', field='current_password')
        return current_app.template_cache.render('password.html', status=422, form=form)

    flash('Your password has been updated!')
    return redirect(url_for('account.view'), code=303)
