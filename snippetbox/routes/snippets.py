from flask import Blueprint, abort, current_app, flash, redirect, url_for

from snippetbox.core.exceptions import NotFoundError
from snippetbox.core.forms import SnippetCreateForm
from snippetbox.middleware.security import require_auth

snippets_bp = Blueprint('snippets', __name__)

# ids outside the INTEGER column range cannot name a row
MAX_SNIPPET_ID = 2**31 - 1


@snippets_bp.route('/view/<int:snippet_id>', methods=['GET'])
def view(snippet_id):
    if snippet_id < 1 or snippet_id > MAX_SNIPPET_ID:
        abort(404)

    try:
        snippet = current_app.snippets.get(snippet_id)
    except NotFoundError:
        abort(404)

    return current_app.template_cache.render('view.html', snippet=snippet)


@snippets_bp.route('/create', methods=['GET'])
@require_auth
def create():
    form = SnippetCreateForm(expires=365)
    return current_app.template_cache.render('create.html', form=form)


@snippets_bp.route('/create', methods=['POST'])
@require_auth
def create_post():
    form = SnippetCreateForm()
    if not form.validate():
        return current_app.template_cache.render('create.html', status=422, form=form)

    snippet_id = current_app.snippets.insert(form.title.data, form.content.data, form.expires.data)
    current_app.logger.info(f"Snippet {snippet_id} created")

    flash('Snippet successfully created!')
    return redirect(url_for('snippets.view', snippet_id=snippet_id), code=303)
