from flask import Blueprint, current_app

main_bp = Blueprint('main', __name__)


@main_bp.route('/', methods=['GET'])
def home():
    snippets = current_app.snippets.latest()
    return current_app.template_cache.render('home.html', snippets=snippets)


@main_bp.route('/about', methods=['GET'])
def about():
    return current_app.template_cache.render('about.html')


@main_bp.route('/ping', methods=['GET'])
def ping():
    return 'OK', 200, {'Content-Type': 'text/plain; charset=utf-8'}
