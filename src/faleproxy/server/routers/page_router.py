import logging
from flask import Blueprint, render_template, current_app

logger = logging.getLogger(__name__)

# Blueprint for handling HTML page rendering
page_router = Blueprint('page_router', __name__)


@page_router.route('/')
def index():
    """
    Renders the viewer: a URL form and the frame the proxied page is written into.
    """
    return render_template(
        'index.html',
        substitute_word=current_app.config.get('SUBSTITUTE_WORD', "Fale"),
    )
