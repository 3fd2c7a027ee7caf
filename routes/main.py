"""
Main routes (home, catalogue).

Landing page and the browsable catalogue of public models.
"""

from flask import Blueprint, current_app, render_template, request

from modules.catalog import CATEGORIES, SORT_OPTIONS
from routes.context import current_user_id

main_bp = Blueprint("main", __name__)

FEATURED_COUNT = 3


@main_bp.route("/")
def index():
    """Home page with the most printed models."""
    catalog = current_app.config["CATALOG"]
    featured = catalog.browse(sort="prints", viewer_id=current_user_id())[:FEATURED_COUNT]
    return render_template("index.html", featured=featured)


@main_bp.route("/catalogue", methods=["GET"])
def catalogue():
    """
    Browse public models.

    Query args:
        category: Category id ('all' for no filter)
        q: Search text (title, description, creator)
        sort: newest, oldest, popular or prints
    """
    category = request.args.get("category", "all")
    query = request.args.get("q", "").strip()
    sort = request.args.get("sort", "newest")

    models = current_app.config["CATALOG"].browse(
        category=category,
        query=query,
        sort=sort,
        viewer_id=current_user_id(),
    )

    return render_template(
        "catalogue.html",
        models=models,
        categories=CATEGORIES,
        sort_options=SORT_OPTIONS,
        selected_category=category,
        selected_sort=sort,
        query=query,
    )
