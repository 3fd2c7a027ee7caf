"""
Model preview routes.

Preview page for a single catalogue model, file download, and serving of
uploaded model files to the in-browser viewer.
"""

from flask import (
    Blueprint,
    abort,
    current_app,
    flash,
    redirect,
    render_template,
    send_from_directory,
    url_for,
)

from core.exceptions import ModelNotFoundError
from logging_config import get_logger
from modules.uploads import LICENSES
from routes.context import current_user_id


# Module logger
logger = get_logger(__name__)

model_bp = Blueprint("model", __name__)

UPLOADS_URL_PREFIX = "/uploads/"


@model_bp.route("/model/<model_id>", methods=["GET"])
def preview(model_id: str):
    """Model preview page with viewer, details and a 'Print this' action."""
    try:
        model = current_app.config["CATALOG"].get(model_id, viewer_id=current_user_id())
    except ModelNotFoundError:
        flash("Model not found.", "warning")
        return redirect(url_for("main.catalogue"))

    return render_template(
        "model.html",
        model=model,
        license_name=LICENSES.get(model.license, model.license),
    )


@model_bp.route("/model/<model_id>/download", methods=["GET"])
def download(model_id: str):
    """
    Download the model file.

    Increments the model's download counter, then serves uploaded files
    directly and redirects to the static URL for curated ones.
    """
    catalog = current_app.config["CATALOG"]
    try:
        model = catalog.get(model_id, viewer_id=current_user_id())
    except ModelNotFoundError:
        flash("Model not found.", "warning")
        return redirect(url_for("main.catalogue"))

    catalog.record_download(model.id)
    logger.info(f"Model {model.id} downloaded ({model.download_count + 1} total)")

    if model.file_url.startswith(UPLOADS_URL_PREFIX):
        filename = model.file_url[len(UPLOADS_URL_PREFIX):]
        return send_from_directory(
            current_app.config["UPLOAD_FOLDER"], filename, as_attachment=True
        )
    return redirect(model.file_url)


@model_bp.route("/uploads/<path:filename>", methods=["GET"])
def uploaded_file(filename: str):
    """
    Serve a stored model upload to the viewer.

    Only files behind a model the visitor can see are served; a private
    quick-print file is visible to its owner alone.
    """
    file_url = url_for("model.uploaded_file", filename=filename)
    model = current_app.config["CATALOG"].find_by_file_url(file_url, viewer_id=current_user_id())
    if model is None:
        abort(404)
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)
