"""
Model upload routes.

Two ways to upload a model file:
- Quick print: file only; becomes a private catalogue entry and goes
  straight to print specifications
- Full upload: file plus title, description, category, tags and licence;
  published to the public catalogue
"""

from datetime import date
from pathlib import Path

from flask import (
    Blueprint,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)

from core.exceptions import UploadValidationError
from logging_config import get_logger
from models.catalog import PrintModel
from modules.uploads import (
    LICENSES,
    SUPPORTED_FORMATS,
    UPLOAD_CATEGORIES,
    store_model_file,
    validate_model_file,
    validate_model_metadata,
)
from routes.context import current_user, current_user_id, login_required


# Module logger
logger = get_logger(__name__)

upload_bp = Blueprint("upload", __name__)


def _store(file) -> dict:
    config = current_app.config
    validate_model_file(file, config["MAX_MODEL_FILE_SIZE"])
    return store_model_file(file, Path(config["UPLOAD_FOLDER"]))


def _new_model(stored: dict, **fields) -> PrintModel:
    config = current_app.config
    user = current_user()
    return PrintModel(
        id="",
        creator=user.display_name if user else "",
        created_at=date.today().isoformat(),
        file_url=url_for("model.uploaded_file", filename=stored["stored_filename"]),
        thumbnail_url="",
        base_price=config["QUICK_PRINT_BASE_PRICE"],
        base_print_time=config["QUICK_PRINT_BASE_TIME"],
        owner_id=current_user_id(),
        **fields,
    )


@upload_bp.route("/upload", methods=["GET"])
def upload():
    """Upload chooser: quick print or full upload."""
    return render_template("upload.html", formats=SUPPORTED_FORMATS)


@upload_bp.route("/upload/quick-print", methods=["GET", "POST"])
@login_required
def quick_print():
    """
    Handle quick-print upload.

    GET: Display file picker
    POST: Validate and store the file, add a private model, redirect to print specifications
    """
    if request.method == "POST":
        try:
            stored = _store(request.files.get("file"))
        except UploadValidationError as e:
            flash(e.message, "error")
            return redirect(url_for("upload.quick_print"))
        except Exception as e:
            logger.error(f"Quick print upload failed: {e}", exc_info=True)
            flash(f"Failed to upload file: {str(e)}", "error")
            return redirect(url_for("upload.quick_print"))

        model = current_app.config["CATALOG"].add(_new_model(
            stored,
            title=Path(stored["original_filename"]).stem or "Uploaded model",
            description="Quick print upload",
            is_public=False,
        ))

        flash("File uploaded successfully.", "success")
        return redirect(url_for("specifications.print_specifications", model_id=model.id))

    return render_template(
        "quick_print.html",
        formats=SUPPORTED_FORMATS,
        max_size_mb=current_app.config["MAX_MODEL_FILE_SIZE"] // (1024 * 1024),
    )


@upload_bp.route("/upload/full-upload", methods=["GET", "POST"])
@login_required
def full_upload():
    """
    Handle full model upload.

    GET: Display the upload form
    POST: Validate metadata and file, publish the model, redirect to its preview
    """
    if request.method == "POST":
        try:
            metadata = validate_model_metadata(request.form)
            stored = _store(request.files.get("file"))
        except UploadValidationError as e:
            flash(e.message, "error")
            return render_template(
                "full_upload.html",
                form=request.form,
                error_field=e.field,
                categories=UPLOAD_CATEGORIES,
                licenses=LICENSES,
                formats=SUPPORTED_FORMATS,
            ), 400
        except Exception as e:
            logger.error(f"Full upload failed: {e}", exc_info=True)
            flash(f"Failed to upload file: {str(e)}", "error")
            return redirect(url_for("upload.full_upload"))

        model = current_app.config["CATALOG"].add(_new_model(stored, is_public=True, **metadata))

        flash("Model published successfully.", "success")
        return redirect(url_for("model.preview", model_id=model.id))

    return render_template(
        "full_upload.html",
        form={},
        error_field=None,
        categories=UPLOAD_CATEGORIES,
        licenses=LICENSES,
        formats=SUPPORTED_FORMATS,
    )
