"""
Model upload validation and storage.

Two flows share this module:
    quick print  - file only, private catalogue entry, straight to print specs
    full upload  - file plus metadata, published to the public catalogue
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import bleach
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from core.exceptions import UploadValidationError
from logging_config import get_logger


logger = get_logger(__name__)

SUPPORTED_FORMATS = ("stl", "obj", "stp", "step", "igs", "iges")
LICENSES = {
    "cc-by": "Creative Commons Attribution",
    "cc-by-sa": "Creative Commons Attribution-ShareAlike",
    "cc-by-nc": "Creative Commons Attribution-NonCommercial",
    "cc0": "Public Domain (CC0)",
}
UPLOAD_CATEGORIES = ("decoration", "art", "figurine", "gadget", "tool")

MAX_FILENAME_LENGTH = 255
MAX_TITLE_LENGTH = 120
MAX_DESCRIPTION_LENGTH = 2000
MAX_TAGS = 10


def sanitize_text(text: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Sanitize user input text to prevent XSS and injection attacks.

    Args:
        text: Raw input text
        max_length: Optional maximum length to enforce

    Returns:
        Sanitized text safe for storage and display
    """
    if not text:
        return ""

    text = text.strip()
    text = bleach.clean(text, tags=[], strip=True)

    if max_length and len(text) > max_length:
        text = text[:max_length]

    return text


def file_extension(filename: str) -> str:
    return filename.rsplit(".", 1)[1].lower() if "." in filename else ""


def validate_model_file(file: Optional[FileStorage], max_size: int) -> None:
    """
    Check that a model file was chosen, has a supported extension and fits the size cap.

    Raises:
        UploadValidationError: With a user-facing message
    """
    if file is None or not file.filename:
        raise UploadValidationError("Please select a file to upload.", "file")

    if file_extension(file.filename) not in SUPPORTED_FORMATS:
        raise UploadValidationError(
            f"Unsupported file format. Please upload {', '.join(SUPPORTED_FORMATS)} files.",
            "file",
        )

    if len(file.filename) > MAX_FILENAME_LENGTH:
        raise UploadValidationError(
            f"Filename too long. Maximum {MAX_FILENAME_LENGTH} characters.", "file"
        )

    size = _stream_size(file)
    if size > max_size:
        raise UploadValidationError(
            f"File size exceeds {max_size // (1024 * 1024)}MB limit.", "file"
        )


def _stream_size(file: FileStorage) -> int:
    stream = file.stream
    position = stream.tell()
    stream.seek(0, 2)
    size = stream.tell()
    stream.seek(position)
    return size


def validate_model_metadata(form: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate and sanitize the full-upload metadata form.

    Returns:
        Clean metadata: title, description, category, tags, license,
        allow_derivatives, allow_commercial_use

    Raises:
        UploadValidationError: On the first missing or invalid field
    """
    title = sanitize_text(form.get("title"), MAX_TITLE_LENGTH)
    if not title:
        raise UploadValidationError("Please enter a title for your model.", "title")

    description = sanitize_text(form.get("description"), MAX_DESCRIPTION_LENGTH)
    if not description:
        raise UploadValidationError("Please enter a description for your model.", "description")

    category = form.get("category", "")
    if not category:
        raise UploadValidationError("Please select a category for your model.", "category")
    if category not in UPLOAD_CATEGORIES:
        raise UploadValidationError("Please select a valid category.", "category")

    license_id = form.get("license") or "cc-by"
    if license_id not in LICENSES:
        raise UploadValidationError("Please select a valid license.", "license")

    return {
        "title": title,
        "description": description,
        "category": category,
        "tags": parse_tags(form.get("tags", "")),
        "license": license_id,
        "allow_derivatives": _checkbox(form, "allowDerivatives"),
        "allow_commercial_use": _checkbox(form, "allowCommercialUse"),
    }


def parse_tags(raw: str) -> List[str]:
    """Comma-separated tags, sanitized, lowercased, de-duplicated in order."""
    tags: List[str] = []
    for part in (raw or "").split(","):
        tag = sanitize_text(part, 30).lower()
        if tag and tag not in tags:
            tags.append(tag)
    return tags[:MAX_TAGS]


def _checkbox(form: Dict[str, Any], name: str) -> bool:
    return str(form.get(name, "")).lower() in ("on", "true", "1", "yes")


def store_model_file(file: FileStorage, upload_folder: Path) -> Dict[str, str]:
    """
    Save an already-validated model file under a timestamped, collision-free name.

    Returns:
        original_filename, stored_filename, stored_path
    """
    upload_folder.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    safe_name = secure_filename(file.filename) or f"model.{file_extension(file.filename)}"
    stored_name = f"{timestamp}_{uuid.uuid4().hex[:8]}_{safe_name}"
    stored_path = upload_folder / stored_name

    logger.info(f"Saving uploaded model file: {stored_name}")
    file.save(stored_path)

    return {
        "original_filename": safe_name,
        "stored_filename": stored_name,
        "stored_path": str(stored_path),
    }
