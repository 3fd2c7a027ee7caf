"""
Unit tests for upload validation, storage and the address form validator.
"""

from io import BytesIO

import pytest
from werkzeug.datastructures import FileStorage

from core.exceptions import UploadValidationError
from modules.addresses import cities_for, validate_address_form
from modules.uploads import (
    parse_tags,
    sanitize_text,
    store_model_file,
    validate_model_file,
    validate_model_metadata,
)

MAX_SIZE = 50 * 1024 * 1024


def _file(name="bracket.stl", content=b"solid bracket\nendsolid bracket\n"):
    return FileStorage(stream=BytesIO(content), filename=name)


# Tests

class TestValidateModelFile:
    """Presence, format and size checks."""

    def test_missing_file_is_rejected(self):
        with pytest.raises(UploadValidationError, match="Please select a file to upload."):
            validate_model_file(None, MAX_SIZE)

    def test_empty_filename_is_rejected(self):
        with pytest.raises(UploadValidationError):
            validate_model_file(_file(name=""), MAX_SIZE)

    @pytest.mark.parametrize("name", ["a.stl", "b.OBJ", "c.stp", "d.step", "e.igs", "f.IGES"])
    def test_supported_formats_are_accepted(self, name):
        validate_model_file(_file(name=name), MAX_SIZE)

    @pytest.mark.parametrize("name", ["model.pdf", "model.glb", "model", "stl"])
    def test_unsupported_formats_are_rejected(self, name):
        with pytest.raises(UploadValidationError) as exc_info:
            validate_model_file(_file(name=name), MAX_SIZE)

        assert exc_info.value.message.startswith("Unsupported file format.")
        assert exc_info.value.field == "file"

    def test_oversized_file_is_rejected(self):
        with pytest.raises(UploadValidationError, match="File size exceeds 1MB limit."):
            validate_model_file(_file(content=b"x" * (1024 * 1024 + 1)), 1024 * 1024)

    def test_size_check_leaves_stream_position(self):
        upload = _file()
        validate_model_file(upload, MAX_SIZE)
        assert upload.stream.tell() == 0


class TestStoreModelFile:
    def test_file_is_saved_with_timestamp_prefix(self, tmp_path):
        stored = store_model_file(_file(name="my bracket.stl"), tmp_path / "uploads")

        assert stored["original_filename"] == "my_bracket.stl"
        assert stored["stored_filename"].endswith("_my_bracket.stl")
        assert (tmp_path / "uploads" / stored["stored_filename"]).read_bytes().startswith(b"solid")


class TestValidateModelMetadata:
    """Full-upload form fields."""

    @pytest.fixture
    def form(self):
        return {
            "title": "Cable clip",
            "description": "Clip for 6mm cables",
            "category": "gadget",
            "tags": "Desk, cable, desk, ",
            "license": "cc-by-sa",
            "allowDerivatives": "on",
        }

    def test_valid_form(self, form):
        metadata = validate_model_metadata(form)

        assert metadata["title"] == "Cable clip"
        assert metadata["tags"] == ["desk", "cable"]
        assert metadata["license"] == "cc-by-sa"
        assert metadata["allow_derivatives"] is True
        assert metadata["allow_commercial_use"] is False

    @pytest.mark.parametrize("field", ["title", "description", "category"])
    def test_required_fields(self, form, field):
        form[field] = ""

        with pytest.raises(UploadValidationError) as exc_info:
            validate_model_metadata(form)

        assert exc_info.value.field == field

    def test_unknown_category_is_rejected(self, form):
        form["category"] = "weapons"
        with pytest.raises(UploadValidationError, match="valid category"):
            validate_model_metadata(form)

    def test_unknown_license_is_rejected(self, form):
        form["license"] = "gpl"
        with pytest.raises(UploadValidationError, match="valid license"):
            validate_model_metadata(form)

    def test_missing_license_defaults_to_cc_by(self, form):
        del form["license"]
        assert validate_model_metadata(form)["license"] == "cc-by"

    def test_html_is_stripped_from_text(self, form):
        form["title"] = "<script>alert(1)</script>Clip"
        assert "<script>" not in validate_model_metadata(form)["title"]


class TestTextHelpers:
    def test_sanitize_truncates(self):
        assert sanitize_text("  abcdef  ", max_length=3) == "abc"

    def test_sanitize_empty(self):
        assert sanitize_text(None) == ""

    def test_parse_tags_caps_count(self):
        assert len(parse_tags(",".join(f"t{i}" for i in range(20)))) == 10


class TestAddressForm:
    """Delivery/profile address form validation."""

    @pytest.fixture
    def form(self):
        return {
            "name": "Asha",
            "line1": "12 MG Road",
            "line2": "",
            "state": "Karnataka",
            "city": "Bangalore",
            "zip_code": "560001",
        }

    def test_valid_form(self, form):
        fields, errors = validate_address_form(form)

        assert errors == {}
        assert fields["line2"] is None
        assert fields["zip_code"] == "560001"

    @pytest.mark.parametrize("field", ["name", "line1", "state", "city", "zip_code"])
    def test_required_fields(self, form, field):
        form[field] = "  "
        _, errors = validate_address_form(form)
        assert field in errors

    @pytest.mark.parametrize("zip_code", ["56000", "5600011", "56000a", "560 01"])
    def test_zip_code_must_be_six_digits(self, form, zip_code):
        form["zip_code"] = zip_code
        _, errors = validate_address_form(form)
        assert errors["zip_code"] == "ZIP code must be 6 digits"

    def test_unknown_state_is_rejected(self, form):
        form["state"] = "Atlantis"
        _, errors = validate_address_form(form)
        assert "state" in errors

    def test_city_suggestions(self):
        assert "Pune" in cities_for("Maharashtra")
        assert cities_for("Goa") == []
