"""
Unit tests for the catalogue stored in the catalogue_models table.
"""

import json

import pytest
from sqlalchemy.exc import IntegrityError

from core.database import Database
from core.exceptions import ModelNotFoundError
from models.catalog import PrintModel
from modules.catalog import DEFAULT_MODELS, Catalog, load_catalog


# Fixtures

@pytest.fixture
def catalog(database):
    return load_catalog(database)


def _private_model(owner_id="user-a", file_url="/uploads/20240601120000_ab12cd34_bracket.stl"):
    return PrintModel(
        id="",
        title="bracket",
        description="Quick print upload",
        creator="Asha",
        created_at="2024-06-01",
        file_url=file_url,
        thumbnail_url="",
        base_price=800,
        base_print_time=8,
        owner_id=owner_id,
        is_public=False,
    )


# Tests

class TestLookup:
    """Single-model lookups."""

    def test_builtin_catalogue_is_loaded(self, catalog):
        assert len(catalog) == len(DEFAULT_MODELS)

    def test_get_returns_model(self, catalog):
        model = catalog.get("1")

        assert model.title == "Model 01"
        assert model.base_price == 800
        assert model.base_print_time == 8
        assert model.created_at == "2023-12-01"

    def test_get_unknown_id_raises(self, catalog):
        with pytest.raises(ModelNotFoundError) as exc_info:
            catalog.get("999")

        assert exc_info.value.message == "Model not found"

    def test_private_model_visible_only_to_owner(self, catalog):
        model = catalog.add(_private_model("user-a"))

        assert catalog.get(model.id, viewer_id="user-a").title == "bracket"
        with pytest.raises(ModelNotFoundError):
            catalog.get(model.id, viewer_id="user-b")
        with pytest.raises(ModelNotFoundError):
            catalog.get(model.id)

    def test_find_by_file_url_respects_visibility(self, catalog):
        model = catalog.add(_private_model("user-a"))

        assert catalog.find_by_file_url(model.file_url, viewer_id="user-a").id == model.id
        assert catalog.find_by_file_url(model.file_url, viewer_id="user-b") is None
        assert catalog.find_by_file_url(model.file_url) is None
        assert catalog.find_by_file_url("/uploads/unknown.stl", viewer_id="user-a") is None


class TestBrowse:
    """Filtering, search and sorting."""

    def test_all_category_returns_every_public_model(self, catalog):
        catalog.add(_private_model())
        assert len(catalog.browse()) == len(DEFAULT_MODELS)

    def test_private_models_are_not_browsable_even_by_owner(self, catalog):
        catalog.add(_private_model("user-a"))
        assert all(m.is_public for m in catalog.browse(viewer_id="user-a"))

    def test_category_filter(self, catalog):
        models = catalog.browse(category="figurine")

        assert models
        assert all(m.category == "figurine" for m in models)

    def test_search_is_case_insensitive_over_title_description_creator(self, catalog):
        by_creator = catalog.browse(query="JOHN DOE")
        by_description = catalog.browse(query="bubbles")

        assert by_creator and all("john doe" in m.creator.lower() for m in by_creator)
        assert [m.id for m in by_description] == ["1"]

    def test_search_treats_wildcards_literally(self, catalog):
        assert catalog.browse(query="%") == []
        assert catalog.browse(query="_") == []

    def test_search_without_match_is_empty(self, catalog):
        assert catalog.browse(query="no such model anywhere") == []

    def test_sort_newest_and_oldest(self, catalog):
        newest = [m.created_at for m in catalog.browse(sort="newest")]
        oldest = [m.created_at for m in catalog.browse(sort="oldest")]

        assert newest == sorted(newest, reverse=True)
        assert oldest == sorted(oldest)

    def test_sort_popular_and_prints(self, catalog):
        popular = [m.download_count for m in catalog.browse(sort="popular")]
        prints = [m.print_count for m in catalog.browse(sort="prints")]

        assert popular == sorted(popular, reverse=True)
        assert prints == sorted(prints, reverse=True)


class TestMutations:
    """Uploads and counters."""

    def test_add_assigns_next_numeric_id(self, catalog):
        first = catalog.add(_private_model())
        second = catalog.add(_private_model(file_url="/uploads/20240601120001_cd34ef56_bracket.stl"))

        assert first.id == str(len(DEFAULT_MODELS) + 1)
        assert second.id == str(len(DEFAULT_MODELS) + 2)

    def test_add_with_taken_explicit_id_raises(self, catalog):
        duplicate = _private_model()
        duplicate.id = "1"

        with pytest.raises(IntegrityError):
            catalog.add(duplicate)
        assert catalog.get("1").title == "Model 01"

    def test_record_download_and_print(self, catalog):
        model = catalog.get("1")

        catalog.record_download("1")
        catalog.record_print("1", quantity=3)

        updated = catalog.get("1")
        assert updated.download_count == model.download_count + 1
        assert updated.print_count == model.print_count + 3

    def test_counters_ignore_unknown_ids(self, catalog):
        catalog.record_download("999")
        catalog.record_print("999")

        assert len(catalog) == len(DEFAULT_MODELS)

    def test_reseeding_keeps_counters(self, database, catalog):
        catalog.record_download("1")
        downloads = catalog.get("1").download_count

        reloaded = load_catalog(database)

        assert len(reloaded) == len(DEFAULT_MODELS)
        assert reloaded.get("1").download_count == downloads

    def test_uploads_survive_a_new_database_connection(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'catalogue.db'}"
        first = Database(url)
        first.initialize()
        model = load_catalog(first).add(_private_model("user-a"))
        first.cleanup()

        second = Database(url)
        second.initialize()
        try:
            catalog = load_catalog(second)
            assert catalog.get(model.id, viewer_id="user-a").file_url == model.file_url
            assert catalog.add(_private_model()).id == str(int(model.id) + 1)
        finally:
            second.cleanup()

    def test_load_catalog_from_file(self, database, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps([{
            "id": 7,
            "title": "Vase",
            "description": "Spiral vase",
            "creator": "Meera",
            "createdAt": "2024-02-02",
            "basePrice": 450,
            "basePrintTime": 5.5,
        }]), encoding="utf-8")

        catalog = load_catalog(database, str(path))

        assert len(catalog) == 1
        model = catalog.get("7")
        assert model.base_price == 450
        assert model.print_time_label == "5.5 Hrs"

    def test_empty_catalog(self, database):
        catalog = Catalog(database)

        assert catalog.browse() == []
        assert catalog.add(_private_model()).id == "1"
