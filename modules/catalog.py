"""
Model catalogue.

Holds the browsable 3D models, applies the catalogue page's filters and
sort orders, and registers uploaded models.

Storage:
    Models live in the catalogue_models table next to users and orders.
    Curated records (built-in or CATALOG_FILE) are seeded at start-up;
    uploads are inserted as they are published. Counter updates are single
    UPDATE statements, so they are safe across threads and processes.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import CatalogueModelRecord, Database
from core.exceptions import ModelNotFoundError
from logging_config import get_logger
from models.catalog import PrintModel


logger = get_logger(__name__)


CATEGORIES = [
    {"id": "all", "name": "All Categories"},
    {"id": "decoration", "name": "Decoration"},
    {"id": "art", "name": "Art"},
    {"id": "figurine", "name": "Figurines"},
    {"id": "gadget", "name": "Gadgets"},
    {"id": "tool", "name": "Tools"},
]

SORT_OPTIONS = [
    {"id": "newest", "name": "Newest First"},
    {"id": "oldest", "name": "Oldest First"},
    {"id": "popular", "name": "Most Popular"},
    {"id": "prints", "name": "Most Printed"},
]


DEFAULT_MODELS = [
    {
        "id": "1", "title": "Model 01", "creator": "John Doe", "createdAt": "2023-12-01",
        "description": "A detailed 3D model of a spherical object with bubbles. "
                       "Perfect for decorative purposes or educational displays.",
        "fileUrl": "/static/models/model01.glb", "thumbnailUrl": "/static/images/model01.jpg",
        "downloadCount": 120, "printCount": 45, "category": "decoration",
        "basePrice": 800, "basePrintTime": 8,
    },
    {
        "id": "2", "title": "Model 02", "creator": "Jane Smith", "createdAt": "2023-11-15",
        "description": "A detailed skull model with intricate patterns. "
                       "Great for artistic projects or Halloween decorations.",
        "fileUrl": "/static/models/model02.glb", "thumbnailUrl": "/static/images/model02.jpg",
        "downloadCount": 85, "printCount": 32, "category": "art",
        "basePrice": 1200, "basePrintTime": 12,
    },
    {
        "id": "3", "title": "Model 03", "creator": "Alex Johnson", "createdAt": "2023-10-22",
        "description": "A minimalist figurine model with smooth surfaces. "
                       "Perfect for modern home decor or collectibles.",
        "fileUrl": "/static/models/model03.glb", "thumbnailUrl": "/static/images/model03.jpg",
        "downloadCount": 65, "printCount": 28, "category": "figurine",
        "basePrice": 600, "basePrintTime": 6,
    },
    {
        "id": "4", "title": "Model 04", "creator": "Sarah Williams", "createdAt": "2023-09-18",
        "description": "A faceted vase with a twisted body.",
        "fileUrl": "/static/models/model01.glb", "thumbnailUrl": "/static/images/model01.jpg",
        "downloadCount": 42, "printCount": 15, "category": "decoration",
        "basePrice": 700, "basePrintTime": 7,
    },
    {
        "id": "5", "title": "Model 05", "creator": "Michael Brown", "createdAt": "2023-08-30",
        "description": "A relief wall panel with layered geometric shapes.",
        "fileUrl": "/static/models/model02.glb", "thumbnailUrl": "/static/images/model02.jpg",
        "downloadCount": 98, "printCount": 37, "category": "art",
        "basePrice": 1000, "basePrintTime": 10,
    },
    {
        "id": "6", "title": "Model 06", "creator": "Emily Davis", "createdAt": "2023-07-25",
        "description": "A small animal figurine sized for a desk.",
        "fileUrl": "/static/models/model03.glb", "thumbnailUrl": "/static/images/model03.jpg",
        "downloadCount": 76, "printCount": 29, "category": "figurine",
        "basePrice": 500, "basePrintTime": 5,
    },
    {
        "id": "7", "title": "Model 07", "creator": "David Wilson", "createdAt": "2023-06-20",
        "description": "A phone stand with a cable slot.",
        "fileUrl": "/static/models/model01.glb", "thumbnailUrl": "/static/images/model01.jpg",
        "downloadCount": 54, "printCount": 21, "category": "gadget",
        "basePrice": 400, "basePrintTime": 4,
    },
    {
        "id": "8", "title": "Model 08", "creator": "Olivia Martinez", "createdAt": "2023-05-15",
        "description": "A modular headphone hook for desk edges.",
        "fileUrl": "/static/models/model02.glb", "thumbnailUrl": "/static/images/model02.jpg",
        "downloadCount": 112, "printCount": 43, "category": "gadget",
        "basePrice": 450, "basePrintTime": 5,
    },
    {
        "id": "9", "title": "Model 09", "creator": "James Taylor", "createdAt": "2023-04-10",
        "description": "A lantern shade with a perforated pattern.",
        "fileUrl": "/static/models/model03.glb", "thumbnailUrl": "/static/images/model03.jpg",
        "downloadCount": 89, "printCount": 34, "category": "decoration",
        "basePrice": 900, "basePrintTime": 9,
    },
]


class Catalog:
    """
    Catalogue of PrintModel records stored in the catalogue_models table.

    Every worker process reads the same table, so an upload published by
    one worker is visible to all of them and survives a restart. Private
    models (quick-print uploads) are only visible to their owner.
    """

    ADD_ATTEMPTS = 3

    def __init__(self, database: Database):
        self._database = database

    def __len__(self) -> int:
        with self._database.session_scope() as session:
            return session.scalar(select(func.count()).select_from(CatalogueModelRecord))

    def seed(self, models: Iterable[PrintModel]) -> int:
        """
        Insert curated models that are not stored yet.

        Existing rows are left alone, so download and print counters carry
        over restarts.

        Returns:
            Number of models inserted
        """
        inserted = 0
        with self._database.session_scope() as session:
            for model in models:
                if session.get(CatalogueModelRecord, model.id) is None:
                    session.add(_to_record(model))
                    inserted += 1
        if inserted:
            logger.info(f"Seeded {inserted} catalogue models")
        return inserted

    def get(self, model_id: str, viewer_id: Optional[str] = None) -> PrintModel:
        """
        Look up a model by id.

        Raises:
            ModelNotFoundError: If the id is unknown or the model is private to someone else
        """
        with self._database.session_scope() as session:
            record = session.get(CatalogueModelRecord, str(model_id))
            if record is None or not _visible(record, viewer_id):
                raise ModelNotFoundError(str(model_id))
            return _to_model(record)

    def find_by_file_url(self, file_url: str, viewer_id: Optional[str] = None) -> Optional[PrintModel]:
        """Model whose file lives at file_url, if the viewer may see it."""
        with self._database.session_scope() as session:
            record = session.scalars(
                select(CatalogueModelRecord).where(CatalogueModelRecord.file_url == file_url)
            ).first()
            if record is None or not _visible(record, viewer_id):
                return None
            return _to_model(record)

    def browse(
        self,
        category: str = "all",
        query: str = "",
        sort: str = "newest",
        viewer_id: Optional[str] = None,
    ) -> List[PrintModel]:
        """
        Public models filtered by category and search text, then sorted.

        Search is case-insensitive over title, description and creator.
        Unknown sort ids order by id.
        """
        stmt = select(CatalogueModelRecord).where(CatalogueModelRecord.is_public.is_(True))

        if category and category != "all":
            stmt = stmt.where(CatalogueModelRecord.category == category)

        if query:
            needle = query.lower()
            stmt = stmt.where(or_(
                func.lower(CatalogueModelRecord.title).contains(needle, autoescape=True),
                func.lower(CatalogueModelRecord.description).contains(needle, autoescape=True),
                func.lower(CatalogueModelRecord.creator).contains(needle, autoescape=True),
            ))

        stmt = stmt.order_by(*_SORT_ORDER.get(sort, ()), CatalogueModelRecord.id)

        with self._database.session_scope() as session:
            return [_to_model(record) for record in session.scalars(stmt)]

    def add(self, model: PrintModel) -> PrintModel:
        """
        Store a new model. An empty id is assigned the next numeric one.

        Two workers racing for the same id collide on the primary key; the
        loser retries with a fresh id.
        """
        for attempt in range(1, self.ADD_ATTEMPTS + 1):
            assign_id = not model.id
            try:
                with self._database.session_scope() as session:
                    if assign_id:
                        model.id = _next_id(session)
                    session.add(_to_record(model))
                break
            except IntegrityError:
                if not assign_id or attempt == self.ADD_ATTEMPTS:
                    raise
                logger.warning(f"Catalogue id {model.id} taken, retrying")
                model.id = ""

        logger.info(
            f"Catalogue model {model.id} added ('{model.title}', "
            f"{'public' if model.is_public else 'private'})"
        )
        return model

    def record_download(self, model_id: str) -> None:
        self._increment(model_id, CatalogueModelRecord.download_count, 1)

    def record_print(self, model_id: str, quantity: int = 1) -> None:
        self._increment(model_id, CatalogueModelRecord.print_count, quantity)

    def _increment(self, model_id: str, column, amount: int) -> None:
        # Single UPDATE so concurrent requests never lose a count
        with self._database.session_scope() as session:
            session.execute(
                update(CatalogueModelRecord)
                .where(CatalogueModelRecord.id == str(model_id))
                .values({column: column + amount})
            )


_SORT_ORDER = {
    "newest": (CatalogueModelRecord.created_at.desc(),),
    "oldest": (CatalogueModelRecord.created_at.asc(),),
    "popular": (CatalogueModelRecord.download_count.desc(),),
    "prints": (CatalogueModelRecord.print_count.desc(),),
}


def _visible(record: CatalogueModelRecord, viewer_id: Optional[str]) -> bool:
    return record.is_public or (viewer_id is not None and record.owner_id == viewer_id)


def _next_id(session: Session) -> str:
    ids = session.scalars(select(CatalogueModelRecord.id)).all()
    numeric = [int(i) for i in ids if i.isdigit()]
    return str(max(numeric, default=0) + 1)


def _to_record(model: PrintModel) -> CatalogueModelRecord:
    return CatalogueModelRecord(
        id=model.id,
        title=model.title,
        description=model.description,
        creator=model.creator,
        created_at=model.created_date,
        file_url=model.file_url,
        thumbnail_url=model.thumbnail_url,
        base_price=model.base_price,
        base_print_time=model.base_print_time,
        category=model.category,
        download_count=model.download_count,
        print_count=model.print_count,
        tags=list(model.tags),
        license=model.license,
        allow_derivatives=model.allow_derivatives,
        allow_commercial_use=model.allow_commercial_use,
        owner_id=model.owner_id,
        is_public=model.is_public,
    )


def _to_model(record: CatalogueModelRecord) -> PrintModel:
    return PrintModel(
        id=record.id,
        title=record.title,
        description=record.description,
        creator=record.creator,
        created_at=record.created_at.isoformat(),
        file_url=record.file_url,
        thumbnail_url=record.thumbnail_url,
        base_price=record.base_price,
        base_print_time=record.base_print_time,
        category=record.category,
        download_count=record.download_count,
        print_count=record.print_count,
        tags=list(record.tags or []),
        license=record.license,
        allow_derivatives=record.allow_derivatives,
        allow_commercial_use=record.allow_commercial_use,
        owner_id=record.owner_id,
        is_public=record.is_public,
    )


def load_catalog(database: Database, path: Optional[str] = None) -> Catalog:
    """
    Open the catalogue and seed it from a JSON list of model records, or
    the built-ins.

    Args:
        database: Initialized Database
        path: JSON file path; empty/None means built-in models
    """
    if path:
        with open(Path(path), "r", encoding="utf-8") as f:
            rows = json.load(f)
        logger.info(f"Read {len(rows)} catalogue models from {path}")
    else:
        rows = DEFAULT_MODELS

    catalog = Catalog(database)
    catalog.seed(PrintModel.from_dict(row) for row in rows)
    return catalog
