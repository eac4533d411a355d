from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from inspection_api.models.label_template import LabelTemplate
from inspection_api.schemas.label_template import LabelTemplateCreate, LabelTemplateUpdate

logger = logging.getLogger(__name__)

DEFAULT_PAPER_SIZE = "Brother-QL800"

# (width_mm, height_mm) of the supported label stock.
PAPER_SIZES_MM: dict[str, tuple[float, float]] = {
    "Brother-QL800": (62, 29),
    "Dymo-TwinTurbo": (89, 36),
    "29mmx90mm": (90, 29),
}


def mm_to_pixels(mm: float) -> int:
    # 96 DPI
    return round((mm * 96) / 25.4)


def get_paper_dimensions(paper_size: str | None) -> tuple[int, int]:
    width_mm, height_mm = PAPER_SIZES_MM.get(paper_size or "", PAPER_SIZES_MM[DEFAULT_PAPER_SIZE])
    return mm_to_pixels(width_mm), mm_to_pixels(height_mm)


def _with_field_ids(fields: list[dict[str, Any]], *, fresh: bool = False) -> list[dict[str, Any]]:
    result = []
    for field in fields:
        item = dict(field)
        if fresh or not item.get("id"):
            item["id"] = str(uuid.uuid4())
        result.append(item)
    return result


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def list_label_templates(db: Session, archived: bool | None = None) -> list[LabelTemplate]:
    stmt = select(LabelTemplate).order_by(LabelTemplate.created_date.asc())
    if archived is not None:
        stmt = stmt.where(LabelTemplate.archived == archived)
    return list(db.execute(stmt).scalars().all())


def get_label_template(db: Session, template_id: str) -> LabelTemplate | None:
    return db.get(LabelTemplate, template_id)


def create_label_template(db: Session, data: LabelTemplateCreate) -> LabelTemplate:
    width, height = get_paper_dimensions(data.paper_size)
    obj = LabelTemplate(
        id=str(uuid.uuid4()),
        label_name=data.label_name,
        fields=_with_field_ids(data.fields or []),
        paper_size=data.paper_size,
        width=width,
        height=height,
        copies=data.copies or 1,
        archived=False,
        created_by=data.created_by,
        created_date=_utcnow(),
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    logger.info("label_template_created name=%s by=%s", obj.label_name, obj.created_by)
    return obj


def update_label_template(
    db: Session,
    template_id: str,
    data: LabelTemplateUpdate,
) -> LabelTemplate | None:
    obj = db.get(LabelTemplate, template_id)
    if not obj:
        return None

    patch = data.model_dump(exclude_unset=True)
    if patch.get("paper_size"):
        obj.width, obj.height = get_paper_dimensions(patch["paper_size"])
    if "fields" in patch and patch["fields"] is not None:
        patch["fields"] = _with_field_ids(patch["fields"])

    for k, v in patch.items():
        if v is None:
            continue
        setattr(obj, k, v)
    obj.updated_date = _utcnow()

    db.commit()
    db.refresh(obj)
    logger.info("label_template_updated id=%s", template_id)
    return obj


def delete_label_template(db: Session, template_id: str, *, permanent: bool = False) -> bool:
    """Archives the template, or removes it when `permanent` is set."""
    obj = db.get(LabelTemplate, template_id)
    if not obj:
        return False

    if permanent:
        db.delete(obj)
        logger.info("label_template_deleted id=%s", template_id)
    else:
        obj.archived = True
        obj.updated_date = _utcnow()
        logger.info("label_template_archived id=%s", template_id)
    db.commit()
    return True


def restore_label_template(db: Session, template_id: str) -> LabelTemplate | None:
    obj = db.get(LabelTemplate, template_id)
    if not obj:
        return None
    obj.archived = False
    obj.updated_date = _utcnow()
    db.commit()
    db.refresh(obj)
    logger.info("label_template_restored id=%s", template_id)
    return obj


def duplicate_label_template(
    db: Session,
    template_id: str,
    created_by: str | None = None,
) -> LabelTemplate | None:
    source = db.get(LabelTemplate, template_id)
    if not source:
        return None

    copy = LabelTemplate(
        id=str(uuid.uuid4()),
        label_name=f"{source.label_name} (Copy)",
        fields=_with_field_ids(source.fields or [], fresh=True),
        paper_size=source.paper_size,
        width=source.width,
        height=source.height,
        copies=source.copies,
        archived=False,
        created_by=created_by or source.created_by,
        created_date=_utcnow(),
        updated_date=None,
    )
    db.add(copy)
    db.commit()
    db.refresh(copy)
    logger.info("label_template_duplicated source=%s copy=%s", source.label_name, copy.label_name)
    return copy
