from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from inspection_api.api.deps.request_identity import get_request_identity
from inspection_api.crud.label_template import (
    create_label_template,
    delete_label_template,
    duplicate_label_template,
    get_label_template,
    list_label_templates,
    restore_label_template,
    update_label_template,
)
from inspection_api.db.session import get_db
from inspection_api.schemas.label_template import (
    LabelTemplateCreate,
    LabelTemplateDuplicate,
    LabelTemplateOut,
    LabelTemplateUpdate,
)

router = APIRouter(
    prefix="/labels",
    tags=["labels"],
    dependencies=[Depends(get_request_identity)],
)

_NOT_FOUND = "Template not found"


@router.get("", response_model=list[LabelTemplateOut])
def list_label_templates_api(
    archived: bool | None = Query(None),
    db: Session = Depends(get_db),
):
    return list_label_templates(db, archived=archived)


@router.get("/{template_id}", response_model=LabelTemplateOut)
def get_label_template_api(template_id: str, db: Session = Depends(get_db)):
    obj = get_label_template(db, template_id)
    if not obj:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return obj


@router.post("", response_model=LabelTemplateOut, status_code=status.HTTP_201_CREATED)
def create_label_template_api(payload: LabelTemplateCreate, db: Session = Depends(get_db)):
    if payload.missing_required():
        raise HTTPException(status_code=400, detail="Missing required fields")
    return create_label_template(db, payload)


@router.put("/{template_id}", response_model=LabelTemplateOut)
def update_label_template_api(
    template_id: str,
    payload: LabelTemplateUpdate,
    db: Session = Depends(get_db),
):
    obj = update_label_template(db, template_id, payload)
    if not obj:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return obj


@router.delete("/{template_id}")
def delete_label_template_api(
    template_id: str,
    permanent: bool = Query(False),
    db: Session = Depends(get_db),
):
    ok = delete_label_template(db, template_id, permanent=permanent)
    if not ok:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return {"success": True}


@router.post("/{template_id}/restore", response_model=LabelTemplateOut)
def restore_label_template_api(template_id: str, db: Session = Depends(get_db)):
    obj = restore_label_template(db, template_id)
    if not obj:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return obj


@router.post(
    "/{template_id}/duplicate",
    response_model=LabelTemplateOut,
    status_code=status.HTTP_201_CREATED,
)
def duplicate_label_template_api(
    template_id: str,
    payload: LabelTemplateDuplicate | None = Body(None),
    db: Session = Depends(get_db),
):
    created_by = payload.created_by if payload else None
    obj = duplicate_label_template(db, template_id, created_by=created_by)
    if not obj:
        raise HTTPException(status_code=404, detail=_NOT_FOUND)
    return obj
