from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class LabelTemplateCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    label_name: Optional[str] = Field(default=None, alias="labelName")
    fields: Optional[list[dict[str, Any]]] = None
    paper_size: Optional[str] = Field(default=None, alias="paperSize")
    copies: Optional[int] = Field(default=None, ge=1)
    created_by: Optional[str] = Field(default=None, alias="createdBy")

    def missing_required(self) -> bool:
        return not (self.label_name and self.fields is not None and self.paper_size and self.created_by)


class LabelTemplateUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    label_name: Optional[str] = Field(default=None, alias="labelName")
    fields: Optional[list[dict[str, Any]]] = None
    paper_size: Optional[str] = Field(default=None, alias="paperSize")
    copies: Optional[int] = Field(default=None, ge=1)
    archived: Optional[bool] = None
    created_by: Optional[str] = Field(default=None, alias="createdBy")


class LabelTemplateDuplicate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    created_by: Optional[str] = Field(default=None, alias="createdBy")


class LabelTemplateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    label_name: str = Field(alias="labelName")
    fields: list[dict[str, Any]]
    paper_size: str = Field(alias="paperSize")
    width: int
    height: int
    copies: int
    archived: bool
    created_by: str = Field(alias="createdBy")
    created_date: datetime = Field(alias="createdDate")
    updated_date: Optional[datetime] = Field(default=None, alias="updatedDate")
