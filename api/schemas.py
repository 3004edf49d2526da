"""Pydantic schemas for the interview form HTTP API."""
from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr


class ResponseInput(BaseModel):
    id: StrictStr
    value: Union[StrictStr, List[StrictStr]]
    attachments: Optional[List[StrictStr]] = None

    model_config = ConfigDict(extra="ignore")


class ImageInput(BaseModel):
    id: StrictStr
    filename: StrictStr
    mime_type: StrictStr = Field(alias="mimeType")
    data: StrictStr
    is_attachment: StrictBool = Field(default=False, alias="isAttachment")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ApiResp(BaseModel):
    ok: bool = True


class ApiError(BaseModel):
    ok: bool = False
    error: str
    field: Optional[str] = None
