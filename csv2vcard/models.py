from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Contact(BaseModel):
    model_config = ConfigDict(frozen=True)

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email_address: Optional[str] = None
    telephone_number: Optional[str] = None


class ConversionOptions(BaseModel):
    start: Optional[int] = Field(default=None, ge=1, examples=[2])
    end: Optional[int] = Field(default=None, ge=1, examples=[None])
    telephone: bool = False


class ConversionResult(BaseModel):
    vcards: str = ""
    contacts: int = 0


class ConvertResponse(BaseModel):
    filename: str
    contacts: int
    vcards: str


class HealthResponse(BaseModel):
    ok: bool = True
