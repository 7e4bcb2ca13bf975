"""Informed consent form (ICF) generation models."""

from typing import Optional
from enum import Enum

from pydantic import BaseModel, Field


class ICFType(str, Enum):
    MASTER = "Master ICF"
    PREGNANCY_PARTNER = "Pregnancy Partner ICF"
    GENOMIC = "Genomic ICF"
    ASSENT = "Assent Form"


ICF_LANGUAGES = [
    "English", "French", "German", "Spanish", "Chinese",
    "Traditional Chinese", "Korean", "Thai", "Tamil",
]


class ICFRequest(BaseModel):
    """Source texts and options for one generated form."""
    protocol: str = ""
    template: str = ""
    regulations: str = ""
    country: str = "Global"
    icf_type: ICFType = ICFType.MASTER
    target_language: str = "English"


class ICFDocument(BaseModel):
    icf_type: ICFType
    country: str
    target_language: str
    content_html: str
    generated_at: int
    translated_from: Optional[str] = None


class ICFTranslateRequest(BaseModel):
    document: ICFDocument
    target_language: str = Field(..., min_length=1)
