"""Audit, reporting and conversation records."""

import time
import uuid
from typing import Optional, List, Any, Dict
from enum import Enum

from pydantic import BaseModel, Field


def current_timestamp() -> int:
    """Milliseconds since the epoch, used for ids and record timestamps."""
    return int(time.time() * 1000)


def record_id(prefix: str, now: Optional[int] = None) -> str:
    """`<prefix>-<ms>-<suffix>`; the random suffix keeps same-millisecond writes apart."""
    now = current_timestamp() if now is None else now
    return f"{prefix}-{now}-{uuid.uuid4().hex[:6]}"


class AuditEntry(BaseModel):
    id: str
    timestamp: int
    action: str
    user: str
    module: str
    details: str
    ip: Optional[str] = None


class BuildRequirement(BaseModel):
    id: str
    version: str
    timestamp: int
    prompt: str
    status: str = "Implemented"
    scope: List[str] = Field(default_factory=list)


class VisitType(str, Enum):
    """Clinical monitoring visit types."""
    SSV = "SSV"  # site selection
    SMV = "SMV"  # site monitoring
    SCV = "SCV"  # site close-out


class ReportAudit(BaseModel):
    explainability: str
    traceability: str
    model_accuracy: float
    timestamp: int


class MonitoringReportLog(BaseModel):
    id: str
    project_number: str
    sponsor: str = "Sponsor X"
    visit_date: str = ""
    visit_number: str = "01"
    visit_type: VisitType
    content_html: str
    raw_notes: str = ""
    audit: ReportAudit


class ChatRole(str, Enum):
    USER = "user"
    MODEL = "model"


class ChatMessage(BaseModel):
    id: str
    role: ChatRole
    text: str
    timestamp: int
    grounding_metadata: Optional[Dict[str, Any]] = None


class GenieFeedback(BaseModel):
    id: str
    rating: int = Field(..., ge=1, le=5)
    comment: str = ""
    timestamp: int
    query_snippet: Optional[str] = None
    topic: Optional[str] = None
    response_snippet: Optional[str] = None


class MonitoringInputs(BaseModel):
    """Intelligence signals a monitoring report is synthesized from."""
    notes: str = ""
    minutes: str = ""
    transcript: str = ""
    linked_context: str = ""


class MonitoringReportRequest(BaseModel):
    visit_type: VisitType = VisitType.SMV
    project_number: str = "AIDE-CLIN-2025"
    visit_date: str = ""
    sponsor: str = "Sponsor X"
    visit_number: str = "01"
    template_reference: str = "Standard GxP Template v4.2"
    template_text: str = ""
    inputs: MonitoringInputs = Field(default_factory=MonitoringInputs)