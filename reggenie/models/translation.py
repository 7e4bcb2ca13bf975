"""Data models for translation jobs and HITL quality control."""

from typing import Optional, List
from enum import Enum

from pydantic import BaseModel, Field


class QCStatus(str, Enum):
    """Translation document lifecycle."""
    DRAFT = "Draft"
    QC_PENDING = "QC Pending"
    QC_FINALIZED = "QC Finalized"
    DOWNLOADED = "Downloaded"


class FunctionalGroup(str, Enum):
    CLINICAL_OPERATIONS = "Clinical Operations"
    REGULATORY_AFFAIRS = "Regulatory Affairs"
    QUALITY_ASSURANCE = "Quality Assurance"
    PHARMACOVIGILANCE = "Pharmacovigilance"
    OTHER = "Other Functions"


class TranslationDocType(str, Enum):
    ESSENTIAL_DOCUMENTS = "Essential Documents"
    REGULATORY_SUBMISSIONS = "IRB/EC/Regulatory Submissions"
    PATIENT_FACING = "Patient Facing Materials"
    PROTOCOL_TECHNICAL = "Protocol and Other Technical Documents"
    COMMUNICATION = "Communication"


class TranslationDimension(str, Enum):
    PATIENT_CENTRIC = "Patient Centric"
    REGULATORY_FOCUSED = "Regulatory Focused"
    MEDICAL_ACCURACY = "Medical Accuracy"
    LEGAL_ASPECTS = "Legal Aspects"


class MQMSeverity(str, Enum):
    """MQM error severity."""
    MINOR = "Minor"
    MAJOR = "Major"
    CRITICAL = "Critical"


class MQMType(str, Enum):
    """MQM error type."""
    TERMINOLOGY = "Terminology"
    ACCURACY = "Accuracy"
    FLUENCY = "Fluency"
    STYLE = "Style"


MQM_SEVERITY_WEIGHTS = {
    MQMSeverity.MINOR: 1,
    MQMSeverity.MAJOR: 5,
    MQMSeverity.CRITICAL: 10,
}


class CorrectionRationale(BaseModel):
    """One word-level correction made by a QC reviewer."""
    original_text: str
    updated_text: str
    rationale: str
    timestamp: int
    page_index: int
    word_index: int
    mqm_severity: MQMSeverity
    mqm_type: MQMType


class WorkflowTimeCode(BaseModel):
    event: str
    timestamp: int


class TranslationLog(BaseModel):
    """Translation job metadata, pages and the HITL audit trail."""
    id: str
    tracking_id: str
    functional_group: FunctionalGroup = FunctionalGroup.CLINICAL_OPERATIONS
    doc_type: TranslationDocType = TranslationDocType.ESSENTIAL_DOCUMENTS
    dimension: Optional[TranslationDimension] = TranslationDimension.MEDICAL_ACCURACY
    cultural_nuances: bool = False
    page_range: Optional[str] = None
    project_number: str
    timestamp: int
    source_language: str = "Unknown"
    target_language: str
    word_count: int = 0
    char_count: int = 0
    page_count: int = 0
    token_count: int = 0
    mode: str = "HITL"
    provider: str = "openai"
    quality_score: Optional[float] = None
    mqm_error_score: Optional[int] = None
    status: QCStatus = QCStatus.DRAFT
    human_correction_volume: int = 0
    qc_time_spent_seconds: int = 0
    qc_started_at: Optional[int] = None
    workflow_time_codes: List[WorkflowTimeCode] = Field(default_factory=list)
    estimated_cost: Optional[float] = None
    rationales: List[CorrectionRationale] = Field(default_factory=list)
    back_translation: Optional[List[str]] = None
    qc_reviewer_name: Optional[str] = None
    certified_at: Optional[int] = None
    source_pages: List[str] = Field(default_factory=list)
    target_pages: List[str] = Field(default_factory=list)


class TranslationJobCreate(BaseModel):
    """Request body for starting a translation job from text."""
    text: str = Field(..., min_length=1)
    project_number: str = "AZ-PH1-2025"
    target_language: str = "Spanish"
    doc_type: TranslationDocType = TranslationDocType.ESSENTIAL_DOCUMENTS
    dimension: TranslationDimension = TranslationDimension.MEDICAL_ACCURACY
    functional_group: FunctionalGroup = FunctionalGroup.CLINICAL_OPERATIONS
    cultural_nuances: bool = False
    page_range: Optional[str] = None


class CorrectionRequest(BaseModel):
    page_index: int = Field(..., ge=0)
    word_index: int = Field(..., ge=0)
    replacement: str
    mqm_severity: MQMSeverity = MQMSeverity.MINOR
    mqm_type: MQMType = MQMType.TERMINOLOGY
    rationale: str


class FinalizeRequest(BaseModel):
    reviewer_name: str = ""


class SpeechBoundary(BaseModel):
    """Word boundary reported by the player, relative to the spoken text."""
    page_index: int = Field(0, ge=0)
    char_index: int = Field(..., ge=0)


class VoiceOption(BaseModel):
    name: str
    lang: str


class VoiceSelectionRequest(BaseModel):
    voices: List[VoiceOption] = Field(default_factory=list)


class AlternativeSuggestions(BaseModel):
    alternatives: List[str] = Field(description="3-5 context-appropriate alternatives")
