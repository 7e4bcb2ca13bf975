"""Data models for regulations, analysis results and news."""

from typing import Optional, List
from enum import Enum

from pydantic import BaseModel, Field


class Category(str, Enum):
    """Regulatory subject areas."""
    CLINICAL_RESEARCH = "Clinical Research & Trials"
    MANUFACTURING = "Manufacturing & Quality Systems"
    PHARMACOVIGILANCE = "Pharmacovigilance & Drug Safety"
    REGULATORY_SUBMISSIONS = "Regulatory Submissions & Compliance"
    MEDICAL_DEVICES = "Medical Devices & Diagnostics"
    BIOLOGICS = "Biotechnology, Biologics & Biosimilars"
    DATA_INTEGRITY = "Data Integrity & Electronic Records"
    QUALITY_ASSURANCE = "Quality Assurance & Risk Management"
    ADVERTISING = "Advertising, Promotion & Labeling"
    DRUG_DEVELOPMENT = "Drug Development & Regulatory Science"
    CONTROLLED_SUBSTANCES = "Controlled Substances & Safety Controls"
    MARKET_ACCESS = "Health Technology Assessment & Market Access"
    PRIVACY = "Privacy, Security & Compliance"
    ENVIRONMENTAL = "Environmental, Occupational & Facility Regulations"
    SUPPLY_CHAIN = "Supply Chain, Import/Export & Logistics"


class Region(str, Enum):
    """Regulatory regions."""
    US = "United States (FDA)"
    EU = "European Union (EMA)"
    APAC = "Asia Pacific"
    GLOBAL = "Global (ICH/WHO)"
    UK = "United Kingdom (MHRA)"


class ImpactLevel(str, Enum):
    """Business impact of a regulation."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    UNKNOWN = "Unknown"


class RegulationStatus(str, Enum):
    """Publication status of a regulation."""
    DRAFT = "Draft"
    FINAL = "Final"
    CONSULTATION = "Consultation"


class RegulationEntry(BaseModel):
    """A regulation tracked in the intelligence database.

    Region, category and impact are kept as plain strings because entries
    extracted by the AI do not always map onto the enumerations.
    """
    id: str
    tracking_id: Optional[str] = None
    title: str
    agency: str = "Unknown"
    region: str = Region.GLOBAL.value
    country: str = "Global"
    date: str = ""
    effective_date: Optional[str] = None
    category: str = Category.REGULATORY_SUBMISSIONS.value
    summary: str = ""
    impact: str = ImpactLevel.UNKNOWN.value
    status: str = RegulationStatus.FINAL.value
    content: str = ""
    url: Optional[str] = None
    risk_level: Optional[str] = None
    risk_rationale: Optional[str] = None
    admin_approved: bool = False
    last_checked: Optional[int] = None
    is_new: bool = False


class RiskOverride(BaseModel):
    """Admin override of the assessed risk for a regulation."""
    risk_level: str = Field(..., min_length=1)
    risk_rationale: str = ""


class AnalysisResult(BaseModel):
    summary: str = Field(description="Concise executive summary (max 50 words)")
    operational_impact: str = Field(description="How the regulation affects operations")
    compliance_risk: str = Field(description="Risks of non-compliance")
    risk_rationale: str = Field(description="Why the risk level was assigned")
    key_changes: List[str] = Field(description="3-5 specific regulatory changes")
    risk_level: str = Field(description="Low, Medium, High or Critical")
    mitigation_strategies: List[str] = Field(description="3-5 risk mitigation strategies")
    action_items: List[str] = Field(description="3-5 immediate action items")


class ExtractedEntry(BaseModel):
    """Regulation metadata extracted from free text or search results."""
    title: str
    agency: str
    region: str
    country: str
    date: str = Field(description="Publication date, YYYY-MM-DD")
    effective_date: str = Field(description="YYYY-MM-DD, or Pending/TBD")
    category: str
    summary: str
    impact: str = Field(description="High, Medium or Low")
    status: str = Field(description="Draft, Final or Consultation")
    url: str = Field(description="Matched source URL, empty when unknown")


class ExtractedEntryBatch(BaseModel):
    entries: List[ExtractedEntry]


class NewsItem(BaseModel):
    title: str
    summary: str
    date: str = Field(description="YYYY-MM-DD")
    source: str = Field(description="Agency name")
    url: str = Field(description="Matched verified source URL")
    content: str = ""


class NewsBatch(BaseModel):
    items: List[NewsItem]


class TMFDocument(BaseModel):
    zone: str = Field(description='DIA zone, e.g. "Zone 01: Trial Management"')
    document_name: str
    description: str
    mandatory: bool
    local_requirement: str = ""


class TMFChecklist(BaseModel):
    documents: List[TMFDocument]
