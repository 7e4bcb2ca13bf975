"""Data models for the Phase-1 dose-escalation workbook."""

from typing import Optional, List

from pydantic import BaseModel, Field


class DoseSubject(BaseModel):
    """Per-subject findings recorded during a dose-escalation cycle."""
    id: str = ""
    cohort: str = "1"
    dose: float = 0.1
    age: int = 45
    sex: str = "M"
    weight: float = 75
    bmi: float = 24.5
    cycle: int = 1
    alt: float = 25
    ast: float = 22
    bilirubin: float = 0.8
    creatinine: float = 0.9
    ae_grade: int = 0
    dlt: bool = False
    auc: Optional[float] = None
    tmax: Optional[float] = None
    cmax: Optional[float] = None


class DoseStudy(BaseModel):
    """Study configuration plus the subjects recorded so far."""
    id: str
    project_name: str = "PH1-2025-AIDE"
    therapeutic_area: str = "Oncology / Immunology"
    product_name: str = "AIDE-101 (Novel IO Agent)"
    design: str = "3+3"
    target_toxicity_rate: float = Field(0.25, gt=0.0, lt=1.0)
    start_dose: float = Field(0.1, gt=0.0)
    max_dose: float = Field(10.0, gt=0.0)
    cohort_size: int = Field(3, ge=1)
    subjects: List[DoseSubject] = Field(default_factory=list)


class DoseStudyCreate(BaseModel):
    project_name: str = "PH1-2025-AIDE"
    therapeutic_area: str = "Oncology / Immunology"
    product_name: str = "AIDE-101 (Novel IO Agent)"
    design: str = "3+3"
    target_toxicity_rate: float = Field(0.25, gt=0.0, lt=1.0)
    start_dose: float = Field(0.1, gt=0.0)
    max_dose: float = Field(10.0, gt=0.0)
    cohort_size: int = Field(3, ge=1)


class DoseLevelSummary(BaseModel):
    """Rule-based 3+3 evaluation of one dose level."""
    dose: float
    subjects: int
    dlts: int
    decision: str


class DoseAnalysis(BaseModel):
    recommendation: str = Field(description="ESCALATE, STAY, DE-ESCALATE or STOP")
    predicted_mtd: str = Field(description="Predicted maximum tolerated dose with unit")
    rationale: str = Field(description="Clinical and statistical rationale")
    safety_warnings: List[str] = Field(description="Safety signals requiring attention")
    next_steps: List[str] = Field(description="Recommended next steps for the SRC")
