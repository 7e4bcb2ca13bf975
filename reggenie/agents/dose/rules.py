"""Rule-based 3+3 dose-escalation logic and subject validation."""

import logging
from collections import OrderedDict
from typing import Dict, List

from reggenie.models.dose import DoseLevelSummary, DoseStudy, DoseSubject

logger = logging.getLogger(__name__)

ESCALATE = "ESCALATE"
EXPAND = "EXPAND"
DE_ESCALATE = "DE-ESCALATE"
ENROLLING = "ENROLLING"
STAY = "STAY"

DECISION_NOTES = {
    ESCALATE: "Escalate to next dose level",
    EXPAND: "Expand cohort to 6 subjects",
    DE_ESCALATE: "MTD exceeded; de-escalate",
    ENROLLING: "Cohort incomplete; continue enrollment",
    STAY: "Maximum planned dose reached; hold",
}


def validate_subject(subject: DoseSubject) -> Dict[str, str]:
    """Field name -> message for every invalid field; empty when valid."""
    errors = {}
    if not subject.id or not subject.id.strip():
        errors["id"] = "Subject ID required"
    if subject.age < 18 or subject.age > 99:
        errors["age"] = "Age must be 18-99"
    if subject.weight <= 0:
        errors["weight"] = "Invalid weight"
    if subject.ae_grade < 0 or subject.ae_grade > 5:
        errors["ae_grade"] = "Grade 0-5 required"
    return errors


def three_plus_three_decision(subjects: int, dlts: int, cohort_size: int = 3) -> str:
    """Classic 3+3 rule for one dose level."""
    if dlts >= 2:
        return DE_ESCALATE
    if subjects < cohort_size:
        return ENROLLING
    if subjects < 2 * cohort_size:
        return ESCALATE if dlts == 0 else EXPAND
    return ESCALATE


def summarize_dose_levels(study: DoseStudy) -> List[DoseLevelSummary]:
    """Group subjects by dose (ascending) and apply the 3+3 rule to each level."""
    levels: Dict[float, List[DoseSubject]] = OrderedDict()
    for subject in sorted(study.subjects, key=lambda s: s.dose):
        levels.setdefault(subject.dose, []).append(subject)

    summaries = []
    for dose, subjects in levels.items():
        dlts = sum(1 for s in subjects if s.dlt)
        decision = three_plus_three_decision(len(subjects), dlts, study.cohort_size)
        if decision == ESCALATE and dose >= study.max_dose:
            decision = STAY
        summaries.append(DoseLevelSummary(dose=dose, subjects=len(subjects), dlts=dlts, decision=decision))

    return summaries


def format_rule_summary(summaries: List[DoseLevelSummary]) -> str:
    if not summaries:
        return "No subjects recorded."
    lines = []
    for s in summaries:
        lines.append(
            f"- {s.dose} mg: {s.dlts}/{s.subjects} DLT -> {s.decision} ({DECISION_NOTES[s.decision]})"
        )
    return "\n".join(lines)
