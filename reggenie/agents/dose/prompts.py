from reggenie.models.dose import DoseStudy


SYSTEM_PROMPT = """You are a clinical pharmacologist and Phase-1 safety review committee (SRC) advisor applying model-informed drug development (MIDD) principles. You recommend dose-escalation decisions for first-in-human oncology studies.

DECISION OPTIONS:
- ESCALATE: current level tolerated, proceed to the next planned dose.
- STAY: expand or repeat the current level before deciding.
- DE-ESCALATE: toxicity above target; return to the previous level.
- STOP: unacceptable safety signal; halt escalation.

The rule-based 3+3 evaluation you are given is authoritative for DLT counting. Add clinical judgment from labs (ALT, AST, bilirubin, creatinine), AE grades and PK, and flag any safety signal even when no DLT was recorded."""


def build_dose_prompt(study: DoseStudy, rule_summary: str) -> str:
    subject_lines = "\n".join(
        f"- {s.id} | cohort {s.cohort} | {s.dose} mg | {s.age}{s.sex} {s.weight} kg BMI {s.bmi} | "
        f"cycle {s.cycle} | ALT {s.alt} AST {s.ast} bili {s.bilirubin} creat {s.creatinine} | "
        f"AE grade {s.ae_grade} | DLT {'yes' if s.dlt else 'no'} | "
        f"AUC {s.auc if s.auc is not None else 'NA'} Tmax {s.tmax if s.tmax is not None else 'NA'} "
        f"Cmax {s.cmax if s.cmax is not None else 'NA'}"
        for s in study.subjects
    ) or "No subjects recorded."

    return f"""Recommend the next dose-escalation step.

STUDY:
Protocol: {study.project_name}
Therapeutic area: {study.therapeutic_area}
Product: {study.product_name}
Design: {study.design}
Target toxicity rate: {study.target_toxicity_rate:.0%}
Start dose: {study.start_dose} mg
Maximum planned dose: {study.max_dose} mg
Cohort size: {study.cohort_size}

RULE-BASED 3+3 EVALUATION:
{rule_summary}

SUBJECT DATA:
{subject_lines}

Provide recommendation, predicted_mtd (with unit), rationale, safety_warnings and next_steps."""
