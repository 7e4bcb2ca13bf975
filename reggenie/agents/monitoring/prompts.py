from pydantic import BaseModel, Field

from reggenie.models.records import MonitoringInputs, VisitType


SYSTEM_PROMPT = """You are a senior Clinical Research Associate (CRA) writing GCP-compliant monitoring visit reports for a sponsor. You write factual, auditable reports: every finding is traceable to the input signals you were given, nothing is invented, and follow-up items are specific and assigned.

Output report bodies as clean semantic HTML (h2/h3 headings, paragraphs, tables, lists). No <html>, <head> or <body> tags, no inline scripts."""


VISIT_DESCRIPTIONS = {
    VisitType.SSV: "Site Selection Visit: assess investigator qualifications, facilities, staffing, patient population and feasibility",
    VisitType.SMV: "Site Monitoring Visit: source data verification, protocol compliance, safety reporting, IP accountability and follow-up of open items",
    VisitType.SCV: "Site Close-out Visit: final IP reconciliation, essential document archiving, outstanding queries and close-out obligations",
}


class SynthesizedReport(BaseModel):
    content_html: str = Field(description="Full report body as semantic HTML")
    explainability: str = Field(description="How the findings were derived from the inputs")
    traceability: str = Field(description="Which input signal supports each report section")
    model_accuracy: float = Field(description="Self-assessed confidence in the report, 0-100")


def build_report_prompt(
    visit_type: VisitType,
    inputs: MonitoringInputs,
    template_context: str,
    project_number: str,
    visit_date: str,
) -> str:
    return f"""Synthesize a monitoring visit report.

VISIT:
Type: {visit_type.value} ({VISIT_DESCRIPTIONS[visit_type]})
Project: {project_number}
Visit date: {visit_date or "Not specified"}

TEMPLATE (follow its section structure):
{template_context}

DIGITAL NOTES:
{inputs.notes or "None provided"}

MEETING MINUTES:
{inputs.minutes or "None provided"}

VOICE TRANSCRIPT:
{inputs.transcript or "None provided"}

LINKED CONTEXT:
{inputs.linked_context or "None provided"}

Include a "Key Follow-up Items" section listing each action item with owner and due date where known."""


def build_follow_up_prompt(report_html: str, project_number: str, visit_date: str) -> str:
    return f"""Write a formal follow-up letter to the Principal Investigator for project {project_number}, visit of {visit_date or "the recent visit"}.

Base it strictly on the follow-up items identified in this monitoring visit report summary. List each open item with the requested action and timeline.

REPORT:
{report_html}

Return the letter as HTML (paragraphs and a list of items), no <html> or <body> tags."""


def build_confirmation_prompt(report_html: str, next_visit_date: str, project_number: str) -> str:
    return f"""Write a visit confirmation letter to the Principal Investigator for project {project_number} confirming the next monitoring visit on {next_visit_date}.

List the key follow-up items from the report below that will be reviewed during the visit, and the documents and personnel that should be available.

REPORT:
{report_html}

Return the letter as HTML (paragraphs and a list of items), no <html> or <body> tags."""
