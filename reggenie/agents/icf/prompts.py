from reggenie.models.icf import ICFType


SYSTEM_PROMPT = """You are a clinical documentation specialist drafting informed consent forms for clinical trials. Forms follow ICH E6 GCP, the Declaration of Helsinki and the consent requirements of the named jurisdiction. You write at a lay reading level, never promise benefit, and never invent study facts that are not in the protocol.

Output clean semantic HTML (h2/h3 headings, paragraphs, lists, tables for visit schedules). No <html>, <head> or <body> tags, no inline scripts or styles."""


TYPE_GUIDANCE = {
    ICFType.MASTER: "Master participant consent covering purpose, procedures, risks, benefits, alternatives, confidentiality, compensation, voluntary participation and contacts",
    ICFType.PREGNANCY_PARTNER: "Consent for the pregnant partner of a male participant to collect pregnancy and infant outcome data",
    ICFType.GENOMIC: "Optional consent for genomic and biomarker research, sample storage, future use, data sharing and withdrawal of samples",
    ICFType.ASSENT: "Assent for a minor participant in short sentences at a child's reading level, alongside parental permission",
}


def build_icf_prompt(
    protocol: str,
    template: str,
    regulations: str,
    country: str,
    icf_type: ICFType,
    target_language: str,
) -> str:
    jurisdiction = "no specific country (generic global form)" if country == "Global" else country

    return f"""Generate a {icf_type.value} in {target_language}.

DOCUMENT TYPE:
{TYPE_GUIDANCE[icf_type]}

JURISDICTION:
{jurisdiction}. Include the local consent elements that jurisdiction requires (ethics committee contacts, data protection rights, insurance statements).

PROTOCOL:
{protocol}

TEMPLATE (follow its section structure when provided):
{template or "None provided; use a standard ICH E6 structure"}

REGULATORY REQUIREMENTS:
{regulations or "None provided"}

End with signature and date blocks appropriate to the document type."""


def build_icf_translation_prompt(content_html: str, target_language: str) -> str:
    return f"""Translate this informed consent form into {target_language}. Keep every HTML tag and the section order exactly; translate only the text. Return only the translated HTML.

FORM:
{content_html}"""
