SYSTEM_PROMPT = """You are a certified clinical and regulatory translator. You translate essential trial documents, regulatory submissions and patient-facing materials with exact terminology and without adding or omitting content."""


def build_structural_instructions(target_language: str, dimension: str, cultural_nuances: bool) -> str:
    nuance = " + Cultural Nuance" if cultural_nuances else ""
    return f"""Task: Regulatory Document Mirroring.
Dimension: {dimension}{nuance}.
STRUCTURAL RULES:
1. Preserve paragraph density and breaks exactly.
2. Match bullet-point hierarchies and symbols.
3. Maintain identical sentence sequence.
4. Target language: {target_language}."""


def build_page_prompt(page_text: str, page_number: int, page_total: int, instructions: str) -> str:
    return f"""{instructions}

Translate page {page_number} of {page_total}. Return only the translated page text.

SOURCE PAGE:
\"\"\"{page_text}\"\"\""""


def build_language_prompt(text: str) -> str:
    return f"""Identify the primary language of this text. Return ONLY the language name (e.g. "English", "Spanish", "French").

{text[:1000]}"""


def build_alternatives_prompt(word: str, context: str, target_language: str) -> str:
    max_context_length = 2000
    if len(context) > max_context_length:
        context = context[:max_context_length] + "\n[TRUNCATED]"

    return f"""Suggest 3-5 alternative {target_language} translations for the word "{word}" as it is used in the passage below. Prefer regulatory and clinical terminology appropriate to the context.

PASSAGE:
{context}"""


def build_back_translation_prompt(page_text: str, source_language: str) -> str:
    target = source_language if source_language and source_language != "Unknown" else "English"
    return f"""Back-translate the following page into {target} as literally as possible, so a reviewer can verify the meaning of the translation. Return only the back-translated text.

PAGE:
\"\"\"{page_text}\"\"\""""
