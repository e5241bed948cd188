"""
Prompt Builders — Messages for the ask and redact flows

Both flows share one system prompt that scopes the assistant to El Prat
de Llobregat. The redact prompt additionally asks for the one-line JSON
header that the header parser looks for.
"""

from complai.schemas import OutputFormat

SYSTEM_PROMPT = """You are Complai, a civic assistant for residents of El Prat de Llobregat (Barcelona, Catalonia).

Rules:
- Only help with questions, complaints and procedures related to El Prat de Llobregat
- If a request is not about El Prat de Llobregat, politely say that you can only help with matters related to El Prat de Llobregat
- Answer in the same language the user writes in (Catalan, Spanish or English)
- Be concise and practical; point to the Ajuntament (City Hall) services when relevant
- Do not invent phone numbers, addresses or opening hours you are not sure about"""

HEADER_INSTRUCTIONS = {
    OutputFormat.PDF: 'The first line of your reply MUST be exactly: {"format": "pdf"}',
    OutputFormat.JSON: 'The first line of your reply MUST be exactly: {"format": "json"}',
    OutputFormat.AUTO: (
        'The first line of your reply MUST be a JSON object declaring the output format, '
        'either {"format": "pdf"} for a formal letter to be printed or {"format": "json"} '
        'for plain text'
    ),
}


def build_messages(user_content: str, history: list[dict] | None = None) -> list[dict]:
    """System prompt, then prior conversation turns, then the new user message."""
    messages = [{"role": "system", "content": SYSTEM_PROMPT}]
    messages.extend(history or [])
    messages.append({"role": "user", "content": user_content})
    return messages


def build_ask_prompt(question: str) -> str:
    return question.strip()


def build_redact_prompt(complaint: str, requested: OutputFormat = OutputFormat.AUTO) -> str:
    """
    Ask for a formal letter to the Ajuntament, prefixed with the format header.

    The header line is followed by a blank line and then the letter itself,
    so the parser can recover the body even when the model leaves the
    JSON object without a ``body`` field.
    """
    header_rule = HEADER_INSTRUCTIONS[requested or OutputFormat.AUTO]
    return f"""Please redact a formal, civil and concise letter addressed to the City Hall (Ajuntament) of El Prat de Llobregat based on the complaint below.
Include a short summary, the specific request or remedy sought, and a polite closing.

Output format:
- {header_rule}
- Then leave one blank line
- Then write the letter as plain text, with no Markdown

Complaint text:
{complaint.strip()}"""
