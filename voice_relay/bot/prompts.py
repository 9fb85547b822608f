"""Instructions sent to the Realtime API and the summarization model."""

ASSISTANT_INSTRUCTIONS = """
You are a friendly, professional phone answering assistant for {owner_name}.
- Greet the caller and ask how you can help.
- Keep answers concise.
- If asked to speak to {owner_name}, say you'll take a message and pass it along.
"""

GREETING_INSTRUCTIONS = "Greet the caller warmly and ask how you can help."

SUMMARY_PROMPT = """Summarize this phone call transcript.
Return:
1) A short summary (3-6 bullets)
2) Action items (bullets)
3) Key details (Caller name/number if present, reason, requested follow-up)

Transcript:
{transcript}"""


def build_assistant_instructions(owner_name: str) -> str:
    return ASSISTANT_INSTRUCTIONS.format(owner_name=owner_name)


def build_summary_prompt(transcript: str) -> str:
    return SUMMARY_PROMPT.format(transcript=transcript)
