"""Combine a raw user prompt with persona context.

``compose`` is pure: the same prompt and persona always give the same
output, and a missing or blank persona leaves the prompt untouched.
"""

from typing import List, Optional

from app.models.persona import PersonaFields

PERSONA_CONTEXT_HEADER = "Tailor the result to this persona:"

# Fixed order of the context lines
PERSONA_CONTEXT_FIELDS = (
    ("industry", "Industry"),
    ("target_audience", "Target audience"),
    ("brand_tone", "Brand tone"),
    ("bio", "Bio"),
)


def persona_context_lines(persona: Optional[PersonaFields]) -> List[str]:
    """Return one ``- Label: value`` line per non-blank persona field."""
    if persona is None:
        return []
    lines = []
    for field_name, label in PERSONA_CONTEXT_FIELDS:
        value = (getattr(persona, field_name, "") or "").strip()
        if value:
            lines.append(f"- {label}: {value}")
    return lines


def compose(raw_prompt: str, persona: Optional[PersonaFields]) -> str:
    """Build the provider-facing prompt.

    Args:
        raw_prompt: Prompt exactly as the user typed it.
        persona: The owner's persona, or None when they have none.

    Returns:
        ``raw_prompt`` unchanged when there is no persona context, otherwise
        ``raw_prompt`` followed by a blank line and the persona context block.
    """
    lines = persona_context_lines(persona)
    if not lines:
        return raw_prompt
    return "\n".join([raw_prompt, "", PERSONA_CONTEXT_HEADER, *lines])
