"""Tests for persona-aware prompt composition."""

from app.models.persona import PersonaFields
from app.services.prompt_composer import (
    PERSONA_CONTEXT_HEADER,
    compose,
    persona_context_lines,
)


class TestCompose:
    """compose() is pure and deterministic."""

    def test_no_persona_returns_prompt_unchanged(self):
        assert compose("Write a tagline", None) == "Write a tagline"

    def test_blank_persona_returns_prompt_unchanged(self):
        persona = PersonaFields(bio="  ", industry="", target_audience="", brand_tone="")
        assert compose("Write a tagline", persona) == "Write a tagline"

    def test_persona_context_follows_prompt(self):
        persona = PersonaFields(industry="Tech", target_audience="Devs", brand_tone="Casual")
        result = compose("Write a tagline", persona)

        assert result.startswith("Write a tagline\n\n")
        assert PERSONA_CONTEXT_HEADER in result
        assert "Tech" in result
        assert "Devs" in result
        assert "Casual" in result

    def test_fields_in_fixed_order_and_blanks_skipped(self):
        persona = PersonaFields(bio="Founder", industry="Tech", target_audience="", brand_tone="Casual")
        assert persona_context_lines(persona) == [
            "- Industry: Tech",
            "- Brand tone: Casual",
            "- Bio: Founder",
        ]

    def test_same_input_same_output(self):
        persona = PersonaFields(industry="Retail", bio="Shop owner")
        assert compose("Post idea", persona) == compose("Post idea", persona)

    def test_raw_prompt_is_not_altered(self):
        persona = PersonaFields(industry="Tech")
        raw = "  Keep my spacing  "
        assert compose(raw, persona).startswith(raw + "\n")
