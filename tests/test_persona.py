"""Tests for persona prompt composition and history shaping."""

from common.models import ChatMessage

from griot.persona import (
    TOPIC_KNOWLEDGE,
    VOICE_STYLES,
    Topic,
    VoiceStyle,
    compose_system_prompt,
    normalize_history,
    resolve_topic,
    resolve_voice_style,
    trim_history,
)
from griot.providers.chat import gemini_contents


def _turns(*roles):
    return [ChatMessage(role=role, content=f"{role}-{i}") for i, role in enumerate(roles)]


class TestResolution:
    def test_known_voice_style(self):
        assert resolve_voice_style("auntie") == VoiceStyle.AUNTIE

    def test_unknown_voice_style_defaults_to_morgan(self):
        assert resolve_voice_style("pirate") == VoiceStyle.MORGAN
        assert resolve_voice_style(None) == VoiceStyle.MORGAN

    def test_page_chat_modes_map_to_voice_styles(self):
        assert resolve_voice_style("jamaican") == VoiceStyle.CARIBBEAN
        assert resolve_voice_style("grandma") == VoiceStyle.AUNTIE
        assert resolve_voice_style("barbershop") == VoiceStyle.HOOD

    def test_unknown_topic_defaults_to_other(self):
        assert resolve_topic("underwater_basket_weaving") == Topic.OTHER
        assert resolve_topic("") == Topic.OTHER
        assert resolve_topic("harlem_renaissance") == Topic.HARLEM_RENAISSANCE


class TestComposeSystemPrompt:
    def test_includes_style_topic_and_rules(self):
        prompt = compose_system_prompt("caribbean", "african_empires")

        assert prompt.startswith("You are an AI teaching Black history through conversation.")
        assert VOICE_STYLES[VoiceStyle.CARIBBEAN] in prompt
        assert TOPIC_KNOWLEDGE[Topic.AFRICAN_EMPIRES] in prompt
        assert "Keep responses to 30 words MAX" in prompt

    def test_unknown_keys_fall_back_to_defaults(self):
        prompt = compose_system_prompt("nope", "nope")

        assert VOICE_STYLES[VoiceStyle.MORGAN] in prompt
        assert TOPIC_KNOWLEDGE[Topic.OTHER] in prompt

    def test_word_cap_is_configurable(self):
        assert "Keep responses to 50 words MAX" in compose_system_prompt(None, None, max_words=50)


class TestHistory:
    def test_normalize_drops_leading_assistant_and_collapses_repeats(self):
        history = _turns("assistant", "assistant", "user", "user", "assistant")

        normalized = normalize_history(history)

        assert [m.role for m in normalized] == ["user", "assistant"]
        # first occurrence of each run is kept
        assert normalized[0].content == "user-2"
        assert normalized[1].content == "assistant-4"

    def test_normalize_empty_and_assistant_only(self):
        assert normalize_history([]) == []
        assert normalize_history(_turns("assistant", "assistant")) == []

    def test_trim_keeps_last_turns_and_coerces_roles(self):
        history = _turns(*(["user", "assistant"] * 6)) + [ChatMessage(role="system", content="x")]

        trimmed = trim_history(history, limit=10)

        assert len(trimmed) == 10
        assert trimmed[-1].role == "user"
        assert trimmed[-1].content == "x"

    def test_gemini_contents_alternate_and_end_with_message(self):
        history = _turns("assistant", "user", "assistant", "user")

        contents = gemini_contents(history, "Who was Mansa Musa?")

        assert [c["role"] for c in contents] == ["user", "model", "user"]
        assert contents[-1]["parts"] == [{"text": "Who was Mansa Musa?"}]
