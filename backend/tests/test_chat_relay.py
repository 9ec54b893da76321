"""Tests for history normalization and relay turn assembly."""

import pytest

from gateway.errors import UpstreamError
from gateway.models import ChatRole, ChatTurn
from gateway.services.chat_relay import (
    LEADING_TURN,
    SYSTEM_INSTRUCTION,
    ChatRelayService,
    normalize_history,
    normalize_history_entry,
)
from gateway.services.prompts import generate_system_message

from conftest import FakeGemini


class TestNormalizeHistory:
    @pytest.mark.parametrize(
        "entry, expected_text",
        [
            ({"role": "user", "parts": {"text": "from parts"}}, "from parts"),
            ({"role": "user", "content": "from content"}, "from content"),
            ({"role": "user", "text": "from text"}, "from text"),
        ],
    )
    def test_each_text_shape(self, entry, expected_text):
        assert normalize_history_entry(entry) == ChatTurn(role=ChatRole.USER, parts=[expected_text])

    def test_source_field_preference(self):
        entry = {"role": "user", "parts": {"text": "parts"}, "content": "content", "text": "text"}
        assert normalize_history_entry(entry).parts == ["parts"]

        entry = {"role": "user", "content": "content", "text": "text"}
        assert normalize_history_entry(entry).parts == ["content"]

    def test_parts_list_is_kept(self):
        entry = {"role": "model", "parts": [{"text": "one"}, "two"], "content": "ignored"}
        assert normalize_history_entry(entry) == ChatTurn(role=ChatRole.MODEL, parts=["one", "two"])

    def test_entry_without_text_becomes_empty_part(self):
        assert normalize_history_entry({"role": "user"}).parts == [""]

    @pytest.mark.parametrize(
        "role, expected",
        [("user", ChatRole.USER), ("model", ChatRole.MODEL), ("assistant", ChatRole.MODEL), (None, ChatRole.USER)],
    )
    def test_roles(self, role, expected):
        assert normalize_history_entry({"role": role, "text": "hi"}).role == expected

    def test_keeps_order(self):
        turns = normalize_history([
            {"role": "user", "text": "a"},
            {"role": "model", "content": "b"},
            {"role": "user", "parts": [{"text": "c"}]},
        ])
        assert [turn.parts[0] for turn in turns] == ["a", "b", "c"]

    def test_empty_or_missing_history(self):
        assert normalize_history(None) == []
        assert normalize_history([]) == []


class TestBuildTurns:
    def test_leading_turn_strategy(self):
        relay = ChatRelayService(FakeGemini(), max_output_tokens=1000, strategy=LEADING_TURN)

        turns, system_instruction = relay.build_turns(
            "SYSTEM", [{"role": "model", "text": "earlier"}], "new question"
        )

        assert system_instruction is None
        assert turns == [
            ChatTurn(role=ChatRole.USER, parts=["SYSTEM"]),
            ChatTurn(role=ChatRole.MODEL, parts=["earlier"]),
            ChatTurn(role=ChatRole.USER, parts=["new question"]),
        ]

    def test_system_instruction_strategy(self):
        relay = ChatRelayService(FakeGemini(), max_output_tokens=1000, strategy=SYSTEM_INSTRUCTION)

        turns, system_instruction = relay.build_turns("SYSTEM", [], "new question")

        assert system_instruction == "SYSTEM"
        assert turns == [ChatTurn(role=ChatRole.USER, parts=["new question"])]

    def test_unknown_strategy_rejected(self):
        with pytest.raises(ValueError):
            ChatRelayService(FakeGemini(), max_output_tokens=1000, strategy="developer_channel")


class TestAsk:
    async def test_relays_generated_text(self, bot_config):
        gemini = FakeGemini(response="Our store opens at nine.")
        relay = ChatRelayService(gemini, max_output_tokens=1000)

        answer = await relay.ask(bot_config, "When do you open?", [{"role": "user", "content": "hi"}])

        assert answer == "Our store opens at nine."
        call = gemini.calls[0]
        assert call["turns"][0].parts == [generate_system_message(bot_config)]
        assert call["turns"][-1] == ChatTurn(role=ChatRole.USER, parts=["When do you open?"])
        assert len(call["turns"]) == 3

    async def test_output_ceiling_is_global_not_per_bot(self, bot_config):
        gemini = FakeGemini()
        relay = ChatRelayService(gemini, max_output_tokens=321)

        await relay.ask(bot_config.model_copy(update={"max_response_length": 2000}), "hello")

        assert gemini.calls[0]["max_output_tokens"] == 321

    async def test_upstream_failure_is_not_retried(self, bot_config):
        gemini = FakeGemini(error="503 service unavailable")
        relay = ChatRelayService(gemini, max_output_tokens=1000)

        with pytest.raises(UpstreamError) as exc_info:
            await relay.ask(bot_config, "hello")

        assert exc_info.value.status_code == 500
        assert len(gemini.calls) == 1
