"""Unit tests for provider stream translators."""

import json
from types import SimpleNamespace

import pytest

from llm_ui_stream.providers import (
    AnthropicStreamTranslator,
    GoogleStreamTranslator,
    OpenAIStreamTranslator,
    get_translator,
)
from tests.helpers.streaming_mocks import (
    create_anthropic_events,
    create_openai_chunks,
    openai_chunk,
    openai_tool_delta,
)


def translate_all(translator, chunks):
    events = []
    for chunk in chunks:
        events.extend(translator.translate(chunk))
    events.extend(translator.finish())
    return events


class TestOpenAITranslator:
    """Chat-completion chunks."""

    def test_text_stream(self):
        events = translate_all(OpenAIStreamTranslator(), create_openai_chunks(["Hello", " world"]))

        assert [e.type for e in events] == ["token", "token", "complete"]
        assert [e.token for e in events[:2]] == ["Hello", " world"]
        assert events[-1].message_id == "chatcmpl-123"
        assert events[-1].usage == {"prompt_tokens": 10, "completion_tokens": 2, "total_tokens": 12}

    def test_tool_call_stream(self):
        chunks = [
            openai_chunk(tool_calls=[openai_tool_delta(0, "call_a", "get_weather", "")]),
            openai_chunk(tool_calls=[openai_tool_delta(0, arguments='{"city": ')]),
            openai_chunk(tool_calls=[openai_tool_delta(0, arguments='"Paris"}')]),
            openai_chunk(tool_calls=[openai_tool_delta(1, "call_b", "get_time", "{}")]),
            openai_chunk(finish_reason="tool_calls"),
        ]

        events = translate_all(OpenAIStreamTranslator(), chunks)

        assert [e.type for e in events] == [
            "tool_call_start", "tool_call_delta", "tool_call_delta",
            "tool_call_start", "tool_call_delta",
            "tool_call_parsed", "tool_call_parsed", "complete",
        ]
        assert events[0].tool_call.id == "call_a"
        assert events[0].tool_call.arguments == ""
        parsed = [e.tool_call for e in events if e.type == "tool_call_parsed"]
        assert [(t.id, t.name, t.arguments) for t in parsed] == [
            ("call_a", "get_weather", '{"city": "Paris"}'),
            ("call_b", "get_time", "{}"),
        ]

    def test_parsed_emitted_on_finish_without_tool_finish_reason(self):
        translator = OpenAIStreamTranslator()
        translator.translate(openai_chunk(tool_calls=[openai_tool_delta(0, "call_a", "f", "{}")]))

        events = translator.finish()

        assert [e.type for e in events] == ["tool_call_parsed", "complete"]
        assert translator.finish() == []

    def test_dict_chunks(self):
        chunk = {"id": "c1", "choices": [{"delta": {"content": "hi"}, "finish_reason": None}]}

        assert [e.token for e in OpenAIStreamTranslator().translate(chunk)] == ["hi"]


class TestAnthropicTranslator:
    """Anthropic messages events."""

    def test_text_stream(self):
        events = translate_all(AnthropicStreamTranslator(), create_anthropic_events(["Hi", " there"]))

        assert [e.type for e in events] == ["token", "token", "complete"]
        assert events[-1].message_id == "msg_01"
        assert events[-1].usage == {"input_tokens": 10, "output_tokens": 4}

    def test_thinking_and_tool_use(self):
        chunks = [
            {"type": "message_start", "message": {"id": "msg_02", "usage": {"input_tokens": 5}}},
            {"type": "content_block_start", "index": 0, "content_block": {"type": "thinking"}},
            {"type": "content_block_delta", "index": 0, "delta": {"type": "thinking_delta", "thinking": "Hmm"}},
            {"type": "content_block_delta", "index": 0, "delta": {"type": "signature_delta", "signature": "abc"}},
            {"type": "content_block_stop", "index": 0},
            {"type": "content_block_start", "index": 1,
             "content_block": {"type": "tool_use", "id": "toolu_1", "name": "search"}},
            {"type": "content_block_delta", "index": 1,
             "delta": {"type": "input_json_delta", "partial_json": '{"q": "x"}'}},
            {"type": "content_block_stop", "index": 1},
            {"type": "message_delta", "delta": {"stop_reason": "tool_use"}, "usage": {"output_tokens": 9}},
            {"type": "message_stop"},
        ]
        translator = AnthropicStreamTranslator()

        events = translate_all(translator, chunks)

        assert [e.type for e in events] == [
            "reasoning_start", "reasoning_delta", "reasoning_end",
            "tool_call_start", "tool_call_delta", "tool_call_parsed", "complete",
        ]
        assert events[0].format == "thinking_tag"
        assert events[2].full_content == "Hmm"
        assert events[2].signature == "abc"
        assert events[5].tool_call.arguments == '{"q": "x"}'
        assert translator.stop_reason == "tool_use"
        assert events[-1].usage == {"input_tokens": 5, "output_tokens": 9}

    def test_tool_without_input_gets_empty_object(self):
        chunks = [
            {"type": "content_block_start", "index": 0,
             "content_block": SimpleNamespace(type="tool_use", id="toolu_2", name="now")},
            {"type": "content_block_stop", "index": 0},
        ]

        events = translate_all(AnthropicStreamTranslator(), chunks)

        assert events[1].tool_call.arguments == "{}"


class TestGoogleTranslator:
    """Gemini stream responses."""

    def test_text_thoughts_and_function_calls(self):
        chunks = [
            {"candidates": [{"content": {"parts": [{"text": "Planning", "thought": True}]}}]},
            {"candidates": [{"content": {"parts": [{"text": "Sure. "}]}}]},
            {"candidates": [{"content": {"parts": [
                {"function_call": {"name": "lookup", "args": {"id": 7}}},
            ]}}],
             "usage_metadata": {"prompt_token_count": 4, "candidates_token_count": 6}},
        ]

        events = translate_all(GoogleStreamTranslator(), chunks)

        assert [e.type for e in events] == [
            "reasoning_start", "reasoning_delta", "reasoning_end",
            "token", "tool_call_start", "tool_call_parsed", "complete",
        ]
        parsed = events[5].tool_call
        assert parsed.id == events[4].tool_call.id
        assert parsed.name == "lookup"
        assert json.loads(parsed.arguments) == {"id": 7}
        assert events[-1].usage == {"prompt_token_count": 4, "candidates_token_count": 6}

    def test_open_thought_closed_on_finish(self):
        translator = GoogleStreamTranslator()
        translator.translate({"candidates": [{"content": {"parts": [{"text": "x", "thought": True}]}}]})

        assert [e.type for e in translator.finish()] == ["reasoning_end", "complete"]


class TestRegistry:
    """Translator lookup."""

    @pytest.mark.parametrize("name, cls", [
        ("openai", OpenAIStreamTranslator),
        ("Anthropic", AnthropicStreamTranslator),
        ("google", GoogleStreamTranslator),
        ("groq", OpenAIStreamTranslator),
    ])
    def test_get_translator(self, name, cls):
        assert isinstance(get_translator(name), cls)

    def test_fresh_instance_each_call(self):
        assert get_translator("openai") is not get_translator("openai")

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="No stream translator"):
            get_translator("cohere")
