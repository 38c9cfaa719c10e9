"""
Example: Paced UI Streaming

This example feeds a simulated provider stream through StreamAggregator
and prints the UI events a chat frontend would receive. No API key is
needed; the token stream is generated locally.
"""

import asyncio

from llm_ui_stream import StreamAggregator, StreamingHelper, StreamingOptions, get_translator


def print_event(event):
    """Render UI events the way a terminal UI might."""
    if event.type == "message_update":
        print(f"\r{event.message.message}", end="", flush=True)
    elif event.type == "tool_update":
        print(f"\n  [tool {event.tool_call.name}: {event.status.value}]")
    elif event.type == "conversation_completed":
        metrics = event.metrics
        ttft = f"{metrics.ttft:.0f}ms" if metrics.ttft is not None else "n/a"
        print(f"\n\nDone in {metrics.total_time or 0:.0f}ms "
              f"({metrics.throughput} chars/s, TTFT {ttft})")
        if event.usage:
            print(f"Tokens: {event.usage.prompt_tokens} in / {event.usage.completion_tokens} out")
    elif event.type == "error":
        print(f"\nError: {event.error.message}")


async def fake_openai_stream(text: str, delay: float = 0.01):
    """Yield OpenAI-shaped chunk dicts a few characters at a time."""
    for i in range(0, len(text), 3):
        await asyncio.sleep(delay)
        yield {"id": "chatcmpl-demo", "choices": [{"delta": {"content": text[i:i + 3]}, "finish_reason": None}]}
    yield {
        "id": "chatcmpl-demo",
        "choices": [],
        "usage": {"prompt_tokens": 12, "completion_tokens": len(text) // 4},
    }


async def example_word_chunking():
    """Word-by-word pacing at 40ms."""
    print("=== Word chunking ===\n")

    aggregator = StreamAggregator(print_event, options=StreamingOptions(smoothing_delay=40))
    await StreamingHelper.pump(
        fake_openai_stream("Streaming text arrives in uneven bursts, but the UI sees a steady rhythm."),
        get_translator("openai"),
        aggregator,
        conversation_id="demo-words",
    )


async def example_sentence_chunking():
    """Whole sentences, configured from the environment with overrides."""
    print("\n=== Sentence chunking ===\n")

    options = StreamingOptions.from_env(chunking_strategy="sentence", smoothing_delay=200)
    aggregator = StreamAggregator(print_event, options=options)
    await StreamingHelper.pump(
        fake_openai_stream("First sentence. Second sentence! A third one? And the tail"),
        get_translator("openai"),
        aggregator,
        conversation_id="demo-sentences",
    )


async def main():
    await example_word_chunking()
    await example_sentence_chunking()


if __name__ == "__main__":
    asyncio.run(main())
