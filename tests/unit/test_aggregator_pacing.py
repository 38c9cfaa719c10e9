"""Pacing and finalization tests for StreamAggregator."""

import pytest

TOKENS = ["The", " quick", " brown", " fox", " jumps", " over", " the", " lazy", " dog", "."]


def feed_tokens(aggregator, tokens):
    for token in tokens:
        aggregator.handle_event({"type": "token", "token": token})


class TestSmoothedPacing:
    """Chunked emission through the pacing timer."""

    def test_updates_are_spaced_by_smoothing_delay(self, make_aggregator, sink, scheduler):
        aggregator = make_aggregator(smoothing_delay=50)
        aggregator.handle_event({"type": "start", "conversationId": "conv-1"})

        feed_tokens(aggregator, TOKENS)
        scheduler.run_all()

        updates = sink.of_type("message_update")
        assert len(updates) == 8
        times = [u.metrics.elapsed_time for u in updates]
        assert all(later - earlier >= 50 for earlier, later in zip(times, times[1:]))

        aggregator.handle_event({"type": "complete"})
        completed = sink.of_type("conversation_completed")
        assert len(completed) == 1
        assert completed[0].message.message == "".join(TOKENS)

    def test_first_chunk_is_emitted_immediately(self, make_aggregator, sink, scheduler):
        aggregator = make_aggregator(smoothing_delay=50)
        aggregator.handle_event({"type": "start", "conversationId": "conv-1"})

        feed_tokens(aggregator, ["Hello", " world", " again"])

        assert sink.messages == ["Hello "]
        assert aggregator.pending_chunks == 1
        assert len(scheduler.pending) == 1

    def test_at_most_one_timer_is_armed(self, make_aggregator, scheduler):
        aggregator = make_aggregator(smoothing_delay=50)

        feed_tokens(aggregator, TOKENS)

        assert len(scheduler.pending) == 1

    def test_queue_drains_without_new_tokens(self, make_aggregator, sink, scheduler):
        aggregator = make_aggregator(smoothing_delay=30)

        feed_tokens(aggregator, TOKENS)
        assert len(sink.messages) == 1

        scheduler.advance(30)
        assert len(sink.messages) == 2
        scheduler.advance(29)
        assert len(sink.messages) == 2
        scheduler.advance(1)
        assert len(sink.messages) == 3

        scheduler.run_all()
        assert sink.messages[-1] == "The quick brown fox jumps over the lazy "
        assert aggregator.pending_chunks == 0

    def test_message_length_never_decreases(self, make_aggregator, sink, scheduler):
        aggregator = make_aggregator(smoothing_delay=10, chunking_strategy="character")

        feed_tokens(aggregator, ["abc", "def", "ghi"])
        scheduler.run_all()
        aggregator.handle_event({"type": "complete"})

        lengths = [len(m) for m in sink.messages]
        assert lengths == sorted(lengths)
        assert sink.of_type("conversation_completed")[0].message.message == "abcdefghi"

    def test_waits_remaining_interval_after_idle_period(self, make_aggregator, sink, scheduler, clock):
        aggregator = make_aggregator(smoothing_delay=50)

        feed_tokens(aggregator, ["one", " two"])
        assert sink.messages == ["one "]

        clock.advance(20)
        feed_tokens(aggregator, [" three"])
        assert sink.messages == ["one "]
        assert scheduler.pending[0].due == clock() + 30

        clock.advance(100)
        feed_tokens(aggregator, [" four"])
        # The armed timer still owns emission
        assert len(sink.messages) == 1


class TestCompletion:
    """Drain-on-complete behaviour."""

    def test_complete_drains_queue_and_buffer(self, make_aggregator, sink, scheduler):
        aggregator = make_aggregator(smoothing_delay=50)
        aggregator.handle_event({"type": "start", "conversationId": "conv-1"})

        feed_tokens(aggregator, TOKENS)
        assert aggregator.pending_chunks > 0

        aggregator.handle_event({"type": "complete", "tokens": 12})

        completed = sink.of_type("conversation_completed")[0]
        assert completed.message.message == "The quick brown fox jumps over the lazy dog."
        assert completed.message.tokens == 12
        assert completed.metrics.llm_tokens == 12
        assert aggregator.pending_chunks == 0
        assert not aggregator.is_streaming

    def test_no_events_after_complete(self, make_aggregator, sink, scheduler):
        aggregator = make_aggregator(smoothing_delay=50)

        feed_tokens(aggregator, TOKENS)
        aggregator.handle_event({"type": "complete"})
        count = len(sink.events)

        scheduler.advance(1000)

        assert len(sink.events) == count
        assert sink.types[-1] == "conversation_completed"
        assert scheduler.pending == []

    def test_final_metrics(self, make_aggregator, sink, clock):
        aggregator = make_aggregator(smoothing_enabled=False)
        aggregator.handle_event({"type": "start", "conversationId": "conv-1"})

        clock.advance(100)
        aggregator.handle_event({"type": "token", "token": "Hello"})
        clock.advance(20)
        aggregator.handle_event({"type": "token", "token": " world"})
        clock.advance(80)
        aggregator.handle_event({"type": "complete"})

        metrics = sink.of_type("conversation_completed")[0].metrics
        assert metrics.ttft == 100
        assert metrics.total_time == 200
        assert metrics.throughput == round(11 / 200 * 1000)
        assert metrics.streaming_throughput == round(11 / 100 * 1000)
        assert metrics.avg_token_delay == 20
        assert metrics.token_count == 2

        assert aggregator.ttft == 100
        assert aggregator.completion_time == 200
        assert aggregator.throughput == 110

    def test_usage_is_normalized_onto_completion(self, make_aggregator, sink):
        aggregator = make_aggregator(smoothing_enabled=False, model="claude-sonnet", model_service="anthropic")

        aggregator.handle_event({"type": "complete", "usage": {"input_tokens": 12, "output_tokens": 30}})

        usage = sink.of_type("conversation_completed")[0].usage
        assert usage.prompt_tokens == 12
        assert usage.completion_tokens == 30
        assert usage.total_tokens == 42
        assert usage.provider == "anthropic"
        assert usage.model == "claude-sonnet"

    def test_set_usage_data(self, make_aggregator, sink):
        aggregator = make_aggregator(smoothing_enabled=False)
        aggregator.set_usage_data({"prompt_tokens": 5, "completion_tokens": 7})

        aggregator.handle_event({"type": "complete"})

        assert sink.of_type("conversation_completed")[0].usage.total_tokens == 12


class TestUnsmoothed:
    """Raw token pass-through with rate-limited updates."""

    def test_hi_there_scenario(self, make_aggregator, sink):
        aggregator = make_aggregator(smoothing_enabled=False)

        aggregator.handle_event({"type": "start", "conversationId": "abc"})
        aggregator.handle_event({"type": "token", "token": "Hi"})
        aggregator.handle_event({"type": "token", "token": " there"})
        aggregator.handle_event({"type": "complete"})

        assert sink.types[0] == "conversation_started"
        assert sink.events[0].conversation_id == "abc"
        assert "message_update" in sink.types
        assert sink.types[-1] == "conversation_completed"
        assert sink.events[-1].message.message == "Hi there"

    def test_rate_limited_update_fires_once(self, make_aggregator, sink, scheduler):
        aggregator = make_aggregator(smoothing_enabled=False, smoothing_delay=30)

        feed_tokens(aggregator, ["a", "b", "c", "d"])
        assert sink.messages == ["a"]
        assert len(scheduler.pending) == 1

        scheduler.advance(30)
        assert sink.messages == ["a", "abcd"]
        assert scheduler.pending == []

    def test_token_after_interval_emits_immediately(self, make_aggregator, sink, clock):
        aggregator = make_aggregator(smoothing_enabled=False, smoothing_delay=30)

        feed_tokens(aggregator, ["a"])
        clock.advance(31)
        feed_tokens(aggregator, ["b"])

        assert sink.messages == ["a", "ab"]


@pytest.mark.parametrize("strategy", ["character", "word", "sentence"])
def test_every_strategy_preserves_text(make_aggregator, sink, scheduler, strategy):
    text = ["Streaming ", "is fun. ", "Really", "! Yes.", " ok"]
    aggregator = make_aggregator(chunking_strategy=strategy, smoothing_delay=5)

    feed_tokens(aggregator, text)
    scheduler.advance(17)
    aggregator.handle_event({"type": "complete"})

    assert sink.of_type("conversation_completed")[0].message.message == "".join(text)


def test_custom_chunker_through_aggregator(make_aggregator, sink, scheduler):
    def by_comma(text):
        parts = text.split(",")
        return [p + "," for p in parts[:-1]], parts[-1]

    aggregator = make_aggregator(chunking_strategy=by_comma, smoothing_delay=10)
    feed_tokens(aggregator, ["a,b", ",c"])
    scheduler.run_all()

    assert sink.messages == ["a,", "a,b,"]
    aggregator.handle_event({"type": "complete"})
    assert sink.events[-1].message.message == "a,b,c"
