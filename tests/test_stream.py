"""Tests for folding streamed chunks into a response."""

from types import SimpleNamespace

from callagent.agent.stream import StreamAccumulator


def chunk(content=None, name=None, arguments=None, finish_reason=None):
    function_call = None
    if name is not None or arguments is not None:
        function_call = SimpleNamespace(name=name, arguments=arguments)
    delta = SimpleNamespace(content=content, function_call=function_call)
    return SimpleNamespace(choices=[SimpleNamespace(delta=delta, finish_reason=finish_reason)])


def test_text_fragments_are_returned_and_joined():
    accumulator = StreamAccumulator()

    returned = [accumulator.feed(chunk(content=c)) for c in ["Hel", "lo", "", None]]

    assert returned == ["Hel", "lo", None, None]
    assert accumulator.text == "Hello"
    assert accumulator.fragments == ["Hel", "lo"]
    assert accumulator.function_call is None


def test_function_call_is_assembled_from_fragments():
    accumulator = StreamAccumulator()
    accumulator.feed(chunk(name="svcA-doThing", arguments=""))
    accumulator.feed(chunk(arguments='{"x":'))
    accumulator.feed(chunk(arguments="1}"))
    accumulator.feed(chunk(finish_reason="function_call"))

    call = accumulator.function_call
    assert call.name == "svcA-doThing"
    assert call.arguments == '{"x":1}'
    assert accumulator.finish_reason == "function_call"
    assert accumulator.text == ""


def test_second_function_name_is_ignored():
    accumulator = StreamAccumulator()
    accumulator.feed(chunk(name="svc-first", arguments="{}"))
    accumulator.feed(chunk(name="svc-second"))

    assert accumulator.function_call.name == "svc-first"
    assert accumulator.function_call.arguments == "{}"


def test_chunks_without_choices_are_skipped():
    accumulator = StreamAccumulator()

    assert accumulator.feed(SimpleNamespace(choices=[])) is None
    assert accumulator.feed(SimpleNamespace(choices=None)) is None
    assert accumulator.chunk_count == 2
    assert accumulator.text == ""
