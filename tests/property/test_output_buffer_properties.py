from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from termdeck.terminal import OutputBuffer

_LINE_CHARS = st.characters(min_codepoint=32, max_codepoint=126)


@given(
    st.integers(min_value=1, max_value=20),
    st.lists(st.text(alphabet=_LINE_CHARS, max_size=12), max_size=60),
)
def test_buffer_keeps_the_most_recent_lines_in_order(capacity: int, lines: list[str]) -> None:
    buffer = OutputBuffer(capacity=capacity)

    for text in lines:
        buffer.append(text)
        assert len(buffer) <= capacity

    assert buffer.texts() == lines[-capacity:]


@given(
    st.integers(min_value=1, max_value=20),
    st.lists(st.text(alphabet=_LINE_CHARS, max_size=12), max_size=40),
)
def test_clear_always_yields_empty_buffer(capacity: int, lines: list[str]) -> None:
    buffer = OutputBuffer(capacity=capacity)
    for text in lines:
        buffer.append(text)

    buffer.clear()

    assert buffer.snapshot() == []
