# src/tts/chunking.py
"""Split long text into pieces the speech API accepts in one request.

The synthesis endpoint rejects inputs over 5000 bytes, so chunks are sized
by their UTF-8 length (Korean syllables take three bytes each).
"""
from typing import List

MAX_CHUNK_BYTES = 4500
SENTENCE_ENDS = (".", "!", "?", "。", "！", "？")

# a sentence break is only used if it lies in the last 20% of the window,
# a whitespace break only in the last 10%
SENTENCE_CUT_RATIO = 0.8
WHITESPACE_CUT_RATIO = 0.9


def utf8_len(text: str) -> int:
    return len(text.encode("utf-8"))


def _fit_end(text: str, start: int, max_bytes: int) -> int:
    """Largest end index such that text[start:end] fits in max_bytes."""
    used = 0
    end = start
    while end < len(text):
        size = utf8_len(text[end])
        if used + size > max_bytes:
            break
        used += size
        end += 1
    return end


def _cut_point(text: str, start: int, end: int) -> int:
    window = end - start
    sentence_floor = start + int(window * SENTENCE_CUT_RATIO)
    for i in range(end - 1, sentence_floor, -1):
        if text[i] in SENTENCE_ENDS:
            return i + 1

    whitespace_floor = start + int(window * WHITESPACE_CUT_RATIO)
    for i in range(end - 1, whitespace_floor, -1):
        if text[i].isspace():
            return i

    return end


def split_text_into_chunks(text: str, max_bytes: int = MAX_CHUNK_BYTES) -> List[str]:
    """Greedy split on sentence ends, then whitespace, then a hard cut.

    Every returned chunk is at most ``max_bytes`` long when UTF-8 encoded and
    only whitespace at chunk boundaries is dropped.
    """
    if max_bytes < 4:
        raise ValueError("max_bytes must allow at least one character (4 bytes)")

    text = text.strip()
    if utf8_len(text) <= max_bytes:
        return [text]

    chunks: List[str] = []
    start = 0
    while start < len(text):
        end = _fit_end(text, start, max_bytes)
        if end < len(text):
            end = _cut_point(text, start, end)

        chunk = text[start:end].strip()
        if chunk:
            chunks.append(chunk)
        start = end

    return chunks
