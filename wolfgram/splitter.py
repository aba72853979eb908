"""Split oversized message text into Bot API sized chunks."""

from typing import List

#: Maximum number of characters (Unicode code points) sent per message.
MESSAGE_LIMIT: int = 4095


def split_message(text: str, limit: int = MESSAGE_LIMIT) -> List[str]:
    """Partition *text* into consecutive chunks of at most *limit* code points.

    Python strings are sequences of code points, so slicing never cuts a
    multi-byte character in half.  Text that already fits is returned as a
    single chunk, unchanged.  No chunk is ever empty, so empty text yields
    no chunks at all.
    """
    if limit <= 0:
        raise ValueError("limit must be positive")
    if not text:
        return []
    if len(text) <= limit:
        return [text]
    return [text[start : start + limit] for start in range(0, len(text), limit)]
