"""Transcoding of answer fragments into a newline-delimited JSON stream."""

import itertools
from collections.abc import Iterable, Iterator
from typing import TypeVar

from .schemas import ResponseChunk

T = TypeVar("T")

NDJSON_MEDIA_TYPE = "application/x-ndjson"


def to_ndjson(fragments: Iterable[str]) -> Iterator[str]:
    """Yield one ndjson line per non-empty fragment, in order.

    There is no terminating line: a client only sees the end of the answer
    through the stream closing.
    """
    for fragment in fragments:
        if not fragment:
            continue
        yield ResponseChunk.from_fragment(fragment).to_ndjson()


def prime(iterator: Iterator[T]) -> Iterator[T]:
    """Pull the first item now so start-up errors surface to the caller.

    Returns:
        An iterator over the same items, first one included.
    """
    try:
        first = next(iterator)
    except StopIteration:
        return iter(())
    return itertools.chain((first,), iterator)
