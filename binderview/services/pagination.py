"""Windowed pagination over the filtered working set."""

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def next_page(items: Sequence[T], cursor: int, page_size: int) -> tuple[list[T], int]:
    """
    Return up to page_size items starting at cursor.

    The new cursor advances by the number of items actually returned, so a
    short final page leaves it exactly at the end. Calling past the end is a
    no-op that returns an empty page and the same cursor.
    """
    cursor = max(0, min(cursor, len(items)))
    page = list(items[cursor : cursor + max(page_size, 0)])
    return page, cursor + len(page)


def has_more(cursor: int, total: int) -> bool:
    return cursor < total


def reset_cursor() -> int:
    return 0
