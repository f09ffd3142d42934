"""Index-shift-safe ordering of pointer-addressed operations.

Removing ``/list/0`` shifts every later element down by one, so a batch of
removals has to run from the highest index to the lowest. Additions are the
mirror image: lower indices first, so each insert lands where it was computed.

  order_removals   deeper first, then higher array index first
  order_additions  shallower first, then lower array index first

Both sorts are stable: pointers that compare equal keep their input order.
"""

from typing import Callable, Iterable, TypeVar

from schema_delta.path import split_pointer

T = TypeVar("T")


def _token_key(token: str) -> tuple[int, int, str]:
    # Numeric tokens compare as integers and sort before names
    if token.isdigit():
        return (0, int(token), "")
    return (1, 0, token)


def pointer_sort_key(pointer: str) -> tuple[int, tuple[tuple[int, int, str], ...]]:
    tokens = split_pointer(pointer)
    return (len(tokens), tuple(_token_key(t) for t in tokens))


def _pointer_of(item) -> str:
    return item if isinstance(item, str) else item.path


def order_removals(items: Iterable[T], key: Callable[[T], str] = _pointer_of) -> list[T]:
    """Deeper pointers first; siblings in an array from the highest index down."""
    return sorted(items, key=lambda item: pointer_sort_key(key(item)), reverse=True)


def order_additions(items: Iterable[T], key: Callable[[T], str] = _pointer_of) -> list[T]:
    """Shallower pointers first; siblings in an array from the lowest index up."""
    return sorted(items, key=lambda item: pointer_sort_key(key(item)))
