"""Tolerant collection predicate.

``almost_every`` is the statistical cousin of :func:`all`: it accepts a
collection when strictly more than 95% of its elements satisfy a predicate.
Scraped data is rarely perfect, and a single malformed e-mail address on a
procurement portal should not fail an otherwise healthy scraper.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Iterable, Optional, Union

ALMOST_EVERY_THRESHOLD = 0.95


def almost_every(
    collection: Union[Iterable[Any], Mapping[Any, Any]],
    predicate: Callable[..., Any],
    context: Optional[Any] = None,
) -> bool:
    """Return True if more than 95% of the elements satisfy ``predicate``.

    Mappings are checked on their values; keys are ignored. An empty
    collection is vacuously accepted. The comparison is strict, so exactly
    95% passing (19 of 20) is rejected.

    Args:
        collection: Sequence, iterable or mapping to scan
        predicate: Callable returning a truthy value for passing elements
        context: Optional object bound as the predicate's first argument,
            so the predicate is called as ``predicate(context, item)``

    Returns:
        Whether the pass ratio is above the threshold
    """
    if isinstance(collection, Mapping):
        items = collection.values()
    else:
        items = collection

    total = 0
    passed = 0
    # Full scan: a late failure can still leave the ratio above threshold.
    for item in items:
        total += 1
        result = predicate(context, item) if context is not None else predicate(item)
        if result:
            passed += 1

    if total == 0:
        return True

    return passed / total > ALMOST_EVERY_THRESHOLD
