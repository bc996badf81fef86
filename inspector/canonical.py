from __future__ import annotations

from typing import Iterable, List, TypeVar

T = TypeVar("T")


def canonicalize(items: Iterable[T]) -> List[T]:
	"""Sort ascending and drop duplicates; equal items end up adjacent after the sort."""
	result: List[T] = []
	for item in sorted(items):
		if result and result[-1] == item:
			continue
		result.append(item)
	return result
