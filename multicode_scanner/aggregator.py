import threading
import time
from typing import Callable, List, Set, Tuple

from .models import CodeKind, ScanResult


class ResultAggregator:
	"""Deduplicated, first-seen-ordered findings of one scan.

	`add` takes a lock so attempts running on worker threads can report
	directly.
	"""

	def __init__(self, clock: Callable[[], float] = time.time) -> None:
		self._clock = clock
		self._lock = threading.Lock()
		self._seen: Set[Tuple[str, CodeKind]] = set()
		self._results: List[ScanResult] = []

	def add(self, payload: str, kind: CodeKind) -> bool:
		key = (payload, CodeKind(kind))
		with self._lock:
			if key in self._seen:
				return False
			self._seen.add(key)
			self._results.append(ScanResult(payload=payload, kind=key[1], found_at=self._clock()))
			return True

	def to_list(self) -> List[ScanResult]:
		with self._lock:
			return list(self._results)

	def __len__(self) -> int:
		with self._lock:
			return len(self._results)
