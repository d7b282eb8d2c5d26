from typing import Optional, Sequence

from .models import BarcodeCandidate

# Empirically chosen: drops phantom reads from noisy/compressed images while
# still letting lightly blurred photos through.
MAX_AVERAGE_ERROR = 0.25


def average_error(symbol_errors: Sequence[float]) -> Optional[float]:
	if not symbol_errors:
		return None
	return sum(symbol_errors) / float(len(symbol_errors))


def is_confident(candidate: BarcodeCandidate, max_average_error: float = MAX_AVERAGE_ERROR) -> bool:
	"""Accept a barcode read unless its mean per-symbol error is above the limit.

	Candidates without any symbol errors are accepted as-is: the decoder had no
	error channel to report.
	"""
	avg = average_error(candidate.symbol_errors)
	if avg is None:
		return True
	return avg <= max_average_error
