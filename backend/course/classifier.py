from __future__ import annotations

from .schemas import PerformanceLevel


STRONG_THRESHOLD = 80
WEAK_THRESHOLD = 60


def classify(percentage: int, *, strong_at: int = STRONG_THRESHOLD, weak_below: int = WEAK_THRESHOLD) -> PerformanceLevel:
	# Scores exactly on a cutoff belong to the higher band
	if percentage >= strong_at:
		return PerformanceLevel.STRONG
	if percentage < weak_below:
		return PerformanceLevel.WEAK
	return PerformanceLevel.PARTIAL
