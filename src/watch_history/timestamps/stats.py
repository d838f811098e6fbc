"""
Diagnostic counters for timestamp resolution.
"""

from typing import Any, Dict, Optional


class ExtractionStats:
    """
    Accumulates attempt, success and per-stage counters across resolver calls.

    Stages are the resolver's pattern stages (``pattern``, ``fallback``).
    Each stage counts its attempts and successes, and how often each parse
    strategy produced the candidate it judged.

    The counters are telemetry only: the resolver writes to them but never
    reads them back, so sharing one instance across calls cannot change how
    any individual timestamp is resolved. Pass a fresh instance to a resolver
    for an isolated run.
    """

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.total_attempts = 0
        self.successful_extractions = 0
        self.failed_extractions = 0
        self.strategy_counts: Dict[str, Dict[str, Any]] = {}

    def record_attempt(self) -> None:
        self.total_attempts += 1

    def record_strategy(
        self, stage: str, success: bool, parser: Optional[str] = None
    ) -> None:
        counts = self.strategy_counts.setdefault(
            stage, {"attempts": 0, "successes": 0, "parsers": {}}
        )
        counts["attempts"] += 1
        if success:
            counts["successes"] += 1
        if parser:
            counts["parsers"][parser] = counts["parsers"].get(parser, 0) + 1

    def record_result(self, success: bool) -> None:
        if success:
            self.successful_extractions += 1
        else:
            self.failed_extractions += 1

    def snapshot(self) -> Dict[str, Any]:
        """
        Return a plain-dict copy of the counters.

        Returns:
            dict: Totals, the overall success rate (0-100) and per-strategy
                attempts, successes, success rate and parser counts.
        """
        overall = (
            self.successful_extractions / self.total_attempts * 100
            if self.total_attempts
            else 0.0
        )
        return {
            "total_attempts": self.total_attempts,
            "successful_extractions": self.successful_extractions,
            "failed_extractions": self.failed_extractions,
            "overall_success_rate": overall,
            "strategy_performance": [
                {
                    "strategy": strategy,
                    "attempts": counts["attempts"],
                    "successes": counts["successes"],
                    "parsers": dict(counts["parsers"]),
                    "success_rate": (
                        counts["successes"] / counts["attempts"] * 100
                        if counts["attempts"]
                        else 0.0
                    ),
                }
                for strategy, counts in self.strategy_counts.items()
            ],
        }


# Process-wide accumulator used when no instance is injected
default_stats = ExtractionStats()
