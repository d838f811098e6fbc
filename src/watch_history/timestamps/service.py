import time
from datetime import datetime
from typing import Callable, List, NamedTuple, Optional, Pattern

import pytz

from watch_history.shared.schemas.dto import (
    ExtractionAttempt,
    TimestampExtractionResult,
    TimestampQuality,
)
from watch_history.shared.utils.configs import base_configs
from watch_history.shared.utils.helpers import markup_to_text, sanitize_text
from watch_history.shared.utils.logger import logger
from watch_history.timestamps.parsers import PARSE_STRATEGIES
from watch_history.timestamps.patterns import (
    AMBIGUOUS_NUMERIC_RE,
    CLOCK_ABBREVIATION_RE,
    EURO_DOT_RE,
    FALLBACK_PATTERNS,
    FOUR_DIGIT_YEAR_RE,
    INTERNATIONAL_PATTERNS,
    ISO_DATE_RE,
    MERIDIEM_NORMALIZE_RE,
    MERIDIEM_RE,
    NAMED_MONTH_RE,
    NON_ENGLISH_CONNECTOR_RE,
    PRIMARY_PATTERNS,
    SECONDS_RE,
    TIMEZONE_OFFSETS,
    TIMEZONE_RE,
    TRAILING_TIMEZONE_RE,
    US_NUMERIC_RE,
)
from watch_history.timestamps.stats import ExtractionStats, default_stats

BASE_CONFIDENCE = 40
STRATEGY_BONUS = {
    "manual-primary": 25,
    "format-table": 15,
    "generic": 5,
}
MANUAL_BONUS = 15
# Keeps a time read in the wrong zone under the default gate
UNKNOWN_TIMEZONE_PENALTY = 45


class ParsedCandidate(NamedTuple):
    strategy: str
    instant: datetime
    reasonable: bool


class TimestampResolver:
    """
    Resolves raw timestamp text from the export into an absolute instant.

    Resolution runs in two stages, primary patterns then the looser fallback
    patterns. In each stage the first matching pattern supplies a raw
    substring, which goes through the parse cascade, the confidence score
    and the acceptance gate. A resolver holds configuration only; nothing
    learned from one call is reused by the next.
    """

    def __init__(
        self,
        min_confidence: Optional[int] = None,
        enable_international: bool = True,
        default_timezone: Optional[pytz.BaseTzInfo] = None,
        debug: bool = False,
        stats: Optional[ExtractionStats] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the resolver.

        Args:
            min_confidence: Confidence a timestamp needs to be accepted
            enable_international: Also try localized date layouts
            default_timezone: Zone for timestamps without an abbreviation
            debug: Collect the attempt trail on each result
            stats: Counter accumulator, the process-wide one by default
            clock: Source of "now" for the plausible year range
        """
        self.min_confidence = (
            base_configs["min_timestamp_confidence"]
            if min_confidence is None
            else min_confidence
        )
        self.enable_international = enable_international
        self.default_timezone = default_timezone or base_configs["timezone"]
        self.debug = debug
        self.stats = stats if stats is not None else default_stats
        self.clock = clock or (lambda: datetime.now(pytz.utc))
        self.primary_patterns: List[Pattern] = list(PRIMARY_PATTERNS)
        if enable_international:
            self.primary_patterns.extend(INTERNATIONAL_PATTERNS)

    def resolve(self, text: str, markup: str = "") -> TimestampExtractionResult:
        """
        Resolve the timestamp in an entry.

        Args:
            text: Plain text of the entry
            markup: Markup of the entry, searched after the text for each pattern

        Returns:
            TimestampExtractionResult: ``timestamp`` is None when nothing was
                accepted; ``raw_timestamp``, ``confidence`` and ``quality`` still
                describe the first substring that matched a pattern.
        """
        started = time.perf_counter()
        self.stats.record_attempt()
        result = TimestampExtractionResult(debug_attempts=[] if self.debug else None)

        clean_text = self.sanitize(text or "")
        clean_markup = self.sanitize(markup_to_text(markup)) if markup else ""

        stages = (
            ("pattern", self.primary_patterns),
            ("fallback", FALLBACK_PATTERNS),
        )
        unknown_zone: Optional[str] = None
        for origin, patterns in stages:
            stage_started = time.perf_counter()
            result.metrics.attempts_count += 1
            is_fallback = origin == "fallback"
            if is_fallback:
                result.metrics.fallback_used = True

            raw = self.match_patterns(patterns, clean_text, clean_markup)
            if raw is None:
                self._record_attempt(
                    result, origin, clean_text, "failed", stage_started,
                    error="No timestamp pattern found",
                )
                self.stats.record_strategy(origin, False)
                continue

            result.metrics.pattern_match_count += 1
            # A looser match can drop the abbreviation the stricter one saw
            unknown_zone = unknown_zone or self.find_unknown_timezone(raw)
            candidate = self.parse(raw)
            confidence = (
                self.score(raw, candidate.strategy, is_fallback, unknown_zone)
                if candidate
                else 0
            )
            reasonable = candidate is not None and candidate.reasonable

            if result.raw_timestamp is None:
                result.raw_timestamp = raw
                result.confidence = confidence
                result.quality = self.analyze_quality(raw, reasonable)

            if candidate and reasonable and confidence >= self.min_confidence:
                result.timestamp = candidate.instant
                result.raw_timestamp = raw
                result.strategy = f"{origin}-{candidate.strategy}"
                result.confidence = confidence
                result.quality = self.analyze_quality(raw, reasonable)
                self._record_attempt(
                    result, origin, raw, "success", stage_started, confidence
                )
                self.stats.record_strategy(origin, True, candidate.strategy)
                self.stats.record_result(True)
                result.metrics.extraction_time_ms = _elapsed_ms(started)
                return result

            if candidate is None:
                error = "All parsing strategies failed"
            elif not reasonable:
                error = f"Date outside plausible range: {candidate.instant.isoformat()}"
            elif unknown_zone:
                error = (
                    f"Unrecognized timezone {unknown_zone}, "
                    f"confidence {confidence} below {self.min_confidence}"
                )
            else:
                error = f"Confidence {confidence} below {self.min_confidence}"
            self._record_attempt(
                result, origin, raw, "failed", stage_started, confidence, error
            )
            self.stats.record_strategy(
                origin, False, candidate.strategy if candidate else None
            )

        self.stats.record_result(False)
        if unknown_zone:
            logger.warning(
                f"Rejected timestamp '{result.raw_timestamp}': timezone "
                f"{unknown_zone} is not recognized (confidence {result.confidence})"
            )
        elif result.raw_timestamp:
            logger.debug(
                f"Rejected timestamp '{result.raw_timestamp}' "
                f"(confidence {result.confidence})"
            )
        result.metrics.extraction_time_ms = _elapsed_ms(started)
        return result

    @staticmethod
    def sanitize(text: str) -> str:
        text = sanitize_text(text)
        return MERIDIEM_NORMALIZE_RE.sub(
            lambda match: f"{match.group(1)} {match.group(2).upper()}M", text
        )

    @staticmethod
    def match_patterns(patterns: List[Pattern], text: str, markup: str) -> Optional[str]:
        for pattern in patterns:
            for source in (text, markup):
                if not source:
                    continue
                match = pattern.search(source)
                if match:
                    return match.group(1).strip()
        return None

    def parse(self, raw: str) -> Optional[ParsedCandidate]:
        """
        Run the parse cascade on a matched substring.

        The first candidate inside the plausible year range wins. When no
        strategy yields one, the first candidate produced is returned so the
        caller can still score it; it fails at the gate.
        """
        tz_match = TIMEZONE_RE.search(raw)
        abbreviation = tz_match.group(1) if tz_match else None
        cleaned = TRAILING_TIMEZONE_RE.sub("", raw).strip()

        first: Optional[ParsedCandidate] = None
        for name, strategy in PARSE_STRATEGIES:
            try:
                parsed = strategy(cleaned)
                if parsed is None:
                    continue
                instant = self.to_utc(parsed, abbreviation)
            except (ValueError, OverflowError):
                continue
            candidate = ParsedCandidate(name, instant, self.is_reasonable(instant))
            if candidate.reasonable:
                return candidate
            if first is None:
                first = candidate
        return first

    def to_utc(self, parsed: datetime, abbreviation: Optional[str]) -> datetime:
        if parsed.tzinfo is None:
            if abbreviation:
                parsed = parsed.replace(
                    tzinfo=pytz.FixedOffset(TIMEZONE_OFFSETS[abbreviation])
                )
            else:
                parsed = self.default_timezone.localize(parsed)
        return parsed.astimezone(pytz.utc)

    def is_reasonable(self, instant: datetime) -> bool:
        latest_year = self.clock().year + 1
        return base_configs["platform_founding_year"] <= instant.year <= latest_year

    @staticmethod
    def find_unknown_timezone(raw: str) -> Optional[str]:
        """Abbreviation after a clock time that is missing from the offset table."""
        for match in CLOCK_ABBREVIATION_RE.finditer(raw):
            if match.group(1) not in TIMEZONE_OFFSETS:
                return match.group(1)
        return None

    @staticmethod
    def score(
        raw: str,
        strategy: str,
        is_fallback: bool,
        unknown_timezone: Optional[str] = None,
    ) -> int:
        """
        Heuristic 0-100 trust score for a raw substring and the strategy that parsed it.

        An unrecognized zone abbreviation means the time was read in the
        default zone, so the instant may be off by hours.
        """
        confidence = BASE_CONFIDENCE
        if strategy in STRATEGY_BONUS:
            confidence += STRATEGY_BONUS[strategy]
        elif strategy.startswith("manual-"):
            confidence += MANUAL_BONUS

        has_year = FOUR_DIGIT_YEAR_RE.search(raw) is not None
        if TIMEZONE_RE.search(raw):
            confidence += 12
        if MERIDIEM_RE.search(raw):
            confidence += 8
        if has_year:
            confidence += 8
        if SECONDS_RE.search(raw):
            confidence += 8
        if NAMED_MONTH_RE.search(raw):
            confidence += 12
        if US_NUMERIC_RE.search(raw):
            confidence += 5
        if ISO_DATE_RE.search(raw):
            confidence += 5

        if is_fallback:
            confidence -= 25
        if len(raw) < 10:
            confidence -= 20
        if not has_year:
            confidence -= 30
        if AMBIGUOUS_NUMERIC_RE.search(raw):
            confidence -= 5
        if EURO_DOT_RE.search(raw):
            confidence -= 10
        if NON_ENGLISH_CONNECTOR_RE.search(raw):
            confidence -= 15
        if unknown_timezone:
            confidence -= UNKNOWN_TIMEZONE_PENALTY

        return max(0, min(100, confidence))

    @staticmethod
    def analyze_quality(raw: str, reasonable: bool) -> TimestampQuality:
        return TimestampQuality(
            has_timezone=TIMEZONE_RE.search(raw) is not None,
            has_full_time=SECONDS_RE.search(raw) is not None,
            format_recognized=NAMED_MONTH_RE.search(raw) is not None,
            date_reasonable=reasonable,
        )

    def _record_attempt(
        self,
        result: TimestampExtractionResult,
        strategy: str,
        raw_input: str,
        outcome: str,
        started: float,
        confidence: int = 0,
        error: Optional[str] = None,
    ) -> None:
        if result.debug_attempts is None:
            return
        result.debug_attempts.append(
            ExtractionAttempt(
                strategy=strategy,
                raw_input=raw_input,
                result=outcome,
                confidence=confidence,
                time_ms=_elapsed_ms(started),
                error=error,
            )
        )


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


def extract_timestamp(text: str, markup: str = "", **options) -> TimestampExtractionResult:
    """
    Resolve one timestamp with a throwaway resolver.

    Args:
        text: Plain text of the entry
        markup: Markup of the entry
        **options: Keyword arguments for TimestampResolver

    Returns:
        TimestampExtractionResult
    """
    return TimestampResolver(**options).resolve(text, markup)


def get_extraction_stats() -> dict:
    return default_stats.snapshot()


def reset_extraction_stats() -> None:
    default_stats.reset()
