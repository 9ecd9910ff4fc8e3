"""Orchestrates the full pass: sort → detect → resolve → merge → review → fix."""

import logging
import sys
from typing import Any, Dict, List, Mapping, Optional

from itinerary_continuity.assemble.continuity import ContinuityDetector, sort_segments
from itinerary_continuity.assemble.gap_resolver import GapResolver
from itinerary_continuity.config import ContinuityConfig
from itinerary_continuity.models import (
    ContinuityResult,
    ContinuityValidation,
    GapResolution,
    LocationGap,
    ReviewResult,
    Segment,
)
from itinerary_continuity.review.semantic_reviewer import SemanticReviewer, fixable_issues

logger = logging.getLogger(__name__)


def merge_resolutions(segments: List[Segment], resolutions: List[GapResolution]) -> List[Segment]:
    """Splice each gap's segment between the pair it bridges.

    Insertions run from the highest gap index down so positions computed
    on the sorted input stay valid. No re-sort afterwards.
    """
    merged = list(segments)
    for res in sorted(resolutions, key=lambda r: r.gap.after_index, reverse=True):
        merged.insert(res.gap.after_index, res.segment)
    return merged


def describe_gaps(gaps: List[LocationGap]) -> str:
    if not gaps:
        return "All segments are geographically continuous. No transportation gaps detected."
    lines = [f"Found {len(gaps)} geographic gap(s):"]
    for n, gap in enumerate(gaps, start=1):
        lines.append(f"{n}. {gap.description} (suggested: {gap.suggested_type.value})")
    return "\n".join(lines)


def validate_continuity(
    segments: List[Segment],
    detector: Optional[ContinuityDetector] = None,
) -> ContinuityValidation:
    """Report gaps without changing anything."""
    detector = detector or ContinuityDetector()
    ordered = sort_segments(segments)
    gaps = detector.detect_gaps(ordered)
    return ContinuityValidation(
        valid=not gaps,
        gaps=gaps,
        segment_count=len(ordered),
        summary=describe_gaps(gaps),
    )


def analyze(
    segments: List[Segment],
    detector: Optional[ContinuityDetector] = None,
    reviewer: Optional[SemanticReviewer] = None,
) -> Dict[str, Any]:
    """Semantic review plus gap detection, read-only."""
    reviewer = reviewer or SemanticReviewer()
    ordered = sort_segments(segments)
    review = reviewer.review(ordered)
    validation = validate_continuity(ordered, detector)
    summary = "\n".join([
        f"Analyzed itinerary with {len(ordered)} segments.",
        "",
        "Semantic review:",
        review.summary,
        "",
        f"Geographic gaps: {len(validation.gaps)} detected",
    ])
    return {
        "valid": review.valid and validation.valid,
        "issues": review.issues,
        "gaps": validation.gaps,
        "summary": summary,
    }


def run_pipeline(
    segments: List[Segment],
    config: Optional[ContinuityConfig] = None,
    resolver: Optional[GapResolver] = None,
    detector: Optional[ContinuityDetector] = None,
    reviewer: Optional[SemanticReviewer] = None,
    preferences: Optional[Mapping[str, Any]] = None,
    auto_fix: bool = True,
    verbose: bool = False,
) -> ContinuityResult:
    """Run one pass of gap filling and review over an itinerary.

    Args:
        segments: Itinerary segments in any order.
        config: Thresholds and buffers. Defaults to the environment config.
        resolver: Gap resolver; without search capabilities it only builds placeholders.
        detector / reviewer: Injected for testing.
        preferences: Passed through to the search capabilities.
        auto_fix: Apply HIGH-severity suggested fixes after review.
        verbose: Print progress to stderr.

    Returns:
        ContinuityResult with the corrected segments, gaps, review and warnings.
        A clean itinerary comes back unchanged.
    """
    config = config or ContinuityConfig()
    detector = detector or ContinuityDetector(config=config)
    resolver = resolver or GapResolver(config=config)
    reviewer = reviewer or SemanticReviewer()

    def log(msg):
        if verbose:
            print(msg, file=sys.stderr)

    # Step 1: Sort
    ordered = sort_segments(segments)
    log(f"Reviewing itinerary: {len(ordered)} segments")

    # Step 2: Detect gaps
    gaps = detector.detect_gaps(ordered)
    log(f"  Detected {len(gaps)} gaps (>= {config.gap_confidence_threshold}% confidence)")
    for gap in gaps:
        log(f"    - {gap.description} ({gap.confidence}%)")

    # Step 3: Resolve, one gap at a time
    resolutions = [resolver.resolve_gap(gap, preferences) for gap in gaps]
    warnings = [r.warning for r in resolutions if r.warning]
    found = sum(1 for r in resolutions if r.from_search)
    if resolutions:
        log(f"  Filled {len(resolutions)} gaps ({found} from search, {len(resolutions) - found} placeholders)")

    # Step 4: Merge
    merged = merge_resolutions(ordered, resolutions)

    # Step 5: Review
    review: ReviewResult = reviewer.review(merged)
    if review.valid:
        log("  Semantic review passed: no issues detected")
    else:
        log("  Semantic review found issues:")
        log(review.summary)

    # Step 6: Auto-fix once
    fixable = fixable_issues(review)
    result_segments = merged
    if auto_fix and fixable:
        log(f"  Auto-fixing {len(fixable)} HIGH severity issues")
        result_segments = reviewer.auto_fix(merged, review)

    inserted = [r.segment for r in resolutions]
    if result_segments is not merged:
        inserted.extend(i.suggested_fix for i in fixable)

    logger.info("Continuity pass: %d gaps, %d inserted, %d review issues",
                len(gaps), len(inserted), len(review.issues))

    return ContinuityResult(
        segments=result_segments,
        gaps=gaps,
        inserted=inserted,
        review=review,
        auto_fixed=result_segments is not merged,
        warnings=warnings,
    )
