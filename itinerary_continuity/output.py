"""Output formatters: human-readable report, JSON, CSV."""

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from itinerary_continuity.assemble.continuity import (
    display_name,
    get_end_location,
    get_start_location,
)
from itinerary_continuity.models import (
    ContinuityResult,
    Location,
    LocationGap,
    SemanticIssue,
    Segment,
)


def _dt_str(dt: Optional[datetime]) -> str:
    if dt is None:
        return "?"
    return dt.isoformat()


def _short_dt(dt: Optional[datetime]) -> str:
    if dt is None:
        return "?"
    return dt.strftime("%Y-%m-%d %H:%M")


def _loc_str(loc: Optional[Location]) -> str:
    return display_name(loc) if loc is not None else ""


def _segment_label(seg: Segment) -> str:
    start, end = get_start_location(seg), get_end_location(seg)
    if seg.flight_number or seg.airline:
        title = f"{seg.airline} {seg.flight_number}".strip()
    else:
        title = seg.name
    if start is not None and end is not None and start is not end:
        route = f"{_loc_str(start)} → {_loc_str(end)}"
    else:
        route = _loc_str(start or end)
    return "  ".join(part for part in (title, route) if part)


# ---------------------------------------------------------------------------
# Human-readable report
# ---------------------------------------------------------------------------

def format_report(result: ContinuityResult) -> str:
    """Segments in order, inferred ones marked, then gaps, issues and warnings."""
    lines = []
    lines.append("=" * 72)
    lines.append("  ITINERARY CONTINUITY REPORT")
    lines.append("=" * 72)

    current_year = None
    for seg in result.segments:
        year = seg.start_datetime.year if seg.start_datetime else None
        if year != current_year:
            current_year = year
            lines.append(f"\n--- {current_year or 'Undated'} {'─' * 58}")

        marker = "+" if seg.inferred else " "
        lines.append(
            f"\n{marker} {_short_dt(seg.start_datetime)}  →  {_short_dt(seg.end_datetime)}"
            f"  |  {seg.segment_type.value}  {_segment_label(seg)}"
        )
        if seg.inferred:
            lines.append(f"    Inferred ({seg.status.value}): {seg.inferred_reason}")

    if result.gaps:
        lines.append(f"\n--- Gaps {'─' * 62}")
        for gap in result.gaps:
            lines.append(f"  ··· [{gap.confidence}%] {gap.description}")

    if result.review is not None and result.review.issues:
        lines.append(f"\n--- Review {'─' * 60}")
        for issue in result.review.issues:
            fixed = " (fixed)" if result.auto_fixed and issue.auto_fixable else ""
            lines.append(f"  [{issue.severity.value}] {issue.description}{fixed}")

    for warning in result.warnings:
        lines.append(f"  ⚠ {warning}")

    lines.append(f"\n{'=' * 72}")
    lines.append(
        f"  Total: {len(result.segments)} segments, {len(result.inserted)} inserted, "
        f"{len(result.gaps)} gaps"
    )
    lines.append("=" * 72)

    return "\n".join(lines)


# ---------------------------------------------------------------------------
# CSV output
# ---------------------------------------------------------------------------

def segments_to_csv(segments: List[Segment], path: Path):
    """Write the corrected segment list to CSV."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow([
            "id", "segment_type", "start_datetime", "end_datetime", "status",
            "from", "to", "name", "inferred", "inferred_reason", "confidence",
        ])
        for seg in segments:
            writer.writerow([
                seg.id, seg.segment_type.value,
                _dt_str(seg.start_datetime), _dt_str(seg.end_datetime),
                seg.status.value,
                _loc_str(get_start_location(seg)), _loc_str(get_end_location(seg)),
                seg.name, seg.inferred, seg.inferred_reason,
                f"{seg.source_details.confidence:.2f}",
            ])


# ---------------------------------------------------------------------------
# JSON output
# ---------------------------------------------------------------------------

def _location_to_dict(loc: Optional[Location]) -> Optional[dict]:
    if loc is None:
        return None
    data = {"name": loc.name}
    if loc.code:
        data["code"] = loc.code
    if loc.coordinates is not None:
        data["coordinates"] = {
            "latitude": loc.coordinates.latitude,
            "longitude": loc.coordinates.longitude,
        }
    if loc.address is not None:
        data["address"] = {
            k: v for k, v in vars(loc.address).items() if v
        }
    return data


def segment_to_dict(seg: Segment) -> dict:
    data = {
        "id": seg.id,
        "type": seg.segment_type.value,
        "status": seg.status.value,
        "start_datetime": _dt_str(seg.start_datetime),
        "end_datetime": _dt_str(seg.end_datetime),
        "inferred": seg.inferred,
        "source_details": {
            "confidence": seg.source_details.confidence,
            "mode": seg.source_details.mode,
        },
    }
    if seg.inferred_reason:
        data["inferred_reason"] = seg.inferred_reason
    for key in ("origin", "destination", "pickup", "dropoff", "location"):
        loc = getattr(seg, key)
        if loc is not None:
            data[key] = _location_to_dict(loc)
    for key in ("name", "notes", "airline", "flight_number", "transfer_type"):
        value = getattr(seg, key)
        if value:
            data[key] = value
    return data


def _gap_to_dict(g: LocationGap) -> dict:
    return {
        "before_index": g.before_index,
        "after_index": g.after_index,
        "gap_type": g.gap_type.value,
        "confidence": g.confidence,
        "description": g.description,
        "suggested_type": g.suggested_type.value,
    }


def _issue_to_dict(issue: SemanticIssue) -> dict:
    return {
        "type": issue.type.value,
        "severity": issue.severity.value,
        "description": issue.description,
        "segment_indices": issue.segment_indices,
        "suggested_fix": segment_to_dict(issue.suggested_fix) if issue.suggested_fix else None,
    }


def result_to_dict(result: ContinuityResult) -> dict:
    review = result.review
    return {
        "segments": [segment_to_dict(s) for s in result.segments],
        "gaps": [_gap_to_dict(g) for g in result.gaps],
        "inserted": [s.id for s in result.inserted],
        "review": {
            "valid": review.valid,
            "issues": [_issue_to_dict(i) for i in review.issues],
            "summary": review.summary,
        } if review is not None else None,
        "auto_fixed": result.auto_fixed,
        "warnings": result.warnings,
    }


def to_json(result: ContinuityResult, path: Path):
    """Write the full result as JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result_to_dict(result), indent=2, ensure_ascii=False), encoding="utf-8")
