"""Cache key builders shared by cache writers and readers."""

import math

DEFAULT_GAP_THRESHOLD = 0.7
DEFAULT_GAP_LIMIT = 50


def normalize_gap_parameters(threshold: float, limit: int | float) -> tuple[float, int]:
    """Threshold and limit exactly as they appear in the cache key.

    Non-finite values fall back to the defaults; the threshold is kept to
    three decimals and the limit is floored to at least 1.

    Examples:
        >>> normalize_gap_parameters(0.70049, 0)
        (0.7, 1)

        >>> normalize_gap_parameters(float("nan"), float("inf"))
        (0.7, 50)
    """
    if math.isfinite(threshold):
        safe_threshold = float(f"{threshold:.3f}")
    else:
        safe_threshold = DEFAULT_GAP_THRESHOLD

    if math.isfinite(limit):
        safe_limit = max(1, math.floor(limit))
    else:
        safe_limit = DEFAULT_GAP_LIMIT

    return safe_threshold, safe_limit


def build_gap_analysis_cache_key(
    project_id: str,
    threshold: float,
    limit: int | float,
    year_from: int | None = None,
    year_to: int | None = None,
) -> str:
    """Build the cache key for a gap analysis result.

    Examples:
        >>> build_gap_analysis_cache_key("p1", 0.7, 50)
        'proj:p1:graph:gaps:0.700:50:any:any'

        >>> build_gap_analysis_cache_key("p1", 0.7, 50, 2015, 2020)
        'proj:p1:graph:gaps:0.700:50:2015:2020'
    """
    safe_threshold, safe_limit = normalize_gap_parameters(threshold, limit)

    from_part = "any" if year_from is None else str(year_from)
    to_part = "any" if year_to is None else str(year_to)
    return (
        f"proj:{project_id}:graph:gaps:{safe_threshold:.3f}:{safe_limit}"
        f":{from_part}:{to_part}"
    )
