"""
Timestamp helpers for GitHub API payloads.

GitHub returns timestamps as ISO 8601 strings in UTC with a trailing 'Z'
(e.g. "2024-05-01T12:30:05Z"). All comparisons in rgh are done on
timezone-aware UTC datetimes.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """
    Parse a GitHub API timestamp.
    
    Args:
        value: ISO 8601 string, 'Z' or explicit offset
        
    Returns:
        Timezone-aware datetime in UTC
        
    Raises:
        ValueError: If the string is not a valid timestamp
    """
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        # Naive timestamps from the API are UTC
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_duration(seconds: Optional[float]) -> str:
    """Format duration in seconds to human-readable string."""
    if seconds is None:
        return 'N/A'
    
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = seconds / 60
        return f"{minutes:.1f}m"
    else:
        hours = seconds / 3600
        return f"{hours:.2f}h"
