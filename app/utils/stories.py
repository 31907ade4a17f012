"""
Story grouping and relative-time helpers.

All functions are pure: the current time is passed in as ``now`` (defaulting
to the current UTC time) and inputs are never mutated.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

TimestampLike = Union[datetime, str, None]

# Agent display fields copied from a story onto its group
GROUP_FIELDS = ("agent_id", "agent_name", "agent_title", "agent_photo", "phone", "whatsapp")

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(value: TimestampLike) -> Optional[datetime]:
    """
    Normalize a timestamp to an aware UTC datetime.

    Naive datetimes are assumed to be UTC. ISO-8601 strings (including a
    trailing "Z") are parsed. Anything else yields None.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _created_at(story: Mapping[str, Any]) -> datetime:
    return to_utc(story.get("created_at")) or _OLDEST


def group_stories_by_agent(stories: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Group a flat list of stories into one group per agent.

    The first story seen for an agent seeds the group's display fields.
    Stories inside a group are ordered newest first, and groups are ordered
    by their newest story, newest first. Equal timestamps keep input order.
    Stories with a missing or unparseable ``created_at`` sort as oldest.

    Args:
        stories: Story records (mappings with at least ``agent_id`` and ``created_at``)

    Returns:
        List of group dicts with the agent fields, ``posted_at`` and ``stories``
    """
    groups: Dict[Any, Dict[str, Any]] = {}

    for story in stories:
        agent_id = story.get("agent_id")
        group = groups.get(agent_id)
        if group is None:
            group = {field: story.get(field) for field in GROUP_FIELDS}
            group["posted_at"] = story.get("created_at")
            group["stories"] = []
            groups[agent_id] = group
        group["stories"].append(story)

    ordered = list(groups.values())
    for group in ordered:
        group["stories"].sort(key=_created_at, reverse=True)
        group["posted_at"] = group["stories"][0].get("created_at")

    ordered.sort(key=lambda g: _created_at(g["stories"][0]), reverse=True)
    return ordered


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count != 1 else ''}"


def days_ago(timestamp: TimestampLike, now: Optional[datetime] = None) -> str:
    """
    Describe how long ago a timestamp was.

    Args:
        timestamp: Past moment
        now: Reference time, defaults to the current UTC time

    Returns:
        "Just now", "N minute(s) ago", "N hour(s) ago" or "N day(s) ago"
    """
    moment = to_utc(timestamp)
    if moment is None:
        return ""

    reference = to_utc(now) or utc_now()
    diff_ms = int((reference - moment) / timedelta(milliseconds=1))
    diff_minutes = diff_ms // 60000
    diff_hours = diff_ms // 3600000
    diff_days = diff_hours // 24

    if diff_minutes < 1:
        return "Just now"
    if diff_minutes < 60:
        return f"{_plural(diff_minutes, 'minute')} ago"
    if diff_hours < 24:
        return f"{_plural(diff_hours, 'hour')} ago"
    return f"{_plural(diff_days, 'day')} ago"


def is_expired(expires_at: TimestampLike, now: Optional[datetime] = None) -> bool:
    """
    Check whether an expiry moment lies strictly before ``now``.

    A missing or unparseable expiry never expires.
    """
    expiry = to_utc(expires_at)
    if expiry is None:
        return False
    return expiry < (to_utc(now) or utc_now())


def time_until_expiry(expires_at: TimestampLike, now: Optional[datetime] = None) -> str:
    """
    Describe the time remaining before expiry.

    Args:
        expires_at: Expiry moment
        now: Reference time, defaults to the current UTC time

    Returns:
        "Expired", "Expires in Hh Mm" or "Expires in Mm"
    """
    expiry = to_utc(expires_at)
    if expiry is None:
        return ""

    reference = to_utc(now) or utc_now()
    diff_ms = int((expiry - reference) / timedelta(milliseconds=1))
    if diff_ms <= 0:
        return "Expired"

    hours = diff_ms // 3600000
    minutes = (diff_ms % 3600000) // 60000
    if hours > 0:
        return f"Expires in {hours}h {minutes}m"
    return f"Expires in {minutes}m"


def story_expiry(created_at: datetime, ttl_hours: int) -> datetime:
    """Expiry moment of a story created at ``created_at``."""
    return created_at + timedelta(hours=ttl_hours)
