"""
Deterministic content filter applied to every oracle-suggested link.

Pure functions only: no I/O, no logging, no error path. Matching is done on the
lowercased URL; callers keep the original URL for display.
"""

from config.policy import (
    BLOCK_REASON,
    BLOCKED_SITES,
    BLOCKED_TLDS,
    LEARNING_PATH_MARKER,
    TRUSTED_MARKERS,
    VIDEO_HOSTS,
    VIDEO_INTENT_KEYWORDS,
    role_allows_video,
)
from models.focus_types import LinkClassification, OracleLink, SearchResult, UserRole


def is_trusted_url(url: str) -> bool:
    # Substring match anywhere in the URL, not a domain-suffix check.
    # "https://example.com/page.org" counts as trusted.
    lowered = url.lower()
    return any(marker in lowered for marker in TRUSTED_MARKERS)


def has_video_intent(query: str) -> bool:
    lowered = query.lower()
    return any(keyword in lowered for keyword in VIDEO_INTENT_KEYWORDS)


def classify_url(url: str, query: str, role: UserRole) -> LinkClassification:
    """
    Classify one URL for the given query and role.

    Site and TLD blocks are absolute: the video exception only ever lifts the
    video-host clause, it never unblocks a blocked site or TLD.
    """
    lowered = url.lower()

    blocked_by_tld = any(lowered.endswith(tld) for tld in BLOCKED_TLDS)
    blocked_by_site = any(site in lowered for site in BLOCKED_SITES)
    is_video_host = any(host in lowered for host in VIDEO_HOSTS)
    is_learning_path = LEARNING_PATH_MARKER in lowered

    video_exception = role_allows_video(role) and (is_learning_path or has_video_intent(query))

    is_blocked = blocked_by_tld or blocked_by_site or (is_video_host and not video_exception)

    return LinkClassification(
        is_trusted=is_trusted_url(url),
        is_blocked=is_blocked,
        block_reason=BLOCK_REASON if is_blocked else "",
    )


def classify_link(link: OracleLink, query: str, role: UserRole) -> SearchResult:
    return SearchResult.from_link(link, classify_url(link.url, query, role))


def classify_links(links, query: str, role: UserRole) -> list[SearchResult]:
    """Classify links in the order given."""
    return [classify_link(link, query, role) for link in links]
