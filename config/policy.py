"""Role policy table: focus areas, blocklists and role-conditioned exceptions."""

from models.focus_types import UserRole

ROLE_FOCUS: dict[UserRole, str] = {
    UserRole.RESEARCHER: (
        "peer-reviewed papers, datasets, academic journals, methodology references "
        "and primary sources"
    ),
    UserRole.STUDENT: (
        "course material, textbooks, tutorials, study guides, lectures and "
        "educational explainers"
    ),
    UserRole.TEACHER: (
        "lesson planning, curriculum standards, classroom resources, pedagogy "
        "research and teaching videos"
    ),
}

# Substring match against the lowercased URL.
BLOCKED_SITES: tuple[str, ...] = (
    "facebook.com",
    "instagram.com",
    "tiktok.com",
    "twitter.com",
    "reddit.com",
    "netflix.com",
    "hulu.com",
    "disneyplus.com",
    "twitch.tv",
    "pinterest.com",
    "tumblr.com",
    "9gag.com",
    "spotify.com",
)

# Suffix match against the lowercased URL.
BLOCKED_TLDS: tuple[str, ...] = (
    ".xxx",
    ".adult",
    ".porn",
    ".sex",
    ".bet",
    ".casino",
    ".poker",
    ".game",
    ".games",
)

TRUSTED_MARKERS: tuple[str, ...] = (".gov", ".edu", ".org")

VIDEO_HOSTS: tuple[str, ...] = ("youtube.com", "youtu.be")
LEARNING_PATH_MARKER = "youtube.com/learning"
VIDEO_INTENT_KEYWORDS: tuple[str, ...] = ("video", "youtube")

VIDEO_ROLES: frozenset[UserRole] = frozenset({UserRole.STUDENT, UserRole.TEACHER})

BLOCK_REASON = "Restricted by focus filter."


def focus_area_for(role: UserRole) -> str:
    """Return the focus-area description for a role ('' for UNSET)."""
    return ROLE_FOCUS.get(role, "")


def role_allows_video(role: UserRole) -> bool:
    return role in VIDEO_ROLES
