"""
The labels the bot manages, and the label families it recognizes.
"""

from typing import Iterable

# Marks an issue or pull request that needs an initial look.
TRIAGE_LABEL = "triage"

# A non-draft pull request that already targets a release.
READY_FOR_REVIEW_LABEL = "ready for review"

# Added from `needs_feature_branch: true` in a pull request description.
FEATURE_BRANCH_LABEL = "feature-branch"

# Added to pull requests with no recent activity.
STALE_LABEL = "stale"

# Versioned families: "release 2.1", "backport 1.6".  Only one of each should
# be on an item at a time.
RELEASE_PREFIX = "release "
BACKPORT_PREFIX = "backport "

# The labels Dependabot puts on a GitHub Actions update we can merge unattended.
DEPENDABOT_AUTO_MERGE_LABELS = {
    "github-actions",
    "auto-merge",
    "dependencies",
}


def release_label(value: str) -> str:
    return f"{RELEASE_PREFIX}{value}"


def backport_label(value: str) -> str:
    return f"{BACKPORT_PREFIX}{value}"


def has_release_label(label_names: Iterable[str]) -> bool:
    return any(name.startswith(RELEASE_PREFIX) for name in label_names)


def has_backport_label(label_names: Iterable[str]) -> bool:
    return any(name.startswith(BACKPORT_PREFIX) for name in label_names)
