"""
The bot makes comments on pull requests. This is stuff needed to do it well.
"""

from enum import Enum, auto
from typing import Iterable, List

from flask import render_template

from repo_keeper.description import (
    BACKPORT_KEY,
    FEATURE_BRANCH_KEY,
    RELEASE_KEY,
)
from repo_keeper.info import get_bot_username
from repo_keeper.types import KeeperConfig


class BotComment(Enum):
    """
    Comments the bot can leave on pull requests.

    Each is a class of validation failure; at most one comment of each class
    should be on a pull request at a time.
    """
    FEATURE_BRANCH_ERROR = auto()
    RELEASE_BACKPORT_ERROR = auto()


BOT_COMMENT_INDICATORS = {
    BotComment.FEATURE_BRANCH_ERROR: [
        "<!-- comment:feature-branch-validation -->",
        "🚨 YAML Validation Error: feature branch",
    ],
    BotComment.RELEASE_BACKPORT_ERROR: [
        "<!-- comment:release-backport-validation -->",
        "🚨 YAML Validation Error: release and backport",
    ],
}


def is_comment_kind(kind: BotComment, text: str) -> bool:
    """
    Is this `text` a comment of this `kind`?
    """
    return any(snip in text for snip in BOT_COMMENT_INDICATORS[kind])


FEATURE_BRANCH_EXAMPLE = [
    f"{FEATURE_BRANCH_KEY}: true    # Valid values: true, false (case-insensitive)",
    f"{FEATURE_BRANCH_KEY}: false   # Quotes are optional: \"true\", 'false', etc.",
]


def release_backport_example(config: KeeperConfig) -> List[str]:
    return [
        f"{RELEASE_KEY}: {config.accepted_releases[0] if config.accepted_releases else ''}"
            + f"    # Valid values: {', '.join(config.accepted_releases)}",
        f"{BACKPORT_KEY}: {config.accepted_backports[0] if config.accepted_backports else ''}"
            + f"   # Valid values: {', '.join(config.accepted_backports)}",
    ]


def validation_help(errors: Iterable[str], example_lines: Iterable[str]) -> str:
    """
    The error list and how-to-fix text, shared by comments and check runs.
    """
    return render_template(
        "validation_help.md.j2",
        errors=list(errors),
        example_lines=list(example_lines),
    )


def feature_branch_error_comment(errors: Iterable[str]) -> str:
    """
    Explain an invalid `needs_feature_branch` value.
    """
    return render_template(
        "feature_branch_error.md.j2",
        errors=list(errors),
        example_lines=FEATURE_BRANCH_EXAMPLE,
        bot=get_bot_username(),
    )


def release_backport_error_comment(errors: Iterable[str], config: KeeperConfig) -> str:
    """
    Explain invalid `release` or `backport` values.
    """
    return render_template(
        "release_backport_error.md.j2",
        errors=list(errors),
        example_lines=release_backport_example(config),
        bot=get_bot_username(),
    )
