"""
Label pull requests with the release and backport named in their description.
"""

from typing import Optional

from repo_keeper.bot_comments import (
    BotComment,
    release_backport_error_comment,
    release_backport_example,
)
from repo_keeper.checks import RELEASE_BACKPORT_CHECK
from repo_keeper.description import BACKPORT_KEY, RELEASE_KEY, parse_description
from repo_keeper.info import get_keeper_config
from repo_keeper.labels import (
    backport_label,
    has_backport_label,
    has_release_label,
    release_label,
)
from repo_keeper.tasks import logger
from repo_keeper.tasks.github_work import add_labels_strictly, list_issue_labels
from repo_keeper.tasks.validation import DescriptionCheck, ValidationResult
from repo_keeper.types import EventRecord, KeeperConfig

# Pull request actions that can change the description or need its labels.
RELEASE_BACKPORT_ACTIONS = {"opened", "synchronize", "edited", "ready_for_review"}

FAMILIES = [
    (RELEASE_KEY, has_release_label, release_label),
    (BACKPORT_KEY, has_backport_label, backport_label),
]


def release_backport_changed(
    event: EventRecord,
    config: Optional[KeeperConfig] = None,
    details_url: Optional[str] = None,
) -> ValidationResult:
    """
    Add `release <v>` and `backport <v>` labels from the description's YAML block.

    A family that already has a label on the pull request is left alone, so
    there's never more than one of each.  If any value is invalid, nothing is
    added and the author gets a comment explaining the accepted values.
    """
    config = config or get_keeper_config(event.repository)
    issue_id = event.issue_id
    logger.info(f"Checking release/backport in the description of {issue_id}")

    with DescriptionCheck(event, RELEASE_BACKPORT_CHECK, BotComment.RELEASE_BACKPORT_ERROR, details_url) as check:
        existing = set(list_issue_labels(issue_id))
        parsed = parse_description(
            event.body,
            [RELEASE_KEY, BACKPORT_KEY],
            {RELEASE_KEY: config.accepted_releases, BACKPORT_KEY: config.accepted_backports},
        )

        to_add = []
        errors = []
        for key, has_family_label, make_label in FAMILIES:
            if key not in parsed.keys:
                continue
            value = parsed.values.get(key) or parsed.invalid.get(key)
            if not value:
                logger.info(f"Empty {key} value on {issue_id}, skipping")
            elif has_family_label(existing):
                logger.info(f"{key.capitalize()} label already on {issue_id}, skipping {make_label(value)!r}")
            elif key in parsed.errors:
                logger.info(f"{issue_id}: {parsed.errors[key]}")
                errors.append(parsed.errors[key])
            else:
                to_add.append(make_label(value))

        if errors:
            return check.fail_validation(
                errors,
                release_backport_error_comment(errors, config),
                release_backport_example(config),
            )

        if not parsed.found:
            logger.info(f"No release/backport YAML block in {issue_id}")
            return check.succeed(
                "No YAML Validation Required",
                "No release or backport field found in YAML code blocks - validation skipped.",
            )

        if not to_add:
            return check.succeed(
                "YAML Validation Successful",
                "Successfully validated YAML - no release or backport label needed.",
            )

        try:
            add_labels_strictly(issue_id, to_add)
        except Exception as exc:
            check.fail(
                "Label Assignment Failed",
                "YAML validation passed but failed to add labels.",
                f"**Error:** {exc}\n\n**Attempted to add:** {', '.join(to_add)}",
            )
            raise
        check.result.added_labels.extend(to_add)
        return check.succeed(
            "YAML Validation Successful",
            "Successfully validated YAML and added labels.",
            "**Labels added:**\n" + "".join(f"- `{label}`\n" for label in to_add),
        )
