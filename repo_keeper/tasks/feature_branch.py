"""
Label pull requests that ask for a feature branch in their description.
"""

from typing import Optional

from repo_keeper.bot_comments import (
    FEATURE_BRANCH_EXAMPLE,
    BotComment,
    feature_branch_error_comment,
)
from repo_keeper.checks import FEATURE_BRANCH_CHECK
from repo_keeper.description import FEATURE_BRANCH_KEY, parse_description
from repo_keeper.labels import FEATURE_BRANCH_LABEL
from repo_keeper.tasks import logger
from repo_keeper.tasks.github_work import add_labels_strictly, list_issue_labels
from repo_keeper.tasks.validation import DescriptionCheck, ValidationResult
from repo_keeper.types import EventRecord


def feature_branch_changed(event: EventRecord, details_url: Optional[str] = None) -> ValidationResult:
    """
    Add the `feature-branch` label if the description says `needs_feature_branch: true`.
    """
    issue_id = event.issue_id
    logger.info(f"Checking {FEATURE_BRANCH_KEY} in the description of {issue_id}")

    with DescriptionCheck(event, FEATURE_BRANCH_CHECK, BotComment.FEATURE_BRANCH_ERROR, details_url) as check:
        if FEATURE_BRANCH_LABEL in list_issue_labels(issue_id):
            logger.info(f"{issue_id} already has the {FEATURE_BRANCH_LABEL!r} label")
            return check.succeed(
                "Feature Branch Label Already Present",
                f"The '{FEATURE_BRANCH_LABEL}' label is already on this PR.",
            )

        parsed = parse_description(event.body, [FEATURE_BRANCH_KEY], {})
        if parsed.errors:
            errors = list(parsed.errors.values())
            logger.info(f"{issue_id}: {'; '.join(errors)}")
            return check.fail_validation(
                errors,
                feature_branch_error_comment(errors),
                FEATURE_BRANCH_EXAMPLE,
            )

        if FEATURE_BRANCH_KEY not in parsed.keys:
            logger.info(f"No {FEATURE_BRANCH_KEY} field in {issue_id}")
            return check.succeed(
                "No YAML Validation Required",
                f"No {FEATURE_BRANCH_KEY} field found in YAML code blocks - validation skipped.",
            )

        if parsed.get(FEATURE_BRANCH_KEY) is not True:
            return check.succeed(
                "YAML Validation Successful",
                f"Successfully validated YAML - no '{FEATURE_BRANCH_LABEL}' label needed.",
            )

        try:
            add_labels_strictly(issue_id, [FEATURE_BRANCH_LABEL])
        except Exception as exc:
            check.fail(
                "Label Assignment Failed",
                f"YAML validation passed but failed to add the '{FEATURE_BRANCH_LABEL}' label.",
                f"**Error:** {exc}",
            )
            raise
        check.result.added_labels.append(FEATURE_BRANCH_LABEL)
        return check.succeed(
            "YAML Validation Successful",
            f"Successfully validated YAML and added the '{FEATURE_BRANCH_LABEL}' label.",
        )
