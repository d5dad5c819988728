"""
Reporting the outcome of validating a pull request description.

A check run on the head commit shows the outcome, and a bot comment
explains validation failures.  There is at most one failure comment of
each kind: a new one replaces the old, and success removes it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from repo_keeper.bot_comments import BotComment, validation_help
from repo_keeper.checks import (
    CONCLUSION_FAILURE,
    CONCLUSION_SUCCESS,
    complete_check_run,
    create_check_run,
)
from repo_keeper.tasks import logger
from repo_keeper.tasks.github_work import delete_bot_comments, replace_bot_comment
from repo_keeper.types import EventRecord


@dataclass
class ValidationResult:
    """
    What a description handler did.
    """
    conclusion: Optional[str] = None
    added_labels: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


class DescriptionCheck:
    """
    A check run for one validation of a pull request description.

    Use it as a context manager.  If the block raises before the check run
    is completed, the check run is marked failed and the exception
    propagates.
    """

    def __init__(
        self,
        event: EventRecord,
        check_name: str,
        comment_kind: BotComment,
        details_url: Optional[str] = None,
    ) -> None:
        assert event.pr_fields is not None, "Description checks need a pull request event"
        self.event = event
        self.issue_id = event.issue_id
        self.check_name = check_name
        self.comment_kind = comment_kind
        self.details_url = details_url
        self.check_run_id: Optional[int] = None
        self.result = ValidationResult()

    def __enter__(self) -> DescriptionCheck:
        assert self.event.pr_fields is not None
        check_run = create_check_run(
            self.issue_id.full_name,
            self.event.pr_fields.head_sha,
            self.check_name,
            details_url=self.details_url,
        )
        self.check_run_id = check_run["id"]
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        if exc_value is not None and self.result.conclusion is None:
            logger.error(f"{self.check_name} failed on {self.issue_id}: {exc_value}")
            try:
                self._complete(
                    CONCLUSION_FAILURE,
                    "Workflow Execution Failed",
                    "An unexpected error occurred during validation.",
                    f"**Error:** {exc_value}\n\n**Troubleshooting:**\nCheck the bot logs for detailed error information.",
                )
            except Exception:   # pylint: disable=broad-exception-caught
                logger.exception(f"Failed to update check run {self.check_run_id}")
        return False

    def _complete(self, conclusion: str, title: str, summary: str, text: Optional[str] = None) -> None:
        assert self.check_run_id is not None
        complete_check_run(self.issue_id.full_name, self.check_run_id, conclusion, title, summary, text)
        self.result.conclusion = conclusion

    def succeed(self, title: str, summary: str, text: Optional[str] = None) -> ValidationResult:
        """The description is valid: remove old failure comments and pass the check."""
        delete_bot_comments(self.issue_id, self.comment_kind)
        self._complete(CONCLUSION_SUCCESS, title, summary, text)
        return self.result

    def fail(self, title: str, summary: str, text: Optional[str] = None) -> ValidationResult:
        """Something other than validation went wrong: fail the check."""
        self._complete(CONCLUSION_FAILURE, title, summary, text)
        return self.result

    def fail_validation(
        self,
        errors: Iterable[str],
        comment_body: str,
        example_lines: Iterable[str],
    ) -> ValidationResult:
        """The description is invalid: fail the check and explain in a comment."""
        errors = list(errors)
        self.result.errors.extend(errors)
        self._complete(
            CONCLUSION_FAILURE,
            "YAML Validation Failed",
            f"Found {len(errors)} validation error(s) in PR description YAML block.",
            validation_help(errors, example_lines),
        )
        replace_bot_comment(self.issue_id, self.comment_kind, comment_body)
        logger.info(f"Posted {self.comment_kind.name} comment on {self.issue_id}")
        return self.result
