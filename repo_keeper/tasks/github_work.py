"""
Operations on GitHub data.
"""

from typing import Iterable, List

from repo_keeper.auth import get_github_session
from repo_keeper.bot_comments import BotComment, is_comment_kind
from repo_keeper.info import get_bot_comments
from repo_keeper.tasks import logger
from repo_keeper.types import IssueId, PrDict
from repo_keeper.utils import (
    RequestFailed,
    log_check_response,
    paginated_get,
    retry_get,
    text_summary,
)


class LabelPermissionError(Exception):
    """The token we use isn't allowed to change labels."""


class LabelNotDefinedError(Exception):
    """A label we tried to add isn't defined in the repository."""


def list_issue_labels(issue_id: IssueId) -> List[str]:
    """Get the names of the labels on an issue or pull request."""
    url = f"/repos/{issue_id.full_name}/issues/{issue_id.number}/labels"
    return [lbl["name"] for lbl in paginated_get(url, session=get_github_session())]


def add_labels(issue_id: IssueId, labels: Iterable[str]) -> None:
    """
    Add labels to an issue or pull request, leaving the others alone.
    """
    labels = list(labels)
    url = f"/repos/{issue_id.full_name}/issues/{issue_id.number}/labels"
    logger.info(f"Adding labels to {issue_id}: {labels}")
    resp = get_github_session().post(url, json={"labels": labels})
    log_check_response(resp)


def add_labels_strictly(issue_id: IssueId, labels: Iterable[str], kind: str = "PR") -> None:
    """
    Add labels, turning GitHub's failures into errors that say what to do.

    Adding a label that is already there is fine.  A 403 means our token
    can't write labels, and a 422 for a label that isn't on the item means
    the repository doesn't define it.  Both raise.  `kind` ("PR" or "issue")
    is used in messages.
    """
    labels = list(labels)
    quoted = ", ".join(f"'{label}'" for label in labels)
    try:
        add_labels(issue_id, labels)
    except RequestFailed as exc:
        if exc.status_code == 403:
            msg = (
                f"Permission denied: Unable to add {quoted} label to {kind} {issue_id}. "
                + "The GITHUB_PERSONAL_TOKEN setting needs a token with "
                + "'Issues: Write' and 'Pull requests: Write' permissions."
            )
            logger.error(msg)
            raise LabelPermissionError(msg) from exc
        if exc.status_code == 422:
            present = set(list_issue_labels(issue_id))
            missing = [label for label in labels if label not in present]
            if not missing:
                logger.info(f"Labels {quoted} already on {kind} {issue_id}")
                return
            msg = (
                f"Failed to add {missing[0]!r} label to {kind} {issue_id}: "
                + f"Label {missing[0]!r} does not exist in the repository. "
                + "Please create it in the repository settings."
            )
            logger.error(msg)
            raise LabelNotDefinedError(msg) from exc
        raise


def create_comment(issue_id: IssueId, body: str) -> None:
    """
    Add a comment to an issue or pull request.
    """
    url = f"/repos/{issue_id.full_name}/issues/{issue_id.number}/comments"
    logger.info(f"Commenting on {issue_id}: {text_summary(body, 90)!r}")
    resp = get_github_session().post(url, json={"body": body})
    log_check_response(resp)


def delete_comment(issue_id: IssueId, comment_id: int) -> None:
    url = f"/repos/{issue_id.full_name}/issues/comments/{comment_id}"
    logger.info(f"Deleting comment {comment_id} on {issue_id}")
    resp = get_github_session().delete(url)
    log_check_response(resp)


def delete_bot_comments(issue_id: IssueId, kind: BotComment) -> int:
    """
    Delete the bot's comments of `kind`.  Never raises.

    Returns the number of comments deleted.
    """
    deleted = 0
    try:
        for comment in list(get_bot_comments(issue_id)):
            if is_comment_kind(kind, comment["body"]):
                delete_comment(issue_id, comment["id"])
                deleted += 1
    except Exception:   # pylint: disable=broad-exception-caught
        logger.exception(f"Could not clean up {kind.name} comments on {issue_id}")
    if deleted:
        logger.info(f"Cleaned up {deleted} previous {kind.name} comment(s) on {issue_id}")
    return deleted


def replace_bot_comment(issue_id: IssueId, kind: BotComment, body: str) -> None:
    """
    Post a comment of `kind`, removing any earlier ones first.
    """
    delete_bot_comments(issue_id, kind)
    create_comment(issue_id, body)


def get_pull_request(repo: str, number: int) -> PrDict:
    resp = retry_get(get_github_session(), f"/repos/{repo}/pulls/{number}")
    log_check_response(resp)
    return resp.json()


def list_open_pull_requests(repo: str) -> Iterable[PrDict]:
    url = f"/repos/{repo}/pulls?state=open"
    return paginated_get(url, session=get_github_session())
