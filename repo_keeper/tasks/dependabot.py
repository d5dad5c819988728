"""
Merge Dependabot's GitHub Actions updates once their checks pass.
"""

from time import sleep as poll_sleep    # so that we can patch it for tests.
from typing import Dict, Iterable

from repo_keeper.auth import get_github_session
from repo_keeper.labels import DEPENDABOT_AUTO_MERGE_LABELS
from repo_keeper.tasks import logger
from repo_keeper.tasks.github_work import get_pull_request, list_issue_labels
from repo_keeper.types import EventRecord, IssueId, PrDict
from repo_keeper.utils import log_check_response

DEPENDABOT_USER = "dependabot[bot]"

DEPENDABOT_ACTIONS = {"opened", "synchronize"}

# How many times to look at the pull request, and how long to wait between.
MERGEABLE_POLL_ATTEMPTS = 30
MERGEABLE_POLL_SECONDS = 10

APPROVAL_BODY = "🤖 Auto-approving Dependabot GitHub Actions update"
MERGE_MESSAGE = "Auto-merged by Dependabot workflow"


class AutoMergeError(Exception):
    """A Dependabot pull request couldn't be merged."""


def is_dependabot_event(event: EventRecord) -> bool:
    return (
        event.is_pull_request
        and event.action in DEPENDABOT_ACTIONS
        and event.user == DEPENDABOT_USER
    )


def should_auto_merge(labels: Iterable[str]) -> bool:
    """Does the pull request carry all the labels that allow an unattended merge?"""
    return DEPENDABOT_AUTO_MERGE_LABELS <= set(labels)


def wait_until_mergeable(issue_id: IssueId) -> PrDict:
    """
    Poll the pull request until GitHub says it can be merged cleanly.

    Raises AutoMergeError if it can't be merged, or we run out of patience.
    """
    for attempt in range(1, MERGEABLE_POLL_ATTEMPTS + 1):
        pr = get_pull_request(issue_id.full_name, issue_id.number)
        state = pr.get("mergeable_state")
        logger.info(f"{issue_id} attempt {attempt}/{MERGEABLE_POLL_ATTEMPTS}: mergeable_state is {state!r}")
        if state == "clean":
            return pr
        if state in ("unstable", "dirty"):
            raise AutoMergeError(f"{issue_id} cannot be merged: {state}")
        if attempt < MERGEABLE_POLL_ATTEMPTS:
            poll_sleep(MERGEABLE_POLL_SECONDS)
    raise AutoMergeError(f"Timeout waiting for status checks to complete on {issue_id}")


def approve_pull_request(issue_id: IssueId, body: str = APPROVAL_BODY) -> Dict:
    url = f"/repos/{issue_id.full_name}/pulls/{issue_id.number}/reviews"
    resp = get_github_session().post(url, json={"event": "APPROVE", "body": body})
    log_check_response(resp)
    return resp.json()


def squash_merge(issue_id: IssueId, title: str) -> Dict:
    url = f"/repos/{issue_id.full_name}/pulls/{issue_id.number}/merge"
    resp = get_github_session().put(url, json={
        "merge_method": "squash",
        "commit_title": title,
        "commit_message": MERGE_MESSAGE,
    })
    log_check_response(resp)
    return resp.json()


def dependabot_auto_merge(event: EventRecord) -> bool:
    """
    Approve and squash-merge a Dependabot pull request if it qualifies.

    Returns True if the pull request was merged, False if it doesn't qualify.
    """
    issue_id = event.issue_id
    if not is_dependabot_event(event):
        logger.debug(f"{issue_id} is not a Dependabot update")
        return False

    labels = sorted(list_issue_labels(issue_id))
    logger.info(f"Dependabot {issue_id} labels: {', '.join(labels)}")
    if not should_auto_merge(labels):
        logger.info(f"Skipping auto-merge of {issue_id}: it needs labels {sorted(DEPENDABOT_AUTO_MERGE_LABELS)}")
        return False

    wait_until_mergeable(issue_id)
    approve_pull_request(issue_id)
    squash_merge(issue_id, event.title)
    logger.info(f"Auto-merged {issue_id}")
    return True
