"""
Find pull requests nobody has touched lately, and label them stale.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

import arrow

from repo_keeper import settings
from repo_keeper.auth import get_github_session
from repo_keeper.labels import STALE_LABEL
from repo_keeper.tasks import logger
from repo_keeper.tasks.github_work import (
    add_labels_strictly,
    get_pull_request,
    list_open_pull_requests,
)
from repo_keeper.types import IssueId
from repo_keeper.utils import paginated_get

# Timeline events that count as activity.
ACTIVITY_TIMELINE_EVENTS = {"labeled", "unlabeled"}


def _activity_sources(repo: str, number: int):
    """
    The secondary places activity shows up, as (name, url, timestamp-getter).
    """
    return [
        ("commits", f"/repos/{repo}/pulls/{number}/commits", lambda c: [c["commit"]["committer"]["date"]]),
        ("comments", f"/repos/{repo}/issues/{number}/comments", lambda c: [c["created_at"]]),
        ("review comments", f"/repos/{repo}/pulls/{number}/comments", lambda c: [c["created_at"]]),
        ("reviews", f"/repos/{repo}/pulls/{number}/reviews", lambda r: [r["submitted_at"]] if r.get("submitted_at") else []),
        (
            "timeline",
            f"/repos/{repo}/issues/{number}/timeline",
            lambda e: [e["created_at"]] if e.get("event") in ACTIVITY_TIMELINE_EVENTS else [],
        ),
    ]


def _source_timestamps(url: str, getter: Callable) -> List[arrow.Arrow]:
    stamps = []
    for item in paginated_get(url, session=get_github_session()):
        stamps.extend(arrow.get(stamp) for stamp in getter(item))
    return stamps


def get_last_activity(repo: str, number: int) -> arrow.Arrow:
    """
    When did anything last happen on a pull request?

    Looks at the pull request's own update time, its commits, comments,
    review comments, reviews, and label changes.  Failing to read any one of
    those is logged and skipped.  If all of them fail, the creation time of
    the pull request is used.  Failing to read the pull request itself
    raises.
    """
    pr = get_pull_request(repo, number)
    activity = [arrow.get(pr["updated_at"])]
    failures = 0
    sources = _activity_sources(repo, number)
    for name, url, getter in sources:
        try:
            activity.extend(_source_timestamps(url, getter))
        except Exception as exc:    # pylint: disable=broad-exception-caught
            failures += 1
            logger.warning(f"Could not fetch {name} for {repo}#{number}: {exc}")

    if failures == len(sources):
        return arrow.get(pr["created_at"])
    return max(activity)


@dataclass
class StaleSweepResult:
    """
    What a stale sweep did, by pull request number.
    """
    checked: List[int] = field(default_factory=list)
    labeled: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)


def is_inactive(last_activity: arrow.Arrow, now: Optional[arrow.Arrow] = None) -> bool:
    now = now or arrow.utcnow()
    return last_activity < now.shift(hours=-settings.STALE_THRESHOLD_HOURS)


def _label_names(pr) -> Iterable[str]:
    return [label["name"] for label in pr.get("labels", [])]


def stale_sweep(repo: Optional[str] = None) -> StaleSweepResult:
    """
    Label the open pull requests in `repo` that have been inactive too long.

    Drafts and pull requests already labeled stale are skipped.  A problem
    with one pull request is logged and the sweep goes on to the next;
    failing to list the pull requests at all raises.
    """
    repo = repo or settings.KEEPER_REPOSITORY
    result = StaleSweepResult()
    now = arrow.utcnow()
    prs = list(list_open_pull_requests(repo))
    logger.info(f"Stale sweep of {repo}: {len(prs)} open pull requests")

    for pr in prs:
        issue_id = IssueId(repo, pr["number"])
        if pr.get("draft"):
            logger.debug(f"Skipping draft {issue_id}")
            continue
        if STALE_LABEL in _label_names(pr):
            logger.debug(f"{issue_id} is already labeled {STALE_LABEL!r}")
            continue

        result.checked.append(pr["number"])
        try:
            last_activity = get_last_activity(repo, pr["number"])
            if not is_inactive(last_activity, now):
                continue
            hours = (now - last_activity).total_seconds() / 3600
            logger.info(f"{issue_id} inactive for {hours:.1f} hours, adding {STALE_LABEL!r}")
            add_labels_strictly(issue_id, [STALE_LABEL])
            result.labeled.append(pr["number"])
        except Exception:   # pylint: disable=broad-exception-caught
            logger.exception(f"Error processing {issue_id} for the stale sweep")
            result.failed.append(pr["number"])

    logger.info(
        f"Stale sweep of {repo} done: {len(result.labeled)} labeled, {len(result.failed)} failed"
    )
    return result
