"""
Turn GitHub webhook payloads into event records.

Records hold every field any handler needs, taken as-is from the payload,
so that handlers never need the raw payload.
"""

from typing import Dict, Optional

import arrow
from glom import glom

from repo_keeper.types import EventRecord, LabelInfo, PrFields

ISSUES_EVENT = "issues"
PULL_REQUEST_EVENT = "pull_request"

COLLECTED_EVENTS = {ISSUES_EVENT, PULL_REQUEST_EVENT}

# Pull request actions that can change what labels a pull request needs.
COLLECTED_PR_ACTIONS = {
    "opened", "synchronize", "edited", "ready_for_review", "labeled", "unlabeled",
}


def event_repository(payload: Dict) -> Optional[str]:
    """The "owner/repo" name of the repository an event came from."""
    return glom(payload, "repository.full_name", default=None)


def should_collect(event_name: str, payload: Dict, repository: str) -> bool:
    """
    Should an event be recorded and handed to the handlers?

    Only events from `repository` are accepted, so a fork with the bot
    installed doesn't act on its own copy.  Draft pull request events are
    left alone until the pull request is marked ready for review, and
    pull request actions outside COLLECTED_PR_ACTIONS (closing, assigning,
    and so on) are ignored.
    """
    if event_name not in COLLECTED_EVENTS:
        return False
    if event_repository(payload) != repository:
        return False
    if event_name == PULL_REQUEST_EVENT and payload.get("action") not in COLLECTED_PR_ACTIONS:
        return False
    if event_name == PULL_REQUEST_EVENT and glom(payload, "pull_request.draft", default=False):
        return False
    return True


def collect_event(event_name: str, payload: Dict, collected_at: Optional[str] = None) -> EventRecord:
    """
    Make an EventRecord from a webhook `payload` for the `event_name` event.
    """
    if event_name not in COLLECTED_EVENTS:
        raise ValueError(f"Can't collect {event_name!r} events")

    item_key = "pull_request" if event_name == PULL_REQUEST_EVENT else "issue"
    item = payload[item_key]

    label = None
    if payload.get("label"):
        label = LabelInfo(
            name=payload["label"]["name"],
            color=payload["label"].get("color"),
            description=payload["label"].get("description"),
        )

    pr_fields = None
    if event_name == PULL_REQUEST_EVENT:
        pr_fields = PrFields(
            head_sha=glom(item, "head.sha"),
            draft=bool(item.get("draft", False)),
            head_repo=glom(item, "head.repo.full_name", default=None),
            base_repo=glom(item, "base.repo.full_name", default=None),
            mergeable=item.get("mergeable"),
        )

    return EventRecord(
        event_type=event_name,
        issue_number=item["number"],
        repository=payload["repository"]["full_name"],
        action=payload["action"],
        collected_at=collected_at or arrow.utcnow().isoformat(),
        title=item.get("title") or "",
        body=item.get("body") or "",
        user=glom(item, "user.login", default=""),
        created_at=item.get("created_at"),
        updated_at=item.get("updated_at"),
        state=item.get("state"),
        label=label,
        pr_fields=pr_fields,
    )
