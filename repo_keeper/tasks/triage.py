"""
Rule-based reconciling of the triage labels on issues and pull requests.

Every issue or pull request event is checked against LABEL_RULES, in order.
The first rule that applies decides which label the item should gain.
Labels already on the item are never added again, and nothing is removed.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from time import sleep as settle_sleep   # so that we can patch it for tests.
from typing import Callable, Dict, List, Optional, Set

from repo_keeper import settings
from repo_keeper.events import ISSUES_EVENT
from repo_keeper.labels import (
    READY_FOR_REVIEW_LABEL,
    TRIAGE_LABEL,
    has_backport_label,
    has_release_label,
)
from repo_keeper.tasks import logger
from repo_keeper.tasks.github_work import add_labels_strictly, list_issue_labels
from repo_keeper.types import EventRecord, IssueId


def _triage_removed(event: EventRecord, _labels: Set[str]) -> bool:
    return event.action == "unlabeled" and event.label_name == TRIAGE_LABEL


def _has_version_label(labels: Set[str]) -> bool:
    return has_release_label(labels) or has_backport_label(labels)


@dataclass(frozen=True)
class LabelRule:
    """
    One row of the rule table: when it applies, and what label to add.
    """
    description: str
    applies: Callable[[EventRecord, Set[str]], bool]
    add: Optional[str] = None


LABEL_RULES = [
    LabelRule(
        "draft pull requests are left alone",
        lambda event, labels: event.is_draft,
    ),
    LabelRule(
        "triage removed with no release/backport label, re-adding it",
        lambda event, labels: _triage_removed(event, labels) and not _has_version_label(labels),
        add=TRIAGE_LABEL,
    ),
    LabelRule(
        "triage removal allowed, release/backport label present",
        _triage_removed,
    ),
    LabelRule(
        "new issue needs triage",
        lambda event, labels: event.event_type == ISSUES_EVENT and event.action == "opened",
        add=TRIAGE_LABEL,
    ),
    LabelRule(
        "pull request has a release label, ready for review",
        lambda event, labels: event.is_pull_request and has_release_label(labels),
        add=READY_FOR_REVIEW_LABEL,
    ),
    LabelRule(
        "pull request has no release/backport label, needs triage",
        lambda event, labels: event.is_pull_request and not has_backport_label(labels),
        add=TRIAGE_LABEL,
    ),
    LabelRule(
        "pull request has a backport label, left alone",
        lambda event, labels: event.is_pull_request,
    ),
]


@dataclass
class LabelCurrentInfo:
    """
    The labels an issue or pull request has now.
    """
    labels: Set[str] = field(default_factory=set)


@dataclass
class LabelDesiredInfo:
    """
    The labels we want an issue or pull request to gain, and why.
    """
    labels_to_add: List[str] = field(default_factory=list)
    # The rule that decided, or None if no rule applied.
    rule: Optional[str] = None


@dataclass
class FixResult:
    """
    Return value from LabelFixer.result.
    """
    added_labels: List[str] = field(default_factory=list)
    rule: Optional[str] = None


def current_label_state(issue_id: IssueId) -> LabelCurrentInfo:
    """
    Examine the world to determine what the current labels are.
    """
    return LabelCurrentInfo(labels=set(list_issue_labels(issue_id)))


def desired_label_state(event: EventRecord, current: LabelCurrentInfo) -> LabelDesiredInfo:
    """
    Decide what labels the item of `event` should gain, given its current labels.
    """
    desired = LabelDesiredInfo()
    for rule in LABEL_RULES:
        if rule.applies(event, current.labels):
            desired.rule = rule.description
            if rule.add and rule.add not in current.labels:
                desired.labels_to_add.append(rule.add)
            break
    return desired


def json_safe_dict(dc) -> Dict:
    """
    Make a JSON-safe dict from a dataclass, for recording info during dry runs.
    """
    return {k: repr(v) for k, v in dataclasses.asdict(dc).items()}


class LabelFixer:
    """
    Compare the current and desired labels and make the needed changes.
    """

    def __init__(
        self,
        event: EventRecord,
        current: LabelCurrentInfo,
        desired: LabelDesiredInfo,
        actions: FixingActions | DryRunFixingActions | None = None,
    ) -> None:
        self.event = event
        self.current = current
        self.desired = desired
        self.issue_id = event.issue_id
        self.kind = "PR" if event.is_pull_request else "issue"
        self.actions = actions or FixingActions(self.issue_id)
        self.fix_result = FixResult(rule=desired.rule)

    def result(self) -> FixResult:
        return self.fix_result

    def fix(self) -> None:
        self.actions.initial_state(
            current=json_safe_dict(self.current),
            desired=json_safe_dict(self.desired),
        )
        if self.desired.rule is None:
            logger.info(
                f"{self.event.event_type} {self.event.action!r} on {self.issue_id} "
                + "is not handled by the triage rules"
            )
            return

        to_add = [lbl for lbl in self.desired.labels_to_add if lbl not in self.current.labels]
        if not to_add:
            logger.info(f"{self.kind} {self.issue_id}: {self.desired.rule}, nothing to do")
            return

        self.actions.add_labels(labels=to_add, kind=self.kind)
        self.fix_result.added_labels.extend(to_add)
        logger.info(f"{self.kind} {self.issue_id}: {self.desired.rule}, added {to_add}")


class DryRunFixingActions:
    """
    Implementation of actions for dry runs.
    """
    def __init__(self):
        self.action_calls = []

    def __getattr__(self, name):
        def fn(**kwargs):
            self.action_calls.append((name, kwargs))
        return fn


class FixingActions:
    """
    Implementation for actions needed by the label fixer.

    These actions actually make the changes needed. All arguments
    must be JSON-serializable so that dry-runs can report on the
    actions.

    """

    def __init__(self, issue_id: IssueId):
        self.issue_id = issue_id

    def initial_state(self, *, current: Dict, desired: Dict) -> None:
        """
        Does nothing when really fixing, but captures information for dry runs.
        """

    def add_labels(self, *, labels: List[str], kind: str) -> None:
        add_labels_strictly(self.issue_id, labels, kind=kind)


def triage_event(event: EventRecord, actions=None) -> FixResult:
    """
    Apply the triage rules to the issue or pull request of `event`.

    Pull request events wait for a moment first, so that labels added from
    the description for the same change are visible.
    """
    logger.info(f"Triage for {event.event_type} {event.action!r} on {event.issue_id}")
    if event.is_pull_request and not event.is_draft and not _triage_removed(event, set()):
        settle_sleep(settings.LABEL_SETTLE_SECONDS)

    current = current_label_state(event.issue_id)
    desired = desired_label_state(event, current)
    fixer = LabelFixer(event, current, desired, actions=actions)
    fixer.fix()
    return fixer.result()
