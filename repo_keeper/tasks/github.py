"""
Queuable background tasks to handle repository events.
"""

import traceback
from typing import Callable, Dict, List, Optional, Tuple

from repo_keeper import celery
from repo_keeper.events import COLLECTED_PR_ACTIONS
from repo_keeper.tasks import logger
from repo_keeper.tasks.dependabot import dependabot_auto_merge, is_dependabot_event
from repo_keeper.tasks.feature_branch import feature_branch_changed
from repo_keeper.tasks.release_backport import (
    RELEASE_BACKPORT_ACTIONS,
    release_backport_changed,
)
from repo_keeper.tasks.stale import stale_sweep
from repo_keeper.tasks.triage import DryRunFixingActions, json_safe_dict, triage_event
from repo_keeper.types import EventRecord, KeeperConfig
from repo_keeper.utils import log_rate_limit, sentry_extra_context


def _config_from_json(config: Optional[Dict]) -> Optional[KeeperConfig]:
    return KeeperConfig.from_json(config) if config else None


@celery.task(bind=True)
def triage_task(_, record: Dict):
    """A bound Celery task to call triage_event."""
    event = EventRecord.from_json(record)
    sentry_extra_context({"event": record})
    try:
        result = triage_event(event)
        log_rate_limit()
    except Exception:
        logger.exception(f"Couldn't triage_task for {event.issue_id}")
        raise
    return json_safe_dict(result)


@celery.task(bind=True)
def release_backport_task(_, record: Dict, config: Optional[Dict] = None):
    """A bound Celery task to call release_backport_changed."""
    event = EventRecord.from_json(record)
    sentry_extra_context({"event": record})
    try:
        result = release_backport_changed(event, _config_from_json(config))
    except Exception:
        logger.exception(f"Couldn't release_backport_task for {event.issue_id}")
        raise
    return json_safe_dict(result)


@celery.task(bind=True)
def feature_branch_task(_, record: Dict):
    """A bound Celery task to call feature_branch_changed."""
    event = EventRecord.from_json(record)
    sentry_extra_context({"event": record})
    try:
        result = feature_branch_changed(event)
    except Exception:
        logger.exception(f"Couldn't feature_branch_task for {event.issue_id}")
        raise
    return json_safe_dict(result)


@celery.task(bind=True)
def dependabot_task(_, record: Dict):
    """A bound Celery task to call dependabot_auto_merge."""
    event = EventRecord.from_json(record)
    sentry_extra_context({"event": record})
    try:
        return dependabot_auto_merge(event)
    except Exception:
        logger.exception(f"Couldn't dependabot_task for {event.issue_id}")
        raise


@celery.task(bind=True)
def stale_sweep_task(task, repo: Optional[str] = None):
    """A bound Celery task to call stale_sweep."""
    task.update_state(state="STARTED", meta={"repo": repo})
    try:
        result = stale_sweep(repo)
        log_rate_limit()
    except Exception:
        logger.exception("Couldn't stale_sweep_task")
        raise
    return {"checked": result.checked, "labeled": result.labeled, "failed": result.failed}


# Which tasks an event needs.
TaskPlan = List[Tuple[str, Callable]]


def event_tasks(event: EventRecord) -> TaskPlan:
    """
    The handlers that should see `event`, in the order to run them.

    Description handlers come before triage, so that triage sees the labels
    they add.
    """
    plan: TaskPlan = []
    if event.is_pull_request and event.action not in COLLECTED_PR_ACTIONS:
        return plan
    if event.is_pull_request and not event.is_draft:
        if event.action in RELEASE_BACKPORT_ACTIONS:
            plan.append(("release_backport", release_backport_task))
        plan.append(("feature_branch", feature_branch_task))
    plan.append(("triage", triage_task))
    if is_dependabot_event(event):
        plan.append(("dependabot", dependabot_task))
    return plan


def process_event(
    event: EventRecord,
    config: Optional[KeeperConfig] = None,
    dry_run: bool = False,
) -> Dict:
    """
    Run every handler for `event`, one after another.

    A failing handler doesn't stop the others.  Its traceback is collected in
    the "errors" key of the return value.

    Arguments:
        dry_run (bool): if True, only triage runs, and it doesn't write to
            GitHub.  The actions it would take are in the "dry_run_actions"
            key of the return value.
    """
    logger.info(f"Processing {event.event_type} {event.action!r} on {event.issue_id}")
    info: Dict = {"event": str(event.issue_id), "action": event.action, "results": {}, "errors": {}}

    plan = event_tasks(event)
    if dry_run:
        actions = DryRunFixingActions()
        if any(name == "triage" for name, _ in plan):
            info["results"]["triage"] = json_safe_dict(triage_event(event, actions=actions))
        info["dry_run_actions"] = actions.action_calls
        return info

    handlers: Dict[str, Callable] = {
        "release_backport": lambda: json_safe_dict(release_backport_changed(event, config)),
        "feature_branch": lambda: json_safe_dict(feature_branch_changed(event)),
        "triage": lambda: json_safe_dict(triage_event(event)),
        "dependabot": lambda: dependabot_auto_merge(event),
    }
    for name, _ in plan:
        try:
            info["results"][name] = handlers[name]()
        except Exception:       # pylint: disable=broad-except
            logger.exception(f"{name} failed for {event.issue_id}")
            info["errors"][name] = traceback.format_exc()
    return info
