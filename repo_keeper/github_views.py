"""
These are the views that process webhook events coming from Github.
"""

import logging

from flask import current_app as app
from flask import Blueprint, jsonify, request

from repo_keeper import settings
from repo_keeper.events import (
    COLLECTED_EVENTS,
    collect_event,
    event_repository,
    should_collect,
)
from repo_keeper.tasks.github import event_tasks, stale_sweep_task
from repo_keeper.utils import (
    is_valid_payload,
    queue_task,
    queue_tasks,
    requires_auth,
    sentry_extra_context,
)

github_bp = Blueprint('github_views', __name__)
logger = logging.getLogger(__name__)


@github_bp.route('/hook-receiver', methods=('POST',))
def hook_receiver():
    """
    Process incoming GitHub webhook events.

    1.  Make sure the payload hashes to the proper signature. If not,
        reject the request with http status of 403.
    2.  Ignore events from other repositories, and draft pull requests.
    3.  Send a job to the queue for each handler of the event.
    4.  Respond with http status 202.

    Returns:
        A response, or Tuple[str, int]: Message payload and HTTP status code
    """
    signature = request.headers.get("X-Hub-Signature")
    secret = app.config.get('GITHUB_WEBHOOKS_SECRET')
    if not is_valid_payload(secret, signature, request.data):   # type: ignore[arg-type]
        msg = "Rejecting because signature doesn't match!"
        logger.info(msg)
        return msg, 403

    event_name = request.headers.get("X-GitHub-Event", "")
    payload = request.get_json()

    action = payload.get("action")
    repo = event_repository(payload)
    who = payload.get("sender", {}).get("login", "someone")
    logger.info(f"Incoming GitHub {event_name} event: {repo=!r}, {action=!r}, {who=!r}")
    logger.debug(f"Incoming GitHub event payload: {payload!r}")

    if event_name == "ping" or {"zen", "hook"} <= set(payload):
        logger.info(f"ping from {repo}")
        return "PONG"

    if event_name not in COLLECTED_EVENTS:
        return "Thank you", 202

    if not should_collect(event_name, payload, settings.KEEPER_REPOSITORY):
        logger.info(f"Ignoring {event_name} {action!r} from {repo}")
        return "Nothing for me to do", 200

    sentry_extra_context({"event": payload})
    record = collect_event(event_name, payload)
    logger.info(f"{record.issue_id} {action!r}, processing...")
    return queue_tasks(event_tasks(record), record.as_json())


@github_bp.route("/stale-sweep", methods=("POST",))
@requires_auth
def stale_sweep_now():
    """
    Run the stale pull request sweep now instead of waiting for the schedule.
    """
    repo = request.form.get("repo", "") or settings.KEEPER_REPOSITORY
    if repo != settings.KEEPER_REPOSITORY:
        resp = jsonify({"error": f"This bot only looks after {settings.KEEPER_REPOSITORY}"})
        resp.status_code = 400
        return resp
    return queue_task(stale_sweep_task, repo)
