"""
Helpers for Celery tasks.
"""

from celery.utils.log import get_task_logger
from flask import Blueprint, jsonify

from repo_keeper import celery, log_level
from repo_keeper.utils import requires_auth


# Set up Celery logging.
logger = get_task_logger(__name__)
logger.setLevel(log_level)

# create a Flask blueprint for getting task status info
tasks = Blueprint('tasks', __name__)

@tasks.route('/status/<task_id>')
@requires_auth
def status(task_id):
    result = celery.AsyncResult(task_id)
    info = result.info
    if isinstance(info, Exception):
        info = repr(info)
    return jsonify({
        "status": result.state,
        "info": info,
    })

@tasks.route('/statusrepr/<task_id>')
@requires_auth
def statusrepr(task_id):
    """Get the status of a task, but repr() everything so we can see JSON failures from /status/<task_id>"""
    result = celery.AsyncResult(task_id)
    return jsonify({
        "status": repr(result.state),
        "info": repr(result.info),
    })
