"""
Management of the check runs that report description validation.
"""

from typing import Optional

import arrow

from repo_keeper.auth import get_github_session
from repo_keeper.tasks import logger
from repo_keeper.types import CheckRunDict
from repo_keeper.utils import log_check_response

FEATURE_BRANCH_CHECK = "YAML Validation (Feature Branch)"
RELEASE_BACKPORT_CHECK = "YAML Validation (Release/Backport)"

CONCLUSION_SUCCESS = "success"
CONCLUSION_FAILURE = "failure"


def _now() -> str:
    return arrow.utcnow().format("YYYY-MM-DDTHH:mm:ss[Z]")


def create_check_run(
    repo_name_full: str,
    head_sha: str,
    name: str,
    details_url: Optional[str] = None,
) -> CheckRunDict:
    """
    Start an in-progress check run on a commit.

    Returns:
        the check run as GitHub describes it, including its "id".
    """
    payload = {
        "name": name,
        "head_sha": head_sha,
        "status": "in_progress",
        "started_at": _now(),
    }
    if details_url:
        payload["details_url"] = details_url
    url = f"/repos/{repo_name_full}/check-runs"
    logger.debug("CHECK: POST %s %s", url, payload)
    response = get_github_session().post(url, json=payload)
    log_check_response(response)
    data = response.json()
    logger.info(f"Created check run {data['id']} {name!r} for commit {head_sha}")
    return data


def complete_check_run(
    repo_name_full: str,
    check_run_id: int,
    conclusion: str,
    title: str,
    summary: str,
    text: Optional[str] = None,
) -> CheckRunDict:
    """
    Finish a check run with a conclusion and an explanation.

    Arguments:
        repo_name_full: a string like "an-org/a-repo"
        check_run_id: the id returned when the check run was created
        conclusion: CONCLUSION_SUCCESS or CONCLUSION_FAILURE
        title, summary, text: the output shown on the pull request:
            https://docs.github.com/en/rest/checks/runs#update-a-check-run
    """
    output = {"title": title, "summary": summary}
    if text:
        output["text"] = text
    payload = {
        "status": "completed",
        "conclusion": conclusion,
        "completed_at": _now(),
        "output": output,
    }
    url = f"/repos/{repo_name_full}/check-runs/{check_run_id}"
    logger.debug("CHECK: PATCH %s %s", url, payload)
    response = get_github_session().patch(url, json=payload)
    log_check_response(response)
    logger.info(f"Check run {check_run_id} completed: {conclusion} ({title})")
    return response.json()
