"""
Get information about the bot, repos, and their configuration.
"""
import logging
from typing import Iterable, Optional

import yaml

from repo_keeper import settings
from repo_keeper.auth import get_github_session
from repo_keeper.types import CommentDict, IssueId, KeeperConfig
from repo_keeper.utils import (
    memoize,
    memoize_timed,
    paginated_get,
    retry_get,
)

logger = logging.getLogger(__name__)


def _github_file_url(repo_fullname: str, file_path: str) -> str:
    """Get the GitHub url to retrieve the text of a file."""
    # HEAD is used here to get the tip of the repo, regardless of whether it
    # uses master or main.
    return f"https://raw.githubusercontent.com/{repo_fullname}/HEAD/{file_path}"


def read_github_file(repo_fullname: str, file_path: str, not_there: Optional[str] = None) -> str:
    """
    Read a GitHub file from the default branch of a repo.

    `not_there` is for handling missing files.  All other errors trying to
    access the file are raised as exceptions.

    Arguments:
        `repo_fullname`: the owner and repo to access: ``"an-org/a-repo"``.
        `file_path`: the path to the file within the repo.
        `not_there`: if provided, text to return if the file (or repo) doesn't exist.

    Returns:
        The text of the file, or `not_there` if provided.
    """
    url = _github_file_url(repo_fullname, file_path)
    logger.debug(f"Grabbing data file from: {url}")
    resp = get_github_session().get(url)
    if resp.status_code == 404 and not_there is not None:
        return not_there
    resp.raise_for_status()
    return resp.text


# Cache the config file, because every event reads it.
@memoize_timed(minutes=15)
def get_keeper_config(repo_fullname: str) -> KeeperConfig:
    """
    Get the accepted release and backport values for a repo.

    The settings provide the defaults.  A repo can replace either list in
    its keeper config file::

        accepted_releases: ["2.0", "2.1", "devel"]
        accepted_backports: ["1.6", "2.0"]

    """
    text = read_github_file(repo_fullname, settings.KEEPER_CONFIG_FILE, not_there="")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{repo_fullname}/{settings.KEEPER_CONFIG_FILE} should be a mapping, not {data!r}")
    return KeeperConfig.from_json({
        "accepted_releases": data.get("accepted_releases", settings.ACCEPTED_RELEASES),
        "accepted_backports": data.get("accepted_backports", settings.ACCEPTED_BACKPORTS),
    })


@memoize
def github_whoami():
    self_resp = retry_get(get_github_session(), "/user")
    self_resp.raise_for_status()
    return self_resp.json()


def get_bot_username() -> str:
    """What is the username of the bot?"""
    me = github_whoami()
    return me["login"]


def get_bot_comments(issue_id: IssueId) -> Iterable[CommentDict]:
    """Find all the comments the bot has made on an issue or pull request."""
    my_username = get_bot_username()
    comment_url = f"/repos/{issue_id.full_name}/issues/{issue_id.number}/comments"
    for comment in paginated_get(comment_url, session=get_github_session()):
        # I only care about comments I made
        if comment["user"]["login"] == my_username:
            yield comment
