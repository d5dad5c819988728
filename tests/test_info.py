"""
Tests of the functions in info.py
"""

import pytest
from freezegun import freeze_time

from repo_keeper.info import get_bot_comments, get_bot_username, get_keeper_config
from repo_keeper.types import IssueId

from . import settings as test_settings


def test_default_keeper_config(fake_github):
    config = get_keeper_config("an-org/a-repo")
    assert config.accepted_releases == test_settings.ACCEPTED_RELEASES
    assert config.accepted_backports == test_settings.ACCEPTED_BACKPORTS


def test_repo_keeper_config(fake_github):
    config = get_keeper_config("an-org/configured-repo")
    assert config.accepted_releases == ["3.0", "3.1", "devel"]
    assert config.accepted_backports == ["3.0"]


def test_keeper_config_is_cached(fake_github, requests_mocker):
    with freeze_time("2024-01-01 10:00:00"):
        get_keeper_config("an-org/configured-repo")
        get_keeper_config("an-org/configured-repo")
    with freeze_time("2024-01-01 10:10:00"):
        get_keeper_config("an-org/configured-repo")
    raw_requests = [r for r in requests_mocker.request_history if r.hostname == "raw.githubusercontent.com"]
    assert len(raw_requests) == 1
    with freeze_time("2024-01-01 10:16:00"):
        get_keeper_config("an-org/configured-repo")
    raw_requests = [r for r in requests_mocker.request_history if r.hostname == "raw.githubusercontent.com"]
    assert len(raw_requests) == 2


def test_bad_keeper_config(requests_mocker):
    requests_mocker.get(
        "https://raw.githubusercontent.com/an-org/a-repo/HEAD/.github/keeper.yaml",
        text="- just\n- a list\n",
    )
    with pytest.raises(ValueError, match="should be a mapping"):
        get_keeper_config("an-org/a-repo")


def test_bot_comments(fake_github, repo):
    pr = repo.make_pull_request()
    pr.add_comment(user="someone", body="Hello")
    mine = pr.add_comment(user="keeper-bot", body="Bot here")
    assert get_bot_username() == "keeper-bot"
    comments = list(get_bot_comments(IssueId(repo.full_name, pr.number)))
    assert [c["id"] for c in comments] == [mine.id]
