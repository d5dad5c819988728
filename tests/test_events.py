"""Tests of events.py"""

import pytest
from freezegun import freeze_time

from repo_keeper.events import collect_event, should_collect
from repo_keeper.types import EventRecord


def test_collect_pull_request_event(repo):
    pr = repo.make_pull_request(user="dev1", title="Fix it", body="Some text")
    record = collect_event("pull_request", pr.event_payload("opened"), collected_at="2024-01-01T00:00:00")
    assert record.event_type == "pull_request"
    assert record.issue_number == pr.number
    assert record.repository == "an-org/a-repo"
    assert record.action == "opened"
    assert record.collected_at == "2024-01-01T00:00:00"
    assert record.title == "Fix it"
    assert record.body == "Some text"
    assert record.user == "dev1"
    assert record.state == "open"
    assert record.label is None
    assert record.pr_fields.head_sha == pr.head_sha
    assert record.pr_fields.draft is False
    assert record.pr_fields.base_repo == "an-org/a-repo"
    assert record.is_pull_request
    assert str(record.issue_id) == f"an-org/a-repo#{pr.number}"


def test_collect_labeled_issue_event(repo):
    issue = repo.make_issue(labels={"bug"})
    record = collect_event("issues", issue.event_payload("labeled", label="bug"))
    assert record.event_type == "issues"
    assert record.pr_fields is None
    assert not record.is_pull_request
    assert not record.is_draft
    assert record.label_name == "bug"
    assert record.label.color == "d73a4a"


@freeze_time("2024-03-04 05:06:07")
def test_collected_at_defaults_to_now(repo):
    issue = repo.make_issue()
    record = collect_event("issues", issue.event_payload("opened"))
    assert record.collected_at.startswith("2024-03-04T05:06:07")


def test_null_body(repo):
    issue = repo.make_issue(body=None)
    record = collect_event("issues", issue.event_payload("opened"))
    assert record.body == ""


def test_record_json_round_trip(repo):
    pr = repo.make_pull_request(labels={"bug"})
    record = collect_event("pull_request", pr.event_payload("unlabeled", label="bug"))
    assert EventRecord.from_json(record.as_json()) == record


def test_cant_collect_other_events():
    with pytest.raises(ValueError):
        collect_event("push", {})


def test_should_collect(repo):
    pr = repo.make_pull_request()
    assert should_collect("pull_request", pr.event_payload("opened"), "an-org/a-repo")
    issue = repo.make_issue()
    assert should_collect("issues", issue.event_payload("opened"), "an-org/a-repo")


def test_other_repositories_are_ignored(fake_github):
    fork = fake_github.make_repo("someone", "a-repo")
    pr = fork.make_pull_request()
    assert not should_collect("pull_request", pr.event_payload("opened"), "an-org/a-repo")


def test_drafts_are_not_collected(repo):
    pr = repo.make_pull_request(draft=True)
    assert not should_collect("pull_request", pr.event_payload("opened"), "an-org/a-repo")
    pr.draft = False
    assert should_collect("pull_request", pr.event_payload("ready_for_review"), "an-org/a-repo")


def test_uncollected_event_names(repo):
    pr = repo.make_pull_request()
    assert not should_collect("push", pr.event_payload("opened"), "an-org/a-repo")


@pytest.mark.parametrize("action", ["closed", "reopened", "assigned", "review_requested"])
def test_other_pr_actions_are_not_collected(repo, action):
    pr = repo.make_pull_request()
    assert not should_collect("pull_request", pr.event_payload(action), "an-org/a-repo")


@pytest.mark.parametrize("action", ["opened", "synchronize", "edited", "ready_for_review", "unlabeled"])
def test_label_relevant_pr_actions_are_collected(repo, action):
    pr = repo.make_pull_request()
    assert should_collect("pull_request", pr.event_payload(action), "an-org/a-repo")
