"""Types specific to repo_keeper."""

from __future__ import annotations

import dataclasses
from typing import Dict, List, Optional

# A pull request as described by a JSON object.
PrDict = Dict

# An issue (or the issue side of a pull request) as described by a JSON object.
IssueDict = Dict

# An issue or pull request comment as described by a JSON object.
CommentDict = Dict

# A check run as described by a JSON object.
CheckRunDict = Dict


@dataclasses.dataclass(frozen=True)
class IssueId:
    """An id of an issue or pull request, with a repo full_name and a number."""
    full_name: str
    number: int

    @classmethod
    def from_pr_dict(cls, pr: PrDict) -> IssueId:
        return cls(pr["base"]["repo"]["full_name"], pr["number"])

    def __str__(self):
        return f"{self.full_name}#{self.number}"


@dataclasses.dataclass(frozen=True)
class LabelInfo:
    """The label attached to a labeled or unlabeled event."""
    name: str
    color: Optional[str] = None
    description: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class PrFields:
    """The pull-request-only part of an event record."""
    head_sha: str
    draft: bool = False
    head_repo: Optional[str] = None
    base_repo: Optional[str] = None
    mergeable: Optional[bool] = None


@dataclasses.dataclass(frozen=True)
class EventRecord:
    """
    A normalized repository event, captured once and read by every handler.
    """
    # "issues" or "pull_request".
    event_type: str
    issue_number: int
    # The "owner/repo" full name.
    repository: str
    action: str
    collected_at: str
    title: str = ""
    body: str = ""
    user: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    state: Optional[str] = None
    label: Optional[LabelInfo] = None
    pr_fields: Optional[PrFields] = None

    @property
    def issue_id(self) -> IssueId:
        return IssueId(self.repository, self.issue_number)

    @property
    def is_pull_request(self) -> bool:
        return self.event_type == "pull_request"

    @property
    def is_draft(self) -> bool:
        return self.pr_fields is not None and self.pr_fields.draft

    @property
    def label_name(self) -> Optional[str]:
        return self.label.name if self.label else None

    def as_json(self) -> Dict:
        return dataclasses.asdict(self)

    @classmethod
    def from_json(cls, data: Dict) -> EventRecord:
        data = dict(data)
        if data.get("label"):
            data["label"] = LabelInfo(**data["label"])
        if data.get("pr_fields"):
            data["pr_fields"] = PrFields(**data["pr_fields"])
        return cls(**data)


@dataclasses.dataclass(frozen=True)
class KeeperConfig:
    """The accepted version strings, in display order."""
    accepted_releases: List[str]
    accepted_backports: List[str]

    def as_json(self) -> Dict:
        return dataclasses.asdict(self)

    @classmethod
    def from_json(cls, data: Dict) -> KeeperConfig:
        return cls(
            accepted_releases=[str(v) for v in data.get("accepted_releases", [])],
            accepted_backports=[str(v) for v in data.get("accepted_backports", [])],
        )
