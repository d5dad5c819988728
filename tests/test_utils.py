"""Tests of code in utils.py"""

import hashlib
import hmac
import json
import re

import pytest
from freezegun import freeze_time

from repo_keeper.auth import get_github_session
from repo_keeper.utils import (
    RequestFailed,
    clear_memoized_values,
    is_valid_payload,
    log_check_response,
    memoize,
    memoize_timed,
    paginated_get,
    text_summary,
)


@pytest.mark.parametrize("args, summary", [
    (["Hello"], "Hello"),
    ([""], ""),
    (["lorem ipsum quia dolor sit amet consecte"], "lorem ipsum quia dolor sit amet consecte"),
    (["lorem ipsum quia dolor sit amet consectetur adipisci velit, sed quia non numquam eius modi tempora incidunt."],
      "lorem ipsum quia d...i tempora incidunt."),
    (["lorem ipsum quia dolor sit amet consectetur adipisci velit, quia non numquam eius modi tempora incidunt.", 80],
      "lorem ipsum quia dolor sit amet consec...non numquam eius modi tempora incidunt."),
])
def test_text_summary(args, summary):
    assert summary == text_summary(*args)


def test_request_failed_has_status_code(requests_mocker):
    requests_mocker.post("https://api.github.com/repos/o/r/issues/1/labels", status_code=403, json={"message": "nope"})
    resp = get_github_session().post("/repos/o/r/issues/1/labels", json={"labels": ["x"]})
    with pytest.raises(RequestFailed, match=re.escape("HTTP request failed: POST https://api.github.com/repos/o/r/issues/1/labels")) as exc_info:
        log_check_response(resp)
    assert exc_info.value.status_code == 403


def test_paginated_get(requests_mocker):
    requests_mocker.get(
        "https://api.github.com/items?per_page=2",
        complete_qs=True,
        json=[1, 2],
        headers={"Link": '<https://api.github.com/items?per_page=2&page=2>; rel="next"'},
    )
    requests_mocker.get("https://api.github.com/items?per_page=2&page=2", complete_qs=True, json=[3])
    assert list(paginated_get("/items", session=get_github_session(), per_page=2)) == [1, 2, 3]


def _make_signature(secret, payload):
    """Compute a signature from a secret and a payload."""
    return (
        'sha1=' +
        hmac.new(secret.encode(), msg=payload, digestmod=hashlib.sha1).hexdigest()
    )


SECRET1 = "top secret"
SECRET2 = "not so top secret"
PAYLOAD = json.dumps('payload').encode("utf8")


def test_everything_matches():
    signature = _make_signature(SECRET1, PAYLOAD)
    assert is_valid_payload(SECRET1, signature, PAYLOAD) is True


def test_mismatched_signature():
    wrong_signature = _make_signature(SECRET2, PAYLOAD)
    assert is_valid_payload(SECRET1, wrong_signature, PAYLOAD) is False


def test_bad_secret():
    signature = _make_signature(SECRET1, PAYLOAD)
    assert is_valid_payload(SECRET2, signature, PAYLOAD) is False


def test_mismatched_payload():
    signature = _make_signature(SECRET1, PAYLOAD)
    wrong_payload = json.dumps('x').encode("utf8")
    assert is_valid_payload(SECRET1, signature, wrong_payload) is False


def test_memoize():
    vals = []
    @memoize
    def add_to_vals(x):
        vals.append(x)
        return x * 2

    with freeze_time("2020-05-14 09:00:00"):
        assert add_to_vals(10) == 20
        assert vals == [10]
        assert add_to_vals(10) == 20
        assert vals == [10]
        assert add_to_vals(15) == 30
        assert vals == [10, 15]

    with freeze_time("2020-05-14 20:00:00"):
        assert add_to_vals(10) == 20
        assert add_to_vals(15) == 30
        assert vals == [10, 15]

def test_memoize_timed():
    vals = []
    @memoize_timed(minutes=10)
    def add_to_vals_timed(x):
        vals.append(x)
        return x * 2

    with freeze_time("2020-05-14 09:00:00"):
        assert add_to_vals_timed(10) == 20
        assert vals == [10]
        assert add_to_vals_timed(10) == 20
        assert vals == [10]
        assert add_to_vals_timed(15) == 30
        assert vals == [10, 15]

    with freeze_time("2020-05-14 09:05:00"):
        assert add_to_vals_timed(10) == 20
        assert vals == [10, 15]
        assert add_to_vals_timed(20) == 40
        assert vals == [10, 15, 20]

    with freeze_time("2020-05-14 09:11:00"):
        assert add_to_vals_timed(10) == 20
        assert vals == [10, 15, 20, 10]

def test_clear_memoized_values():
    vals = []
    @memoize
    def add_to_vals(x):
        vals.append(x)
        return x * 2

    @memoize_timed(minutes=10)
    def add_to_vals_timed(x):
        vals.append(x)
        return x * 2

    assert add_to_vals(10) == 20
    assert add_to_vals(15) == 30
    assert add_to_vals_timed(20) == 40
    assert vals == [10, 15, 20]

    assert add_to_vals(15) == 30
    assert add_to_vals_timed(20) == 40
    assert vals == [10, 15, 20]

    clear_memoized_values()

    assert add_to_vals(15) == 30
    assert add_to_vals_timed(20) == 40
    assert vals == [10, 15, 20, 15, 20]


def test_missing_secret_or_signature():
    signature = _make_signature(SECRET1, PAYLOAD)
    assert is_valid_payload("", signature, PAYLOAD) is False
    assert is_valid_payload(SECRET1, "", PAYLOAD) is False
