"""Automatically run by pytest to set up test infrastructure."""

import re
from pathlib import Path

import pytest
import requests_mock

import repo_keeper
import repo_keeper.utils

from . import settings as test_settings
from .fake_github import FakeGitHub


@pytest.fixture
def requests_mocker():
    """Make requests_mock available as a fixture."""
    mocker = requests_mock.Mocker(real_http=False, case_sensitive=True)
    mocker.start()
    try:
        yield mocker
    finally:
        mocker.stop()

# URLs we use to grab data from GitHub.  We use requests_mock to provide
# canned data during tests.
DATA_REGEX = re.compile(r"https://raw.githubusercontent.com/([^/]+/[^/]+)/HEAD/(.*)")

@pytest.fixture
def fake_repo_data(requests_mocker):
    """A fixture to use local files instead of GitHub-fetched data files."""

    def _repo_data_callback(request, context):
        """Read repo_data data from local data."""
        m = re.fullmatch(DATA_REGEX, request.url)
        assert m, f"{request.url = }"
        repo_data_dir = Path(__file__).parent / "repo_data"
        file_path = repo_data_dir / "/".join(m.groups())
        if file_path.exists():
            return file_path.read_text()
        else:
            context.status_code = 404
            return "No such file"

    requests_mocker.get(DATA_REGEX, text=_repo_data_callback)


@pytest.fixture(autouse=True)
def settings_for_tests(mocker):
    for name, value in vars(test_settings).items():
        if name.isupper():
            mocker.patch(f"repo_keeper.settings.{name}", value)


@pytest.fixture
def fake_github(mocker, requests_mocker, fake_repo_data):
    the_fake_github = FakeGitHub(login="keeper-bot")
    the_fake_github.install_mocks(requests_mocker)
    # Make the retry sleep a no-op so it won't slow the tests.
    mocker.patch("repo_keeper.utils.retry_sleep", lambda x: None)
    return the_fake_github


@pytest.fixture
def repo(fake_github):
    """The repository the bot looks after."""
    return fake_github.make_repo("an-org", "a-repo")


@pytest.fixture(autouse=True)
def configure_flask_app():
    """
    Needed to make the app understand it's running under HTTPS, and have Flask
    initialized properly.
    """
    app = repo_keeper.create_app(config="testing")
    with app.test_request_context('/', base_url="https://repo-keeper.example.com"):
        yield


@pytest.fixture(autouse=True)
def reset_all_memoized_functions():
    """Clears the values cached by @memoize before each test. Applied automatically."""
    repo_keeper.utils.clear_memoized_values()
