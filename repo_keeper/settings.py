"""Settings for how the bot should behave."""

import json
import os
from typing import List


def read_list_setting(setting_name: str, default: List[str]) -> List[str]:
    """Read a list of strings from a setting holding a JSON array.

    Returns:
        The list, in the order given, or `default` if the setting is missing.
    """
    value = os.environ.get(setting_name, None)
    if value is None:
        return list(default)
    values = json.loads(value)
    if not isinstance(values, list):
        raise ValueError(f"Setting {setting_name} must be a JSON list, not {value!r}")
    return [str(v) for v in values]


GITHUB_PERSONAL_TOKEN = os.environ.get("GITHUB_PERSONAL_TOKEN", None)

# The only repository the bot acts on, as "owner/repo".  Events from any other
# repository (forks included) are ignored.
KEEPER_REPOSITORY = os.environ.get("KEEPER_REPOSITORY", None)

# The accepted values for `release:` and `backport:` in pull request
# descriptions, in display order.
ACCEPTED_RELEASES = read_list_setting(
    "ACCEPTED_RELEASES",
    ["1.0", "1.1", "1.2", "1.3", "1.4", "1.5", "1.6", "2.0", "2.1", "2.2", "devel"],
)
ACCEPTED_BACKPORTS = read_list_setting(
    "ACCEPTED_BACKPORTS",
    ["1.0", "1.1", "1.2", "1.3", "1.4", "1.5", "1.6", "2.0", "2.1", "2.2"],
)

# A repo can override the accepted values with this file on its default branch.
KEEPER_CONFIG_FILE = os.environ.get("KEEPER_CONFIG_FILE", ".github/keeper.yaml")

# Pull requests with no activity for longer than this get the stale label.
STALE_THRESHOLD_HOURS = int(os.environ.get("STALE_THRESHOLD_HOURS", "24"))

# How long to wait before reading labels on a pull request event, so that
# labels added by other handlers for the same event are visible.
LABEL_SETTLE_SECONDS = float(os.environ.get("LABEL_SETTLE_SECONDS", "10"))

# How many days event artifacts are kept for dependent runs.
ARTIFACT_RETENTION_DAYS = int(os.environ.get("ARTIFACT_RETENTION_DAYS", "7"))
