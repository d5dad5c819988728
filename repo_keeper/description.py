"""
Read bot settings from a YAML block in a pull request description.

Authors configure a pull request by putting a fenced block in its
description::

    ```yaml
    release: 2.1
    backport: 1.6        # optional
    needs_feature_branch: true
    ```

Only simple ``key: value`` lines are understood; this is not a YAML parser.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Collection, Dict, Iterable, Iterator, Mapping, Optional

RELEASE_KEY = "release"
BACKPORT_KEY = "backport"
FEATURE_BRANCH_KEY = "needs_feature_branch"

RECOGNIZED_KEYS = (RELEASE_KEY, BACKPORT_KEY, FEATURE_BRANCH_KEY)

# Keys whose values are true/false.  These are compared case-insensitively.
BOOLEAN_KEYS = {FEATURE_BRANCH_KEY}
BOOLEAN_VALUES = ("true", "false")

YAML_BLOCK_RE = re.compile(r"```yaml\s*\n(.*?)\n\s*```", re.DOTALL)


@dataclass
class DescriptionConfig:
    """
    The settings found in the authoritative block of a description.
    """
    # Was there a block with any of the requested keys?
    found: bool = False
    # The text of that block.
    block: Optional[str] = None
    # Keys present in the block, even with empty values.
    keys: set[str] = field(default_factory=set)
    # Normalized, non-empty, valid values.  Boolean keys have bool values.
    values: Dict[str, object] = field(default_factory=dict)
    # Normalized, non-empty values that are not accepted, and the error for each.
    invalid: Dict[str, str] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    def get(self, key: str, default=None):
        return self.values.get(key, default)


def yaml_blocks(text: str) -> Iterator[str]:
    """Produce the contents of the ```yaml blocks in `text`, in order."""
    for match in YAML_BLOCK_RE.finditer(text or ""):
        yield match[1]


def raw_value(block: str, key: str) -> Optional[str]:
    """
    Find the `key: value` line for `key` in a block.

    Returns the text after the colon, or None if the key isn't there.
    """
    match = re.search(fr"^{re.escape(key)}:[ \t]*(.*)$", block, flags=re.MULTILINE)
    if match is None:
        return None
    return match[1]


def normalize_value(key: str, value: str) -> str:
    """
    Clean up a raw value: whitespace, a trailing comment, and surrounding quotes.
    """
    value = value.strip()
    value = re.sub(r"#.*$", "", value).strip()
    value = re.sub(r"""^(["'])(.*)\1$""", r"\2", value)
    if key in BOOLEAN_KEYS:
        value = value.lower()
    return value


def _invalid_message(key: str, value: str, accepted: Collection[str]) -> str:
    if key in BOOLEAN_KEYS:
        accepted_text = "true, false (case-insensitive, with optional quotes)"
    else:
        accepted_text = ", ".join(accepted)
    return f'Invalid {key} value: "{value}". Accepted values: {accepted_text}'


def parse_description(
    text: str,
    keys: Iterable[str],
    accepted: Mapping[str, Collection[str]],
) -> DescriptionConfig:
    """
    Parse the settings for `keys` out of a pull request description.

    The first ```yaml block containing any of `keys` is authoritative; later
    blocks are never read.  Each key is validated against `accepted[key]`
    (boolean keys always accept true and false).  An invalid value doesn't
    stop the other keys from being read.
    """
    keys = list(keys)
    unknown = set(keys) - set(RECOGNIZED_KEYS)
    assert not unknown, f"Unrecognized description keys: {unknown}"

    config = DescriptionConfig()
    for block in yaml_blocks(text):
        raw_values = {key: raw_value(block, key) for key in keys}
        raw_values = {key: raw for key, raw in raw_values.items() if raw is not None}
        if not raw_values:
            continue

        config.found = True
        config.block = block
        config.keys = set(raw_values)
        for key, raw in raw_values.items():
            value = normalize_value(key, raw)
            if not value:
                continue
            if key in BOOLEAN_KEYS:
                if value in BOOLEAN_VALUES:
                    config.values[key] = (value == "true")
                    continue
                choices: Collection[str] = BOOLEAN_VALUES
            else:
                choices = accepted.get(key, ())
                if value in choices:
                    config.values[key] = value
                    continue
            config.invalid[key] = value
            config.errors[key] = _invalid_message(key, value, choices)
        break

    return config
