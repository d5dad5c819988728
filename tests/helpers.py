"""Helpers for tests."""

import re
import textwrap


def check_good_markdown(text: str) -> None:
    """
    Make some checks of Markdown text.

    These are meant to catch mistakes in templates or code producing Markdown.

    Returns:
        Nothing.  Will raise an exception with a failure message if something
        is wrong.
    """
    if text.startswith((" ", "\n", "\t")):
        raise ValueError(f"Markdown shouldn't start with whitespace: {text!r}")

    # HTML comments must be on a line by themselves or the Markdown won't
    # render properly.
    if re.search(".<!--", text):
        raise ValueError(f"Markdown shouldn't have an HTML comment in the middle of a line: {text!r}")
    if re.search("-->.", text):
        raise ValueError(f"Markdown shouldn't have an HTML comment with following text: {text!r}")

    # Fenced blocks have to be closed.
    if text.count("```") % 2:
        raise ValueError(f"Markdown has an unclosed code fence: {text!r}")

    # Template variables that didn't get a value.
    if "@None" in text:
        raise ValueError(f"Markdown mentions @None: {text!r}")


def pr_description(yaml_text: str, before: str = "This fixes a bug.\n\n", after: str = "") -> str:
    """
    Make a pull request description holding a ```yaml block.
    """
    return before + "```yaml\n" + textwrap.dedent(yaml_text).strip() + "\n```\n" + after
