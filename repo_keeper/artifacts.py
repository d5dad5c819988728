"""
Event artifacts: the JSON files one run writes for a dependent run to read.

`keeper collect` runs with read-only access and writes an artifact
directory; `keeper process` runs with write access and reads it.
"""

import json
import logging
import shutil
from pathlib import Path
from typing import List, Tuple

import arrow

from repo_keeper.types import EventRecord, KeeperConfig

logger = logging.getLogger(__name__)

EVENT_METADATA_FILE = "event-metadata.json"
WORKFLOW_CONFIG_FILE = "workflow-config.json"


class ArtifactMissing(Exception):
    """Raised when an artifact directory doesn't hold the expected files."""


def write_artifacts(directory: Path, record: EventRecord, config: KeeperConfig) -> None:
    """Write the event record and the config into `directory`."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    (directory / EVENT_METADATA_FILE).write_text(json.dumps(record.as_json(), indent=2))
    (directory / WORKFLOW_CONFIG_FILE).write_text(json.dumps(config.as_json(), indent=2))
    logger.info(
        f"Stored {record.event_type} {record.issue_id} {record.action!r} in {directory}: "
        + f"{len(config.accepted_releases)} releases, {len(config.accepted_backports)} backports"
    )


def read_artifacts(directory: Path) -> Tuple[EventRecord, KeeperConfig]:
    """Read the event record and config written by `write_artifacts`."""
    directory = Path(directory)
    try:
        event_data = json.loads((directory / EVENT_METADATA_FILE).read_text())
        config_data = json.loads((directory / WORKFLOW_CONFIG_FILE).read_text())
    except FileNotFoundError as exc:
        raise ArtifactMissing(f"No event artifacts in {directory}") from exc
    return EventRecord.from_json(event_data), KeeperConfig.from_json(config_data)


def prune_artifacts(root: Path, retention_days: int) -> List[Path]:
    """
    Delete artifact directories under `root` collected more than
    `retention_days` ago.

    Returns the directories deleted.
    """
    root = Path(root)
    cutoff = arrow.utcnow().shift(days=-retention_days)
    pruned = []
    for metadata_file in sorted(root.glob(f"*/{EVENT_METADATA_FILE}")):
        try:
            collected_at = arrow.get(json.loads(metadata_file.read_text())["collected_at"])
        except (ValueError, KeyError):
            logger.warning(f"Unreadable artifact {metadata_file}, leaving it alone")
            continue
        if collected_at < cutoff:
            shutil.rmtree(metadata_file.parent)
            pruned.append(metadata_file.parent)
    if pruned:
        logger.info(f"Pruned {len(pruned)} artifact director{'y' if len(pruned) == 1 else 'ies'} from {root}")
    return pruned
