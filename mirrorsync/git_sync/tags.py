"""Tag selection for tag sync."""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple


class TagMode(Enum):
    DISABLED = "disabled"
    ALL = "all"
    PATTERN = "pattern"


class TagSyncStrategy(Enum):
    """How existing destination tags are treated."""
    PRUNE = "prune"        # local tags are rebuilt from source, source's version wins
    ADDITIVE = "additive"  # only tags absent at the destination are pushed


@dataclass(frozen=True)
class TagSelection:
    mode: TagMode
    tags: FrozenSet[str] = frozenset()
    pattern: Optional[str] = None

    def ordered(self) -> List[str]:
        return sorted(self.tags)

    def __len__(self) -> int:
        return len(self.tags)


def parse_tag_mode(value: Optional[str]) -> Tuple[TagMode, Optional[str]]:
    """
    Interpret the sync_tags setting.

    "" or "false" disables tag sync, "true" selects all tags, anything else
    is a regular expression.
    """
    value = (value or "").strip()
    if value == "" or value.lower() == "false":
        return TagMode.DISABLED, None
    if value.lower() == "true":
        return TagMode.ALL, None
    return TagMode.PATTERN, value


def compute_candidate_tags(
    source_tags: Dict[str, str],
    destination_tags: Dict[str, str],
    strategy: TagSyncStrategy = TagSyncStrategy.PRUNE
) -> Set[str]:
    """
    Tags worth pushing, given both sides' tag -> object id maps.

    Tags already identical at the destination are never candidates, so a
    repeated run selects nothing.
    """
    if strategy is TagSyncStrategy.ADDITIVE:
        return {name for name in source_tags if name not in destination_tags}
    return {name for name, target in source_tags.items() if destination_tags.get(name) != target}


def select_tags(mode: TagMode, candidate_tags: Iterable[str], pattern: Optional[str] = None) -> TagSelection:
    """
    Select the tags to push.

    An empty match for a pattern is a valid outcome, not an error.
    """
    logger = logging.getLogger('mirrorsync.git_sync.tags')

    if mode is TagMode.DISABLED:
        return TagSelection(TagMode.DISABLED)

    candidates = {tag for tag in candidate_tags if tag}

    if mode is TagMode.ALL:
        return TagSelection(TagMode.ALL, frozenset(candidates))

    if pattern is None:
        raise ValueError("A pattern is required for TagMode.PATTERN")

    compiled = re.compile(pattern)
    selected = frozenset(tag for tag in candidates if compiled.search(tag))
    logger.debug(f"Pattern {pattern!r} matched {len(selected)} of {len(candidates)} candidate tags")
    return TagSelection(TagMode.PATTERN, selected, pattern)
