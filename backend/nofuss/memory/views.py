"""
Memory Views

Pure filtering, search and grouping over memory rows.
Nothing here touches the database.
"""
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from ..models.memory import Memory, MemoryType
from ..models.project import ProjectStage
from .content import content_text


@dataclass
class MemoryFilter:
    """Conjunctive filter: every field that is set must match."""
    project_id: str
    memory_type: Optional[MemoryType] = None
    stage: Optional[ProjectStage] = None
    tag: Optional[str] = None
    search: Optional[str] = None

    def matches(self, memory: Memory) -> bool:
        if memory.project_id != self.project_id:
            return False
        if self.memory_type is not None and memory.memory_type != self.memory_type:
            return False
        if self.stage is not None and memory.stage != self.stage:
            return False
        if self.tag and self.tag not in memory.tag_list:
            return False
        if self.search and not matches_search(memory, self.search):
            return False
        return True


def matches_search(memory: Memory, query: str) -> bool:
    """Case-insensitive substring match over title, content values and tags."""
    needle = query.strip().lower()
    if not needle:
        return True
    if needle in memory.title.lower():
        return True
    if needle in content_text(memory.content).lower():
        return True
    return any(needle in tag.lower() for tag in memory.tag_list)


def newest_first(memories: Iterable[Memory]) -> List[Memory]:
    return sorted(memories, key=lambda m: m.created_at, reverse=True)


def filter_memories(memories: Iterable[Memory], memory_filter: MemoryFilter) -> List[Memory]:
    return newest_first(m for m in memories if memory_filter.matches(m))


def search_memories(memories: Iterable[Memory], query: str) -> List[Memory]:
    return [m for m in memories if matches_search(m, query)]


def _group(memories: Iterable[Memory], key: Callable[[Memory], str]) -> Dict[str, List[Memory]]:
    groups: Dict[str, List[Memory]] = {}
    for memory in memories:
        groups.setdefault(key(memory), []).append(memory)
    return groups


def group_by_date(memories: Iterable[Memory]) -> Dict[str, List[Memory]]:
    """Calendar-day groups (YYYY-MM-DD), most recent day first."""
    groups = _group(newest_first(memories), lambda m: m.created_at.date().isoformat())
    return dict(sorted(groups.items(), key=lambda item: item[0], reverse=True))


def group_by_type(memories: Iterable[Memory]) -> Dict[str, List[Memory]]:
    return _group(memories, lambda m: m.memory_type.value)


def group_by_stage(memories: Iterable[Memory]) -> Dict[str, List[Memory]]:
    return _group(memories, lambda m: m.stage.value)


# View name -> grouping
GROUPINGS: Dict[str, Callable[[Iterable[Memory]], Dict[str, List[Memory]]]] = {
    "timeline": group_by_date,
    "category": group_by_type,
    "stage": group_by_stage,
}


def pinned_section(memories: Iterable[Memory]) -> List[Memory]:
    """Pinned memories, shown ahead of every grouping."""
    return [m for m in memories if m.is_pinned]


def toggle_tag(active: Optional[str], clicked: str) -> Optional[str]:
    """At most one active tag; clicking the active one clears it."""
    return None if clicked == active else clicked
