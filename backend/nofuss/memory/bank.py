"""
Memory Bank

Owner-scoped reads and the few user mutations allowed on memories:
pinning, deletion and collections. History is never touched here.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..errors import InvalidInput, NotFound
from ..models.memory import Memory, MemoryCollection, MemoryCollectionItem
from ..services.project_store import ProjectStore
from .views import GROUPINGS, MemoryFilter, filter_memories, pinned_section

logger = logging.getLogger(__name__)


class MemoryBank:
    """Typed, taggable, pinnable memories of one owner's projects."""

    def __init__(self, db: AsyncSession, store: Optional[ProjectStore] = None):
        self.db = db
        self.store = store or ProjectStore(db)

    async def list(self, owner_id: str, memory_filter: MemoryFilter) -> List[Memory]:
        """Memories matching every set filter, newest first."""
        await self.store.get(memory_filter.project_id, owner_id)

        stmt = select(Memory).where(Memory.project_id == memory_filter.project_id)
        if memory_filter.memory_type is not None:
            stmt = stmt.where(Memory.memory_type == memory_filter.memory_type)
        if memory_filter.stage is not None:
            stmt = stmt.where(Memory.stage == memory_filter.stage)

        result = await self.db.execute(stmt)
        # Tags and search run over decoded JSON, so they are applied in Python
        return filter_memories(result.scalars().all(), memory_filter)

    async def view(
        self,
        owner_id: str,
        memory_filter: MemoryFilter,
        grouping: str = "timeline",
    ) -> Dict[str, Any]:
        """
        Grouped view of the filtered memories.

        Pinned memories lead in their own section and still appear in
        their group.
        """
        group = GROUPINGS.get(grouping)
        if group is None:
            raise InvalidInput(f"Unknown view: {grouping}")

        memories = await self.list(owner_id, memory_filter)
        return {
            "view": grouping,
            "pinned": pinned_section(memories),
            "groups": list(group(memories).items()),
            "total": len(memories),
        }

    async def get(self, project_id: str, owner_id: str, memory_id: str) -> Memory:
        await self.store.get(project_id, owner_id)

        stmt = select(Memory).where(
            Memory.id == memory_id,
            Memory.project_id == project_id,
        )
        result = await self.db.execute(stmt)
        memory = result.scalar_one_or_none()

        if not memory:
            raise NotFound("Memory not found")
        return memory

    async def toggle_pin(self, project_id: str, owner_id: str, memory_id: str, pinned: bool) -> Memory:
        memory = await self.get(project_id, owner_id, memory_id)
        memory.is_pinned = pinned
        await self.store.commit()
        return memory

    async def delete(self, project_id: str, owner_id: str, memory_id: str) -> None:
        """Hard-delete one memory. Its source history event stays."""
        memory = await self.get(project_id, owner_id, memory_id)

        await self.db.execute(
            delete(MemoryCollectionItem).where(MemoryCollectionItem.memory_id == memory.id)
        )
        await self.db.execute(delete(Memory).where(Memory.id == memory.id))
        await self.store.commit()
        logger.info(f"Deleted memory {memory_id} from project {project_id}")

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    async def create_collection(
        self,
        project_id: str,
        owner_id: str,
        name: str,
        description: Optional[str] = None,
    ) -> MemoryCollection:
        await self.store.get(project_id, owner_id)
        if not name or not name.strip():
            raise InvalidInput("Collection name is required")

        collection = MemoryCollection(
            project_id=project_id,
            name=name.strip(),
            description=description,
        )
        self.db.add(collection)
        await self.store.commit()
        return await self.get_collection(project_id, owner_id, collection.id)

    async def list_collections(self, project_id: str, owner_id: str) -> List[MemoryCollection]:
        await self.store.get(project_id, owner_id)

        stmt = (
            select(MemoryCollection)
            .where(MemoryCollection.project_id == project_id)
            .options(selectinload(MemoryCollection.items))
            .order_by(MemoryCollection.created_at)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_collection(self, project_id: str, owner_id: str, collection_id: str) -> MemoryCollection:
        await self.store.get(project_id, owner_id)

        stmt = (
            select(MemoryCollection)
            .where(
                MemoryCollection.id == collection_id,
                MemoryCollection.project_id == project_id,
            )
            .options(selectinload(MemoryCollection.items))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        collection = result.scalar_one_or_none()

        if not collection:
            raise NotFound("Collection not found")
        return collection

    async def add_to_collection(
        self,
        project_id: str,
        owner_id: str,
        collection_id: str,
        memory_id: str,
    ) -> MemoryCollection:
        """Append a memory to a collection. Adding a member twice is a no-op."""
        collection = await self.get_collection(project_id, owner_id, collection_id)
        memory = await self.get(project_id, owner_id, memory_id)

        if any(item.memory_id == memory.id for item in collection.items):
            return collection

        position_stmt = select(func.coalesce(func.max(MemoryCollectionItem.position), 0)).where(
            MemoryCollectionItem.collection_id == collection.id
        )
        position = (await self.db.execute(position_stmt)).scalar() or 0

        self.db.add(MemoryCollectionItem(
            collection_id=collection.id,
            memory_id=memory.id,
            position=position + 1,
        ))
        await self.store.commit()
        return await self.get_collection(project_id, owner_id, collection_id)

    async def collection_memories(self, collection: MemoryCollection) -> List[Memory]:
        """Members in insertion order."""
        stmt = (
            select(Memory)
            .join(MemoryCollectionItem, MemoryCollectionItem.memory_id == Memory.id)
            .where(MemoryCollectionItem.collection_id == collection.id)
            .order_by(MemoryCollectionItem.position)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
