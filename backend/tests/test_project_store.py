import pytest
from sqlalchemy import select, update

from nofuss.errors import ConcurrentModification, InvalidInput, NotFound, UpstreamUnavailable
from nofuss.models.history import HistoryAction
from nofuss.models.memory import Memory
from nofuss.models.project import Project, ProjectStage
from nofuss.services.project_store import ProjectStore

from conftest import BAKERY_SPEC, StubBuildEnvironment


class BrokenBuildEnvironment(StubBuildEnvironment):
    async def provision(self, name, description) -> str:
        raise RuntimeError("no capacity")


async def test_create_provisions_a_handle(db):
    store = ProjectStore(db, StubBuildEnvironment())
    project = await store.create("alice", "  Bakery Site  ", "Bread and buns")

    assert project.name == "Bakery Site"
    assert project.external_build_handle == "stub-build-1"
    assert project.version == 1


async def test_create_fails_cleanly_when_provisioning_fails(db):
    store = ProjectStore(db, BrokenBuildEnvironment())

    with pytest.raises(UpstreamUnavailable):
        await store.create("alice", "Bakery Site")
    assert await store.list("alice") == []


async def test_create_rejects_blank_name(db):
    store = ProjectStore(db, StubBuildEnvironment())
    with pytest.raises(InvalidInput):
        await store.create("alice", "   ")


async def test_get_is_owner_scoped(db):
    store = ProjectStore(db, StubBuildEnvironment())
    project = await store.create("alice", "Bakery Site")

    with pytest.raises(NotFound):
        await store.get(project.id, "bob")


async def test_build_handle_is_immutable(db):
    store = ProjectStore(db, StubBuildEnvironment())
    project = await store.create("alice", "Bakery Site")

    with pytest.raises(InvalidInput):
        await store.update(project.id, "alice", external_build_handle="elsewhere")

    same = await store.update(project.id, "alice", external_build_handle=project.external_build_handle)
    assert same.external_build_handle == "stub-build-1"


async def test_update_bumps_version_and_timestamp(db):
    store = ProjectStore(db, StubBuildEnvironment())
    project = await store.create("alice", "Bakery Site")
    created_at = project.updated_at

    project = await store.update(project.id, "alice", specification=BAKERY_SPEC)

    assert project.version == 2
    assert project.updated_at >= created_at
    assert project.specification_data == BAKERY_SPEC


async def test_stale_write_is_a_concurrent_modification(db):
    store = ProjectStore(db, StubBuildEnvironment())
    project = await store.create("alice", "Bakery Site")

    # Another writer bumps the row behind this session's back
    await db.execute(
        update(Project)
        .where(Project.id == project.id)
        .values(version=Project.version + 1, name="Changed elsewhere")
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    with pytest.raises(ConcurrentModification):
        await store.update(project.id, "alice", name="Mine")


async def test_history_sequence_is_monotonic(db):
    store = ProjectStore(db, StubBuildEnvironment())
    project = await store.create("alice", "Bakery Site")

    for i in range(3):
        await store.append_history(project.id, HistoryAction.DEPLOY_CHAT_MESSAGE, {"message": f"q{i}"})

    events, total = await store.history(project.id, "alice")
    assert total == 3
    assert [e.sequence for e in events] == [1, 2, 3]
    assert [e.payload["message"] for e in events] == ["q0", "q1", "q2"]

    page, total = await store.history(project.id, "alice", limit=1, offset=1)
    assert total == 3
    assert [e.sequence for e in page] == [2]


async def test_failed_append_is_swallowed_and_leaves_no_trace(db):
    store = ProjectStore(db, StubBuildEnvironment())
    project = await store.create("alice", "Bakery Site")

    # An export without a usable snapshot cannot be materialized
    event = await store.append_history(project.id, HistoryAction.EXPORT_TO_BUILD, {"specification": {"purpose": ""}})

    assert event is None
    _, total = await store.history(project.id, "alice")
    assert total == 0
    memories = (await db.execute(select(Memory))).scalars().all()
    assert memories == []
    assert (await store.get(project.id, "alice")).name == "Bakery Site"


async def test_append_materializes_memories(db):
    store = ProjectStore(db, StubBuildEnvironment())
    project = await store.create("alice", "Bakery Site")

    event = await store.append_history(project.id, HistoryAction.EXPORT_TO_BUILD, {"specification": BAKERY_SPEC})

    memories = (await db.execute(select(Memory).where(Memory.source_event_id == event.id))).scalars().all()
    assert len(memories) == 2


async def test_record_transition_is_recorded(db):
    store = ProjectStore(db, StubBuildEnvironment())
    project = await store.create("alice", "Bakery Site")

    event = await store.record_transition(project.id, ProjectStage.BUILD, ProjectStage.DEPLOY)

    assert event.payload["to_stage"] == "deploy"
    assert [e.id for e in await store.stage_events(project.id)] == [event.id]
