import json
from datetime import datetime

from nofuss.memory.content import decode_content, encode_content, render_content
from nofuss.memory.materializer import derive_memories
from nofuss.memory.views import (
    MemoryFilter,
    filter_memories,
    group_by_date,
    group_by_stage,
    group_by_type,
    pinned_section,
    search_memories,
    toggle_tag,
)
from nofuss.models.history import HistoryAction, HistoryEvent
from nofuss.models.memory import Memory, MemoryType
from nofuss.models.project import ProjectStage
from nofuss.schemas.memory import ChatContent, SpecificationContent, TextContent
from nofuss.schemas.idea import IdeaSpecification

from conftest import ALICE, BAKERY_SPEC, BOB, create_project, idea_messages


def _memory(title, memory_type, stage, tags, created_at, pinned=False, text="note"):
    return Memory(
        id=title,
        project_id="p1",
        title=title,
        content=encode_content(TextContent(text=text)),
        memory_type=memory_type,
        stage=stage,
        tags=json.dumps(tags),
        is_pinned=pinned,
        created_at=created_at,
    )


def _sample():
    return [
        _memory("Idea chat", MemoryType.IDEA, ProjectStage.IDEA, ["chat"], datetime(2024, 5, 1, 9)),
        _memory("Design", MemoryType.USER_PREFERENCE, ProjectStage.IDEA, ["design"], datetime(2024, 5, 1, 10), pinned=True),
        _memory("Saved", MemoryType.BUILD, ProjectStage.BUILD, ["build"], datetime(2024, 5, 2, 9), text="Rustic oven"),
        _memory("Deploy chat", MemoryType.DEPLOY, ProjectStage.DEPLOY, ["chat", "deployment"], datetime(2024, 5, 3, 9)),
    ]


# ----------------------------------------------------------------------
# Views
# ----------------------------------------------------------------------

def test_filters_are_conjunctive():
    memories = _sample()

    by_tag = filter_memories(memories, MemoryFilter(project_id="p1", tag="chat"))
    assert [m.title for m in by_tag] == ["Deploy chat", "Idea chat"]

    both = filter_memories(memories, MemoryFilter(project_id="p1", tag="chat", stage=ProjectStage.IDEA))
    assert [m.title for m in both] == ["Idea chat"]

    none = filter_memories(memories, MemoryFilter(
        project_id="p1", tag="chat", memory_type=MemoryType.BUILD,
    ))
    assert none == []

    other_project = filter_memories(memories, MemoryFilter(project_id="p2"))
    assert other_project == []


def test_search_covers_title_content_and_tags():
    memories = _sample()

    assert [m.title for m in search_memories(memories, "DESIGN")] == ["Design"]
    assert [m.title for m in search_memories(memories, "rustic")] == ["Saved"]
    assert [m.title for m in search_memories(memories, "deploy")] == ["Deploy chat"]
    assert len(search_memories(memories, "  ")) == 4


def test_search_matches_non_ascii_content():
    memory = _memory("Palette", MemoryType.USER_PREFERENCE, ProjectStage.IDEA, ["design"],
                     datetime(2024, 5, 1), text="Warm café colours")

    assert "café" in memory.content
    assert search_memories([memory], "CAFÉ") == [memory]


def test_search_ignores_content_keys():
    memories = _sample()

    assert search_memories(memories, "kind") == []
    assert search_memories(memories, "text") == []


def test_groupings():
    memories = filter_memories(_sample(), MemoryFilter(project_id="p1"))

    by_date = group_by_date(memories)
    assert list(by_date) == ["2024-05-03", "2024-05-02", "2024-05-01"]
    assert [m.title for m in by_date["2024-05-01"]] == ["Design", "Idea chat"]

    assert set(group_by_type(memories)) == {"idea", "user_preference", "build", "deploy"}
    assert {k: len(v) for k, v in group_by_stage(memories).items()} == {"deploy": 1, "build": 1, "idea": 2}


def test_pinned_section():
    assert [m.title for m in pinned_section(_sample())] == ["Design"]


def test_toggle_tag():
    assert toggle_tag(None, "chat") == "chat"
    assert toggle_tag("chat", "design") == "design"
    assert toggle_tag("chat", "chat") is None


# ----------------------------------------------------------------------
# Content and materialization
# ----------------------------------------------------------------------

def test_render_content_dispatches_on_kind():
    spec = IdeaSpecification.model_validate(BAKERY_SPEC)

    assert render_content(TextContent(text="hello")) == "hello"
    assert render_content(ChatContent(message="short question")) == "short question"
    chat = ChatContent(messages=[{"role": "user", "content": "hi"}, {"role": "assistant", "content": "hey"}])
    assert render_content(chat) == "user: hi\nassistant: hey"
    assert render_content(SpecificationContent(summary=spec)).startswith(f"Purpose: {spec.purpose}")


def test_content_round_trip_keeps_kind():
    decoded = decode_content(encode_content(ChatContent(message="q")))
    assert isinstance(decoded, ChatContent)


def _history(action, payload):
    return HistoryEvent(
        id="evt-1",
        project_id="p1",
        action=action,
        extra_data=json.dumps(payload),
        sequence=1,
        created_at=datetime(2024, 5, 1),
    )


def test_export_to_build_materializes_specification_and_preferences():
    memories = derive_memories(_history(HistoryAction.EXPORT_TO_BUILD, {"specification": BAKERY_SPEC}))

    assert [(m.memory_type, m.stage) for m in memories] == [
        (MemoryType.IDEA, ProjectStage.BUILD),
        (MemoryType.USER_PREFERENCE, ProjectStage.IDEA),
    ]
    assert all(m.source_event_id == "evt-1" for m in memories)
    assert isinstance(decode_content(memories[0].content), SpecificationContent)
    assert "Rustic" in render_content(decode_content(memories[1].content))


def test_every_action_materializes():
    payloads = {
        HistoryAction.CHAT_MESSAGE: {"messages": [{"role": "user", "content": "hi"}]},
        HistoryAction.GENERATE_SUMMARY: {"messages": []},
        HistoryAction.EXPORT_TO_BUILD: {"specification": BAKERY_SPEC},
        HistoryAction.SAVE_BUILD_PROGRESS: {"external_build_handle": "b-1"},
        HistoryAction.STAGE_TRANSITION: {"from_stage": "build", "to_stage": "deploy"},
        HistoryAction.DEPLOYMENT_STATUS_CHANGE: {"status": "deployed", "deployment_url": "https://x.example"},
        HistoryAction.DEPLOY_CHAT_MESSAGE: {"message": "how?"},
    }
    assert set(payloads) == set(HistoryAction)

    for action, payload in payloads.items():
        memories = derive_memories(_history(action, payload))
        assert memories, action

    transition = derive_memories(_history(HistoryAction.STAGE_TRANSITION, payloads[HistoryAction.STAGE_TRANSITION]))[0]
    assert transition.memory_type == MemoryType.PROJECT_EVOLUTION
    assert transition.stage == ProjectStage.DEPLOY

    status = derive_memories(_history(HistoryAction.DEPLOYMENT_STATUS_CHANGE, payloads[HistoryAction.DEPLOYMENT_STATUS_CHANGE]))[0]
    assert status.tag_list == ["deployment", "deployed"]


# ----------------------------------------------------------------------
# Memory bank over the API
# ----------------------------------------------------------------------

async def _finalized_project(client):
    project = await create_project(client)
    response = await client.post(
        "/idea/finalize",
        json={"projectId": project["id"], "messages": idea_messages()},
        headers=ALICE,
    )
    assert response.status_code == 200, response.text
    return project


async def test_memory_view_filters_and_groups(client):
    project = await _finalized_project(client)
    url = f"/projects/{project['id']}/memories"

    everything = (await client.get(url, headers=ALICE)).json()
    assert everything["total"] == 2
    assert everything["view"] == "timeline"
    assert everything["pinned"] == []

    prefs = (await client.get(url, params={"type": "user_preference", "tag": "design"}, headers=ALICE)).json()
    assert prefs["total"] == 1
    assert prefs["activeTag"] == "design"

    conflicting = (await client.get(url, params={"type": "user_preference", "tag": "specification"}, headers=ALICE)).json()
    assert conflicting["total"] == 0

    toggled = (await client.get(url, params={"tag": "design", "toggleTag": "design"}, headers=ALICE)).json()
    assert toggled["activeTag"] is None
    assert toggled["total"] == 2

    by_stage = (await client.get(url, params={"view": "stage"}, headers=ALICE)).json()
    assert sorted(g["key"] for g in by_stage["groups"]) == ["build", "idea"]

    bad = await client.get(url, params={"view": "sideways"}, headers=ALICE)
    assert bad.status_code == 400


async def test_pin_and_delete_only_touch_memories(client):
    project = await _finalized_project(client)
    url = f"/projects/{project['id']}/memories"

    memories = (await client.get(url, headers=ALICE)).json()["groups"][0]["memories"]
    spec_memory = next(m for m in memories if "specification" in m["tags"])
    assert spec_memory["content"]["kind"] == "specification"
    assert spec_memory["content"]["summary"] == BAKERY_SPEC

    pinned = await client.patch(f"{url}/{spec_memory['id']}", json={"isPinned": True}, headers=ALICE)
    assert pinned.status_code == 200
    assert pinned.json()["memory"]["isPinned"] is True

    view = (await client.get(url, params={"view": "category"}, headers=ALICE)).json()
    assert [m["id"] for m in view["pinned"]] == [spec_memory["id"]]
    grouped_ids = [m["id"] for g in view["groups"] for m in g["memories"]]
    assert spec_memory["id"] in grouped_ids

    deleted = await client.delete(f"{url}/{spec_memory['id']}", headers=ALICE)
    assert deleted.json() == {"success": True}

    after = (await client.get(url, headers=ALICE)).json()
    assert after["total"] == 1
    history = (await client.get(f"/projects/{project['id']}/history", headers=ALICE)).json()
    assert history["total"] == 1

    missing = await client.delete(f"{url}/{spec_memory['id']}", headers=ALICE)
    assert missing.status_code == 404


async def test_memories_of_foreign_project_are_hidden(client):
    project = await _finalized_project(client)

    response = await client.get(f"/projects/{project['id']}/memories", headers=BOB)
    assert response.status_code == 404


async def test_collections(client):
    project = await _finalized_project(client)
    base = f"/projects/{project['id']}"

    memories = (await client.get(f"{base}/memories", headers=ALICE)).json()["groups"][0]["memories"]
    first, second = memories[1]["id"], memories[0]["id"]

    created = await client.post(
        f"{base}/memory-collections",
        json={"name": "Launch notes", "description": "For the launch"},
        headers=ALICE,
    )
    assert created.status_code == 200
    collection = created.json()
    assert collection["memoryIds"] == []

    items_url = f"{base}/memory-collections/{collection['id']}/items"
    await client.post(items_url, json={"memoryId": first}, headers=ALICE)
    await client.post(items_url, json={"memoryId": second}, headers=ALICE)
    again = await client.post(items_url, json={"memoryId": first}, headers=ALICE)
    assert again.json()["memoryIds"] == [first, second]

    detail = (await client.get(f"{base}/memory-collections/{collection['id']}", headers=ALICE)).json()
    assert [m["id"] for m in detail["memories"]] == [first, second]

    listing = (await client.get(f"{base}/memory-collections", headers=ALICE)).json()
    assert [c["name"] for c in listing["collections"]] == ["Launch notes"]

    await client.delete(f"{base}/memories/{first}", headers=ALICE)
    detail = (await client.get(f"{base}/memory-collections/{collection['id']}", headers=ALICE)).json()
    assert detail["collection"]["memoryIds"] == [second]
