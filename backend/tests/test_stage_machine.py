import json

import pytest

from nofuss.engine.conversation import ConversationLog
from nofuss.engine.spec_extractor import SpecExtractor
from nofuss.engine.stage_machine import StageMachine, derive_stage, progress_percent
from nofuss.errors import InsufficientConversation, InvalidInput, MalformedSpecification
from nofuss.models.history import HistoryAction, HistoryEvent
from nofuss.models.project import DeploymentStatus, ProjectStage
from nofuss.schemas.idea import ConversationMessage
from nofuss.services.project_store import ProjectStore

from conftest import (
    ALICE,
    BAKERY_CONVERSATION,
    BAKERY_SPEC,
    StubBuildEnvironment,
    StubCompletionService,
    create_project,
    idea_messages,
)


def _event(action, **payload):
    return HistoryEvent(action=action, extra_data=json.dumps(payload), sequence=1)


def _bakery_log():
    return ConversationLog.from_messages(
        [ConversationMessage(**m) for m in idea_messages()]
    )


# ----------------------------------------------------------------------
# Derivation
# ----------------------------------------------------------------------

def test_new_project_is_in_idea():
    assert derive_stage(False, [], DeploymentStatus.NOT_DEPLOYED) == ProjectStage.IDEA


def test_specification_means_build():
    assert derive_stage(True, [], DeploymentStatus.NOT_DEPLOYED) == ProjectStage.BUILD


def test_export_event_means_build_even_without_specification():
    events = [_event(HistoryAction.EXPORT_TO_BUILD)]
    assert derive_stage(False, events, DeploymentStatus.NOT_DEPLOYED) == ProjectStage.BUILD


def test_transition_marker_means_deploy_regardless_of_specification():
    events = [_event(HistoryAction.STAGE_TRANSITION, from_stage="build", to_stage="deploy")]
    assert derive_stage(False, events, DeploymentStatus.NOT_DEPLOYED) == ProjectStage.DEPLOY


def test_started_deployment_means_deploy():
    assert derive_stage(True, [], DeploymentStatus.DEPLOYING) == ProjectStage.DEPLOY


@pytest.mark.parametrize("stage,status,expected", [
    (ProjectStage.IDEA, DeploymentStatus.NOT_DEPLOYED, 25),
    (ProjectStage.BUILD, DeploymentStatus.NOT_DEPLOYED, 50),
    (ProjectStage.DEPLOY, DeploymentStatus.DEPLOYING, 75),
    (ProjectStage.DEPLOY, DeploymentStatus.DEPLOYED, 100),
])
def test_progress_percent(stage, status, expected):
    assert progress_percent(stage, status) == expected


# ----------------------------------------------------------------------
# Transitions
# ----------------------------------------------------------------------

async def _new_project(db, build_env):
    store = ProjectStore(db, build_env)
    project = await store.create("alice", "Bakery Site")
    return store, project


async def test_finalize_needs_three_user_turns(db):
    build_env = StubBuildEnvironment()
    store, project = await _new_project(db, build_env)
    llm = StubCompletionService()
    machine = StageMachine(store, extractor=SpecExtractor(llm))

    log = ConversationLog.from_messages(
        [ConversationMessage(**m) for m in idea_messages(BAKERY_CONVERSATION[:3])]
    )
    with pytest.raises(InsufficientConversation):
        await machine.finalize_idea(project.id, "alice", log)

    assert llm.calls == []
    assert project.specification is None


async def test_finalize_stores_specification_and_moves_to_build(db):
    build_env = StubBuildEnvironment()
    store, project = await _new_project(db, build_env)
    machine = StageMachine(store, extractor=SpecExtractor(StubCompletionService()))

    spec = await machine.finalize_idea(project.id, "alice", _bakery_log())

    project = await store.get(project.id, "alice")
    assert spec.model_dump() == BAKERY_SPEC
    assert project.specification_data == BAKERY_SPEC
    assert await machine.snapshot(project) == {"stage": "build", "progress": 50}

    events, total = await store.history(project.id, "alice", action=HistoryAction.EXPORT_TO_BUILD)
    assert total == 1
    assert events[0].payload["specification"] == BAKERY_SPEC


async def test_failed_extraction_leaves_project_unchanged(db):
    build_env = StubBuildEnvironment()
    store, project = await _new_project(db, build_env)
    llm = StubCompletionService(reply="I think your bakery site will be great!")
    machine = StageMachine(store, extractor=SpecExtractor(llm))

    with pytest.raises(MalformedSpecification):
        await machine.finalize_idea(project.id, "alice", _bakery_log())

    project = await store.get(project.id, "alice")
    assert project.specification is None
    assert (await machine.snapshot(project))["stage"] == "idea"
    _, total = await store.history(project.id, "alice")
    assert total == 0


async def test_refinalize_replaces_specification(db):
    build_env = StubBuildEnvironment()
    store, project = await _new_project(db, build_env)
    llm = StubCompletionService()
    newer = dict(BAKERY_SPEC, purpose="Sell cakes online")
    llm.queued = [json.dumps(BAKERY_SPEC), json.dumps(newer)]
    machine = StageMachine(store, extractor=SpecExtractor(llm))

    await machine.finalize_idea(project.id, "alice", _bakery_log())
    await machine.finalize_idea(project.id, "alice", _bakery_log())

    project = await store.get(project.id, "alice")
    assert project.specification_data["purpose"] == "Sell cakes online"


async def test_save_progress_requires_build_stage(db):
    build_env = StubBuildEnvironment()
    store, project = await _new_project(db, build_env)
    machine = StageMachine(store, build_env=build_env)

    with pytest.raises(InvalidInput):
        await machine.save_progress(project.id, "alice")
    assert build_env.saved == []


async def test_proceed_never_advances_when_save_fails(db):
    build_env = StubBuildEnvironment()
    store, project = await _new_project(db, build_env)
    await store.update(project.id, "alice", specification=BAKERY_SPEC)
    machine = StageMachine(store, build_env=build_env)

    for failure in ("fail_save", "raise_on_save"):
        setattr(build_env, failure, True)
        with pytest.raises(Exception):
            await machine.proceed_to_deployment(project.id, "alice")
        setattr(build_env, failure, False)

        project = await store.get(project.id, "alice")
        assert (await machine.snapshot(project))["stage"] == "build"

    _, transitions = await store.history(project.id, "alice", action=HistoryAction.STAGE_TRANSITION)
    _, saves = await store.history(project.id, "alice", action=HistoryAction.SAVE_BUILD_PROGRESS)
    assert transitions == 0
    assert saves == 0


async def test_proceed_is_idempotent_in_deploy(db):
    build_env = StubBuildEnvironment()
    store, project = await _new_project(db, build_env)
    await store.update(project.id, "alice", specification=BAKERY_SPEC)
    machine = StageMachine(store, build_env=build_env)

    await machine.proceed_to_deployment(project.id, "alice")
    await machine.proceed_to_deployment(project.id, "alice")

    project = await store.get(project.id, "alice")
    assert (await machine.snapshot(project))["stage"] == "deploy"
    _, transitions = await store.history(project.id, "alice", action=HistoryAction.STAGE_TRANSITION)
    _, saves = await store.history(project.id, "alice", action=HistoryAction.SAVE_BUILD_PROGRESS)
    assert transitions == 1
    assert saves == 2
    assert build_env.saved == [project.external_build_handle] * 2


async def test_proceed_from_idea_is_rejected(db):
    build_env = StubBuildEnvironment()
    store, project = await _new_project(db, build_env)
    machine = StageMachine(store, build_env=build_env)

    with pytest.raises(InvalidInput):
        await machine.proceed_to_deployment(project.id, "alice")


# ----------------------------------------------------------------------
# Through the API
# ----------------------------------------------------------------------

async def test_bakery_site_scenario(client):
    project = await create_project(client)

    response = await client.post(
        "/idea/finalize",
        json={"projectId": project["id"], "messages": idea_messages()},
        headers=ALICE,
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["summary"] == BAKERY_SPEC
    assert body["stage"] == "build"
    assert body["progress"] == 50

    stored = (await client.get(f"/projects/{project['id']}", headers=ALICE)).json()["project"]
    assert stored["specification"] == BAKERY_SPEC
    assert stored["stage"] == "build"

    history = (await client.get(
        f"/projects/{project['id']}/history",
        params={"action": "export_to_build"},
        headers=ALICE,
    )).json()
    assert history["total"] == 1


async def test_finalize_too_early_over_api(client, llm):
    project = await create_project(client)

    response = await client.post(
        "/idea/finalize",
        json={"projectId": project["id"], "messages": idea_messages(BAKERY_CONVERSATION[:3])},
        headers=ALICE,
    )
    assert response.status_code == 400
    assert response.json()["code"] == "insufficient_conversation"
    assert llm.calls == []


async def test_proceed_with_failing_save_over_api(client, build_env):
    project = await create_project(client)
    await client.put(f"/projects/{project['id']}", json={"specification": BAKERY_SPEC}, headers=ALICE)

    build_env.fail_save = True
    response = await client.post("/build/proceed", json={"projectId": project["id"]}, headers=ALICE)
    assert response.status_code == 500
    assert response.json()["code"] == "upstream_unavailable"

    stage = (await client.get(f"/projects/{project['id']}/stage", headers=ALICE)).json()
    assert stage == {"stage": "build", "progress": 50}

    build_env.fail_save = False
    response = await client.post("/build/proceed", json={"projectId": project["id"]}, headers=ALICE)
    assert response.json() == {"stage": "deploy", "progress": 75}
