import pytest

from agent_orchestra.orchestration import FanOutFanInOrchestrator, OrchestratorConfigError
from agent_orchestra.orchestration.orchestrators import NO_SUITABLE_AGENTS, parse_selection
from agent_orchestra.orchestration.synthesizer import SYNTHESIS_ERROR
from agent_orchestra.orchestration.workers import quote_task

from conftest import RecordingWorker, ScriptedCollaborator


@pytest.fixture
def roster():
    return [
        RecordingWorker("Economist", objective="costs", behavior="cheap"),
        RecordingWorker("Engineer", objective="feasibility", behavior=RuntimeError("overloaded")),
        RecordingWorker("Historian", objective="history", behavior="old"),
    ]


@pytest.mark.parametrize("parallel", [True, False])
def test_selected_workers_run_and_are_synthesized(roster, parallel):
    collaborator = ScriptedCollaborator("- Economist\n2. engineer\n", "Merged answer")
    orchestrator = FanOutFanInOrchestrator(roster, collaborator, parallel=parallel)

    assert orchestrator.orchestrate("Build a dam?") == "Merged answer"
    assert roster[2].received == []
    synthesis_prompt = collaborator.prompts[1]
    assert "- Agent Economist: cheap" in synthesis_prompt
    assert "- Agent Engineer: Error executing task: overloaded" in synthesis_prompt
    assert orchestrator.last_run.selected_roles == ["Economist", "Engineer"]


def test_plain_workers_get_specialist_prompt(roster):
    collaborator = ScriptedCollaborator("Economist", "ok answer")
    FanOutFanInOrchestrator(roster, collaborator, parallel=False).orchestrate("Build a dam?")
    received = roster[0].received[0]
    assert "Economist" in received
    assert '"costs"' in received
    assert "Build a dam?" in received


def test_formatted_workers_keep_their_formatter():
    searcher = RecordingWorker("Researcher", behavior="facts", task_formatter=quote_task)
    collaborator = ScriptedCollaborator("Researcher", "answer")
    FanOutFanInOrchestrator([searcher], collaborator).orchestrate("dams")
    assert searcher.received == ['"dams"']


def test_no_relevant_agents(roster):
    collaborator = ScriptedCollaborator("NO RELEVANT AGENTS")
    result = FanOutFanInOrchestrator(roster, collaborator).orchestrate("Bake bread")
    assert result == NO_SUITABLE_AGENTS
    assert all(w.received == [] for w in roster)


def test_selection_failure_means_no_agents(roster):
    collaborator = ScriptedCollaborator(RuntimeError("timeout"))
    assert FanOutFanInOrchestrator(roster, collaborator).orchestrate("x") == NO_SUITABLE_AGENTS


def test_synthesis_failure_gives_generic_error(roster):
    collaborator = ScriptedCollaborator("Historian", RuntimeError("quota"))
    assert FanOutFanInOrchestrator(roster, collaborator).orchestrate("x") == SYNTHESIS_ERROR


def test_parse_selection(roster):
    response = '* "Historian"\nRole: Economist\nAstronaut\nhistorian\n'
    assert [w.role for w in parse_selection(response, roster)] == ["Economist", "Historian"]
    assert parse_selection("no relevant agents", roster) == []
    assert parse_selection("", roster) == []


def test_configuration_errors():
    with pytest.raises(OrchestratorConfigError):
        FanOutFanInOrchestrator([], ScriptedCollaborator())
    with pytest.raises(OrchestratorConfigError):
        FanOutFanInOrchestrator([RecordingWorker("A")], None)


@pytest.mark.asyncio
async def test_sync_orchestrate_inside_running_event_loop():
    analyst = RecordingWorker("Analyst", behavior="numbers")
    collaborator = ScriptedCollaborator("Analyst", "A combined answer text.")
    orchestrator = FanOutFanInOrchestrator([analyst], collaborator)
    assert orchestrator.parallel is True
    assert orchestrator.orchestrate("task") == "A combined answer text."
    assert analyst.received
