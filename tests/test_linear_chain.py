import pytest

from agent_orchestra.orchestration import LinearChainOrchestrator, OrchestratorConfigError
from agent_orchestra.orchestration.workers import quote_task, template_formatter

from conftest import RecordingWorker


def test_output_feeds_next_step():
    first = RecordingWorker("Writer", behavior=lambda instr: f"draft({instr})")
    second = RecordingWorker("Editor", behavior=lambda instr: f"final({instr})")
    chain = LinearChainOrchestrator([first, second])

    assert chain.orchestrate("topic") == "final(draft(topic))"
    assert second.received == ["draft(topic)"]


def test_failure_stops_chain_and_names_step():
    """The failing step is reported and later workers are never invoked."""
    first = RecordingWorker("Researcher", behavior=RuntimeError("no sources"))
    second = RecordingWorker("Writer")
    result = LinearChainOrchestrator([first, second]).orchestrate("topic")

    assert result == "Error in agent chain at step 1 (Researcher): no sources"
    assert second.received == []


def test_step_records():
    first = RecordingWorker("A", behavior="one")
    second = RecordingWorker("B", behavior=RuntimeError("bad"))
    chain = LinearChainOrchestrator([first, second], name="pipeline")
    chain.orchestrate("start")

    run = chain.last_run
    assert run.orchestrator == "pipeline"
    assert run.variant == "LinearChain"
    assert [(s.role, s.input, s.output, s.error) for s in run.steps] == [
        ("A", "start", "one", None),
        ("B", "one", None, "bad"),
    ]
    assert run.final_answer.startswith("Error in agent chain at step 2 (B)")


def test_task_formatters_shape_worker_input():
    quoted = RecordingWorker("Searcher", behavior="found", task_formatter=quote_task)
    templated = RecordingWorker(
        "Critic",
        objective="critique",
        behavior="done",
        task_formatter=template_formatter("{{role}} reviews: {{task}}"),
    )
    LinearChainOrchestrator([quoted, templated]).orchestrate("solar")
    assert quoted.received == ['"solar"']
    assert templated.received == ["Critic reviews: found"]


def test_structured_output_is_serialized_for_next_step():
    first = RecordingWorker("A", behavior={"k": 1})
    second = RecordingWorker("B", behavior=lambda instr: instr)
    result = LinearChainOrchestrator([first, second]).orchestrate("x")
    assert '"k": 1' in result


def test_empty_roster_is_rejected():
    with pytest.raises(OrchestratorConfigError):
        LinearChainOrchestrator([])


@pytest.mark.asyncio
async def test_async_contract():
    chain = LinearChainOrchestrator([RecordingWorker("A", behavior=lambda instr: instr.upper())])
    assert await chain.aorchestrate("abc") == "ABC"
