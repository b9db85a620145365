import pytest

from agent_orchestra.config import DependencyGraphConfig
from agent_orchestra.orchestration import (
    DependencyGraphOrchestrator,
    FanOutFanInOrchestrator,
    LinearChainOrchestrator,
    OrchestratorConfigError,
    OrchestratorRegistry,
)
from agent_orchestra.orchestration.orchestrators import list_variants

LLM = {"model": "openai/gpt-4o-mini"}

CONFIGS = {
    "chain": {
        "variant_tag": "LinearChain",
        "llm": LLM,
        "workers": [{"role": "Writer"}, {"role": "Editor", "task_template": "Edit: {{task}}"}],
    },
    "panel": {
        "variant_tag": "FanOutFanIn",
        "llm": LLM,
        "workers": [{"role": "Economist"}, {"kind": "search", "role": "Researcher"}],
    },
    "planner": {"variant_tag": "DependencyGraph", "llm": LLM, "parallel": True},
}


@pytest.fixture
def registry():
    return OrchestratorRegistry(CONFIGS)


def test_all_variants_registered():
    assert set(list_variants()) >= {"LinearChain", "FanOutFanIn", "DependencyGraph"}


def test_resolve_builds_each_variant(registry):
    chain = registry.resolve("chain")
    panel = registry.resolve("panel")
    planner = registry.resolve("planner")
    assert isinstance(chain, LinearChainOrchestrator)
    assert [w.role for w in chain.workers] == ["Writer", "Editor"]
    assert isinstance(panel, FanOutFanInOrchestrator)
    assert [w.kind for w in panel.workers] == ["llm", "search"]
    assert isinstance(planner, DependencyGraphOrchestrator)
    assert planner.parallel is True
    assert chain.name == "chain"


def test_resolve_is_idempotent_and_uncached(registry):
    first = registry.resolve("chain")
    second = registry.resolve("chain")
    assert first is not second
    assert [w.role for w in first.workers] == [w.role for w in second.workers]


def test_unknown_name(registry):
    with pytest.raises(OrchestratorConfigError, match="not found"):
        registry.resolve("missing")


@pytest.mark.parametrize(
    "config",
    [
        {"variant_tag": "Pipeline", "llm": LLM},
        {"variant_tag": "LinearChain", "workers": []},
        {"variant_tag": "FanOutFanIn", "workers": [{"role": "A"}]},
        {"variant_tag": "DependencyGraph"},
        {"variant_tag": "LinearChain", "workers": [{"kind": "telepathy", "role": "A"}], "llm": LLM},
        {"variant_tag": "LinearChain", "workers": [{"role": "  "}], "llm": LLM},
    ],
)
def test_invalid_configs_fail_at_registration(config):
    with pytest.raises(OrchestratorConfigError):
        OrchestratorRegistry({"bad": config})


def test_unknown_search_tool_fails_at_resolve():
    registry = OrchestratorRegistry(
        {"planner": {"variant_tag": "DependencyGraph", "llm": LLM, "search_tool": "missing_tool"}}
    )
    with pytest.raises(OrchestratorConfigError, match="missing_tool"):
        registry.resolve("planner")


def test_worker_without_llm_fails_at_resolve():
    registry = OrchestratorRegistry({"chain": {"variant_tag": "LinearChain", "workers": [{"role": "A"}]}})
    with pytest.raises(OrchestratorConfigError):
        registry.resolve("chain")


def test_legacy_key_spellings():
    registry = OrchestratorRegistry(
        {"chain": {"type": "LinearChain", "agents": [{"role": "A"}], "llmConfig": LLM}}
    )
    assert registry.get_config("chain").variant_tag == "LinearChain"


def test_register_replace_and_unregister(registry):
    registry.register("planner", DependencyGraphConfig(variant_tag="DependencyGraph", llm=LLM, strict=True))
    assert registry.get_config("planner").strict is True
    registry.unregister("planner")
    assert registry.names() == ["chain", "panel"]
    with pytest.raises(OrchestratorConfigError):
        registry.unregister("planner")


def test_from_yaml(tmp_path):
    path = tmp_path / "orchestrators.yaml"
    path.write_text(
        "orchestrators:\n"
        "  solo:\n"
        "    variant_tag: LinearChain\n"
        "    llm:\n"
        "      model: openai/gpt-4o-mini\n"
        "    workers:\n"
        "      - role: Writer\n"
    )
    registry = OrchestratorRegistry.from_yaml(str(path))
    assert registry.names() == ["solo"]
    assert isinstance(registry.resolve("solo"), LinearChainOrchestrator)
