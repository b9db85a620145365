import pytest
from pydantic import TypeAdapter, ValidationError

from agent_orchestra.config import (
    LLMConfig,
    LLMWorkerConfig,
    OrchestratorConfig,
    SearchWorkerConfig,
    WorkerConfig,
)
from agent_orchestra.config.prompts import load_orchestration_prompts
from agent_orchestra.config.run import RunConfig
from agent_orchestra.llm import ChatLiteLLMLC
from agent_orchestra.utils import get_run_conf_dir

workers_adapter = TypeAdapter(WorkerConfig)


def test_worker_kind_defaults_to_llm():
    assert isinstance(workers_adapter.validate_python({"role": "Writer"}), LLMWorkerConfig)
    search = workers_adapter.validate_python({"kind": "search", "role": "Researcher"})
    assert isinstance(search, SearchWorkerConfig)
    assert search.max_searches == 3


def test_unknown_worker_kind_rejected():
    with pytest.raises(ValidationError):
        workers_adapter.validate_python({"kind": "oracle", "role": "Seer"})


def test_orchestrator_union_requires_tag():
    with pytest.raises(ValidationError):
        TypeAdapter(OrchestratorConfig).validate_python({"llm": {}})


def test_llm_config_params():
    config = LLMConfig(model="openai/gpt-4o-mini", params={"temperature": 0.1}, num_retries=4)
    llm = config.get_llm()
    assert llm.temperature == 0.1
    assert config.invoke_params() == {"num_retries": 4}


def test_llm_uses_stock_litellm_generation():
    llm = LLMConfig(model="openai/gpt-4o-mini").get_llm()
    assert isinstance(llm, ChatLiteLLMLC)
    assert "_generate" not in ChatLiteLLMLC.__dict__
    assert "_create_chat_result" not in ChatLiteLLMLC.__dict__


def test_prompt_templates_compile():
    prompts = load_orchestration_prompts()
    planning = prompts.get_template("planning")
    messages = planning.compile(task="Plan a trip")
    assert messages[0]["role"] == "system"
    assert "Plan a trip" in messages[-1]["content"]
    assert "{{" not in messages[-1]["content"]
    with pytest.raises(ValueError):
        prompts.get_template("nonexistent")


def test_run_config_from_packaged_yaml(tmp_path):
    config = RunConfig.from_yaml(f"{get_run_conf_dir()}/run_orchestrator.yaml", save_dir=str(tmp_path))
    registry = config.get_registry()
    assert config.orchestrator in registry.names()
    assert set(registry.names()) == {"research_planner", "review_chain", "expert_panel"}
    assert config.get_run_metadata()["save_dir"] == str(tmp_path)


def test_run_config_rejects_unknown_orchestrator():
    with pytest.raises(ValidationError):
        RunConfig(
            orchestrators={"a": {"variant_tag": "DependencyGraph", "llm": {}}},
            orchestrator="b",
            tasks=["t"],
        )
