"""Parse-or-repair extraction of plans from planner output."""

import pytest

from agent_orchestra.orchestration.plan import DEFAULT_ROLE
from agent_orchestra.orchestration.plan_parser import (
    extract_block,
    normalize_block,
    parse_plan,
    strip_line_comments,
)

WELL_FORMED = """Here is the plan:
```json
{
  "subTasks": [
    {
      "id": "t1",
      "taskDescription": "Collect data",
      "agentRole": "Research Agent",
      "agentObjective": "Gather facts",
      "agentTaskPrompt": "Find the numbers",
      "enableAugmentedCapability": true,
      "dependsOn": []
    },
    {
      "id": "t2",
      "taskDescription": "Write report",
      "agentRole": "Writing Agent",
      "agentObjective": "Summarize",
      "agentTaskPrompt": "Write it up",
      "enableAugmentedCapability": false,
      "dependsOn": ["t1"]
    }
  ]
}
```
Good luck!"""


def test_well_formed_block_yields_exact_nodes():
    plan = parse_plan(WELL_FORMED)
    assert plan.ids() == ["t1", "t2"]
    first, second = plan.nodes
    assert first.description == "Collect data"
    assert first.assigned_role == "Research Agent"
    assert first.objective == "Gather facts"
    assert first.instructions == "Find the numbers"
    assert first.use_augmented_capability is True
    assert first.depends_on == []
    assert second.depends_on == ["t1"]
    assert second.use_augmented_capability is False


def test_noise_without_block_gives_empty_plan():
    assert parse_plan("I cannot help with that.").is_empty
    assert parse_plan("").is_empty


def test_legacy_search_flag_is_accepted():
    text = '{"subTasks": [{"id": "a", "agentTaskPrompt": "x", "enableGoogleSearch": true}]}'
    plan = parse_plan(text)
    assert plan.nodes[0].use_augmented_capability is True


def test_untagged_fence_and_bare_braces():
    fenced = '```\n{"subTasks": [{"id": "a", "agentTaskPrompt": "do a"}]}\n```'
    bare = 'Sure! {"subTasks": [{"id": "b", "agentTaskPrompt": "do b"}]} Done.'
    assert parse_plan(fenced).ids() == ["a"]
    assert parse_plan(bare).ids() == ["b"]


def test_json_fence_preferred_over_other_fences():
    text = (
        '```python\nprint("{}")\n```\n'
        '```json\n{"subTasks": [{"id": "real", "agentTaskPrompt": "p"}]}\n```'
    )
    assert parse_plan(text).ids() == ["real"]


def test_comments_and_trailing_commas_are_repaired():
    text = """```json
{
  // the plan
  "subTasks": [
    {"id": "t1", "agentTaskPrompt": "see http://example.com", "dependsOn": [],},
  ],
}
```"""
    plan = parse_plan(text)
    assert plan.ids() == ["t1"]
    assert plan.nodes[0].instructions == "see http://example.com"


def test_field_recovery_uses_nth_occurrence():
    # unquoted key and missing commas defeat the strict parse
    broken = """{
      subTasks: [
        {"id": "t1" "taskDescription": "first" "agentRole": "Analyst" "agentTaskPrompt": "do one" "dependsOn": []}
        {"id": "t2" "taskDescription": "second" "agentTaskPrompt": "do two" "dependsOn": ["t1"]}
      ]
    }"""
    plan = parse_plan(broken)
    assert plan.ids() == ["t1", "t2"]
    assert plan.nodes[0].assigned_role == "Analyst"
    # only one agentRole occurrence: the second node falls back to the default
    assert plan.nodes[1].assigned_role == DEFAULT_ROLE
    assert plan.nodes[1].description == "second"
    assert plan.nodes[1].instructions == "do two"
    assert plan.nodes[0].depends_on == []
    assert plan.nodes[1].depends_on == ["t1"]


def test_field_recovery_defaults_for_missing_fields():
    plan = parse_plan('{"id": 7 "junk"}')
    assert plan.ids() == ["7"]
    node = plan.nodes[0]
    assert node.description == "Subtask 1"
    assert node.assigned_role == DEFAULT_ROLE
    assert node.use_augmented_capability is False
    assert node.depends_on == []


def test_missing_ids_are_auto_assigned_and_duplicates_renamed():
    text = '{"subTasks": [{"agentTaskPrompt": "a"}, {"id": "x"}, {"id": "x"}]}'
    plan = parse_plan(text)
    assert plan.ids() == ["task1", "x", "x_3"]


def test_renamed_duplicate_does_not_collide_with_existing_id():
    plan = parse_plan('{"subTasks": [{"id": "a_3"}, {"id": "a"}, {"id": "a"}]}')
    assert plan.ids() == ["a_3", "a", "a_3_3"]
    assert len(set(plan.ids())) == 3


def test_string_dependency_lists_are_coerced():
    text = '{"subTasks": [{"id": "a"}, {"id": "b", "dependsOn": "a"}, {"id": "c", "dependsOn": "a, b, a"}]}'
    plan = parse_plan(text)
    assert plan.get("b").depends_on == ["a"]
    assert plan.get("c").depends_on == ["a", "b"]


def test_non_object_items_are_skipped():
    plan = parse_plan('{"subTasks": ["oops", {"id": "ok"}]}')
    assert plan.ids() == ["ok"]


@pytest.mark.parametrize(
    "text",
    [
        "{",
        "}{",
        "```json\n```",
        '{"subTasks": 42}',
        "```json\n{\"subTasks\": [{\"id\": \"a\"\n",
    ],
)
def test_parser_never_raises(text):
    parse_plan(text)


def test_unterminated_fence_still_recovers():
    plan = parse_plan('```json\n{"subTasks": [{"id": "a", "agentTaskPrompt": "p"}]}')
    assert plan.ids() == ["a"]


def test_strip_line_comments_keeps_urls_in_strings():
    text = '{"url": "http://x.y"} // trailing'
    assert strip_line_comments(text).strip() == '{"url": "http://x.y"}'


def test_extract_and_normalize_block():
    block = extract_block('prefix {"a": {"b": 1}} suffix {"c": 2}')
    assert block == '{"a": {"b": 1}}'
    assert normalize_block("noise { inner } more") == "{ inner }"
    assert normalize_block("no braces here") is None
