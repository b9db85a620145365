import re
from typing import List, Optional

import loguru

from agent_orchestra.config.prompts import NamedPrompt, load_orchestration_prompts
from agent_orchestra.llm.completion import Collaborator
from agent_orchestra.llm.response_parser import extract_final_answer
from agent_orchestra.logger import component_logger

from .plan import ExecutionResult, Plan, SubtaskNode

SYNTHESIS_ERROR = "Error generating the final orchestrated response."
RESULT_NOT_AVAILABLE = "Result not available"
MIN_ANSWER_LENGTH = 10
FORMATTING_ONLY = re.compile(r"^[\s*#_`>\-]*$")


def is_degenerate(answer: Optional[str]) -> bool:
    """Empty, trivially short, or made only of formatting characters."""
    if not answer:
        return True
    stripped = answer.strip()
    return len(stripped) < MIN_ANSWER_LENGTH or bool(FORMATTING_ONLY.match(stripped))


def build_transcript(ordered: List[SubtaskNode], results: ExecutionResult) -> str:
    entries = []
    for node in ordered:
        outcome = results.get(node.id)
        text = outcome.as_text() if outcome is not None else RESULT_NOT_AVAILABLE
        entry = f"**Subtask {node.id}:** {node.description}\n**Result:** {text}"
        if node.depends_on:
            entry += f"\n**Depends on:** {', '.join(node.depends_on)}"
        entries.append(entry)
    return "\n\n".join(entries)


class Synthesizer:
    """Combines the plan and per-subtask results into one final answer."""

    def __init__(
        self,
        collaborator: Collaborator,
        logger: Optional["loguru.Logger"] = None,
        prompt: Optional[NamedPrompt] = None,
        reasoning_output: bool = False,
    ):
        self.collaborator = collaborator
        self.logger = component_logger("synthesizer", logger)
        self.prompt = prompt or load_orchestration_prompts().get_template("synthesis")
        self.reasoning_output = reasoning_output

    def synthesize(
        self,
        task: str,
        plan: Plan,
        results: ExecutionResult,
        ordered: Optional[List[SubtaskNode]] = None,
    ) -> str:
        """
        Ask the collaborator for a final answer. ``ordered`` is the execution
        order used for the transcript (declaration order when omitted).

        A degenerate answer is replaced by the raw transcript; a collaborator
        failure yields ``SYNTHESIS_ERROR``.
        """
        transcript = build_transcript(
            ordered if ordered is not None else plan.nodes, results
        )
        messages = self.prompt.compile(task=task, plan=plan.to_json(), transcript=transcript)
        try:
            raw = self.collaborator.submit(messages)
        except Exception as e:
            self.logger.error(f"Synthesis failed: {e}")
            return SYNTHESIS_ERROR

        answer = raw
        if self.reasoning_output:
            extracted = extract_final_answer(raw)
            if not is_degenerate(extracted):
                answer = extracted
        if is_degenerate(answer):
            self.logger.warning("Synthesized answer is empty or trivial, returning the raw transcript")
            return transcript
        return answer
