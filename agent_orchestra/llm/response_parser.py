import json
import re
from typing import Optional

FINAL_ANSWER_HEADINGS = re.compile(
    r"^\s*(?:#{1,6}\s*|\*\*)?\s*(?:final answer|answer|conclusion|resposta final)\s*:?\s*(?:\*\*)?\s*:?\s*$",
    re.IGNORECASE | re.MULTILINE,
)
INLINE_FINAL_ANSWER = re.compile(
    r"(?:^|\n)\s*(?:\*\*)?final answer(?:\*\*)?\s*:\s*(?:\*\*)?\s*(.+)",
    re.IGNORECASE | re.DOTALL,
)
THINK_BLOCK = re.compile(r"<think(?:ing)?>.*?</think(?:ing)?>", re.DOTALL | re.IGNORECASE)


def _from_json(raw: str) -> Optional[str]:
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return None
    if isinstance(data, dict):
        answer = data.get("final_answer") or data.get("answer")
        if isinstance(answer, str) and answer.strip():
            return answer.strip()
    return None


def extract_final_answer(raw: str) -> str:
    """
    Pull the final answer out of reasoning-style model output.

    Handles, in order: a JSON object with ``final_answer``/``answer``,
    ``<think>`` blocks preceding the answer, an inline ``Final Answer:`` marker,
    and a trailing "Final Answer"/"Conclusion" heading. Anything else is
    returned stripped but otherwise unchanged.
    """
    if not raw:
        return ""
    text = raw.strip()

    answer = _from_json(text)
    if answer is not None:
        return answer

    text = THINK_BLOCK.sub("", text).strip()

    match = INLINE_FINAL_ANSWER.search(text)
    if match and match.group(1).strip():
        return match.group(1).strip()

    headings = list(FINAL_ANSWER_HEADINGS.finditer(text))
    if headings:
        tail = text[headings[-1].end() :].strip()
        if tail:
            return tail
    return text
