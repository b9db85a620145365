import os.path as osp
from functools import lru_cache
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel

from agent_orchestra.utils import get_prompts_dir, read_yaml


class NamedPrompt(BaseModel):
    """A specific named template extracted from a multi-template prompt"""

    name: str
    prompt_template: List[Dict[Literal["role", "content"], str]]

    def compile(self, **kwargs: Any) -> List[dict]:
        """Compile this template, replacing ``{{variable}}`` placeholders."""
        compiled_messages = []
        for msg in self.prompt_template:
            compiled_msg = {}
            for key, value in msg.items():
                if isinstance(value, str):
                    compiled_value = value
                    for var_name, var_value in kwargs.items():
                        compiled_value = compiled_value.replace(
                            f"{{{{{var_name}}}}}", str(var_value)
                        )
                    compiled_msg[key] = compiled_value
                else:
                    compiled_msg[key] = value
            compiled_messages.append(compiled_msg)

        return compiled_messages

    def compile_text(self, **kwargs: Any) -> str:
        """Compile and join all message contents into one prompt string."""
        return "\n\n".join(m["content"] for m in self.compile(**kwargs)).strip()


class Prompt(BaseModel):
    """A prompt template with named templates"""

    name: str
    local_path: Optional[str] = None
    prompt_template: Optional[List[Dict[Literal["role", "content"], str]]] = None
    named_templates: Optional[Dict[str, NamedPrompt]] = None

    def model_post_init(self, __context: Any) -> None:
        if (
            not self.prompt_template
            and not self.named_templates
            and not self.local_path
        ):
            raise ValueError(
                f"Prompt {self.name} must have a prompt_template, named_templates, or local_path"
            )
        if self.local_path:
            res = read_yaml(self.local_path)
            if isinstance(res, dict):
                base_prompt = res.get("base", [])
                named_templates_w_base = {
                    f"base_{k}": NamedPrompt(name=k, prompt_template=base_prompt + v)
                    for k, v in res.items()
                    if k != "base"
                }
                named_templates_wo_base = {
                    k: NamedPrompt(name=k, prompt_template=v) for k, v in res.items()
                }
                self.named_templates = {
                    **named_templates_w_base,
                    **named_templates_wo_base,
                }
            else:
                self.prompt_template = res

    def compile(self, **kwargs: Any) -> List[Dict[Literal["role", "content"], str]]:
        if not self.prompt_template:
            raise ValueError(f"Prompt {self.name} has no prompt_template to compile")

        return NamedPrompt(
            name=self.name,
            prompt_template=self.prompt_template,
        ).compile(**kwargs)

    def get_template(self, template_name: str, with_base: bool = True) -> NamedPrompt:
        if self.named_templates is None:
            raise ValueError(f"Named templates are not defined for {self.name}")
        if with_base:
            template_name = f"base_{template_name}"
        if template_name not in self.named_templates:
            raise ValueError(f"Template '{template_name}' not found in {self.name}")
        return self.named_templates[template_name]


@lru_cache(maxsize=None)
def load_orchestration_prompts(path: Optional[str] = None) -> Prompt:
    """Load the packaged orchestration templates (or a replacement YAML file)."""
    path = path or osp.join(get_prompts_dir(), "orchestration.yaml")
    return Prompt(name="orchestration", local_path=path)
