import os.path as osp
import time
from typing import List, Optional

import litellm
import orjson
import yaml
from litellm.caching.caching import Cache
from litellm.types.caching import LiteLLMCacheType

from agent_orchestra.logger import LongStrDumper, logger


def get_root_dir():
    return osp.dirname(osp.dirname(__file__))


def get_run_conf_dir():
    return osp.join(get_root_dir(), "run_conf")


def get_prompts_dir():
    return osp.join(osp.dirname(__file__), "prompts")


def enable_local_logging(prompt_only: bool = False):
    import litellm._logging as litellm_logging

    from agent_orchestra.llm.callbacks import LocalLogger

    litellm_logging._disable_debugging()  # type: ignore
    litellm.callbacks.append(LocalLogger(prompt_only=prompt_only))


def enable_local_cache(**kwargs):
    if litellm.cache is None:
        litellm.cache = Cache(type=LiteLLMCacheType.DISK, **kwargs)
    litellm.enable_cache()


def disable_local_cache():
    litellm.disable_cache()


def read_yaml(path: str, time_it: bool = False):
    if time_it:
        start = time.time()
    with open(path, "r") as f:
        data = yaml.safe_load(f)
    if time_it:
        end = time.time()
        logger.info(f"Time taken reading yaml: {end - start:.2f} seconds")
    return data


def write_yaml(
    data: dict,
    path: Optional[str] = None,
    use_long_str_representer: bool = False,
    **kwargs,
) -> Optional[str]:
    if use_long_str_representer:
        kwargs.setdefault("Dumper", LongStrDumper)
    kwargs.setdefault("sort_keys", False)
    if path is None:
        return yaml.dump(data, **kwargs)
    with open(path, "w") as f:
        yaml.dump(data, f, **kwargs)
    return None


def to_json_str(data, indent: bool = True) -> str:
    return orjson.dumps(
        data, option=orjson.OPT_INDENT_2 if indent else None, default=str
    ).decode()


def join_with_leading_dash(items: List[str], dash_prefix: str = "- ") -> str:
    if len(items) == 0:
        return ""
    return dash_prefix + f"\n{dash_prefix}".join(items)


def truncate(text: str, limit: int = 200) -> str:
    return text if len(text) <= limit else text[:limit] + "..."
