import os.path as osp

import hydra
from dotenv import load_dotenv
from hydra.conf import HydraConf
from hydra.core.hydra_config import HydraConfig
from omegaconf import DictConfig, OmegaConf

from agent_orchestra.config.run import RunConfig
from agent_orchestra.logger import add_sink, configure_logger, logger, remove_sink
from agent_orchestra.utils import get_run_conf_dir, to_json_str, write_yaml

load_dotenv(override=True)


@hydra.main(
    config_path=get_run_conf_dir(), config_name="run_orchestrator.yaml", version_base=None
)
def main(cfg: DictConfig):
    OmegaConf.resolve(cfg)
    hydra_cfg: HydraConf = HydraConfig.get()
    output_dir = hydra_cfg.runtime.output_dir
    cfg_dict = OmegaConf.to_container(cfg)
    assert isinstance(cfg_dict, dict)
    cfg_dict["save_dir"] = output_dir

    config = RunConfig(**{str(k): v for k, v in cfg_dict.items()})
    configure_logger(config.log_level)
    lptr = add_sink(osp.join(output_dir, "run.log"), level=config.log_level)

    logger.info(f"Running with config: {to_json_str(config.get_run_metadata())}")
    write_yaml(config.get_run_metadata(), osp.join(output_dir, "run_config.yaml"))

    registry = config.get_registry()
    for i, task in enumerate(config.tasks):
        orchestrator = registry.resolve(config.orchestrator)
        logger.info(f"Task {i + 1}/{len(config.tasks)}: {task}")
        run = orchestrator.run(task)
        run.save(osp.join(output_dir, f"task_{i:03d}.yaml"))
        logger.success(f"Final answer for task {i + 1}:\n{run.final_answer}")

    logger.info("Results saved to: " + output_dir)
    remove_sink(lptr)


if __name__ == "__main__":
    main()
