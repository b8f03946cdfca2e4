import argparse, logging
from typing import Callable, Tuple, Optional
from common.config import load_config, Config

LOG_FORMAT = '%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s'
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

def add_config_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to YAML config file")

def add_log_level_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--log-level", default="INFO", type=str.upper, choices=LOG_LEVELS,
                        help="Logging level (DEBUG, INFO, WARNING, ERROR)")

def add_node_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--node-id", help="Directory of clouds or a single cloud file")

def parse_args_with_config(build_parser: Callable[[], argparse.ArgumentParser],
                           defaults_from_cfg: Callable[[Config], dict],
                           argv: Optional[list] = None) -> Tuple[argparse.Namespace, Config]:
    """
    1. Build the parser and read only --config from argv
    2. Load the YAML config (ConfigurationError if missing or malformed)
    3. Use its values as parser defaults, so explicit flags still win
    """
    p = build_parser()
    cfg = load_config(p.parse_known_args(argv)[0].config)
    p.set_defaults(**defaults_from_cfg(cfg))
    return p.parse_args(argv), cfg

def setup_logging(log_level: str) -> None:
    # worker threads log too, so the thread name is part of every line
    logging.basicConfig(level=getattr(logging, log_level.upper(), logging.INFO),
                        format=LOG_FORMAT)
