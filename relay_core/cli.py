"""命令行入口：解析参数、加载模型配置、启动交互式会话。"""

import argparse
import sys
from typing import List, Optional

from relay_core import __version__
from relay_core.api.service import create_engine, run_chat_session
from relay_core.config.model_config import load_model_config
from relay_core.config.settings import settings
from relay_core.domain.exceptions import ConfigError
from relay_core.infrastructure.logging.logger import logger
from relay_core.ui.line_reader import LineReader


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="relay-chat",
        description="Chat with one or more models; with two or more, each model's reply is relayed to the others.",
    )
    parser.add_argument(
        "-c",
        "--config-path",
        dest="config_path",
        default=None,
        help="path to the models config file (JSON or YAML)",
    )
    parser.add_argument("--host", default=None, help=f"server address (default: {settings.host})")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config_path = args.config_path or settings.models_config_path
    try:
        models = load_model_config(config_path)
    except ConfigError as e:
        logger.critical(f"Startup failed: {e.message}", extra={"extra": {"code": e.code}})
        print(f"fatal: {e.message}", file=sys.stderr)
        sys.exit(1)

    logger.info(
        "Session started",
        extra={"extra": {"models": [m.name for m in models], "host": args.host or settings.host}},
    )
    print("Starting CLI application. Type '/bye' to quit, '/help' for commands.")
    engine = create_engine(models, host=args.host)
    run_chat_session(engine, LineReader())
    logger.info("Session ended")
    return 0


if __name__ == "__main__":
    sys.exit(main())
