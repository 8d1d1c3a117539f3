"""对外服务模块。

提供会话引擎的装配函数，以及交互式会话循环：
读取一行（或命令）-> 询问角色 -> 引擎执行一轮 -> 渲染 -> 重复。
单轮失败只打印错误，会话继续；EOF、/exit、/bye 结束会话。
"""

import sys
from typing import Callable, Optional, Sequence, TextIO

from relay_core.agents.conversation_engine import ConversationEngine
from relay_core.config.model_config import ModelRecord
from relay_core.domain.exceptions import BusinessError
from relay_core.infrastructure.interrupts import CancelToken, InterruptListener
from relay_core.infrastructure.logging.logger import logger
from relay_core.providers import create_provider
from relay_core.ui.line_reader import (
    END_BRACKETED_PASTE,
    START_BRACKETED_PASTE,
    InputInterrupted,
    LineReader,
)
from relay_core.ui.renderer import StreamRenderer
from relay_core.ui.spinner import Spinner


EXIT_COMMANDS = ("/exit", "/bye")
HELP_TEXT = """Available commands:
  /continue   let the current model continue without new input
  /models     list configured models
  /bye        exit (also /exit or Ctrl + d)
  /help       show this help

Use \"\"\" to begin a multi-line message.
"""


def create_engine(
    models: Sequence[ModelRecord],
    cfg=None,
    host: Optional[str] = None,
    out: Optional[TextIO] = None,
) -> ConversationEngine:
    """装配默认的会话引擎：Ollama Provider + 终端渲染 + Spinner + Ctrl-C 取消。"""

    return ConversationEngine(
        provider_client=create_provider(cfg, host=host),
        models=models,
        renderer=StreamRenderer(out),
        status=Spinner(),
        cancel_token=CancelToken(),
        interrupt_listener=InterruptListener(),
    )


def run_chat_session(
    engine: ConversationEngine,
    reader: LineReader,
    out: Optional[TextIO] = None,
) -> None:
    out = out or sys.stdout
    out.write(START_BRACKETED_PASTE)
    try:
        while True:
            try:
                line = reader.read_message()
            except EOFError:
                out.write("\n")
                return
            except InputInterrupted as exc:
                if not exc.partial:
                    out.write("\nUse Ctrl + d or /bye to exit.\n")
                continue

            command = line.strip()
            if not command:
                continue
            if command.startswith(EXIT_COMMANDS):
                return
            if command.startswith("/continue"):
                _run_turn(engine.continue_turn, out)
                continue
            if command.startswith("/models"):
                _print_models(engine, out)
                continue
            if command.startswith("/help"):
                out.write(HELP_TEXT)
                continue

            try:
                role = reader.read_role()
            except EOFError:
                out.write("\n")
                return
            except InputInterrupted:
                continue
            _run_turn(lambda: engine.submit(role, line), out)
    finally:
        out.write(END_BRACKETED_PASTE)
        out.flush()


def _run_turn(turn: Callable[[], object], out: TextIO) -> None:
    try:
        if turn() is None:
            out.write("Turn cancelled.\n")
    except BusinessError as e:
        logger.error(f"Turn failed: {e}", extra={"extra": {"code": e.code, "error": e.message}})
        out.write(f"Error: {e.message}\n")


def _print_models(engine: ConversationEngine, out: TextIO) -> None:
    for index, model in enumerate(engine.models):
        marker = "*" if index == engine.active_index else " "
        out.write(f"{marker} {index}: {model.name} - {model.description}\n")
    out.flush()
