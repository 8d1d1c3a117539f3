"""基于 prompt_toolkit 的行输入。

- 主提示符 ``>>> ``，续行提示符 ``... ``；
- 以 ``\"\"\"`` 开头的一行开启多行输入，直到某行以 ``\"\"\"`` 结尾；
- EOFError（Ctrl-D）表示输入结束，会话应退出；
- InputInterrupted（Ctrl-C）表示放弃当前输入，会话继续。
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Any, List, Optional, TextIO

from prompt_toolkit import PromptSession

from relay_core.domain.models import ROLES, Role


START_BRACKETED_PASTE = "\x1b[?2004h"
END_BRACKETED_PASTE = "\x1b[?2004l"
MULTILINE_QUOTE = '"""'
ROLE_PROMPT = "Select role (user/assistant/system): "


class InputInterrupted(Exception):
    """用户按下 Ctrl-C。partial 为被丢弃的多行输入（可能为空）。"""

    def __init__(self, partial: str = ""):
        self.partial = partial
        super().__init__("input interrupted")


@dataclass
class Prompt:
    prompt: str = ">>> "
    alt_prompt: str = "... "
    placeholder: str = "Message"
    alt_placeholder: str = f"Use {MULTILINE_QUOTE} to end multi-line input"
    use_alt: bool = False


class LineReader:
    def __init__(
        self,
        prompt: Optional[Prompt] = None,
        session: Optional[Any] = None,
        out: Optional[TextIO] = None,
    ):
        self.prompt = prompt or Prompt()
        self._session = session
        self._out = out

    @property
    def session(self) -> Any:
        if self._session is None:
            self._session = PromptSession()
        return self._session

    @property
    def out(self) -> TextIO:
        return self._out or sys.stdout

    def readline(self) -> str:
        if self.prompt.use_alt:
            message, placeholder = self.prompt.alt_prompt, self.prompt.alt_placeholder
        else:
            message, placeholder = self.prompt.prompt, self.prompt.placeholder
        return self._ask(message, placeholder=placeholder)

    def read_message(self) -> str:
        """读取一条逻辑消息（单行或 \"\"\" 包围的多行）。"""

        line = self.readline()
        stripped = line.lstrip()
        if not stripped.startswith(MULTILINE_QUOTE):
            return line

        body = stripped[len(MULTILINE_QUOTE):]
        if body.rstrip().endswith(MULTILINE_QUOTE):
            return body.rstrip()[: -len(MULTILINE_QUOTE)]

        lines: List[str] = [body] if body else []
        self.prompt.use_alt = True
        try:
            while True:
                try:
                    line = self.readline()
                except InputInterrupted:
                    raise InputInterrupted("\n".join(lines))
                closing = line.rstrip()
                if closing.endswith(MULTILINE_QUOTE):
                    rest = closing[: -len(MULTILINE_QUOTE)]
                    if rest:
                        lines.append(rest)
                    break
                lines.append(line)
        finally:
            self.prompt.use_alt = False
        return "\n".join(lines)

    def read_role(self) -> Role:
        """循环询问角色，直到输入合法值。"""

        while True:
            role = self._ask(ROLE_PROMPT).strip()
            if role in ROLES:
                return role  # type: ignore[return-value]
            self.out.write("Invalid role. Please select either 'user', 'assistant', or 'system'.\n")
            self.out.flush()

    def _ask(self, message: str, **kwargs: Any) -> str:
        try:
            return self.session.prompt(message, **kwargs)
        except KeyboardInterrupt:
            raise InputInterrupted()
