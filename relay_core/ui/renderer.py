"""流式文本的增量终端渲染。

模型输出是一段段到达的文本片段，这里逐字符输出并按单词换行：

- 当前行即将超过 ``width - 5`` 列时，把正在输出的单词（word_buffer）
  整体挪到下一行：光标左移单词宽度、清除到行尾、换行、重新输出单词（软换行）。
- 若单词本身宽于 ``width - 10``，永远放不下，直接在当前位置断开（硬换行），
  保证输出一定前进，且 word_buffer 不会无限增长。
- 宽字符（显示宽度 >= 2，如中文）不参与单词回退。
- ``width < 10`` 时不做任何换行处理，原样输出。

终端宽度由调用方在每次 feed 时传入，本类不做任何终端查询，
方便用固定宽度测试。字符显示宽度使用 prompt_toolkit 的 get_cwidth。
"""

import sys
from typing import Optional, TextIO

from prompt_toolkit.utils import get_cwidth


MIN_WRAP_WIDTH = 10
RIGHT_MARGIN = 5
LONG_WORD_MARGIN = 10

CURSOR_BACK = "\x1b[{}D"
CLEAR_TO_EOL = "\x1b[K"


class StreamRenderer:
    def __init__(self, out: Optional[TextIO] = None):
        self._out = out
        self.line_length = 0
        self.word_buffer = ""

    @property
    def out(self) -> TextIO:
        return self._out or sys.stdout

    def feed(self, content: str, width: int) -> None:
        """输出一个文本片段。width 为当前终端列数。"""

        if not content:
            return
        if width < MIN_WRAP_WIDTH:
            self.out.write(content)
            self.word_buffer = ""
        else:
            self.out.write("".join(self._feed_char(ch, width) for ch in content))
        self.out.flush()

    def end_turn(self) -> None:
        """一轮回答正常结束：空一行，状态清零。"""

        self.out.write("\n\n")
        self.out.flush()
        self.reset()

    def abort(self) -> None:
        """一轮回答被取消或出错：只结束当前行。"""

        if self.line_length:
            self.out.write("\n")
            self.out.flush()
        self.reset()

    def reset(self) -> None:
        self.line_length = 0
        self.word_buffer = ""

    def _feed_char(self, ch: str, width: int) -> str:
        if ch == "\n":
            self.line_length = 0
            self.word_buffer = ""
            return ch

        ch_width = get_cwidth(ch)
        if self.line_length + max(ch_width, 1) > width - RIGHT_MARGIN:
            buffer_width = get_cwidth(self.word_buffer)
            if buffer_width > width - LONG_WORD_MARGIN:
                # 单词太长，硬换行
                out = "\n" + ch
                self.word_buffer = ""
                self.line_length = ch_width
            else:
                back = CURSOR_BACK.format(buffer_width) if buffer_width > 0 else ""
                out = f"{back}{CLEAR_TO_EOL}\n{self.word_buffer}{ch}"
                self.line_length = buffer_width + ch_width
        else:
            out = ch
            self.line_length += ch_width

        if ch_width >= 2 or ch == " ":
            self.word_buffer = ""
        else:
            self.word_buffer += ch
        return out
