import io
import random
import re

from relay_core.ui.renderer import StreamRenderer


_ESCAPE = re.compile(r"\x1b\[(\d*)([DK])")


def screen_lines(output):
    """按终端语义回放输出（仅处理 ASCII、光标左移与清除到行尾）。"""

    lines = [""]
    i = 0
    while i < len(output):
        m = _ESCAPE.match(output, i)
        if m:
            count, op = m.groups()
            if op == "D":
                lines[-1] = lines[-1][: len(lines[-1]) - int(count)]
            i = m.end()
            continue
        ch = output[i]
        if ch == "\n":
            lines.append("")
        else:
            lines[-1] += ch
        i += 1
    return lines


def _render(fragments, width):
    out = io.StringIO()
    renderer = StreamRenderer(out)
    for fragment in fragments:
        renderer.feed(fragment, width=width)
    return out.getvalue(), renderer


def test_long_word_hard_breaks():
    output, renderer = _render(["supercalifragilisticexpialidocious"], width=20)
    assert "\x1b[" not in output
    assert screen_lines(output) == ["supercalifragil", "isticexpialidoc", "ious"]
    assert renderer.line_length == 4


def test_soft_break_moves_whole_word():
    output, _ = _render(["hello world this is wrapping"], width=20)
    assert "\x1b[3D\x1b[K\n" in output
    assert screen_lines(output) == ["hello world ", "this is ", "wrapping"]


def test_soft_break_across_fragments():
    output, _ = _render(["hello wor", "ld this", " is wrap", "ping"], width=20)
    assert screen_lines(output) == ["hello world ", "this is ", "wrapping"]


def test_narrow_terminal_disables_wrapping():
    text = "a fairly long line of text"
    output, renderer = _render([text], width=9)
    assert output == text
    assert renderer.word_buffer == ""


def test_newline_resets_line():
    _, renderer = _render(["abc def\n"], width=40)
    assert renderer.line_length == 0
    assert renderer.word_buffer == ""


def test_wide_characters_not_buffered():
    _, renderer = _render(["中文"], width=40)
    assert renderer.line_length == 4
    assert renderer.word_buffer == ""


def test_space_clears_word_buffer():
    _, renderer = _render(["abc de"], width=40)
    assert renderer.word_buffer == "de"
    assert renderer.line_length == 6


def test_lines_never_exceed_limit():
    rng = random.Random(7)
    alphabet = "abcdefghij     \n"
    for width in (10, 12, 20, 33, 80):
        for _ in range(25):
            text = "".join(rng.choice(alphabet) for _ in range(rng.randint(1, 300)))
            cuts = sorted(rng.sample(range(len(text) + 1), k=min(3, len(text) + 1)))
            fragments = [text[a:b] for a, b in zip([0] + cuts, cuts + [len(text)])]
            output, _ = _render(fragments, width=width)
            lines = screen_lines(output)
            assert all(len(line) <= width - 5 for line in lines), (width, text)
            assert "".join(lines).replace(" ", "") == text.replace(" ", "").replace("\n", "")


def test_end_turn_and_abort():
    out = io.StringIO()
    renderer = StreamRenderer(out)
    renderer.feed("partial", width=40)
    renderer.abort()
    assert out.getvalue() == "partial\n"
    assert renderer.line_length == 0

    renderer.feed("done", width=40)
    renderer.end_turn()
    assert out.getvalue().endswith("done\n\n")
    renderer.abort()
    assert out.getvalue().endswith("done\n\n")
