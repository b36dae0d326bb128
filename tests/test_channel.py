from rich.style import Style

from taptester.channel import CaptureChannel
from taptester.highlight import AnsiHighlighter, PlainHighlighter, strip_ansi


class TestDeclare:
    def test_appends_newline_to_each_line(self) -> None:
        channel = CaptureChannel("STDOUT")
        channel.declare("ok 1", "ok 2")
        assert channel.expected == "ok 1\nok 2\n"

    def test_multiple_args_match_embedded_newlines_and_separate_calls(self) -> None:
        together = CaptureChannel("STDOUT")
        together.declare("a", "b")

        embedded = CaptureChannel("STDOUT")
        embedded.declare("a\nb")

        separate = CaptureChannel("STDOUT")
        separate.declare("a")
        separate.declare("b")

        assert together.expected == embedded.expected == separate.expected == "a\nb\n"

    def test_keeps_existing_terminator(self) -> None:
        channel = CaptureChannel("STDOUT")
        channel.declare("ok 1\n", "ok 2")
        assert channel.expected == "ok 1\nok 2\n"

    def test_zero_lines_is_noop(self) -> None:
        channel = CaptureChannel("STDOUT")
        channel.declare()
        assert channel.expected == ""

    def test_does_not_touch_actual(self) -> None:
        channel = CaptureChannel("STDOUT")
        channel.declare("ok 1")
        assert channel.actual == ""


class TestWrite:
    def test_appends_verbatim(self) -> None:
        channel = CaptureChannel("STDERR")
        channel.write("# one")
        channel.write("\n# two\n")
        assert channel.actual == "# one\n# two\n"
        assert channel.expected == ""

    def test_returns_length(self) -> None:
        channel = CaptureChannel("STDERR")
        assert channel.write("abc") == 3

    def test_behaves_like_a_text_stream(self) -> None:
        channel = CaptureChannel("STDOUT")
        print("ok 1", file=channel)
        channel.flush()
        assert channel.actual == "ok 1\n"
        assert channel.isatty() is False


class TestCheck:
    def test_untouched_channel_passes(self) -> None:
        assert CaptureChannel("STDOUT").check() is True

    def test_written_output_matching_declaration(self) -> None:
        channel = CaptureChannel("STDOUT")
        lines = ["ok 1 - first", "not ok 2", "# note"]
        channel.declare(*lines)
        channel.write("\n".join(lines) + "\n")
        assert channel.check() is True

    def test_mismatch(self) -> None:
        channel = CaptureChannel("STDOUT")
        channel.declare("ok 1")
        channel.write("not ok 1\n")
        assert channel.check() is False

    def test_missing_terminator_is_a_mismatch(self) -> None:
        channel = CaptureChannel("STDOUT")
        channel.declare("ok 1")
        channel.write("ok 1")
        assert channel.check() is False


class TestComplaint:
    def test_plain_format(self) -> None:
        channel = CaptureChannel("STDOUT")
        channel.declare("ok 1")
        channel.write("not ok 1\n")
        assert (
            channel.complaint()
            == "STDOUT is 'not ok 1\n' not 'ok 1\n' as expected"
        )

    def test_plain_highlighter_leaves_text_alone(self) -> None:
        channel = CaptureChannel("STDERR")
        channel.declare("# a")
        channel.write("# b\n")
        assert channel.complaint(PlainHighlighter()) == channel.complaint()

    def test_highlighted_complaint_strips_to_plain(self) -> None:
        channel = CaptureChannel("STDOUT")
        channel.declare("ok 1 - abcYdef")
        channel.write("ok 1 - abcXdef\n")
        highlighter = AnsiHighlighter(
            prefix_style=Style.parse("green"), divergence_style=Style.parse("red")
        )

        colored = channel.complaint(highlighter)

        assert "\x1b[" in colored
        assert "\x1b[31mXdef\n\x1b[0m" in colored
        assert "\x1b[31mYdef\n\x1b[0m" in colored
        assert strip_ansi(colored) == channel.complaint()


class TestReset:
    def test_reset_twice_leaves_channel_empty(self) -> None:
        channel = CaptureChannel("STDOUT")
        channel.declare("ok 1")
        channel.write("ok 2\n")

        channel.reset()
        assert (channel.actual, channel.expected) == ("", "")
        channel.reset()
        assert (channel.actual, channel.expected) == ("", "")
        assert channel.label == "STDOUT"

    def test_fresh_after_reset(self) -> None:
        channel = CaptureChannel("STDOUT")
        channel.declare("stale")
        channel.reset()

        channel.declare("ok 1")
        channel.write("ok 1\n")

        assert channel.check() is True
        assert channel.expected == "ok 1\n"
