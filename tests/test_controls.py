from unittest.mock import MagicMock

import pytest

import matrix_cam
from matrix_cam import CaptureError, ControlPoller, RenderState, run_session, translate_key
from conftest import FakeSource, solid_frame


@pytest.mark.parametrize(
    "key, events",
    [
        ("q", ["quit"]),
        ("\x1b", ["quit"]),
        ("s", ["start"]),
        ("S", ["start"]),
        ("x", ["stop"]),
        (" ", ["stop"]),
        ("z", []),
        ("", []),
    ],
)
def test_translate_key(key, events):
    assert translate_key(key) == events


def scripted(*batches):
    queue = list(batches)

    def poll():
        return queue.pop(0) if queue else ["quit"]

    return poll


@pytest.mark.asyncio
async def test_session_autostarts_and_stops_on_quit(make_renderer, fake_loop):
    source = FakeSource(solid_frame(64, 48))
    renderer = make_renderer(source)

    status = await run_session(renderer, scripted([], ["quit"]))

    assert status == 0
    assert source.released
    assert renderer.state is RenderState.IDLE
    assert fake_loop.pending() == []


@pytest.mark.asyncio
async def test_session_start_and_stop_keys(make_renderer, fake_loop):
    first = FakeSource(solid_frame(64, 48))
    second = FakeSource(solid_frame(64, 48))
    renderer = make_renderer(first, second)
    seen = []

    def poll():
        seen.append(renderer.state)
        return batches.pop(0) if batches else ["quit"]

    batches = [["stop"], ["start"], []]
    await run_session(renderer, poll, autostart=False)

    assert seen[0] is RenderState.IDLE
    assert seen[2] is RenderState.STARTING
    assert first.released
    assert second.reads == 0 and not second.released
    assert renderer.state is RenderState.IDLE


@pytest.mark.asyncio
async def test_start_key_is_ignored_while_renderer_is_busy(make_renderer, fake_loop):
    source = FakeSource(solid_frame(64, 48))
    renderer = make_renderer(source)

    await run_session(renderer, scripted(["start"], ["start"]))

    assert source.released
    assert renderer.state is RenderState.IDLE


@pytest.mark.asyncio
async def test_capture_failure_is_reported_and_session_continues(make_renderer, capsys):
    source = FakeSource(solid_frame(64, 48))
    renderer = make_renderer(CaptureError("Permission denied by user"), source)

    await run_session(renderer, scripted([], ["start"], []))

    err = capsys.readouterr().err
    assert "Camera access failed" in err
    assert "Error: Permission denied by user" in err
    assert source.released
    assert renderer.state is RenderState.IDLE


@pytest.mark.asyncio
async def test_start_renderer_reports_success(make_renderer):
    renderer = make_renderer(FakeSource(solid_frame(64, 48)))
    assert await matrix_cam.start_renderer(renderer) is True
    renderer.stop()


def test_viewer_arguments():
    args = matrix_cam.parse_args(["--device", "2", "--fps", "15", "--max-display-width", "800"])
    assert args.device == 2
    assert args.fps == 15.0
    assert args.max_display_width == 800
    assert args.font_path is None
    assert args.no_autostart is False
    assert args.log_level == "INFO"


@pytest.mark.asyncio
async def test_start_key_recovers_after_tick_failure(make_renderer, fake_loop):
    class UnpluggedSource(FakeSource):
        def read(self):
            frame = super().read()
            if self.reads > 1:
                raise OSError("device unplugged")
            return frame

    first = UnpluggedSource(solid_frame(64, 48))
    second = FakeSource(solid_frame(64, 48))
    renderer = make_renderer(first, second)
    batches = [[], [], ["start"], [], []]
    states = []

    def poll():
        if fake_loop.pending():
            fake_loop.run_next()
        states.append(renderer.state)
        return batches.pop(0) if batches else ["quit"]

    await run_session(renderer, poll)

    assert states[1] is RenderState.IDLE
    assert first.released
    assert states[3] is RenderState.RUNNING
    assert second.reads > 0
    assert second.released


class FakeTerminal:
    def __init__(self, keys="", tty=True):
        self.buffer = list(keys)
        self.tty = tty

    def isatty(self):
        return self.tty

    def fileno(self):
        return 7

    def read(self, size):
        return self.buffer.pop(0) if self.buffer else ""


@pytest.fixture
def posix_console(monkeypatch):
    termios = MagicMock()
    termios.tcgetattr.return_value = ["saved"]
    tty = MagicMock()
    monkeypatch.setattr(matrix_cam, "msvcrt", None)
    monkeypatch.setattr(matrix_cam, "termios", termios)
    monkeypatch.setattr(matrix_cam, "tty", tty)
    monkeypatch.setattr(
        matrix_cam.select,
        "select",
        lambda rlist, wlist, xlist, timeout: ([s for s in rlist if s.buffer], [], []),
    )
    return termios, tty


def test_poller_without_terminal_reports_nothing(posix_console):
    termios, tty = posix_console
    controls = ControlPoller(FakeTerminal("sq", tty=False))

    assert controls.mode == "none"
    assert controls.poll() == []
    controls.close()
    tty.setcbreak.assert_not_called()
    termios.tcsetattr.assert_not_called()


def test_poller_reads_posix_terminal_in_cbreak_mode(posix_console):
    termios, tty = posix_console
    terminal = FakeTerminal("sz xq")

    with ControlPoller(terminal) as controls:
        assert controls.mode == "posix"
        tty.setcbreak.assert_called_once_with(7)
        assert controls.poll() == ["start", "stop", "stop", "quit"]
        assert controls.poll() == []

    termios.tcsetattr.assert_called_once_with(7, termios.TCSADRAIN, ["saved"])
    controls.close()
    assert termios.tcsetattr.call_count == 1


def test_poller_drains_windows_console(monkeypatch):
    keys = [b"\xe0", b"H", b"s", b"\x00", b";", b"X", b"\x1b"]
    console = MagicMock()
    console.kbhit.side_effect = lambda: bool(keys)
    console.getch.side_effect = lambda: keys.pop(0)
    monkeypatch.setattr(matrix_cam, "msvcrt", console)

    controls = ControlPoller(FakeTerminal())

    assert controls.mode == "windows"
    assert controls.poll() == ["start", "stop", "quit"]
    assert controls.poll() == []
    controls.close()
