"""Tests for piping a stream into the player.

Real short-lived local processes stand in for ssh and the player.
"""

import subprocess
import sys

import pytest

from netfrix import player
from netfrix.errors import RemoteExecError
from netfrix.player import (
    PlaybackOutcome, PlaybackSession, PlaybackState, PlayerSpec, play,
)
from netfrix.transport import Connection

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX sh")

CONN = Connection("wander", "nas")


@pytest.fixture
def fake_stream(monkeypatch):
    """Replace the ssh stream with a local ``sh -c`` script."""
    started = []

    def install(script):
        def _open(connection, remote_path, stderr=subprocess.DEVNULL):
            proc = subprocess.Popen(
                ["sh", "-c", script],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=stderr,
                bufsize=0,
            )
            started.append(proc)
            return proc
        monkeypatch.setattr(player, "open_read_stream", _open)
        return started

    return install


def _sink(extra=""):
    return PlayerSpec(("sh", "-c", f"cat >/dev/null{extra}"))


class TestPlay:
    def test_full_stream_completes(self, fake_stream):
        fake_stream("printf 'frames'")
        result = play(CONN, "/mnt/videos/a.mp4", _sink())
        assert result.outcome is PlaybackOutcome.COMPLETED
        assert result.player_returncode == 0

    def test_stream_failure_is_failed(self, fake_stream):
        fake_stream("printf 'partial'; echo 'cat: /mnt/videos/a.mp4: No such file' >&2; exit 1")
        result = play(CONN, "/mnt/videos/a.mp4", _sink("; sleep 0.5"))
        assert result.outcome is PlaybackOutcome.FAILED
        assert result.stream_returncode == 1
        assert "No such file" in result.detail

    def test_player_quit_stops_stream(self, fake_stream):
        started = fake_stream("sleep 30")
        result = play(CONN, "/mnt/videos/a.mp4", PlayerSpec(("sh", "-c", "exit 3")))
        assert result.outcome is PlaybackOutcome.COMPLETED
        assert result.player_returncode == 3
        assert started[0].poll() is not None

    def test_interrupt_stops_both_processes(self, fake_stream, monkeypatch):
        started = fake_stream("sleep 30")
        launched = []

        def _interrupted_wait(proc):
            launched.append(proc)
            raise KeyboardInterrupt

        monkeypatch.setattr(player, "_wait", _interrupted_wait)
        result = play(CONN, "/mnt/videos/a.mp4", PlayerSpec(("sleep", "30")))
        assert result.outcome is PlaybackOutcome.INTERRUPTED
        assert started[0].poll() is not None
        assert launched[0].poll() is not None

    def test_system_exit_stops_both_processes(self, fake_stream, monkeypatch):
        started = fake_stream("sleep 30")
        launched = []

        def _terminated_wait(proc):
            launched.append(proc)
            raise SystemExit(143)

        monkeypatch.setattr(player, "_wait", _terminated_wait)
        with pytest.raises(SystemExit):
            play(CONN, "/mnt/videos/a.mp4", PlayerSpec(("sleep", "30")))
        assert started[0].poll() is not None
        assert launched[0].poll() is not None

    def test_large_stderr_does_not_stall_stream(self, fake_stream):
        # Far more than a pipe buffer of warnings before the data.
        fake_stream("yes warning | head -c 200000 >&2; printf 'frames'")
        result = play(CONN, "/mnt/videos/a.mp4", _sink())
        assert result.outcome is PlaybackOutcome.COMPLETED

    def test_missing_player_fails_and_stops_stream(self, fake_stream):
        started = fake_stream("sleep 30")
        result = play(CONN, "/mnt/videos/a.mp4", PlayerSpec(("netfrix-no-such-player",)))
        assert result.outcome is PlaybackOutcome.FAILED
        assert "netfrix-no-such-player" in result.detail
        assert started[0].poll() is not None

    def test_stream_open_failure(self, monkeypatch):
        def _broken(connection, remote_path, stderr=subprocess.DEVNULL):
            raise RemoteExecError("Cannot run ssh")
        monkeypatch.setattr(player, "open_read_stream", _broken)
        result = play(CONN, "/mnt/videos/a.mp4", _sink())
        assert result.outcome is PlaybackOutcome.FAILED
        assert result.stream_returncode is None


class TestPlaybackSession:
    def test_state_moves_through_streaming(self, fake_stream):
        fake_stream("printf 'x'")
        session = PlaybackSession(CONN, "/a.mp4", _sink())
        assert session.state is PlaybackState.IDLE
        session.run()
        assert session.state is PlaybackState.COMPLETED

    def test_cannot_run_twice(self, fake_stream):
        fake_stream("printf 'x'")
        session = PlaybackSession(CONN, "/a.mp4", _sink())
        session.run()
        with pytest.raises(RuntimeError):
            session.run()

    def test_cannot_skip_streaming(self):
        session = PlaybackSession(CONN, "/a.mp4", _sink())
        with pytest.raises(RuntimeError):
            session._move(PlaybackState.COMPLETED)
