"""Pipe a remote video stream into a local player process.

A playback wires two processes together: the ssh ``cat`` of the remote
file (producer) and the local player reading stdin (consumer). The OS
pipe between them paces the transfer.

There is no reliable way to tell "user quit the player" apart from
"the stream broke" by looking at the player alone, so the outcome is
decided from the remote side:

* player exits while the stream is still running -> the stream is
  terminated and the playback is COMPLETED (the user quit);
* stream exited with status 0, or was killed by SIGPIPE -> COMPLETED;
* stream exited non-zero -> FAILED (network loss, file vanished);
* KeyboardInterrupt -> both processes are stopped, INTERRUPTED;
* any other exception leaving playback also stops both processes.

The stream's stderr goes to an anonymous temp file so a chatty ssh
cannot fill a pipe and stall the transfer.

If ssh turns the broken pipe into its own non-zero exit status before we
poll it, a user quit still reads as FAILED. That case is reported with
the stream's stderr attached so the user can judge it.
"""

import enum
import os
import signal
import subprocess
import tempfile
from dataclasses import dataclass

from netfrix.errors import RemoteExecError
from netfrix.transport import open_read_stream

_TERMINATE_GRACE = 3  # seconds before escalating terminate() to kill()
_STDERR_TAIL = 4096


class PlaybackOutcome(enum.Enum):
    COMPLETED = "completed"
    INTERRUPTED = "interrupted"
    FAILED = "failed"


class PlaybackState(enum.Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETED = "completed"
    INTERRUPTED = "interrupted"
    FAILED = "failed"


_TRANSITIONS = {
    PlaybackState.IDLE: {PlaybackState.STREAMING},
    PlaybackState.STREAMING: {
        PlaybackState.COMPLETED, PlaybackState.INTERRUPTED, PlaybackState.FAILED,
    },
}


@dataclass(frozen=True)
class PlayerSpec:
    """Command line of a player that reads media from stdin."""

    command: tuple

    @property
    def executable(self):
        return self.command[0]


@dataclass(frozen=True)
class PlaybackResult:
    outcome: PlaybackOutcome
    player_returncode: int | None = None
    stream_returncode: int | None = None
    detail: str = ""


class PlaybackSession:
    """One remote path paired with one live byte transport."""

    def __init__(self, connection, remote_path, player_spec):
        self.connection = connection
        self.remote_path = remote_path
        self.player_spec = player_spec
        self.state = PlaybackState.IDLE
        self.stream = None
        self.player = None

    def _move(self, state):
        allowed = _TRANSITIONS.get(self.state, set())
        if state not in allowed:
            raise RuntimeError(f"Invalid playback transition {self.state.value} -> {state.value}")
        self.state = state

    def _finish(self, outcome, detail=""):
        self._move(PlaybackState(outcome.value))
        return PlaybackResult(
            outcome=outcome,
            player_returncode=self.player.returncode if self.player else None,
            stream_returncode=self.stream.returncode if self.stream else None,
            detail=detail,
        )

    def run(self):
        """Stream the file into the player and block until playback ends."""
        if self.state is not PlaybackState.IDLE:
            raise RuntimeError("A playback session can only be run once")

        self._move(PlaybackState.STREAMING)
        with tempfile.TemporaryFile() as errlog:
            try:
                return self._stream(errlog)
            finally:
                # Whatever ends the playback (SystemExit from a signal
                # included), neither process may outlive it.
                for proc in (self.player, self.stream):
                    if proc is not None:
                        _stop(proc)
                if self.stream is not None:
                    _close_pipes(self.stream)

    def _stream(self, errlog):
        try:
            self.stream = open_read_stream(self.connection, self.remote_path, stderr=errlog)
        except RemoteExecError as e:
            return self._finish(PlaybackOutcome.FAILED, str(e))

        try:
            self.player = subprocess.Popen(list(self.player_spec.command), stdin=self.stream.stdout)
        except OSError as e:
            _stop(self.stream)
            return self._finish(
                PlaybackOutcome.FAILED,
                f"Cannot start player '{self.player_spec.executable}': {e}",
            )
        # Only the player holds the read end now, so the stream sees
        # SIGPIPE once the player goes away.
        self.stream.stdout.close()

        try:
            _wait(self.player)
        except KeyboardInterrupt:
            _stop(self.player)
            _stop(self.stream)
            return self._finish(PlaybackOutcome.INTERRUPTED, "Playback interrupted.")

        if self.stream.poll() is None:
            _stop(self.stream)
            return self._finish(PlaybackOutcome.COMPLETED, "Player closed.")

        if self.stream.returncode == -signal.SIGPIPE:
            return self._finish(PlaybackOutcome.COMPLETED, "Player closed.")
        if self.stream.returncode != 0:
            detail = f"Stream ended with status {self.stream.returncode}"
            stderr = _read_tail(errlog)
            if stderr:
                detail += f": {stderr}"
            return self._finish(PlaybackOutcome.FAILED, detail)
        return self._finish(PlaybackOutcome.COMPLETED, "End of video.")


def _wait(proc):
    return proc.wait()


def _stop(proc):
    """Terminate ``proc`` if it is still running, killing it after a grace period."""
    if proc.poll() is not None:
        return
    proc.terminate()
    try:
        proc.wait(timeout=_TERMINATE_GRACE)
    except subprocess.TimeoutExpired:
        proc.kill()
        proc.wait()


def _read_tail(f):
    """Last few KB of the stream's stderr log, decoded for display."""
    f.seek(0, os.SEEK_END)
    f.seek(max(0, f.tell() - _STDERR_TAIL))
    return f.read().decode("utf-8", "replace").strip()


def _close_pipes(proc):
    for pipe in (proc.stdout, proc.stderr):
        if pipe is not None and not pipe.closed:
            pipe.close()


def play(connection, remote_path, player_spec):
    """Stream ``remote_path`` into the player. Returns a PlaybackResult."""
    return PlaybackSession(connection, remote_path, player_spec).run()
