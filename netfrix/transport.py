"""SSH helpers: connection probe, remote commands, and remote read streams."""

import shlex
import subprocess
from dataclasses import dataclass

from netfrix.errors import RemoteConnectionError, RemoteExecError


@dataclass(frozen=True)
class Connection:
    """A verified SSH endpoint. Every remote command reuses it."""

    user: str
    host: str
    port: int | None = None
    connect_timeout: int = 5

    @property
    def target(self):
        if self.user:
            return f"{self.user}@{self.host}"
        return self.host


def ssh_command(connection, command):
    """Build the argv for running ``command`` on the remote host."""
    # BatchMode keeps ssh from prompting on the tty for passwords or
    # host keys, which would fight with the menu for the terminal.
    cmd = [
        "ssh",
        "-o", "BatchMode=yes",
        "-o", f"ConnectTimeout={connection.connect_timeout}",
    ]
    if connection.port:
        cmd.extend(["-p", str(connection.port)])
    cmd.extend([connection.target, command])
    return cmd


def connect(user, host, port=None, connect_timeout=5):
    """Open and verify the SSH channel by running a no-op remote command."""
    connection = Connection(user=user, host=host, port=port, connect_timeout=connect_timeout)
    try:
        result = subprocess.run(
            ssh_command(connection, "true"),
            capture_output=True, text=True, errors="replace",
            timeout=connect_timeout + 5,
            stdin=subprocess.DEVNULL,
        )
    except subprocess.TimeoutExpired:
        raise RemoteConnectionError(
            f"Timed out connecting to {connection.target} after {connect_timeout}s"
        )
    except OSError as e:
        raise RemoteConnectionError(f"Cannot run ssh: {e}")
    if result.returncode != 0:
        detail = result.stderr.strip() or f"ssh exited with status {result.returncode}"
        raise RemoteConnectionError(
            f"Failed to connect to {connection.target}: {detail}"
        )
    return connection


def run(connection, command):
    """Run ``command`` remotely and return its non-empty output lines."""
    try:
        result = subprocess.run(
            ssh_command(connection, command),
            capture_output=True, text=True,
            encoding="utf-8", errors="surrogateescape",
            stdin=subprocess.DEVNULL,
        )
    except OSError as e:
        raise RemoteExecError(f"Cannot run ssh: {e}")
    if result.returncode != 0:
        raise RemoteExecError(
            f"Remote command failed with status {result.returncode}",
            returncode=result.returncode, stderr=result.stderr,
        )
    return [line for line in result.stdout.splitlines() if line.strip()]


def open_read_stream(connection, remote_path, stderr=subprocess.DEVNULL):
    """Start streaming ``remote_path`` and return the running ssh process.

    The file's bytes are readable from ``proc.stdout`` as they arrive.
    ``stderr`` should be a file rather than a pipe, since nothing reads
    it until playback ends. The caller owns the process and must drain
    or terminate it.
    """
    command = f"cat -- {shlex.quote(remote_path)}"
    try:
        return subprocess.Popen(
            ssh_command(connection, command),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=stderr,
            bufsize=0,
        )
    except OSError as e:
        raise RemoteExecError(f"Cannot run ssh: {e}")
