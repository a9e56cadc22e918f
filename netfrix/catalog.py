"""Remote video catalog: enumeration over SSH and the temporary on-disk copy."""

import os
import shlex
import tempfile

from netfrix import transport

DATABASE_NAME = "video_database"


class Catalog:
    """Ordered, immutable list of absolute remote video paths."""

    def __init__(self, paths=()):
        self._paths = tuple(paths)

    def __len__(self):
        return len(self._paths)

    def __iter__(self):
        return iter(self._paths)

    def __getitem__(self, index):
        return self._paths[index]

    def __eq__(self, other):
        if not isinstance(other, Catalog):
            return NotImplemented
        return self._paths == other._paths

    def __repr__(self):
        return f"Catalog({len(self._paths)} videos)"

    @property
    def paths(self):
        return self._paths

    def names(self):
        return [os.path.basename(p) for p in self._paths]


def display_name(path):
    """Base name safe to print, even when the remote name is not valid UTF-8."""
    name = os.path.basename(path)
    return name.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def find_command(root_path, extensions):
    """Remote ``find`` invocation listing regular files with the given extensions."""
    name_tests = " -o ".join(
        f"-name {shlex.quote('*.' + ext)}" for ext in extensions
    )
    return f"find {shlex.quote(root_path)} -type f \\( {name_tests} \\)"


def build_catalog(connection, root_path, extensions):
    """Enumerate videos under ``root_path`` on the remote host.

    Zero matches is an empty catalog, not an error. Any remote failure
    raises RemoteExecError and nothing is returned.
    """
    lines = transport.run(connection, find_command(root_path, extensions))
    return Catalog(line.rstrip("\r") for line in lines)


class CatalogStore:
    """Keeps the current catalog as a one-path-per-line file in a private directory."""

    def __init__(self, directory):
        self.directory = directory
        self.path = os.path.join(directory, DATABASE_NAME)

    def save(self, catalog):
        # Write beside the target and rename so readers never see half a file.
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{DATABASE_NAME}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape") as f:
                for path in catalog:
                    f.write(path + "\n")
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def load(self):
        if not os.path.exists(self.path):
            return Catalog()
        with open(self.path, "r", encoding="utf-8", errors="surrogateescape") as f:
            return Catalog(line.rstrip("\n") for line in f if line.strip())
