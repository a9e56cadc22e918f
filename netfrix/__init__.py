"""NetFRIX: browse a remote video share over SSH and stream it to a local player."""

PROGRAM_NAME = "NetFRIX"
__version__ = "0.4"
