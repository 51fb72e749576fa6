# MISP Client - Download Sinks
#
# Where downloaded attachments end up. A sink opens a named
# destination and hands back a writable binary handle; the client
# streams the response into it and closes it.

from typing import BinaryIO, Protocol

from .exceptions import SinkOpenError


class SampleSink(Protocol):
    def open(self, filename: str) -> BinaryIO: ...


class FileSink:
    """Write downloads to the local file system.

    Existing files are truncated. Writes are not atomic: a copy that
    fails half-way leaves a partial file behind.
    """

    def open(self, filename: str) -> BinaryIO:
        try:
            return open(filename, "wb")
        except OSError as exc:
            raise SinkOpenError(filename, exc) from exc
