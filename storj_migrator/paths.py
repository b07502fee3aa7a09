"""Destination key layout.

Every chunk of a source object lands at::

    {bucket}_{timestamp}/{directory}{stem}/{index}.{extension}

so chunks of one object share a prefix and sort back together by index.
"""

import posixpath
from dataclasses import dataclass
from datetime import datetime

TIMESTAMP_FORMAT = '%Y-%m-%d_%H_%M_%S'


def session_timestamp(now=None) -> str:
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def split_extension(file_name: str) -> tuple[str, str]:
    """Split ``file_name`` into ``(stem, extension)``.

    With more than two dot separated parts the extension is the last two
    parts (``a.tar.gz`` -> ``a``, ``tar.gz``) and the remaining parts are
    rejoined with dots to form the stem (``a.b.c.d`` -> ``a.b``, ``c.d``).
    Otherwise the extension is the last part and the stem the first; a name
    without dots is its own stem and extension.
    """
    parts = file_name.split('.')
    if len(parts) > 2:
        return '.'.join(parts[:-2]), '.'.join(parts[-2:])
    return parts[0], parts[-1]


@dataclass(frozen=True)
class DestinationKey:
    session_root: str
    directory: str
    stem: str
    index: int
    extension: str

    @property
    def prefix(self) -> str:
        return f"{self.session_root}/{self.directory}{self.stem}"

    def __str__(self):
        return f"{self.prefix}/{self.index}.{self.extension}"


def encode(source_bucket: str, source_key: str, timestamp: str, chunk_index: int) -> DestinationKey:
    directory = posixpath.dirname(source_key)
    directory = '' if directory in ('', '.') else directory + '/'
    stem, extension = split_extension(posixpath.basename(source_key.rstrip('/')))
    return DestinationKey(
        session_root=f"{source_bucket}_{timestamp}",
        directory=directory,
        stem=stem,
        index=chunk_index,
        extension=extension,
    )
