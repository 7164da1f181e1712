"""Explicit shapes of the torrents accepted by the add/upload workflow.

Loose ``str``/``bytes`` values are still accepted at the client boundary and
mapped onto these types by :func:`resolve_torrent_input` (add workflow) and
:func:`resolve_upload_input` (upload, never a server temp path).
"""

import base64
import binascii
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .magnet import is_magnet_link

# deluge-web stores uploaded torrents under the system temp dir,
# ex: /tmp/delugeweb-DfEsgR/tmpD3rujY.torrent
UPLOADED_TORRENT_PREFIX = "/tmp/"


@dataclass(frozen=True)
class TorrentFile:
    path: Path


@dataclass(frozen=True)
class TorrentBytes:
    data: bytes


@dataclass(frozen=True)
class TorrentBase64:
    data: str


@dataclass(frozen=True)
class UploadedTorrent:
    temp_path: str


@dataclass(frozen=True)
class MagnetLink:
    uri: str


TorrentInput = Union[TorrentFile, TorrentBytes, TorrentBase64, UploadedTorrent, MagnetLink]
TorrentInputLike = Union[TorrentInput, str, bytes, bytearray, Path]

_TAGGED_TYPES = (TorrentFile, TorrentBytes, TorrentBase64, UploadedTorrent, MagnetLink)


def _resolve_local_input(value: TorrentInputLike) -> TorrentInput | None:
    if isinstance(value, _TAGGED_TYPES):
        return value
    if isinstance(value, (bytes, bytearray)):
        return TorrentBytes(data=bytes(value))
    if isinstance(value, Path):
        return TorrentFile(path=value)
    if not isinstance(value, str):
        raise TypeError(f"unsupported torrent input type: {type(value).__name__}")
    if os.path.exists(value):
        return TorrentFile(path=Path(value))
    return None


def resolve_torrent_input(value: TorrentInputLike) -> TorrentInput:
    """Input of the add workflow, strings may also name an uploaded temp path."""
    if isinstance(value, str) and is_magnet_link(value):
        return MagnetLink(uri=value)
    torrent = _resolve_local_input(value)
    if torrent is not None:
        return torrent
    if value.startswith(UPLOADED_TORRENT_PREFIX):
        return UploadedTorrent(temp_path=value)
    return TorrentBase64(data=value)


def resolve_upload_input(value: TorrentInputLike) -> TorrentInput:
    """Input of an upload, strings are an existing file or base64 content."""
    if isinstance(value, str) and is_magnet_link(value):
        return MagnetLink(uri=value)
    return _resolve_local_input(value) or TorrentBase64(data=value)


def read_torrent_bytes(torrent: TorrentInput) -> bytes:
    if isinstance(torrent, TorrentBytes):
        return torrent.data
    if isinstance(torrent, TorrentFile):
        return torrent.path.read_bytes()
    if isinstance(torrent, TorrentBase64):
        # line wrapped base64 (encodebytes, .b64 files) is accepted
        try:
            return base64.b64decode(torrent.data)
        except binascii.Error as e:
            raise ValueError("torrent is neither an existing file nor valid base64") from e
    raise ValueError(f"'{type(torrent).__name__}' cannot be uploaded")
