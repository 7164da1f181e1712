from .add_options import AddTorrentOptions, NormalizedAddTorrentOptions
from .client import DelugeClient, UploadResponse
from .errors import (
    AddTorrentError,
    AuthenticationError,
    DelugeError,
    NotFoundError,
    RpcError,
    UploadError,
)
from .normalize import AllClientData, Label, NormalizedTorrent, TorrentState, normalize_torrent
from .session import SessionCookie, SessionState
from .settings import DelugeSettings, LoggingSettings, load_settings
from .torrent_input import MagnetLink, TorrentBase64, TorrentBytes, TorrentFile, UploadedTorrent

__all__ = [
    "AddTorrentError",
    "AddTorrentOptions",
    "AllClientData",
    "AuthenticationError",
    "DelugeClient",
    "DelugeError",
    "DelugeSettings",
    "Label",
    "LoggingSettings",
    "MagnetLink",
    "NormalizedAddTorrentOptions",
    "NormalizedTorrent",
    "NotFoundError",
    "RpcError",
    "SessionCookie",
    "SessionState",
    "TorrentBase64",
    "TorrentBytes",
    "TorrentFile",
    "TorrentState",
    "UploadError",
    "UploadResponse",
    "UploadedTorrent",
    "load_settings",
    "normalize_torrent",
]
