import enum
from datetime import datetime
from typing import Any

import pytz
from pydantic import BaseModel, ConfigDict

DISCONNECT_SUCCESS_MESSAGE = "closed cleanly"


class TorrentState(str, enum.Enum):
    queued = "queued"
    checking = "checking"
    downloading = "downloading"
    seeding = "seeding"
    paused = "paused"
    error = "error"
    unknown = "unknown"

    @staticmethod
    def from_raw(raw_state: Any) -> "TorrentState":
        if not isinstance(raw_state, str):
            return TorrentState.unknown
        try:
            return TorrentState(raw_state.lower())
        except ValueError:
            return TorrentState.unknown


class NormalizedTorrent(BaseModel):
    """Client-agnostic view of a deluge torrent.

    ``progress`` is a fraction between 0 and 1, deluge reports a percentage.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    state: TorrentState
    state_message: str
    is_completed: bool
    progress: float
    ratio: float
    date_added: str | None
    date_completed: str | None = None
    label: str | None = None
    save_path: str | None = None
    upload_speed: float
    download_speed: float
    eta: float
    queue_position: int
    connected_peers: int
    connected_seeds: int
    total_peers: int
    total_seeds: int
    total_selected: int
    total_size: int | None = None
    total_uploaded: int
    total_downloaded: int
    raw: dict[str, Any]


class Label(BaseModel):
    id: str
    name: str
    count: int


class AllClientData(BaseModel):
    torrents: list[NormalizedTorrent]
    labels: list[Label]


def epoch_to_iso(timestamp: float | None) -> str | None:
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=pytz.utc).isoformat()


def normalize_torrent(torrent_id: str, torrent: dict[str, Any]) -> NormalizedTorrent:
    raw_state = torrent.get("state") or ""
    raw_progress = torrent.get("progress") or 0
    return NormalizedTorrent(
        id=torrent_id,
        name=torrent.get("name") or "",
        state=TorrentState.from_raw(raw_state),
        state_message=str(raw_state),
        is_completed=raw_progress >= 100,
        progress=raw_progress / 100,
        ratio=torrent.get("ratio") or 0,
        date_added=epoch_to_iso(torrent.get("time_added")),
        label=torrent.get("label") or None,
        save_path=torrent.get("save_path"),
        upload_speed=torrent.get("upload_payload_rate") or 0,
        download_speed=torrent.get("download_payload_rate") or 0,
        eta=torrent.get("eta") or 0,
        queue_position=(torrent.get("queue") or 0) + 1,
        connected_peers=torrent.get("num_peers") or 0,
        connected_seeds=torrent.get("num_seeds") or 0,
        total_peers=torrent.get("total_peers") or 0,
        total_seeds=torrent.get("total_seeds") or 0,
        total_selected=torrent.get("total_wanted") or 0,
        total_size=torrent.get("total_size"),
        total_uploaded=torrent.get("total_uploaded") or 0,
        total_downloaded=torrent.get("total_done") or 0,
        raw=dict(torrent),
    )


def decode_disconnect_result(result: bool | str | None) -> bool:
    # deluge 1.x answers a boolean, 2.x "Connection was closed cleanly."
    if isinstance(result, bool):
        return result
    if isinstance(result, str):
        return DISCONNECT_SUCCESS_MESSAGE in result
    return False
