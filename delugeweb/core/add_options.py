from typing import Any

from pydantic import BaseModel, ConfigDict


class AddTorrentOptions(BaseModel):
    """Options sent along ``web.add_torrents`` and ``core.add_torrent_magnet``.

    Paths left to ``None`` are not sent, the daemon then uses its configured
    download location.
    """

    model_config = ConfigDict(extra="allow")

    file_priorities: list[int] = []
    add_paused: bool = False
    compact_allocation: bool = False
    max_connections: int = -1
    max_download_speed: float = -1
    max_upload_slots: int = -1
    max_upload_speed: float = -1
    prioritize_first_last_pieces: bool = False
    pre_allocate_storage: bool = False
    move_completed: bool = False
    seed_mode: bool = False
    sequential_download: bool = False
    super_seeding: bool = False
    download_location: str | None = None
    move_completed_path: str | None = None

    def to_params(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

    @staticmethod
    def merged(overrides: "AddTorrentOptions | dict[str, Any] | None" = None) -> "AddTorrentOptions":
        if overrides is None:
            return AddTorrentOptions()
        if isinstance(overrides, AddTorrentOptions):
            overrides = overrides.model_dump(exclude_unset=True)
        return AddTorrentOptions(**overrides)


class NormalizedAddTorrentOptions(BaseModel):
    start_paused: bool = False
    label: str | None = None
