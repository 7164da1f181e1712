import threading
from collections.abc import Iterable
from datetime import timedelta
from typing import Any

import orjson
from pydantic import BaseModel, SecretStr

from .add_options import AddTorrentOptions, NormalizedAddTorrentOptions
from .errors import AddTorrentError, AuthenticationError, NotFoundError, UploadError
from .logging import get_logger
from .magnet import extract_magnet_link_info_hash
from .normalize import (
    AllClientData,
    Label,
    NormalizedTorrent,
    decode_disconnect_result,
    normalize_torrent,
)
from .rpc import MAX_MESSAGE_ID, RpcRequest, RpcResponse, decode_response
from .session import SessionCookie, SessionState
from .settings import DelugeSettings
from .torrent_input import (
    MagnetLink,
    TorrentInputLike,
    UploadedTorrent,
    read_torrent_bytes,
    resolve_torrent_input,
    resolve_upload_input,
)
from .transport import HttpTransport, TransportBase

logger = get_logger()

SESSION_EXPIRY_MARGIN = timedelta(milliseconds=5000)
UPLOAD_FIELD_NAME = "file"
UPLOAD_FILE_NAME = "temp.torrent"

LIST_TORRENTS_FIELDS = [
    "distributed_copies",
    "download_payload_rate",
    "eta",
    "is_auto_managed",
    "max_download_speed",
    "max_upload_speed",
    "name",
    "num_peers",
    "num_seeds",
    "progress",
    "queue",
    "ratio",
    "save_path",
    "seeds_peers_ratio",
    "state",
    "time_added",
    "total_done",
    "total_peers",
    "total_seeds",
    "total_uploaded",
    "total_wanted",
    "tracker_host",
    "upload_payload_rate",
    # requested even without the label plugin, the daemon ignores unknown keys
    "label",
]

TORRENT_STATUS_FIELDS = [
    "total_done",
    "total_payload_download",
    "total_uploaded",
    "total_payload_upload",
    "next_announce",
    "tracker_status",
    "tracker",
    "comment",
    "num_pieces",
    "piece_length",
    "is_auto_managed",
    "active_time",
    "seeding_time",
    "seed_rank",
    "queue",
    "name",
    "total_wanted",
    "state",
    "progress",
    "num_seeds",
    "total_seeds",
    "num_peers",
    "total_peers",
    "download_payload_rate",
    "upload_payload_rate",
    "eta",
    "ratio",
    "distributed_copies",
    "time_added",
    "tracker_host",
    "save_path",
    "total_size",
    "num_files",
    "max_download_speed",
    "max_upload_speed",
    "seeds_peers_ratio",
    "label",
]


def _unique_fields(fields: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(fields))


class UploadResponse(BaseModel):
    success: bool
    files: list[str] = []


class DelugeClient:
    def __init__(
        self,
        settings: DelugeSettings | None = None,
        transport: TransportBase | None = None,
        **overrides: Any,
    ):
        settings = settings or DelugeSettings()
        if overrides:
            settings = DelugeSettings.model_validate({**settings.model_dump(), **overrides})
        self._settings = settings
        self._owns_transport = transport is None
        self._transport = transport or HttpTransport(settings)
        self._session = SessionState()
        self._lock = threading.RLock()

    def __enter__(self) -> "DelugeClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Releases the pooled connections of the transport built by this client.

        Injected transports are left open, they belong to the caller.
        """
        if self._owns_transport and isinstance(self._transport, HttpTransport):
            self._transport.close()

    @property
    def settings(self) -> DelugeSettings:
        return self._settings

    @property
    def session(self) -> SessionState:
        return self._session

    def reset_session(self) -> None:
        with self._lock:
            self._session.reset()

    def export_state(self) -> dict[str, Any]:
        with self._lock:
            return self._session.export()

    def import_state(self, snapshot: dict[str, Any] | None) -> None:
        with self._lock:
            self._session = SessionState.restore(snapshot)

    # --- Request pipeline ---

    def _auth_headers(self) -> dict[str, str]:
        cookie = self._session.cookie
        return {"Cookie": cookie.header_value()} if cookie else {}

    def request(
        self,
        method: str,
        params: list[Any] | None = None,
        needs_auth: bool = True,
        auto_connect: bool = True,
    ) -> RpcResponse:
        with self._lock:
            if self._session.message_id >= MAX_MESSAGE_ID:
                self._session.message_id = 0
            if needs_auth:
                self._validate_auth()
            if needs_auth and auto_connect and not self.connected():
                self.connect()
            rpc_request = RpcRequest(method=method, params=list(params or []), id=self._session.next_message_id())
            logger.debug(f"sending rpc request method={method} id={rpc_request.id}")
            response = self._transport.post_json(self._settings.rpc_url, rpc_request.encode(), self._auth_headers())
            return decode_response(
                response.body,
                status=response.status,
                headers=response.headers,
                set_cookie=response.set_cookie,
                method=method,
            )

    def _call(self, method: str, params: list[Any] | None = None, **kwargs: Any) -> Any:
        return self.request(method, params, **kwargs).result

    # --- Auth orchestration ---

    def check_session(self) -> bool:
        with self._lock:
            cookie = self._session.cookie
            if cookie is None:
                self._session.reset()
                return False
            ttl = cookie.ttl()
            if ttl is not None:
                if ttl < SESSION_EXPIRY_MARGIN:
                    logger.info("session cookie about to expire, resetting session")
                    self._session.reset()
                    return False
                return True
            return self._check_session_server_side()

    def _check_session_server_side(self) -> bool:
        try:
            if self._call("auth.check_session", needs_auth=False, auto_connect=False):
                return True
        except Exception as e:
            logger.warning(f"server side session check failed: {e}")
        self._session.reset()
        return False

    def login(self) -> bool:
        with self._lock:
            self._session.reset()
            response = self.request(
                "auth.login",
                [self._settings.password.get_secret_value()],
                needs_auth=False,
            )
            if not response.result or not response.set_cookie:
                raise AuthenticationError("Auth failed, incorrect password")
            self._session.cookie = SessionCookie.parse(response.set_cookie[0])
            logger.info(f"logged in to {self._settings.base_url}")
            return True

    def logout(self) -> bool:
        with self._lock:
            result = self._call("auth.delete_session")
            self._session.reset()
            return bool(result)

    def _validate_auth(self) -> None:
        valid_auth = self.check_session() or self.login()
        if not valid_auth:
            raise AuthenticationError("Invalid auth")

    def change_password(self, password: str) -> bool:
        with self._lock:
            response = self.request(
                "auth.change_password",
                [self._settings.password.get_secret_value(), password],
            )
            if not response.result or not response.set_cookie:
                raise AuthenticationError("Old password incorrect")
            self._settings = self._settings.model_copy(update={"password": SecretStr(password)})
            self._session.cookie = SessionCookie.parse(response.set_cookie[0])
            return True

    # --- Daemon connection ---

    def get_hosts(self) -> list[list[Any]]:
        return self._call("web.get_hosts", [], auto_connect=False) or []

    def get_host_status(self, host: str) -> list[Any]:
        return self._call("web.get_host_status", [host], auto_connect=False)

    def connect(self, host: str | None = None, host_index: int = 0) -> list[str]:
        """Connects deluge-web to a daemon and returns the available methods.

        When no host id is given, the host at ``host_index`` of
        :meth:`get_hosts` is used.
        """
        if not host:
            hosts = self.get_hosts()
            if 0 <= host_index < len(hosts) and hosts[host_index]:
                host = hosts[host_index][0]
        if not host:
            raise NotFoundError("No hosts found")
        logger.info(f"connecting to daemon host {host}")
        return self._call("web.connect", [host], auto_connect=False)

    def connected(self) -> bool:
        return bool(self._call("web.connected", [], auto_connect=False))

    def disconnect(self) -> bool:
        """Disconnects deluge-web from its daemon, for every client sharing it."""
        return decode_disconnect_result(self._call("web.disconnect", [], auto_connect=False))

    # --- Daemon information ---

    def get_version(self) -> str:
        return self._call("daemon.get_version")

    def list_methods(self, auth: bool = True) -> list[str]:
        return self._call("system.listMethods", [], needs_auth=auth)

    def get_torrent_info(self, temp_path: str) -> dict[str, Any]:
        """Torrent metadata of an uploaded, not yet added torrent."""
        return self._call("web.get_torrent_info", [temp_path])

    # --- Adding torrents ---

    def upload(self, torrent: TorrentInputLike) -> UploadResponse:
        with self._lock:
            content = read_torrent_bytes(resolve_upload_input(torrent))
            self._validate_auth()
            if not self.connected():
                self.connect()
            response = self._transport.post_multipart(
                self._settings.upload_url,
                UPLOAD_FIELD_NAME,
                UPLOAD_FILE_NAME,
                content,
                self._auth_headers(),
            )
        # deluge-web answers json as a text body
        body = orjson.loads(response.body) if isinstance(response.body, (str, bytes)) else response.body
        upload = UploadResponse.model_validate(body)
        if not upload.success or not upload.files:
            raise UploadError("Failed to upload")
        logger.debug(f"uploaded torrent to {upload.files[0]}")
        return upload

    def download_from_url(self, url: str, cookies: str = "") -> str:
        """Lets the daemon fetch a torrent file, returns its temp path."""
        temp_path = self._call("web.download_torrent_from_url", [url, cookies])
        if not temp_path:
            raise AddTorrentError("Failed to download torrent")
        return temp_path

    def _resolve_temp_path(self, torrent: TorrentInputLike) -> str:
        torrent = resolve_torrent_input(torrent)
        if isinstance(torrent, MagnetLink):
            raise ValueError("magnet links must be added with 'add_torrent_magnet'")
        if isinstance(torrent, UploadedTorrent):
            return torrent.temp_path
        return self.upload(torrent).files[0]

    def _add_uploaded_torrent(
        self, temp_path: str, options: AddTorrentOptions | dict[str, Any] | None
    ) -> Any:
        merged_options = AddTorrentOptions.merged(options)
        result = self._call("web.add_torrents", [[{"path": temp_path, "options": merged_options.to_params()}]])
        # 1.x answers a boolean, 2.x a list of [success, torrent_id]
        if not result or (isinstance(result, list) and isinstance(result[0], list) and result[0][0] is False):
            raise AddTorrentError("Failed to add torrent")
        return result

    def add_torrent(
        self,
        torrent: TorrentInputLike,
        options: AddTorrentOptions | dict[str, Any] | None = None,
    ) -> Any:
        return self._add_uploaded_torrent(self._resolve_temp_path(torrent), options)

    def add_torrent_magnet(
        self, magnet: str, options: AddTorrentOptions | dict[str, Any] | None = None
    ) -> Any:
        merged_options = AddTorrentOptions.merged(options)
        return self._call("core.add_torrent_magnet", [magnet, merged_options.to_params()])

    def _added_torrent_hash(self, result: Any, temp_path: str) -> str:
        if isinstance(result, list) and result and isinstance(result[0], list) and len(result[0]) > 1:
            return result[0][1]
        return self.get_torrent_info(temp_path)["info_hash"]

    def normalized_add_torrent(
        self,
        torrent: TorrentInputLike,
        options: NormalizedAddTorrentOptions | None = None,
    ) -> NormalizedTorrent:
        options = options or NormalizedAddTorrentOptions()
        torrent_options: dict[str, Any] = {}
        if options.start_paused:
            torrent_options["add_paused"] = True

        torrent = resolve_torrent_input(torrent)
        if isinstance(torrent, MagnetLink):
            torrent_hash = extract_magnet_link_info_hash(torrent.uri)
            self.add_torrent_magnet(torrent.uri, torrent_options)
        else:
            temp_path = self._resolve_temp_path(torrent)
            result = self._add_uploaded_torrent(temp_path, torrent_options)
            torrent_hash = self._added_torrent_hash(result, temp_path)

        if options.label:
            # the label can take a few seconds to show up in status queries
            self.set_torrent_label(torrent_hash, options.label)

        return self.get_torrent(torrent_hash)

    # --- Torrents ---

    def remove_torrent(self, torrent_id: str, remove_data: bool = True) -> bool:
        return self._call("core.remove_torrent", [torrent_id, remove_data])

    def list_torrents(
        self, additional_fields: Iterable[str] = (), filters: dict[str, str] | None = None
    ) -> dict[str, Any]:
        fields = _unique_fields([*LIST_TORRENTS_FIELDS, *additional_fields])
        return self._call("web.update_ui", [fields, filters or {}])

    def get_all_data(self) -> AllClientData:
        torrent_list = self.list_torrents()
        torrents = [
            normalize_torrent(torrent_id, torrent)
            for torrent_id, torrent in (torrent_list.get("torrents") or {}).items()
        ]
        labels = [
            Label(id=label, name=label, count=count)
            for label, count in (torrent_list.get("filters") or {}).get("label") or []
        ]
        return AllClientData(torrents=torrents, labels=labels)

    def get_torrent(self, torrent_id: str) -> NormalizedTorrent:
        return normalize_torrent(torrent_id, self.get_torrent_status(torrent_id))

    def get_torrent_status(self, torrent_id: str, additional_fields: Iterable[str] = ()) -> dict[str, Any]:
        fields = _unique_fields([*TORRENT_STATUS_FIELDS, *additional_fields])
        status = self._call("web.get_torrent_status", [torrent_id, fields])
        if not status:
            raise NotFoundError("Torrent not found")
        return status

    def get_torrent_files(self, torrent_id: str) -> dict[str, Any]:
        return self._call("web.get_torrent_files", [torrent_id])

    def pause_torrent(self, torrent_id: str) -> Any:
        return self._call("core.pause_torrent", [[torrent_id]])

    def resume_torrent(self, torrent_id: str) -> Any:
        return self._call("core.resume_torrent", [[torrent_id]])

    def set_torrent_options(self, torrent_id: str, options: dict[str, Any] | None = None) -> Any:
        return self._call("core.set_torrent_options", [[torrent_id], options or {}])

    def set_torrent_trackers(self, torrent_id: str, trackers: list[dict[str, Any]] | None = None) -> Any:
        """``trackers`` items look like ``{"tier": 0, "url": "udp://..."}``."""
        return self._call("core.set_torrent_trackers", [[torrent_id], trackers or []])

    def update_torrent_trackers(self, torrent_id: str) -> Any:
        return self._call("core.force_reannounce", [[torrent_id]])

    def verify_torrent(self, torrent_id: str) -> Any:
        return self._call("core.force_recheck", [[torrent_id]])

    def queue_top(self, torrent_id: str) -> Any:
        return self._call("core.queue_top", [[torrent_id]])

    def queue_bottom(self, torrent_id: str) -> Any:
        return self._call("core.queue_bottom", [[torrent_id]])

    def queue_up(self, torrent_id: str) -> Any:
        return self._call("core.queue_up", [[torrent_id]])

    def queue_down(self, torrent_id: str) -> Any:
        return self._call("core.queue_down", [[torrent_id]])

    # --- Labels ---

    def set_torrent_label(self, torrent_id: str, label: str) -> Any:
        return self._call("label.set_torrent", [torrent_id, label])

    def add_label(self, label: str) -> Any:
        return self._call("label.add", [label])

    def remove_label(self, label: str) -> Any:
        return self._call("label.remove", [label])

    def get_labels(self) -> list[str]:
        return self._call("label.get_labels", [])

    # --- Configuration and plugins ---

    def get_config(self) -> dict[str, Any]:
        return self._call("core.get_config", [])

    def set_config(self, config: dict[str, Any]) -> Any:
        return self._call("core.set_config", [config])

    def get_plugins(self) -> dict[str, list[str]]:
        return self._call("web.get_plugins", [])

    def get_plugin_info(self, plugins: list[str]) -> dict[str, Any]:
        return self._call("web.get_plugin_info", list(plugins))

    def enable_plugin(self, plugins: list[str]) -> Any:
        return self._call("core.enable_plugin", list(plugins))

    def disable_plugin(self, plugins: list[str]) -> Any:
        return self._call("core.disable_plugin", list(plugins))
