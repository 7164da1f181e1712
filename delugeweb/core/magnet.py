import base64
import binascii
from typing import TypeAlias
from urllib import parse

InfoHashType: TypeAlias = str

MAGNET_SCHEME = "magnet:"
_URN_BTIH_PREFIX = "urn:btih:"


def is_magnet_link(value: str) -> bool:
    return value.lower().startswith(MAGNET_SCHEME)


def _parse_magnet_link(magnet_link: str) -> list[tuple[str, str]]:
    return parse.parse_qsl(parse.urlsplit(magnet_link).query)


def _normalize_info_hash(raw_hash: str) -> InfoHashType:
    if len(raw_hash) == 40:
        int(raw_hash, 16)
        return raw_hash.lower()
    if len(raw_hash) == 32:
        return binascii.hexlify(base64.b32decode(raw_hash.upper())).decode()
    raise ValueError(f"unsupported info hash: {raw_hash}")


def extract_magnet_link_info_hash(magnet_link: str) -> InfoHashType:
    """Returns the lower-case hex v1 info hash of a magnet link.

    Base32 encoded hashes are converted to hex, which is how deluge
    identifies torrents.
    """
    if not is_magnet_link(magnet_link):
        raise ValueError(f"not a magnet link: {magnet_link}")
    for key, value in _parse_magnet_link(magnet_link):
        if key == "xt" and value.lower().startswith(_URN_BTIH_PREFIX):
            try:
                return _normalize_info_hash(value[len(_URN_BTIH_PREFIX) :])
            except (binascii.Error, ValueError) as e:
                raise ValueError(f"invalid info hash in magnet link: {magnet_link}") from e
    raise ValueError(f"magnet link has no btih info hash: {magnet_link}")
