"""Wire encodings for shares and commitments.

Two forms: JSON-friendly dicts (integers as decimal strings, so nothing
is lost to float conversion by other JSON consumers) and a fixed-width
big-endian byte layout for plain shares. Commitment order is preserved
exactly; decoding malformed input raises InvalidParameters.
"""

import json
import struct

from threshare.errors import InvalidParameters
from threshare.feldman import Commitment, VerifiableShare
from threshare.shamir import Share

_HEADER = struct.Struct('>HH')  # (x width, y width) in bytes


def _int_field(d: dict, key: str) -> int:
    try:
        raw = d[key]
    except (KeyError, TypeError) as exc:
        raise InvalidParameters(f"Bad or missing field {key!r}") from exc
    # floats and bools would decode lossily
    if isinstance(raw, bool) or not isinstance(raw, (int, str)):
        raise InvalidParameters(f"Field {key!r} must be an integer or decimal string")
    try:
        value = int(raw)
    except ValueError as exc:
        raise InvalidParameters(f"Bad field {key!r}") from exc
    if value < 0:
        raise InvalidParameters(f"Field {key!r} must be non-negative")
    return value


def share_to_dict(share) -> dict:
    return {"x": str(share[0]), "y": str(share[1])}


def share_from_dict(d: dict) -> Share:
    return Share(_int_field(d, "x"), _int_field(d, "y"))


def share_to_bytes(share, width: int) -> bytes:
    """Encode (x, y) with y padded to `width` bytes (the modulus byte length)."""
    x, y = share[0], share[1]
    if x < 0 or y < 0:
        raise InvalidParameters("Share coordinates must be non-negative")
    if not 0 < width <= 0xFFFF:
        raise InvalidParameters(f"Width must be in [1, 65535], got {width}")
    x_raw = x.to_bytes(max(1, (x.bit_length() + 7) // 8), 'big')
    try:
        y_raw = y.to_bytes(width, 'big')
    except OverflowError as exc:
        raise InvalidParameters(f"Share value does not fit in {width} bytes") from exc
    return _HEADER.pack(len(x_raw), width) + x_raw + y_raw


def share_from_bytes(data: bytes) -> Share:
    if len(data) < _HEADER.size:
        raise InvalidParameters("Share encoding too short")
    x_len, y_len = _HEADER.unpack_from(data)
    if len(data) != _HEADER.size + x_len + y_len:
        raise InvalidParameters("Share encoding length mismatch")
    body = data[_HEADER.size:]
    return Share(int.from_bytes(body[:x_len], 'big'), int.from_bytes(body[x_len:], 'big'))


def commitment_to_list(commitment: Commitment) -> list:
    return [str(c) for c in commitment]


def commitment_from_list(values: list) -> Commitment:
    if not isinstance(values, list) or not values:
        raise InvalidParameters("Commitment must be a non-empty list")
    return Commitment(_int_field({"c": v}, "c") for v in values)


def verifiable_share_to_dict(share: VerifiableShare) -> dict:
    return {
        "x": str(share.x),
        "y": str(share.y),
        "commitment": commitment_to_list(share.commitment),
    }


def verifiable_share_from_dict(d: dict) -> VerifiableShare:
    if not isinstance(d, dict):
        raise InvalidParameters("Verifiable share must be a mapping")
    return VerifiableShare(
        _int_field(d, "x"),
        _int_field(d, "y"),
        commitment_from_list(d.get("commitment")),
    )


def dumps(share) -> str:
    """Serialize a Share or VerifiableShare to JSON."""
    if isinstance(share, VerifiableShare):
        return json.dumps(verifiable_share_to_dict(share))
    return json.dumps(share_to_dict(share))


def loads(text: str):
    """Parse JSON produced by dumps(); returns the matching record type."""
    try:
        d = json.loads(text)
    except ValueError as exc:
        raise InvalidParameters(f"Share is not valid JSON: {exc}") from exc
    if not isinstance(d, dict):
        raise InvalidParameters("Share JSON must be an object")
    if "commitment" in d:
        return verifiable_share_from_dict(d)
    return share_from_dict(d)
