from __future__ import annotations

from typing import Dict, Optional, Tuple

from errors import CorruptPayloadError, MissingCodewordError


def pack_bits(data: bytes, code_map: Dict[Optional[int], str]) -> Tuple[bytes, str]:
    """
    Converts Huffman codes into packed bytes, most significant bit first.
    Returns (packed_bytes, tail) where tail holds the literal bits of the final
    group (1 to 8 of them). The final payload byte only reserves the slot for
    that group; decoding reads the tail instead.
    """
    out = bytearray()
    acc = 0
    acc_bits = 0

    for b in data:
        bits = code_map.get(b)
        if not bits:
            raise MissingCodewordError(b)
        for ch in bits:
            acc = (acc << 1) | (1 if ch == '1' else 0)
            acc_bits += 1
            if acc_bits == 8:
                out.append(acc & 0xFF)
                acc = 0
                acc_bits = 0

    if acc_bits != 0:
        tail = format(acc, f"0{acc_bits}b")
        out.append(0) # placeholder, never read back
    elif out:
        tail = format(out[-1], "08b")
    else:
        tail = ""

    return bytes(out), tail


def unpack_bits(packed: bytes, tail: str) -> str:
    """
    Rebuild the logical bit string: every byte but the last as 8 digits,
    then the tail in place of the last byte.
    """
    if set(tail) - {"0", "1"}:
        raise CorruptPayloadError(f"Tail {tail!r} is not a bit string")
    if not packed:
        return tail
    if not 1 <= len(tail) <= 8:
        raise CorruptPayloadError(f"Tail must hold 1 to 8 bits, got {len(tail)}")

    parts = [format(byte, "08b") for byte in packed[:-1]]
    parts.append(tail)
    return "".join(parts)
