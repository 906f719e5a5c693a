from __future__ import annotations

from typing import Dict, Tuple

from loguru import logger

import huffman as huff
from bitpack import pack_bits, unpack_bits
from errors import CorruptPayloadError, MissingTailError


def encode(data: bytes) -> Tuple[bytes, huff.CodeTable]:
    """
    Compress data into (payload, code_table). The table carries the tail bits
    under huff.TAIL_KEY and must travel with the payload.
    """
    if not data:
        return b"", {}

    ft = huff.freq_table(data)
    tree = huff.build_huffman_tree(ft)
    code_map = huff.ensure_nonempty_code_map(huff.generate_huffman_codes(tree))

    packed, tail = pack_bits(data, code_map)
    code_map[huff.TAIL_KEY] = tail
    logger.debug("Encoded {} bytes into {} payload bytes ({} tail bits, {} symbols)",
                 len(data), len(packed), len(tail), len(ft))
    return packed, code_map


def greedy_decode(bitstring: str, reverse_map: Dict[str, int]) -> bytes: # bitstring: '0'/'1' characters, reverse_map: codeword -> symbol
    decoded = bytearray()
    longest = max((len(code) for code in reverse_map), default=0)
    acc = ""

    for bit in bitstring:
        acc += bit
        symbol = reverse_map.get(acc)
        if symbol is not None:
            decoded.append(symbol)
            acc = ""
        elif len(acc) >= longest:
            raise CorruptPayloadError(
                f"Bits {acc!r} match no codeword after {len(decoded)} decoded bytes",
                dangling_bits=len(acc))

    if acc:
        raise CorruptPayloadError(
            f"{len(acc)} trailing bits do not form a codeword", dangling_bits=len(acc))
    return bytes(decoded)


def decode(packed: bytes, code_table: huff.CodeTable) -> bytes:
    if huff.TAIL_KEY not in code_table:
        if packed:
            raise MissingTailError("Code table has no tail entry; it does not belong to this payload")
        return b""

    reverse_map = huff.reverse_code_map(code_table)
    bits = unpack_bits(packed, code_table[huff.TAIL_KEY])
    decoded = greedy_decode(bits, reverse_map)
    logger.debug("Decoded {} payload bytes into {} bytes", len(packed), len(decoded))
    return decoded
