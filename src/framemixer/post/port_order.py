"""
Port Order Encoding
===================
Packs the frame's config id and motor-to-port assignment into one or two
32-bit words which the firmware stores as float parameters.

Word 0: config id in bits 0-7, then 4 bits per motor for motors 1-6.
Word 1: 4 bits per motor for motors 7-14 (only for frames with > 6 motors).

The words are not converted to floats numerically: their bit pattern is
reinterpreted as an IEEE-754 single, and printed with enough digits for the
firmware to recover the exact bits.
"""
from __future__ import annotations

from typing import Sequence

import numpy as np

WORD_MASK = 0xFFFFFFFF
CONFIG_ID_BITS = 8
PORT_BITS = 4
PORTS_IN_FIRST_WORD = 6
PORTS_IN_SECOND_WORD = 8


def encode_port_order(config_id: int, ports: Sequence[int]) -> list[int]:
    """
    Pack the config id and the port numbers into 32-bit words.

    Values are OR'd in unmasked and the word truncated to 32 bits, so
    out-of-range ports spill into neighbouring fields exactly as the
    firmware tables expect.

    Args:
        config_id: Frame config id (0..255).
        ports: Port number of each motor, in motor order.

    Returns:
        One word, or two when there are more than six motors.
    """
    ports = [int(p) for p in ports]

    word = int(config_id)
    for i, port in enumerate(ports[:PORTS_IN_FIRST_WORD]):
        word |= port << (CONFIG_ID_BITS + PORT_BITS * i)
    words = [word & WORD_MASK]

    if len(ports) > PORTS_IN_FIRST_WORD:
        word = 0
        extra = ports[PORTS_IN_FIRST_WORD:PORTS_IN_FIRST_WORD + PORTS_IN_SECOND_WORD]
        for i, port in enumerate(extra):
            word |= port << (PORT_BITS * i)
        words.append(word & WORD_MASK)

    return words


def decode_port_order(words: Sequence[int], n: int) -> tuple[int, list[int]]:
    """
    Recover the config id and the first `n` port numbers from packed words.
    """
    if n > PORTS_IN_FIRST_WORD + PORTS_IN_SECOND_WORD:
        raise ValueError(f"at most {PORTS_IN_FIRST_WORD + PORTS_IN_SECOND_WORD} ports can be encoded, got {n}")
    if n > PORTS_IN_FIRST_WORD and len(words) < 2:
        raise ValueError(f"{n} ports need two words, got {len(words)}")

    field_mask = (1 << PORT_BITS) - 1
    config_id = words[0] & ((1 << CONFIG_ID_BITS) - 1)

    ports = []
    for i in range(n):
        if i < PORTS_IN_FIRST_WORD:
            ports.append((words[0] >> (CONFIG_ID_BITS + PORT_BITS * i)) & field_mask)
        else:
            ports.append((words[1] >> (PORT_BITS * (i - PORTS_IN_FIRST_WORD))) & field_mask)
    return config_id, ports


def word_to_float(word: int) -> float:
    """Reinterpret the bits of a 32-bit word as a float32."""
    return float(np.array([word & WORD_MASK], dtype=np.uint32).view(np.float32)[0])


def float_to_word(value: float) -> int:
    """Bits of a float32 as an unsigned 32-bit word."""
    return int(np.array([value], dtype=np.float32).view(np.uint32)[0])


def format_word(word: int) -> str:
    """Round-trip decimal text of the reinterpreted float (C's %.20g)."""
    return f"{word_to_float(word):.20g}"
