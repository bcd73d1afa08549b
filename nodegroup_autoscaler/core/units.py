#!/usr/bin/env python3
"""
Parsing of Kubernetes resource quantity strings into plain units
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)

CPU_SUFFIXES = (
    ('n', 1e-9),
    ('u', 1e-6),
    ('m', 1e-3),
)

# Binary suffixes are tried before decimal ones
MEMORY_SUFFIXES = (
    ('Ki', 1024),
    ('Mi', 1024 ** 2),
    ('Gi', 1024 ** 3),
    ('Ti', 1024 ** 4),
    ('Pi', 1024 ** 5),
    ('Ei', 1024 ** 6),
    ('k', 1000),
    ('K', 1000),
    ('M', 1000 ** 2),
    ('G', 1000 ** 3),
    ('T', 1000 ** 4),
    ('P', 1000 ** 5),
    ('E', 1000 ** 6),
)


def _parse(quantity: Optional[str], suffixes, kind: str) -> float:
    if quantity is None:
        return 0.0
    value = str(quantity).strip()
    if not value:
        return 0.0

    multiplier = 1
    for suffix, factor in suffixes:
        if value.endswith(suffix):
            value = value[:-len(suffix)]
            multiplier = factor
            break

    try:
        return float(value) * multiplier
    except ValueError:
        logger.warning(f"Unparseable {kind} quantity {quantity!r}, treating as 0")
        return 0.0


def parse_cpu(quantity: Optional[str]) -> float:
    """Parse a CPU quantity ('250m', '500000000n', '2') into cores"""
    return _parse(quantity, CPU_SUFFIXES, "cpu")


def parse_memory(quantity: Optional[str]) -> float:
    """Parse a memory quantity ('1Gi', '2G', '128974848') into bytes"""
    return _parse(quantity, MEMORY_SUFFIXES, "memory")
