"""
Tests for resource quantity parsing
"""

import pytest

from nodegroup_autoscaler.core.units import parse_cpu, parse_memory


class TestParseCpu:

    @pytest.mark.parametrize("quantity,cores", [
        ("250m", 0.25),
        ("500000000n", 0.5),
        ("2", 2.0),
        ("1500u", 0.0015),
        ("0.5", 0.5),
    ])
    def test_suffixes(self, quantity, cores):
        assert parse_cpu(quantity) == pytest.approx(cores)

    @pytest.mark.parametrize("quantity", [None, "", "   ", "lots", "12x"])
    def test_malformed_is_zero(self, quantity):
        assert parse_cpu(quantity) == 0.0


class TestParseMemory:

    @pytest.mark.parametrize("quantity,size", [
        ("1Gi", 1073741824),
        ("2G", 2000000000),
        ("128974848", 128974848),
        ("512Ki", 512 * 1024),
        ("3Mi", 3 * 1024 ** 2),
        ("1Ti", 1024 ** 4),
        ("64k", 64000),
        ("5M", 5000000),
        ("1T", 1000 ** 4),
    ])
    def test_suffixes(self, quantity, size):
        assert parse_memory(quantity) == size

    def test_binary_suffix_not_read_as_decimal(self):
        assert parse_memory("1Mi") == 1048576
        assert parse_memory("1M") == 1000000

    def test_cpu_milli_is_not_memory_mega(self):
        assert parse_cpu("100m") == pytest.approx(0.1)
        assert parse_memory("100M") == 100_000_000

    @pytest.mark.parametrize("quantity", [None, "", "Gi", "abcMi"])
    def test_malformed_is_zero(self, quantity):
        assert parse_memory(quantity) == 0.0
