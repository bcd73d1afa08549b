"""
Tests for the scaling policy
"""

import itertools

import pytest

from nodegroup_autoscaler.core.scaling import decide, describe_decision


class TestScenarios:

    def test_scale_up_on_high_cpu(self, config):
        assert decide(3, 85.0, 40.0, config) == 4

    def test_scale_up_on_high_memory_only(self, config):
        assert decide(3, 50.0, 81.0, config) == 4

    def test_scale_down_when_both_low(self, config):
        assert decide(3, 10.0, 15.0, config) == 2

    def test_no_scale_down_when_only_cpu_low(self, config):
        assert decide(3, 10.0, 50.0, config) == 3

    def test_no_scale_down_at_minimum(self, config):
        assert decide(1, 5.0, 5.0, config) == 1

    def test_no_scale_up_at_maximum(self, config):
        assert decide(10, 99.0, 99.0, config) == 10

    @pytest.mark.parametrize("cpu,memory", [(80, 50), (50, 80), (30, 10), (10, 30)])
    def test_threshold_values_hold(self, config, cpu, memory):
        assert decide(3, cpu, memory, config) == 3

    def test_scale_up_wins_when_both_conditions_hold(self, config):
        # model_copy skips validation, allowing low > high
        skewed = config.model_copy(update={"cpu_threshold_high": 20, "cpu_threshold_low": 30})
        assert decide(3, 25.0, 10.0, skewed) == 4


class TestProperties:

    def test_never_leaves_bounds(self, config):
        usages = [0, 5, 29.9, 30, 50, 80, 80.1, 100]
        for current in range(config.min_nodes, config.max_nodes + 1):
            for cpu, memory in itertools.product(usages, usages):
                desired = decide(current, cpu, memory, config)
                assert config.min_nodes <= desired <= config.max_nodes
                assert abs(desired - current) <= 1

    def test_hold_between_thresholds(self, config):
        usages = [0, 10, 30, 45, 60, 80]
        for cpu, memory in itertools.product(usages, usages):
            both_low = cpu < config.cpu_threshold_low and memory < config.memory_threshold_low
            if both_low:
                continue
            for current in range(config.min_nodes, config.max_nodes + 1):
                assert decide(current, cpu, memory, config) == current


def test_describe_decision():
    assert describe_decision(3, 4, 85, 40).startswith("Scaling UP: 3 -> 4")
    assert describe_decision(3, 2, 10, 15).startswith("Scaling DOWN: 3 -> 2")
    assert describe_decision(3, 3, 50, 50).startswith("No scaling needed")
