from leaklab import Variant
from leaklab.common.metrics.stats_aggregator import StatsAggregator

MB = 1024 * 1024


class TestStatsAggregator:

    def test_empty_sample(self, registry):
        stats = StatsAggregator(registry).sample()
        assert stats.total_allocated == 0
        assert stats.current_usage == 0
        assert stats.leaked_memory == 0
        assert stats.component_count == 0
        assert not stats.leak_warning

    def test_sample_is_never_stale(self, registry):
        aggregator = StatsAggregator(registry)
        instance_id = registry.create(Variant.LEAKY).value
        before = aggregator.sample()
        registry.destroy(instance_id)
        after = aggregator.sample()

        assert before.component_count == 1
        assert before.leaked_memory == 0
        assert after.component_count == 0
        assert after.leaked_memory == MB
        assert after.sampled_at >= before.sampled_at

    def test_leak_warning_uses_threshold(self, registry):
        aggregator = StatsAggregator(registry, leak_warning_threshold=MB)
        ids = [registry.create(Variant.LEAKY).value for _ in range(2)]
        registry.destroy(ids[0])
        assert not aggregator.sample().leak_warning
        registry.destroy(ids[1])
        assert aggregator.sample().leak_warning

    def test_invariants(self, registry):
        aggregator = StatsAggregator(registry)
        ids = [registry.create(v).value for v in (Variant.LEAKY, Variant.PROPER) * 3]
        for instance_id in ids[:4]:
            registry.destroy(instance_id)
        stats = aggregator.sample()
        released = registry.simulator.released_total()
        assert stats.leaked_memory <= stats.total_allocated
        assert stats.current_usage == stats.total_allocated - released

    def test_breakdown(self, registry):
        aggregator = StatsAggregator(registry)
        leaky = [registry.create(Variant.LEAKY).value for _ in range(3)]
        proper = [registry.create(Variant.PROPER).value for _ in range(2)]
        registry.destroy(leaky[0])
        registry.destroy(leaky[1])
        registry.destroy(proper[0])

        breakdown = aggregator.breakdown()
        assert breakdown[Variant.LEAKY].active == 1
        assert breakdown[Variant.LEAKY].destroyed == 2
        assert breakdown[Variant.LEAKY].leaked_blocks == 2
        assert breakdown[Variant.LEAKY].leaked_memory == 2 * MB
        assert breakdown[Variant.PROPER].active == 1
        assert breakdown[Variant.PROPER].leaked_blocks == 0
