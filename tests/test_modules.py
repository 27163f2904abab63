"""Parameter modules: inspect, optimise and apply per tunable kind."""

import copy

import pytest

from notetune.definitions import ParameterSet
from notetune.errors import ApplyError, DefinitionError
from notetune.system import Host, HostConfig
from notetune.tuning import MODULES, get_module, pagecache_limit


@pytest.fixture
def live(fake_system):
    return Host(HostConfig(root=fake_system, machine="x86_64"))


def read(root, *parts):
    return (root.joinpath(*parts)).read_text().strip()


def test_registered_kinds():
    assert list(MODULES) == ["sysctl", "pagecache", "scheduler", "nr_requests"]
    with pytest.raises(KeyError):
        get_module("hugepages")


def test_rules_selection():
    params = ParameterSet({"block": {"IO_SCHEDULER": "bfq", "NRREQ": "32"}, "sysctl": {"vm.swappiness": "10"}})
    assert get_module("scheduler").rules(params) == {"IO_SCHEDULER": "bfq"}
    assert get_module("nr_requests").rules(params) == {"NRREQ": "32"}
    assert get_module("sysctl").rules(params) == {"vm.swappiness": "10"}
    assert get_module("pagecache").rules(params) == {}


class TestPagecacheLimit:

    ENABLED = {"ENABLE_PAGECACHE_LIMIT": "yes"}

    @pytest.mark.parametrize("memory, expected", [
        (4096, 512),         # 256 clamped up
        (16000, 1000),
        (131072, 4096),      # 8192 clamped down
    ])
    def test_formula(self, memory, expected):
        assert pagecache_limit(memory, self.ENABLED) == expected

    def test_database(self):
        rules = dict(self.ENABLED, TUNE_FOR_DATABASE="yes")
        assert pagecache_limit(16000, rules) == 320
        assert pagecache_limit(1000000, rules) == 20000

    def test_override_wins(self):
        rules = dict(self.ENABLED, TUNE_FOR_DATABASE="yes", OVERRIDE_PAGECACHE_LIMIT_MB="777")
        assert pagecache_limit(16000, rules) == 777

    def test_zero_override_uses_formula(self):
        rules = dict(self.ENABLED, OVERRIDE_PAGECACHE_LIMIT_MB="0")
        assert pagecache_limit(16000, rules) == 1000

    def test_disabled_forces_zero(self):
        assert pagecache_limit(16000, {"OVERRIDE_PAGECACHE_LIMIT_MB": "777"}) == 0
        assert pagecache_limit(16000, {"ENABLE_PAGECACHE_LIMIT": "no", "TUNE_FOR_DATABASE": "yes"}) == 0

    def test_bad_override(self):
        with pytest.raises(DefinitionError):
            pagecache_limit(16000, dict(self.ENABLED, OVERRIDE_PAGECACHE_LIMIT_MB="lots"))


class TestPagecacheModule:

    def test_inspect_captures_memory(self, live):
        state = get_module("pagecache").inspect(live, {})
        assert state == {"limit_mb": 0, "ignore_dirty": 1, "memory_mb": 16000}

    def test_optimise_is_pure(self, live):
        module = get_module("pagecache")
        rules = {"ENABLE_PAGECACHE_LIMIT": "yes"}
        state = module.inspect(live, rules)
        before = copy.deepcopy(state)
        target = module.optimise(state, rules)
        assert state == before
        assert target == {"limit_mb": 1000, "ignore_dirty": 1, "memory_mb": 16000}

    def test_ignore_dirty_setting(self, live):
        module = get_module("pagecache")
        rules = {"ENABLE_PAGECACHE_LIMIT": "yes", "PAGECACHE_LIMIT_IGNORE_DIRTY": "2"}
        assert module.optimise({"memory_mb": 16000}, rules)["ignore_dirty"] == 2

    def test_apply(self, live, fake_system):
        get_module("pagecache").apply(live, {"limit_mb": 1000, "ignore_dirty": 0, "memory_mb": 16000})
        assert read(fake_system, "proc", "sys", "vm", "pagecache_limit_mb") == "1000"
        assert read(fake_system, "proc", "sys", "vm", "pagecache_limit_ignore_dirty") == "0"


class TestSysctlModule:

    def test_inspect_and_optimise(self, live):
        module = get_module("sysctl")
        rules = {"vm.swappiness": "10", "vm.dirty_ratio": " 5 "}
        state = module.inspect(live, rules)
        assert state == {"vm.swappiness": "60", "vm.dirty_ratio": "20"}
        assert module.optimise(state, rules) == {"vm.swappiness": "10", "vm.dirty_ratio": "5"}

    def test_missing_key_inspected_empty(self, live):
        assert get_module("sysctl").inspect(live, {"vm.nothing": "1"}) == {"vm.nothing": ""}

    def test_apply_attempts_every_field(self, live, fake_system):
        state = {"vm.missing_one": "1", "vm.swappiness": "10", "vm.missing_two": "2"}
        with pytest.raises(ApplyError) as exc:
            get_module("sysctl").apply(live, state)
        assert exc.value.failures.labels() == ["vm.missing_one", "vm.missing_two"]
        assert read(fake_system, "proc", "sys", "vm", "swappiness") == "10"

    def test_apply_skips_empty_values(self, live):
        get_module("sysctl").apply(live, {"vm.missing": ""})


class TestBlockModules:

    def test_scheduler_only_where_available(self, live):
        module = get_module("scheduler")
        rules = {"IO_SCHEDULER": "bfq"}
        state = module.inspect(live, rules)
        assert state["schedulers"] == {"sda": "mq-deadline", "sdb": "none"}
        target = module.optimise(state, rules)
        assert target["schedulers"] == {"sda": "bfq", "sdb": "none"}

        module.apply(live, target)
        assert live.get_scheduler("sda") == "bfq"
        assert live.get_scheduler("sdb") == "none"

    def test_scheduler_apply_collects_failures(self, live):
        with pytest.raises(ApplyError) as exc:
            get_module("scheduler").apply(live, {"schedulers": {"sda": "cfq", "sdb": "also-bad"}})
        assert exc.value.failures.labels() == ["sda", "sdb"]

    def test_nr_requests_every_device(self, live):
        module = get_module("nr_requests")
        rules = {"NRREQ": "128"}
        state = module.inspect(live, rules)
        assert state == {"sda": 64, "sdb": 256}
        target = module.optimise(state, rules)
        assert target == {"sda": 128, "sdb": 128}
        module.apply(live, target)
        assert live.get_nr_requests("sda") == 128
        assert live.get_nr_requests("sdb") == 128

    def test_nr_requests_invalid_rule(self):
        with pytest.raises(DefinitionError):
            get_module("nr_requests").optimise({"sda": 64}, {"NRREQ": "many"})
