"""
Parameter modules - the inspect/optimise/apply contract per tunable kind.

A module is a triple of plain functions registered under its kind:

- inspect(host, rules) -> state   reads live values (the only read side effect)
- optimise(state, rules) -> state computes the target, pure
- apply(host, state)              writes every field, failures are collected
                                  and raised together as one ApplyError

States are JSON-friendly dictionaries so they can be stored in the
saved-state snapshot and written back on revert.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from ..definitions import ParameterSet
from ..errors import ApplyError, DefinitionError, FailureList
from ..system import Host


logger = logging.getLogger(__name__)

State = Dict[str, Any]
Rules = Dict[str, str]

InspectFn = Callable[[Host, Rules], State]
OptimiseFn = Callable[[State, Rules], State]
ApplyFn = Callable[[Host, State], None]


@dataclass(frozen=True)
class ParameterModule:
    """One tunable kind."""
    kind: str
    section: str
    inspect: InspectFn
    optimise: OptimiseFn
    apply: ApplyFn
    keys: Optional[Tuple[str, ...]] = None    # None: every key of the section

    def rules(self, params: ParameterSet) -> Rules:
        """Rule entries of a Note that belong to this module."""
        section = params.section(self.section)
        if self.keys is None:
            return dict(section)
        return {k: v for k, v in section.items() if k in self.keys}


def _raise_collected(failures: FailureList) -> None:
    if not failures.ok:
        raise ApplyError(failures)


# =============================================================================
# sysctl - kernel tunables listed in [sysctl]
# =============================================================================

def inspect_sysctl(host: Host, rules: Rules) -> State:
    state = {}
    for key in rules:
        try:
            state[key] = host.get_sysctl(key)
        except OSError as e:
            logger.warning("sysctl '%s' not readable: %s", key, e)
            state[key] = ""
    return state


def optimise_sysctl(state: State, rules: Rules) -> State:
    return {key: " ".join(str(rules[key]).split()) for key in state if key in rules}


def apply_sysctl(host: Host, state: State) -> None:
    failures = FailureList()
    for key, value in state.items():
        if value == "":
            logger.debug("sysctl '%s' has no value, skipped", key)
            continue
        try:
            host.set_sysctl(key, value)
        except OSError as e:
            logger.error("failed to set sysctl '%s' to '%s': %s", key, value, e)
            failures.add(key, e)
    _raise_collected(failures)


# =============================================================================
# pagecache - page cache limit derived from main memory
# =============================================================================

PAGECACHE_LIMIT = "vm.pagecache_limit_mb"
PAGECACHE_IGNORE_DIRTY = "vm.pagecache_limit_ignore_dirty"

PAGECACHE_MIN_MB = 512
PAGECACHE_MAX_MB = 4096
DATABASE_PERCENT = 2


def _yes(value: str) -> bool:
    return str(value).strip().lower() in ("yes", "true", "1")


def _read_int(host: Host, key: str) -> Optional[int]:
    try:
        return int(host.get_sysctl(key))
    except (OSError, ValueError) as e:
        logger.warning("sysctl '%s' not readable: %s", key, e)
        return None


def inspect_pagecache(host: Host, rules: Rules) -> State:
    try:
        memory = host.mem_total_mb()
    except OSError as e:
        logger.warning("unable to read main memory size: %s", e)
        memory = 0
    return {
        "limit_mb": _read_int(host, PAGECACHE_LIMIT),
        "ignore_dirty": _read_int(host, PAGECACHE_IGNORE_DIRTY),
        "memory_mb": memory,
    }


def pagecache_limit(memory_mb: int, rules: Rules) -> int:
    """
    Page cache limit in MB.

    2% of memory when tuning for a database, memory/16 clamped to
    [512, 4096] otherwise. A non-zero override wins over the formula, and
    the limit is 0 unless it is enabled at all.
    """
    if not _yes(rules.get("ENABLE_PAGECACHE_LIMIT", "no")):
        return 0

    override = rules.get("OVERRIDE_PAGECACHE_LIMIT_MB", "").strip()
    if override:
        try:
            value = int(override)
        except ValueError:
            raise DefinitionError(f"OVERRIDE_PAGECACHE_LIMIT_MB is not a number: '{override}'")
        if value != 0:
            return value

    if _yes(rules.get("TUNE_FOR_DATABASE", "no")):
        return memory_mb * DATABASE_PERCENT // 100
    return min(max(memory_mb // 16, PAGECACHE_MIN_MB), PAGECACHE_MAX_MB)


def optimise_pagecache(state: State, rules: Rules) -> State:
    ignore_dirty = rules.get("PAGECACHE_LIMIT_IGNORE_DIRTY", "").strip() or "1"
    try:
        ignore_dirty = int(ignore_dirty)
    except ValueError:
        raise DefinitionError(f"PAGECACHE_LIMIT_IGNORE_DIRTY is not a number: '{ignore_dirty}'")
    return {
        "limit_mb": pagecache_limit(int(state.get("memory_mb") or 0), rules),
        "ignore_dirty": ignore_dirty,
        "memory_mb": state.get("memory_mb", 0),
    }


def apply_pagecache(host: Host, state: State) -> None:
    failures = FailureList()
    for key, field_name in ((PAGECACHE_LIMIT, "limit_mb"), (PAGECACHE_IGNORE_DIRTY, "ignore_dirty")):
        value = state.get(field_name)
        if value is None:
            continue
        try:
            host.set_sysctl(key, str(value))
        except OSError as e:
            logger.error("failed to set '%s' to '%s': %s", key, value, e)
            failures.add(key, e)
    _raise_collected(failures)


# =============================================================================
# scheduler - I/O scheduler of every block device
# =============================================================================

def inspect_scheduler(host: Host, rules: Rules) -> State:
    current = {}
    available = {}
    for device in host.block_devices():
        try:
            current[device] = host.get_scheduler(device)
            available[device] = host.schedulers(device)
        except OSError as e:
            logger.warning("scheduler of '%s' not readable: %s", device, e)
    return {"schedulers": current, "available": available}


def optimise_scheduler(state: State, rules: Rules) -> State:
    wanted = rules.get("IO_SCHEDULER", "").strip()
    target = dict(state.get("schedulers", {}))
    available = state.get("available", {})
    if not wanted:
        return {"schedulers": target, "available": available}

    for device in target:
        if wanted in available.get(device, []):
            target[device] = wanted
        else:
            logger.warning("scheduler '%s' not supported by device '%s', keeping '%s'",
                           wanted, device, target[device])
    return {"schedulers": target, "available": available}


def apply_scheduler(host: Host, state: State) -> None:
    failures = FailureList()
    for device, scheduler in state.get("schedulers", {}).items():
        try:
            host.set_scheduler(device, scheduler)
        except (OSError, ValueError) as e:
            logger.error("failed to set scheduler of '%s' to '%s': %s", device, scheduler, e)
            failures.add(device, e)
    _raise_collected(failures)


# =============================================================================
# nr_requests - request queue depth of every block device
# =============================================================================

def inspect_nr_requests(host: Host, rules: Rules) -> State:
    state = {}
    for device in host.block_devices():
        try:
            state[device] = host.get_nr_requests(device)
        except (OSError, ValueError) as e:
            logger.warning("nr_requests of '%s' not readable: %s", device, e)
    return state


def optimise_nr_requests(state: State, rules: Rules) -> State:
    raw = rules.get("NRREQ", "").strip()
    if not raw:
        return dict(state)
    try:
        depth = int(raw)
    except ValueError:
        raise DefinitionError(f"NRREQ is not a number: '{raw}'")
    return {device: depth for device in state}


def apply_nr_requests(host: Host, state: State) -> None:
    failures = FailureList()
    for device, depth in state.items():
        try:
            host.set_nr_requests(device, depth)
        except (OSError, ValueError) as e:
            logger.error("failed to set nr_requests of '%s' to '%s': %s", device, depth, e)
            failures.add(device, e)
    _raise_collected(failures)


# =============================================================================
# Registry
# =============================================================================

MODULES: Dict[str, ParameterModule] = {
    module.kind: module
    for module in (
        ParameterModule("sysctl", "sysctl", inspect_sysctl, optimise_sysctl, apply_sysctl),
        ParameterModule("pagecache", "pagecache", inspect_pagecache, optimise_pagecache, apply_pagecache),
        ParameterModule("scheduler", "block", inspect_scheduler, optimise_scheduler, apply_scheduler,
                        keys=("IO_SCHEDULER",)),
        ParameterModule("nr_requests", "block", inspect_nr_requests, optimise_nr_requests, apply_nr_requests,
                        keys=("NRREQ",)),
    )
}


def get_module(kind: str) -> ParameterModule:
    try:
        return MODULES[kind]
    except KeyError:
        raise KeyError(f"unknown parameter kind '{kind}'") from None
