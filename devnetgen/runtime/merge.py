"""
Deep merge for layered configuration.

Rules (override wins):
    - map vs map: recurse key by key
    - anything else: the override value replaces the base value wholesale;
      lists are never concatenated or merged element-wise
    - a key absent from the override, or set to None, never erases the base

Neither input is mutated. Keys keep the base's order, with keys new to the
override appended in the override's order, so equal inputs always produce
equal (and identically ordered) outputs.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any


def deep_merge(base: Mapping[str, Any] | None, *overrides: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Merge one or more override layers on top of base.

    Later layers take precedence over earlier ones:
        deep_merge(global_defaults, catalogue_entry, user_spec)
    """
    result: dict[str, Any] = copy.deepcopy(dict(base)) if base else {}
    for override in overrides:
        if override:
            _merge_into(result, override)
    return result


def _merge_into(target: dict[str, Any], override: Mapping[str, Any]) -> None:
    for key, value in override.items():
        if value is None:
            continue
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge_into(current, value)
        else:
            target[key] = copy.deepcopy(value)
