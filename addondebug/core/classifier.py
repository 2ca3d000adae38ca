"""Map facts extracted from a PE module onto the addon taxonomy.

Evaluation runs in two phases. Export-only signals are computed first into
an immutable ``BaseSignals``; labels that depend on those signals are then
derived from it together with the raw file content.
"""
from __future__ import annotations

from dataclasses import dataclass

from addondebug.core.models import ClassificationRecord, ModuleFacts
from addondebug.core.rule_engine import (
    ADDON_LOADER_DLL,
    FRAMEWORK_API_URL,
    LOADER_CORE_DESCRIPTION,
)

EXPORT_D3D11_CREATE_DEVICE = "D3D11CreateDevice"
EXPORT_CREATE_DXGI_FACTORY = "CreateDXGIFactory"
EXPORT_STATS_MODULE = "e0"
EXPORT_STATS_ADDON = "get_init_addr"
EXPORT_LOADER_ADDON = "gw2addon_load"
EXPORT_FRAMEWORK_ADDON = "GetAddonDef"


@dataclass(frozen=True)
class BaseSignals:
    graphics_shim_primary: bool
    graphics_shim_secondary: bool
    stats_module: bool
    stats_addon: bool
    generic_loader_addon: bool
    framework_addon: bool


@dataclass(frozen=True)
class DependentSignals:
    generic_loader_shim: bool
    generic_loader_core: bool
    framework_core: bool


def has_export(facts: ModuleFacts, name: str) -> bool:
    return name in facts.exported_names


def evaluate_base(facts: ModuleFacts) -> BaseSignals:
    return BaseSignals(
        graphics_shim_primary=has_export(facts, EXPORT_D3D11_CREATE_DEVICE),
        graphics_shim_secondary=has_export(facts, EXPORT_CREATE_DXGI_FACTORY),
        stats_module=has_export(facts, EXPORT_STATS_MODULE),
        stats_addon=has_export(facts, EXPORT_STATS_ADDON),
        generic_loader_addon=has_export(facts, EXPORT_LOADER_ADDON),
        framework_addon=has_export(facts, EXPORT_FRAMEWORK_ADDON),
    )


def evaluate_dependent(base: BaseSignals, raw_bytes: bytes) -> DependentSignals:
    """Derive the labels that require a graphics shim plus a marker string.

    The loader shim only has to proxy one of the two graphics entry points;
    the loader core replaces the module outright and exports both.
    """
    any_shim = base.graphics_shim_primary or base.graphics_shim_secondary
    both_shims = base.graphics_shim_primary and base.graphics_shim_secondary
    return DependentSignals(
        generic_loader_shim=any_shim and ADDON_LOADER_DLL.found_in(raw_bytes),
        generic_loader_core=both_shims and LOADER_CORE_DESCRIPTION.found_in(raw_bytes),
        framework_core=base.graphics_shim_primary and FRAMEWORK_API_URL.found_in(raw_bytes),
    )


def classify(facts: ModuleFacts) -> ClassificationRecord:
    base = evaluate_base(facts)
    dependent = evaluate_dependent(base, facts.raw_bytes)
    return ClassificationRecord(
        is_stats_module=base.stats_module,
        is_stats_addon=base.stats_addon,
        is_generic_loader_shim=dependent.generic_loader_shim,
        is_generic_loader_core=dependent.generic_loader_core,
        is_generic_loader_addon=base.generic_loader_addon,
        is_framework_core=dependent.framework_core,
        is_framework_addon=base.framework_addon,
        is_graphics_shim_primary=base.graphics_shim_primary,
        is_graphics_shim_secondary=base.graphics_shim_secondary,
        file_version=facts.file_version,
    )
