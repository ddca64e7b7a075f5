"""Tests for cascade_bump.engine."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from conftest import commits, make_module

from cascade_bump.bumps import BumpKind
from cascade_bump.config import DEFAULT_CONFIG, config_from_dict
from cascade_bump.engine import VersionCascadeEngine
from cascade_bump.errors import ContractViolation, InvalidVersionError
from cascade_bump.models import ChangeReason, ModuleKind, ProcessedChange
from cascade_bump.options import RunOptions
from cascade_bump.registry import ModuleRegistry
from cascade_bump.versions import parse_version


def by_id(changes: list[ProcessedChange]) -> dict[str, ProcessedChange]:
    return {c.module.id: c for c in changes}


class TestStableTrack:
    def test_no_commits_no_changes(self, scenario_registry: ModuleRegistry) -> None:
        assert VersionCascadeEngine().run(scenario_registry, {}) == []

    def test_breaking_commit_is_major(self) -> None:
        registry = ModuleRegistry([make_module("core", version="1.2.3")])
        changes = VersionCascadeEngine().run(registry, {"core": commits("fix", breaking=True)})
        assert len(changes) == 1
        assert changes[0].to_version == "2.0.0"
        assert changes[0].bump_kind is BumpKind.MAJOR
        assert changes[0].reason is ChangeReason.COMMITS

    def test_cascade_scenario(self, scenario_registry: ModuleRegistry) -> None:
        config = config_from_dict({"versioning": {"cascade-rules": {"stable": {"minor": "patch"}}}})
        changes = VersionCascadeEngine(config).run(scenario_registry, {"utils": commits("feat")})
        result = by_id(changes)

        assert set(result) == {"utils", "core", "api"}
        assert result["utils"].to_version == "1.1.0"
        assert result["utils"].reason is ChangeReason.COMMITS
        assert result["core"].to_version == "1.0.1"
        assert result["core"].reason is ChangeReason.CASCADE
        assert result["api"].to_version == "1.0.1"
        assert result["api"].reason is ChangeReason.CASCADE

    def test_root_change_cascades_to_all(self, scenario_registry: ModuleRegistry) -> None:
        changes = VersionCascadeEngine().run(scenario_registry, {"root": commits("fix")})
        assert [c.module.id for c in changes] == ["root", "core", "utils", "api"]
        assert all(c.bump_kind is BumpKind.PATCH for c in changes)

    def test_results_in_registry_order(self, scenario_registry: ModuleRegistry) -> None:
        changes = VersionCascadeEngine().run(
            scenario_registry, {"api": commits("fix"), "core": commits("feat")}
        )
        assert [c.module.id for c in changes] == ["core", "api"]
        assert by_id(changes)["api"].bump_kind is BumpKind.MINOR

    def test_ignored_types_produce_nothing(self, scenario_registry: ModuleRegistry) -> None:
        changes = VersionCascadeEngine().run(
            scenario_registry, {"core": commits("docs", "chore")}
        )
        assert changes == []

    def test_tag_uses_new_version(self) -> None:
        registry = ModuleRegistry([make_module("core", version="0.1.0")])
        changes = VersionCascadeEngine().run(registry, {"core": commits("feat")})
        assert changes[0].tag == "core@0.2.0"

    def test_invalid_version_raises(self) -> None:
        registry = ModuleRegistry([make_module("core", version="not-a-version")])
        with pytest.raises(InvalidVersionError, match="core"):
            VersionCascadeEngine().run(registry, {})

    def test_accepts_root_kind(self) -> None:
        registry = ModuleRegistry([make_module("app", kind=ModuleKind.ROOT)])
        changes = VersionCascadeEngine().run(registry, {"app": commits("feat")})
        assert changes[0].to_version == "1.1.0"

    def test_release_promotes_prerelease(self) -> None:
        registry = ModuleRegistry([make_module("core", version="1.1.0-alpha.2")])
        changes = VersionCascadeEngine().run(registry, {"core": commits("feat")})

        assert changes[0].to_version == "1.1.0"
        assert changes[0].bump_kind is BumpKind.MINOR
        assert changes[0].tag == "core@1.1.0"


class TestPrereleaseTrack:
    def test_feat_is_preminor(self) -> None:
        registry = ModuleRegistry([make_module("core", version="1.2.3")])
        engine = VersionCascadeEngine(options=RunOptions(prerelease_mode=True))
        changes = engine.run(registry, {"core": commits("feat")})
        assert changes[0].to_version == "1.3.0-alpha.0"
        assert changes[0].bump_kind is BumpKind.PREMINOR

    def test_prerelease_commit_increments_counter(self) -> None:
        config = config_from_dict(
            {"versioning": {"commit-types": {"fix": {"stable": "patch", "prerelease": "prerelease"}}}}
        )
        registry = ModuleRegistry([make_module("core", version="1.0.0-alpha.0")])
        engine = VersionCascadeEngine(config, RunOptions(prerelease_mode=True))
        changes = engine.run(registry, {"core": commits("fix")})
        assert changes[0].to_version == "1.0.0-alpha.1"

    def test_bump_unchanged(self) -> None:
        registry = ModuleRegistry(
            [make_module("core", version="1.0.0-alpha.0"), make_module("api", version="2.0.0")]
        )
        options = RunOptions(prerelease_mode=True, bump_unchanged=True)
        changes = by_id(VersionCascadeEngine(options=options).run(registry, {}))

        assert changes["core"].to_version == "1.0.0-alpha.1"
        assert changes["core"].reason is ChangeReason.PRERELEASE_UNCHANGED
        assert changes["core"].bump_kind is BumpKind.NONE
        assert changes["api"].to_version == "2.0.1-alpha.0"

    def test_bump_unchanged_ignored_outside_prerelease_mode(self) -> None:
        registry = ModuleRegistry([make_module("core")])
        options = RunOptions(bump_unchanged=True)
        assert VersionCascadeEngine(options=options).run(registry, {}) == []

    def test_custom_identifier(self) -> None:
        registry = ModuleRegistry([make_module("core", version="1.0.0")])
        options = RunOptions(prerelease_mode=True, prerelease_id="rc")
        changes = VersionCascadeEngine(options=options).run(registry, {"core": commits("fix")})
        assert changes[0].to_version == "1.0.1-rc.0"

    def test_empty_identifier_is_contract_violation(self) -> None:
        registry = ModuleRegistry([make_module("core")])
        options = RunOptions(prerelease_mode=True, prerelease_id="")
        with pytest.raises(ContractViolation):
            VersionCascadeEngine(options=options).run(registry, {"core": commits("fix")})

    def test_timestamp_identifier_uses_clock(self) -> None:
        registry = ModuleRegistry([make_module("core", version="1.0.0")])
        options = RunOptions(prerelease_mode=True, timestamp_versions=True)
        clock = lambda: datetime(2025, 10, 8, 15, 30, tzinfo=timezone.utc)  # noqa: E731
        engine = VersionCascadeEngine(options=options, clock=clock)

        assert engine.effective_prerelease_id() == "alpha.20251008.1530"
        changes = engine.run(registry, {"core": commits("feat")})
        assert changes[0].to_version == "1.1.0-alpha.20251008.1530.0"

    def test_early_timestamp_version_parses(self) -> None:
        registry = ModuleRegistry([make_module("core", version="1.0.0")])
        options = RunOptions(prerelease_mode=True, timestamp_versions=True)
        clock = lambda: datetime(2025, 1, 2, 9, 4, tzinfo=timezone.utc)  # noqa: E731

        changes = VersionCascadeEngine(options=options, clock=clock).run(
            registry, {"core": commits("feat")}
        )

        assert changes[0].to_version == "1.1.0-alpha.20250102.904.0"
        assert parse_version(changes[0].to_version).prerelease == "alpha.20250102.904.0"

    def test_timestamp_ignored_outside_prerelease_mode(self) -> None:
        options = RunOptions(timestamp_versions=True)
        engine = VersionCascadeEngine(options=options, clock=lambda: 1 / 0)
        assert engine.effective_prerelease_id() == "alpha"

    def test_prerelease_cascade_uses_prerelease_table(
        self, scenario_registry: ModuleRegistry
    ) -> None:
        config = config_from_dict(
            {"versioning": {"cascade-rules": {"prerelease": {"preminor": "prepatch"}}}}
        )
        engine = VersionCascadeEngine(config, RunOptions(prerelease_mode=True))
        changes = by_id(engine.run(scenario_registry, {"utils": commits("feat")}))
        assert changes["utils"].to_version == "1.1.0-alpha.0"
        assert changes["core"].to_version == "1.0.1-alpha.0"
        assert changes["core"].bump_kind is BumpKind.PREPATCH


class TestBuildMetadataAndSnapshots:
    def test_metadata_on_every_module(self, scenario_registry: ModuleRegistry) -> None:
        options = RunOptions(add_build_metadata=True, build_metadata="abc1234")
        changes = VersionCascadeEngine(options=options).run(scenario_registry, {})
        assert len(changes) == 4
        assert all(c.to_version == "1.0.0+abc1234" for c in changes)
        assert all(c.reason is ChangeReason.BUILD_METADATA for c in changes)

    def test_metadata_from_last_commit(self) -> None:
        registry = ModuleRegistry([make_module("core")])
        options = RunOptions(add_build_metadata=True)
        changes = VersionCascadeEngine(options=options).run(registry, {"core": commits("fix")})
        assert changes[0].to_version == "1.0.1+0000000"

    def test_snapshot_only(self) -> None:
        registry = ModuleRegistry([make_module("core", version="1.0.0")])
        options = RunOptions(append_snapshot=True, supports_snapshots=True)
        changes = VersionCascadeEngine(options=options).run(registry, {})
        assert changes[0].to_version == "1.0.0-SNAPSHOT"
        assert changes[0].reason is ChangeReason.SNAPSHOT

    def test_default_config_is_used(self) -> None:
        assert VersionCascadeEngine().config is DEFAULT_CONFIG
