"""
Tests for a full consolidation run.
"""

import json
import tomllib

import pytest

from wsdeps_common.errors import CheckFailedError, ValidationError
from wsdeps_sdk.consolidate import CONFIRM_PROMPT, ConsolidateOptions, run
from wsdeps_sdk.dependencies.models import DepSection
from wsdeps_sdk.dependencies.resolver import ResolutionStrategy

pytestmark = pytest.mark.integration


class Capture:
    """Collects run output."""

    def __init__(self):
        self.parts = []

    def __call__(self, text: str) -> None:
        self.parts.append(text)

    @property
    def text(self) -> str:
        return "".join(self.parts)


@pytest.fixture
def capture():
    return Capture()


@pytest.fixture
def anyhow_workspace(make_workspace):
    """Two members with different anyhow versions and a shared serde."""
    return make_workspace(
        members={
            "member1": '[dependencies]\nanyhow = "1.0.80"\nserde = "1.0"',
            "member2": '[dependencies]\nanyhow = "1.0.75"\nserde = "1.0"',
            "member3": "",
        }
    )


class TestConsolidateOptions:
    """Tests for ConsolidateOptions validation."""

    def test_defaults(self):
        """All sections and highest-compatible by default."""
        options = ConsolidateOptions()
        assert options.sections == list(DepSection)
        assert options.strategy == ResolutionStrategy.HIGHEST_COMPATIBLE
        assert options.is_text

    def test_json_requires_non_interactive(self):
        """JSON output needs --fix or --check."""
        with pytest.raises(ValidationError) as exc_info:
            ConsolidateOptions(output_format="json")
        assert "requires --fix or --check" in exc_info.value.message

    def test_json_with_check(self):
        """JSON with check mode is accepted."""
        assert not ConsolidateOptions(output_format="JSON", check=True).is_text

    def test_unknown_format(self):
        """Only text and json are supported."""
        with pytest.raises(ValidationError):
            ConsolidateOptions(output_format="yaml", fix=True)

    def test_min_members(self):
        """min_members below 1 is rejected."""
        with pytest.raises(ValidationError):
            ConsolidateOptions(min_members=0)

    def test_section_flags(self):
        """Disabled sections are left out, order is kept."""
        options = ConsolidateOptions(process_dependencies=False)
        assert options.sections == [
            DepSection.DEV_DEPENDENCIES,
            DepSection.BUILD_DEPENDENCIES,
        ]


class TestRunText:
    """Tests for run() with text output."""

    def test_fix_rewrites_manifests(self, anyhow_workspace, capture, read_root, read_member):
        """--fix writes the shared pool and converts members."""
        options = ConsolidateOptions(
            manifest_path=anyhow_workspace, fix=True, strategy=ResolutionStrategy.HIGHEST
        )
        result = run(options, output=capture)

        assert result.applied
        assert capture.text.startswith("Found 3 members\n")
        assert "Resolved conflicts (using Highest):" in capture.text
        assert "  anyhow: 1.0.75, 1.0.80 → 1.0.80\n" in capture.text
        assert "Updating workspace Cargo.toml...\n" in capture.text
        assert capture.text.endswith("Consolidated 2 dependencies\n")
        assert CONFIRM_PROMPT not in capture.text

        root = tomllib.loads(read_root())
        assert root["workspace"]["dependencies"] == {"anyhow": "1.0.80", "serde": "1.0"}
        for name in ("member1", "member2"):
            deps = tomllib.loads(read_member(name))["dependencies"]
            assert deps == {"anyhow": {"workspace": True}, "serde": {"workspace": True}}

    def test_untouched_member_not_written(self, anyhow_workspace, capture, read_member):
        """Members without consolidated declarations are not in changed_files."""
        before = read_member("member3")
        result = run(ConsolidateOptions(manifest_path=anyhow_workspace, fix=True), output=capture)
        assert read_member("member3") == before
        assert all("member3" not in str(path) for path in result.changed_files)
        assert len(result.changed_files) == 3

    def test_second_run_is_a_no_op(self, anyhow_workspace, capture, read_root, read_member):
        """After --fix, another pass finds nothing and changes nothing."""
        options = ConsolidateOptions(
            manifest_path=anyhow_workspace, fix=True, strategy=ResolutionStrategy.HIGHEST
        )
        run(options, output=capture)
        root_before = read_root()
        members_before = [read_member(n) for n in ("member1", "member2", "member3")]

        second = Capture()
        result = run(options, output=second)

        assert not result.applied
        assert "No dependencies to consolidate." in second.text
        assert read_root() == root_before
        assert [read_member(n) for n in ("member1", "member2", "member3")] == members_before

    def test_confirmation_refused(self, anyhow_workspace, capture, read_root):
        """Answering no leaves every file alone."""
        before = read_root()
        result = run(
            ConsolidateOptions(manifest_path=anyhow_workspace),
            output=capture,
            confirm=lambda: False,
        )
        assert not result.applied
        assert capture.text.endswith(CONFIRM_PROMPT + "Cancelled.\n")
        assert read_root() == before

    def test_confirmation_accepted(self, anyhow_workspace, capture):
        """Answering yes applies the changes."""
        result = run(
            ConsolidateOptions(manifest_path=anyhow_workspace),
            output=capture,
            confirm=lambda: True,
        )
        assert result.applied
        assert CONFIRM_PROMPT + "\n" in capture.text

    def test_excluded_members_reported(self, anyhow_workspace, capture):
        """Member patterns shrink the member list and are counted."""
        result = run(
            ConsolidateOptions(
                manifest_path=anyhow_workspace, check=True, exclude_members=["member2"]
            ),
            output=capture,
        )
        assert capture.text.startswith("Found 2 members (1 excluded by pattern)\n")
        assert result.analysis.common_deps == []

    def test_no_sections_selected(self, anyhow_workspace, capture):
        """Disabling every section stops before analysis."""
        options = ConsolidateOptions(
            manifest_path=anyhow_workspace,
            process_dependencies=False,
            process_dev_dependencies=False,
            process_build_dependencies=False,
        )
        result = run(options, output=capture)
        assert capture.text == "Found 3 members\nNo dependency sections selected for processing.\n"
        assert result.analysis is None

    def test_unused_shared_dependency(self, make_workspace, capture):
        """Shared entries nobody uses are reported."""
        root = make_workspace(
            members={"member1": "", "member2": ""},
            root_extra='[workspace.dependencies]\nregex = "1.10"',
        )
        run(ConsolidateOptions(manifest_path=root, check=True), output=capture)
        assert "Unused workspace dependencies:\n  regex\n" in capture.text


class TestCheckMode:
    """Tests for check mode."""

    def test_fails_when_consolidation_possible(self, anyhow_workspace, capture, read_root):
        """Pending consolidations fail the check without touching files."""
        before = read_root()
        with pytest.raises(CheckFailedError) as exc_info:
            run(ConsolidateOptions(manifest_path=anyhow_workspace, check=True), output=capture)
        assert exc_info.value.kind == CheckFailedError.CONSOLIDATION
        assert capture.text.endswith("Check failed: 2 dependencies could be consolidated\n")
        assert read_root() == before

    def test_consolidation_reported_before_conflicts(self, make_workspace, capture):
        """With both pending, the consolidation count is what fails."""
        root = make_workspace(
            members={
                "member1": '[dependencies]\nserde = "1.0"\nrand = "0.7"',
                "member2": '[dependencies]\nserde = "1.0"\nrand = "0.8"',
            }
        )
        with pytest.raises(CheckFailedError) as exc_info:
            run(ConsolidateOptions(manifest_path=root, check=True), output=capture)
        assert exc_info.value.kind == CheckFailedError.CONSOLIDATION
        assert exc_info.value.count == 1

    def test_fails_on_unresolved_conflicts(self, make_workspace, capture):
        """Only conflicts left still fails the check."""
        root = make_workspace(
            members={
                "member1": '[dependencies]\nrand = "0.7"',
                "member2": '[dependencies]\nrand = "0.8"',
            }
        )
        with pytest.raises(CheckFailedError) as exc_info:
            run(ConsolidateOptions(manifest_path=root, check=True), output=capture)
        assert exc_info.value.kind == CheckFailedError.CONFLICTS
        assert "  rand (version resolution):\n" in capture.text
        assert capture.text.endswith("Check failed: 1 unresolved conflicts\n")

    def test_passes(self, make_workspace, capture):
        """A consolidated workspace passes."""
        root = make_workspace(
            members={
                "member1": "[dependencies]\nserde = { workspace = true }",
                "member2": '[dependencies]\nlog = "0.4"',
            },
            root_extra='[workspace.dependencies]\nserde = "1.0"',
        )
        result = run(ConsolidateOptions(manifest_path=root, check=True), output=capture)
        assert result.analysis.common_deps == []
        assert capture.text.endswith("Check passed: no dependencies to consolidate\n")


class TestRunJson:
    """Tests for run() with JSON output."""

    def test_check_emits_json_only(self, anyhow_workspace, capture):
        """JSON mode prints a single document and no text lines."""
        options = ConsolidateOptions(
            manifest_path=anyhow_workspace, check=True, output_format="json"
        )
        with pytest.raises(CheckFailedError):
            run(options, output=capture)
        data = json.loads(capture.text)
        assert data["summary"]["dependencies_to_consolidate"] == 2
        assert data["workspace"]["member_count"] == 3

    def test_fix_emits_json_after_applying(self, anyhow_workspace, capture, read_root):
        """JSON with --fix applies and then prints the report."""
        options = ConsolidateOptions(
            manifest_path=anyhow_workspace, fix=True, output_format="json"
        )
        result = run(options, output=capture)
        assert result.applied
        data = json.loads(capture.text)
        assert [d["name"] for d in data["common_dependencies"]] == ["anyhow", "serde"]
        assert "[workspace.dependencies]" in read_root()

    def test_nothing_to_do(self, make_workspace, capture):
        """An empty result is still a JSON document."""
        root = make_workspace(members={"member1": "", "member2": ""})
        run(ConsolidateOptions(manifest_path=root, fix=True, output_format="json"), output=capture)
        assert json.loads(capture.text)["common_dependencies"] == []


class TestWorkspaceLayouts:
    """Runs over layouts that need more than one plain table per section."""

    def test_same_name_from_two_registries(self, make_workspace, capture, read_root, read_member):
        """Neither source of serde takes over the shared entry."""
        root = make_workspace(
            members={
                "a": '[dependencies]\nserde = "1.0"',
                "b": '[dependencies]\nserde = "1.0"',
                "c": '[dependencies]\nserde = { version = "1.0", registry = "priv" }',
                "d": '[dependencies]\nserde = { version = "1.0", registry = "priv" }',
            }
        )
        root_before = read_root()
        result = run(ConsolidateOptions(manifest_path=root, fix=True), output=capture)

        assert not result.applied
        assert result.analysis.common_deps == []
        assert len(result.analysis.conflicts) == 2
        assert "serde (name shared with another package or registry):" in capture.text
        assert read_root() == root_before
        assert tomllib.loads(read_member("a"))["dependencies"]["serde"] == "1.0"

    def test_existing_private_entry_not_repointed(self, make_workspace, capture, read_root):
        """Members on the public registry do not adopt a private pool entry."""
        root = make_workspace(
            members={
                "a": '[dependencies]\nserde = "1.0"\nlog = "0.4"',
                "b": '[dependencies]\nserde = "1.0"\nlog = "0.4"',
            },
            root_extra='[workspace.dependencies]\nserde = { version = "1.0", registry = "priv" }',
        )
        run(ConsolidateOptions(manifest_path=root, fix=True), output=capture)

        shared = tomllib.loads(read_root())["workspace"]["dependencies"]
        assert shared["serde"] == {"version": "1.0", "registry": "priv"}
        assert shared["log"] == "0.4"

    def test_split_dependencies_table_fixed_once(self, make_workspace, capture, read_member):
        """Members with a split [dependencies] are rewritten and a rerun has nothing to do."""
        body = (
            '[dependencies]\nserde = "1.0"\n\n'
            '[dev-dependencies]\ntempfile = "3"\n\n'
            '[dependencies.tokio]\nversion = "1.0"\n'
        )
        root = make_workspace(members={"a": body, "b": body})
        options = ConsolidateOptions(manifest_path=root, fix=True)
        first = run(options, output=capture)
        assert [d.name for d in first.analysis.common_deps] == ["serde", "tempfile", "tokio"]

        for name in ("a", "b"):
            data = tomllib.loads(read_member(name))
            assert data["dependencies"] == {
                "serde": {"workspace": True},
                "tokio": {"workspace": True},
            }
            assert data["dev-dependencies"] == {"tempfile": {"workspace": True}}

        check = Capture()
        run(ConsolidateOptions(manifest_path=root, check=True), output=check)
        assert check.text.endswith("Check passed: no dependencies to consolidate\n")
