"""Unit tests for crash log field extraction."""

import pytest

from crashlog_search.parsing import ParsedCrashData, parse_crash_log
from crashlog_search.parsing.crash_parser import MAX_STACK_LINES, extract_mod_list, extract_stack_trace


@pytest.mark.unit
class TestForgeCrashReport:
    """Test parsing a Forge crash report."""

    def test_versions_and_loader(self, forge_crash_log):
        """Test game version, loader and loader version are detected."""
        parsed = parse_crash_log(forge_crash_log)

        assert parsed.minecraft_version == "1.20.1"
        assert parsed.mod_loader == "forge"
        assert parsed.mod_loader_version == "47.2.0"

    def test_java_exception(self, forge_crash_log):
        """Test the Java exception gives error type and message."""
        parsed = parse_crash_log(forge_crash_log)

        assert parsed.error_type == "NullPointerException"
        assert parsed.error_message == 'Cannot invoke "net.minecraft.world.entity.Entity.getId()" because "entity" is null'
        assert parsed.culprit_mod is None
        assert parsed.mod_list == []

    def test_stack_trace_includes_caused_by_block(self, forge_crash_log):
        """Test the stack trace keeps the Caused by block."""
        trace = parse_crash_log(forge_crash_log).stack_trace

        lines = trace.split("\n")
        assert len(lines) == 5
        assert lines[0].startswith("java.lang.NullPointerException")
        assert "EntityHandler.onTick" in lines[1]
        assert lines[3] == "Caused by: java.lang.IllegalStateException: Entity not registered"
        assert "Registry.lookup" in lines[4]
        assert "System Details" not in trace


@pytest.mark.unit
class TestFabricLog:
    """Test parsing a Fabric launcher log."""

    def test_versions_and_loader(self, fabric_crash_log):
        """Test game version, loader and loader version are detected."""
        parsed = parse_crash_log(fabric_crash_log)

        assert parsed.minecraft_version == "1.20.4"
        assert parsed.mod_loader == "fabric"
        assert parsed.mod_loader_version == "0.15.6"

    def test_mod_list_skips_platform_entries(self, fabric_crash_log):
        """Test platform entries are left out of the mod list."""
        assert parse_crash_log(fabric_crash_log).mod_list == ["sodium"]

    def test_mixin_apply_failure(self, fabric_crash_log):
        """Test a mixin apply failure names the culprit mod."""
        parsed = parse_crash_log(fabric_crash_log)

        assert parsed.error_type == "MixinApplyError"
        assert parsed.error_message == "Mixin failure in mod 'sodium': Critical injection failure"
        assert parsed.culprit_mod == "sodium"


@pytest.mark.unit
class TestErrorExtraction:
    """Test error type and culprit extraction."""

    def test_mixin_transformation_names_owner(self):
        """Test a mixin transformation failure names the owning mod."""
        content = (
            "[main/WARN]: Mixin iris.mixins.json:MixinFoo from mod iris -> net.minecraft.client.Foo\n"
            "Mixin transformation of net.minecraft.client.Foo failed\n"
        )

        parsed = parse_crash_log(content)

        assert parsed.error_type == "MixinTransformationError"
        assert parsed.error_message == "Mixin transformation failed for net.minecraft.client.Foo"
        assert parsed.culprit_mod == "iris"

    def test_mod_error_sets_culprit(self):
        """Test a mod error line sets the culprit."""
        parsed = parse_crash_log("Caught error from mod create: java.lang.RuntimeException: boom")

        assert parsed.culprit_mod == "create"
        assert parsed.error_type == "RuntimeException"
        assert parsed.error_message == "boom"

    def test_known_crash_type_fallback(self):
        """Test a known crash type name is used as a fallback."""
        parsed = parse_crash_log("Game crashed: OutOfMemoryError")

        assert parsed.error_type == "OutOfMemoryError"
        assert parsed.error_message is None


@pytest.mark.unit
class TestModLoaderDetection:
    """Test mod loader detection."""

    def test_neoforge_wins_over_earlier_patterns(self):
        """Test NeoForge is preferred over Forge."""
        parsed = parse_crash_log("Loading NeoForge 20.4.80-beta for Minecraft 1.20.4\nMinecraftForge 49.0.1\n")

        assert parsed.mod_loader == "neoforge"
        assert parsed.mod_loader_version == "20.4.80-beta"
        assert parsed.minecraft_version == "1.20.4"

    def test_quilt(self):
        """Test Quilt loader detection."""
        parsed = parse_crash_log("Loading Minecraft 1.20.1 with Quilt Loader 0.23.1")

        assert parsed.mod_loader == "quilt"
        assert parsed.mod_loader_version == "0.23.1"


@pytest.mark.unit
class TestModList:
    """Test mod list extraction."""

    def test_forge_mod_list_section(self):
        """Test the Forge mod list section."""
        content = "-- Mod List --\n\tjei | 15.2.0\n\tcreate | 0.5.1"

        assert extract_mod_list(content) == ["jei", "create"]

    def test_mentions_filter_short_and_common_words(self):
        """Test short and common words are not taken as mods."""
        content = "Loaded mod xy\nLoaded mod the\nLoaded mod Lithium\nMod appleskin version 2.5.1"

        assert extract_mod_list(content) == ["lithium", "appleskin"]

    def test_capped(self):
        """Test the mod list is capped."""
        content = "\n".join(f"Loaded mod modnumber{i}" for i in range(80))

        assert len(extract_mod_list(content)) == 50


@pytest.mark.unit
class TestStackTrace:
    """Test stack trace extraction."""

    def test_bare_frames_without_exception_line(self):
        """Test bare frames are used without an exception line."""
        content = "something went wrong\n  at a.b.C.d(C.java:1)\n  at e.f.G.h(G.java:2)\n"

        assert extract_stack_trace(content) == "at a.b.C.d(C.java:1)\n  at e.f.G.h(G.java:2)"

    def test_capped_at_max_lines(self):
        """Test the trace is capped at MAX_STACK_LINES."""
        frames = "\n".join(f"\tat pkg.Cls.method{i}(Cls.java:{i})" for i in range(80))
        content = f"java.lang.IllegalStateException: broken\n{frames}\n"

        assert len(extract_stack_trace(content).split("\n")) == MAX_STACK_LINES

    def test_no_trace(self):
        """Test content without frames has no trace."""
        assert extract_stack_trace("all good here") is None

    def test_crlf_line_endings(self, forge_crash_log):
        """Test CRLF line endings leave no carriage returns."""
        trace = extract_stack_trace(forge_crash_log.replace("\n", "\r\n"))

        assert "\r" not in trace
        assert trace.split("\n")[3] == "Caused by: java.lang.IllegalStateException: Entity not registered"
        assert trace == extract_stack_trace(forge_crash_log)

    def test_leading_caused_by_appears_once(self):
        """Test a leading Caused by block is not duplicated."""
        content = "Caused by: java.lang.IllegalStateException: boom\n\tat a.b.C.d(C.java:1)\n"

        trace = extract_stack_trace(content)

        assert trace == "Caused by: java.lang.IllegalStateException: boom\n\tat a.b.C.d(C.java:1)"
        assert trace.count("Caused by:") == 1


@pytest.mark.unit
def test_empty_content_yields_empty_result():
    """Test empty content parses to an empty result."""
    assert parse_crash_log("") == ParsedCrashData()
