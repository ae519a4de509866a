"""
Unit tests for installed artifacts and linker directives.
"""

import io
from pathlib import Path

import pytest

from nativedep.acquire.artifacts import (
    ArtifactRole,
    DirectiveEmitter,
    InstalledArtifact,
    LinkDirective,
    link_directives,
)


class TestLinkDirective:
    """Test directive rendering."""

    def test_link_lib(self):
        assert LinkDirective.link_lib("tensorflow").render() == (
            "cargo:rustc-link-lib=dylib=tensorflow"
        )

    def test_link_search(self):
        assert LinkDirective.link_search(Path("/out")).render() == (
            "cargo:rustc-link-search=/out"
        )

    def test_link_search_native(self):
        """Test qualified search paths used by probes."""
        directive = LinkDirective.link_search(Path("/opt/tf/lib"), "native")
        assert directive.render() == "cargo:rustc-link-search=native=/opt/tf/lib"

    def test_error(self):
        assert LinkDirective.error("boom").render() == "cargo:error=boom"

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown directive kind"):
            LinkDirective("warning", "x").render()


class TestLinkDirectives:
    """Test link_directives()."""

    def test_framework_before_primary(self, tmp_path):
        """Test ordering: framework, primary, then the search path."""
        artifacts = [
            InstalledArtifact(tmp_path / "libdemo.so", ArtifactRole.PRIMARY, "demo"),
            InstalledArtifact(tmp_path / "libdemo.so.1", ArtifactRole.SUPPORT),
            InstalledArtifact(
                tmp_path / "libdemo_framework.so",
                ArtifactRole.FRAMEWORK,
                "demo_framework",
            ),
        ]

        rendered = [d.render() for d in link_directives(artifacts, tmp_path)]

        assert rendered == [
            "cargo:rustc-link-lib=dylib=demo_framework",
            "cargo:rustc-link-lib=dylib=demo",
            f"cargo:rustc-link-search={tmp_path}",
        ]

    def test_primary_only(self, tmp_path):
        """Test a platform without framework library links only the primary."""
        artifacts = [
            InstalledArtifact(tmp_path / "demo.dll", ArtifactRole.PRIMARY, "demo"),
            InstalledArtifact(tmp_path / "demo.lib", ArtifactRole.SUPPORT),
        ]
        kinds = [d.kind for d in link_directives(artifacts, tmp_path)]
        assert kinds == ["link-lib", "link-search"]


class TestDirectiveEmitter:
    """Test DirectiveEmitter."""

    def test_writes_one_line_per_directive(self):
        """Test each directive becomes one line on the stream."""
        stream = io.StringIO()
        emitter = DirectiveEmitter(stream)

        emitter.emit_all([LinkDirective.link_lib("a"), LinkDirective.link_lib("b")])

        assert stream.getvalue().splitlines() == [
            "cargo:rustc-link-lib=dylib=a",
            "cargo:rustc-link-lib=dylib=b",
        ]
        assert [d.value for d in emitter.emitted] == ["a", "b"]

    def test_defaults_to_stdout(self, capsys):
        """Test directives go to standard output by default."""
        DirectiveEmitter().emit(LinkDirective.error("nope"))
        assert capsys.readouterr().out == "cargo:error=nope\n"
