"""Tests for exporting a merged index to disk."""

from pathlib import Path

from tre_toolkit.export import export_index, output_path_for
from tre_toolkit.index import TreeIndex

FILES = [
    ("datatables/badge/badge_map.iff", b"badges"),
    ("string/en/ui.stf", b"hello"),
    ("string/de/ui.stf", b"hallo"),
]


def build_index(make_tre, files=FILES) -> TreeIndex:
    index = TreeIndex()
    index.merge_from(make_tre("data.tre", files))
    return index


class TestExportIndex:
    def test_writes_tree(self, make_tre, tmp_path):
        out = tmp_path / "out"
        report = export_index(build_index(make_tre), out)

        assert report.written == 3
        assert (out / "datatables" / "badge" / "badge_map.iff").read_bytes() == b"badges"
        assert (out / "string" / "de" / "ui.stf").read_bytes() == b"hallo"

    def test_filter(self, make_tre, tmp_path):
        out = tmp_path / "out"
        report = export_index(build_index(make_tre), out, name_filter="string/")

        assert report.written == 2
        assert not (out / "datatables").exists()

    def test_skip_existing(self, make_tre, tmp_path):
        out = tmp_path / "out"
        existing = out / "string" / "en" / "ui.stf"
        existing.parent.mkdir(parents=True)
        existing.write_bytes(b"local edit")

        report = export_index(build_index(make_tre), out)

        assert report.written == 2
        assert report.skipped == 1
        assert existing.read_bytes() == b"local edit"

    def test_overwrite(self, make_tre, tmp_path):
        out = tmp_path / "out"
        existing = out / "string" / "en" / "ui.stf"
        existing.parent.mkdir(parents=True)
        existing.write_bytes(b"local edit")

        report = export_index(build_index(make_tre), out, overwrite=True)

        assert report.written == 3
        assert existing.read_bytes() == b"hello"

    def test_failed_entry_does_not_stop_export(self, make_tre, tmp_path):
        index = build_index(make_tre)
        entry = index.get("string/en/ui.stf")
        entry.archive_path = tmp_path / "moved.tre"

        report = export_index(index, tmp_path / "out")

        assert report.written == 2
        assert report.failed == 1
        assert report.total == 3

    def test_write_error_does_not_stop_export(self, make_tre, tmp_path):
        """A file name reused as a directory fails only that entry."""
        index = build_index(make_tre, [("a", b"file"), ("a/b.iff", b"nested"), ("z.iff", b"z")])
        out = tmp_path / "out"

        report = export_index(index, out)

        assert report.failed == 1
        assert report.written == 2
        assert (out / "a").read_bytes() == b"file"
        assert (out / "z.iff").read_bytes() == b"z"

    def test_unsafe_names_refused(self, make_tre, tmp_path):
        index = build_index(make_tre, [("../escape.iff", b"x"), ("ok.iff", b"y")])
        report = export_index(index, tmp_path / "out")

        assert report.failed == 1
        assert report.written == 1
        assert not (tmp_path / "escape.iff").exists()

    def test_progress_callback(self, make_tre, tmp_path):
        calls = []
        export_index(build_index(make_tre), tmp_path / "out", progress=lambda *a: calls.append(a))

        assert [c[0] for c in calls] == [1, 2, 3]
        assert all(c[1] == 3 for c in calls)


class TestOutputPathFor:
    def test_nested(self):
        assert output_path_for(Path("out"), "a/b/c.iff") == Path("out") / "a" / "b" / "c.iff"

    def test_rejects_escape(self):
        assert output_path_for(Path("out"), "../c.iff") is None
        assert output_path_for(Path("out"), "/etc/passwd") is None
        assert output_path_for(Path("out"), "") is None
