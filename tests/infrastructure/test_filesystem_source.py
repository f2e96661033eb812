from pathlib import Path

import pytest

from kb_retriever.infrastructure.documents.filesystem_source import FilesystemDocumentSource


@pytest.fixture
def knowledge(tmp_path: Path) -> Path:
    root = tmp_path / "knowledge"
    (root / "hr" / "leave").mkdir(parents=True)
    (root / "b.md").write_text("B", encoding="utf-8")
    (root / "a.txt").write_text("A", encoding="utf-8")
    (root / "hr" / "policy.MD").write_text("Policy", encoding="utf-8")
    (root / "hr" / "leave" / "notes.markdown").write_text("Notes", encoding="utf-8")
    (root / "image.png").write_bytes(b"\x89PNG")
    (root / "hr" / "data.json").write_text("{}", encoding="utf-8")
    return root


def test_lists_supported_files_as_sorted_posix_paths(knowledge: Path):
    listed = FilesystemDocumentSource(root=knowledge).list_documents()

    assert listed.ok
    assert listed.value == ["a.txt", "b.md", "hr/leave/notes.markdown", "hr/policy.MD"]


def test_location_is_resolved_root(knowledge: Path):
    assert FilesystemDocumentSource(root=knowledge).location == str(knowledge.resolve())


def test_missing_root_is_a_failure(tmp_path: Path):
    listed = FilesystemDocumentSource(root=tmp_path / "absent").list_documents()

    assert not listed.ok
    assert listed.error.message == "knowledge directory not found"
    assert listed.error.path == str((tmp_path / "absent").resolve())


def test_root_that_is_a_file_is_a_failure(tmp_path: Path):
    path = tmp_path / "knowledge"
    path.write_text("not a directory", encoding="utf-8")
    assert not FilesystemDocumentSource(root=path).list_documents().ok


def test_empty_root_lists_nothing(tmp_path: Path):
    listed = FilesystemDocumentSource(root=tmp_path).list_documents()
    assert listed.ok
    assert listed.value == []


def test_read_text_by_relative_path(knowledge: Path):
    read = FilesystemDocumentSource(root=knowledge).read_text("hr/policy.MD")
    assert read.ok
    assert read.value == "Policy"


def test_read_missing_file_is_a_failure(knowledge: Path):
    read = FilesystemDocumentSource(root=knowledge).read_text("gone.md")

    assert not read.ok
    assert read.error.path == "gone.md"
    assert read.error.message == "read failed (FileNotFoundError)"


def test_read_invalid_utf8_is_a_failure(knowledge: Path):
    (knowledge / "broken.md").write_bytes(b"\xff\xfe\xfa")
    read = FilesystemDocumentSource(root=knowledge).read_text("broken.md")

    assert not read.ok
    assert read.error.message == "read failed (UnicodeDecodeError)"


def test_listing_is_one_total_order_across_directories(tmp_path: Path):
    (tmp_path / "a").mkdir()
    (tmp_path / "b.md").write_text("B", encoding="utf-8")
    (tmp_path / "a" / "z.md").write_text("Z", encoding="utf-8")
    (tmp_path / "a.md").write_text("A", encoding="utf-8")

    listed = FilesystemDocumentSource(root=tmp_path).list_documents()

    assert listed.value == sorted(listed.value) == ["a.md", "a/z.md", "b.md"]
