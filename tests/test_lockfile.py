import itertools
from pathlib import Path

import pytest

from voltlock.config import Settings
from voltlock.errors import (
    ErrorCode,
    IntegrityMismatchError,
    LockfileDecodeError,
    LockfileEncodeError,
    LockfileIOError,
    UnsupportedAlgorithmError,
    ValidationError,
)
from voltlock.integrity import Algorithm
from voltlock.lockfile import (
    DependenciesMap,
    DependencyID,
    DependencyLock,
    LockFile,
    parse_dependencies,
    serialize_dependencies,
)


def test_new_lock_file_is_empty_and_touches_nothing(lock_path: Path) -> None:
    lock = LockFile.new(lock_path)

    assert len(lock) == 0
    assert lock.path == lock_path
    assert not lock_path.exists()


def test_save_writes_sorted_pretty_json(empty_lock: LockFile, make_record) -> None:
    empty_lock.add(("react", "^18.0.0"), make_record("react", "18.2.0", "sha512-aa"))
    empty_lock.add(("@types/node", "^20.0.0"), make_record("@types/node", "20.11.5", "sha512-bb"))

    empty_lock.save()

    assert empty_lock.path.read_text(encoding="utf-8") == (
        "{\n"
        '  "@types/node@^20.0.0": {\n'
        '    "name": "@types/node",\n'
        '    "version": "20.11.5",\n'
        '    "tarball": "https://registry.npmjs.org/@types/node/-/node-20.11.5.tgz",\n'
        '    "sha1": "sha512-bb"\n'
        "  },\n"
        '  "react@^18.0.0": {\n'
        '    "name": "react",\n'
        '    "version": "18.2.0",\n'
        '    "tarball": "https://registry.npmjs.org/react/-/react-18.2.0.tgz",\n'
        '    "sha1": "sha512-aa"\n'
        "  }\n"
        "}\n"
    )


def test_save_output_is_independent_of_insertion_order(tmp_path: Path, make_record) -> None:
    entries = [
        (("react", "^18.0.0"), make_record("react", "18.2.0")),
        (("a", "1.0.0"), make_record("a", "1.0.0")),
        (("a-b", "~2.1.0"), make_record("a-b", "2.1.4")),
        (("@babel/core", "7.x"), make_record("@babel/core", "7.24.0")),
    ]

    outputs = set()
    for index, ordering in enumerate(itertools.permutations(entries)):
        lock = LockFile.new(tmp_path / f"volt-{index}.lock")
        for key, record in ordering:
            lock.add(key, record)
        outputs.add(lock.save().read_bytes())

    assert len(outputs) == 1


def test_load_roundtrips_saved_content(empty_lock: LockFile, make_record) -> None:
    empty_lock.add(("react", "^18.0.0"), make_record("react", "18.2.0"))
    empty_lock.add(("lodash", "^4.17.0"), make_record("lodash", "4.17.21"))
    empty_lock.add(("@scope/pkg", "latest"), make_record("@scope/pkg", "0.0.1-rc.1+build.5"))
    empty_lock.save()

    loaded = LockFile.load(empty_lock.path)

    assert loaded.dependencies == empty_lock.dependencies
    assert loaded.get(("lodash", "^4.17.0")) == make_record("lodash", "4.17.21")


def test_load_accepts_unsorted_entries_and_ignores_unknown_fields(lock_path: Path) -> None:
    lock_path.write_text(
        '{"zod@^3.0.0": {"sha1": "sha1-x", "tarball": "t", "version": "3.22.4", "name": "zod", '
        '"resolved": "extra"}, "ajv@^8": {"name": "ajv", "version": "8.12.0", "tarball": "u", '
        '"sha1": "sha1-y"}}',
        encoding="utf-8",
    )

    lock = LockFile.load(lock_path)

    assert [str(key) for key in lock.dependencies] == ["ajv@^8", "zod@^3.0.0"]
    zod = lock.get("zod@^3.0.0")
    assert zod is not None
    assert zod.version == "3.22.4"
    assert zod.digest == "sha1-x"


def test_add_with_existing_key_replaces_record(empty_lock: LockFile, make_record) -> None:
    key = ("react", "^18.0.0")
    empty_lock.add(key, make_record("react", "18.2.0"))
    empty_lock.add(DependencyID.parse("react@^18.0.0"), make_record("react", "18.3.1"))

    assert len(empty_lock) == 1
    record = empty_lock.get(key)
    assert record is not None
    assert record.version == "18.3.1"


def test_contains_reports_resolved_dependencies(empty_lock: LockFile, make_record) -> None:
    empty_lock.add(("react", "^18.0.0"), make_record())

    assert ("react", "^18.0.0") in empty_lock
    assert "react@^18.0.0" in empty_lock
    assert ("react", "^17.0.0") not in empty_lock
    assert "not-a-key" not in empty_lock
    assert 42 not in empty_lock


def test_load_missing_file_raises_io_error(tmp_path: Path) -> None:
    with pytest.raises(LockfileIOError) as excinfo:
        LockFile.load(tmp_path / "missing" / "volt.lock")

    assert excinfo.value.code == ErrorCode.LOCKFILE_IO.value
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


def test_load_directory_raises_io_error(tmp_path: Path) -> None:
    with pytest.raises(LockfileIOError):
        LockFile.load(tmp_path)


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "",
        "[]",
        '{"react": {"name": "react", "version": "1.0.0", "tarball": "t", "sha1": "s"}}',
        '{"react@^1": "1.0.0"}',
        '{"react@^1": {"name": "react", "version": "1.0.0", "tarball": "t"}}',
        '{"react@^1": {"name": "react", "version": 1, "tarball": "t", "sha1": "s"}}',
        '{"react@^1": {"name": "react", "version": "^1.0.0", "tarball": "t", "sha1": "s"}}',
        "[" * 100000 + "]" * 100000,
    ],
)
def test_load_invalid_content_raises_decode_error(lock_path: Path, content: str) -> None:
    lock_path.write_text(content, encoding="utf-8")

    with pytest.raises(LockfileDecodeError) as excinfo:
        LockFile.load(lock_path)

    assert excinfo.value.code == ErrorCode.LOCKFILE_DECODE.value
    assert excinfo.value.context["path"] == str(lock_path)
    assert not isinstance(excinfo.value, LockfileIOError)


def test_load_non_utf8_content_raises_decode_error(lock_path: Path) -> None:
    lock_path.write_bytes(b"\xff\xfe{}")

    with pytest.raises(LockfileDecodeError):
        LockFile.load(lock_path)


def test_load_or_new_starts_empty_when_missing(lock_path: Path, make_record) -> None:
    lock = LockFile.load_or_new(lock_path)
    assert len(lock) == 0

    lock.add(("react", "^18.0.0"), make_record())
    lock.save()

    reloaded = LockFile.load_or_new(lock_path)
    assert len(reloaded) == 1


def test_load_or_new_propagates_decode_errors(lock_path: Path) -> None:
    lock_path.write_text("{", encoding="utf-8")

    with pytest.raises(LockfileDecodeError):
        LockFile.load_or_new(lock_path)


def test_for_project_uses_fixed_lock_filename(tmp_path: Path) -> None:
    lock = LockFile.for_project(tmp_path)
    assert lock.path == tmp_path / "volt.lock"

    custom = LockFile.for_project(tmp_path, settings=Settings(lock_filename="deps.lock"))
    assert custom.path == tmp_path / "deps.lock"


def test_save_into_missing_directory_raises_io_error(tmp_path: Path, make_record) -> None:
    lock = LockFile.new(tmp_path / "missing" / "volt.lock")
    lock.add(("react", "^18.0.0"), make_record())

    with pytest.raises(LockfileIOError) as excinfo:
        lock.save()

    assert excinfo.value.code == ErrorCode.LOCKFILE_IO.value


def test_save_truncates_previous_content(lock_path: Path, make_record) -> None:
    lock_path.write_text("x" * 4096, encoding="utf-8")
    lock = LockFile.new(lock_path)
    lock.add(("a", "1.0.0"), make_record("a", "1.0.0"))

    lock.save()

    assert LockFile.load(lock_path).dependencies == lock.dependencies


def test_save_surrogate_content_raises_encode_error_and_keeps_file(lock_path: Path) -> None:
    original = (
        '{"a@1": {"name": "a", "version": "1.0.0", "tarball": "\\ud800", "sha1": "sha1-x"}}'
    )
    lock_path.write_text(original, encoding="utf-8")
    lock = LockFile.load(lock_path)

    with pytest.raises(LockfileEncodeError) as excinfo:
        lock.save()

    assert excinfo.value.code == ErrorCode.LOCKFILE_ENCODE.value
    assert isinstance(excinfo.value.__cause__, UnicodeEncodeError)
    assert lock_path.read_text(encoding="utf-8") == original


def test_empty_map_serializes_to_empty_object() -> None:
    assert serialize_dependencies(DependenciesMap()) == b"{}\n"
    assert len(parse_dependencies("{}")) == 0


def test_non_ascii_values_are_written_verbatim(empty_lock: LockFile) -> None:
    empty_lock.add(
        ("paquet", "1.0.0"),
        DependencyLock(name="paquet", version="1.0.0", tarball="https://exemple.fr/café.tgz", sha1="s"),
    )

    text = empty_lock.save().read_text(encoding="utf-8")

    assert "café" in text
    assert LockFile.load(empty_lock.path).dependencies == empty_lock.dependencies


def test_lock_download_records_digest_and_verifies_content(empty_lock: LockFile) -> None:
    payload = b"package tarball bytes"

    record = empty_lock.lock_download(
        ("left-pad", "^1.3.0"),
        name="left-pad",
        version="1.3.0",
        tarball="https://registry.npmjs.org/left-pad/-/left-pad-1.3.0.tgz",
        data=payload,
    )

    assert record.digest.startswith("sha512-")
    assert empty_lock.verify(("left-pad", "^1.3.0"), payload) == record
    with pytest.raises(IntegrityMismatchError):
        empty_lock.verify(("left-pad", "^1.3.0"), b"tampered")


def test_lock_download_with_legacy_algorithm(empty_lock: LockFile) -> None:
    record = empty_lock.lock_download(
        "is-odd@3.0.1",
        name="is-odd",
        version="3.0.1",
        tarball="https://registry.npmjs.org/is-odd/-/is-odd-3.0.1.tgz",
        data=b"odd",
        algorithm=Algorithm.SHA1,
    )

    assert record.sha1.startswith("sha1-")
    empty_lock.verify("is-odd@3.0.1", b"odd")


def test_lock_download_rejects_unsupported_algorithm(empty_lock: LockFile) -> None:
    with pytest.raises(UnsupportedAlgorithmError):
        empty_lock.lock_download(
            ("a", "1.0.0"),
            name="a",
            version="1.0.0",
            tarball="t",
            data=b"",
            algorithm=Algorithm.SHA256,
        )

    assert len(empty_lock) == 0


def test_verify_unknown_dependency_raises(empty_lock: LockFile) -> None:
    with pytest.raises(ValidationError):
        empty_lock.verify(("ghost", "1.0.0"), b"")


def test_cbor_snapshot_is_stable_across_insertion_order(make_record, tmp_path: Path) -> None:
    first = DependenciesMap()
    second = DependenciesMap()
    records = {
        DependencyID("react", "^18.0.0"): make_record("react", "18.2.0"),
        DependencyID("vue", "^3.4.0"): make_record("vue", "3.4.21"),
        DependencyID("@types/node", "^20"): make_record("@types/node", "20.11.5"),
    }
    for key, record in records.items():
        first.insert(key, record)
    for key, record in reversed(list(records.items())):
        second.insert(key, record)

    assert first.to_cbor() == second.to_cbor()
    assert first.digest() == second.digest()
    assert len(first.digest()) == 64

    snapshot = tmp_path / "volt.lock.cbor"
    first.to_cbor(snapshot)
    assert snapshot.read_bytes() == second.to_cbor()


def test_digest_changes_with_logical_content(make_record) -> None:
    base = DependenciesMap({DependencyID("react", "^18.0.0"): make_record("react", "18.2.0")})
    bumped = DependenciesMap({DependencyID("react", "^18.0.0"): make_record("react", "18.3.1")})

    assert base.digest() != bumped.digest()
