"""Unit tests for pattern file naming and the pattern repository."""

from pathlib import Path

import pytest

from patternforge.errors import CorruptPatternError
from patternforge.patterns import (
    PatternRepository,
    decode_pattern,
    encode_pattern,
    parse_pattern_filename,
    pattern_filename,
)


class TestFileNames:
    """Test the pat<id>_<name>_<suffix>.pat convention."""

    @pytest.mark.parametrize(
        "generation, expected",
        [
            ("G3", "pat0001_grating_G3.pat"),
            ("G4", "pat0001_grating_G4.pat"),
            ("G4.1", "pat0001_grating_G4.pat"),
            ("G6", "pat0001_grating_G6.pat"),
        ],
    )
    def test_suffix_per_generation(self, generation, expected):
        assert pattern_filename(1, "grating", generation) == expected

    def test_zero_padded_id(self):
        assert pattern_filename(42, "loom-5.90", "G4") == "pat0042_loom-5.90_G4.pat"

    @pytest.mark.parametrize("name", ["has space", "under_score", "", "slash/name"])
    def test_invalid_names(self, name):
        with pytest.raises(ValueError):
            pattern_filename(1, name, "G4")

    @pytest.mark.parametrize("pattern_id", [0, 10000])
    def test_invalid_ids(self, pattern_id):
        with pytest.raises(ValueError):
            pattern_filename(pattern_id, "x", "G4")

    def test_parse(self):
        entry = parse_pattern_filename(Path("/tmp/pat0123_edge-fast_G6.pat"))
        assert (entry.pattern_id, entry.name, entry.suffix) == (123, "edge-fast", "G6")

    @pytest.mark.parametrize("name", ["notes.txt", "pat12_x_G4.pat", "pat0001_x_G4.bin"])
    def test_parse_non_matching(self, name):
        assert parse_pattern_filename(name) is None


class TestCodecDispatch:
    """Test generation-based encode and format sniffing on decode."""

    @pytest.mark.parametrize("generation", ["G3", "G4", "G4.1", "G6"])
    def test_round_trip(self, make_pattern, generation):
        pattern = make_pattern(1, 2, 3, generation=generation)
        decoded = decode_pattern(encode_pattern(pattern))
        assert decoded == pattern
        assert decoded.generation == generation

    def test_unrecognised_data(self):
        with pytest.raises(CorruptPatternError):
            decode_pattern(b"\x00")


class TestPatternRepository:
    """Test saving, listing and loading pattern files."""

    def test_empty_directory(self, tmp_path):
        repo = PatternRepository(tmp_path / "missing")
        assert repo.list_patterns() == []
        assert repo.next_available_id() == 1

    def test_save_assigns_sequential_ids(self, tmp_path, make_pattern):
        repo = PatternRepository(tmp_path / "out")
        first = repo.save(make_pattern(seed=1), "first")
        second = repo.save(make_pattern(seed=2), "second")
        assert first.name == "pat0001_first_G4.pat"
        assert second.name == "pat0002_second_G4.pat"
        assert [e.pattern_id for e in repo.list_patterns()] == [1, 2]

    def test_next_id_follows_highest(self, tmp_path, make_pattern):
        repo = PatternRepository(tmp_path)
        repo.save(make_pattern(), "a", pattern_id=7)
        assert repo.next_available_id() == 8

    def test_ignores_foreign_files(self, tmp_path, make_pattern):
        (tmp_path / "notes.txt").write_text("hi")
        (tmp_path / "pat9_bad.pat").write_bytes(b"")
        repo = PatternRepository(tmp_path)
        repo.save(make_pattern(), "a")
        assert len(repo.list_patterns()) == 1

    def test_id_clash_rejected(self, tmp_path, make_pattern):
        repo = PatternRepository(tmp_path)
        repo.save(make_pattern(), "a", pattern_id=3)
        with pytest.raises(FileExistsError):
            repo.save(make_pattern(), "b", pattern_id=3)

    def test_overwrite_replaces_clashing_file(self, tmp_path, make_pattern):
        repo = PatternRepository(tmp_path)
        old = repo.save(make_pattern(seed=1), "a", pattern_id=3)
        new = repo.save(make_pattern(seed=2), "b", pattern_id=3, overwrite=True)
        assert not old.exists()
        assert [e.path for e in repo.list_patterns()] == [new]

    def test_load_round_trip(self, tmp_path, make_pattern):
        repo = PatternRepository(tmp_path)
        pattern = make_pattern(2, 3, 5, gs_val=2, generation="G6")
        path = repo.save(pattern, "stars")
        loaded = repo.load(path.name)
        assert loaded == pattern
        assert loaded.metadata["pattern_id"] == 1
        assert loaded.metadata["name"] == "stars"
        assert loaded.metadata["path"] == str(path)

    def test_save_logs(self, tmp_path, make_pattern, caplog):
        repo = PatternRepository(tmp_path)
        with caplog.at_level("INFO", logger="patternforge.patterns.repository"):
            repo.save(make_pattern(), "a")
        assert "pat0001_a_G4.pat" in caplog.text
