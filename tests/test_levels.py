"""Tests for hiragana_match.core.levels – YAML-based level loading."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from hiragana_match.core.catalog import HiraganaCatalog
from hiragana_match.core.levels import LevelDefinition, LevelRepository


@pytest.fixture()
def levels_dir(tmp_path: Path) -> Path:
    d = tmp_path / "data" / "levels"
    d.mkdir(parents=True)
    return d


def _write_yaml(path: Path, data: dict) -> None:
    path.write_text(yaml.dump(data, allow_unicode=True, default_flow_style=False), encoding="utf-8")


# ---------------------------------------------------------------------------
# LevelDefinition dataclass
# ---------------------------------------------------------------------------

class TestLevelDefinition:
    def test_frozen(self):
        lv = LevelDefinition(1, "T", "", "あ行", ("あ",), 0, 5)
        with pytest.raises(AttributeError):
            lv.title = "other"  # type: ignore[misc]

    def test_equality(self):
        a = LevelDefinition(1, "T", "", "あ行", ("あ",), 0, 5)
        b = LevelDefinition(1, "T", "", "あ行", ("あ",), 0, 5)
        assert a == b


# ---------------------------------------------------------------------------
# Bundled levels
# ---------------------------------------------------------------------------

class TestBundledLevels:
    def test_ten_levels_in_order(self, levels: LevelRepository):
        assert [lv.number for lv in levels.all()] == list(range(1, 11))
        assert len(levels) == 10

    def test_level_one(self, levels: LevelRepository):
        lv = levels.get(1)
        assert lv.title == "あ行をおぼえよう"
        assert lv.characters == ("あ", "い", "う", "え", "お")
        assert lv.required_stars == 0
        assert lv.question_count == 5

    def test_characters_are_cumulative(self, levels: LevelRepository):
        for lv in levels.all()[1:]:
            previous = levels.get(lv.number - 1)
            assert set(lv.characters) > set(previous.characters)
            assert lv.characters[: len(previous.characters)] == previous.characters

    def test_matches_catalog_level_sets(self, levels: LevelRepository, catalog: HiraganaCatalog):
        for lv in levels.all():
            assert list(lv.characters) == catalog.entries_for_level(lv.number)

    def test_required_stars_and_question_counts(self, levels: LevelRepository):
        assert [lv.required_stars for lv in levels.all()] == [0, 2, 4, 6, 8, 10, 12, 14, 16, 18]
        assert [lv.question_count for lv in levels.all()] == [5, 5, 6, 6, 7, 7, 8, 8, 9, 10]

    def test_last_level_has_all_kana(self, levels: LevelRepository):
        assert len(levels.get(10).characters) == 46

    def test_find_missing_is_none(self, levels: LevelRepository):
        assert levels.find(0) is None
        assert levels.find(11) is None

    def test_get_missing_raises(self, levels: LevelRepository):
        with pytest.raises(KeyError):
            levels.get(42)


# ---------------------------------------------------------------------------
# LevelRepository – custom directories
# ---------------------------------------------------------------------------

class TestLevelRepositoryHappy:
    def test_two_levels_sorted_numerically(self, levels_dir: Path, catalog: HiraganaCatalog):
        _write_yaml(levels_dir / "level2.yaml", {"title": "Two", "row": "か行"})
        _write_yaml(levels_dir / "level1.yaml", {"title": "One", "row": "あ行"})
        repo = LevelRepository(catalog, levels_dir)
        assert [lv.title for lv in repo.all()] == ["One", "Two"]
        assert len(repo.get(2).characters) == 10

    def test_defaults(self, levels_dir: Path, catalog: HiraganaCatalog):
        _write_yaml(levels_dir / "level1.yaml", {"title": "  Padded  ", "row": "あ行"})
        lv = LevelRepository(catalog, levels_dir).get(1)
        assert lv.title == "Padded"
        assert lv.description == ""
        assert lv.required_stars == 0
        assert lv.question_count == 5

    def test_non_level_files_ignored(self, levels_dir: Path, catalog: HiraganaCatalog):
        _write_yaml(levels_dir / "level1.yaml", {"title": "One", "row": "あ行"})
        _write_yaml(levels_dir / "levelx.yaml", {"title": "X", "row": "か行"})
        assert len(LevelRepository(catalog, levels_dir)) == 1


class TestLevelRepositoryErrors:
    def test_missing_directory(self, tmp_path: Path, catalog: HiraganaCatalog):
        with pytest.raises(FileNotFoundError):
            LevelRepository(catalog, tmp_path / "missing")

    def test_no_yaml_files(self, levels_dir: Path, catalog: HiraganaCatalog):
        with pytest.raises(ValueError, match="No level files"):
            LevelRepository(catalog, levels_dir)

    def test_empty_yaml(self, levels_dir: Path, catalog: HiraganaCatalog):
        (levels_dir / "level1.yaml").write_text("", encoding="utf-8")
        with pytest.raises(ValueError, match="expected YAML"):
            LevelRepository(catalog, levels_dir)

    def test_missing_title(self, levels_dir: Path, catalog: HiraganaCatalog):
        _write_yaml(levels_dir / "level1.yaml", {"row": "あ行"})
        with pytest.raises(ValueError, match="missing or invalid 'title'"):
            LevelRepository(catalog, levels_dir)

    def test_unknown_row(self, levels_dir: Path, catalog: HiraganaCatalog):
        _write_yaml(levels_dir / "level1.yaml", {"title": "T", "row": "ア行"})
        with pytest.raises(ValueError, match="unknown kana row"):
            LevelRepository(catalog, levels_dir)

    def test_gap_in_numbering(self, levels_dir: Path, catalog: HiraganaCatalog):
        _write_yaml(levels_dir / "level1.yaml", {"title": "One", "row": "あ行"})
        _write_yaml(levels_dir / "level3.yaml", {"title": "Three", "row": "さ行"})
        with pytest.raises(ValueError, match="without gaps"):
            LevelRepository(catalog, levels_dir)

    def test_non_integer_question_count(self, levels_dir: Path, catalog: HiraganaCatalog):
        _write_yaml(levels_dir / "level1.yaml", {"title": "T", "row": "あ行", "question_count": "many"})
        with pytest.raises(ValueError, match="must be integers"):
            LevelRepository(catalog, levels_dir)

    def test_zero_question_count(self, levels_dir: Path, catalog: HiraganaCatalog):
        _write_yaml(levels_dir / "level1.yaml", {"title": "T", "row": "あ行", "question_count": 0})
        with pytest.raises(ValueError, match="must be positive"):
            LevelRepository(catalog, levels_dir)
