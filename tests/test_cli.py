"""Tests for the typer command-line interface."""

from __future__ import annotations

import json

from typer.testing import CliRunner

from mealsync.cli import app

runner = CliRunner()

RECIPE_TEXT = "2 kg potatoes\n1 kg potatoes\nsalt\n3 apples\n"


def test_parse_plain_from_stdin():
    result = runner.invoke(app, ["parse", "-"], input=RECIPE_TEXT)

    assert result.exit_code == 0
    assert result.stdout.splitlines() == ["• 3 × apples", "• 3 kg × potatoes", "• 1 × salt"]


def test_parse_categorized_file(tmp_path):
    source = tmp_path / "week.txt"
    source.write_text(RECIPE_TEXT, encoding="utf-8")

    result = runner.invoke(app, ["parse", str(source), "--format", "categorized"])

    assert result.exit_code == 0
    assert result.stdout.startswith("🥬 Produce\n• 3 kg × potatoes")
    assert "📦 Other\n• 3 × apples" in result.stdout


def test_parse_json_output():
    result = runner.invoke(app, ["parse", "-", "-f", "json"], input=RECIPE_TEXT)

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert [item["id"] for item in payload["items"]] == ["apples", "potatoes|kg", "salt"]
    assert [bucket["name"] for bucket in payload["categories"]] == ["Produce", "Pantry", "Other"]


def test_parse_saves_download_file(tmp_path):
    result = runner.invoke(
        app,
        ["parse", "-", "--format", "download", "--save", str(tmp_path / "out")],
        input=RECIPE_TEXT,
    )

    assert result.exit_code == 0
    saved = (tmp_path / "out" / "grocery_list.txt").read_text(encoding="utf-8")
    assert saved == "3\tapples\n3\tpotatoes (kg)\n1\tsalt"


def test_categories_lists_matching_order():
    result = runner.invoke(app, ["categories"])

    assert result.exit_code == 0
    names = [line.split(":")[0].split(" ", 1)[1] for line in result.stdout.splitlines()]
    assert names == ["Produce", "Dairy", "Pantry", "Protein", "Bakery", "Beverages"]
