"""
Integration tests for the outline-tags command line interface.
"""

import json

import pytest

from outline_tags.cli.main import main

pytestmark = pytest.mark.integration


def make_text_outline(tmp_path):
    source = tmp_path / "notes.md"
    source.write_text(
        "Ship the release #work/release\n"
        "Buy milk #home\n"
        "Write tests #work/qa #urgent\n",
        encoding="utf-8",
    )
    return source


def test_apply_then_tree(tmp_path, capsys):
    source = make_text_outline(tmp_path)

    assert main(["--outline", str(source), "apply"]) == 0
    assert capsys.readouterr().out.strip() == "3 rows updated"

    assert main(["--outline", str(source), "tree"]) == 0
    assert capsys.readouterr().out.splitlines() == [
        "#home",
        "#urgent",
        "#work",
        "  qa",
        "  release",
    ]


def test_tags_listing(tmp_path, capsys):
    source = make_text_outline(tmp_path)
    main(["--outline", str(source), "apply"])
    capsys.readouterr()

    assert main(["--outline", str(source), "tags"]) == 0
    assert capsys.readouterr().out.split() == ["#home", "#urgent", "#work", "#work/qa", "#work/release"]


def test_filter_and_clear(tmp_path, capsys):
    source = make_text_outline(tmp_path)
    main(["--outline", str(source), "apply"])
    capsys.readouterr()

    assert main(["--outline", str(source), "filter", "work"]) == 0
    assert capsys.readouterr().out.splitlines() == [
        "Ship the release #work/release",
        "Write tests #work/qa #urgent",
    ]
    saved = json.loads((tmp_path / "notes.json").read_text(encoding="utf-8"))
    assert saved["filter"] == "//@ot-filter"

    assert main(["--outline", str(source), "clear"]) == 0
    saved = json.loads((tmp_path / "notes.json").read_text(encoding="utf-8"))
    assert saved["filter"] == ""
    assert all("ot-filter" not in row["attributes"] for row in saved["rows"])


def test_empty_tag(tmp_path, capsys):
    source = make_text_outline(tmp_path)
    assert main(["--outline", str(source), "filter", " "]) == 1


def test_unreadable_outline(tmp_path, capsys):
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")

    assert main(["--outline", str(broken), "apply"]) == 2
    assert "error:" in capsys.readouterr().err


def test_malformed_row_reports_error(tmp_path, capsys):
    path = tmp_path / "rows.json"
    path.write_text('{"rows": ["just a string"]}', encoding="utf-8")

    assert main(["--outline", str(path), "tags"]) == 2
    assert "expected an object" in capsys.readouterr().err
