import json

import pytest

from familyforest.database import create_database, store_data
from familyforest.main import main


@pytest.fixture
def export(tmp_path):
    path = tmp_path / "family.json"
    path.write_text(
        json.dumps(
            {
                "people": [
                    {"id": "gp", "firstName": "Grandpa"},
                    {"id": "gm", "firstName": "Grandma"},
                    {"id": "dad", "firstName": "Dad"},
                    {"id": "loner", "firstName": "Lone", "lastName": "Wolf"},
                ],
                "relationships": [
                    {"parentId": "gp", "childId": "dad"},
                    {"parentId": "gm", "childId": "dad"},
                ],
                "spouses": [{"spouse1Id": "gm", "spouse2Id": "gp"}],
            }
        )
    )
    return path


def test_writes_layout_json(tmp_path, export):
    output = tmp_path / "layout.json"
    assert main([str(export), "-o", str(output)]) == 0

    data = json.loads(output.read_text())
    assert [r["kind"] for r in data["roots"]] == ["couple", "person"]
    assert data["roots"][0]["children"][0]["person"]["id"] == "dad"
    assert {"kind": "spouse", "fromId": "gm", "toId": "gp"} in data["edges"]


def test_prints_layout_without_outputs(capsys, export):
    assert main([str(export), "--order-by-birth"]) == 0
    assert '"roots"' in capsys.readouterr().out


def test_lists_orphans(capsys, export):
    assert main([str(export), "--list-orphans"]) == 0
    assert capsys.readouterr().out == "loner\tLone Wolf\n"


def test_reads_sqlite_snapshot(tmp_path, three_generations):
    db_path = tmp_path / "family_tree.db"
    conn = create_database(db_path)
    store_data(conn, *three_generations)
    conn.close()
    output = tmp_path / "layout.json"

    assert main([str(db_path), "-o", str(output), "--dot", str(tmp_path / "tree.dot")]) == 0
    assert len(json.loads(output.read_text())["roots"]) == 1
    assert (tmp_path / "tree.dot").read_text().startswith("digraph")


@pytest.mark.parametrize(
    "name, content",
    [
        ("missing.json", None),
        ("broken.json", "[1, 2"),
        ("gone.db", None),
        ("nested.json", '[{"id": "a", "childRelations": [{"parent": "x", "childId": "a"}]}]'),
    ],
)
def test_unreadable_input_exits_2(tmp_path, name, content):
    path = tmp_path / name
    if content is not None:
        path.write_text(content)
    assert main([str(path)]) == 2


def test_bad_settings_exit_2(export):
    assert main([str(export), "--node-width", "0"]) == 2
