import json

import pytest
from unittest.mock import patch

from notecards.app import (
    SessionExitRequested, cmd_decks, cmd_delete, cmd_export, cmd_import, run_practice,
    session_prompt,
)
from notecards.db import init_db
from notecards.decks import get_deck, list_decks, save_deck
from notecards.engine import ReviewEngine
from notecards.models import Grade


def test_session_exit_requested_is_exception():
    with pytest.raises(SessionExitRequested):
        raise SessionExitRequested()


def test_session_prompt_raises_on_q():
    with patch("notecards.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_raises_on_menu():
    with patch("notecards.app.Prompt.ask", return_value="menu"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_returns_normal_input():
    with patch("notecards.app.Prompt.ask", return_value="f"):
        assert session_prompt("test prompt") == "f"


def test_run_practice_grades_all_cards(tmp_db, make_item, clock):
    init_db(tmp_db)
    save_deck(tmp_db, "d", [make_item("a"), make_item("b")])
    items = get_deck(tmp_db, "d")

    # flip + good, flip + easy; the session ends once every card is graded
    with patch("notecards.app.Prompt.ask", side_effect=["f", "3", "f", "4"]):
        session = run_practice(tmp_db, "d", items, engine=ReviewEngine(clock=clock))

    assert session.cards_reviewed == 2
    assert session.cards_remaining == 0
    assert [r.grade for r in session.results] == [Grade.GOOD, Grade.EASY]
    stored = {i.id: i for i in get_deck(tmp_db, "d")}
    assert stored["a"].review_count == 1
    assert stored["b"].next_interval == 86_400_000 * 4


def test_run_practice_requires_flip_before_grading(tmp_db, make_item, clock):
    init_db(tmp_db)
    save_deck(tmp_db, "d", [make_item("a")])
    items = get_deck(tmp_db, "d")
    with patch("notecards.app.Prompt.ask", side_effect=["1", "f", "1"]):
        session = run_practice(tmp_db, "d", items, engine=ReviewEngine(clock=clock))
    assert [r.grade for r in session.results] == [Grade.AGAIN]


def test_run_practice_quit_early_saves_progress(tmp_db, make_item, clock):
    init_db(tmp_db)
    save_deck(tmp_db, "d", [make_item("a"), make_item("b"), make_item("c")])
    items = get_deck(tmp_db, "d")
    # skip a, grade b, then quit
    with patch("notecards.app.Prompt.ask", side_effect=["s", "f", "2", "q"]):
        session = run_practice(tmp_db, "d", items, engine=ReviewEngine(clock=clock))
    assert session.cards_reviewed == 1
    assert session.cards_remaining == 2
    assert session.results[0].card_id == "b"
    stored = {i.id: i for i in get_deck(tmp_db, "d")}
    assert stored["b"].review_count == 1
    assert stored["a"].review_count == 0


def test_run_practice_last_card_graded_hides_answer(tmp_db, make_item, clock):
    init_db(tmp_db)
    save_deck(tmp_db, "d", [make_item("a"), make_item("b")])
    items = get_deck(tmp_db, "d")
    engine = ReviewEngine(clock=clock)
    # go to b, grade it, then quit with a still ungraded
    with patch("notecards.app.Prompt.ask", side_effect=["n", "f", "3", "q"]) as ask:
        session = run_practice(tmp_db, "d", items, engine=engine)
    assert [r.card_id for r in session.results] == ["b"]
    assert engine.flipped is False
    assert ask.call_args_list[-1].kwargs["default"] == "f"


def test_run_practice_no_cards(tmp_db):
    init_db(tmp_db)
    assert run_practice(tmp_db, "d", []) is None


def test_cmd_import_saves_deck(tmp_db, tmp_path):
    init_db(tmp_db)
    f = tmp_path / "capitals.txt"
    f.write_text("Q: Capital of France?\nA: Paris\n\nQ: Capital of Peru?\nA: Lima\n")
    with patch("notecards.app.Prompt.ask", side_effect=[str(f), "World Capitals"]):
        cmd_import(tmp_db)
    decks = list_decks(tmp_db)
    assert decks[0]["deck_id"] == "world-capitals"
    assert decks[0]["cards"] == 2


def test_cmd_import_defaults_to_anki_deck_header(tmp_db, tmp_path):
    init_db(tmp_db)
    f = tmp_path / "export.txt"
    f.write_text(
        "#separator:Tab\n#notetype:Basic\n#deck:Spanish Verbs\n"
        "#columns:Front\tBack\nhablar\tto speak\nser\tto be\n",
        encoding="utf-8",
    )

    def accept_default(prompt, **kwargs):
        return kwargs.get("default", str(f))

    with patch("notecards.app.Prompt.ask", side_effect=accept_default):
        cmd_import(tmp_db)
    assert [d["deck_id"] for d in list_decks(tmp_db)] == ["spanish-verbs"]


def test_cmd_import_missing_file(tmp_db, tmp_path):
    init_db(tmp_db)
    with patch("notecards.app.Prompt.ask", side_effect=[str(tmp_path / "nope.txt")]):
        cmd_import(tmp_db)
    assert list_decks(tmp_db) == []


def test_cmd_export_writes_qa_text(tmp_db, tmp_path, make_item):
    init_db(tmp_db)
    save_deck(tmp_db, "d", [make_item("a", front="2+2?", back="4")])
    out = tmp_path / "out.txt"
    with patch("notecards.app.Prompt.ask", side_effect=["d", "txt", str(out)]):
        cmd_export(tmp_db)
    assert out.read_text() == "Q: 2+2?\nA: 4\n\n"


def test_cmd_export_writes_json(tmp_db, tmp_path, make_item):
    init_db(tmp_db)
    save_deck(tmp_db, "d", [make_item("a", front="2+2?", back="4")])
    out = tmp_path / "out.json"
    with patch("notecards.app.Prompt.ask", side_effect=["d", "json", str(out)]):
        cmd_export(tmp_db)
    data = json.loads(out.read_text())
    assert [(c["id"], c["front"], c["back"]) for c in data] == [("a", "2+2?", "4")]


def test_cmd_decks_lists_next_review(tmp_db, make_item):
    init_db(tmp_db)
    save_deck(tmp_db, "d", [make_item("a")])
    with patch("notecards.app.get_deck") as get_deck_mock, \
            patch("notecards.app.console.print") as print_mock:
        cmd_decks(tmp_db)
    get_deck_mock.assert_not_called()
    table = print_mock.call_args[0][0]
    assert list(table.columns[0].cells) == ["d"]
    assert list(table.columns[2].cells) == ["Today"]


def test_cmd_delete_confirms(tmp_db, make_item):
    init_db(tmp_db)
    save_deck(tmp_db, "d", [make_item("a")])
    with patch("notecards.app.Prompt.ask", return_value="d"), \
            patch("notecards.app.Confirm.ask", return_value=False):
        cmd_delete(tmp_db)
    assert len(get_deck(tmp_db, "d")) == 1
    with patch("notecards.app.Prompt.ask", return_value="d"), \
            patch("notecards.app.Confirm.ask", return_value=True):
        cmd_delete(tmp_db)
    assert get_deck(tmp_db, "d") == []
