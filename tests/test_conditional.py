"""Tests for perch.routing.conditional — ordered conditional route table."""

import logging

import pytest

from perch.diagnostics import DiagnosticsLog
from perch.predicates import PredicateSnapshot
from perch.routing.conditional import ConditionalRouteTable, full_match, normalize_predicates


def _table(*entries: tuple[object, str]) -> ConditionalRouteTable:
    table = ConditionalRouteTable()
    for predicates, controller in entries:
        table.add(predicates, controller)  # type: ignore[arg-type]
    return table


class TestNormalize:
    def test_sequence_keeps_order(self) -> None:
        assert normalize_predicates(["single", "category"]) == ("single", "category")

    def test_comma_string(self) -> None:
        assert normalize_predicates("single, category") == ("single", "category")

    def test_empty_forms(self) -> None:
        assert normalize_predicates("") == ()
        assert normalize_predicates([]) == ()


class TestFullMatch:
    @pytest.mark.parametrize(
        ("predicates", "snapshot", "expected"),
        [
            (("home",), {"home": True}, True),
            (("home",), {"home": False}, False),
            (("single", "category"), {"single": True, "category": True}, True),
            (("single", "category"), {"single": True, "category": False}, False),
            ((), {}, True),
            ((), {"home": False}, True),
            (("unknown_name",), {"home": True}, False),
            (("unknown_name",), {}, False),
        ],
    )
    def test_and_semantics(self, predicates, snapshot, expected) -> None:
        assert full_match(predicates, snapshot) is expected

    def test_truthy_non_bool_does_not_count(self) -> None:
        assert full_match(("home",), {"home": 1}) is False  # type: ignore[dict-item]


class TestMatch:
    def test_first_full_match_wins(self) -> None:
        table = _table((["home"], "HomeController"), (["home", "front_page"], "FrontController"))
        snapshot = PredicateSnapshot({"home": True, "front_page": True})
        assert table.match(snapshot).controller == "HomeController"

    def test_later_entry_matches_when_earlier_fails(self) -> None:
        table = _table((["single"], "PostController"), (["home"], "HomeController"))
        assert table.match(PredicateSnapshot({"home": True})).controller == "HomeController"

    def test_no_match(self) -> None:
        table = _table((["single"], "PostController"))
        assert table.match(PredicateSnapshot({"home": True})) is None

    def test_empty_table(self) -> None:
        assert ConditionalRouteTable().match(PredicateSnapshot({"home": True})) is None

    def test_empty_set_is_catch_all(self) -> None:
        table = _table((["home"], "HomeController"), ([], "DefaultController"))
        assert table.match(PredicateSnapshot({"home": False})).controller == "DefaultController"

    def test_early_catch_all_shadows_everything(self) -> None:
        table = _table(([], "DefaultController"), (["home"], "HomeController"))
        assert table.match(PredicateSnapshot({"home": True})).controller == "DefaultController"

    def test_writes_diagnostics(self) -> None:
        log = DiagnosticsLog(enabled=True, level=logging.DEBUG)
        table = _table((["single"], "PostController"), (["home"], "HomeController"))
        table.match(PredicateSnapshot({"home": True}), log)
        assert log.lines == (
            "checking conditional match for: single",
            "no match found.",
            "checking conditional match for: home",
            "matched: HomeController",
        )

    def test_disabled_log_does_not_change_result(self) -> None:
        table = _table((["home"], "HomeController"))
        log = DiagnosticsLog(enabled=False)
        assert table.match(PredicateSnapshot({"home": True}), log).controller == "HomeController"
        assert log.lines == ()


class TestReRegistration:
    def test_same_controller_does_not_duplicate(self) -> None:
        table = _table((["home"], "HomeController"), (["home"], "HomeController"))
        assert len(table) == 1

    def test_different_controller_overwrites_in_place(self) -> None:
        table = _table(
            (["home"], "HomeController"),
            ([], "DefaultController"),
            (["home"], "NewHomeController"),
        )
        assert len(table) == 2
        assert [r.controller for r in table] == ["NewHomeController", "DefaultController"]

    def test_string_and_list_share_a_key(self) -> None:
        table = _table(("single,category", "A"), (["single", "category"], "B"))
        assert len(table) == 1
        assert table.routes[0].controller == "B"

    def test_different_order_is_a_different_key(self) -> None:
        table = _table((["single", "category"], "A"), (["category", "single"], "B"))
        assert len(table) == 2
        assert "single,category" in table

    def test_cannot_add_after_compile(self) -> None:
        table = ConditionalRouteTable()
        table.compile()
        with pytest.raises(RuntimeError, match="after compilation"):
            table.add(["home"], "HomeController")

    def test_clear(self) -> None:
        table = _table((["home"], "HomeController"), ([], "DefaultController"))
        table.clear()
        assert len(table) == 0
        table.compile()
        with pytest.raises(RuntimeError, match="after compilation"):
            table.clear()
