"""
Tests for tubes, pour legality, transfer amounts and win detection.
"""

import dataclasses

import pytest

from water_sort.sort_core.config_loader import load_config, PourConfig
from water_sort.sort_core.hints import find_hint
from water_sort.sort_core.rules import (
    PourRules,
    amount_transferred,
    is_board_complete,
    is_solved,
    is_valid_pour,
    pourable_count,
)
from water_sort.sort_core.tube import (
    Tube,
    color_counts,
    make_board,
    restore_board,
    snapshot_board,
)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def rules(config):
    return PourRules(config)


@pytest.fixture
def whole_run_rules(config):
    return PourRules(dataclasses.replace(config, pour=PourConfig("whole_run")))


class TestTube:
    """Test the tube stack."""

    def test_rejects_overfill(self):
        """More segments than capacity is a construction error."""
        with pytest.raises(ValueError):
            Tube(4, ["R", "R", "B", "B", "G"])

    def test_rejects_zero_capacity(self):
        """A tube must hold at least one segment."""
        with pytest.raises(ValueError):
            Tube(0)

    def test_top_run(self):
        """Top run counts the consecutive same-color segments on top."""
        assert Tube(4, ["R", "B", "B"]).top_run() == 2
        assert Tube(4, ["B", "B", "B", "B"]).top_run() == 4
        assert Tube(4).top_run() == 0

    def test_pop_run_partial(self):
        """pop_run(n) removes only n segments of the top run."""
        tube = Tube(4, ["R", "B", "B", "B"])
        color, removed = tube.pop_run(2)
        assert (color, removed) == ("B", 2)
        assert tube.segments == ("R", "B")

    def test_pop_run_never_crosses_colors(self):
        """Asking for more than the run removes only the run."""
        tube = Tube(4, ["R", "B"])
        assert tube.pop_run(3) == ("B", 1)
        assert tube.segments == ("R",)

    def test_pop_run_empty(self):
        """An empty tube yields (None, 0)."""
        assert Tube(4).pop_run() == (None, 0)

    def test_push_without_room_raises(self):
        """Pushing past capacity raises and leaves the tube unchanged."""
        tube = Tube(4, ["R", "R", "R"])
        with pytest.raises(ValueError):
            tube.push("R", 2)
        assert len(tube) == 3

    def test_solved_states(self):
        """Solved means empty, or full with a single color."""
        assert Tube(4).is_solved()
        assert Tube(4, ["R"] * 4).is_solved()
        assert not Tube(4, ["R"] * 3).is_solved()
        assert not Tube(4, ["R", "R", "R", "B"]).is_solved()

    def test_snapshot_is_independent(self):
        """Later board mutations never leak into a snapshot."""
        board = make_board([["R", "B"], []], 4)
        snap = snapshot_board(board)
        board[1].push("B")
        assert snap == (("R", "B"), ())
        assert restore_board(snap, 4)[1].is_empty()


class TestPourLegality:
    """isValidPour is true iff src non-empty, dst not full, and dst empty or tops match."""

    @pytest.mark.parametrize("src, dst, expected", [
        ([], [], False),
        ([], ["R"], False),
        (["R"], ["R", "R", "R", "R"], False),
        (["R"], ["B", "B", "B", "R"], False),
        (["R"], [], True),
        (["B", "R"], ["R"], True),
        (["R", "B"], ["R"], False),
    ])
    def test_legality_table(self, src, dst, expected):
        """Legality matches the rule for every source/destination shape."""
        assert is_valid_pour(Tube(4, src), Tube(4, dst)) is expected

    def test_scenario_mismatched_tops(self):
        """[[R,B],[B,R],[],[]]: tube0 -> tube1 is illegal, tube0 -> tube2 moves B."""
        board = make_board([["R", "B"], ["B", "R"], [], []], 4)
        assert not is_valid_pour(board[0], board[1])
        assert is_valid_pour(board[0], board[2])

        moved = PourRules(policy="clamp").apply(board, 0, 2)

        assert moved == 1
        assert board[0].segments == ("R",)
        assert board[2].segments == ("B",)

    def test_scenario_single_top_segment(self, rules):
        """[[R,R,G],[],[],[]]: the top run of G has length 1."""
        board = make_board([["R", "R", "G"], [], [], []], 4)
        assert pourable_count(board[0]) == 1

        rules.apply(board, 0, 1)

        assert board[0].segments == ("R", "R")
        assert board[1].segments == ("G",)

    def test_pour_effect(self, rules):
        """A pour of k segments shrinks the source and grows the destination by k."""
        board = make_board([["G", "B", "B"], ["B"], []], 4)
        before_src, before_dst = len(board[0]), len(board[1])
        k = pourable_count(board[0])

        moved = rules.apply(board, 0, 1)

        assert moved == k == 2
        assert len(board[0]) == before_src - k
        assert len(board[1]) == before_dst + k
        assert board[1].segments[-k:] == ("B",) * k

    def test_same_index_is_noop(self, rules):
        """Pouring a tube into itself moves nothing."""
        board = make_board([["R", "B"], []], 4)
        assert rules.apply(board, 0, 0) == 0
        assert snapshot_board(board) == (("R", "B"), ())

    def test_illegal_apply_changes_nothing(self, rules):
        """An illegal pour leaves the board untouched."""
        board = make_board([["R", "B"], ["B", "R"]], 4)
        assert rules.apply(board, 0, 1) == 0
        assert snapshot_board(board) == (("R", "B"), ("B", "R"))

    def test_unknown_policy_raises(self, config):
        """Policies other than clamp and whole_run are rejected."""
        with pytest.raises(ValueError):
            PourRules(config, policy="spill")


class TestPourPolicies:
    """Clamp moves what fits; whole_run refuses partial pours."""

    def test_clamp_law(self, rules):
        """Clamp moves min(run, free space) and leaves the rest on the source."""
        board = make_board([["R", "B", "B", "B"], ["G", "G", "B"]], 4)
        assert amount_transferred(board[0], board[1]) == 1
        assert rules.transfer_count(board[0], board[1]) == 1

        moved = rules.apply(board, 0, 1)

        assert moved == 1
        # Remaining run stays on top of the source
        assert board[0].segments == ("R", "B", "B")
        assert board[1].segments == ("G", "G", "B", "B")
        assert all(len(t) <= t.capacity for t in board)

    def test_whole_run_refuses_partial(self, whole_run_rules):
        """Under whole_run a run larger than the free space cannot be poured."""
        board = make_board([["R", "B", "B", "B"], ["G", "G", "B"]], 4)
        assert whole_run_rules.policy == "whole_run"
        assert not whole_run_rules.can_pour(board[0], board[1])
        assert whole_run_rules.apply(board, 0, 1) == 0
        assert snapshot_board(board) == (("R", "B", "B", "B"), ("G", "G", "B"))

    def test_whole_run_allows_fitting_run(self, whole_run_rules):
        """Under whole_run a run that fits moves completely."""
        board = make_board([["R", "B", "B"], ["B"]], 4)
        assert whole_run_rules.apply(board, 0, 1) == 2
        assert board[1].segments == ("B", "B", "B")

    def test_legal_pours_ascending(self, rules):
        """legal_pours lists every legal pair in (from, to) order."""
        board = make_board([["R", "B"], ["B", "R"], [], []], 4)
        assert rules.legal_pours(board) == [(0, 2), (0, 3), (1, 2), (1, 3)]


class TestWinDetection:
    """isBoardComplete iff every tube is empty or full and uniform."""

    def test_sorted_board_is_complete(self):
        """[[R,R,R,R],[B,B,B,B],[],[]] is complete before any move."""
        board = make_board([["R"] * 4, ["B"] * 4, [], []], 4)
        assert is_board_complete(board)

    def test_partial_tube_is_not_complete(self):
        """A uniform but partly filled tube is not solved."""
        board = make_board([["R"] * 4, ["B"] * 3, ["B"], []], 4)
        assert not is_board_complete(board)
        assert not is_solved(board[1])

    def test_mixed_full_tube_is_not_complete(self):
        """Full tubes with mixed colors are not solved."""
        board = make_board([["R", "R", "R", "B"], ["B", "B", "B", "R"]], 4)
        assert not is_board_complete(board)

    def test_conservation_under_pours(self, rules):
        """Color counts and capacity hold across a chain of pours."""
        board = make_board([["R", "B", "G", "R"], ["G", "B", "R", "B"], ["G", "R", "B", "G"], [], []], 4)
        before = color_counts(board)
        for _ in range(20):
            pours = rules.legal_pours(board)
            if not pours:
                break
            rules.apply(board, *pours[-1])
            assert color_counts(board) == before
            assert all(0 <= len(t) <= t.capacity for t in board)


class TestHints:
    """Hint search returns the first legal pair in (from, to) order."""

    def test_first_pair(self):
        """The first legal pair is found by scanning sources then destinations."""
        board = make_board([["R", "B"], ["B", "R"], [], []], 4)
        assert find_hint(board) == (0, 2)

    def test_skips_empty_sources(self):
        """Empty tubes are never offered as sources."""
        board = make_board([[], ["R"], ["R"]], 4)
        assert find_hint(board) == (1, 0)

    def test_deterministic(self, rules):
        """The same board always yields the same hint."""
        board = make_board([["G", "R"], ["B", "R"], ["R", "G"], []], 4)
        first = find_hint(board, rules)
        assert all(find_hint(board, rules) == first for _ in range(5))
        assert first == (0, 1)

    def test_none_when_stuck(self):
        """No legal pour means no hint."""
        board = make_board([["R", "B", "R", "B"], ["B", "R", "B", "R"]], 4)
        assert find_hint(board) is None

    def test_respects_policy(self, whole_run_rules):
        """With rules, hints skip pours the policy forbids."""
        board = make_board([["B", "B", "B"], ["R", "R", "B"]], 4)
        assert find_hint(board) == (0, 1)
        assert find_hint(board, whole_run_rules) == (1, 0)
