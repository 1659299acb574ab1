"""
Tests for the evaluation harness, the bundled agents and the terminal player.
"""

import io
import json
from pathlib import Path

import pytest
import yaml

from water_sort.evaluation.run_eval import (
    EvalResult,
    evaluate_agent,
    evaluate_single_seed,
    load_agent,
    load_seed_bank,
    save_results,
    _summarize,
)
from water_sort.sort_core.config_loader import load_config
from water_sort.sort_core.env_gym import WaterSortEnv

from contestants.baseline_hint.agent import WaterSortAgent as HintAgent
from contestants.team_template.agent import WaterSortAgent as TemplateAgent
from tools.play_terminal import TerminalPlayer

ROOT = Path(__file__).resolve().parent.parent


def result(seed, solved, moves):
    return EvalResult(
        seed=seed, level=1, solved=solved, moves=moves, steps=moves,
        termination_reason="solved" if solved else "no_moves", elapsed_time=0.1
    )


class TestSeedBank:
    """Test seed bank loading."""

    def test_default_bank(self):
        """The bundled seed bank loads as (seed, level) pairs."""
        entries = load_seed_bank()
        assert len(entries) > 0
        assert all(isinstance(s, int) and isinstance(lv, int) for s, lv in entries)

    def test_levels_default_to_one(self, tmp_path):
        """Seeds without levels play level 1."""
        path = tmp_path / "seeds.json"
        path.write_text(json.dumps({"seeds": [1, 2]}))
        assert load_seed_bank(str(path)) == [(1, 1), (2, 1)]

    def test_mismatched_levels(self, tmp_path):
        """Seeds and levels must have equal length."""
        path = tmp_path / "seeds.json"
        path.write_text(json.dumps({"seeds": [1, 2], "levels": [1]}))
        with pytest.raises(ValueError):
            load_seed_bank(str(path))


class TestLoadAgent:
    """Test agent discovery."""

    def test_class_agent(self):
        """A directory with a class-based agent loads."""
        act = load_agent(str(ROOT / "contestants" / "team_template"))
        assert callable(act)

    def test_function_agent(self, tmp_path):
        """A module-level act function loads."""
        agent_file = tmp_path / "agent.py"
        agent_file.write_text("def act(obs):\n    return 0\n")
        assert load_agent(str(agent_file))(None) == 0

    def test_missing_agent(self, tmp_path):
        """A directory without agent.py raises."""
        with pytest.raises(FileNotFoundError):
            load_agent(str(tmp_path))

    def test_agent_without_act(self, tmp_path):
        """A module without act raises AttributeError."""
        agent_file = tmp_path / "agent.py"
        agent_file.write_text("VALUE = 1\n")
        with pytest.raises(AttributeError):
            load_agent(str(agent_file))


class TestSummary:
    """Move statistics cover solved episodes only."""

    def test_stats_over_solved(self):
        """Move statistics ignore unsolved episodes."""
        summary = _summarize([result(1, True, 10), result(2, True, 20), result(3, False, 99)], 1.0)

        assert summary.solve_rate == pytest.approx(2 / 3)
        assert summary.solved_count == 2
        assert summary.mean_moves == pytest.approx(15.0)
        assert summary.min_moves == 10
        assert summary.max_moves == 20
        assert summary.median_moves == pytest.approx(15.0)

    def test_nothing_solved(self):
        """With no solves the move statistics are empty."""
        summary = _summarize([result(1, False, 5)], 1.0)
        assert summary.solve_rate == 0.0
        assert summary.mean_moves is None


class TestEvaluate:
    """Run agents end to end."""

    def test_single_seed(self):
        """One episode records every action."""
        agent = HintAgent()
        res = evaluate_single_seed(agent.act, seed=3, level=1, record_actions=True)

        assert res.termination_reason in ("solved", "no_moves", "move_cap")
        assert len(res.actions) == res.steps
        if res.solved:
            assert res.termination_reason == "solved"

    def test_evaluate_and_save(self, tmp_path):
        """Results cover every seed and save as JSON."""
        agent = TemplateAgent(seed=0)
        summary = evaluate_agent(agent.act, seeds=[1, (2, 2)], verbose=False)

        assert len(summary.results) == 2
        assert [r.level for r in summary.results] == [1, 2]

        out = tmp_path / "results.json"
        save_results(summary, "template", str(out))
        data = json.loads(out.read_text())
        assert data["agent"] == "template"
        assert len(data["results"]) == 2


class TestAgents:
    """Bundled agents only choose legal pours."""

    @pytest.mark.parametrize("agent", [HintAgent(), TemplateAgent(seed=1)])
    def test_actions_are_valid(self, agent):
        """Agents only pick pours from the valid mask."""
        env = WaterSortEnv()
        obs, _ = env.reset(seed=8)
        for _ in range(20):
            action = agent.act(obs)
            i, j = env.decode_action(action)
            assert obs["valid_pour_mask"][i, j]
            obs, _, terminated, truncated, _ = env.step(action)
            if terminated or truncated:
                break

    def test_hint_agent_solves_easy_board(self):
        """The hint agent finishes a two-color board."""
        env = WaterSortEnv()
        env.reset(seed=0)
        env.session.load_board([[0, 1, 0, 1], [1, 0, 1, 0], [], []])
        obs = env.session.snapshot().to_obs_dict(env.config.max_tubes)
        agent = HintAgent()

        done = False
        info = {}
        while not done:
            obs, _, terminated, truncated, info = env.step(agent.act(obs))
            done = terminated or truncated
        assert info["solved"]

    def test_hint_agent_skips_finished_tube(self):
        """Finished tubes are never poured from."""
        env = WaterSortEnv()
        env.reset(seed=0)
        env.session.load_board([[0, 0, 0, 0], [1, 2], [2], []])
        obs = env.session.snapshot().to_obs_dict(env.config.max_tubes)

        i, j = env.decode_action(HintAgent().act(obs))

        assert i != 0
        assert (i, j) == (1, 2)


    def test_hint_agent_under_whole_run(self, tmp_path):
        """Under whole_run the hint agent still picks legal pours."""
        with open(ROOT / "water_sort" / "game_config.yaml") as f:
            raw = yaml.safe_load(f)
        raw["pour"]["policy"] = "whole_run"
        path = tmp_path / "game_config.yaml"
        with open(path, "w") as f:
            yaml.safe_dump(raw, f)

        env = WaterSortEnv(config_path=str(path))
        env.reset(seed=0)
        # Run of three B cannot fit the single free slot of tube 1
        env.session.load_board([[0, 1, 1, 1], [2, 2, 1], [0, 2], [0, 2], []])
        obs = env.session.snapshot().to_obs_dict(env.config.max_tubes)
        assert not obs["valid_pour_mask"][0, 1]

        agent = HintAgent()
        for _ in range(30):
            action = agent.act(obs)
            i, j = env.decode_action(action)
            assert obs["valid_pour_mask"][i, j]
            obs, _, terminated, truncated, info = env.step(action)
            assert info["accepted"]
            if terminated or truncated:
                break


class TestTerminalPlayer:
    """Test command handling."""

    @pytest.fixture
    def player(self):
        player = TerminalPlayer(config=load_config(), seed=1, out=io.StringIO())
        player.session.load_board([["R", "B"], ["B", "R"], [], []])
        return player

    def test_pour_command(self, player):
        """Two numbers pour the first tube into the second."""
        assert player.handle("0 2")
        assert player.session.moves == 1

    def test_click_commands(self, player):
        """Single numbers act as clicks."""
        player.handle("0")
        assert player.session.selected == 0
        player.handle("2")
        assert player.session.moves == 1

    def test_undo_and_hint(self, player):
        """h shows a hint and u undoes."""
        player.handle("h")
        assert player.session.hint == (0, 2)
        player.handle("0 2")
        player.handle("u")
        assert player.session.moves == 2

    def test_rejection_is_reported(self, player):
        """Rejected pours print their reason."""
        player.handle("0 1")
        assert "invalid_pour" in player._out.getvalue()

    def test_quit(self, player):
        """q stops the loop."""
        assert player.handle("q") is False

    def test_render_marks_selection(self, player):
        """The selected tube is marked with ">"."""
        player.handle("1")
        assert ">" in player.render().splitlines()[2]

    def test_reset_scores_command(self, tmp_path):
        """x clears the stored bests and the scores file."""
        scores = tmp_path / "best.json"
        player = TerminalPlayer(config=load_config(), seed=1, scores_path=str(scores), out=io.StringIO())
        player.session.load_board([["R", "R", "R"], ["R"], ["B", "B", "B", "B"], []])
        player.handle("1 0")
        assert player.progress.completed_levels() == [1]
        assert scores.exists()

        assert player.handle("x")

        assert player.progress.completed_levels() == []
        assert player.progress.best_overall() is None
        assert not scores.exists()
        assert "Best scores cleared" in player._out.getvalue()
