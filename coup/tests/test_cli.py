"""
Tests for the command-line interface.

Tests:
- AI-only simulations
- Argument errors
- The interactive game with scripted input
"""

import pytest

from .. import cli


def scripted_input(monkeypatch, answers):
    """Feed input() from a list, then end the input stream."""
    answers = iter(answers)

    def fake_input(prompt=""):
        try:
            return next(answers)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", fake_input)


class TestSimulate:
    """Tests for coup simulate."""

    def test_simulate_games(self, capsys):
        """simulate plays and summarizes games."""
        wins = cli.main(["simulate", "--games", "2", "--players", "3", "--seed", "1"])
        out = capsys.readouterr().out

        assert "Game 1:" in out
        assert "Game 2:" in out
        assert "Played 2 game(s) with 3 AI players" in out
        assert sum(wins.values()) <= 2
        assert all(name.startswith("AI Player") for name in wins)

    def test_same_seed_same_results(self, capsys):
        """The same seed gives the same results."""
        first = cli.main(["simulate", "--games", "1", "--players", "2", "--seed", "8"])
        second = cli.main(["simulate", "--games", "1", "--players", "2", "--seed", "8"])
        assert first == second

    @pytest.mark.parametrize("players", ["1", "7"])
    def test_bad_player_count(self, capsys, players):
        """A bad player count exits with code 1."""
        with pytest.raises(SystemExit) as exc:
            cli.main(["simulate", "--players", players])
        assert exc.value.code == 1
        assert "between 2 and 6" in capsys.readouterr().out

    def test_no_command(self, capsys):
        """No command exits with usage."""
        with pytest.raises(SystemExit):
            cli.main([])


class TestPlay:
    """Tests for coup play."""

    def test_end_of_input_says_goodbye(self, monkeypatch, capsys):
        """End of input ends the game politely."""
        scripted_input(monkeypatch, [])
        cli.main(["play", "--name", "Ada", "--bots", "1", "--seed", "2"])
        out = capsys.readouterr().out
        assert "Game started!" in out
        assert "Ada" in out
        assert out.rstrip().endswith("Goodbye.")

    def test_too_many_bots(self, monkeypatch, capsys):
        """Too many bots exits with code 1."""
        scripted_input(monkeypatch, [])
        with pytest.raises(SystemExit) as exc:
            cli.main(["play", "--bots", "6"])
        assert exc.value.code == 1
        assert "Error: Coup needs 2 to 6 players" in capsys.readouterr().out

    def test_always_first_option_finishes(self, monkeypatch, capsys):
        """Always picking the first option finishes a game."""
        scripted_input(monkeypatch, ["1"] * 2000)
        state = cli.main(["play", "--bots", "2", "--seed", "4"])
        out = capsys.readouterr().out
        assert state.winner is not None
        assert " wins!" in out


class TestPrompts:
    """Tests for the numbered prompts."""

    def test_choose_retries_until_valid(self, monkeypatch, capsys):
        """Bad choices are asked again."""
        scripted_input(monkeypatch, ["9", "x", "2"])
        assert cli._choose("Pick:", ["a", "b"]) == 1
        assert capsys.readouterr().out.count("Please enter one of the numbers above.") == 2

    def test_choose_many(self, monkeypatch):
        """Repeated picks are asked again."""
        scripted_input(monkeypatch, ["1 1", "1,3"])
        assert cli._choose_many("Keep:", ["a", "b", "c"], 2) == [0, 2]
