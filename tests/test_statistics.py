"""BDD tests for team statistics."""

import pytest
from pytest_bdd import scenarios, given, when, then, parsers

from youth_football_mcp.resolvers import opponent_detail
from youth_football_mcp.stats import compute_leaderboard, compute_summary, filter_matches

# Load scenarios from feature file
scenarios("statistics.feature")


@pytest.fixture
def context():
    """Shared context for test steps."""
    return {}


@given("the store is populated with sample data")
def store_populated(store_with_sample_data, context):
    context["store"] = store_with_sample_data


@when("I compute the team summary")
def team_summary(context):
    store = context["store"]
    context["summary"] = compute_summary(store.matches, store.tournaments)


@when(parsers.parse('I compute the team summary for tournament "{tournament_id}"'))
def team_summary_for_tournament(context, tournament_id):
    store = context["store"]
    matches = filter_matches(store.matches, tournament_id)
    context["summary"] = compute_summary(matches, store.tournaments)


@when(parsers.parse('I rank players by "{metric}"'))
def rank_players(context, metric):
    store = context["store"]
    context["leaderboard"] = compute_leaderboard(
        store.matches, store.players, store.tournaments, metric
    )


@when(parsers.parse('I look up the record against "{opponent}"'))
def opponent_record(context, opponent):
    context["record"] = opponent_detail(opponent, context["store"].matches)


@then(parsers.parse("the summary shows {matches:d} matches with {wins:d} wins, {draws:d} draws and {losses:d} losses"))
def check_summary_results(context, matches, wins, draws, losses):
    summary = context["summary"]
    assert summary.matches == matches
    assert (summary.wins, summary.draws, summary.losses) == (wins, draws, losses)
    assert summary.wins + summary.draws + summary.losses == summary.matches


@then(parsers.parse("the summary shows {goals_for:d} goals for and {goals_against:d} goals against"))
def check_summary_goals(context, goals_for, goals_against):
    summary = context["summary"]
    assert summary.goals_for == goals_for
    assert summary.goals_against == goals_against
    assert summary.goal_difference == goals_for - goals_against


@then(parsers.parse("the summary shows {count:d} clean sheets"))
def check_clean_sheets(context, count):
    assert context["summary"].clean_sheets == count


@then(parsers.parse("the minutes played are {minutes:g}"))
def check_minutes(context, minutes):
    assert context["summary"].minutes_played == pytest.approx(minutes)


@then(parsers.parse('the leaderboard starts with "{name}" on {score:d}'))
def check_leader(context, name, score):
    leader = context["leaderboard"][0]
    assert leader.player.full_name == name
    assert leader.score == score


@then(parsers.parse("the leaderboard has {count:d} entries"))
def check_leaderboard_size(context, count):
    assert len(context["leaderboard"]) == count


@then(parsers.parse('"{first}" is ranked above "{second}"'))
def check_order(context, first, second):
    names = [e.player.full_name for e in context["leaderboard"]]
    assert names.index(first) < names.index(second)


@then(parsers.parse('"{name}" has a score of {score:g}'))
def check_player_score(context, name, score):
    entry = next(e for e in context["leaderboard"] if e.player.full_name == name)
    assert entry.score == pytest.approx(score)


@then(parsers.parse("the record shows {wins:d} wins, {draws:d} draws and {losses:d} losses"))
def check_record_results(context, wins, draws, losses):
    record = context["record"]
    assert (record.wins, record.draws, record.losses) == (wins, draws, losses)


@then(parsers.parse("the record shows {goals_for:d} goals for and {goals_against:d} goals against"))
def check_record_goals(context, goals_for, goals_against):
    record = context["record"]
    assert record.goals_for == goals_for
    assert record.goals_against == goals_against


@then(parsers.parse('"{name}" is not on the leaderboard'))
def check_absent(context, name):
    assert name not in [e.player.full_name for e in context["leaderboard"]]
