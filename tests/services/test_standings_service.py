import pytest

from pickleball.exceptions import DataIntegrityAnomaly, RecordNotFound
from pickleball.models.standing_model import StandingModel
from pickleball.services.standings_service import rank_standings
from pickleball.store.base import EntityKind


def _row(team_number, wins=0, points_for=0, points_against=0):
    return StandingModel(
        tournament_id="t1",
        pool=1,
        team_id=f"team-{team_number}",
        team_number=team_number,
        wins=wins,
        total_points_for=points_for,
        total_points_against=points_against,
    )


class TestRankStandings:

    def test_wins_first(self):
        ranked = rank_standings([_row(1, wins=0, points_for=60), _row(2, wins=2, points_for=42)])
        assert [r.team_number for r in ranked] == [2, 1]
        assert [r.rank for r in ranked] == [1, 2]

    def test_point_differential_breaks_equal_wins(self):
        ranked = rank_standings([_row(1, wins=1, points_for=30, points_against=29), _row(2, wins=1, points_for=30, points_against=20)])
        assert [r.team_number for r in ranked] == [2, 1]

    def test_points_for_breaks_equal_differential(self):
        ranked = rank_standings([_row(1, wins=1, points_for=30, points_against=25), _row(2, wins=1, points_for=40, points_against=35)])
        assert [r.team_number for r in ranked] == [2, 1]

    def test_team_number_breaks_full_ties(self):
        ranked = rank_standings([_row(3, wins=1, points_for=36, points_against=36), _row(1, wins=1, points_for=36, points_against=36)])
        assert [r.team_number for r in ranked] == [1, 3]


class TestRecomputeStandings:

    def test_round_one_scenario(self, services, tournament, find_pool_match, play_match):
        play_match(find_pool_match(1, 2).id, 21, 15)
        play_match(find_pool_match(1, 3).id, 21, 10)
        play_match(find_pool_match(2, 3).id, 21, 18)

        rows = services.standings.get_standings(tournament.id, pool=1)

        summary = [(r.team_number, r.rank, r.wins, r.losses, r.point_differential) for r in rows]
        assert summary == [(1, 1, 2, 0, 17), (2, 2, 1, 1, -3), (3, 3, 0, 2, -14)]
        assert [r.matches_played for r in rows] == [2, 2, 2]
        assert rows[0].total_points_for == 42
        assert rows[0].total_points_against == 25

    def test_completion_triggers_recompute_for_its_pool_only(self, services, tournament, find_pool_match, play_match):
        play_match(find_pool_match(4, 5).id, 21, 19)
        assert services.standings.get_standings(tournament.id, pool=1) == []
        pool2 = services.standings.get_standings(tournament.id, pool=2)
        assert [(r.team_number, r.wins) for r in pool2] == [(4, 1), (5, 0), (6, 0)]

    def test_full_cycle_falls_back_to_team_number(self, services, tournament, find_pool_match, play_match):
        play_match(find_pool_match(4, 5).id, 21, 15)
        play_match(find_pool_match(5, 6).id, 21, 15)
        play_match(find_pool_match(4, 6).id, 15, 21)

        rows = services.standings.get_standings(tournament.id, pool=2)
        assert [(r.team_number, r.rank) for r in rows] == [(4, 1), (5, 2), (6, 3)]
        assert {r.point_differential for r in rows} == {0}

    def test_wins_sum_to_completed_matches(self, services, tournament, pool_matches, complete_match):
        for index, match in enumerate(pool_matches[:9]):
            complete_match(match.id, 21, 10 + index)
        rows = []
        for pool in (1, 2):
            rows.extend(services.standings.recompute_standings(tournament.id, pool))

        assert sum(r.wins for r in rows) == 9
        assert sum(r.losses for r in rows) == 9
        assert sum(r.matches_played for r in rows) == 18
        for pool in (1, 2):
            assert sorted(r.rank for r in rows if r.pool == pool) == [1, 2, 3]

    def test_recompute_is_idempotent_and_replaces_rows(self, services, store, tournament, pool_matches, complete_match):
        complete_match(pool_matches[0].id, 21, 11)
        first = services.standings.recompute_standings(tournament.id, 1)
        second = services.standings.recompute_standings(tournament.id, 1)

        assert [(r.team_id, r.rank, r.wins) for r in first] == [(r.team_id, r.rank, r.wins) for r in second]
        assert len(store.list(EntityKind.STANDING, tournament_id=tournament.id, pool=1)) == 3

    def test_tied_completed_match_is_an_anomaly(self, services, store, tournament, find_pool_match, play_match):
        play_match(find_pool_match(1, 2).id, 21, 12)
        before = services.standings.get_standings(tournament.id, pool=1)

        tied = find_pool_match(1, 3)
        with pytest.raises(DataIntegrityAnomaly):
            play_match(tied.id, 11, 11)

        # The completion itself stays committed; only the standings refresh is refused
        assert services.matches.get_match(tied.id).status == "completed"
        after = services.standings.get_standings(tournament.id, pool=1)
        assert [(r.team_id, r.wins, r.rank) for r in after] == [(r.team_id, r.wins, r.rank) for r in before]

    def test_scheduled_and_live_matches_do_not_count(self, services, tournament, pool_matches):
        services.matches.start_match(pool_matches[0].id)
        services.matches.record_point(pool_matches[0].id, 1)
        rows = services.standings.recompute_standings(tournament.id, 1)
        assert all(r.matches_played == 0 for r in rows)

    def test_unknown_tournament_rejected(self, services, store):
        with pytest.raises(RecordNotFound):
            services.standings.recompute_standings("missing", 1)
        with pytest.raises(RecordNotFound):
            services.standings.get_standings("missing")
        assert store.list(EntityKind.STANDING, tournament_id="missing") == []
