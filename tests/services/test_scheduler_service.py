from collections import Counter

import pytest

from pickleball.exceptions import (
    AlreadyGenerated,
    ConstraintViolation,
    InvalidTeamConfiguration,
    RecordNotFound,
)
from pickleball.models.match_model import MatchType
from pickleball.models.player_model import PlayerModel
from pickleball.models.team_model import TeamModel
from pickleball.models.tournament_model import TournamentModel
from pickleball.services.scheduler_service import round_robin_fixtures
from pickleball.store.base import EntityKind


def _numbers(teams_by_id, match):
    return teams_by_id[match.team1_id].team_number, teams_by_id[match.team2_id].team_number


class TestTeamConfiguration:

    def test_configure_creates_six_teams_in_two_pools(self, teams):
        assert [t.team_number for t in teams] == [1, 2, 3, 4, 5, 6]
        assert [t.pool for t in teams] == [1, 1, 1, 2, 2, 2]
        assert teams[0].name == "Team 1"
        assert all(t.player_ids == [] for t in teams)

    def test_configure_is_repeatable(self, services, tournament, teams):
        again = services.scheduler.configure_teams(tournament.id)
        assert [t.id for t in again] == [t.id for t in teams]
        assert len(services.scheduler.list_teams(tournament.id)) == 6

    def test_configure_unknown_tournament(self, services):
        with pytest.raises(RecordNotFound):
            services.scheduler.configure_teams("missing")

    def test_assign_and_remove_players(self, services, tournament, teams):
        a = services.tournaments.add_manual_player(tournament.id, "Ana Ruiz")
        b = services.tournaments.add_manual_player(tournament.id, "Ben Okafor")

        team = services.scheduler.assign_players(teams[0].id, [a.id, b.id])
        assert team.player_ids == [a.id, b.id]

        team = services.scheduler.remove_player(teams[0].id, a.id)
        assert team.player_ids == [b.id]

    def test_team_holds_at_most_two_players(self, services, tournament, teams):
        ids = [services.tournaments.add_manual_player(tournament.id, f"Player {n}").id for n in range(3)]
        services.scheduler.assign_players(teams[0].id, ids[:2])
        with pytest.raises(ConstraintViolation):
            services.scheduler.assign_players(teams[0].id, ids[2:])

    def test_player_cannot_join_two_teams(self, services, tournament, teams):
        player = services.tournaments.add_manual_player(tournament.id, "Ana Ruiz")
        services.scheduler.assign_players(teams[0].id, [player.id])
        with pytest.raises(ConstraintViolation):
            services.scheduler.assign_players(teams[3].id, [player.id])

    def test_duplicate_player_in_request(self, services, tournament, teams):
        player = services.tournaments.add_manual_player(tournament.id, "Ana Ruiz")
        with pytest.raises(ConstraintViolation):
            services.scheduler.assign_players(teams[0].id, [player.id, player.id])

    def test_remove_player_not_on_team(self, services, tournament, teams):
        with pytest.raises(RecordNotFound):
            services.scheduler.remove_player(teams[0].id, "nobody")

    def test_player_from_another_tournament_rejected(self, services, tournament, teams):
        other = services.tournaments.create_tournament(TournamentModel(name="Other Cup"))
        outsider = services.tournaments.add_manual_player(other.id, "Ana Ruiz")

        with pytest.raises(ConstraintViolation):
            services.scheduler.assign_players(teams[0].id, [outsider.id])
        assert services.scheduler.list_teams(tournament.id)[0].player_ids == []

    def test_registered_player_can_join(self, services, teams):
        player = services.tournaments.register_player(PlayerModel(name="Ana Ruiz"))
        team = services.scheduler.assign_players(teams[0].id, [player.id])
        assert team.player_ids == [player.id]

    def test_get_team_is_scoped_to_its_tournament(self, services, tournament, teams):
        assert services.scheduler.get_team(tournament.id, teams[0].id).id == teams[0].id

        other = services.tournaments.create_tournament(TournamentModel(name="Other Cup"))
        with pytest.raises(RecordNotFound):
            services.scheduler.get_team(other.id, teams[0].id)


class TestRoundRobinFixtures:

    def test_round_two_swaps_home_and_away(self, teams):
        fixtures = round_robin_fixtures(list(reversed(teams[:3])))
        pairs = [(r, home.team_number, away.team_number) for r, home, away in fixtures]
        assert pairs == [(1, 1, 2), (1, 1, 3), (1, 2, 3), (2, 2, 1), (2, 3, 1), (2, 3, 2)]


class TestGeneratePoolMatches:

    def test_generates_twelve_matches(self, services, tournament, teams, pool_matches):
        assert len(pool_matches) == 12
        assert [m.match_number for m in pool_matches] == list(range(1, 13))
        assert all(m.match_type == MatchType.POOL for m in pool_matches)
        assert all(m.status == "scheduled" for m in pool_matches)
        assert Counter(m.pool for m in pool_matches) == {1: 6, 2: 6}

    def test_each_team_plays_four_within_its_pool(self, teams, pool_matches):
        by_id = {t.id: t for t in teams}
        appearances = Counter()
        for match in pool_matches:
            home, away = by_id[match.team1_id], by_id[match.team2_id]
            assert home.pool == away.pool == match.pool
            appearances[home.team_number] += 1
            appearances[away.team_number] += 1
        assert appearances == {n: 4 for n in range(1, 7)}

    def test_fixture_order(self, teams, pool_matches):
        by_id = {t.id: t for t in teams}
        pool1 = [(m.match_round,) + _numbers(by_id, m) for m in pool_matches if m.pool == 1]
        pool2 = [(m.match_round,) + _numbers(by_id, m) for m in pool_matches if m.pool == 2]
        assert pool1 == [(1, 1, 2), (1, 1, 3), (1, 2, 3), (2, 2, 1), (2, 3, 1), (2, 3, 2)]
        assert pool2 == [(1, 4, 5), (1, 4, 6), (1, 5, 6), (2, 5, 4), (2, 6, 4), (2, 6, 5)]

    def test_every_pair_meets_twice(self, teams, pool_matches):
        by_id = {t.id: t for t in teams}
        pairs = Counter(frozenset(_numbers(by_id, m)) for m in pool_matches)
        assert set(pairs.values()) == {2}
        assert len(pairs) == 6

    def test_second_generation_is_rejected(self, services, tournament, pool_matches):
        with pytest.raises(AlreadyGenerated):
            services.scheduler.generate_pool_matches(tournament.id)
        assert len(services.scheduler.list_pool_matches(tournament.id)) == 12

    def test_requires_configured_teams(self, services, tournament):
        with pytest.raises(InvalidTeamConfiguration):
            services.scheduler.generate_pool_matches(tournament.id)
        assert services.scheduler.list_pool_matches(tournament.id) == []

    def test_uneven_pools_rejected(self, services, store, tournament, teams):
        store.update(EntityKind.TEAM, teams[2].id, {"pool": 2})
        with pytest.raises(InvalidTeamConfiguration):
            services.scheduler.generate_pool_matches(tournament.id)
        assert services.scheduler.list_pool_matches(tournament.id) == []

    def test_missing_team_rejected(self, services, store, tournament):
        for number in range(1, 6):
            store.insert(EntityKind.TEAM, TeamModel(
                tournament_id=tournament.id, team_number=number, pool=1 if number <= 3 else 2,
            ))
        with pytest.raises(InvalidTeamConfiguration):
            services.scheduler.generate_pool_matches(tournament.id)

    def test_list_filters_by_stage(self, services, tournament, pool_matches):
        assert len(services.scheduler.list_pool_matches(tournament.id, match_type=MatchType.POOL)) == 12
        assert services.scheduler.list_pool_matches(tournament.id, match_type=MatchType.FINAL) == []
