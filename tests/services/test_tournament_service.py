from datetime import date

import pytest
from pydantic import ValidationError

from pickleball.exceptions import ConstraintViolation, RecordNotFound
from pickleball.models.player_model import PlayerModel
from pickleball.models.tournament_model import TournamentModel


class TestTournamentService:

    def test_create_and_get(self, services):
        created = services.tournaments.create_tournament(TournamentModel(
            name="Summer Slam",
            location="Harbor Park",
            start_date=date(2026, 6, 1),
            end_date=date(2026, 6, 3),
            organizer_id="org-1",
        ))
        found = services.tournaments.get_tournament(created.id)
        assert found.name == "Summer Slam"
        assert found.end_date == date(2026, 6, 3)

    def test_end_date_before_start_date(self):
        with pytest.raises(ValidationError):
            TournamentModel(name="Backwards", start_date=date(2026, 6, 3), end_date=date(2026, 6, 1))

    def test_get_missing(self, services):
        with pytest.raises(RecordNotFound):
            services.tournaments.get_tournament("missing")

    def test_list_filters_by_organizer(self, services):
        services.tournaments.create_tournament(TournamentModel(name="Mine", organizer_id="org-1"))
        services.tournaments.create_tournament(TournamentModel(name="Theirs", organizer_id="org-2"))
        assert [t.name for t in services.tournaments.list_tournaments(organizer_id="org-1")] == ["Mine"]
        assert len(services.tournaments.list_tournaments()) == 2

    def test_update_administrative_fields(self, services, tournament):
        updated = services.tournaments.update_tournament(tournament.id, {"name": "Spring Open 2026", "location": "Court 5"})
        assert updated.name == "Spring Open 2026"
        assert services.tournaments.get_tournament(tournament.id).location == "Court 5"

    def test_update_rejects_protected_fields(self, services, tournament):
        with pytest.raises(ValueError, match="organizer_id"):
            services.tournaments.update_tournament(tournament.id, {"organizer_id": "someone-else"})
        with pytest.raises(ValueError, match="cannot be changed"):
            services.tournaments.update_tournament(tournament.id, {"id": "new-id"})


class TestPlayers:

    def test_add_manual_player(self, services, tournament):
        player = services.tournaments.add_manual_player(tournament.id, "  Ana Ruiz ", email="ana@example.com", phone="(555) 123-4567")
        assert player.name == "Ana Ruiz"
        assert player.is_manual
        assert [p.id for p in services.tournaments.list_players(tournament.id)] == [player.id]

    def test_duplicate_name_ignores_case(self, services, tournament):
        services.tournaments.add_manual_player(tournament.id, "Ana Ruiz")
        with pytest.raises(ConstraintViolation):
            services.tournaments.add_manual_player(tournament.id, "ana ruiz")

    def test_same_name_in_other_tournament(self, services, tournament):
        other = services.tournaments.create_tournament(TournamentModel(name="Other"))
        services.tournaments.add_manual_player(tournament.id, "Ana Ruiz")
        assert services.tournaments.add_manual_player(other.id, "Ana Ruiz").tournament_id == other.id

    @pytest.mark.parametrize("kwargs", [{"phone": "12345"}, {"email": "not-an-email"}])
    def test_invalid_contact_details(self, services, tournament, kwargs):
        with pytest.raises(ValidationError):
            services.tournaments.add_manual_player(tournament.id, "Ana Ruiz", **kwargs)

    def test_remove_player(self, services, tournament):
        player = services.tournaments.add_manual_player(tournament.id, "Ana Ruiz")
        services.tournaments.remove_player(tournament.id, player.id)
        assert services.tournaments.list_players(tournament.id) == []

    def test_cannot_remove_player_on_a_team(self, services, tournament, teams):
        player = services.tournaments.add_manual_player(tournament.id, "Ana Ruiz")
        services.scheduler.assign_players(teams[0].id, [player.id])
        with pytest.raises(ConstraintViolation):
            services.tournaments.remove_player(tournament.id, player.id)

    def test_remove_player_from_wrong_tournament(self, services, tournament):
        other = services.tournaments.create_tournament(TournamentModel(name="Other"))
        player = services.tournaments.add_manual_player(other.id, "Ana Ruiz")
        with pytest.raises(RecordNotFound):
            services.tournaments.remove_player(tournament.id, player.id)

    def test_register_player_is_not_tournament_scoped(self, services):
        player = services.tournaments.register_player(PlayerModel(name="Registered Rita", email="rita@example.com"))
        assert not player.is_manual
        with pytest.raises(ValueError):
            services.tournaments.register_player(PlayerModel(name="Scoped", tournament_id="t1"))
