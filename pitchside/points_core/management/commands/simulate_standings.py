"""
Management command to simulate a tournament and print its standings.

Players get Faker names and every result is drawn from a seeded random
generator, so the same seed always produces the same table.
"""

import random

from django.core.management.base import BaseCommand, CommandError
from faker import Faker

from pitchside.points_core.builder import TournamentBuilder
from pitchside.points_core.scoring import POINT_SYSTEM_TEMPLATES, get_point_system
from pitchside.points_core.stages import TournamentFormat
from pitchside.points_core.stats import tournament_player_stats


class Command(BaseCommand):
    help = "Simulate random results for a tournament and print the standings"

    def add_arguments(self, parser):
        parser.add_argument(
            "--players",
            type=int,
            default=8,
            help="Number of players (default: 8)",
        )
        parser.add_argument(
            "--rounds",
            type=int,
            default=5,
            help="Number of rounds to play (default: 5)",
        )
        parser.add_argument(
            "--seed",
            type=int,
            default=None,
            help="Random seed for reproducible results",
        )
        parser.add_argument(
            "--walkover-rate",
            type=float,
            default=0.05,
            help="Probability of a match being a walkover (default: 0.05 = 5%%)",
        )
        parser.add_argument(
            "--format",
            choices=[f.value for f in TournamentFormat],
            default=None,
            help="Generate stages for this tournament format",
        )
        parser.add_argument(
            "--point-system",
            choices=sorted(POINT_SYSTEM_TEMPLATES),
            default=None,
            help="Predefined point system (default: POINTS_CORE setting)",
        )
        parser.add_argument(
            "--stats",
            action="store_true",
            help="Also print win rate and per-match averages",
        )

    def handle(self, *args, **options):
        players = options["players"]
        rounds = options["rounds"]
        walkover_rate = options["walkover_rate"]
        tournament_format = options["format"]

        if players < 2:
            raise CommandError(f"At least 2 players are required, got {players}")
        if rounds < 1:
            raise CommandError(f"At least 1 round is required, got {rounds}")
        if not 0 <= walkover_rate <= 1:
            raise CommandError(
                f"Walkover rate must be between 0 and 1, got {walkover_rate}"
            )

        rng = random.Random(options["seed"])
        fake = Faker()
        if options["seed"] is not None:
            fake.seed_instance(options["seed"])

        names = [fake.unique.name() for _ in range(players)]
        builder = TournamentBuilder(
            point_system=get_point_system(options["point_system"])
        )
        builder.players(*names)

        if tournament_format:
            builder.format(tournament_format)
            # all simulated rounds are played in the opening stage
            opening = builder.tournament.stages[0]
            builder.in_stage(opening.stage_name)
            self.stdout.write(f"Stages ({tournament_format}):")
            for stage in builder.tournament.stages:
                self.stdout.write(
                    f"  {stage.stage_order}. {stage.stage_name} "
                    f"(W{stage.points_per_win}/D{stage.points_per_draw}"
                    f"/L{stage.points_per_loss}, +{stage.points_for_advancing})"
                )

        walkovers = 0
        for _ in range(rounds):
            order = names[:]
            rng.shuffle(order)
            for home, away in zip(order[::2], order[1::2]):
                if rng.random() < walkover_rate:
                    builder.walkover(home, away, rng.choice([home, away]))
                    walkovers += 1
                else:
                    score = f"{rng.randint(0, 4)}-{rng.randint(0, 4)}"
                    builder.match(home, away, score)

        tournament = builder.build()
        scoring = tournament.calculate_results()
        if not scoring.ok:
            raise CommandError(
                f"Simulated tournament is invalid: {scoring.match_errors}"
            )

        self.stdout.write(
            self.style.SUCCESS(
                f"Simulated {len(tournament.matches)} matches "
                f"({walkovers} walkovers) over {rounds} rounds"
            )
        )
        id_to_name = {pid: name for name, pid in tournament.name_to_id.items()}
        self._print_standings(scoring.standings, id_to_name)
        if options["stats"]:
            self._print_stats(scoring.standings, id_to_name)

    def _print_standings(self, standings, id_to_name):
        width = max(len(name) for name in id_to_name.values())
        self.stdout.write(
            f"{'#':>3}  {'Player':<{width}}  {'P':>3} {'W':>3} {'D':>3} {'L':>3} "
            f"{'GF':>4} {'GA':>4} {'GD':>4} {'Pts':>4}"
        )
        for entry in standings:
            name = id_to_name[entry.player_id]
            self.stdout.write(
                f"{entry.rank:>3}  {name:<{width}}  {entry.matches_played:>3} "
                f"{entry.wins:>3} {entry.draws:>3} {entry.losses:>3} "
                f"{entry.goals_scored:>4} {entry.goals_conceded:>4} "
                f"{entry.goal_difference:>4} {entry.total_points:>4}"
            )

    def _print_stats(self, standings, id_to_name):
        self.stdout.write("")
        for stats in tournament_player_stats(standings):
            self.stdout.write(
                f"{id_to_name[stats.player_id]}: {stats.win_rate}% wins, "
                f"{stats.avg_points_per_match} pts/match, "
                f"{stats.avg_goals_per_match} goals/match"
            )
