from __future__ import annotations

import pathlib
import random

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from teams import exports, services


class Command(BaseCommand):
    help = "Shuffle names from a CSV file into teams and optionally write a scores workbook"

    def add_arguments(self, parser):
        parser.add_argument("--csv", required=True, help="Path to the CSV file")
        parser.add_argument(
            "--size",
            type=int,
            default=getattr(settings, "TEAMS_DEFAULT_GROUP_SIZE", 2),
            help="Members per team",
        )
        parser.add_argument("--title", default="", help="Save the teams as an event with this title")
        parser.add_argument("--output", default=".", help="Directory for the exported workbook")
        parser.add_argument("--seed", default=None, help="Seed for a reproducible shuffle")

    def handle(self, *args, **options):
        csv_path = pathlib.Path(options["csv"])
        if not csv_path.exists():
            raise CommandError(f"CSV file '{csv_path}' does not exist")
        if options["size"] <= 0:
            raise CommandError("--size must be at least 1")

        rng = random.Random(options["seed"]) if options["seed"] is not None else None
        board = services.TeamBoard(group_size=options["size"], rng=rng)
        with csv_path.open("rb") as handle:
            board.import_names(services.read_upload_text(handle))
        if not board.generate_teams():
            raise CommandError(f"No names found in '{csv_path}'")

        for team in board.teams:
            self.stdout.write(f"{team.name}: {', '.join(team.members)}")

        title = options["title"].strip()
        if not title:
            return
        board.save_event(title)
        output_dir = pathlib.Path(options["output"])
        if not output_dir.is_dir():
            raise CommandError(f"Output directory '{output_dir}' does not exist")
        target = output_dir / exports.export_filename(board.event.title)
        target.write_bytes(exports.build_scores_workbook(board.event))
        self.stdout.write(self.style.SUCCESS(f"Wrote {target}"))
