from __future__ import annotations

import io
import random
from collections import Counter

from django.test import SimpleTestCase

from teams import services


class ParseNamesTests(SimpleTestCase):
    def test_header_blank_lines_and_extra_fields_are_dropped(self):
        names = services.parse_names("Name\nAlice\nBob,x\n\n Carol ")
        self.assertEqual(names, ("Alice", "Bob", "Carol"))

    def test_windows_line_endings(self):
        self.assertEqual(services.parse_names("name,team\r\nDee,1\r\nEd,2\r\n"), ("Dee", "Ed"))

    def test_header_only_matches_exact_value(self):
        self.assertEqual(services.parse_names("NAME\nNamely\nname \n"), ("Namely",))

    def test_empty_text_gives_empty_list(self):
        self.assertEqual(services.parse_names(""), ())
        self.assertEqual(services.parse_names(",,,\n , x\n"), ())

    def test_read_upload_text_falls_back_to_latin1(self):
        upload = io.BytesIO("name\nJosé\n".encode("latin-1"))
        self.assertEqual(services.read_upload_text(upload), "name\nJosé\n")

    def test_read_upload_text_strips_bom(self):
        upload = io.BytesIO("\ufeffname\nAda\n".encode("utf-8"))
        self.assertEqual(services.parse_names(services.read_upload_text(upload)), ("Ada",))


class ShuffleAndPartitionTests(SimpleTestCase):
    def test_partition_sizes_for_many_inputs(self):
        rng = random.Random(42)
        for count in range(0, 15):
            names = [f"P{i}" for i in range(count)]
            for size in range(1, 7):
                teams = services.partition(services.shuffle_names(names, rng), size)
                expected_teams = -(-count // size)
                self.assertEqual(len(teams), expected_teams)
                for team in teams[:-1]:
                    self.assertEqual(len(team.members), size)
                if teams:
                    self.assertEqual(len(teams[-1].members), count % size or size)
                members = [name for team in teams for name in team.members]
                self.assertEqual(Counter(members), Counter(names))

    def test_duplicate_names_are_kept(self):
        teams = services.partition(services.shuffle_names(["Sam", "Sam", "Lee"], random.Random(3)), 2)
        members = [name for team in teams for name in team.members]
        self.assertEqual(Counter(members), Counter({"Sam": 2, "Lee": 1}))

    def test_shuffle_does_not_mutate_input(self):
        names = ("A", "B", "C", "D")
        services.shuffle_names(names, random.Random(1))
        self.assertEqual(names, ("A", "B", "C", "D"))

    def test_teams_are_named_in_creation_order(self):
        teams = services.partition(["a", "b", "c", "d", "e"], 2)
        self.assertEqual([team.name for team in teams], ["Team 1", "Team 2", "Team 3"])
        self.assertEqual([team.members for team in teams], [["a", "b"], ["c", "d"], ["e"]])
        self.assertTrue(all(team.score is None for team in teams))

    def test_partition_rejects_non_positive_size(self):
        with self.assertRaises(ValueError):
            services.partition(["a"], 0)

    def test_shuffle_positions_are_uniform(self):
        names = ["A", "B", "C", "D"]
        trials = 4000
        rng = random.Random(20240519)
        positions = {name: Counter() for name in names}
        for _ in range(trials):
            for slot, name in enumerate(services.shuffle_names(names, rng)):
                positions[name][slot] += 1

        expected = trials / len(names)
        # chi-square critical value for 3 degrees of freedom at p = 0.0001
        critical = 21.11
        for name, counts in positions.items():
            statistic = sum((counts[slot] - expected) ** 2 / expected for slot in range(len(names)))
            self.assertLess(statistic, critical, f"{name} positions look biased: {dict(counts)}")


class CoerceScoreTests(SimpleTestCase):
    def test_values(self):
        self.assertEqual(services.coerce_score("42"), 42)
        self.assertIsInstance(services.coerce_score("42"), int)
        self.assertEqual(services.coerce_score("7.5"), 7.5)
        self.assertEqual(services.coerce_score("-3"), -3)
        self.assertEqual(services.coerce_score(""), 0)
        self.assertEqual(services.coerce_score("abc"), 0)
        self.assertEqual(services.coerce_score("nan"), 0)
        self.assertEqual(services.coerce_score(None), 0)
        self.assertEqual(services.coerce_score(float("inf")), 0)


class TeamBoardTests(SimpleTestCase):
    def setUp(self):
        self.board = services.TeamBoard(group_size=2, rng=random.Random(11))

    def test_stage_transitions(self):
        self.assertEqual(self.board.stage, services.Stage.EMPTY)
        self.board.import_names("name\nAlice\nBob\nCarol\nDave\nEve\n")
        self.assertEqual(self.board.stage, services.Stage.NAMES_LOADED)
        self.assertTrue(self.board.generate_teams())
        self.assertEqual(self.board.stage, services.Stage.TEAMS_GENERATED)
        self.assertTrue(self.board.save_event("Spring Cup"))
        self.assertEqual(self.board.stage, services.Stage.EVENT_SAVED)
        self.assertTrue(self.board.generate_teams())
        self.assertEqual(self.board.stage, services.Stage.TEAMS_GENERATED)
        self.assertIsNone(self.board.event)

    def test_generate_is_noop_without_names_or_with_bad_size(self):
        self.assertFalse(self.board.generate_teams())
        self.board.import_names("Alice\nBob\nCarol\n")
        self.assertTrue(self.board.generate_teams())
        previous = [list(team.members) for team in self.board.teams]

        self.assertFalse(self.board.generate_teams(0))
        self.assertFalse(self.board.generate_teams(-2))
        self.assertEqual([team.members for team in self.board.teams], previous)

    def test_scenario_spring_cup(self):
        self.board.import_names("name\nAlice\nBob\nCarol\nDave\nEve\n")
        self.board.generate_teams(2)
        self.assertEqual([len(team.members) for team in self.board.teams], [2, 2, 1])
        self.assertEqual([team.name for team in self.board.teams], ["Team 1", "Team 2", "Team 3"])
        members = {name for team in self.board.teams for name in team.members}
        self.assertEqual(members, {"Alice", "Bob", "Carol", "Dave", "Eve"})

    def test_save_event_requires_title_and_teams(self):
        self.assertFalse(self.board.save_event("Cup"))
        self.board.import_names("Alice\nBob\n")
        self.board.generate_teams()
        self.assertFalse(self.board.save_event("   "))
        self.assertIsNone(self.board.event)
        self.assertTrue(self.board.save_event("  Cup  "))
        self.assertEqual(self.board.event.title, "Cup")

    def test_event_is_a_snapshot(self):
        self.board.import_names("Alice\nBob\nCarol\nDave\n")
        self.board.generate_teams()
        self.board.save_event("Cup")
        self.board.teams[0].members.append("Intruder")
        self.assertNotIn("Intruder", self.board.event.teams[0].members)
        self.assertIs(self.board.displayed_teams, self.board.event.teams)

    def test_update_score_touches_only_one_team(self):
        self.board.import_names("A\nB\nC\nD\nE\nF\n")
        self.board.generate_teams(2)
        self.board.save_event("League")
        before = [(team.name, list(team.members), team.score) for team in self.board.event.teams]

        self.assertTrue(self.board.update_score(1, 42))

        teams = self.board.event.teams
        self.assertEqual(teams[1].score, 42)
        self.assertEqual((teams[0].name, teams[0].members, teams[0].score), before[0])
        self.assertEqual((teams[2].name, teams[2].members, teams[2].score), before[2])
        self.assertEqual(self.board.event.title, "League")

    def test_update_score_noops(self):
        self.board.import_names("A\nB\n")
        self.board.generate_teams(1)
        self.assertFalse(self.board.update_score(0, 5))
        self.board.save_event("Cup")
        self.assertFalse(self.board.update_score(2, 5))
        self.assertFalse(self.board.update_score(-1, 5))
        self.assertTrue(all(team.score is None for team in self.board.event.teams))

    def test_reimport_resets_teams_and_event(self):
        self.board.import_names("A\nB\nC\n")
        self.board.generate_teams()
        self.board.save_event("Cup")
        self.board.import_names("X\nY\n")
        self.assertEqual(self.board.names, ("X", "Y"))
        self.assertEqual(self.board.teams, [])
        self.assertIsNone(self.board.event)
        self.assertEqual(self.board.stage, services.Stage.NAMES_LOADED)

    def test_round_trip_through_dict(self):
        self.board.import_names("A\nB\nC\n")
        self.board.generate_teams()
        self.board.save_event("Cup")
        self.board.update_score(0, 3.5)

        restored = services.TeamBoard.from_dict(self.board.to_dict())

        self.assertEqual(restored.names, self.board.names)
        self.assertEqual(restored.group_size, 2)
        self.assertEqual(restored.teams, self.board.teams)
        self.assertEqual(restored.event, self.board.event)
        self.assertEqual(restored.event.teams[0].score, 3.5)

    def test_from_empty_dict_uses_default_group_size(self):
        board = services.TeamBoard.from_dict(None, default_group_size=4)
        self.assertEqual(board.group_size, 4)
        self.assertEqual(board.stage, services.Stage.EMPTY)
