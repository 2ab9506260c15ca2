import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from alternatives import get_exercise, machine_id
from program import WORKOUT_PHASES, parse_rest_seconds, total_weeks


class ProgramTest(unittest.TestCase):
    def test_phases(self) -> None:
        self.assertEqual(len(WORKOUT_PHASES), 3)
        self.assertEqual(total_weeks(), 12)
        for phase in WORKOUT_PHASES:
            self.assertEqual(len(phase.exercises), 6)
        self.assertEqual([p.rest_seconds for p in WORKOUT_PHASES], [45, 60, 90])

    def test_parse_rest_seconds(self) -> None:
        self.assertEqual(parse_rest_seconds("45s"), 45)
        self.assertEqual(parse_rest_seconds("90 s"), 90)
        self.assertEqual(parse_rest_seconds("2 min"), 60)
        self.assertEqual(parse_rest_seconds("", default=30), 30)

    def test_machine_id(self) -> None:
        self.assertEqual(machine_id("Sentadilla con Barra"), "sentadilla_con_barra")
        self.assertEqual(machine_id("Dominadas/Jalón al Pecho"), "dominadas/jalón_al_pecho")

    def test_timed_alternatives(self) -> None:
        self.assertTrue(get_exercise("11").timed)
        self.assertFalse(get_exercise("1").timed)
        self.assertIsNone(get_exercise("99"))


if __name__ == "__main__":
    unittest.main()
