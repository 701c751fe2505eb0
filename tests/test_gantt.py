from __future__ import annotations

import sys
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from pydantic import ValidationError

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT))

from mermaidgen import (
    AxisFormat,
    DependencyCycleError,
    Gantt,
    GanttConfig,
    InvalidConfigurationError,
    TaskConfig,
)

START = datetime(2019, 1, 1, 10, 0, tzinfo=timezone.utc)


class GanttConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        g = Gantt()
        self.assertEqual(g.title, "")
        self.assertEqual(g.axis_format, "")

    def test_positional_settings(self) -> None:
        g = Gantt("Plan", AxisFormat.DATE)
        self.assertEqual(g.title, "Plan")
        self.assertEqual(g.axis_format, AxisFormat.DATE)

    def test_free_axis_format(self) -> None:
        g = Gantt(axis_format="%d.%m")
        self.assertEqual(g.axis_format, "%d.%m")

    def test_config_object(self) -> None:
        g = Gantt(config=GanttConfig(title="From config"))
        self.assertEqual(g.title, "From config")

    def test_wrong_title_type_aborts_construction(self) -> None:
        with self.assertRaises(InvalidConfigurationError) as ctx:
            Gantt(title=5)
        self.assertIn("title", str(ctx.exception))
        self.assertIsInstance(ctx.exception, ValueError)

    def test_wrong_axis_format_type(self) -> None:
        with self.assertRaises(InvalidConfigurationError):
            Gantt("Plan", 7)

    def test_config_and_settings_conflict(self) -> None:
        with self.assertRaises(InvalidConfigurationError):
            Gantt("T", config=GanttConfig(title="From config"))
        with self.assertRaises(InvalidConfigurationError):
            Gantt(axis_format=AxisFormat.DATE, config=GanttConfig())

    def test_setter_validates(self) -> None:
        g = Gantt()
        g.title = "New"
        self.assertEqual(g.title, "New")
        with self.assertRaises(InvalidConfigurationError):
            g.title = ["not", "text"]
        self.assertEqual(g.title, "New")


class GanttStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.g = Gantt()

    def test_duplicate_task_is_rejected_across_sections(self) -> None:
        local = self.g.add_task("t1")
        section = self.g.add_section("s")
        self.assertIsNone(section.add_task("t1"))
        self.assertIsNone(self.g.add_task("t1"))
        self.assertIs(self.g.get_task("t1"), local)
        self.assertEqual(section.list_tasks(), [])
        self.assertEqual(self.g.list_local_tasks(), [local])

    def test_duplicate_section_is_rejected(self) -> None:
        first = self.g.add_section("s", "First")
        self.assertIsNone(self.g.add_section("s", "Second"))
        self.assertEqual(self.g.list_sections(), [first])
        self.assertEqual(first.title, "First")

    def test_section_title_defaults_to_id(self) -> None:
        self.assertEqual(self.g.add_section("build").title, "build")

    def test_sections_and_tasks_have_separate_namespaces(self) -> None:
        self.assertIsNotNone(self.g.add_task("x"))
        self.assertIsNotNone(self.g.add_section("x"))
        self.assertIsNotNone(self.g.add_section("y"))
        self.assertIsNotNone(self.g.add_task("y"))

    def test_list_tasks_is_sorted_by_id(self) -> None:
        self.g.add_task("b")
        section = self.g.add_section("s")
        section.add_task("c")
        section.add_task("a")
        self.assertEqual([t.id for t in self.g.list_tasks()], ["a", "b", "c"])

        self.g.add_section("t").add_task("0")
        self.assertEqual([t.id for t in self.g.list_tasks()], ["0", "a", "b", "c"])

    def test_section_tasks_keep_insertion_order(self) -> None:
        section = self.g.add_section("s")
        section.add_task("z")
        section.add_task("a")
        self.assertEqual([t.id for t in section.list_tasks()], ["z", "a"])
        self.assertIs(section.get_task("a"), self.g.get_task("a"))
        self.assertIs(self.g.get_task("a").section, section)
        self.assertIsNone(self.g.add_task("local").section)

    def test_task_settings_from_keywords(self) -> None:
        task = self.g.add_task("t", title="Build", duration=timedelta(days=2),
                               start=START, critical=True, done=True)
        self.assertEqual(task.title, "Build")
        self.assertEqual(task.duration, timedelta(days=2))
        self.assertEqual(task.start, START)
        self.assertTrue(task.critical)
        self.assertFalse(task.active)
        self.assertTrue(task.done)

    def test_task_settings_from_config(self) -> None:
        first = self.g.add_task("first", start=START)
        task = self.g.add_task("t", TaskConfig(title="After", start=first))
        self.assertIs(task.after, first)
        self.assertIsNone(task.start)

    def test_invalid_task_settings_add_nothing(self) -> None:
        with self.assertRaises(InvalidConfigurationError):
            self.g.add_task("t", title=3)
        with self.assertRaises(InvalidConfigurationError):
            self.g.add_task("t", colour="red")
        with self.assertRaises(InvalidConfigurationError):
            self.g.add_task("t", duration="2d")
        with self.assertRaises(InvalidConfigurationError):
            self.g.add_task("t", TaskConfig(), title="both")
        self.assertIsNone(self.g.get_task("t"))
        self.assertEqual(self.g.list_local_tasks(), [])
        self.assertIsNotNone(self.g.add_task("t"))

    def test_negative_duration_is_rejected(self) -> None:
        with self.assertRaises(InvalidConfigurationError):
            self.g.add_task("t", duration=timedelta(hours=-1))

    def test_sub_millisecond_duration_is_rejected(self) -> None:
        with self.assertRaises(InvalidConfigurationError):
            self.g.add_task("t", duration=timedelta(microseconds=1500))
        task = self.g.add_task("t", duration=timedelta(milliseconds=2))
        with self.assertRaises(ValidationError):
            task.duration = timedelta(microseconds=400)
        self.assertEqual(task.duration, timedelta(milliseconds=2))


class TaskTimingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.g = Gantt()

    def test_set_start_switches_between_time_and_task(self) -> None:
        first = self.g.add_task("first")
        task = self.g.add_task("t", start=START)
        task.set_start(first)
        self.assertIs(task.after, first)
        self.assertIsNone(task.start)
        task.set_start(START)
        self.assertIsNone(task.after)
        self.assertEqual(task.start, START)
        task.set_start(None)
        self.assertIsNone(task.start)
        with self.assertRaises(InvalidConfigurationError):
            task.set_start("tomorrow")

    def test_times_follow_the_dependency_chain(self) -> None:
        a = self.g.add_task("a", start=START, duration=timedelta(hours=2))
        b = self.g.add_task("b", start=a, duration=timedelta(days=1))
        c = self.g.add_section("s").add_task("c", start=b)

        self.assertEqual(a.end_time(), START + timedelta(hours=2))
        self.assertEqual(b.start_time(), START + timedelta(hours=2))
        self.assertEqual(b.end_time(), START + timedelta(days=1, hours=2))
        self.assertEqual(c.start_time(), b.end_time())
        self.assertIsNone(c.end_time())

    def test_unknown_start(self) -> None:
        task = self.g.add_task("t", duration=timedelta(days=1))
        self.assertIsNone(task.start_time())
        self.assertIsNone(task.end_time())

    def test_cycle_is_detected(self) -> None:
        a = self.g.add_task("a", duration=timedelta(days=1))
        b = self.g.add_task("b", start=a, duration=timedelta(days=1))
        a.set_start(b)
        with self.assertRaises(DependencyCycleError):
            b.end_time()


if __name__ == "__main__":
    unittest.main()
