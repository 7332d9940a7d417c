"""Tests for habit CRUD and date-scoped listing."""

import unittest
from datetime import date

from pydantic import ValidationError

from habit_tracker.errors import HabitValidationError
from habit_tracker.ledger import CompletionLedger
from habit_tracker.repository import HabitRepository
from habit_tracker.schemas import GoalType, HabitCreate, HabitUpdate
from habit_tracker.storage import SqliteStorage

from tests.helpers import JAN_1, BrokenStorage


class HabitRepositoryTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.storage = SqliteStorage(":memory:")
        await self.storage.migrate()
        self.repo = HabitRepository(self.storage)
        self.ledger = CompletionLedger(self.storage)

    async def asyncTearDown(self):
        await self.storage.close()

    async def test_create_and_get(self):
        habit_id = await self.repo.create_habit(
            HabitCreate(name="  Stretch  ", category="fitness"), created_at=JAN_1
        )
        habit = await self.repo.get_habit(habit_id)
        self.assertEqual(habit.name, "Stretch")
        self.assertEqual(habit.icon, "💪")
        self.assertEqual(habit.goal_type, GoalType.BINARY)
        self.assertTrue(habit.is_active)

    async def test_unknown_category_uses_default_icon(self):
        habit_id = await self.repo.create_habit(HabitCreate(name="Plant care", category="garden"))
        self.assertEqual((await self.repo.get_habit(habit_id)).icon, "📋")

    def test_blank_name_is_rejected(self):
        with self.assertRaises(ValidationError):
            HabitCreate(name="   ")

    def test_non_positive_target_is_rejected(self):
        with self.assertRaises(ValidationError):
            HabitCreate(name="Water", goal_type=GoalType.COUNT, target_count=0)

    def test_long_custom_emoji_is_rejected(self):
        with self.assertRaises(ValidationError):
            HabitCreate(name="Water", custom_emoji="🍎🍎🍎🍎🍎")

    async def test_count_goal_requires_target(self):
        with self.assertRaises(HabitValidationError):
            await self.repo.create_habit(HabitCreate(name="Water", goal_type=GoalType.COUNT))
        self.assertEqual(await self.repo.list_habits(), [])

    async def test_time_goal_requires_target(self):
        with self.assertRaises(HabitValidationError):
            await self.repo.create_habit(HabitCreate(name="Piano", goal_type=GoalType.TIME))

    async def test_targets_of_other_goal_types_are_cleared(self):
        habit_id = await self.repo.create_habit(
            HabitCreate(name="Piano", goal_type=GoalType.TIME, target_time_minutes=20, target_count=3)
        )
        habit = await self.repo.get_habit(habit_id)
        self.assertIsNone(habit.target_count)
        self.assertEqual(habit.target_time_minutes, 20)

    async def test_update_habit(self):
        habit_id = await self.repo.create_habit(HabitCreate(name="Water"))
        updated = await self.repo.update_habit(
            habit_id, HabitUpdate(name="Water", goal_type=GoalType.COUNT, target_count=6)
        )
        self.assertTrue(updated)
        habit = await self.repo.get_habit(habit_id)
        self.assertEqual(habit.goal_type, GoalType.COUNT)
        self.assertEqual(habit.target_count, 6)

    async def test_update_missing_habit_fails(self):
        self.assertFalse(await self.repo.update_habit(42, HabitUpdate(name="Ghost")))

    async def test_soft_delete_keeps_history(self):
        habit_id = await self.repo.create_habit(HabitCreate(name="Read"), created_at=JAN_1)
        await self.ledger.mark_completed(habit_id, date(2024, 1, 2))
        self.assertTrue(await self.repo.deactivate_habit(habit_id))
        self.assertEqual(await self.repo.list_habits_for_date(date(2024, 1, 2)), [])
        self.assertEqual(len(await self.ledger.get_all_for_habit(habit_id)), 1)
        self.assertTrue(await self.repo.reactivate_habit(habit_id))
        self.assertEqual(len(await self.repo.list_habits_for_date(date(2024, 1, 2))), 1)

    async def test_hard_delete_cascades(self):
        habit_id = await self.repo.create_habit(HabitCreate(name="Read"), created_at=JAN_1)
        await self.ledger.mark_completed(habit_id, date(2024, 1, 2))
        self.assertTrue(await self.repo.delete_habit(habit_id))
        self.assertIsNone(await self.repo.get_habit(habit_id))
        self.assertEqual(await self.ledger.get_for_date(date(2024, 1, 2)), [])

    async def test_delete_missing_habit_is_noop_success(self):
        self.assertTrue(await self.repo.delete_habit(404))

    async def test_list_for_date_respects_creation_day(self):
        await self.repo.create_habit(HabitCreate(name="Old"), created_at=JAN_1)
        await self.repo.create_habit(HabitCreate(name="New"), created_at=date(2024, 1, 10))
        names = lambda habits: sorted(h.name for h in habits)
        self.assertEqual(names(await self.repo.list_habits_for_date(date(2023, 12, 31))), [])
        self.assertEqual(names(await self.repo.list_habits_for_date(date(2024, 1, 9))), ["Old"])
        self.assertEqual(
            names(await self.repo.list_habits_for_date(date(2024, 1, 10))), ["New", "Old"]
        )

    async def test_earliest_habit_date(self):
        self.assertIsNone(await self.repo.earliest_habit_date())
        await self.repo.create_habit(HabitCreate(name="B"), created_at=date(2024, 2, 1))
        await self.repo.create_habit(HabitCreate(name="A"), created_at=JAN_1)
        self.assertEqual(await self.repo.earliest_habit_date(), JAN_1)


class RepositoryStorageFailureTests(unittest.IsolatedAsyncioTestCase):
    async def test_sentinels(self):
        repo = HabitRepository(BrokenStorage())
        self.assertIsNone(await repo.create_habit(HabitCreate(name="Read")))
        self.assertFalse(await repo.update_habit(1, HabitUpdate(name="Read")))
        self.assertFalse(await repo.deactivate_habit(1))
        self.assertFalse(await repo.delete_habit(1))
        self.assertIsNone(await repo.get_habit(1))
        self.assertEqual(await repo.list_habits(), [])
        self.assertEqual(await repo.list_habits_for_date(JAN_1), [])


if __name__ == "__main__":
    unittest.main()
