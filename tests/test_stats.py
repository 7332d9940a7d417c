"""Tests for the statistics functions."""

import unittest

from habit_tracker.stats import (
    average_streak,
    calculate_habit_stats,
    calculate_habit_trends,
    category_stats,
    classify_category,
    completion_rate,
    most_consistent_habit,
    needs_attention,
    round_half_up,
    trend_completion_rate,
)

from tests.helpers import make_view


class HabitStatsTests(unittest.TestCase):
    def test_empty_list(self):
        stats = calculate_habit_stats([])
        self.assertEqual(stats.total_habits, 0)
        self.assertEqual(stats.completion_rate, 0)
        self.assertEqual(stats.average_streak, 0)
        self.assertEqual(stats.longest_streak, 0)
        self.assertEqual(stats.most_consistent_habit, "No habits yet")
        self.assertEqual(stats.needs_attention, [])

    def test_summary(self):
        habits = [
            make_view(1, "Exercise", completed=True, streak=5, total_completions=12),
            make_view(2, "Read", completed=False, streak=2, longest_streak=9, total_completions=20),
        ]
        stats = calculate_habit_stats(habits)
        self.assertEqual(stats.total_habits, 2)
        self.assertEqual(stats.completed_today, 1)
        self.assertEqual(stats.completion_rate, 50)
        self.assertEqual(stats.average_streak, 4)  # 3.5 rounds up
        self.assertEqual(stats.longest_streak, 9)
        self.assertEqual(stats.total_completions, 32)
        self.assertEqual(stats.most_consistent_habit, "Exercise")
        self.assertEqual(stats.needs_attention, ["Read"])

    def test_completion_rate_rounds(self):
        habits = [make_view(1, "A", completed=True), make_view(2, "B"), make_view(3, "C")]
        self.assertEqual(completion_rate(habits), 33)
        self.assertEqual(completion_rate(habits[:1] + habits[:1] + habits[1:2]), 67)

    def test_average_streak_empty(self):
        self.assertEqual(average_streak([]), 0)

    def test_round_half_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(2.49), 2)

    def test_most_consistent_tie_keeps_first(self):
        habits = [make_view(1, "First", streak=4), make_view(2, "Second", streak=4)]
        self.assertEqual(most_consistent_habit(habits), "First")

    def test_needs_attention_caps_at_three(self):
        habits = [make_view(i, f"Habit {i}") for i in range(1, 6)]
        self.assertEqual(needs_attention(habits), ["Habit 1", "Habit 2", "Habit 3"])


class TrendTests(unittest.TestCase):
    def test_trend_rate(self):
        self.assertEqual(trend_completion_rate(0), 0)
        self.assertEqual(trend_completion_rate(15), 50)
        self.assertEqual(trend_completion_rate(1), 3)
        self.assertEqual(trend_completion_rate(45), 100)

    def test_trends_sorted_by_streak(self):
        habits = [
            make_view(1, "Low", streak=1),
            make_view(2, "High", completed=True, streak=6),
            make_view(3, "Mid", streak=3),
        ]
        trends = calculate_habit_trends(habits)
        self.assertEqual([t.habit_name for t in trends], ["High", "Mid", "Low"])
        self.assertEqual(trends[0].completion_rate, 20)
        self.assertEqual(trends[0].last_completed, "Today")
        self.assertEqual(trends[1].last_completed, "Not today")


class CategoryTests(unittest.TestCase):
    def test_icon_rules(self):
        self.assertEqual(classify_category(make_view(1, "Morning", icon="🏃")), "Exercise")
        self.assertEqual(classify_category(make_view(2, "Evening", icon="📚")), "Learning")
        self.assertEqual(classify_category(make_view(3, "Evening", icon="💧")), "Health")
        self.assertEqual(classify_category(make_view(4, "Evening", icon="🧘")), "Wellness")

    def test_name_keywords(self):
        self.assertEqual(classify_category(make_view(1, "Drink water")), "Health")
        self.assertEqual(classify_category(make_view(2, "Deep breathing")), "Wellness")
        self.assertEqual(classify_category(make_view(3, "Call grandma")), "Other")

    def test_keywords_match_word_starts(self):
        self.assertEqual(classify_category(make_view(1, "Brunch")), "Other")
        self.assertEqual(classify_category(make_view(2, "Bake bread")), "Other")
        self.assertEqual(classify_category(make_view(3, "Recycle")), "Other")
        self.assertEqual(classify_category(make_view(4, "Cycling to work")), "Exercise")

    def test_rule_order_decides(self):
        # Exercise rules come before Wellness rules
        self.assertEqual(classify_category(make_view(1, "Yoga", icon="💪")), "Exercise")

    def test_custom_emoji_is_considered(self):
        view = make_view(1, "Morning", custom_emoji="📖")
        self.assertEqual(classify_category(view), "Learning")

    def test_category_stats(self):
        habits = [
            make_view(1, "Run", completed=True),
            make_view(2, "Gym"),
            make_view(3, "Call grandma", completed=True),
        ]
        stats = category_stats(habits)
        self.assertEqual(
            [(s.category, s.count, s.completed) for s in stats],
            [("Exercise", 2, 1), ("Other", 1, 1)],
        )


if __name__ == "__main__":
    unittest.main()
