"""Predefined habit categories with their icons."""

from typing import List, Optional

from .schemas import Category

DEFAULT_ICON = "📋"

CATEGORIES: List[Category] = [
    Category(id="fitness", name="Fitness", icon="💪",
             description="Exercise, workouts, and physical activity", color="#FF6B6B"),
    Category(id="health", name="Health", icon="🏥",
             description="Sleep, hydration, and wellness", color="#4ECDC4"),
    Category(id="learning", name="Learning", icon="📚",
             description="Reading, studying, and skill development", color="#45B7D1"),
    Category(id="productivity", name="Productivity", icon="⚡",
             description="Work, focus, and time management", color="#96CEB4"),
    Category(id="mindfulness", name="Mindfulness", icon="🧘",
             description="Meditation, reflection, and mental health", color="#FFEAA7"),
    Category(id="social", name="Social", icon="👥",
             description="Relationships, communication, and social activities", color="#DDA0DD"),
    Category(id="finance", name="Finance", icon="💰",
             description="Budgeting, saving, and financial goals", color="#98D8C8"),
    Category(id="creativity", name="Creativity", icon="🎨",
             description="Art, music, writing, and creative projects", color="#F7DC6F"),
    Category(id="home", name="Home", icon="🏠",
             description="Cleaning, organization, and household tasks", color="#BB8FCE"),
    Category(id="personal", name="Personal", icon="🌟",
             description="Self-improvement and personal development", color="#F8C471"),
    Category(id="general", name="General", icon=DEFAULT_ICON,
             description="Other habits and miscellaneous tasks", color="#BDC3C7"),
]


def get_category(category_id: str) -> Optional[Category]:
    for category in CATEGORIES:
        if category.id == category_id:
            return category
    return None


def icon_for(category_id: str) -> str:
    """Icon shown for a category, falling back to the generic clipboard."""
    category = get_category(category_id)
    return category.icon if category else DEFAULT_ICON
