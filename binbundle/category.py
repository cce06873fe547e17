#!/usr/bin/env python3
"""Application categories and fuzzy resolution of user-supplied category names."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import jellyfish

from .utils import CategoryError

CONFIDENCE_THRESHOLD = 0.8
OSX_APP_CATEGORY_PREFIX = "public.app-category."


class Category(Enum):
    """Closed set of application categories, valued by their display name."""

    BUSINESS = "Business"
    DEVELOPER_TOOL = "Developer Tool"
    EDUCATION = "Education"
    ENTERTAINMENT = "Entertainment"
    FINANCE = "Finance"
    GAME = "Game"
    ACTION_GAME = "Action Game"
    ADVENTURE_GAME = "Adventure Game"
    ARCADE_GAME = "Arcade Game"
    BOARD_GAME = "Board Game"
    CARD_GAME = "Card Game"
    CASINO_GAME = "Casino Game"
    DICE_GAME = "Dice Game"
    EDUCATIONAL_GAME = "Educational Game"
    FAMILY_GAME = "Family Game"
    KIDS_GAME = "Kids Game"
    MUSIC_GAME = "Music Game"
    PUZZLE_GAME = "Puzzle Game"
    RACING_GAME = "Racing Game"
    ROLE_PLAYING_GAME = "Role-Playing Game"
    SIMULATION_GAME = "Simulation Game"
    SPORTS_GAME = "Sports Game"
    STRATEGY_GAME = "Strategy Game"
    TRIVIA_GAME = "Trivia Game"
    WORD_GAME = "Word Game"
    GRAPHICS_AND_DESIGN = "Graphics and Design"
    HEALTHCARE_AND_FITNESS = "Healthcare and Fitness"
    LIFESTYLE = "Lifestyle"
    MEDICAL = "Medical"
    MUSIC = "Music"
    NEWS = "News"
    PHOTOGRAPHY = "Photography"
    PRODUCTIVITY = "Productivity"
    REFERENCE = "Reference"
    SOCIAL_NETWORKING = "Social Networking"
    SPORTS = "Sports"
    TRAVEL = "Travel"
    UTILITY = "Utility"
    VIDEO = "Video"
    WEATHER = "Weather"

    @property
    def canonical(self) -> str:
        """Name recommended to users who misspell the category."""
        return self.value

    def osx_application_category_type(self) -> str:
        """Closest macOS ``LSApplicationCategoryType`` value."""
        return OSX_CATEGORY_TYPES[self]

    def gnome_desktop_categories(self) -> str:
        """Closest freedesktop registered categories, ``;``-terminated."""
        return GNOME_DESKTOP_CATEGORIES[self]


OSX_CATEGORY_TYPES: dict[Category, str] = {
    Category.BUSINESS: "public.app-category.business",
    Category.DEVELOPER_TOOL: "public.app-category.developer-tools",
    Category.EDUCATION: "public.app-category.education",
    Category.ENTERTAINMENT: "public.app-category.entertainment",
    Category.FINANCE: "public.app-category.finance",
    Category.GAME: "public.app-category.games",
    Category.ACTION_GAME: "public.app-category.action-games",
    Category.ADVENTURE_GAME: "public.app-category.adventure-games",
    Category.ARCADE_GAME: "public.app-category.arcade-games",
    Category.BOARD_GAME: "public.app-category.board-games",
    Category.CARD_GAME: "public.app-category.card-games",
    Category.CASINO_GAME: "public.app-category.casino-games",
    Category.DICE_GAME: "public.app-category.dice-games",
    Category.EDUCATIONAL_GAME: "public.app-category.educational-games",
    Category.FAMILY_GAME: "public.app-category.family-games",
    Category.KIDS_GAME: "public.app-category.kids-games",
    Category.MUSIC_GAME: "public.app-category.music-games",
    Category.PUZZLE_GAME: "public.app-category.puzzle-games",
    Category.RACING_GAME: "public.app-category.racing-games",
    Category.ROLE_PLAYING_GAME: "public.app-category.role-playing-games",
    Category.SIMULATION_GAME: "public.app-category.simulation-games",
    Category.SPORTS_GAME: "public.app-category.sports-games",
    Category.STRATEGY_GAME: "public.app-category.strategy-games",
    Category.TRIVIA_GAME: "public.app-category.trivia-games",
    Category.WORD_GAME: "public.app-category.word-games",
    Category.GRAPHICS_AND_DESIGN: "public.app-category.graphics-design",
    Category.HEALTHCARE_AND_FITNESS: "public.app-category.healthcare-fitness",
    Category.LIFESTYLE: "public.app-category.lifestyle",
    Category.MEDICAL: "public.app-category.medical",
    Category.MUSIC: "public.app-category.music",
    Category.NEWS: "public.app-category.news",
    Category.PHOTOGRAPHY: "public.app-category.photography",
    Category.PRODUCTIVITY: "public.app-category.productivity",
    Category.REFERENCE: "public.app-category.reference",
    Category.SOCIAL_NETWORKING: "public.app-category.social-networking",
    Category.SPORTS: "public.app-category.sports",
    Category.TRAVEL: "public.app-category.travel",
    Category.UTILITY: "public.app-category.utilities",
    Category.VIDEO: "public.app-category.video",
    Category.WEATHER: "public.app-category.weather",
}

GNOME_DESKTOP_CATEGORIES: dict[Category, str] = {
    Category.BUSINESS: "Office;",
    Category.DEVELOPER_TOOL: "Development;",
    Category.EDUCATION: "Education;",
    Category.ENTERTAINMENT: "Network;",
    Category.FINANCE: "Office;Finance;",
    Category.GAME: "Game;",
    Category.ACTION_GAME: "Game;ActionGame;",
    Category.ADVENTURE_GAME: "Game;AdventureGame;",
    Category.ARCADE_GAME: "Game;ArcadeGame;",
    Category.BOARD_GAME: "Game;BoardGame;",
    Category.CARD_GAME: "Game;CardGame;",
    Category.CASINO_GAME: "Game;",
    Category.DICE_GAME: "Game;",
    Category.EDUCATIONAL_GAME: "Game;Education;",
    Category.FAMILY_GAME: "Game;",
    Category.KIDS_GAME: "Game;KidsGame;",
    Category.MUSIC_GAME: "Game;",
    Category.PUZZLE_GAME: "Game;LogicGame;",
    Category.RACING_GAME: "Game;",
    Category.ROLE_PLAYING_GAME: "Game;RolePlaying;",
    Category.SIMULATION_GAME: "Game;Simulation;",
    Category.SPORTS_GAME: "Game;SportsGame;",
    Category.STRATEGY_GAME: "Game;StrategyGame;",
    Category.TRIVIA_GAME: "Game;",
    Category.WORD_GAME: "Game;",
    Category.GRAPHICS_AND_DESIGN: "Graphics;",
    Category.HEALTHCARE_AND_FITNESS: "Science;",
    Category.LIFESTYLE: "Education;",
    Category.MEDICAL: "Science;MedicalSoftware;",
    Category.MUSIC: "AudioVideo;Audio;Music;",
    Category.NEWS: "Network;News;",
    Category.PHOTOGRAPHY: "Graphics;Photography;",
    Category.PRODUCTIVITY: "Office;",
    Category.REFERENCE: "Education;",
    Category.SOCIAL_NETWORKING: "Network;",
    Category.SPORTS: "Education;Sports;",
    Category.TRAVEL: "Education;",
    Category.UTILITY: "Utility;",
    Category.VIDEO: "AudioVideo;Video;",
    Category.WEATHER: "Science;",
}

# Keys are already canonicalized and unique.
CATEGORY_ALIASES: tuple[tuple[str, Category], ...] = (
    ("actiongame", Category.ACTION_GAME),
    ("actiongames", Category.ACTION_GAME),
    ("adventuregame", Category.ADVENTURE_GAME),
    ("adventuregames", Category.ADVENTURE_GAME),
    ("arcadegame", Category.ARCADE_GAME),
    ("arcadegames", Category.ARCADE_GAME),
    ("boardgame", Category.BOARD_GAME),
    ("boardgames", Category.BOARD_GAME),
    ("business", Category.BUSINESS),
    ("cardgame", Category.CARD_GAME),
    ("cardgames", Category.CARD_GAME),
    ("casinogame", Category.CASINO_GAME),
    ("casinogames", Category.CASINO_GAME),
    ("developer", Category.DEVELOPER_TOOL),
    ("developertool", Category.DEVELOPER_TOOL),
    ("developertools", Category.DEVELOPER_TOOL),
    ("development", Category.DEVELOPER_TOOL),
    ("dicegame", Category.DICE_GAME),
    ("dicegames", Category.DICE_GAME),
    ("education", Category.EDUCATION),
    ("educationalgame", Category.EDUCATIONAL_GAME),
    ("educationalgames", Category.EDUCATIONAL_GAME),
    ("entertainment", Category.ENTERTAINMENT),
    ("familygame", Category.FAMILY_GAME),
    ("familygames", Category.FAMILY_GAME),
    ("finance", Category.FINANCE),
    ("fitness", Category.HEALTHCARE_AND_FITNESS),
    ("game", Category.GAME),
    ("games", Category.GAME),
    ("graphicdesign", Category.GRAPHICS_AND_DESIGN),
    ("graphicsanddesign", Category.GRAPHICS_AND_DESIGN),
    ("graphicsdesign", Category.GRAPHICS_AND_DESIGN),
    ("healthcareandfitness", Category.HEALTHCARE_AND_FITNESS),
    ("healthcarefitness", Category.HEALTHCARE_AND_FITNESS),
    ("kidsgame", Category.KIDS_GAME),
    ("kidsgames", Category.KIDS_GAME),
    ("lifestyle", Category.LIFESTYLE),
    ("logicgame", Category.PUZZLE_GAME),
    ("medical", Category.MEDICAL),
    ("medicalsoftware", Category.MEDICAL),
    ("music", Category.MUSIC),
    ("musicgame", Category.MUSIC_GAME),
    ("musicgames", Category.MUSIC_GAME),
    ("news", Category.NEWS),
    ("photography", Category.PHOTOGRAPHY),
    ("productivity", Category.PRODUCTIVITY),
    ("puzzlegame", Category.PUZZLE_GAME),
    ("puzzlegames", Category.PUZZLE_GAME),
    ("racinggame", Category.RACING_GAME),
    ("racinggames", Category.RACING_GAME),
    ("reference", Category.REFERENCE),
    ("roleplaying", Category.ROLE_PLAYING_GAME),
    ("roleplayinggame", Category.ROLE_PLAYING_GAME),
    ("roleplayinggames", Category.ROLE_PLAYING_GAME),
    ("rpg", Category.ROLE_PLAYING_GAME),
    ("simulationgame", Category.SIMULATION_GAME),
    ("simulationgames", Category.SIMULATION_GAME),
    ("socialnetwork", Category.SOCIAL_NETWORKING),
    ("socialnetworking", Category.SOCIAL_NETWORKING),
    ("sports", Category.SPORTS),
    ("sportsgame", Category.SPORTS_GAME),
    ("sportsgames", Category.SPORTS_GAME),
    ("strategygame", Category.STRATEGY_GAME),
    ("strategygames", Category.STRATEGY_GAME),
    ("travel", Category.TRAVEL),
    ("triviagame", Category.TRIVIA_GAME),
    ("triviagames", Category.TRIVIA_GAME),
    ("utilities", Category.UTILITY),
    ("utility", Category.UTILITY),
    ("video", Category.VIDEO),
    ("weather", Category.WEATHER),
    ("wordgame", Category.WORD_GAME),
    ("wordgames", Category.WORD_GAME),
)


@dataclass(frozen=True)
class CategoryMatch:
    """Outcome of resolving free text: a category, or a failure with an optional hint."""

    category: Optional[Category] = None
    suggestion: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.category is not None


def canonicalize(text: str) -> str:
    """Lowercase, drop the macOS category prefix, and remove spaces and hyphens."""
    lowered = text.lower()
    if lowered.startswith(OSX_APP_CATEGORY_PREFIX):
        lowered = lowered[len(OSX_APP_CATEGORY_PREFIX) :]
    return lowered.replace(" ", "").replace("-", "")


def resolve(text: str, threshold: float = CONFIDENCE_THRESHOLD) -> CategoryMatch:
    """Resolve ``text`` to a category, or suggest the closest known name.

    Exact alias matches always win. Otherwise the alias with the highest
    Jaro-Winkler similarity is suggested when it scores at least
    ``threshold``; the first alias in table order wins ties.
    """
    key = canonicalize(text)

    for alias, category in CATEGORY_ALIASES:
        if key == alias:
            return CategoryMatch(category=category)

    best_score = 0.0
    best_category: Optional[Category] = None
    for alias, category in CATEGORY_ALIASES:
        score = jellyfish.jaro_winkler_similarity(key, alias)
        if score >= threshold and score > best_score:
            best_score = score
            best_category = category

    return CategoryMatch(suggestion=best_category.canonical if best_category else None)


def parse_category(text: str) -> Category:
    """Like :func:`resolve`, but raise :class:`CategoryError` on failure."""
    match = resolve(text)
    if match.category is None:
        raise CategoryError(text, match.suggestion)
    return match.category
