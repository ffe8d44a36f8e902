"""
Water safety tips catalogue and the personal action plan shown beside it.

Tips are browsed by category or searched. A non-blank search looks across
every category, matching title, description or any tag without regard to
case. The personal plan (score, recommendations, badges) is fixed sample
content until plans are generated per user.
"""

# Standard library imports
from dataclasses import dataclass
from enum import Enum


class TipCategory(str, Enum):
    EMERGENCY = "emergency"
    CONSERVATION = "conservation"
    QUALITY = "quality"


DEFAULT_CATEGORY = TipCategory.EMERGENCY


@dataclass(frozen=True)
class WaterTip:
    id: int
    category: TipCategory
    title: str
    description: str
    tags: tuple[str, ...]

    def matches(self, query: str) -> bool:
        needle = query.lower()
        return (
            needle in self.title.lower()
            or needle in self.description.lower()
            or any(needle in tag.lower() for tag in self.tags)
        )


WATER_TIPS: tuple[WaterTip, ...] = (
    WaterTip(
        1,
        TipCategory.EMERGENCY,
        "What to do during flooding",
        "Turn off electricity, move valuable items to higher ground, and evacuate if necessary. "
        "Avoid walking through moving water.",
        ("flood", "emergency", "safety"),
    ),
    WaterTip(
        2,
        TipCategory.EMERGENCY,
        "Dealing with contaminated water",
        "Boil water for at least one minute before drinking. Use bottled water for cooking. "
        "Report to local authorities immediately.",
        ("contamination", "health", "safety"),
    ),
    WaterTip(
        3,
        TipCategory.EMERGENCY,
        "Emergency pipe leak response",
        "Turn off the main water valve immediately. Use towels to contain the spread and call a plumber "
        "as soon as possible.",
        ("leak", "emergency", "pipe"),
    ),
    WaterTip(
        4,
        TipCategory.CONSERVATION,
        "Daily water conservation tips",
        "Fix leaky faucets, take shorter showers, and turn off taps when brushing teeth. "
        "Use water-efficient appliances.",
        ("conservation", "household", "daily"),
    ),
    WaterTip(
        5,
        TipCategory.CONSERVATION,
        "Rainwater harvesting basics",
        "Install rain barrels to collect rainwater from rooftops. Use this water for gardens and "
        "non-potable purposes.",
        ("conservation", "rainwater", "sustainable"),
    ),
    WaterTip(
        6,
        TipCategory.CONSERVATION,
        "Reducing water usage in gardens",
        "Water plants during early morning or evening. Use drip irrigation systems and mulch to reduce "
        "evaporation.",
        ("conservation", "garden", "outdoor"),
    ),
    WaterTip(
        7,
        TipCategory.QUALITY,
        "Understanding water quality reports",
        "Learn to read and understand the annual water quality reports provided by your local water supplier.",
        ("quality", "education", "health"),
    ),
    WaterTip(
        8,
        TipCategory.QUALITY,
        "Signs of water contamination",
        "Watch for unusual odor, color, or taste in water. Cloudy appearance or floating particles may "
        "indicate contamination.",
        ("quality", "contamination", "health"),
    ),
    WaterTip(
        9,
        TipCategory.QUALITY,
        "Home water testing guide",
        "Use home water testing kits to check for common contaminants. Professional testing is recommended "
        "for serious concerns.",
        ("quality", "testing", "home"),
    ),
)

# Shortcuts offered next to the catalogue; each is used as a search query
SUGGESTED_SEARCHES = ("how to fix a leak", "water conservation tips", "boil water advisory", "flood preparation")


@dataclass(frozen=True)
class Badge:
    name: str
    icon: str


@dataclass(frozen=True)
class PersonalActionPlan:
    water_score: int
    recommendations: tuple[str, ...]
    badges_earned: tuple[Badge, ...]
    upcoming_badges: tuple[Badge, ...]


SAMPLE_ACTION_PLAN = PersonalActionPlan(
    water_score=87,
    recommendations=(
        "Fix the reported leak in your neighborhood within 48 hours",
        "Install water-efficient fixtures in your home",
        "Participate in the community rainwater harvesting initiative",
        "Report any signs of water contamination immediately",
    ),
    badges_earned=(Badge("Leak Detective", "droplet"), Badge("Community Guardian", "life-buoy")),
    upcoming_badges=(Badge("Water Saver", "droplet"), Badge("Flood Fighter", "alert-circle")),
)


def tips_in_category(category: TipCategory) -> list[WaterTip]:
    return [tip for tip in WATER_TIPS if tip.category == category]


def search_tips(query: str) -> list[WaterTip]:
    return [tip for tip in WATER_TIPS if tip.matches(query)]


def find_tips(category: TipCategory | None = None, query: str | None = None) -> list[WaterTip]:
    """Search results when ``query`` has text, otherwise the tips of ``category`` (emergency by default)."""
    query = (query or "").strip()
    if query:
        return search_tips(query)
    return tips_in_category(category or DEFAULT_CATEGORY)


def get_action_plan() -> PersonalActionPlan:
    return SAMPLE_ACTION_PLAN
