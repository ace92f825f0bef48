"""Prompt loading and rendering for article summarization."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Sequence

from ..core.types import SummaryRequest


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"

MAX_TEXT_CHARS = 15000
POINT_COUNT = 10
FALLBACK_CATEGORY = "Miscellaneous"

CATEGORY_TAXONOMY: dict[str, tuple[str, ...]] = {
    "Science & Technology": (
        "Acoustics", "Aerospace Engineering", "Agronomy", "Artificial Intelligence", "Astronomy",
        "Astrophysics", "Automation", "Bioinformatics", "Biotechnology", "Blockchain", "Botany",
        "Chemical Engineering", "Civil Engineering", "Cloud Computing", "Computer Vision",
        "Consumer Electronics", "Cryptography", "Cybersecurity", "Data Science", "Ecology",
        "Electrical Engineering", "Entomology", "Epidemiology", "Evolutionary Biology",
        "Forensic Science", "Game Development", "Genetics", "Geology", "Hacking", "Hydrology",
        "Immunology", "Information Technology", "Internet of Things (IoT)", "Machine Learning",
        "Marine Biology", "Materials Science", "Mechanical Engineering", "Meteorology",
        "Microbiology", "Nanotechnology", "Neuroscience", "Nuclear Physics", "Oceanography",
        "Optics", "Organic Chemistry", "Paleontology", "Particle Physics", "Pharmacology",
        "Quantum Mechanics", "Robotics", "Software Engineering", "Space Exploration",
        "Sustainability", "Telecommunications", "Thermodynamics", "Toxicology",
        "Virtual Reality (VR)", "Web Development", "Zoology",
    ),
    "Humanities & Social Sciences": (
        "Anthropology", "Archaeology", "Cognitive Science", "Criminology", "Demography",
        "Developmental Psychology", "Epistemology", "Ethics", "Ethnography", "Gender Studies",
        "Genealogy", "Geography", "Geopolitics", "History (Ancient, Medieval, Modern)",
        "Human Rights", "International Relations", "Law (Constitutional, Corporate, Criminal)",
        "Linguistics", "Logic", "Media Studies", "Metaphysics", "Military History", "Mythology",
        "Pedagogy", "Philosophy", "Political Science", "Psychology (Clinical, Social, Behavioral)",
        "Public Administration", "Religious Studies", "Social Work", "Sociology", "Theology",
        "Urban Planning",
    ),
    "Business & Economics": (
        "Accounting", "Advertising", "Behavioral Economics", "Branding", "Business Ethics",
        "Corporate Governance", "Cryptocurrency", "Digital Marketing", "E-commerce",
        "Entrepreneurship", "Finance (Personal, Corporate)", "Human Resources",
        "Industrial Relations", "Insurance", "International Trade", "Investing", "Logistics",
        "Macroeconomics", "Management", "Microeconomics", "Operations Management",
        "Project Management", "Real Estate", "Sales", "Stock Market", "Supply Chain Management",
        "Taxation", "Venture Capital",
    ),
    "Arts, Culture & Media": (
        "Animation", "Architecture", "Art History", "Calligraphy", "Cinematography",
        "Creative Writing", "Culinary Arts", "Dance", "Design (Graphic, Industrial, Interior)",
        "Fashion", "Film Studies", "Fine Arts", "Journalism", "Literature", "Music Theory",
        "Performing Arts", "Photography", "Poetry", "Pop Culture", "Publishing", "Sculpture",
        "Stand-up Comedy", "Television", "Textile Design", "Theater", "Video Games", "Visual Arts",
    ),
    "Health, Lifestyle & Sports": (
        "Alternative Medicine", "Athletic Training", "Biohacking", "Dental Hygiene", "Dermatology",
        "Dietetics", "Emergency Medicine", "Ergonomics", "Fitness", "Gastronomy", "Geriatrics",
        "Holistic Health", "Kinesiology", "Meditation", "Mental Health", "Minimalism", "Nursing",
        "Nutrition", "Occupational Therapy", "Parenting", "Pediatrics", "Personal Development",
        "Physical Therapy", "Productivity", "Psychiatry", "Public Health", "Sports Management",
        "Sports Psychology", "Sports Science", "Survivalism", "Travel & Tourism",
        "Veterinary Medicine", "Wellness", "Yoga",
    ),
    "Niche & Miscellaneous": (
        "Astrology", "Aviation", "Bibliophilia", "Carpentry", "Chess",
        "Collecting (Philately, Numismatics)", "Conspiracy Theories", "Cryptozoology",
        "DIY & Making", "Esotericism", "Etiquette", "Futurism", "Gardening", "Genealogy",
        "Horticulture", "Magic (Illusion)", "Maritime Studies", "Military Strategy", "Numismatics",
        "Occultism", "Parapsychology", "Philanthropy", "Survival Skills", "Transhumanism",
        "True Crime", "Vexillology (Flags)",
    ),
}

ALL_CATEGORIES: frozenset[str] = frozenset(
    category for categories in CATEGORY_TAXONOMY.values() for category in categories
) | {FALLBACK_CATEGORY}


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def _render_template(name: str, **values: object) -> str:
    template = _load_template(name)
    return template.format(**values)


def clip_text(text: str, max_chars: int = MAX_TEXT_CHARS) -> str:
    """Hard-cut ``text`` to ``max_chars`` characters."""
    return text[:max_chars] if len(text) > max_chars else text


def category_block() -> str:
    return "\n".join(
        f"{domain}: {', '.join(categories)}" for domain, categories in CATEGORY_TAXONOMY.items()
    )


def build_prompt(request: SummaryRequest, max_chars: int = MAX_TEXT_CHARS) -> str:
    return _render_template(
        "summary",
        point_count=POINT_COUNT,
        fallback_category=FALLBACK_CATEGORY,
        categories=category_block(),
        author=request.author or "",
        title=request.title or "",
        url=request.url,
        text=clip_text(request.text or "", max_chars),
    )


def build_batch_prompt(requests: Sequence[SummaryRequest], max_chars: int = MAX_TEXT_CHARS) -> str:
    blocks = []
    for idx, request in enumerate(requests):
        blocks.append(
            "\n".join(
                [
                    f"Article #{idx + 1}:",
                    f"Author: {request.author or ''}",
                    f"Title: {request.title or ''}",
                    f"URL: {request.url}",
                    f"Text: {clip_text(request.text or '', max_chars)}",
                ]
            )
        )
    return _render_template(
        "batch_summary",
        article_count=len(requests),
        point_count=POINT_COUNT,
        fallback_category=FALLBACK_CATEGORY,
        categories=category_block(),
        articles="\n\n".join(blocks),
    )
