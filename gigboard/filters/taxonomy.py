from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

import yaml

LOGGER = logging.getLogger(__name__)


class Industry(str, Enum):
    """Closed set of industry labels.

    Declaration order matters: the classifier breaks score ties in favour of
    the label declared first. ``OTHER`` is the fallback and has no keywords.
    """

    DESIGN = "Design"
    DEVELOPMENT = "Development"
    DATA = "Data"
    PYTHON = "Python"
    MARKETING = "Marketing"
    WRITING = "Writing"
    SALES = "Sales"
    PROJECT_MANAGEMENT = "Project Management"
    FINANCE = "Finance"
    LEGAL = "Legal"
    OPERATIONS = "Operations"
    HR = "HR"
    COACHING = "Coaching"
    CONSULTING = "Consulting"
    TRANSLATION = "Translation"
    VIDEO_AUDIO = "Video & Audio"
    CUSTOMER_SUPPORT = "Customer Support"
    OTHER = "Other"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_label(cls, label: str | None) -> "Industry | None":
        """Case-insensitive lookup by display label; None when unknown."""
        wanted = (label or "").strip().lower()
        if not wanted:
            return None
        for member in cls:
            if member.value.lower() == wanted:
                return member
        return None


Taxonomy = Mapping[Industry, Tuple[str, ...]]

# --- Keyword taxonomy --------------------------------------------------------
# Short tokens (<= 3 chars) and the acronyms in rules.WHOLE_WORD_ACRONYMS are
# matched on word boundaries; everything else is a substring match.
KEYWORDS: Dict[Industry, Tuple[str, ...]] = {
    Industry.DESIGN: (
        "graphic design", "visual design", "brand design", "logo design",
        "illustration", "figma", "photoshop", "illustrator", "sketch",
        "adobe creative", "branding", "print design", "ui designer",
        "ux designer", "ui/ux", "user interface", "user experience",
        "wireframe", "prototype", "usability", "interaction design",
        "product design", "design system", "packaging design",
        "packaging designer", "designer",
    ),
    Industry.DEVELOPMENT: (
        "developer", "development", "programming", "code", "software",
        "frontend", "backend", "fullstack", "javascript", "react", "angular",
        "vue", "node.js", "php", "ruby", "java", "c#", "c++", "swift",
        "kotlin", "flutter", "react native", "web development",
        "mobile development",
    ),
    Industry.DATA: (
        "data analyst", "data scientist", "machine learning", "ai",
        "artificial intelligence", "sql", "database", "tableau", "power bi",
        "excel analytics", "statistics", "modeling", "visualization",
        "big data", "bi", "business intelligence",
    ),
    Industry.PYTHON: (
        "python", "django", "flask", "pandas", "numpy", "tensorflow",
        "pytorch", "jupyter", "scikit-learn",
    ),
    Industry.MARKETING: (
        "marketing", "seo", "sem", "social media marketing",
        "content marketing", "email marketing", "digital marketing",
        "growth marketing", "advertising", "campaign management",
    ),
    Industry.WRITING: (
        "content writer", "copywriter", "blog writing", "article writing",
        "technical writing", "documentation", "journalism", "editing",
        "proofreading",
    ),
    Industry.SALES: (
        "sales", "business development", "account management",
        "customer success", "lead generation", "crm", "revenue",
        "sales representative",
    ),
    Industry.PROJECT_MANAGEMENT: (
        "project manager", "scrum master", "agile", "product manager",
        "coordinator", "planning", "roadmap", "stakeholder management",
    ),
    Industry.FINANCE: (
        "finance", "accounting", "bookkeeping", "financial analyst", "budget",
        "tax", "payroll", "quickbooks", "financial planning",
    ),
    Industry.LEGAL: (
        "legal", "lawyer", "attorney", "paralegal", "contract", "compliance",
        "law", "litigation",
    ),
    Industry.OPERATIONS: (
        "operations", "logistics", "supply chain", "process improvement",
        "optimization", "efficiency", "workflow",
    ),
    Industry.HR: (
        "human resources", "hr", "recruiting", "talent acquisition", "hiring",
        "onboarding", "employee relations", "benefits",
    ),
    Industry.COACHING: (
        "coach", "coaching", "life coach", "career coach", "executive coach",
        "business coach", "performance coach", "leadership coach", "mentor",
        "mentoring",
    ),
    Industry.CONSULTING: (
        "consultant", "consulting", "advisory", "strategy", "business analyst",
        "transformation", "management consultant", "strategy consultant",
    ),
    Industry.TRANSLATION: (
        "translation", "translator", "language", "localization",
        "multilingual", "interpreter",
    ),
    Industry.VIDEO_AUDIO: (
        "video editing", "audio editing", "video production", "youtube",
        "podcast", "sound design", "voice over", "animation",
        "motion graphics",
    ),
    Industry.CUSTOMER_SUPPORT: (
        "customer support", "customer service", "help desk",
        "technical support", "chat support", "call center",
    ),
}


def keywords_for(industry: Industry | str, taxonomy: Taxonomy | None = None) -> Tuple[str, ...]:
    """Keywords for a label (enum member or display text). Unknown -> ()."""
    member = industry if isinstance(industry, Industry) else Industry.from_label(industry)
    if member is None:
        return ()
    return tuple((taxonomy or active_taxonomy()).get(member, ()))


# --- YAML overrides ----------------------------------------------------------
def load_taxonomy_file(path: str) -> Dict[Industry, Tuple[str, ...]]:
    """Load keyword overrides from YAML.

    The file maps display labels to keyword lists::

        Python:
          - python
          - fastapi

    Labels outside the closed set are ignored with a warning; labels that are
    not mentioned keep their built-in keywords.
    """
    with open(path, "r", encoding="utf-8") as f:
        data: Any = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"taxonomy file {path} must contain a mapping")

    merged: Dict[Industry, Tuple[str, ...]] = dict(KEYWORDS)
    for label, words in data.items():
        member = Industry.from_label(str(label))
        if member is None or member is Industry.OTHER:
            LOGGER.warning("taxonomy file=%s unknown industry=%r ignored", path, label)
            continue
        cleaned = tuple(
            str(w).strip().lower() for w in (words or []) if str(w).strip()
        )
        merged[member] = cleaned
    return merged


_ACTIVE: Dict[str, Dict[Industry, Tuple[str, ...]]] = {}


def active_taxonomy() -> Taxonomy:
    """Built-in keywords, or the YAML overrides named by GIGBOARD_TAXONOMY_FILE."""
    path = os.getenv("GIGBOARD_TAXONOMY_FILE", "")
    if not path:
        return KEYWORDS
    if path not in _ACTIVE:
        _ACTIVE[path] = load_taxonomy_file(path)
        LOGGER.info("taxonomy loaded file=%s industries=%s", path, len(_ACTIVE[path]))
    return _ACTIVE[path]


__all__ = [
    "Industry",
    "KEYWORDS",
    "Taxonomy",
    "keywords_for",
    "load_taxonomy_file",
    "active_taxonomy",
]
