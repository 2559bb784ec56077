"""Keyword-based skill extraction.

Maps free text (job descriptions, combined job fields) onto a canonical
skill vocabulary by case-insensitive alias containment.  No fuzzy
matching, no stemming: a canonical skill is found when one of its
aliases appears verbatim in the lowercased text.

The alias table is immutable configuration data.  Tests and callers
that need a different vocabulary construct their own
:class:`SkillExtractor` rather than mutating the default.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

DEFAULT_SKILL_ALIASES: Mapping[str, tuple[str, ...]] = MappingProxyType({
    # Frontend
    "React": ("react", "reactjs", "react.js"),
    "Next.js": ("next.js", "nextjs", "next"),
    "Vue": ("vue", "vuejs", "vue.js"),
    "Angular": ("angular", "angularjs"),
    "TypeScript": ("typescript", "ts"),
    "JavaScript": ("javascript", "js", "ecmascript"),
    "HTML": ("html", "html5"),
    "CSS": ("css", "css3", "scss", "sass", "less"),
    "Tailwind": ("tailwind", "tailwindcss"),
    "Styled Components": ("styled-components", "styled components"),
    # Backend
    "Node": ("node", "nodejs", "node.js"),
    "Python": ("python", "py"),
    "Java": ("java",),
    "Go": ("go", "golang"),
    "Rust": ("rust",),
    "PHP": ("php",),
    "Ruby": ("ruby", "rails", "ruby on rails"),
    ".NET": (".net", "dotnet", "c#"),
    # Databases
    "SQL": ("sql", "postgresql", "postgres", "mysql", "mariadb", "sqlite"),
    "MongoDB": ("mongodb", "mongo"),
    "Redis": ("redis",),
    "PostgreSQL": ("postgresql", "postgres"),
    "MySQL": ("mysql",),
    # Cloud & DevOps
    "AWS": ("aws", "amazon web services"),
    "Docker": ("docker",),
    "Kubernetes": ("kubernetes", "k8s"),
    "CI": ("ci/cd", "ci", "continuous integration", "jenkins", "github actions", "gitlab ci"),
    "Terraform": ("terraform",),
    # Design tools
    "Figma": ("figma",),
    "Sketch": ("sketch",),
    "Adobe XD": ("adobe xd", "xd"),
    "Photoshop": ("photoshop", "ps"),
    "Illustrator": ("illustrator", "ai"),
    # UX/UI
    "UX": ("ux", "user experience", "user research"),
    "UI": ("ui", "user interface", "interface design"),
    "Design Systems": ("design system", "design systems", "component library"),
    "Prototyping": ("prototyping", "prototype", "prototypes"),
    "Wireframing": ("wireframing", "wireframes", "wireframe"),
    # Testing
    "Jest": ("jest",),
    "Cypress": ("cypress",),
    "Unit Testing": ("unit test", "unit testing", "unit tests"),
    "E2E Testing": ("e2e", "end to end", "end-to-end"),
    # Mobile
    "React Native": ("react native", "react-native"),
    "Flutter": ("flutter",),
    "iOS": ("ios", "swift", "objective-c"),
    "Android": ("android", "kotlin", "java"),
    # Other
    "Git": ("git", "github", "gitlab", "bitbucket"),
    "REST": ("rest", "restful", "rest api"),
    "GraphQL": ("graphql",),
    "Microservices": ("microservices", "microservice"),
    "Agile": ("agile", "scrum", "kanban"),
    "Project Management": ("project management", "jira", "trello", "asana"),
})

# Category keyword lists, checked in order; first containing match wins.
_SKILL_CATEGORIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Frontend", ("react", "next.js", "vue", "angular", "typescript", "javascript", "html", "css")),
    ("Backend", ("node", "python", "java", "go", "rust", "php", "ruby", ".net")),
    ("Database", ("sql", "mongodb", "redis", "postgresql", "mysql")),
    ("DevOps", ("aws", "docker", "kubernetes", "ci", "terraform")),
    ("Design Tools", ("figma", "sketch", "adobe", "photoshop", "illustrator")),
    ("Design", ("ux", "ui", "design system", "prototyping", "wireframing")),
)


class SkillExtractor:
    """Extracts canonical skill names from free text.

    Parameters
    ----------
    aliases:
        Canonical skill name → alias strings.  Aliases are compared
        lowercased; the canonical name is what gets emitted.
    """

    def __init__(self, aliases: Mapping[str, tuple[str, ...]] = DEFAULT_SKILL_ALIASES) -> None:
        self._aliases = tuple(
            (skill, tuple(alias.lower() for alias in skill_aliases))
            for skill, skill_aliases in aliases.items()
        )

    def extract(self, text: str | None) -> list[str]:
        """Return the canonical skills mentioned in *text*, sorted alphabetically.

        Each canonical skill appears at most once however many of its
        aliases match.  Empty or ``None`` input yields ``[]``.
        """
        if not text:
            return []

        normalized = text.lower()
        found = {
            skill
            for skill, skill_aliases in self._aliases
            if any(alias in normalized for alias in skill_aliases)
        }
        return sorted(found)


_DEFAULT_EXTRACTOR = SkillExtractor()


def extract_skills(text: str | None) -> list[str]:
    """Extract canonical skills from *text* using the default vocabulary."""
    return _DEFAULT_EXTRACTOR.extract(text)


def normalize_skill(skill: str) -> str:
    """Trim and lowercase a skill name for comparison."""
    return skill.strip().lower()


def skill_category(skill: str) -> str:
    """Bucket a skill name into a coarse category for display.

    >>> skill_category("React Native")
    'Frontend'
    >>> skill_category("Accounting")
    'Other'
    """
    normalized = normalize_skill(skill)
    for category, keywords in _SKILL_CATEGORIES:
        if any(keyword in normalized for keyword in keywords):
            return category
    return "Other"
