"""
Flat-file content layer for the publication.

Layout under the data directory:

  current_issue_number.txt     → integer pointer to the live issue
  issue<N>/articles.json       → {section: [article, ...]}
  issue<N>/connections.json    → connections puzzle
  issue<N>/crossword.json      → crossword puzzle
  images/<name>                → source images for the resize endpoint

Every read goes to disk; nothing is cached apart from the current issue
number, which is read once when the store is created.
"""
import json
import logging
import re
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

DOCUMENTS = ("articles", "connections", "crossword")

ISSUE_DIR_PATTERN = re.compile(r"^issue(\d+)$")

# Long-form dates seen in hand-edited issue files
DATE_FORMATS = ("%B %d, %Y", "%b %d, %Y", "%d %B %Y", "%Y/%m/%d")


class ContentError(Exception):
    """A backing file could not be read or parsed."""


class ContentNotFound(ContentError):
    """The requested file or collection does not exist."""


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def parse_date(value: Union[str, date, datetime]) -> datetime:
    """Parse an article date into an aware UTC datetime. Raises ValueError."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            for fmt in DATE_FORMATS:
                try:
                    parsed = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
            else:
                raise ValueError(f"Unrecognised date: {value!r}")
    else:
        raise ValueError(f"Unrecognised date: {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

def _field_text(article: Dict[str, Any], field: str, sub: Optional[str] = None) -> str:
    value = article.get(field)
    if sub is not None:
        value = value.get(sub) if isinstance(value, dict) else None
    return value if isinstance(value, str) else ""


def search_articles(articles: List[Dict[str, Any]], terms: str) -> List[Dict[str, Any]]:
    """Case-insensitive substring match on title, summary and author."""
    needle = terms.lower()
    results = []
    for art in articles:
        if (needle in _field_text(art, "title", "text").lower()
                or needle in _field_text(art, "summary", "content").lower()
                or needle in _field_text(art, "author").lower()):
            results.append(art)
    return results


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class ContentStore:
    def __init__(self, data_dir: Union[str, Path], default_issue_number: int = 10):
        self.data_dir = Path(data_dir)
        self.default_issue_number = default_issue_number
        self.current_issue_number = self._load_current_issue_number()

    def _load_current_issue_number(self) -> int:
        path = self.data_dir / "current_issue_number.txt"
        try:
            return int(path.read_text(encoding="utf-8").strip())
        except (OSError, ValueError) as e:
            logger.error(f"Error reading current issue number from {path}: {e}")
            return self.default_issue_number

    # ---- Issues ----

    def issue_numbers(self) -> List[int]:
        """Issue numbers with a directory on disk, ascending."""
        if not self.data_dir.is_dir():
            return []
        numbers = []
        for entry in self.data_dir.iterdir():
            match = ISSUE_DIR_PATTERN.match(entry.name)
            if match and entry.is_dir():
                numbers.append(int(match.group(1)))
        return sorted(numbers)

    def _read_json(self, path: Path) -> Any:
        if not path.is_file():
            raise ContentNotFound(f"{path} not found")
        try:
            with path.open(encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise ContentError(f"Failed to read {path}: {e}") from e

    def load_issue_document(self, issue_number: int, name: str) -> Any:
        """Load articles/connections/crossword JSON for one issue."""
        if name not in DOCUMENTS:
            raise ContentNotFound(f"Unknown document '{name}'")
        return self._read_json(self.data_dir / f"issue{issue_number}" / f"{name}.json")

    def load_current(self, name: str) -> Any:
        return self.load_issue_document(self.current_issue_number, name)

    # ---- Articles ----

    def _issue_sections(self) -> List[Dict[str, Any]]:
        sections = []
        for number in self.issue_numbers():
            try:
                data = self.load_issue_document(number, "articles")
            except ContentNotFound:
                continue
            if not isinstance(data, dict):
                raise ContentError(f"issue{number}/articles.json is not an object of sections")
            sections.append(data)
        return sections

    def all_articles(self) -> List[Dict[str, Any]]:
        """Every article of every issue, flattened across sections."""
        articles: List[Dict[str, Any]] = []
        for data in self._issue_sections():
            for section in data.values():
                if isinstance(section, list):
                    articles.extend(section)
        return articles

    def load_collection(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Dated articles across all issues, optionally limited to one section.

        Articles without a parseable date are dropped so callers can sort on
        `parse_date(article["date"])` safely. Raises ContentNotFound when no
        issue has any matching section.
        """
        wanted = category.lower() if category else None
        found = False
        articles: List[Dict[str, Any]] = []
        for data in self._issue_sections():
            for name, section in data.items():
                if wanted is not None and name.lower() != wanted:
                    continue
                if not isinstance(section, list):
                    continue
                found = True
                for art in section:
                    try:
                        parse_date(art["date"])
                    except (KeyError, TypeError, ValueError):
                        logger.warning(f"Skipping article without a valid date in section '{name}'")
                        continue
                    articles.append(art)

        if not found:
            label = f"category '{category}'" if category else "articles"
            raise ContentNotFound(f"No {label} found")
        return articles

    # ---- Images ----

    def image_path(self, name: str) -> Path:
        images_dir = (self.data_dir / "images").resolve()
        path = (images_dir / name).resolve()
        if path.parent != images_dir or not path.is_file():
            raise ContentNotFound(f"Image '{name}' not found")
        return path
