#!/usr/bin/env python3
"""
Merchant Name Normalization

Statement descriptions ("AMZN MKTP US*2K4", "SQ *BLUE BOTTLE #12") and OCR'd
receipt merchants ("Amazon.com", "Blue Bottle Coffee") rarely agree verbatim.
MerchantNormalizer canonicalizes both sides so they can be compared.

Pipeline (order matters):
1. Uppercase and trim
2. Strip payment-processor prefixes (TST*, SQ *, PAYPAL *, ...)
3. Strip store numbers and long trailing digit runs
4. Apply the alias table (regex aliases, then literal aliases longest first)
5. Strip corporate suffixes (INC, LLC, CORP, ...)
6. Collapse whitespace, title-case words longer than two characters

The alias table and affix lists are plain data. Aliases can be added at
runtime and loaded from or saved to a YAML file.
"""

import logging
import re
import threading
from dataclasses import asdict, dataclass
from pathlib import Path

import yaml
from rapidfuzz import fuzz

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MerchantAlias:
    """Maps a known abbreviation or brand variant to a canonical name."""

    pattern: str
    normalized: str
    is_regex: bool = False


DEFAULT_PREFIXES = ["TST*", "SQ *", "SQU*", "PAYPAL *", "PP*", "SP "]

DEFAULT_SUFFIXES = [" INC", " LLC", " CORP", " CO", " LTD", " COMPANY"]

DEFAULT_ALIASES = [
    # Amazon
    MerchantAlias("AMZN MKTP", "Amazon"),
    MerchantAlias("AMAZON MKTP", "Amazon"),
    MerchantAlias("AMAZON.COM", "Amazon"),
    MerchantAlias("AMZN", "Amazon"),
    MerchantAlias("AMAZN", "Amazon"),
    # Starbucks
    MerchantAlias("STARBUCKS CORP", "Starbucks"),
    MerchantAlias("STARBUCKS STORE", "Starbucks"),
    MerchantAlias("SBUX", "Starbucks"),
    MerchantAlias("SBX", "Starbucks"),
    # Uber
    MerchantAlias("UBER *EATS", "Uber Eats"),
    MerchantAlias("UBER*EATS", "Uber Eats"),
    MerchantAlias("UBER EATS", "Uber Eats"),
    MerchantAlias("UBEREATS", "Uber Eats"),
    MerchantAlias("UBER * TRIP", "Uber"),
    MerchantAlias("UBER*TRIP", "Uber"),
    MerchantAlias("UBER TRIP", "Uber"),
    # McDonald's
    MerchantAlias("MCDONALDS", "McDonald's"),
    MerchantAlias("MC DONALDS", "McDonald's"),
    MerchantAlias("MCD", "McDonald's"),
    # Walmart
    MerchantAlias("WALMART.COM", "Walmart"),
    MerchantAlias("WAL-MART", "Walmart"),
    MerchantAlias("WAL MART", "Walmart"),
    MerchantAlias("WMT", "Walmart"),
    # Target
    MerchantAlias("TARGET.COM", "Target"),
    MerchantAlias("TGT", "Target"),
    # Fuel
    MerchantAlias("SHELL OIL", "Shell"),
    MerchantAlias("EXXONMOBIL", "ExxonMobil"),
    MerchantAlias("EXXON MOBIL", "ExxonMobil"),
    # Airlines
    MerchantAlias("AMERICAN AIR", "American Airlines"),
    MerchantAlias("UNITED AIR", "United Airlines"),
    MerchantAlias("SOUTHWEST AIR", "Southwest Airlines"),
    MerchantAlias("DELTA AIR", "Delta Airlines"),
    MerchantAlias("AA", "American Airlines"),
    MerchantAlias("UA", "United Airlines"),
    MerchantAlias("WN", "Southwest Airlines"),
    MerchantAlias("DL", "Delta Airlines"),
    # Hotels
    MerchantAlias("IHG", "InterContinental Hotels"),
    # Streaming
    MerchantAlias("DISNEY+", "Disney Plus"),
    MerchantAlias("DISNEY PLUS", "Disney Plus"),
    MerchantAlias("HBO MAX", "HBO Max"),
    MerchantAlias("HBOMAX", "HBO Max"),
    # Delivery
    MerchantAlias("DOORDASH", "DoorDash"),
    MerchantAlias("GRUBHUB", "Grubhub"),
    MerchantAlias("DD", "DoorDash"),
    MerchantAlias("GH", "Grubhub"),
    # Prefix patterns
    MerchantAlias(r"^AMZN\s*MKTP\b.*$", "Amazon", is_regex=True),
    MerchantAlias(r"^AMAZON\.COM\*.*$", "Amazon", is_regex=True),
]

# Literal patterns this short only match whole tokens ("AA" must not hit "BAAR")
SHORT_PATTERN_LENGTH = 3

KEYWORD_BONUS = 0.2

_STORE_NUMBER = re.compile(r"\s+(?:STORE|LOCATION|BRANCH)\s*#?\s*\d+", re.IGNORECASE)
_HASH_NUMBER = re.compile(r"\s*#\s*\d+\b")
_TRAILING_DIGITS = re.compile(r"\s+\d{4,}$")
_WHITESPACE = re.compile(r"\s+")
_EDGE_PUNCTUATION = re.compile(r"^[*\-\s]+|[*\-\s]+$")


class MerchantNormalizer:
    """
    Canonicalizes merchant strings and scores their similarity.

    Instances are constructed once and passed to the components that need
    them; tests build fresh ones.
    """

    def __init__(
        self,
        aliases: list[MerchantAlias] | None = None,
        prefixes: list[str] | None = None,
        suffixes: list[str] | None = None,
    ):
        self._lock = threading.Lock()
        self._aliases: list[MerchantAlias] = list(DEFAULT_ALIASES if aliases is None else aliases)
        self.prefixes = list(DEFAULT_PREFIXES if prefixes is None else prefixes)
        self.suffixes = list(DEFAULT_SUFFIXES if suffixes is None else suffixes)
        self._compiled: list[tuple[re.Pattern, str]] = []
        self._literals: list[MerchantAlias] = []
        self._rebuild()

    # Alias table management

    def add_alias(self, pattern: str, normalized: str, is_regex: bool = False) -> MerchantAlias:
        """
        Add an alias at runtime; takes effect on the next normalize() call.

        Raises:
            ValueError: If a regex alias doesn't compile
        """
        pattern = pattern if is_regex else pattern.strip().upper()
        if is_regex:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid alias regex {pattern!r}: {e}") from e
        alias = MerchantAlias(pattern=pattern, normalized=normalized, is_regex=is_regex)
        with self._lock:
            self._aliases.append(alias)
            self._rebuild()
        logger.info("Added merchant alias %r -> %r", pattern, normalized)
        return alias

    def aliases(self) -> list[MerchantAlias]:
        """Copy of the current alias table."""
        return list(self._aliases)

    def replace_aliases(self, aliases: list[MerchantAlias]) -> None:
        """Swap in a whole new alias table."""
        with self._lock:
            self._aliases = list(aliases)
            self._rebuild()

    def load_aliases(self, path: Path) -> int:
        """
        Load additional aliases from a YAML file.

        The file holds a list of {pattern, normalized, is_regex} mappings.
        Missing files are not an error.

        Returns:
            Number of aliases loaded
        """
        if not path.exists():
            logger.debug("No merchant alias file at %s", path)
            return 0

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or []

        loaded = 0
        for entry in data:
            self.add_alias(entry["pattern"], entry["normalized"], bool(entry.get("is_regex", False)))
            loaded += 1
        logger.info("Loaded %d merchant aliases from %s", loaded, path)
        return loaded

    def save_aliases(self, path: Path) -> None:
        """Write the full alias table to a YAML file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump([asdict(a) for a in self._aliases], f, sort_keys=False, allow_unicode=True)

    def _rebuild(self) -> None:
        self._compiled = [
            (re.compile(a.pattern, re.IGNORECASE), a.normalized) for a in self._aliases if a.is_regex
        ]
        # Longest first so "AMZN MKTP" wins over "AMZN"
        self._literals = sorted(
            (a for a in self._aliases if not a.is_regex), key=lambda a: len(a.pattern), reverse=True
        )

    # Normalization

    def normalize(self, name: str | None) -> str:
        """Return the canonical form of a merchant string ('' for no input)."""
        if not name:
            return ""

        normalized = name.upper().strip()
        normalized = self._strip_prefixes(normalized)
        normalized = self._strip_store_numbers(normalized)
        normalized = self._apply_aliases(normalized)
        normalized = self._strip_suffixes(normalized)
        return self._clean(normalized)

    def _strip_prefixes(self, name: str) -> str:
        for prefix in self.prefixes:
            if name.startswith(prefix):
                name = name[len(prefix):].lstrip()
        return name

    def _strip_store_numbers(self, name: str) -> str:
        name = _STORE_NUMBER.sub("", name)
        name = _HASH_NUMBER.sub("", name)
        return _TRAILING_DIGITS.sub("", name)

    def _apply_aliases(self, name: str) -> str:
        for regex, replacement in self._compiled:
            if regex.search(name):
                return regex.sub(replacement, name)

        tokens = name.split()
        for alias in self._literals:
            if len(alias.pattern) <= SHORT_PATTERN_LENGTH:
                if alias.pattern in tokens:
                    return " ".join(alias.normalized if t == alias.pattern else t for t in tokens)
            elif alias.pattern in name:
                return name.replace(alias.pattern, alias.normalized, 1)
        return name

    def _strip_suffixes(self, name: str) -> str:
        for suffix in self.suffixes:
            if name.upper().endswith(suffix):
                name = name[: -len(suffix)]
        return name

    @staticmethod
    def _clean(name: str) -> str:
        name = _WHITESPACE.sub(" ", name).strip()
        name = _EDGE_PUNCTUATION.sub("", name)
        words = []
        for word in name.split(" "):
            if len(word) <= 2:
                words.append(word)
            else:
                words.append(word[0].upper() + word[1:].lower())
        return " ".join(words)

    # Similarity

    def similarity(self, a: str | None, b: str | None) -> float:
        """
        Similarity of two merchant strings in [0, 1].

        Identical normalized names score exactly 1.0. Otherwise the token-set
        edit-distance ratio plus a bonus of up to 0.2 for shared significant
        tokens, clamped to 1.0.
        """
        left = self.normalize(a)
        right = self.normalize(b)
        if not left or not right:
            return 0.0
        if left == right:
            return 1.0

        base = fuzz.token_set_ratio(left, right) / 100
        return min(1.0, base + self._keyword_bonus(left, right))

    @staticmethod
    def _keyword_bonus(left: str, right: str) -> float:
        keywords_left = {w for w in left.split(" ") if len(w) > 2}
        keywords_right = {w for w in right.split(" ") if len(w) > 2}
        if not keywords_left or not keywords_right:
            return 0.0
        shared = len(keywords_left & keywords_right)
        return KEYWORD_BONUS * shared / max(len(keywords_left), len(keywords_right))
