"""Rule-based field extraction over OCR text.

Normalises whitespace once, then applies the generic rules of a pattern
registry (all matches) and the field rules of the document's group
(first match each). Identity numbers found on identity documents are
annotated with their check-letter validity.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from docfields.profiles import DocumentClass, get_profile
from docfields.utils.logger import get_logger
from docfields.validation.checksum import validate_identity_number

from .patterns import DEFAULT_REGISTRY, PatternRegistry, PatternRule

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")

IDENTITY_FIELDS = ("NIF", "NIE")


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs to single spaces and strip both ends."""
    return _WHITESPACE.sub(" ", text).strip()


def extract_all(text: str, rules: Iterable[PatternRule]) -> dict[str, list[str]]:
    """Find every non-overlapping match of each rule.

    Args:
        text: Text to search.
        rules: Rules to apply.

    Returns:
        Mapping of rule name to matched strings in left-to-right order,
        duplicates included. Rules without matches map to an empty list.
    """
    return {
        rule.name: [match.group(0) for match in rule.pattern.finditer(text)]
        for rule in rules
    }


def extract_first(text: str, rule: PatternRule) -> str | None:
    """Return the first match of ``rule``, or ``None`` if there is none.

    The first capture group is returned when the pattern has one,
    otherwise the whole match; either way surrounding whitespace is
    stripped.
    """
    match = rule.pattern.search(text)
    if match is None:
        return None
    value = match.group(1) if match.re.groups else match.group(0)
    return value.strip()


@dataclass
class ExtractionResult:
    """Fields extracted from a document's text.

    ``fields`` holds lists for generic rules and single strings for
    labelled fields; absent fields are left out. ``identity_validity``
    runs parallel to the NIF/NIE lists of identity documents.
    """

    fields: dict[str, str | list[str]] = field(default_factory=dict)
    identity_validity: dict[str, list[bool]] = field(default_factory=dict)
    normalized_text: str = ""

    def is_valid(self, name: str, index: int = 0) -> bool | None:
        """Check-letter validity of an identity match, ``None`` if not annotated."""
        flags = self.identity_validity.get(name)
        if flags is None or index >= len(flags):
            return None
        return flags[index]


class FieldExtractor:
    """Applies a pattern registry to OCR text for a document class.

    Args:
        registry: Pattern registry to use; defaults to the built-in table.
    """

    def __init__(self, registry: PatternRegistry = DEFAULT_REGISTRY) -> None:
        self.registry = registry

    def extract(
        self, text: str, document_class: DocumentClass | str
    ) -> ExtractionResult:
        """Extract generic and class-specific fields from text.

        Args:
            text: Raw OCR text, possibly multi-line or empty.
            document_class: Class selecting the labelled field rules.

        Returns:
            Extraction result with found fields and identity validity.
        """
        profile = get_profile(document_class)
        cleaned = normalize_whitespace(text or "")
        result = ExtractionResult(normalized_text=cleaned)

        if not cleaned:
            logger.info("No text to extract fields from")
            return result

        generic = extract_all(cleaned, self.registry.generic.values())
        for name, matches in generic.items():
            if matches:
                result.fields[name] = matches

        for rule in self.registry.field_rules(profile.field_group):
            value = extract_first(cleaned, rule)
            if value:
                result.fields[rule.name] = value

        if profile.validate_identity:
            self._annotate_identity(result)

        logger.info(
            "Extracted %d fields from %d characters", len(result.fields), len(cleaned)
        )
        return result

    def _annotate_identity(self, result: ExtractionResult) -> None:
        found = False
        for name in IDENTITY_FIELDS:
            matches = result.fields.get(name)
            if not isinstance(matches, list):
                continue
            found = True
            result.identity_validity[name] = [
                validate_identity_number(code) for code in matches
            ]
            logger.debug(
                "%s matches: %s",
                name,
                ", ".join(
                    f"{code} ({'valid' if ok else 'invalid'})"
                    for code, ok in zip(matches, result.identity_validity[name])
                ),
            )

        if not found:
            logger.info(
                "No identity numbers found in %d characters of text",
                len(result.normalized_text),
            )
