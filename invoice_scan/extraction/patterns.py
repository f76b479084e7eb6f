"""
Field Pattern Catalog.

Regular-expression rules for every field the generic extractor reads from
Norwegian service invoices. Each rule is a compiled pattern plus the order
in which its capture groups are tried, a default and the kind of value it
yields. Rules are built once at import time and never mutated; the catalog
can be shared between threads.

Resolution policy for one rule:
    1. Search the pattern in the full text.
    2. Return the first non-empty capture group, in declared order,
       whitespace-collapsed and stripped of separator punctuation.
    3. Otherwise resolve the fallback rule, if any.
    4. Otherwise return the rule's default.

Author: ML Engineering Team
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Optional, Pattern, Tuple

from invoice_scan.postprocessor.normalizers import AmountNormalizer, DateNormalizer, ZERO
from invoice_scan.utils.helpers import collapse_whitespace
from invoice_scan.utils.logger import get_logger

logger = get_logger(__name__)

TEXT = "text"
AMOUNT = "amount"
DATE = "date"

# Characters trimmed from both ends of a captured value
_STRIP_CHARS = " \t:;,-"

# "2 375,00", "950,00", "3025.50", "42"
AMOUNT_VALUE = r"(\d{1,3}(?:[ \u00a0]\d{3})+(?:[.,]\d{1,2})?|\d+(?:[.,]\d{1,2})?)"

# =============================================================================
# WIRE-LEVEL CONSTANTS
# =============================================================================

# Job number format 1: service / project number, 5-6 digits
SERVICE_NUMBER = (
    r"(?<!\w)(?i:service\s*nr|prosjekt\s*(?:nr|nummer))\.?\s*[:.]?\s*(\d{5,6})\b"
)

# Job number format 2: Evatic job reference, alphanumeric with at least one digit
EVATIC_JOB_REFERENCE = (
    r"(?<!\w)(?i:jobb\s*nr|job\s*no|evatic(?:\s*nr)?)\.?\s*[:.]?\s*"
    r"((?=[A-Za-z\-]*\d)[A-Za-z0-9][A-Za-z0-9\-]{3,})"
)

SERIAL_NUMBER = (
    r"(?<!\w)(?i:serie\s*nr|serienummer|serial\s*(?:no|number)|s/n|sn)\b\.?\s*[:.]?\s*"
    r"((?=[A-Za-z\-/]*\d)[A-Za-z0-9][A-Za-z0-9\-/]{3,30})"
)

SERVICE_NUMBER_PATTERN = re.compile(SERVICE_NUMBER)
EVATIC_JOB_PATTERN = re.compile(EVATIC_JOB_REFERENCE)
JOB_NUMBER_PATTERNS: Tuple[Pattern, ...] = (SERVICE_NUMBER_PATTERN, EVATIC_JOB_PATTERN)
SERIAL_NUMBER_PATTERN = re.compile(SERIAL_NUMBER)

WARRANTY_MENTION_PATTERN = re.compile(r"garanti|warranty", re.IGNORECASE)
# Phrases are matched within one line
WARRANTY_EXPIRED_PATTERN = re.compile(
    r"\b(?:utenfor[ \t]+garanti|garanti(?:en)?[ \t]+(?:er[ \t]+)?utløpt|utløpt[ \t]+garanti"
    r"|ikke[ \t]+garanti|out[ \t]+of[ \t]+warranty|outside[ \t]+(?:of[ \t]+)?warranty"
    r"|warranty[ \t]+(?:has[ \t]+)?expired)\b",
    re.IGNORECASE
)


def has_job_number(text: str) -> bool:
    """True if either known job-number format occurs in the text."""
    return bool(text) and any(p.search(text) for p in JOB_NUMBER_PATTERNS)


def has_serial_number(text: str) -> bool:
    """True if a labelled serial number occurs in the text."""
    return bool(text) and SERIAL_NUMBER_PATTERN.search(text) is not None


@dataclass(frozen=True)
class FieldRule:
    """
    One extraction rule for one semantic field.

    Attributes:
        name: Field name on ExtractedInvoice.
        pattern: Compiled regular expression.
        groups: Capture group indices, tried in order.
        default: Value used when nothing matches.
        kind: "text", "amount" or "date".
        fallback: Rule tried when this one finds nothing.
    """
    name: str
    pattern: Pattern
    groups: Tuple[int, ...] = (1,)
    default: Any = ""
    kind: str = TEXT
    fallback: Optional['FieldRule'] = None

    def match(self, text: str) -> str:
        """
        Return the cleaned raw capture for this rule, or "".

        Args:
            text: Full document text.
        """
        if text:
            found = self.pattern.search(text)
            if found:
                for index in self.groups:
                    value = found.group(index)
                    if value and value.strip():
                        cleaned = collapse_whitespace(value).strip(_STRIP_CHARS)
                        if cleaned:
                            return cleaned
        if self.fallback is not None:
            return self.fallback.match(text)
        return ""


def _rule(name: str, pattern: str, groups: Tuple[int, ...] = (1,), flags: int = 0,
          fallback: Optional[FieldRule] = None) -> FieldRule:
    return FieldRule(name, re.compile(pattern, flags), groups, "", TEXT, fallback)


def _labelled(name: str, labels: str, value: str = r"([^\n]{2,80})",
              fallback: Optional[FieldRule] = None) -> FieldRule:
    """Rule for a "Label: value" line."""
    pattern = rf"^[ \t]*(?i:{labels})\.?[ \t]*:[ \t]*{value}[ \t]*$"
    return _rule(name, pattern, flags=re.MULTILINE, fallback=fallback)


def _amount(name: str, labels: str) -> FieldRule:
    """Rule for an amount following a label on the same line."""
    pattern = (
        rf"(?<!\w)(?i:{labels})(?!\w)[^\n\d:]*[: \t][ \t]*"
        rf"(?i:kr\.?|NOK)?[ \t]*{AMOUNT_VALUE}"
    )
    return FieldRule(name, re.compile(pattern), (1,), ZERO, AMOUNT)


# =============================================================================
# DEFAULT RULES
# =============================================================================

DEFAULT_RULES: Tuple[FieldRule, ...] = (
    # Invoice identity
    _rule(
        'invoice_number',
        r"(?<!\w)(?:Faktura\s*-?\s*(?:nr|nummer)\.?|Invoice\s*(?:no|number|\#)\.?)"
        r"\s*[:.]?\s*(\d{4,10})\b"
        r"|\bFaktura\b[\s\S]{0,80}?\b(\d{7,8})\b",
        groups=(1, 2),
        flags=re.IGNORECASE,
        fallback=_rule('invoice_number', r"(?:^|\s)(\d{7})(?=\s|$)", flags=re.MULTILINE),
    ),
    FieldRule(
        'invoice_date',
        re.compile(
            r"(?<!\w)(?:Fakturadato|Ordredato|Invoice\s*date|Dato)\s*[:.]?\s*"
            r"(\d{1,2}[./-]\d{1,2}[./-]\d{2,4})",
            re.IGNORECASE
        ),
        kind=DATE,
    ),

    # Customer
    _labelled(
        'customer_name',
        r"Kunde(?:navn)?|Customer|Ordreadresse|Leveringsadresse|Faktura\s*til|Til",
        value=r"([A-ZÆØÅ][A-Za-zÆØÅæøå0-9 &.\-]{2,60})",
        fallback=_rule(
            'customer_name',
            r"\b([A-ZÆØÅ][\w&.\-]*(?:[ \t]+[\w&.\-]+){0,5}?[ \t]+ASA?)\b",
        ),
    ),
    _rule(
        'customer_number',
        r"(?<!\w)(?i:kunde\s*nr|kundenummer|customer\s*no)\.?\s*[:.]?\s*(\d{3,10})\b",
    ),
    _labelled('contact_person', r"Kontakt(?:person)?|Att(?:n)?|Contact(?:\s*person)?"),
    _rule('email', r"([\w.+\-]+@[\w\-]+(?:\.[\w\-]+)+)"),
    _rule(
        'phone',
        r"(?<!\w)(?i:tlf|telefon|tel|mobil|phone)\.?\s*[:.]?\s*(\+?\d[\d ]{6,14}\d)",
    ),
    _labelled('address', r"Adresse|Address|Besøksadresse"),
    _rule(
        'customer_org_number',
        r"(?<!\w)(?i:org\.?\s*(?:nr|nummer)|orgnr|organisasjonsnummer)\.?\s*[:.]?\s*"
        r"((?:NO\s?)?\d{3}\s?\d{3}\s?\d{3}(?:\s?MVA)?)",
    ),

    # Product / service
    _labelled(
        'product_name',
        r"Produkt(?:navn)?|Product|Artikkel|Maskin|Utstyr",
        fallback=_rule(
            'product_name',
            r"\b((?:Rational|Comenda|COMENDA|Electrolux|Hobart|Winterhalter|Metos"
            r"|Convotherm|Unox|Fagor)\b[^\n]{0,50})",
        ),
    ),
    _rule(
        'product_number',
        r"(?<!\w)(?i:produkt\s*nr|produktnummer|artikkel\s*nr|art\.?\s*nr|product\s*no)"
        r"\.?\s*[:.]?\s*([A-Za-z0-9][A-Za-z0-9\-./]{2,30})",
    ),
    _labelled(
        'product_model',
        r"Modell|Model|Typebetegnelse",
        value=r"([A-Za-z0-9][A-Za-z0-9\-./ ]{1,30})",
        fallback=_rule('product_model', r"\b((?:COM|AG)\d+[A-Z0-9\-]*|HTE\s\d+)\b"),
    ),
    _rule('serial_number', SERIAL_NUMBER),
    _rule(
        'vendor_job_number',
        rf"{SERVICE_NUMBER}|{EVATIC_JOB_REFERENCE}",
        groups=(1, 2),
    ),
    _labelled(
        'short_description',
        r"Feil(?:beskrivelse)?|Problem|Kort\s*beskrivelse|Oppdrag|Description",
        value=r"([^\n]{3,120})",
    ),
    _rule(
        'detailed_description',
        r"(?i:arbeid\s*utført|beskrivelse\s*utført|jobb\s*utført|utført\s*arbeid"
        r"|work\s*performed)[ \t]*:[ \t]*"
        r"([^\n]+(?:\n(?![ \t]*[A-ZÆØÅ][\wæøå ]{1,25}:)[^\n]+)*)",
    ),
    _rule(
        'warranty_status',
        r"(?i:garanti(?:status)?|warranty(?:[ \t]*status)?)[ \t]*:[ \t]*([^\n]{2,40})"
        r"|\b((?i:utenfor[ \t]+garanti|innenfor[ \t]+garanti|under[ \t]+garanti"
        r"|garanti[ \t]*utløpt|utløpt[ \t]+garanti|garantiarbeid|garantireparasjon"
        r"|out[ \t]+of[ \t]+warranty|in[ \t]+warranty|under[ \t]+warranty"
        r"|warranty[ \t]+expired))\b",
        groups=(1, 2),
    ),

    # Costs
    _amount('technician_hours', r"Antall\s*timer|Arbeidstimer|Timer|Hours"),
    _amount('hourly_rate', r"Timepris|Timesats|Pris\s*pr\.?\s*time|Hourly\s*rate"),
    _amount(
        'work_cost',
        r"Arbeidskostnad|Arbeidslønn|Arbeid|Time\s*service|Labou?r(?:\s*cost)?",
    ),
    _amount('overtime_50_hours', r"Overtid\s*50\s*%?\s*timer|Overtime\s*50\s*%?\s*hours"),
    _amount(
        'overtime_50_cost',
        r"Overtid\s*50\s*%?\s*(?:kostnad|beløp|sum)|Overtime\s*50\s*%?\s*cost",
    ),
    _amount('overtime_100_hours', r"Overtid\s*100\s*%?\s*timer|Overtime\s*100\s*%?\s*hours"),
    _amount(
        'overtime_100_cost',
        r"Overtid\s*100\s*%?\s*(?:kostnad|beløp|sum)|Overtime\s*100\s*%?\s*cost",
    ),
    _amount('travel_time_hours', r"Reisetid|Reisetimer|Travel\s*time"),
    _amount('travel_time_cost', r"Reisekostnad|Reisetid\s*kostnad|Travel\s*cost"),
    _amount(
        'vehicle_km',
        r"Kjøring|Kilometer|Antall\s*km|Km(?![\s\-]*sats)|Distance",
    ),
    _amount('kr_per_km', r"Km\s*-?\s*sats|Kr\s*pr\.?\s*km|Kr/km|Rate\s*per\s*km"),
    _amount('vehicle_cost', r"Bilkostnad|Bilgodtgjørelse|Kjøretøy|Vehicle(?:\s*cost)?"),
    _amount(
        'parts_cost',
        r"Reservedeler|Servicemateriell|Materialer|Materiell|Deler|Parts(?:\s*cost)?",
    ),
    _amount(
        'total_amount',
        r"Sum\s+avgiftsfritt|Sum\s*eks\.?\s*mva|Sum\s*inkl\.?\s*mva|Sum\s*totalt"
        r"|Ordresum|Beløp\s*å\s*betale|Å\s*betale|Totalbeløp|Totalt|Total(?:\s*amount)?",
    ),

    # Technician
    _labelled('technician_name', r"Tekniker|Servicetekniker|Montør|Technician"),
    _labelled('department', r"Avdeling|Avd|Department"),
)


class FieldPatternCatalog:
    """
    Read-only registry of extraction rules keyed by field name.

    Iteration follows declaration order. Amount rules are resolved through
    AmountNormalizer, date rules through DateNormalizer (keeping the raw
    capture when the date cannot be parsed).

    Example:
        >>> catalog = FieldPatternCatalog()
        >>> catalog.resolve("serial_number", "Serienr: E61SH1203456")
        "E61SH1203456"
        >>> catalog.resolve("total_amount", "Sum eks. mva: 4 580,00")
        Decimal('4580.00')
    """

    def __init__(
        self,
        rules: Iterable[FieldRule] = DEFAULT_RULES,
        amount_normalizer: Optional[AmountNormalizer] = None,
        date_normalizer: Optional[DateNormalizer] = None
    ) -> None:
        ordered = {}
        for rule in rules:
            if rule.name in ordered:
                raise ValueError(f"Duplicate rule for field: {rule.name}")
            ordered[rule.name] = rule
        self._rules: Mapping[str, FieldRule] = MappingProxyType(ordered)
        self.amount_normalizer = amount_normalizer or AmountNormalizer()
        self.date_normalizer = date_normalizer or DateNormalizer()

        logger.debug(f"FieldPatternCatalog initialized with {len(ordered)} rules")

    @property
    def rules(self) -> Mapping[str, FieldRule]:
        return self._rules

    def __iter__(self) -> Iterator[FieldRule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, name: str) -> bool:
        return name in self._rules

    def get(self, name: str) -> FieldRule:
        return self._rules[name]

    def resolve(self, name: str, text: str) -> Any:
        """
        Resolve one field against the text.

        Args:
            name: Field name.
            text: Full document text.

        Returns:
            Matched value converted for the rule's kind, or the default.
        """
        rule = self._rules[name]
        raw = rule.match(text)
        if not raw:
            return rule.default
        if rule.kind == AMOUNT:
            return self.amount_normalizer.normalize(raw)
        if rule.kind == DATE:
            return self.date_normalizer.normalize(raw) or raw
        return raw


@lru_cache(maxsize=1)
def default_catalog() -> FieldPatternCatalog:
    """Shared catalog built from DEFAULT_RULES on first use."""
    return FieldPatternCatalog()
