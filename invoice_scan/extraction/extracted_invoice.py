"""
Extracted Invoice Data Class.

This module defines the canonical record produced by every extraction
backend. Every string field defaults to "" and every amount to
Decimal("0"); a record never exposes None to its consumers.

Author: ML Engineering Team
"""

import json
from dataclasses import dataclass, field, fields, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Tuple

from invoice_scan.postprocessor.normalizers import AmountNormalizer, DateNormalizer, ZERO
from invoice_scan.utils.exceptions import PayloadError

TEXT_FIELDS: Tuple[str, ...] = (
    'invoice_number',
    'invoice_date',
    'customer_name',
    'customer_number',
    'contact_person',
    'email',
    'phone',
    'address',
    'customer_org_number',
    'product_name',
    'product_number',
    'product_model',
    'serial_number',
    'vendor_job_number',
    'short_description',
    'detailed_description',
    'warranty_status',
    'technician_name',
    'department',
)

AMOUNT_FIELDS: Tuple[str, ...] = (
    'technician_hours',
    'hourly_rate',
    'work_cost',
    'overtime_50_hours',
    'overtime_50_cost',
    'overtime_100_hours',
    'overtime_100_cost',
    'travel_time_hours',
    'travel_time_cost',
    'vehicle_km',
    'kr_per_km',
    'vehicle_cost',
    'labor_cost',
    'parts_cost',
    'total_amount',
)

# Cost lines that together should add up to the invoice total
COST_BREAKDOWN_FIELDS: Tuple[str, ...] = (
    'work_cost',
    'overtime_50_cost',
    'overtime_100_cost',
    'travel_time_cost',
    'vehicle_cost',
    'parts_cost',
)

# Payload keys tried after the camelCase field name, in order
PAYLOAD_ALIASES: Dict[str, Tuple[str, ...]] = {
    'technician_name': ('technician',),
    'vendor_job_number': ('evaticJobNumber', 'serviceNumber', 'projectNumber'),
    'product_number': ('serviceNumber',),
    'short_description': ('productName',),
    'detailed_description': ('workDescription', 'description'),
}

REQUIRED_PAYLOAD_KEYS: Tuple[str, ...] = ('invoiceNumber', 'customerName')


def to_camel(name: str) -> str:
    """
    Convert a snake_case field name to the claim form's camelCase key.

    Example:
        >>> to_camel("overtime_50_hours")
        "overtime50Hours"
    """
    head, *rest = name.split('_')
    return head + ''.join(part[:1].upper() + part[1:] for part in rest)


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _coerce_amount(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        return ZERO
    if not amount.is_finite() or amount < 0:
        return ZERO
    return amount


def check_payload(payload: Any) -> Mapping[str, Any]:
    """
    Check that a vision payload carries the keys needed to trust it.

    Args:
        payload: Decoded JSON object or JSON text.

    Returns:
        The payload as a mapping.

    Raises:
        PayloadError: If the payload is not an object or lacks an invoice
            number or a customer name.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise PayloadError(f"not valid JSON ({e})")

    if not isinstance(payload, Mapping):
        raise PayloadError(f"expected a JSON object, got {type(payload).__name__}")

    missing = [key for key in REQUIRED_PAYLOAD_KEYS if not _coerce_text(payload.get(key))]
    if missing:
        raise PayloadError("required keys missing", missing)

    return payload


@dataclass
class ExtractedInvoice:
    """
    Canonical record for one scanned service invoice.

    Attributes are grouped the way the claim form groups them: invoice
    identity, customer, product/service, costs and technician. Besides the
    extracted fields the record carries which backend produced it, the
    warnings raised along the way and the final confidence (0-1).

    Example:
        >>> record = ExtractedInvoice(invoice_number="2313028",
        ...                           customer_name="T. Myhrvold AS")
        >>> record.total_amount
        Decimal('0')
        >>> record.to_dict()["invoiceNumber"]
        "2313028"
    """
    # Invoice identity
    invoice_number: str = ""
    invoice_date: str = ""

    # Customer
    customer_name: str = ""
    customer_number: str = ""
    contact_person: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    customer_org_number: str = ""

    # Product / service
    product_name: str = ""
    product_number: str = ""
    product_model: str = ""
    serial_number: str = ""
    vendor_job_number: str = ""
    short_description: str = ""
    detailed_description: str = ""
    warranty_status: str = ""

    # Costs
    technician_hours: Decimal = ZERO
    hourly_rate: Decimal = ZERO
    work_cost: Decimal = ZERO
    overtime_50_hours: Decimal = ZERO
    overtime_50_cost: Decimal = ZERO
    overtime_100_hours: Decimal = ZERO
    overtime_100_cost: Decimal = ZERO
    travel_time_hours: Decimal = ZERO
    travel_time_cost: Decimal = ZERO
    vehicle_km: Decimal = ZERO
    kr_per_km: Decimal = ZERO
    vehicle_cost: Decimal = ZERO
    labor_cost: Decimal = ZERO
    parts_cost: Decimal = ZERO
    total_amount: Decimal = ZERO

    # Technician
    technician_name: str = ""
    department: str = ""

    # Scoring and provenance
    confidence: float = 0.0
    reported_confidence: float = 0.0
    source: str = ""
    warnings: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        for name in TEXT_FIELDS:
            setattr(self, name, _coerce_text(getattr(self, name)))
        for name in AMOUNT_FIELDS:
            setattr(self, name, _coerce_amount(getattr(self, name)))
        self.confidence = min(max(float(self.confidence or 0.0), 0.0), 1.0)
        self.reported_confidence = min(max(float(self.reported_confidence or 0.0), 0.0), 1.0)
        self.warnings = list(self.warnings or [])

    @classmethod
    def from_payload(
        cls,
        payload: Mapping[str, Any],
        normalizer: Optional[AmountNormalizer] = None
    ) -> 'ExtractedInvoice':
        """
        Build a record from a vision-model JSON payload.

        Keys are the claim form's camelCase names; aliases used by the
        vision prompt (technician, serviceNumber, projectNumber, ...) are
        honoured. Missing, null and unparseable values fall back to the
        field defaults and unknown keys are ignored. The invoice date is
        normalized like the text backends do, kept raw if unparseable.

        Args:
            payload: Decoded JSON object.
            normalizer: AmountNormalizer for string amounts.

        Returns:
            ExtractedInvoice with source "vision".
        """
        normalizer = normalizer or AmountNormalizer()
        values: Dict[str, Any] = {}

        for name in TEXT_FIELDS:
            for key in (to_camel(name),) + PAYLOAD_ALIASES.get(name, ()):
                text = _coerce_text(payload.get(key))
                if text:
                    values[name] = text
                    break

        if values.get('invoice_date'):
            raw_date = values['invoice_date']
            values['invoice_date'] = DateNormalizer().normalize(raw_date) or raw_date

        for name in AMOUNT_FIELDS:
            values[name] = normalizer.normalize(payload.get(to_camel(name)))

        if not values['labor_cost']:
            values['labor_cost'] = values['work_cost']

        # Vision backends report 0-100
        reported = normalizer.normalize(payload.get('confidence')) / 100

        return cls(
            source="vision",
            reported_confidence=float(reported),
            **values
        )

    def copy_with(self, **changes: Any) -> 'ExtractedInvoice':
        """Return a copy with the given fields replaced."""
        changes.setdefault('warnings', list(self.warnings))
        return replace(self, **changes)

    def has_value(self, name: str) -> bool:
        """True if a field is a non-empty string or a non-zero amount."""
        value = getattr(self, name)
        if isinstance(value, Decimal):
            return value != 0
        return bool(value)

    @property
    def cost_breakdown_total(self) -> Decimal:
        """Sum of the individual cost lines (excluding labor_cost, which mirrors work_cost)."""
        return sum((getattr(self, name) for name in COST_BREAKDOWN_FIELDS), ZERO)

    @property
    def missing_fields(self) -> List[str]:
        """Text and amount fields that were not extracted."""
        return [name for name in TEXT_FIELDS + AMOUNT_FIELDS if not self.has_value(name)]

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the claim form's camelCase dictionary.

        Amounts are emitted as floats, so the result is JSON-serialisable.
        """
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Decimal):
                value = float(value)
            elif isinstance(value, list):
                value = list(value)
            data[to_camel(f.name)] = value
        return data

    def __repr__(self) -> str:
        return (
            f"ExtractedInvoice("
            f"invoice={self.invoice_number or 'N/A'}, "
            f"customer={self.customer_name or 'N/A'}, "
            f"total={self.total_amount}, "
            f"source={self.source or 'N/A'}, "
            f"confidence={self.confidence:.2f})"
        )
