"""
Tests for the warning rules and the post-processing chain.
"""

from decimal import Decimal

from invoice_scan.extraction import ExtractedInvoice
from invoice_scan.postprocessor import PostProcessor, WarningGenerator
from invoice_scan.postprocessor.warnings import (
    BREAKDOWN_MISMATCH,
    GENERIC_PRODUCT,
    MISSING_CUSTOMER,
    MISSING_JOB_NUMBER,
    MISSING_PRODUCT,
    MISSING_SERIAL,
    WARRANTY_EXPIRED,
)


def _complete_record(**changes):
    values = dict(
        customer_name="Bakeriet Nord AS",
        product_name="Rational SCC 61",
        serial_number="E61SH1203456",
        vendor_job_number="456789",
        confidence=0.9,
    )
    values.update(changes)
    return ExtractedInvoice(**values)


class TestWarningGenerator:

    def test_complete_record_has_no_warnings(self):
        assert WarningGenerator().warn(_complete_record(), "") == []

    def test_rule_order(self):
        """Every rule fires, in the documented order"""
        record = ExtractedInvoice(
            work_cost=1000, parts_cost=500, total_amount=2000, confidence=0.1
        )
        warnings = WarningGenerator().warn(record, "Utenfor garanti")

        assert warnings[:5] == [
            MISSING_CUSTOMER,
            MISSING_PRODUCT,
            MISSING_SERIAL,
            MISSING_JOB_NUMBER,
            WARRANTY_EXPIRED,
        ]
        assert warnings[5] == BREAKDOWN_MISMATCH.format(
            breakdown=Decimal("1500"), total=Decimal("2000")
        )
        assert warnings[6].startswith("Low confidence (10%)")
        assert len(warnings) == 7

    def test_same_input_same_warnings(self):
        record = ExtractedInvoice(confidence=0.2)
        generator = WarningGenerator()
        assert generator.warn(record, "x") == generator.warn(record, "x")

    def test_generic_product_name(self):
        record = _complete_record(product_name="Service/Reparasjon")
        assert WarningGenerator().warn(record, "") == [
            GENERIC_PRODUCT.format(name="Service/Reparasjon")
        ]

    def test_expiry_phrase_split_across_lines_ignored(self):
        """A line ending in "ikke" followed by a warranty line is not an expiry"""
        text = "Feil: Ovn varmer ikke\nGaranti: Innenfor garanti\nMontert under\nGaranti: ja"
        assert WarningGenerator().warn(_complete_record(), text) == []

    def test_job_number_in_text_is_enough(self):
        record = _complete_record(vendor_job_number="")
        assert WarningGenerator().warn(record, "Jobb nr: EV2023-118") == []

    def test_breakdown_within_two_kroner(self):
        record = _complete_record(work_cost=1000, parts_cost=500, total_amount=Decimal("1501.50"))
        assert WarningGenerator().warn(record, "") == []

    def test_breakdown_skipped_without_total(self):
        record = _complete_record(work_cost=1000, parts_cost=500)
        assert WarningGenerator().warn(record, "") == []

    def test_low_confidence_threshold_is_configurable(self):
        record = _complete_record(confidence=0.7)
        warnings = WarningGenerator(low_confidence_threshold=0.8).warn(record, "")
        assert len(warnings) == 1
        assert warnings[0].startswith("Low confidence")


class TestPostProcessor:

    def test_chain_swaps_scores_and_warns(self):
        base = ExtractedInvoice(
            invoice_number="1234567",
            customer_name="T. Myhrvold AS",
            work_cost=8000,
            parts_cost=1200,
            source="vision",
        )
        final = PostProcessor().process(base, "")

        assert final.work_cost == Decimal("1200")
        assert final.parts_cost == Decimal("8000")
        assert final.confidence == 0.2
        assert MISSING_PRODUCT in final.warnings
        assert base.confidence == 0.0
        assert base.warnings == []

    def test_prior_warnings_lead(self):
        final = PostProcessor().process(
            ExtractedInvoice(), "", prior_warnings=["Invoice number missing"]
        )
        assert final.warnings[0] == "Invoice number missing"
        assert final.warnings[1] == MISSING_CUSTOMER
