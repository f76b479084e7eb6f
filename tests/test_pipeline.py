"""
Tests for backend selection, fallback and the command-line entry point.
"""

import io
import json
from decimal import Decimal

import pytest
from PIL import Image

from conftest import VENDOR_HEADER_ONLY_TEXT, FakeTableReader
from invoice_scan.ocr_engine import TableImagePreprocessor
from invoice_scan.pipeline import InvoicePipeline
from invoice_scan.postprocessor.warnings import MISSING_CUSTOMER, MISSING_JOB_NUMBER
from invoice_scan.utils.exceptions import OCREngineNotAvailableError
from invoice_scan.vendor import VendorTableParser


VISION_PAYLOAD = {
    "invoiceNumber": "1234567",
    "customerName": "T. Myhrvold AS",
    "workCost": 8000,
    "partsCost": 1200,
}


def _pipeline(reader=None):
    return InvoicePipeline(vendor_parser=VendorTableParser(text_reader=reader or FakeTableReader()))


class TestBackendSelection:

    def test_vision_payload_wins(self, vendor_text):
        """A valid payload is used even when the text is a vendor invoice"""
        reader = FakeTableReader()
        record = _pipeline(reader).run(vendor_text, source_file="scan.jpg", vision_json=VISION_PAYLOAD)

        assert record.source == "vision"
        assert record.invoice_number == "1234567"
        assert reader.calls == []

    def test_vision_payload_swapped(self):
        record = _pipeline().run("", vision_json=VISION_PAYLOAD)

        assert record.work_cost == Decimal("1200")
        assert record.parts_cost == Decimal("8000")

    def test_vision_payload_as_json_text(self):
        record = _pipeline().run("", vision_json=json.dumps(VISION_PAYLOAD))
        assert record.source == "vision"

    @pytest.mark.parametrize("payload", [
        {"invoiceNumber": "1234567"},
        "{not json",
        ["invoiceNumber"],
    ])
    def test_malformed_payload_treated_as_absent(self, generic_text, payload):
        record = _pipeline().run(generic_text, vision_json=payload)

        assert record.source == "generic"
        assert record.invoice_number == "4410233"

    def test_vendor_table_with_source_file(self, vendor_text):
        reader = FakeTableReader()
        record = _pipeline(reader).run(vendor_text, source_file="scan.jpg")

        assert reader.calls == ["scan.jpg"]
        assert record.source == "vendor_table"
        assert record.work_cost == Decimal("2375.00")
        assert record.parts_cost == Decimal("552.50")
        assert record.total_amount == Decimal("3808.50")

    def test_vendor_table_never_swapped(self, vendor_text):
        text = vendor_text.replace("2 375,00", "9 500,00").replace("3 808,50", "10 933,50")
        record = _pipeline(FakeTableReader(text)).run(text, source_file="scan.jpg")

        assert record.work_cost == Decimal("9500.00")
        assert record.parts_cost == Decimal("552.50")

    def test_vendor_text_without_source_file_is_generic(self, vendor_text):
        reader = FakeTableReader()
        record = _pipeline(reader).run(vendor_text)

        assert record.source == "generic"
        assert reader.calls == []

    def test_missing_table_falls_back_to_generic(self, vendor_text):
        reader = FakeTableReader(VENDOR_HEADER_ONLY_TEXT)
        record = _pipeline(reader).run(vendor_text, source_file="scan.jpg")

        assert reader.calls == ["scan.jpg"]
        assert record.source == "generic"

    def test_unavailable_ocr_falls_back_to_generic(self, vendor_text):
        reader = FakeTableReader(error=OCREngineNotAvailableError("Tesseract OCR"))
        record = _pipeline(reader).run(vendor_text, source_file="scan.jpg")

        assert record.source == "generic"

    def test_unexpected_reader_error_falls_back_to_generic(self, vendor_text):
        reader = FakeTableReader(error=ValueError("corrupt scan"))
        record = _pipeline(reader).run(vendor_text, source_file="scan.jpg")

        assert record.source == "generic"

    def test_binary_file_source(self, vendor_text):
        """An open binary file goes through preprocessing like a path does"""
        preprocessor = TableImagePreprocessor()

        def reader(source):
            preprocessor.process(source)
            return vendor_text

        buffer = io.BytesIO()
        Image.new("RGB", (10, 8), (255, 255, 255)).save(buffer, format="PNG")
        buffer.seek(0)
        record = _pipeline(reader).run(vendor_text, source_file=buffer)

        assert record.source == "vendor_table"

    def test_unreadable_binary_file_falls_back_to_generic(self, vendor_text):
        def reader(source):
            TableImagePreprocessor().process(source)
            return vendor_text

        record = _pipeline(reader).run(vendor_text, source_file=io.BytesIO(b"not an image"))

        assert record.source == "generic"

    def test_vendor_validation_warnings_lead(self, vendor_text):
        text = vendor_text.replace("Sum eks. mva:   3 808,50", "Sum eks. mva:   5 000,00")
        record = _pipeline(FakeTableReader(text)).run(text, source_file="scan.jpg")

        assert record.warnings[0].startswith("Line items sum to")


class TestRun:

    def test_empty_text(self):
        record = _pipeline().run("")

        assert record.source == "generic"
        assert record.confidence == 0.0
        assert record.warnings[0] == MISSING_CUSTOMER

    def test_company_with_serial_and_no_job_number(self, no_job_number_text):
        record = _pipeline().run(no_job_number_text)

        assert record.customer_name == "Kjøkkenservice Nord AS"
        assert record.serial_number == "SN-88412"
        assert record.confidence == pytest.approx(0.40)
        assert MISSING_JOB_NUMBER in record.warnings

    def test_confidence_bounds(self, generic_text, vendor_text):
        pipeline = _pipeline()
        for text in ("", generic_text, vendor_text, "Garanti " * 50):
            assert 0.0 <= pipeline.run(text).confidence <= 1.0

    def test_ocr_confidence_recorded(self, generic_text):
        record = _pipeline().run(generic_text, ocr_confidence=87)
        assert record.reported_confidence == pytest.approx(0.87)

    def test_generic_invoice_is_clean(self, generic_text):
        record = _pipeline().run(generic_text)

        assert record.confidence == 1.0
        assert record.warnings == []


class TestCommandLine:

    def test_writes_result_json(self, tmp_path, generic_text):
        from main import main

        text_file = tmp_path / "ocr.txt"
        text_file.write_text(generic_text, encoding="utf-8")
        output = tmp_path / "out" / "result.json"

        assert main(["--text", str(text_file), "--output", str(output)]) == 0

        result = json.loads(output.read_text(encoding="utf-8"))
        assert result["source"] == "generic"
        assert result["invoiceNumber"] == "4410233"
        assert result["totalAmount"] == 3025.0

    def test_vision_file(self, tmp_path, capsys):
        from main import main

        text_file = tmp_path / "ocr.txt"
        text_file.write_text("", encoding="utf-8")
        vision_file = tmp_path / "payload.json"
        vision_file.write_text(json.dumps(VISION_PAYLOAD), encoding="utf-8")

        assert main(["--text", str(text_file), "--vision", str(vision_file)]) == 0

        result = json.loads(capsys.readouterr().out)
        assert result["source"] == "vision"
        assert result["workCost"] == 1200.0

    def test_missing_input_file(self, tmp_path):
        from main import main

        assert main(["--text", str(tmp_path / "missing.txt")]) == 1

    def test_undecodable_text_file(self, tmp_path, capsys):
        from main import main

        text_file = tmp_path / "ocr.txt"
        text_file.write_bytes("Kunde: Bakeriet Nord AS".encode("utf-16"))

        assert main(["--text", str(text_file)]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_unexpected_failure_exits_with_error(self, tmp_path, monkeypatch, capsys):
        import main as cli

        text_file = tmp_path / "ocr.txt"
        text_file.write_text("", encoding="utf-8")

        def broken(**kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(cli, "run_extraction", broken)

        assert cli.main(["--text", str(text_file)]) == 1
        assert "Unexpected error: disk on fire" in capsys.readouterr().err
