"""
Pytest configuration and shared fixtures.

The sample texts mirror what OCR returns for the invoices the pipeline
sees in practice: a generic service company invoice, a minimal invoice
without job number and the vendor's line-item table (read with
preserved inter-word spacing).
"""

import pytest

from config import CONFIG_ENV_VAR, ConfigurationManager


GENERIC_INVOICE_TEXT = """\
Storkjøkken Service AS
Org.nr: 987 654 321 MVA
FAKTURA
Fakturanummer: 4410233
Fakturadato: 15.11.2023

Kunde: Bakeriet Nord AS
Kontaktperson: Kari Nordmann
Tlf: 912 34 567
E-post: kari@bakerietnord.no
Adresse: Storgata 12, 9008 Tromsø

Produkt: Rational SCC 61
Modell: SCC61E
Serienr: E61SH1203456
Service nr: 456789
Feil: Ovn varmer ikke
Garanti: Innenfor garanti

Arbeid: 2 375,00
Reservedeler: 650,00
Sum eks. mva: 3 025,00

Tekniker: Ola Hansen
"""

# Company name ending in AS, a serial number and no job number
NO_JOB_NUMBER_TEXT = """\
Kjøkkenservice Nord AS
Faktura 20231115
Serienummer: SN-88412
Utført service på oppvaskmaskin.
"""

VENDOR_TABLE_TEXT = """\
T. MYHRVOLD AS
FAKTURA Nr. 2313028
Fakturadato: 15.11.2023
Kundenr.: 10234
Ordrenr.: 556677
Service nr: 45678
Prosjekt nr: 123456
Ordreadresse: Bakeriet Nord AS, Storgata 12
Oppdrag: Service på kombidamper
Tekniker: Ola Hansen

Produktnr   Beskrivelse            Antall    Pris      Beløp
T1          Arbeid tekniker        2,5       950,00    2 375,00
RT1         Reisetid               1         650,00    650,00
KM          Kjøring                42        5,50      231,00
E6021       Pakningssett           1         850,00    35 %    552,50
GEBYR       Miljøgebyr             1         75,00     75,00
INFO        Fraktfritt levert      1         0,00      0,00
Sum eks. mva:   3 808,50
"""

# Vendor header without a line-item table
VENDOR_HEADER_ONLY_TEXT = """\
T. MYHRVOLD AS
FAKTURA Nr. 2313028
Fakturadato: 15.11.2023
Tekniker: Ola Hansen
Sum eks. mva: 3 808,50
"""


class FakeTableReader:
    """Stands in for the Tesseract reader; returns canned text."""

    def __init__(self, text=VENDOR_TABLE_TEXT, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def __call__(self, source):
        self.calls.append(source)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture(autouse=True)
def reset_config(monkeypatch):
    """Every test starts from the packaged settings.yaml."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


@pytest.fixture
def generic_text():
    return GENERIC_INVOICE_TEXT


@pytest.fixture
def no_job_number_text():
    return NO_JOB_NUMBER_TEXT


@pytest.fixture
def vendor_text():
    return VENDOR_TABLE_TEXT


@pytest.fixture
def fake_reader():
    return FakeTableReader()
