from badgeforge.engine.archetypes import Archetype
from badgeforge.engine.fallback_parser import HeuristicParser

EXPORT = "\n".join([
    "Agile India 2026 registrations",
    "SL. NO.,REG. ID,NAME,COMPANY,PASS,WORKSHOP 1,WORKSHOP 2",
    "1,R-100,Ada,ACME,Conference Pass,AI Lab,",
    "2,R-101,Bob,,Speaker Pass,,",
    "ONLY WORKSHOP PASSES,,,,,,",
    "3,R-102,Cy,Initech,,Cloud,",
])


def test_parses_rows_after_header_marker():
    records = HeuristicParser().parse(EXPORT)

    assert [r.name for r in records] == ["Ada", "Bob", "Cy"]
    ada, bob, cy = records
    assert ada.registration_id == "R-100"
    assert ada.pass_type == "Conference Pass"
    assert ada.tracks == ["AI Lab"]
    assert ada.extras["NAME"] == "Ada"
    assert ada.extras["WORKSHOP 1"] == "AI Lab"
    assert bob.role == "Speaker"
    assert cy.pass_type == "Cloud"


def test_data_without_header_row_uses_fixed_labels():
    raw = "1\tR-1\tAda\tACME\n2\tR-2\tBob\tInitech\tOrganizer Pass"
    records = HeuristicParser().parse(raw, Archetype.CORPORATE)

    assert [r.name for r in records] == ["Ada", "Bob"]
    assert records[0].pass_type == "General Entry"
    assert records[0].extras == {"SL. NO.": "1", "REG. ID": "R-1", "NAME": "Ada", "COMPANY": "ACME"}
    assert records[1].role == "Organizer"
    assert records[1].extras["Column 5"] == "Organizer Pass"
    assert all(r.archetype is Archetype.CORPORATE for r in records)


def test_malformed_input_never_raises():
    parser = HeuristicParser()
    assert parser.parse("") == []
    assert parser.parse(None) == []
    assert parser.parse("1,only,two") == []
    assert parser.parse('SL. NO.,REG\n1,"unterminated,Ada,ACME,X') is not None
