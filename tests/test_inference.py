import asyncio

import pytest

from badgeforge.engine.archetypes import Archetype
from badgeforge.engine.inference import (
    ClassifierUnavailable,
    ColumnMapping,
    FALLBACK_NOTICE,
    MappingParseError,
    SchemaInference,
    build_records,
    classify_archetype,
    extract_json_object,
)
from badgeforge.engine.tabular import split_table

from conftest import StubClassifier

SCENARIO_CSV = "Name,Org,Role\nAda,ACME,Speaker\nBob,,Organizer"


class FailingClassifier:
    async def classify(self, request):
        raise ClassifierUnavailable("provider down")


def infer(inference, raw_text, **kwargs):
    return asyncio.run(inference.infer(raw_text, **kwargs))


def test_end_to_end_conference_import():
    classifier = StubClassifier({"name": 0, "company": 1, "role": 2, "extras": []})
    result = infer(SchemaInference(classifier), SCENARIO_CSV, archetype_hint=Archetype.CONFERENCE)

    assert result.used_fallback is False
    ada, bob = result.records
    assert (ada.name, ada.company, ada.role) == ("Ada", "ACME", "Speaker")
    assert ada.extras == {"Name": "Ada", "Org": "ACME", "Role": "Speaker"}
    assert (bob.name, bob.company, bob.role) == ("Bob", "Self", "Organizer")
    assert bob.extras == {"Name": "Bob", "Role": "Organizer"}
    assert ada.archetype is Archetype.CONFERENCE and bob.archetype is Archetype.CONFERENCE


def test_classifier_receives_header_sample_and_hints():
    classifier = StubClassifier({"name": 0})
    infer(
        SchemaInference(classifier),
        SCENARIO_CSV,
        file_kind="tsv",
        custom_label_hints={"name": "Delegate"},
    )

    request = classifier.requests[0]
    assert request.header_sample == "Name,Org,Role"
    assert request.data_sample == "Ada,ACME,Speaker\nBob,,Organizer"
    assert request.custom_label_hints == {"name": "Delegate"}
    assert request.file_kind == "tsv"


def test_every_header_column_lands_in_extras():
    raw = "Roll,Student Name,Blood,House\n7,Meera,O+,Red\n8,Kabir,,Blue"
    classifier = StubClassifier({"name": 1, "schoolId": 0, "bloodGroup": 2})
    result = infer(SchemaInference(classifier), raw)

    meera, kabir = result.records
    assert meera.extras == {"Roll": "7", "Student Name": "Meera", "Blood": "O+", "House": "Red"}
    assert kabir.extras == {"Roll": "8", "Student Name": "Kabir", "House": "Blue"}
    assert meera.registration_id == "7"
    assert meera.blood_group == "O+"


def test_explicit_archetype_wins_over_detection():
    raw = "Name,Class,Father\nMeera,5A,Raj\nKabir,6B,Dev"
    classifier = StubClassifier({"name": 0, "className": 1, "fatherName": 2})

    detected = infer(SchemaInference(classifier), raw)
    forced = infer(SchemaInference(classifier), raw, archetype_hint=Archetype.CORPORATE)

    assert {r.archetype for r in detected.records} == {Archetype.SCHOOL}
    assert detected.records[0].role == "Student"
    assert detected.records[0].pass_type == "Student ID"
    assert {r.archetype for r in forced.records} == {Archetype.CORPORATE}


def test_archetype_detection_rules():
    assert classify_archetype({}, ["Name", "Company"], "", "", "Initech") is Archetype.CORPORATE
    assert classify_archetype({}, ["Name", "Company"], "", "", "Self") is Archetype.CONFERENCE
    assert classify_archetype({}, ["Name", "GPA"], "", "", "Initech") is Archetype.SCHOOL
    assert classify_archetype({}, ["Name", "Page"], "", "", "") is Archetype.CONFERENCE
    assert classify_archetype({}, ["Name"], "Student Pass", "", "Initech") is Archetype.SCHOOL


def test_row_order_and_auto_ids():
    raw = "Name,Org,Ticket\n" + "\n".join(f"Person {i},Org {i},T{i}" for i in range(5))
    classifier = StubClassifier({"name": 0, "company": 1})
    result = infer(SchemaInference(classifier), raw)

    assert [r.name for r in result.records] == [f"Person {i}" for i in range(5)]
    assert [r.registration_id for r in result.records] == [f"AUTO_{i}" for i in range(1, 6)]


def test_short_rows_are_skipped_without_error():
    raw = "Name,Org,Role\nAda,ACME,Speaker\nonly,two\nBob,Initech,Attendee"
    classifier = StubClassifier({"name": 0, "company": 1, "role": 2})
    result = infer(SchemaInference(classifier), raw)

    assert [r.name for r in result.records] == ["Ada", "Bob"]


def test_tracks_drop_name_cells_and_header_echoes():
    table = split_table("Name,T1,T2,T3\nAda,name,T2,AI\nBob,,Cloud,Data")
    mapping = ColumnMapping.from_payload({"name": 0, "tracks": [1, 2, 3]})

    ada, bob = build_records(table, mapping)
    assert ada.tracks == ["AI"]
    assert bob.tracks == ["Cloud", "Data"]


def test_tab_delimited_input():
    raw = "Name\tOrg\tRole\nAda\tACME, Inc\tSpeaker"
    classifier = StubClassifier({"name": 0, "company": 1, "role": 2})
    (ada,) = infer(SchemaInference(classifier), raw).records
    assert ada.company == "ACME, Inc"


def test_mapping_tolerates_junk_values():
    mapping = ColumnMapping.from_payload({
        "name": "2",
        "company": None,
        "role": True,
        "jobTitle": "--1",
        "sponsor": "-5-",
        "eventName": " 3 ",
        "tracks": [4, "x", -1],
        "extras": [{"label": "City", "index": 5}, {"index": 3}, "bad"],
    })
    assert mapping.index_of("name") == 2
    assert mapping.index_of("company") == -1
    assert mapping.index_of("role") == -1
    assert mapping.index_of("jobTitle") == -1
    assert mapping.index_of("sponsor") == -1
    assert mapping.index_of("eventName") == 3
    assert mapping.tracks == [4]
    assert [(e.label, e.index) for e in mapping.extras] == [("City", 5)]


def test_malformed_index_text_does_not_abort_import():
    classifier = StubClassifier({"name": "--1", "company": 1})
    result = infer(SchemaInference(classifier), SCENARIO_CSV)

    assert result.used_fallback is False
    assert [r.name for r in result.records] == ["Unknown", "Unknown"]
    assert [r.company for r in result.records] == ["ACME", "Self"]


def test_extract_json_strips_fences_and_prose():
    reply = 'Sure! Here it is:\n```json\n{"name": 0, "company": 1}\n```'
    assert extract_json_object(reply) == {"name": 0, "company": 1}


def test_extract_json_rejects_garbage():
    with pytest.raises(MappingParseError):
        extract_json_object("no mapping today")
    with pytest.raises(MappingParseError):
        extract_json_object("")


def test_failed_classifier_falls_back_with_notice():
    raw = "SL. NO.,REG. ID,NAME,COMPANY,PASS\n1,R1,Ada,ACME,Speaker Pass"
    result = infer(SchemaInference(FailingClassifier()), raw)

    assert result.used_fallback is True
    assert result.notice == FALLBACK_NOTICE
    assert [r.name for r in result.records] == ["Ada"]
    assert result.records[0].role == "Speaker"


def test_missing_classifier_uses_fallback():
    result = infer(SchemaInference(), SCENARIO_CSV)
    assert result.used_fallback is True
    assert result.records == []


def test_empty_input_yields_nothing():
    result = infer(SchemaInference(FailingClassifier()), "  \n\n")
    assert result.records == []
    assert result.used_fallback is False
