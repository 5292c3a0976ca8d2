from io import BytesIO

from PIL import Image

from badgeforge.engine.inference import SchemaInference
from badgeforge.services import import_service

from conftest import StubClassifier

CSV = "Name,Org,Role\nAda,ACME,Speaker\nBob,,Organizer\nCy,Initech,Attendee"


def use_classifier(monkeypatch, payload):
    classifier = StubClassifier(payload)
    monkeypatch.setattr(import_service, "build_inference", lambda: SchemaInference(classifier))
    return classifier


def do_import(client, headers, raw=CSV, **extra):
    body = {"rawText": raw, "archetype": "conference", **extra}
    return client.post("/api/attendees/import", json=body, headers=headers)


def png(color):
    output = BytesIO()
    Image.new("RGB", (50, 50), color).save(output, format="PNG")
    return output.getvalue()


def test_import_and_list(client, user_headers, monkeypatch):
    use_classifier(monkeypatch, {"name": 0, "company": 1, "role": 2})

    response = do_import(client, user_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["usedFallback"] is False
    assert body["imported"] == 3

    listed = client.get("/api/attendees", headers=user_headers).json()
    assert [a["name"] for a in listed["attendees"]] == ["Ada", "Bob", "Cy"]
    assert listed["attendees"][0]["extras"] == {"Name": "Ada", "Org": "ACME", "Role": "Speaker"}
    assert listed["attendees"][1]["company"] == "Self"


def test_import_without_classifier_reports_fallback(client, user_headers):
    raw = "SL. NO.,REG. ID,NAME,COMPANY\n1,R1,Ada,ACME"
    body = do_import(client, user_headers, raw=raw).json()

    assert body["usedFallback"] is True
    assert body["notice"]
    assert body["records"][0]["registrationId"] == "R1"


def test_unreadable_import_is_rejected(client, user_headers):
    assert do_import(client, user_headers, raw="just some words").status_code == 400


def test_merge_import_keeps_existing(client, user_headers, monkeypatch):
    use_classifier(monkeypatch, {"name": 0, "registrationId": 1})
    do_import(client, user_headers, raw="Name,Reg,X\nAda,R1,a\nBob,R2,b")
    first_ids = [a["id"] for a in client.get("/api/attendees", headers=user_headers).json()["attendees"]]

    body = do_import(client, user_headers, raw="Name,Reg,X\nAda L,R1,a\nCy,R3,c", replace=False).json()

    assert body["total"] == 3
    names = [a["name"] for a in body["records"]]
    assert names == ["Ada L", "Bob", "Cy"]
    assert body["records"][0]["id"] == first_ids[0]


def test_patch_bulk_and_delete(client, user_headers, monkeypatch):
    use_classifier(monkeypatch, {"name": 0, "company": 1, "role": 2})
    records = do_import(client, user_headers).json()["records"]
    ada, bob, cy = (r["id"] for r in records)

    response = client.patch(
        f"/api/attendees/{ada}",
        json={"jobTitle": "CTO", "extras": {"Dept": "R&D"}},
        headers=user_headers,
    )
    assert response.status_code == 200
    assert response.json()["jobTitle"] == "CTO"
    assert response.json()["extras"]["Dept"] == "R&D"
    assert response.json()["extras"]["Org"] == "ACME"

    assert client.patch(f"/api/attendees/{ada}", json={"bogus": 1}, headers=user_headers).status_code == 400
    assert client.patch("/api/attendees/att-missing", json={"name": "X"}, headers=user_headers).status_code == 404

    bulk = client.patch(
        "/api/attendees/bulk",
        json={"ids": [bob, cy, "att-missing"], "data": {"passType": "VIP"}},
        headers=user_headers,
    )
    assert bulk.json() == {"updated": 2}

    assert client.delete(f"/api/attendees/{bob}", headers=user_headers).status_code == 204
    listed = client.get("/api/attendees", headers=user_headers).json()["attendees"]
    assert [(a["name"], a["passType"]) for a in listed] == [("Ada", "General Entry"), ("Cy", "VIP")]

    assert client.delete("/api/attendees", headers=user_headers).json() == {"deleted": 2}


def test_delete_extra_field(client, user_headers, monkeypatch):
    use_classifier(monkeypatch, {"name": 0, "company": 1, "role": 2})
    do_import(client, user_headers)

    response = client.delete("/api/attendees/fields/Org", headers=user_headers)
    assert response.json() == {"label": "Org", "updated": 2}

    listed = client.get("/api/attendees", headers=user_headers).json()["attendees"]
    assert all("Org" not in a["extras"] for a in listed)


def test_photo_upload_binds_by_index(client, user_headers, monkeypatch):
    use_classifier(monkeypatch, {"name": 0, "company": 1, "role": 2})
    do_import(client, user_headers)

    files = [
        ("files", ("photo_2.png", png((0, 0, 255)), "image/png")),
        ("files", ("photo_7.png", png((255, 0, 0)), "image/png")),
        ("files", ("cover.png", png((0, 255, 0)), "image/png")),
    ]
    response = client.post("/api/attendees/photos", files=files, headers=user_headers)
    assert response.json() == {"matched": 1, "failed": 2, "total": 3}

    listed = client.get("/api/attendees", headers=user_headers).json()["attendees"]
    assert [bool(a["image"]) for a in listed] == [False, False, True]
    assert listed[2]["image"].startswith("data:image/jpeg;base64,")


def test_collections_are_per_user(client, user_headers, other_headers, monkeypatch):
    use_classifier(monkeypatch, {"name": 0, "company": 1, "role": 2})
    do_import(client, user_headers)

    assert client.get("/api/attendees", headers=other_headers).json()["total"] == 0
