from badgeforge.engine.photos import extract_index, match_photos
from badgeforge.engine.records import Record


def encode(content):
    if content == b"broken":
        raise OSError("cannot identify image file")
    return "data:image/jpeg;base64," + content.decode()


def test_extract_index_takes_first_digit_run():
    assert extract_index("photo_5.png") == 5
    assert extract_index("12-of-40.jpg") == 12
    assert extract_index("IMG007.jpeg") == 7
    assert extract_index("portrait.png") is None


def test_photos_bind_by_position():
    records = [Record(name="A"), Record(name="B"), Record(name="C")]
    files = [("photo_2.png", b"CCC"), ("photo_0.png", b"AAA")]

    result = match_photos(records, files, encode)

    assert (result.matched, result.failed) == (2, 0)
    assert [r.image for r in result.records] == [
        "data:image/jpeg;base64,AAA",
        None,
        "data:image/jpeg;base64,CCC",
    ]
    assert records[0].image is None


def test_unmatched_and_broken_files_count_as_failures():
    records = [Record(name="A"), Record(name="B")]
    files = [
        ("nodigits.png", b"X"),
        ("photo_9.png", b"X"),
        ("photo_1.png", b"broken"),
        ("photo_0.png", b"OK"),
    ]

    result = match_photos(records, files, encode)

    assert (result.matched, result.failed) == (1, 3)
    assert result.records[1].image is None


def test_later_photo_replaces_earlier():
    records = [Record(name="A")]
    result = match_photos(records, [("a0.png", b"ONE"), ("b0.png", b"TWO")], encode)
    assert result.records[0].image.endswith("TWO")
