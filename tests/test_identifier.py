import pytest

from eigenda_store.errors import InvalidIdentifierError
from eigenda_store.identifier import MAX_BLOB_INDEX, BlobIdentifier


def test_canonical_string_example() -> None:
    ident = BlobIdentifier(index=5, batch_tag=b"\x01\x02")
    assert ident.to_canonical_string() == "5-AQI="
    assert str(ident) == "5-AQI="


def test_parse_canonical_string() -> None:
    ident = BlobIdentifier.from_canonical_string("5-AQI=")
    assert ident == BlobIdentifier(5, b"\x01\x02")


@pytest.mark.parametrize(
    "index, tag",
    [
        (0, b""),
        (0, b"\x00"),
        (7, bytes(range(32))),
        (2**40, b"\xfb\xff\xbf"),  # base64 "+/+/" alphabet characters
    ],
)
def test_string_form_is_lossless(index: int, tag: bytes) -> None:
    ident = BlobIdentifier(index, tag)
    assert BlobIdentifier.from_canonical_string(ident.to_canonical_string()) == ident


def test_empty_tag_renders_with_trailing_separator() -> None:
    assert BlobIdentifier(3, b"").to_canonical_string() == "3-"


def test_bytearray_tag_is_normalised() -> None:
    ident = BlobIdentifier(1, bytearray(b"\x01"))
    assert isinstance(ident.batch_tag, bytes)
    assert hash(ident) == hash(BlobIdentifier(1, b"\x01"))


@pytest.mark.parametrize(
    "text",
    [
        "",
        "5",
        "5-AQI=-x",
        "-AQI=",
        "a-AQI=",
        "+5-AQI=",
        "5 -AQI=",
        "5-AQI",
        "5-A*I=",
        "5-AQI=\n",
        "5\n-AQI=",
    ],
)
def test_rejects_malformed_strings(text: str) -> None:
    with pytest.raises(InvalidIdentifierError):
        BlobIdentifier.from_canonical_string(text)


@pytest.mark.parametrize("index", [-1, True, 1.5, "3"])
def test_rejects_bad_index(index) -> None:
    with pytest.raises(InvalidIdentifierError):
        BlobIdentifier(index, b"")


def test_rejects_non_bytes_tag() -> None:
    with pytest.raises(InvalidIdentifierError):
        BlobIdentifier(1, "AQI=")  # type: ignore[arg-type]


def test_invalid_identifier_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        BlobIdentifier.from_canonical_string("nope")


def test_largest_index_roundtrips() -> None:
    ident = BlobIdentifier(MAX_BLOB_INDEX, b"\x01\x02")
    assert ident.to_canonical_string() == "18446744073709551615-AQI="
    assert BlobIdentifier.from_canonical_string(ident.to_canonical_string()) == ident


@pytest.mark.parametrize("index", [MAX_BLOB_INDEX + 1, 10**5000], ids=["max_plus_one", "ten_pow_5000"])
def test_rejects_index_out_of_range(index: int) -> None:
    with pytest.raises(InvalidIdentifierError):
        BlobIdentifier(index, b"\x01")


@pytest.mark.parametrize(
    "text",
    [
        "18446744073709551616-AQI=",
        "9" * 5000 + "-AQI=",
        "0" * 5000 + "1-AQI=",
    ],
)
def test_rejects_oversized_index_strings(text: str) -> None:
    with pytest.raises(InvalidIdentifierError):
        BlobIdentifier.from_canonical_string(text)
