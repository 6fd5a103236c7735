import pytest

from eigenda_store.limits import DEFAULT_MAX_PAYLOAD_BYTES, MiB, SizeGuard


def test_default_ceiling_is_two_mib() -> None:
    assert DEFAULT_MAX_PAYLOAD_BYTES == 2 * 1024 * 1024
    assert SizeGuard().max_size_bytes == 2 * MiB


def test_ceiling_is_exclusive() -> None:
    guard = SizeGuard()
    assert guard.fits(b"\x00" * (2 * MiB - 1))
    assert not guard.fits(b"\x00" * (2 * MiB))
    assert not guard.fits(b"\x00" * (2 * MiB + 1))


def test_custom_ceiling() -> None:
    guard = SizeGuard(64)
    assert guard.fits(b"x" * 63)
    assert not guard.fits(b"x" * 64)
    assert guard.fits(b"")


@pytest.mark.parametrize("bad", [0, -1])
def test_rejects_non_positive_ceiling(bad: int) -> None:
    with pytest.raises(ValueError):
        SizeGuard(bad)
