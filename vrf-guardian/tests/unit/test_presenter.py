from datetime import datetime, timezone

from vrf_guardian.crypto.keypair import VrfKeyPair
from vrf_guardian.exceptions import DerivationFailure, KeyNotFound
from vrf_guardian.services.presenter import HEADERS, Derived, Presenter, build_presenter, derive


class _NoRecords:
    def record_for(self, public_key):
        raise KeyNotFound(f"no entry for {public_key}")


def test_derive_captures_failure_as_diagnostic():
    key = VrfKeyPair.generate().public_key

    def boom() -> str:
        raise DerivationFailure("bad point")

    result = derive("hash of public key", key, boom)
    assert not result.ok
    assert result.value is None
    assert result.text == "error while computing hash of public key: bad point"


def test_missing_record_leaves_timestamps_empty():
    key = VrfKeyPair.generate().public_key
    presenter = build_presenter(key, _NoRecords())
    assert presenter.compressed == key.to_hex()
    assert presenter.uncompressed.ok and presenter.hash.ok
    assert presenter.to_row()[3:] == ["", "", ""]
    assert presenter.as_dict()["createdAt"] is None


def test_row_uses_each_timestamp_field():
    created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    updated = datetime(2024, 2, 2, 3, 4, 5, tzinfo=timezone.utc)
    presenter = Presenter(
        compressed="0x02",
        uncompressed=Derived(value="0xaa"),
        hash=Derived(diagnostic="error while computing hash"),
        created_at=created,
        updated_at=updated,
    )
    assert len(presenter.to_row()) == len(HEADERS)
    assert presenter.to_row() == [
        "0x02",
        "0xaa",
        "error while computing hash",
        "2024-01-02 03:04:05+00:00",
        "2024-02-02 03:04:05+00:00",
        "",
    ]
