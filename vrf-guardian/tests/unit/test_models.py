import json

import pytest

from vrf_guardian.config import KdfConfig
from vrf_guardian.crypto.keypair import VrfKeyPair
from vrf_guardian.exceptions import ImportFailure, MalformedKey
from vrf_guardian.models import EncryptedKeyFile, peek_public_key

KDF = KdfConfig(n=2**4, r=1, p=1)


def test_key_file_round_trip_and_unseal():
    pair = VrfKeyPair.generate()
    key_file = EncryptedKeyFile.seal(pair, "pw", KDF)
    loaded = EncryptedKeyFile.from_bytes(key_file.to_bytes())
    assert loaded.public_key == pair.public_key
    assert loaded.unseal("pw").secret_bytes() == pair.secret_bytes()


def test_public_key_is_readable_without_password():
    pair = VrfKeyPair.generate()
    data = EncryptedKeyFile.seal(pair, "pw", KDF).to_bytes()
    assert peek_public_key(data) == pair.public_key
    assert pair.secret_bytes().hex() not in data.decode("utf-8")


def test_peek_rejects_garbage():
    with pytest.raises(ImportFailure):
        peek_public_key(b"not json")
    with pytest.raises(MalformedKey):
        peek_public_key(json.dumps({"vrf_key": {}}).encode())


def test_swapped_public_key_does_not_unseal():
    pair, other = VrfKeyPair.generate(), VrfKeyPair.generate()
    key_file = EncryptedKeyFile.seal(pair, "pw", KDF)
    forged = EncryptedKeyFile(public_key=other.public_key, vrf_key=key_file.vrf_key)
    with pytest.raises(ImportFailure):
        forged.unseal("pw")


@pytest.mark.parametrize(
    "document",
    [
        [],
        {"public_key": "0x02"},
        {"public_key": "nope", "vrf_key": {}},
    ],
)
def test_from_bytes_rejects_malformed_documents(document):
    with pytest.raises(ImportFailure):
        EncryptedKeyFile.from_bytes(json.dumps(document).encode())


def test_summary_omits_ciphertext():
    key_file = EncryptedKeyFile.seal(VrfKeyPair.generate(), "pw", KDF)
    summary = key_file.summary()
    assert str(key_file.public_key) in summary
    assert key_file.vrf_key["ct"] not in summary
