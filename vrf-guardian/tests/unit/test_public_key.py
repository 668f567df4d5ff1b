import pytest

from vrf_guardian.crypto.keypair import VrfKeyPair
from vrf_guardian.crypto.public_key import PublicKey, format_key, parse
from vrf_guardian.exceptions import MalformedKey

GENERATOR = "0x0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
GENERATOR_XY = (
    "79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
    "483ada7726a3c4655da4fbfc0e1108a8fd17b448a68554199c47d08ffb10d4b8"
)


def test_parse_and_format_generator_point():
    key = parse(GENERATOR)
    assert format_key(key) == GENERATOR
    assert str(key) == GENERATOR


@pytest.mark.parametrize("text", [GENERATOR[2:], GENERATOR.upper().replace("0X", "0x"), f"  {GENERATOR}\n"])
def test_parse_accepts_prefixless_and_mixed_case(text: str):
    assert parse(text) == parse(GENERATOR)


def test_uncompressed_form():
    key = parse(GENERATOR)
    assert key.to_uncompressed_hex() == "0x" + GENERATOR_XY


def test_hash_is_keccak_of_coordinates():
    # The generator is the public key of secret 1; its Ethereum address is the last 20 bytes.
    digest = parse(GENERATOR).hash_hex()
    assert len(digest) == 66
    assert digest.startswith("0xc0a6c424")
    assert digest.endswith("7e5f4552091a69125d5dfcb7b8c2659029395bdf")


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "0xzz",
        "0x0279be",
        "0x04" + GENERATOR_XY,
        "0x05" + GENERATOR[4:],
        # x beyond the field prime has no point on the curve
        "0x02" + "ff" * 32,
    ],
)
def test_parse_rejects_malformed(text: str):
    with pytest.raises(MalformedKey):
        parse(text)


def test_generated_keys_round_trip_through_hex():
    pair = VrfKeyPair.generate()
    key = pair.public_key
    assert PublicKey.from_hex(key.to_hex()) == key
    assert len(key.raw) == 33


def test_secret_bytes_restore_same_public_key():
    pair = VrfKeyPair.generate()
    restored = VrfKeyPair.from_secret(pair.secret_bytes())
    assert restored.public_key == pair.public_key
