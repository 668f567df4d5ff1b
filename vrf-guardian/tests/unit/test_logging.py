import logging

import pytest

from vrf_guardian.logging import REDACTED, add_component, event_as_msg, redact_secrets


@pytest.mark.parametrize("field", ["password", "secret", "vrf_key"])
def test_secret_fields_are_redacted(field: str):
    event = redact_secrets(None, "info", {"event": "keystore.import", field: "hunter2", "public_key": "0x02ab"})
    assert event[field] == REDACTED
    assert event["public_key"] == "0x02ab"


def test_component_is_module_path_inside_package():
    event = add_component(logging.getLogger("vrf_guardian.storage.keystore"), "info", {})
    assert event["component"] == "storage.keystore"


def test_explicit_component_is_kept():
    event = add_component(logging.getLogger("vrf_guardian.cli.main"), "info", {"component": "cli"})
    assert event["component"] == "cli"


def test_event_becomes_msg():
    assert event_as_msg(None, "info", {"event": "lifecycle.export"}) == {"msg": "lifecycle.export"}
