import hashlib

from connectors.identity import derive_identity
from connectors.streams.quality_metrics import metric_id
from connectors.streams.usage import usage_id


def test_derive_identity_is_deterministic():
    first = derive_identity("RM_1", "PA_1", 1737374400000, "audio")
    second = derive_identity("RM_1", "PA_1", 1737374400000, "audio")
    assert first == second
    assert len(first) == 32
    int(first, 16)


def test_derive_identity_matches_sha256_prefix():
    expected = hashlib.sha256(b"2025-01-15:participant_minutes:global").hexdigest()[:32]
    assert derive_identity("2025-01-15", "participant_minutes", "global") == expected


def test_every_component_changes_the_identity():
    base = ("RM_1", "PA_1", 1737374400000, "audio")
    baseline = derive_identity(*base)
    for index, replacement in enumerate(("RM_2", "PA_2", 1737374400001, "video")):
        changed = list(base)
        changed[index] = replacement
        assert derive_identity(*changed) != baseline


def test_stream_identity_helpers():
    assert usage_id("2025-01-15", "participant_minutes", "us-west") == usage_id(
        "2025-01-15", "participant_minutes", "us-west"
    )
    assert usage_id("2025-01-15", "participant_minutes", "us-west") != usage_id(
        "2025-01-15", "recording_minutes", "us-west"
    )
    assert usage_id("2025-01-15", "egress_bandwidth") == derive_identity("2025-01-15", "egress_bandwidth", "global")
    assert metric_id("RM_1", "PA_1", 1, "audio") != metric_id("RM_1", "PA_1", 1, "screen_share")
