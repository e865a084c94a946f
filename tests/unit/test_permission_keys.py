"""Unit tests for permission key encoding and decoding."""

from __future__ import annotations

import pytest

from sitedata.core.exceptions import PermissionKeyError
from sitedata.core.permissions import (
    AppPermission,
    NetworkPermission,
    ScalarPermission,
    decode_permission_key,
    escape_component,
    unescape_component,
)


class TestEncode:
    def test_scalar(self) -> None:
        assert ScalarPermission("camera").encode() == "perm:camera"

    def test_scalar_name_kept_verbatim(self) -> None:
        assert ScalarPermission("network:x").encode() == "perm:network:x"

    def test_network(self) -> None:
        assert NetworkPermission("api.example").encode() == "perm:network:api.example"

    def test_network_escapes_colon(self) -> None:
        assert NetworkPermission("https:api.example").encode() == "perm:network:https%3Aapi.example"

    def test_app(self) -> None:
        assert AppPermission("fs", "read").encode() == "perm:app:fs:read"

    def test_app_escapes_components(self) -> None:
        assert AppPermission("a:b", "c%d").encode() == "perm:app:a%3Ab:c%25d"

    @pytest.mark.parametrize(
        "build",
        [
            lambda: ScalarPermission(""),
            lambda: NetworkPermission(""),
            lambda: AppPermission("", "read"),
            lambda: AppPermission("fs", ""),
        ],
    )
    def test_empty_components_rejected(self, build) -> None:
        with pytest.raises(PermissionKeyError):
            build()


class TestDecode:
    def test_not_a_permission(self) -> None:
        assert decode_permission_key("favicon") is None
        assert decode_permission_key("perm:") is None

    def test_scalar(self) -> None:
        assert decode_permission_key("perm:camera") == ScalarPermission("camera")

    def test_network(self) -> None:
        assert decode_permission_key("perm:network:api.example") == NetworkPermission(
            "api.example"
        )

    def test_network_unescaped_takes_last_segment(self) -> None:
        assert decode_permission_key("perm:network:https:api.example") == NetworkPermission(
            "api.example"
        )

    def test_app(self) -> None:
        assert decode_permission_key("perm:app:fs:read") == AppPermission("fs", "read")

    def test_app_unescaped_rest_is_capability(self) -> None:
        assert decode_permission_key("perm:app:fs:read:deep") == AppPermission("fs", "read:deep")

    def test_malformed_family_falls_back_to_scalar(self) -> None:
        assert decode_permission_key("perm:app:fs") == ScalarPermission("app:fs")
        assert decode_permission_key("perm:network:") == ScalarPermission("network:")

    @pytest.mark.parametrize(
        "key",
        [
            ScalarPermission("geolocation"),
            NetworkPermission("https:api.example:8443"),
            NetworkPermission("100%"),
            AppPermission("ns:fs", "read:all"),
            AppPermission("%3A", "%25"),
        ],
    )
    def test_round_trip(self, key) -> None:
        assert decode_permission_key(key.encode()) == key


class TestEscaping:
    def test_unescape_only_touches_own_escapes(self) -> None:
        assert unescape_component("%41%3a%25") == "%41:%"

    def test_escape_then_unescape(self) -> None:
        for raw in ("", "plain", "a:b", "%", "%3A", "::%%"):
            assert unescape_component(escape_component(raw)) == raw
