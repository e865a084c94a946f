"""Unit tests for sitedata.core.permissions — the permission layer over the store."""

from __future__ import annotations

import pytest

from sitedata.core.exceptions import PermissionKeyError
from sitedata.core.permissions import SitePermissions
from sitedata.core.store.database import SiteDataStore

SITE = "https://example.com/app"
ORIGIN = "https:example.com"


class TestScalarPermissions:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [True, 1, "yes", 7, ["x"]])
    async def test_truthy_stored_as_one(self, perms: SitePermissions, value) -> None:
        await perms.set_permission(SITE, "camera", value)
        assert await perms.get_permission(SITE, "camera") == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [False, 0, "", None, []])
    async def test_falsy_stored_as_zero(self, perms: SitePermissions, value) -> None:
        await perms.set_permission(SITE, "camera", value)
        assert await perms.get_permission(SITE, "camera") == 0

    @pytest.mark.asyncio
    async def test_stored_under_perm_prefix(
        self, perms: SitePermissions, store: SiteDataStore
    ) -> None:
        await perms.set_permission(SITE, "camera", True)
        assert await store.get(SITE, "perm:camera") == 1

    @pytest.mark.asyncio
    async def test_missing_permission_is_none(self, perms: SitePermissions) -> None:
        assert await perms.get_permission(SITE, "microphone") is None

    @pytest.mark.asyncio
    async def test_clear_permission(self, perms: SitePermissions) -> None:
        await perms.set_permission(SITE, "camera", True)
        assert await perms.clear_permission(SITE, "camera") is True
        assert await perms.get_permission(SITE, "camera") is None
        assert await perms.clear_permission(SITE, "camera") is False

    @pytest.mark.asyncio
    async def test_clear_permission_everywhere(
        self, perms: SitePermissions, store: SiteDataStore
    ) -> None:
        for url in ("https://a.example/", "https://b.example/", "https://c.example/"):
            await perms.set_permission(url, "camera", True)
            await perms.set_permission(url, "microphone", True)
        await store.set("https://a.example/", "zoom", 2)

        assert await perms.clear_permission_everywhere("camera") == 3

        for url in ("https://a.example/", "https://b.example/", "https://c.example/"):
            assert await perms.get_permission(url, "camera") is None
            assert await perms.get_permission(url, "microphone") == 1
        assert await store.get("https://a.example/", "zoom") == 2


class TestAllPermissions:
    @pytest.mark.asyncio
    async def test_prefix_stripped(self, perms: SitePermissions, store: SiteDataStore) -> None:
        await perms.set_permission(SITE, "camera", True)
        await perms.set_permission(SITE, "network:https:api.example", True)
        await perms.set_app_permissions(SITE, {"fs": ["read"]})
        await store.set(SITE, "zoom", 2)

        assert await perms.get_all_permissions(SITE) == {
            "camera": 1,
            "network:https:api.example": 1,
            "app:fs:read": 1,
        }

    @pytest.mark.asyncio
    async def test_scoped_to_origin(self, perms: SitePermissions) -> None:
        await perms.set_permission("https://other.example/", "camera", True)
        assert await perms.get_all_permissions(SITE) == {}

    @pytest.mark.asyncio
    async def test_unresolvable_origin(self, perms: SitePermissions) -> None:
        assert await perms.get_all_permissions("garbage") == {}


class TestNetworkPermissions:
    @pytest.mark.asyncio
    async def test_only_truthy_rows_returned(
        self, perms: SitePermissions, store: SiteDataStore
    ) -> None:
        await store.set(SITE, "perm:network:allowed.example", 1)
        await store.set(SITE, "perm:network:denied.example", 0)
        assert await perms.get_network_permissions(SITE) == ["allowed.example"]

    @pytest.mark.asyncio
    async def test_unescaped_key_yields_trailing_segment(
        self, perms: SitePermissions
    ) -> None:
        await perms.set_permission(SITE, "network:https:api.example", True)
        assert await perms.get_network_permissions(SITE) == ["api.example"]

    @pytest.mark.asyncio
    async def test_set_network_permission_round_trips_origin(
        self, perms: SitePermissions
    ) -> None:
        await perms.set_network_permission(SITE, "https:api.example", True)
        await perms.set_network_permission(SITE, "http:localhost:8080", True)
        await perms.set_network_permission(SITE, "https:blocked.example", False)
        assert await perms.get_network_permissions(SITE) == [
            "https:api.example",
            "http:localhost:8080",
        ]

    @pytest.mark.asyncio
    async def test_unresolvable_origin(self, perms: SitePermissions) -> None:
        assert await perms.get_network_permissions("garbage") == []


class TestAppPermissions:
    @pytest.mark.asyncio
    async def test_set_then_get(self, perms: SitePermissions) -> None:
        await perms.set_app_permissions(SITE, {"fs": ["read", "write"]})
        assert await perms.get_app_permissions(SITE) == {"fs": ["read", "write"]}

    @pytest.mark.asyncio
    async def test_replace_semantics(self, perms: SitePermissions) -> None:
        await perms.set_app_permissions(SITE, {"fs": ["read", "write"], "net": ["fetch"]})
        await perms.set_app_permissions(SITE, {"fs": ["read"]})
        assert await perms.get_app_permissions(SITE) == {"fs": ["read"]}

    @pytest.mark.asyncio
    async def test_none_clears_all(self, perms: SitePermissions) -> None:
        await perms.set_app_permissions(SITE, {"fs": ["read"]})
        await perms.set_app_permissions(SITE, None)
        assert await perms.get_app_permissions(SITE) == {}

    @pytest.mark.asyncio
    async def test_non_sequence_entries_skipped(self, perms: SitePermissions) -> None:
        await perms.set_app_permissions(
            SITE, {"fs": ["read"], "bad": "write", "worse": 1, "tuple": ("a",)}
        )
        assert await perms.get_app_permissions(SITE) == {"fs": ["read"], "tuple": ["a"]}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("grants", [{"fs": ["read", ""]}, {"": ["read"]}])
    async def test_invalid_grant_leaves_existing_grants(
        self, perms: SitePermissions, grants
    ) -> None:
        await perms.set_app_permissions(SITE, {"fs": ["read", "write"]})
        with pytest.raises(PermissionKeyError):
            await perms.set_app_permissions(SITE, grants)
        assert await perms.get_app_permissions(SITE) == {"fs": ["read", "write"]}

    @pytest.mark.asyncio
    async def test_other_permissions_untouched(self, perms: SitePermissions) -> None:
        await perms.set_permission(SITE, "camera", True)
        await perms.set_app_permissions(SITE, {"fs": ["read"]})
        await perms.set_app_permissions(SITE, {})
        assert await perms.get_permission(SITE, "camera") == 1

    @pytest.mark.asyncio
    async def test_other_origins_untouched(self, perms: SitePermissions) -> None:
        await perms.set_app_permissions("https://other.example/", {"fs": ["read"]})
        await perms.set_app_permissions(SITE, {})
        assert await perms.get_app_permissions("https://other.example/") == {"fs": ["read"]}

    @pytest.mark.asyncio
    async def test_colons_in_names_round_trip(self, perms: SitePermissions) -> None:
        await perms.set_app_permissions(SITE, {"ns:fs": ["read:all", "50%"]})
        assert await perms.get_app_permissions(SITE) == {"ns:fs": ["read:all", "50%"]}

    @pytest.mark.asyncio
    async def test_unescaped_key_splits_on_first_colon(
        self, perms: SitePermissions, store: SiteDataStore
    ) -> None:
        await store.set(SITE, "perm:app:fs:read:deep", 1)
        assert await perms.get_app_permissions(SITE) == {"fs": ["read:deep"]}

    @pytest.mark.asyncio
    async def test_malformed_key_ignored(
        self, perms: SitePermissions, store: SiteDataStore
    ) -> None:
        await store.set(SITE, "perm:app:fs", 1)
        assert await perms.get_app_permissions(SITE) == {}

    @pytest.mark.asyncio
    async def test_unresolvable_origin(self, perms: SitePermissions) -> None:
        assert await perms.set_app_permissions("garbage", {"fs": ["read"]}) is False
        assert await perms.get_app_permissions("garbage") == {}

    @pytest.mark.asyncio
    async def test_alias_origin(self, perms: SitePermissions) -> None:
        await perms.set_app_permissions("dat://example.dat/", {"fs": ["read"]})
        assert await perms.get_app_permissions("dat://example.dat/other") == {"fs": ["read"]}
