"""
Default records inserted by schema migrations.

The favicons for the default bookmarks ship as PNG files next to this module
and are stored as ``data:`` URIs, exactly as the browser profile expects.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from importlib import resources

from sitedata.core.constants import FAVICON_KEY

Value = str | int | float | None


@dataclass(frozen=True)
class SeedRecord:
    origin: str
    key: str
    value: Value

    def as_params(self) -> tuple[str, str, Value]:
        return (self.origin, self.key, self.value)


def favicon_data_uri(filename: str) -> str:
    """Return the bundled favicon *filename* as a ``data:image/png`` URI."""
    raw = resources.files(__package__).joinpath("favicons", filename).read_bytes()
    return "data:image/png;base64," + base64.b64encode(raw).decode("ascii")


def favicon(origin: str, filename: str) -> SeedRecord:
    return SeedRecord(origin, FAVICON_KEY, favicon_data_uri(filename))


# dat archive keys of the default bookmarks
BEAKERBROWSER_KEY = "87ed2e3b160f261a032af03921a3bd09227d0a4cde73466c17114816cae43336"
DATPROTOCOL_KEY = "6ff62299bf38ee578c18cf698957b7b162a35a9aceb157345c79dbde26eba524"
TARAVANCIL_KEY = "4fa30df06cbeda4ae87be8fd4334a61289be6648fb0bf7f44f6b91d2385c9328"

V1_FAVICONS: tuple[SeedRecord, ...] = (
    favicon("https:duckduckgo.com", "duckduckgo.com.png"),
    favicon("dat:" + BEAKERBROWSER_KEY, "beakerbrowser.com.png"),
)

V3_FAVICONS: tuple[SeedRecord, ...] = (
    favicon("https:hashbase.io", "hashbase.io.png"),
    favicon("https:twitter.com", "twitter.com.png"),
    favicon("https:github.com", "github.com.png"),
)

V5_FAVICONS: tuple[SeedRecord, ...] = (
    favicon("https:opencollective.com", "opencollective.com.png"),
    favicon("dat:" + DATPROTOCOL_KEY, "datprotocol.org.png"),
    favicon("dat:" + TARAVANCIL_KEY, "taravancil.com.png"),
)
