"""URL to ``HostKind`` classification.

Host families are matched by substring against the URL's hostname. The
pattern lists come from configuration so that mirror domains can be added
without code changes.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from urllib.parse import urlparse

from resolvarr.domain.entities.resolution import HostKind, IntermediateURL

# Social and search hosts that never lead to content.
EXCLUDED_HOSTS: tuple[str, ...] = (
    "t.me",
    "telegram.me",
    "facebook.com",
    "twitter.com",
    "instagram.com",
    "youtube.com",
    "pinterest.com",
    "linkedin.com",
    "whatsapp.com",
    "google.com",
)

# Site-chrome pages linked from every provider page.
EXCLUDED_PATH_MARKERS: tuple[str, ...] = (
    "about-us",
    "contact-us",
    "privacy-policy",
    "terms-conditions",
    "copyright-policy",
)

DEFAULT_HOST_PATTERNS: dict[HostKind, tuple[str, ...]] = {
    HostKind.AGGREGATOR: ("gyanigurus", "gyaniguru"),
    HostKind.GATED_REDIRECT: ("gadgetsweb", "techyboy4u"),
    HostKind.HUBDRIVE: ("hubdrive", "katdrive", "drivemanga"),
    HostKind.HUBCLOUD: ("hubcloud", "vcloud"),
    HostKind.GDFLIX: ("gdflix", "gdtot"),
    HostKind.PIXELDRAIN: ("pixeldrain",),
    HostKind.GOFILE: ("gofile",),
    HostKind.PACKED_EMBED: ("kwik",),
    HostKind.BASE64_REDIRECT: ("ampproject", "bloggingvector", "newsongs"),
}


def extract_hostname(url: str) -> str:
    """Lower-cased hostname of *url*, or ``""`` when unparseable."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def is_excluded(url: str) -> bool:
    """True for social/search hosts and site-chrome pages."""
    hostname = extract_hostname(url)
    if any(hostname == host or hostname.endswith("." + host) for host in EXCLUDED_HOSTS):
        return True
    path = url.lower().split("?", 1)[0]
    return any(marker in path for marker in EXCLUDED_PATH_MARKERS)


class HostTable:
    """Maps hostnames to provider families.

    Kinds are checked in enum declaration order; the first family with a
    matching pattern wins.
    """

    def __init__(
        self,
        patterns: Mapping[HostKind, Sequence[str]] | None = None,
    ) -> None:
        source = DEFAULT_HOST_PATTERNS if patterns is None else patterns
        self._patterns: dict[HostKind, tuple[str, ...]] = {
            kind: tuple(p.lower() for p in source.get(kind, ()) if p)
            for kind in HostKind
            if kind is not HostKind.UNKNOWN
        }

    @classmethod
    def from_config(cls, hosts: Mapping[str, Sequence[str]]) -> HostTable:
        """Build from the ``hosts`` config section (keys are kind values)."""
        return cls({HostKind(name): values for name, values in hosts.items()})

    @property
    def known_kinds(self) -> list[str]:
        return [kind.value for kind, patterns in self._patterns.items() if patterns]

    def classify(self, url: str) -> HostKind:
        """Return the provider family of *url* (``UNKNOWN`` if none matches)."""
        hostname = extract_hostname(url)
        if not hostname:
            return HostKind.UNKNOWN
        for kind, patterns in self._patterns.items():
            if any(pattern in hostname for pattern in patterns):
                return kind
        return HostKind.UNKNOWN

    def to_intermediate(self, url: str) -> IntermediateURL:
        """Classify *url* into an immutable ``IntermediateURL``."""
        return IntermediateURL(url=url, host=self.classify(url))
