import dataclasses
import re
import requests
from requests.adapters import HTTPAdapter
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")

WIKIDATA_URL = "https://www.wikidata.org/w/api.php"
BATCH_LIMIT = 50       # wbgetentities accepts at most 50 titles per call
TIMEOUT = 10           # seconds, per call

_WHITESPACE_RE = re.compile(r"\s+", re.UNICODE)


def normalize_title(title: str) -> str:
    """Underscores to spaces, runs of whitespace collapsed, ends trimmed."""
    return _WHITESPACE_RE.sub(" ", title.replace("_", " ")).strip()


def site_id(lang: str) -> str:
    """Wikipedia site identifier for a language code: "zh-yue" -> "zh_yuewiki"."""
    return lang.replace("-", "_") + "wiki"


@dataclasses.dataclass(frozen=True)
class Lookup(Generic[T]):
    """
    Outcome of a single upstream lookup.
    `available=False` means the lookup itself failed (transport, status,
    payload); callers decide whether that is the same as "not found".
    """
    value: Optional[T] = None
    available: bool = True
    reason: str = ""

    @classmethod
    def ok(cls, value: T) -> "Lookup[T]":
        return cls(value=value)

    @classmethod
    def unavailable(cls, reason: str) -> "Lookup[T]":
        return cls(value=None, available=False, reason=reason)

    def value_or(self, default: T) -> T:
        if not self.available or self.value is None:
            return default
        return self.value


class MediaWikiClient:
    """
    Base for the Action API clients.
    One shared requests.Session, no retries: a failed call is reported once
    as an unavailable Lookup and never raised.
    """

    USER_AGENT = (
        "SX-URL-Generator/1.0 "
        "(section translation readiness tables) requests"
    )

    def __init__(self, base_url: str):
        self.base_url = base_url

        self.session = requests.Session()
        self.session.headers.update({"User-Agent": self.USER_AGENT})

        adapter = HTTPAdapter(max_retries=0)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    def _get_json(self, params: Dict[str, Any]) -> Lookup[Dict[str, Any]]:
        try:
            response = self.session.get(self.base_url, params=params, timeout=TIMEOUT)
        except requests.RequestException as e:
            return Lookup.unavailable(f"request failed: {e}")

        if response.status_code != 200:
            return Lookup.unavailable(f"HTTP {response.status_code}")
        if not response.content:
            return Lookup.unavailable("empty response body")

        try:
            data = response.json()
        except ValueError:
            return Lookup.unavailable("malformed JSON")

        if not isinstance(data, dict):
            return Lookup.unavailable("unexpected payload")
        if "error" in data:
            info = data["error"]
            code = info.get("code", "unknown") if isinstance(info, dict) else info
            return Lookup.unavailable(f"API error: {code}")

        return Lookup.ok(data)


class WikidataAPI(MediaWikiClient):
    """Resolves target-language titles to their English Wikipedia titles via sitelinks."""

    def __init__(self, base_url: str = WIKIDATA_URL):
        super().__init__(base_url)

    def get_english_titles(self, titles: List[str], target_lang: str) -> Lookup[Dict[str, str]]:
        """
        Fetches sitelinks for a batch of titles (max 50).
        Returns a mapping of input title -> enwiki title. Titles without an
        item, or whose item has no enwiki sitelink, are absent. Inputs are
        matched against the sitelinks in normalized form, so "A_b" and
        "A  b" both resolve through the sitelink "A b".
        """
        if len(titles) > BATCH_LIMIT:
            raise ValueError(f"at most {BATCH_LIMIT} titles per batch, got {len(titles)}")
        if not titles:
            return Lookup.ok({})

        # Normalized title -> every input spelling of it
        originals: Dict[str, List[str]] = {}
        for title in titles:
            originals.setdefault(normalize_title(title), []).append(title)

        site = site_id(target_lang)
        params = {
            "action": "wbgetentities",
            "format": "json",
            "sites": site,
            "titles": "|".join(originals),
            "props": "sitelinks",
            "sitefilter": f"{site}|enwiki",
        }

        lookup = self._get_json(params)
        if not lookup.available:
            return lookup

        entities = lookup.value.get("entities")
        if not isinstance(entities, dict):
            return Lookup.unavailable("no entities in response")

        results = {}
        for entity in entities.values():
            # Unknown titles come back as {"missing": ""} with no sitelinks
            sitelinks = entity.get("sitelinks") or {}
            local = sitelinks.get(site, {}).get("title")
            english = sitelinks.get("enwiki", {}).get("title")
            if local and english:
                for title in originals.get(normalize_title(local), []):
                    results[title] = english

        return Lookup.ok(results)


class WikipediaAPI(MediaWikiClient):
    """Page existence checks against one language's Wikipedia."""

    def __init__(self, lang: str = "en"):
        self.lang = lang
        super().__init__(f"https://{lang}.wikipedia.org/w/api.php")

    def page_exists(self, title: str) -> Lookup[bool]:
        """
        True when at least one returned page is neither missing nor invalid.
        """
        params = {
            "action": "query",
            "format": "json",
            "titles": title,
        }

        lookup = self._get_json(params)
        if not lookup.available:
            return lookup

        pages = lookup.value.get("query", {}).get("pages", {})
        for page_data in pages.values():
            if "missing" not in page_data and "invalid" not in page_data:
                return Lookup.ok(True)
        return Lookup.ok(False)


if __name__ == "__main__":
    # Quick test
    wikidata = WikidataAPI()
    test_title = "Nàìjíríà"
    print(f"Resolving yowiki title: {test_title}")
    result = wikidata.get_english_titles([test_title], "yo")
    print(f"Available: {result.available} {result.reason} -> {result.value}")
