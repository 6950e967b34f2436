"""
SX URL Generator – Section Translation readiness tables
───────────────────────────────────────────────────────
• Batched Wikidata sitelink lookups (50 titles per call, 1 s apart)
• Per-title existence check on the source-language Wikipedia
• Wiki-markup table with Special:ContentTranslation deep links
"""

import dataclasses
import enum
import time
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple
from urllib.parse import quote, urlencode

from tqdm import tqdm
from wiki_api import BATCH_LIMIT, WikidataAPI, WikipediaAPI

# ── Tunables ────────────────────────────────────────────────────────
BATCH_DELAY = 1.0      # seconds between successive Wikidata calls
DEFAULT_MAX_URLS = 20  # cap on "ready" rows


# ── Data model ──────────────────────────────────────────────────────
class RowStatus(enum.Enum):
    READY = "ready"
    NO_EQUIVALENT = "no_equivalent"
    NO_SOURCE = "no_source"


@dataclasses.dataclass(frozen=True)
class ArticleQuery:
    position: int   # 1-based
    title: str


@dataclasses.dataclass(frozen=True)
class ArticleRow:
    query: ArticleQuery
    english_title: Optional[str]
    status: RowStatus
    sx_url: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class TableConfig:
    target_lang: str
    source_lang: str = "en"
    max_urls: int = DEFAULT_MAX_URLS
    articles: Tuple[str, ...] = ()

    def __post_init__(self):
        if not self.target_lang or not self.target_lang.strip():
            raise ValueError("target language code must not be empty")
        if not self.source_lang or not self.source_lang.strip():
            raise ValueError("source language code must not be empty")
        if self.max_urls < 0:
            raise ValueError(f"max_urls must be >= 0, got {self.max_urls}")
        # Accept any sequence but keep the config immutable
        object.__setattr__(self, "articles", tuple(self.articles))

    @property
    def output_filename(self) -> str:
        return f"sx_urls_{self.source_lang}_to_{self.target_lang}.wiki"


# ── Link construction ───────────────────────────────────────────────
def build_sx_url(source_title: str, from_lang: str, to_lang: str) -> str:
    query = urlencode(
        [
            ("title", "Special:ContentTranslation"),
            ("filter-type", "automatic"),
            ("filter-id", "previous-edits"),
            ("from", from_lang),
            ("to", to_lang),
            ("active-list", "suggestions"),
            ("page", source_title),
        ],
        quote_via=quote,
    )
    return f"https://{from_lang}.wikipedia.org/w/index.php?{query}#/sx/section-selector"


# ── Rendering ───────────────────────────────────────────────────────
def status_label(status: RowStatus, source_lang: str) -> str:
    if status is RowStatus.READY:
        return "✅ Ready"
    if status is RowStatus.NO_EQUIVALENT:
        return f"❌ No {source_lang} equivalent"
    return "❌ No source"


def render_row(row: ArticleRow, target_lang: str, source_lang: str) -> str:
    title = row.query.title
    target_link = f"[[:{target_lang}:{title}|{title}]]"
    if row.english_title:
        source_link = f"[[:{source_lang}:{row.english_title}|{row.english_title}]]"
    else:
        source_link = "''Not found on Wikidata''"
    if row.sx_url:
        sx_link = f"[{row.sx_url} Start Translation]"
    else:
        sx_link = '<span style="color: #ccc;">Source missing</span>'

    return (
        f"|-\n| {row.query.position} || {target_link} || {source_link} "
        f"|| {sx_link} || {status_label(row.status, source_lang)}"
    )


def render_table(rows: Sequence[ArticleRow], target_lang: str, source_lang: str) -> str:
    """Pure: the same rows always render to the same text."""
    header = (
        '{| class="wikitable sortable"\n'
        f"|+ Section Translation Articles (from {source_lang} to {target_lang})\n"
        "|-\n"
        "! # !! Target Article !! Source Article !! SX Link !! Status"
    )
    lines = [header]
    lines.extend(render_row(row, target_lang, source_lang) for row in rows)
    lines.append("|}")
    return "\n".join(lines)


# ── Pipeline ────────────────────────────────────────────────────────
class SXUrlGenerator:
    def __init__(
        self,
        config: TableConfig,
        log_callback: Optional[Callable[[str], None]] = None,
        wikidata: Optional[WikidataAPI] = None,
        source_wiki: Optional[WikipediaAPI] = None,
    ):
        self.config = config
        self.log_callback = log_callback
        self.wikidata = wikidata or WikidataAPI()
        self.source_wiki = source_wiki or WikipediaAPI(lang=config.source_lang)

    def _log(self, message: str):
        if self.log_callback:
            self.log_callback(message)
        else:
            print(message)

    def _iter_batches(self, titles: Sequence[str]) -> Iterator[Tuple[List[str], Dict[str, str]]]:
        """
        Yields (batch, english_titles) one Wikidata call at a time.
        Calls are spaced BATCH_DELAY apart; a failed batch yields an empty mapping.
        """
        for index, start in enumerate(range(0, len(titles), BATCH_LIMIT)):
            if index:
                time.sleep(BATCH_DELAY)
            batch = list(titles[start:start + BATCH_LIMIT])
            lookup = self.wikidata.get_english_titles(batch, self.config.target_lang)
            if not lookup.available:
                self._log(f"Wikidata batch {index + 1} unavailable ({lookup.reason}), "
                          f"treating {len(batch)} titles as unresolved")
            mapping = lookup.value_or({})
            self._log(f"Wikidata batch {index + 1}: {len(mapping)}/{len(batch)} titles resolved")
            yield batch, mapping

    def lookup_english_titles(self, titles: Sequence[str]) -> Dict[str, str]:
        """Resolves every title, merging all batches into one mapping."""
        merged: Dict[str, str] = {}
        for _, mapping in self._iter_batches(titles):
            merged.update(mapping)
        return merged

    def source_exists(self, english_title: str) -> bool:
        lookup = self.source_wiki.page_exists(english_title)
        if not lookup.available:
            self._log(f"Existence check for '{english_title}' unavailable ({lookup.reason})")
        return lookup.value_or(False)

    def classify(self, query: ArticleQuery, english_title: Optional[str]) -> ArticleRow:
        if not english_title:
            return ArticleRow(query, None, RowStatus.NO_EQUIVALENT)

        if self.source_exists(english_title):
            sx_url = build_sx_url(english_title, self.config.source_lang, self.config.target_lang)
            return ArticleRow(query, english_title, RowStatus.READY, sx_url)
        return ArticleRow(query, english_title, RowStatus.NO_SOURCE)

    def build_rows(self) -> List[ArticleRow]:
        """
        Classifies the configured articles in order until `max_urls` rows are
        ready. Titles past that point are never looked up and get no row.
        """
        articles = self.config.articles
        max_urls = self.config.max_urls
        rows: List[ArticleRow] = []
        url_count = 0

        if max_urls == 0:
            self._log("max_urls is 0, nothing to do.")
            return rows

        use_tqdm = self.log_callback is None
        pbar = tqdm(total=len(articles), desc="Classifying articles", unit="article") if use_tqdm else None

        position = 0
        try:
            for batch, mapping in self._iter_batches(articles):
                for title in batch:
                    position += 1
                    row = self.classify(ArticleQuery(position, title), mapping.get(title))
                    rows.append(row)
                    if use_tqdm: pbar.update(1)

                    if row.status is RowStatus.READY:
                        url_count += 1
                        if url_count >= max_urls:
                            self._log(f"Reached {max_urls} ready articles, stopping "
                                      f"after {position}/{len(articles)}.")
                            return rows
        finally:
            if use_tqdm: pbar.close()

        return rows

    def generate_table(self) -> str:
        rows = self.build_rows()
        ready = sum(1 for row in rows if row.status is RowStatus.READY)
        self._log(f"{len(rows)} rows classified, {ready} ready for translation.")
        return render_table(rows, self.config.target_lang, self.config.source_lang)

    def save_table(self, table: str, path: Optional[str] = None) -> str:
        path = path or self.config.output_filename
        with open(path, "w", encoding="utf-8") as f:
            f.write(table)
        return path


def read_articles_file(path: str) -> List[str]:
    """One title per line; blank lines and '#' comments are skipped."""
    titles = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                titles.append(line)
    return titles


def main(argv: Optional[List[str]] = None):
    import argparse
    parser = argparse.ArgumentParser(description="Section Translation URL table generator")
    parser.add_argument("titles", help="Target-language article titles", nargs="*")
    parser.add_argument("--articles-file", help="File with one target-language title per line")
    parser.add_argument("--target", help="Target language code (default: yo)", default="yo")
    parser.add_argument("--source", help="Source language code (default: en)", default="en")
    parser.add_argument("--max-urls", help="Maximum number of ready rows (default: 15)",
                        type=int, default=15)
    parser.add_argument("--output", help="Output file (default: sx_urls_<source>_to_<target>.wiki)")

    args = parser.parse_args(argv)
    titles = list(args.titles)
    if args.articles_file:
        titles.extend(read_articles_file(args.articles_file))

    if not titles:
        entered = input("Enter target-language titles (separated by '|'): ")
        titles = [t.strip() for t in entered.split("|") if t.strip()]

    try:
        config = TableConfig(
            target_lang=args.target,
            source_lang=args.source,
            max_urls=args.max_urls,
            articles=titles,
        )
    except ValueError as e:
        parser.error(str(e))

    generator = SXUrlGenerator(config)
    table = generator.generate_table()

    print(f"=== GENERATED WIKI TABLE ===\n{table}")
    path = generator.save_table(table, args.output)
    print(f"Saved to: {path}")


if __name__ == "__main__":
    main()
