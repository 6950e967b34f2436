import json
import sys
from typing import Dict, List, Optional

from sx_generator import build_sx_url
from wiki_api import WikidataAPI, WikipediaAPI


def inspect_article(title, target_lang="yo", source_lang="en",
                    wikidata: Optional[WikidataAPI] = None,
                    source_wiki: Optional[WikipediaAPI] = None) -> Dict:
    """Runs the per-title steps for one title and reports every intermediate result."""
    wikidata = wikidata or WikidataAPI()
    source_wiki = source_wiki or WikipediaAPI(lang=source_lang)

    report = {
        "title": title,
        "target_lang": target_lang,
        "source_lang": source_lang,
        "wikidata_available": None,
        "english_title": None,
        "source_available": None,
        "source_exists": None,
        "sx_url": None,
    }

    # 1. Cross-reference
    lookup = wikidata.get_english_titles([title], target_lang)
    report["wikidata_available"] = lookup.available
    if not lookup.available:
        report["wikidata_reason"] = lookup.reason
    english_title = lookup.value_or({}).get(title)
    report["english_title"] = english_title
    if not english_title:
        return report

    # 2. Existence in the source language
    exists = source_wiki.page_exists(english_title)
    report["source_available"] = exists.available
    if not exists.available:
        report["source_reason"] = exists.reason
    report["source_exists"] = exists.value_or(False)

    # 3. Translation link
    if report["source_exists"]:
        report["sx_url"] = build_sx_url(english_title, source_lang, target_lang)
    return report


def main(argv: Optional[List[str]] = None):
    import argparse
    parser = argparse.ArgumentParser(description="Inspect one title's translation readiness")
    parser.add_argument("title", help="Target-language article title")
    parser.add_argument("--target", help="Target language code (default: yo)", default="yo")
    parser.add_argument("--source", help="Source language code (default: en)", default="en")
    args = parser.parse_args(argv)

    report = inspect_article(args.title, target_lang=args.target, source_lang=args.source)
    json.dump(report, sys.stdout, ensure_ascii=False, indent=4)
    print()


if __name__ == "__main__":
    main()
