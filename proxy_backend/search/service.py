"""
Result assembly for the DuckDuckGo Instant Answer API.

The Instant Answer API returns a loose JSON document: direct ``Results``,
``RelatedTopics`` (which may nest further ``Topics`` groups) and an
abstract. These are flattened into a single ordered result list with the
abstract first.
"""

from typing import Any, Dict, List

from proxy_backend.models import SearchResult


def _topic_results(topics: List[Dict[str, Any]]) -> List[SearchResult]:
    results = []
    for topic in topics:
        if not isinstance(topic, dict):
            continue
        nested = topic.get("Topics")
        if isinstance(nested, list):
            for sub in nested:
                if isinstance(sub, dict) and sub.get("FirstURL") and sub.get("Text"):
                    results.append(SearchResult(title=sub["Text"], url=sub["FirstURL"]))
        elif topic.get("FirstURL") and topic.get("Text"):
            results.append(SearchResult(title=topic["Text"], url=topic["FirstURL"]))
    return results


def build_search_results(payload: Dict[str, Any], limit: int) -> List[SearchResult]:
    results: List[SearchResult] = []

    direct = payload.get("Results")
    if isinstance(direct, list):
        for item in direct:
            if isinstance(item, dict) and item.get("FirstURL") and item.get("Text"):
                results.append(
                    SearchResult(
                        title=item["Text"],
                        url=item["FirstURL"],
                        snippet=item.get("Result") or "",
                    )
                )

    related = payload.get("RelatedTopics")
    if isinstance(related, list):
        results.extend(_topic_results(related))

    if payload.get("AbstractURL") or payload.get("AbstractText"):
        results.insert(
            0,
            SearchResult(
                title=payload.get("Heading") or payload.get("AbstractText") or "Summary",
                url=payload.get("AbstractURL") or None,
                snippet=payload.get("AbstractText") or None,
            ),
        )

    return results[:limit]
