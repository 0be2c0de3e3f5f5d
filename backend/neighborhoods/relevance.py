from __future__ import annotations

import logging

from pydantic import ValidationError

from ..llm.groq_client import LLMClient
from ..llm.parsing import ParseFailure, parse_json_list
from .config import DEFAULT_PIPELINE_CONFIG, PipelineConfig
from .models import Post, RelevanceVerdict

logger = logging.getLogger(__name__)

RELEVANCE_PROMPT = """\
Given these user preferences: "{preferences}"

Analyze EACH of these Reddit posts. For each post, answer:
1. Is this post relevant to finding neighborhoods based on the preferences?
2. Does it discuss the city's neighborhoods, living conditions, or specific areas?

Posts to analyze:
{posts}

Return as JSON array with one object per post:
[
  {{ "postIndex": 1, "isRelevant": true, "reason": "brief reason" }},
  ...
]"""


def build_relevance_prompt(posts: list[Post], preferences: str) -> str:
    rendered = "\n\n---\n\n".join(f"POST {i}: {post.render()}" for i, post in enumerate(posts, start=1))
    return RELEVANCE_PROMPT.format(preferences=preferences, posts=rendered)


def _parse_verdicts(items: list) -> dict[int, RelevanceVerdict]:
    verdicts: dict[int, RelevanceVerdict] = {}
    for item in items:
        try:
            verdict = RelevanceVerdict.model_validate(item)
        except ValidationError:
            continue
        # First verdict for an index wins
        verdicts.setdefault(verdict.post_index, verdict)
    return verdicts


def filter_relevant_posts(
    llm: LLMClient,
    posts: list[Post],
    preferences: str,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> list[Post]:
    """Keep the posts the model labels relevant.

    An unparsable answer keeps every post (fail open). A post without a
    verdict is dropped.
    """
    if not posts:
        return []

    text = llm.complete(
        build_relevance_prompt(posts, preferences),
        temperature=config.temperatures["relevance"],
    )
    parsed = parse_json_list(text)
    if isinstance(parsed, ParseFailure):
        logger.warning("Could not parse relevance response (%s), keeping all %d posts", parsed.reason, len(posts))
        return list(posts)

    verdicts = _parse_verdicts(parsed)
    kept: list[Post] = []
    for index, post in enumerate(posts, start=1):
        verdict = verdicts.get(index)
        if verdict and verdict.is_relevant:
            logger.debug("Post %d relevant: %s", index, verdict.reason)
            kept.append(post)
        else:
            logger.debug("Post %d skipped: %s", index, verdict.reason if verdict else "no verdict")

    logger.info("Kept %d/%d relevant posts", len(kept), len(posts))
    return kept
