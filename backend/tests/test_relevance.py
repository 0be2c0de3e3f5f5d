import json

from backend.neighborhoods.models import Post
from backend.neighborhoods.relevance import build_relevance_prompt, filter_relevant_posts
from fakes import RELEVANCE, FakeLLM

POSTS = [
    Post(title="Best quiet neighborhoods?", body_excerpt="Looking at Noe Valley", source_forum="sanfrancisco"),
    Post(title="Concert tonight", body_excerpt="Who's going?", source_forum="sanfrancisco"),
    Post(title="Moving to the Sunset", body_excerpt="Fog but peaceful", source_forum="AskSF"),
]


def test_empty_posts_skip_the_model():
    llm = FakeLLM()
    assert filter_relevant_posts(llm, [], "quiet") == []
    assert llm.prompts == []


def test_keeps_only_relevant():
    llm = FakeLLM({RELEVANCE: json.dumps([
        {"postIndex": 1, "isRelevant": True, "reason": "discusses neighborhoods"},
        {"postIndex": 2, "isRelevant": False, "reason": "event chatter"},
        {"postIndex": 3, "isRelevant": True, "reason": "living conditions"},
    ])})
    assert filter_relevant_posts(llm, POSTS, "quiet") == [POSTS[0], POSTS[2]]


def test_post_without_verdict_is_dropped():
    llm = FakeLLM({RELEVANCE: json.dumps([{"postIndex": 2, "isRelevant": True, "reason": "ok"}])})
    assert filter_relevant_posts(llm, POSTS, "quiet") == [POSTS[1]]


def test_unparsable_response_keeps_everything():
    llm = FakeLLM({RELEVANCE: "I think posts 1 and 3 are relevant."})
    result = filter_relevant_posts(llm, POSTS, "quiet")
    assert result == POSTS
    assert result is not POSTS


def test_unavailable_model_keeps_everything():
    assert filter_relevant_posts(FakeLLM(), POSTS, "quiet") == POSTS


def test_fenced_response_is_parsed():
    llm = FakeLLM({RELEVANCE: "```json\n[{\"postIndex\": 3, \"isRelevant\": true, \"reason\": \"x\"}]\n```"})
    assert filter_relevant_posts(llm, POSTS, "quiet") == [POSTS[2]]


def test_prompt_numbers_posts_from_one():
    prompt = build_relevance_prompt(POSTS, "quiet area")
    assert 'preferences: "quiet area"' in prompt
    assert "POST 1: Title: Best quiet neighborhoods?" in prompt
    assert "POST 3: Title: Moving to the Sunset" in prompt
    assert "Subreddit: r/AskSF" in prompt
