import httpx

from backend.neighborhoods.config import PipelineConfig
from backend.neighborhoods.forums import build_search_query, discover_forums, scrape_posts
from backend.providers.errors import ProviderError
from backend.providers.reddit import RedditClient, RedditPost, Subreddit
from fakes import FakeReddit, reddit_post


def _sub(name, subscribers=5000, over18=False, description=""):
    return Subreddit(display_name=name, subscribers=subscribers, over18=over18, public_description=description)


class TestDiscoverForums:
    def test_keeps_relevant_in_provider_order(self):
        reddit = FakeReddit(subreddits=[
            _sub("sanfrancisco"),
            _sub("bayarea", description="Ask anything about the Bay"),
            _sub("SFfood", description="Food pics"),
            _sub("AskSF", description="Questions about where to live"),
        ])
        assert discover_forums(reddit, "SanFrancisco") == ["sanfrancisco", "bayarea", "AskSF"]

    def test_rejects_small_and_adult(self):
        reddit = FakeReddit(subreddits=[
            _sub("austin", subscribers=100),
            _sub("austinnights", over18=True),
            _sub("austinhousing", subscribers=101),
        ])
        assert discover_forums(reddit, "Austin") == ["austinhousing"]

    def test_fallback_when_nothing_matches(self):
        reddit = FakeReddit(subreddits=[])
        assert discover_forums(reddit, "Springfield") == [
            "springfield",
            "springfieldhousing",
            "AskSpringfield",
            "springfieldneighborhoods",
        ]

    def test_ultimate_fallback_on_transport_error(self):
        reddit = FakeReddit(subreddits=httpx.ConnectTimeout("timed out"))
        assert discover_forums(reddit, "Springfield") == ["springfield", "AskSpringfield"]

    def test_ultimate_fallback_on_provider_error(self):
        reddit = FakeReddit(subreddits=ProviderError("reddit", "bad listing"))
        assert discover_forums(reddit, "Boise") == ["boise", "AskBoise"]


def test_build_search_query():
    assert build_search_query("quiet areas", ["a", "b"]) == "quiet areas subreddit:a OR subreddit:b"


class TestScrapePosts:
    def test_truncates_and_tags(self):
        reddit = FakeReddit(posts={"quiet": [reddit_post("Quiet spots?", "x" * 500, "sanfrancisco")]})
        result = scrape_posts(reddit, ["quiet"], forums=["sanfrancisco"])
        assert result.total == 1
        post = result.posts[0]
        assert len(post.body_excerpt) == 300
        assert post.source_forum == "sanfrancisco"
        assert reddit.post_queries == ["quiet subreddit:sanfrancisco"]

    def test_excerpt_length_follows_config(self):
        reddit = FakeReddit(posts={"quiet": [reddit_post("Quiet spots?", "x" * 800, "sanfrancisco")]})
        result = scrape_posts(reddit, ["quiet"], forums=["sanfrancisco"], config=PipelineConfig(excerpt_chars=500))
        assert len(result.posts[0].body_excerpt) == 500

    def test_skips_posts_without_title_or_body(self):
        reddit = FakeReddit(posts={"q": [
            reddit_post("", "body"),
            reddit_post("title", ""),
            RedditPost(title="ok", selftext=None, subreddit="x"),
            reddit_post("Kept", "body"),
        ]})
        result = scrape_posts(reddit, ["q"], forums=["x"])
        assert [p.title for p in result.posts] == ["Kept"]

    def test_failed_query_is_skipped(self):
        def search(query):
            if query.startswith("bad"):
                raise httpx.ReadTimeout("slow")
            return [reddit_post(query.split()[0], "body")]

        result = scrape_posts(FakeReddit(posts=search), ["first", "bad", "last"], forums=["x"])
        assert [p.title for p in result.posts] == ["first", "last"]

    def test_discovers_forums_from_city(self):
        reddit = FakeReddit(subreddits=[])
        result = scrape_posts(reddit, ["q"], city="Springfield")
        assert result.forums[0] == "springfield"
        assert reddit.subreddit_queries == ["Springfield"]

    def test_defaults_to_generic_forum(self):
        reddit = FakeReddit()
        result = scrape_posts(reddit, ["q"])
        assert result.forums == ["AskReddit"]
        assert reddit.post_queries == ["q subreddit:AskReddit"]
        assert reddit.subreddit_queries == []


def _blocked_reddit():
    transport = httpx.MockTransport(lambda r: httpx.Response(200, text="<html>blocked</html>"))
    return RedditClient(http=httpx.Client(base_url="https://www.reddit.com", transport=transport))


class TestBlockedReddit:
    def test_discovery_falls_back(self):
        assert discover_forums(_blocked_reddit(), "Springfield") == ["springfield", "AskSpringfield"]

    def test_scrape_skips_every_query(self):
        result = scrape_posts(_blocked_reddit(), ["a", "b"], forums=["x"])
        assert result.posts == []
        assert result.forums == ["x"]
