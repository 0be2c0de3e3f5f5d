import httpx

from backend.neighborhoods.amenities import AmenityLocator, matches_brand, resolve_neighborhood
from backend.neighborhoods.models import AmenityType
from backend.providers.errors import ProviderError
from backend.providers.maps import AddressComponent, GeocodeResult, MapsClient, PlacesPage
from backend.providers.rate_limit import IntervalGate
from fakes import FAST_PROVIDER_CONFIG, FakeMaps, nearby


class PagedMaps(FakeMaps):
    """Serves numbered pages with a continuation token until ``pages`` runs out."""

    def __init__(self, pages: int, fail_on_page: int | None = None) -> None:
        super().__init__()
        self.pages = pages
        self.fail_on_page = fail_on_page

    def places_nearby(self, location, radius, place_type, keyword=None, page_token=None):
        index = int(page_token) if page_token else 0
        self.nearby_calls.append({"type": place_type, "keyword": keyword, "page_token": page_token})
        if index == self.fail_on_page:
            raise httpx.ReadTimeout("slow page")
        token = str(index + 1) if index + 1 < self.pages else None
        return PlacesPage(results=[nearby(f"{place_type} {index}", index, index)], next_page_token=token)


class TestBrandMatching:
    def test_token_substring(self):
        assert matches_brand("Crunch Fitness - Mission", "Crunch Fitness")
        assert matches_brand("24 Hour Fitness", "Crunch Fitness")

    def test_short_tokens_ignored(self):
        assert not matches_brand("LA Boxing", "LA Fitness")

    def test_sentinel_entries_excluded(self):
        assert not matches_brand("Google Crunch HQ", "Crunch")
        assert not matches_brand("Crunch Test Location", "Crunch")


class TestLocator:
    def _locator(self, maps):
        return AmenityLocator(maps, FAST_PROVIDER_CONFIG)

    def test_generic_follows_tokens_up_to_cap(self):
        maps = PagedMaps(pages=10)
        places = self._locator(maps).locate("Austin", AmenityType.gym)
        assert len(maps.nearby_calls) == 3
        assert [p.name for p in places] == ["gym 0", "gym 1", "gym 2"]
        assert all(p.type == AmenityType.gym for p in places)

    def test_generic_stops_without_token(self):
        maps = PagedMaps(pages=2)
        places = self._locator(maps).locate("Austin", AmenityType.park)
        assert len(maps.nearby_calls) == 2
        assert len(places) == 2

    def test_later_page_failure_keeps_earlier_pages(self):
        maps = PagedMaps(pages=3, fail_on_page=1)
        assert [p.name for p in self._locator(maps).locate("Austin", AmenityType.park)] == ["park 0"]

    def test_first_page_failure_yields_empty(self):
        maps = PagedMaps(pages=3, fail_on_page=0)
        assert self._locator(maps).locate("Austin", AmenityType.park) == []

    def test_display_path_single_page_with_limit(self):
        maps = FakeMaps(places={"gym": [nearby(f"Gym {i}", i, i) for i in range(20)]})
        places = self._locator(maps).locate("Austin", AmenityType.gym, limit=10, paginate=False)
        assert len(places) == 10
        assert len(maps.nearby_calls) == 1

    def test_brand_queries_filter_and_keep_brand_order(self):
        class BrandMaps(FakeMaps):
            def places_nearby(self, location, radius, place_type, keyword=None, page_token=None):
                self.nearby_calls.append({"keyword": keyword})
                return PlacesPage(results=[
                    nearby(f"{keyword} Downtown", 1, 1),
                    nearby("Generic Gym", 2, 2),
                ])

        maps = BrandMaps()
        places = self._locator(maps).locate("Austin", AmenityType.gym, ["Crunch Fitness", "Equinox"])
        assert sorted(c["keyword"] for c in maps.nearby_calls) == ["Crunch Fitness", "Equinox"]
        assert [p.name for p in places] == ["Crunch Fitness Downtown", "Equinox Downtown"]

    def test_failing_brand_does_not_stop_others(self):
        class FlakyMaps(FakeMaps):
            def places_nearby(self, location, radius, place_type, keyword=None, page_token=None):
                if keyword == "Crunch":
                    raise ProviderError("google_maps", "OVER_QUERY_LIMIT")
                return PlacesPage(results=[nearby(f"{keyword} East", 1, 1)])

        places = self._locator(FlakyMaps()).locate("Austin", AmenityType.gym, ["Crunch", "Equinox"])
        assert [p.name for p in places] == ["Equinox East"]

    def test_ungeocodable_city_yields_empty(self):
        maps = FakeMaps(center=None)
        assert self._locator(maps).locate("Atlantis", AmenityType.gym) == []
        assert maps.nearby_calls == []

    def test_places_calls_pass_through_gate(self):
        waits = []

        class CountingGate(IntervalGate):
            def wait(self):
                waits.append(1)

        maps = PagedMaps(pages=3)
        AmenityLocator(maps, FAST_PROVIDER_CONFIG, gate=CountingGate(0)).locate("Austin", AmenityType.gym)
        assert len(waits) == len(maps.nearby_calls) == 3


class TestIntervalGate:
    def test_spaces_calls(self):
        now = [0.0]
        sleeps = []

        def sleep(seconds):
            sleeps.append(round(seconds, 3))
            now[0] += seconds

        gate = IntervalGate(0.2, clock=lambda: now[0], sleep=sleep)
        gate.wait()
        gate.wait()
        now[0] += 0.5
        gate.wait()
        assert sleeps == [0.2]


class TestResolver:
    class ReverseMaps(FakeMaps):
        def __init__(self, results=None, error=None):
            super().__init__()
            self.results = results or []
            self.error = error

        def reverse_geocode(self, lat, lng):
            if self.error:
                raise self.error
            return self.results

    def _result(self, components, address="1 Main St, Austin, TX"):
        return GeocodeResult(
            formatted_address=address,
            address_components=[AddressComponent(long_name=n, types=t) for n, t in components],
        )

    def test_prefers_neighborhood(self):
        maps = self.ReverseMaps([self._result([("Austin", ["locality"]), ("Zilker", ["neighborhood", "political"])])])
        assert resolve_neighborhood(maps, 1, 1) == "Zilker"

    def test_then_locality(self):
        maps = self.ReverseMaps([self._result([("78704", ["postal_code"]), ("Austin", ["locality"])])])
        assert resolve_neighborhood(maps, 1, 1) == "Austin"

    def test_then_first_address_segment(self):
        maps = self.ReverseMaps([self._result([("78704", ["postal_code"])], address="Barton Springs, TX")])
        assert resolve_neighborhood(maps, 1, 1) == "Barton Springs"

    def test_no_results_is_none(self):
        assert resolve_neighborhood(self.ReverseMaps([]), 1, 1) is None

    def test_error_is_none(self):
        assert resolve_neighborhood(self.ReverseMaps(error=httpx.ConnectError("down")), 1, 1) is None


def test_html_places_body_yields_no_places():
    def handler(request):
        if request.url.path.endswith("/geocode/json"):
            return httpx.Response(200, json={
                "status": "OK",
                "results": [{"geometry": {"location": {"lat": 39.8, "lng": -89.6}}}],
            })
        return httpx.Response(200, text="<html>blocked</html>")

    http = httpx.Client(base_url="https://maps.googleapis.com/maps/api", transport=httpx.MockTransport(handler))
    maps = MapsClient(FAST_PROVIDER_CONFIG, http=http)
    locator = AmenityLocator(maps, FAST_PROVIDER_CONFIG)
    assert locator.locate("Springfield", AmenityType.gym) == []
    assert locator.locate("Springfield", AmenityType.gym, ["Crunch Fitness"]) == []
