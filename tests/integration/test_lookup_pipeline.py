"""Integration tests for the lookup pipeline against stubbed upstream services."""

import pytest

pytestmark = pytest.mark.integration


class TestLookupPipeline:
    @pytest.mark.asyncio
    async def test_paris_happy(self, app_client):
        """City + mood: everything available, French locale and French song."""
        resp = await app_client.get("/api/lookup", params={"city": "Paris", "mood": "happy"})

        assert resp.status_code == 200
        body = resp.json()
        assert "Paris" in body["displayName"]
        assert body["lat"] == pytest.approx(48.8588897)
        assert body["lon"] == pytest.approx(2.3200410)
        assert body["lang"] == "fr"
        assert body["locale"] == "fr-FR"
        assert body["timeZone"] == "Europe/Paris"
        assert body["weather"]["temperature_2m"] == 61.3
        assert body["airQuality"]["us_aqi"] == 42
        assert [item["title"] for item in body["news"]] == [f"Paris story {i}" for i in range(5)]
        assert [r["name"] for r in body["restaurants"]] == ["Le Procope", "Bouillon Chartier"]
        assert body["restaurants"][1]["cuisine"] is None
        assert body["song"]["title"] in {"Alors on danse", "Je veux"}

    @pytest.mark.asyncio
    async def test_regional_pool_across_repeated_calls(self, app_client):
        titles = set()
        for _ in range(15):
            resp = await app_client.get("/api/lookup", params={"city": "Paris", "mood": "happy"})
            titles.add(resp.json()["song"]["title"])
        assert titles <= {"Alors on danse", "Je veux"}

    @pytest.mark.asyncio
    async def test_news_is_localized(self, app_client, upstreams):
        await app_client.get("/api/lookup", params={"city": "Tokyo"})

        news_request = next(r for r in upstreams.requests if r.url.host == "news.google.com")
        assert news_request.url.params["hl"] == "ja"
        assert news_request.url.params["ceid"] == "JP:ja"

    @pytest.mark.asyncio
    async def test_user_agent_sent_to_geocoder(self, app_client, upstreams, integration_settings):
        await app_client.get("/api/lookup", params={"city": "Paris"})

        geo_request = next(
            r for r in upstreams.requests if r.url.host == "nominatim.openstreetmap.org"
        )
        assert geo_request.headers["User-Agent"] == integration_settings.user_agent

    @pytest.mark.asyncio
    async def test_country_without_regional_pool_uses_global(self, app_client):
        resp = await app_client.get("/api/lookup", params={"city": "Reykjavik", "mood": "sad"})

        body = resp.json()
        assert body["lang"] == "is"
        assert body["song"] is not None

    @pytest.mark.asyncio
    async def test_missing_country_code_defaults(self, app_client):
        resp = await app_client.get("/api/lookup", params={"city": "Bir Tawil"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["lang"] == "en"
        assert body["locale"] == "en-US"

    @pytest.mark.asyncio
    async def test_missing_city(self, app_client, upstreams):
        resp = await app_client.get("/api/lookup", params={"mood": "happy"})

        assert resp.status_code == 400
        assert resp.json() == {"error": "City is required."}
        assert upstreams.requests == []

    @pytest.mark.asyncio
    async def test_unknown_city(self, app_client, upstreams):
        resp = await app_client.get("/api/lookup", params={"city": "Atlantis"})

        assert resp.status_code == 404
        assert resp.json() == {"error": 'Could not find a city named "Atlantis".'}
        assert len(upstreams.requests) == 1

    @pytest.mark.asyncio
    async def test_geocoder_down(self, app_client, upstreams):
        upstreams.failing.add("nominatim.openstreetmap.org")

        resp = await app_client.get("/api/lookup", params={"city": "Paris"})

        assert resp.status_code == 502
        assert "error" in resp.json()


class TestPartialFailure:
    @pytest.mark.asyncio
    async def test_weather_500(self, app_client, upstreams):
        upstreams.failing.add("api.open-meteo.com")

        resp = await app_client.get("/api/lookup", params={"city": "Paris"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["weather"] is None
        assert len(body["news"]) == 5
        assert len(body["restaurants"]) == 2
        assert body["airQuality"] is not None
        assert body["timeZone"] == "Europe/Paris"

    @pytest.mark.asyncio
    async def test_all_optional_upstreams_down(self, app_client, upstreams):
        upstreams.failing.update(
            {
                "timeapi.io",
                "api.open-meteo.com",
                "air-quality-api.open-meteo.com",
                "news.google.com",
                "overpass-api.de",
            }
        )

        resp = await app_client.get("/api/lookup", params={"city": "Paris", "mood": "angry"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["timeZone"] is None
        assert body["weather"] is None
        assert body["airQuality"] is None
        assert body["news"] == []
        assert body["restaurants"] == []
        assert body["song"] is not None
        assert "Paris" in body["displayName"]

    @pytest.mark.asyncio
    async def test_time_service_required(self, app_client, upstreams, integration_settings):
        integration_settings.require_time_zone = True
        upstreams.failing.add("timeapi.io")

        resp = await app_client.get("/api/lookup", params={"city": "Paris"})

        assert resp.status_code == 502
        assert resp.json() == {"error": "Could not fetch time data."}


class TestMalformedPayloads:
    @pytest.mark.asyncio
    async def test_wrong_typed_time_zone(self, app_client, upstreams):
        upstreams.bodies["timeapi.io"] = {"timeZone": 3600}

        resp = await app_client.get("/api/lookup", params={"city": "Paris", "mood": "happy"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["timeZone"] is None
        assert body["weather"]["temperature_2m"] == 61.3
        assert body["airQuality"]["us_aqi"] == 42
        assert len(body["news"]) == 5
        assert len(body["restaurants"]) == 2
        assert body["song"] is not None

    @pytest.mark.asyncio
    async def test_wrong_typed_weather(self, app_client, upstreams):
        upstreams.bodies["api.open-meteo.com"] = {"current": "n/a"}

        resp = await app_client.get("/api/lookup", params={"city": "Paris"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["weather"] is None
        assert body["timeZone"] == "Europe/Paris"
        assert body["airQuality"]["us_aqi"] == 42
        assert len(body["news"]) == 5

    @pytest.mark.asyncio
    async def test_non_list_restaurant_elements(self, app_client, upstreams):
        upstreams.bodies["overpass-api.de"] = {"elements": {"oops": 1}}

        resp = await app_client.get("/api/lookup", params={"city": "Paris"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["restaurants"] == []
        assert body["timeZone"] == "Europe/Paris"
