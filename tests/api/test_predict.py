"""Tests for the /api/predict endpoint.

Each request runs a full cycle against a mocked upstream feed; the response
envelope is checked for its camelCase shape, the previous-result block, and
the failure responses for feed and data problems.
"""

from __future__ import annotations

import pytest

from drawcast.api.response_schemas import format_win_rate
from tests.factories import NEWEST_SEQUENCE, feed_payload, make_history, period_at, random_history

URL = "/api/predict"


class TestPredictSuccess:
    @pytest.mark.asyncio
    async def test_first_request_shape(self, client, httpx_mock):
        httpx_mock.add_response(json=feed_payload(random_history(seed=12)))

        resp = await client.get(URL)

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["previousResult"] is None
        assert body["responseTime"].endswith("ms")
        assert body["currentPeriod"]["period"] == period_at(0)
        assert set(body["currentPeriod"]) == {"period", "number", "result", "color"}

        prediction = body["prediction"]
        assert prediction["period"] == period_at(-1)
        assert prediction["prediction"] in ("BIG", "SMALL")
        assert 0 <= prediction["confidence"] <= 95
        assert prediction["agreementRatio"].endswith("%")
        assert prediction["algorithmsAgree"].endswith("/15")
        assert set(prediction["votes"]) == {"BIG", "SMALL"}

        top = prediction["topAlgorithms"]
        assert len(top) <= 5
        assert [a["confidence"] for a in top] == sorted(
            (a["confidence"] for a in top), reverse=True
        )

        assert body["statistics"] == {
            "totalPredictions": 0,
            "wins": 0,
            "losses": 0,
            "winRate": "0%",
            "currentWinStreak": 0,
            "bestWinStreak": 0,
        }
        assert len(body["recentHistory"]) == 10
        assert body["apiInfo"]["algorithms"] == 15
        assert body["apiInfo"]["version"] == "2.0.0"
        assert body["apiInfo"]["dataSource"] == "WinGo 1 Minute"

    @pytest.mark.asyncio
    async def test_no_cache_and_request_id_headers(self, client, httpx_mock):
        httpx_mock.add_response(json=feed_payload(random_history(seed=12)))

        resp = await client.get(URL, headers={"X-Request-ID": "abc123"})

        assert resp.headers["Cache-Control"] == "no-cache, no-store, must-revalidate"
        assert resp.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_post_is_accepted(self, client, httpx_mock):
        httpx_mock.add_response(json=feed_payload(random_history(seed=13)))

        resp = await client.post(URL)

        assert resp.status_code == 200
        assert resp.json()["success"] is True

    @pytest.mark.asyncio
    async def test_second_request_reports_previous_result(self, client, httpx_mock):
        older = random_history(seed=14)
        newer = make_history(
            [6, 8] + [d.number for d in older], newest_sequence=NEWEST_SEQUENCE + 2
        )
        httpx_mock.add_response(json=feed_payload(older))
        httpx_mock.add_response(json=feed_payload(newer))

        first = (await client.get(URL)).json()
        second = (await client.get(URL)).json()

        previous = second["previousResult"]
        assert previous["predictedPeriod"] == first["prediction"]["period"]
        assert previous["prediction"] == first["prediction"]["prediction"]
        assert previous["actualNumber"] == 8
        assert previous["actualResult"] == "BIG"
        won = first["prediction"]["prediction"] == "BIG"
        assert previous["status"] == ("WIN" if won else "LOSS")
        assert previous["message"] == (
            "Previous prediction WON!"
            if won
            else "Previous prediction was a LOSS. New prediction ready."
        )

        stats = second["statistics"]
        assert stats["totalPredictions"] == 1
        assert stats["winRate"] == ("100.00%" if won else "0.00%")
        assert second["prediction"]["period"] == period_at(-1, NEWEST_SEQUENCE + 2)

    @pytest.mark.asyncio
    async def test_repeated_request_on_same_draws_does_not_resolve(self, client, httpx_mock):
        payload = feed_payload(random_history(seed=15))
        httpx_mock.add_response(json=payload)
        httpx_mock.add_response(json=payload)

        await client.get(URL)
        body = (await client.get(URL)).json()

        assert body["previousResult"] is None
        assert body["statistics"]["totalPredictions"] == 0


class TestPredictOptions:
    @pytest.mark.asyncio
    async def test_bare_options_is_200(self, client, service):
        resp = await client.options(URL)

        assert resp.status_code == 200
        assert resp.headers["allow"] == "GET, POST, OPTIONS"
        assert service.state.pending is None  # no cycle was run

    @pytest.mark.asyncio
    async def test_cors_preflight(self, client):
        resp = await client.options(
            URL,
            headers={
                "Origin": "https://dashboard.example",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"
        assert "POST" in resp.headers["access-control-allow-methods"]

    @pytest.mark.asyncio
    async def test_cross_origin_get_carries_allow_origin(self, client, httpx_mock):
        httpx_mock.add_response(json=feed_payload(random_history(seed=16)))

        resp = await client.get(URL, headers={"Origin": "https://dashboard.example"})

        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"


class TestPredictFailures:
    @pytest.mark.asyncio
    async def test_insufficient_history_is_503(self, client, httpx_mock, service):
        httpx_mock.add_response(json=feed_payload(random_history(seed=1, length=12)))

        resp = await client.get(URL)

        assert resp.status_code == 503
        body = resp.json()
        assert body["success"] is False
        assert body["error"] == "InsufficientDataError"
        assert body["message"] == "Insufficient data for prediction"
        assert body["suggestion"] == "Please try again in a few seconds"
        assert "timestamp" in body
        assert service.state.pending is None

    @pytest.mark.asyncio
    async def test_upstream_http_error_is_502(self, client, httpx_mock):
        httpx_mock.add_response(status_code=500)

        resp = await client.get(URL)

        assert resp.status_code == 502
        body = resp.json()
        assert body["success"] is False
        assert body["error"] == "FetchError"
        assert body["message"] == "HTTP 500"

    @pytest.mark.asyncio
    async def test_upstream_bad_payload_is_502(self, client, httpx_mock):
        httpx_mock.add_response(json={"code": 1, "msg": "maintenance"})

        resp = await client.get(URL)

        assert resp.status_code == 502
        assert resp.json()["error"] == "ParseError"


class TestFormatWinRate:
    def test_zero_total(self):
        assert format_win_rate(0, 0) == "0%"

    def test_two_decimals(self):
        assert format_win_rate(13, 24) == "54.17%"
        assert format_win_rate(1, 1) == "100.00%"
