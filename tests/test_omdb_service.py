"""OMDb response parsing and client tests."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from app.services.omdb_service import OMDbClient, parse_detail_response, parse_search_response
from app.utils.errors import ServiceUnavailableError, UpstreamServiceError

SEARCH_PAYLOAD = {
    "Response": "True",
    "totalResults": "3",
    "Search": [
        {
            "Title": "Alien",
            "Year": "1979",
            "imdbID": "tt0078748",
            "Type": "movie",
            "Poster": "https://img/alien.jpg",
        },
        {
            "Title": "Alien: Isolation",
            "Year": "2014",
            "imdbID": "tt2932536",
            "Type": "game",
            "Poster": "N/A",
        },
        {
            "Title": "Aliens",
            "Year": "1986",
            "imdbID": "tt0090605",
            "Type": "movie",
            "Poster": "N/A",
        },
    ],
}


def test_parse_search_filters_types_and_missing_posters() -> None:
    movies = parse_search_response(SEARCH_PAYLOAD)

    assert [movie.imdb_id for movie in movies] == ["tt0078748", "tt0090605"]
    assert movies[0].poster == "https://img/alien.jpg"
    assert movies[1].poster is None


def test_parse_search_not_found_is_empty() -> None:
    assert parse_search_response({"Response": "False", "Error": "Movie not found!"}) == []


def test_parse_search_invalid_key_raises() -> None:
    with pytest.raises(UpstreamServiceError):
        parse_search_response({"Response": "False", "Error": "Invalid API key!"})


def test_parse_detail() -> None:
    movie = parse_detail_response(
        {
            "Response": "True",
            "Title": "Heat",
            "Year": "1995",
            "imdbID": "tt0113277",
            "Poster": "N/A",
            "Plot": "A group of high-end professional thieves...",
        }
    )

    assert movie is not None
    assert movie.poster is None
    assert movie.plot.startswith("A group")
    assert parse_detail_response({"Response": "False", "Error": "Incorrect IMDb ID."}) is None


def test_parse_search_skips_results_without_id() -> None:
    payload = {
        "Response": "True",
        "Search": [
            {"Title": "Mystery", "Year": "2001", "Type": "movie", "Poster": "N/A"},
            {"Title": "Heat", "Year": "1995", "imdbID": "", "Type": "movie"},
            {"Title": "Alien", "Year": "1979", "imdbID": "tt0078748", "Type": "movie"},
        ],
    }

    assert [movie.imdb_id for movie in parse_search_response(payload)] == ["tt0078748"]


def test_parse_detail_without_id_raises() -> None:
    with pytest.raises(UpstreamServiceError):
        parse_detail_response({"Response": "True", "Title": "Heat", "Year": "1995"})


def run_client(handler, call):
    async def runner():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            client = OMDbClient(http, "secret", base_url="https://omdb.test/")
            return await call(client)

    return asyncio.run(runner())


def test_search_sends_movie_query() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(dict(request.url.params))
        return httpx.Response(200, json=SEARCH_PAYLOAD)

    movies = run_client(handler, lambda client: client.search("alien"))

    assert len(movies) == 2
    assert seen == [{"apikey": "secret", "s": "alien", "type": "movie"}]


def test_short_search_skips_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    assert run_client(handler, lambda client: client.search(" a ")) == []


def test_by_id_lookup() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["i"] == "tt0113277"
        return httpx.Response(
            200,
            json={
                "Response": "True",
                "Title": "Heat",
                "Year": "1995",
                "imdbID": "tt0113277",
                "Poster": "https://img/heat.jpg",
            },
        )

    movie = run_client(handler, lambda client: client.by_id("tt0113277"))

    assert movie is not None
    assert movie.title == "Heat"
    assert movie.poster == "https://img/heat.jpg"
    assert movie.plot is None


def test_transport_errors_become_upstream_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    with pytest.raises(UpstreamServiceError):
        run_client(handler, lambda client: client.search("alien"))


def test_missing_api_key() -> None:
    with pytest.raises(ServiceUnavailableError):
        OMDbClient(None, "")  # type: ignore[arg-type]


def test_non_object_payload_becomes_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"imdbID": "tt0078748"}])

    with pytest.raises(UpstreamServiceError):
        run_client(handler, lambda client: client.by_id("tt0078748"))
