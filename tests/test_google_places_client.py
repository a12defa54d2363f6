from unittest.mock import MagicMock

import requests

from tipi.google_places_client import (
    DIRECTIONS_URL,
    TEXT_SEARCH_URL,
    GooglePlacesClient,
    maps_link,
    photo_url,
)


def _session(*payloads):
    """Session whose successive GETs return the given JSON payloads."""
    session = MagicMock()
    responses = []
    for payload in payloads:
        res = MagicMock()
        res.json.return_value = payload
        res.raise_for_status.return_value = None
        responses.append(res)
    session.get.side_effect = responses
    return session


SEARCH_OK = {
    "status": "OK",
    "results": [
        {
            "place_id": "p1",
            "name": "Museu Nacional do Azulejo",
            "formatted_address": "R. Me. Deus 4, Lisboa",
            "rating": 4.6,
            "user_ratings_total": 13000,
            "photos": [{"photo_reference": "ref1"}],
            "geometry": {"location": {"lat": 38.72, "lng": -9.11}},
            "types": ["museum", "point_of_interest"],
        },
        {"name": "no id, skipped"},
    ],
}


def test_text_search_parses_results():
    session = _session(SEARCH_OK)
    client = GooglePlacesClient(api_key="k", session=session, timeout_s=5)
    places = client.text_search("tile museum in Lisbon")

    assert [p.place_id for p in places] == ["p1"]
    place = places[0]
    assert place.review_count == 13000
    assert place.photo_reference == "ref1"
    assert (place.lat, place.lng) == (38.72, -9.11)
    args, kwargs = session.get.call_args
    assert args[0] == TEXT_SEARCH_URL
    assert kwargs["params"] == {"query": "tile museum in Lisbon", "key": "k"}
    assert kwargs["timeout"] == 5


def test_zero_results_and_error_statuses_mean_no_data():
    client = GooglePlacesClient(api_key="k", session=_session(
        {"status": "ZERO_RESULTS", "results": []},
        {"status": "OVER_QUERY_LIMIT", "error_message": "slow down"},
    ))
    assert client.text_search("nothing") == []
    assert client.text_search("too much") == []


def test_network_failure_means_no_data():
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("offline")
    client = GooglePlacesClient(api_key="k", session=session)
    assert client.text_search("x") == []
    assert client.details("p1") is None
    assert client.route((0, 0), (1, 1)) is None


def test_http_error_means_no_data():
    res = MagicMock()
    res.raise_for_status.side_effect = requests.HTTPError("503")
    session = MagicMock()
    session.get.return_value = res
    assert GooglePlacesClient(api_key="k", session=session).details("p1") is None


def test_non_object_body_means_no_data():
    client = GooglePlacesClient(api_key="k", session=_session(
        ["not", "an", "object"], "OK", None,
    ))
    assert client.text_search("x") == []
    assert client.details("p1") is None
    assert client.route((0, 0), (1, 1)) is None
    assert client._session.get.call_count == 3


def test_missing_key_makes_no_requests():
    session = MagicMock()
    client = GooglePlacesClient(api_key="", session=session)
    assert not client.enabled
    assert client.text_search("x") == []
    assert client.details("p") is None
    assert client.route((0, 0), (1, 1)) is None
    session.get.assert_not_called()


def test_details_parses_contact_and_hours():
    client = GooglePlacesClient(api_key="k", session=_session({
        "status": "OK",
        "result": {
            "name": "Museu",
            "website": "https://museu.pt",
            "international_phone_number": "+351 21 810 0340",
            "opening_hours": {"weekday_text": ["Monday: Closed", "Tuesday: 10:00 AM – 6:00 PM"]},
            "url": "https://maps.google.com/?cid=1",
        },
    }))
    place = client.details("p1")
    assert place.place_id == "p1"
    assert place.website == "https://museu.pt"
    assert place.phone.startswith("+351")
    assert place.opening_hours[0] == "Monday: Closed"
    assert place.maps_url == "https://maps.google.com/?cid=1"


def test_route_reads_first_leg():
    session = _session({
        "status": "OK",
        "routes": [{"legs": [{"duration": {"text": "12 mins", "value": 720},
                              "distance": {"text": "0.9 km", "value": 900}}]}],
    })
    leg = GooglePlacesClient(api_key="k", session=session).route((38.7, -9.1), (38.71, -9.12), "walking")
    assert (leg.duration_text, leg.distance_text, leg.duration_s, leg.distance_m) == ("12 mins", "0.9 km", 720, 900)
    args, kwargs = session.get.call_args
    assert args[0] == DIRECTIONS_URL
    assert kwargs["params"]["origin"] == "38.7,-9.1"
    assert kwargs["params"]["mode"] == "walking"


def test_route_without_routes_is_none():
    client = GooglePlacesClient(api_key="k", session=_session({"status": "OK", "routes": []}))
    assert client.route((0, 0), (1, 1)) is None


def test_photo_and_maps_links():
    assert photo_url(None, api_key="k") == ""
    url = photo_url("abc", api_key="k")
    assert "photo_reference=abc" in url and url.endswith("&key=k")
    assert maps_link("Time Out Market", "Av. 24 de Julho") == (
        "https://www.google.com/maps/search/?api=1&query=Time+Out+Market+Av.+24+de+Julho"
    )
