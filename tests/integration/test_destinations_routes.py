"""Integration tests for the destination catalog routes."""

from fastapi.testclient import TestClient


def test_list_destinations(api_client: TestClient) -> None:
    """Test listing destinations."""
    response = api_client.get("/destinations")

    assert response.status_code == 200
    data = response.json()
    assert [d["name"] for d in data] == ["Lisbon"]
    assert data[0]["best_time_to_visit"] == "March to May"
    assert data[0]["snowbird"]["visa_requirements"] == "90 days visa-free for Canadians"


def test_destination_detail(api_client: TestClient) -> None:
    """Test a destination with its itinerary, days and experiences."""
    response = api_client.get("/destinations/1")

    assert response.status_code == 200
    data = response.json()
    assert data["itinerary"]["title"] == "Lisbon in Three Days"
    assert [d["day_number"] for d in data["days"]] == [1, 2]
    assert [e["title"] for e in data["experiences"]] == ["Tram 28 Ride", "Sintra Day Trip"]


def test_unknown_destination(api_client: TestClient) -> None:
    """Test 404 for a missing destination."""
    response = api_client.get("/destinations/99")

    assert response.status_code == 404
    assert response.json() == {"detail": "Destination 99 not found"}
