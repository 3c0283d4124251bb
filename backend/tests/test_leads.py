"""
Tests for public enquiry and requirement submission.
"""
from faker import Faker

fake = Faker()


def test_submit_enquiry(client, repository, clock):
    payload = {
        "full_name": fake.name(),
        "email": "lead@example.com",
        "phone": "9876543210",
        "company": fake.company(),
        "seats": "6-10",
        "workspace_type": "Private Office",
    }
    response = client.post("/enquiries", json=payload)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True

    stored = repository.tables["enquiries"][0]
    assert stored["id"] == body["id"]
    assert stored["status"] == "pending"
    assert stored["created_at"] == clock.now
    assert stored["company"] == payload["company"]
    assert stored["city"] is None


def test_submit_requirement(client, repository):
    response = client.post("/requirements", json={
        "name": fake.name(),
        "email": "needs@example.com",
        "phone": "9123456780",
        "city": "Bengaluru",
        "message": "Need 20 seats near the metro",
    })
    assert response.status_code == 201
    assert repository.tables["requirements"][0]["city"] == "Bengaluru"


def test_enquiry_with_invalid_email(client, repository):
    response = client.post("/enquiries", json={"full_name": "X", "email": "nope", "phone": "9876543210"})
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid request"
    assert any("email" in detail["loc"] for detail in body["details"])
    assert repository.tables.get("enquiries", []) == []


def test_requirement_missing_city(client):
    response = client.post("/requirements", json={"name": "Y", "email": "y@example.com", "phone": "9876543210"})
    assert response.status_code == 400
