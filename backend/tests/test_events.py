from datetime import date, timedelta

import main
import models


def _event_payload(**overrides):
    payload = {
        "title": "Lagos Tech Fest",
        "description": "Talks and demos",
        "category": "career-business",
        "eventDate": (date.today() + timedelta(days=14)).isoformat(),
        "startTime": "10:00",
        "endTime": "17:00",
        "eventType": "physical",
        "venue": "Landmark Centre",
        "location": "Victoria Island, Lagos",
        "ticketType": "paid",
        "ticketPrice": 5000,
        "totalTickets": 100,
        "feeBearer": "buyer",
    }
    payload.update(overrides)
    return payload


def test_create_event(client, db, organizer, auth):
    resp = client.post("/api/events/create", json=_event_payload(), headers=auth(organizer))
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["event"]["slug"] == "lagos-tech-fest"

    event = db.get(models.Event, body["event"]["id"])
    assert event.organizer_id == organizer.id
    assert event.tickets_sold == 0
    assert event.ticket_price == 5000
    assert event.platform_fee_percent == 8
    assert event.fee_bearer == "buyer"


def test_create_event_requires_organizer(client, attendee, auth):
    resp = client.post("/api/events/create", json=_event_payload(), headers=auth(attendee))
    assert resp.status_code == 403


def test_create_event_requires_login(client):
    assert client.post("/api/events/create", json=_event_payload()).status_code == 401


def test_physical_event_needs_venue_and_location(client, organizer, auth):
    resp = client.post(
        "/api/events/create",
        json=_event_payload(location=""),
        headers=auth(organizer),
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Physical events must have a venue and location"


def test_paid_event_needs_positive_price(client, organizer, auth):
    resp = client.post(
        "/api/events/create",
        json=_event_payload(ticketPrice=0),
        headers=auth(organizer),
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Paid events must have a valid ticket price"


def test_missing_required_field(client, organizer, auth):
    payload = _event_payload()
    del payload["category"]
    resp = client.post("/api/events/create", json=payload, headers=auth(organizer))
    assert resp.status_code == 400


def test_virtual_free_event_drops_venue_and_price(client, db, organizer, auth):
    resp = client.post(
        "/api/events/create",
        json=_event_payload(eventType="virtual", ticketType="free", ticketPrice=2500),
        headers=auth(organizer),
    )
    assert resp.status_code == 201
    event = db.get(models.Event, resp.json()["event"]["id"])
    assert event.venue is None
    assert event.location is None
    assert event.ticket_price is None


def test_same_title_gets_distinct_slugs(client, organizer, auth):
    first = client.post("/api/events/create", json=_event_payload(), headers=auth(organizer))
    second = client.post("/api/events/create", json=_event_payload(), headers=auth(organizer))
    slug_1 = first.json()["event"]["slug"]
    slug_2 = second.json()["event"]["slug"]
    assert slug_1 == "lagos-tech-fest"
    assert slug_2.startswith("lagos-tech-fest-")
    assert slug_1 != slug_2


def test_slug_collision_in_same_millisecond(db, make_event, monkeypatch):
    monkeypatch.setattr(main.time, "time", lambda: 1700000000.0)
    make_event(slug="summer-jam")
    make_event(slug="summer-jam-1700000000000")

    slug = main._unique_slug(db, "Summer Jam!")
    assert slug.startswith("summer-jam-1700000000000-")
    assert not main._slug_taken(db, slug)


def test_slugify():
    assert main._slugify("  Art & Culture: Night #2 ") == "art-culture-night-2"
    assert main._slugify("!!!") == "event"


def test_get_event_by_slug_and_id(client, db, make_event, make_user, organizer):
    event = make_event(slug="jazz-night", total_tickets=5, tickets_sold=3)
    buyer = make_user()
    for code, status in (("A", "confirmed"), ("B", "confirmed"), ("C", "pending")):
        db.add(models.Ticket(
            event_id=event.id, user_id=buyer.id, ticket_code=f"TKT-{code}",
            payment_reference=f"TXN_{code}", status=status,
        ))
    db.commit()

    by_slug = client.get("/api/events/jazz-night")
    assert by_slug.status_code == 200
    body = by_slug.json()
    assert body["ticketsSold"] == 2
    assert body["ticketsAvailable"] == 3
    assert body["organizer"] == {
        "id": organizer.id,
        "name": organizer.name,
        "email": organizer.email,
        "paystackSplitCode": None,
    }

    by_id = client.get(f"/api/events/{event.id}")
    assert by_id.status_code == 200
    assert by_id.json()["slug"] == "jazz-night"


def test_get_event_not_found(client):
    assert client.get("/api/events/no-such-event").status_code == 404
    assert client.get("/api/events/999").status_code == 404


def test_public_listing_filters(client, make_event):
    today = date.today()
    make_event(title="Past", event_date=today - timedelta(days=3), category="sports-wellness")
    make_event(title="Soon", event_date=today + timedelta(days=3), category="community")
    make_event(title="Later", event_date=today + timedelta(days=30), category="community")

    everything = client.get("/api/events/public").json()
    assert [e["title"] for e in everything] == ["Past", "Soon", "Later"]
    assert everything[0]["organizerName"]

    upcoming = client.get("/api/events/public", params={"filter": "upcoming"}).json()
    assert [e["title"] for e in upcoming] == ["Soon", "Later"]

    past = client.get("/api/events/public", params={"filter": "past"}).json()
    assert [e["title"] for e in past] == ["Past"]

    community = client.get("/api/events/public", params={"category": "community"}).json()
    assert {e["title"] for e in community} == {"Soon", "Later"}

    assert client.get("/api/events/public", params={"filter": "someday"}).status_code == 400


def test_organizer_listing(client, make_event, make_user, organizer):
    other = make_user(account_type="organizer")
    make_event(title="Mine")
    make_event(title="Theirs", organizer_id=other.id)

    resp = client.get("/api/events", params={"organizerId": organizer.id})
    assert resp.status_code == 200
    assert [e["title"] for e in resp.json()] == ["Mine"]

    assert client.get("/api/events").status_code == 400
