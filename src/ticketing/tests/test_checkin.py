import pytest
from base.models import TeamRole


@pytest.mark.django_db
class TestCheckIn:
    def test_requires_login(self, api_client, event, make_ticket):
        ticket = make_ticket(event, paid=True)
        response = api_client.post("/api/checkin/", {"ticket_id": str(ticket.ticket_id)}, format="json")
        assert response.status_code == 401

    def test_scanner_checks_in_by_token(self, scanner_client, event, make_ticket):
        ticket = make_ticket(event, paid=True)
        response = scanner_client.post("/api/checkin/", {"token": ticket.token}, format="json")
        assert response.status_code == 200
        assert response.data["action"] == "checked_in"
        assert response.data["message"] == "Asha Rao checked in successfully!"
        ticket.refresh_from_db()
        assert ticket.checked_in
        assert ticket.checked_in_at is not None

    def test_undo(self, staff_client, event, make_ticket):
        ticket = make_ticket(event, paid=True)
        ticket.check_in()
        response = staff_client.post(
            "/api/checkin/", {"ticket_id": str(ticket.ticket_id), "action": "undo"}, format="json"
        )
        assert response.data["checked_in"] is False
        assert response.data["action"] == "unchecked"
        ticket.refresh_from_db()
        assert ticket.checked_in_at is None

    def test_unpaid_ticket(self, staff_client, event, make_ticket):
        ticket = make_ticket(event)
        response = staff_client.post("/api/checkin/", {"ticket_id": str(ticket.ticket_id)}, format="json")
        assert response.status_code == 400
        assert response.data["error"] == "Ticket not paid"

    def test_unknown_token(self, staff_client):
        response = staff_client.post("/api/checkin/", {"token": "missing"}, format="json")
        assert response.status_code == 404

    def test_malformed_ticket_id(self, staff_client):
        response = staff_client.post("/api/checkin/", {"ticket_id": "abc"}, format="json")
        assert response.status_code == 404
        assert response.data["error"] == "Ticket not found"

    def test_needs_ticket_or_token(self, staff_client):
        response = staff_client.post("/api/checkin/", {}, format="json")
        assert response.status_code == 400
        assert response.data["error"] == "Ticket ID or token is required"

    def test_invalid_action(self, staff_client, event, make_ticket):
        ticket = make_ticket(event, paid=True)
        response = staff_client.post(
            "/api/checkin/", {"ticket_id": str(ticket.ticket_id), "action": "dance"}, format="json"
        )
        assert response.status_code == 400

    def test_scoped_member_other_event(self, member_client, make_event, make_ticket):
        mine, other = make_event(name="Mine"), make_event(name="Other")
        ticket = make_ticket(other, paid=True)
        client = member_client(TeamRole.SCANNER, event_ids=[str(mine.event_id)])
        response = client.post("/api/checkin/", {"ticket_id": str(ticket.ticket_id)}, format="json")
        assert response.status_code == 403
        ticket.refresh_from_db()
        assert not ticket.checked_in


@pytest.mark.django_db
class TestVerify:
    def test_valid_token(self, scanner_client, event, make_ticket):
        ticket = make_ticket(event, paid=True)
        response = scanner_client.get(f"/api/checkin/verify/?token={ticket.token}")
        assert response.status_code == 200
        assert response.data["valid"] is True
        assert response.data["event_name"] == "Tech Summit"
        assert response.data["checked_in"] is False

    def test_stale_token_after_transfer(self, scanner_client, event, make_ticket):
        ticket = make_ticket(event, paid=True)
        old_token = ticket.token
        ticket.transfer("Ravi", "ravi@example.com")
        response = scanner_client.get(f"/api/checkin/verify/?token={old_token}")
        assert response.status_code == 404
        assert response.data["valid"] is False

    def test_pending_ticket_by_id(self, scanner_client, event, make_ticket):
        ticket = make_ticket(event)
        response = scanner_client.get(f"/api/checkin/verify/?ticket_id={ticket.ticket_id}")
        assert response.data["valid"] is False
        assert response.data["status"] == "pending"

    def test_malformed_ticket_id(self, scanner_client):
        response = scanner_client.get("/api/checkin/verify/?ticket_id=abc")
        assert response.status_code == 404
        assert response.data["valid"] is False

    def test_missing_params(self, scanner_client):
        response = scanner_client.get("/api/checkin/verify/")
        assert response.status_code == 400

    def test_scoped_member(self, member_client, make_event, make_ticket):
        mine, other = make_event(name="Mine"), make_event(name="Other")
        ticket = make_ticket(other, paid=True)
        client = member_client(TeamRole.STAFF, event_ids=[str(mine.event_id)])
        response = client.get(f"/api/checkin/verify/?token={ticket.token}")
        assert response.status_code == 403
        assert response.data["valid"] is False


@pytest.mark.django_db
class TestBulkCheckIn:
    def test_summary(self, staff_client, event, make_ticket):
        paid = make_ticket(event, paid=True)
        already = make_ticket(event, paid=True, name="Ravi")
        already.check_in()
        pending = make_ticket(event, name="Meera")
        response = staff_client.post(
            "/api/checkin/bulk/",
            {
                "ticket_ids": [
                    str(paid.ticket_id),
                    str(already.ticket_id),
                    str(pending.ticket_id),
                    "not-a-ticket",
                ]
            },
            format="json",
        )
        assert response.status_code == 200
        assert response.data["summary"] == {"total": 4, "successful": 1, "failed": 3}
        errors = [result.get("error") for result in response.data["results"]]
        assert errors == [None, "Already checked in", "Ticket not paid", "Ticket not found"]
        paid.refresh_from_db()
        assert paid.checked_in

    def test_scoped_member(self, member_client, make_event, make_ticket):
        mine, other = make_event(name="Mine"), make_event(name="Other")
        allowed = make_ticket(mine, paid=True)
        blocked = make_ticket(other, paid=True)
        client = member_client(TeamRole.SCANNER, event_ids=[str(mine.event_id)])
        response = client.post(
            "/api/checkin/bulk/",
            {"ticket_ids": [str(allowed.ticket_id), str(blocked.ticket_id)]},
            format="json",
        )
        assert response.data["summary"]["successful"] == 1
        assert response.data["results"][1]["error"] == "No access to this event"

    def test_requires_list(self, staff_client):
        response = staff_client.post("/api/checkin/bulk/", {"ticket_ids": []}, format="json")
        assert response.status_code == 400
        assert response.data["error"] == "Ticket IDs array is required"
