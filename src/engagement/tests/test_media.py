import pytest
from engagement.models import Photo, Review


@pytest.fixture
def photo(event):
    return Photo.objects.create(
        event=event, image_url="https://cdn.example.com/p/1.jpg", uploader_name="Asha"
    )


@pytest.mark.django_db
class TestPhotos:
    def test_upload_waits_for_approval(self, api_client, event):
        response = api_client.post(
            "/api/photos/",
            {
                "event": str(event.event_id),
                "image_url": "https://cdn.example.com/p/2.jpg",
                "uploader_name": "Ravi",
                "caption": "Front row",
            },
            format="json",
        )
        assert response.status_code == 201
        assert response.data["message"] == "Photo uploaded! It will appear after admin approval."
        assert api_client.get(f"/api/photos/?event={event.event_id}").data["photos"] == []

    def test_upload_missing_fields(self, api_client, event):
        response = api_client.post("/api/photos/", {"event": str(event.event_id)}, format="json")
        assert response.status_code == 400
        assert response.data["error"] == "Event ID, image URL, and uploader name are required"

    def test_list_requires_event(self, api_client, db):
        assert api_client.get("/api/photos/").status_code == 400

    def test_list_bad_event_id(self, api_client, db):
        assert api_client.get("/api/photos/?event=nope").status_code == 400

    def test_team_sees_pending(self, staff_client, event, photo):
        response = staff_client.get(f"/api/photos/?event={event.event_id}&all=true")
        assert [p["photo_id"] for p in response.data["photos"]] == [photo.photo_id]

    def test_approve(self, api_client, staff_client, event, photo):
        url = f"/api/photos/{photo.photo_id}/"
        assert api_client.patch(url, {"action": "approve"}, format="json").status_code == 401
        response = staff_client.patch(url, {"action": "approve"}, format="json")
        assert response.data["photo"]["is_approved"] is True
        assert len(api_client.get(f"/api/photos/?event={event.event_id}").data["photos"]) == 1

    def test_like(self, api_client, photo):
        url = f"/api/photos/{photo.photo_id}/"
        api_client.patch(url, {"action": "like"}, format="json")
        response = api_client.patch(url, {"action": "like"}, format="json")
        assert response.data == {"success": True, "likes": 2}

    def test_invalid_action(self, api_client, photo):
        response = api_client.patch(f"/api/photos/{photo.photo_id}/", {"action": "x"}, format="json")
        assert response.status_code == 400

    def test_delete_needs_staff(self, scanner_client, staff_client, photo):
        url = f"/api/photos/{photo.photo_id}/"
        assert scanner_client.delete(url).status_code == 403
        assert staff_client.delete(url).status_code == 204


@pytest.mark.django_db
class TestReviews:
    def test_create_and_list(self, api_client, event, make_event):
        other = make_event(name="Other")
        Review.objects.create(event=other, user_name="X", rating=2)
        response = api_client.post(
            "/api/reviews/",
            {"event": str(event.event_id), "user_name": "Asha", "rating": 5, "comment": "Great"},
            format="json",
        )
        assert response.status_code == 201
        listed = api_client.get(f"/api/reviews/?event={event.event_id}")
        assert [r["user_name"] for r in listed.data] == ["Asha"]

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_range(self, api_client, event, rating):
        response = api_client.post(
            "/api/reviews/",
            {"event": str(event.event_id), "user_name": "Asha", "rating": rating},
            format="json",
        )
        assert response.status_code == 400
        assert "rating" in response.data
