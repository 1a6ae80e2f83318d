"""
Photo lifecycle tests: upload, list/filter, update, delete, bulk delete
"""
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from app.config import settings
from app.core.exceptions import InvalidInput, NotFound, RecordWriteFailed, StorageWriteFailed
from app.models.album import Album, AlbumPhoto
from app.models.photo import Photo
from app.services import ai_service, photo_service
from tests.conftest import PNG_BYTES, auth_headers


# ====================
# Upload
# ====================


class TestUpload:

    def test_upload_with_explicit_caption_and_tags(self, upload, headers, user, blob_store):
        photo = upload(headers, caption="Bridal full hand", tags="bridal, full-hand, bridal, ", photo_date="2024-03-15")

        assert photo["caption"] == "Bridal full hand"
        assert photo["tags"] == ["bridal", "full-hand"]
        assert photo["user_id"] == user.id
        assert photo["folder"] == f"{settings.storage_root}/{user.id}/2024-03"
        assert photo["public_id"].startswith(photo["folder"] + "/")
        assert photo["url"] == f"/uploads/{photo['public_id']}"
        assert photo["photo_date"].startswith("2024-03-15")
        assert blob_store.exists(photo["public_id"])

    def test_upload_defaults_photo_date_to_now(self, upload, headers, user):
        photo = upload(headers)

        now = datetime.now(timezone.utc)
        assert photo["folder"] == f"{settings.storage_root}/{user.id}/{now:%Y-%m}"
        assert photo["caption"] == ""
        assert photo["tags"] == []

    def test_ai_failure_falls_back_to_default_caption_and_tags(self, upload, headers, monkeypatch):
        monkeypatch.setattr(settings, "openai_api_key", "sk-test")

        def fail(base64_image, mime_type):
            raise ConnectionError("generator unreachable")

        monkeypatch.setattr(ai_service, "request_caption", fail)

        photo = upload(headers, auto_caption=True, auto_tags=True)

        assert photo["caption"] == "Beautiful mehndi design"
        assert photo["tags"] == ["mehndi", "design"]

    def test_auto_caption_uses_uploaded_bytes_on_local_storage(self, upload, headers, monkeypatch):
        monkeypatch.setattr(settings, "openai_api_key", "sk-test")
        fetch = MagicMock()
        model = MagicMock(return_value='{"caption": "Peacock", "tags": ["peacock"]}')
        monkeypatch.setattr(ai_service, "fetch_image_as_base64", fetch)
        monkeypatch.setattr(ai_service, "request_caption", model)

        photo = upload(headers, auto_caption=True, auto_tags=True)

        assert photo["url"].startswith("/uploads/")
        assert photo["caption"] == "Peacock"
        assert photo["tags"] == ["peacock"]
        fetch.assert_not_called()
        model.assert_called_once_with(ai_service.encode_image(PNG_BYTES), "image/png")

    def test_auto_caption_keeps_explicit_tags(self, upload, headers, monkeypatch):
        generator = MagicMock(return_value={"caption": "Peacock feathers", "tags": ["peacock"]})
        monkeypatch.setattr(photo_service, "generate_caption_and_tags", generator)

        photo = upload(headers, tags="mine", auto_caption=True)

        assert photo["caption"] == "Peacock feathers"
        assert photo["tags"] == ["mine"]
        generator.assert_called_once_with(photo["url"], content=PNG_BYTES)

    def test_generator_not_called_without_flags(self, upload, headers, monkeypatch):
        generator = MagicMock()
        monkeypatch.setattr(photo_service, "generate_caption_and_tags", generator)

        upload(headers, caption="hand-written")

        generator.assert_not_called()

    def test_missing_file_is_rejected(self, client, headers):
        response = client.post("/api/v1/photos/upload", headers=headers, data={"caption": "x"})
        assert response.status_code == 400

    def test_empty_file_is_rejected(self, client, headers):
        response = client.post(
            "/api/v1/photos/upload",
            headers=headers,
            files={"file": ("empty.png", b"", "image/png")},
        )
        assert response.status_code == 400

    def test_disallowed_extension_is_rejected(self, client, headers):
        response = client.post(
            "/api/v1/photos/upload",
            headers=headers,
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400

    def test_requires_authentication(self, client):
        response = client.post(
            "/api/v1/photos/upload",
            files={"file": ("design.png", PNG_BYTES, "image/png")},
        )
        assert response.status_code == 401

    def test_storage_failure_creates_no_record(self, db, user, blob_store):
        blob_store.fail_upload = True

        with pytest.raises(StorageWriteFailed):
            photo_service.upload_photo(db, blob_store, user, PNG_BYTES, "design.png")

        assert db.query(Photo).count() == 0

    def test_storage_failure_over_http(self, client, headers, blob_store):
        blob_store.fail_upload = True
        response = client.post(
            "/api/v1/photos/upload",
            headers=headers,
            files={"file": ("design.png", PNG_BYTES, "image/png")},
        )
        assert response.status_code == 502

    def test_record_failure_leaves_blob(self, db, user, blob_store, monkeypatch):
        def broken_commit(session):
            session.rollback()
            raise RecordWriteFailed()

        monkeypatch.setattr(photo_service, "commit", broken_commit)

        with pytest.raises(RecordWriteFailed):
            photo_service.upload_photo(db, blob_store, user, PNG_BYTES, "design.png")

        assert db.query(Photo).count() == 0
        stored = list(Path(blob_store.base_dir).rglob("*.png"))
        assert len(stored) == 1

    def test_service_rejects_empty_content(self, db, user, blob_store):
        with pytest.raises(InvalidInput):
            photo_service.upload_photo(db, blob_store, user, b"", "design.png")


# ====================
# List / filter
# ====================


class TestList:

    def test_only_own_photos(self, client, upload, headers, other_user):
        upload(headers, caption="mine")
        upload(auth_headers(other_user), caption="theirs")

        body = client.get("/api/v1/photos/", headers=headers).json()

        assert [p["caption"] for p in body["photos"]] == ["mine"]
        assert body["pagination"]["total"] == 1

    def test_single_day_filter_includes_whole_day(self, client, upload, headers):
        upload(headers, caption="march 15", photo_date="2024-03-15")
        upload(headers, caption="march 16", photo_date="2024-03-16")

        included = client.get(
            "/api/v1/photos/", headers=headers,
            params={"from_date": "2024-03-15", "to_date": "2024-03-15"},
        ).json()
        excluded = client.get(
            "/api/v1/photos/", headers=headers,
            params={"from_date": "2024-03-15", "to_date": "2024-03-14"},
        ).json()

        assert [p["caption"] for p in included["photos"]] == ["march 15"]
        assert excluded["photos"] == []

    def test_late_in_day_photo_included(self, db, user, blob_store):
        photo_service.upload_photo(
            db, blob_store, user, PNG_BYTES, "late.png",
            photo_date=datetime(2024, 3, 15, 23, 30, tzinfo=timezone.utc),
        )

        photos, total = photo_service.list_photos(
            db, user,
            from_date=datetime(2024, 3, 15).date(),
            to_date=datetime(2024, 3, 15).date(),
        )

        assert total == 1

    def test_search_matches_caption_or_tag_case_insensitive(self, client, upload, headers):
        upload(headers, caption="Bridal Peacock", tags="traditional")
        upload(headers, caption="Simple", tags="ARABIC, minimal")
        upload(headers, caption="Dots", tags="kids")

        by_caption = client.get("/api/v1/photos/", headers=headers, params={"search": "peacock"}).json()
        by_tag = client.get("/api/v1/photos/", headers=headers, params={"search": "arab"}).json()

        assert [p["caption"] for p in by_caption["photos"]] == ["Bridal Peacock"]
        assert [p["caption"] for p in by_tag["photos"]] == ["Simple"]

    @pytest.mark.parametrize("term", ['"', "[", '", "', "_", "%", 'bridal", "arabic', "\\"])
    def test_search_does_not_match_json_text_or_wildcards(self, db, user, blob_store, term):
        photo_service.upload_photo(db, blob_store, user, PNG_BYTES, "a.png", caption="Simple", tags=["bridal", "arabic"])

        photos, total = photo_service.list_photos(db, user, search=term)

        assert total == 0
        assert photos == []

    def test_search_matches_single_tag_substring(self, db, user, blob_store):
        photo_service.upload_photo(db, blob_store, user, PNG_BYTES, "a.png", caption="Simple", tags=["bridal", "arabic"])
        photo_service.upload_photo(db, blob_store, user, PNG_BYTES, "b.png", caption="Dots", tags=["kids"])

        _, by_tag = photo_service.list_photos(db, user, search="RIDA")
        _, across_tags = photo_service.list_photos(db, user, search="bridalarabic")

        assert by_tag == 1
        assert across_tags == 0

    def test_search_treats_wildcards_literally(self, db, user, blob_store):
        photo_service.upload_photo(db, blob_store, user, PNG_BYTES, "a.png", caption="100% henna", tags=["full_hand"])
        photo_service.upload_photo(db, blob_store, user, PNG_BYTES, "b.png", caption="Simple", tags=["fullhand"])

        _, percent = photo_service.list_photos(db, user, search="100%")
        by_underscore, underscore = photo_service.list_photos(db, user, search="l_h")

        assert percent == 1
        assert underscore == 1
        assert by_underscore[0].tags == ["full_hand"]

    def test_sorted_by_photo_date_then_upload_time(self, client, upload, headers):
        upload(headers, caption="old", photo_date="2023-01-01")
        upload(headers, caption="new-first", photo_date="2024-05-01")
        upload(headers, caption="new-second", photo_date="2024-05-01")

        body = client.get("/api/v1/photos/", headers=headers).json()

        assert [p["caption"] for p in body["photos"]] == ["new-second", "new-first", "old"]

    def test_pagination(self, client, upload, headers):
        for day in range(1, 6):
            upload(headers, caption=f"day {day}", photo_date=f"2024-01-0{day}")

        body = client.get("/api/v1/photos/", headers=headers, params={"page": 2, "limit": 2}).json()

        assert [p["caption"] for p in body["photos"]] == ["day 3", "day 2"]
        assert body["pagination"] == {"page": 2, "limit": 2, "total": 5, "pages": 3}

    def test_service_rejects_bad_page(self, db, user):
        with pytest.raises(InvalidInput):
            photo_service.list_photos(db, user, page=0)


# ====================
# Update
# ====================


class TestUpdate:

    def test_partial_update(self, client, upload, headers):
        photo = upload(headers, caption="before", tags="a, b", photo_date="2024-02-02")

        response = client.put(f"/api/v1/photos/{photo['id']}", headers=headers, json={"tags": ["c", "c", " d "]})

        assert response.status_code == 200
        body = response.json()
        assert body["caption"] == "before"
        assert body["tags"] == ["c", "d"]
        assert body["url"] == photo["url"]
        assert body["photo_date"] == photo["photo_date"]

    def test_cannot_update_others_photo(self, client, upload, headers, other_user):
        photo = upload(auth_headers(other_user), caption="theirs")

        response = client.put(f"/api/v1/photos/{photo['id']}", headers=headers, json={"caption": "hijack"})

        assert response.status_code == 404


# ====================
# Delete
# ====================


class TestDelete:

    def test_delete_removes_blob_record_and_membership(self, client, upload, headers, user, db, blob_store):
        photo = upload(headers)
        album = client.post("/api/v1/albums/", headers=headers, json={"name": "Wedding"}).json()
        client.post(f"/api/v1/albums/{album['id']}/photos", headers=headers, json={"photo_id": photo["id"]})

        response = client.delete(f"/api/v1/photos/{photo['id']}", headers=headers)

        assert response.status_code == 204
        assert not blob_store.exists(photo["public_id"])
        assert db.query(Photo).count() == 0
        assert db.query(AlbumPhoto).count() == 0
        assert db.query(Album).count() == 1

    def test_not_owned_is_reported_as_not_found(self, client, upload, headers, other_user, blob_store):
        photo = upload(auth_headers(other_user))

        not_owned = client.delete(f"/api/v1/photos/{photo['id']}", headers=headers)
        missing = client.delete("/api/v1/photos/does-not-exist", headers=headers)

        assert not_owned.status_code == missing.status_code == 404
        assert not_owned.json() == missing.json()
        assert blob_store.exists(photo["public_id"])

    def test_blob_failure_keeps_record(self, client, upload, headers, db, blob_store):
        photo = upload(headers)
        blob_store.fail_destroy_ids.add(photo["public_id"])

        response = client.delete(f"/api/v1/photos/{photo['id']}", headers=headers)

        assert response.status_code == 502
        assert db.query(Photo).filter(Photo.id == photo["id"]).count() == 1

        blob_store.fail_destroy_ids.clear()
        retry = client.delete(f"/api/v1/photos/{photo['id']}", headers=headers)
        assert retry.status_code == 204

    def test_service_not_found(self, db, user, blob_store):
        with pytest.raises(NotFound):
            photo_service.delete_photo(db, blob_store, user, "missing")


class TestBulkDelete:

    def test_partial_success_with_foreign_photo(self, client, upload, headers, other_user, db, blob_store):
        mine = [upload(headers) for _ in range(2)]
        theirs = upload(auth_headers(other_user))

        response = client.post(
            "/api/v1/photos/bulk-delete",
            headers=headers,
            json={"photo_ids": [mine[0]["id"], theirs["id"], mine[1]["id"]]},
        )

        assert response.status_code == 200
        assert response.json() == {"success_count": 2, "failure_count": 1}
        remaining = db.query(Photo).all()
        assert [p.id for p in remaining] == [theirs["id"]]
        assert blob_store.exists(theirs["public_id"])

    def test_blob_failure_counts_as_failure(self, client, upload, headers, db, blob_store):
        first, second = upload(headers), upload(headers)
        blob_store.fail_destroy_ids.add(second["public_id"])

        response = client.post(
            "/api/v1/photos/bulk-delete",
            headers=headers,
            json={"photo_ids": [first["id"], second["id"], "missing"]},
        )

        assert response.json() == {"success_count": 1, "failure_count": 2}
        assert [p.id for p in db.query(Photo).all()] == [second["id"]]

    def test_empty_list_is_rejected(self, client, headers):
        response = client.post("/api/v1/photos/bulk-delete", headers=headers, json={"photo_ids": []})
        assert response.status_code == 422


def test_generate_caption_endpoint(client, headers, monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", "")

    response = client.post(
        "/api/v1/photos/generate-caption",
        headers=headers,
        json={"image_url": "https://cdn.example.org/x.png"},
    )

    assert response.status_code == 200
    assert response.json() == {"caption": "Beautiful mehndi design", "tags": ["mehndi", "design"]}
