import unittest

from fastapi.testclient import TestClient

from mediarate.core.auth import AuthSession, get_current_user
from mediarate.core.store import get_store
from mediarate.dependencies import get_auth_session
from mediarate.main import app

from .helpers import USER, OTHER_USER, RecordingStore, fake_verifier, media_record, rating_record, seed

class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.store = RecordingStore()
        seed(self.store, "media",
             media_record("media_1", "The Matrix", created_day=1, description="Red pill"),
             media_record("media_2", "Dune", created_day=2, type="book", genre="Science Fiction"))
        seed(self.store, "ratings",
             rating_record("r1", "media_1", 3),
             rating_record("r2", "media_1", 4, user_id=OTHER_USER.id))

        async def current_user():
            return USER

        app.dependency_overrides[get_store] = lambda: self.store
        app.dependency_overrides[get_current_user] = current_user
        app.dependency_overrides[get_auth_session] = lambda: AuthSession(verifier=fake_verifier, revoker=lambda uid: None)
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

class RootAndAuthTests(ApiTestCase):
    def test_root(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("MediaRate", response.json()["message"])

    def test_missing_bearer_token_is_unauthorized(self):
        del app.dependency_overrides[get_current_user]
        response = self.client.get("/catalog/")
        self.assertEqual(response.status_code, 401)

class CatalogApiTests(ApiTestCase):
    def test_catalog_lists_recent_first_with_own_ratings(self):
        body = self.client.get("/catalog/").json()
        self.assertEqual([m["id"] for m in body["media"]], ["media_2", "media_1"])
        self.assertEqual(body["results_label"], "2 results")
        self.assertEqual(body["ratings"]["media_1"]["id"], "r1")
        matrix = body["media"][1]
        self.assertEqual(matrix["userRating"], 3)
        self.assertEqual(matrix["releaseYear"], 2001)
        self.assertTrue(matrix["coverImage"].startswith("https://"))

    def test_catalog_query_filters(self):
        body = self.client.get("/catalog/", params={"query": "RED"}).json()
        self.assertEqual([m["id"] for m in body["media"]], ["media_1"])
        self.assertEqual(body["results_label"], '1 result for "RED"')

    def test_catalog_load_failure_is_reported(self):
        self.store.fail("list", "media")
        response = self.client.get("/catalog/")
        self.assertEqual(response.status_code, 502)

    def test_vocabulary(self):
        body = self.client.get("/catalog/vocabulary").json()
        self.assertEqual(body["types"]["tv"], "TV Series/Drama")
        self.assertIn("Makjang", body["genres"]["tv"])
        self.assertIn("Other", body["countries"])

class RatingApiTests(ApiTestCase):
    def test_zero_rating_is_rejected_without_writes(self):
        response = self.client.put("/ratings/media_1", json={"rating": 0})
        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.store.count("create") + self.store.count("update"), 0)

    def test_existing_rating_is_updated(self):
        body = self.client.put("/ratings/media_1", json={"rating": 5, "review": "  "}).json()
        self.assertFalse(body["created"])
        self.assertEqual(body["rating"]["id"], "r1")
        self.assertEqual(body["rating"]["rating"], 5)
        self.assertIsNone(self.store.collections["ratings"]["r1"]["review"])
        self.assertEqual(self.store.count("create"), 0)

    def test_new_rating_is_created(self):
        response = self.client.put("/ratings/media_2", json={"rating": 4, "review": "Spice"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["created"])
        self.assertEqual(body["rating"]["userId"], USER.id)
        self.assertEqual(self.store.count("create", "ratings"), 1)

    def test_unknown_media(self):
        response = self.client.put("/ratings/media_404", json={"rating": 4})
        self.assertEqual(response.status_code, 404)

    def test_my_ratings(self):
        body = self.client.get("/ratings/me").json()
        self.assertEqual(body["user_id"], USER.id)
        self.assertEqual([r["id"] for r in body["ratings"]], ["r1"])

class MediaApiTests(ApiTestCase):
    def test_add_media(self):
        response = self.client.post("/media/", json={
            "title": " Arrival ", "type": "movie", "genre": "Drama", "releaseYear": 2016
        })
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["title"], "Arrival")
        self.assertIsNone(body["description"])
        self.assertIn(body["id"], self.store.collections["media"])

    def test_add_media_missing_fields(self):
        response = self.client.post("/media/", json={"title": "Arrival", "type": "movie"})
        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.store.count("create"), 0)

    def test_edit_media(self):
        response = self.client.put("/media/media_2", json={
            "title": "Dune Messiah", "type": "book", "genre": "Science Fiction", "releaseYear": 1969
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.store.collections["media"]["media_2"]["title"], "Dune Messiah")
        self.assertIsNotNone(self.store.collections["media"]["media_2"]["updatedAt"])

    def test_edit_unknown_media(self):
        response = self.client.put("/media/nope", json={"title": "x"})
        self.assertEqual(response.status_code, 404)

    def test_delete_without_confirm_only_reports(self):
        body = self.client.delete("/media/media_1").json()
        self.assertFalse(body["deleted"])
        self.assertEqual(body["ratings_to_delete"], 2)
        self.assertEqual(self.store.count("delete"), 0)

    def test_confirmed_delete_cascades(self):
        body = self.client.delete("/media/media_1", params={"confirm": "true"}).json()
        self.assertTrue(body["deleted"])
        self.assertEqual(body["ratings_deleted"], 2)
        self.assertEqual(self.store.collections["ratings"], {})
        self.assertNotIn("media_1", self.store.collections["media"])

    def test_partial_delete_reports_counts(self):
        self.store.fail("delete", "ratings", nth=2)
        response = self.client.delete("/media/media_1", params={"confirm": "true"})
        self.assertEqual(response.status_code, 502)
        detail = response.json()["detail"]
        self.assertEqual(detail["ratings_deleted"], 1)
        self.assertEqual(detail["ratings_remaining"], 1)
        self.assertIn("media_1", self.store.collections["media"])

class IncompleteRecordApiTests(ApiTestCase):
    def test_catalog_survives_incomplete_and_unreadable_records(self):
        untyped = media_record("media_old", "Old Import", created_day=3)
        del untyped["type"], untyped["releaseYear"]
        untitled = media_record("media_bad", "x", created_day=4)
        del untitled["title"]
        seed(self.store, "media", untyped, untitled)

        response = self.client.get("/catalog/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([m["id"] for m in response.json()["media"]], ["media_old", "media_2", "media_1"])

    def test_unreadable_existing_rating_blocks_a_second_one(self):
        seed(self.store, "ratings", rating_record("r_bad", "media_2", 9))
        response = self.client.put("/ratings/media_2", json={"rating": 4})
        self.assertEqual(response.status_code, 502)
        self.assertEqual(self.store.count("create"), 0)

    def test_unreadable_media_record_is_a_store_failure(self):
        untitled = media_record("media_bad", "x")
        del untitled["title"]
        seed(self.store, "media", untitled)
        response = self.client.get("/media/media_bad")
        self.assertEqual(response.status_code, 502)

if __name__ == '__main__':
    unittest.main()
