import unittest

from mediarate.core.exceptions import ValidationError
from mediarate.core.notifications import Notifier, Variant
from mediarate.media.models import Media
from mediarate.ratings.models import Rating
from mediarate.ratings.workflow import RatingDialog

from .helpers import USER, RecordingStore, make_services, rating_record, seed

MATRIX = Media(id="media_1", title="The Matrix", type="movie", genre="Action", release_year=1999)

class RatingDialogTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.store = RecordingStore()
        _, self.service = make_services(self.store)
        self.notifier = Notifier()
        self.ratings = {}
        self.dialog = RatingDialog(self.service, self.notifier, self.ratings)

    def writes(self):
        return self.store.count("create") + self.store.count("update")

    def test_opens_with_unset_rating_when_none_exists(self):
        self.dialog.open(MATRIX)
        self.assertTrue(self.dialog.is_open)
        self.assertEqual(self.dialog.rating, 0)
        self.assertEqual(self.dialog.review, "")

    def test_opens_seeded_from_existing_rating(self):
        self.ratings[MATRIX.id] = Rating(id="r1", user_id=USER.id, media_id=MATRIX.id, rating=3, review="ok")
        self.dialog.open(MATRIX)
        self.assertEqual(self.dialog.rating, 3)
        self.assertEqual(self.dialog.review, "ok")

    async def test_zero_rating_is_rejected_without_store_call(self):
        self.dialog.open(MATRIX)
        self.dialog.set_review("great")
        result = await self.dialog.submit(USER)

        self.assertIsNone(result)
        self.assertEqual(self.writes(), 0)
        self.assertTrue(self.dialog.is_open)
        notification = self.notifier.drain()[-1]
        self.assertEqual(notification.title, "Rating Required")
        self.assertEqual(notification.variant, Variant.DESTRUCTIVE)

    async def test_first_rating_creates_exactly_one_record(self):
        self.dialog.open(MATRIX)
        self.dialog.set_rating(4)
        result = await self.dialog.submit(USER)

        self.assertEqual(self.store.count("create", "ratings"), 1)
        self.assertEqual(self.store.count("update"), 0)
        self.assertEqual(self.ratings[MATRIX.id].rating, 4)
        self.assertIsNone(self.ratings[MATRIX.id].review)
        self.assertEqual(result.id, self.ratings[MATRIX.id].id)
        self.assertTrue(result.id.startswith("rating_"))

        stored = self.store.collections["ratings"][result.id]
        self.assertEqual(stored["userId"], USER.id)
        self.assertEqual(stored["mediaId"], MATRIX.id)
        self.assertNotIn("updatedAt", stored)

        self.assertFalse(self.dialog.is_open)
        self.assertEqual(self.dialog.rating, 0)
        self.assertEqual(self.dialog.review, "")
        self.assertEqual(self.notifier.drain()[-1].title, "Rating Added")

    async def test_existing_rating_is_updated_in_place(self):
        seed(self.store, "ratings", rating_record("rating_old", MATRIX.id, 3))
        self.ratings[MATRIX.id] = Rating(id="rating_old", user_id=USER.id, media_id=MATRIX.id, rating=3)

        self.dialog.open(MATRIX)
        self.dialog.set_rating(5)
        await self.dialog.submit(USER)

        self.assertEqual(self.store.count("update", "ratings"), 1)
        self.assertEqual(self.store.count("create"), 0)
        self.assertEqual(self.ratings[MATRIX.id].id, "rating_old")
        self.assertEqual(self.ratings[MATRIX.id].rating, 5)
        self.assertIsNotNone(self.store.collections["ratings"]["rating_old"]["updatedAt"])
        self.assertEqual(self.notifier.drain()[-1].title, "Rating Updated")

    async def test_whitespace_review_is_stored_as_null(self):
        self.dialog.open(MATRIX)
        self.dialog.set_rating(2)
        self.dialog.set_review("   ")
        await self.dialog.submit(USER)

        stored = next(iter(self.store.collections["ratings"].values()))
        self.assertIsNone(stored["review"])

    async def test_review_is_trimmed(self):
        self.dialog.open(MATRIX)
        self.dialog.set_rating(5)
        self.dialog.set_review("  loved it \n")
        await self.dialog.submit(USER)
        self.assertEqual(self.ratings[MATRIX.id].review, "loved it")

    async def test_overlong_review_is_rejected(self):
        self.dialog.open(MATRIX)
        self.dialog.set_rating(5)
        self.dialog.set_review("x" * 501)
        await self.dialog.submit(USER)
        self.assertEqual(self.writes(), 0)
        self.assertEqual(self.notifier.drain()[-1].title, "Review Too Long")

    async def test_store_failure_keeps_dialog_open_with_input(self):
        self.store.fail("create", "ratings")
        self.dialog.open(MATRIX)
        self.dialog.set_rating(4)
        self.dialog.set_review("pretty good")
        result = await self.dialog.submit(USER)

        self.assertIsNone(result)
        self.assertTrue(self.dialog.is_open)
        self.assertEqual(self.dialog.rating, 4)
        self.assertEqual(self.dialog.review, "pretty good")
        self.assertNotIn(MATRIX.id, self.ratings)
        notification = self.notifier.drain()[-1]
        self.assertEqual(notification.title, "Error")
        self.assertEqual(notification.variant, Variant.DESTRUCTIVE)

    def test_out_of_range_star_value_is_refused(self):
        self.dialog.open(MATRIX)
        with self.assertRaises(ValidationError):
            self.dialog.set_rating(6)

class RatingServiceSubmitTests(unittest.IsolatedAsyncioTestCase):
    async def test_submit_looks_up_existing_rating(self):
        store = RecordingStore()
        _, service = make_services(store)
        seed(store, "ratings", rating_record("rating_old", "media_1", 3))

        saved = await service.submit(USER.id, "media_1", 5, "")
        self.assertFalse(saved.created)
        self.assertEqual(saved.rating.id, "rating_old")
        self.assertEqual(store.count("create"), 0)

    async def test_submit_with_zero_never_reads_or_writes(self):
        store = RecordingStore()
        _, service = make_services(store)
        with self.assertRaises(ValidationError):
            await service.submit(USER.id, "media_1", 0, None)
        self.assertEqual(store.calls, [])

if __name__ == '__main__':
    unittest.main()
