"""Tests for rating derivation."""

import pytest

from bookshare.guard import Actor
from bookshare.rating import rate, ratings_for


class TestRate:
    """Tests for the rating formula."""

    def test_no_feedback(self):
        assert rate([]) == 0.0

    def test_mean(self):
        assert rate([4.0, 5.0, 3.0]) == 4.0

    def test_single_note(self):
        assert rate([2.5]) == 2.5

    @pytest.mark.parametrize(
        "notes, expected",
        [
            ([4.0, 4.5], 4.3),  # 4.25 rounds up
            ([1.0, 2.0, 2.0], 1.7),  # 1.666...
            ([3.0, 3.0, 4.0], 3.3),  # 3.333...
            ([0.0, 0.5], 0.3),  # 0.25 rounds up
        ],
    )
    def test_rounds_half_up_to_one_decimal(self, notes, expected):
        """Test halves round up rather than to even."""
        assert rate(notes) == expected

    def test_accepts_generators(self):
        assert rate(n for n in (5.0, 5.0)) == 5.0


class TestRatingsFor:
    """Tests for rating lookups by book id."""

    def test_ratings_for_books(self, db, intake, catalog, owner, borrower, stranger, sample_book_data):
        """Test each book gets the mean of its own feedback."""
        rated = catalog.register(sample_book_data, owner)
        unrated = catalog.register(sample_book_data, owner)
        intake.submit(rated, borrower, 4.0, "Good")
        intake.submit(rated, stranger, 5.0, "Great")
        intake.submit(rated, Actor("third"), 3.0, "Fine")

        with db.get_session() as session:
            ratings = ratings_for(session, [rated, unrated])

        assert ratings == {rated: 4.0, unrated: 0.0}

    def test_ratings_for_nothing(self, db):
        with db.get_session() as session:
            assert ratings_for(session, []) == {}

