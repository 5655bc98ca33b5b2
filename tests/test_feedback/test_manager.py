"""Tests for FeedbackIntake."""

import pytest

from bookshare.errors import InvalidState, NotFound, ValidationError
from bookshare.feedback import Feedback
from bookshare.rating import notes_for


def notes(db, book_id):
    with db.get_session() as session:
        return notes_for(session, book_id)


class TestSubmit:
    """Tests for recording feedback."""

    def test_submit(self, db, intake, shareable_book, borrower):
        """Test feedback is stored with its rater."""
        feedback_id = intake.submit(shareable_book, borrower, 4.5, "Lovely copy")

        with db.get_session() as session:
            feedback = session.get(Feedback, feedback_id)
            assert feedback.book_id == shareable_book
            assert feedback.rater_id == borrower.id
            assert feedback.note == 4.5
            assert feedback.comment == "Lovely copy"

    def test_submit_bounds_accepted(self, db, intake, shareable_book, borrower):
        """Test the range ends are valid notes."""
        intake.submit(shareable_book, borrower, 0.0, "Not for me")
        intake.submit(shareable_book, borrower, 5.0, "Perfect")

        assert sorted(notes(db, shareable_book)) == [0.0, 5.0]

    @pytest.mark.parametrize("note", [-0.1, 5.1, 10, float("nan")])
    def test_submit_note_out_of_range(self, db, intake, shareable_book, borrower, note):
        """Test notes outside 0-5 are rejected."""
        with pytest.raises(ValidationError) as exc:
            intake.submit(shareable_book, borrower, note, "Hmm")

        assert exc.value.kind == "validation_error"
        assert notes(db, shareable_book) == []

    def test_submit_blank_comment(self, intake, shareable_book, borrower):
        """Test an empty comment is rejected."""
        with pytest.raises(ValidationError):
            intake.submit(shareable_book, borrower, 3.0, "   ")

    def test_submit_missing_book(self, intake, borrower):
        """Test feedback on a missing book."""
        with pytest.raises(NotFound):
            intake.submit("missing", borrower, 3.0, "Where is it?")

    def test_submit_not_shareable(self, intake, private_book, borrower):
        """Test feedback requires a shared book."""
        with pytest.raises(InvalidState, match="not shareable or archived"):
            intake.submit(private_book, borrower, 3.0, "Hidden")

    def test_submit_archived(self, intake, catalog, shareable_book, owner, borrower):
        """Test feedback is blocked on archived books."""
        catalog.set_archived(shareable_book, owner)

        with pytest.raises(InvalidState, match="not shareable or archived"):
            intake.submit(shareable_book, borrower, 3.0, "Too late")

    def test_submit_own_book(self, db, intake, shareable_book, owner):
        """Test owners cannot rate their own books."""
        with pytest.raises(InvalidState, match="own book"):
            intake.submit(shareable_book, owner, 5.0, "My favourite")

        assert notes(db, shareable_book) == []

    def test_submit_without_borrowing(self, intake, ledger, shareable_book, stranger):
        """Test a member who never borrowed the book may still rate it.

        Having borrowed the book is deliberately not required.
        """
        assert ledger.list_borrowed(0, 10, stranger).total_elements == 0

        feedback_id = intake.submit(shareable_book, stranger, 2.0, "Judged by the cover")

        assert feedback_id


class TestListForBook:
    """Tests for reading feedback."""

    def test_list_flags_own_feedback(self, intake, shareable_book, borrower, stranger):
        """Test each entry says whether the caller wrote it."""
        mine = intake.submit(shareable_book, borrower, 4.0, "Mine")
        theirs = intake.submit(shareable_book, stranger, 2.0, "Theirs")

        page = intake.list_for_book(shareable_book, 0, 10, borrower)

        flags = {fb.id: fb.own_feedback for fb in page.content}
        assert flags == {mine: True, theirs: False}
        assert page.total_elements == 2

    def test_list_empty(self, intake, shareable_book, borrower):
        """Test a book without feedback."""
        page = intake.list_for_book(shareable_book, 0, 10, borrower)

        assert page.content == []
        assert page.total_elements == 0
        assert page.total_pages == 0

    def test_list_missing_book(self, intake, borrower):
        """Test listing feedback of a missing book."""
        with pytest.raises(NotFound):
            intake.list_for_book("missing", 0, 10, borrower)

    def test_list_paging(self, intake, shareable_book, borrower):
        """Test paging through feedback."""
        for i in range(5):
            intake.submit(shareable_book, borrower, float(i), f"Read #{i}")

        page = intake.list_for_book(shareable_book, 1, 2, borrower)

        assert len(page.content) == 2
        assert page.number == 1
        assert page.total_pages == 3
