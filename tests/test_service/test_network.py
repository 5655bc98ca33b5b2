"""End-to-end tests through BookNetwork."""

import pytest

from bookshare.errors import InvalidState, NotFound, PermissionDenied, ValidationError
from bookshare.guard import Actor
from bookshare.lending import LoanStatus
from bookshare.service import BookNetwork


@pytest.fixture
def book(network: BookNetwork, owner: Actor) -> str:
    return network.create_book(owner, "Kindred", "Octavia E. Butler", shareable=True)


class TestCreateBook:
    """Tests for listing books through the network."""

    def test_create_and_get(self, network, owner, book):
        view = network.get_book(book)

        assert view.title == "Kindred"
        assert view.owner_id == owner.id
        assert view.rate == 0.0
        assert view.available is True

    def test_create_invalid(self, network, owner):
        with pytest.raises(ValidationError) as exc:
            network.create_book(owner, "   ", "Someone")
        assert exc.value.kind == "validation_error"
        assert exc.value.errors

    def test_get_missing(self, network):
        with pytest.raises(NotFound):
            network.get_book("missing")


class TestLendingFlow:
    """Tests for the full borrow, return and approve cycle."""

    def test_borrow_twice_by_same_member(self, network, borrower, book):
        network.borrow_book(book, borrower)

        with pytest.raises(InvalidState) as exc:
            network.borrow_book(book, borrower)
        assert exc.value.description == "already borrowed by you"

    def test_borrow_while_lent_to_someone_else(self, network, borrower, stranger, book):
        network.borrow_book(book, borrower)

        with pytest.raises(InvalidState) as exc:
            network.borrow_book(book, stranger)
        assert exc.value.description == "already borrowed"

    def test_cycle_allows_new_loan(self, network, owner, borrower, book):
        first = network.borrow_book(book, borrower)
        assert network.get_book(book).available is False

        assert network.return_book(book, borrower) == first
        assert network.get_book(book).available is False

        assert network.approve_return(book, owner) == first
        assert network.get_book(book).available is True

        second = network.borrow_book(book, borrower)
        assert second != first

    def test_owner_cannot_borrow(self, network, owner, book):
        with pytest.raises(InvalidState) as exc:
            network.borrow_book(book, owner)
        assert exc.value.description == "self-loan"

    def test_archived_not_lendable(self, network, owner, stranger, book):
        assert network.set_archived(book, owner) is True

        with pytest.raises(InvalidState) as exc:
            network.borrow_book(book, stranger)
        assert exc.value.description == "not shareable or archived"

    def test_only_owner_approves(self, network, borrower, stranger, book):
        network.borrow_book(book, borrower)
        network.return_book(book, borrower)

        with pytest.raises(PermissionDenied):
            network.approve_return(book, stranger)

    def test_listings_follow_the_loan(self, network, owner, borrower, book):
        network.borrow_book(book, borrower)
        network.return_book(book, borrower)

        borrowed = network.list_borrowed(0, 10, borrower)
        lent = network.list_returned(0, 10, owner)

        assert [loan.id for loan in borrowed.content] == [book]
        assert [loan.id for loan in lent.content] == [book]
        assert lent.content[0].returned is True
        assert lent.content[0].return_approved is False


class TestFeedbackFlow:
    """Tests for feedback and the derived rating."""

    def test_rating_is_mean_of_notes(self, network, book):
        for member, note in (("a", 4.0), ("b", 5.0), ("c", 3.0)):
            network.submit_feedback(book, Actor(member), note, "Read it")

        assert network.get_book(book).rate == 4.0

    def test_list_feedback_marks_own(self, network, borrower, stranger, book):
        network.submit_feedback(book, borrower, 5.0, "Loved it")
        network.submit_feedback(book, stranger, 2.0, "Not for me")

        page = network.list_feedback(book, 0, 10, borrower)

        assert page.total_elements == 2
        own = {item.comment: item.own_feedback for item in page.content}
        assert own == {"Loved it": True, "Not for me": False}

    def test_owner_cannot_rate(self, network, owner, book):
        with pytest.raises(InvalidState):
            network.submit_feedback(book, owner, 5.0, "Mine is great")

    def test_list_feedback_missing_book(self, network, borrower):
        with pytest.raises(NotFound):
            network.list_feedback("missing", 0, 10, borrower)


class TestBrowsing:
    """Tests for the browse listings."""

    def test_list_books_hides_own_and_private(self, network, owner, borrower, book):
        network.create_book(owner, "Hidden", "Owner", shareable=False)
        network.create_book(borrower, "Borrower's", "B", shareable=True)

        seen_by_borrower = network.list_books(0, 10, borrower)
        owned = network.list_owned_books(0, 10, owner)

        assert [b.id for b in seen_by_borrower.content] == [book]
        assert owned.total_elements == 2


class TestWiring:
    """Tests for how the network assembles its components."""

    def test_components_share_one_registry(self, network):
        assert network.catalog.locks is network.locks
        assert network.ledger.locks is network.locks
        assert network.feedback.locks is network.locks


class TestLoanHistory:
    """Tests for the per-book loan history."""

    def test_history_tracks_each_loan(self, network, owner, borrower, stranger, book):
        first = network.borrow_book(book, borrower)
        network.return_book(book, borrower)
        network.approve_return(book, owner)
        second = network.borrow_book(book, stranger)

        history = network.loan_history(book)

        assert {loan.id for loan in history} == {first, second}
        by_id = {loan.id: loan for loan in history}
        assert by_id[first].status == LoanStatus.CLOSED
        assert by_id[first].approved_at is not None
        assert by_id[second].status == LoanStatus.OPEN
        assert by_id[second].returned_at is None

    def test_history_empty(self, network, book):
        assert network.loan_history(book) == []

    def test_history_missing_book(self, network):
        with pytest.raises(NotFound):
            network.loan_history("missing")
