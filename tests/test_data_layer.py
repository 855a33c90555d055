"""Data layer tests.

Covers the domain entities, their table models and the repositories against
a real in-memory SQLite database:
- User entity equality and repository lookups, paging and token storage
- Book repository paging, search and aggregates
- Transaction repository filters and the one-open-transaction-per-book index
"""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.library_api.entities import (
    Book,
    BookRepository,
    Transaction,
    TransactionRepository,
    User,
    UserRepository,
    UserRole,
)


def _user(repo: UserRepository, n: int, **overrides) -> User:
    data = {
        "full_name": f"Reader {n}",
        "email": f"reader{n}@example.com",
        "password": "hash",
    }
    data.update(overrides)
    return repo.create(User(**data))


def _book(repo: BookRepository, n: int, **overrides) -> Book:
    data = {
        "title": f"Title {n}",
        "author": f"Author {n}",
        "genre": "Fiction",
        "published_year": 2000,
    }
    data.update(overrides)
    return repo.create(Book(**data))


class TestSchema:
    """Tables and indexes created from the table models."""

    def test_tables_and_indexes_exist(self, session: Session):
        inspector = inspect(session.get_bind())

        assert {"books", "users", "transactions"} <= set(inspector.get_table_names())

        book_indexes = {index["name"] for index in inspector.get_indexes("books")}
        assert "ix_books_title_author" in book_indexes

        transaction_indexes = {index["name"] for index in inspector.get_indexes("transactions")}
        assert {
            "ix_transactions_user_id",
            "ix_transactions_book_id",
            "ix_transactions_borrowed_at",
            "uq_transactions_open_book",
        } <= transaction_indexes

    def test_transaction_foreign_keys(self, session: Session):
        inspector = inspect(session.get_bind())
        targets = {fk["referred_table"] for fk in inspector.get_foreign_keys("transactions")}
        assert targets == {"users", "books"}


class TestUserEntity:
    """Test User domain entity."""

    def test_defaults(self):
        user = User(full_name="Jane Doe", email="jane@example.com")

        assert user.id is None
        assert user.role == UserRole.USER
        assert user.tokens is None
        assert not user.is_admin

    def test_equality_ignores_timestamps_and_secrets(self):
        user1 = User(id=1, full_name="Jane", email="jane@example.com", password="a")
        user2 = User(id=1, full_name="Jane", email="jane@example.com", password="b")
        user2.updated_at = user1.updated_at + timedelta(hours=1)

        assert user1 == user2
        assert hash(user1) == hash(user2)

    def test_has_token(self):
        user = User(full_name="Jane", email="jane@example.com", tokens=["abc"])

        assert user.has_token("abc")
        assert not user.has_token("def")
        assert not user.has_token(None)

    def test_accepts_camel_case_input(self):
        user = User.model_validate({"fullName": "Jane", "email": "jane@example.com"})
        assert user.full_name == "Jane"
        assert user.model_dump(by_alias=True)["fullName"] == "Jane"


class TestUserRepository:
    """User persistence and lookups."""

    def test_create_assigns_id(self, session: Session):
        repo = UserRepository(session)
        user = _user(repo, 1)

        assert user.id is not None
        assert repo.get(user.id) == user

    def test_get_missing_returns_none(self, session: Session):
        assert UserRepository(session).get(999) is None

    def test_lookup_by_email_is_case_insensitive(self, session: Session):
        repo = UserRepository(session)
        user = _user(repo, 1)

        assert repo.get_by_email("READER1@example.com") == user

    def test_lookup_by_identifier(self, session: Session):
        repo = UserRepository(session)
        user = _user(repo, 1, username="reader")

        assert repo.get_by_identifier("reader") == user
        assert repo.get_by_identifier("reader1@example.com") == user
        assert repo.get_by_identifier("nobody") is None

    def test_duplicate_email_rejected_by_database(self, session: Session):
        repo = UserRepository(session)
        _user(repo, 1)

        with pytest.raises(IntegrityError):
            _user(repo, 2, email="reader1@example.com")

    def test_update_changes_fields_and_timestamp(self, session: Session):
        repo = UserRepository(session)
        user = _user(repo, 1)

        updated = repo.update(user.model_copy(update={"full_name": "Renamed", "role": UserRole.ADMIN}))

        assert updated.full_name == "Renamed"
        assert updated.role == UserRole.ADMIN
        assert updated.updated_at >= user.updated_at

    def test_update_without_id_raises(self, session: Session):
        with pytest.raises(ValueError):
            UserRepository(session).update(User(full_name="x", email="x@example.com"))

    def test_delete(self, session: Session):
        repo = UserRepository(session)
        user = _user(repo, 1)

        assert repo.delete(user.id) is True
        assert repo.get(user.id) is None
        assert repo.delete(user.id) is False

    def test_list_page_orders_by_id_and_counts(self, session: Session):
        repo = UserRepository(session)
        created = [_user(repo, n) for n in range(1, 8)]

        page, total = repo.list_page(offset=3, limit=3)

        assert total == 7
        assert [u.id for u in page] == [u.id for u in created[3:6]]

    def test_list_page_search(self, session: Session):
        repo = UserRepository(session)
        _user(repo, 1, full_name="Alice Liddell")
        _user(repo, 2, full_name="Bob Builder", username="alice_fan")
        _user(repo, 3, full_name="Carol")

        page, total = repo.list_page(offset=0, limit=10, search="ALICE")

        assert total == 2
        assert {u.full_name for u in page} == {"Alice Liddell", "Bob Builder"}

    def test_token_storage_keeps_most_recent(self, session: Session):
        repo = UserRepository(session)
        user = _user(repo, 1)

        for jti in ("t1", "t2", "t3", "t4"):
            repo.add_token(user.id, jti, keep=3)

        assert repo.get(user.id).tokens == ["t2", "t3", "t4"]

        assert repo.remove_token(user.id, "t3") is True
        assert repo.remove_token(user.id, "t3") is False
        assert repo.get(user.id).tokens == ["t2", "t4"]


class TestBookRepository:
    """Book persistence, paging, search and aggregates."""

    def test_create_defaults(self, session: Session):
        book = _book(BookRepository(session), 1)

        assert book.id is not None
        assert book.is_available is True
        assert book.borrow_count == 0

    def test_duplicate_isbn_rejected_by_database(self, session: Session):
        repo = BookRepository(session)
        _book(repo, 1, isbn="9780306406157")

        with pytest.raises(IntegrityError):
            _book(repo, 2, isbn="9780306406157")

    def test_books_without_isbn_do_not_conflict(self, session: Session):
        repo = BookRepository(session)
        _book(repo, 1)
        _book(repo, 2)

        assert repo.list_page(0, 10)[1] == 2

    def test_get_by_isbn(self, session: Session):
        repo = BookRepository(session)
        book = _book(repo, 1, isbn="0306406152")

        assert repo.get_by_isbn("0306406152") == book
        assert repo.get_by_isbn("0000000000") is None

    def test_snapshots_differ_once_lending_state_changes(self, session: Session):
        repo = BookRepository(session)
        before = _book(repo, 1)

        after = repo.update(before.model_copy(update={"is_available": False, "borrow_count": 1}))

        assert after != before
        assert hash(after) != hash(before)
        assert repo.get(before.id) == after

    def test_second_page_is_stable_id_order(self, session: Session):
        repo = BookRepository(session)
        created = [_book(repo, n) for n in range(1, 26)]

        page, total = repo.list_page(offset=10, limit=10)

        assert total == 25
        assert [b.id for b in page] == [b.id for b in created[10:20]]

    def test_search_matches_title_or_author_case_insensitively(self, session: Session):
        repo = BookRepository(session)
        _book(repo, 1, title="The Dispossessed", author="Le Guin")
        _book(repo, 2, title="Dune", author="Frank Herbert")
        _book(repo, 3, title="Earthsea", author="Ursula LE GUIN")

        page, total = repo.list_page(0, 10, search="le guin")

        assert total == 2
        assert [b.title for b in page] == ["The Dispossessed", "Earthsea"]

    def test_search_treats_wildcards_literally(self, session: Session):
        repo = BookRepository(session)
        _book(repo, 1, title="100% Cotton")
        _book(repo, 2, title="Plain")

        _, total = repo.list_page(0, 10, search="%")

        assert total == 1

    def test_most_borrowed_orders_by_count_then_id(self, session: Session):
        users = UserRepository(session)
        books = BookRepository(session)
        transactions = TransactionRepository(session)
        reader = _user(users, 1)
        b1, b2, b3, _unborrowed = (_book(books, n) for n in range(1, 5))

        returned = datetime.now(UTC)
        for book, times in ((b1, 1), (b2, 2), (b3, 1)):
            for _ in range(times):
                transactions.create(
                    Transaction(user_id=reader.id, book_id=book.id, returned_at=returned)
                )

        ranking = books.most_borrowed(limit=10)

        assert [(entry.book.id, entry.borrow_count) for entry in ranking] == [
            (b2.id, 2),
            (b1.id, 1),
            (b3.id, 1),
        ]

    def test_most_borrowed_respects_limit(self, session: Session):
        users = UserRepository(session)
        books = BookRepository(session)
        transactions = TransactionRepository(session)
        reader = _user(users, 1)
        for n in range(1, 4):
            book = _book(books, n)
            transactions.create(Transaction(user_id=reader.id, book_id=book.id))

        assert len(books.most_borrowed(limit=2)) == 2

    def test_most_borrowed_empty(self, session: Session):
        _book(BookRepository(session), 1)
        assert BookRepository(session).most_borrowed(limit=10) == []

    def test_borrowed_by_newest_first(self, session: Session):
        users = UserRepository(session)
        books = BookRepository(session)
        transactions = TransactionRepository(session)
        reader = _user(users, 1)
        old_book, new_book = _book(books, 1), _book(books, 2)

        start = datetime(2024, 1, 1, tzinfo=UTC)
        transactions.create(
            Transaction(
                user_id=reader.id,
                book_id=old_book.id,
                borrowed_at=start,
                returned_at=start + timedelta(days=3),
            )
        )
        transactions.create(
            Transaction(user_id=reader.id, book_id=new_book.id, borrowed_at=start + timedelta(days=5))
        )

        history = books.borrowed_by(reader.id)

        assert [entry.book.id for entry in history] == [new_book.id, old_book.id]
        assert history[0].is_currently_borrowed is True
        assert history[0].returned_at is None
        assert history[1].is_currently_borrowed is False

    def test_has_transactions(self, session: Session):
        users = UserRepository(session)
        books = BookRepository(session)
        reader = _user(users, 1)
        book = _book(books, 1)

        assert books.has_transactions(book.id) is False
        TransactionRepository(session).create(Transaction(user_id=reader.id, book_id=book.id))
        assert books.has_transactions(book.id) is True


class TestTransactionRepository:
    """Transactions and the open-transaction invariant."""

    @pytest.fixture
    def reader_and_book(self, session: Session) -> tuple[User, Book]:
        return _user(UserRepository(session), 1), _book(BookRepository(session), 1)

    def test_second_open_transaction_for_book_rejected(self, session: Session, reader_and_book):
        reader, book = reader_and_book
        repo = TransactionRepository(session)
        repo.create(Transaction(user_id=reader.id, book_id=book.id))

        with pytest.raises(IntegrityError):
            repo.create(Transaction(user_id=reader.id, book_id=book.id))

    def test_closed_transactions_do_not_block_a_new_one(self, session: Session, reader_and_book):
        reader, book = reader_and_book
        repo = TransactionRepository(session)
        first = repo.create(Transaction(user_id=reader.id, book_id=book.id))
        closed = repo.close(first.id)

        assert closed.returned_at is not None
        second = repo.create(Transaction(user_id=reader.id, book_id=book.id))
        assert repo.get_open_for_book(book.id) == second

    def test_get_open_for_book(self, session: Session, reader_and_book):
        reader, book = reader_and_book
        repo = TransactionRepository(session)

        assert repo.get_open_for_book(book.id) is None
        opened = repo.create(Transaction(user_id=reader.id, book_id=book.id))
        assert repo.get_open_for_book(book.id).id == opened.id

    def test_list_page_filters(self, session: Session):
        users = UserRepository(session)
        books = BookRepository(session)
        repo = TransactionRepository(session)
        alice, bob = _user(users, 1), _user(users, 2)
        b1, b2 = _book(books, 1), _book(books, 2)

        returned = repo.close(repo.create(Transaction(user_id=alice.id, book_id=b1.id)).id)
        open_alice = repo.create(Transaction(user_id=alice.id, book_id=b2.id))
        open_bob = repo.create(Transaction(user_id=bob.id, book_id=b1.id))

        _, total = repo.list_page(0, 10)
        assert total == 3

        page, total = repo.list_page(0, 10, user_id=alice.id)
        assert total == 2
        assert {t.id for t in page} == {returned.id, open_alice.id}

        page, _ = repo.list_page(0, 10, status="open")
        assert {t.id for t in page} == {open_alice.id, open_bob.id}

        page, _ = repo.list_page(0, 10, status="returned")
        assert [t.id for t in page] == [returned.id]

        page, _ = repo.list_page(0, 10, book_id=b1.id, status="open")
        assert [t.id for t in page] == [open_bob.id]

    def test_exists_for_user(self, session: Session, reader_and_book):
        reader, book = reader_and_book
        repo = TransactionRepository(session)

        assert repo.exists_for_user(reader.id) is False
        repo.create(Transaction(user_id=reader.id, book_id=book.id))
        assert repo.exists_for_user(reader.id) is True
