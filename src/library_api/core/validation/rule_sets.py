"""Validation chains for each request body the API accepts."""

from src.library_api.core.validation.rules import (
    FieldChain,
    chain,
    current_year,
    is_email,
    is_int,
    is_isbn,
    is_positive_int,
    not_empty,
    one_of,
    password_rules,
)

ROLES = ("ADMIN", "USER")

_PUBLISHED_YEAR = is_int(
    "Published year must be a valid year", min_value=0, max_value=current_year
)


def registration_rules() -> list[FieldChain]:
    return [
        chain("email", is_email(), label="Email"),
        chain("password", *password_rules(), label="Password"),
        chain("fullName", not_empty("Full name is required"), label="Full name"),
        chain("username", not_empty("Username cannot be empty"), optional=True),
        chain("phone", not_empty("Phone cannot be empty"), optional=True),
    ]


def login_rules() -> list[FieldChain]:
    return [
        chain("identifier", not_empty("Email or username is required"), label="Email or username"),
        chain("password", not_empty("Password is required"), label="Password"),
    ]


def add_book_rules() -> list[FieldChain]:
    return [
        chain("title", not_empty("Title is required"), label="Title"),
        chain("author", not_empty("Author is required"), label="Author"),
        chain("genre", not_empty("Genre is required"), label="Genre"),
        chain("publishedYear", _PUBLISHED_YEAR, label="Published year"),
        chain("isbn", is_isbn(), optional=True),
    ]


def update_book_rules() -> list[FieldChain]:
    return [
        chain("title", not_empty("Title cannot be empty"), optional=True),
        chain("author", not_empty("Author cannot be empty"), optional=True),
        chain("genre", not_empty("Genre cannot be empty"), optional=True),
        chain("publishedYear", _PUBLISHED_YEAR, optional=True),
        chain("isbn", is_isbn(), optional=True),
    ]


def update_user_rules() -> list[FieldChain]:
    return [
        chain("email", is_email(), optional=True),
        chain("password", *password_rules(), optional=True),
        chain("fullName", not_empty("Full name cannot be empty"), optional=True),
        chain("username", not_empty("Username cannot be empty"), optional=True),
        chain("phone", not_empty("Phone cannot be empty"), optional=True),
        chain("role", one_of(ROLES, "Role must be ADMIN or USER"), optional=True),
    ]


def borrow_rules() -> list[FieldChain]:
    return [
        chain("bookId", is_positive_int("Book id must be a positive integer"), label="Book id"),
        chain("userId", is_positive_int("User id must be a positive integer"), optional=True),
    ]


def return_rules() -> list[FieldChain]:
    return [
        chain("bookId", is_positive_int("Book id must be a positive integer"), label="Book id"),
    ]
