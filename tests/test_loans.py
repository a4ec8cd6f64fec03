"""
Tests for the borrow / return / loan listing endpoints.
"""

import pytest


@pytest.fixture
def books(client, librarian) -> list[int]:
    ids = []
    for n in range(1, 4):
        r = client.post(
            "/admin/books",
            json={"tag": f"TAG{n}", "title": f"Book {n}", "author": "Anon"},
            headers=librarian,
        )
        ids.append(r.json()["id"])
    return ids


def _student_id(client, student) -> int:
    return client.get("/auth/me", headers=student).json()["user"]["id"]


def _borrow(client, headers, borrower_id, item_id):
    return client.post(
        "/admin/borrow",
        json={"borrowerId": borrower_id, "itemId": item_id},
        headers=headers,
    )


def test_borrow_success(client, librarian, student, books):
    sid = _student_id(client, student)
    r = _borrow(client, librarian, sid, books[0])

    assert r.status_code == 200
    body = r.json()
    assert body["loan"]["item_id"] == books[0]
    assert body["loan"]["borrower_id"] == sid
    assert body["loan"]["returned_at"] is None
    assert body["item"]["title"] == "Book 1"
    assert body["borrower"] == {"id": sid, "name": "Sam Student", "role": "student"}


def test_borrow_accepts_console_field_names(client, librarian, student, books):
    sid = _student_id(client, student)
    r = client.post(
        "/admin/borrow",
        json={"userId": str(sid), "bookId": books[1]},
        headers=librarian,
    )
    assert r.status_code == 200
    assert r.json()["loan"]["item_id"] == books[1]


def test_double_borrow_conflicts(client, librarian, student, books):
    sid = _student_id(client, student)
    body = {"borrowerId": sid, "itemId": books[0]}
    r = client.post("/admin/borrow", json=body, headers=librarian)
    assert r.status_code == 200

    r = _borrow(client, librarian, 1, books[0])
    assert r.status_code == 400
    assert r.json()["detail"] == {
        "status": "conflict",
        "message": "Book is already borrowed",
    }


@pytest.mark.parametrize(
    "body, message",
    [
        ({"borrowerId": 99, "itemId": 1}, "User not found"),
        ({"borrowerId": 1, "itemId": 99}, "Book not found"),
    ],
)
def test_borrow_unknown_references(client, librarian, books, body, message):
    r = client.post("/admin/borrow", json=body, headers=librarian)
    assert r.status_code == 400
    assert r.json()["detail"] == {"status": "not_found", "message": message}


def test_borrow_missing_fields(client, librarian):
    r = client.post("/admin/borrow", json={"itemId": 1}, headers=librarian)
    assert r.status_code == 400
    assert r.json()["detail"]["status"] == "invalid_argument"


@pytest.mark.parametrize(
    "body",
    [{"borrowerId": 1, "itemId": "x"}, {"borrowerId": "abc", "itemId": 1}],
)
def test_borrow_malformed_ids(client, librarian, books, body):
    r = client.post("/admin/borrow", json=body, headers=librarian)
    assert r.status_code == 400
    assert r.json()["detail"]["status"] == "invalid_argument"
    assert client.get("/admin/loans", headers=librarian).json() == []


@pytest.mark.parametrize("body", [{"loanId": "x"}, {"itemId": "x"}])
def test_return_malformed_ids(client, librarian, books, body):
    _borrow(client, librarian, 1, books[0])

    r = client.post("/admin/return", json=body, headers=librarian)

    assert r.status_code == 400
    assert r.json()["detail"]["status"] == "invalid_argument"
    loans = client.get("/admin/loans", headers=librarian).json()
    assert loans[0]["returned_at"] is None


def test_return_by_item_then_again(client, librarian, books):
    _borrow(client, librarian, 1, books[2])

    r = client.post("/admin/return", json={"itemId": books[2]}, headers=librarian)
    assert r.status_code == 200
    assert r.json()["loan"]["returned_at"] is not None

    r = client.post("/admin/return", json={"itemId": books[2]}, headers=librarian)
    assert r.status_code == 400
    assert r.json()["detail"]["status"] == "not_found"


def test_return_by_loan_id(client, librarian, books):
    loan = _borrow(client, librarian, 1, books[0]).json()["loan"]

    r = client.post("/admin/return", json={"loanId": loan["id"]}, headers=librarian)
    assert r.status_code == 200
    assert r.json()["loan"]["id"] == loan["id"]


def test_return_without_key(client, librarian):
    r = client.post("/admin/return", json={}, headers=librarian)
    assert r.status_code == 400
    assert r.json()["detail"]["status"] == "invalid_argument"


def test_list_loans_includes_history(client, librarian, student, books):
    sid = _student_id(client, student)
    _borrow(client, librarian, sid, books[0])
    client.post("/admin/return", json={"itemId": books[0]}, headers=librarian)
    _borrow(client, librarian, 1, books[0])

    loans = client.get("/admin/loans", headers=librarian).json()
    assert len(loans) == 2
    assert loans[0]["borrower_name"] == "Sam Student"
    assert loans[0]["returned_at"] is not None
    assert loans[1]["borrower_name"] == "Admin Librarian"
    assert loans[1]["borrower_role"] == "librarian"
    assert loans[1]["item_title"] == "Book 1"
    assert loans[1]["rfid_tag"] == "TAG1"
    assert loans[1]["returned_at"] is None


def test_my_loans_filters_by_caller(client, librarian, student, books):
    sid = _student_id(client, student)
    _borrow(client, librarian, sid, books[0])
    _borrow(client, librarian, 1, books[1])

    mine = client.get("/me/loans", headers=student).json()
    assert [loan["item_id"] for loan in mine] == [books[0]]


def test_my_loans_requires_login(client):
    r = client.get("/me/loans")
    assert r.status_code == 401
    assert r.json()["detail"]["status"] == "unauthorized"


def test_loan_admin_requires_librarian(client, student):
    assert client.get("/admin/loans", headers=student).status_code == 403
    r = _borrow(client, student, 1, 1)
    assert r.status_code == 403
