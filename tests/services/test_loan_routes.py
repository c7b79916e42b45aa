"""Loan Routes — end-to-end lending flow over HTTP.

Tests cover:
    - request -> approve -> complete, with owner-only enforcement
    - auth failure stops the request before any state changes
    - invalid action names and terminal-state transitions answer 400
    - participant-only loan detail, role-scoped listings
"""

from sqlalchemy import select

from shelfshare.models.loan import Loan


async def _request(client, headers, book_id, **extra):
    return await client.post(
        "/api/v1/loans/request", json={"book_id": book_id, **extra}, headers=headers,
    )


async def test_full_lending_flow(client, owner, borrower, book, auth_headers):
    res = await _request(
        client, auth_headers(borrower), book.id,
        due_date="2026-12-01", message="Would love to read this",
    )
    assert res.status_code == 201
    loan_id = res.json()["loan_id"]

    res = await client.put(
        f"/api/v1/loans/{loan_id}/approve", headers=auth_headers(owner),
    )
    assert res.status_code == 200
    assert res.json()["message"] == "Loan approved successfully"
    assert res.json()["loan"]["status"] == "approved"
    assert res.json()["loan"]["start_date"] is not None

    res = await client.put(
        f"/api/v1/loans/{loan_id}/complete", headers=auth_headers(borrower),
    )
    assert res.status_code == 403

    res = await client.put(
        f"/api/v1/loans/{loan_id}/complete", headers=auth_headers(owner),
    )
    assert res.status_code == 200
    loan = res.json()["loan"]
    assert loan["status"] == "done"
    assert loan["return_date"] is not None


async def test_request_without_token_creates_nothing(client, book, test_db):
    res = await _request(client, {}, book.id)
    assert res.status_code == 401

    result = await test_db.execute(select(Loan))
    assert result.scalars().all() == []


async def test_request_own_book_is_400(client, owner, book, auth_headers):
    res = await _request(client, auth_headers(owner), book.id)
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Cannot borrow your own book"


async def test_request_missing_book_is_404(client, borrower, auth_headers):
    res = await _request(client, auth_headers(borrower), 9999)
    assert res.status_code == 404


async def test_request_long_message_is_400(client, borrower, book, auth_headers):
    res = await _request(client, auth_headers(borrower), book.id, message="x" * 501)
    assert res.status_code == 400


async def test_request_inverted_dates_is_400(client, borrower, book, auth_headers):
    res = await _request(
        client, auth_headers(borrower), book.id,
        start_date="2026-05-10", due_date="2026-05-01",
    )
    assert res.status_code == 400


async def test_unknown_action_is_400(client, owner, borrower, book, auth_headers):
    loan_id = (await _request(client, auth_headers(borrower), book.id)).json()["loan_id"]
    res = await client.put(
        f"/api/v1/loans/{loan_id}/return", headers=auth_headers(owner),
    )
    assert res.status_code == 400


async def test_declined_loan_cannot_be_approved(client, owner, borrower, book, auth_headers):
    loan_id = (await _request(client, auth_headers(borrower), book.id)).json()["loan_id"]
    await client.put(f"/api/v1/loans/{loan_id}/decline", headers=auth_headers(owner))

    res = await client.put(
        f"/api/v1/loans/{loan_id}/approve", headers=auth_headers(owner),
    )
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Cannot approve loan with status: cancelled"


async def test_transition_missing_loan_is_404(client, owner, auth_headers):
    res = await client.put("/api/v1/loans/9999/approve", headers=auth_headers(owner))
    assert res.status_code == 404


async def test_loan_detail_is_participant_only(
    client, owner, borrower, book, make_user, auth_headers,
):
    loan_id = (await _request(client, auth_headers(borrower), book.id)).json()["loan_id"]
    stranger = await make_user("stranger")

    assert (await client.get(
        f"/api/v1/loans/{loan_id}", headers=auth_headers(owner),
    )).status_code == 200
    assert (await client.get(
        f"/api/v1/loans/{loan_id}", headers=auth_headers(stranger),
    )).status_code == 403


async def test_listings_are_role_scoped(client, owner, borrower, book, auth_headers):
    first = (await _request(client, auth_headers(borrower), book.id)).json()["loan_id"]
    second = (await _request(client, auth_headers(borrower), book.id)).json()["loan_id"]
    await client.put(f"/api/v1/loans/{first}/approve", headers=auth_headers(owner))

    received = (await client.get(
        "/api/v1/loans/received", headers=auth_headers(owner),
    )).json()
    assert [l["id"] for l in received] == [second, first]
    assert received[0]["book_title"] == "Dune"

    borrowed = (await client.get(
        "/api/v1/loans/my-borrowed", headers=auth_headers(borrower),
    )).json()
    assert [l["id"] for l in borrowed] == [first, second]

    assert (await client.get(
        "/api/v1/loans/my-borrowed", headers=auth_headers(owner),
    )).json() == []
