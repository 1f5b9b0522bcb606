"""Member savings recorded on the shared transaction ledger."""

import pytest

from koperasi.constants import Role, TransactionCategory, TransactionType
from koperasi.extensions import db
from koperasi.models import Transaction
from koperasi.services import member_service


@pytest.fixture
def admin_client(client, login):
    login(Role.ADMIN)
    return client


def _deposit(client, name="Pak Ahmad", amount=100000):
    return client.post("/api/members/deposit", json={"member_name": name, "amount": amount})


def _withdraw(client, name="Pak Ahmad", amount=50000):
    return client.post("/api/members/withdrawal", json={"member_name": name, "amount": amount})


def test_deposit_is_a_ledger_entry(admin_client):
    resp = _deposit(admin_client)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["member_name"] == "Pak Ahmad"

    tx = db.session.get(Transaction, body["id"])
    assert tx.type == TransactionType.CASH_IN
    assert tx.category == TransactionCategory.MEMBER_DEPOSIT
    assert tx.description == "Setoran Anggota - Pak Ahmad"


def test_withdrawal_within_balance(admin_client):
    _deposit(admin_client)
    resp = _withdraw(admin_client, amount=40000)
    assert resp.status_code == 201
    assert member_service.get_member_balance("Pak Ahmad") == 60000


def test_withdrawal_over_balance_is_refused(admin_client):
    _deposit(admin_client, amount=30000)
    resp = _withdraw(admin_client, amount=30001)
    assert resp.status_code == 400
    assert resp.get_json()["balance"] == 30000
    assert db.session.query(Transaction).filter_by(category=TransactionCategory.MEMBER_WITHDRAWAL).count() == 0


def test_withdrawal_locks_before_reading_balance(admin_client, monkeypatch):
    _deposit(admin_client, amount=30000)
    calls = []
    lock = member_service.begin_write_transaction
    balance = member_service.get_member_balance

    def locking():
        calls.append("lock")
        lock()

    def reading(name):
        calls.append("balance")
        return balance(name)

    monkeypatch.setattr(member_service, "begin_write_transaction", locking)
    monkeypatch.setattr(member_service, "get_member_balance", reading)

    assert _withdraw(admin_client, amount=20000).status_code == 201
    assert _withdraw(admin_client, amount=20000).status_code == 400
    assert calls == ["lock", "balance", "lock", "balance"]
    assert balance("Pak Ahmad") == 10000

def test_balances_are_per_member(admin_client):
    _deposit(admin_client, "Pak Ahmad", 100000)
    _deposit(admin_client, "Bu Siti", 250000)
    _withdraw(admin_client, "Pak Ahmad", 25000)

    items = admin_client.get("/api/members/balances").get_json()["items"]
    assert [(m["member_name"], m["balance"]) for m in items] == [("Bu Siti", 250000), ("Pak Ahmad", 75000)]
    ahmad = items[1]
    assert ahmad["transaction_count"] == 2
    assert ahmad["last_transaction_at"].endswith("Z")


def test_stats_and_listing(admin_client):
    _deposit(admin_client, "Pak Ahmad", 100000)
    _deposit(admin_client, "Bu Siti", 50000)
    _withdraw(admin_client, "Pak Ahmad", 20000)

    stats = admin_client.get("/api/members/stats").get_json()
    assert stats == {
        "total_deposits": 2,
        "total_withdrawals": 1,
        "total_deposit_amount": 150000,
        "total_withdrawal_amount": 20000,
        "balance": 130000,
    }

    deposits = admin_client.get("/api/members/transactions?type=deposit").get_json()
    assert deposits["total"] == 2
    ahmad = admin_client.get("/api/members/transactions?member_name=ahmad").get_json()
    assert ahmad["total"] == 2


def test_amount_must_be_positive(admin_client):
    assert _deposit(admin_client, amount=0).status_code == 400


def test_kasir_has_no_member_access(client, login):
    login(Role.KASIR)
    assert client.get("/api/members/stats").status_code == 403
    assert _deposit(client).status_code == 403
