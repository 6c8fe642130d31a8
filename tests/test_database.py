import pytest

from airdrophubapi.db.models.dbmodels import ClaimStatus
from airdrophubapi.routers.api_v1.endpoints import pydantic_schemas
from airdrophubapi.utils.database import Database
from airdrophubapi.utils.exception import (
    DuplicateWhitelistToken,
    InvalidClaimTransition,
    InvalidWhitelistToken,
)
from tests.utils.helpers import build_engine, build_session, whitelist_create


@pytest.fixture
def database():
    engine = build_engine()
    session = build_session(engine)
    yield Database(session)
    session.close()
    engine.dispose()


def test_add_and_list_whitelist(database):
    database.addToWhitelist(whitelist_create("0xAAA", 100, symbol="AAA"))
    database.addToWhitelist(whitelist_create("0xBBB", 50, symbol="BBB", is_active=False))

    whitelist = database.getWhitelist()
    assert {t.symbol for t in whitelist} == {"AAA", "BBB"}
    assert all(t.id is not None and t.created_at is not None for t in whitelist)
    assert [t.symbol for t in database.listActiveWhitelist()] == ["AAA"]


@pytest.mark.parametrize(
    "duplicate",
    ["0xAAA", "0xaaa", " 0xAaA "],
    ids=["same_case", "lower_case", "mixed_case_padded"],
)
def test_whitelist_address_is_unique_regardless_of_case(database, duplicate):
    database.addToWhitelist(whitelist_create("0xAAA", 100))

    with pytest.raises(DuplicateWhitelistToken):
        database.addToWhitelist(whitelist_create(duplicate, 10))

    assert len(database.getWhitelist()) == 1


def test_update_whitelist_token(database):
    token = database.addToWhitelist(whitelist_create("0xAAA", 100))

    updated = database.updateWhitelistToken(
        token.id, pydantic_schemas.WhitelistTokenUpdate(airdrop_amount=250, is_active=False)
    )

    assert updated.airdrop_amount == 250
    assert updated.is_active is False
    assert updated.address == "0xAAA"


def test_update_to_taken_address_is_rejected(database):
    database.addToWhitelist(whitelist_create("0xAAA", 100))
    other = database.addToWhitelist(whitelist_create("0xBBB", 100))

    with pytest.raises(DuplicateWhitelistToken):
        database.updateWhitelistToken(other.id, pydantic_schemas.WhitelistTokenUpdate(address="0xaaa"))


def test_update_and_remove_missing_token(database):
    assert database.updateWhitelistToken(42, pydantic_schemas.WhitelistTokenUpdate(is_active=False)) is None
    assert database.removeFromWhitelist(42) is False


def test_remove_from_whitelist(database):
    token = database.addToWhitelist(whitelist_create("0xAAA", 100))

    assert database.removeFromWhitelist(token.id) is True
    assert database.getWhitelist() == []


def test_claim_lookup_is_case_insensitive(database):
    claim_id = database.createClaim(
        {"wallet_address": "0xccc", "tokens_claimed": [], "total_amount": 5, "status": ClaimStatus.pending}
    )
    assert database.hasClaimedAirdrop("0xCCC") is False

    database.updateClaim(claim_id, {"status": ClaimStatus.completed, "transaction_hash": "0x01"})

    assert database.hasClaimedAirdrop("0xCCC") is True
    assert database.findCompletedClaim("0xccc").id == claim_id


def test_update_claim_rejects_illegal_transition(database):
    claim_id = database.createClaim(
        {"wallet_address": "0xccc", "tokens_claimed": [], "total_amount": 5, "status": ClaimStatus.pending}
    )
    database.updateClaim(claim_id, {"status": ClaimStatus.completed})

    with pytest.raises(InvalidClaimTransition):
        database.updateClaim(claim_id, {"status": ClaimStatus.pending})

    assert database.getClaim(claim_id).status == ClaimStatus.completed


def test_settings_upsert(database):
    assert database.getSetting("platform_name") is None

    database.setSetting("platform_name", "AirdropHub")
    database.setSetting("platform_name", "AirdropHub v2")
    database.setSetting("airdrop_enabled", "true")

    assert database.getSetting("platform_name") == "AirdropHub v2"
    assert database.getSettings() == {"platform_name": "AirdropHub v2", "airdrop_enabled": "true"}


def test_statistics(database):
    database.addToWhitelist(whitelist_create("0xAAA", 100))
    database.addToWhitelist(whitelist_create("0xBBB", 50, is_active=False))
    completed = database.createClaim(
        {"wallet_address": "0x01", "tokens_claimed": [], "total_amount": 100, "status": ClaimStatus.pending}
    )
    database.updateClaim(completed, {"status": ClaimStatus.completed})
    database.createClaim(
        {"wallet_address": "0x02", "tokens_claimed": [], "total_amount": 40, "status": ClaimStatus.pending}
    )

    stats = database.getStatistics()

    assert stats.totalClaims == 2
    assert stats.completedClaims == 1
    assert stats.totalDistributed == 100
    assert stats.activeTokens == 1
    assert stats.totalAirdropPool == 100
    assert stats.totalWhitelistTokens == 2


def test_get_whitelist_token(database):
    token = database.addToWhitelist(whitelist_create("0xAAA", 100, symbol="AAA"))

    assert database.getWhitelistToken(token.id).symbol == "AAA"
    assert database.getWhitelistToken(token.id + 1) is None


@pytest.mark.parametrize(
    "changes",
    [{"name": ""}, {"address": "   "}, {"is_active": None}, {"airdrop_amount": -1}],
    ids=["empty_name", "blank_address", "null_is_active", "negative_amount"],
)
def test_update_that_breaks_the_entry_is_rejected(database, changes):
    token = database.addToWhitelist(whitelist_create("0xAAA", 100, symbol="AAA"))

    # Skips schema validation, the data layer checks the merged row itself
    updates = pydantic_schemas.WhitelistTokenUpdate.model_construct(_fields_set=set(changes), **changes)
    with pytest.raises(InvalidWhitelistToken):
        database.updateWhitelistToken(token.id, updates)

    assert database.getWhitelist()[0].model_dump(include={"address", "name", "airdrop_amount", "is_active"}) == {
        "address": "0xAAA",
        "name": "AAA",
        "airdrop_amount": 100,
        "is_active": True,
    }
