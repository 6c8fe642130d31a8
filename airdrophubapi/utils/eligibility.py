from typing import Sequence

from airdrophubapi.routers.api_v1.endpoints.pydantic_schemas import (
    EligibilityResult,
    HeldToken,
    WhitelistEntry,
)


def normalize_address(address: str) -> str:
    return address.lower()


def compute_eligibility(
    held_tokens: Sequence[HeldToken], whitelist: Sequence[WhitelistEntry]
) -> EligibilityResult:
    """Match the held tokens against the active whitelist.

    Matching is case-insensitive on the token address and follows the order of
    ``held_tokens``. A held token without a whitelist entry is skipped. If the
    whitelist carries the same address twice, the first active entry wins.

    Args:
        held_tokens: tokens reported by the balance oracle for the holder.
        whitelist: whitelist snapshot, active and inactive entries alike.

    Returns:
        EligibilityResult with ``claimed`` left as False.
    """
    active_whitelist: dict[str, WhitelistEntry] = {}
    for entry in whitelist:
        if entry.is_active:
            active_whitelist.setdefault(normalize_address(entry.address), entry)

    eligible_tokens = []
    total_airdrop_amount = 0
    for held_token in held_tokens:
        entry = active_whitelist.get(normalize_address(held_token.address))
        if entry is not None:
            eligible_tokens.append(entry)
            total_airdrop_amount += entry.airdrop_amount

    return EligibilityResult(
        is_eligible=len(eligible_tokens) > 0,
        eligible_tokens=eligible_tokens,
        total_airdrop_amount=total_airdrop_amount,
        claimed=False,
    )
