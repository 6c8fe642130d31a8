class AirdropHubException(Exception):
    """Generic exception"""

class NotEligible(AirdropHubException):
    """Address holds no active whitelisted token"""
class AlreadyClaimed(AirdropHubException):
    """Address already has a completed claim"""
class PersistenceError(AirdropHubException):
    """Backing store rejected a read or write"""
class SettlementError(AirdropHubException):
    """Settlement step failed, claim left pending"""
class OracleError(AirdropHubException):
    """Holdings could not be fetched from the balance oracle"""
class InvalidClaimTransition(AirdropHubException):
    """Claim status change outside the transition table"""
class DuplicateWhitelistToken(AirdropHubException):
    """Whitelist already holds this address (case-insensitive)"""
class InvalidWhitelistToken(AirdropHubException):
    """Whitelist change would leave the token without a valid address, name, symbol or amount"""
