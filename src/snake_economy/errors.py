"""
errors.py: Error kinds raised by the game economy engine.

Every failed operation raises exactly one of these and leaves no state behind.
"""


class SnakeGameError(Exception):
    """Base for all engine failures."""

    kind = "SnakeGameError"

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_message(self) -> dict:
        """Reply payload used by the network server."""
        return {"type": self.kind, "message": self.message}


class NoGameCredits(SnakeGameError):
    kind = "NoGameCredits"


class GameAlreadyStarted(SnakeGameError):
    kind = "GameAlreadyStarted"


class GameNotStarted(SnakeGameError):
    kind = "GameNotStarted"


class InsufficientBalance(SnakeGameError):
    kind = "InsufficientBalance"


class IncorrectAmount(SnakeGameError):
    kind = "IncorrectAmount"


class InsufficientPayment(SnakeGameError):
    kind = "InsufficientPayment"


class NoFruitTokensToClaim(SnakeGameError):
    kind = "NoFruitTokensToClaim"


class NoSnakeNftsToClaim(SnakeGameError):
    kind = "NoSnakeNftsToClaim"


class NoSuperNftToClaim(SnakeGameError):
    kind = "NoSuperNftToClaim"


class Unauthorized(SnakeGameError):
    kind = "Unauthorized"


class EthWithdrawalFailed(SnakeGameError):
    kind = "EthWithdrawalFailed"


class AirdropAlreadyClaimed(SnakeGameError):
    kind = "AirdropAlreadyClaimed"


class TransferRejected(SnakeGameError):
    """A native-currency recipient refused the transfer."""

    kind = "TransferRejected"


def require_amount(amount, what: str = "amount") -> int:
    """Rejects anything that is not a positive integer."""
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise IncorrectAmount(f"{what} must be a positive integer, got {amount!r}")
    return amount


ERROR_KINDS = {
    cls.kind: cls
    for cls in (
        NoGameCredits,
        GameAlreadyStarted,
        GameNotStarted,
        InsufficientBalance,
        IncorrectAmount,
        InsufficientPayment,
        NoFruitTokensToClaim,
        NoSnakeNftsToClaim,
        NoSuperNftToClaim,
        Unauthorized,
        EthWithdrawalFailed,
        AirdropAlreadyClaimed,
        TransferRejected,
    )
}
