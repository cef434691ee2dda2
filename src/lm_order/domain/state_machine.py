"""Order status state machine.

    Pending → Confirmed → Out for Delivery → Delivered
        └──────────┴──────────────┴──→ Cancelled

Delivered and Cancelled are terminal under every policy. The policy only
decides what a non-terminal order may move to:

  permissive  any status (including its current one)
  strict      its current status, a later status on the chain, or Cancelled

Persistence uses ``allowed_sources(target)`` inside the conditional UPDATE,
so the check and the write happen in one statement.
"""

from src.lm_common.enums import OrderStatus, TransitionPolicy
from src.lm_common.errors import InvalidOrderStatusError

_CHAIN: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)

TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.CANCELLED}
)

NON_TERMINAL_STATUSES: tuple[OrderStatus, ...] = tuple(
    s for s in OrderStatus if s not in TERMINAL_STATUSES
)


def parse_status(value: str) -> OrderStatus:
    """Map a raw status string onto the enum; unknown values are rejected."""
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidOrderStatusError(value) from None


def is_terminal(status: OrderStatus | str) -> bool:
    return OrderStatus(status) in TERMINAL_STATUSES


def can_transition(
    current: OrderStatus | str,
    target: OrderStatus | str,
    policy: TransitionPolicy = TransitionPolicy.PERMISSIVE,
) -> bool:
    current, target = OrderStatus(current), OrderStatus(target)
    if current in TERMINAL_STATUSES:
        return False
    if policy == TransitionPolicy.PERMISSIVE:
        return True
    if target == OrderStatus.CANCELLED or target == current:
        return True
    return _CHAIN.index(target) > _CHAIN.index(current)


def allowed_sources(
    target: OrderStatus | str,
    policy: TransitionPolicy = TransitionPolicy.PERMISSIVE,
) -> list[str]:
    """Every status from which ``target`` may be reached, as stored values."""
    return [s.value for s in NON_TERMINAL_STATUSES if can_transition(s, target, policy)]
