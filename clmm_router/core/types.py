"""
Core types for the routing engine.

Domain models shared by the fetchers and routing packages: tokens, pools,
routes, quotes, cache entries, diagnostics and positions. All of them are
immutable once built; derived values are produced by building a new instance.
"""

import time
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Tuple

from eth_utils import is_hex_address

from .errors import InvalidAmount, QuoteError, RouteValidationError
from .v3_math import FEE_TICK_SPACING, tick_spacing_for_fee, tick_to_price

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
MAX_UINT128 = (1 << 128) - 1
MAX_UINT160 = (1 << 160) - 1


def normalize_address(address: str) -> str:
    """Lowercase a 20-byte hex address, rejecting anything else."""
    if not isinstance(address, str):
        raise ValueError(f"Address must be a hex string: {address!r}")
    normalized = address.strip().lower()
    if not normalized.startswith("0x") or not is_hex_address(normalized):
        raise ValueError(f"Invalid address: {address}")
    return normalized


def parse_amount(value: Any, decimals: int) -> int:
    """
    Convert a human amount into raw token units.

    Digits beyond the token's precision are truncated.

    Args:
        value: Amount as str, int or Decimal ("1.5", 2, Decimal("0.1"))
        decimals: Token decimals

    Returns:
        Raw integer amount

    Raises:
        InvalidAmount: If the value is unparsable or not strictly positive
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmount(value=value)
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmount(value=value)
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmount(value=value)

    raw = int((amount * (Decimal(10) ** decimals)).to_integral_value(rounding=ROUND_DOWN))
    if raw <= 0:
        raise InvalidAmount(f"Amount {value} is below the smallest unit", value=value)
    return raw


def format_amount(raw: int, decimals: int) -> Decimal:
    """Raw token units as a human Decimal."""
    return Decimal(raw).scaleb(-decimals)


class FeeTier(IntEnum):
    """Enabled fee tiers, in hundredths of a basis point."""

    LOWEST = 100
    LOW = 500
    MEDIUM = 3000
    HIGH = 10000

    @property
    def tick_spacing(self) -> int:
        return FEE_TICK_SPACING[int(self)]

    @property
    def percent(self) -> Decimal:
        return Decimal(int(self)) / Decimal(10000)


@dataclass(frozen=True)
class Token:
    """
    ERC20 token metadata.

    Identity is the lowercased address; symbol and name are informational.
    """

    address: str
    symbol: str = field(default="", compare=False)
    name: str = field(default="", compare=False)
    decimals: int = field(default=18, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "address", normalize_address(self.address))
        if not isinstance(self.decimals, int) or not 0 <= self.decimals <= 255:
            raise ValueError(f"Token decimals must be 0-255, got {self.decimals}")

    @property
    def label(self) -> str:
        """Symbol, or a shortened address when the symbol is unknown."""
        return self.symbol or f"{self.address[:6]}..."


@dataclass(frozen=True)
class Pool:
    """
    Concentrated-liquidity pool state.

    Attributes:
        address: Pool contract address
        token0: Token with the lower address
        token1: Token with the higher address
        fee: Fee tier in hundredths of a bip
        liquidity: In-range liquidity (uint128)
        sqrt_price_x96: Current sqrt price (Q96)
        tick: Current tick
    """

    address: str
    token0: Token
    token1: Token
    fee: int
    liquidity: int = 0
    sqrt_price_x96: int = 0
    tick: int = 0

    def __post_init__(self):
        object.__setattr__(self, "address", normalize_address(self.address))
        if not self.token0.address < self.token1.address:
            raise ValueError(
                f"Pool {self.address} tokens out of order: "
                f"{self.token0.address} must sort before {self.token1.address}"
            )
        if not 0 <= self.liquidity <= MAX_UINT128:
            raise ValueError(f"Pool {self.address} liquidity out of uint128 range")
        if not 0 <= self.sqrt_price_x96 <= MAX_UINT160:
            raise ValueError(f"Pool {self.address} sqrtPriceX96 out of range")

    @classmethod
    def create(
        cls,
        address: str,
        token_a: Token,
        token_b: Token,
        fee: int,
        liquidity: int = 0,
        sqrt_price_x96: int = 0,
        tick: int = 0,
    ) -> "Pool":
        """Build a pool from tokens in any order."""
        token0, token1 = sorted((token_a, token_b), key=lambda token: token.address)
        return cls(address, token0, token1, fee, liquidity, sqrt_price_x96, tick)

    @property
    def is_liquid(self) -> bool:
        """Pools with zero liquidity are tracked but never routed through."""
        return self.liquidity > 0 and self.sqrt_price_x96 > 0

    @property
    def tick_spacing(self) -> int:
        return tick_spacing_for_fee(self.fee)

    @property
    def tokens(self) -> Tuple[Token, Token]:
        return self.token0, self.token1

    def contains(self, token: Token) -> bool:
        return token == self.token0 or token == self.token1

    def other(self, token: Token) -> Token:
        """The token on the other side of the pool."""
        if token == self.token0:
            return self.token1
        if token == self.token1:
            return self.token0
        raise ValueError(f"Token {token.address} not in pool {self.address}")

    def zero_for_one(self, token_in: Token) -> bool:
        """True when swapping token0 for token1."""
        return self.other(token_in) == self.token1


class RouteKind(Enum):
    DIRECT = "direct"
    MULTI_HOP = "multi_hop"
    APPROXIMATE = "approximate"


@dataclass(frozen=True)
class Route:
    """
    Ordered pool path from token_in to token_out.

    Build through Route.direct, Route.multi_hop or Route.approximate. The
    constructor enforces the path invariants: every consecutive pool pair
    shares exactly one token, the walk starts at token_in, ends at token_out
    and never revisits a token.
    """

    kind: RouteKind
    token_in: Token
    token_out: Token
    pools: Tuple[Pool, ...]

    def __post_init__(self):
        object.__setattr__(self, "pools", tuple(self.pools))
        if not self.pools:
            raise RouteValidationError("Route must contain at least one pool")
        if self.token_in == self.token_out:
            raise RouteValidationError("Route input and output tokens must differ")
        if self.kind is not RouteKind.MULTI_HOP and len(self.pools) != 1:
            raise RouteValidationError(f"{self.kind.value} route must have exactly one pool")
        object.__setattr__(self, "_path", self._walk())

    @classmethod
    def direct(cls, token_in: Token, token_out: Token, pool: Pool) -> "Route":
        return cls(RouteKind.DIRECT, token_in, token_out, (pool,))

    @classmethod
    def multi_hop(cls, token_in: Token, token_out: Token, pools) -> "Route":
        return cls(RouteKind.MULTI_HOP, token_in, token_out, tuple(pools))

    @classmethod
    def approximate(cls, token_in: Token, token_out: Token, pool: Pool) -> "Route":
        """Single-pool route whose output was estimated from spot price."""
        return cls(RouteKind.APPROXIMATE, token_in, token_out, (pool,))

    def _walk(self) -> Tuple[Token, ...]:
        path = [self.token_in]
        current = self.token_in
        for index, pool in enumerate(self.pools):
            if not pool.contains(current):
                raise RouteValidationError(
                    f"Pool {index} ({pool.address}) does not contain {current.address}"
                )
            if index > 0:
                shared = set(pool.tokens) & set(self.pools[index - 1].tokens)
                if len(shared) != 1:
                    raise RouteValidationError(
                        f"Pools {index - 1} and {index} must share exactly one token"
                    )
            current = pool.other(current)
            if current in path:
                raise RouteValidationError(f"Route revisits token {current.address}")
            path.append(current)
        if current != self.token_out:
            raise RouteValidationError(
                f"Route ends at {current.address}, expected {self.token_out.address}"
            )
        return tuple(path)

    @property
    def token_path(self) -> Tuple[Token, ...]:
        """Tokens visited in order, token_in first."""
        return self._path

    @property
    def hops(self) -> int:
        return len(self.pools)

    @property
    def fees(self) -> Tuple[int, ...]:
        return tuple(pool.fee for pool in self.pools)

    @property
    def is_approximate(self) -> bool:
        return self.kind is RouteKind.APPROXIMATE

    def describe(self) -> str:
        """Human readable path, e.g. 'WETH -(0.05%)-> USDC'."""
        parts = [self.token_in.label]
        for pool, token in zip(self.pools, self.token_path[1:]):
            parts.append(f"-({Decimal(pool.fee) / Decimal(10000)}%)-> {token.label}")
        return " ".join(parts)


class SwapType(Enum):
    EXACT_INPUT = "exact_input"
    EXACT_OUTPUT = "exact_output"


@dataclass(frozen=True)
class Quote:
    """
    Priced route for a specific input amount.

    amount_in and amount_out are raw token units; price is the human amount
    of token_out received per unit of token_in.
    """

    route: Route
    amount_in: int
    amount_out: int
    gas_estimate: int
    source: str
    price_impact: Decimal = Decimal(0)
    quoted_at: float = field(default_factory=time.time, compare=False)

    @classmethod
    def from_route(
        cls, route: Route, amount_in: int, amount_out: int, gas_estimate: int, source: str
    ) -> "Quote":
        return cls(route, amount_in, amount_out, gas_estimate, source)

    @property
    def token_in(self) -> Token:
        return self.route.token_in

    @property
    def token_out(self) -> Token:
        return self.route.token_out

    @property
    def fee_tier(self) -> int:
        return self.route.pools[0].fee

    @property
    def pool_address(self) -> str:
        """Address of the first-hop pool."""
        return self.route.pools[0].address

    @property
    def price(self) -> Decimal:
        if self.amount_in == 0:
            return Decimal(0)
        return format_amount(self.amount_out, self.token_out.decimals) / format_amount(
            self.amount_in, self.token_in.decimals
        )

    @property
    def is_approximate(self) -> bool:
        return self.route.is_approximate

    def with_price_impact(self, price_impact: Decimal) -> "Quote":
        return replace(self, price_impact=price_impact)


@dataclass(frozen=True)
class SwapOptions:
    """
    Caller-supplied swap parameters.

    Attributes:
        recipient: Address receiving token_out
        slippage: Tolerance in percent (0.5 = 0.5%)
        deadline: Absolute unix timestamp
        swap_type: Only EXACT_INPUT is routed
    """

    recipient: str = ZERO_ADDRESS
    slippage: Decimal = Decimal("0.5")
    deadline: int = 0
    swap_type: SwapType = SwapType.EXACT_INPUT

    def __post_init__(self):
        object.__setattr__(self, "recipient", normalize_address(self.recipient))
        object.__setattr__(self, "slippage", Decimal(str(self.slippage)))
        if not Decimal(0) <= self.slippage < Decimal(100):
            raise ValueError(f"Slippage must be within [0, 100), got {self.slippage}")

    @classmethod
    def create(
        cls,
        recipient: str = ZERO_ADDRESS,
        slippage: Any = "0.5",
        deadline_minutes: int = 20,
        now: Optional[float] = None,
        swap_type: SwapType = SwapType.EXACT_INPUT,
    ) -> "SwapOptions":
        """Build options with a deadline relative to now."""
        now = time.time() if now is None else now
        return cls(recipient, Decimal(str(slippage)), int(now) + deadline_minutes * 60, swap_type)

    @property
    def slippage_bps(self) -> int:
        """Slippage in whole basis points, truncated."""
        return int((self.slippage * 100).to_integral_value(rounding=ROUND_DOWN))


@dataclass(frozen=True)
class ExecutionParameters:
    """Ready-to-submit router call for a route."""

    router: str
    calldata: str
    value: int
    recipient: str
    deadline: int
    slippage_bps: int
    amount_out_minimum: int
    generated_at: float = field(default_factory=time.time, compare=False)


@dataclass(frozen=True)
class CacheSignature:
    """Full input signature of a quote request."""

    token_in: str
    token_out: str
    amount_in: int
    recipient: str
    slippage_bps: int
    deadline: int

    @classmethod
    def from_request(
        cls, token_in: Token, token_out: Token, amount_in: int, options: SwapOptions
    ) -> "CacheSignature":
        return cls(
            token_in.address,
            token_out.address,
            amount_in,
            options.recipient,
            options.slippage_bps,
            options.deadline,
        )

    @property
    def route_key(self) -> Tuple[str, str, int]:
        """Part of the signature that determines the path topology."""
        return self.token_in, self.token_out, self.amount_in


@dataclass(frozen=True)
class RouteCacheEntry:
    signature: CacheSignature
    route: Route
    quote: Quote
    execution: ExecutionParameters
    created_at: float = field(default_factory=time.time, compare=False)

    def is_expired(self, now: Optional[float] = None, ttl: float = 60) -> bool:
        """True once the quote is older than ttl seconds."""
        now = time.time() if now is None else now
        return now - self.quote.quoted_at >= ttl


class CacheOutcome(Enum):
    EXACT_HIT = "exact_hit"
    PARTIAL_HIT = "partial_hit"
    MISS = "miss"


class DiagnosticReason(Enum):
    DIRECT_POOL_INSUFFICIENT = "direct_pool_insufficient_liquidity"
    NEITHER_TOKEN_LISTED = "neither_token_listed"
    TOKEN_IN_UNLISTED = "token_in_unlisted"
    TOKEN_OUT_UNLISTED = "token_out_unlisted"
    DRY_INTERMEDIATES = "no_intermediate_with_dry_candidates"
    NO_INTERMEDIATE = "no_intermediate_found"
    MULTIHOP_UNRESOLVED = "multihop_exists_but_unresolved"
    UNABLE_TO_DIAGNOSE = "unable_to_diagnose"


@dataclass(frozen=True)
class RouteDiagnostic:
    """Explanation of why no route could be found."""

    has_direct_pool: bool
    pools_with_token_in: int
    pools_with_token_out: int
    pools_with_token_in_no_liquidity: int
    pools_with_token_out_no_liquidity: int
    intermediate_tokens: Tuple[Token, ...]
    dry_intermediate_tokens: Tuple[Token, ...]
    possible_paths: Tuple[Tuple[str, ...], ...]
    reason_code: DiagnosticReason
    reason: str
    suggestions: Tuple[str, ...]

    @property
    def multihop_resolvable(self) -> bool:
        """A liquid intermediate connects both tokens."""
        return bool(self.intermediate_tokens)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_direct_pool": self.has_direct_pool,
            "pools_with_token_in": self.pools_with_token_in,
            "pools_with_token_out": self.pools_with_token_out,
            "pools_with_token_in_no_liquidity": self.pools_with_token_in_no_liquidity,
            "pools_with_token_out_no_liquidity": self.pools_with_token_out_no_liquidity,
            "intermediate_tokens": [token.label for token in self.intermediate_tokens],
            "dry_intermediate_tokens": [token.label for token in self.dry_intermediate_tokens],
            "possible_paths": [list(path) for path in self.possible_paths],
            "reason_code": self.reason_code.value,
            "reason": self.reason,
            "suggestions": list(self.suggestions),
        }


@dataclass(frozen=True)
class Position:
    """
    Liquidity position range.

    Prices are optional; when absent they are derived from the ticks. fee
    selects the tick spacing used for full-range detection.
    """

    tick_lower: int
    tick_upper: int
    current_tick: int
    tokens_owed0: int = 0
    tokens_owed1: int = 0
    decimals0: int = 18
    decimals1: int = 18
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    current_price: Optional[float] = None
    fee: Optional[int] = None

    def __post_init__(self):
        if not self.tick_lower < self.tick_upper:
            raise ValueError(
                f"tick_lower ({self.tick_lower}) must be below tick_upper ({self.tick_upper})"
            )

    @property
    def resolved_price_min(self) -> float:
        if self.price_min is not None:
            return self.price_min
        return tick_to_price(self.tick_lower, self.decimals0, self.decimals1)

    @property
    def resolved_price_max(self) -> float:
        if self.price_max is not None:
            return self.price_max
        return tick_to_price(self.tick_upper, self.decimals0, self.decimals1)

    @property
    def resolved_current_price(self) -> float:
        if self.current_price is not None:
            return self.current_price
        return tick_to_price(self.current_tick, self.decimals0, self.decimals1)


class ImpactSeverity(Enum):
    NONE = "none"
    WARNING = "warning"
    HIGH = "high"


@dataclass(frozen=True)
class ImpactAssessment:
    price_impact: Decimal
    expected_amount_out: int
    min_amount_out: int
    min_amount_out_display: str
    suggested_slippage: Decimal
    severity: ImpactSeverity
    slippage_insufficient: bool


@dataclass(frozen=True)
class RangeMismatch:
    """Price-based and tick-based range checks disagreed."""

    price_in_range: bool
    tick_in_range: bool
    current_price: float
    price_min: float
    price_max: float
    current_tick: int
    tick_lower: int
    tick_upper: int


@dataclass(frozen=True)
class RangeResult:
    in_range: bool
    full_range: bool
    method: str
    mismatch: Optional[RangeMismatch] = None


@dataclass
class QuoteResult:
    """Result of a quote request."""

    success: bool
    quote: Optional[Quote] = None
    execution: Optional[ExecutionParameters] = None
    error: Optional[QuoteError] = None
    diagnostic: Optional[RouteDiagnostic] = None
    cache_outcome: CacheOutcome = CacheOutcome.MISS
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.metadata is None:
            self.metadata = {}

    @property
    def failed(self) -> bool:
        """Check if quoting failed."""
        return not self.success

    @property
    def is_approximate(self) -> bool:
        return self.quote is not None and self.quote.is_approximate
