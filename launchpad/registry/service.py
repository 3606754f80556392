"""
Token Registry

Factory and index of bonding-curve instances. The registry:

- charges the creation fee and deploys new instances with the current
  default fee configuration;
- lists instances overall and per creator, with per-token info records;
- is the privileged caller of every instance it creates: only through the
  registry (and its owner) can graduation be forced or trading fees changed;
- manages the platform fee collector, propagating changes to every instance.

Each instance gets its own asset ledger keyed by the instance address and
an access gate owned by the registry owner. The registry and all of its
instances share one reentrancy guard, so token creation never interleaves
with a trade that could still be rolled back.
"""

import structlog

from ..access.gate import InMemoryAccessGate
from ..clock import Clock, SystemClock
from ..config import LaunchpadConfig, get_launchpad_config
from ..curve.token import BondingCurveToken
from ..errors import InsufficientFunds, UnauthorizedError, ValidationError
from ..fees.ledger import FeeConfig
from ..ledger.atomic import atomic
from ..ledger.base import FungibleLedger
from ..ledger.memory import InMemoryLedger
from ..models.base import new_address
from ..models.curve import CurveParameters
from ..models.records import GraduationResult, TokenRecord
from ..trading.guard import ReentrancyGuard
from ..venue.base import LiquidityVenue

logger = structlog.get_logger(__name__)


class TokenRegistry:
    """
    Creates and tracks bonding-curve tokens.

    Example:
        ```python
        registry = TokenRegistry(owner=admin, settlement=weth, venue=venue)
        token = await registry.create_token(
            creator, "Launch", "LCH", params, payment=registry.creation_fee
        )
        ```
    """

    def __init__(
        self,
        *,
        owner: str,
        settlement: FungibleLedger,
        venue: LiquidityVenue,
        fee_collector: str | None = None,
        clock: Clock | None = None,
        config: LaunchpadConfig | None = None,
        address: str | None = None,
    ):
        if not owner:
            raise ValidationError("Registry owner address is required")

        self.config = config or get_launchpad_config()
        self._address = address or new_address()
        self._owner = owner
        self._settlement = settlement
        self._venue = venue
        self._clock = clock or SystemClock()
        self._fee_collector = fee_collector or owner
        self._creation_fee = self.config.creation_fee
        self._default_fees = FeeConfig(
            buy_fee_bps=self.config.default_buy_fee_bps,
            sell_fee_bps=self.config.default_sell_fee_bps,
            liquidity_bps=self.config.default_liquidity_bps,
            creator_bps=self.config.default_creator_bps,
            platform_bps=self.config.default_platform_bps,
        )

        self._tokens: dict[str, BondingCurveToken] = {}
        self._records: dict[str, TokenRecord] = {}
        self._by_creator: dict[str, list[str]] = {}
        self._creation_fees_collected = 0
        self._guard = ReentrancyGuard.shared(settlement, venue)

        logger.info(
            "token_registry_initialized",
            registry=self._address,
            owner=owner,
            creation_fee=self._creation_fee,
        )

    @property
    def address(self) -> str:
        return self._address

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def fee_collector(self) -> str:
        return self._fee_collector

    @property
    def creation_fee(self) -> int:
        return self._creation_fee

    @property
    def total_fees_collected(self) -> int:
        """Creation fees plus trading fees routed by every instance."""
        return self._creation_fees_collected + sum(
            token.total_fees_collected for token in self._tokens.values()
        )

    def _require_owner(self, caller: str, action: str) -> None:
        if caller != self._owner:
            logger.warning("unauthorized_registry_call", caller=caller, action=action)
            raise UnauthorizedError(f"Only the registry owner may {action}")

    # ==================== Token Creation ====================

    async def create_token(
        self,
        creator: str,
        name: str,
        symbol: str,
        params: CurveParameters,
        payment: int,
    ) -> BondingCurveToken:
        """
        Deploy a new bonding-curve instance.

        Args:
            creator: Account paying the creation fee and receiving the
                creator share at graduation
            name: Token name
            symbol: Token symbol
            params: Curve slope, base price and graduation threshold
            payment: Settlement units offered for the creation fee

        Returns:
            The new instance, already listed in the registry
        """
        if not name or not name.strip():
            raise ValidationError("Token name is required")
        if not symbol or not symbol.strip():
            raise ValidationError("Token symbol is required")
        if not creator:
            raise ValidationError("Creator address is required")
        if payment < self._creation_fee:
            raise InsufficientFunds(
                f"Creation fee is {self._creation_fee}, payment was {payment}"
            )
        balance = self._settlement.balance_of(creator)
        if balance < self._creation_fee:
            raise InsufficientFunds(
                f"{creator} holds {balance}, cannot pay creation fee {self._creation_fee}"
            )

        async with (
            self._guard.hold("create_token"),
            atomic(self._settlement, operation="create_token"),
        ):
            token_address = new_address()
            asset = InMemoryLedger(token_address, symbol=symbol)
            gate = InMemoryAccessGate(owner=self._owner, privileged=[self._address])
            token = BondingCurveToken(
                name=name,
                symbol=symbol,
                creator=creator,
                params=params,
                fee_config=self._default_fees,
                fee_collector=self._fee_collector,
                gate=gate,
                asset=asset,
                settlement=self._settlement,
                venue=self._venue,
                clock=self._clock,
                config=self.config,
            )

            if self._creation_fee > 0:
                await self._settlement.transfer(creator, self._fee_collector, self._creation_fee)
                self._creation_fees_collected += self._creation_fee

            register = getattr(self._venue, "register_ledger", None)
            if register is not None:
                register(asset)

            self._tokens[token_address] = token
            self._records[token_address] = TokenRecord(
                token_address=token_address,
                name=name,
                symbol=symbol,
                slope=params.slope,
                base_price=params.base_price,
                graduation_threshold=params.graduation_threshold,
                creator=creator,
            )
            self._by_creator.setdefault(creator, []).append(token_address)

        logger.info(
            "token_created",
            token=token_address,
            symbol=symbol,
            creator=creator,
            graduation_threshold=params.graduation_threshold,
        )
        return token

    # ==================== Queries ====================

    def get_token_count(self) -> int:
        return len(self._tokens)

    def get_all_tokens(self) -> list[str]:
        return list(self._tokens)

    def get_tokens_by_creator(self, creator: str) -> list[str]:
        return list(self._by_creator.get(creator, []))

    def get_token(self, token_address: str) -> BondingCurveToken:
        token = self._tokens.get(token_address)
        if token is None:
            raise ValidationError(f"Unknown token {token_address}")
        return token

    def get_token_info(self, token_address: str) -> TokenRecord:
        """Listing record with the instance's current graduation outcome."""
        token = self.get_token(token_address)
        return self._records[token_address].model_copy(
            update={"has_graduated": token.has_graduated, "pool_address": token.pool_address}
        )

    def get_fee_distribution(self) -> tuple[int, int, int]:
        """Default (liquidity, creator, platform) split for new tokens."""
        return (
            self._default_fees.liquidity_bps,
            self._default_fees.creator_bps,
            self._default_fees.platform_bps,
        )

    def get_trading_fees(self) -> tuple[int, int]:
        """Default (buy, sell) trading fees for new tokens."""
        return self._default_fees.buy_fee_bps, self._default_fees.sell_fee_bps

    # ==================== Administration ====================

    async def trigger_graduation(self, caller: str, token_address: str) -> GraduationResult:
        """Force graduation of an instance before it reaches its threshold."""
        self._require_owner(caller, "trigger graduation")
        token = self.get_token(token_address)
        result = await token.force_graduate(self._address)
        logger.info("graduation_triggered_by_owner", token=token_address, pool=result.pool_address)
        return result

    async def update_trading_fees(
        self, caller: str, token_address: str, buy_fee_bps: int, sell_fee_bps: int
    ) -> None:
        self._require_owner(caller, "update trading fees")
        token = self.get_token(token_address)
        await token.update_trading_fees(self._address, buy_fee_bps, sell_fee_bps)

    def set_default_fee_config(self, caller: str, fee_config: FeeConfig) -> None:
        """Replace the fee configuration used for tokens created from now on."""
        self._require_owner(caller, "set the default fee config")
        self._default_fees = FeeConfig(**fee_config.model_dump())
        logger.info("default_fee_config_updated", **fee_config.model_dump())

    def set_creation_fee(self, caller: str, creation_fee: int) -> None:
        self._require_owner(caller, "set the creation fee")
        if creation_fee < 0:
            raise ValidationError("Creation fee cannot be negative")
        self._creation_fee = creation_fee
        logger.info("creation_fee_updated", creation_fee=creation_fee)

    async def set_fee_collector(self, caller: str, fee_collector: str) -> None:
        """Change the platform fee collector here and on every instance."""
        self._require_owner(caller, "set the fee collector")
        if not fee_collector:
            raise ValidationError("Fee collector address is required")
        for token in self._tokens.values():
            await token.set_fee_collector(self._address, fee_collector)
        self._fee_collector = fee_collector
        logger.info("fee_collector_updated", fee_collector=fee_collector)
