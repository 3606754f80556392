#!/usr/bin/env python3
"""
Launchpad - Local Launch Simulation

Runs a full token lifecycle against the in-memory ledger and venue:

    create -> buy -> sell -> buy past the threshold -> graduation

and prints the curve state after every step. Amounts are given in whole
tokens and converted to the configured fixed-point scale.
"""

import argparse
import asyncio
import sys
from decimal import Decimal

from launchpad import (
    ConstantProductVenue,
    CurveParameters,
    FixedClock,
    InMemoryLedger,
    LaunchpadError,
    TokenRegistry,
    get_launchpad_config,
)
from launchpad.curve import BondingCurveToken
from launchpad.models import new_address
from launchpad.monitoring import bind_context, clear_context, configure_logging


def fmt(amount: int, scale: int) -> str:
    return f"{Decimal(amount) / Decimal(scale):.6f}"


def print_state(token: BondingCurveToken, scale: int) -> None:
    info = token.get_info()
    print(f"   price:       {fmt(info.price, scale)}")
    print(f"   supply:      {fmt(info.supply, scale)}")
    print(f"   market cap:  {fmt(info.market_cap, scale)}")
    print(f"   progress:    {info.progress_bps / 100:.2f}%  (remaining {fmt(info.remaining, scale)})")
    print(f"   raised:      {fmt(token.total_raised, scale)}")
    print(f"   graduated:   {info.graduated}")
    if info.pool_address:
        print(f"   pool:        {info.pool_address}")


async def buy(token: BondingCurveToken, buyer: str, amount: int, scale: int) -> None:
    cost = token.get_buy_cost(amount)
    buy_fee_bps, _ = token.get_trading_fees()
    payment = cost + cost * buy_fee_bps // 10_000 + cost // 100
    result = await token.buy(buyer, amount, payment)
    print(
        f"\nBought {fmt(result.minted, scale)} for {fmt(result.cost, scale)} "
        f"(fee {fmt(result.fee, scale)}, refund {fmt(result.refund, scale)})"
    )
    if result.graduated:
        print("   -> graduation triggered")


async def main(args: argparse.Namespace) -> int:
    config = get_launchpad_config()
    configure_logging(level=args.log_level or config.log_level, json_output=config.json_logs)
    scale = config.fixed_point_scale
    unit = scale

    print("=" * 60)
    print("Launchpad - Local Launch Simulation")
    print("=" * 60)

    admin, creator, alice, bob = (new_address() for _ in range(4))
    clock = FixedClock()
    settlement = InMemoryLedger(config.settlement_asset)
    venue = ConstantProductVenue([settlement], clock=clock)
    registry = TokenRegistry(owner=admin, settlement=settlement, venue=venue, clock=clock)

    for account in (creator, alice, bob):
        await settlement.mint(account, args.funding * unit)

    params = CurveParameters(
        slope=args.slope,
        base_price=args.base_price,
        graduation_threshold=args.threshold,
        scale=scale,
    )

    try:
        token = await registry.create_token(
            creator, args.name, args.symbol, params, payment=registry.creation_fee
        )
        bind_context(simulation_token=token.address)
        print(f"\nCreated {token.symbol} at {token.address}")
        print(f"   creation fee: {fmt(registry.creation_fee, scale)}")
        print_state(token, scale)

        await buy(token, alice, args.first_buy * unit, scale)
        print_state(token, scale)

        sell_amount = args.sell * unit
        quote = token.get_sell_proceeds(sell_amount)
        sale = await token.sell(alice, sell_amount, min_proceeds=quote)
        print(f"\nSold {fmt(sale.burned, scale)} for {fmt(sale.net_proceeds, scale)} net")
        print_state(token, scale)

        await buy(token, bob, args.second_buy * unit, scale)
        print_state(token, scale)

        if not token.has_graduated and args.force:
            result = await registry.trigger_graduation(admin, token.address)
            print(f"\nForced graduation into {result.pool_address}")
            print_state(token, scale)
    except LaunchpadError as e:
        print(f"\nSimulation failed: {type(e).__name__}: {e}")
        return 1
    finally:
        clear_context()

    print("\n" + "=" * 60)
    print(f"Tokens created:        {registry.get_token_count()}")
    print(f"Total fees collected:  {fmt(registry.total_fees_collected, scale)}")
    print(f"Creator balance:       {fmt(settlement.balance_of(creator), scale)}")
    if token.pool_address:
        pool = venue.get_pool(token.pool_address)
        print(f"Pool reserves:         {fmt(pool.reserve0, scale)} / {fmt(pool.reserve1, scale)}")
    print("=" * 60)
    return 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate a bonding-curve launch locally")
    parser.add_argument("--name", default="Launch Token")
    parser.add_argument("--symbol", default="LCH")
    parser.add_argument("--slope", type=int, default=10**14, help="Slope in fixed-point units")
    parser.add_argument("--base-price", type=int, default=10**15, help="Base price in fixed-point units")
    parser.add_argument("--threshold", type=int, default=5 * 10**17, help="Graduation market cap")
    parser.add_argument("--funding", type=int, default=10, help="Settlement units given to each account")
    parser.add_argument("--first-buy", type=int, default=20, help="Whole tokens bought first")
    parser.add_argument("--sell", type=int, default=5, help="Whole tokens sold back")
    parser.add_argument("--second-buy", type=int, default=60, help="Whole tokens bought second")
    parser.add_argument("--force", action="store_true", help="Force graduation if still active")
    parser.add_argument("--log-level", default=None)
    return parser.parse_args(argv)


if __name__ == "__main__":
    exit_code = asyncio.run(main(parse_args()))
    sys.exit(exit_code)
