"""CLI commands for coupons on the remote cart."""

from __future__ import annotations

import click

from storefront.infrastructure.bootstrap import CheckoutSession, run_session


@click.command("apply")
@click.argument("code")
def coupon_apply(code: str) -> None:
    """Apply a coupon code."""

    async def action(session: CheckoutSession):
        return await session.coupons.apply(code)

    if run_session(action) is None:
        raise SystemExit(1)


@click.command("remove")
@click.argument("code")
def coupon_remove(code: str) -> None:
    """Remove an applied coupon."""

    async def action(session: CheckoutSession):
        return await session.coupons.remove(code)

    if run_session(action) is None:
        raise SystemExit(1)


@click.command("list")
def coupon_list() -> None:
    """List coupons the store is promoting."""

    async def action(session: CheckoutSession):
        return await session.coupons.list_available()

    coupons = run_session(action)
    if not coupons:
        click.echo("No coupons available.")
        return

    click.echo(f"  {'Code':<16} {'Amount':>10}  {'Description'}")
    click.echo(f"  {'-'*50}")
    for coupon in coupons:
        amount = coupon.amount
        if coupon.discount_type == "percent":
            amount = f"{amount}%"
        click.echo(f"  {coupon.code:<16} {amount:>10}  {coupon.description}")
