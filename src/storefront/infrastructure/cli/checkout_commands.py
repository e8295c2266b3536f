"""CLI commands for checkout pricing and order submission."""

from __future__ import annotations

import json

import click

from storefront.application.checkout_summary import CheckoutSummaryHandler
from storefront.application.dto import CheckoutSummaryDTO
from storefront.application.order_payload import OrderPayloadHandler
from storefront.domain.exceptions import DomainException
from storefront.domain.model.address import Address
from storefront.domain.model.remote_cart import PaymentMethod
from storefront.infrastructure.bootstrap import CheckoutSession, run_session
from storefront.infrastructure.cli.cart_commands import display_cart

payment_option = click.option(
    "--payment",
    type=click.Choice([m.value for m in PaymentMethod]),
    default=PaymentMethod.CARD.value,
    show_default=True,
    help="Payment method used for pricing.",
)


def address_options(func):
    """Attach one option per address field."""
    fields = [
        ("--first-name", "first_name", True),
        ("--last-name", "last_name", True),
        ("--address", "address_1", True),
        ("--address-2", "address_2", False),
        ("--city", "city", True),
        ("--state", "state", True),
        ("--postcode", "postcode", True),
        ("--country", "country", False),
        ("--email", "email", False),
        ("--phone", "phone", True),
    ]
    for flag, dest, required in reversed(fields):
        if required:
            func = click.option(flag, dest, required=True)(func)
        else:
            default = "IN" if dest == "country" else ""
            func = click.option(flag, dest, default=default, show_default=bool(default))(func)
    return func


def display_summary(dto: CheckoutSummaryDTO) -> None:
    """Shared formatting for the checkout summary."""
    display_cart(dto.cart)
    if dto.cart.lines:
        click.echo()

    symbol = dto.currency_symbol
    source = "store" if dto.priced_remotely else "local estimate"
    click.echo(f"Payment: {dto.payment_method}  (priced by {source})")

    if dto.shipping_rates:
        click.echo("Shipping options:")
        for rate in dto.shipping_rates:
            marker = "*" if rate.selected else " "
            click.echo(f"  {marker} {rate.name:<28} {symbol} {rate.price:>10}")

    for coupon in dto.coupons:
        click.echo(f"  Coupon {coupon.code:<21} -{symbol} {coupon.discount:>9}")

    click.echo(f"  {'-'*44}")
    click.echo(f"  {'Subtotal':<28} {symbol} {dto.subtotal:>12}")
    click.echo(f"  {'Shipping':<28} {dto.shipping:>14}")
    if dto.cod_fee is not None:
        click.echo(f"  {'COD Fee':<28} {symbol} {dto.cod_fee:>12}")
    if dto.discount != "0.00":
        click.echo(f"  {'Discount':<28} -{symbol} {dto.discount:>11}")
    click.echo(f"  {'-'*44}")
    click.echo(f"  {'Total':<28} {symbol} {dto.total:>12}")


@click.command("summary")
@payment_option
def checkout_summary(payment: str) -> None:
    """Show the priced checkout summary."""

    async def action(session: CheckoutSession):
        return await CheckoutSummaryHandler(session.pricer).handle(PaymentMethod(payment))

    display_summary(run_session(action))


@click.command("address")
@payment_option
@address_options
def checkout_address(payment: str, **fields: str) -> None:
    """Send the shipping address and show the updated summary."""
    address = Address(**fields)

    async def action(session: CheckoutSession):
        await session.address_gate.submit(address)
        return await CheckoutSummaryHandler(session.pricer).handle(PaymentMethod(payment))

    try:
        dto = run_session(action)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_summary(dto)


@click.command("payload")
@payment_option
@address_options
@click.option("--customer-id", type=int, default=None, help="Signed-in customer ID.")
def checkout_payload(payment: str, customer_id: int | None, **fields: str) -> None:
    """Print the order payload for the current cart as JSON."""
    address = Address(**fields)

    async def action(session: CheckoutSession):
        handler = OrderPayloadHandler(session.pricer)
        return await handler.handle(PaymentMethod(payment), address, customer_id)

    try:
        payload = run_session(action)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
