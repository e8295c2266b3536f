"""CLI commands for the local cart."""

from __future__ import annotations

import click

from storefront.application.add_to_cart import AddToCartHandler
from storefront.application.clear_cart import ClearCartHandler
from storefront.application.dto import CartDTO
from storefront.application.remove_from_cart import RemoveFromCartHandler
from storefront.application.show_cart import ShowCartHandler
from storefront.application.update_cart_quantity import UpdateCartQuantityHandler
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import (
    ledger_repository,
    notifier,
    product_repository,
)


def _parse_attributes(raw: tuple[str, ...]) -> dict[str, str]:
    """Parse ('Size=M', 'Color=Red') into an attribute map."""
    attributes: dict[str, str] = {}
    for pair in raw:
        if "=" not in pair:
            raise click.BadParameter(
                f"Invalid attribute '{pair}'. Expected 'Name=Value'."
            )
        name, value = pair.split("=", 1)
        attributes[name.strip()] = value.strip()
    return attributes


def display_cart(dto: CartDTO) -> None:
    """Shared formatting for displaying the cart."""
    if not dto.lines:
        click.echo("Cart is empty.")
        return

    click.echo(f"  {'Product':<30} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*57}")
    for line in dto.lines:
        name = f"{line.name} *" if line.customized else line.name
        click.echo(
            f"  {name:<30} {line.quantity:>5} {line.unit_price:>10} {line.line_total:>10}"
        )
    click.echo(f"  {'-'*57}")
    click.echo(f"  {'Items':<30} {dto.item_count:>5}")
    click.echo(f"  {'Subtotal':<30} {dto.subtotal:>27}")


@click.command("add")
@click.option("--product", "product_id", required=True, type=int, help="Product ID.")
@click.option("--qty", "quantity", default=1, show_default=True, type=int, help="Quantity to add.")
@click.option("--variation", "variation_id", default=None, type=int, help="Variation ID.")
@click.option("--attr", "attributes", multiple=True, help="Selected option as 'Name=Value'.")
@click.option("--customized", is_flag=True, default=False, help="Add the customized version.")
def cart_add(
    product_id: int,
    quantity: int,
    variation_id: int | None,
    attributes: tuple[str, ...],
    customized: bool,
) -> None:
    """Add a product to the cart."""
    handler = AddToCartHandler(
        ledger_repo=ledger_repository(),
        product_repo=product_repository(),
        notifier=notifier(),
    )

    try:
        added = handler.handle(
            product_id,
            quantity=quantity,
            variation_id=variation_id,
            selected_attributes=_parse_attributes(attributes),
            customized=customized,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not added:
        raise SystemExit(1)


@click.command("remove")
@click.option("--product", "product_id", required=True, type=int, help="Product ID.")
@click.option("--variation", "variation_id", default=None, type=int, help="Variation ID.")
@click.option(
    "--customized/--plain",
    default=None,
    help="Only remove the customized or the plain line (default: both).",
)
def cart_remove(product_id: int, variation_id: int | None, customized: bool | None) -> None:
    """Remove a product from the cart."""
    handler = RemoveFromCartHandler(ledger_repo=ledger_repository(), notifier=notifier())
    handler.handle(product_id, variation_id, customized)


@click.command("update")
@click.option("--product", "product_id", required=True, type=int, help="Product ID.")
@click.option("--qty", "quantity", required=True, type=int, help="New quantity (0 removes).")
@click.option("--variation", "variation_id", default=None, type=int, help="Variation ID.")
@click.option("--customized/--plain", default=None, help="Which line to update (default: both).")
def cart_update(
    product_id: int, quantity: int, variation_id: int | None, customized: bool | None
) -> None:
    """Change the quantity of a cart line."""
    handler = UpdateCartQuantityHandler(ledger_repo=ledger_repository(), notifier=notifier())

    try:
        updated = handler.handle(product_id, quantity, variation_id, customized)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not updated:
        raise click.ClickException(f"Product ID {product_id} is not in the cart")


@click.command("clear")
def cart_clear() -> None:
    """Empty the cart."""
    ClearCartHandler(ledger_repo=ledger_repository()).handle()
    click.echo("Cart cleared.")


@click.command("show")
def cart_show() -> None:
    """Show the cart."""
    display_cart(ShowCartHandler(ledger_repo=ledger_repository()).handle())
