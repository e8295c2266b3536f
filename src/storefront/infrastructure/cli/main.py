import click

from storefront.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_remove,
    cart_show,
    cart_update,
)
from storefront.infrastructure.cli.checkout_commands import (
    checkout_address,
    checkout_payload,
    checkout_summary,
)
from storefront.infrastructure.cli.coupon_commands import (
    coupon_apply,
    coupon_list,
    coupon_remove,
)
from storefront.infrastructure.logger import setup_logging


@click.group()
def cli() -> None:
    """Storefront: cart and checkout client"""
    setup_logging()


@cli.group()
def cart() -> None:
    """Manage the local cart."""


@cli.group()
def coupon() -> None:
    """Apply and remove coupons."""


@cli.group()
def checkout() -> None:
    """Price the cart against the store."""


# Register subcommands
cart.add_command(cart_add)
cart.add_command(cart_clear)
cart.add_command(cart_remove)
cart.add_command(cart_show)
cart.add_command(cart_update)
coupon.add_command(coupon_apply)
coupon.add_command(coupon_list)
coupon.add_command(coupon_remove)
checkout.add_command(checkout_address)
checkout.add_command(checkout_payload)
checkout.add_command(checkout_summary)
