"""Shipping address, its per-country readiness rules and its payload schema.

Two levels of checking exist:

* ``AddressRules.is_ready``: a cheap per-country predicate that decides
  whether a half-typed address is worth sending to the pricing backend.
* ``AddressPayload``: the strict schema every payload must satisfy before
  it leaves the client.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.domain.exceptions import ValidationError

DOMESTIC_COUNTRY = "IN"
EMAIL_PATTERN = r"^[\w\.\-\+]+@[\w\.\-]+\.\w+$"


@dataclass(frozen=True)
class Address:
    first_name: str = ""
    last_name: str = ""
    address_1: str = ""
    city: str = ""
    state: str = ""
    postcode: str = ""
    country: str = ""
    email: str = ""
    phone: str = ""
    address_2: str = ""


# --- Readiness rules ----------------------------------------------------------


class AddressRules(ABC):
    """Rule set deciding whether an address may be sent for pricing."""

    name: str

    @abstractmethod
    def is_ready(self, address: Address) -> bool:
        """True when the address is complete enough to price shipping."""


class DomesticRules(AddressRules):
    """India: a 6-digit PIN code (spaces allowed) and a city."""

    name = "domestic"

    def is_ready(self, address: Address) -> bool:
        postcode = address.postcode.strip()
        if re.search(r"[^0-9\s]", postcode):
            return False
        digits = re.sub(r"\s", "", postcode)
        return len(digits) == 6 and bool(address.city.strip())


class InternationalRules(AddressRules):
    name = "international"

    def is_ready(self, address: Address) -> bool:
        return (
            len(address.postcode.strip()) >= 3
            and bool(address.city.strip())
            and bool(address.country.strip())
        )


_DOMESTIC = DomesticRules()
_INTERNATIONAL = InternationalRules()


def rules_for(country: str) -> AddressRules:
    if country.strip().upper() == DOMESTIC_COUNTRY:
        return _DOMESTIC
    return _INTERNATIONAL


# --- Payload schema -----------------------------------------------------------

_MESSAGES = {
    "first_name": "First name is required",
    "last_name": "Last name is required",
    "address_1": "Address is required",
    "city": "City is required",
    "state": "State is required",
    "postcode": "Postcode must be at least 3 characters",
    "country": "Country is required",
    "email": "Invalid email address",
    "phone": "Phone is required",
}


class AddressPayload(BaseModel):
    """Wire shape of ``shipping_address`` / ``billing_address``."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    address_1: str = Field(min_length=1)
    address_2: str | None = None
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    postcode: str = Field(min_length=3)
    country: str = Field(min_length=1)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    phone: str = Field(min_length=1)

    @field_validator("email", "address_2", mode="before")
    @classmethod
    def _blank_is_absent(cls, value: str | None) -> str | None:
        if value is None or not str(value).strip():
            return None
        return value


def validate_address(address: Address) -> dict[str, str]:
    """Return the wire payload for *address*.

    Raises ValidationError naming the first violated rule.
    """
    try:
        payload = AddressPayload(
            first_name=address.first_name,
            last_name=address.last_name,
            address_1=address.address_1,
            address_2=address.address_2,
            city=address.city,
            state=address.state,
            postcode=address.postcode,
            country=address.country,
            email=address.email,
            phone=address.phone,
        )
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        field_name = str(first["loc"][0]) if first["loc"] else ""
        raise ValidationError(_MESSAGES.get(field_name, first["msg"])) from exc
    return payload.model_dump(exclude_none=True)
