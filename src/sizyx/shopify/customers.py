"""Find-or-create resolution of Shopify customers by email."""

import logging
from typing import Optional

from sizyx.core.exceptions import (
    AccountNotFoundError,
    UpstreamCreateError,
    UpstreamLookupError,
)
from sizyx.models.upload import Account
from sizyx.shopify.client import ShopifyAPIError, ShopifyClient, format_user_errors

logger = logging.getLogger(__name__)

FIND_CUSTOMER_QUERY = """
query findCustomer($query: String!, $first: Int!) {
  customers(first: $first, query: $query) {
    edges { node { id email firstName lastName } }
  }
}
"""

CREATE_CUSTOMER_MUTATION = """
mutation createCustomer($input: CustomerInput!) {
  customerCreate(input: $input) {
    customer { id email }
    userErrors { field message }
  }
}
"""


# Search is fuzzy, so a near match can rank above the exact one
SEARCH_LIMIT = 10


def search_term(email: str) -> str:
    """Build a quoted email search term, escaping quotes and backslashes."""
    escaped = email.replace("\\", "\\\\").replace('"', '\\"')
    return f'email:"{escaped}"'


def split_name(name: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """Split a display name into first and last name on the first space."""
    if not name or not name.strip():
        return None, None
    first, _, last = name.strip().partition(" ")
    return first, (last.strip() or None)


class IdentityResolver:
    """Resolves an email to a Shopify customer id, creating one if needed."""

    def __init__(self, client: ShopifyClient, create_missing: bool = True):
        self.client = client
        self.create_missing = create_missing

    async def find(self, email: str) -> Optional[Account]:
        """Look up the customer whose email exactly matches ``email``."""
        try:
            data = await self.client.graphql(
                FIND_CUSTOMER_QUERY, {"query": search_term(email), "first": SEARCH_LIMIT}
            )
            edges = data["customers"]["edges"]
        except ShopifyAPIError as e:
            raise UpstreamLookupError(str(e)) from e
        except (KeyError, TypeError) as e:
            raise UpstreamLookupError("Malformed customer lookup response") from e
        if not isinstance(edges, list):
            raise UpstreamLookupError("Malformed customer lookup response")

        # Shopify's search is fuzzy; only an exact email counts as a match
        for edge in edges:
            node = edge.get("node") or {}
            if (node.get("email") or "").lower() == email.lower():
                name = " ".join(
                    part for part in (node.get("firstName"), node.get("lastName")) if part
                )
                return Account(id=node["id"], email=node["email"], name=name or None)
        return None

    async def create(self, email: str, name: Optional[str] = None) -> Account:
        first_name, last_name = split_name(name)
        customer_input = {"email": email}
        if first_name:
            customer_input["firstName"] = first_name
        if last_name:
            customer_input["lastName"] = last_name

        try:
            data = await self.client.graphql(CREATE_CUSTOMER_MUTATION, {"input": customer_input})
            payload = data["customerCreate"]
        except ShopifyAPIError as e:
            raise UpstreamCreateError(str(e)) from e
        except (KeyError, TypeError) as e:
            raise UpstreamCreateError("Malformed customer create response") from e

        if payload.get("userErrors"):
            raise UpstreamCreateError(format_user_errors(payload["userErrors"]))
        customer = payload.get("customer")
        if not customer or not customer.get("id"):
            raise UpstreamCreateError("Customer create returned no customer")

        logger.info("Created customer", extra={"customer_id": customer["id"]})
        return Account(id=customer["id"], email=email, name=name)

    async def resolve(self, email: str, name: Optional[str] = None) -> str:
        """Return the id of the customer with ``email``.

        An existing customer is returned unchanged, the name is ignored. A
        missing one is created, or rejected with ``AccountNotFoundError``
        when creation is disabled.
        """
        account = await self.find(email)
        if account is not None:
            logger.debug("Found existing customer", extra={"customer_id": account.id})
            return account.id

        if not self.create_missing:
            raise AccountNotFoundError(f"No customer with email {email}")

        account = await self.create(email, name)
        return account.id
