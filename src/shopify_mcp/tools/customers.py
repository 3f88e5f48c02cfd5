"""Customer tools: search customers, list their orders, update a customer."""

from typing import Literal

from pydantic import EmailStr, Field

from ..consts import MAX_PAGE_SIZE
from ..exceptions import ToolExecutionError
from .base import BaseTool, Identifier, ToolInput
from .orders import format_order

ADDRESS_FIELDS = """
id
address1
address2
city
province
provinceCode
zip
country
countryCodeV2
phone
"""

GET_CUSTOMERS_QUERY = f"""
query GetCustomers($first: Int!, $query: String) {{
  customers(first: $first, query: $query) {{
    edges {{
      node {{
        id
        firstName
        lastName
        email
        phone
        createdAt
        updatedAt
        tags
        note
        numberOfOrders
        amountSpent {{
          amount
          currencyCode
        }}
        defaultAddress {{
          {ADDRESS_FIELDS}
        }}
        addresses {{
          {ADDRESS_FIELDS}
        }}
      }}
    }}
    pageInfo {{
      hasNextPage
      hasPreviousPage
      startCursor
      endCursor
    }}
  }}
}}
"""

GET_CUSTOMER_ORDERS_QUERY = """
query GetCustomerOrders($id: ID!, $first: Int!, $query: String) {
  customer(id: $id) {
    id
    firstName
    lastName
    email
    orders(first: $first, query: $query, sortKey: CREATED_AT, reverse: true) {
      edges {
        node {
          id
          name
          createdAt
          updatedAt
          cancelledAt
          cancelReason
          displayFinancialStatus
          displayFulfillmentStatus
          totalPriceSet {
            shopMoney {
              amount
              currencyCode
            }
          }
          subtotalPriceSet {
            shopMoney {
              amount
              currencyCode
            }
          }
          lineItems(first: 10) {
            edges {
              node {
                id
                title
                quantity
                originalTotalSet {
                  shopMoney {
                    amount
                    currencyCode
                  }
                }
                variant {
                  id
                  title
                  sku
                }
                product {
                  id
                  title
                  handle
                }
              }
            }
          }
          tags
        }
      }
      pageInfo {
        hasNextPage
        hasPreviousPage
        startCursor
        endCursor
      }
    }
  }
}
"""

CUSTOMER_UPDATE_MUTATION = f"""
mutation CustomerUpdate($input: CustomerInput!) {{
  customerUpdate(input: $input) {{
    customer {{
      id
      firstName
      lastName
      email
      phone
      tags
      note
      updatedAt
      defaultAddress {{
        {ADDRESS_FIELDS}
      }}
    }}
    userErrors {{
      field
      message
    }}
  }}
}}
"""


class GetCustomersInput(ToolInput):
    search_query: str | None = Field(
        None, description="Search filter, e.g. 'email:jane@example.com' or 'tag:vip'"
    )
    limit: int = Field(
        10, ge=1, le=MAX_PAGE_SIZE, description="Number of customers to return"
    )


class GetCustomerOrdersInput(ToolInput):
    customer_id: Identifier = Field(..., description="Customer id or GID")
    first: int = Field(
        50, ge=1, le=MAX_PAGE_SIZE, description="Number of orders to return"
    )
    status: Literal["OPEN", "CLOSED", "CANCELLED"] | None = None


class AddressInput(ToolInput):
    address1: str | None = None
    address2: str | None = None
    city: str | None = None
    province: str | None = None
    zip: str | None = None
    country: str | None = None
    phone: str | None = None


class UpdateCustomerInput(ToolInput):
    customer_id: Identifier = Field(..., description="Customer id or GID")
    first_name: str | None = None
    last_name: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    tags: list[str] | None = None
    note: str | None = None
    address: AddressInput | None = None


class GetCustomersTool(BaseTool):
    name = "get-customers"
    description = "Search customers by name, email, tag or any Shopify customer query"
    input_model = GetCustomersInput

    async def run(self, args: GetCustomersInput) -> dict:
        variables = {"first": args.limit}
        if args.search_query:
            variables["query"] = args.search_query

        data = await self.client.query(GET_CUSTOMERS_QUERY, variables)
        connection = self.payload(data, "customers")
        customers = self.flatten_edges(connection)
        return {
            "customers": customers,
            "pageInfo": self.page_info(connection),
            "totalCount": len(customers),
        }


class GetCustomerOrdersTool(BaseTool):
    name = "get-customer-orders"
    description = "Get the orders placed by a specific customer"
    input_model = GetCustomerOrdersInput

    async def run(self, args: GetCustomerOrdersInput) -> dict:
        gid = self.to_gid(args.customer_id, "Customer")
        variables = {"id": gid, "first": args.first}
        if args.status:
            variables["query"] = f"status:{args.status}"

        data = await self.client.query(GET_CUSTOMER_ORDERS_QUERY, variables)
        customer = data.get("customer")
        if not customer:
            raise ToolExecutionError(
                f"Customer with ID {args.customer_id} not found",
                suggestions=["Use get-customers to look up valid customer ids"],
                context={"graphqlId": gid},
            )

        connection = customer.get("orders")
        orders = [format_order(node) for node in self.flatten_edges(connection)]
        return {
            "customer": {
                "id": customer.get("id"),
                "firstName": customer.get("firstName"),
                "lastName": customer.get("lastName"),
                "email": customer.get("email"),
            },
            "orders": orders,
            "pageInfo": self.page_info(connection),
            "totalCount": len(orders),
        }


class UpdateCustomerTool(BaseTool):
    name = "update-customer"
    description = (
        "Update a customer's name, email, phone, tags, note or address. Only the "
        "fields provided are changed."
    )
    input_model = UpdateCustomerInput

    async def run(self, args: UpdateCustomerInput) -> dict:
        customer_input = args.model_dump(
            by_alias=True, exclude_none=True, exclude={"customer_id", "address"}
        )
        customer_input["id"] = self.to_gid(args.customer_id, "Customer")
        if args.address is not None:
            customer_input["addresses"] = [args.address.model_dump(exclude_none=True)]

        data = await self.client.mutate(
            CUSTOMER_UPDATE_MUTATION, {"input": customer_input}
        )
        payload = self.payload(data, "customerUpdate")
        self.raise_for_user_errors(payload, "Failed to update customer")

        return {
            "customer": payload.get("customer"),
            "success": True,
            "message": "Customer updated successfully",
        }
