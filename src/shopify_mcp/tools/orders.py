"""Order tools: list orders and fetch a single order."""

from typing import Literal

from pydantic import Field

from ..consts import MAX_PAGE_SIZE
from ..exceptions import ToolExecutionError
from .base import BaseTool, Identifier, ToolInput

GET_ORDERS_QUERY = """
query GetOrders($first: Int!, $query: String) {
  orders(first: $first, query: $query, sortKey: CREATED_AT, reverse: true) {
    edges {
      node {
        id
        name
        createdAt
        updatedAt
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
        totalShippingPriceSet {
          shopMoney {
            amount
            currencyCode
          }
        }
        totalTaxSet {
          shopMoney {
            amount
            currencyCode
          }
        }
        customer {
          id
          firstName
          lastName
          email
        }
        shippingAddress {
          address1
          address2
          city
          provinceCode
          zip
          countryCode
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
            }
          }
        }
        tags
        note
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
"""

GET_ORDER_BY_ID_QUERY = """
query GetOrderById($id: ID!) {
  order(id: $id) {
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
    totalShippingPriceSet {
      shopMoney {
        amount
        currencyCode
      }
    }
    totalTaxSet {
      shopMoney {
        amount
        currencyCode
      }
    }
    customer {
      id
      firstName
      lastName
      email
      phone
    }
    shippingAddress {
      address1
      address2
      city
      provinceCode
      zip
      country
      phone
    }
    billingAddress {
      address1
      address2
      city
      provinceCode
      zip
      country
      phone
    }
    lineItems(first: 20) {
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
            price
          }
          product {
            id
            title
            handle
          }
        }
      }
    }
    fulfillments {
      id
      status
      createdAt
      trackingInfo {
        number
        url
        company
      }
    }
    tags
    note
  }
}
"""

# Money fields renamed on output, e.g. totalPriceSet -> totalPrice
MONEY_FIELDS = {
    "totalPriceSet": "totalPrice",
    "subtotalPriceSet": "subtotalPrice",
    "totalShippingPriceSet": "totalShippingPrice",
    "totalTaxSet": "totalTax",
}


class GetOrdersInput(ToolInput):
    status: Literal["any", "open", "closed", "cancelled"] = "any"
    limit: int = Field(
        10, ge=1, le=MAX_PAGE_SIZE, description="Number of orders to return"
    )


class GetOrderByIdInput(ToolInput):
    order_id: Identifier = Field(..., description="Order id or GID")


def format_order(order: dict) -> dict:
    """Flatten line items and money sets, and rename display statuses."""
    formatted = {
        k: v
        for k, v in order.items()
        if k not in MONEY_FIELDS
        and k not in ("displayFinancialStatus", "displayFulfillmentStatus")
    }
    if "displayFinancialStatus" in order:
        formatted["financialStatus"] = order["displayFinancialStatus"]
    if "displayFulfillmentStatus" in order:
        formatted["fulfillmentStatus"] = order["displayFulfillmentStatus"]
    for source, target in MONEY_FIELDS.items():
        if source in order:
            formatted[target] = (order[source] or {}).get("shopMoney")
    if "lineItems" in order:
        formatted["lineItems"] = [
            {
                **{k: v for k, v in item.items() if k != "originalTotalSet"},
                "originalTotal": (item.get("originalTotalSet") or {}).get("shopMoney"),
            }
            for item in BaseTool.flatten_edges(order["lineItems"])
        ]
    return formatted


class GetOrdersTool(BaseTool):
    name = "get-orders"
    description = "Get recent orders, optionally filtered by status"
    input_model = GetOrdersInput

    async def run(self, args: GetOrdersInput) -> dict:
        variables = {"first": args.limit}
        if args.status != "any":
            variables["query"] = f"status:{args.status}"

        data = await self.client.query(GET_ORDERS_QUERY, variables)
        connection = self.payload(data, "orders")
        orders = [format_order(node) for node in self.flatten_edges(connection)]
        return {
            "orders": orders,
            "pageInfo": self.page_info(connection),
            "totalCount": len(orders),
        }


class GetOrderByIdTool(BaseTool):
    name = "get-order-by-id"
    description = (
        "Get a single order with line items, addresses, fulfillments and tracking"
    )
    input_model = GetOrderByIdInput

    async def run(self, args: GetOrderByIdInput) -> dict:
        gid = self.to_gid(args.order_id, "Order")
        data = await self.client.query(GET_ORDER_BY_ID_QUERY, {"id": gid})

        order = data.get("order")
        if not order:
            raise ToolExecutionError(
                f"Order with ID {args.order_id} not found",
                suggestions=["Use get-orders to look up valid order ids"],
                context={"graphqlId": gid},
            )
        return {"order": format_order(order)}
