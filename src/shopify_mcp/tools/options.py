"""Product option tool: create, update or delete options on a product."""

from typing import Literal

from pydantic import Field, model_validator

from .base import BaseTool, Identifier, ToolInput

PRODUCT_OPTIONS_FRAGMENT = """
fragment ProductOptionsFields on Product {
  id
  title
  options {
    id
    name
    position
    optionValues {
      id
      name
      hasVariants
    }
  }
  variants(first: 20) {
    edges {
      node {
        id
        title
        price
        selectedOptions {
          name
          value
        }
      }
    }
  }
}
"""

OPTIONS_CREATE_MUTATION = f"""
mutation ProductOptionsCreate($productId: ID!, $options: [OptionCreateInput!]!) {{
  productOptionsCreate(
    productId: $productId
    options: $options
    variantStrategy: LEAVE_AS_IS
  ) {{
    product {{
      ...ProductOptionsFields
    }}
    userErrors {{
      field
      message
    }}
  }}
}}
{PRODUCT_OPTIONS_FRAGMENT}
"""

OPTION_UPDATE_MUTATION = f"""
mutation ProductOptionUpdate(
  $productId: ID!
  $option: OptionUpdateInput!
  $optionValuesToAdd: [OptionValueCreateInput!]
  $optionValuesToDelete: [ID!]
) {{
  productOptionUpdate(
    productId: $productId
    option: $option
    optionValuesToAdd: $optionValuesToAdd
    optionValuesToDelete: $optionValuesToDelete
  ) {{
    product {{
      ...ProductOptionsFields
    }}
    userErrors {{
      field
      message
    }}
  }}
}}
{PRODUCT_OPTIONS_FRAGMENT}
"""

OPTIONS_DELETE_MUTATION = f"""
mutation ProductOptionsDelete($productId: ID!, $options: [ID!]!) {{
  productOptionsDelete(productId: $productId, options: $options) {{
    product {{
      ...ProductOptionsFields
    }}
    userErrors {{
      field
      message
    }}
  }}
}}
{PRODUCT_OPTIONS_FRAGMENT}
"""


class OptionCreate(ToolInput):
    name: str = Field(..., description="Option name, e.g. 'Size' or 'Color'")
    position: int | None = Field(None, ge=1, description="1-based position")
    values: list[str] | None = Field(
        None, description="Option values, e.g. ['Small', 'Medium', 'Large']"
    )


class ManageProductOptionsInput(ToolInput):
    """Arguments for each action; fields unused by the chosen action are ignored."""

    product_id: Identifier = Field(..., description="Product id or GID")
    action: Literal["create", "update", "delete"]
    options: list[OptionCreate] | None = Field(
        None, description="Options to create (action=create)"
    )
    option_id: Identifier | None = Field(
        None, description="Option id or GID to update (action=update)"
    )
    name: str | None = Field(None, description="New option name (action=update)")
    position: int | None = Field(None, ge=1, description="New position (action=update)")
    values_to_add: list[str] | None = Field(
        None, description="Values to add (action=update)"
    )
    values_to_delete: list[Identifier] | None = Field(
        None, description="Option value ids or GIDs to delete (action=update)"
    )
    option_ids: list[Identifier] | None = Field(
        None, description="Option ids or GIDs to delete (action=delete)"
    )

    @model_validator(mode="after")
    def check_action_fields(self) -> "ManageProductOptionsInput":
        if self.action == "create" and not self.options:
            raise ValueError("options is required for action=create")
        if self.action == "update" and not self.option_id:
            raise ValueError("optionId is required for action=update")
        if self.action == "delete" and not self.option_ids:
            raise ValueError("optionIds is required for action=delete")
        return self


def format_product(product: dict) -> dict:
    return {
        "id": product.get("id"),
        "title": product.get("title"),
        "options": [
            {
                "id": option.get("id"),
                "name": option.get("name"),
                "position": option.get("position"),
                "values": option.get("optionValues") or [],
            }
            for option in product.get("options") or []
        ],
        "variants": [
            {
                "id": variant.get("id"),
                "title": variant.get("title"),
                "price": variant.get("price"),
                "options": variant.get("selectedOptions") or [],
            }
            for variant in BaseTool.flatten_edges(product.get("variants"))
        ],
    }


class ManageProductOptionsTool(BaseTool):
    name = "manage-product-options"
    description = (
        "Create, update or delete product options (e.g. Size, Color). Use "
        "action=create with options, action=update with optionId, or "
        "action=delete with optionIds."
    )
    input_model = ManageProductOptionsInput

    async def run(self, args: ManageProductOptionsInput) -> dict:
        product_id = self.to_gid(args.product_id, "Product")

        if args.action == "create":
            document, key = OPTIONS_CREATE_MUTATION, "productOptionsCreate"
            variables = {
                "productId": product_id,
                "options": [_option_create_input(o) for o in args.options],
            }
        elif args.action == "update":
            document, key = OPTION_UPDATE_MUTATION, "productOptionUpdate"
            option = {"id": self.to_gid(args.option_id, "ProductOption")}
            if args.name is not None:
                option["name"] = args.name
            if args.position is not None:
                option["position"] = args.position
            variables = {"productId": product_id, "option": option}
            if args.values_to_add:
                variables["optionValuesToAdd"] = [
                    {"name": value} for value in args.values_to_add
                ]
            if args.values_to_delete:
                variables["optionValuesToDelete"] = [
                    self.to_gid(v, "ProductOptionValue") for v in args.values_to_delete
                ]
        else:
            document, key = OPTIONS_DELETE_MUTATION, "productOptionsDelete"
            variables = {
                "productId": product_id,
                "options": [self.to_gid(o, "ProductOption") for o in args.option_ids],
            }

        data = await self.client.mutate(document, variables)
        payload = self.payload(data, key)
        self.raise_for_user_errors(payload, f"Failed to {args.action} product options")
        return {"product": format_product(payload.get("product") or {})}


def _option_create_input(option: OptionCreate) -> dict:
    created = {"name": option.name}
    if option.position is not None:
        created["position"] = option.position
    if option.values:
        created["values"] = [{"name": value} for value in option.values]
    return created
