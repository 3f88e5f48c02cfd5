"""Variant tools: bulk create/update and bulk delete."""

from typing import Literal

from pydantic import Field

from ..exceptions import ShopifyMCPError
from .base import BaseTool, Identifier, ToolInput

VARIANT_FIELDS = """
id
title
price
compareAtPrice
sku
selectedOptions {
  name
  value
}
"""

VARIANTS_BULK_CREATE_MUTATION = f"""
mutation ProductVariantsBulkCreate(
  $productId: ID!
  $variants: [ProductVariantsBulkInput!]!
  $strategy: ProductVariantsBulkCreateStrategy
) {{
  productVariantsBulkCreate(
    productId: $productId
    variants: $variants
    strategy: $strategy
  ) {{
    productVariants {{
      {VARIANT_FIELDS}
    }}
    userErrors {{
      field
      message
    }}
  }}
}}
"""

VARIANTS_BULK_UPDATE_MUTATION = f"""
mutation ProductVariantsBulkUpdate(
  $productId: ID!
  $variants: [ProductVariantsBulkInput!]!
) {{
  productVariantsBulkUpdate(productId: $productId, variants: $variants) {{
    productVariants {{
      {VARIANT_FIELDS}
    }}
    userErrors {{
      field
      message
    }}
  }}
}}
"""

VARIANTS_BULK_DELETE_MUTATION = """
mutation ProductVariantsBulkDelete($productId: ID!, $variantsIds: [ID!]!) {
  productVariantsBulkDelete(productId: $productId, variantsIds: $variantsIds) {
    product {
      id
      title
      variants(first: 20) {
        edges {
          node {
            id
            title
            price
            sku
          }
        }
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""


class VariantOptionValue(ToolInput):
    option_name: str = Field(..., description="Option name, e.g. 'Size' or 'Color'")
    name: str = Field(..., description="Option value, e.g. '8x10' or 'Black'")


class VariantInput(ToolInput):
    id: Identifier | None = Field(
        None, description="Variant id or GID for updates. Omit to create a new variant."
    )
    price: str | None = Field(None, description="Price as a string, e.g. '49.00'")
    compare_at_price: str | None = None
    sku: str | None = Field(None, description="SKU (stored on the inventory item)")
    barcode: str | None = None
    option_values: list[VariantOptionValue] | None = None


class ManageProductVariantsInput(ToolInput):
    product_id: Identifier = Field(..., description="Product id or GID")
    variants: list[VariantInput] = Field(
        ..., min_length=1, description="Variants to create (no id) or update (with id)"
    )
    strategy: Literal[
        "DEFAULT", "REMOVE_STANDALONE_VARIANT", "PRESERVE_STANDALONE_VARIANT"
    ] | None = Field(
        None,
        description=(
            "How to treat the standalone 'Default Title' variant when creating. "
            "DEFAULT removes it automatically."
        ),
    )


class DeleteProductVariantsInput(ToolInput):
    product_id: Identifier = Field(..., description="Product id or GID")
    variant_ids: list[Identifier] = Field(
        ..., min_length=1, description="Variant ids or GIDs to delete"
    )


def to_bulk_input(variant: VariantInput) -> dict:
    """Map a variant argument onto ProductVariantsBulkInput."""
    bulk = variant.model_dump(
        by_alias=True, exclude_none=True, exclude={"id", "sku"}
    )
    if variant.id:
        bulk["id"] = BaseTool.to_gid(variant.id, "ProductVariant")
    if variant.sku is not None:
        bulk["inventoryItem"] = {"sku": variant.sku}
    return bulk


def format_variant(variant: dict) -> dict:
    formatted = {k: v for k, v in variant.items() if k != "selectedOptions"}
    formatted["options"] = variant.get("selectedOptions") or []
    return formatted


class ManageProductVariantsTool(BaseTool):
    name = "manage-product-variants"
    description = (
        "Create and/or update product variants in bulk. Variants without an id "
        "are created, variants with an id are updated."
    )
    input_model = ManageProductVariantsInput

    async def run(self, args: ManageProductVariantsInput) -> dict:
        product_id = self.to_gid(args.product_id, "Product")
        to_create = [to_bulk_input(v) for v in args.variants if not v.id]
        to_update = [to_bulk_input(v) for v in args.variants if v.id]

        result = {"created": [], "updated": []}

        if to_create:
            variables = {"productId": product_id, "variants": to_create}
            if args.strategy:
                variables["strategy"] = args.strategy
            data = await self.client.mutate(VARIANTS_BULK_CREATE_MUTATION, variables)
            payload = self.payload(data, "productVariantsBulkCreate")
            self.raise_for_user_errors(payload, "Failed to create variants")
            result["created"] = [
                format_variant(v) for v in payload.get("productVariants") or []
            ]

        if to_update:
            try:
                data = await self.client.mutate(
                    VARIANTS_BULK_UPDATE_MUTATION,
                    {"productId": product_id, "variants": to_update},
                )
                payload = self.payload(data, "productVariantsBulkUpdate")
                self.raise_for_user_errors(payload, "Failed to update variants")
            except ShopifyMCPError as e:
                # creates are already applied and are not rolled back
                if result["created"]:
                    e.context["created"] = result["created"]
                    e.suggestions.append(
                        f"{len(result['created'])} variant(s) were created before the "
                        "update failed; retry only the variants that have an id"
                    )
                raise
            result["updated"] = [
                format_variant(v) for v in payload.get("productVariants") or []
            ]

        return result


class DeleteProductVariantsTool(BaseTool):
    name = "delete-product-variants"
    description = "Delete one or more variants from a product"
    input_model = DeleteProductVariantsInput

    async def run(self, args: DeleteProductVariantsInput) -> dict:
        variables = {
            "productId": self.to_gid(args.product_id, "Product"),
            "variantsIds": [self.to_gid(v, "ProductVariant") for v in args.variant_ids],
        }
        data = await self.client.mutate(VARIANTS_BULK_DELETE_MUTATION, variables)
        payload = self.payload(data, "productVariantsBulkDelete")
        self.raise_for_user_errors(payload, "Failed to delete variants")

        product = payload.get("product") or {}
        return {
            "product": {
                "id": product.get("id"),
                "title": product.get("title"),
                "remainingVariants": self.flatten_edges(product.get("variants")),
            }
        }
