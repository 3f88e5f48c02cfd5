"""Product tools: list, fetch, create, update and delete products."""

from typing import Literal

from pydantic import Field

from ..consts import MAX_PAGE_SIZE
from ..exceptions import ToolExecutionError
from .base import BaseTool, Identifier, ToolInput
from .variants import format_variant

ProductStatus = Literal["ACTIVE", "DRAFT", "ARCHIVED"]

GET_PRODUCTS_QUERY = """
query GetProducts(
  $first: Int
  $after: String
  $query: String
  $sortKey: ProductSortKeys
  $reverse: Boolean
) {
  products(
    first: $first
    after: $after
    query: $query
    sortKey: $sortKey
    reverse: $reverse
  ) {
    edges {
      node {
        id
        title
        handle
        descriptionHtml
        vendor
        productType
        tags
        status
        createdAt
        updatedAt
        variants(first: 10) {
          edges {
            node {
              id
              title
              price
              compareAtPrice
              sku
              inventoryQuantity
              taxable
            }
          }
        }
        media(first: 5) {
          edges {
            node {
              id
              alt
              mediaContentType
              preview {
                image {
                  url
                  width
                  height
                }
              }
            }
          }
        }
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

GET_PRODUCT_BY_ID_QUERY = """
query GetProductById($id: ID!) {
  product(id: $id) {
    id
    title
    handle
    descriptionHtml
    vendor
    productType
    tags
    status
    createdAt
    updatedAt
    totalInventory
    onlineStoreUrl
    seo {
      title
      description
    }
    options {
      id
      name
      position
      optionValues {
        id
        name
      }
    }
    variants(first: 50) {
      edges {
        node {
          id
          title
          price
          compareAtPrice
          sku
          barcode
          inventoryQuantity
          taxable
          selectedOptions {
            name
            value
          }
        }
      }
    }
    media(first: 20) {
      edges {
        node {
          id
          alt
          mediaContentType
          preview {
            image {
              url
              width
              height
            }
          }
        }
      }
    }
  }
}
"""

PRODUCT_CREATE_MUTATION = """
mutation ProductCreate($product: ProductCreateInput!) {
  productCreate(product: $product) {
    product {
      id
      title
      handle
      descriptionHtml
      vendor
      productType
      status
      tags
      seo {
        title
        description
      }
      options {
        id
        name
        optionValues {
          id
          name
        }
      }
      metafields(first: 10) {
        edges {
          node {
            id
            namespace
            key
            value
            type
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

PRODUCT_UPDATE_MUTATION = """
mutation ProductUpdate($product: ProductUpdateInput!) {
  productUpdate(product: $product) {
    product {
      id
      title
      handle
      descriptionHtml
      vendor
      productType
      status
      tags
      seo {
        title
        description
      }
      variants(first: 20) {
        edges {
          node {
            id
            title
            price
            sku
            selectedOptions {
              name
              value
            }
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

PRODUCT_DELETE_MUTATION = """
mutation ProductDelete($input: ProductDeleteInput!) {
  productDelete(input: $input) {
    deletedProductId
    userErrors {
      field
      message
    }
  }
}
"""


class SeoInput(ToolInput):
    title: str | None = None
    description: str | None = None


class MetafieldInput(ToolInput):
    namespace: str
    key: str
    value: str
    type: str = Field(
        ...,
        description="Metafield type, e.g. 'single_line_text_field', 'json', 'number_integer'",
    )


class MetafieldUpdateInput(ToolInput):
    id: str | None = None
    namespace: str | None = None
    key: str | None = None
    value: str
    type: str | None = None


class OptionValueInput(ToolInput):
    name: str


class ProductOptionInput(ToolInput):
    name: str = Field(..., description="Option name, e.g. 'Size' or 'Color'")
    values: list[OptionValueInput] | None = Field(None, description="Option values")


class GetProductsInput(ToolInput):
    limit: int = Field(
        10, ge=1, le=MAX_PAGE_SIZE, description="Number of products to return"
    )
    cursor: str | None = Field(None, description="Pagination cursor (endCursor)")
    query: str | None = Field(
        None, description="Search filter, e.g. 'title:shirt' or 'vendor:Acme'"
    )
    sort_key: Literal[
        "CREATED_AT", "UPDATED_AT", "TITLE", "VENDOR", "PRODUCT_TYPE", "ID"
    ] = "CREATED_AT"
    reverse: bool = False


class GetProductByIdInput(ToolInput):
    id: Identifier = Field(..., description="Product id or GID")


class CreateProductInput(ToolInput):
    title: str = Field(..., min_length=1)
    description_html: str | None = None
    handle: str | None = Field(
        None,
        description="URL slug, e.g. 'black-sunglasses'. Auto-generated from title if omitted.",
    )
    vendor: str | None = None
    product_type: str | None = None
    tags: list[str] | None = None
    status: ProductStatus = "DRAFT"
    seo: SeoInput | None = Field(None, description="SEO title and description")
    metafields: list[MetafieldInput] | None = None
    product_options: list[ProductOptionInput] | None = Field(
        None, max_length=3, description="Product options to create inline (max 3)"
    )
    collections_to_join: list[str] | None = Field(
        None, description="Collection GIDs to add the product to"
    )


class UpdateProductInput(ToolInput):
    id: Identifier = Field(..., description="Product id or GID")
    title: str | None = None
    description_html: str | None = None
    handle: str | None = Field(None, description="URL slug for the product")
    vendor: str | None = None
    product_type: str | None = None
    tags: list[str] | None = None
    status: ProductStatus | None = None
    seo: SeoInput | None = None
    metafields: list[MetafieldUpdateInput] | None = None
    collections_to_join: list[str] | None = Field(
        None, description="Collection GIDs to add the product to"
    )
    collections_to_leave: list[str] | None = Field(
        None, description="Collection GIDs to remove the product from"
    )
    redirect_new_handle: bool | None = Field(
        None, description="If true, the old handle redirects to the new one"
    )


class DeleteProductInput(ToolInput):
    id: Identifier = Field(..., description="Product id or GID")


def format_media(connection: dict | None) -> list[dict]:
    media = []
    for node in BaseTool.flatten_edges(connection):
        image = (node.get("preview") or {}).get("image") or {}
        media.append(
            {
                "id": node.get("id"),
                "alt": node.get("alt"),
                "mediaContentType": node.get("mediaContentType"),
                "url": image.get("url"),
                "width": image.get("width"),
                "height": image.get("height"),
            }
        )
    return media


class GetProductsTool(BaseTool):
    name = "get-products"
    description = (
        "Retrieve products from the Shopify store with optional filtering, "
        "sorting and cursor pagination"
    )
    input_model = GetProductsInput

    async def run(self, args: GetProductsInput) -> dict:
        variables = {
            "first": args.limit,
            "after": args.cursor,
            "query": args.query,
            "sortKey": args.sort_key,
            "reverse": args.reverse,
        }
        data = await self.client.query(
            GET_PRODUCTS_QUERY, {k: v for k, v in variables.items() if v is not None}
        )

        connection = self.payload(data, "products")
        products = [
            {
                **node,
                "variants": self.flatten_edges(node.get("variants")),
                "media": format_media(node.get("media")),
            }
            for node in self.flatten_edges(connection)
        ]

        return {
            "products": products,
            "pagination": {**self.page_info(connection), "count": len(products)},
            "metadata": {
                "query": args.query,
                "sortKey": args.sort_key,
                "reverse": args.reverse,
                "totalRetrieved": len(products),
            },
        }


class GetProductByIdTool(BaseTool):
    name = "get-product-by-id"
    description = "Get a single product with its variants, options and media"
    input_model = GetProductByIdInput

    async def run(self, args: GetProductByIdInput) -> dict:
        gid = self.to_gid(args.id, "Product")
        data = await self.client.query(GET_PRODUCT_BY_ID_QUERY, {"id": gid})

        product = data.get("product")
        if not product:
            raise ToolExecutionError(
                f"Product with ID {args.id} not found",
                suggestions=["Use get-products to look up valid product ids"],
                context={"graphqlId": gid},
            )

        return {
            "product": {
                **product,
                "variants": [
                    format_variant(v) for v in self.flatten_edges(product.get("variants"))
                ],
                "media": format_media(product.get("media")),
            },
            "metadata": {"requestedId": args.id, "graphqlId": gid},
        }


class CreateProductTool(BaseTool):
    name = "create-product"
    description = (
        "Create a new product. With productOptions, Shopify registers every option "
        "value but creates only one default variant; use manage-product-variants "
        "with strategy=REMOVE_STANDALONE_VARIANT afterwards to create real variants."
    )
    input_model = CreateProductInput

    async def run(self, args: CreateProductInput) -> dict:
        product_input = args.model_dump(by_alias=True, exclude_none=True)
        if args.collections_to_join:
            product_input["collectionsToJoin"] = [
                self.to_gid(c, "Collection") for c in args.collections_to_join
            ]

        data = await self.client.mutate(
            PRODUCT_CREATE_MUTATION, {"product": product_input}
        )
        payload = self.payload(data, "productCreate")
        self.raise_for_user_errors(payload, "Failed to create product")

        product = payload.get("product") or {}
        return {
            "product": {
                **product,
                "metafields": self.flatten_edges(product.get("metafields")),
            }
        }


class UpdateProductTool(BaseTool):
    name = "update-product"
    description = (
        "Update an existing product's fields (title, description, status, tags, "
        "SEO, metafields, collections)"
    )
    input_model = UpdateProductInput

    async def run(self, args: UpdateProductInput) -> dict:
        product_input = args.model_dump(by_alias=True, exclude_none=True)
        product_input["id"] = self.to_gid(args.id, "Product")
        for key in ("collectionsToJoin", "collectionsToLeave"):
            if key in product_input:
                product_input[key] = [
                    self.to_gid(c, "Collection") for c in product_input[key]
                ]

        data = await self.client.mutate(
            PRODUCT_UPDATE_MUTATION, {"product": product_input}
        )
        payload = self.payload(data, "productUpdate")
        self.raise_for_user_errors(payload, "Failed to update product")

        product = payload.get("product") or {}
        return {
            "product": {
                **product,
                "variants": [
                    format_variant(v) for v in self.flatten_edges(product.get("variants"))
                ],
            }
        }


class DeleteProductTool(BaseTool):
    name = "delete-product"
    description = "Permanently delete a product and all of its variants"
    input_model = DeleteProductInput

    async def run(self, args: DeleteProductInput) -> dict:
        gid = self.to_gid(args.id, "Product")
        data = await self.client.mutate(PRODUCT_DELETE_MUTATION, {"input": {"id": gid}})
        payload = self.payload(data, "productDelete")
        self.raise_for_user_errors(payload, "Failed to delete product")
        return {"deletedProductId": payload.get("deletedProductId")}
