"""GraphQL document inspection using graphql-core"""

import logging
from functools import lru_cache
from typing import NamedTuple

from graphql import OperationDefinitionNode, parse
from graphql.error import GraphQLSyntaxError

logger = logging.getLogger("shopify-mcp.graphql_parser")


class OperationInfo(NamedTuple):
    """Type and name of the first operation in a document."""

    operation: str  # "query", "mutation" or "subscription"
    name: str | None


@lru_cache(maxsize=128)
def describe_operation(document: str) -> OperationInfo:
    """Identify the operation a document executes.

    Tool documents are module constants, so results are cached by text.

    Examples:
        >>> describe_operation('query GetShop { shop { id } }')
        OperationInfo(operation='query', name='GetShop')

        >>> describe_operation('{ shop { id } }')
        OperationInfo(operation='query', name=None)
    """
    try:
        ast = parse(document)
    except GraphQLSyntaxError as e:
        logger.debug(f"Could not parse GraphQL document: {e.message}")
        return OperationInfo("unknown", None)

    for definition in ast.definitions:
        if isinstance(definition, OperationDefinitionNode):
            name = definition.name.value if definition.name else None
            return OperationInfo(definition.operation.value, name)

    return OperationInfo("unknown", None)
