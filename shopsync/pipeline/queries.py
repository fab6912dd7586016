"""Shopify Admin GraphQL list queries.

Each query takes ``$first`` (page size, fixed by the caller) and ``$cursor``
and returns ``edges { node }`` plus ``pageInfo``.
"""

CUSTOMERS_QUERY = """
query($first: Int!, $cursor: String) {
  customers(first: $first, after: $cursor) {
    edges {
      node {
        id
        firstName
        lastName
        email
        phone
        updatedAt
        defaultAddress {
          city
          country
          province
        }
      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""

ORDERS_QUERY = """
query($first: Int!, $cursor: String) {
  orders(first: $first, sortKey: CREATED_AT, reverse: true, after: $cursor) {
    edges {
      node {
        id
        name
        createdAt
        totalPriceSet { shopMoney { amount } }
        customer { id email }
        lineItems(first: 20) {
          edges {
            node {
              title
              quantity
              originalTotalSet { shopMoney { amount } }
            }
          }
        }
      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""

PRODUCTS_QUERY = """
query($first: Int!, $cursor: String) {
  products(first: $first, after: $cursor) {
    edges {
      node {
        id
        title
        description
        vendor
        productType
        status
        tags
        images(first: 5) {
          nodes {
            url
          }
        }
        variants(first: 1) {
          nodes {
            price
            compareAtPrice
            inventoryQuantity
          }
        }
        variantsCount {
          count
        }
      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""
