"""Canonical GraphQL query/mutation strings for Shopify Admin API."""

CONFIG_KEY = "config"
ONBOARDING_KEY = "onboarding"

# Dashboard loader
QUERY_SHOP_SETTINGS = """
query ShopSettings {
  shop {
    id
    config: metafield(namespace: "stickyadd", key: "config") { value }
    onboarding: metafield(namespace: "stickyadd", key: "onboarding") { value }
  }
}
"""

QUERY_THEME_AND_FIRST_PRODUCT = """
query ThemeAndFirstProduct {
  themes(first: 1, roles: MAIN) {
    edges {
      node {
        id
        files(filenames: ["config/settings_data.json"]) {
          edges {
            node {
              body {
                ... on OnlineStoreThemeFileBodyText {
                  content
                }
              }
            }
          }
        }
      }
    }
  }
  products(first: 1, sortKey: CREATED_AT, reverse: false) {
    edges {
      node {
        title
        handle
        featuredImage {
          url
        }
        variants(first: 1) {
          edges {
            node {
              price
              title
            }
          }
        }
      }
    }
  }
}
"""

# Customizer loader / onboarding merge
QUERY_CONFIG_METAFIELD = """
query ConfigMetafield {
  shop {
    metafield(namespace: "stickyadd", key: "config") { value }
  }
}
"""

QUERY_SHOP_ID = """
query ShopId {
  shop { id }
}
"""

MUTATION_METAFIELDS_SET = """
mutation MetafieldsSet($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields { id key namespace }
    userErrors { field message }
  }
}
"""
